#!/usr/bin/env python3
"""Tests for content placement and overflow continuation"""

import os
import sys
import unittest

PROJECT_ROOT = os.path.join(os.path.dirname(__file__), '..', '..')
sys.path.insert(0, os.path.join(PROJECT_ROOT, 'src'))
sys.path.insert(0, os.path.join(PROJECT_ROOT, 'tests'))

from reportflow.errors import LayoutOverflowError  # noqa: E402
from reportflow.generation import TABLE, ContentPlacer, Document, PageFlowController  # noqa: E402
from reportflow.geometry import PageStatus, Region  # noqa: E402
from stub_engine import StubEngine  # noqa: E402


def make_placer(**engine_kwargs):
    engine = StubEngine(**engine_kwargs)
    flow = PageFlowController(engine, Document())
    flow.begin_first_page()
    return engine, flow, ContentPlacer(engine, flow)


class TestContinuation(unittest.TestCase):
    def test_fits_first_time(self):
        engine, flow, placer = make_placer(bottom_y=600)
        tf = engine.add_textflow(None, 'text', {})
        attempts = placer.place(tf, Region(40, 755, 555, 100), True, 'Long Paragraph')
        self.assertEqual(attempts, 1)
        self.assertEqual(flow.document.total_pages, 1)
        self.assertEqual(flow.cursor_y, 600)

    def test_k_overflows_take_k_plus_one_pages(self):
        engine, flow, placer = make_placer(overflow_times=3, bottom_y=400)
        tf = engine.add_textflow(None, 'text', {})
        attempts = placer.place(
            tf, Region(40, 500, 555, 100), True, 'Long Paragraph', padding_bottom=20
        )
        self.assertEqual(attempts, 4)
        self.assertEqual(flow.document.total_pages, 4)
        statuses = [p.status for p in flow.document.pages]
        self.assertEqual(statuses, [PageStatus.SUSPENDED] * 3 + [PageStatus.ACTIVE])
        self.assertEqual(flow.cursor_y, 380)

    def test_continuation_region_spans_page_body(self):
        engine, flow, placer = make_placer(overflow_times=1)
        tf = engine.add_textflow(None, 'text', {})
        placer.place(tf, Region(40, 500, 555, 300), True, 'Long Paragraph', fit_options={'a': '1'})
        first, second = engine.fit_regions
        self.assertEqual(first, Region(40, 500, 555, 300))
        self.assertEqual(second, Region(40, 755, 555, 100))
        # textflow retries carry no fit options
        self.assertEqual(engine.fit_options, [{'a': '1'}, None])

    def test_table_retries_keep_options(self):
        engine, flow, placer = make_placer(overflow_times=1)
        table = engine.add_table_cell(None, 1, 1, 'x')
        placer.place(
            table, Region(40, 500, 555, 300), True, 'Table', kind=TABLE, fit_options={'a': '1'}
        )
        self.assertEqual(engine.fit_options, [{'a': '1'}, {'a': '1'}])
        self.assertEqual(len(engine.calls_named('fit_table')), 2)

    def test_same_handle_refitted(self):
        engine, flow, placer = make_placer(overflow_times=2)
        tf = engine.add_textflow(None, 'text', {})
        placer.place(tf, Region(40, 500, 555, 300), True, 'Long Paragraph')
        handles = {args[0] for args in engine.calls_named('fit_textflow')}
        self.assertEqual(handles, {tf})

    def test_cursor_left_alone_without_advance(self):
        engine, flow, placer = make_placer(bottom_y=200)
        tf = engine.add_textflow(None, 'text', {})
        placer.place(tf, Region(40, 815, 555, 795), False, 'PDF Headline', advance_cursor=False)
        self.assertEqual(flow.cursor_y, 755)


class TestNonContinuable(unittest.TestCase):
    def test_overflow_raises_with_label_and_text(self):
        engine, flow, placer = make_placer(always_overflow=True)
        tf = engine.add_textflow(None, 'much text', {})
        with self.assertRaises(LayoutOverflowError) as ctx:
            placer.place(tf, Region(40, 500, 555, 480), False, 'Paragraph', text='much text')
        err = ctx.exception
        self.assertEqual(err.label, 'Paragraph')
        self.assertEqual(err.text, 'much text')
        self.assertIn('The following Text for Textflow "Paragraph"', str(err))
        self.assertEqual(flow.document.total_pages, 1)

    def test_overflow_without_text(self):
        engine, flow, placer = make_placer(always_overflow=True)
        tf = engine.add_textflow(None, 'x', {})
        with self.assertRaises(LayoutOverflowError) as ctx:
            placer.place(tf, Region(40, 500, 555, 480), False, 'Heading for Table')
        self.assertEqual(
            str(ctx.exception),
            'Textflow "Heading for Table" is too big to fit into the defined fitbox.',
        )

    def test_table_overflow_message(self):
        engine, flow, placer = make_placer(always_overflow=True)
        table = engine.add_table_cell(None, 1, 1, 'x')
        with self.assertRaises(LayoutOverflowError) as ctx:
            placer.place(table, Region(40, 500, 555, 480), False, 'Example Table', kind=TABLE)
        self.assertEqual(
            str(ctx.exception), 'Table "Example Table" is too big to fit into the defined fitbox'
        )
        self.assertIsNone(ctx.exception.text)


if __name__ == '__main__':
    unittest.main()

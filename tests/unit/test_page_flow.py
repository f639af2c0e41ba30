#!/usr/bin/env python3
"""Tests for the page state machine and the vertical cursor"""

import os
import sys
import unittest

PROJECT_ROOT = os.path.join(os.path.dirname(__file__), '..', '..')
sys.path.insert(0, os.path.join(PROJECT_ROOT, 'src'))
sys.path.insert(0, os.path.join(PROJECT_ROOT, 'tests'))

from reportflow.errors import EngineProtocolError  # noqa: E402
from reportflow.generation import Document, PageFlowController  # noqa: E402
from reportflow.geometry import PageStatus  # noqa: E402
from reportflow.settings import LayoutSettings  # noqa: E402
from stub_engine import StubEngine  # noqa: E402


class TestPageFlow(unittest.TestCase):
    def setUp(self):
        self.engine = StubEngine()
        self.doc = Document()
        self.created = []
        self.flow = PageFlowController(self.engine, self.doc, self.created.append)

    def test_first_page(self):
        self.assertEqual(self.flow.begin_first_page(), 1)
        self.assertEqual(self.flow.cursor_y, 755)
        self.assertEqual(self.doc.total_pages, 1)
        self.assertEqual(self.created, [1])
        self.assertEqual(self.engine.calls_named('begin_page'), [(595, 842, 0)])

    def test_first_page_only_once(self):
        self.flow.begin_first_page()
        with self.assertRaises(EngineProtocolError):
            self.flow.begin_first_page()

    def test_cursor_requires_active_page(self):
        with self.assertRaises(EngineProtocolError):
            _ = self.flow.cursor_y

    def test_new_page_suspends_previous(self):
        self.flow.begin_first_page()
        self.flow.consume(100)
        self.assertEqual(self.flow.new_page(), 2)
        first, second = self.doc.pages
        self.assertIs(first.status, PageStatus.SUSPENDED)
        self.assertEqual(first.cursor_y, 655)
        self.assertIs(second.status, PageStatus.ACTIVE)
        self.assertEqual(self.flow.cursor_y, 755)
        self.assertEqual(self.doc.current_page_no, 2)
        self.assertEqual(self.engine.calls_named('suspend_page'), [(1,)])
        self.assertEqual(self.created, [1, 2])

    def test_at_most_one_active_page(self):
        self.flow.begin_first_page()
        self.flow.new_page()
        self.flow.new_page()
        active = [p for p in self.doc.pages if p.status is PageStatus.ACTIVE]
        self.assertEqual([p.page_number for p in active], [3])

    def test_resume_existing_page(self):
        self.flow.begin_first_page()
        self.flow.new_page()
        page = self.flow.resume_existing_page(1, 700)
        self.assertEqual(page.page_number, 1)
        self.assertEqual(self.flow.cursor_y, 700)
        self.assertIs(self.doc.pages[1].status, PageStatus.SUSPENDED)
        self.assertEqual(self.engine.calls_named('resume_page'), [(1,)])

    def test_resume_active_page_does_not_touch_engine(self):
        self.flow.begin_first_page()
        self.flow.resume_existing_page(1, 700)
        self.assertEqual(self.engine.calls_named('resume_page'), [])
        self.assertEqual(self.flow.cursor_y, 700)

    def test_finalized_page_cannot_be_resumed(self):
        self.flow.begin_first_page()
        self.flow.finalize_page()
        self.assertIs(self.doc.pages[0].status, PageStatus.FINALIZED)
        with self.assertRaises(EngineProtocolError):
            self.flow.resume_existing_page(1, 700)

    def test_resume_unknown_page(self):
        self.flow.begin_first_page()
        with self.assertRaises(EngineProtocolError):
            self.flow.resume_existing_page(5, 700)

    def test_finalize_without_active_page(self):
        with self.assertRaises(EngineProtocolError):
            self.flow.finalize_page()

    def test_advance_and_consume(self):
        self.flow.begin_first_page()
        self.flow.advance(400, 20)
        self.assertEqual(self.flow.cursor_y, 380)
        self.flow.consume(30)
        self.assertEqual(self.flow.cursor_y, 350)


class TestBreakIfNeeded(unittest.TestCase):
    def setUp(self):
        self.engine = StubEngine()
        self.doc = Document(end_y=100, min_distance_end_bottom=30)
        self.flow = PageFlowController(self.engine, self.doc)
        self.flow.begin_first_page()

    def test_enough_room_consumes_margin(self):
        self.flow.cursor_y = 300
        self.assertFalse(self.flow.break_if_needed(top_margin=20))
        self.assertEqual(self.flow.cursor_y, 280)
        self.assertEqual(self.doc.total_pages, 1)

    def test_too_little_room_opens_page(self):
        self.flow.cursor_y = 129
        self.assertTrue(self.flow.break_if_needed(top_margin=20))
        self.assertEqual(self.doc.total_pages, 2)
        self.assertEqual(self.flow.cursor_y, 755)

    def test_boundary_is_not_a_break(self):
        self.flow.cursor_y = 130
        self.assertFalse(self.flow.break_if_needed())
        self.assertEqual(self.doc.total_pages, 1)

    def test_explicit_thresholds(self):
        self.flow.cursor_y = 300
        self.assertTrue(self.flow.break_if_needed(0, min_bottom_distance=180, end_bottom_y=150))
        self.assertEqual(self.doc.total_pages, 2)


class TestDocument(unittest.TestCase):
    def test_from_settings(self):
        settings = LayoutSettings(page_width=842, page_height=595, rotate_page=True, end_y=60)
        doc = Document.from_settings(settings)
        self.assertEqual((doc.page_width, doc.page_height, doc.rotate), (842, 595, 90))
        self.assertEqual(doc.end_y, 60)
        self.assertEqual(doc.total_pages, 0)


if __name__ == '__main__':
    unittest.main()

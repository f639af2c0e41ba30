#!/usr/bin/env python3
"""Tests for asset lookup, SVG dimensions and font discovery"""

import os
import pathlib
import sys
import tempfile
import unittest
import warnings
from unittest import mock

PROJECT_ROOT = os.path.join(os.path.dirname(__file__), '..', '..')
sys.path.insert(0, os.path.join(PROJECT_ROOT, 'src'))

from reportflow.utils.file_ops import (  # noqa: E402
    SEARCH_PATH_ENV,
    find_font_file,
    format_file_size,
    resolve_asset_path,
    search_paths_from_env,
)
from reportflow.utils.fonts import discover_fonts, read_family_name  # noqa: E402
from reportflow.utils.svg import get_svg_dimensions  # noqa: E402


def reportlab_fonts_dir():
    import reportlab

    return pathlib.Path(reportlab.__file__).parent / 'fonts'


class TestFileOps(unittest.TestCase):
    def setUp(self):
        self.td = tempfile.TemporaryDirectory()
        self.addCleanup(self.td.cleanup)
        self.root = pathlib.Path(self.td.name)

    def test_leading_slash_is_relative_to_search_path(self):
        (self.root / 'templates').mkdir()
        target = self.root / 'templates' / 'main.pdf'
        target.write_bytes(b'%PDF')
        self.assertEqual(resolve_asset_path('/templates/main.pdf', [self.root]), target.resolve())

    def test_absolute_existing_path(self):
        target = self.root / 'a.svg'
        target.write_text('<svg/>')
        self.assertEqual(resolve_asset_path(str(target), []), target)

    def test_unresolved(self):
        self.assertIsNone(resolve_asset_path('nope/missing.pdf', [self.root]))

    def test_search_paths_from_env(self):
        value = os.pathsep.join(['/a', '', '/b'])
        with mock.patch.dict(os.environ, {SEARCH_PATH_ENV: value}):
            self.assertEqual(search_paths_from_env(), ['/a', '/b'])

    def test_find_font_file(self):
        (self.root / 'fonts').mkdir()
        font = self.root / 'fonts' / 'Inter-Regular.ttf'
        font.write_bytes(b'')
        self.assertEqual(find_font_file('Inter-Regular', [self.root]), font.resolve())
        self.assertIsNone(find_font_file('Inter-Bold', [self.root]))

    def test_format_file_size(self):
        self.assertEqual(format_file_size(0), '0 B')
        self.assertEqual(format_file_size(512), '512 B')
        self.assertEqual(format_file_size(2048), '2.0 KB')


class TestSvgDimensions(unittest.TestCase):
    def setUp(self):
        self.td = tempfile.TemporaryDirectory()
        self.addCleanup(self.td.cleanup)
        self.root = pathlib.Path(self.td.name)

    def write(self, name, content):
        p = self.root / name
        p.write_text(content, encoding='utf-8')
        return p

    def test_width_height_attributes(self):
        p = self.write(
            'a.svg', '<svg xmlns="http://www.w3.org/2000/svg" width="45px" height="30"/>'
        )
        self.assertEqual(get_svg_dimensions(p), (45.0, 30.0))

    def test_viewbox_fallback(self):
        p = self.write('b.svg', '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 120 80"/>')
        self.assertEqual(get_svg_dimensions(p), (120.0, 80.0))

    def test_missing_file_gives_zero(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter('always')
            self.assertEqual(get_svg_dimensions(self.root / 'missing.svg'), (0.0, 0.0))
        self.assertTrue(caught)

    def test_unparseable_file_gives_zero(self):
        p = self.write('c.svg', '<svg')
        with warnings.catch_warnings(record=True):
            warnings.simplefilter('always')
            self.assertEqual(get_svg_dimensions(p), (0.0, 0.0))

    def test_no_size_gives_zero(self):
        p = self.write('d.svg', '<svg xmlns="http://www.w3.org/2000/svg"/>')
        with warnings.catch_warnings(record=True):
            warnings.simplefilter('always')
            self.assertEqual(get_svg_dimensions(p), (0.0, 0.0))


class TestFontDiscovery(unittest.TestCase):
    def test_family_name_from_name_table(self):
        family = read_family_name(reportlab_fonts_dir() / 'Vera.ttf')
        self.assertEqual(family, 'Bitstream Vera Sans')

    def test_discover_groups_styles(self):
        families = discover_fonts([reportlab_fonts_dir()])
        self.assertIn('Bitstream Vera Sans', families)
        vera = families['Bitstream Vera Sans']
        self.assertIn('Roman', vera.styles)
        self.assertGreater(vera.total_size, 0)
        self.assertTrue(vera.total_size_human.endswith('KB'))

    def test_unreadable_files_skipped(self):
        with tempfile.TemporaryDirectory() as td:
            (pathlib.Path(td) / 'broken.ttf').write_bytes(b'this is not a font file at all')
            self.assertEqual(discover_fonts([td]), {})

    def test_missing_directory(self):
        self.assertEqual(discover_fonts(['/nonexistent/fonts']), {})


if __name__ == '__main__':
    unittest.main()

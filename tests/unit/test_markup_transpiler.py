#!/usr/bin/env python3
"""Tests for the HTML-subset to inline markup transpiler"""

import os
import sys
import unittest

PROJECT_ROOT = os.path.join(os.path.dirname(__file__), '..', '..')
sys.path.insert(0, os.path.join(PROJECT_ROOT, 'src'))

from reportflow.markup import (  # noqa: E402
    MarkupOptions,
    MarkupText,
    encode_html_entities,
    fix_html_paddings,
    remove_tag_attributes,
    restore_angle_brackets,
    transpile,
)


class TestTranspile(unittest.TestCase):
    def test_empty_input_yields_empty_output(self):
        self.assertEqual(transpile('', 1, 2), '')
        self.assertEqual(transpile(None, 1, 2), '')

    def test_strong_switches_fonts(self):
        self.assertEqual(transpile('<strong>x</strong>', 1, 2), '<font=2>x<font=1>')
        self.assertEqual(transpile('<b>x</b>', 4, 7), '<font=7>x<font=4>')

    def test_uppercase_tags_behave_like_lowercase(self):
        lower = transpile('<strong>x</strong> <i>y</i>', 1, 2)
        upper = transpile('<STRONG>x</STRONG> <I>y</I>', 1, 2)
        self.assertEqual(lower, upper)

    def test_paragraph_tags_dropped(self):
        self.assertEqual(transpile('<p>Hello</p>', 1, 2), 'Hello')

    def test_consecutive_paragraphs_become_newline(self):
        self.assertEqual(transpile('<p>a</p><p>b</p>', 1, 2), 'a\nb')

    def test_attributes_have_no_effect(self):
        plain = transpile('<p>Hi <strong>there</strong></p>', 1, 2)
        styled = transpile('<p class="lead">Hi <strong style="color:red">there</strong></p>', 1, 2)
        self.assertEqual(plain, styled)

    def test_superscript_restores_base_size(self):
        self.assertEqual(
            transpile('<sup>2</sup>', 1, 2, 10),
            '<textrise=60% fontsize=6>2<textrise=0 fontsize=10>',
        )
        self.assertEqual(
            transpile('<sub>2</sub>', 1, 2, 12),
            '<textrise=-60% fontsize=6>2<textrise=0 fontsize=12>',
        )

    def test_mark_uses_configured_color(self):
        self.assertEqual(
            transpile('<mark>x</mark>', 1, 2),
            '<matchbox={fillcolor={#ffc107} boxheight={ascender descender}}>x<matchbox=end>',
        )
        out = transpile('<mark>x</mark>', 1, 2, options=MarkupOptions(mark_color='{#00ff00}'))
        self.assertIn('fillcolor={#00ff00}', out)

    def test_alignment_tags(self):
        self.assertEqual(
            transpile('<text-right>x</text-right>', 1, 2), '<alignment=right>x<alignment=left>'
        )
        self.assertEqual(
            transpile('<text-center>x</text-center>', 1, 2), '<alignment=center>x<alignment=left>'
        )

    def test_line_breaks(self):
        self.assertEqual(transpile('a<br>b<br/>c<br />d', 1, 2), 'a\nb\nc\nd')

    def test_underline_and_strikeout(self):
        self.assertEqual(
            transpile('<u>x</u>', 1, 2),
            '<underline=true underlinewidth=7% underlineposition=-20%>x<underline=false>',
        )
        self.assertEqual(transpile('<s>x</s>', 1, 2), '<strikeout=true>x<strikeout=false>')

    def test_entities_encoded(self):
        self.assertEqual(transpile('Fish & Chips', 1, 2), 'Fish &amp; Chips')
        self.assertEqual(transpile('ä', 1, 2), '&auml;')
        self.assertEqual(transpile("'", 1, 2), '&#039;')

    def test_already_encoded_input_not_double_escaped(self):
        self.assertEqual(transpile('Fish &amp; Chips', 1, 2), 'Fish &amp; Chips')

    def test_math_symbols_use_unicode_font(self):
        self.assertEqual(transpile('≤', 1, 2, font_unicode=3), '<font=3>&le;<font=1>')
        self.assertEqual(transpile('≥', 1, 2, font_unicode=3), '<font=3>&ge;<font=1>')

    def test_unicode_font_defaults_to_regular(self):
        self.assertEqual(transpile('≤', 5, 2), '<font=5>&le;<font=5>')

    def test_literal_angle_brackets_become_live(self):
        # Encoded brackets in content are revived along with the option lists
        self.assertEqual(transpile('1 &lt; 2', 1, 2), '1 < 2')

    def test_lists_inside_transpile(self):
        out = transpile('<ul><li>a</li><li>b</li></ul>', 1, 2)
        self.assertEqual(
            out,
            '<leftindent=0>&mdash;<leftindent=10>a\n<leftindent=0>&mdash;<leftindent=10>b\n'
            '<leftindent=0>',
        )

    def test_list_after_paragraph_is_not_glued_to_text(self):
        out = transpile('<p>Intro</p><ul><li>a</li><li>b</li></ul>', 1, 2)
        self.assertEqual(
            out,
            'Intro\n\n<leftindent=0>&mdash;<leftindent=10>a\n'
            '<leftindent=0>&mdash;<leftindent=10>b\n<leftindent=0>',
        )
        out = transpile('<p>Intro</p><ol><li>one</li></ol>', 1, 2)
        self.assertTrue(out.startswith('Intro\n\n<leftindent=0>1.<leftindent=10>one\n'))

    def test_link_tags_dropped(self):
        self.assertEqual(transpile('<a href="https://example.org">site</a>', 1, 2), 'site')


class TestMarkupHelpers(unittest.TestCase):
    def test_fix_html_paddings(self):
        self.assertEqual(fix_html_paddings('<ul>\n<li>a</li>\n</ul>\n'), '<ul><li>a</li>\n</ul>')
        self.assertEqual(fix_html_paddings(''), '')

    def test_remove_tag_attributes(self):
        self.assertEqual(remove_tag_attributes('<p class="x">a</p>'), '<p>a</p>')
        self.assertEqual(remove_tag_attributes('<br />'), '<br/>')
        self.assertEqual(remove_tag_attributes('<text-right id="r">x'), '<text-right>x')

    def test_encode_html_entities(self):
        self.assertEqual(encode_html_entities('<b>'), '&lt;b&gt;')
        self.assertEqual(encode_html_entities('&mdash;'), '&mdash;')
        self.assertEqual(encode_html_entities('\xa0'), '&nbsp;')

    def test_restore_angle_brackets(self):
        self.assertEqual(restore_angle_brackets('&lt;font=1&gt;'), '<font=1>')


class TestMarkupText(unittest.TestCase):
    def test_raw_to_engine(self):
        raw = MarkupText.raw('<strong>x</strong>')
        self.assertFalse(raw.engine_ready)
        ready = raw.to_engine(1, 2)
        self.assertTrue(ready.engine_ready)
        self.assertEqual(str(ready), '<font=2>x<font=1>')

    def test_engine_ready_not_transpiled_again(self):
        ready = MarkupText('<font=2>x', True)
        self.assertIs(ready.to_engine(1, 2), ready)

    def test_raw_none(self):
        self.assertEqual(MarkupText.raw(None).value, '')


if __name__ == '__main__':
    unittest.main()

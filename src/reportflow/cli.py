#!/usr/bin/env python3
"""Unified CLI for reportflow

Subcommands:
  render    payload JSON -> PDF
  validate  check a payload before rendering
  markup    transpile HTML-subset text to engine markup
  fonts     list font families found on the search path

"""

import argparse
import json
import pathlib
import sys

from .errors import ReportflowError
from .generators import ExampleReportGenerator
from .markup import MarkupOptions, transpile
from .utils.file_ops import ensure_export_dir, search_paths_from_env
from .utils.fonts import discover_fonts
from .validation import validate_payload

DEFAULT_OUTPUT = 'report.pdf'


def _search_paths(args):
    return list(args.search_path or []) or search_paths_from_env()


def _load_payload(path):
    try:
        with open(path, encoding='utf-8') as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        print(f"ERROR: cannot read payload {path}: {e}", file=sys.stderr)
        sys.exit(1)


def cmd_render(args):
    payload = _load_payload(args.payload)
    generator = ExampleReportGenerator(search_paths=_search_paths(args))
    try:
        pdf_bytes = generator.get_pdf_buffer(payload)
    except ReportflowError as e:
        # Fail closed: nothing is written
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)
    out_path = pathlib.Path(args.output)
    ensure_export_dir(out_path.parent if str(out_path.parent) else '.')
    out_path.write_bytes(pdf_bytes)
    print(f"Wrote {out_path} ({generator.document.total_pages} pages)")


def cmd_validate(args):
    payload = _load_payload(args.payload)
    search_path = _search_paths(args) or None
    result = validate_payload(payload, search_path=search_path, strict_assets=args.strict_assets)
    for issue in result.issues:
        print(f"{issue.severity.upper()}: {issue.path}: {issue.message}")
    if result.ok():
        print("Payload valid: no errors")
    if not result.ok():
        sys.exit(1)


def cmd_markup(args):
    text = args.text if args.text is not None else sys.stdin.read()
    options = MarkupOptions(list_bullet=args.bullet, list_indent=args.indent)
    print(
        transpile(
            text,
            args.font_regular,
            args.font_bold,
            args.font_size,
            font_unicode=args.font_unicode,
            options=options,
        )
    )


def cmd_fonts(args):
    paths = _search_paths(args)
    if not paths:
        print(
            "ERROR: no search path given (--search-path or REPORTFLOW_SEARCH_PATH)",
            file=sys.stderr,
        )
        sys.exit(1)
    families = discover_fonts(paths)
    if not families:
        print("No fonts found")
        return
    print(f"Found {len(families)} font families:")
    for name in sorted(families):
        family = families[name]
        styles = ', '.join(family.styles)
        print(f"  {name} ({styles}) - {len(family.files)} files, {family.total_size_human}")
        if args.details:
            for f in family.files:
                print(f"    {f}")


def build_parser():
    p = argparse.ArgumentParser(prog='reportflow')
    sub = p.add_subparsers(dest='command', required=True)

    r = sub.add_parser('render', help='payload JSON -> pdf')
    r.add_argument('payload')
    r.add_argument('-o', '--output', default=DEFAULT_OUTPUT)
    r.add_argument(
        '--search-path', action='append', help='asset directory (repeatable)'
    )
    r.set_defaults(func=cmd_render)

    val = sub.add_parser('validate', help='validate payload')
    val.add_argument('payload')
    val.add_argument('--search-path', action='append', help='asset directory (repeatable)')
    val.add_argument(
        '--strict-assets', action='store_true', help='Treat missing assets as errors'
    )
    val.set_defaults(func=cmd_validate)

    m = sub.add_parser('markup', help='transpile HTML subset to engine markup')
    m.add_argument('text', nargs='?', help='text to convert (default: stdin)')
    m.add_argument('--font-regular', type=int, default=1)
    m.add_argument('--font-bold', type=int, default=2)
    m.add_argument('--font-unicode', type=int, default=None)
    m.add_argument('--font-size', type=float, default=10)
    m.add_argument('--bullet', default='&mdash;')
    m.add_argument('--indent', type=float, default=10)
    m.set_defaults(func=cmd_markup)

    fonts = sub.add_parser('fonts', help='list font families on the search path')
    fonts.add_argument('--search-path', action='append', help='asset directory (repeatable)')
    fonts.add_argument('--details', action='store_true', help='show font files')
    fonts.set_defaults(func=cmd_fonts)

    return p


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    args.func(args)


if __name__ == '__main__':
    main()

"""Command-line interface for index markup."""

import argparse
import logging
import sys
from collections import Counter
from typing import Optional

from index_markup.config import Settings
from index_markup.diagnostics import DiagnosticLog, IndexMarkupError
from index_markup.docbook import DocBookSession
from index_markup.latex import LatexRenderer, render_print_index
from index_markup.markup import parse_entry
from index_markup.occurrences import OccurrenceFile
from index_markup.scanner import scan_directory
from index_markup.sortkey import CodecValidator
from index_markup.xhtml import XHTMLIndexBuilder


def _load(args) -> tuple[OccurrenceFile, Settings]:
    document = OccurrenceFile(args.occurrences)
    try:
        settings = document.resolved_settings(
            use_indices=True if args.use_indices else None,
            encoding=getattr(args, 'encoding', None),
            escape_char=args.escape_char,
        )
    except (TypeError, ValueError) as exc:
        raise IndexMarkupError(f"Invalid settings in {args.occurrences}: {exc}") from exc
    return document, settings


def _validator(settings: Settings) -> CodecValidator:
    try:
        return CodecValidator(settings.encoding)
    except LookupError as exc:
        raise IndexMarkupError(f"Unknown encoding: {settings.encoding}") from exc


def _write(lines: list[str], output: Optional[str]) -> None:
    text = ''.join(line if line.endswith('\n') else line + '\n' for line in lines)
    if output:
        with open(output, 'w', encoding='utf-8') as f:
            f.write(text)
    else:
        sys.stdout.write(text)


def cmd_scan(args):
    """Scan LaTeX sources for index entries and write an occurrence document."""
    document = scan_directory(args.dir_path)
    document.save(args.output)

    print(f"Scanned {len(document)} index entries from {args.dir_path}")
    print(f"Occurrences saved to {args.output}")

    by_index = Counter(occ.index for occ in document)
    for index_id, count in sorted(by_index.items()):
        print(f"  {index_id}: {count}")


def cmd_latex(args):
    """Render every occurrence as a LaTeX index macro."""
    document, settings = _load(args)
    renderer = LatexRenderer(
        validator=_validator(settings),
        escape_char=settings.escape_char,
        use_indices=settings.use_indices,
        dry_run=settings.dry_run or args.dry_run,
    )
    lines = [renderer.render(occ.markup, occ.plain, occ.index) for occ in document]
    if args.print_index:
        for index_id in document.index_ids():
            command = render_print_index(index_id, settings.use_indices)
            if command:
                lines.append(command)
    _write(lines, args.output)


def cmd_docbook(args):
    """Render every occurrence as a DocBook indexterm, in one session."""
    document, settings = _load(args)
    session = DocBookSession(use_indices=settings.use_indices, escape_char=settings.escape_char)
    lines = session.render_all((occ.markup, occ.index) for occ in document)
    _write(lines, args.output)


def cmd_xhtml(args):
    """Render the collected occurrences as a nested XHTML index."""
    document, settings = _load(args)
    builder = XHTMLIndexBuilder(
        separator=settings.separator,
        heading=settings.heading,
        heading_tag=settings.heading_tag,
        css_class=settings.css_class,
        use_indices=settings.use_indices,
        escape_char=settings.escape_char,
    )
    occurrences = document.for_index(args.index) if settings.use_indices else document.occurrences
    _write([builder.render(occurrences, args.index)], args.output)


def cmd_check(args):
    """Classify all entries and report every diagnostic."""
    document, settings = _load(args)
    diagnostics = DiagnosticLog()
    session = DocBookSession(
        use_indices=settings.use_indices,
        escape_char=settings.escape_char,
        diagnostics=diagnostics,
    )
    renderer = LatexRenderer(
        validator=_validator(settings),
        escape_char=settings.escape_char,
        use_indices=settings.use_indices,
        diagnostics=diagnostics,
    )

    print("--- INDEX REPORT ---")
    kinds = Counter()
    for occ in document:
        entry = parse_entry(occ.markup, settings.escape_char, occ.position)
        kinds[entry.kind.value] += 1
        before = len(diagnostics)
        renderer.render(occ.markup, occ.plain, occ.index)
        session.render(occ.markup, occ.index)
        for diagnostic in diagnostics.items[before:]:
            print(f"  {occ.position or '?'}: {diagnostic.kind.value}: {diagnostic.message}")

    print(f"\nTotal entries: {len(document)}")
    for kind, count in sorted(kinds.items()):
        print(f"  {kind}: {count}")
    print(f"Diagnostics: {len(diagnostics)}")


def main(argv: Optional[list[str]] = None):
    parser = argparse.ArgumentParser(
        description="Index markup - parse and render index entries",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Collect index entries from LaTeX sources
  index-markup scan chapters/ --output occurrences.yaml

  # Re-emit them with generated sort keys
  index-markup latex occurrences.yaml --print-index

  # DocBook indexterms and an XHTML index
  index-markup docbook occurrences.yaml --output index.xml
  index-markup xhtml occurrences.yaml --output index.html

  # Report entries that will not render cleanly
  index-markup check occurrences.yaml
"""
    )
    parser.add_argument('-v', '--verbose', action='store_true',
                       help='Verbose output')

    subparsers = parser.add_subparsers(dest='command', required=True,
                                       help='Available commands')

    # scan command
    scan_parser = subparsers.add_parser('scan',
        help='Collect index entries from LaTeX files')
    scan_parser.add_argument('dir_path',
        help='Path to directory containing LaTeX files')
    scan_parser.add_argument('--output', '-o', default='occurrences.yaml',
        help='Output occurrence file (default: occurrences.yaml)')

    def add_render_arguments(sub):
        sub.add_argument('occurrences',
            help='Path to occurrence file (YAML)')
        sub.add_argument('--output', '-o',
            help='Write output to file instead of stdout')
        sub.add_argument('--use-indices', action='store_true',
            help='Multiple indices are active')
        sub.add_argument('--escape-char',
            help='makeindex escape character (default: ")')

    latex_parser = subparsers.add_parser('latex',
        help='Render LaTeX index macros')
    add_render_arguments(latex_parser)
    latex_parser.add_argument('--encoding',
        help='Output encoding used to validate sort keys (default: utf-8)')
    latex_parser.add_argument('--dry-run', action='store_true',
        help='Preview only, do not report sort key mismatches')
    latex_parser.add_argument('--print-index', action='store_true',
        help='Append the commands printing each index')

    docbook_parser = subparsers.add_parser('docbook',
        help='Render DocBook indexterm elements')
    add_render_arguments(docbook_parser)

    xhtml_parser = subparsers.add_parser('xhtml',
        help='Render the XHTML index')
    add_render_arguments(xhtml_parser)
    xhtml_parser.add_argument('--index', default='idx',
        help='Index to print (default: idx)')

    check_parser = subparsers.add_parser('check',
        help='Report entries that do not render cleanly')
    add_render_arguments(check_parser)
    check_parser.add_argument('--encoding',
        help='Output encoding used to validate sort keys (default: utf-8)')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    commands = {
        'scan': cmd_scan,
        'latex': cmd_latex,
        'docbook': cmd_docbook,
        'xhtml': cmd_xhtml,
        'check': cmd_check,
    }
    try:
        commands[args.command](args)
    except (IndexMarkupError, OSError) as exc:
        print(f"{args.command} failed: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()

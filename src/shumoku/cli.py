#!/usr/bin/env python3
"""
Command line interface for Shumoku.

Commands:
- render: parse a topology hierarchy and write SVG or HTML
- parse: resolve a topology hierarchy and report what was found

Usage:
    shumoku render topology/main.yaml -o network.svg
    shumoku render topology/main.yaml -f html -o network.html --interactive
    shumoku parse topology/main.yaml --json
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional

from .shared.config.settings import get_settings
from .shared.exceptions import HierarchyResolutionError, ShumokuError
from .shared.infrastructure.monitoring import setup_logging
from .services.pipeline import DiagramPipeline, RenderRequest


def _status(message: str) -> None:
    # stdout may carry the rendered document
    print(message, file=sys.stderr)


def render_command(args) -> int:
    """Render a topology file to SVG or HTML"""
    pipeline = DiagramPipeline(get_settings())
    request = RenderRequest(
        output_format=args.format,
        hierarchical=False if args.flat else None,
        interactive=args.interactive,
        theme=args.theme,
        allow_errors=args.force,
    )

    try:
        document = asyncio.run(pipeline.render_file(args.input, request))
    except HierarchyResolutionError as e:
        _status(f"❌ {e}")
        for warning in e.warnings:
            _status(f"  • {warning}")
        return 1

    if args.output:
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(document, encoding="utf-8")
        _status(f"✅ Wrote {output}")
    else:
        sys.stdout.write(document)
        sys.stdout.write("\n")
    return 0


def parse_command(args) -> int:
    """Resolve a topology hierarchy and print a summary"""
    pipeline = DiagramPipeline(get_settings())
    result = asyncio.run(pipeline.parse_file(args.input))

    if args.json:
        print(json.dumps(result.graph.to_dict(), indent=2, sort_keys=True))
    else:
        stats = result.graph.get_statistics()
        print(f"📊 {stats['nodes']} nodes, {stats['links']} links, {stats['subgraphs']} subgraphs")
        print(f"📄 Sheets: {', '.join(result.sheets)}")
        for sheet_id in pipeline.parser.loaded_files:
            print(f"  - loaded {sheet_id}")

    if result.warnings:
        _status(f"⚠️ {len(result.warnings)} warning(s):")
        for warning in result.warnings:
            _status(f"  • {warning}")

    return 1 if result.has_errors else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='shumoku',
        description='Shumoku: hierarchical network topology diagrams'
    )
    parser.add_argument('--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Override the configured log level')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    render_parser = subparsers.add_parser('render', help='Render a topology to SVG or HTML')
    render_parser.add_argument('input', help='Top-level topology YAML file')
    render_parser.add_argument('-o', '--output', help='Output file (defaults to stdout)')
    render_parser.add_argument('-f', '--format', choices=['svg', 'html'], default='svg', help='Output format')
    render_parser.add_argument('--theme', choices=['light', 'dark'], help='Theme when the document sets none')
    render_parser.add_argument('--interactive', action='store_true', help='Emit data-* attributes for tooltips')
    render_parser.add_argument('--flat', action='store_true', help='Single-sheet HTML even for hierarchies')
    render_parser.add_argument('--force', action='store_true', help='Render even if parsing reported errors')
    render_parser.set_defaults(func=render_command)

    parse_parser = subparsers.add_parser('parse', help='Resolve a topology and report nodes, sheets and warnings')
    parse_parser.add_argument('input', help='Top-level topology YAML file')
    parse_parser.add_argument('--json', action='store_true', help='Print the merged graph as JSON')
    parse_parser.set_defaults(func=parse_command)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        print("\n💡 Quick start: shumoku render topology.yaml -o network.svg")
        return 1

    if args.log_level:
        setup_logging(log_level=args.log_level)

    try:
        return args.func(args)
    except KeyboardInterrupt:
        _status("\n⚠️ Operation cancelled by user")
        return 1
    except ShumokuError as e:
        _status(f"❌ Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""
Schema Graph CLI

A tool for collecting schema definition files from a directory tree and
building the dependency graph of their definitions, rendered in various
formats.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Set

from scanner.builder import build_graph
from scanner.discovery import DEFAULT_EXCLUDE_DIRS, normalize_extensions
from sdl.parser import SchemaParseError
from exporters import to_mermaid, to_ascii, to_json, to_sdl


def parse_args(args=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="schemagraph",
        description="Build the dependency graph of the definitions in a directory of schema files.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  schemagraph ./schema                     # ASCII dependency trees
  schemagraph ./schema -f mermaid          # Mermaid flowchart
  schemagraph ./schema -f json -o graph.json
  schemagraph ./schema -f sdl -o all.graphql   # Concatenate in dependency order
  schemagraph . --include-ext .graphqls    # Only scan .graphqls files
  schemagraph ./schema --ignore-missing    # Hide unresolved type names
        """,
    )

    # Positional arguments
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Schema root directory (default: current directory)",
    )

    # Output options
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        help="Output file (default: stdout)",
    )

    parser.add_argument(
        "-f", "--format",
        choices=["ascii", "mermaid", "json", "sdl"],
        default="ascii",
        help="Output format (default: ascii)",
    )

    # Mermaid-specific options
    parser.add_argument(
        "--orientation",
        choices=["LR", "TD", "TB", "RL", "BT"],
        default="LR",
        help="Mermaid flowchart orientation (default: LR)",
    )

    parser.add_argument(
        "--group-by-file",
        action="store_true",
        help="Group nodes by source file in Mermaid output",
    )

    # ASCII-specific options
    parser.add_argument(
        "--ascii-style",
        choices=["tree", "ascii"],
        default="tree",
        help="ASCII output style: 'tree' (Unicode) or 'ascii' (pure ASCII)",
    )

    # SDL-specific options
    parser.add_argument(
        "--with-sources",
        action="store_true",
        help="Precede each definition with its source file in SDL output",
    )

    # Scanning options
    parser.add_argument(
        "--include-ext",
        nargs="+",
        default=None,
        help="File extensions to include (e.g., .graphql .gql)",
    )

    parser.add_argument(
        "--exclude-dir",
        nargs="+",
        default=None,
        help="Directory names to exclude",
    )

    parser.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="Maximum directory depth to scan",
    )

    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of concurrent directory workers (default: 1)",
    )

    parser.add_argument(
        "--relative-to",
        type=str,
        default=None,
        help="Base path for relative path display",
    )

    parser.add_argument(
        "--ignore-missing",
        action="store_true",
        help="Hide missing (unresolved) type names from output",
    )

    parser.add_argument(
        "--show-all",
        action="store_true",
        help="Include definitions that have no connections (by default, only connected ones are shown)",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose (debug) output",
    )

    return parser.parse_args(args)


def main(args=None):
    """Main entry point."""
    parsed = parse_args(args)

    logging.basicConfig(level=logging.WARNING, format="%(message)s")
    if parsed.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    # Resolve paths
    root = Path(parsed.root).resolve()
    if not root.exists():
        print(f"Error: '{parsed.root}' does not exist", file=sys.stderr)
        return 1

    if parsed.workers < 1:
        print("Error: --workers must be at least 1", file=sys.stderr)
        return 1

    base = Path(parsed.relative_to).resolve() if parsed.relative_to else root

    # Prepare scanning options
    include_ext: Optional[Set[str]] = None
    if parsed.include_ext:
        include_ext = normalize_extensions(parsed.include_ext)

    exclude_dirs = set(DEFAULT_EXCLUDE_DIRS)
    if parsed.exclude_dir:
        exclude_dirs |= set(parsed.exclude_dir)

    # Build the graph
    try:
        graph = build_graph(
            root=root,
            include_ext=include_ext,
            exclude_dirs=exclude_dirs,
            max_depth=parsed.max_depth,
            workers=parsed.workers,
        )
    except SchemaParseError as e:
        print(f"Error parsing schema: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error reading schema files: {e}", file=sys.stderr)
        return 1

    include_missing = not parsed.ignore_missing
    show_all = parsed.show_all

    # Generate output
    if parsed.format == "mermaid":
        output = to_mermaid(
            graph=graph,
            root=base,
            orientation=parsed.orientation,
            group_by_file=parsed.group_by_file,
            include_missing=include_missing,
            show_all=show_all,
        )
    elif parsed.format == "json":
        output = to_json(
            graph=graph,
            root=root,
            base=base,
            include_missing=include_missing,
            show_all=show_all,
        )
    elif parsed.format == "sdl":
        output = to_sdl(
            graph=graph,
            root=base,
            with_sources=parsed.with_sources,
        ).rstrip("\n")
    else:  # ascii (default)
        output = to_ascii(
            graph=graph,
            style=parsed.ascii_style,
            include_missing=include_missing,
            show_all=show_all,
        )

    # Write output
    if parsed.output:
        try:
            output_path = Path(parsed.output)
            output_path.write_text(output + "\n", encoding="utf-8")
            print(f"Output written to: {output_path}", file=sys.stderr)
        except OSError as e:
            print(f"Error writing output: {e}", file=sys.stderr)
            return 1
    else:
        print(output)

    return 0


if __name__ == "__main__":
    sys.exit(main())

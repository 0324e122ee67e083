#!/usr/bin/env python3
"""
htmlentry: Bundle the scripts embedded in HTML documents through one entry module

Common usage:
  htmlentry
  htmlentry 'pages/*.html' --output dist
  htmlentry --exclude 'drafts/**' --external 'vendor/**' --entry-file entry.js
  htmlentry --list-files
  htmlentry --list-modules

Patterns default to '**/*.html'. Settings may also come from htmlentry.toml,
.htmlentry.toml or pyproject.toml [tool.htmlentry]; command-line flags win.
"""

from __future__ import annotations

import argparse
import importlib.metadata
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from strif import atomic_output_file

from htmlentry.config import find_config_file, load_config, parse_options
from htmlentry.file_resolver import PatternResolver
from htmlentry.logging import configure_logging
from htmlentry.plugin import ENTRY_ID, HtmlEntryPlugin


@dataclass
class Options:
    """Command-line options for the htmlentry tool."""

    patterns: list[str]
    exclude: list[str] | None
    external: list[str] | None
    no_exports: bool
    output: str | None
    entry_file: str | None
    list_files: bool
    list_modules: bool
    verbose: bool
    version: bool


def _parse_args(args: list[str] | None = None) -> Options:
    # Use the module's docstring as the description
    module_doc = __doc__ or ""
    doc_parts = module_doc.split("\n\n")
    description = doc_parts[0]
    epilog = "\n\n".join(doc_parts[1:])

    parser = argparse.ArgumentParser(
        description=description,
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "patterns",
        nargs="*",
        type=str,
        default=[],
        help="Glob patterns of entry HTML documents (default: '**/*.html')",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=None,
        metavar="PATTERN",
        help="Documents whose scripts are not captured and whose imports are dropped. "
        "Can be repeated",
    )
    parser.add_argument(
        "--external",
        action="append",
        default=None,
        metavar="PATTERN",
        help="Documents treated as provided elsewhere and never entered. Can be repeated",
    )
    parser.add_argument(
        "--no-exports",
        action="store_true",
        dest="no_exports",
        help="Import dependencies for side effects instead of re-exporting them",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        default=None,
        metavar="DIR",
        help="Strip consumed script tags and write the rewritten documents under DIR",
    )
    parser.add_argument(
        "--entry-file",
        type=str,
        default=None,
        dest="entry_file",
        metavar="FILE",
        help="Write the entry module to FILE instead of stdout",
    )
    parser.add_argument(
        "--list-files",
        action="store_true",
        dest="list_files",
        help="Print the entry documents that would be traversed and exit",
    )
    parser.add_argument(
        "--list-modules",
        action="store_true",
        dest="list_modules",
        help="Print the module ids of the dependency graph, in order, and exit",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log traversal details")
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version information and exit",
    )
    opts = parser.parse_args(args)

    return Options(
        patterns=opts.patterns,
        exclude=opts.exclude,
        external=opts.external,
        no_exports=opts.no_exports,
        output=opts.output,
        entry_file=opts.entry_file,
        list_files=opts.list_files,
        list_modules=opts.list_modules,
        verbose=opts.verbose,
        version=opts.version,
    )


def merge_cli_with_config(options: Options, file_config: dict[str, Any]) -> dict[str, Any]:
    """
    Combine config file settings with command-line flags.

    Precedence: explicit CLI flags > config file > built-in defaults.
    """
    merged = dict(file_config)
    if options.patterns:
        merged["include"] = options.patterns
    if options.exclude is not None:
        merged["exclude"] = options.exclude
    if options.external is not None:
        merged["external"] = options.external
    if options.no_exports:
        merged["exports"] = False
    if options.output is not None:
        merged["output"] = options.output
    return merged


def main(args: list[str] | None = None) -> int:
    """
    Main entry point for the htmlentry CLI.

    Args:
        args: Command-line arguments (uses sys.argv if None)

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    options = _parse_args(args)
    configure_logging(verbose=options.verbose)

    if options.version:
        try:
            version = importlib.metadata.version("htmlentry")
            print(f"v{version}")
        except importlib.metadata.PackageNotFoundError:
            print("unknown (package not installed)")
        return 0

    file_config: dict[str, Any] = {}
    config_path = find_config_file(Path.cwd())
    try:
        if config_path:
            file_config = load_config(config_path)
        config = parse_options(merge_cli_with_config(options, file_config))
    except ValueError as e:  # ConfigError, TOMLDecodeError
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if options.list_files:
        resolver = PatternResolver()
        excluded = resolver.expand(config.exclude)
        omitted = resolver.expand(config.external)
        for path in resolver.entry_documents(config.include, excluded, omitted):
            print(path)
        return 0

    plugin = HtmlEntryPlugin(config)
    plugin.options({})

    if options.list_modules:
        for module_id in plugin.state.paths:
            print(module_id.replace("\0", "\\0"))
        return 0

    try:
        source = plugin.load(ENTRY_ID) or ""
        if options.entry_file:
            with atomic_output_file(Path(options.entry_file), make_parents=True) as tmp_path:
                Path(tmp_path).write_text(source + "\n" if source else "", encoding="utf-8")
        elif source:
            print(source)
        plugin.generate()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    return 0


if __name__ == "__main__":
    sys.exit(main())

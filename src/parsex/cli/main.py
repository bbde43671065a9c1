"""Main CLI entry point for the parsex command-line tool.

Provides query, render, pretty and stats commands over a single markup file.
Results are written to stdout; nothing is persisted.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from parsex import __version__
from parsex.api import Document, MarkupParser
from parsex.shared import (
    ConfigValidationError,
    ParserConfig,
    ParsexError,
    configure_logging,
    get_logger,
)
from parsex.tree import Node, Query

CONTENTS_PREVIEW_LENGTH = 60
MAX_DIAGNOSTICS_SHOWN = 5

logger = get_logger(__name__, component="cli")


class CLIConfig:
    """Configuration management for CLI operations."""

    def __init__(self) -> None:
        self.parser_config = ParserConfig()
        self.output_format = "text"

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "CLIConfig":
        """Build CLI configuration from parsed arguments.

        ``--config`` loads a ParserConfig JSON file; ``--strict`` then switches
        the tokenizer to strict mode on top of it.

        Raises:
            ConfigValidationError: Configuration file missing or invalid
        """
        config = cls()
        if args.config is not None:
            if not args.config.is_file():
                raise ConfigValidationError(
                    f"Configuration file not found: {args.config}",
                    field_name="config",
                )
            config.parser_config = ParserConfig.from_json(args.config.read_text())
        if args.strict:
            config.parser_config = config.parser_config.override(tokenizer__strict=True)
        if getattr(args, "indent", None) is not None:
            config.parser_config = config.parser_config.override(render__indent=args.indent)
        config.output_format = getattr(args, "format", config.output_format)
        return config


def _split_pair(value: str) -> Tuple[str, str]:
    """Split a ``KEY=VALUE`` argument."""
    key, sep, val = value.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got {value!r}")
    return key, val


def _add_common_arguments(subparser: argparse.ArgumentParser) -> None:
    subparser.add_argument(
        "file",
        type=Path,
        help="Markup file to process ('-' reads stdin)"
    )
    subparser.add_argument(
        "--config", "-c",
        type=Path,
        help="ParserConfig JSON file"
    )
    subparser.add_argument(
        "--strict",
        action="store_true",
        help="Reject unmatched closing tags and duplicate attributes"
    )


def _add_selector_arguments(subparser: argparse.ArgumentParser) -> None:
    subparser.add_argument("--tag", "-t", help="Match tag name")
    subparser.add_argument("--id", dest="id_value", help="Match id attribute")
    subparser.add_argument("--class", dest="class_name", help="Match class membership")
    subparser.add_argument(
        "--attr",
        action="append",
        type=_split_pair,
        default=[],
        metavar="KEY=VALUE",
        help="Match attribute value exactly (repeatable)"
    )
    subparser.add_argument("--contains", help="Match substring of rendered contents")


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="parsex",
        description="Query, edit and re-render markup documents"
    )

    parser.add_argument("--version", action="version", version=__version__)

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Query command
    query_parser = subparsers.add_parser("query", help="Print nodes matching a selector")
    _add_common_arguments(query_parser)
    _add_selector_arguments(query_parser)
    query_parser.add_argument(
        "--limit", "-n",
        type=int,
        help="Stop after N matches"
    )
    query_parser.add_argument(
        "--format", "-f",
        choices=["json", "text"],
        default="text",
        help="Output format (default: text)"
    )

    # Render command
    render_parser = subparsers.add_parser(
        "render", help="Render the document, optionally after edits"
    )
    _add_common_arguments(render_parser)
    _add_selector_arguments(render_parser)
    render_parser.add_argument(
        "--set-attr",
        action="append",
        type=_split_pair,
        default=[],
        metavar="KEY=VALUE",
        help="Set an attribute on matching nodes (repeatable)"
    )
    render_parser.add_argument(
        "--del-attr",
        action="append",
        default=[],
        metavar="KEY",
        help="Remove an attribute from matching nodes (repeatable)"
    )
    render_parser.add_argument(
        "--exclude",
        action="append",
        type=int,
        default=[],
        metavar="ID",
        help="Leave a node and its subtree out of the output (repeatable)"
    )

    # Pretty command
    pretty_parser = subparsers.add_parser("pretty", help="Print the pretty rebuild")
    _add_common_arguments(pretty_parser)
    pretty_parser.add_argument(
        "--indent",
        type=int,
        help="Indentation width (default: from configuration)"
    )

    # Stats command
    stats_parser = subparsers.add_parser("stats", help="Print node counts and diagnostics")
    _add_common_arguments(stats_parser)
    stats_parser.add_argument(
        "--format", "-f",
        choices=["json", "text"],
        default="text",
        help="Output format (default: text)"
    )

    # Global options
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )

    return parser


def load_document(args: argparse.Namespace, config: CLIConfig) -> Optional[Document]:
    """Parse the command's input file, reporting failures on stderr."""
    parser = MarkupParser(config.parser_config)
    if str(args.file) == "-":
        document = parser.parse(sys.stdin.read())
    else:
        document = parser.parse_file(args.file)

    if not document.success:
        for entry in document.diagnostics:
            print(f"Error: {entry.message}", file=sys.stderr)
        return None
    return document


def build_query(document: Document, args: argparse.Namespace) -> Query:
    """Translate selector arguments into a Query."""
    query = document.query()
    if args.tag:
        query.tag(args.tag)
    if args.id_value:
        query.id(args.id_value)
    if args.class_name:
        query.class_(args.class_name)
    for key, value in args.attr:
        query.attr(key, value)
    if args.contains:
        query.contents_contains(args.contains)
    return query


def _preview(text: str) -> str:
    text = " ".join(text.split())
    if len(text) > CONTENTS_PREVIEW_LENGTH:
        return text[:CONTENTS_PREVIEW_LENGTH - 3] + "..."
    return text


def format_nodes(nodes: List[Node], format_type: str) -> str:
    """Format query matches for output."""
    if format_type == "json":
        return json.dumps([node.to_dict() for node in nodes], indent=2)

    if not nodes:
        return "No matching nodes."

    lines = [f"{len(nodes)} matching node(s)", "-" * 60]
    for node in nodes:
        attrs = " ".join(f"{key}={value!r}" for key, value in node.attributes.items())
        lines.append(f"#{node.id} <{node.tag}> depth={node.depth} {attrs}".rstrip())
        contents = _preview(node.contents)
        if contents:
            lines.append(f"   {contents}")
    return "\n".join(lines)


def format_stats(summary: Dict[str, Any], format_type: str) -> str:
    """Format a document summary for output."""
    if format_type == "json":
        return json.dumps(summary, indent=2)

    metrics = summary["metrics"]
    lines = [
        f"Nodes: {summary['node_count']}",
        f"Comments: {metrics['comments_found']}",
        f"Unmatched closing tags: {metrics['unmatched_closes']}",
        f"Unclosed nodes: {metrics['unclosed_nodes']}",
        f"Time: {metrics['processing_time_ms']:.1f}ms",
        "-" * 60,
    ]
    for tag, count in sorted(summary["tag_counts"].items()):
        lines.append(f"{tag:<20} {count}")

    diagnostics = summary["diagnostics"]
    if diagnostics:
        lines.append("-" * 60)
        for entry in diagnostics[:MAX_DIAGNOSTICS_SHOWN]:
            lines.append(f"{entry['severity']}: {entry['message']}")
        if len(diagnostics) > MAX_DIAGNOSTICS_SHOWN:
            lines.append(f"... and {len(diagnostics) - MAX_DIAGNOSTICS_SHOWN} more")
    return "\n".join(lines)


def cmd_query(args: argparse.Namespace, config: CLIConfig) -> int:
    """Handle query command."""
    document = load_document(args, config)
    if document is None:
        return 1

    query = build_query(document, args)
    if args.limit is not None:
        query.limit(args.limit)
    print(format_nodes(query.to_list(), config.output_format))
    return 0


def cmd_render(args: argparse.Namespace, config: CLIConfig) -> int:
    """Handle render command."""
    document = load_document(args, config)
    if document is None:
        return 1

    if args.set_attr or args.del_attr:
        edited = 0
        for node in build_query(document, args):
            if node.is_comment:
                continue
            for key, value in args.set_attr:
                node.set_attr(key, value)
            for key in args.del_attr:
                node.del_attr(key)
            edited += 1
        logger.info("Applied attribute edits", extra={"edited_nodes": edited})

    sys.stdout.write(document.render(args.exclude))
    return 0


def cmd_pretty(args: argparse.Namespace, config: CLIConfig) -> int:
    """Handle pretty command."""
    document = load_document(args, config)
    if document is None:
        return 1

    sys.stdout.write(document.rebuild())
    return 0


def cmd_stats(args: argparse.Namespace, config: CLIConfig) -> int:
    """Handle stats command."""
    document = load_document(args, config)
    if document is None:
        return 1

    print(format_stats(document.summary(), config.output_format))
    return 0


COMMANDS = {
    "query": cmd_query,
    "render": cmd_render,
    "pretty": cmd_pretty,
    "stats": cmd_stats,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = CLIConfig.from_args(args)
    except ConfigValidationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # Set up logging verbosity
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
        configure_logging("DEBUG")
    elif args.quiet:
        logging.basicConfig(level=logging.ERROR)
        configure_logging("ERROR")
    else:
        configure_logging(config.parser_config.logging_level)

    try:
        return COMMANDS[args.command](args, config)
    except ParsexError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())

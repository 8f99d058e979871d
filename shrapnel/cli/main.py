"""
shrapnel CLI: inspect, edit and compare nested encodings.

Commands:
    shrapnel explode FILE          - Print the fragment tree
    shrapnel flatten FILE          - Print the flattened projection
    shrapnel replace FILE OLD NEW  - Edit every node and recompose
    shrapnel diff LEFT RIGHT       - Localize differences between two buffers

FILE may be "-" for stdin. Every command accepts --codecs to choose and
order the codecs, and --max-depth to bound the decomposition.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

from ..flatten import flatten
from ..fingerprint import format_fingerprint
from ..fragment import Fragment
from ..library.codecs import ALL_CODECS, UnknownCodecError, codec_names, select_codecs
from ..logger import logger, setup_logger
from ..walker import Difference
from .pipeline import (
    DEFAULT_MAX_DEPTH,
    compare,
    explode,
    read_input,
    rewrite,
)


# Longest content preview printed per node
PREVIEW_LIMIT = 200

TEXT_ENCODING = "utf-8"


# =============================================================================
# OUTPUT FORMATTING
# =============================================================================

def render_bytes(data: bytes, limit: Optional[int] = PREVIEW_LIMIT) -> str:
    """Render bytes on one line, escaping undecodable bytes and line breaks."""
    text = data.decode(TEXT_ENCODING, "backslashreplace")
    text = text.replace("\r", "\\r").replace("\n", "\\n")
    if limit is not None and len(text) > limit:
        return text[:limit] + "..."
    return text


def format_node(depth: int, node: Fragment) -> str:
    """Format a single node as '<indent><fingerprint> [codec]: contents'."""
    indent = "  " * depth
    codec = node.codec_name or "root"
    return (
        f"{indent}{format_fingerprint(node.fingerprint)} "
        f"[{codec}]: {render_bytes(node.contents)}"
    )


def format_tree(root: Fragment) -> str:
    """Format a fragment tree, one node per line, pre-order."""
    return "\n".join(format_node(depth, node) for depth, node in root.iter_with_depth())


def format_difference(difference: Difference) -> str:
    """Format one difference with a line per input."""
    lines = [f"@ node {difference.position}"]
    for label, contents in zip(("-", "+"), difference.contents):
        lines.append(f"  {label} {render_bytes(contents)}")
    return "\n".join(lines)


def _encode_argument(value: str) -> bytes:
    return value.encode(TEXT_ENCODING, "surrogateescape")


# =============================================================================
# CLI COMMANDS
# =============================================================================

def cmd_explode(args: argparse.Namespace) -> int:
    """Print the fragment tree of a buffer."""
    result = explode(read_input(args.file), args.codecs, args.max_depth)

    print(format_tree(result.root))
    print()
    print(f"Fingerprint: {result.fingerprint_hex}")
    print(f"Nodes:       {result.node_count}")
    print(f"Depth:       {result.depth}")
    return 0


def cmd_flatten(args: argparse.Namespace) -> int:
    """Print the flattened projection of a buffer."""
    result = explode(read_input(args.file), args.codecs, args.max_depth)

    sys.stdout.buffer.write(flatten(result.root) + b"\n")
    sys.stdout.flush()
    return 0


def cmd_replace(args: argparse.Namespace) -> int:
    """Replace text in every node, recompose, and write the result."""
    result = rewrite(
        read_input(args.file),
        _encode_argument(args.old),
        _encode_argument(args.new),
        args.codecs,
        args.max_depth,
    )

    if args.output:
        Path(args.output).write_bytes(result.output)
    else:
        sys.stdout.buffer.write(result.output)
        sys.stdout.flush()

    print(f"Original fingerprint: {format_fingerprint(result.original_fingerprint)}", file=sys.stderr)
    print(f"New fingerprint:      {result.reexploded.fingerprint_hex}", file=sys.stderr)
    if not result.structure_preserved:
        print("WARNING: structure changed by the edit", file=sys.stderr)
    return 0


def cmd_diff(args: argparse.Namespace) -> int:
    """Walk two buffers in lock-step and print the nodes that differ."""
    result = compare(
        read_input(args.left),
        read_input(args.right),
        args.codecs,
        args.max_depth,
    )

    if result.error is not None:
        print(f"STRUCTURAL MISMATCH: {result.error.reason}")
        print(f"  left:  {result.left.fingerprint_hex}")
        print(f"  right: {result.right.fingerprint_hex}")
        return 1

    if not result.differences:
        print("No differences.")
        return 0

    for difference in result.differences:
        print(format_difference(difference))
    print()
    print(f"Total: {len(result.differences)} differing nodes")
    return 0


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def parse_codecs(value: str) -> tuple:
    """argparse type for --codecs: a comma-separated list of names."""
    try:
        return select_codecs(value.split(","))
    except UnknownCodecError as e:
        raise argparse.ArgumentTypeError(str(e))


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--codecs",
        type=parse_codecs,
        default=ALL_CODECS,
        help=f"Comma-separated codec order (default: {','.join(codec_names(ALL_CODECS))})",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=DEFAULT_MAX_DEPTH,
        help=f"Maximum decomposition depth (default: {DEFAULT_MAX_DEPTH})",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="shrapnel",
        description="Recursively decompose, edit and compare nested encodings",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v info, -vv debug)",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit logs as JSON lines on stderr",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
    )

    # Explode command
    explode_parser = subparsers.add_parser("explode", help="Print the fragment tree")
    explode_parser.add_argument("file", help="Input file, or - for stdin")
    _add_common_arguments(explode_parser)
    explode_parser.set_defaults(func=cmd_explode)

    # Flatten command
    flatten_parser = subparsers.add_parser("flatten", help="Print the flattened projection")
    flatten_parser.add_argument("file", help="Input file, or - for stdin")
    _add_common_arguments(flatten_parser)
    flatten_parser.set_defaults(func=cmd_flatten)

    # Replace command
    replace_parser = subparsers.add_parser(
        "replace",
        help="Replace text in every node and recompose",
    )
    replace_parser.add_argument("file", help="Input file, or - for stdin")
    replace_parser.add_argument("old", help="Text to replace")
    replace_parser.add_argument("new", help="Replacement text")
    replace_parser.add_argument("-o", "--output", help="Write the result here instead of stdout")
    _add_common_arguments(replace_parser)
    replace_parser.set_defaults(func=cmd_replace)

    # Diff command
    diff_parser = subparsers.add_parser("diff", help="Localize differences between two buffers")
    diff_parser.add_argument("left", help="First input file")
    diff_parser.add_argument("right", help="Second input file")
    _add_common_arguments(diff_parser)
    diff_parser.set_defaults(func=cmd_diff)

    return parser


def _log_level(verbose: int) -> Optional[str]:
    if verbose >= 2:
        return "DEBUG"
    if verbose == 1:
        return "INFO"
    return None


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logger(_log_level(args.verbose), json_format=args.log_json)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        return args.func(args)
    except (OSError, ValueError) as e:
        logger.debug("command failed", exc_info=True)
        print(f"ERROR: {args.command} failed", file=sys.stderr)
        print(f"Reason: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

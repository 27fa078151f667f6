"""
BrightScript CLI Entrypoint.

Command-line front end for inspecting how BrightScript source is tokenized
and split into blocks.

Features:
    - Read source from `.brs` files or inline strings.
    - Print the block tree (default), the raw token stream, or JSON.
    - Output to console or file.

Example usage:
    brs main.brs
    brs -s "if x then print 1" --tokens
    brs main.brs --json -o main.json
    brs main.brs --verbose

Functions:
    run_brs(source: str, is_string: bool = False, mode: str = "tree", out: Optional[str] = None,
            max_depth: int = DEFAULT_MAX_DEPTH) -> str:
        Runs the lex → parse → render pipeline and writes the result.

    main() -> None:
        Parses CLI arguments and invokes run_brs.
"""

import argparse
import json
import logging
import sys

from brs.brs_ast import dump
from brs.brs_lexer import tokenize
from brs.brs_parser import DEFAULT_MAX_DEPTH, Parser

logger = logging.getLogger(__name__)

MODES = ("tree", "tokens", "json")


def render_tokens(source: str) -> str:
    lines = []
    for tok in tokenize(source):
        lines.append(f"{tok.kind.value:<16} [{tok.start}, {tok.end}) {tok.text(source)!r}")
    return "\n".join(lines)


def run_brs(
    source: str,
    is_string: bool = False,
    mode: str = "tree",
    out: str | None = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> str:
    """
    Run the BrightScript front end on a file or string and emit the result.

    Args:
        source (str): BrightScript source code or path to a `.brs` file.
        is_string (bool): If True, treats `source` as raw code instead of a file path.
        mode (str): One of "tree", "tokens" or "json". Defaults to "tree".
        out (str | None): Optional path to write the output to. If None, prints to stdout.
        max_depth (int): Parser nesting bound.

    Returns:
        str: The rendered output.

    Raises:
        ValueError: If `is_string` is False and the source does not end with '.brs',
            or if `mode` is unknown.
    """
    if mode not in MODES:
        raise ValueError(f"Unknown output mode: {mode}")
    if not is_string and not source.lower().endswith(".brs"):
        raise ValueError("Only .brs files are supported.")
    if not is_string:
        with open(source, encoding="utf-8") as f:
            source = f.read()

    if mode == "tokens":
        output = render_tokens(source)
    else:
        tree = Parser(source, max_depth=max_depth).parse()
        logger.info("Parsed %d characters into %d top-level blocks", len(source), len(tree.blocks()))
        if mode == "json":
            output = json.dumps(tree.to_dict(source), indent=2)
        else:
            output = dump(tree, source)

    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(output + "\n")
        logger.info("Wrote %s", out)
    else:
        print(output)
    return output


def main(argv: list[str] | None = None) -> None:
    """
    Entry point for the BrightScript CLI.

    Supported flags:
        - `-s`, `--string`: Interpret source as a raw string instead of a file path.
        - `--tokens`: Print the token stream instead of the block tree.
        - `--json`: Print the block tree as JSON.
        - `-o`, `--out`: Write output to a file.
        - `--max-depth`: Nesting bound before blocks are kept flat.
        - `--verbose`: Log parser decisions at DEBUG level.
    """
    parser = argparse.ArgumentParser(prog="brs")
    parser.add_argument("source", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--tokens", dest="mode", action="store_const", const="tokens", help="Print tokens"
    )
    group.add_argument(
        "--json", dest="mode", action="store_const", const="json", help="Print tree as JSON"
    )
    parser.add_argument("-o", "--out", metavar="OUTFILE", help="Output to file")
    parser.add_argument(
        "--max-depth",
        type=int,
        default=DEFAULT_MAX_DEPTH,
        help=f"Nesting bound before blocks are kept flat (default: {DEFAULT_MAX_DEPTH})",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Log parser decisions"
    )

    args = parser.parse_args(argv)
    if args.max_depth < 1:
        parser.error("--max-depth must be at least 1")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        run_brs(
            source=args.source,
            is_string=args.string,
            mode=args.mode or "tree",
            out=args.out,
            max_depth=args.max_depth,
        )
    except (OSError, ValueError) as e:
        print(f"brs: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()

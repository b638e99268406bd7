"""
Command-line driver for linebased scripts.

    linebased expand script.lb            print the expanded script
    linebased expand --trace script.lb    prefix each line with its location
    linebased parse script.lb             print raw expressions, no expansion
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from .config import ExpandConfig
from .decoder import Decoder
from .errors import ExpressionError, ScriptSyntaxError
from .expander import ExpandingDecoder, write_stack
from .fs import DirFS

logger = logging.getLogger("linebased")

__all__ = ["build_parser", "main"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="linebased", description="Expand linebased scripts.")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING (default: $LINEBASED_LOG_LEVEL)")
    sub = parser.add_subparsers(dest="command", required=True)

    exp = sub.add_parser("expand", help="expand templates and includes")
    exp.add_argument("file", help="entry script, relative to --dir")
    exp.add_argument("--dir", default=".", help="directory that include paths are resolved in")
    exp.add_argument("--root", default=None, help="prefix for file names in messages")
    exp.add_argument("--extension", default=None, help="include extension ('' disables)")
    exp.add_argument("--trace", action="store_true", help="print location and call chain per expression")
    exp.add_argument("--skip-blank", action="store_true", help="omit blank expressions")

    parse = sub.add_parser("parse", help="print raw expressions without expansion")
    parse.add_argument("file")
    return parser


def _run_expand(args: argparse.Namespace, config: ExpandConfig) -> int:
    if args.extension is not None:
        config.extension = ExpandConfig.normalize_extension(args.extension)
    if args.root is not None:
        config.root = args.root

    out = sys.stdout
    with ExpandingDecoder(args.file, DirFS(args.dir), config=config) as dec:
        try:
            for expr in dec:
                if args.skip_blank and expr.name == "":
                    continue
                if args.trace:
                    write_stack(out, "", [expr])
                else:
                    out.write(expr.string())
        except ExpressionError as exc:
            print(exc, file=sys.stderr)
            return 1
    logger.debug("expanded %s with %d templates", args.file, len(dec.templates))
    return 0


def _run_parse(args: argparse.Namespace) -> int:
    path = Path(args.file)
    try:
        with path.open(encoding="utf-8") as fp:
            for expr in Decoder(fp):
                print(f"line={expr.line} name={expr.name!r} comment={expr.comment!r} body={expr.body!r}")
    except ScriptSyntaxError as exc:
        print(f"{path}:{exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = ExpandConfig.from_env()
    if args.log_level:
        config.log_level = ExpandConfig.normalize_log_level(args.log_level)
    logging.basicConfig(
        level=config.level,
        format="%(asctime)s %(levelname)s %(message)s",
    )

    if args.command == "parse":
        return _run_parse(args)
    return _run_expand(args, config)


if __name__ == "__main__":
    sys.exit(main())

"""Command line entry point of the packager."""

from __future__ import annotations

import argparse
import sys

from gofar.context import PackagingError, new_build_context

VERSION = "2.4.0"

_USAGE = """usage: {prog} [option] process_name
usage: {prog} version

fatima process package builder

positional arguments:
  process_name          process(program) name

optional arguments:
  -c    CGO Enable
  -s    Strip library while CGO enable
"""


def build_parser(prog: str = "gofar") -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=prog,
        usage=f"{prog} [option] process_name",
        add_help=False,
    )
    parser.add_argument("-c", dest="cgo_enable", action="store_true", help="CGO enable")
    parser.add_argument(
        "-s", dest="strip_enable", action="store_true", help="Strip library while CGO enable"
    )
    parser.add_argument("-h", "--help", dest="help", action="store_true")
    parser.add_argument("args", nargs="*")
    return parser


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    prog = "gofar"

    if argv and argv[0] == "version":
        print(f"gofar version {VERSION}")
        return 0

    options = build_parser(prog).parse_args(argv)
    if options.help or not options.args:
        print(_USAGE.format(prog=prog), end="")
        return 0

    try:
        ctx = new_build_context(options.args[0], options.cgo_enable, options.strip_enable)
    except PackagingError as exc:
        print(f"packaging error : {exc}", file=sys.stderr)
        return 1

    ctx.print_summary()
    try:
        ctx.packaging()
    except PackagingError as exc:
        print(f"gofar packaging fail : {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
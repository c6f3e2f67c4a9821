"""Command line entry point: lex, parse, analyze, run or emit a program file."""

from __future__ import annotations

import logging
import sys

from .check import analyze
from .emit import to_java
from .errors import AnalysisError, ParseError, PlcError, RuntimeFault
from .parse import parse_tokens
from .runtime import VInt, run
from .tokens import tokenize

logger = logging.getLogger(__name__)

USAGE: str = """\
plc [OPTIONS] FILE

Run a program: lex, parse, analyze, then interpret its main function.

Options:
  --stop-at PHASE  Stop after PHASE (lex, parse, analyze) and print its result
  --emit-java      Print the program as Java source instead of running it
  -v, --verbose    Log pipeline stages to stderr
  -h, --help       Show this help message
"""

PHASES: tuple[str, ...] = ("lex", "parse", "analyze")

LOG_FORMAT: str = "%(levelname)-8s | %(name)s | %(message)s"


def main(argv: list[str] | None = None) -> int:
    args = argv if argv is not None else sys.argv[1:]
    filepath: str = ""
    stop_at: str = ""
    emit_java = False
    verbose = False
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--help" or arg == "-h":
            print(USAGE, end="")
            return 0
        elif arg == "--stop-at":
            if i + 1 >= len(args):
                print("plc: --stop-at requires a phase", file=sys.stderr)
                return 2
            stop_at = args[i + 1]
            if stop_at not in PHASES:
                print("plc: unknown phase '" + stop_at + "'", file=sys.stderr)
                return 2
            i += 2
        elif arg == "--emit-java":
            emit_java = True
            i += 1
        elif arg == "--verbose" or arg == "-v":
            verbose = True
            i += 1
        elif arg.startswith("-"):
            print("plc: unknown flag '" + arg + "'", file=sys.stderr)
            return 2
        elif filepath == "":
            filepath = arg
            i += 1
        else:
            print("plc: unexpected argument '" + arg + "'", file=sys.stderr)
            return 2
    if filepath == "":
        print("plc: missing file argument", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )

    try:
        with open(filepath, "rb") as f:
            raw = f.read()
    except FileNotFoundError:
        print("plc: " + filepath + ": No such file or directory", file=sys.stderr)
        return 1
    except OSError as e:
        print("plc: " + filepath + ": " + str(e), file=sys.stderr)
        return 1
    try:
        text = raw.decode("utf-8")
    except ValueError:
        print("plc: " + filepath + ": invalid utf-8", file=sys.stderr)
        return 1

    try:
        tokens = tokenize(text)
        if stop_at == "lex":
            for tok in tokens:
                print(tok.kind + " " + repr(tok.literal) + " @" + str(tok.index))
            return 0
        source = parse_tokens(tokens)
    except ParseError as e:
        print("plc: parse error: " + str(e), file=sys.stderr)
        return 1
    if stop_at == "parse":
        print("ok")
        return 0

    try:
        analyze(source)
    except AnalysisError as e:
        print("plc: analysis error: " + str(e), file=sys.stderr)
        return 1
    if stop_at == "analyze":
        print("ok")
        return 0
    if emit_java:
        sys.stdout.write(to_java(source))
        return 0

    logger.debug("running %s", filepath)
    try:
        result = run(source)
    except RuntimeFault as e:
        print("plc: runtime error: " + str(e), file=sys.stderr)
        return 1
    except PlcError as e:
        print("plc: error: " + str(e), file=sys.stderr)
        return 1
    if not isinstance(result, VInt):
        print("plc: runtime error: main returned " + result.to_string(), file=sys.stderr)
        return 1
    return result.value


if __name__ == "__main__":
    sys.exit(main())

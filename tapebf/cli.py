from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Optional

from .bf_interpreter import DEFAULT_EOF_VALUE, DEFAULT_TAPE_LENGTH, BrainfuckInterpreter
from .errors import BrainfuckError
from .loader import open_program

logger = logging.getLogger(__name__)

PROG = "tapebf"

EOF_CHOICES = {
    "255": DEFAULT_EOF_VALUE,
    "0": 0,
    "unchanged": None,
}


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer: {value}")
    return number


def _discard_stdout() -> None:
    # Python flushes sys.stdout again at shutdown; point it at devnull so a
    # closed pipe is reported once.
    try:
        fd = sys.stdout.fileno()
    except (AttributeError, OSError, ValueError):
        return
    devnull = os.open(os.devnull, os.O_WRONLY)
    os.dup2(devnull, fd)
    os.close(devnull)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=f"{PROG}: %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog=PROG, description="Run a Brainfuck program")
    parser.add_argument("source", nargs="?", help="Path to the Brainfuck source file")
    parser.add_argument(
        "--tape-length",
        type=_positive_int,
        default=DEFAULT_TAPE_LENGTH,
        help=f"Number of cells on the tape (default: {DEFAULT_TAPE_LENGTH})",
    )
    parser.add_argument(
        "--eof",
        choices=sorted(EOF_CHOICES),
        default="255",
        help="Value stored by ',' once input is exhausted (default: 255)",
    )
    parser.add_argument(
        "--jump-table",
        action="store_true",
        help="Pair all brackets before running instead of scanning on each jump",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug details to stderr")
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    if args.source is None:
        print(f"{PROG}: No source file was given!", file=sys.stderr)
        return 1

    interpreter = BrainfuckInterpreter(
        tape_length=args.tape_length,
        eof_value=EOF_CHOICES[args.eof],
        precompute_jumps=args.jump_table,
    )
    try:
        with open_program(args.source) as program:
            interpreter.run(
                program,
                input_stream=getattr(sys.stdin, "buffer", None),
                output_stream=getattr(sys.stdout, "buffer", None),
            )
    except BrainfuckError as exc:
        logger.debug("run aborted", exc_info=True)
        print(f"{PROG}: {exc}", file=sys.stderr)
        return 1
    except BrokenPipeError:
        _discard_stdout()
        print(f"{PROG}: Standard output was closed before the program finished.", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())

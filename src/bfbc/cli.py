from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .api import CompileOptions, compile_string, read_source
from .errors import BFError
from .instructions import format_program
from .interpreter import TAPE_SIZE, Tape, execute
from .optimizer import DEFAULT_MAX_PASSES
from .reference import run_reference

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="bfbc",
        description="Execute a Brainfuck program through a bytecode compiler and optimizer.",
    )
    parser.add_argument("program_file", help="file that contains the program ('-' for stdin)")
    parser.add_argument("-c", dest="print_bytecode", action="store_true",
                        help="print bytecode instead of executing")
    parser.add_argument("-O0", dest="no_optimize", action="store_true",
                        help="skip the peephole optimizer")
    parser.add_argument("--passes", type=int, default=DEFAULT_MAX_PASSES,
                        help=f"maximum optimizer passes (default {DEFAULT_MAX_PASSES})")
    parser.add_argument("--tape-size", type=int, default=TAPE_SIZE, help=f"number of tape cells (default {TAPE_SIZE})")
    parser.add_argument("--reference", action="store_true",
                        help="run the naive character-level interpreter instead")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging on stderr")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.passes < 1:
        parser.error("--passes must be at least 1")
    if args.tape_size < 1:
        parser.error("--tape-size must be at least 1")
    if args.reference and args.print_bytecode:
        parser.error("-c and --reference cannot be combined")

    try:
        source = read_source(args.program_file)
        if args.reference:
            run_reference(source, tape=Tape(args.tape_size))
            return 0

        options = CompileOptions(
            optimize=not args.no_optimize,
            max_passes=args.passes,
            tape_size=args.tape_size,
        )
        result = compile_string(source, options=options)
        logger.debug("%d instructions after compile, %d after optimization",
                     result.unoptimized_length, len(result.program))

        if args.print_bytecode:
            sys.stdout.write(format_program(result.program) + "\n")
            return 0
        execute(result.program, tape=Tape(args.tape_size))
    except BFError as e:
        sys.stderr.write(f"{e}\n")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

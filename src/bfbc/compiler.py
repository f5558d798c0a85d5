from __future__ import annotations

import logging
from typing import Dict, List, Type

from .errors import make_bracket_error
from .instructions import (
    Decrement, Increment, Input, LoopEnd, LoopStart, MoveLeft, MoveRight,
    Output, Program, SetZero,
)

logger = logging.getLogger(__name__)

BF_OPS = set("+-<>[],.")

# Characters folded into a single instruction per maximal run.
_RUNS: Dict[str, Type] = {
    '>': MoveRight,
    '<': MoveLeft,
    '+': Increment,
    '-': Decrement,
    '.': Output,
    ',': Input,
}


def is_code_char(ch: str) -> bool:
    return ch in BF_OPS


def compile_source(source: str) -> Program:
    """
    Compile tape-language source to a first-pass Program.

    Runs of the same character among ``><+-.,`` become one instruction with the
    run length as operand, ``[-]`` becomes SetZero, and brackets are checked.
    Anything else in the source is a comment.

    Raises:
        BracketError: on the first ``]`` without a pending ``[``, or, after the
            scan, on the earliest ``[`` that was never closed.
    """
    program: Program = []
    loop_stack: List[int] = []  # source offsets of pending '['

    size = len(source)
    i = 0
    while i < size:
        ch = source[i]

        kind = _RUNS.get(ch)
        if kind is not None:
            start = i
            while i + 1 < size and source[i + 1] == ch:
                i += 1
            program.append(kind(i - start + 1))
        elif ch == '[':
            if source.startswith('[-]', i):
                program.append(SetZero())
                i += 2
            else:
                program.append(LoopStart())
                loop_stack.append(i)
        elif ch == ']':
            if not loop_stack:
                raise make_bracket_error(kind='close', offset=i, source=source)
            loop_stack.pop()
            program.append(LoopEnd())
        i += 1

    if loop_stack:
        raise make_bracket_error(kind='open', offset=loop_stack[0], source=source)

    logger.debug("compiled %d source characters to %d instructions", size, len(program))
    return program

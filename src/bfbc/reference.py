"""
Naive character-level interpreter.

No folding, no idioms and no jump table: brackets are matched by scanning
for the partner at the moment a jump is taken. It exists as the slow,
obviously-correct oracle the optimizing pipeline is checked against.
"""
from __future__ import annotations

import logging
import sys
from typing import BinaryIO, Optional

from .compiler import is_code_char
from .errors import make_bracket_error, make_tape_error
from .interpreter import Tape

logger = logging.getLogger(__name__)


def _scan_forward(code: str, pc: int, source: str, positions: list) -> int:
    depth = 1
    i = pc
    while depth:
        i += 1
        if i >= len(code):
            raise make_bracket_error(kind='open', offset=positions[pc], source=source)
        if code[i] == '[':
            depth += 1
        elif code[i] == ']':
            depth -= 1
    return i


def _scan_backward(code: str, pc: int, source: str, positions: list) -> int:
    depth = 1
    i = pc
    while depth:
        i -= 1
        if i < 0:
            raise make_bracket_error(kind='close', offset=positions[pc], source=source)
        if code[i] == ']':
            depth += 1
        elif code[i] == '[':
            depth -= 1
    return i


def run_reference(
    source: str,
    stdin: Optional[BinaryIO] = None,
    stdout: Optional[BinaryIO] = None,
    tape: Optional[Tape] = None,
) -> Tape:
    """
    Execute ``source`` one character at a time and return the final tape.

    Unlike the compiler, an unmatched bracket is only reported when a jump
    actually needs its partner.
    """
    if stdin is None:
        stdin = sys.stdin.buffer
    if stdout is None:
        stdout = sys.stdout.buffer
    if tape is None:
        tape = Tape()

    # Filter the source code, remembering where each command came from
    positions = [i for i, ch in enumerate(source) if is_code_char(ch)]
    code = ''.join(source[i] for i in positions)

    mem = tape.cells
    size = tape.size
    ptr = tape.cursor
    pc = 0
    logger.debug("reference run of %d commands", len(code))

    def cell() -> int:
        if ptr < 0 or ptr >= size:
            tape.cursor = ptr
            raise make_tape_error(pc=pc, cursor=ptr, tape_size=size)
        return int(mem[ptr])

    try:
        while pc < len(code):
            cmd = code[pc]

            if cmd == '>':
                ptr += 1
            elif cmd == '<':
                ptr -= 1
            elif cmd == '+':
                mem[ptr] = (cell() + 1) & 0xFF
            elif cmd == '-':
                mem[ptr] = (cell() - 1) & 0xFF
            elif cmd == '.':
                stdout.write(bytes([cell()]))
            elif cmd == ',':
                cell()
                data = stdin.read(1)
                mem[ptr] = data[0] if data else 0
            elif cmd == '[':
                if cell() == 0:
                    pc = _scan_forward(code, pc, source, positions)
            elif cmd == ']':
                if cell() != 0:
                    pc = _scan_backward(code, pc, source, positions)
            pc += 1
    finally:
        stdout.flush()

    tape.cursor = ptr
    return tape

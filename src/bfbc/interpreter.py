from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from typing import BinaryIO, List, Optional

import numpy as np
from numba import njit

from .errors import make_bracket_error, make_tape_error
from .instructions import (
    OP_CLEAR_RANGE, OP_DECREMENT, OP_INCREMENT, OP_INPUT, OP_LOOP_END,
    OP_LOOP_START, OP_MOVE_LEFT, OP_MOVE_RIGHT, OP_OUTPUT, OP_SET_ZERO,
    OP_TRANSFER, LoopEnd, LoopStart, Program, Transfer,
)

logger = logging.getLogger(__name__)

TAPE_SIZE = 30000

# Kernel stop reasons
STOP_HALT = 0
STOP_IO = 1
STOP_OUT_OF_RANGE = 2


@dataclass(eq=False)
class Tape:
    """Byte cells plus the cursor. One Tape belongs to one execution."""

    size: int = TAPE_SIZE
    cells: np.ndarray = field(init=False, repr=False)
    cursor: int = 0

    def __post_init__(self) -> None:
        self.cells = np.zeros(self.size, dtype=np.uint8)

    def __getitem__(self, index: int) -> int:
        return int(self.cells[index])

    def __setitem__(self, index: int, value: int) -> None:
        self.cells[index] = value & 0xFF


@dataclass(frozen=True)
class EncodedProgram:
    """Program flattened into arrays the kernel can index."""

    ops: np.ndarray
    args: np.ndarray
    offsets: np.ndarray
    jumps: np.ndarray

    def __len__(self) -> int:
        return len(self.ops)


def build_jump_table(program: Program) -> List[int]:
    """
    Map every LoopStart index to its LoopEnd index and back.
    Other entries point at themselves.

    Raises:
        BracketError: if the Program's loops are unbalanced (offset is the
            instruction index).
    """
    table = list(range(len(program)))
    stack: List[int] = []
    for pc, ins in enumerate(program):
        if isinstance(ins, LoopStart):
            stack.append(pc)
        elif isinstance(ins, LoopEnd):
            if not stack:
                raise make_bracket_error(kind='close', offset=pc)
            start = stack.pop()
            table[start] = pc
            table[pc] = start
    if stack:
        raise make_bracket_error(kind='open', offset=stack[0])
    return table


def encode(program: Program) -> EncodedProgram:
    n = len(program)
    ops = np.empty(n, dtype=np.int64)
    args = np.zeros(n, dtype=np.int64)
    offsets = np.zeros(n, dtype=np.int64)
    for pc, ins in enumerate(program):
        ops[pc] = ins.opcode
        if isinstance(ins, Transfer):
            args[pc] = ins.factor
            offsets[pc] = ins.offset
        else:
            args[pc] = getattr(ins, 'count', 0)
    jumps = np.array(build_jump_table(program), dtype=np.int64)
    return EncodedProgram(ops=ops, args=args, offsets=offsets, jumps=jumps)


@njit(cache=True)
def _run_until_stop(ops, args, offsets, jumps, tape, pc, ptr):
    """
    Execute from ``pc`` until the program ends, an Output/Input needs the
    Python side, or a cell outside the tape is touched.

    Returns (stop_reason, pc, ptr). On STOP_IO and STOP_OUT_OF_RANGE ``pc``
    is the instruction that stopped and has not been executed.
    """
    size = len(tape)
    n = len(ops)

    while pc < n:
        op = ops[pc]

        if op == OP_MOVE_RIGHT:
            ptr += args[pc]
        elif op == OP_MOVE_LEFT:
            ptr -= args[pc]
        elif ptr < 0 or ptr >= size:
            # every remaining kind touches the current cell
            return STOP_OUT_OF_RANGE, pc, ptr
        elif op == OP_INCREMENT:
            tape[ptr] = (tape[ptr] + args[pc]) & 0xFF
        elif op == OP_DECREMENT:
            tape[ptr] = (tape[ptr] - args[pc]) & 0xFF
        elif op == OP_LOOP_START:
            if tape[ptr] == 0:
                pc = jumps[pc]
        elif op == OP_LOOP_END:
            if tape[ptr] != 0:
                pc = jumps[pc]
        elif op == OP_SET_ZERO:
            tape[ptr] = 0
        elif op == OP_CLEAR_RANGE:
            count = args[pc]
            if ptr + count > size:
                for j in range(size - ptr):
                    tape[ptr + j] = 0
                return STOP_OUT_OF_RANGE, pc, size
            for j in range(count):
                tape[ptr + j] = 0
            ptr += count
        elif op == OP_TRANSFER:
            value = tape[ptr]
            if value != 0:
                target = ptr + offsets[pc]
                if target < 0 or target >= size:
                    return STOP_OUT_OF_RANGE, pc, target
                tape[target] = (tape[target] + value * args[pc]) & 0xFF
                tape[ptr] = 0
        elif op == OP_OUTPUT or op == OP_INPUT:
            return STOP_IO, pc, ptr

        pc += 1

    return STOP_HALT, pc, ptr


def _read_cell(stdin: BinaryIO, count: int) -> int:
    # Each read overwrites the cell; end of input reads as 0.
    data = stdin.read(count)
    if len(data) < count:
        return 0
    return data[-1]


class Interpreter:
    """
    Runs a Program on a Tape.

    The jump table is built once up front. The execution loop is compiled by
    numba and hands control back here for every Output/Input instruction.
    """

    def __init__(self, program: Program):
        self.program = list(program)
        self.code = encode(self.program)

    def run(
        self,
        stdin: Optional[BinaryIO] = None,
        stdout: Optional[BinaryIO] = None,
        tape: Optional[Tape] = None,
    ) -> Tape:
        """
        Execute to completion and return the final tape.

        Raises:
            TapeError: a cell outside the tape was read or written.
        """
        if stdin is None:
            stdin = sys.stdin.buffer
        if stdout is None:
            stdout = sys.stdout.buffer
        if tape is None:
            tape = Tape()

        code = self.code
        pc, ptr = 0, tape.cursor
        logger.debug("executing %d instructions on a %d-cell tape", len(code), tape.size)
        try:
            while True:
                reason, pc, ptr = _run_until_stop(
                    code.ops, code.args, code.offsets, code.jumps, tape.cells, pc, ptr
                )
                if reason == STOP_HALT:
                    break
                if reason == STOP_OUT_OF_RANGE:
                    tape.cursor = int(ptr)
                    raise make_tape_error(pc=int(pc), cursor=int(ptr), tape_size=tape.size)

                count = int(code.args[pc])
                if code.ops[pc] == OP_OUTPUT:
                    stdout.write(bytes([int(tape.cells[ptr])]) * count)
                else:
                    tape.cells[ptr] = _read_cell(stdin, count)
                pc += 1
        finally:
            stdout.flush()

        tape.cursor = int(ptr)
        logger.debug("execution finished, cursor at %d", tape.cursor)
        return tape


def execute(
    program: Program,
    stdin: Optional[BinaryIO] = None,
    stdout: Optional[BinaryIO] = None,
    tape: Optional[Tape] = None,
) -> Tape:
    return Interpreter(program).run(stdin=stdin, stdout=stdout, tape=tape)

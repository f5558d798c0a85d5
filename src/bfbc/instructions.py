from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Iterable, List, Union


# ---------------- Opcodes (shared with the execution kernel) ----------------
OP_MOVE_RIGHT = 0
OP_MOVE_LEFT = 1
OP_INCREMENT = 2
OP_DECREMENT = 3
OP_OUTPUT = 4
OP_INPUT = 5
OP_LOOP_START = 6
OP_LOOP_END = 7
OP_SET_ZERO = 8
OP_CLEAR_RANGE = 9
OP_TRANSFER = 10


@dataclass(frozen=True)
class _Repeated:
    count: int = 1

    opcode: ClassVar[int]
    token: ClassVar[str]

    def __post_init__(self) -> None:
        if self.count < 1:
            raise ValueError(f"{type(self).__name__} count must be >= 1, got {self.count}")

    def __str__(self) -> str:
        return f"{self.token} {self.count}"


# ---------------- IR Nodes ----------------
@dataclass(frozen=True)
class MoveRight(_Repeated):
    opcode: ClassVar[int] = OP_MOVE_RIGHT
    token: ClassVar[str] = "INC_PTR"


@dataclass(frozen=True)
class MoveLeft(_Repeated):
    opcode: ClassVar[int] = OP_MOVE_LEFT
    token: ClassVar[str] = "DEC_PTR"


@dataclass(frozen=True)
class Increment(_Repeated):
    opcode: ClassVar[int] = OP_INCREMENT
    token: ClassVar[str] = "INC_VAL"


@dataclass(frozen=True)
class Decrement(_Repeated):
    opcode: ClassVar[int] = OP_DECREMENT
    token: ClassVar[str] = "DEC_VAL"


@dataclass(frozen=True)
class Output(_Repeated):
    opcode: ClassVar[int] = OP_OUTPUT
    token: ClassVar[str] = "OUTPUT"


@dataclass(frozen=True)
class Input(_Repeated):
    opcode: ClassVar[int] = OP_INPUT
    token: ClassVar[str] = "INPUT"


@dataclass(frozen=True)
class ClearRange(_Repeated):
    """Zero ``count`` cells starting at the cursor, then advance the cursor by ``count``."""

    opcode: ClassVar[int] = OP_CLEAR_RANGE
    token: ClassVar[str] = "CLEAR_RANGE"


@dataclass(frozen=True)
class LoopStart:
    opcode: ClassVar[int] = OP_LOOP_START
    token: ClassVar[str] = "LOOP_START"

    def __str__(self) -> str:
        return self.token


@dataclass(frozen=True)
class LoopEnd:
    opcode: ClassVar[int] = OP_LOOP_END
    token: ClassVar[str] = "LOOP_END"

    def __str__(self) -> str:
        return self.token


@dataclass(frozen=True)
class SetZero:
    opcode: ClassVar[int] = OP_SET_ZERO
    token: ClassVar[str] = "SET_ZERO"

    def __str__(self) -> str:
        return self.token


@dataclass(frozen=True)
class Transfer:
    """
    Add ``factor`` times the current cell into the cell ``offset`` positions away,
    then zero the current cell. Stands in for loops like ``[->+<]`` and ``[<-->-]``.
    """

    factor: int = 1
    offset: int = 1

    opcode: ClassVar[int] = OP_TRANSFER
    token: ClassVar[str] = "TRANSFER"

    def __post_init__(self) -> None:
        if self.factor == 0:
            raise ValueError("Transfer factor must be non-zero")
        if self.offset == 0:
            raise ValueError("Transfer offset must be non-zero")

    def __str__(self) -> str:
        return f"{self.token} {self.factor} {self.offset}"


Instruction = Union[
    MoveRight, MoveLeft, Increment, Decrement, Output, Input,
    LoopStart, LoopEnd, SetZero, ClearRange, Transfer,
]
Program = List[Instruction]

ARITHMETIC = (Increment, Decrement)
MOTION = (MoveRight, MoveLeft)


def signed_delta(ins: Instruction) -> int:
    """Net effect of an arithmetic or motion instruction (+n for Increment/MoveRight)."""
    if isinstance(ins, (Increment, MoveRight)):
        return ins.count
    if isinstance(ins, (Decrement, MoveLeft)):
        return -ins.count
    raise TypeError(f"{type(ins).__name__} has no signed delta")


def format_program(program: Iterable[Instruction]) -> str:
    """One token per instruction, space-separated, in program order."""
    return " ".join(str(ins) for ins in program)

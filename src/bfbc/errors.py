from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple


def _locate(source: str, offset: int) -> Tuple[int, int]:
    """1-based (line, column) of a character offset."""
    line = source.count('\n', 0, offset) + 1
    column = offset - (source.rfind('\n', 0, offset) + 1) + 1
    return line, column


def _build_context(lines: List[str], line_no_1: int, column: int, *, context: int = 2) -> str:
    idx = max(1, line_no_1)
    start = max(1, idx - context)
    end = min(len(lines), idx + context)

    out: List[str] = []
    for i in range(start, end + 1):
        prefix = '>' if i == idx else ' '
        out.append(f"{prefix} {i:4d} | {lines[i - 1]}")
        if i == idx:
            out.append(f"       | {' ' * (column - 1)}^")
    return "\n".join(out)


def _hint_for(kind: str) -> Optional[str]:
    if kind == 'open':
        return 'Every "[" needs a matching "]" later in the program.'
    if kind == 'close':
        return 'This "]" has no "[" before it. Remove it or add the missing "[".'
    return None


@dataclass
class BFError(Exception):
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class BracketError(BFError):
    offset: int
    kind: str
    line: int = 0
    column: int = 0
    context: str = ''


@dataclass
class TapeError(BFError):
    pc: int
    cursor: int
    tape_size: int


@dataclass
class SourceError(BFError):
    path: str


def make_bracket_error(*, kind: str, offset: int, source: Optional[str] = None) -> BracketError:
    """
    Build the unmatched-bracket error for ``kind`` ``'open'`` or ``'close'``.

    With ``source`` the offset is a character offset and the message gets a
    line/column and a context window. Without it the offset is an instruction
    index into a hand-built Program.
    """
    bracket = '[' if kind == 'open' else ']'
    if source is None:
        return BracketError(
            message=f"BracketError: unmatched '{bracket}' at instruction {offset}",
            offset=offset,
            kind=kind,
        )

    line, column = _locate(source, offset)
    ctx = _build_context(source.split('\n'), line, column)
    hint = _hint_for(kind)
    hint_block = f"\nHint: {hint}" if hint else ""
    return BracketError(
        message=(
            f"BracketError: unmatched '{bracket}' at position {offset} "
            f"(line {line}, column {column})\n{ctx}{hint_block}"
        ),
        offset=offset,
        kind=kind,
        line=line,
        column=column,
        context=ctx,
    )


def make_tape_error(*, pc: int, cursor: int, tape_size: int) -> TapeError:
    side = 'left of cell 0' if cursor < 0 else f'past cell {tape_size - 1}'
    return TapeError(
        message=f"TapeError: cursor {cursor} is {side} (instruction {pc})",
        pc=pc,
        cursor=cursor,
        tape_size=tape_size,
    )

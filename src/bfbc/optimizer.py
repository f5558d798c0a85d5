from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from .instructions import (
    ARITHMETIC, MOTION, ClearRange, Decrement, Increment, Instruction,
    LoopEnd, LoopStart, MoveLeft, MoveRight, Program, SetZero, Transfer,
    signed_delta,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_PASSES = 16

# Rewrite result: instructions to emit and how many input instructions they replace.
Match = Tuple[List[Instruction], int]


# ---------------- Folding ----------------
def _fold(program: Program, i: int, kinds: tuple, positive: type, negative: type) -> Match:
    """Collapse the maximal run of ``kinds`` starting at ``i`` into one signed instruction."""
    s = 0
    j = i
    while j < len(program) and isinstance(program[j], kinds):
        s += signed_delta(program[j])
        j += 1
    if s > 0:
        return [positive(s)], j - i
    if s < 0:
        return [negative(-s)], j - i
    return [], j - i


def fold_arithmetic(program: Program, i: int) -> Optional[Match]:
    if not isinstance(program[i], ARITHMETIC):
        return None
    return _fold(program, i, ARITHMETIC, Increment, Decrement)


def fold_motion(program: Program, i: int) -> Optional[Match]:
    if not isinstance(program[i], MOTION):
        return None
    return _fold(program, i, MOTION, MoveRight, MoveLeft)


# ---------------- Idioms ----------------
def match_zero_loop(program: Program, i: int) -> Optional[Match]:
    """``[-]`` (and ``[+]``, which wraps to zero as well) -> SetZero."""
    window = program[i:i + 3]
    if len(window) < 3:
        return None
    start, body, end = window
    if (isinstance(start, LoopStart) and isinstance(end, LoopEnd)
            and isinstance(body, ARITHMETIC) and body.count == 1):
        return [SetZero()], 3
    return None


def match_clear_range(program: Program, i: int) -> Optional[Match]:
    """
    Coalesce ``[-]>[-]>...`` into one ClearRange.

    Consumes SetZero, MoveRight(1) pairs and existing ClearRange instructions.
    A SetZero directly followed by another SetZero clears the same cell twice,
    so the first one is dropped. A lone SetZero or ClearRange is re-emitted.
    """
    if not isinstance(program[i], (SetZero, ClearRange)):
        return None

    n = len(program)
    j = i
    while j + 1 < n and isinstance(program[j], SetZero) and isinstance(program[j + 1], SetZero):
        j += 1

    total = 0
    pieces = 0
    while j < n:
        cur = program[j]
        if isinstance(cur, ClearRange):
            total += cur.count
            pieces += 1
            j += 1
        elif (isinstance(cur, SetZero) and j + 1 < n
              and program[j + 1] == MoveRight(1)):
            total += 1
            pieces += 1
            j += 2
        else:
            break

    if pieces >= 2:
        return [ClearRange(total)], j - i
    if pieces == 1 and isinstance(program[j - 1], ClearRange):
        return [program[j - 1]], j - i
    # single SetZero (possibly followed by a step we leave for the next scan position)
    first_kept = j if pieces == 0 else j - 2
    return [program[first_kept]], first_kept - i + 1


def _opposite_motions(a: Instruction, b: Instruction) -> Optional[int]:
    """Signed step ``k`` if ``a`` moves by k and ``b`` moves straight back."""
    if not (isinstance(a, MOTION) and isinstance(b, MOTION)):
        return None
    k = signed_delta(a)
    if signed_delta(b) != -k:
        return None
    return k


def match_transfer(program: Program, i: int) -> Optional[Match]:
    """
    ``[-  M(k) A(v) M(-k)]`` or ``[M(k) A(v) M(-k) -]`` -> Transfer(±v, k).

    ``M`` is a motion of k cells, ``A`` an increment or decrement of v.
    """
    window = program[i:i + 6]
    if len(window) < 6:
        return None
    if not (isinstance(window[0], LoopStart) and isinstance(window[5], LoopEnd)):
        return None

    if window[1] == Decrement(1):
        there, add, back = window[2:5]
    elif window[4] == Decrement(1):
        there, add, back = window[1:4]
    else:
        return None

    if not isinstance(add, ARITHMETIC):
        return None
    step = _opposite_motions(there, back)
    if step is None:
        return None
    return [Transfer(factor=signed_delta(add), offset=step)], 6


# Tried in order at every scan position; the first match wins.
RULES = (
    fold_arithmetic,
    fold_motion,
    match_zero_loop,
    match_clear_range,
    match_transfer,
)


# ---------------- Passes ----------------
def optimize_pass(program: Program) -> Program:
    """One left-to-right peephole pass. Returns a new list."""
    out: Program = []
    i = 0
    while i < len(program):
        for rule in RULES:
            m = rule(program, i)
            if m is not None:
                emitted, consumed = m
                out.extend(emitted)
                i += consumed
                break
        else:
            out.append(program[i])
            i += 1
    return out


def optimize(program: Program, max_passes: int = DEFAULT_MAX_PASSES) -> Program:
    """Run passes until one changes nothing, or ``max_passes`` is reached."""
    cur = list(program)
    for n in range(1, max_passes + 1):
        nxt = optimize_pass(cur)
        logger.debug("optimizer pass %d: %d -> %d instructions", n, len(cur), len(nxt))
        if nxt == cur:
            return nxt
        cur = nxt
    logger.debug("optimizer stopped after %d passes without reaching a fixed point", max_passes)
    return cur

#!/usr/bin/env python3
"""
Tests for the peephole optimizer: folds, idioms, rule order and fixed point.
"""

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'src'))

from bfbc import compile_source, optimize, optimize_pass
from bfbc.instructions import (
    ClearRange, Decrement, Increment, LoopEnd, LoopStart, MoveLeft,
    MoveRight, Output, SetZero, Transfer,
)

HELLO = (
    "++++++++[>++++[>++>+++>+++>+<<<<-]>+>+>->>+[<]<-]"
    ">>.>---.+++++++..+++.>>.<-.<.+++.------.--------.>>+.>++."
)


def opt(source):
    return optimize(compile_source(source))


def test_arithmetic_fold():
    assert optimize_pass([Increment(3), Decrement(1), Increment(2)]) == [Increment(4)]
    assert optimize_pass([Increment(1), Decrement(5)]) == [Decrement(4)]


def test_cancelling_fold_is_dropped():
    assert opt("+++---") == []
    assert opt("+ + -- ") == []
    assert opt("><") == []
    assert opt(">.<>") == [MoveRight(1), Output(1)]


def test_motion_fold():
    assert optimize_pass([MoveRight(2), MoveLeft(5), MoveRight(1)]) == [MoveLeft(2)]


def test_folds_do_not_cross_kinds():
    program = [Increment(1), MoveRight(1), Decrement(1), MoveLeft(1)]
    assert optimize_pass(program) == program


def test_zero_loop_from_split_source():
    assert opt("[ - ]") == [SetZero()]
    assert optimize_pass([LoopStart(), Decrement(1), LoopEnd()]) == [SetZero()]


def test_plus_zero_loop():
    assert opt("[+]") == [SetZero()]


def test_wider_zero_loop_is_kept():
    assert opt("[--]") == [LoopStart(), Decrement(2), LoopEnd()]


def test_zero_loop_exposed_by_fold():
    # "[+--]" only becomes a clear loop once the body is folded
    assert opt("[+--]") == [SetZero()]


def test_clear_range():
    assert opt("[-]>[-]>[-]>") == [ClearRange(3)]
    assert opt("[-]>[-]>[-]") == [ClearRange(2), SetZero()]


def test_single_set_zero_reemitted():
    assert opt("[-]>+") == [SetZero(), MoveRight(1), Increment(1)]
    assert optimize_pass([ClearRange(4)]) == [ClearRange(4)]


def test_duplicate_set_zero_collapses():
    assert opt("[-][-][-]") == [SetZero()]
    assert opt("[-][-]>[-]>") == [ClearRange(2)]


def test_clear_range_needs_single_steps():
    assert opt("[-]>>[-]>>") == [SetZero(), MoveRight(2), SetZero(), MoveRight(2)]


def test_clear_range_absorbs_neighbours():
    assert optimize_pass([ClearRange(2), SetZero(), MoveRight(1)]) == [ClearRange(3)]
    assert optimize_pass([SetZero(), MoveRight(1), ClearRange(2)]) == [ClearRange(3)]


def test_transfer_idiom():
    assert opt("[->+<]") == [Transfer(factor=1, offset=1)]
    assert opt("[>+<-]") == [Transfer(factor=1, offset=1)]
    assert opt("[-<<+++>>]") == [Transfer(factor=3, offset=-2)]
    assert opt("[->--<]") == [Transfer(factor=-2, offset=1)]


def test_transfer_requires_return_to_source():
    program = opt("[->+<<]")
    assert not any(isinstance(ins, Transfer) for ins in program)


def test_transfer_inside_outer_loop():
    assert opt("+[[->+<]>]") == [
        Increment(1), LoopStart(), Transfer(1, 1), MoveRight(1), LoopEnd(),
    ]


def test_fold_wins_over_idiom_at_same_position():
    # the leading run is folded first, the loop is matched at the next position
    assert opt("++-[-]") == [Increment(1), SetZero()]


def test_pass_returns_new_list():
    program = compile_source("+++[->+<]")
    snapshot = list(program)
    optimize_pass(program)
    assert program == snapshot


def test_idempotent_at_fixed_point():
    for source in [HELLO, "[-]>[-]>[-]", "+[->+<]>.[ - ]", ",[.,]", "><+-"]:
        fixed = opt(source)
        assert optimize_pass(fixed) == fixed
        assert optimize(fixed) == fixed


def test_pass_budget():
    program = compile_source("[ - ]>[ - ]>")
    assert optimize(program, max_passes=1) == [SetZero(), MoveRight(1), SetZero(), MoveRight(1)]
    assert optimize(program) == [ClearRange(2)]


def test_hello_world_has_no_windows():
    # the canonical program has nothing to fold or match
    first = compile_source(HELLO)
    fixed = optimize(first)
    assert fixed == first
    assert optimize_pass(fixed) == fixed


def test_idioms_shrink_program():
    first = compile_source(HELLO + "[-]>[-]>[ - ]>[->+<]")
    fixed = optimize(first)
    assert len(fixed) < len(first)
    assert fixed[-2:] == [ClearRange(3), Transfer(1, 1)]
    assert sum(isinstance(ins, (LoopStart, LoopEnd)) for ins in fixed) % 2 == 0

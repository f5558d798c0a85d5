#!/usr/bin/env python3
"""
Tests for the bfbc command line and the file-reading api.
"""

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'src'))

import pytest

from bfbc import SourceError, compile_file, read_source
from bfbc.cli import main
from bfbc.instructions import SetZero, Transfer


def write_program(tmp_path, text):
    path = tmp_path / "program.bf"
    path.write_text(text)
    return str(path)


def test_execute(tmp_path, capsys):
    assert main([write_program(tmp_path, "+" * 72 + ".+.")]) == 0
    assert capsys.readouterr().out == "HI"


def test_print_bytecode(tmp_path, capsys):
    assert main(["-c", write_program(tmp_path, "+++[->+<]>.")]) == 0
    assert capsys.readouterr().out == "INC_VAL 3 TRANSFER 1 1 INC_PTR 1 OUTPUT 1\n"


def test_print_bytecode_unoptimized(tmp_path, capsys):
    assert main(["-c", "-O0", write_program(tmp_path, "[->+<]")]) == 0
    assert capsys.readouterr().out == (
        "LOOP_START DEC_VAL 1 INC_PTR 1 INC_VAL 1 DEC_PTR 1 LOOP_END\n"
    )


def test_reference_mode(tmp_path, capsys):
    assert main(["--reference", write_program(tmp_path, "+" * 33 + ".")]) == 0
    assert capsys.readouterr().out == "!"


def test_unmatched_bracket_exit_status(tmp_path, capsys):
    assert main([write_program(tmp_path, "+[[]")]) == 1
    err = capsys.readouterr().err
    assert "unmatched '[' at position 1" in err


def test_tape_error_exit_status(tmp_path, capsys):
    assert main(["--tape-size", "2", write_program(tmp_path, ">>+")]) == 1
    assert "TapeError" in capsys.readouterr().err


def test_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "nope.bf")]) == 1
    assert "SourceError" in capsys.readouterr().err


def test_bad_passes(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main(["--passes", "0", write_program(tmp_path, "+")])
    assert exc.value.code == 2


def test_compile_file(tmp_path):
    result = compile_file(write_program(tmp_path, "[-]\n[->+<]"))
    assert result.program == [SetZero(), Transfer(1, 1)]
    assert result.unoptimized_length == 7
    assert result.source_length == 10


def test_read_source_errors(tmp_path):
    with pytest.raises(SourceError) as exc:
        read_source(tmp_path / "missing.bf")
    assert exc.value.path.endswith("missing.bf")


def test_reference_rejects_bytecode_dump(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main(["-c", "--reference", write_program(tmp_path, "+")])
    assert exc.value.code == 2

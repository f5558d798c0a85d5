from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional

from .compiler import compile_source
from .errors import SourceError
from .instructions import Program
from .interpreter import TAPE_SIZE, Tape, execute
from .optimizer import DEFAULT_MAX_PASSES, optimize


@dataclass(frozen=True)
class CompileOptions:
    optimize: bool = True
    max_passes: int = DEFAULT_MAX_PASSES
    tape_size: int = TAPE_SIZE


@dataclass(frozen=True)
class CompileResult:
    program: Program
    unoptimized_length: int
    source_length: int


def read_source(path: str | Path, *, encoding: str = "utf-8") -> str:
    """Read program text from ``path``, or from standard input when it is ``-``."""
    if str(path) == "-":
        return sys.stdin.read()
    p = Path(path)
    try:
        # read through open() so pipes such as /dev/fd/63 are read to EOF
        with open(p, "r", encoding=encoding, errors="replace") as f:
            return f.read()
    except OSError as e:
        raise SourceError(message=f"SourceError: cannot read {p}: {e.strerror}", path=str(p)) from e


def compile_string(source: str, *, options: Optional[CompileOptions] = None) -> CompileResult:
    opts = options or CompileOptions()
    program = compile_source(source)
    first_pass = len(program)
    if opts.optimize:
        program = optimize(program, max_passes=opts.max_passes)
    return CompileResult(program=program, unoptimized_length=first_pass, source_length=len(source))


def compile_file(path: str | Path, *, options: Optional[CompileOptions] = None, encoding: str = "utf-8") -> CompileResult:
    return compile_string(read_source(path, encoding=encoding), options=options)


def run_string(
    source: str,
    *,
    stdin: Optional[BinaryIO] = None,
    stdout: Optional[BinaryIO] = None,
    options: Optional[CompileOptions] = None,
) -> Tape:
    opts = options or CompileOptions()
    result = compile_string(source, options=opts)
    return execute(result.program, stdin=stdin, stdout=stdout, tape=Tape(opts.tape_size))

from .api import CompileOptions, CompileResult, compile_file, compile_string, read_source, run_string
from .compiler import compile_source
from .errors import BFError, BracketError, SourceError, TapeError
from .instructions import format_program
from .interpreter import Interpreter, Tape, execute
from .optimizer import optimize, optimize_pass
from .reference import run_reference

__all__ = [
    'compile_source',
    'optimize',
    'optimize_pass',
    'format_program',
    'Interpreter',
    'Tape',
    'execute',
    'run_reference',
    'BFError',
    'BracketError',
    'SourceError',
    'TapeError',
    'CompileOptions',
    'CompileResult',
    'compile_string',
    'compile_file',
    'read_source',
    'run_string',
]

# Parseon language package
# This package provides a parser and interpreter for the Parseon language.
from .interpreter import run, run_program, parse_program, tokenize, Interpreter, RunResult, Deadline
from .errors import ParseonError, LexError, ParseError, ScriptRuntimeError

__all__ = [
    'run',
    'run_program',
    'parse_program',
    'tokenize',
    'Interpreter',
    'RunResult',
    'Deadline',
    'ParseonError',
    'LexError',
    'ParseError',
    'ScriptRuntimeError',
]

from dataclasses import dataclass
from typing import Any, Dict


class ParseonError(Exception):
    """Base class for every error a Parseon run can stop with."""
    kind = 'Error'

    def __init__(self, line: int, message: str):
        super().__init__(f"{self.kind} at line {line}: {message}")
        self.line = line
        self.message = message

    def to_obj(self) -> Dict[str, Any]:
        return {'kind': self.kind, 'line': self.line, 'message': self.message}


class LexError(ParseonError):
    """Raised by the lexer on unknown characters and unterminated text."""
    kind = 'LexError'

    def __init__(self, line: int, message: str, char: str = ''):
        super().__init__(line, message)
        self.char = char


class ParseError(ParseonError):
    """Raised by the parser on the first malformed construct."""
    kind = 'ParseError'

    def __init__(self, line: int, message: str, lexeme: str = ''):
        super().__init__(line, message)
        self.lexeme = lexeme


class ScriptRuntimeError(ParseonError):
    """Raised by the evaluator; terminal for the current run."""
    kind = 'RuntimeError'


@dataclass
class BreakSignal:
    """Returned (not raised) up the block stack by a break statement."""
    line: int


@dataclass
class ContinueSignal:
    """Returned (not raised) up the block stack by a continue statement."""
    line: int

"""Interpreter and compiler for the Parseon language.

This module implements the complete Parseon toolchain: a tokenizer, a
recursive-descent parser producing an AST, and an interpreter that
evaluates Parseon programs. ``run`` ties the three together and is the
single entry point used by callers such as the CLI or a web service.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union
import math

from .std.io import BasicIO
from .std.math import populate_math_builtins
from .types import (
    is_number, is_text, is_boolean, same_kind, type_name, to_string, parse_input_value,
)
from .ast import (
    Program, Block, VarDecl, Assign, SayStmt, ShowStmt, AskStmt, Branch,
    IfStmt, RangeLoop, WhileLoop, BreakStmt, ContinueStmt,
    NumberLit, TextLit, BoolLit, Ident, UnaryOp, BinaryOp, Call, Node
)
from .errors import (
    ParseonError, LexError, ParseError, ScriptRuntimeError, BreakSignal, ContinueSignal,
)
from .environment import Environment

###############################################################################
# Tokenizer
###############################################################################

KEYWORDS = frozenset({
    'set', 'change', 'keep', 'say', 'show', 'ask', 'when', 'check',
    'otherwise', 'do', 'end', 'loop', 'repeat', 'to', 'break', 'continue',
    'true', 'false', 'and', 'or', 'not',
})

TWO_CHAR_OPS = {'==', '!=', '<=', '>='}
SINGLE_OPS = {'=', '<', '>', '+', '-', '*', '/', '%', '(', ')'}
PUNCTUATION = {',', ';'}


class TokenType(Enum):
    KEYWORD = 'keyword'
    NAME = 'name'
    NUMBER = 'number'
    TEXT = 'text'
    OPERATOR = 'operator'
    PUNCT = 'punctuation'
    EOF = 'end of input'


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: str
    line: int
    column: int


def tokenize(source: str) -> List[Token]:
    """Convert source code into a list of tokens ending with an EOF token.

    Whitespace and ``#`` comments are skipped. Number lexemes are kept as
    text; the parser converts them. Text literals are taken raw up to the
    closing quote and may span lines. The minus sign is always a separate
    operator; negative numbers are parsed by the unary expression handler.
    """
    tokens: List[Token] = []
    i = 0
    line = 1
    col = 1
    length = len(source)

    def advance(n: int = 1):
        nonlocal i, col, line
        for _ in range(n):
            if i < length and source[i] == '\n':
                line += 1
                col = 1
            else:
                col += 1
            i += 1

    def is_digit(ch: str) -> bool:
        return '0' <= ch <= '9'

    while i < length:
        c = source[i]
        # Skip whitespace
        if c.isspace():
            advance()
            continue
        # Line comment
        if c == '#':
            while i < length and source[i] != '\n':
                advance()
            continue
        # Identifiers or keywords
        if c.isalpha() or c == '_':
            start_col = col
            start_i = i
            while i < length and (source[i].isalnum() or source[i] == '_'):
                advance()
            value = source[start_i:i]
            kind = TokenType.KEYWORD if value in KEYWORDS else TokenType.NAME
            tokens.append(Token(kind, value, line, start_col))
            continue
        # Numbers: digits with an optional single fractional part
        if is_digit(c):
            start_col = col
            start_i = i
            while i < length and is_digit(source[i]):
                advance()
            if i + 1 < length and source[i] == '.' and is_digit(source[i + 1]):
                advance()
                while i < length and is_digit(source[i]):
                    advance()
            tokens.append(Token(TokenType.NUMBER, source[start_i:i], line, start_col))
            continue
        # Text literal
        if c == '"':
            start_line = line
            start_col = col
            advance()  # skip opening quote
            start_i = i
            while i < length and source[i] != '"':
                advance()
            if i >= length:
                raise LexError(start_line, 'unterminated text literal', '"')
            value = source[start_i:i]
            advance()  # skip closing quote
            tokens.append(Token(TokenType.TEXT, value, start_line, start_col))
            continue
        # Multi-character operators
        if i + 1 < length:
            pair = source[i:i + 2]
            if pair in TWO_CHAR_OPS:
                tokens.append(Token(TokenType.OPERATOR, pair, line, col))
                advance(2)
                continue
        # Single-character operators and punctuation
        if c in SINGLE_OPS:
            tokens.append(Token(TokenType.OPERATOR, c, line, col))
            advance()
            continue
        if c in PUNCTUATION:
            tokens.append(Token(TokenType.PUNCT, c, line, col))
            advance()
            continue
        raise LexError(line, f"unexpected character {c!r}", c)
    tokens.append(Token(TokenType.EOF, '', line, col))
    return tokens


###############################################################################
# Parser implementation
###############################################################################

IF_KEYWORDS = ('when', 'check')
BLOCK_TERMINATORS = ('end', 'otherwise')


def describe(token: Token) -> str:
    if token.type == TokenType.EOF:
        return 'end of input'
    if token.type == TokenType.TEXT:
        return f'"{token.value}"'
    return f"'{token.value}'"


class Parser:
    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0

    def peek(self, offset: int = 0) -> Token:
        index = min(self.pos + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def error(self, token: Token, message: str) -> ParseError:
        return ParseError(token.line, message, token.value)

    def match(self, expected: Union[str, TokenType, List[str]], offset: int = 0) -> bool:
        """Check the upcoming token without consuming it.

        Strings are compared against the lexeme of keyword, operator and
        punctuation tokens only, so a text literal reading ``"end"`` never
        matches the ``end`` keyword.
        """
        token = self.peek(offset)
        if isinstance(expected, TokenType):
            return token.type == expected
        if token.type not in (TokenType.KEYWORD, TokenType.OPERATOR, TokenType.PUNCT):
            return False
        if isinstance(expected, list):
            return token.value in expected
        return token.value == expected

    def consume(self, expected: Union[str, TokenType, List[str]]) -> Token:
        token = self.peek()
        if not self.match(expected):
            if isinstance(expected, TokenType):
                wanted = expected.value
            elif isinstance(expected, list):
                wanted = ' or '.join(f"'{e}'" for e in expected)
            else:
                wanted = f"'{expected}'"
            raise self.error(token, f"expected {wanted}, got {describe(token)}")
        self.pos += 1
        return token

    def parse_program(self) -> Program:
        try:
            statements = self.parse_statements(())
        except RecursionError:
            raise self.error(self.peek(), 'expression too deeply nested') from None
        token = self.peek()
        if token.type != TokenType.EOF:
            raise self.error(token, f"unexpected token {describe(token)}")
        return Program(statements)

    def parse_statements(self, terminators) -> List[Node]:
        statements: List[Node] = []
        while True:
            # stray semicolons separate statements
            if self.match(';'):
                self.consume(';')
                continue
            if self.match(TokenType.EOF) or self.match(list(terminators)):
                return statements
            statements.append(self.parse_statement())

    def parse_block(self, terminators) -> Block:
        block = Block(self.parse_statements(terminators))
        token = self.peek()
        if token.type == TokenType.EOF:
            expected = ' or '.join(f"'{t}'" for t in terminators)
            raise self.error(token, f"unexpected end of input, expected {expected}")
        return block

    def parse_statement(self) -> Node:
        token = self.peek()
        if self.match(['set', 'keep']):
            return self.parse_var_decl()
        if self.match('change'):
            keyword = self.consume('change')
            return self.parse_assign(keyword.line)
        if token.type == TokenType.NAME:
            return self.parse_assign(token.line)
        if self.match('say'):
            self.consume('say')
            return SayStmt(self.parse_expression(), token.line)
        if self.match('show'):
            self.consume('show')
            return ShowStmt(self.parse_expression(), token.line)
        if self.match('ask'):
            self.consume('ask')
            name_token = self.consume(TokenType.NAME)
            return AskStmt(name_token.value, token.line)
        if self.match(list(IF_KEYWORDS)):
            return self.parse_if_stmt()
        if self.match('loop'):
            return self.parse_range_loop()
        if self.match('repeat'):
            return self.parse_while_loop()
        if self.match('break'):
            self.consume('break')
            return BreakStmt(token.line)
        if self.match('continue'):
            self.consume('continue')
            return ContinueStmt(token.line)
        raise self.error(token, f"unexpected token {describe(token)}")

    def parse_var_decl(self) -> VarDecl:
        keyword = self.consume(['set', 'keep'])
        name_token = self.consume(TokenType.NAME)
        self.consume('=')
        expr = self.parse_expression()
        return VarDecl(name_token.value, expr, keyword.value == 'keep', keyword.line)

    def parse_assign(self, line: int) -> Assign:
        name_token = self.consume(TokenType.NAME)
        self.consume('=')
        value = self.parse_expression()
        return Assign(name_token.value, value, line)

    def parse_if_stmt(self) -> IfStmt:
        keyword = self.consume(list(IF_KEYWORDS))
        branches: List[Branch] = [self.parse_branch(keyword)]
        else_block: Optional[Block] = None
        while self.match('otherwise'):
            self.consume('otherwise')
            if self.match(list(IF_KEYWORDS)):
                branches.append(self.parse_branch(self.consume(list(IF_KEYWORDS))))
                continue
            else_block = self.parse_block(('end',))
            break
        self.consume('end')
        return IfStmt(branches, else_block, keyword.line)

    def parse_branch(self, keyword: Token) -> Branch:
        condition = self.parse_expression()
        self.consume('do')
        block = self.parse_block(BLOCK_TERMINATORS)
        return Branch(condition, block, keyword.line)

    def parse_range_loop(self) -> RangeLoop:
        keyword = self.consume('loop')
        var_token = self.consume(TokenType.NAME)
        self.consume('=')
        start = self.parse_expression()
        self.consume('to')
        end = self.parse_expression()
        self.consume('do')
        body = self.parse_block(('end',))
        self.consume('end')
        return RangeLoop(var_token.value, start, end, body, keyword.line)

    def parse_while_loop(self) -> WhileLoop:
        keyword = self.consume('repeat')
        self.consume('(')
        condition = self.parse_expression()
        self.consume(')')
        self.consume('do')
        body = self.parse_block(('end',))
        self.consume('end')
        return WhileLoop(condition, body, keyword.line)

    # Expression parsing (precedence climbing, lowest level first)
    def parse_expression(self) -> Node:
        return self.parse_or()

    def parse_binary(self, operators: List[str], operand: Callable[[], Node]) -> Node:
        node = operand()
        while self.match(operators):
            op_token = self.consume(operators)
            right = operand()
            node = BinaryOp(op_token.value, node, right, node.line)
        return node

    def parse_or(self) -> Node:
        return self.parse_binary(['or'], self.parse_and)

    def parse_and(self) -> Node:
        return self.parse_binary(['and'], self.parse_not)

    def parse_not(self) -> Node:
        if self.match('not'):
            op_token = self.consume('not')
            return UnaryOp('not', self.parse_not(), op_token.line)
        return self.parse_equality()

    def parse_equality(self) -> Node:
        return self.parse_binary(['==', '!='], self.parse_comparison)

    def parse_comparison(self) -> Node:
        return self.parse_binary(['<', '<=', '>', '>='], self.parse_term)

    def parse_term(self) -> Node:
        return self.parse_binary(['+', '-'], self.parse_factor)

    def parse_factor(self) -> Node:
        return self.parse_binary(['*', '/', '%'], self.parse_unary)

    def parse_unary(self) -> Node:
        if self.match('-'):
            op_token = self.consume('-')
            return UnaryOp('-', self.parse_unary(), op_token.line)
        return self.parse_primary()

    def parse_primary(self) -> Node:
        token = self.peek()
        if token.type == TokenType.NUMBER:
            self.pos += 1
            return NumberLit(float(token.value), token.line)
        if token.type == TokenType.TEXT:
            self.pos += 1
            return TextLit(token.value, token.line)
        if self.match(['true', 'false']):
            self.pos += 1
            return BoolLit(token.value == 'true', token.line)
        if token.type == TokenType.NAME:
            self.pos += 1
            if self.match('('):
                return Call(token.value, self.parse_arguments(), token.line)
            return Ident(token.value, token.line)
        if self.match('('):  # grouping parentheses
            self.consume('(')
            expr = self.parse_expression()
            self.consume(')')
            return expr
        raise self.error(token, f"unexpected token {describe(token)} in expression")

    def parse_arguments(self) -> List[Node]:
        self.consume('(')
        args: List[Node] = []
        if not self.match(')'):
            args.append(self.parse_expression())
            while self.match(','):
                self.consume(',')
                args.append(self.parse_expression())
        self.consume(')')
        return args


def parse_program(source: str) -> Program:
    """Parse the given source code into a Program AST using the custom parser."""
    tokens = tokenize(source)
    parser = Parser(tokens)
    return parser.parse_program()


###############################################################################
# Interpreter implementation
###############################################################################

ARITHMETIC_OPS = {'+', '-', '*', '/', '%'}
COMPARISON_OPS = {'==', '!=', '<', '<=', '>', '>='}

Signal = Optional[Union[BreakSignal, ContinueSignal]]


class Deadline:
    """Cancellation signal that trips once a wall-clock budget is spent."""
    def __init__(self, seconds: float):
        self.expires = time.monotonic() + seconds

    def is_set(self) -> bool:
        return time.monotonic() >= self.expires


class Interpreter:
    """Core interpreter that executes a Parseon AST."""
    def __init__(self, io: Optional[BasicIO] = None, cancel: Optional[Any] = None,
                 debug_level: int = 0, debug_file: str = 'debug.txt'):
        self.env = Environment()
        self.io = io if io is not None else BasicIO()
        self.cancel = cancel
        self.builtins = populate_math_builtins()
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w') if debug_level > 0 else None

    @property
    def output(self) -> List[str]:
        return self.io.output

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    # Public API
    def run(self, program: Program) -> None:
        self.debug(f"run: {len(program.body)} top-level statements")
        try:
            signal = self.execute_block(program.body)
            if isinstance(signal, BreakSignal):
                raise ScriptRuntimeError(signal.line, "'break' outside of loop")
            if isinstance(signal, ContinueSignal):
                raise ScriptRuntimeError(signal.line, "'continue' outside of loop")
            self.debug(f"run: finished, {len(self.output)} output lines")
        except ParseonError as e:
            self.debug(f"run: stopped by {e}")
            raise
        finally:
            if self.debug_fp:
                self.debug_fp.close()
                self.debug_fp = None

    def check_cancelled(self, line: int):
        if self.cancel is not None and self.cancel.is_set():
            raise ScriptRuntimeError(line, 'execution cancelled')

    def execute_block(self, statements: List[Node]) -> Signal:
        for stmt in statements:
            self.check_cancelled(stmt.line)
            try:
                signal = self.execute(stmt)
            except RecursionError:
                raise ScriptRuntimeError(stmt.line, 'expression too deeply nested') from None
            # propagate break/continue to the enclosing loop
            if signal is not None:
                return signal
        return None

    def execute(self, node: Node) -> Signal:
        if isinstance(node, VarDecl):
            value = self.evaluate(node.expr)
            self.env.declare(node.name, value, node.is_const, node.line)
            if self.debug_level >= 2:
                kind = 'keep' if node.is_const else 'set'
                self.debug(f"{kind} {node.name}: {type_name(value)} = {to_string(value)}")
            return None
        if isinstance(node, Assign):
            value = self.evaluate(node.value)
            self.env.assign(node.name, value, node.line)
            if self.debug_level >= 2:
                self.debug(f"change {node.name}: {type_name(value)} = {to_string(value)}")
            return None
        if isinstance(node, (SayStmt, ShowStmt)):
            value = self.evaluate(node.expr)
            self.io.write_line(to_string(value))
            return None
        if isinstance(node, AskStmt):
            text = self.io.read_line()
            if text is None:
                # a wait cut short by cancellation is not missing input
                self.check_cancelled(node.line)
                raise ScriptRuntimeError(node.line, 'no input available')
            value = parse_input_value(text)
            self.env.bind_mutable(node.name, value, node.line)
            if self.debug_level >= 2:
                self.debug(f"ask {node.name}: {type_name(value)} = {to_string(value)}")
            return None
        if isinstance(node, IfStmt):
            for branch in node.branches:
                if self.evaluate_condition(branch.condition):
                    if self.debug_level >= 3:
                        self.debug(f"line {branch.line}: branch taken")
                    return self.execute_block(branch.block.statements)
            if node.else_block is not None:
                if self.debug_level >= 3:
                    self.debug(f"line {node.line}: else branch taken")
                return self.execute_block(node.else_block.statements)
            return None
        if isinstance(node, RangeLoop):
            return self.execute_range_loop(node)
        if isinstance(node, WhileLoop):
            while True:
                self.check_cancelled(node.line)
                if not self.evaluate_condition(node.condition):
                    break
                if self.debug_level >= 3:
                    self.debug(f"line {node.line}: repeat iteration")
                signal = self.execute_block(node.body.statements)
                if isinstance(signal, BreakSignal):
                    break
            return None
        if isinstance(node, BreakStmt):
            return BreakSignal(node.line)
        if isinstance(node, ContinueStmt):
            return ContinueSignal(node.line)
        # catch any other nodes
        raise NotImplementedError(f"execute: unexpected node type {type(node)}")

    def execute_range_loop(self, node: RangeLoop) -> Signal:
        start = self.evaluate(node.start)
        end = self.evaluate(node.end)
        if not (is_number(start) and is_number(end)):
            raise ScriptRuntimeError(node.line, 'loop bounds must be numbers')
        counter = start
        while counter <= end:
            self.check_cancelled(node.line)
            self.env.bind_mutable(node.var, counter, node.line)
            if self.debug_level >= 3:
                self.debug(f"line {node.line}: loop {node.var} = {to_string(counter)}")
            signal = self.execute_block(node.body.statements)
            if isinstance(signal, BreakSignal):
                break
            counter += 1.0
        return None

    def evaluate_condition(self, node: Node) -> bool:
        value = self.evaluate(node)
        if not is_boolean(value):
            raise ScriptRuntimeError(node.line, 'condition must be boolean')
        return value

    def evaluate(self, node: Node) -> Any:
        # Evaluate expression nodes
        if isinstance(node, (NumberLit, TextLit, BoolLit)):
            return node.value
        if isinstance(node, Ident):
            return self.env.get(node.name, node.line)
        if isinstance(node, UnaryOp):
            operand = self.evaluate(node.operand)
            if node.op == 'not':
                if not is_boolean(operand):
                    raise ScriptRuntimeError(node.line, 'logical operator requires boolean operands')
                return not operand
            if node.op == '-':
                if not is_number(operand):
                    raise ScriptRuntimeError(node.line, 'type mismatch in arithmetic')
                return -operand
            raise ScriptRuntimeError(node.line, f'unsupported unary operator {node.op}')
        if isinstance(node, BinaryOp):
            # Walk the left spine of a chain like 1 + 2 + ... + n iteratively
            chain: List[BinaryOp] = []
            while isinstance(node, BinaryOp):
                chain.append(node)
                node = node.left
            value = self.evaluate(node)
            for op_node in reversed(chain):
                value = self.combine(op_node, value)
            return value
        if isinstance(node, Call):
            args = [self.evaluate(arg) for arg in node.args]
            return self.call_builtin(node.name, args, node.line)
        raise NotImplementedError(f"evaluate: unexpected node type {type(node)}")

    def combine(self, node: BinaryOp, left: Any) -> Any:
        """Apply ``node`` to its already evaluated left operand."""
        # Short-circuit for and/or
        if node.op in ('and', 'or'):
            if not is_boolean(left):
                raise ScriptRuntimeError(node.line, 'logical operator requires boolean operands')
            if node.op == 'and' and not left:
                return False
            if node.op == 'or' and left:
                return True
            right = self.evaluate(node.right)
            if not is_boolean(right):
                raise ScriptRuntimeError(node.line, 'logical operator requires boolean operands')
            return right
        right = self.evaluate(node.right)
        return self.apply_binary_op(node.op, left, right, node.line)

    def call_builtin(self, name: str, args: List[Any], line: int) -> Any:
        func = self.builtins.get(name)
        if func is None:
            raise ScriptRuntimeError(line, f"unknown function '{name}'")
        if len(args) != func.arity:
            plural = 'argument' if func.arity == 1 else 'arguments'
            raise ScriptRuntimeError(line, f"function '{name}' expects {func.arity} {plural}, got {len(args)}")
        if not all(is_number(a) for a in args):
            raise ScriptRuntimeError(line, f"function '{name}' expects number arguments")
        try:
            return func.fn(args)
        except (ValueError, OverflowError) as e:
            raise ScriptRuntimeError(line, str(e))

    def apply_binary_op(self, op: str, a: Any, b: Any, line: int) -> Any:
        if op in ARITHMETIC_OPS:
            # Text concatenation; the language never stringifies implicitly
            if op == '+' and is_text(a) and is_text(b):
                return a + b
            if not (is_number(a) and is_number(b)):
                raise ScriptRuntimeError(line, 'type mismatch in arithmetic')
            if op in ('/', '%') and b == 0.0:
                raise ScriptRuntimeError(line, 'division by zero')
            if op == '+':
                result = a + b
            elif op == '-':
                result = a - b
            elif op == '*':
                result = a * b
            elif op == '/':
                result = a / b
            else:
                try:
                    result = math.fmod(a, b)
                except ValueError:
                    raise ScriptRuntimeError(line, 'numeric overflow') from None
            # floats saturate to inf/nan instead of raising
            if math.isinf(result) or math.isnan(result):
                raise ScriptRuntimeError(line, 'numeric overflow')
            return result
        if op in COMPARISON_OPS:
            if not same_kind(a, b):
                raise ScriptRuntimeError(line, 'type mismatch in comparison')
            if op == '==': return a == b
            if op == '!=': return a != b
            if op == '<': return a < b
            if op == '<=': return a <= b
            if op == '>': return a > b
            if op == '>=': return a >= b
        raise ScriptRuntimeError(line, f'unknown operator {op}')


###############################################################################
# Entry point
###############################################################################


@dataclass
class RunResult:
    """Outcome of ``run``: the output produced and the error, if any."""
    output: List[str] = field(default_factory=list)
    error: Optional[ParseonError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_obj(self) -> Dict[str, Any]:
        return {
            'success': self.ok,
            'output': list(self.output),
            'error': self.error.to_obj() if self.error is not None else None,
        }


def run(source: str, input_source: Optional[Any] = None, cancel: Optional[Any] = None, *,
        use_lark: bool = False, input_timeout: Optional[float] = None,
        echo: Optional[Callable[[str], Any]] = None, debug_level: int = 0) -> RunResult:
    """Compile and run a Parseon program from source text.

    ``input_source`` supplies one line per ``ask`` (an iterable of lines, a
    string split on newlines, or a ``queue.Queue``). ``cancel`` is any object
    with an ``is_set()`` method and is polled before every statement and
    loop iteration. Errors are returned in the result, never raised.
    """
    io = BasicIO(input_source, echo=echo, input_timeout=input_timeout, cancel=cancel)
    try:
        if use_lark:
            from .parser import parse_program as parse_with_lark
            program = parse_with_lark(source)
        else:
            program = parse_program(source)
        interpreter = Interpreter(io=io, cancel=cancel, debug_level=debug_level)
        interpreter.run(program)
    except ParseonError as e:
        return RunResult(io.output, e)
    return RunResult(io.output)


def run_program(source: str, input_source: Optional[Any] = None) -> List[str]:
    """Convenience function: run a program and return its output lines.

    Unlike ``run`` this raises the first error.
    """
    result = run(source, input_source)
    if result.error is not None:
        raise result.error
    return result.output

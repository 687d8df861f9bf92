"""Grammar-driven parser for the Parseon language.

This module is the second front-end of the toolchain. Instead of the
hand-written tokenizer and recursive-descent parser in ``interpreter``,
the source is fed into a Lark LALR parser configured with a grammar for
the Parseon language. The resulting parse tree is transformed into the
same AST node types, with the same line numbers, so either front-end can
feed the interpreter.

Lark's own exceptions never leave this module: unexpected characters
become ``LexError`` and unexpected tokens or a premature end of input
become ``ParseError``.

The `parse_program` function is the public entry point and returns a
`Program` AST node representing the entire source file.
"""

from __future__ import annotations

from typing import List

from lark import Lark, Token, Transformer, v_args
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedToken

from .ast import (
    Program, Block, VarDecl, Assign, SayStmt, ShowStmt, AskStmt, Branch,
    IfStmt, RangeLoop, WhileLoop, BreakStmt, ContinueStmt,
    NumberLit, TextLit, BoolLit, Ident, UnaryOp, BinaryOp, Call
)
from .errors import LexError, ParseError


PARSEON_GRAMMAR = r"""
    ?start: program
    program: (statement | ";")*

    // Statements
    ?statement: set_decl
              | keep_decl
              | change_stmt
              | assign_stmt
              | say_stmt
              | show_stmt
              | ask_stmt
              | if_stmt
              | range_loop
              | while_loop
              | break_stmt
              | continue_stmt

    set_decl: SET NAME "=" expr
    keep_decl: KEEP NAME "=" expr
    change_stmt: CHANGE NAME "=" expr
    assign_stmt: NAME "=" expr
    say_stmt: SAY expr
    show_stmt: SHOW expr
    ask_stmt: ASK NAME

    if_stmt: (WHEN | CHECK) expr "do" block elif_clause* else_clause? "end"
    elif_clause: ELSE_IF expr "do" block
    else_clause: "otherwise" block

    range_loop: LOOP NAME "=" expr "to" expr "do" block "end"
    while_loop: REPEAT "(" expr ")" "do" block "end"
    break_stmt: BREAK
    continue_stmt: CONTINUE

    block: (statement | ";")*

    // Expressions with precedence, lowest first
    ?expr: or_expr
    ?or_expr: and_expr
            | or_expr OR and_expr -> binary
    ?and_expr: not_expr
             | and_expr AND not_expr -> binary
    ?not_expr: NOT not_expr -> unary
             | equality
    ?equality: comparison
             | equality (EQ | NE) comparison -> binary
    ?comparison: term
               | comparison (LE | GE | LT | GT) term -> binary
    ?term: factor
         | term (PLUS | MINUS) factor -> binary
    ?factor: unary
           | factor (STAR | SLASH | PERCENT) unary -> binary
    ?unary: MINUS unary
          | primary
    ?primary: NUMBER -> number
            | STRING -> text
            | TRUE -> true
            | FALSE -> false
            | NAME "(" [arg_list] ")" -> call
            | NAME -> ident
            | "(" expr ")"
    arg_list: expr ("," expr)*

    // Keywords kept in the tree for their line numbers
    SET: "set"
    KEEP: "keep"
    CHANGE: "change"
    SAY: "say"
    SHOW: "show"
    ASK: "ask"
    WHEN: "when"
    CHECK: "check"
    ELSE_IF.2: /otherwise(?:[ \t\r\n]+|#[^\n]*\n)+(?:when|check)\b/
    LOOP: "loop"
    REPEAT: "repeat"
    BREAK: "break"
    CONTINUE: "continue"
    TRUE: "true"
    FALSE: "false"
    OR: "or"
    AND: "and"
    NOT: "not"

    // Operators
    EQ: "=="
    NE: "!="
    LE: "<="
    GE: ">="
    LT: "<"
    GT: ">"
    PLUS: "+"
    MINUS: "-"
    STAR: "*"
    SLASH: "/"
    PERCENT: "%"

    // Tokens
    NAME: /[^\W\d]\w*/
    NUMBER: /[0-9]+(\.[0-9]+)?/
    STRING: /"[^"]*"/

    %import common.WS
    %ignore WS

    // Comments
    LINE_COMMENT: /#[^\n]*/
    %ignore LINE_COMMENT
"""


@v_args(inline=True)
class ASTTransformer(Transformer):
    """Transforms the raw parse tree into an AST."""

    def program(self, *statements):
        return Program(body=list(statements))

    def block(self, *statements):
        return Block(statements=list(statements))

    def set_decl(self, keyword, name, expr):
        return VarDecl(str(name), expr, False, keyword.line)

    def keep_decl(self, keyword, name, expr):
        return VarDecl(str(name), expr, True, keyword.line)

    def change_stmt(self, keyword, name, expr):
        return Assign(str(name), expr, keyword.line)

    def assign_stmt(self, name, expr):
        return Assign(str(name), expr, name.line)

    def say_stmt(self, keyword, expr):
        return SayStmt(expr, keyword.line)

    def show_stmt(self, keyword, expr):
        return ShowStmt(expr, keyword.line)

    def ask_stmt(self, keyword, name):
        return AskStmt(str(name), keyword.line)

    def if_stmt(self, keyword, condition, block, *clauses):
        branches: List[Branch] = [Branch(condition, block, keyword.line)]
        else_block = None
        for clause in clauses:
            if isinstance(clause, Branch):
                branches.append(clause)
            else:
                else_block = clause
        return IfStmt(branches, else_block, keyword.line)

    def elif_clause(self, keyword, condition, block):
        # the token spans "otherwise ... when"; the branch line is the when/check line
        return Branch(condition, block, keyword.line + keyword.value.count('\n'))

    def else_clause(self, block):
        return block

    def range_loop(self, keyword, name, start, end, body):
        return RangeLoop(str(name), start, end, body, keyword.line)

    def while_loop(self, keyword, condition, body):
        return WhileLoop(condition, body, keyword.line)

    def break_stmt(self, keyword):
        return BreakStmt(keyword.line)

    def continue_stmt(self, keyword):
        return ContinueStmt(keyword.line)

    # Expressions
    def binary(self, left, op, right):
        return BinaryOp(str(op), left, right, left.line)

    def unary(self, op, operand):
        return UnaryOp(str(op), operand, op.line)

    def number(self, token):
        return NumberLit(float(token.value), token.line)

    def text(self, token):
        return TextLit(token.value[1:-1], token.line)

    def true(self, token):
        return BoolLit(True, token.line)

    def false(self, token):
        return BoolLit(False, token.line)

    def ident(self, name):
        return Ident(str(name), name.line)

    def call(self, name, args=None):
        return Call(str(name), args if args is not None else [], name.line)

    def arg_list(self, *args):
        return list(args)


# The transformer runs inside the LALR parse, so long operator chains never
# go through a recursive tree walk.
PARSEON_PARSER = Lark(
    PARSEON_GRAMMAR,
    parser='lalr',
    propagate_positions=True,
    maybe_placeholders=False,
    transformer=ASTTransformer(),
)


def _describe(token: Token) -> str:
    if token.type == '$END':
        return 'end of input'
    return f"'{token.value}'"


def parse_program(source: str) -> Program:
    """Parse Parseon source code into an AST Program with the Lark grammar.

    Syntax errors are raised as ``LexError`` or ``ParseError`` carrying
    the 1-based source line.
    """
    try:
        return PARSEON_PARSER.parse(source)
    except UnexpectedCharacters as e:
        char = source[e.pos_in_stream]
        if char == '"':
            raise LexError(e.line, 'unterminated text literal', char) from None
        raise LexError(e.line, f"unexpected character {char!r}", char) from None
    except UnexpectedToken as e:
        line = _last_line(source) if e.token.type == '$END' else e.token.line
        raise ParseError(line, f"unexpected token {_describe(e.token)}", str(e.token.value)) from None
    except UnexpectedEOF:
        raise ParseError(_last_line(source), 'unexpected end of input') from None


def _last_line(source: str) -> int:
    return source.count('\n') + 1

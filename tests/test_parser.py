import pytest

from parseon.interpreter import parse_program
from parseon.errors import ParseError
from parseon.ast import (
    Program, Block, VarDecl, Assign, SayStmt, ShowStmt, AskStmt, Branch,
    IfStmt, RangeLoop, WhileLoop, BreakStmt, ContinueStmt,
    NumberLit, TextLit, BoolLit, Ident, UnaryOp, BinaryOp, Call,
)


def parse_expr(text):
    program = parse_program(f'show {text}')
    return program.body[0].expr


def test_declarations():
    program = parse_program('set x = 1\nkeep y = "a"')
    assert program.body == [
        VarDecl('x', NumberLit(1.0, 1), False, 1),
        VarDecl('y', TextLit('a', 2), True, 2),
    ]


def test_change_and_bare_assignment_are_the_same_statement():
    program = parse_program('change x = 2\nx = 3')
    assert program.body == [
        Assign('x', NumberLit(2.0, 1), 1),
        Assign('x', NumberLit(3.0, 2), 2),
    ]


def test_say_show_ask():
    program = parse_program('say "hi" show true ask answer')
    assert program.body == [
        SayStmt(TextLit('hi', 1), 1),
        ShowStmt(BoolLit(True, 1), 1),
        AskStmt('answer', 1),
    ]


def test_precedence_multiplication_binds_tighter():
    expr = parse_expr('1 + 2 * 3')
    assert expr == BinaryOp('+', NumberLit(1.0, 1),
                            BinaryOp('*', NumberLit(2.0, 1), NumberLit(3.0, 1), 1), 1)


def test_binary_levels_are_left_associative():
    expr = parse_expr('10 - 4 - 3')
    assert expr == BinaryOp('-', BinaryOp('-', NumberLit(10.0, 1), NumberLit(4.0, 1), 1),
                            NumberLit(3.0, 1), 1)


def test_not_binds_looser_than_equality():
    expr = parse_expr('not a == b')
    assert expr == UnaryOp('not', BinaryOp('==', Ident('a', 1), Ident('b', 1), 1), 1)


def test_and_binds_tighter_than_or():
    expr = parse_expr('a or b and c')
    assert expr.op == 'or'
    assert expr.right.op == 'and'


def test_unary_minus_and_parentheses():
    expr = parse_expr('-(1 + 2) * 3')
    assert expr == BinaryOp(
        '*',
        UnaryOp('-', BinaryOp('+', NumberLit(1.0, 1), NumberLit(2.0, 1), 1), 1),
        NumberLit(3.0, 1),
        1,
    )


def test_builtin_call():
    assert parse_expr('pow(2, x)') == Call('pow', [NumberLit(2.0, 1), Ident('x', 1)], 1)
    assert parse_expr('floor()') == Call('floor', [], 1)


def test_conditional_chain_is_one_node():
    source = (
        'when a do\n'
        '  say "a"\n'
        'otherwise when b do\n'
        '  say "b"\n'
        'otherwise check c do\n'
        '  say "c"\n'
        'otherwise\n'
        '  say "d"\n'
        'end'
    )
    program = parse_program(source)
    assert program.body == [IfStmt(
        [
            Branch(Ident('a', 1), Block([SayStmt(TextLit('a', 2), 2)]), 1),
            Branch(Ident('b', 3), Block([SayStmt(TextLit('b', 4), 4)]), 3),
            Branch(Ident('c', 5), Block([SayStmt(TextLit('c', 6), 6)]), 5),
        ],
        Block([SayStmt(TextLit('d', 8), 8)]),
        1,
    )]


def test_check_is_a_synonym_of_when():
    program = parse_program('check x do end')
    assert program.body == [IfStmt([Branch(Ident('x', 1), Block([]), 1)], None, 1)]


def test_loops_break_continue():
    program = parse_program('loop i = 1 to n do break end\nrepeat (x < 3) do continue end')
    assert program.body == [
        RangeLoop('i', NumberLit(1.0, 1), Ident('n', 1), Block([BreakStmt(1)]), 1),
        WhileLoop(BinaryOp('<', Ident('x', 2), NumberLit(3.0, 2), 2), Block([ContinueStmt(2)]), 2),
    ]


def test_semicolons_separate_statements():
    program = parse_program('repeat (x < 3) do show x; x = x + 1 end;')
    loop = program.body[0]
    assert isinstance(loop, WhileLoop)
    assert [type(s) for s in loop.body.statements] == [ShowStmt, Assign]


def test_empty_program():
    assert parse_program('# nothing here\n') == Program([])


@pytest.mark.parametrize('source, line, lexeme', [
    ('set = 5', 1, '='),
    ('say "a"\nshow', 2, ''),
    ('when x do\n  say "a"\n', 3, ''),
    ('loop i = 1 5 do end', 1, '5'),
    ('repeat x < 3 do end', 1, 'x'),
    ('show (1 + 2', 1, ''),
    ('x + 1', 1, '+'),
    ('say "a"\nend', 2, 'end'),
    ('when a do otherwise say "b" otherwise say "c" end', 1, 'otherwise'),
    ('show 1 +', 1, ''),
])
def test_parse_errors(source, line, lexeme):
    with pytest.raises(ParseError) as excinfo:
        parse_program(source)
    assert excinfo.value.line == line
    assert excinfo.value.lexeme == lexeme

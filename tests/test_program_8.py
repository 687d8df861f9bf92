from parseon.interpreter import parse_program, Interpreter


def test_program_8_quadratic(example_source):
    ast = parse_program(example_source('program_8.eng'))
    interp = Interpreter()
    interp.run(ast)
    assert interp.output == [
        '=== Quadratic Equation Solver ===',
        'Discriminant:', '1',
        'Root 1:', '3',
        'Root 2:', '2',
    ]

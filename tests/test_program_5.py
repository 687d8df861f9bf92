from parseon.interpreter import parse_program, Interpreter


def test_program_5_factorial(example_source):
    ast = parse_program(example_source('program_5.eng'))
    interp = Interpreter()
    interp.run(ast)
    assert interp.output == ['120', 'Factorial calculated!']

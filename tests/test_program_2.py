from parseon.interpreter import parse_program, Interpreter


def test_program_2_math(example_source):
    ast = parse_program(example_source('program_2.eng'))
    interp = Interpreter()
    interp.run(ast)
    assert interp.output == ['30', '200', '12', '256']

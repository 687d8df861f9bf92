from parseon.interpreter import parse_program, Interpreter


def test_program_7_temperature(example_source):
    ast = parse_program(example_source('program_7.eng'))
    interp = Interpreter()
    interp.run(ast)
    assert interp.output == [
        '=== Temperature Converter ===',
        'Celsius:', '25',
        'Fahrenheit:', '77',
        'Back to Celsius:', '25',
        'Water freezes at (F):', '32',
        'Water boils at (F):', '212',
    ]

"""CLI entry point for the Parseon interpreter.

Usage:
    python -m parseon [-v|-vv|-vvv] [--lark] [--timeout SECS] [--input FILE] <program_file>
    python -m parseon [-v...] --emit-ast <program_file>
    python -m parseon [-v...] --ast <ast_json_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --lark        Parse with the Lark grammar instead of the hand-written parser
  --timeout     Stop the program after this many seconds
  --input       Read `ask` answers from FILE instead of standard input
  --emit-ast    Parse the given .eng file and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero. Program output is printed line by line as
it is produced; errors are reported on stderr and exit with status 1.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional
from .interpreter import parse_program, Interpreter, Deadline
from .parser import parse_program as parse_with_lark
from .ast import Program
from .ast_json import ast_to_obj, ast_from_obj
from .errors import ParseonError
from .std.io import BasicIO


def read_source(path_name: str) -> str:
    program_file = Path(path_name)
    if not program_file.exists():
        print(f"Error: file {program_file} not found", file=sys.stderr)
        sys.exit(1)
    with open(program_file, 'r', encoding='utf-8') as f:
        return f.read()


def execute(program: Program, args: argparse.Namespace) -> None:
    if args.input:
        with open(args.input, 'r', encoding='utf-8') as f:
            input_source = f.read().splitlines()
    else:
        input_source = sys.stdin
    cancel: Optional[Deadline] = Deadline(args.timeout) if args.timeout else None
    io = BasicIO(input_source, echo=print, cancel=cancel)
    interpreter = Interpreter(io=io, cancel=cancel, debug_level=args.v)
    try:
        interpreter.run(program)
    except ParseonError as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)


def main(argv: Optional[list] = None) -> None:
    parser = argparse.ArgumentParser(description="Parseon language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--lark', action='store_true', help='parse with the Lark grammar front-end')
    parser.add_argument('--timeout', type=float, default=None, metavar='SECS', help='execution time budget in seconds')
    parser.add_argument('--input', metavar='FILE', help='file supplying one input line per ask')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='ENG_FILE', help='emit AST JSON for the given .eng file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='Parseon program file (.eng) to execute')
    args = parser.parse_args(argv)

    parse = parse_with_lark if args.lark else parse_program

    # Emit AST mode
    if args.emit_ast:
        program_file = Path(args.emit_ast)
        source = read_source(args.emit_ast)
        try:
            ast_program = parse(source)
        except ParseonError as e:
            print(str(e), file=sys.stderr)
            sys.exit(1)
        obj = ast_to_obj(ast_program)
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(obj, out, ensure_ascii=False, indent=2)
        print(str(out_path))
        return

    # Execute from AST JSON
    if args.ast:
        ast_path = Path(args.ast)
        if not ast_path.exists():
            print(f"Error: file {ast_path} not found", file=sys.stderr)
            sys.exit(1)
        with open(ast_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        execute(ast_from_obj(data), args)
        return

    # Default: execute source file
    if not args.program:
        parser.error('missing program file; or use --emit-ast/--ast')
    source = read_source(args.program)
    try:
        ast_program = parse(source)
    except ParseonError as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)
    execute(ast_program, args)

if __name__ == '__main__':
    main()

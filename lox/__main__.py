"""CLI entry point for the Lox interpreter.

Usage:
    python -m lox [-v|-vv|-vvv] [script]
    python -m lox [-v...] --emit-ast <script>
    python -m lox [-v...] --ast <ast_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --emit-ast    Parse the given .lox file and write its AST text next to it
  --ast         Execute a previously emitted AST text file

Without a script the interpreter starts an interactive prompt; type
`quit` or send EOF to leave it. Debug information is written to
`debug.txt` in the current directory when verbosity is greater than zero.

Exit status: 0 on success, 1 when a file cannot be read, 64 on usage
errors, 65 on syntax or static errors, 70 on runtime errors.
"""

import argparse
import sys
from pathlib import Path

from .ast_printer import print_program
from .ast_reader import read_program
from .errors import AstReadError
from .session import EXIT_FAILURE, EXIT_OK, EXIT_STATIC_ERROR, EXIT_USAGE, Session


class LoxArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EXIT_USAGE, f"{self.prog}: error: {message}\n")


def read_source(path: Path, session: Session):
    try:
        return path.read_text(encoding='utf-8')
    except OSError as e:
        session.io.print_error_line(f'Unable to read file "{path}": {e.strerror}')
        return None


def emit_ast(session: Session, program_file: Path) -> int:
    source = read_source(program_file, session)
    if source is None:
        return EXIT_FAILURE
    statements = session.parse_source(source)
    if session.reporter.had_error:
        return EXIT_STATIC_ERROR
    out_path = program_file.with_name(program_file.name + '.ast')
    out_path.write_text(print_program(statements), encoding='utf-8')
    session.io.print_line(str(out_path))
    return EXIT_OK


def run_ast(session: Session, ast_file: Path) -> int:
    text = read_source(ast_file, session)
    if text is None:
        return EXIT_FAILURE
    try:
        statements = read_program(text)
    except AstReadError as e:
        session.io.print_error_line(f"Error reading AST: {e}")
        return EXIT_STATIC_ERROR
    session.run_statements(statements)
    return session.exit_code()


def main(argv=None) -> int:
    parser = LoxArgumentParser(prog='lox', description='Lox language interpreter')
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='LOX_FILE', help='write the AST text for the given .lox file')
    group.add_argument('--ast', metavar='AST_FILE', help='execute AST text emitted by --emit-ast')
    parser.add_argument('script', nargs='?', help='Lox script to execute; omit for an interactive prompt')
    args = parser.parse_args(argv)

    if (args.emit_ast or args.ast) and args.script:
        parser.error('a script cannot be combined with --emit-ast/--ast')

    session = Session(debug_level=args.v)
    try:
        if args.emit_ast:
            return emit_ast(session, Path(args.emit_ast))
        if args.ast:
            return run_ast(session, Path(args.ast))
        if args.script:
            return session.run_file(args.script)
        return session.run_prompt()
    finally:
        session.close()


if __name__ == '__main__':
    sys.exit(main())

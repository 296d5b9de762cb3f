import pytest

from lox.ast import Binary, Class, Function, Print, Unary
from lox.ast_printer import print_program
from lox.ast_reader import read_program
from lox.console import ConsoleIO
from lox.errors import AstReadError
from lox.parser import parse
from lox.reporter import ErrorReporter
from lox.scanner import scan
from lox.session import Session

EXAMPLE_NAMES = [f'program_{n}.lox' for n in range(1, 8)]


class RecordingIO:
    def __init__(self):
        self.out = []
        self.err = []

    def print_line(self, text):
        self.out.append(text)

    def print_error_line(self, text):
        self.err.append(text)

    def read_line(self, prompt='> '):
        return None


def parse_source(source):
    reporter = ErrorReporter(ConsoleIO())
    statements = parse(scan(source, reporter), reporter)
    assert not reporter.had_error
    return statements


def run_statements(statements):
    io = RecordingIO()
    session = Session(io=io)
    session.run_statements(statements)
    session.close()
    return io


def test_class_and_method_layout():
    text = print_program(parse_source('class B < A { init(x) { this.x = x; } }'))
    assert text == (
        '(class B A\n'
        '  (fun init (x)\n'
        '    (expr (set this x x))))\n'
    )


def test_if_else_layout():
    text = print_program(parse_source('if (a) { print 1; } else print 2;'))
    assert text == '(if a (block\n  (print 1)) (print 2))\n'


def test_simple_statements():
    text = print_program(parse_source(
        'var a; var b = "s"; fun f() { return; } fun g(x, y) { return x; } print -a.b(1, nil);'))
    assert text.split('\n') == [
        '(var a)',
        '(var b "s")',
        '(fun f ()',
        '  (return))',
        '(fun g (x y)',
        '  (return x))',
        '(print (- (call (get a b) 1 nil)))',
        '',
    ]


def test_empty_program():
    assert print_program([]) == ''
    assert read_program('') == []


def test_reader_builds_nodes():
    statements = read_program('(print (- (- 1) 2))\n(fun f (a b)\n  (print a))\n(class C B)')
    printed, function, klass = statements
    assert isinstance(printed, Print)
    assert isinstance(printed.expression, Binary)
    assert isinstance(printed.expression.left, Unary)
    assert printed.expression.left.right.value == 1.0
    assert isinstance(function, Function)
    assert [p.lexeme for p in function.params] == ['a', 'b']
    assert isinstance(klass, Class)
    assert klass.superclass.name.lexeme == 'B'
    assert klass.methods == ()


def test_reader_skips_comments():
    statements = read_program('; a comment\n(print "x ; not a comment") ; trailing\n')
    assert len(statements) == 1
    assert statements[0].expression.value == 'x ; not a comment'


@pytest.mark.parametrize('name', EXAMPLE_NAMES)
def test_examples_round_trip(example_source, name):
    text = print_program(parse_source(example_source(name)))
    assert print_program(read_program(text)) == text


@pytest.mark.parametrize('name', ['program_1.lox', 'program_2.lox', 'program_4.lox', 'program_5.lox', 'program_7.lox'])
def test_read_back_program_runs_the_same(example_source, name):
    statements = parse_source(example_source(name))
    direct = run_statements(statements)
    from_text = run_statements(read_program(print_program(statements)))
    assert direct.err == from_text.err == []
    assert direct.out == from_text.out


def test_runtime_error_lines_point_into_ast_text():
    text = '(print "before")\n(var x (- "text" 1))\n(print "after")\n'
    io = run_statements(read_program(text))
    assert io.out == ['before']
    assert io.err == ['Operands must be numbers.\n[line 2]']


def test_numbers_keep_their_value():
    text = print_program(parse_source('print 0.1; print 12.5; print 1000000;'))
    assert text == '(print 0.1)\n(print 12.5)\n(print 1000000)\n'
    values = [stmt.expression.value for stmt in read_program(text)]
    assert values == [0.1, 12.5, 1000000.0]


@pytest.mark.parametrize('text, message', [
    ('(print 1', None),
    ('(print @)', None),
    ('1', 'expected a parenthesised form'),
    ('(print 1)\n(bogus 2)', "line 2: unknown statement 'bogus'"),
    ('(var)', "'var' takes 1..2 operands, got 0"),
    ('(var print 1)', "'print' is not an identifier"),
    ('(print (! a b))', "'!' takes exactly one operand"),
    ('(print (frob 1))', "unknown expression 'frob'"),
    ('(class A (print 1))', 'class bodies may only hold methods'),
    ('(fun f)', "'fun' needs a name and a parameter list"),
])
def test_malformed_text(text, message):
    with pytest.raises(AstReadError) as excinfo:
        read_program(text)
    if message is not None:
        assert message in str(excinfo.value)

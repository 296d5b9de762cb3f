import pytest

from lox.console import ConsoleIO
from lox.interpreter import Interpreter
from lox.parser import parse
from lox.reporter import ErrorReporter
from lox.resolver import Resolver
from lox.scanner import scan


def resolve_source(source):
    io = ConsoleIO()
    reporter = ErrorReporter(io)
    interpreter = Interpreter(io, reporter)
    statements = parse(scan(source, reporter), reporter)
    assert not reporter.had_error
    Resolver(interpreter, reporter).resolve(statements)
    return statements, interpreter, reporter


def test_globals_stay_unresolved():
    statements, interpreter, reporter = resolve_source('var a = 1; print a;')
    assert not reporter.had_error
    assert interpreter.locals == {}


def test_local_distances():
    source = '{ var a = 1; { var b = 2; print a; print b; } }'
    statements, interpreter, reporter = resolve_source(source)
    assert not reporter.had_error
    inner = statements[0].statements[1]
    print_a, print_b = inner.statements[1], inner.statements[2]
    assert interpreter.locals[print_a.expression] == 1
    assert interpreter.locals[print_b.expression] == 0


def test_identical_expressions_get_their_own_entries():
    source = 'fun f(a) { print a; { var a = 2; print a; } }'
    statements, interpreter, _ = resolve_source(source)
    body = statements[0].body
    outer_use = body[0].expression
    inner_use = body[1].statements[1].expression
    assert interpreter.locals[outer_use] == 0
    assert interpreter.locals[inner_use] == 0
    assert len([e for e in interpreter.locals if e.name.lexeme == 'a']) == 2


def test_closure_distance_crosses_function_scope():
    source = 'fun outer() { var x = 1; fun inner() { return x; } }'
    statements, interpreter, _ = resolve_source(source)
    inner = statements[0].body[1]
    use = inner.body[0].value
    assert interpreter.locals[use] == 1


@pytest.mark.parametrize('source, message', [
    ('{ var a = a; }', "Error at 'a': Can't read local variable in its own initializer."),
    ('{ var a = 1; var a = 2; }', "Error at 'a': Already a variable with this name in this scope."),
    ('fun f(a, a) {}', "Error at 'a': Already a variable with this name in this scope."),
    ('return 1;', "Error at 'return': Can't return from top-level code."),
    ('class A { init() { return 1; } }', "Error at 'return': Can't return a value from an initializer."),
    ('print this;', "Error at 'this': Can't use 'this' outside of a class."),
    ('fun f() { return this; }', "Error at 'this': Can't use 'this' outside of a class."),
    ('print super.x;', "Error at 'super': Can't use 'super' outside of a class."),
    ('class A { m() { super.m(); } }', "Error at 'super': Can't use 'super' in a class with no superclass."),
    ('class A < A {}', "Error at 'A': A class can't inherit from itself."),
])
def test_static_errors(capsys, source, message):
    _, _, reporter = resolve_source(source)
    assert reporter.had_error
    assert message in capsys.readouterr().err


def test_shadowing_across_scopes_is_allowed():
    _, _, reporter = resolve_source('{ var a = 1; { var a = 2; print a; } }')
    assert not reporter.had_error


def test_global_redeclaration_is_allowed():
    _, _, reporter = resolve_source('var a = 1; var a = 2;')
    assert not reporter.had_error


def test_valueless_return_in_initializer_is_allowed():
    _, _, reporter = resolve_source('class A { init() { return; } }')
    assert not reporter.had_error


def test_errors_batch(capsys):
    _, _, reporter = resolve_source('return 1;\nprint this;\n{ var b = b; }')
    assert reporter.had_error
    err = capsys.readouterr().err.strip().split('\n')
    assert len(err) == 3
    assert err[0].startswith('[line 1]')
    assert err[1].startswith('[line 2]')
    assert err[2].startswith('[line 3]')

import pytest


def test_fields_and_methods(run_lox):
    out, err, _ = run_lox(
        'class Point {\n'
        '  init(x, y) { this.x = x; this.y = y; }\n'
        '  sum() { return this.x + this.y; }\n'
        '}\n'
        'var p = Point(1, 2);\n'
        'print p.sum();\n'
        'p.x = 10;\n'
        'print p.sum();\n'
        'p.label = "new field";\n'
        'print p.label;\n'
    )
    assert err == ''
    assert out == ['3', '12', 'new field']


def test_fields_shadow_methods(run_lox):
    out, _, _ = run_lox(
        'class A { m() { return "method"; } }\n'
        'var a = A();\n'
        'print a.m();\n'
        'fun replacement() { return "field"; }\n'
        'a.m = replacement;\n'
        'print a.m();\n'
        'print A().m();\n'
    )
    assert out == ['method', 'field', 'method']


def test_instances_have_independent_fields(run_lox):
    out, _, _ = run_lox(
        'class Box {}\n'
        'var a = Box();\n'
        'var b = Box();\n'
        'a.value = 1;\n'
        'b.value = 2;\n'
        'print a.value;\n'
        'print b.value;\n'
    )
    assert out == ['1', '2']


def test_bound_method_remembers_its_instance(run_lox):
    out, _, _ = run_lox(
        'class Person {\n'
        '  init(name) { this.name = name; }\n'
        '  greet() { return "hi " + this.name; }\n'
        '}\n'
        'var greet = Person("ann").greet;\n'
        'print greet();\n'
    )
    assert out == ['hi ann']


def test_this_in_nested_function_refers_to_method_receiver(run_lox):
    out, _, _ = run_lox(
        'class Thing {\n'
        '  init() { this.name = "thing"; }\n'
        '  callback() {\n'
        '    fun inner() { return this.name; }\n'
        '    return inner;\n'
        '  }\n'
        '}\n'
        'print Thing().callback()();\n'
    )
    assert out == ['thing']


def test_initializer_returns_instance(run_lox):
    out, err, _ = run_lox(
        'class A {\n'
        '  init(flag) {\n'
        '    this.flag = flag;\n'
        '    if (flag) return;\n'
        '    this.late = true;\n'
        '  }\n'
        '}\n'
        'var a = A(true);\n'
        'print a;\n'
        'print a.init(false) == a;\n'
        'print a.late;\n'
    )
    assert err == ''
    assert out == ['A instance', 'true', 'true']


def test_class_without_initializer_takes_no_arguments(run_lox):
    _, err, reporter = run_lox('class A {}\nA(1);')
    assert reporter.had_runtime_error
    assert err.strip().split('\n') == ['Expected 0 arguments but got 1.', '[line 2]']


def test_initializer_arity(run_lox):
    _, err, _ = run_lox('class A { init(a, b) {} }\nA(1);')
    assert err.strip().split('\n') == ['Expected 2 arguments but got 1.', '[line 2]']


def test_inherited_initializer_and_methods(run_lox):
    out, _, _ = run_lox(
        'class Base {\n'
        '  init(v) { this.v = v; }\n'
        '  show() { print this.v; }\n'
        '}\n'
        'class Derived < Base {}\n'
        'Derived(7).show();\n'
    )
    assert out == ['7']


def test_super_dispatch_keeps_receiver(run_lox):
    out, _, _ = run_lox(
        'class A {\n'
        '  name() { return "A"; }\n'
        '  describe() { return "I am " + this.name(); }\n'
        '}\n'
        'class B < A {\n'
        '  name() { return "B"; }\n'
        '  describe() { return super.describe() + "!"; }\n'
        '}\n'
        'class C < B {}\n'
        'print B().describe();\n'
        'print C().describe();\n'
    )
    assert out == ['I am B!', 'I am B!']


def test_super_is_bound_lexically(run_lox):
    out, _, _ = run_lox(
        'class A { method() { print "A method"; } }\n'
        'class B < A {\n'
        '  method() { print "B method"; }\n'
        '  test() { super.method(); }\n'
        '}\n'
        'class C < B {}\n'
        'C().test();\n'
    )
    assert out == ['A method']


def test_super_method_can_be_stored(run_lox):
    out, _, _ = run_lox(
        'class A { hello() { return "hello from A"; } }\n'
        'class B < A {\n'
        '  grab() { return super.hello; }\n'
        '}\n'
        'var m = B().grab();\n'
        'print m();\n'
    )
    assert out == ['hello from A']


def test_methods_can_refer_to_their_class(run_lox):
    out, _, _ = run_lox(
        'class Node {\n'
        '  make() { return Node(); }\n'
        '}\n'
        'print Node().make();\n'
    )
    assert out == ['Node instance']


@pytest.mark.parametrize('source, message, line', [
    ('var x = 1;\nprint x.field;', 'Only instances have properties.', 2),
    ('var x = "s";\nx.field = 1;', 'Only instances have fields.', 2),
    ('class A {}\nprint A().missing;', "Undefined property 'missing'.", 2),
    ('var NotAClass = 1;\nclass B < NotAClass {}', 'Superclass must be a class.', 2),
    ('class A {}\nclass B < A { m() { return super.missing(); } }\nB().m();', "Undefined property 'missing'.", 2),
])
def test_class_runtime_errors(run_lox, source, message, line):
    _, err, reporter = run_lox(source)
    assert reporter.had_runtime_error
    lines = err.strip().split('\n')
    assert lines[0] == message
    assert lines[1] == f"[line {line}]"

import builtins

import pytest

from lox.__main__ import main


def write_script(tmp_path, source, name='script.lox'):
    path = tmp_path / name
    path.write_text(source, encoding='utf-8')
    return path


def feed_input(monkeypatch, lines):
    pending = list(lines)

    def fake_input(prompt=''):
        if not pending:
            raise EOFError
        return pending.pop(0)

    monkeypatch.setattr(builtins, 'input', fake_input)


def test_run_script(tmp_path, capsys):
    script = write_script(tmp_path, 'print "hi";\nprint 1 + 1;\n')
    assert main([str(script)]) == 0
    assert capsys.readouterr().out.split('\n') == ['hi', '2', '']


def test_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / 'nope.lox')]) == 1
    assert 'Unable to read file' in capsys.readouterr().err


def test_static_error_exit_code(tmp_path, capsys):
    script = write_script(tmp_path, 'print "never";\nvar = 1;\n')
    assert main([str(script)]) == 65
    captured = capsys.readouterr()
    assert captured.out == ''
    assert captured.err.strip() == "[line 2] Error at '=': Expect variable name."


def test_runtime_error_exit_code(tmp_path, capsys):
    script = write_script(tmp_path, 'print "first";\nprint nil + 1;\n')
    assert main([str(script)]) == 70
    captured = capsys.readouterr()
    assert captured.out.strip() == 'first'
    assert captured.err.strip().split('\n') == ['Operands must be two numbers or two strings.', '[line 2]']


def test_emit_and_run_ast(tmp_path, capsys):
    script = write_script(tmp_path, 'fun twice(x) { return x * 2; }\nprint twice(21);\n')
    assert main(['--emit-ast', str(script)]) == 0
    ast_path = tmp_path / 'script.lox.ast'
    assert capsys.readouterr().out.strip() == str(ast_path)
    assert ast_path.read_text(encoding='utf-8') == (
        '(fun twice (x)\n'
        '  (return (* x 2)))\n'
        '(print (call twice 21))\n'
    )

    assert main(['--ast', str(ast_path)]) == 0
    assert capsys.readouterr().out.strip() == '42'


def test_emit_ast_with_syntax_error(tmp_path, capsys):
    script = write_script(tmp_path, 'print ;')
    assert main(['--emit-ast', str(script)]) == 65
    assert not (tmp_path / 'script.lox.ast').exists()
    assert "Expect expression." in capsys.readouterr().err


def test_malformed_ast_file(tmp_path, capsys):
    ast_file = write_script(tmp_path, '(print 1', name='broken.ast')
    assert main(['--ast', str(ast_file)]) == 65
    assert capsys.readouterr().err.startswith('Error reading AST:')


def test_ast_with_resolution_error(tmp_path, capsys):
    ast_file = write_script(tmp_path, '(return 1)\n', name='bad.ast')
    assert main(['--ast', str(ast_file)]) == 65
    assert "Can't return from top-level code." in capsys.readouterr().err


def test_interactive_prompt(monkeypatch, capsys):
    feed_input(monkeypatch, ['var a = 1;', 'print a + 1;', 'print (;', 'print a;', 'print nil - 1;', 'print "still here";'])
    assert main([]) == 0
    captured = capsys.readouterr()
    assert captured.out.split('\n') == [
        'Running Lox in interactive mode.',
        'Type "quit" to exit.',
        '2',
        '1',
        'still here',
        '',
    ]
    assert "[line 1] Error at ';': Expect expression." in captured.err
    assert 'Operands must be numbers.' in captured.err


def test_interactive_quit(monkeypatch, capsys):
    feed_input(monkeypatch, ['print 1;', 'quit', 'print 2;'])
    assert main([]) == 0
    assert capsys.readouterr().out.split('\n')[2:] == ['1', '']


@pytest.mark.parametrize('argv', [
    ['one.lox', 'two.lox'],
    ['--emit-ast', 'a.lox', 'b.lox'],
    ['--emit-ast', 'a.lox', '--ast', 'a.lox.ast'],
    ['--unknown'],
])
def test_usage_errors(argv, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(argv)
    assert excinfo.value.code == 64
    assert 'usage:' in capsys.readouterr().err


def test_verbose_writes_debug_file(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    script = write_script(tmp_path, 'var a = 1;\nprint a;\n')
    assert main(['-vv', str(script)]) == 0
    assert capsys.readouterr().out.strip() == '1'
    trace = (tmp_path / 'debug.txt').read_text()
    assert 'parsed 2 statements' in trace
    assert 'declare a: number = 1' in trace


def test_nesting_too_deep_exit_code(tmp_path, capsys):
    depth = 5000
    script = write_script(tmp_path, 'print ' + '(' * depth + '1' + ')' * depth + ';\n')
    assert main([str(script)]) == 65
    assert 'Too much nesting.' in capsys.readouterr().err

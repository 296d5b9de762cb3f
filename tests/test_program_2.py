from lox.session import run_program


def test_program_2_counters(capsys, example_source):
    run_program(example_source('program_2.lox'))
    out_lines = capsys.readouterr().out.strip().split('\n')
    # Each counter owns its own captured variable.
    assert out_lines == ['1', '2', '1', '3']

from pathlib import Path

import pytest

from lox.session import run_program

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


@pytest.fixture
def example_source():
    def load(name):
        return (EXAMPLES / name).read_text(encoding='utf-8')
    return load


@pytest.fixture
def run_lox(capsys):
    """Run Lox source; return (stdout lines, stderr text, reporter)."""
    def run(source):
        reporter = run_program(source)
        captured = capsys.readouterr()
        out = captured.out.splitlines()
        return out, captured.err, reporter
    return run

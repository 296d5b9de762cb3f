import time
from dataclasses import dataclass
from typing import Any, Callable, List

from lox.environment import Environment
from lox.types import LoxCallable


@dataclass(eq=False)
class BuiltinFunction(LoxCallable):
    name: str
    arity_count: int
    fn: Callable[[List[Any]], Any]

    def arity(self) -> int:
        return self.arity_count

    def call(self, interpreter, arguments: List[Any]) -> Any:
        return self.fn(arguments)

    def __repr__(self) -> str:
        return "<native fn>"


def std_clock(args: List[Any]) -> float:
    return time.time()


def make_globals() -> Environment:
    """Build a fresh global environment holding the native functions."""
    globals_env = Environment()
    globals_env.define('clock', BuiltinFunction('clock', 0, std_clock))
    return globals_env

from typing import Any, Dict, Optional

from lox.errors import UndefinedVariableError, UnexpectedError
from lox.tokens import Token


class Environment:
    """Represents a scope environment mapping names to values.

    Environments form a chain through `enclosing` mirroring the lexical
    nesting of the program. Closures hold on to the environment they were
    declared in, so a chain outlives the block that created it whenever a
    closure still refers to it.
    """
    def __init__(self, enclosing: Optional['Environment'] = None):
        self.enclosing = enclosing
        self.values: Dict[str, Any] = {}

    def define(self, name: str, value: Any) -> None:
        # Redefinition is allowed; at the top level `var a; var a;` is legal.
        self.values[name] = value

    def get(self, name: Token) -> Any:
        if name.lexeme in self.values:
            return self.values[name.lexeme]
        if self.enclosing is not None:
            return self.enclosing.get(name)
        raise UndefinedVariableError(name, f"Undefined variable '{name.lexeme}'.")

    def assign(self, name: Token, value: Any) -> None:
        if name.lexeme in self.values:
            self.values[name.lexeme] = value
            return
        if self.enclosing is not None:
            self.enclosing.assign(name, value)
            return
        raise UndefinedVariableError(name, f"Undefined variable '{name.lexeme}'.")

    def get_at(self, distance: int, name: str) -> Any:
        values = self.ancestor(distance).values
        if name not in values:
            raise UnexpectedError(f"Resolved variable '{name}' missing at distance {distance}.")
        return values[name]

    def assign_at(self, distance: int, name: str, value: Any) -> None:
        self.ancestor(distance).values[name] = value

    def ancestor(self, distance: int) -> 'Environment':
        environment = self
        for _ in range(distance):
            if environment.enclosing is None:
                raise UnexpectedError('Unable to find scope for variable.')
            environment = environment.enclosing
        return environment

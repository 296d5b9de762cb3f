"""Runtime values of the Lox language.

Lox values map onto Python values where they can: `nil` is `None`,
booleans are `bool`, numbers are `float`, strings are `str`. Functions,
classes and instances are represented by the classes below.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from .ast import Function
from .environment import Environment
from .errors import ReturnSignal, UndefinedPropertyError
from .tokens import Token

if TYPE_CHECKING:
    from .interpreter import Interpreter


class LoxCallable(ABC):
    """Anything a Lox call expression can invoke."""

    @abstractmethod
    def arity(self) -> int:
        ...

    @abstractmethod
    def call(self, interpreter: 'Interpreter', arguments: List[Any]) -> Any:
        ...


class LoxFunction(LoxCallable):
    """A user-defined function or method together with its closure."""
    def __init__(self, declaration: Function, closure: Environment, is_initializer: bool = False):
        self.declaration = declaration
        self.closure = closure
        self.is_initializer = is_initializer

    @property
    def name(self) -> str:
        return self.declaration.name.lexeme

    def arity(self) -> int:
        return len(self.declaration.params)

    def bind(self, instance: 'LoxInstance') -> 'LoxFunction':
        environment = Environment(self.closure)
        environment.define('this', instance)
        return LoxFunction(self.declaration, environment, self.is_initializer)

    def call(self, interpreter: 'Interpreter', arguments: List[Any]) -> Any:
        environment = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, argument)

        result = interpreter.execute_block(self.declaration.body, environment)

        # An initializer hands back its instance whatever it returned.
        if self.is_initializer:
            return self.closure.get_at(0, 'this')
        if isinstance(result, ReturnSignal):
            return result.value
        return None

    def __repr__(self) -> str:
        return f"<fn {self.name}>"


class LoxClass(LoxCallable):
    def __init__(self, name: str, superclass: Optional['LoxClass'], methods: Dict[str, LoxFunction]):
        self.name = name
        self.superclass = superclass
        self.methods = methods

    def find_method(self, name: str) -> Optional[LoxFunction]:
        if name in self.methods:
            return self.methods[name]
        if self.superclass is not None:
            return self.superclass.find_method(name)
        return None

    def arity(self) -> int:
        initializer = self.find_method('init')
        if initializer is None:
            return 0
        return initializer.arity()

    def call(self, interpreter: 'Interpreter', arguments: List[Any]) -> Any:
        instance = LoxInstance(self)
        initializer = self.find_method('init')
        if initializer is not None:
            initializer.bind(instance).call(interpreter, arguments)
        return instance

    def __repr__(self) -> str:
        return self.name


class LoxInstance:
    def __init__(self, klass: LoxClass):
        self.klass = klass
        self.fields: Dict[str, Any] = {}

    def get(self, name: Token) -> Any:
        # Fields shadow methods.
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]
        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)
        raise UndefinedPropertyError(name, f"Undefined property '{name.lexeme}'.")

    def set(self, name: Token, value: Any) -> None:
        self.fields[name.lexeme] = value

    def __repr__(self) -> str:
        return f"{self.klass.name} instance"


def type_name(value: Any) -> str:
    """Return the Lox type name of a runtime value."""
    if value is None:
        return 'nil'
    if isinstance(value, bool):
        return 'boolean'
    if isinstance(value, float):
        return 'number'
    if isinstance(value, str):
        return 'string'
    if isinstance(value, LoxClass):
        return 'class'
    if isinstance(value, LoxCallable):
        return 'function'
    if isinstance(value, LoxInstance):
        return 'instance'
    return type(value).__name__


def to_string(value: Any) -> str:
    """Convert a Lox value to the text `print` shows for it."""
    if value is None:
        return 'nil'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float):
        text = str(value)
        # Integral numbers print without the trailing ".0".
        if text.endswith('.0'):
            text = text[:-2]
        return text
    return str(value)

"""Tree-walking evaluator for the Lox language.

The interpreter executes resolved statements against a chain of
environments rooted at a per-instance global environment. Statement
execution returns `None`, or a `ReturnSignal` when a `return` ran; blocks
and loops hand the signal upwards until the enclosing function call
consumes it.

Runtime errors are fail-fast: the first one stops `interpret`, is handed
to the error reporter, and output already produced stays produced.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Optional, Sequence

from .ast import (
    Expr, Stmt, Assign, Binary, Call, Get, Grouping, Literal, Logical, Set,
    Super, This, Unary, Variable, Block, Class, Expression, Function, If,
    Print, Return, Var, While,
)
from .builtin_function import make_globals
from .console import ConsoleIO
from .environment import Environment
from .errors import (
    ArgumentCountError, LoxRuntimeError, NotCallableError, NotClassError,
    NotInstanceError, OperandTypeError, ReturnSignal, StackOverflowError,
    UndefinedPropertyError, UnexpectedError,
)
from .reporter import ErrorReporter
from .tokens import Token, TokenType
from .types import LoxCallable, LoxClass, LoxFunction, LoxInstance, to_string, type_name


class Interpreter:
    """Core interpreter that executes Lox statements."""
    def __init__(self, io=None, reporter: Optional[ErrorReporter] = None,
                 debug_level: int = 0, debug_file: str = 'debug.txt'):
        self.io = io if io is not None else ConsoleIO()
        self.reporter = reporter if reporter is not None else ErrorReporter(self.io)
        self.globals = make_globals()
        self.environment = self.globals
        self.locals: Dict[Expr, int] = {}
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w') if debug_level > 0 else None

    def debug(self, msg: str) -> None:
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    def close(self) -> None:
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    # Public API
    def resolve(self, expr: Expr, depth: int) -> None:
        """Record the scope distance the resolver computed for `expr`."""
        self.locals[expr] = depth

    def interpret(self, statements: Sequence[Stmt]) -> None:
        try:
            for stmt in statements:
                self.execute(stmt)
        except (LoxRuntimeError, UnexpectedError) as error:
            self.debug(f"runtime error: {error.message}")
            self.reporter.runtime_error(error)

    def execute_block(self, statements: Sequence[Stmt], environment: Environment) -> Optional[ReturnSignal]:
        previous = self.environment
        try:
            self.environment = environment
            for stmt in statements:
                result = self.execute(stmt)
                # propagate return signals
                if result is not None:
                    return result
            return None
        finally:
            self.environment = previous

    def execute(self, stmt: Stmt) -> Optional[ReturnSignal]:
        if isinstance(stmt, Expression):
            self.evaluate(stmt.expression)
            return None
        if isinstance(stmt, Print):
            self.io.print_line(to_string(self.evaluate(stmt.expression)))
            return None
        if isinstance(stmt, Var):
            value = None
            if stmt.initializer is not None:
                value = self.evaluate(stmt.initializer)
            self.environment.define(stmt.name.lexeme, value)
            if self.debug_level >= 2:
                self.debug(f"declare {stmt.name.lexeme}: {type_name(value)} = {to_string(value)}")
            return None
        if isinstance(stmt, Block):
            return self.execute_block(stmt.statements, Environment(self.environment))
        if isinstance(stmt, If):
            truthy = self.is_truthy(self.evaluate(stmt.condition))
            if self.debug_level >= 3:
                self.debug(f"if condition at line {self.line_of(stmt.condition)} -> {truthy}")
            if truthy:
                return self.execute(stmt.then_branch)
            if stmt.else_branch is not None:
                return self.execute(stmt.else_branch)
            return None
        if isinstance(stmt, While):
            while True:
                truthy = self.is_truthy(self.evaluate(stmt.condition))
                if self.debug_level >= 3:
                    self.debug(f"while condition at line {self.line_of(stmt.condition)} -> {truthy}")
                if not truthy:
                    return None
                result = self.execute(stmt.body)
                if result is not None:
                    return result
        if isinstance(stmt, Function):
            self.environment.define(stmt.name.lexeme, LoxFunction(stmt, self.environment))
            if self.debug_level >= 2:
                self.debug(f"define function {stmt.name.lexeme}/{len(stmt.params)}")
            return None
        if isinstance(stmt, Return):
            value = None
            if stmt.value is not None:
                value = self.evaluate(stmt.value)
            return ReturnSignal(value)
        if isinstance(stmt, Class):
            self.execute_class(stmt)
            return None
        raise UnexpectedError(f"execute: unexpected node type {type(stmt).__name__}")

    def execute_class(self, stmt: Class) -> None:
        superclass = None
        if stmt.superclass is not None:
            superclass = self.evaluate(stmt.superclass)
            if not isinstance(superclass, LoxClass):
                raise NotClassError(stmt.superclass.name, 'Superclass must be a class.')

        # Bound first so methods can refer to their own class.
        self.environment.define(stmt.name.lexeme, None)

        method_env = self.environment
        if superclass is not None:
            method_env = Environment(self.environment)
            method_env.define('super', superclass)

        methods = {
            method.name.lexeme: LoxFunction(method, method_env, method.name.lexeme == 'init')
            for method in stmt.methods
        }
        klass = LoxClass(stmt.name.lexeme, superclass, methods)
        self.environment.assign(stmt.name, klass)
        if self.debug_level >= 2:
            parent = f" < {superclass.name}" if superclass is not None else ''
            self.debug(f"define class {klass.name}{parent} with methods {sorted(methods)}")

    def evaluate(self, expr: Expr) -> Any:
        if isinstance(expr, Literal):
            return expr.value
        if isinstance(expr, Grouping):
            return self.evaluate(expr.expression)
        if isinstance(expr, Variable):
            return self.lookup_variable(expr.name, expr)
        if isinstance(expr, Assign):
            value = self.evaluate(expr.value)
            distance = self.locals.get(expr)
            if distance is None:
                self.globals.assign(expr.name, value)
            else:
                self.environment.assign_at(distance, expr.name.lexeme, value)
            return value
        if isinstance(expr, Unary):
            right = self.evaluate(expr.right)
            if expr.operator.type == TokenType.BANG:
                return not self.is_truthy(right)
            if expr.operator.type == TokenType.MINUS:
                self.check_number_operand(expr.operator, right)
                return -right
            raise UnexpectedError(f"unsupported unary operator {expr.operator.lexeme}")
        if isinstance(expr, Binary):
            left = self.evaluate(expr.left)
            right = self.evaluate(expr.right)
            return self.apply_binary_op(expr.operator, left, right)
        if isinstance(expr, Logical):
            left = self.evaluate(expr.left)
            if expr.operator.type == TokenType.OR:
                if self.is_truthy(left):
                    return left
            elif not self.is_truthy(left):
                return left
            return self.evaluate(expr.right)
        if isinstance(expr, Call):
            callee = self.evaluate(expr.callee)
            arguments = [self.evaluate(argument) for argument in expr.arguments]
            return self.call_function(callee, arguments, expr.paren)
        if isinstance(expr, Get):
            obj = self.evaluate(expr.object)
            if isinstance(obj, LoxInstance):
                return obj.get(expr.name)
            raise NotInstanceError(expr.name, 'Only instances have properties.')
        if isinstance(expr, Set):
            obj = self.evaluate(expr.object)
            if not isinstance(obj, LoxInstance):
                raise NotInstanceError(expr.name, 'Only instances have fields.')
            value = self.evaluate(expr.value)
            obj.set(expr.name, value)
            return value
        if isinstance(expr, This):
            return self.lookup_variable(expr.keyword, expr)
        if isinstance(expr, Super):
            return self.evaluate_super(expr)
        raise UnexpectedError(f"evaluate: unexpected node type {type(expr).__name__}")

    def evaluate_super(self, expr: Super) -> Any:
        distance = self.locals.get(expr)
        if distance is None:
            raise UnexpectedError("'super' was not resolved.")
        superclass = self.environment.get_at(distance, 'super')
        # 'this' lives in the environment just inside the one holding 'super'.
        instance = self.environment.get_at(distance - 1, 'this')
        method = superclass.find_method(expr.method.lexeme)
        if method is None:
            raise UndefinedPropertyError(expr.method, f"Undefined property '{expr.method.lexeme}'.")
        return method.bind(instance)

    def lookup_variable(self, name: Token, expr: Expr) -> Any:
        distance = self.locals.get(expr)
        if distance is None:
            return self.globals.get(name)
        return self.environment.get_at(distance, name.lexeme)

    def call_function(self, callee: Any, arguments: List[Any], paren: Token) -> Any:
        if not isinstance(callee, LoxCallable):
            raise NotCallableError(paren, 'Can only call functions and classes.')
        if len(arguments) != callee.arity():
            raise ArgumentCountError(
                paren, f"Expected {callee.arity()} arguments but got {len(arguments)}.")
        if self.debug_level >= 2:
            self.debug(f"call {to_string(callee)} with {len(arguments)} arguments")
        try:
            return callee.call(self, arguments)
        except RecursionError:
            # Caught by the innermost call with room left to build the error.
            raise StackOverflowError(paren, 'Stack overflow.') from None

    def is_truthy(self, value: Any) -> bool:
        if value is None:
            return False
        if isinstance(value, bool):
            return value
        return True

    def apply_binary_op(self, operator: Token, a: Any, b: Any) -> Any:
        op = operator.type
        if op == TokenType.EQUAL_EQUAL:
            return self.equal_values(a, b)
        if op == TokenType.BANG_EQUAL:
            return not self.equal_values(a, b)
        if op == TokenType.PLUS:
            if isinstance(a, float) and isinstance(b, float):
                return a + b
            if isinstance(a, str) and isinstance(b, str):
                return a + b
            raise OperandTypeError(operator, 'Operands must be two numbers or two strings.')

        self.check_number_operands(operator, a, b)
        if op == TokenType.MINUS:
            return a - b
        if op == TokenType.STAR:
            return a * b
        if op == TokenType.SLASH:
            return self.divide(a, b)
        if op == TokenType.GREATER:
            return a > b
        if op == TokenType.GREATER_EQUAL:
            return a >= b
        if op == TokenType.LESS:
            return a < b
        if op == TokenType.LESS_EQUAL:
            return a <= b
        raise UnexpectedError(f"unknown operator {operator.lexeme}")

    @staticmethod
    def divide(a: float, b: float) -> float:
        # Python raises on float division by zero; Lox numbers are IEEE doubles.
        if b == 0.0:
            if a == 0.0 or math.isnan(a):
                return math.nan
            return math.copysign(math.inf, a) * math.copysign(1.0, b)
        return a / b

    def equal_values(self, a: Any, b: Any) -> bool:
        if a is None:
            return b is None
        # No coercion: true != 1 even though Python says True == 1.
        if isinstance(a, bool) or isinstance(b, bool):
            return isinstance(a, bool) and isinstance(b, bool) and a == b
        if isinstance(a, float) and isinstance(b, float):
            return a == b
        if isinstance(a, str) and isinstance(b, str):
            return a == b
        return a is b

    def check_number_operand(self, operator: Token, operand: Any) -> None:
        if not isinstance(operand, float):
            raise OperandTypeError(operator, 'Operand must be a number.')

    def check_number_operands(self, operator: Token, a: Any, b: Any) -> None:
        if not (isinstance(a, float) and isinstance(b, float)):
            raise OperandTypeError(operator, 'Operands must be numbers.')

    @staticmethod
    def line_of(expr: Expr) -> Any:
        for attr in ('name', 'operator', 'keyword', 'paren'):
            token = getattr(expr, attr, None)
            if isinstance(token, Token):
                return token.line
        return '?'

"""
Expression Evaluation - rule expressions behind a small build/evaluate API.

Rule expressions are written in the evalexpr dialect (&&, ||, !, true,
false, ^). They are rewritten into Python expression syntax outside of
string literals and evaluated with simpleeval, which only allows names
and functions that are explicitly handed to it.

Operators keep evalexpr semantics: Int / Int and Int % Int truncate
toward zero, and &&, || and ! require boolean operands.
"""

from __future__ import annotations

import ast
import math
import re
from dataclasses import dataclass, field
from typing import Any, Callable

from simpleeval import DEFAULT_OPERATORS, InvalidExpression, SimpleEval

from fsmatcher.errors import ExpectedBooleanError, ExpressionBuildError, ExpressionEvalError

# Double-quoted string literal with backslash escapes
_STRING_LITERAL = re.compile(r'("(?:[^"\\]|\\.)*")')

_DIALECT_REWRITES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"&&"), " and "),
    (re.compile(r"\|\|"), " or "),
    (re.compile(r"!(?!=)"), " not "),
    (re.compile(r"\btrue\b"), "True"),
    (re.compile(r"\bfalse\b"), "False"),
    (re.compile(r"\^"), "**"),
]


def _contains(collection: Any, item: Any) -> bool:
    return item in collection


BUILTIN_FUNCTIONS: dict[str, Callable[..., Any]] = {
    "min": min,
    "max": max,
    "len": len,
    "floor": math.floor,
    "ceil": math.ceil,
    "round": round,
    "contains": _contains,
}


@dataclass
class EvalContext:
    """Variables and functions visible to one expression evaluation."""

    variables: dict[str, Any] = field(default_factory=dict)
    functions: dict[str, Callable[..., Any]] = field(default_factory=dict)

    def set_value(self, name: str, value: Any) -> None:
        self.variables[name] = value

    def set_function(self, name: str, function: Callable[..., Any]) -> None:
        self.functions[name] = function


def _require_bool(value: Any) -> bool:
    if not isinstance(value, bool):
        raise ExpectedBooleanError(value)
    return value


def _is_int(value: Any) -> bool:
    return type(value) is int


def _div(a: Any, b: Any) -> Any:
    """Int / Int truncates toward zero; anything else is true division."""
    if _is_int(a) and _is_int(b):
        if b == 0:
            raise ExpressionEvalError(f"division by zero: {a} / {b}")
        quotient = abs(a) // abs(b)
        return quotient if (a < 0) == (b < 0) else -quotient
    return a / b


def _mod(a: Any, b: Any) -> Any:
    """Int % Int takes the sign of the dividend."""
    if _is_int(a) and _is_int(b):
        return a - b * _div(a, b)
    return math.fmod(a, b)


def _not(value: Any) -> bool:
    return not _require_bool(value)


OPERATORS = {
    **DEFAULT_OPERATORS,
    ast.Div: _div,
    ast.Mod: _mod,
    ast.Not: _not,
}


class DialectEval(SimpleEval):
    """SimpleEval with evalexpr operand rules for &&, || and !."""

    def _eval_boolop(self, node: ast.BoolOp) -> bool:
        # And stops at the first False, Or at the first True
        short_circuit = isinstance(node.op, ast.Or)
        for value in node.values:
            if _require_bool(self._eval(value)) is short_circuit:
                return short_circuit
        return not short_circuit


def translate(expr: str) -> str:
    """Rewrite evalexpr operators into Python syntax, leaving strings untouched."""
    parts = _STRING_LITERAL.split(expr)
    for i in range(0, len(parts), 2):
        segment = parts[i]
        for pattern, replacement in _DIALECT_REWRITES:
            segment = pattern.sub(replacement, segment)
        parts[i] = segment
    return "".join(parts).strip()


@dataclass(frozen=True)
class CompiledExpression:
    """A parsed rule expression, safe to evaluate from many threads."""

    source: str
    python_source: str
    node: ast.AST

    def evaluate(self, context: EvalContext) -> Any:
        evaluator = DialectEval(
            operators=OPERATORS,
            functions={**BUILTIN_FUNCTIONS, **context.functions},
            names=context.variables,
        )
        try:
            return evaluator.eval(self.python_source, previously_parsed=self.node)
        except ExpressionEvalError:
            raise
        except (InvalidExpression, TypeError, ValueError, ArithmeticError, LookupError) as e:
            raise ExpressionEvalError(f"{type(e).__name__}: {e}") from e


class ExpressionEngine:
    """Compiles rule expression strings."""

    def build(self, expr: str) -> CompiledExpression:
        python_source = translate(expr)
        if not python_source:
            raise ExpressionBuildError("empty expression")
        try:
            # mode="eval" rejects statements and multi-statement input
            ast.parse(python_source, mode="eval")
            node = SimpleEval().parse(python_source)
        except (SyntaxError, InvalidExpression) as e:
            raise ExpressionBuildError(f"cannot parse '{expr}': {e}") from e
        return CompiledExpression(source=expr, python_source=python_source, node=node)


def is_true(value: Any) -> bool:
    """Only a real boolean True counts as a hit."""
    return value is True

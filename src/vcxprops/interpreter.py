"""
Condition Interpreter (Layer 2: Expression AST → bool).

Evaluation is a pure fold over the tree. The only outside contact is the
`exists()` predicate, which asks the filesystem whether a path exists;
callers may inject their own predicate.

IMPORTANT:
    and/or are folded strictly in source order with equal precedence:
        a and b or c   ==  (a and b) or c
        a or b and c   ==  (a or b) and c
    Every suffix term is evaluated, even when the result is already known.
"""

import logging
import os
from typing import Callable, Optional

from vcxprops.condition_parser import parse_condition
from vcxprops.expressions import (
    Comparison,
    ComparisonOperator,
    Expression,
    Function,
    FunctionCall,
    Group,
    Literal,
    LogicalOperator,
    LogicalSequence,
    UnaryExpression,
    UnaryOperator,
)

logger = logging.getLogger(__name__)

PathExists = Callable[[str], bool]


def has_trailing_slash(value: str) -> bool:
    """True iff `value` ends with a forward or back slash."""
    return value.endswith("/") or value.endswith("\\")


def _operand_value(expr: Expression, path_exists: PathExists) -> str:
    """String value of a comparison operand."""
    if isinstance(expr, Literal):
        return expr.value
    # A group compared as a string reads as MSBuild's boolean spelling
    return "true" if evaluate_expression(expr, path_exists) else "false"


def evaluate_expression(expr: Expression, path_exists: Optional[PathExists] = None) -> bool:
    """
    Fold an Expression AST into a boolean.

    Args:
        expr: Root of the tree (usually a LogicalSequence)
        path_exists: Existence predicate for exists(); defaults to os.path.exists

    Returns:
        The truth value of the expression
    """
    if path_exists is None:
        path_exists = os.path.exists

    if isinstance(expr, LogicalSequence):
        result = evaluate_expression(expr.base, path_exists)
        for suffix in expr.suffixes:
            rhs = evaluate_expression(suffix.term, path_exists)
            if suffix.operator == LogicalOperator.AND:
                combined = result and rhs
            else:
                combined = result or rhs
            logger.debug("fold: %s %s %s -> %s", result, suffix.operator.value, rhs, combined)
            result = combined
        return result

    if isinstance(expr, Group):
        return evaluate_expression(expr.expression, path_exists)

    if isinstance(expr, Comparison):
        left = _operand_value(expr.left, path_exists)
        right = _operand_value(expr.right, path_exists)
        if expr.operator == ComparisonOperator.EQUALS:
            return left == right
        return left != right

    if isinstance(expr, UnaryExpression):
        if expr.operator == UnaryOperator.NOT:
            return not evaluate_expression(expr.operand, path_exists)
        raise TypeError(f"Unsupported unary operator: {expr.operator}")

    if isinstance(expr, FunctionCall):
        if expr.function == Function.EXISTS:
            return bool(path_exists(expr.argument.value))
        return has_trailing_slash(expr.argument.value)

    if isinstance(expr, Literal):
        return expr.value != ""

    raise TypeError(f"Unsupported Expression type: {type(expr)}")


def eval_condition(text: str, path_exists: Optional[PathExists] = None) -> bool:
    """
    Parse and evaluate a condition string.

    Raises:
        ConditionParseError: If the text does not match the grammar
    """
    return evaluate_expression(parse_condition(text), path_exists)


__all__ = [
    "eval_condition",
    "evaluate_expression",
    "has_trailing_slash",
]

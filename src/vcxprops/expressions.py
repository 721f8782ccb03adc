"""
Condition Expression AST for vcxprops

Every MSBuild `Condition` attribute is parsed into an Abstract Syntax
Tree before it is evaluated. The tree is built once, never mutated, and
folded to a boolean by the interpreter layer.

ARCHITECTURAL RULE:
    This module is structure only.
    Parsing lives in condition_parser, evaluation in interpreter.
"""

from abc import ABC
from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class Expression(ABC):
    """
    Base class for all condition AST nodes.

    DO NOT:
        - Add evaluation logic here (belongs in interpreter)
        - Add parsing logic here (belongs in condition_parser)
    """
    pass


class ComparisonOperator(Enum):
    """
    String comparison operators.

    Only equality and inequality exist. Numeric and version comparisons
    (<, >, <=, >=) are not part of the supported language.
    """

    EQUALS = "=="
    NOT_EQUALS = "!="


class LogicalOperator(Enum):
    """Operators that combine a running boolean with the next term."""

    AND = "and"
    OR = "or"


class UnaryOperator(Enum):
    """Unary operators."""
    NOT = "!"


class Function(Enum):
    """
    Built-in predicates.

    Values are the spellings used in project files.
    """

    EXISTS = "exists"
    HAS_TRAILING_SLASH = "HasTrailingSlash"


@dataclass(frozen=True)
class Literal(Expression):
    """
    A string literal, quoted or bare.

    Examples:
        - 'Debug|x64'   -> Literal("Debug|x64", quoted=True)
        - Debug         -> Literal("Debug", quoted=False)
        - ''            -> Literal("", quoted=True)

    Properties:
        value: The string content (quotes removed, bare values trimmed)
        quoted: Whether the literal was written in single quotes

    IMPORTANT:
        Used as a standalone term, a literal is true iff it is non-empty.
    """

    value: str
    quoted: bool = False


@dataclass(frozen=True)
class Group(Expression):
    """
    A parenthesized expression: ( expr ).

    Kept as its own node so the tree mirrors the source text.
    """

    expression: Expression


@dataclass(frozen=True)
class Comparison(Expression):
    """
    String comparison of two operands.

    Example:
        '$(Configuration)' == 'Debug'

    Becomes (after macro resolution by the caller):
        Comparison(
            operator=ComparisonOperator.EQUALS,
            left=Literal("Release", quoted=True),
            right=Literal("Debug", quoted=True),
        )

    Properties:
        operator: ComparisonOperator enum
        left: Literal or Group
        right: Literal or Group
    """

    operator: ComparisonOperator
    left: Expression
    right: Expression


@dataclass(frozen=True)
class UnaryExpression(Expression):
    """
    Negation of a single term.

    Example:
        !exists('$(OutDir)')
    """

    operator: UnaryOperator
    operand: Expression


@dataclass(frozen=True)
class FunctionCall(Expression):
    """
    A built-in predicate applied to one string argument.

    Examples:
        - exists('C:\\Program Files')
        - HasTrailingSlash('$(OutDir)')
    """

    function: Function
    argument: Literal


@dataclass(frozen=True)
class LogicalSuffix:
    """One `and term` / `or term` continuation of a LogicalSequence."""

    operator: LogicalOperator
    term: Expression


@dataclass(frozen=True)
class LogicalSequence(Expression):
    """
    A base term followed by and/or continuations, folded left to right.

    Example:
        A and B or C

    Becomes:
        LogicalSequence(
            base=A,
            suffixes=(
                LogicalSuffix(LogicalOperator.AND, B),
                LogicalSuffix(LogicalOperator.OR, C),
            ),
        )

    IMPORTANT:
        There is no operator precedence. The value is
        ((A and B) or C), strictly in written order.
    """

    base: Expression
    suffixes: Tuple[LogicalSuffix, ...] = ()

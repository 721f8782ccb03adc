"""
Condition Parser (Layer 1: Condition string → Expression AST).

Parses the small boolean language used in MSBuild `Condition`
attributes. Macros are expanded by the caller before the text gets here.

Grammar:
    main        := exprs EOF
    exprs       := term (('and' | 'or') term)*
    term        := group | exists | final_slash | eq | ne | not_expr | string
    group       := '(' exprs ')'
    not_expr    := '!' term
    eq          := operand '==' operand
    ne          := operand '!=' operand
    operand     := group | string
    exists      := 'exists' '(' string ')'
    final_slash := 'HasTrailingSlash' '(' string ')'
    string      := quoted_string | bare_string

Syntax Notes:
    - Keywords are case-insensitive (And, OR, Exists all work)
    - Quoted strings use single quotes and have no escapes
    - A bare string stops at whitespace, quotes, parentheses, '=' and '!'
    - and/or have equal precedence and fold left to right
"""

import re
from dataclasses import dataclass
from typing import List, Optional

from vcxprops.errors import ConditionParseError
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
    LogicalSuffix,
    UnaryExpression,
    UnaryOperator,
)


_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
  | (?P<quoted>'[^']*')
  | (?P<ne>!=)
  | (?P<eq>==)
  | (?P<not>!)
  | (?P<lparen>\()
  | (?P<rparen>\))
  | (?P<word>[^\s'()=!]+)
    """,
    re.VERBOSE,
)

_FUNCTIONS = {f.value.lower(): f for f in Function}
_LOGICAL = {op.value: op for op in LogicalOperator}
_COMPARISONS = {"eq": ComparisonOperator.EQUALS, "ne": ComparisonOperator.NOT_EQUALS}


@dataclass(frozen=True)
class Token:
    """A lexical token and its character offset in the condition text."""
    kind: str
    text: str
    position: int


def _tokenize(text: str) -> List[Token]:
    """Tokenize condition text. Whitespace is dropped."""
    tokens = []
    pos = 0
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if m is None:
            if text[pos] == "'":
                raise ConditionParseError(
                    f"Unterminated quoted string at offset {pos}", text=text, position=pos
                )
            raise ConditionParseError(
                f"Unexpected character {text[pos]!r} at offset {pos}", text=text, position=pos
            )
        kind = m.lastgroup
        if kind != "ws":
            tokens.append(Token(kind, m.group(kind), pos))
        pos = m.end()
    return tokens


class _Parser:
    """Recursive-descent parser over a token list."""

    def __init__(self, text: str, tokens: List[Token]):
        self.text = text
        self.tokens = tokens
        self.pos = 0

    def peek(self, offset: int = 0) -> Optional[Token]:
        i = self.pos + offset
        if i < len(self.tokens):
            return self.tokens[i]
        return None

    def error(self, msg: str, token: Optional[Token] = None) -> ConditionParseError:
        if token is None:
            return ConditionParseError(
                f"{msg} at end of condition", text=self.text, position=len(self.text)
            )
        return ConditionParseError(
            f"{msg}: {token.text!r} at offset {token.position}",
            text=self.text,
            position=token.position,
        )

    def expect(self, kind: str, what: str) -> Token:
        token = self.peek()
        if token is None or token.kind != kind:
            raise self.error(f"Expected {what}", token)
        self.pos += 1
        return token

    def parse_main(self) -> Expression:
        if not self.tokens:
            # An empty condition is a single empty string
            return LogicalSequence(base=Literal("", quoted=False))
        expr = self.parse_exprs()
        token = self.peek()
        if token is not None:
            raise self.error("Unexpected token", token)
        return expr

    def parse_exprs(self) -> LogicalSequence:
        base = self.parse_term()
        suffixes = []
        while True:
            token = self.peek()
            if token is None or token.kind != "word" or token.text.lower() not in _LOGICAL:
                break
            self.pos += 1
            suffixes.append(LogicalSuffix(_LOGICAL[token.text.lower()], self.parse_term()))
        return LogicalSequence(base=base, suffixes=tuple(suffixes))

    def parse_term(self) -> Expression:
        token = self.peek()
        if token is None:
            raise self.error("Expected a term")

        if token.kind == "not":
            self.pos += 1
            return UnaryExpression(UnaryOperator.NOT, self.parse_term())

        if token.kind == "word" and token.text.lower() in _FUNCTIONS:
            nxt = self.peek(1)
            if nxt is not None and nxt.kind == "lparen":
                return self.parse_function()

        return self.parse_comparison_or_operand()

    def parse_function(self) -> FunctionCall:
        name = self.expect("word", "function name")
        self.expect("lparen", "'('")
        token = self.peek()
        if token is not None and token.kind == "rparen":
            argument = Literal("", quoted=False)
        else:
            argument = self.parse_string()
        self.expect("rparen", "')'")
        return FunctionCall(_FUNCTIONS[name.text.lower()], argument)

    def parse_comparison_or_operand(self) -> Expression:
        left = self.parse_operand()
        token = self.peek()
        if token is not None and token.kind in _COMPARISONS:
            self.pos += 1
            right = self.parse_operand()
            return Comparison(_COMPARISONS[token.kind], left, right)
        return left

    def parse_operand(self) -> Expression:
        token = self.peek()
        if token is not None and token.kind == "lparen":
            self.pos += 1
            inner = self.parse_exprs()
            self.expect("rparen", "')'")
            return Group(inner)
        return self.parse_string()

    def parse_string(self) -> Literal:
        token = self.peek()
        if token is None:
            raise self.error("Expected a string")
        if token.kind == "quoted":
            self.pos += 1
            return Literal(token.text[1:-1], quoted=True)
        if token.kind == "word":
            self.pos += 1
            return Literal(token.text.strip(), quoted=False)
        raise self.error("Expected a string", token)


def parse_condition(text: str) -> Expression:
    """
    Parse a condition string into an Expression AST.

    Args:
        text: Condition text with macros already expanded

    Returns:
        LogicalSequence at the root (possibly with no suffixes)

    Raises:
        ConditionParseError: If the text does not match the grammar
    """
    tokens = _tokenize(text)
    return _Parser(text, tokens).parse_main()


__all__ = [
    "parse_condition",
    "ConditionParseError",
    "Token",
]

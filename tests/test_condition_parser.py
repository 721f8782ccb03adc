"""
Tests for the condition parser (condition string → Expression AST).

Condition syntax as found in .vcxproj files:
    '$(Configuration)|$(Platform)'=='Debug|x64'
    exists('$(UserRootDir)\\Microsoft.Cpp.$(Platform).user.props')
    '$(OutDir)' != '' and !HasTrailingSlash('$(OutDir)')
"""

import pytest
from vcxprops.condition_parser import parse_condition, ConditionParseError
from vcxprops.errors import VcxpropsError
from vcxprops.expressions import (
    Comparison,
    ComparisonOperator,
    Function,
    FunctionCall,
    Group,
    Literal,
    LogicalOperator,
    LogicalSequence,
    UnaryExpression,
    UnaryOperator,
)


class TestStrings:
    """Quoted and bare strings."""

    def test_root_is_sequence(self):
        """Every parse yields a LogicalSequence at the root."""
        result = parse_condition("'a'")
        assert isinstance(result, LogicalSequence)
        assert result.suffixes == ()

    def test_quoted_string_kept_verbatim(self):
        """Quoted content is not trimmed."""
        result = parse_condition("' a b '")
        assert result.base == Literal(" a b ", quoted=True)

    def test_bare_string_trimmed(self):
        result = parse_condition("   Debug   ")
        assert result.base == Literal("Debug", quoted=False)

    def test_empty_quoted_string(self):
        result = parse_condition("''")
        assert result.base == Literal("", quoted=True)

    def test_empty_condition(self):
        """Empty text is a single empty string."""
        result = parse_condition("")
        assert result.base == Literal("", quoted=False)

    def test_whitespace_only_condition(self):
        result = parse_condition("   ")
        assert result.base == Literal("", quoted=False)

    def test_quoted_string_with_specials(self):
        """Parentheses, '=' and '!' are plain text inside quotes."""
        result = parse_condition("'a(b)==!c'")
        assert result.base.value == "a(b)==!c"


class TestComparisons:
    """== and != between operands."""

    def test_equality(self):
        result = parse_condition("'Debug|x64'=='Debug|x64'")
        expr = result.base
        assert isinstance(expr, Comparison)
        assert expr.operator == ComparisonOperator.EQUALS
        assert expr.left == Literal("Debug|x64", quoted=True)
        assert expr.right == Literal("Debug|x64", quoted=True)

    def test_inequality(self):
        expr = parse_condition("s != q").base
        assert expr.operator == ComparisonOperator.NOT_EQUALS
        assert expr.left == Literal("s")
        assert expr.right == Literal("q")

    def test_mixed_quoted_and_bare(self):
        expr = parse_condition("'hi' == hi").base
        assert expr.left.quoted is True
        assert expr.right.quoted is False

    def test_group_operand(self):
        expr = parse_condition("(a == a) == true").base
        assert isinstance(expr, Comparison)
        assert isinstance(expr.left, Group)
        assert expr.right == Literal("true")

    def test_backslash_paths(self):
        expr = parse_condition("'C:\\Program Files\\' != ''").base
        assert expr.left.value == "C:\\Program Files\\"


class TestGroupsAndNegation:
    """Parentheses and '!'."""

    def test_group(self):
        expr = parse_condition("(s == s)").base
        assert isinstance(expr, Group)
        assert isinstance(expr.expression, LogicalSequence)
        assert isinstance(expr.expression.base, Comparison)

    def test_nested_groups(self):
        expr = parse_condition("((s == q))").base
        assert isinstance(expr, Group)
        assert isinstance(expr.expression.base, Group)

    def test_not_group(self):
        expr = parse_condition("!(s == s)").base
        assert isinstance(expr, UnaryExpression)
        assert expr.operator == UnaryOperator.NOT
        assert isinstance(expr.operand, Group)

    def test_not_applies_to_whole_comparison(self):
        """'!' takes a term, and a comparison is a term."""
        expr = parse_condition("!a == b").base
        assert isinstance(expr, UnaryExpression)
        assert isinstance(expr.operand, Comparison)

    def test_double_negation(self):
        expr = parse_condition("!!x").base
        assert isinstance(expr.operand, UnaryExpression)


class TestFunctions:
    """exists() and HasTrailingSlash()."""

    def test_exists(self):
        expr = parse_condition("exists('C:\\tools\\a.props')").base
        assert expr == FunctionCall(Function.EXISTS, Literal("C:\\tools\\a.props", quoted=True))

    def test_has_trailing_slash(self):
        expr = parse_condition("HasTrailingSlash('out/')").base
        assert expr.function == Function.HAS_TRAILING_SLASH
        assert expr.argument.value == "out/"

    def test_function_names_case_insensitive(self):
        assert parse_condition("Exists('x')").base.function == Function.EXISTS
        assert parse_condition("hastrailingslash('x')").base.function == Function.HAS_TRAILING_SLASH

    def test_bare_argument(self):
        expr = parse_condition("exists(somefile)").base
        assert expr.argument == Literal("somefile")

    def test_empty_argument(self):
        expr = parse_condition("exists()").base
        assert expr.argument.value == ""

    def test_function_name_without_parens_is_string(self):
        expr = parse_condition("exists == exists").base
        assert isinstance(expr, Comparison)
        assert expr.left == Literal("exists")


class TestLogicalSuffixes:
    """and/or sequences."""

    def test_and(self):
        result = parse_condition("(s == s) and (q == q)")
        assert len(result.suffixes) == 1
        assert result.suffixes[0].operator == LogicalOperator.AND

    def test_sequence_order_matches_source(self):
        """A and B or C: one flat sequence, operators in written order."""
        result = parse_condition("a == a and b == c or d != e")
        assert isinstance(result.base, Comparison)
        assert [s.operator for s in result.suffixes] == [LogicalOperator.AND, LogicalOperator.OR]
        assert result.suffixes[1].term.operator == ComparisonOperator.NOT_EQUALS

    def test_keywords_case_insensitive(self):
        result = parse_condition("a And b OR c")
        assert [s.operator for s in result.suffixes] == [LogicalOperator.AND, LogicalOperator.OR]

    def test_not_in_suffix(self):
        result = parse_condition("'$(OutDir)' != '' and !HasTrailingSlash('$(OutDir)')")
        term = result.suffixes[0].term
        assert isinstance(term, UnaryExpression)
        assert isinstance(term.operand, FunctionCall)

    def test_sequence_inside_group(self):
        result = parse_condition("x and (a or b)")
        group = result.suffixes[0].term
        assert isinstance(group, Group)
        assert group.expression.suffixes[0].operator == LogicalOperator.OR


class TestParseErrors:
    """Malformed conditions."""

    @pytest.mark.parametrize("text", [
        "(a == b",
        "a == b)",
        "a ==",
        "== b",
        "a and",
        "'unterminated",
        "a = b",
        "exists('a'",
        "a b",
        "()",
        "!",
    ])
    def test_malformed(self, text):
        with pytest.raises(ConditionParseError):
            parse_condition(text)

    def test_error_reports_position(self):
        with pytest.raises(ConditionParseError) as exc_info:
            parse_condition("'a' == 'b' )")
        assert exc_info.value.position == 11
        assert "')'" in str(exc_info.value)

    def test_unterminated_quote_message(self):
        with pytest.raises(ConditionParseError, match="Unterminated quoted string"):
            parse_condition("'abc")

    def test_error_is_vcxprops_error(self):
        with pytest.raises(VcxpropsError):
            parse_condition("(")

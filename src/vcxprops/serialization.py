"""
Serialization helpers for vcxprops results (property tables, diagnostics,
condition ASTs).

Provides the textual output surface of the CLI (key/value lines, JSON,
YAML) and a lossless dict round-trip for condition expressions.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping

import yaml

from vcxprops.errors import PropertiesFileError
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
from vcxprops.model import Diagnostic, EvaluationContext


def expr_to_dict(expr: Expression | None) -> Any:
    if expr is None:
        return None
    if isinstance(expr, LogicalSequence):
        return {
            "type": "sequence",
            "base": expr_to_dict(expr.base),
            "suffixes": [
                {"operator": s.operator.value, "term": expr_to_dict(s.term)}
                for s in expr.suffixes
            ],
        }
    if isinstance(expr, Group):
        return {"type": "group", "expression": expr_to_dict(expr.expression)}
    if isinstance(expr, Comparison):
        return {
            "type": "comparison",
            "operator": expr.operator.value,
            "left": expr_to_dict(expr.left),
            "right": expr_to_dict(expr.right),
        }
    if isinstance(expr, UnaryExpression):
        return {
            "type": "unary",
            "operator": expr.operator.value,
            "operand": expr_to_dict(expr.operand),
        }
    if isinstance(expr, FunctionCall):
        return {
            "type": "call",
            "function": expr.function.value,
            "argument": expr_to_dict(expr.argument),
        }
    if isinstance(expr, Literal):
        return {"type": "lit", "value": expr.value, "quoted": expr.quoted}
    raise TypeError(f"Unsupported Expression type: {type(expr)}")


def expr_from_dict(d: Any) -> Expression | None:
    if d is None:
        return None
    t = d.get("type")
    if t == "sequence":
        suffixes = tuple(
            LogicalSuffix(LogicalOperator(s["operator"]), expr_from_dict(s["term"]))
            for s in d.get("suffixes", [])
        )
        return LogicalSequence(base=expr_from_dict(d["base"]), suffixes=suffixes)
    if t == "group":
        return Group(expr_from_dict(d["expression"]))
    if t == "comparison":
        return Comparison(
            operator=ComparisonOperator(d["operator"]),
            left=expr_from_dict(d["left"]),
            right=expr_from_dict(d["right"]),
        )
    if t == "unary":
        return UnaryExpression(UnaryOperator(d["operator"]), expr_from_dict(d["operand"]))
    if t == "call":
        return FunctionCall(Function(d["function"]), expr_from_dict(d["argument"]))
    if t == "lit":
        return Literal(d["value"], quoted=d.get("quoted", False))
    raise TypeError(f"Unsupported expression dict type: {t}")


def diagnostic_to_dict(diag: Diagnostic) -> Dict[str, Any]:
    return {"kind": diag.kind.value, "message": diag.message, "details": dict(diag.details)}


def context_to_dict(ctx: EvaluationContext) -> Dict[str, Any]:
    return {
        "configuration": ctx.active_configuration,
        "properties": dict(sorted(ctx.properties.items())),
        "diagnostics": [diagnostic_to_dict(d) for d in ctx.diagnostics],
    }


def properties_to_lines(properties: Mapping[str, str]) -> List[str]:
    """One `Key: <name> | Value: <value>` line per property, sorted by name."""
    return [f"Key: {key} | Value: {value}" for key, value in sorted(properties.items())]


def properties_to_json(properties: Mapping[str, str]) -> str:
    return json.dumps(dict(properties), sort_keys=True, indent=2)


def properties_to_yaml(properties: Mapping[str, str]) -> str:
    return yaml.safe_dump(dict(properties), default_flow_style=False)


def context_to_json(ctx: EvaluationContext) -> str:
    return json.dumps(context_to_dict(ctx), sort_keys=True, indent=2)


def context_to_yaml(ctx: EvaluationContext) -> str:
    return yaml.safe_dump(context_to_dict(ctx), default_flow_style=False)


def properties_from_yaml(s: str) -> Dict[str, str]:
    """
    Load a property table written by properties_to_yaml (or by hand).

    Scalars are read with the YAML base loader, so `true`, `1.10` or
    `0x10` stay exactly as written. An empty value becomes "".

    Raises:
        PropertiesFileError: If the text is not YAML or not a flat mapping
    """
    try:
        d = yaml.load(s, Loader=yaml.BaseLoader) or {}
    except yaml.YAMLError as e:
        raise PropertiesFileError(f"Invalid properties file: {e}") from e
    if not isinstance(d, dict):
        raise PropertiesFileError(f"Expected a mapping of properties, got {type(d).__name__}")

    properties = {}
    for key, value in d.items():
        if value is None:
            value = ""
        if not isinstance(key, str) or not isinstance(value, str):
            raise PropertiesFileError(f"Property {key!r} must map to a single value")
        properties[key] = value
    return properties

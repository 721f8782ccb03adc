"""
Tests for serialization of evaluation results and condition ASTs.
"""

import json

import pytest
import yaml

from vcxprops.condition_parser import parse_condition
from vcxprops.errors import PropertiesFileError
from vcxprops.model import DiagnosticKind, EvaluationContext
from vcxprops.serialization import (
    context_to_dict,
    context_to_json,
    context_to_yaml,
    expr_from_dict,
    expr_to_dict,
    properties_from_yaml,
    properties_to_json,
    properties_to_lines,
    properties_to_yaml,
)


def build_sample_context() -> EvaluationContext:
    ctx = EvaluationContext(active_configuration="Debug|x64")
    ctx.set_property("Platform", "x64")
    ctx.set_property("Configuration", "Debug")
    ctx.set_property("OutDir", "bin\\")
    ctx.set_property("OutDir", "out\\")
    return ctx


def test_property_lines_sorted():
    ctx = build_sample_context()
    assert properties_to_lines(ctx.properties) == [
        "Key: Configuration | Value: Debug",
        "Key: OutDir | Value: out\\",
        "Key: Platform | Value: x64",
    ]


def test_properties_json():
    ctx = build_sample_context()
    assert json.loads(properties_to_json(ctx.properties)) == ctx.properties


def test_properties_yaml_roundtrip():
    ctx = build_sample_context()
    assert properties_from_yaml(properties_to_yaml(ctx.properties)) == ctx.properties


def test_properties_from_yaml_keeps_text():
    """Hand-written scalars stay exactly as typed."""
    props = properties_from_yaml(
        "WarningLevel: 3\nTreatWarningAsError: true\nToolsVersion: 1.10\n"
        "Flags: 0x10\nOn: no\nEmpty:\n"
    )
    assert props == {
        "WarningLevel": "3",
        "TreatWarningAsError": "true",
        "ToolsVersion": "1.10",
        "Flags": "0x10",
        "On": "no",
        "Empty": "",
    }


def test_properties_from_yaml_empty_document():
    assert properties_from_yaml("") == {}


def test_properties_from_yaml_rejects_lists():
    with pytest.raises(PropertiesFileError, match="Expected a mapping"):
        properties_from_yaml("- a\n- b\n")


def test_properties_from_yaml_rejects_nested_values():
    with pytest.raises(PropertiesFileError, match="'Defines'"):
        properties_from_yaml("Defines:\n  - A\n  - B\n")


def test_properties_from_yaml_invalid_yaml():
    with pytest.raises(PropertiesFileError, match="Invalid properties file"):
        properties_from_yaml("A: [unclosed\n")


def test_context_dict():
    d = context_to_dict(build_sample_context())
    assert d["configuration"] == "Debug|x64"
    assert list(d["properties"]) == ["Configuration", "OutDir", "Platform"]
    assert d["diagnostics"] == [{
        "kind": DiagnosticKind.PROPERTY_OVERWRITTEN.value,
        "message": 'Key: OutDir | Replacing "bin\\" with "out\\"',
        "details": {"name": "OutDir", "old": "bin\\", "new": "out\\"},
    }]


def test_context_json_and_yaml_agree():
    ctx = build_sample_context()
    assert json.loads(context_to_json(ctx)) == yaml.safe_load(context_to_yaml(ctx))


def test_expression_dict_roundtrip():
    cond = "!exists('a') and ('$(X)' == 'b' or HasTrailingSlash(c/)) or (x == y) != false"
    expr = parse_condition(cond)
    d = expr_to_dict(expr)
    assert d["type"] == "sequence"
    assert [s["operator"] for s in d["suffixes"]] == ["and", "or"]
    assert expr_from_dict(d) == expr


def test_expression_dict_survives_json():
    expr = parse_condition("'a' == b")
    assert expr_from_dict(json.loads(json.dumps(expr_to_dict(expr)))) == expr


def test_none_and_unknown():
    assert expr_to_dict(None) is None
    assert expr_from_dict(None) is None
    with pytest.raises(TypeError):
        expr_from_dict({"type": "mystery"})

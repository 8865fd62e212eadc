#  This file is part of evocase.
#
#  SPDX-FileCopyrightText: 2019–2025 evocase Contributors
#
#  SPDX-License-Identifier: MIT
#
import ast

from unittest.mock import MagicMock

import pytest

import evocase.assertion.assertion as ass
import evocase.assertion.assertion_to_ast as ata
import evocase.configuration as config
import evocase.testcase.variablereference as vr
import evocase.utils.ast_util as au

from evocase.analyses.typesystem import Instance
from evocase.analyses.typesystem import TypeInfo
from evocase.utils.namingscope import NamingScope
from tests.fixtures.examples.calculator import Calculator
from tests.fixtures.examples.colors import Color


@pytest.fixture
def visitor_and_ref() -> tuple[ata.PyTestAssertionToAstVisitor, vr.VariableReference]:
    scope = NamingScope()
    module_aliases = NamingScope(prefix="module")
    var = vr.VariableReference(MagicMock(), Instance(TypeInfo(int)), 0)
    return (
        ata.PyTestAssertionToAstVisitor(
            scope,
            module_aliases,
            set(),
            statement_node=au.create_ast_assign(
                au.create_ast_name(scope.get_name(var), store=True), au.create_ast_constant(5)
            ),
        ),
        var,
    )


def _source(module_body: list[ast.stmt]) -> str:
    return ast.unparse(ast.fix_missing_locations(ast.Module(body=module_body, type_ignores=[])))


def test_type_name(visitor_and_ref):
    visitor, ref = visitor_and_ref
    assertion = ass.TypeNameAssertion(source=ref, module="foo", qualname="bar")
    assertion.accept(visitor)
    assert (
        _source(visitor.nodes)
        == "var_0 = 5\nassert f'{type(var_0).__module__}.{type(var_0).__qualname__}' "
        "== 'foo.bar'"
    )


@pytest.mark.parametrize(
    "obj,output",
    [
        (True, "assert var_0 is True"),
        (False, "assert var_0 is False"),
        (None, "assert var_0 is None"),
        (3, "assert var_0 == 3"),
        ("foo", "assert var_0 == 'foo'"),
        (b"foo", "assert var_0 == b'foo'"),
        ((True, False), "assert var_0 == (True, False)"),
        ([3, 8], "assert var_0 == [3, 8]"),
        ([[3, 8], {"foo"}], "assert var_0 == [[3, 8], {'foo'}]"),
        (set(), "assert var_0 == set()"),
        (frozenset(), "assert var_0 == frozenset()"),
        (frozenset({1}), "assert var_0 == frozenset({1})"),
        (
            {"foo": ["nope", 1, False, None]},
            "assert var_0 == {'foo': ['nope', 1, False, None]}",
        ),
        (
            {"foo": "bar", "baz": "argh"},
            "assert var_0 == {'foo': 'bar', 'baz': 'argh'}",
        ),
        (Color.RED, "assert var_0 == module_0.Color.RED"),
        ({Color.BLUE: False}, "assert var_0 == {module_0.Color.BLUE: False}"),
    ],
)
def test_object_assertion(visitor_and_ref, obj, output):
    visitor, ref = visitor_and_ref
    assertion = ass.ObjectAssertion(source=ref, value=obj)
    assertion.accept(visitor)
    assert _source(visitor.nodes) == "var_0 = 5\n" + output


def test_object_assertion_not_assertable(visitor_and_ref):
    visitor, ref = visitor_and_ref
    assertion = ass.ObjectAssertion(source=ref, value=Calculator())
    with pytest.raises(AssertionError):
        assertion.accept(visitor)


def test_object_assertion_common_module(test_case_mock):
    scope = NamingScope()
    module_aliases = NamingScope(prefix="module")
    ref = vr.VariableReference(test_case_mock, Instance(TypeInfo(Color)), 0)
    visitor = ata.PyTestAssertionToAstVisitor(
        scope, module_aliases, {"tests.fixtures.examples.colors"}, ast.Pass()
    )
    ass.ObjectAssertion(ref, Color.GREEN).accept(visitor)
    assert _source(visitor.nodes) == (
        "pass\nassert var_0 == tests.fixtures.examples.colors.Color.GREEN"
    )
    assert len(module_aliases) == 0


def test_float_assertion(visitor_and_ref):
    visitor, ref = visitor_and_ref
    assertion = ass.FloatAssertion(source=ref, value=1.5)
    assertion.accept(visitor)
    assert (
        _source(visitor.nodes)
        == "var_0 = 5\nassert var_0 == pytest.approx(1.5, abs=0.01, rel=0.01)"
    )


def test_float_assertion_precision(visitor_and_ref):
    config.configuration.execution.float_precision = 0.5
    visitor, ref = visitor_and_ref
    ass.FloatAssertion(source=ref, value=1.5).accept(visitor)
    assert _source(visitor.nodes).endswith(
        "pytest.approx(1.5, abs=0.5, rel=0.5)"
    )


@pytest.mark.parametrize(
    "length, output",
    [(0, "assert len(var_0) == 0"), (42, "assert len(var_0) == 42")],
)
def test_collection_length(visitor_and_ref, length, output):
    visitor, ref = visitor_and_ref
    assertion = ass.CollectionLengthAssertion(source=ref, length=length)
    assertion.accept(visitor)
    assert _source(visitor.nodes) == "var_0 = 5\n" + output


def test_field_source(test_case_mock, value_field):
    scope = NamingScope()
    calculator = vr.VariableReference(test_case_mock, Instance(TypeInfo(Calculator)), 0)
    visitor = ata.PyTestAssertionToAstVisitor(scope, NamingScope("module"), set(), ast.Pass())
    ass.ObjectAssertion(vr.FieldReference(calculator, value_field), 10).accept(visitor)
    assert _source(visitor.nodes) == "pass\nassert var_0.value == 10"


def test_raises_exception(visitor_and_ref):
    visitor, _ref = visitor_and_ref
    assertion = ass.ExceptionAssertion(module="builtins", exception_type_name="AssertionError")
    assertion.accept(visitor)
    assert _source(visitor.nodes) == "with pytest.raises(AssertionError):\n    var_0 = 5"


def test_raises_exception_of_module(visitor_and_ref):
    visitor, _ref = visitor_and_ref
    assertion = ass.ExceptionAssertion(module="json.decoder", exception_type_name="JSONDecodeError")
    assertion.accept(visitor)
    assert _source(visitor.nodes) == "with pytest.raises(module_0.JSONDecodeError):\n    var_0 = 5"


def test_raises_exception_keeps_other_assertions(visitor_and_ref):
    visitor, ref = visitor_and_ref
    ass.ObjectAssertion(source=ref, value=5).accept(visitor)
    ass.ExceptionAssertion("builtins", "ValueError").accept(visitor)
    assert (
        _source(visitor.nodes)
        == "with pytest.raises(ValueError):\n    var_0 = 5\nassert var_0 == 5"
    )

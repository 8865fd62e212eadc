#  This file is part of evocase.
#
#  SPDX-FileCopyrightText: 2019–2025 evocase Contributors
#
#  SPDX-License-Identifier: MIT
#
from unittest.mock import MagicMock

import pytest

import evocase.testcase.defaulttestcase as dtc
import evocase.testcase.statement as stmt
import evocase.testcase.variablereference as vr
import evocase.utils.namingscope as ns

from evocase.analyses.typesystem import NONE_TYPE
from evocase.analyses.typesystem import Instance
from evocase.analyses.typesystem import TypeInfo
from evocase.utils.exceptions import MissingPositionError
from tests.fixtures.examples.calculator import Calculator


INT = Instance(TypeInfo(int))
FLOAT = Instance(TypeInfo(float))


@pytest.fixture
def int_ref(test_case_mock):
    return vr.VariableReference(test_case_mock, INT, 0)


@pytest.fixture
def populated_test_case(calculator_constructor):
    test_case = dtc.DefaultTestCase()
    test_case.add_statement(stmt.ConstructorStatement(test_case, calculator_constructor))
    test_case.add_statement(stmt.IntPrimitiveStatement(test_case, 5))
    return test_case


def test_getters(test_case_mock, int_ref):
    assert int_ref.type == INT
    assert int_ref.test_case is test_case_mock
    assert int_ref.position == 0
    assert int_ref.get_statement_position() == 0


def test_detached_position(test_case_mock):
    assert vr.VariableReference(test_case_mock, INT).position == -1


def test_position_setter(int_ref):
    int_ref.position = 3
    assert int_ref.get_statement_position() == 3


def test_distance(int_ref):
    assert int_ref.distance == 0
    int_ref.distance = 42
    assert int_ref.distance == 42


@pytest.mark.parametrize(
    "type_,result",
    [
        pytest.param(INT, True),
        pytest.param(Instance(TypeInfo(str)), True),
        pytest.param(Instance(TypeInfo(Calculator)), False),
        pytest.param(NONE_TYPE, False),
    ],
)
def test_is_primitive(test_case_mock, type_, result):
    assert vr.VariableReference(test_case_mock, type_, 0).is_primitive() == result


def test_is_none_type(test_case_mock, int_ref):
    assert vr.VariableReference(test_case_mock, NONE_TYPE, 0).is_none_type()
    assert not int_ref.is_none_type()


def test_type_setter(int_ref):
    int_ref.type = FLOAT
    assert int_ref.type == FLOAT


def test_get_names(int_ref):
    assert int_ref.get_names(ns.NamingScope(), ns.NamingScope("module")) == ["var_0"]


def test_eq_ignores_test_case(int_ref):
    other = vr.VariableReference(MagicMock(), INT, 0)
    assert int_ref == other
    assert hash(int_ref) == hash(other)


@pytest.mark.parametrize(
    "type_,position",
    [
        pytest.param(FLOAT, 0),
        pytest.param(INT, 1),
    ],
)
def test_not_eq(test_case_mock, int_ref, type_, position):
    other = vr.VariableReference(test_case_mock, type_, position)
    assert int_ref != other
    assert not int_ref.same(other)


def test_not_eq_other_type(int_ref):
    assert int_ref != "foo"
    assert not int_ref.same("foo")


def test_hash_stable_under_renumbering(int_ref):
    before = hash(int_ref)
    int_ref.position = 7
    assert hash(int_ref) == before


def test_same_and_structural_hash(int_ref):
    other = vr.VariableReference(MagicMock(), INT, 0)
    assert int_ref.same(other)
    assert int_ref.structural_hash() == other.structural_hash()


def test_get_variable_reference(int_ref):
    assert int_ref.get_variable_reference() is int_ref


def test_replace_variable_reference_noop(test_case_mock, int_ref):
    int_ref.replace_variable_reference(int_ref, vr.VariableReference(test_case_mock, INT, 1))
    assert int_ref.position == 0


def test_clone_into_test_case(populated_test_case):
    source = dtc.DefaultTestCase()
    ref = vr.VariableReference(source, INT, 0)
    assert ref.clone(populated_test_case, 1) is populated_test_case.get_statement(1).ret_val


def test_clone_missing_position(populated_test_case):
    ref = vr.VariableReference(dtc.DefaultTestCase(), INT, 5)
    with pytest.raises(MissingPositionError):
        ref.clone(populated_test_case)


def test_clone_type_mismatch(populated_test_case):
    ref = vr.VariableReference(dtc.DefaultTestCase(), INT, 0)
    with pytest.raises(MissingPositionError):
        ref.clone(populated_test_case)


def test_remap(test_case_mock, int_ref):
    target = vr.VariableReference(test_case_mock, INT, 4)
    assert int_ref.remap({int_ref: target}) is target


def test_str_and_repr(int_ref):
    assert repr(int_ref) == f"VariableReference(0, {INT})"
    assert str(int_ref) == f"{INT} v0"


@pytest.fixture
def calculator_ref(test_case_mock):
    return vr.VariableReference(test_case_mock, Instance(TypeInfo(Calculator)), 0)


@pytest.fixture
def field_ref(calculator_ref, value_field):
    return vr.FieldReference(calculator_ref, value_field)


def test_field_getters(field_ref, calculator_ref, value_field):
    assert field_ref.source is calculator_ref
    assert field_ref.field is value_field
    assert field_ref.type == INT


def test_field_get_names(field_ref):
    assert field_ref.get_names(ns.NamingScope(), ns.NamingScope("module")) == [
        "var_0",
        "value",
    ]


def test_field_get_variable_reference(field_ref, calculator_ref):
    assert field_ref.get_variable_reference() is calculator_ref


def test_field_eq(field_ref, calculator_ref, value_field):
    other = vr.FieldReference(calculator_ref, value_field)
    assert field_ref == other
    assert hash(field_ref) == hash(other)
    assert field_ref.same(other)
    assert field_ref.structural_hash() == other.structural_hash()


def test_field_not_eq(field_ref, test_case_mock, value_field):
    other = vr.FieldReference(
        vr.VariableReference(test_case_mock, Instance(TypeInfo(Calculator)), 1), value_field
    )
    assert field_ref != other
    assert not field_ref.same(other)
    assert field_ref != "value"
    assert not field_ref.same("value")


def test_field_replace_variable_reference(field_ref, calculator_ref, test_case_mock):
    new = vr.VariableReference(test_case_mock, Instance(TypeInfo(Calculator)), 1)
    field_ref.replace_variable_reference(calculator_ref, new)
    assert field_ref.source is new


def test_field_replace_unrelated(field_ref, calculator_ref, test_case_mock):
    unrelated = vr.VariableReference(test_case_mock, INT, 1)
    field_ref.replace_variable_reference(unrelated, vr.VariableReference(test_case_mock, INT, 2))
    assert field_ref.source is calculator_ref


def test_field_remap_creates_new_reference(field_ref, calculator_ref, test_case_mock):
    target = vr.VariableReference(test_case_mock, Instance(TypeInfo(Calculator)), 3)
    remapped = field_ref.remap({calculator_ref: target})
    assert remapped is not field_ref
    assert remapped.source is target
    assert field_ref.source is calculator_ref


def test_field_clone(populated_test_case, value_field):
    calculator = vr.VariableReference(
        dtc.DefaultTestCase(), Instance(TypeInfo(Calculator)), 0
    )
    clone = vr.FieldReference(calculator, value_field).clone(populated_test_case)
    assert clone.source is populated_test_case.get_statement(0).ret_val
    assert clone.field is value_field


def test_reference_memo(populated_test_case):
    ref = vr.VariableReference(dtc.DefaultTestCase(), INT, 0)
    memo = vr.ReferenceMemo(populated_test_case, 1)
    counterpart = memo[ref]
    assert counterpart is populated_test_case.get_statement(1).ret_val
    assert ref in memo


def test_reference_memo_explicit_mapping(populated_test_case, int_ref, test_case_mock):
    target = vr.VariableReference(test_case_mock, INT, 9)
    memo = vr.ReferenceMemo(populated_test_case)
    memo[int_ref] = target
    assert memo[int_ref] is target


def test_reference_memo_missing(populated_test_case):
    memo = vr.ReferenceMemo(populated_test_case, 3)
    with pytest.raises(MissingPositionError):
        memo[vr.VariableReference(dtc.DefaultTestCase(), INT, 0)]


def test_identity_memo(int_ref):
    memo = vr.IdentityMemo()
    assert memo[int_ref] is int_ref
    assert int_ref not in memo

#  This file is part of evocase.
#
#  SPDX-FileCopyrightText: 2019–2025 evocase Contributors
#
#  SPDX-License-Identifier: MIT
#
from unittest import mock

import pytest

import evocase.testcase.testfactory as tf
import evocase.utils.generic.genericaccessibleobject as gao

from evocase.analyses.typesystem import Instance
from evocase.analyses.typesystem import TypeInfo
from evocase.utils import randomness
from tests.fixtures.examples.calculator import Calculator
from tests.fixtures.examples.calculator import fail
from tests.fixtures.examples.calculator import negate


INT = Instance(TypeInfo(int))


@pytest.fixture
def factory():
    return tf.RandomMutationFactory()


def test_get_replacement(factory, calculator_test_case):
    tripled = calculator_test_case.get_statement(3)
    current = calculator_test_case.get_statement(2).ret_val
    replacement = factory.get_replacement(calculator_test_case, tripled, current, INT, 3)
    assert replacement is calculator_test_case.get_statement(1).ret_val


def test_get_replacement_excludes_own_value(factory, calculator_test_case):
    added = calculator_test_case.get_statement(2)
    replacement = factory.get_replacement(calculator_test_case, added, None, INT, 3)
    assert replacement is calculator_test_case.get_statement(1).ret_val


def test_get_replacement_respects_position(factory, calculator_test_case):
    tripled = calculator_test_case.get_statement(3)
    assert factory.get_replacement(calculator_test_case, tripled, None, INT, 1) is None


def test_get_replacement_without_candidate(factory, calculator_test_case):
    tripled = calculator_test_case.get_statement(3)
    str_type = Instance(TypeInfo(str))
    assert factory.get_replacement(calculator_test_case, tripled, None, str_type, 3) is None


def test_get_replacement_chooses_randomly(factory, calculator_test_case):
    tripled = calculator_test_case.get_statement(3)
    with mock.patch.object(randomness, "choice") as choice_mock:
        choice_mock.side_effect = lambda candidates: candidates[-1]
        replacement = factory.get_replacement(calculator_test_case, tripled, None, INT, 3)
    assert replacement is calculator_test_case.get_statement(2).ret_val
    candidates = choice_mock.call_args.args[0]
    assert [var.position for var in candidates] == [1, 2]


def test_get_alternative_operation(calculator_test_case, triple_function):
    negate_function = gao.GenericFunction.from_function(negate)
    factory = tf.RandomMutationFactory([
        triple_function,
        negate_function,
        gao.GenericFunction.from_function(fail),
        gao.GenericMethod.from_class(Calculator, "double"),
    ])
    tripled = calculator_test_case.get_statement(3)
    assert factory.get_alternative_operation(calculator_test_case, tripled) == negate_function


def test_get_alternative_operation_without_candidate(calculator_test_case, triple_function):
    factory = tf.RandomMutationFactory([triple_function])
    tripled = calculator_test_case.get_statement(3)
    assert factory.get_alternative_operation(calculator_test_case, tripled) is None


def test_get_alternative_operation_not_callable(calculator_test_case, triple_function):
    factory = tf.RandomMutationFactory([triple_function])
    number = calculator_test_case.get_statement(1)
    assert factory.get_alternative_operation(calculator_test_case, number) is None

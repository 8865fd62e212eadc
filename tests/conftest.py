#  This file is part of evocase.
#
#  SPDX-FileCopyrightText: 2019–2025 evocase Contributors
#
#  SPDX-License-Identifier: MIT
#
from unittest.mock import MagicMock

import pytest

import evocase.configuration as config
import evocase.testcase.defaulttestcase as dtc
import evocase.testcase.statement as stmt
import evocase.testcase.testcase as tc
import evocase.testcase.variablereference as vr
import evocase.utils.generic.genericaccessibleobject as gao

from evocase.analyses.typesystem import Instance
from evocase.analyses.typesystem import TypeInfo
from evocase.utils import randomness
from tests.fixtures.examples.calculator import Calculator
from tests.fixtures.examples.calculator import Point
from tests.fixtures.examples.calculator import triple
from tests.fixtures.examples.colors import Color


@pytest.fixture(autouse=True)
def reset_configuration():
    """Automatically reset the configuration singleton and the random source."""
    config.configuration = config.Configuration(seed=42)
    randomness.seed_from_configuration()


@pytest.fixture
def test_case_mock():
    return MagicMock(tc.TestCase)


@pytest.fixture
def default_test_case():
    return dtc.DefaultTestCase()


@pytest.fixture
def variable_reference_mock():
    return MagicMock(vr.Reference)


@pytest.fixture
def calculator_constructor() -> gao.GenericConstructor:
    return gao.GenericConstructor.from_class(Calculator)


@pytest.fixture
def point_constructor() -> gao.GenericConstructor:
    return gao.GenericConstructor.from_class(Point)


@pytest.fixture
def add_method() -> gao.GenericMethod:
    return gao.GenericMethod.from_class(Calculator, "add")


@pytest.fixture
def divide_method() -> gao.GenericMethod:
    return gao.GenericMethod.from_class(Calculator, "divide")


@pytest.fixture
def declared_divide_method() -> gao.GenericMethod:
    return gao.GenericMethod.from_class(
        Calculator, "divide", raised_exceptions=["ZeroDivisionError"]
    )


@pytest.fixture
def triple_function() -> gao.GenericFunction:
    return gao.GenericFunction.from_function(triple)


@pytest.fixture
def value_field() -> gao.GenericField:
    return gao.GenericField(TypeInfo(Calculator), "value", Instance(TypeInfo(int)))


@pytest.fixture
def color_enum() -> gao.GenericEnum:
    return gao.GenericEnum(TypeInfo(Color))


@pytest.fixture
def calculator_test_case(default_test_case, calculator_constructor, add_method, triple_function):
    """Builds a test case of the following shape.

    calculator_0 = module_0.Calculator()
    int_0 = 5
    int_1 = calculator_0.add(int_0)
    int_2 = module_0.triple(int_1)
    """
    calculator = default_test_case.add_statement(
        stmt.ConstructorStatement(default_test_case, calculator_constructor)
    )
    int_0 = default_test_case.add_statement(stmt.IntPrimitiveStatement(default_test_case, 5))
    int_1 = default_test_case.add_statement(
        stmt.MethodStatement(default_test_case, add_method, calculator, {"amount": int_0})
    )
    default_test_case.add_statement(
        stmt.FunctionStatement(default_test_case, triple_function, {"number": int_1})
    )
    return default_test_case


@pytest.fixture
def dividing_test_case(default_test_case, calculator_constructor, divide_method):
    """Builds a test case that divides by zero in its last statement."""
    calculator = default_test_case.add_statement(
        stmt.ConstructorStatement(default_test_case, calculator_constructor)
    )
    zero = default_test_case.add_statement(stmt.IntPrimitiveStatement(default_test_case, 0))
    default_test_case.add_statement(
        stmt.MethodStatement(default_test_case, divide_method, calculator, {"divisor": zero})
    )
    return default_test_case

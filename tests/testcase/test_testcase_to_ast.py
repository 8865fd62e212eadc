#  This file is part of evocase.
#
#  SPDX-FileCopyrightText: 2019–2025 evocase Contributors
#
#  SPDX-License-Identifier: MIT
#
import ast

from ast import Module

import pytest

import evocase.assertion.assertion as ass
import evocase.testcase.testcase_to_ast as tc_to_ast
import evocase.utils.namingscope as ns

from evocase.analyses.typesystem import Instance
from evocase.analyses.typesystem import TypeInfo
from evocase.testcase.execution import ExecutionResult


def _source(visitor: tc_to_ast.TestCaseToAstVisitor) -> str:
    module = Module(body=visitor.test_case_ast, type_ignores=[])
    return ast.unparse(ast.fix_missing_locations(module))


@pytest.fixture
def declared_division_result():
    result = ExecutionResult()
    result.report_new_thrown_exception(2, ZeroDivisionError(), declared=True)
    return result


def test_test_case_to_ast_only_stores_used_values(calculator_test_case):
    visitor = tc_to_ast.TestCaseToAstVisitor(ns.NamingScope("module"), set())
    calculator_test_case.accept(visitor)
    assert _source(visitor) == (
        "calculator_0 = module_0.Calculator()\n"
        "int_0 = 5\n"
        "int_1 = calculator_0.add(int_0)\n"
        "module_0.triple(int_1)"
    )


def test_test_case_to_ast_store_call_return(calculator_test_case):
    visitor = tc_to_ast.TestCaseToAstVisitor(
        ns.NamingScope("module"), set(), store_call_return=True
    )
    calculator_test_case.accept(visitor)
    assert _source(visitor).endswith("int_2 = module_0.triple(int_1)")


def test_test_case_to_ast_twice(calculator_test_case):
    visitor = tc_to_ast.TestCaseToAstVisitor(ns.NamingScope("module"), set())
    calculator_test_case.accept(visitor)
    first = _source(visitor)
    calculator_test_case.accept(visitor)
    assert _source(visitor) == first


def test_test_case_to_ast_module_aliases(calculator_test_case):
    module_aliases = ns.NamingScope("module")
    visitor = tc_to_ast.TestCaseToAstVisitor(module_aliases, set())
    calculator_test_case.accept(visitor)
    calculator_test_case.accept(visitor)
    assert dict(module_aliases) == {"tests.fixtures.examples.calculator": "module_0"}


def test_test_case_to_ast_stores_for_assertions(calculator_test_case):
    tripled = calculator_test_case.get_statement(3)
    tripled.add_assertion(ass.ObjectAssertion(tripled.ret_val, 45))
    visitor = tc_to_ast.TestCaseToAstVisitor(ns.NamingScope("module"), set())
    calculator_test_case.accept(visitor)
    assert _source(visitor).endswith("int_2 = module_0.triple(int_1)\nassert int_2 == 45")


def test_test_case_to_ast_uses_return_type_trace(calculator_test_case):
    result = ExecutionResult()
    result.proper_return_type_trace = {3: Instance(TypeInfo(bool))}
    visitor = tc_to_ast.TestCaseToAstVisitor(
        ns.NamingScope("module"), set(), result, store_call_return=True
    )
    calculator_test_case.accept(visitor)
    assert _source(visitor).endswith("bool_0 = module_0.triple(int_1)")


def test_test_case_to_ast_declared_fault(dividing_test_case, declared_division_result):
    visitor = tc_to_ast.TestCaseToAstVisitor(
        ns.NamingScope("module"), set(), declared_division_result
    )
    dividing_test_case.accept(visitor)
    assert _source(visitor) == (
        "calculator_0 = module_0.Calculator()\n"
        "int_0 = 0\n"
        "with pytest.raises(ZeroDivisionError):\n"
        "    calculator_0.divide(int_0)"
    )
    assert not visitor.is_failing_test


def test_test_case_to_ast_undeclared_fault(dividing_test_case):
    result = ExecutionResult()
    result.report_new_thrown_exception(2, ZeroDivisionError())
    visitor = tc_to_ast.TestCaseToAstVisitor(ns.NamingScope("module"), set(), result)
    dividing_test_case.accept(visitor)
    assert _source(visitor).endswith("\ncalculator_0.divide(int_0)")
    assert visitor.is_failing_test


def test_test_case_to_ast_asserted_fault(dividing_test_case):
    division = dividing_test_case.get_statement(2)
    division.add_assertion(ass.ExceptionAssertion("builtins", "ZeroDivisionError"))
    result = ExecutionResult()
    result.report_new_thrown_exception(2, ZeroDivisionError())
    visitor = tc_to_ast.TestCaseToAstVisitor(ns.NamingScope("module"), set(), result)
    dividing_test_case.accept(visitor)
    assert _source(visitor).endswith(
        "with pytest.raises(ZeroDivisionError):\n    calculator_0.divide(int_0)"
    )
    assert _source(visitor).count("pytest.raises") == 1
    assert not visitor.is_failing_test


def test_test_case_to_ast_exception_assertion_without_result(dividing_test_case):
    division = dividing_test_case.get_statement(2)
    division.add_assertion(ass.ExceptionAssertion("builtins", "ZeroDivisionError"))
    visitor = tc_to_ast.TestCaseToAstVisitor(
        ns.NamingScope("module"), set(), store_call_return=True
    )
    dividing_test_case.accept(visitor)
    assert _source(visitor).endswith(
        "with pytest.raises(ZeroDivisionError):\n    calculator_0.divide(int_0)"
    )


def test_test_case_to_ast_is_failing_resets(dividing_test_case):
    result = ExecutionResult()
    result.report_new_thrown_exception(2, ZeroDivisionError())
    visitor = tc_to_ast.TestCaseToAstVisitor(ns.NamingScope("module"), set(), result)
    dividing_test_case.accept(visitor)
    assert visitor.is_failing_test
    result.exceptions.clear()
    dividing_test_case.accept(visitor)
    assert not visitor.is_failing_test


@pytest.mark.parametrize(
    "declared,asserted,expected",
    [
        pytest.param(True, False, True),
        pytest.param(False, True, True),
        pytest.param(False, False, False),
    ],
)
def test_get_pending_fault(dividing_test_case, declared, asserted, expected):
    fault = ZeroDivisionError()
    division = dividing_test_case.get_statement(2)
    if asserted:
        division.add_assertion(ass.ExceptionAssertion("builtins", "ZeroDivisionError"))
    result = ExecutionResult()
    result.report_new_thrown_exception(2, fault, declared=declared)
    pending = tc_to_ast.get_pending_fault(2, division, result)
    assert (pending is fault) == expected


def test_get_pending_fault_without_result(dividing_test_case):
    assert tc_to_ast.get_pending_fault(2, dividing_test_case.get_statement(2), None) is None

#  This file is part of evocase.
#
#  SPDX-FileCopyrightText: 2019–2025 evocase Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Renders whole test cases, including their assertions, as lists of ast statements."""

from __future__ import annotations

from typing import TYPE_CHECKING

import evocase.assertion.assertion as ass
import evocase.assertion.assertion_to_ast as ata
import evocase.testcase.statement_to_ast as stmt_to_ast
import evocase.utils.namingscope as ns

from evocase.testcase.testcasevisitor import TestCaseVisitor


if TYPE_CHECKING:
    from ast import stmt

    import evocase.testcase.defaulttestcase as dtc
    import evocase.testcase.execution as ex
    import evocase.testcase.statement as statmt


def _is_read_later(statement: statmt.Statement, later: list[statmt.Statement]) -> bool:
    return any(other.references(statement.ret_val) for other in later)


def _asserts_exception(statement: statmt.Statement) -> bool:
    return any(isinstance(a, ass.ExceptionAssertion) for a in statement.assertions)


def _asserts_value(statement: statmt.Statement) -> bool:
    return any(not isinstance(a, ass.ExceptionAssertion) for a in statement.assertions)


def get_pending_fault(
    idx: int, statement: statmt.Statement, exec_result: ex.ExecutionResult | None
) -> BaseException | None:
    """Looks up the fault the rendered statement has to expect.

    Only a recorded fault that the operation declares, or that an exception
    assertion on the statement expects, is pending.

    Args:
        idx: The position of the statement
        statement: The statement
        exec_result: What executing the test case produced, if it was executed

    Returns:
        The pending fault, or None
    """
    if exec_result is None or (fault := exec_result.exceptions.get(idx)) is None:
        return None
    if idx in exec_result.declared_exceptions or _asserts_exception(statement):
        return fault
    return None


class TestCaseToAstVisitor(TestCaseVisitor):
    """Turns visited test cases into ast statements.

    Module aliases live in a scope shared by all test cases of one export, so that
    a single import block serves every test function.
    """

    def __init__(
        self,
        module_aliases: ns.NamingScope,
        common_modules: set[str],
        exec_result: ex.ExecutionResult | None = None,
        *,
        store_call_return: bool = False,
    ) -> None:
        """Creates the visitor.

        Args:
            module_aliases: The shared alias scope
            common_modules: Modules imported under their own name
            exec_result: The execution result of the visited test case, if known
            store_call_return: Bind the result of every call to a variable
        """
        self._module_aliases = module_aliases
        self._common_modules = common_modules
        self._exec_result = exec_result
        self._store_call_return = store_call_return

        self._test_case_ast: list[stmt] = []
        self._is_failing_test = False

    def visit_default_test_case(  # noqa: D102
        self, test_case: dtc.DefaultTestCase
    ) -> None:
        trace = None if self._exec_result is None else self._exec_result.proper_return_type_trace
        variable_names = ns.VariableTypeNamingScope(return_type_trace=trace)
        self._test_case_ast = []
        self._is_failing_test = False

        for idx, statement in enumerate(test_case.statements):
            pending_fault = get_pending_fault(idx, statement, self._exec_result)
            if pending_fault is None and self._has_fault(idx):
                # Unexpected fault, nothing guards it.
                self._is_failing_test = True

            bind_result = not _asserts_exception(statement) and (
                self._store_call_return
                or _asserts_value(statement)
                or _is_read_later(statement, test_case.statements[idx + 1 :])
            )
            stmt_visitor = stmt_to_ast.StatementToAstVisitor(
                self._module_aliases, variable_names, store_call_return=bind_result
            )
            node = stmt_visitor.visit(statement.describe(), pending_fault)
            self._emit(statement, node, variable_names, guarded=pending_fault is not None)

    def _has_fault(self, idx: int) -> bool:
        return self._exec_result is not None and idx in self._exec_result.exceptions

    def _emit(
        self,
        statement: statmt.Statement,
        node: stmt,
        variable_names: ns.VariableTypeNamingScope,
        *,
        guarded: bool,
    ) -> None:
        # A raises block already expects the fault, so its exception assertion is dropped.
        assertion_visitor = ata.PyTestAssertionToAstVisitor(
            variable_names=variable_names,
            module_aliases=self._module_aliases,
            common_modules=self._common_modules,
            statement_node=node,
        )
        for assertion in statement.assertions:
            if guarded and isinstance(assertion, ass.ExceptionAssertion):
                continue
            assertion.accept(assertion_visitor)
        self._test_case_ast.extend(assertion_visitor.nodes)

    @property
    def test_case_ast(self) -> list[stmt]:
        """The statements rendered for the last visited test case.

        Returns:
            The ast statements
        """
        return self._test_case_ast

    @property
    def is_failing_test(self) -> bool:
        """Did the last visited test case raise a fault nobody expected?

        Such a fault is neither declared by its operation nor asserted.

        Returns:
            Whether the test is expected to fail
        """
        return self._is_failing_test

#  This file is part of evocase.
#
#  SPDX-FileCopyrightText: 2019–2025 evocase Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides a default implementation of a test case."""

from __future__ import annotations

from itertools import islice
from typing import TYPE_CHECKING

import networkx as nx

from ordered_set import OrderedSet

import evocase.testcase.testcase as tc

from evocase.utils.exceptions import ForwardReferenceError
from evocase.utils.exceptions import StructuralInconsistencyError


if TYPE_CHECKING:
    import evocase.assertion.assertion as ass
    import evocase.testcase.statement as stmt
    import evocase.testcase.testcasevisitor as tcv
    import evocase.testcase.variablereference as vr


class DefaultTestCase(tc.TestCase):  # noqa: PLR0904
    """A default implementation of a test case."""

    def accept(self, visitor: tcv.TestCaseVisitor) -> None:  # noqa: D102
        visitor.visit_default_test_case(self)

    def add_statement(  # noqa: D102
        self, statement: stmt.Statement, position: int = -1
    ) -> vr.VariableReference:
        if position == -1:
            position = len(self._statements)
        if not 0 <= position <= len(self._statements):
            raise IndexError(
                f"Cannot insert at position {position} into a test case of size {self.size()}"
            )
        self._statements.insert(position, statement)
        self._renumber(position)
        if not self._uses_defined_values(statement):
            del self._statements[position]
            self._renumber(position)
            statement.ret_val.position = -1
            raise ForwardReferenceError(
                f"{statement!r} uses a value that is not defined before position {position}"
            )
        return statement.ret_val

    def add_statements(self, statements: list[stmt.Statement]) -> None:  # noqa: D102
        for statement in statements:
            self.add_statement(statement)

    def append_test_case(self, test_case: tc.TestCase) -> None:  # noqa: D102
        offset = self.size()
        for statement in test_case.statements:
            self.add_statement(statement.copy(self, offset))

    def remove(self, position: int) -> None:  # noqa: D102
        self._logger.debug("Removing statement at position %d", position)
        if position >= self.size():
            return
        ret_val = self._statements[position].ret_val
        for later in islice(self._statements, position + 1, None):
            if later.references(ret_val):
                raise StructuralInconsistencyError(
                    f"Statement at position {later.position} still uses {ret_val!r}"
                )
        del self._statements[position]
        ret_val.position = -1
        self._renumber(position)

    def remove_statement(self, statement: stmt.Statement) -> None:  # noqa: D102
        self.remove(self._index_of(statement))

    def remove_with_forward_dependencies(self, position: int) -> list[int]:  # noqa: D102
        if position >= self.size():
            raise ValueError(
                f"Position {position} is out of bounds for test case of size {self.size()}."
            )
        return self.remove_statement_with_forward_dependencies(self.get_statement(position))

    def remove_statement_with_forward_dependencies(self, statement: stmt.Statement) -> list[int]:
        """Removes the given statement along with all its forward dependencies.

        Args:
            statement: The statement to remove

        Returns:
            A list of positions of statements that have been deleted

        Raises:
            ValueError: If the statement is not contained in the test case
        """
        if not self.contains(statement):
            raise ValueError(f"Statement {statement} not found in test case.")
        forward_dependencies = list(self.get_forward_dependencies(statement.ret_val))
        positions_to_remove = tc.TestCase.positions_to_remove(statement, forward_dependencies)
        for pos in positions_to_remove:
            self.remove(pos)
        return positions_to_remove

    def chop(self, pos: int) -> None:  # noqa: D102
        assert pos >= 0
        while len(self._statements) > pos + 1:
            self._statements.pop().ret_val.position = -1

    def contains(self, statement: stmt.Statement) -> bool:  # noqa: D102
        return statement in self._statements

    def get_statement(self, position: int) -> stmt.Statement:  # noqa: D102
        assert 0 <= position < len(self._statements)
        return self._statements[position]

    def set_statement(  # noqa: D102
        self, statement: stmt.Statement, position: int
    ) -> vr.VariableReference:
        assert 0 <= position < len(self._statements)
        old = self._statements[position]
        self._statements[position] = statement
        statement.ret_val.position = position
        if not self._uses_defined_values(statement):
            self._statements[position] = old
            statement.ret_val.position = -1
            raise ForwardReferenceError(
                f"{statement!r} uses a value that is not defined before position {position}"
            )
        for later in islice(self._statements, position + 1, None):
            if later.references(old.ret_val):
                later.replace(old.ret_val, statement.ret_val)
        old.ret_val.position = -1
        return statement.ret_val

    def has_statement(self, position: int) -> bool:  # noqa: D102
        return 0 <= position < len(self._statements)

    def clone(self, limit: int | None = None) -> DefaultTestCase:  # noqa: D102
        test_case = DefaultTestCase()
        for statement in islice(self._statements, limit):
            test_case.add_statement(statement.copy(test_case))
        return test_case

    def dependency_graph(self) -> nx.DiGraph:
        """Provides the data flow between the statements of this test case.

        Nodes are positions; an edge leads from the position that defines a value
        to every position that uses it.

        Returns:
            The dependency graph
        """
        graph = nx.DiGraph()
        graph.add_nodes_from(range(len(self._statements)))
        for position, statement in enumerate(self._statements):
            for ref in statement.operands():
                graph.add_edge(ref.get_variable_reference().position, position)
        return graph

    def get_dependencies(  # noqa: D102
        self, var: vr.VariableReference
    ) -> OrderedSet[vr.VariableReference]:
        ancestors = nx.ancestors(self.dependency_graph(), var.get_statement_position())
        return OrderedSet(self._statements[pos].ret_val for pos in sorted(ancestors))

    def get_forward_dependencies(  # noqa: D102
        self, var: vr.VariableReference
    ) -> OrderedSet[vr.VariableReference]:
        descendants = nx.descendants(self.dependency_graph(), var.get_statement_position())
        return OrderedSet(self._statements[pos].ret_val for pos in sorted(descendants))

    def get_assertions(self) -> list[ass.Assertion]:  # noqa: D102
        assertions: list[ass.Assertion] = []
        for statement in self._statements:
            assertions.extend(statement.assertions)
        return assertions

    def _renumber(self, start: int) -> None:
        for position in range(start, len(self._statements)):
            self._statements[position].ret_val.position = position

    def _uses_defined_values(self, statement: stmt.Statement) -> bool:
        position = statement.position
        for ref in statement.operands():
            var = ref.get_variable_reference()
            if not 0 <= var.position < position:
                return False
            if self._statements[var.position].ret_val is not var:
                return False
        return True

    def _index_of(self, statement: stmt.Statement) -> int:
        for position, candidate in enumerate(self._statements):
            if candidate is statement:
                return position
        raise ValueError(f"Statement {statement} not found in test case.")

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, DefaultTestCase):
            return False
        if len(self._statements) != len(other._statements):
            return False
        return all(
            left.same(right)
            for left, right in zip(self._statements, other._statements, strict=True)
        )

    def __hash__(self) -> int:
        return hash(tuple(statement.structural_hash() for statement in self._statements))

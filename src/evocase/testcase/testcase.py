#  This file is part of evocase.
#
#  SPDX-FileCopyrightText: 2019–2025 evocase Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides the contract of a test case, an ordered program of statements."""

from __future__ import annotations

import logging

from abc import ABC
from abc import abstractmethod
from typing import TYPE_CHECKING

from evocase.analyses.typesystem import is_maybe_subtype
from evocase.utils import randomness
from evocase.utils.exceptions import ConstructionFailedException


if TYPE_CHECKING:
    from ordered_set import OrderedSet

    import evocase.assertion.assertion as ass
    import evocase.testcase.statement as stmt
    import evocase.testcase.testcasevisitor as tcv
    import evocase.testcase.variablereference as vr

    from evocase.analyses.typesystem import ProperType


class TestCase(ABC):  # noqa: PLR0904
    """An ordered program of statements.

    The test case owns the positions of its statements: the value defined by the
    statement at index ``i`` has position ``i``, and a statement only uses values
    defined at smaller positions.
    """

    _logger = logging.getLogger(__name__)

    def __init__(self) -> None:
        """Create a test case without statements."""
        self._statements: list[stmt.Statement] = []

    @property
    def statements(self) -> list[stmt.Statement]:
        """The statements of this test case, in program order.

        Callers must not modify the list; the methods of the test case keep the
        positions consistent.

        Returns:
            The statement list
        """
        return self._statements

    @abstractmethod
    def accept(self, visitor: tcv.TestCaseVisitor) -> None:
        """Dispatches to the matching method of the visitor.

        Args:
            visitor: The visitor
        """

    @abstractmethod
    def add_statement(self, statement: stmt.Statement, position: int = -1) -> vr.VariableReference:
        """Inserts a statement and renumbers every statement behind it.

        Args:
            statement: The statement to insert
            position: Where to insert it; appends when omitted

        Returns:  # noqa: DAR202
            The value defined by the inserted statement

        Raises:
            ForwardReferenceError: If the statement would use a value that is  # noqa: DAR402
                not defined in front of the position
        """

    @abstractmethod
    def add_statements(self, statements: list[stmt.Statement]) -> None:
        """Appends the statements in order.

        Args:
            statements: The statements to append
        """

    @abstractmethod
    def append_test_case(self, test_case: TestCase) -> None:
        """Appends copies of all statements of the other test case.

        Args:
            test_case: The test case whose statements are copied
        """

    @abstractmethod
    def remove(self, position: int) -> None:
        """Deletes the statement at the position.

        Args:
            position: The position of the statement

        Raises:
            StructuralInconsistencyError: If a statement behind the position still  # noqa: DAR402
                uses the deleted value
        """

    @abstractmethod
    def remove_statement(self, statement: stmt.Statement) -> None:
        """Deletes the statement, wherever it is.

        Args:
            statement: The statement to delete
        """

    @abstractmethod
    def remove_with_forward_dependencies(self, position: int) -> list[int]:
        """Deletes a statement together with every statement depending on it.

        Args:
            position: The position of the statement

        Returns:
            The deleted positions, highest first

        Raises:
            ValueError: If there is no statement at the position
        """

    @abstractmethod
    def chop(self, pos: int) -> None:
        """Drops every statement behind the position.

        Args:
            pos: The last position that stays
        """

    @abstractmethod
    def contains(self, statement: stmt.Statement) -> bool:
        """Is the statement part of this test case?

        Args:
            statement: The statement to look for

        Returns:
            Whether the statement is contained  # noqa: DAR202
        """

    @abstractmethod
    def get_statement(self, position: int) -> stmt.Statement:
        """Looks up the statement at the position.

        Args:
            position: The position

        Returns:
            The statement  # noqa: DAR202
        """

    @abstractmethod
    def set_statement(self, statement: stmt.Statement, position: int) -> vr.VariableReference:
        """Puts the statement in place of the one at the position.

        Statements behind the position that used the old value use the value of
        the new statement afterwards.

        Args:
            statement: The replacing statement
            position: The position to overwrite

        Returns:
            The value defined by the replacing statement  # noqa: DAR202
        """

    @abstractmethod
    def has_statement(self, position: int) -> bool:
        """Is there a statement at the position?

        Args:
            position: The position

        Returns:
            Whether the position is occupied  # noqa: DAR202
        """

    @abstractmethod
    def clone(self, limit: int | None = None) -> TestCase:
        """Copies this test case with all statements and assertions.

        Args:
            limit: Copy only that many leading statements

        Returns:
            The copy  # noqa: DAR202
        """

    @abstractmethod
    def get_assertions(self) -> list[ass.Assertion]:
        """Collects the assertions of all statements, in program order."""

    @abstractmethod
    def get_dependencies(self, var: vr.VariableReference) -> OrderedSet[vr.VariableReference]:
        """Collects the values the given value is computed from, transitively.

        Args:
            var: The value

        Returns:
            The values in front of var that flow into it  # noqa: DAR202
        """

    @abstractmethod
    def get_forward_dependencies(
        self, var: vr.VariableReference
    ) -> OrderedSet[vr.VariableReference]:
        """Collects the values computed from the given value, transitively.

        Args:
            var: The value

        Returns:
            The values behind var that use it  # noqa: DAR202
        """

    def size(self) -> int:
        """Counts the statements.

        Returns:
            The number of statements
        """
        return len(self._statements)

    def size_with_assertions(self) -> int:
        """Counts the statements and their assertions.

        Returns:
            The number of statements plus the number of assertions
        """
        return self.size() + len(self.get_assertions())

    def get_objects(self, parameter_type: ProperType, position: int) -> list[vr.VariableReference]:
        """Collects the values in front of the position that may have the type.

        Assignments define no usable value and are skipped.

        Args:
            parameter_type: The type a candidate must possibly have
            position: Only values defined in front of it are considered

        Returns:
            The candidate values, in program order
        """
        variables: list[vr.VariableReference] = []
        for statement in self._statements[: max(position, 0)]:
            if statement.is_assignment_statement():
                continue
            if is_maybe_subtype(statement.ret_val.type, parameter_type):
                variables.append(statement.ret_val)
        return variables

    def get_all_objects(self, position: int) -> list[vr.VariableReference]:
        """Collects every value in front of the position that is not None.

        Args:
            position: Only values defined in front of it are considered

        Returns:
            The values, in program order
        """
        return [
            statement.ret_val
            for statement in self._statements[: max(position, 0)]
            if not statement.ret_val.is_none_type()
        ]

    def get_random_object(self, parameter_type: ProperType, position: int) -> vr.VariableReference:
        """Picks one of the values of ``get_objects`` at random.

        Args:
            parameter_type: The type the value must possibly have
            position: Only values defined in front of it are considered

        Returns:
            The chosen value

        Raises:
            ConstructionFailedException: If there is no candidate
        """
        variables = self.get_objects(parameter_type, position)
        if not variables:
            raise ConstructionFailedException(
                f"Found no variables of type {parameter_type} at position {position}"
            )
        return randomness.choice(variables)

    def is_valid(self) -> bool:
        """Checks the positional invariants of every statement.

        Returns:
            Whether each statement sits at the position of its value and only uses
            values defined in front of it
        """
        return all(statement.is_valid() for statement in self._statements)

    @staticmethod
    def positions_to_remove(
        statement: stmt.Statement, dependencies: list[vr.VariableReference]
    ) -> list[int]:
        """Orders the positions of a statement and its dependants for deletion.

        Deleting from the back keeps the remaining positions stable.

        Args:
            statement: The statement to delete
            dependencies: The values depending on the statement

        Returns:
            The positions, highest first
        """
        positions = {dep.get_statement_position() for dep in dependencies}
        positions.add(statement.get_position())
        return sorted(positions, reverse=True)

#  This file is part of evocase.
#
#  SPDX-FileCopyrightText: 2019–2025 evocase Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides the factories that supply replacements while statements mutate."""

from __future__ import annotations

import logging

from abc import ABC
from abc import abstractmethod
from typing import TYPE_CHECKING

import evocase.utils.generic.genericaccessibleobject as gao

from evocase.analyses.typesystem import is_maybe_subtype
from evocase.utils import randomness


if TYPE_CHECKING:
    from collections.abc import Iterable

    import evocase.testcase.statement as stmt
    import evocase.testcase.testcase as tc
    import evocase.testcase.variablereference as vr

    from evocase.analyses.typesystem import ProperType


class MutationFactory(ABC):
    """Supplies replacement operands and operations during mutation.

    ``None`` means that no candidate exists; the mutation is skipped then.
    """

    @abstractmethod
    def get_replacement(
        self,
        test_case: tc.TestCase,
        statement: stmt.Statement,
        current: vr.Reference | None,
        type_: ProperType,
        position: int,
    ) -> vr.VariableReference | None:
        """Provides a value that can replace an operand of a statement.

        Args:
            test_case: The test case that contains the statement
            statement: The statement that mutates
            current: The operand that is replaced, if any
            type_: The type the replacement must have
            position: Only values defined before this position may be used

        Returns:
            The replacement, if any  # noqa: DAR202
        """

    @abstractmethod
    def get_alternative_operation(
        self, test_case: tc.TestCase, statement: stmt.Statement
    ) -> gao.GenericCallableAccessibleObject | None:
        """Provides an operation that can replace the operation of a statement.

        Args:
            test_case: The test case that contains the statement
            statement: The statement that mutates

        Returns:
            The alternative operation, if any  # noqa: DAR202
        """


class RandomMutationFactory(MutationFactory):
    """Picks replacements uniformly at random from the available candidates."""

    _logger = logging.getLogger(__name__)

    def __init__(self, operations: Iterable[gao.GenericCallableAccessibleObject] = ()) -> None:
        """Creates a new factory.

        Args:
            operations: The operations that may replace the operation of a statement
        """
        self._operations = list(operations)

    def get_replacement(  # noqa: D102
        self,
        test_case: tc.TestCase,
        statement: stmt.Statement,
        current: vr.Reference | None,
        type_: ProperType,
        position: int,
    ) -> vr.VariableReference | None:
        candidates = [
            var
            for var in test_case.get_objects(type_, position)
            if var != current and var != statement.ret_val
        ]
        if not candidates:
            self._logger.debug("No replacement of type %s before position %d", type_, position)
            return None
        return randomness.choice(candidates)

    def get_alternative_operation(  # noqa: D102
        self, test_case: tc.TestCase, statement: stmt.Statement
    ) -> gao.GenericCallableAccessibleObject | None:
        accessible = statement.accessible_object()
        if not isinstance(accessible, gao.GenericCallableAccessibleObject):
            return None
        candidates = [
            operation
            for operation in self._operations
            if operation != accessible
            and accessible.is_signature_compatible(operation)
            and is_maybe_subtype(operation.generated_type(), statement.ret_val.type)
        ]
        if not candidates:
            return None
        return randomness.choice(candidates)

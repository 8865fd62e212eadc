#  This file is part of evocase.
#
#  SPDX-FileCopyrightText: 2019–2025 evocase Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Runs test cases against the subject and records what happened."""

from __future__ import annotations

import abc
import contextlib
import dataclasses
import importlib
import inspect
import logging
import os
import sys

from abc import abstractmethod
from typing import TYPE_CHECKING
from typing import Any
from typing import TypeVar

import evocase.configuration as config
import evocase.testcase.variablereference as vr

from evocase.analyses.typesystem import type_of_value
from evocase.utils.exceptions import InfrastructureFault
from evocase.utils.exceptions import OperationAccessError
from evocase.utils.exceptions import StructuralInconsistencyError
from evocase.utils.exceptions import UnboundReferenceError


if TYPE_CHECKING:
    from collections.abc import Generator
    from types import ModuleType

    import evocase.assertion.assertion as ass
    import evocase.testcase.statement as stmt
    import evocase.testcase.testcase as tc

    from evocase.analyses.typesystem import ProperType


_LOGGER = logging.getLogger(__name__)


class Scope:
    """Binds the values produced by one execution of a test case.

    Values are bound to the position of the statement that produced them.  A scope
    is created empty for every execution and discarded afterwards.
    """

    def __init__(self) -> None:  # noqa: D107
        self._values: dict[int, Any] = {}

    def set(self, reference: vr.VariableReference, value: Any) -> None:
        """Binds the value to the position of the reference.

        Args:
            reference: The reference whose value is bound
            value: The value
        """
        self._values[reference.position] = value

    def get(self, reference: vr.VariableReference) -> Any:
        """Provides the value bound to the position of the reference.

        Args:
            reference: The reference to look up

        Returns:
            The bound value

        Raises:
            UnboundReferenceError: If no value is bound at the position
        """
        try:
            return self._values[reference.position]
        except KeyError as error:
            raise UnboundReferenceError(
                f"No value is bound for {reference!r} at position {reference.position}"
            ) from error

    def resolve(self, reference: vr.Reference) -> Any:
        """Provides the value addressed by a reference, following field accesses.

        A fault raised while reading a field, e.g., by a property getter, belongs
        to the subject and is raised unchanged.

        Args:
            reference: The reference to resolve

        Returns:
            The addressed value

        Raises:
            OperationAccessError: If an addressed field does not exist
        """
        if isinstance(reference, vr.FieldReference):
            source = self.resolve(reference.source)
            name = reference.field.field
            try:
                inspect.getattr_static(source, name)
            except AttributeError as error:
                raise OperationAccessError(
                    f"{type(source).__qualname__} has no field {name}"
                ) from error
            return getattr(source, name)
        return self.get(reference.get_variable_reference())

    def is_bound(self, reference: vr.VariableReference) -> bool:
        """Is a value bound to the position of the reference?

        Args:
            reference: The reference to check

        Returns:
            Whether a value is bound
        """
        return reference.position in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Scope({self._values!r})"


class ModuleProvider:
    """Looks up the subject modules, preferring registered replacements."""

    def __init__(self):  # noqa: D107
        self._replacements: dict[str, ModuleType] = {}

    def get_module(self, module_name: str) -> ModuleType:
        """Resolves a module name.

        A replacement registered for the name, e.g., a mutant, shadows the
        importable module.

        Args:
            module_name: The dotted module name

        Returns:
            The module to bind operations against
        """
        if (replacement := self._replacements.get(module_name)) is not None:
            return replacement
        return importlib.import_module(module_name)

    def add_mutated_version(self, module_name: str, mutated_module: ModuleType) -> None:
        """Registers a module that shadows the importable one of the same name.

        Args:
            module_name: The shadowed name
            mutated_module: The module returned instead
        """
        self._replacements[module_name] = mutated_module

    def clear_mutated_modules(self) -> None:
        """Forgets every registered replacement."""
        self._replacements.clear()


class ExecutionContext:
    """Determines which version of the subject the statements are bound to."""

    def __init__(self, module_provider: ModuleProvider | None = None) -> None:
        """Binds the context to a module provider.

        Args:
            module_provider: Supplies the subject modules; a plain one if omitted
        """
        self._module_provider = module_provider or ModuleProvider()

    @property
    def module_provider(self) -> ModuleProvider:
        """Where the subject modules come from."""
        return self._module_provider


@dataclasses.dataclass
class ExecutionResult:
    """What one execution of a test case observed."""

    # Faults raised by the subject, by position
    exceptions: dict[int, BaseException] = dataclasses.field(default_factory=dict)

    # The positions of the faults that were declared by the invoked operation
    declared_exceptions: set[int] = dataclasses.field(default_factory=set)

    failed_assertions: dict[int, list[ass.Assertion]] = dataclasses.field(default_factory=dict)

    # Types of the values that were bound, by position
    proper_return_type_trace: dict[int, ProperType] = dataclasses.field(default_factory=dict)

    num_executed_statements: int = 0

    def has_test_exceptions(self) -> bool:
        """Did any statement raise?

        Returns:
            Whether a fault was recorded
        """
        return bool(self.exceptions)

    def report_new_thrown_exception(
        self, stmt_idx: int, ex: BaseException, *, declared: bool = False
    ) -> None:
        """Records the fault raised by a statement.

        Args:
            stmt_idx: The position of the raising statement
            ex: The fault
            declared: Whether the invoked operation lists the fault as expected
        """
        self.exceptions[stmt_idx] = ex
        if declared:
            self.declared_exceptions.add(stmt_idx)

    def get_first_position_of_thrown_exception(self) -> int | None:
        """The position of the earliest recorded fault.

        Returns:
            The smallest position with a fault, or None without faults
        """
        return min(self.exceptions, default=None)

    def has_undeclared_exceptions(self) -> bool:
        """Did the subject raise an exception its operation does not declare?

        Returns:
            Whether there is an undeclared exception
        """
        return any(idx not in self.declared_exceptions for idx in self.exceptions)

    def delete_statement_data(self, deleted_statements: set[int]) -> None:
        """Drops the data of deleted statements and renumbers the rest.

        Keeps the result aligned with a test case that was shrunk after it ran.

        Args:
            deleted_statements: The positions that no longer exist
        """
        self.exceptions = ExecutionResult.shift_dict(self.exceptions, deleted_statements)
        self.failed_assertions = ExecutionResult.shift_dict(
            self.failed_assertions, deleted_statements
        )
        self.proper_return_type_trace = ExecutionResult.shift_dict(
            self.proper_return_type_trace, deleted_statements
        )
        self.declared_exceptions = set(
            ExecutionResult.shift_dict(
                dict.fromkeys(self.declared_exceptions, True), deleted_statements
            )
        )

    T = TypeVar("T")  # noqa: RUF045

    @staticmethod
    def shift_dict(to_shift: dict[int, T], deleted_indexes: set[int]) -> dict[int, T]:
        """Renumbers position-keyed data after statements were deleted.

        Args:
            to_shift: The data, keyed by the old positions
            deleted_indexes: The deleted positions

        Returns:
            The surviving entries, keyed by their new positions
        """
        return {
            pos - sum(1 for deleted in deleted_indexes if deleted < pos): value
            for pos, value in to_shift.items()
            if pos not in deleted_indexes
        }


class ExecutionObserver(abc.ABC):
    """Gets notified around each test case and each statement an executor runs."""

    @abstractmethod
    def before_test_case_execution(self, test_case: tc.TestCase) -> None:
        """Hook that runs before the first statement.

        Args:
            test_case: The test case about to run
        """

    @abstractmethod
    def after_test_case_execution(self, test_case: tc.TestCase, result: ExecutionResult) -> None:
        """Hook that runs once the test case has finished or stopped.

        Args:
            test_case: The test case that ran
            result: The result, open for the observer to add to
        """

    @abstractmethod
    def before_statement_execution(self, statement: stmt.Statement, scope: Scope) -> None:
        """Hook that runs ahead of each statement.

        Args:
            statement: The next statement
            scope: The values bound by earlier statements
        """

    @abstractmethod
    def after_statement_execution(
        self,
        statement: stmt.Statement,
        scope: Scope,
        exception: BaseException | None,
    ) -> None:
        """Hook that runs behind each statement, whether it raised or not.

        Args:
            statement: The statement that ran
            scope: The values bound so far, the new one included
            exception: The fault the statement raised, if any
        """


class AssertionExecutionObserver(ExecutionObserver):
    """An observer which evaluates the assertions of statements.

    Failing assertions are recorded in the execution result.  They never stop
    the execution.
    """

    def __init__(self) -> None:  # noqa: D107
        self._failed: dict[int, list[ass.Assertion]] = {}

    def before_test_case_execution(self, test_case: tc.TestCase) -> None:  # noqa: D102
        self._failed = {}

    def after_test_case_execution(  # noqa: D102
        self, test_case: tc.TestCase, result: ExecutionResult
    ) -> None:
        result.failed_assertions.update(self._failed)

    def before_statement_execution(  # noqa: D102
        self, statement: stmt.Statement, scope: Scope
    ) -> None:
        pass

    def after_statement_execution(  # noqa: D102
        self,
        statement: stmt.Statement,
        scope: Scope,
        exception: BaseException | None,
    ) -> None:
        for assertion in statement.assertions:
            if not assertion.evaluate(scope, exception):
                _LOGGER.debug("Assertion %r failed at position %d", assertion, statement.position)
                self._failed.setdefault(statement.position, []).append(assertion)


class OutputSuppressionContext:
    """Sends whatever the subject prints to the null device while active."""

    def __init__(self) -> None:  # noqa: D107
        self._null_file: Any = None
        self._saved: tuple[Any, Any] | None = None

    def restore(self) -> None:
        """Puts the original standard streams back."""
        if self._saved is not None:
            sys.stdout, sys.stderr = self._saved
            self._saved = None
        if self._null_file is not None:
            self._null_file.close()
            self._null_file = None

    def __enter__(self) -> None:
        self._null_file = open(os.devnull, mode="w", encoding="utf-8")  # noqa: SIM115
        self._saved = (sys.stdout, sys.stderr)
        sys.stdout = self._null_file
        sys.stderr = self._null_file

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.restore()


class TestCaseExecutor:
    """An executor that executes test cases statement by statement.

    Every execution starts from a fresh scope and stops at the first fault raised
    by the subject.  Structural and infrastructure errors are logged and abort the
    execution of the test case.
    """

    def __init__(self, module_provider: ModuleProvider | None = None) -> None:
        """Sets up an executor without observers.

        Args:
            module_provider: Supplies the subject modules
        """
        self._execution_context = ExecutionContext(module_provider)
        self._observers: list[ExecutionObserver] = []

    @property
    def module_provider(self) -> ModuleProvider:
        """Where the subject modules come from."""
        return self._execution_context.module_provider

    @property
    def execution_context(self) -> ExecutionContext:
        """The context statements are executed in."""
        return self._execution_context

    def add_observer(self, observer: ExecutionObserver) -> None:
        """Registers an observer for all following executions.

        Args:
            observer: The observer
        """
        self._observers.append(observer)

    def clear_observers(self) -> None:
        """Unregisters every observer."""
        self._observers.clear()

    @contextlib.contextmanager
    def temporarily_add_observer(self, observer: ExecutionObserver) -> Generator[None, None, None]:
        """Registers an observer for the duration of a with block.

        Args:
            observer: The observer

        Yields:
            Nothing
        """
        self._observers.append(observer)
        try:
            yield
        finally:
            self._observers.remove(observer)

    def execute(self, test_case: tc.TestCase) -> ExecutionResult:
        """Runs the statements in order, stopping at the first fault.

        Args:
            test_case: The test case to run

        Returns:
            The faults, traces and failed assertions of this run
        """
        result = ExecutionResult()
        scope = Scope()
        for observer in self._observers:
            observer.before_test_case_execution(test_case)

        suppression: contextlib.AbstractContextManager[None] = (
            OutputSuppressionContext()
            if config.configuration.execution.suppress_output
            else contextlib.nullcontext()
        )
        with suppression:
            for idx, statement in enumerate(test_case.statements):
                exception = self._execute_statement(statement, scope)
                result.num_executed_statements += 1
                if exception is not None:
                    _LOGGER.debug("Statement %d raised %r", idx, exception)
                    result.report_new_thrown_exception(
                        idx, exception, declared=statement.is_declared_exception(exception)
                    )
                    break
                if statement.describe().stores_result:
                    result.proper_return_type_trace[idx] = type_of_value(
                        scope.get(statement.ret_val)
                    )

        for observer in self._observers:
            observer.after_test_case_execution(test_case, result)
        return result

    def _execute_statement(self, statement: stmt.Statement, scope: Scope) -> BaseException | None:
        for observer in self._observers:
            observer.before_statement_execution(statement, scope)
        try:
            exception = statement.execute(scope)
        except (InfrastructureFault, StructuralInconsistencyError):
            _LOGGER.error(
                "Cannot execute statement at position %d", statement.position, exc_info=True
            )
            raise
        for observer in reversed(self._observers):
            observer.after_statement_execution(statement, scope, exception)
        return exception

#  This file is part of evocase.
#
#  SPDX-FileCopyrightText: 2019–2025 evocase Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Postconditions that are attached to statements.

An assertion is checked against the scope right after its statement ran and is
exported as a PyTest ``assert``.  Checking never alters how the execution
proceeds.
"""

from __future__ import annotations

import enum
import math

from abc import ABC
from abc import abstractmethod
from typing import TYPE_CHECKING
from typing import Any

import evocase.configuration as config

from evocase.utils.exceptions import StructuralInconsistencyError


if TYPE_CHECKING:
    from collections.abc import Mapping

    import evocase.testcase.execution as ex
    import evocase.testcase.variablereference as vr


def is_assertable(value: Any, recursion_depth: int = 0) -> bool:
    """Can the value be written down as a literal in a test?

    Finite numbers, strings, bytes, None and enum members qualify, and so do
    shallow collections made of them.

    Args:
        value: The candidate
        recursion_depth: How deep inside collections the candidate sits

    Returns:
        Whether a literal can express the value
    """
    if recursion_depth > 4:  # noqa: PLR2004
        return False
    if isinstance(value, int | str | bytes | bool | float | complex | type(None) | enum.Enum):
        return not isinstance(value, float) or math.isfinite(value)
    if isinstance(value, list | tuple | set | frozenset):
        return all(is_assertable(elem, recursion_depth + 1) for elem in value)
    if isinstance(value, dict):
        return all(
            is_assertable(key, recursion_depth + 1) and is_assertable(val, recursion_depth + 1)
            for key, val in value.items()
        )
    return False


class Assertion(ABC):
    """A check that follows a statement."""

    @abstractmethod
    def accept(self, visitor: AssertionVisitor) -> None:
        """Dispatches to the matching visitor method.

        Args:
            visitor: The visitor
        """

    @abstractmethod
    def clone(self, memo: Mapping[vr.VariableReference, vr.VariableReference]) -> Assertion:
        """Copies the assertion into another test case.

        Args:
            memo: Translates the variables of this test case to the other one

        Returns: the copy
        """

    @abstractmethod
    def evaluate(self, scope: ex.Scope, exception: BaseException | None = None) -> bool:
        """Does the assertion hold once its statement has run?

        Args:
            scope: The values after the statement
            exception: What the statement raised, if anything

        Returns:
            Whether the check passes  # noqa: DAR202
        """

    def same(self, other: Assertion) -> bool:
        """Compares two assertions that may live in different test cases.

        Args:
            other: The other assertion

        Returns:
            Whether both check the same thing at the same position
        """
        return self == other

    @abstractmethod
    def __eq__(self, other: object) -> bool:
        pass  # pragma: no cover

    @abstractmethod
    def __hash__(self) -> int:
        pass  # pragma: no cover


class ReferenceAssertion(Assertion, ABC):
    """Checks the value behind one reference."""

    def __init__(self, source: vr.Reference):  # noqa: D107
        self._source = source

    @property
    def source(self) -> vr.Reference:
        """The checked reference."""
        return self._source

    @source.setter
    def source(self, value: vr.Reference) -> None:
        self._source = value

    def evaluate(  # noqa: D102
        self, scope: ex.Scope, exception: BaseException | None = None
    ) -> bool:
        if exception is not None:
            return False
        try:
            value = scope.resolve(self._source)
        except (StructuralInconsistencyError, Exception):
            # Unbound source, or a field getter raised.
            return False
        return self._check(value)

    @abstractmethod
    def _check(self, value: Any) -> bool:
        """Applies the check to the resolved value.

        Args:
            value: What the source evaluated to

        Returns:
            Whether the value passes  # noqa: DAR202
        """


class TypeNameAssertion(ReferenceAssertion):
    """Checks the module and qualified name of the type of a value.

    Names are compared rather than classes, since a class defined inside a
    function cannot be imported by the test.

        assert f"{type(int_0).__module__}.{type(int_0).__qualname__}" == "builtins.int"
    """

    def __init__(self, source: vr.Reference, module: str, qualname: str):  # noqa: D107
        super().__init__(source)
        self._module = module
        self._qualname = qualname

    @property
    def module(self) -> str:
        """The expected defining module."""
        return self._module

    @property
    def qualname(self) -> str:
        """The expected qualified name."""
        return self._qualname

    def accept(self, visitor: AssertionVisitor) -> None:  # noqa: D102
        visitor.visit_type_name_assertion(self)

    def clone(  # noqa: D102
        self, memo: Mapping[vr.VariableReference, vr.VariableReference]
    ) -> TypeNameAssertion:
        return TypeNameAssertion(self._source.remap(memo), self._module, self._qualname)

    def _check(self, value: Any) -> bool:
        type_ = type(value)
        return type_.__module__ == self._module and type_.__qualname__ == self._qualname

    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, TypeNameAssertion)
            and self._source == other._source
            and self._module == other._module
            and self._qualname == other._qualname
        )

    def __hash__(self) -> int:
        return hash((self._source, self._module, self._qualname))

    def __repr__(self):
        return f"TypeNameAssertion({self._source!r}, {self._module}, {self._qualname})"


class FloatAssertion(ReferenceAssertion):
    """Checks a number up to the configured precision.

        assert float_0 == pytest.approx(42, rel=0.01, abs=0.01)
    """

    def __init__(self, source: vr.Reference, value: float):  # noqa: D107
        super().__init__(source)
        self._value = value

    @property
    def value(self) -> float:
        """The expected number."""
        return self._value

    def accept(self, visitor: AssertionVisitor) -> None:  # noqa: D102
        visitor.visit_float_assertion(self)

    def clone(  # noqa: D102
        self, memo: Mapping[vr.VariableReference, vr.VariableReference]
    ) -> FloatAssertion:
        return FloatAssertion(self._source.remap(memo), self._value)

    def _check(self, value: Any) -> bool:
        if not isinstance(value, int | float):
            return False
        precision = config.configuration.execution.float_precision
        return math.isclose(value, self._value, rel_tol=precision, abs_tol=precision)

    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, FloatAssertion)
            and self._source == other._source
            and self._value == other._value
        )

    def __hash__(self) -> int:
        return hash((self._source, self._value))

    def __repr__(self):
        return f"FloatAssertion({self._source!r}, {self._value!r})"


class ObjectAssertion(ReferenceAssertion):
    """Compares a value with a literal, floats excepted.

        assert var_0 == [1, 2, 3]
        assert var_1 == {module_0.Color.RED}
    """

    def __init__(self, source: vr.Reference, value: Any):  # noqa: D107
        super().__init__(source)
        self._object = value

    @property
    def object(self) -> Any:
        """The literal the value is compared with."""
        return self._object

    def accept(self, visitor: AssertionVisitor) -> None:  # noqa: D102
        visitor.visit_object_assertion(self)

    def clone(  # noqa: D102
        self, memo: Mapping[vr.VariableReference, vr.VariableReference]
    ) -> ObjectAssertion:
        return ObjectAssertion(self._source.remap(memo), self._object)

    def _check(self, value: Any) -> bool:
        if isinstance(self._object, bool) or self._object is None:
            return value is self._object
        return value == self._object

    def __eq__(self, other: Any) -> bool:  # noqa: PYI032
        return (
            isinstance(other, ObjectAssertion)
            and self._source == other._source
            and self._object == other._object
        )

    def __hash__(self) -> int:
        # Lists and dicts cannot be hashed.
        return 17 * hash(self._source) + 31

    def __repr__(self):
        return f"ObjectAssertion({self._source!r}, {self._object!r})"


class CollectionLengthAssertion(ReferenceAssertion):
    """Checks only the size of a collection whose elements have no literal form.

        assert len(var_0) == 42
    """

    def __init__(self, source: vr.Reference, length: int):  # noqa: D107
        super().__init__(source)
        self._length = length

    @property
    def length(self) -> int:
        """The expected size."""
        return self._length

    def accept(self, visitor: AssertionVisitor) -> None:  # noqa: D102
        visitor.visit_collection_length_assertion(self)

    def clone(  # noqa: D102
        self, memo: Mapping[vr.VariableReference, vr.VariableReference]
    ) -> CollectionLengthAssertion:
        return CollectionLengthAssertion(self._source.remap(memo), self._length)

    def _check(self, value: Any) -> bool:
        try:
            return len(value) == self._length
        except TypeError:
            return False

    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, CollectionLengthAssertion)
            and self._source == other._source
            and self._length == other._length
        )

    def __hash__(self) -> int:
        return hash((self._source, self._length))

    def __repr__(self):
        return f"CollectionLengthAssertion({self._source!r}, {self._length})"


class ExceptionAssertion(Assertion):
    """Expects its statement to raise a particular exception type."""

    def __init__(self, module: str, exception_type_name: str):
        """Names the expected exception type.

        Args:
            module: Where the type is defined
            exception_type_name: The qualified name of the type
        """
        self._module = module
        # Reloading a module creates new classes, names stay stable.
        self._exception_type_name = exception_type_name

    @classmethod
    def from_exception(cls, exception: BaseException) -> ExceptionAssertion:
        """Expects another exception of the same type as the given one.

        Args:
            exception: An observed exception

        Returns:
            The assertion
        """
        return cls(type(exception).__module__, type(exception).__qualname__)

    def accept(self, visitor: AssertionVisitor) -> None:  # noqa: D102
        visitor.visit_exception_assertion(self)

    def clone(  # noqa: D102
        self, memo: Mapping[vr.VariableReference, vr.VariableReference]
    ) -> ExceptionAssertion:
        return ExceptionAssertion(self._module, self._exception_type_name)

    def evaluate(  # noqa: D102
        self, scope: ex.Scope, exception: BaseException | None = None
    ) -> bool:
        if exception is None:
            return False
        type_ = type(exception)
        return type_.__module__ == self._module and type_.__qualname__ == self._exception_type_name

    @property
    def exception_type_name(self) -> str:
        """The qualified name of the expected type."""
        return self._exception_type_name

    @property
    def module(self) -> str:
        """The module defining the expected type."""
        return self._module

    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, ExceptionAssertion)
            and self._exception_type_name == other._exception_type_name
            and self._module == other._module
        )

    def __hash__(self) -> int:
        return hash((self._module, self._exception_type_name))

    def __repr__(self):
        return f"ExceptionAssertion({self._module}, {self._exception_type_name})"


class AssertionVisitor:
    """One method per assertion class."""

    @abstractmethod
    def visit_type_name_assertion(self, assertion: TypeNameAssertion) -> None:
        """Handles a type check.

        Args:
            assertion: The assertion
        """

    @abstractmethod
    def visit_float_assertion(self, assertion: FloatAssertion) -> None:
        """Handles an approximate number check.

        Args:
            assertion: The assertion
        """

    @abstractmethod
    def visit_object_assertion(self, assertion: ObjectAssertion) -> None:
        """Handles a comparison with a literal.

        Args:
            assertion: The assertion
        """

    @abstractmethod
    def visit_collection_length_assertion(self, assertion: CollectionLengthAssertion) -> None:
        """Handles a size check.

        Args:
            assertion: The assertion
        """

    @abstractmethod
    def visit_exception_assertion(self, assertion: ExceptionAssertion) -> None:
        """Handles an expected exception.

        Args:
            assertion: The assertion
        """

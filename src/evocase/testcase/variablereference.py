#  This file is part of evocase.
#
#  SPDX-FileCopyrightText: 2019–2025 evocase Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides the position-addressed references to values of a test case."""

from __future__ import annotations

from abc import ABC
from abc import abstractmethod
from typing import TYPE_CHECKING
from typing import Any

from evocase.analyses.typesystem import NoneType
from evocase.analyses.typesystem import is_primitive_type
from evocase.utils.exceptions import MissingPositionError


if TYPE_CHECKING:
    from collections.abc import Mapping

    import evocase.testcase.testcase as tc
    import evocase.utils.generic.genericaccessibleobject as gao
    import evocase.utils.namingscope as ns

    from evocase.analyses.typesystem import ProperType


class Reference(ABC):
    """An addressable value in a test case.

    In the snippet
        foo_0 = Foo()
        int_0 = 42
        foo_0.bar = int_0

    the variables foo_0 and int_0 are references, and so is the field foo_0.bar.
    """

    def __init__(self, typ: ProperType) -> None:
        """Creates a reference of the given declared type.

        Args:
            typ: The declared type of the reference
        """
        self._type = typ

    @property
    def type(self) -> ProperType:
        """The declared type.

        Returns:
            The declared type
        """
        return self._type

    @type.setter
    def type(self, typ: ProperType) -> None:
        self._type = typ

    def is_primitive(self) -> bool:
        """Is the declared type a primitive one?

        Returns:
            Whether the type has a literal form
        """
        return is_primitive_type(self._type)

    def is_none_type(self) -> bool:
        """Is the declared type None, i.e., the reference holds nothing usable?

        Returns:
            Whether the declared type is None
        """
        return isinstance(self._type, NoneType)

    @abstractmethod
    def get_names(
        self,
        variable_names: ns.AbstractNamingScope,
        module_names: ns.AbstractNamingScope,
    ) -> list[str]:
        """Spells out the dotted path that addresses this reference.

        Args:
            variable_names: Names the variables
            module_names: Names the module aliases

        Returns:
            The path components, e.g., ``["foo_0", "bar"]``
        """

    @abstractmethod
    def clone(self, new_test_case: tc.TestCase, offset: int = 0) -> Reference:
        """Provides the counterpart of this reference in another test case.

        'self' is not copied.  Instead, the reference that is defined at the same
        position, shifted by offset, is looked up in the new test case.  Actual
        copying is only performed on statement level.

        Args:
            new_test_case: the test case in which the counterpart is searched
            offset: Must be used when the statements are copied into a test case
                that already contains statements, e.g., when appending one test case
                onto another.

        Returns:
            The corresponding reference in the new test case.

        Raises:
            MissingPositionError: If the new test case does not define a value
                of the same type at the shifted position.  # noqa: DAR402
        """

    @abstractmethod
    def remap(self, memo: Mapping[VariableReference, VariableReference]) -> Reference:
        """Provides this reference with every variable replaced by its mapping.

        Args:
            memo: Maps variables to their counterparts

        Returns:
            The remapped reference  # noqa: DAR202
        """

    @abstractmethod
    def same(self, other: Any) -> bool:
        """Checks position and type equivalence, regardless of the owning test case.

        Args:
            other: The reference to compare with

        Returns:
            True, iff the other reference addresses the same position with the same
            declared type.
        """

    @abstractmethod
    def structural_hash(self) -> int:
        """Provides a hash that is consistent with ``same``.

        Returns:
            A hash value.
        """

    @abstractmethod
    def get_variable_reference(self) -> VariableReference:
        """The variable at the root of this reference.

        Returns: The variable reference at the root of this reference.
        """

    @abstractmethod
    def replace_variable_reference(self, old: VariableReference, new: VariableReference) -> None:
        """Swaps the root variable if it is ``old``.

        Args:
            old: The variable to replace
            new: Its replacement
        """


class VariableReference(Reference):
    """A reference to the value produced by the statement at a position.

    The position is owned by the test case, which renumbers it whenever
    statements are inserted or removed before it.  A reference that is not
    yet part of a test case has position -1.
    """

    def __init__(
        self,
        test_case: tc.TestCase,
        typ: ProperType,
        position: int = -1,
    ):
        """Constructs a new variable reference.

        Args:
            test_case: The test case that owns the reference
            typ: The declared type
            position: The position of the defining statement
        """
        super().__init__(typ)
        self._test_case = test_case
        self._position = position
        self._distance = 0

    @property
    def test_case(self) -> tc.TestCase:
        """Provides the test case in which this variable reference is used.

        Returns:
            The containing test case
        """
        return self._test_case

    @property
    def position(self) -> int:
        """Provides the position of the statement which defines this reference.

        Returns:
            The position
        """
        return self._position

    @position.setter
    def position(self, position: int) -> None:
        self._position = position

    def get_statement_position(self) -> int:
        """Provides the position of the statement which defines this reference.

        Returns:
            The position
        """
        return self._position

    @property
    def distance(self) -> int:
        """Distance metric used to select variables for mutation.

        It describes how close the variable is to the subject under test.

        Returns:
            The distance value
        """
        return self._distance

    @distance.setter
    def distance(self, distance: int) -> None:
        self._distance = distance

    def get_names(  # noqa: D102
        self,
        variable_names: ns.AbstractNamingScope,
        module_names: ns.AbstractNamingScope,
    ) -> list[str]:
        return [variable_names.get_name(self)]

    def clone(  # noqa: D102
        self, new_test_case: tc.TestCase, offset: int = 0
    ) -> VariableReference:
        target = self._position + offset
        if not new_test_case.has_statement(target):
            raise MissingPositionError(
                f"No statement at position {target} for reference {self!r}"
            )
        counterpart = new_test_case.get_statement(target).ret_val
        if counterpart.type != self._type:
            raise MissingPositionError(
                f"Statement at position {target} defines {counterpart.type}, "
                f"expected {self._type}"
            )
        return counterpart

    def remap(  # noqa: D102
        self, memo: Mapping[VariableReference, VariableReference]
    ) -> VariableReference:
        return memo[self]

    def same(self, other: Any) -> bool:  # noqa: D102
        if self is other:
            return True
        if not isinstance(other, VariableReference):
            return False
        return self._position == other._position and self._type == other._type

    def structural_hash(self) -> int:  # noqa: D102
        return hash((self._position, self._type))

    def get_variable_reference(self) -> VariableReference:  # noqa: D102
        return self

    def replace_variable_reference(  # noqa: D102
        self, old: VariableReference, new: VariableReference
    ) -> None:
        # A plain variable can only be replaced by its holder.
        pass

    def __eq__(self, other: Any) -> bool:
        if self is other:
            return True
        if not isinstance(other, VariableReference):
            return False
        return self._position == other._position and self._type == other._type

    def __hash__(self) -> int:
        # Positions are renumbered, hence they are not part of the hash.
        return 31 * 17 + hash(self._type)

    def __repr__(self) -> str:
        return f"VariableReference({self._position}, {self._type})"

    def __str__(self) -> str:
        return f"{self._type} v{self._position}"


class FieldReference(Reference):
    """A reference to an attribute of a referenced value."""

    def __init__(self, source: Reference, field: gao.GenericField):
        """Creates a reference of the given declared type.to a field.

        Args:
            source: The reference whose value carries the field
            field: The field
        """
        super().__init__(field.generated_type())
        self._source = source
        self._field = field

    @property
    def source(self) -> Reference:
        """Provide the source.

        Returns:
            The source.
        """
        return self._source

    @property
    def field(self) -> gao.GenericField:
        """Provide the field.

        Returns:
            The field
        """
        return self._field

    def get_names(  # noqa: D102
        self,
        variable_names: ns.AbstractNamingScope,
        module_names: ns.AbstractNamingScope,
    ) -> list[str]:
        names = self._source.get_names(variable_names, module_names)
        names.append(self._field.field)
        return names

    def clone(  # noqa: D102
        self, new_test_case: tc.TestCase, offset: int = 0
    ) -> FieldReference:
        return FieldReference(self._source.clone(new_test_case, offset), self._field)

    def remap(  # noqa: D102
        self, memo: Mapping[VariableReference, VariableReference]
    ) -> FieldReference:
        return FieldReference(self._source.remap(memo), self._field)

    def same(self, other: Any) -> bool:  # noqa: D102
        if not isinstance(other, FieldReference):
            return False
        return self._field == other._field and self._source.same(other._source)

    def structural_hash(self) -> int:  # noqa: D102
        return hash((self._field, self._source.structural_hash()))

    def get_variable_reference(self) -> VariableReference:  # noqa: D102
        return self._source.get_variable_reference()

    def replace_variable_reference(  # noqa: D102
        self, old: VariableReference, new: VariableReference
    ) -> None:
        if self._source == old:
            self._source = new
        else:
            self._source.replace_variable_reference(old, new)

    def __eq__(self, other):
        if not isinstance(other, FieldReference):
            return False
        return self._field == other._field and self._source == other._source

    def __hash__(self):
        return hash((self._field, self._source))

    def __repr__(self) -> str:
        return f"FieldReference({self._source!r}, {self._field.field})"


class ReferenceMemo(dict):
    """Maps the variables of one test case to their counterparts in another.

    Variables that were not mapped explicitly are looked up in the target test
    case at their position shifted by the offset.
    """

    def __init__(self, test_case: tc.TestCase, offset: int = 0) -> None:
        """Creates an empty memo.

        Args:
            test_case: The test case that holds the counterparts
            offset: The shift between the positions of both test cases
        """
        super().__init__()
        self._test_case = test_case
        self._offset = offset

    def __missing__(self, key: VariableReference) -> VariableReference:
        counterpart = key.clone(self._test_case, self._offset)
        self[key] = counterpart
        return counterpart


class IdentityMemo(dict):
    """Maps every variable onto itself."""

    def __missing__(self, key: VariableReference) -> VariableReference:
        return key

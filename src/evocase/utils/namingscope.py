#  This file is part of evocase.
#
#  SPDX-FileCopyrightText: 2019–2025 evocase Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Hands out stable names for variables and module aliases in exported tests."""

from __future__ import annotations

import re
import typing

from abc import abstractmethod
from collections import Counter
from typing import Any

from evocase.analyses.typesystem import TypeVisitor


if typing.TYPE_CHECKING:
    from collections.abc import Callable
    from collections.abc import Iterator

    import evocase.testcase.variablereference as vr

    from evocase.analyses.typesystem import AnyType
    from evocase.analyses.typesystem import Instance
    from evocase.analyses.typesystem import NoneType
    from evocase.analyses.typesystem import ProperType
    from evocase.analyses.typesystem import TupleType


_UPPER = re.compile(r"([A-Z])")


class AbstractNamingScope:
    """A scope in which every object receives exactly one name."""

    @abstractmethod
    def get_name(self, obj) -> str:
        """Names the object, reusing its name if it already has one.

        Args:
            obj: The object to name

        Returns:
            The name of the object in this scope
        """

    @abstractmethod
    def is_known_name(self, obj) -> bool:
        """Was the object named in this scope already?

        Args:
            obj: The object

        Returns:
            Whether a name was handed out for it
        """

    @abstractmethod
    def __len__(self):
        """Count the names handed out so far."""

    @abstractmethod
    def __iter__(self):
        """Yield pairs of object and name, oldest first."""


class NamingScope(AbstractNamingScope):
    """Names objects ``<prefix>_<n>``, counting up from zero."""

    def __init__(
        self,
        prefix: str = "var",
        new_name_callback: Callable[[Any, str], None] | None = None,
    ) -> None:
        """Sets up an empty scope.

        Args:
            prefix: Put in front of the counter in every name
            new_name_callback: Informed once for every object that gets a name
        """
        self._names: dict[Any, str] = {}
        self._prefix = prefix
        self._on_new_name = new_name_callback

    def get_name(self, obj: Any) -> str:  # noqa: D102
        if obj in self._names:
            return self._names[obj]
        name = f"{self._prefix}_{len(self._names)}"
        self._names[obj] = name
        if self._on_new_name is not None:
            self._on_new_name(obj, name)
        return name

    def is_known_name(self, obj) -> bool:  # noqa: D102
        return obj in self._names

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> Iterator[tuple[Any, str]]:
        return iter(self._names.items())


class VariableTypeNamingScope(AbstractNamingScope):
    """Names variables after their type, e.g., ``int_0``, ``int_1``, ``calculator_0``.

    A type observed at runtime takes precedence over the declared type.
    """

    def __init__(
        self,
        *,
        return_type_trace: dict[int, ProperType] | None = None,
        prefix: str = "var",
    ):
        """Sets up an empty scope.

        Args:
            return_type_trace: The runtime types, keyed by statement position
            prefix: The name stem for variables whose type says nothing
        """
        self._names: dict[vr.VariableReference, str] = {}
        self._used: Counter[str] = Counter()
        self._stems = _VariableNameTypeVisitor(prefix)
        self._return_type_trace = return_type_trace or {}

    def _type_of(self, var: vr.VariableReference) -> ProperType:
        observed = self._return_type_trace.get(var.get_statement_position())
        return var.type if observed is None else observed

    def get_name(self, obj: vr.VariableReference) -> str:  # noqa: D102
        if obj in self._names:
            return self._names[obj]
        stem = snake_case(self._type_of(obj).accept(self._stems))
        name = f"{stem}_{self._used[stem]}"
        self._used[stem] += 1
        self._names[obj] = name
        return name

    def is_known_name(self, obj) -> bool:  # noqa: D102
        return obj in self._names

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> Iterator[tuple[vr.VariableReference, str]]:
        return iter(self._names.items())


class _VariableNameTypeVisitor(TypeVisitor[str]):
    def __init__(self, prefix: str):
        self._prefix = prefix

    def visit_any_type(self, left: AnyType) -> str:
        return self._prefix

    def visit_none_type(self, left: NoneType) -> str:
        return "none_type"

    def visit_instance(self, left: Instance) -> str:
        return left.type.name

    def visit_tuple_type(self, left: TupleType) -> str:
        return "tuple"


def snake_case(name: str) -> str:
    """Turns a CamelCase name into snake_case, one underscore per capital.

    Args:
        name: A non-empty name

    Returns:
        The lower-cased name
    """
    assert name, "Cannot snake_case empty string"
    return _UPPER.sub(r"_\1", name).lower().lstrip("_")

#  This file is part of evocase.
#
#  SPDX-FileCopyrightText: 2019–2025 evocase Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides the declared types of variable references and operation signatures."""

from __future__ import annotations

import inspect
import logging
import types
import typing

from abc import ABC
from abc import abstractmethod
from dataclasses import dataclass
from itertools import starmap
from typing import Any
from typing import Final
from typing import Generic
from typing import TypeVar
from typing import get_args
from typing import get_origin
from typing import get_type_hints


if typing.TYPE_CHECKING:
    from collections.abc import Callable

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

PRIMITIVES: Final[frozenset[type]] = frozenset({int, str, bytes, bool, float, complex})
COLLECTIONS: Final[frozenset[type]] = frozenset({list, set, tuple, dict})


class ProperType(ABC):
    """Base class for all types.

    Instances never change once created.
    """

    @abstractmethod
    def accept(self, visitor: TypeVisitor[T]) -> T:
        """Accept a type visitor.

        Args:
            visitor: the visitor
        """

    def __str__(self) -> str:
        return self.accept(TypeStringVisitor())

    def __repr__(self) -> str:
        return self.accept(TypeReprVisitor())


class AnyType(ProperType):
    """The Any Type."""

    def accept(self, visitor: TypeVisitor[T]) -> T:  # noqa: D102
        return visitor.visit_any_type(self)

    def __hash__(self):
        return hash(AnyType)

    def __eq__(self, other):
        return isinstance(other, AnyType)


class NoneType(ProperType):
    """The None type."""

    def accept(self, visitor: TypeVisitor[T]) -> T:  # noqa: D102
        return visitor.visit_none_type(self)

    def __hash__(self):
        return hash(NoneType)

    def __eq__(self, other):
        return isinstance(other, NoneType)


class Instance(ProperType):
    """An instance of the class described by a type info."""

    def __init__(self, typ: TypeInfo):  # noqa: D107
        assert typ.raw_type is not tuple, "Use TupleType instead!"
        self.type = typ

    def accept(self, visitor: TypeVisitor[T]) -> T:  # noqa: D102
        return visitor.visit_instance(self)

    def __hash__(self):
        return hash(self.type)

    def __eq__(self, other):
        return isinstance(other, Instance) and self.type == other.type


class TupleType(ProperType):
    """Tuple type tuple[T1, ..., Tn].

    Tuple is intentionally not ``Instance(TypeInfo(tuple))``, because the element
    types are positional.
    """

    def __init__(self, args: tuple[ProperType, ...]):  # noqa: D107
        self.args: Final[tuple[ProperType, ...]] = tuple(args)

    def accept(self, visitor: TypeVisitor[T]) -> T:  # noqa: D102
        return visitor.visit_tuple_type(self)

    def __hash__(self):
        return hash((TupleType, self.args))

    def __eq__(self, other):
        return isinstance(other, TupleType) and self.args == other.args


ANY = AnyType()
NONE_TYPE = NoneType()


class TypeVisitor(Generic[T]):
    """A type visitor."""

    @abstractmethod
    def visit_any_type(self, left: AnyType) -> T:
        """Visit the Any type.

        Args:
            left: the Any type

        Returns:
            result of the visit
        """

    @abstractmethod
    def visit_none_type(self, left: NoneType) -> T:
        """Visit the None type.

        Args:
            left: the None type

        Returns:
            result of the visit
        """

    @abstractmethod
    def visit_instance(self, left: Instance) -> T:
        """Visit an instance.

        Args:
            left: instance

        Returns:
            result of the visit
        """

    @abstractmethod
    def visit_tuple_type(self, left: TupleType) -> T:
        """Visit a tuple type.

        Args:
            left: tuple

        Returns:
            result of the visit
        """


class TypeStringVisitor(TypeVisitor[str]):
    """Converts a proper type into the string used in generated code."""

    def visit_any_type(self, left: AnyType) -> str:  # noqa: D102
        return "Any"

    def visit_none_type(self, left: NoneType) -> str:  # noqa: D102
        return "None"

    def visit_instance(self, left: Instance) -> str:  # noqa: D102
        return left.type.name if left.type.module == "builtins" else left.type.full_name

    def visit_tuple_type(self, left: TupleType) -> str:  # noqa: D102
        if not left.args:
            return "tuple"
        return "tuple[" + ", ".join(t.accept(self) for t in left.args) + "]"


class TypeReprVisitor(TypeVisitor[str]):
    """Creates a repr from a proper type."""

    def visit_any_type(self, left: AnyType) -> str:  # noqa: D102
        return "AnyType()"

    def visit_none_type(self, left: NoneType) -> str:  # noqa: D102
        return "NoneType()"

    def visit_instance(self, left: Instance) -> str:  # noqa: D102
        return f"Instance({left.type!r})"

    def visit_tuple_type(self, left: TupleType) -> str:  # noqa: D102
        return f"TupleType({', '.join(t.accept(self) for t in left.args)})"


class _MaybeSubtypeVisitor(TypeVisitor[bool]):
    """Checks whether a value of the left type may be used where right is expected.

    The caller handles a right side of AnyType.
    """

    def __init__(self, right: ProperType):
        self.right = right

    def visit_any_type(self, left: AnyType) -> bool:
        # The declared type is unknown, so the actual value may fit.
        return True

    def visit_none_type(self, left: NoneType) -> bool:
        return isinstance(self.right, NoneType)

    def visit_instance(self, left: Instance) -> bool:
        if not isinstance(self.right, Instance):
            return False
        if left.type == self.right.type:
            return True
        left_raw = left.type.raw_type
        right_raw = self.right.type.raw_type
        if right_raw is float and left_raw in {int, bool}:
            # Numeric tower of PEP 484
            return True
        if right_raw is complex and left_raw in {int, bool, float}:
            return True
        try:
            return issubclass(left_raw, right_raw)
        except TypeError:
            _LOGGER.debug("Cannot check %s against %s", left, self.right)
            return False

    def visit_tuple_type(self, left: TupleType) -> bool:
        if isinstance(self.right, Instance) and self.right.type.raw_type is object:
            return True
        if not isinstance(self.right, TupleType):
            return False
        if not self.right.args:
            return True
        if len(left.args) != len(self.right.args):
            return False
        return all(starmap(is_maybe_subtype, zip(left.args, self.right.args, strict=True)))


def is_maybe_subtype(left: ProperType, right: ProperType) -> bool:
    """Is left possibly a subtype of right?

    Args:
        left: The type of the value that shall be used
        right: The type that is expected

    Returns:
        True, if a value of type left may be used where right is expected.
    """
    if isinstance(right, AnyType):
        return True
    if isinstance(right, Instance) and right.type.raw_type is object:
        return not isinstance(left, NoneType)
    return left.accept(_MaybeSubtypeVisitor(right))


def is_primitive_type(typ: ProperType) -> bool:
    """Is the given type a primitive, i.e., a type that has a literal?

    Args:
        typ: The type to check

    Returns:
        Whether the type is primitive
    """
    return isinstance(typ, Instance) and typ.type.raw_type in PRIMITIVES


def is_collection_type(typ: ProperType) -> bool:
    """Is the given type one of the built-in collections?

    Args:
        typ: The type to check

    Returns:
        Whether the type is a collection
    """
    return isinstance(typ, TupleType) or (
        isinstance(typ, Instance) and typ.type.raw_type in COLLECTIONS
    )


class TypeInfo:
    """A small wrapper around a class.

    Corresponds 1:1 to a class.  Two type infos are equal if they describe classes
    with the same fully qualified name, so that a type info survives reloading the
    module that defines its class.
    """

    def __init__(self, raw_type: type):
        """Captures the names of a class.

        Args:
            raw_type: The class
        """
        self.raw_type = raw_type
        self.name: str = raw_type.__name__
        self.qualname: str = raw_type.__qualname__
        self.module: str = raw_type.__module__
        self.full_name = TypeInfo.to_full_name(raw_type)
        self.is_abstract = inspect.isabstract(raw_type)

    @staticmethod
    def to_full_name(typ: type) -> str:
        """Joins module and qualified name of a class with a dot.

        Args:
            typ: The class

        Returns:
            The fully qualified name
        """
        return f"{typ.__module__}.{typ.__qualname__}"

    def __eq__(self, other) -> bool:
        return isinstance(other, TypeInfo) and other.full_name == self.full_name

    def __hash__(self):
        return hash(self.full_name)

    def __repr__(self):
        return f"TypeInfo({self.full_name})"


def convert_type_hint(hint: Any) -> ProperType:
    """Converts a type hint into a proper type.

    Hints that have no proper type counterpart, e.g., unions or type variables,
    become Any.

    Args:
        hint: The type hint, as found in an annotation

    Returns:
        The corresponding proper type
    """
    if hint is inspect.Parameter.empty or hint is Any:
        return ANY
    if hint is None or hint is type(None):
        return NONE_TYPE
    origin = get_origin(hint)
    if origin is typing.Union or origin is types.UnionType:
        _LOGGER.debug("Union type hint %s, falling back to Any", hint)
        return ANY
    if origin is tuple or hint is tuple:
        args = get_args(hint)
        if len(args) == 2 and args[1] is Ellipsis:  # noqa: PLR2004
            return TupleType(())
        return TupleType(tuple(convert_type_hint(arg) for arg in args))
    if origin is not None and isinstance(origin, type):
        return Instance(TypeInfo(origin))
    if isinstance(hint, type):
        return Instance(TypeInfo(hint))
    _LOGGER.debug("Unsupported type hint %s, falling back to Any", hint)
    return ANY


def type_of_value(value: Any) -> ProperType:
    """Provides the proper type of a runtime value.

    Args:
        value: The value

    Returns:
        The proper type of the value's class
    """
    if value is None:
        return NONE_TYPE
    if isinstance(value, tuple):
        return TupleType(tuple(type_of_value(elem) for elem in value))
    return Instance(TypeInfo(type(value)))


@dataclass(frozen=True)
class InferredSignature:
    """Encapsulates the types inferred for an operation."""

    # Signature inferred from inspect, only useful to bind arguments
    signature: inspect.Signature

    # The return type
    return_type: ProperType

    # Parameter name to declared type
    parameters: dict[str, ProperType]

    def __str__(self):
        return str(self.signature)

    def __hash__(self):
        return hash((tuple(self.parameters), self.return_type))

    def is_compatible_with(self, other: InferredSignature) -> bool:
        """Can the arguments of this signature be passed on to the other signature?

        Args:
            other: The signature that would be invoked instead

        Returns:
            True, if both signatures have the same parameter names and every
            parameter type of this signature may be used for the other.
        """
        if self.parameters.keys() != other.parameters.keys():
            return False
        return all(
            is_maybe_subtype(typ, other.parameters[name]) for name, typ in self.parameters.items()
        )


def infer_signature(
    func: Callable,
    *,
    return_type: ProperType | None = None,
    skip_first: bool = False,
) -> InferredSignature:
    """Infers the signature of the given callable from its annotations.

    Args:
        func: The callable to inspect
        return_type: An explicit return type, e.g., the owner class of a constructor
        skip_first: Whether the first parameter is bound implicitly, e.g., ``self``

    Returns:
        The inferred signature
    """
    signature = inspect.signature(func)
    try:
        hints = get_type_hints(func)
    except (NameError, TypeError):
        _LOGGER.debug("Could not resolve type hints of %s", func)
        hints = {}

    params = list(signature.parameters.values())
    if skip_first and params:
        params = params[1:]
        signature = signature.replace(parameters=params)

    parameters: dict[str, ProperType] = {}
    for param in params:
        if param.kind in {inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD}:
            continue
        parameters[param.name] = convert_type_hint(hints.get(param.name, param.annotation))
    if return_type is None:
        return_type = convert_type_hint(hints.get("return", signature.return_annotation))
    return InferredSignature(signature=signature, return_type=return_type, parameters=parameters)


def resolve_type(typ: ProperType, lookup: Callable[[TypeInfo], type | None]) -> ProperType:
    """Rebinds the classes of a type to their counterparts found by lookup.

    Args:
        typ: The type to rebind
        lookup: Provides the equivalent class of a type info, or None

    Returns:
        The rebound type; classes without counterpart are kept as they are.
    """
    if isinstance(typ, Instance):
        if typ.type.module == "builtins":
            return typ
        if (raw := lookup(typ.type)) is not None:
            return Instance(TypeInfo(raw))
        return typ
    if isinstance(typ, TupleType):
        return TupleType(tuple(resolve_type(arg, lookup) for arg in typ.args))
    return typ


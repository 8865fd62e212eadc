#  This file is part of evocase.
#
#  SPDX-FileCopyrightText: 2019–2025 evocase Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides descriptors of the operations a statement can invoke on the subject.

A descriptor never exposes more of the subject than the statements need: what it
produces, which exceptions it declares, what signature it has, and how to find
its equivalent in another execution context.  Descriptors are immutable and
compare by the qualified names of what they describe, so that a descriptor
rebound to a reloaded module still equals the original one.
"""

from __future__ import annotations

import abc
import dataclasses
import enum
import functools
import inspect
import logging

from typing import TYPE_CHECKING
from typing import Any

from evocase.analyses.typesystem import ANY
from evocase.analyses.typesystem import Instance
from evocase.analyses.typesystem import TypeInfo
from evocase.analyses.typesystem import infer_signature
from evocase.analyses.typesystem import is_maybe_subtype
from evocase.analyses.typesystem import resolve_type
from evocase.utils.exceptions import OperationResolutionError


if TYPE_CHECKING:
    from collections.abc import Callable
    from collections.abc import Iterable

    import evocase.testcase.execution as ex

    from evocase.analyses.typesystem import InferredSignature
    from evocase.analyses.typesystem import ProperType

_LOGGER = logging.getLogger(__name__)


def lookup_qualified(module: Any, qualname: str) -> Any:
    """Look up a dotted qualified name within a module.

    Args:
        module: The module to start from
        qualname: The dotted qualified name, e.g., ``Outer.Inner.method``

    Returns:
        The object found under the name

    Raises:
        OperationResolutionError: If the name does not exist in the module
    """
    try:
        return functools.reduce(getattr, qualname.split("."), module)
    except AttributeError as error:
        raise OperationResolutionError(
            f"{getattr(module, '__name__', module)} has no member {qualname}"
        ) from error


def _get_module(context: ex.ExecutionContext, module_name: str) -> Any:
    try:
        return context.module_provider.get_module(module_name)
    except ImportError as error:
        raise OperationResolutionError(f"Cannot import {module_name}") from error


def _resolve_type_info(context: ex.ExecutionContext, type_info: TypeInfo) -> TypeInfo:
    module = _get_module(context, type_info.module)
    raw = lookup_qualified(module, type_info.qualname)
    if not isinstance(raw, type):
        raise OperationResolutionError(f"{type_info.full_name} is no longer a class")
    return TypeInfo(raw)


class GenericAccessibleObject(abc.ABC):
    """Abstract base class for something that can be accessed."""

    def __init__(self, owner: TypeInfo | None):  # noqa: D107
        self._owner = owner

    @abc.abstractmethod
    def generated_type(self) -> ProperType:
        """Provides the type that is generated by this accessible object.

        Returns:
            The generated type
        """

    @abc.abstractmethod
    def resolve(self, context: ex.ExecutionContext) -> GenericAccessibleObject:
        """Provides the equivalent accessible object under another execution context.

        Args:
            context: The context in which the equivalent object is looked up

        Returns:
            The equivalent accessible object  # noqa: DAR202

        Raises:
            OperationResolutionError: If there is no equivalent  # noqa: DAR402
        """

    @property
    def owner(self) -> TypeInfo | None:
        """The type which owns this accessible object.

        Returns:
            The owner of this accessible object
        """
        return self._owner

    @property
    def raised_exceptions(self) -> frozenset[str]:
        """The names of the exceptions this object declares to raise.

        Returns:
            The declared exception names
        """
        return frozenset()

    def is_declared(self, exception: BaseException) -> bool:
        """Is the given exception, or one of its base classes, declared?

        Args:
            exception: The exception raised by the subject

        Returns:
            Whether the exception is a declared one
        """
        declared = self.raised_exceptions
        return any(klass.__name__ in declared for klass in type(exception).__mro__)

    def is_enum(self) -> bool:
        """Is this an enum?

        Returns:
            Whether this is an enum
        """
        return False

    def is_method(self) -> bool:
        """Is this a method?

        Returns:
            Whether this is a method
        """
        return False

    def is_constructor(self) -> bool:
        """Is this a constructor?

        Returns:
            Whether this is a constructor
        """
        return False

    def is_function(self) -> bool:
        """Is this a function?

        Returns:
            Whether this is a function
        """
        return False

    def is_field(self) -> bool:
        """Is this a field?

        Returns:
            Whether this is a field
        """
        return False


class GenericEnum(GenericAccessibleObject):
    """Models an enum and the names of its members."""

    def __init__(self, owner: TypeInfo):  # noqa: D107
        super().__init__(owner)
        raw = owner.raw_type
        assert issubclass(raw, enum.Enum)
        self.names = [member.name for member in raw]

    def generated_type(self) -> ProperType:  # noqa: D102
        assert self.owner is not None
        return Instance(self.owner)

    def resolve(self, context: ex.ExecutionContext) -> GenericEnum:  # noqa: D102
        assert self.owner is not None
        return GenericEnum(_resolve_type_info(context, self.owner))

    def is_enum(self) -> bool:  # noqa: D102
        return True

    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, GenericEnum):
            return False
        return self._owner == other._owner

    def __hash__(self):
        return hash(self._owner)

    def __repr__(self):
        return f"{self.__class__.__name__}({self._owner})"


class GenericCallableAccessibleObject(GenericAccessibleObject, abc.ABC):
    """Abstract base class for something that can be called."""

    def __init__(
        self,
        owner: TypeInfo | None,
        callable_: Callable,
        inferred_signature: InferredSignature,
        raised_exceptions: Iterable[str] = (),
    ) -> None:
        """Creates a callable descriptor.

        Args:
            owner: The owning class, if any
            callable_: The described callable
            inferred_signature: The signature of the callable
            raised_exceptions: The names of the exceptions the callable declares
        """
        super().__init__(owner)
        self._callable = callable_
        self._inferred_signature = inferred_signature
        self._raised_exceptions = frozenset(raised_exceptions)

    def generated_type(self) -> ProperType:  # noqa: D102
        return self._inferred_signature.return_type

    @property
    def inferred_signature(self) -> InferredSignature:
        """Provides access to the inferred type signature information.

        Returns:
            The inferred type signature
        """
        return self._inferred_signature

    @property
    def raised_exceptions(self) -> frozenset[str]:  # noqa: D102
        return self._raised_exceptions

    @property
    def callable(self) -> Callable:
        """Provides the callable.

        Returns:
            The callable
        """
        return self._callable

    def is_signature_compatible(self, other: GenericCallableAccessibleObject) -> bool:
        """Can a call to this object be replaced by a call to the other object?

        The same arguments must be accepted by the other object and its result must
        be usable where the result of this object is used.

        Args:
            other: The candidate replacement

        Returns:
            True, if the replacement keeps the call well typed
        """
        if type(self) is not type(other):
            return False
        if not self._inferred_signature.is_compatible_with(other.inferred_signature):
            return False
        return is_maybe_subtype(other.generated_type(), self.generated_type())


class GenericConstructor(GenericCallableAccessibleObject):
    """A constructor."""

    def __init__(
        self,
        owner: TypeInfo,
        inferred_signature: InferredSignature,
        raised_exceptions: Iterable[str] = (),
    ) -> None:
        """Creates a constructor descriptor.

        Args:
            owner: The class to construct
            inferred_signature: The signature of ``__init__`` without ``self``
            raised_exceptions: The names of declared exceptions
        """
        super().__init__(owner, owner.raw_type, inferred_signature, raised_exceptions)
        assert owner

    @classmethod
    def from_class(cls, klass: type, raised_exceptions: Iterable[str] = ()) -> GenericConstructor:
        """Creates the constructor descriptor of the given class.

        Args:
            klass: The class
            raised_exceptions: The names of declared exceptions

        Returns:
            The constructor descriptor
        """
        owner = TypeInfo(klass)
        return cls(
            owner,
            infer_signature(klass.__init__, return_type=Instance(owner), skip_first=True),
            raised_exceptions,
        )

    def generated_type(self) -> ProperType:  # noqa: D102
        assert self.owner is not None
        return Instance(self.owner)

    def resolve(self, context: ex.ExecutionContext) -> GenericConstructor:  # noqa: D102
        assert self.owner is not None
        owner = _resolve_type_info(context, self.owner)
        return GenericConstructor(
            owner,
            _rebind_signature(context, self._inferred_signature, Instance(owner)),
            self._raised_exceptions,
        )

    def is_constructor(self) -> bool:  # noqa: D102
        return True

    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, GenericConstructor):
            return False
        return self._owner == other._owner

    def __hash__(self):
        return hash(self._owner)

    def __repr__(self):
        return f"{self.__class__.__name__}({self.owner}, {self._inferred_signature})"


class GenericMethod(GenericCallableAccessibleObject):
    """A method."""

    def __init__(
        self,
        owner: TypeInfo,
        method: Callable,
        inferred_signature: InferredSignature,
        raised_exceptions: Iterable[str] = (),
        method_name: str | None = None,
    ) -> None:
        """Creates a method descriptor.

        Args:
            owner: The class that defines the method
            method: The method object
            inferred_signature: The signature without ``self``
            raised_exceptions: The names of declared exceptions
            method_name: The name of the method, if it differs from ``__name__``
        """
        super().__init__(owner, method, inferred_signature, raised_exceptions)
        self._method_name = method.__name__ if method_name is None else method_name

    @classmethod
    def from_class(
        cls, klass: type, method_name: str, raised_exceptions: Iterable[str] = ()
    ) -> GenericMethod:
        """Creates the descriptor of the named method of the given class.

        Args:
            klass: The class
            method_name: The name of the method
            raised_exceptions: The names of declared exceptions

        Returns:
            The method descriptor
        """
        method = getattr(klass, method_name)
        # Static methods are plain functions as well, but they take no receiver.
        is_static = isinstance(inspect.getattr_static(klass, method_name), staticmethod)
        return cls(
            TypeInfo(klass),
            method,
            infer_signature(method, skip_first=inspect.isfunction(method) and not is_static),
            raised_exceptions,
            method_name,
        )

    @property
    def method_name(self) -> str:
        """Provides the name of the method.

        Returns:
            The name of the method
        """
        return self._method_name

    def resolve(self, context: ex.ExecutionContext) -> GenericMethod:  # noqa: D102
        assert self.owner is not None
        owner = _resolve_type_info(context, self.owner)
        method = getattr(owner.raw_type, self._method_name, None)
        if method is None:
            raise OperationResolutionError(f"{owner.full_name} has no method {self._method_name}")
        return GenericMethod(
            owner,
            method,
            _rebind_signature(context, self._inferred_signature),
            self._raised_exceptions,
            self._method_name,
        )

    def is_method(self) -> bool:  # noqa: D102
        return True

    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, GenericMethod):
            return False
        return self._owner == other._owner and self._method_name == other._method_name

    def __hash__(self):
        return hash((self._owner, self._method_name))

    def __repr__(self):
        return (
            f"{self.__class__.__name__}({self.owner},"
            f" {self._method_name}, {self._inferred_signature})"
        )


class GenericFunction(GenericCallableAccessibleObject):
    """A function, which does not belong to any class."""

    def __init__(
        self,
        function: Callable,
        inferred_signature: InferredSignature,
        raised_exceptions: Iterable[str] = (),
        function_name: str | None = None,
    ) -> None:
        """Creates a function descriptor.

        Args:
            function: The function object
            inferred_signature: The signature of the function
            raised_exceptions: The names of declared exceptions
            function_name: The qualified name of the function, if not ``__qualname__``
        """
        super().__init__(None, function, inferred_signature, raised_exceptions)
        self._module_name: str = function.__module__
        self._function_name = function.__qualname__ if function_name is None else function_name

    @classmethod
    def from_function(
        cls, function: Callable, raised_exceptions: Iterable[str] = ()
    ) -> GenericFunction:
        """Creates the descriptor of the given module level function.

        Args:
            function: The function
            raised_exceptions: The names of declared exceptions

        Returns:
            The function descriptor
        """
        return cls(function, infer_signature(function), raised_exceptions)

    @property
    def function_name(self) -> str:
        """Provides the qualified name of the function.

        Returns:
            The name of the function
        """
        return self._function_name

    @property
    def module_name(self) -> str:
        """Provides the name of the module that defines the function.

        Returns:
            The module name
        """
        return self._module_name

    def resolve(self, context: ex.ExecutionContext) -> GenericFunction:  # noqa: D102
        module = _get_module(context, self._module_name)
        function = lookup_qualified(module, self._function_name)
        if not callable(function):
            raise OperationResolutionError(f"{self._function_name} is not callable")
        return GenericFunction(
            function,
            _rebind_signature(context, self._inferred_signature),
            self._raised_exceptions,
            self._function_name,
        )

    def is_function(self) -> bool:  # noqa: D102
        return True

    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, GenericFunction):
            return False
        return (
            self._module_name == other._module_name
            and self._function_name == other._function_name
        )

    def __hash__(self):
        return hash((self._module_name, self._function_name))

    def __repr__(self):
        return f"{self.__class__.__name__}({self._function_name}, {self._inferred_signature})"


class GenericField(GenericAccessibleObject):
    """A field of a class, read from one of its instances."""

    def __init__(self, owner: TypeInfo, field: str, field_type: ProperType = ANY) -> None:
        """Creates a field descriptor.

        Args:
            owner: The class of the instances that carry the field
            field: The name of the field
            field_type: The declared type of the field
        """
        super().__init__(owner)
        self._field = field
        self._field_type = field_type

    def generated_type(self) -> ProperType:  # noqa: D102
        return self._field_type

    @property
    def field(self) -> str:
        """Provides the name of the field.

        Returns:
            The name of the field
        """
        return self._field

    def resolve(self, context: ex.ExecutionContext) -> GenericField:  # noqa: D102
        assert self.owner is not None
        return GenericField(
            _resolve_type_info(context, self.owner),
            self._field,
            resolve_type(self._field_type, functools.partial(find_class, context)),
        )

    def is_field(self) -> bool:  # noqa: D102
        return True

    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, GenericField):
            return False
        return self._owner == other._owner and self._field == other._field

    def __hash__(self):
        return hash((self._owner, self._field))

    def __repr__(self):
        return f"{self.__class__.__name__}({self.owner}, {self._field}, {self._field_type})"


def find_class(context: ex.ExecutionContext, type_info: TypeInfo) -> type | None:
    """Finds the counterpart of a class in the given execution context.

    Args:
        context: The execution context to search in
        type_info: The class to look for

    Returns:
        The counterpart, or None if the context does not define it
    """
    try:
        return _resolve_type_info(context, type_info).raw_type
    except OperationResolutionError:
        _LOGGER.debug("Keeping %s, it has no counterpart in the new context", type_info)
        return None


def _rebind_signature(
    context: ex.ExecutionContext,
    signature: InferredSignature,
    return_type: ProperType | None = None,
) -> InferredSignature:
    lookup = functools.partial(find_class, context)
    return dataclasses.replace(
        signature,
        return_type=(
            resolve_type(signature.return_type, lookup) if return_type is None else return_type
        ),
        parameters={name: resolve_type(typ, lookup) for name, typ in signature.parameters.items()},
    )

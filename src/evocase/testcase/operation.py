#  This file is part of evocase.
#
#  SPDX-FileCopyrightText: 2019–2025 evocase Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides the single description of a statement that all renderings consume.

A statement never renders itself.  It describes which operation it invokes,
on which receiver, with which operands and into which return value.  The source
and the instruction back ends both translate this description, so a mutated
statement can never be rendered differently by the two.
"""

from __future__ import annotations

import dataclasses
import enum

from typing import TYPE_CHECKING
from typing import Any


if TYPE_CHECKING:
    import evocase.testcase.variablereference as vr
    import evocase.utils.generic.genericaccessibleobject as gao

    from evocase.analyses.typesystem import ProperType


class StatementKind(enum.Enum):
    """The closed set of statement kinds."""

    CONSTRUCTOR = "constructor"
    METHOD = "method"
    FUNCTION = "function"
    FIELD = "field"
    ASSIGNMENT = "assignment"
    PRIMITIVE = "primitive"
    ENUM = "enum"
    NONE = "none"
    LIST = "list"
    SET = "set"
    TUPLE = "tuple"
    DICT = "dict"

    @property
    def is_call(self) -> bool:
        """Does a statement of this kind invoke a callable of the subject?

        Returns:
            Whether this kind is a call
        """
        return self in {StatementKind.CONSTRUCTOR, StatementKind.METHOD, StatementKind.FUNCTION}

    @property
    def is_literal(self) -> bool:
        """Does a statement of this kind define a value without invoking anything?

        Returns:
            Whether this kind is a literal
        """
        return self in {StatementKind.PRIMITIVE, StatementKind.ENUM, StatementKind.NONE}

    @property
    def is_collection(self) -> bool:
        """Does a statement of this kind build a collection from its operands?

        Returns:
            Whether this kind is a collection
        """
        return self in {
            StatementKind.LIST,
            StatementKind.SET,
            StatementKind.TUPLE,
            StatementKind.DICT,
        }


@dataclasses.dataclass(frozen=True)
class OperationDescription:
    """Describes what a statement does, independent of any rendering.

    For dict statements, the arguments alternate between keys and values.
    """

    kind: StatementKind

    # The value defined by the statement
    ret_val: vr.VariableReference

    # The invoked operation, if any
    operation: gao.GenericAccessibleObject | None = None

    # The callee of a method, the source of a field, or the target of an assignment
    receiver: vr.Reference | None = None

    # Positional operands, in order
    args: tuple[vr.Reference, ...] = ()

    # Keyword operands, in order
    kwargs: tuple[tuple[str, vr.Reference], ...] = ()

    # The literal value of primitive statements, or the member name of enums
    value: Any = None

    @property
    def return_type(self) -> ProperType:
        """Provides the declared type of the defined value.

        Returns:
            The return type
        """
        return self.ret_val.type

    @property
    def stores_result(self) -> bool:
        """Is the produced value stored into the return value?

        Assignments store into their receiver instead.

        Returns:
            Whether the return value is written
        """
        return self.kind is not StatementKind.ASSIGNMENT

    def operands(self) -> list[vr.Reference]:
        """Provides all operands, receiver first.

        Returns:
            The operands in rendering order
        """
        result: list[vr.Reference] = []
        if self.receiver is not None:
            result.append(self.receiver)
        result.extend(self.args)
        result.extend(ref for _, ref in self.kwargs)
        return result

    def operand_positions(self) -> list[int]:
        """Provides the positions of the variables read or written by the operands.

        Returns:
            The positions in rendering order
        """
        return [ref.get_variable_reference().position for ref in self.operands()]


def fault_name(fault: type[BaseException] | BaseException) -> tuple[str, str]:
    """Provides the module and the qualified name of a fault's class.

    Args:
        fault: The fault, or its class

    Returns:
        The module and the qualified name of the class
    """
    klass = fault if isinstance(fault, type) else type(fault)
    return klass.__module__, klass.__qualname__

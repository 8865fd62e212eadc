#  This file is part of evocase.
#
#  SPDX-FileCopyrightText: 2019–2025 evocase Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides a visitor that transforms statement descriptions to instructions."""

from __future__ import annotations

from typing import TYPE_CHECKING

import evocase.testcase.instructions as ins
import evocase.testcase.variablereference as vr
import evocase.utils.generic.genericaccessibleobject as gao

from evocase.testcase.operation import StatementKind
from evocase.testcase.operation import fault_name
from evocase.utils.exceptions import UnboundReferenceError


if TYPE_CHECKING:
    from evocase.testcase.operation import OperationDescription

    from evocase.testcase.instructions import InstructionEmitter


_BUILD_OPS = {
    StatementKind.LIST: ins.BUILD_LIST,
    StatementKind.SET: ins.BUILD_SET,
    StatementKind.TUPLE: ins.BUILD_TUPLE,
}


class StatementToInstructionsVisitor:
    """Visitor that writes the instructions of statement descriptions.

    The value defined by a statement is stored in a freshly declared slot; the slot
    is recorded for the position of the statement.  Operands are loaded from the
    slots recorded for their positions.
    """

    def __init__(self, emitter: InstructionEmitter, slots: dict[int, int]) -> None:
        """Creates a new visitor.

        Args:
            emitter: The emitter that receives the instructions
            slots: Maps positions to slots; extended for every stored value
        """
        self._emitter = emitter
        self._slots = slots

    def visit(
        self,
        description: OperationDescription,
        pending_fault: type[BaseException] | BaseException | None = None,
    ) -> None:
        """Emits the instructions of the described statement.

        Args:
            description: The description of the statement
            pending_fault: The fault the statement is expected to raise, if any
        """
        label = None
        if pending_fault is not None:
            label = self._emitter.new_label()
            self._emitter.emit(ins.SETUP_EXPECT, (fault_name(pending_fault), label))

        self._emit_value(description)

        if description.kind is StatementKind.ASSIGNMENT:
            assert description.receiver is not None
            self._emit_store(description.receiver)
        elif pending_fault is not None:
            self._emitter.emit(ins.POP_TOP)
        else:
            ret_val = description.ret_val
            slot = self._emitter.declare(ret_val.position, description.return_type)
            self._emitter.emit(ins.STORE_FAST, slot)
            self._slots[ret_val.position] = slot

        if label is not None:
            self._emitter.emit(ins.END_EXPECT)
            self._emitter.mark(label)

    def _emit_value(  # noqa: C901
        self, description: OperationDescription
    ) -> None:
        operation = description.operation
        match description.kind:
            case StatementKind.CONSTRUCTOR:
                assert operation is not None
                owner = operation.owner
                assert owner is not None
                self._emitter.emit(ins.LOAD_GLOBAL, (owner.module, owner.qualname))
                self._emit_call(description)
            case StatementKind.METHOD:
                assert isinstance(operation, gao.GenericMethod)
                assert description.receiver is not None
                self._emit_load(description.receiver)
                self._emitter.emit(ins.LOAD_ATTR, operation.method_name)
                self._emit_call(description)
            case StatementKind.FUNCTION:
                assert isinstance(operation, gao.GenericFunction)
                self._emitter.emit(
                    ins.LOAD_GLOBAL, (operation.module_name, operation.function_name)
                )
                self._emit_call(description)
            case StatementKind.FIELD:
                assert isinstance(operation, gao.GenericField)
                assert description.receiver is not None
                self._emit_load(description.receiver)
                self._emitter.emit(ins.LOAD_ATTR, operation.field)
            case StatementKind.ASSIGNMENT:
                self._emit_load(description.args[0])
            case StatementKind.ENUM:
                assert operation is not None
                owner = operation.owner
                assert owner is not None
                self._emitter.emit(ins.LOAD_GLOBAL, (owner.module, owner.qualname))
                self._emitter.emit(ins.LOAD_ATTR, description.value)
            case StatementKind.LIST | StatementKind.SET | StatementKind.TUPLE:
                for ref in description.args:
                    self._emit_load(ref)
                self._emitter.emit(_BUILD_OPS[description.kind], len(description.args))
            case StatementKind.DICT:
                for ref in description.args:
                    self._emit_load(ref)
                self._emitter.emit(ins.BUILD_MAP, len(description.args) // 2)
            case _:
                self._emitter.emit(ins.LOAD_CONST, description.value)

    def _emit_call(self, description: OperationDescription) -> None:
        for ref in description.args:
            self._emit_load(ref)
        for _, ref in description.kwargs:
            self._emit_load(ref)
        self._emitter.emit(
            ins.CALL,
            (len(description.args), tuple(name for name, _ in description.kwargs)),
        )

    def _emit_load(self, ref: vr.Reference) -> None:
        if isinstance(ref, vr.FieldReference):
            self._emit_load(ref.source)
            self._emitter.emit(ins.LOAD_ATTR, ref.field.field)
            return
        self._emitter.emit(ins.LOAD_FAST, self._slot_of(ref.get_variable_reference()))

    def _emit_store(self, ref: vr.Reference) -> None:
        if isinstance(ref, vr.FieldReference):
            self._emit_load(ref.source)
            self._emitter.emit(ins.STORE_ATTR, ref.field.field)
            return
        self._emitter.emit(ins.STORE_FAST, self._slot_of(ref.get_variable_reference()))

    def _slot_of(self, var: vr.VariableReference) -> int:
        if (slot := self._slots.get(var.position)) is None:
            raise UnboundReferenceError(f"No slot was declared for {var!r}")
        return slot

#  This file is part of evocase.
#
#  SPDX-FileCopyrightText: 2019–2025 evocase Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides a small stack-machine instruction set for rendered test cases.

Statements are emitted into an :class:`InstructionEmitter`; every value defined by
a statement lives in a numbered slot.  The :class:`InstructionInterpreter` replays
an emitted stream against the subject, which allows checking that the instruction
rendering of a test case behaves like its source rendering.
"""

from __future__ import annotations

import dataclasses
import itertools
import logging

from typing import TYPE_CHECKING
from typing import Any
from typing import NamedTuple

import evocase.testcase.execution as ex

from evocase.utils.exceptions import OperationResolutionError
from evocase.utils.exceptions import UnboundReferenceError
from evocase.utils.generic.genericaccessibleobject import lookup_qualified


if TYPE_CHECKING:
    from collections.abc import Sequence

    from evocase.analyses.typesystem import ProperType


_LOGGER = logging.getLogger(__name__)

LOAD_CONST = "LOAD_CONST"
LOAD_FAST = "LOAD_FAST"
STORE_FAST = "STORE_FAST"
LOAD_GLOBAL = "LOAD_GLOBAL"
LOAD_ATTR = "LOAD_ATTR"
STORE_ATTR = "STORE_ATTR"
CALL = "CALL"
BUILD_LIST = "BUILD_LIST"
BUILD_SET = "BUILD_SET"
BUILD_TUPLE = "BUILD_TUPLE"
BUILD_MAP = "BUILD_MAP"
POP_TOP = "POP_TOP"
SETUP_EXPECT = "SETUP_EXPECT"
END_EXPECT = "END_EXPECT"
LABEL = "LABEL"


class Label:
    """A jump target within an instruction stream."""

    _ids = itertools.count()

    def __init__(self) -> None:  # noqa: D107
        self._id = next(Label._ids)

    def __repr__(self) -> str:
        return f"Label({self._id})"


@dataclasses.dataclass(frozen=True)
class Instr:
    """A single instruction.

    The meaning of the argument depends on the operation:

    - ``LOAD_FAST``/``STORE_FAST``: the slot number
    - ``LOAD_GLOBAL``: a ``(module, qualname)`` pair
    - ``LOAD_ATTR``/``STORE_ATTR``: the attribute name
    - ``CALL``: a ``(positional count, keyword names)`` pair
    - ``BUILD_*``: the number of elements, or of pairs for maps
    - ``SETUP_EXPECT``: a ``((module, qualname), label)`` pair
    """

    opname: str
    arg: Any = None

    def __str__(self) -> str:
        if self.arg is None:
            return self.opname
        return f"{self.opname} {self.arg!r}"


class InstructionEmitter:
    """Collects the instructions of one or more statements.

    Slots are allocated consecutively.  The emitter only records the declared
    type of every slot; which position a slot belongs to is kept by the caller.
    """

    def __init__(self) -> None:  # noqa: D107
        self._instructions: list[Instr] = []
        self._slot_types: list[ProperType] = []
        self._slot_positions: list[int] = []

    def emit(self, opname: str, arg: Any = None) -> Instr:
        """Appends an instruction.

        Args:
            opname: The name of the operation
            arg: The argument of the operation

        Returns:
            The appended instruction
        """
        instr = Instr(opname, arg)
        self._instructions.append(instr)
        return instr

    def new_label(self) -> Label:  # noqa: PLR6301
        """Creates a label that is not yet placed.

        Returns:
            A fresh label
        """
        return Label()

    def mark(self, label: Label) -> None:
        """Places the label at the current end of the stream.

        Args:
            label: The label to place
        """
        self.emit(LABEL, label)

    def declare(self, position: int, type_: ProperType) -> int:
        """Allocates a slot for the value defined at the given position.

        Args:
            position: The position of the defining statement
            type_: The declared type of the value

        Returns:
            The number of the allocated slot
        """
        self._slot_types.append(type_)
        self._slot_positions.append(position)
        return len(self._slot_types) - 1

    def slot_type(self, slot: int) -> ProperType:
        """Provides the declared type of a slot.

        Args:
            slot: The slot number

        Returns:
            The type the slot was declared with
        """
        return self._slot_types[slot]

    def slot_position(self, slot: int) -> int:
        """Provides the position a slot was declared for.

        Args:
            slot: The slot number

        Returns:
            The position of the defining statement
        """
        return self._slot_positions[slot]

    @property
    def instructions(self) -> list[Instr]:
        """Provides the emitted instructions.

        Returns:
            A copy of the emitted instructions
        """
        return list(self._instructions)

    def __len__(self) -> int:
        return len(self._instructions)


class _Handler(NamedTuple):
    expected: type[BaseException]
    target: Label
    depth: int


class InstructionInterpreter:
    """Replays an instruction stream against the subject."""

    def __init__(self, context: ex.ExecutionContext | None = None) -> None:
        """Creates a new interpreter.

        Args:
            context: The context that provides the subject modules
        """
        self._context = context if context is not None else ex.ExecutionContext()

    def run(
        self, instructions: Sequence[Instr], frame: dict[int, Any] | None = None
    ) -> dict[int, Any]:
        """Executes the given instructions.

        Args:
            instructions: The instruction stream
            frame: The initial slot values, if any

        Returns:
            The slot values after the execution

        Raises:
            AssertionError: If an expected exception was not raised
        """
        frame = {} if frame is None else frame
        targets = {
            instr.arg: idx for idx, instr in enumerate(instructions) if instr.opname == LABEL
        }
        stack: list[Any] = []
        handlers: list[_Handler] = []
        counter = 0
        while counter < len(instructions):
            instr = instructions[counter]
            counter += 1
            if instr.opname == SETUP_EXPECT:
                (module, qualname), label = instr.arg
                handlers.append(_Handler(self._load_global(module, qualname), label, len(stack)))
                continue
            if instr.opname == END_EXPECT:
                handler = handlers.pop()
                raise AssertionError(f"DID NOT RAISE {handler.expected.__qualname__}")
            try:
                self._step(instr, stack, frame)
            except BaseException as error:
                if not handlers or not isinstance(error, handlers[-1].expected):
                    raise
                handler = handlers.pop()
                _LOGGER.debug("Expected %r raised, continuing at %r", error, handler.target)
                del stack[handler.depth :]
                counter = targets[handler.target]
        return frame

    def _step(  # noqa: C901
        self, instr: Instr, stack: list[Any], frame: dict[int, Any]
    ) -> None:
        match instr.opname:
            case "LOAD_CONST":
                stack.append(instr.arg)
            case "LOAD_FAST":
                if instr.arg not in frame:
                    raise UnboundReferenceError(f"Slot {instr.arg} is not bound")
                stack.append(frame[instr.arg])
            case "STORE_FAST":
                frame[instr.arg] = stack.pop()
            case "LOAD_GLOBAL":
                module, qualname = instr.arg
                stack.append(self._load_global(module, qualname))
            case "LOAD_ATTR":
                stack.append(getattr(stack.pop(), instr.arg))
            case "STORE_ATTR":
                obj = stack.pop()
                setattr(obj, instr.arg, stack.pop())
            case "CALL":
                argc, kwnames = instr.arg
                kwvalues = _pop_many(stack, len(kwnames))
                args = _pop_many(stack, argc)
                function = stack.pop()
                stack.append(function(*args, **dict(zip(kwnames, kwvalues, strict=True))))
            case "BUILD_LIST":
                stack.append(_pop_many(stack, instr.arg))
            case "BUILD_SET":
                stack.append(set(_pop_many(stack, instr.arg)))
            case "BUILD_TUPLE":
                stack.append(tuple(_pop_many(stack, instr.arg)))
            case "BUILD_MAP":
                items = _pop_many(stack, 2 * instr.arg)
                stack.append(dict(zip(items[::2], items[1::2], strict=True)))
            case "POP_TOP":
                stack.pop()
            case "LABEL":
                pass
            case _:
                raise ValueError(f"Unknown instruction {instr}")

    def _load_global(self, module_name: str, qualname: str) -> Any:
        try:
            module = self._context.module_provider.get_module(module_name)
        except ImportError as error:
            raise OperationResolutionError(f"Cannot import {module_name}") from error
        return lookup_qualified(module, qualname)


def _pop_many(stack: list[Any], count: int) -> list[Any]:
    if count == 0:
        return []
    values = stack[-count:]
    del stack[-count:]
    return values

#  This file is part of evocase.
#
#  SPDX-FileCopyrightText: 2019–2025 evocase Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides custom exception types.

Errors raised by the engine derive from ``BaseException`` so that an
``except Exception`` clause inside the subject under test can never swallow them.
Faults raised by the subject itself are not represented here: they are captured
and returned as data by the executing statement.
"""


class StructuralInconsistencyError(BaseException):
    """Raised if the representation of a test case violates one of its invariants.

    This always signals a defect of the engine, never a defect of the subject.
    """


class UnboundReferenceError(StructuralInconsistencyError):
    """Raised if an operand is not bound in the scope it is resolved from."""


class ForwardReferenceError(StructuralInconsistencyError):
    """Raised if a statement would use a value that is defined at or after itself."""


class MissingPositionError(StructuralInconsistencyError):
    """Raised if a reference has no counterpart at the requested position."""


class InfrastructureFault(BaseException):
    """Raised if a statement cannot be invoked against the subject.

    The representation is unusable, e.g., because of wrong arguments or an
    operation that is not accessible.
    """


class InvocationArgumentError(InfrastructureFault):
    """Raised if the arguments of a call do not match the signature of its target."""


class OperationAccessError(InfrastructureFault):
    """Raised if the operation of a statement is not accessible on its receiver."""


class ConstructionFailedException(InfrastructureFault):
    """An exception used when an object of the requested type cannot be constructed."""


class OperationResolutionError(InfrastructureFault):
    """Raised if an operation has no equivalent under another execution context."""

#  This file is part of evocase.
#
#  SPDX-FileCopyrightText: 2019–2025 evocase Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides the statements a test case is made of.

The set of statements is closed; every statement carries a :class:`StatementKind`
tag.  A statement owns the references to its operands, defines exactly one return
value, executes against a scope, describes itself for the renderings, mutates,
clones and compares itself.
"""

from __future__ import annotations

import abc
import ast
import functools
import inspect
import logging
import math

from abc import abstractmethod
from typing import TYPE_CHECKING
from typing import Any
from typing import ClassVar
from typing import Generic
from typing import TypeVar

from ordered_set import OrderedSet

import evocase.assertion.assertion_to_ast as ata
import evocase.configuration as config
import evocase.testcase.statement_to_ast as stmt_to_ast
import evocase.testcase.statement_to_instructions as stmt_to_instr
import evocase.testcase.variablereference as vr
import evocase.utils.generic.genericaccessibleobject as gao
import evocase.utils.namingscope as ns

from evocase.analyses.typesystem import ANY
from evocase.analyses.typesystem import NONE_TYPE
from evocase.analyses.typesystem import Instance
from evocase.analyses.typesystem import TypeInfo
from evocase.analyses.typesystem import is_maybe_subtype
from evocase.analyses.typesystem import resolve_type
from evocase.testcase.operation import OperationDescription
from evocase.testcase.operation import StatementKind
from evocase.utils import randomness
from evocase.utils.exceptions import ConstructionFailedException
from evocase.utils.exceptions import ForwardReferenceError
from evocase.utils.exceptions import InvocationArgumentError
from evocase.utils.exceptions import OperationAccessError
from evocase.utils.exceptions import OperationResolutionError
from evocase.utils.exceptions import StructuralInconsistencyError


if TYPE_CHECKING:
    from collections.abc import Callable
    from collections.abc import Mapping

    import evocase.assertion.assertion as ass
    import evocase.testcase.execution as ex
    import evocase.testcase.instructions as ins
    import evocase.testcase.testcase as tc
    import evocase.testcase.testfactory as tf

    from evocase.analyses.typesystem import ProperType

T = TypeVar("T")

# Draws per literal mutation before giving up on finding a different value.
_MAX_LITERAL_ATTEMPTS = 1000

Memo = dict[vr.VariableReference, vr.VariableReference]


def _values_equal(left: Any, right: Any) -> bool:
    # NaN literals are considered equal to each other.
    return left == right or (left != left and right != right)  # noqa: PLR0124


def _replace_reference(
    ref: vr.Reference, old: vr.VariableReference, new: vr.VariableReference
) -> vr.Reference:
    if ref == old:
        return new
    ref.replace_variable_reference(old, new)
    return ref


def _alpha_exponent_insertion(elements: list[T], supplier: Callable[[], T | None]) -> bool:
    pos = randomness.next_int(0, len(elements) + 1)
    alpha = 0.5
    exponent = 1
    changed = False
    while randomness.next_float() <= pow(alpha, exponent):
        exponent += 1
        if (element := supplier()) is None:
            break
        elements.insert(pos, element)
        changed = True
    return changed


class Statement(abc.ABC):  # noqa: PLR0904
    """One step of a test case: it defines at most one value."""

    _logger = logging.getLogger(__name__)

    kind: ClassVar[StatementKind]

    def __init__(self, test_case: tc.TestCase, return_type: ProperType) -> None:
        """Creates a statement that is not yet placed.

        Args:
            test_case: The owning test case
            return_type: The declared type of the value defined by the statement
        """
        self._test_case = test_case
        self._assertions: OrderedSet[ass.Assertion] = OrderedSet()

        # The variable defined by this statement.  It is not named 'return_value'
        # because unittest.mock reserves that name.
        self.ret_val = vr.VariableReference(test_case, return_type)

    @property
    def test_case(self) -> tc.TestCase:
        """The test case that owns this statement.

        Returns:
            The containing test case
        """
        return self._test_case

    @property
    def position(self) -> int:
        """Provides the position of this statement in its test case.

        Returns:
            The position, or -1 if the statement is not part of a test case
        """
        return self.ret_val.position

    def get_position(self) -> int:
        """Where this statement sits in its test case.

        Returns:
            The index of this statement
        """
        return self.ret_val.position

    def is_assignment_statement(self) -> bool:
        """Does this statement store into another reference?

        Returns:
            Whether this is an assignment
        """
        return self.kind is StatementKind.ASSIGNMENT

    def accessible_object(self) -> gao.GenericAccessibleObject | None:
        """The operation this statement invokes, if any.

        Returns:
            The accessible used in the statement, if any
        """
        return None

    # Operands

    @abstractmethod
    def operands(self) -> list[vr.Reference]:
        """Provides the references this statement reads or writes, in a fixed order.

        Returns:
            The operand references  # noqa: DAR202
        """

    def get_variable_references(self) -> set[vr.VariableReference]:
        """Get all variables that are used in this statement, including its return value.

        Returns:
            A set of variables that are used in this statement
        """
        references = {self.ret_val}
        references.update(ref.get_variable_reference() for ref in self.operands())
        return references

    def references(self, var: vr.VariableReference) -> bool:
        """Does this statement read the given variable?

        Args:
            var: the given variable

        Returns:
            Whether the variable is among the inputs
        """
        return var in self.get_variable_references()

    def replace(self, old: vr.VariableReference, new: vr.VariableReference) -> None:
        """Replace every use of the old variable with the new variable.

        The statement is left unchanged if the replacement fails.

        Args:
            old: the old variable
            new: the new variable

        Raises:
            StructuralInconsistencyError: If old is the value defined by this statement
            ForwardReferenceError: If new is not defined before this statement
        """
        if old == self.ret_val:
            raise StructuralInconsistencyError(
                f"Cannot replace {old!r}, it is defined by the statement itself"
            )
        if not self.references(old):
            return
        if self.position >= 0 and new.position >= self.position:
            raise ForwardReferenceError(
                f"Statement at position {self.position} cannot use {new!r}"
            )
        self._replace_operands(old, new)

    @abstractmethod
    def _replace_operands(self, old: vr.VariableReference, new: vr.VariableReference) -> None:
        """Rewrites all operands that use old.

        Args:
            old: the old variable
            new: the new variable
        """

    # Execution

    @abstractmethod
    def execute(self, scope: ex.Scope) -> BaseException | None:
        """Executes this statement against the given scope.

        Operands are resolved first, then the operation.  An exception raised by
        the subject is returned, never raised.  On success, the return value is
        bound in the scope.

        Args:
            scope: The values bound by the previous statements

        Returns:
            The exception raised by the subject, if any  # noqa: DAR202

        Raises:
            UnboundReferenceError: If an operand has no value  # noqa: DAR402
            InfrastructureFault: If the operation cannot be invoked  # noqa: DAR402
        """

    def get_declared_exceptions(self) -> frozenset[str]:
        """Provides the names of the exceptions the operation declares to raise.

        Returns:
            The declared exception names
        """
        if (accessible := self.accessible_object()) is None:
            return frozenset()
        return accessible.raised_exceptions

    def is_declared_exception(self, exception: BaseException) -> bool:
        """Is the given exception declared by the invoked operation?

        Args:
            exception: The exception raised by the subject

        Returns:
            Whether the exception is declared
        """
        accessible = self.accessible_object()
        return accessible is not None and accessible.is_declared(exception)

    def change_execution_context(self, context: ex.ExecutionContext) -> None:
        """Rebinds this statement to the equivalent subject in the given context.

        Args:
            context: The context to rebind to
        """
        lookup = functools.partial(gao.find_class, context)
        self.ret_val.type = resolve_type(self.ret_val.type, lookup)

    # Rendering

    @abstractmethod
    def describe(self) -> OperationDescription:
        """Describes what this statement does, for the renderings.

        Returns:
            The description of this statement  # noqa: DAR202
        """

    def get_code(
        self,
        pending_fault: type[BaseException] | BaseException | None = None,
        *,
        variable_names: ns.AbstractNamingScope | None = None,
        module_names: ns.AbstractNamingScope | None = None,
    ) -> str:
        """Renders this statement as Python source.

        Args:
            pending_fault: The fault the statement is expected to raise, if any
            variable_names: The naming scope for the variables
            module_names: The naming scope for the module aliases

        Returns:
            The source code of this statement
        """
        visitor = stmt_to_ast.StatementToAstVisitor(
            ns.NamingScope("module") if module_names is None else module_names,
            ns.NamingScope() if variable_names is None else variable_names,
        )
        node = visitor.visit(self.describe(), pending_fault)
        return ast.unparse(ast.fix_missing_locations(node))

    def get_instructions(
        self,
        emitter: ins.InstructionEmitter,
        slots: dict[int, int],
        pending_fault: type[BaseException] | BaseException | None = None,
    ) -> None:
        """Emits the instructions of this statement.

        Args:
            emitter: The emitter to write into
            slots: Maps positions to the slots holding their values; extended by
                the slot of the return value
            pending_fault: The fault the statement is expected to raise, if any
        """
        stmt_to_instr.StatementToInstructionsVisitor(emitter, slots).visit(
            self.describe(), pending_fault
        )

    def get_assertion_code(
        self,
        *,
        variable_names: ns.AbstractNamingScope | None = None,
        module_names: ns.AbstractNamingScope | None = None,
    ) -> str:
        """Renders the assertions attached to this statement.

        An exception assertion is rendered by ``get_code`` as a protective block
        around the statement itself, hence it contributes nothing here.

        Args:
            variable_names: The naming scope for the variables
            module_names: The naming scope for the module aliases

        Returns:
            The source code of the assertions, one per line
        """
        visitor = ata.PyTestAssertionToAstVisitor(
            ns.NamingScope() if variable_names is None else variable_names,
            ns.NamingScope("module") if module_names is None else module_names,
            set(),
            ast.Pass(),
        )
        for assertion in self._assertions:
            assertion.accept(visitor)
        return "\n".join(
            ast.unparse(ast.fix_missing_locations(node)) for node in visitor.nodes[1:]
        )

    # Validity

    def get_return_type(self) -> ProperType:
        """Provides the declared type of the value defined by this statement.

        Returns:
            The return type
        """
        return self.ret_val.type

    def is_valid(self) -> bool:
        """Checks the positional invariants of this statement.

        The statement must be stored at the position of its return value and every
        operand must use a value defined before that position.

        Returns:
            Whether the invariants hold
        """
        position = self.position
        if not self._test_case.has_statement(position):
            return False
        if self._test_case.get_statement(position) is not self:
            return False
        for ref in self.operands():
            var = ref.get_variable_reference()
            if not 0 <= var.position < position:
                return False
            if self._test_case.get_statement(var.position).ret_val != var:
                return False
        return True

    # Mutation

    @abstractmethod
    def mutate(self, test_case: tc.TestCase, factory: tf.MutationFactory) -> bool:
        """Mutate this statement.

        Args:
            test_case: The test case that contains the statement
            factory: Supplies replacement operands and operations

        Returns:
            Whether anything changed  # noqa: DAR202
        """

    def _is_usable_replacement(
        self,
        current: vr.Reference | None,
        candidate: vr.VariableReference | None,
        type_: ProperType,
    ) -> bool:
        if candidate is None or candidate == current:
            return False
        if candidate.position >= self.position:
            raise ForwardReferenceError(
                f"Replacement {candidate!r} is not defined before position {self.position}"
            )
        return is_maybe_subtype(candidate.type, type_)

    # Copying

    def clone(self, test_case: tc.TestCase | None = None) -> Statement:
        """Copies this statement into another test case.

        Without a test case, the clone uses the same operands as this statement.
        Otherwise, the operands are looked up at the same positions in the given
        test case.

        Args:
            test_case: the test case in which the clone will be used, if it differs

        Returns:
            A deep clone of this statement
        """
        if test_case is not None:
            return self.copy(test_case)
        memo = vr.IdentityMemo()
        clone = self._clone(self._test_case, memo)
        clone.ret_val.position = self.position
        memo[self.ret_val] = clone.ret_val
        clone.assertions = self._clone_assertions(memo)
        return clone

    def copy(self, test_case: tc.TestCase, offset: int = 0) -> Statement:
        """Provides a deep copy of this statement for another test case.

        Args:
            test_case: the test case in which the copy will be used
            offset: the shift of the positions in the new test case

        Returns:
            The copy, whose operands are taken from the given test case

        Raises:
            MissingPositionError: If an operand has no counterpart  # noqa: DAR402
        """
        memo = vr.ReferenceMemo(test_case, offset)
        copy = self._clone(test_case, memo)
        if self.position >= 0:
            copy.ret_val.position = self.position + offset
        memo[self.ret_val] = copy.ret_val
        copy.assertions = self._clone_assertions(memo)
        return copy

    @abstractmethod
    def _clone(self, test_case: tc.TestCase, memo: Memo) -> Statement:
        """Creates the copy of this statement without its assertions.

        Args:
            test_case: the test case of the copy
            memo: maps the variables of this statement to those of the copy

        Returns:
            The copy  # noqa: DAR202
        """

    def copy_assertions(self, test_case: tc.TestCase, offset: int = 0) -> OrderedSet[ass.Assertion]:
        """Returns a copy of the assertions of this statement for another test case.

        Args:
            test_case: The test case that holds the counterparts of the variables
            offset: The shift of the positions in the other test case

        Returns:
            A set of assertions
        """
        return self._clone_assertions(vr.ReferenceMemo(test_case, offset))

    def _clone_assertions(
        self, memo: Mapping[vr.VariableReference, vr.VariableReference]
    ) -> OrderedSet[ass.Assertion]:
        copy: OrderedSet[ass.Assertion] = OrderedSet()
        for assertion in self._assertions:
            copy.add(assertion.clone(memo))
        return copy

    # Assertions

    def add_assertion(self, assertion: ass.Assertion) -> None:
        """Attaches a postcondition to this statement.

        Args:
            assertion: The postcondition
        """
        self._assertions.add(assertion)

    def remove_assertion(self, assertion: ass.Assertion) -> None:
        """Removes the given assertion, if it is attached to this statement.

        Args:
            assertion: The assertion to remove
        """
        self._assertions.discard(assertion)

    def remove_assertions(self) -> None:
        """Removes all assertions of this statement."""
        self._assertions = OrderedSet()

    def has_assertions(self) -> bool:
        """Are there assertions attached to this statement?

        Returns:
            Whether there are assertions
        """
        return len(self._assertions) > 0

    @property
    def assertions(self) -> OrderedSet[ass.Assertion]:
        """The postconditions attached to this statement.

        Each is expected to hold right after the statement ran.

        Returns:
            The postconditions, in insertion order
        """
        return self._assertions

    @assertions.setter
    def assertions(self, assertions: OrderedSet[ass.Assertion]) -> None:
        self._assertions = assertions

    # Comparison

    def _payload(self) -> Any:
        """Provides what distinguishes this statement besides its references.

        Returns:
            The operation, value or both
        """
        return None

    def _payload_hash(self) -> int:
        return hash(self._payload())

    def same(self, other: Any) -> bool:
        """Checks equivalence regardless of the owning test case.

        Both statements must be of the same kind, invoke the same operation or hold
        the same value, and their references must have the same positions and types.

        Args:
            other: The statement to compare with

        Returns:
            Whether both statements are equivalent
        """
        if self is other:
            return True
        if type(self) is not type(other):
            return False
        if not self.ret_val.same(other.ret_val):
            return False
        if not _values_equal(self._payload(), other._payload()):
            return False
        mine = self.operands()
        theirs = other.operands()
        return len(mine) == len(theirs) and all(
            left.same(right) for left, right in zip(mine, theirs, strict=True)
        )

    def structural_hash(self) -> int:
        """Provides a hash that is consistent with ``same``.

        Returns:
            A hash.
        """
        return hash((
            self.kind,
            self.ret_val.structural_hash(),
            self._payload_hash(),
            tuple(ref.structural_hash() for ref in self.operands()),
        ))

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if type(self) is not type(other):
            return False
        assert isinstance(other, Statement)
        return (
            self._test_case is other._test_case
            and self.ret_val == other.ret_val
            and _values_equal(self._payload(), other._payload())
            and self.operands() == other.operands()
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.ret_val))


class ParametrizedStatement(Statement, abc.ABC):
    """Invokes an operation with arguments.

    Constructors, methods and functions share this base.
    """

    def __init__(
        self,
        test_case: tc.TestCase,
        generic_callable: gao.GenericCallableAccessibleObject,
        args: dict[str, vr.Reference] | None = None,
    ):
        """Binds the operation and its arguments.

        Args:
            test_case: The owning test case
            generic_callable: The invoked operation
            args: The argument for each parameter name
        """
        super().__init__(test_case, generic_callable.generated_type())
        self._generic_callable = generic_callable
        self._args = args or {}

    @property
    def args(self) -> dict[str, vr.Reference]:
        """The argument passed for each parameter.

        Returns:
            The arguments, keyed by parameter name
        """
        return self._args

    @args.setter
    def args(self, args: dict[str, vr.Reference]):
        self._args = args

    @property
    def raised_exceptions(self) -> frozenset[str]:
        """The exception names the invoked operation declares.

        Returns:
            The declared exception names
        """
        return self._generic_callable.raised_exceptions

    def accessible_object(self) -> gao.GenericCallableAccessibleObject:  # noqa: D102
        return self._generic_callable

    def _argument_names(self) -> list[str]:
        """Provides the names of the passed arguments in signature order.

        Returns:
            The argument names, unknown names last
        """
        parameters = self._generic_callable.inferred_signature.signature.parameters
        names = [name for name in parameters if name in self._args]
        names.extend(name for name in self._args if name not in parameters)
        return names

    def operands(self) -> list[vr.Reference]:  # noqa: D102
        return [self._args[name] for name in self._argument_names()]

    def _replace_operands(  # noqa: D102
        self, old: vr.VariableReference, new: vr.VariableReference
    ) -> None:
        for name, ref in self._args.items():
            self._args[name] = _replace_reference(ref, old, new)

    def _remap_args(self, memo: Memo) -> dict[str, vr.Reference]:
        return {name: ref.remap(memo) for name, ref in self._args.items()}

    def _split_arguments(
        self,
    ) -> tuple[tuple[vr.Reference, ...], tuple[tuple[str, vr.Reference], ...]]:
        """Splits the arguments into positional and keyword arguments.

        An argument is passed by keyword if its parameter is keyword only, or if a
        parameter to its left was not passed.

        Returns:
            The positional and the keyword arguments
        """
        signature = self._generic_callable.inferred_signature.signature
        args: list[vr.Reference] = []
        kwargs: list[tuple[str, vr.Reference]] = []
        skipped = False
        for name, param in signature.parameters.items():
            if name not in self._args:
                skipped = True
                continue
            ref = self._args[name]
            if param.kind == inspect.Parameter.POSITIONAL_ONLY or (
                param.kind == inspect.Parameter.POSITIONAL_OR_KEYWORD and not skipped
            ):
                args.append(ref)
            else:
                kwargs.append((name, ref))
        kwargs.extend(
            (name, ref) for name, ref in self._args.items() if name not in signature.parameters
        )
        return tuple(args), tuple(kwargs)

    def describe(self) -> OperationDescription:  # noqa: D102
        args, kwargs = self._split_arguments()
        return OperationDescription(
            kind=self.kind,
            ret_val=self.ret_val,
            operation=self._generic_callable,
            receiver=self._receiver(),
            args=args,
            kwargs=kwargs,
        )

    def _receiver(self) -> vr.Reference | None:
        return None

    @abstractmethod
    def _resolve_target(self, receiver: Any) -> Callable:
        """Looks up the callable that is invoked.

        Args:
            receiver: The value of the receiver, if any

        Returns:
            The callable  # noqa: DAR202
        """

    def execute(self, scope: ex.Scope) -> BaseException | None:  # noqa: D102
        description = self.describe()
        try:
            receiver = (
                scope.resolve(description.receiver)
                if description.receiver is not None
                else None
            )
            args = [scope.resolve(ref) for ref in description.args]
            kwargs = {name: scope.resolve(ref) for name, ref in description.kwargs}
        except Exception as exception:  # noqa: BLE001
            return exception
        function = self._resolve_target(receiver)
        try:
            self._generic_callable.inferred_signature.signature.bind(*args, **kwargs)
        except TypeError as error:
            raise InvocationArgumentError(
                f"Arguments do not match {self._generic_callable}: {error}"
            ) from error
        try:
            result = function(*args, **kwargs)
        except Exception as exception:  # noqa: BLE001
            return exception
        scope.set(self.ret_val, result)
        return None

    def change_execution_context(self, context: ex.ExecutionContext) -> None:  # noqa: D102
        self._generic_callable = self._generic_callable.resolve(context)
        super().change_execution_context(context)

    def mutate(  # noqa: D102
        self, test_case: tc.TestCase, factory: tf.MutationFactory
    ) -> bool:
        changed = False
        if (
            randomness.next_float()
            < config.configuration.search_algorithm.change_parameter_probability
        ):
            mutable_param_count = self._mutable_argument_count()
            if mutable_param_count > 0:
                p_per_param = 1.0 / mutable_param_count
                changed |= self._mutate_special_parameters(test_case, factory, p_per_param)
                changed |= self._mutate_parameters(test_case, factory, p_per_param)
        if randomness.next_float() < config.configuration.search_algorithm.change_call_probability:
            changed |= self._mutate_operation(test_case, factory)
        return changed

    def _mutable_argument_count(self) -> int:
        """Counts the arguments a mutation may replace.

        Returns:
            The number of replaceable arguments
        """
        return len(self._generic_callable.inferred_signature.parameters)

    def _mutate_special_parameters(
        self,
        test_case: tc.TestCase,
        factory: tf.MutationFactory,
        p_per_param: float,
    ) -> bool:
        """Hook for subclasses that own further inputs, e.g., a callee.

        Args:
            test_case: The test case that contains the statement
            factory: Supplies the replacements
            p_per_param: The chance for each input to be replaced

        Returns:
            Whether an input was replaced
        """
        return False

    def _mutate_parameters(
        self,
        test_case: tc.TestCase,
        factory: tf.MutationFactory,
        p_per_param: float,
    ) -> bool:
        changed = False
        for param_name, param_type in self._generic_callable.inferred_signature.parameters.items():
            if randomness.next_float() < p_per_param:
                current = self._args.get(param_name)
                replacement = factory.get_replacement(
                    test_case, self, current, param_type, self.position
                )
                if self._is_usable_replacement(current, replacement, param_type):
                    assert replacement is not None
                    self._logger.debug("Replacing argument %s with %r", param_name, replacement)
                    self._args[param_name] = replacement
                    changed = True
        return changed

    def _mutate_operation(self, test_case: tc.TestCase, factory: tf.MutationFactory) -> bool:
        alternative = factory.get_alternative_operation(test_case, self)
        if alternative is None or alternative == self._generic_callable:
            return False
        if not self._accepts_operation(alternative):
            return False
        self._logger.debug("Replacing %r with %r", self._generic_callable, alternative)
        self._generic_callable = alternative
        return True

    def _accepts_operation(self, alternative: gao.GenericCallableAccessibleObject) -> bool:
        """Can the invoked operation be swapped for the alternative?

        Args:
            alternative: The candidate operation

        Returns:
            Whether the swap keeps the statement well typed
        """
        return self._generic_callable.is_signature_compatible(alternative) and is_maybe_subtype(
            alternative.generated_type(), self.ret_val.type
        )

    def _payload(self) -> Any:
        return self._generic_callable, tuple(self._argument_names())


class ConstructorStatement(ParametrizedStatement):
    """Instantiates a class."""

    kind = StatementKind.CONSTRUCTOR

    def accessible_object(self) -> gao.GenericConstructor:
        """The used constructor.

        Returns:
            The used constructor
        """
        assert isinstance(self._generic_callable, gao.GenericConstructor)
        return self._generic_callable

    def _resolve_target(self, receiver: Any) -> Callable:
        owner = self._generic_callable.owner
        assert owner is not None
        klass = owner.raw_type
        if not isinstance(klass, type):
            raise ConstructionFailedException(f"{owner.full_name} is not a class")
        if inspect.isabstract(klass):
            raise ConstructionFailedException(f"Cannot instantiate abstract {owner.full_name}")
        return klass

    def _clone(  # noqa: D102
        self, test_case: tc.TestCase, memo: Memo
    ) -> ConstructorStatement:
        return ConstructorStatement(test_case, self.accessible_object(), self._remap_args(memo))

    def __repr__(self) -> str:
        return f"ConstructorStatement({self._generic_callable}, args={self._args})"

    def __str__(self) -> str:
        return (
            f"{self._generic_callable}(args={self._args}) -> "
            f"{self._generic_callable.generated_type()}"
        )


class MethodStatement(ParametrizedStatement):
    """Invokes a method on a callee value."""

    kind = StatementKind.METHOD

    def __init__(
        self,
        test_case: tc.TestCase,
        generic_callable: gao.GenericMethod,
        callee: vr.Reference,
        args: dict[str, vr.Reference] | None = None,
    ):
        """Binds the method, its callee and its arguments.

        Args:
            test_case: The owning test case
            generic_callable: The invoked method
            callee: The value the method is invoked on
            args: the arguments
        """
        super().__init__(test_case, generic_callable, args)
        self._callee = callee

    def accessible_object(self) -> gao.GenericMethod:
        """The used method.

        Returns:
            The used method
        """
        assert isinstance(self._generic_callable, gao.GenericMethod)
        return self._generic_callable

    @property
    def callee(self) -> vr.Reference:
        """The value the method is invoked on.

        Returns:
            The callee
        """
        return self._callee

    @callee.setter
    def callee(self, new_callee: vr.Reference) -> None:
        self._callee = new_callee

    def operands(self) -> list[vr.Reference]:  # noqa: D102
        return [self._callee, *super().operands()]

    def _replace_operands(  # noqa: D102
        self, old: vr.VariableReference, new: vr.VariableReference
    ) -> None:
        super()._replace_operands(old, new)
        self._callee = _replace_reference(self._callee, old, new)

    def _receiver(self) -> vr.Reference | None:
        return self._callee

    def _resolve_target(self, receiver: Any) -> Callable:
        name = self.accessible_object().method_name
        try:
            static = inspect.getattr_static(receiver, name)
        except AttributeError as error:
            raise OperationAccessError(
                f"{type(receiver).__qualname__} has no method {name}"
            ) from error
        if not (callable(static) or isinstance(static, staticmethod | classmethod)):
            raise OperationAccessError(f"{type(receiver).__qualname__}.{name} is not callable")
        return getattr(receiver, name)

    def _mutable_argument_count(self) -> int:
        # The callee itself can also be mutated.
        return super()._mutable_argument_count() + 1

    def _mutate_special_parameters(
        self,
        test_case: tc.TestCase,
        factory: tf.MutationFactory,
        p_per_param: float,
    ) -> bool:
        if randomness.next_float() >= p_per_param:
            return False
        owner = self._generic_callable.owner
        callee_type = Instance(owner) if owner is not None else self._callee.type
        replacement = factory.get_replacement(
            test_case, self, self._callee, callee_type, self.position
        )
        if not self._is_usable_replacement(self._callee, replacement, callee_type):
            return False
        assert replacement is not None
        self._logger.debug("Replacing callee with %r", replacement)
        self._callee = replacement
        return True

    def _accepts_operation(self, alternative: gao.GenericCallableAccessibleObject) -> bool:
        if not super()._accepts_operation(alternative):
            return False
        owner = alternative.owner
        return owner is not None and is_maybe_subtype(self._callee.type, Instance(owner))

    def _clone(  # noqa: D102
        self, test_case: tc.TestCase, memo: Memo
    ) -> MethodStatement:
        return MethodStatement(
            test_case,
            self.accessible_object(),
            self._callee.remap(memo),
            self._remap_args(memo),
        )

    def __repr__(self) -> str:
        return (
            f"MethodStatement({self._generic_callable}, {self._callee.type}, args={self._args})"
        )

    def __str__(self) -> str:
        return (
            f"{self._generic_callable}(args={self._args}) -> "
            f"{self._generic_callable.generated_type()}"
        )


class FunctionStatement(ParametrizedStatement):
    """Invokes a module-level function."""

    kind = StatementKind.FUNCTION

    def accessible_object(self) -> gao.GenericFunction:
        """The used function.

        Returns:
            The used function
        """
        assert isinstance(self._generic_callable, gao.GenericFunction)
        return self._generic_callable

    def _resolve_target(self, receiver: Any) -> Callable:
        return self._generic_callable.callable

    def _clone(  # noqa: D102
        self, test_case: tc.TestCase, memo: Memo
    ) -> FunctionStatement:
        return FunctionStatement(test_case, self.accessible_object(), self._remap_args(memo))

    def __repr__(self) -> str:
        return f"FunctionStatement({self._generic_callable}, args={self._args})"

    def __str__(self) -> str:
        return (
            f"{self._generic_callable}(args={self._args}) -> "
            f"{self._generic_callable.generated_type()}"
        )


class FieldStatement(Statement):
    """A statement which reads a field of an object.

    For example:
        int_0 = foo_0.baz
    """

    kind = StatementKind.FIELD

    def __init__(
        self,
        test_case: tc.TestCase,
        field: gao.GenericField,
        source: vr.Reference,
    ):
        """Reads a field of a source value.

        Args:
            test_case: The test case to which this statement belongs
            field: The field that is read
            source: The reference whose value carries the field
        """
        super().__init__(test_case, field.generated_type())
        self._field = field
        self._source = source

    @property
    def source(self) -> vr.Reference:
        """Provides the reference whose field is read.

        Returns:
            The source reference
        """
        return self._source

    @source.setter
    def source(self, new_source: vr.Reference) -> None:
        self._source = new_source

    @property
    def field(self) -> gao.GenericField:
        """The used field.

        Returns:
            The used field
        """
        return self._field

    def accessible_object(self) -> gao.GenericField:  # noqa: D102
        return self._field

    def operands(self) -> list[vr.Reference]:  # noqa: D102
        return [self._source]

    def _replace_operands(  # noqa: D102
        self, old: vr.VariableReference, new: vr.VariableReference
    ) -> None:
        self._source = _replace_reference(self._source, old, new)

    def describe(self) -> OperationDescription:  # noqa: D102
        return OperationDescription(
            kind=self.kind,
            ret_val=self.ret_val,
            operation=self._field,
            receiver=self._source,
        )

    def execute(self, scope: ex.Scope) -> BaseException | None:  # noqa: D102
        try:
            obj = scope.resolve(self._source)
        except Exception as exception:  # noqa: BLE001
            return exception
        try:
            inspect.getattr_static(obj, self._field.field)
        except AttributeError as error:
            raise OperationAccessError(
                f"{type(obj).__qualname__} has no field {self._field.field}"
            ) from error
        try:
            value = getattr(obj, self._field.field)
        except Exception as exception:  # noqa: BLE001
            return exception
        scope.set(self.ret_val, value)
        return None

    def change_execution_context(self, context: ex.ExecutionContext) -> None:  # noqa: D102
        self._field = self._field.resolve(context)
        super().change_execution_context(context)

    def mutate(  # noqa: D102
        self, test_case: tc.TestCase, factory: tf.MutationFactory
    ) -> bool:
        if (
            randomness.next_float()
            >= config.configuration.search_algorithm.change_parameter_probability
        ):
            return False
        source_type = self._source.type
        replacement = factory.get_replacement(
            test_case, self, self._source, source_type, self.position
        )
        if not self._is_usable_replacement(self._source, replacement, source_type):
            return False
        assert replacement is not None
        self._source = replacement
        return True

    def _clone(  # noqa: D102
        self, test_case: tc.TestCase, memo: Memo
    ) -> FieldStatement:
        return FieldStatement(test_case, self._field, self._source.remap(memo))

    def _payload(self) -> Any:
        return self._field

    def __repr__(self) -> str:
        return f"FieldStatement({self._field}, {self._source!r})"


class AssignmentStatement(Statement):
    """Writes a value to a variable or a field.

    For example:
        foo_0.baz = int_0
        ^^^^^^^^^   ^^^^^
        lhs         rhs

    The statement itself defines no value; its return value is of type None.
    """

    kind = StatementKind.ASSIGNMENT

    def __init__(
        self,
        test_case: tc.TestCase,
        lhs: vr.Reference,
        rhs: vr.Reference,
    ):
        """Binds the target and the written value.

        Args:
            test_case: The test case to which this statement belongs
            lhs: The reference that is written
            rhs: The reference whose value is written
        """
        super().__init__(test_case, NONE_TYPE)
        self._lhs = lhs
        self._rhs = rhs

    @property
    def lhs(self) -> vr.Reference:
        """The reference that is written.

        Returns:
            The reference that is used on the left hand side
        """
        return self._lhs

    @property
    def rhs(self) -> vr.Reference:
        """The reference whose value is written.

        Returns:
            The reference that is used on the right hand side
        """
        return self._rhs

    def operands(self) -> list[vr.Reference]:  # noqa: D102
        return [self._lhs, self._rhs]

    def _replace_operands(  # noqa: D102
        self, old: vr.VariableReference, new: vr.VariableReference
    ) -> None:
        self._lhs = _replace_reference(self._lhs, old, new)
        self._rhs = _replace_reference(self._rhs, old, new)

    def describe(self) -> OperationDescription:  # noqa: D102
        return OperationDescription(
            kind=self.kind,
            ret_val=self.ret_val,
            receiver=self._lhs,
            args=(self._rhs,),
        )

    def execute(self, scope: ex.Scope) -> BaseException | None:  # noqa: D102
        try:
            value = scope.resolve(self._rhs)
            if isinstance(self._lhs, vr.FieldReference):
                setattr(scope.resolve(self._lhs.source), self._lhs.field.field, value)
            else:
                scope.set(self._lhs.get_variable_reference(), value)
        except Exception as exception:  # noqa: BLE001
            return exception
        scope.set(self.ret_val, None)
        return None

    def mutate(  # noqa: D102
        self, test_case: tc.TestCase, factory: tf.MutationFactory
    ) -> bool:
        if (
            randomness.next_float()
            >= config.configuration.search_algorithm.change_parameter_probability
        ):
            return False
        if isinstance(self._lhs, vr.FieldReference) and randomness.next_bool():
            source = self._lhs.source
            owner = self._lhs.field.owner
            source_type = Instance(owner) if owner is not None else source.type
            replacement = factory.get_replacement(
                test_case, self, source, source_type, self.position
            )
            if not self._is_usable_replacement(source, replacement, source_type):
                return False
            assert replacement is not None
            self._lhs = vr.FieldReference(replacement, self._lhs.field)
            return True
        replacement = factory.get_replacement(
            test_case, self, self._rhs, self._lhs.type, self.position
        )
        if not self._is_usable_replacement(self._rhs, replacement, self._lhs.type):
            return False
        assert replacement is not None
        self._rhs = replacement
        return True

    def _clone(  # noqa: D102
        self, test_case: tc.TestCase, memo: Memo
    ) -> AssignmentStatement:
        return AssignmentStatement(test_case, self._lhs.remap(memo), self._rhs.remap(memo))

    def __repr__(self) -> str:
        return f"AssignmentStatement({self._lhs!r}, {self._rhs!r})"


class CollectionStatement(Statement, Generic[T]):
    """Builds a collection literal from earlier values."""

    def __init__(
        self,
        test_case: tc.TestCase,
        type_: ProperType,
        elements: list[T],
    ):
        """Binds the collection type and its elements.

        Args:
            test_case: The owning test case
            type_: The type of the collection
            elements: The element values, in order
        """
        super().__init__(test_case, type_)
        self._elements = elements

    @property
    def elements(self) -> list[T]:
        """The element values, in order.

        Returns:
            A list of elements
        """
        return self._elements

    @elements.setter
    def elements(self, elements: list[T]) -> None:
        self._elements = elements

    def execute(self, scope: ex.Scope) -> BaseException | None:  # noqa: D102
        try:
            values = [scope.resolve(ref) for ref in self.describe().args]
            result = self._build(values)
        except Exception as exception:  # noqa: BLE001
            return exception
        scope.set(self.ret_val, result)
        return None

    @abstractmethod
    def _build(self, values: list[Any]) -> Any:
        """Builds the collection from the resolved operands.

        Args:
            values: The values of the operands, in description order

        Returns:
            The collection  # noqa: DAR202
        """

    def mutate(  # noqa: D102
        self, test_case: tc.TestCase, factory: tf.MutationFactory
    ) -> bool:
        changed = False
        if (
            randomness.next_float() < config.configuration.search_algorithm.test_delete_probability
            and len(self._elements) > 0
        ):
            changed |= self._random_deletion()

        if (
            randomness.next_float() < config.configuration.search_algorithm.test_change_probability
            and len(self._elements) > 0
        ):
            changed |= self._random_replacement(test_case, factory)

        if randomness.next_float() < config.configuration.search_algorithm.test_insert_probability:
            changed |= self._random_insertion(test_case, factory)
        return changed

    def _random_deletion(self) -> bool:
        p_per_element = 1.0 / len(self._elements)
        previous_length = len(self._elements)
        self._elements = [
            element for element in self._elements if randomness.next_float() >= p_per_element
        ]
        return previous_length != len(self._elements)

    def _random_replacement(self, test_case: tc.TestCase, factory: tf.MutationFactory) -> bool:
        p_per_element = 1.0 / len(self._elements)
        changed = False
        for i, elem in enumerate(self._elements):
            if randomness.next_float() < p_per_element:
                replacement = self._replacement_supplier(test_case, factory, elem)
                self._elements[i] = replacement
                changed |= replacement != elem
        return changed

    def _random_insertion(self, test_case: tc.TestCase, factory: tf.MutationFactory) -> bool:
        return _alpha_exponent_insertion(
            self._elements, functools.partial(self._insertion_supplier, test_case, factory)
        )

    def _supply(
        self,
        test_case: tc.TestCase,
        factory: tf.MutationFactory,
        current: vr.Reference | None,
    ) -> vr.VariableReference | None:
        candidate = factory.get_replacement(test_case, self, current, ANY, self.position)
        if not self._is_usable_replacement(current, candidate, ANY):
            return None
        return candidate

    @abstractmethod
    def _replacement_supplier(
        self, test_case: tc.TestCase, factory: tf.MutationFactory, element: T
    ) -> T:
        """Picks a replacement for one element.

        The element itself is a valid pick.

        Args:
            test_case: The test case that contains the statement
            factory: Supplies the replacements
            element: The current element

        Returns:
            A fitting replacement.
        """

    @abstractmethod
    def _insertion_supplier(self, test_case: tc.TestCase, factory: tf.MutationFactory) -> T | None:
        """Picks a value to insert into the collection.

        Args:
            test_case: The test case that contains the statement
            factory: Supplies the new elements

        Returns:
            The new element, or None if no earlier value fits
        """


class NonDictCollection(CollectionStatement[vr.Reference], abc.ABC):
    """The abstract base for collections of plain elements."""

    def operands(self) -> list[vr.Reference]:  # noqa: D102
        return list(self._elements)

    def _replace_operands(  # noqa: D102
        self, old: vr.VariableReference, new: vr.VariableReference
    ) -> None:
        self._elements = [_replace_reference(elem, old, new) for elem in self._elements]

    def describe(self) -> OperationDescription:  # noqa: D102
        return OperationDescription(
            kind=self.kind, ret_val=self.ret_val, args=tuple(self._elements)
        )

    def _replacement_supplier(
        self, test_case: tc.TestCase, factory: tf.MutationFactory, element: vr.Reference
    ) -> vr.Reference:
        replacement = self._supply(test_case, factory, element)
        return element if replacement is None else replacement

    def _insertion_supplier(
        self, test_case: tc.TestCase, factory: tf.MutationFactory
    ) -> vr.Reference | None:
        return self._supply(test_case, factory, None)

    def _remap_elements(self, memo: Memo) -> list[vr.Reference]:
        return [elem.remap(memo) for elem in self._elements]


class ListStatement(NonDictCollection):
    """A statement that builds a list."""

    kind = StatementKind.LIST

    def _build(self, values: list[Any]) -> Any:
        return list(values)

    def _clone(  # noqa: D102
        self, test_case: tc.TestCase, memo: Memo
    ) -> ListStatement:
        return ListStatement(test_case, self.ret_val.type, self._remap_elements(memo))

    def __repr__(self) -> str:
        return f"ListStatement({self.ret_val.type}, {self._elements!r})"


class SetStatement(NonDictCollection):
    """A statement that builds a set."""

    kind = StatementKind.SET

    def _build(self, values: list[Any]) -> Any:
        return set(values)

    def _clone(  # noqa: D102
        self, test_case: tc.TestCase, memo: Memo
    ) -> SetStatement:
        return SetStatement(test_case, self.ret_val.type, self._remap_elements(memo))

    def __repr__(self) -> str:
        return f"SetStatement({self.ret_val.type}, {self._elements!r})"


class TupleStatement(NonDictCollection):
    """A statement that builds a tuple.

    The length of a tuple is part of its type, hence elements are only replaced.
    """

    kind = StatementKind.TUPLE

    def _build(self, values: list[Any]) -> Any:
        return tuple(values)

    def _random_insertion(self, test_case: tc.TestCase, factory: tf.MutationFactory) -> bool:
        return False

    def _random_deletion(self) -> bool:
        return False

    def _clone(  # noqa: D102
        self, test_case: tc.TestCase, memo: Memo
    ) -> TupleStatement:
        return TupleStatement(test_case, self.ret_val.type, self._remap_elements(memo))

    def __repr__(self) -> str:
        return f"TupleStatement({self.ret_val.type}, {self._elements!r})"


class DictStatement(CollectionStatement[tuple[vr.Reference, vr.Reference]]):
    """A statement that builds a dict from key value pairs."""

    kind = StatementKind.DICT

    def operands(self) -> list[vr.Reference]:  # noqa: D102
        return [ref for pair in self._elements for ref in pair]

    def _replace_operands(  # noqa: D102
        self, old: vr.VariableReference, new: vr.VariableReference
    ) -> None:
        self._elements = [
            (_replace_reference(key, old, new), _replace_reference(value, old, new))
            for key, value in self._elements
        ]

    def describe(self) -> OperationDescription:  # noqa: D102
        return OperationDescription(
            kind=self.kind, ret_val=self.ret_val, args=tuple(self.operands())
        )

    def _build(self, values: list[Any]) -> Any:
        return dict(zip(values[::2], values[1::2], strict=True))

    def _replacement_supplier(
        self,
        test_case: tc.TestCase,
        factory: tf.MutationFactory,
        element: tuple[vr.Reference, vr.Reference],
    ) -> tuple[vr.Reference, vr.Reference]:
        key, value = element
        if randomness.next_bool():
            new_key = self._supply(test_case, factory, key)
            return (key if new_key is None else new_key), value
        new_value = self._supply(test_case, factory, value)
        return key, (value if new_value is None else new_value)

    def _insertion_supplier(
        self, test_case: tc.TestCase, factory: tf.MutationFactory
    ) -> tuple[vr.Reference, vr.Reference] | None:
        key = self._supply(test_case, factory, None)
        value = self._supply(test_case, factory, None)
        if key is None or value is None:
            return None
        return key, value

    def _clone(  # noqa: D102
        self, test_case: tc.TestCase, memo: Memo
    ) -> DictStatement:
        return DictStatement(
            test_case,
            self.ret_val.type,
            [(key.remap(memo), value.remap(memo)) for key, value in self._elements],
        )

    def __repr__(self) -> str:
        return f"DictStatement({self.ret_val.type}, {self._elements!r})"


class PrimitiveStatement(Statement, Generic[T]):
    """Defines a literal value."""

    kind = StatementKind.PRIMITIVE

    def __init__(
        self,
        test_case: tc.TestCase,
        variable_type: ProperType,
        value: T | None = None,
    ) -> None:
        """Binds the type and the literal.

        Args:
            test_case: The owning test case
            variable_type: The type of the used variable
            value: The value, a random one is chosen if it is None
        """
        super().__init__(test_case, variable_type)
        self._value = value
        if value is None:
            self.randomize_value()

    @property
    def value(self) -> T | None:
        """The literal.

        Returns:
            The primitive value
        """
        return self._value

    @value.setter
    def value(self, value: T) -> None:
        self._value = value

    def operands(self) -> list[vr.Reference]:  # noqa: D102
        return []

    def _replace_operands(  # noqa: D102
        self, old: vr.VariableReference, new: vr.VariableReference
    ) -> None:
        pass

    def describe(self) -> OperationDescription:  # noqa: D102
        return OperationDescription(kind=self.kind, ret_val=self.ret_val, value=self._value)

    def execute(self, scope: ex.Scope) -> BaseException | None:  # noqa: D102
        scope.set(self.ret_val, self._value)
        return None

    def mutate(  # noqa: D102
        self, test_case: tc.TestCase, factory: tf.MutationFactory
    ) -> bool:
        old_value = self._value
        for _ in range(_MAX_LITERAL_ATTEMPTS):
            if randomness.next_float() < config.configuration.search_algorithm.random_perturbation:
                self.randomize_value()
            else:
                self.delta()
            if not _values_equal(self._value, old_value):
                self._logger.debug("Mutated %r to %r", old_value, self._value)
                return True
        # Degenerate bounds, e.g., string_length == 0, admit no other literal.
        self._value = old_value
        return False

    @abstractmethod
    def randomize_value(self) -> None:
        """Replaces the literal with a fresh random one."""

    @abstractmethod
    def delta(self) -> None:
        """Nudges the literal by a small random amount."""

    def _payload(self) -> Any:
        return self._value

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._value!r})"

    def __str__(self) -> str:
        return f"{self._value}: {self.ret_val.type}"


class IntPrimitiveStatement(PrimitiveStatement[int]):
    """An int literal."""

    def __init__(  # noqa: D107
        self, test_case: tc.TestCase, value: int | None = None
    ) -> None:
        super().__init__(test_case, Instance(TypeInfo(int)), value)

    def randomize_value(self) -> None:  # noqa: D102
        self._value = int(
            randomness.next_gaussian() * config.configuration.test_creation.max_int
        )

    def delta(self) -> None:  # noqa: D102
        assert self._value is not None
        max_delta = config.configuration.test_creation.max_delta
        delta = math.floor(randomness.next_gaussian() * max_delta)
        self._value += delta

    def _clone(  # noqa: D102
        self, test_case: tc.TestCase, memo: Memo
    ) -> IntPrimitiveStatement:
        return IntPrimitiveStatement(test_case, self._value)


class FloatPrimitiveStatement(PrimitiveStatement[float]):
    """A float literal."""

    def __init__(  # noqa: D107
        self, test_case: tc.TestCase, value: float | None = None
    ) -> None:
        super().__init__(test_case, Instance(TypeInfo(float)), value)

    def randomize_value(self) -> None:  # noqa: D102
        val = randomness.next_gaussian() * config.configuration.test_creation.max_int
        precision = randomness.next_int(0, 7)
        self._value = round(val, precision)

    def delta(self) -> None:  # noqa: D102
        assert self._value is not None
        probability = randomness.next_float()
        if probability < 1.0 / 3.0:
            self._value += randomness.next_gaussian() * config.configuration.test_creation.max_delta
        elif probability < 2.0 / 3.0:
            self._value += randomness.next_gaussian()
        else:
            self._value = round(self._value, randomness.next_int(0, 7))

    def _payload_hash(self) -> int:
        # Distinct NaN objects do not share a hash.
        if self._value != self._value:  # noqa: PLR0124
            return hash("nan")
        return hash(self._value)

    def _clone(  # noqa: D102
        self, test_case: tc.TestCase, memo: Memo
    ) -> FloatPrimitiveStatement:
        return FloatPrimitiveStatement(test_case, self._value)


class StringPrimitiveStatement(PrimitiveStatement[str]):
    """A str literal."""

    def __init__(  # noqa: D107
        self, test_case: tc.TestCase, value: str | None = None
    ) -> None:
        super().__init__(test_case, Instance(TypeInfo(str)), value)

    def randomize_value(self) -> None:  # noqa: D102
        length = randomness.next_int(0, config.configuration.test_creation.string_length + 1)
        self._value = randomness.next_string(length)

    def delta(self) -> None:  # noqa: D102
        assert self._value is not None
        working_on = list(self._value)
        p_perform_action = 1.0 / 3.0
        if randomness.next_float() < p_perform_action and len(working_on) > 0:
            working_on = self._random_deletion(working_on)

        if randomness.next_float() < p_perform_action and len(working_on) > 0:
            working_on = self._random_replacement(working_on)

        if randomness.next_float() < p_perform_action:
            working_on = self._random_insertion(working_on)

        self._value = "".join(working_on)

    @staticmethod
    def _random_deletion(working_on: list[str]) -> list[str]:
        p_per_char = 1.0 / len(working_on)
        return [char for char in working_on if randomness.next_float() >= p_per_char]

    @staticmethod
    def _random_replacement(working_on: list[str]) -> list[str]:
        p_per_char = 1.0 / len(working_on)
        return [
            randomness.next_char() if randomness.next_float() < p_per_char else char
            for char in working_on
        ]

    @staticmethod
    def _random_insertion(working_on: list[str]) -> list[str]:
        pos = 0
        if len(working_on) > 0:
            pos = randomness.next_int(0, len(working_on) + 1)
        alpha = 0.5
        exponent = 1
        while (
            randomness.next_float() <= pow(alpha, exponent)
            and len(working_on) < config.configuration.test_creation.string_length
        ):
            exponent += 1
            working_on = [*working_on[:pos], randomness.next_char(), *working_on[pos:]]
        return working_on

    def _clone(  # noqa: D102
        self, test_case: tc.TestCase, memo: Memo
    ) -> StringPrimitiveStatement:
        return StringPrimitiveStatement(test_case, self._value)


class BytesPrimitiveStatement(PrimitiveStatement[bytes]):
    """A bytes literal."""

    def __init__(  # noqa: D107
        self, test_case: tc.TestCase, value: bytes | None = None
    ) -> None:
        super().__init__(test_case, Instance(TypeInfo(bytes)), value)

    def randomize_value(self) -> None:  # noqa: D102
        length = randomness.next_int(0, config.configuration.test_creation.bytes_length + 1)
        self._value = randomness.next_bytes(length)

    def delta(self) -> None:  # noqa: D102
        assert self._value is not None
        working_on = list(self._value)
        p_perform_action = 1.0 / 3.0
        if randomness.next_float() < p_perform_action and len(working_on) > 0:
            p_per_byte = 1.0 / len(working_on)
            working_on = [b for b in working_on if randomness.next_float() >= p_per_byte]

        if randomness.next_float() < p_perform_action and len(working_on) > 0:
            p_per_byte = 1.0 / len(working_on)
            working_on = [
                randomness.RNG.getrandbits(8) if randomness.next_float() < p_per_byte else b
                for b in working_on
            ]

        if randomness.next_float() < p_perform_action:
            pos = randomness.next_int(0, len(working_on) + 1)
            alpha = 0.5
            exponent = 1
            while (
                randomness.next_float() <= pow(alpha, exponent)
                and len(working_on) < config.configuration.test_creation.bytes_length
            ):
                exponent += 1
                working_on.insert(pos, randomness.RNG.getrandbits(8))

        self._value = bytes(working_on)

    def _clone(  # noqa: D102
        self, test_case: tc.TestCase, memo: Memo
    ) -> BytesPrimitiveStatement:
        return BytesPrimitiveStatement(test_case, self._value)


class BooleanPrimitiveStatement(PrimitiveStatement[bool]):
    """A bool literal."""

    def __init__(  # noqa: D107
        self, test_case: tc.TestCase, value: bool | None = None  # noqa: FBT001
    ) -> None:
        super().__init__(test_case, Instance(TypeInfo(bool)), value)

    def randomize_value(self) -> None:  # noqa: D102
        self._value = randomness.next_bool()

    def delta(self) -> None:  # noqa: D102
        assert self._value is not None
        self._value = not self._value

    def _clone(  # noqa: D102
        self, test_case: tc.TestCase, memo: Memo
    ) -> BooleanPrimitiveStatement:
        return BooleanPrimitiveStatement(test_case, self._value)


class EnumPrimitiveStatement(PrimitiveStatement[int]):
    """A member of an enum.

    The member is stored as its index among the names of the enum.
    """

    kind = StatementKind.ENUM

    def __init__(  # noqa: D107
        self,
        test_case: tc.TestCase,
        generic_enum: gao.GenericEnum,
        value: int | None = None,
    ):
        self._generic_enum = generic_enum
        super().__init__(test_case, generic_enum.generated_type(), value)

    @property
    def value_name(self) -> str:
        """The name of the member at the stored index.

        Returns:
            The member name
        """
        assert self._value is not None
        return self._generic_enum.names[self._value]

    def accessible_object(self) -> gao.GenericEnum:  # noqa: D102
        return self._generic_enum

    def randomize_value(self) -> None:  # noqa: D102
        self._value = randomness.next_int(0, len(self._generic_enum.names))

    def delta(self) -> None:  # noqa: D102
        assert self._value is not None
        self._value += randomness.choice([-1, 1])
        self._value = (self._value + len(self._generic_enum.names)) % len(
            self._generic_enum.names
        )

    def mutate(  # noqa: D102
        self, test_case: tc.TestCase, factory: tf.MutationFactory
    ) -> bool:
        if len(self._generic_enum.names) < 2:  # noqa: PLR2004
            return False
        return super().mutate(test_case, factory)

    def describe(self) -> OperationDescription:  # noqa: D102
        return OperationDescription(
            kind=self.kind,
            ret_val=self.ret_val,
            operation=self._generic_enum,
            value=self.value_name,
        )

    def execute(self, scope: ex.Scope) -> BaseException | None:  # noqa: D102
        owner = self._generic_enum.owner
        assert owner is not None
        try:
            member = owner.raw_type[self.value_name]
        except KeyError as error:
            raise OperationAccessError(
                f"{owner.full_name} has no member {self.value_name}"
            ) from error
        scope.set(self.ret_val, member)
        return None

    def change_execution_context(self, context: ex.ExecutionContext) -> None:  # noqa: D102
        name = self.value_name
        resolved = self._generic_enum.resolve(context)
        if name not in resolved.names:
            raise OperationResolutionError(f"{resolved} has no member {name}")
        self._generic_enum = resolved
        self._value = resolved.names.index(name)
        super().change_execution_context(context)

    def _clone(  # noqa: D102
        self, test_case: tc.TestCase, memo: Memo
    ) -> EnumPrimitiveStatement:
        return EnumPrimitiveStatement(test_case, self._generic_enum, value=self._value)

    def _payload(self) -> Any:
        return self._generic_enum, self._value

    def __repr__(self) -> str:
        return f"EnumPrimitiveStatement({self._generic_enum}, {self._value})"

    def __str__(self) -> str:
        return f"{self.value_name}: Enum"


class NoneStatement(PrimitiveStatement[None]):
    """The None literal."""

    kind = StatementKind.NONE

    def __init__(self, test_case: tc.TestCase):  # noqa: D107
        super().__init__(test_case, NONE_TYPE)

    def mutate(  # noqa: D102
        self, test_case: tc.TestCase, factory: tf.MutationFactory
    ) -> bool:
        return False

    def randomize_value(self) -> None:  # noqa: D102
        pass

    def delta(self) -> None:  # noqa: D102
        pass

    def _clone(  # noqa: D102
        self, test_case: tc.TestCase, memo: Memo
    ) -> NoneStatement:
        return NoneStatement(test_case)

    def __repr__(self) -> str:
        return "NoneStatement()"

    def __str__(self) -> str:
        return "None"

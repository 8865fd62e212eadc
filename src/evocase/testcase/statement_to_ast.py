#  This file is part of evocase.
#
#  SPDX-FileCopyrightText: 2019–2025 evocase Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides a visitor that transforms statement descriptions to AST."""

from __future__ import annotations

import ast

from typing import TYPE_CHECKING

import evocase.utils.ast_util as au
import evocase.utils.generic.genericaccessibleobject as gao

from evocase.testcase.operation import StatementKind
from evocase.testcase.operation import fault_name


if TYPE_CHECKING:
    from evocase.testcase.operation import OperationDescription

    import evocase.testcase.variablereference as vr
    import evocase.utils.namingscope as ns


class StatementToAstVisitor:
    """Visitor that transforms statement descriptions into AST nodes."""

    def __init__(
        self,
        module_aliases: ns.AbstractNamingScope,
        variable_names: ns.AbstractNamingScope,
        *,
        store_call_return: bool = True,
    ) -> None:
        """Creates a new transformation visitor.

        Args:
            module_aliases: A naming scope for module alias names.
            variable_names: A naming scope for variable names.
            store_call_return: Should the result of a call be stored in a variable?
                The result is never stored when a fault is pending.
        """
        self._variable_names = variable_names
        self._module_aliases = module_aliases
        self._store_call_return = store_call_return

    def visit(
        self,
        description: OperationDescription,
        pending_fault: type[BaseException] | BaseException | None = None,
    ) -> ast.stmt:
        """Transforms the described statement into an AST node.

        Args:
            description: The description of the statement
            pending_fault: The fault the statement is expected to raise, if any

        Returns:
            The AST node, a ``with pytest.raises(...)`` block if a fault is pending
        """
        value = self._create_value(description)
        node: ast.stmt
        if description.kind is StatementKind.ASSIGNMENT:
            assert description.receiver is not None
            node = au.create_ast_assign(self._create_name(description.receiver, load=False), value)
        elif pending_fault is not None or (
            description.kind.is_call and not self._store_call_return
        ):
            node = ast.Expr(value=value)
        else:
            node = au.create_ast_assign(self._create_name(description.ret_val, load=False), value)

        if pending_fault is not None:
            module, qualname = fault_name(pending_fault)
            node = au.create_ast_raises_block(
                au.create_qualified_name(self._module_aliases, module, qualname), [node]
            )
        return node

    def _create_value(  # noqa: C901, PLR0911
        self, description: OperationDescription
    ) -> ast.expr:
        operation = description.operation
        match description.kind:
            case StatementKind.CONSTRUCTOR:
                assert operation is not None
                owner = operation.owner
                assert owner is not None
                func = au.create_qualified_name(self._module_aliases, owner.module, owner.qualname)
                return self._create_call(func, description)
            case StatementKind.METHOD:
                assert isinstance(operation, gao.GenericMethod)
                assert description.receiver is not None
                func = au.create_ast_attribute(
                    operation.method_name, self._create_name(description.receiver, load=True)
                )
                return self._create_call(func, description)
            case StatementKind.FUNCTION:
                assert isinstance(operation, gao.GenericFunction)
                func = au.create_qualified_name(
                    self._module_aliases, operation.module_name, operation.function_name
                )
                return self._create_call(func, description)
            case StatementKind.FIELD:
                assert isinstance(operation, gao.GenericField)
                assert description.receiver is not None
                return au.create_ast_attribute(
                    operation.field, self._create_name(description.receiver, load=True)
                )
            case StatementKind.ASSIGNMENT:
                return self._create_name(description.args[0], load=True)
            case StatementKind.ENUM:
                assert operation is not None
                owner = operation.owner
                assert owner is not None
                return au.create_ast_attribute(
                    description.value,
                    au.create_qualified_name(self._module_aliases, owner.module, owner.qualname),
                )
            case StatementKind.LIST:
                return ast.List(elts=self._create_elements(description), ctx=ast.Load())
            case StatementKind.SET:
                if len(description.args) == 0:
                    # There is no literal for empty sets.
                    return au.create_ast_call(au.create_ast_name("set"), [], [])
                return ast.Set(elts=self._create_elements(description))
            case StatementKind.TUPLE:
                return ast.Tuple(elts=self._create_elements(description), ctx=ast.Load())
            case StatementKind.DICT:
                elements = self._create_elements(description)
                return ast.Dict(keys=list(elements[::2]), values=elements[1::2])
            case _:
                return au.create_ast_constant(description.value)

    def _create_call(self, func: ast.expr, description: OperationDescription) -> ast.Call:
        return au.create_ast_call(
            func,
            self._create_elements(description),
            [
                au.create_ast_keyword(name, self._create_name(ref, load=True))
                for name, ref in description.kwargs
            ],
        )

    def _create_elements(self, description: OperationDescription) -> list[ast.expr]:
        return [self._create_name(ref, load=True) for ref in description.args]

    def _create_name(self, ref: vr.Reference, *, load: bool) -> ast.Name | ast.Attribute:
        return au.create_full_name(self._variable_names, self._module_aliases, ref, load=load)

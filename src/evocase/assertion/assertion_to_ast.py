#  This file is part of evocase.
#
#  SPDX-FileCopyrightText: 2019–2025 evocase Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides a visitor that transforms assertions to PyTest style AST nodes."""

from __future__ import annotations

import ast
import enum

from typing import TYPE_CHECKING
from typing import Any

import evocase.assertion.assertion as ass
import evocase.configuration as config
import evocase.utils.ast_util as au


if TYPE_CHECKING:
    import evocase.utils.namingscope as ns


class PyTestAssertionToAstVisitor(ass.AssertionVisitor):
    """An assertion visitor that transforms assertions into AST nodes.

    The node of the statement the assertions belong to is the first node.  An
    exception assertion wraps it in ``with pytest.raises(...)``, all other
    assertions are appended after it.
    """

    def __init__(
        self,
        variable_names: ns.AbstractNamingScope,
        module_aliases: ns.AbstractNamingScope,
        common_modules: set[str],
        statement_node: ast.stmt,
    ):
        """Create a new assertion visitor.

        Args:
            variable_names: the naming scope that is used to resolve the names
                of the variables used in the assertions.
            module_aliases: the naming scope that is used to resolve the aliases of the
                modules used in the assertions.
            common_modules: the set of common modules that are used. Modules may be
                added when transforming the assertions.
            statement_node: the AST node of the statement the assertions belong to
        """
        self._common_modules = common_modules
        self._module_aliases = module_aliases
        self._variable_names = variable_names
        self._nodes: list[ast.stmt] = [statement_node]

    @property
    def nodes(self) -> list[ast.stmt]:
        """Provides the ast nodes generated by this visitor.

        Returns:
            the ast nodes generated by this visitor.
        """
        return self._nodes

    def visit_type_name_assertion(  # noqa: D102
        self, assertion: ass.TypeNameAssertion
    ) -> None:
        left = self._create_type_name_format(assertion.source)
        self._nodes.append(
            au.create_ast_assert(
                au.create_ast_compare(
                    left,
                    ast.Eq(),
                    au.create_ast_constant(f"{assertion.module}.{assertion.qualname}"),
                )
            )
        )

    def visit_float_assertion(  # noqa: D102
        self, assertion: ass.FloatAssertion
    ) -> None:
        precision = config.configuration.execution.float_precision
        approx = au.create_ast_call(
            au.create_ast_attribute("approx", au.create_ast_name("pytest")),
            [au.create_ast_constant(assertion.value)],
            [
                au.create_ast_keyword("abs", au.create_ast_constant(precision)),
                au.create_ast_keyword("rel", au.create_ast_constant(precision)),
            ],
        )
        self._nodes.append(
            au.create_ast_assert(
                au.create_ast_compare(self._create_source(assertion), ast.Eq(), approx)
            )
        )

    def visit_object_assertion(  # noqa: D102
        self, assertion: ass.ObjectAssertion
    ) -> None:
        value = assertion.object
        if isinstance(value, bool) or value is None:
            operator: ast.cmpop = ast.Is()
        else:
            operator = ast.Eq()
        self._nodes.append(
            au.create_ast_assert(
                au.create_ast_compare(
                    self._create_source(assertion),
                    operator,
                    self._create_assertable_object(value),
                )
            )
        )

    def visit_collection_length_assertion(  # noqa: D102
        self, assertion: ass.CollectionLengthAssertion
    ) -> None:
        self._nodes.append(
            au.create_ast_assert(
                au.create_ast_compare(
                    au.create_ast_call(
                        au.create_ast_name("len"), [self._create_source(assertion)], []
                    ),
                    ast.Eq(),
                    au.create_ast_constant(assertion.length),
                )
            )
        )

    def visit_exception_assertion(  # noqa: D102
        self, assertion: ass.ExceptionAssertion
    ) -> None:
        self._nodes[0] = au.create_ast_raises_block(
            self._create_module_member(assertion.module, assertion.exception_type_name),
            [self._nodes[0]],
        )

    def _create_source(self, assertion: ass.ReferenceAssertion) -> ast.Name | ast.Attribute:
        return au.create_full_name(
            self._variable_names, self._module_aliases, assertion.source, load=True
        )

    def _create_module_member(self, module: str, qualname: str) -> ast.Name | ast.Attribute:
        if module in self._common_modules:
            res: ast.Name | ast.Attribute = au.create_ast_name(module)
            for part in qualname.split("."):
                res = au.create_ast_attribute(part, res)
            return res
        return au.create_qualified_name(self._module_aliases, module, qualname)

    def _create_type_name_format(self, source) -> ast.JoinedStr:
        def type_attribute(attr: str) -> ast.FormattedValue:
            return ast.FormattedValue(
                value=au.create_ast_attribute(
                    attr,
                    au.create_ast_call(
                        au.create_ast_name("type"),
                        [
                            au.create_full_name(
                                self._variable_names, self._module_aliases, source, load=True
                            )
                        ],
                        [],
                    ),
                ),
                conversion=-1,
                format_spec=None,
            )

        return ast.JoinedStr(
            values=[
                type_attribute("__module__"),
                au.create_ast_constant("."),
                type_attribute("__qualname__"),
            ]
        )

    def _create_assertable_object(self, value: Any) -> ast.expr:
        assert ass.is_assertable(value), f"{value!r} cannot be written as a literal"
        if isinstance(value, enum.Enum):
            return au.create_ast_attribute(
                value.name,
                self._create_module_member(type(value).__module__, type(value).__qualname__),
            )
        if isinstance(value, list):
            return ast.List(
                elts=[self._create_assertable_object(elem) for elem in value], ctx=ast.Load()
            )
        if isinstance(value, tuple):
            return ast.Tuple(
                elts=[self._create_assertable_object(elem) for elem in value], ctx=ast.Load()
            )
        if isinstance(value, set | frozenset):
            if len(value) == 0:
                # There is no literal for empty sets.
                return au.create_ast_call(au.create_ast_name(type(value).__name__), [], [])
            elements = ast.Set(elts=[self._create_assertable_object(elem) for elem in value])
            if isinstance(value, frozenset):
                return au.create_ast_call(au.create_ast_name("frozenset"), [elements], [])
            return elements
        if isinstance(value, dict):
            return ast.Dict(
                keys=[self._create_assertable_object(key) for key in value],
                values=[self._create_assertable_object(val) for val in value.values()],
            )
        return au.create_ast_constant(value)

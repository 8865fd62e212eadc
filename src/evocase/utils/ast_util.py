#  This file is part of evocase.
#
#  SPDX-FileCopyrightText: 2019–2025 evocase Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Small factories for the ast nodes that exported tests are made of."""

from __future__ import annotations

import ast
import typing


if typing.TYPE_CHECKING:
    import evocase.testcase.variablereference as vr
    import evocase.utils.namingscope as ns


def _ctx(*, store: bool) -> ast.expr_context:
    return ast.Store() if store else ast.Load()


def create_full_name(
    variable_names: ns.AbstractNamingScope,
    module_names: ns.AbstractNamingScope,
    var: vr.Reference,
    *,
    load: bool,
) -> ast.Name | ast.Attribute:
    """Builds the expression that denotes a reference, e.g., ``var_0.value``.

    Only the outermost node gets the requested context; every prefix of the
    dotted path is loaded.

    Args:
        variable_names: Names the variables
        module_names: Names the module aliases
        var: The reference to render
        load: Whether the expression is read, as opposed to assigned

    Returns:
        A name for a variable, an attribute chain for a field
    """
    head, *tail = var.get_names(variable_names, module_names)
    if not tail:
        return create_ast_name(head, store=not load)
    res: ast.Name | ast.Attribute = create_ast_name(head)
    for attr in tail[:-1]:
        res = create_ast_attribute(attr, res)
    return create_ast_attribute(tail[-1], res, store=not load)


def create_qualified_name(
    module_names: ns.AbstractNamingScope, module: str, qualname: str
) -> ast.Name | ast.Attribute:
    """Builds a load of a module member, e.g., ``module_0.Outer.Inner``.

    Builtins need no alias and are referred to by their bare name.

    Args:
        module_names: Names the module aliases
        module: The defining module
        qualname: The dotted path inside the module

    Returns:
        The expression
    """
    parts = qualname.split(".")
    if module == "builtins":
        root, parts = parts[0], parts[1:]
    else:
        root = module_names.get_name(module)
    res: ast.Name | ast.Attribute = create_ast_name(root)
    for part in parts:
        res = create_ast_attribute(part, res)
    return res


def create_ast_name(name_id: str, *, store: bool = False) -> ast.Name:
    """A bare identifier, loaded unless ``store`` is set."""
    return ast.Name(id=name_id, ctx=_ctx(store=store))


def create_ast_assign(target, value) -> ast.Assign:
    """``target = value``."""
    return ast.Assign(targets=[target], value=value)


def create_ast_attribute(attr, value, *, store: bool = False) -> ast.Attribute:
    """``value.attr``, loaded unless ``store`` is set."""
    return ast.Attribute(value=value, attr=attr, ctx=_ctx(store=store))


def create_ast_constant(value) -> ast.Constant:
    """A literal."""
    return ast.Constant(value=value, kind=None)


def create_ast_assert(test) -> ast.Assert:
    """``assert test`` without a message."""
    return ast.Assert(test=test, msg=None)


def create_ast_compare(left, operator, comparator) -> ast.Compare:
    """A single binary comparison such as ``left == comparator``."""
    return ast.Compare(left=left, ops=[operator], comparators=[comparator])


def create_ast_call(func, args, keywords) -> ast.Call:
    """``func(*args, **keywords)`` with the given positional and keyword nodes."""
    return ast.Call(func=func, args=args, keywords=keywords)


def create_ast_keyword(arg, value) -> ast.keyword:
    """A ``name=value`` argument."""
    return ast.keyword(arg=arg, value=value)


def create_ast_raises_block(exception: ast.expr, body: list[ast.stmt]) -> ast.With:
    """Guards statements with ``with pytest.raises(exception):``.

    Args:
        exception: The expression naming the expected exception type
        body: The guarded statements

    Returns:
        The with statement
    """
    raises = create_ast_attribute("raises", create_ast_name("pytest"))
    item = ast.withitem(context_expr=create_ast_call(raises, [exception], []))
    return ast.With(items=[item], body=body)

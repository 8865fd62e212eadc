#  This file is part of evocase.
#
#  SPDX-FileCopyrightText: 2019–2025 evocase Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Writes test cases out as a PyTest module or as an instruction stream."""

from __future__ import annotations

import ast
import dataclasses
import logging

from typing import TYPE_CHECKING

import evocase.configuration as config
import evocase.testcase.testcase_to_ast as tc_to_ast
import evocase.utils.ast_util as au
import evocase.utils.namingscope as ns


if TYPE_CHECKING:
    from pathlib import Path

    import evocase.testcase.execution as ex
    import evocase.testcase.instructions as ins
    import evocase.testcase.testcase as tc


_LOGGER = logging.getLogger(__name__)

_FILE_HEADER = (
    "# Test cases automatically generated by evocase.\n# Please check them before you use them.\n"
)


@dataclasses.dataclass
class _RenderedTestCase:
    body: list[ast.stmt]

    # Raises a fault that is neither declared nor asserted.
    failing: bool


class PyTestExporter:
    """Collects test cases and builds a PyTest module containing all of them.

    All test functions share one import block, so the module aliases are kept
    across test cases.
    """

    def __init__(self, *, store_call_return: bool = False) -> None:
        """Starts an empty module.

        Args:
            store_call_return: Bind every call result to a variable, even when no
                later statement reads it
        """
        self._module_aliases = ns.NamingScope("module")
        self._common_modules: set[str] = set()
        self._rendered: list[_RenderedTestCase] = []
        self._store_call_return = store_call_return

    @property
    def module_aliases(self) -> ns.NamingScope:
        """The aliases of the subject modules imported so far."""
        return self._module_aliases

    @property
    def common_modules(self) -> set[str]:
        """Modules imported under their own name, e.g., ``math``."""
        return self._common_modules

    def add_test_case(
        self, test_case: tc.TestCase, exec_result: ex.ExecutionResult | None = None
    ) -> None:
        """Transforms a test case and keeps it for the module.

        Args:
            test_case: The test case
            exec_result: The result of its last execution, if any.  Declared faults
                recorded in it are expected by the exported test.
        """
        visitor = tc_to_ast.TestCaseToAstVisitor(
            module_aliases=self._module_aliases,
            common_modules=self._common_modules,
            exec_result=exec_result,
            store_call_return=self._store_call_return,
        )
        test_case.accept(visitor)
        self._rendered.append(_RenderedTestCase(visitor.test_case_ast, visitor.is_failing_test))

    def _imports(self) -> list[ast.stmt]:
        modules = ["pytest", *sorted(self._common_modules - {"pytest"})]
        imports: list[ast.stmt] = [
            ast.Import(names=[ast.alias(name=module, asname=None)]) for module in modules
        ]
        imports.extend(
            ast.Import(names=[ast.alias(name=module, asname=alias)])
            for module, alias in self._module_aliases
        )
        return imports

    def _functions(self) -> list[ast.stmt]:
        return [
            ast.FunctionDef(
                name=f"test_case_{i}",
                args=ast.arguments(
                    posonlyargs=[],
                    args=[],
                    vararg=None,
                    kwonlyargs=[],
                    kw_defaults=[],
                    kwarg=None,
                    defaults=[],
                ),
                body=rendered.body or [ast.Pass()],
                decorator_list=[_strict_xfail()] if rendered.failing else [],
                returns=None,
            )
            for i, rendered in enumerate(self._rendered)
        ]

    def to_module(self) -> ast.Module:
        """Builds the module: the imports, then one test function per test case.

        Returns:
            The ast module
        """
        return ast.Module(body=self._imports() + self._functions(), type_ignores=[])

    def export(self, target: Path) -> None:
        """Writes the module of all collected test cases to a file.

        Args:
            target: Destination file
        """
        _LOGGER.info("Writing %d test cases to %s", len(self._rendered), target)
        save_module_to_file(
            self.to_module(),
            target,
            format_with_black=config.configuration.execution.format_with_black,
        )


def _strict_xfail() -> ast.expr:
    mark = au.create_ast_attribute("mark", au.create_ast_name("pytest"))
    return au.create_ast_call(
        au.create_ast_attribute("xfail", mark),
        [],
        [au.create_ast_keyword("strict", ast.Constant(value=True))],
    )


def module_to_source(module: ast.Module, *, format_with_black: bool = True) -> str:
    """Unparses a module.

    Args:
        module: The module
        format_with_black: Reformat the unparsed code with black

    Returns:
        The source code
    """
    output = ast.unparse(ast.fix_missing_locations(module))
    if not format_with_black:
        return output
    # Deferred, the subject may pin its own black.
    import black  # noqa: PLC0415

    return black.format_str(output, mode=black.FileMode())


def save_module_to_file(
    module: ast.Module, target: Path, *, format_with_black: bool = True
) -> None:
    """Writes a module behind a generated-code header, creating parent directories.

    Args:
        module: The module
        target: The file to write
        format_with_black: Reformat the code with black
    """
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(
        _FILE_HEADER + module_to_source(module, format_with_black=format_with_black),
        encoding="UTF-8",
    )


def emit_test_case(
    test_case: tc.TestCase,
    emitter: ins.InstructionEmitter,
    exec_result: ex.ExecutionResult | None = None,
) -> dict[int, int]:
    """Emits the instructions of all statements of a test case.

    Faults are expected under the same conditions as in the exported source.

    Args:
        test_case: The test case
        emitter: The emitter that receives the instructions
        exec_result: The result of the last execution of the test case, if any

    Returns:
        The slots of the values, keyed by the positions of their statements
    """
    slots: dict[int, int] = {}
    for idx, statement in enumerate(test_case.statements):
        statement.get_instructions(
            emitter, slots, tc_to_ast.get_pending_fault(idx, statement, exec_result)
        )
    return slots

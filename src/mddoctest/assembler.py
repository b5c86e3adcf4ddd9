"""
Program assembler.

Builds the module that registers one suite for the document and one case
per sample::

    import asyncio
    import pytest
    from mddoctest import runtime as __mddoctest__
    <hoisted imports>

    @__mddoctest__.describe('<suite title>')
    def __mddoctest_suite__():

        @__mddoctest__.it('<case title>')
        async def __mddoctest_case__():
            <rewritten sample>
"""

from __future__ import annotations

import ast
from typing import List, Sequence

from .models import AssembledProgram, TestCase
from .rewriter import RUNTIME_ALIAS

SUITE_FUNCTION_NAME = "__mddoctest_suite__"
CASE_FUNCTION_NAME = "__mddoctest_case__"

PREAMBLE_SOURCE = f"""\
import asyncio
import pytest
from mddoctest import runtime as {RUNTIME_ALIAS}
"""


def assemble_program(
    cases: Sequence[TestCase],
    imports: Sequence[ast.stmt],
    suite_title: str,
) -> AssembledProgram:
    """
    Assemble the generated module.

    Args:
        cases: One rewritten case per sample, in document order
        imports: Hoisted imports in first-discovery order
        suite_title: Title passed to the suite registration

    Returns:
        AssembledProgram with ``from __future__`` imports first, then the
        preamble, the remaining imports and the suite registration
    """
    future_imports = [stmt for stmt in imports if _is_future_import(stmt)]
    other_imports = [stmt for stmt in imports if not _is_future_import(stmt)]
    return AssembledProgram(
        future_imports=future_imports,
        preamble=build_preamble(),
        imports=other_imports,
        suite=[build_suite(suite_title, cases)],
    )


def build_preamble() -> List[ast.stmt]:
    return ast.parse(PREAMBLE_SOURCE).body


def build_suite(title: str, cases: Sequence[TestCase]) -> ast.FunctionDef:
    """``@describe(title)`` around a function registering every case."""
    suite = _template(
        f"@{RUNTIME_ALIAS}.describe(None)\ndef {SUITE_FUNCTION_NAME}():\n    pass"
    )
    if not isinstance(suite, ast.FunctionDef):
        raise TypeError(f"Suite template parsed to {type(suite).__name__}")
    _set_title(suite, title)
    if cases:
        suite.body = [build_case(case) for case in cases]
    return suite


def build_case(case: TestCase) -> ast.stmt:
    """``@it(title)`` on a coroutine function holding the case body."""
    keyword = "async def" if case.is_async else "def"
    function = _template(
        f"@{RUNTIME_ALIAS}.it(None)\n{keyword} {CASE_FUNCTION_NAME}():\n    pass"
    )
    if not isinstance(function, (ast.AsyncFunctionDef, ast.FunctionDef)):
        raise TypeError(f"Case template parsed to {type(function).__name__}")
    _set_title(function, case.title)
    function.body = list(case.body) or [ast.Pass()]
    return function


def _template(source: str) -> ast.stmt:
    return ast.parse(source).body[0]


def _set_title(function: ast.AST, title: str) -> None:
    decorator = function.decorator_list[0]  # type: ignore[attr-defined]
    decorator.args = [ast.Constant(value=title)]


def _is_future_import(stmt: ast.stmt) -> bool:
    return isinstance(stmt, ast.ImportFrom) and stmt.module == "__future__"

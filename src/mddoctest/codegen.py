"""
Code generator.

Runs the final transformation pass over the assembled program (location
fixing and module reference remapping) and serializes it to source text.
"""

from __future__ import annotations

import ast
import dataclasses
from typing import List, Optional, Sequence, Set

from .models import AssembledProgram
from .resolver import ModuleResolver, PathType
from .rewriter import RUNTIME_ALIAS


def generate_code(
    program: AssembledProgram,
    resolver: Optional[ModuleResolver] = None,
    filename: Optional[PathType] = None,
    anchor: Optional[PathType] = None,
) -> str:
    """
    Serialize an assembled program.

    Args:
        program: Program built by the assembler
        resolver: Module resolver applied to the hoisted imports
        filename: Path of the source document
        anchor: Path the generated module will live at; load locations are
            relative to it. Defaults to the document itself.

    Returns:
        Python source text ending with a newline
    """
    if resolver is not None:
        program = dataclasses.replace(
            program,
            imports=remap_imports(program.imports, resolver, filename, anchor),
        )

    module = ast.fix_missing_locations(program.to_module())
    return ast.unparse(module) + "\n"


def remap_imports(
    imports: Sequence[ast.stmt],
    resolver: ModuleResolver,
    filename: Optional[PathType],
    anchor: Optional[PathType] = None,
) -> List[ast.stmt]:
    """
    Precede imports of the enclosing package with a ``load_local`` call.

    The import statements are kept as written; ``load_local`` registers the
    local package under its import name first, once per distinct module, so
    the statements bind names exactly as they would against an installed
    distribution.
    """
    result: List[ast.stmt] = []
    loaded: Set[str] = set()
    for stmt in imports:
        for module in imported_modules(stmt):
            if module in loaded:
                continue
            location = resolver.resolve(module, filename, anchor)
            if location != module:
                loaded.add(module)
                result.append(load_local_statement(module, location))
        result.append(stmt)
    return result


def imported_modules(stmt: ast.stmt) -> List[str]:
    """Absolute module names an import statement refers to."""
    if isinstance(stmt, ast.Import):
        return [alias.name for alias in stmt.names]
    if isinstance(stmt, ast.ImportFrom) and not stmt.level and stmt.module:
        if stmt.module == "__future__":
            return []
        return [stmt.module]
    return []


def load_local_statement(module: str, location: str) -> ast.stmt:
    """``__mddoctest__.load_local(<module>, <location>, __file__)``"""
    return ast.Expr(
        value=ast.Call(
            func=ast.Attribute(
                value=ast.Name(id=RUNTIME_ALIAS, ctx=ast.Load()),
                attr="load_local",
                ctx=ast.Load(),
            ),
            args=[
                ast.Constant(value=module),
                ast.Constant(value=location),
                ast.Name(id="__file__", ctx=ast.Load()),
            ],
            keywords=[],
        )
    )

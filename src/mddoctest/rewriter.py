"""
Annotation rewriter.

Walks a sample's statements, replaces annotated expression statements with
calls into ``mddoctest.runtime`` and lifts import statements out of the
sample so they can be placed at module level.

The walk never mutates its input: compound statements are shallow-copied
with rewritten bodies and untouched statements are reused as they are.
Replacements are recorded in a ``RewriteLedger`` so that walking already
rewritten output again leaves it unchanged.
"""

from __future__ import annotations

import ast
import copy
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Set

from .annotations import find_annotation
from .errors import AnnotationError
from .logging import CompilerLogger
from .models import Annotation, Comment, ErrorAnnotation, ReprAnnotation

RUNTIME_ALIAS = "__mddoctest__"
THUNK_NAME_TEMPLATE = "__mddoctest_thunk_{}__"

_REQUIRED_BLOCKS = frozenset({"body", "finalbody"})

# Kinds of scope a statement can sit in.
COROUTINE_SCOPE = "coroutine"
FUNCTION_SCOPE = "function"
CLASS_SCOPE = "class"


class RewriteLedger:
    """Side table of statements produced by the rewriter, keyed by identity."""

    def __init__(self) -> None:
        self._seen: Set[int] = set()
        self._nodes: List[ast.stmt] = []
        self.thunk_count = 0

    def record(self, nodes: Iterable[ast.stmt]) -> None:
        for node in nodes:
            self._seen.add(id(node))
            # Keep the node alive so its id cannot be reused.
            self._nodes.append(node)

    def __contains__(self, node: object) -> bool:
        return id(node) in self._seen

    def __len__(self) -> int:
        return len(self._nodes)

    def next_thunk_name(self) -> str:
        self.thunk_count += 1
        return THUNK_NAME_TEMPLATE.format(self.thunk_count)


class AnnotationRewriter:
    """
    Rewrites annotated statements and hoists imports for one compilation.

    One instance is shared by all samples of a document so that hoisted
    imports keep their first-discovery order and thunk names stay unique.
    """

    def __init__(
        self,
        ledger: Optional[RewriteLedger] = None,
        logger: Optional[CompilerLogger] = None,
    ):
        """
        Initialize the rewriter.

        Args:
            ledger: Side table of rewritten statements; a new one by default
            logger: Optional logger instance
        """
        self.ledger = ledger if ledger is not None else RewriteLedger()
        self.logger = logger or CompilerLogger()
        self.hoisted_imports: List[ast.stmt] = []
        self.annotation_count = 0

    def rewrite(
        self,
        body: Sequence[ast.stmt],
        comments: Mapping[ast.stmt, Sequence[Comment]],
    ) -> List[ast.stmt]:
        """
        Rewrite one sample body.

        Args:
            body: Statements of the sample (the body of its coroutine)
            comments: Trailing comments per statement

        Returns:
            New statement list; never empty
        """
        return self._rewrite_block(body, comments, COROUTINE_SCOPE) or [ast.Pass()]

    def _rewrite_block(
        self,
        body: Sequence[ast.stmt],
        comments: Mapping[ast.stmt, Sequence[Comment]],
        scope: str,
    ) -> List[ast.stmt]:
        result: List[ast.stmt] = []
        for stmt in body:
            result.extend(self._rewrite_statement(stmt, comments, scope))
        return result

    def _rewrite_statement(
        self,
        stmt: ast.stmt,
        comments: Mapping[ast.stmt, Sequence[Comment]],
        scope: str,
    ) -> List[ast.stmt]:
        if stmt in self.ledger:
            return [stmt]

        annotation = find_annotation(stmt, comments.get(stmt))
        if annotation is not None:
            if not isinstance(stmt, ast.Expr):
                raise AnnotationError(
                    f"Annotation found on a {type(stmt).__name__} statement",
                    context={"line": stmt.lineno},
                )
            replacement = self._replacement(stmt, annotation, scope)
            self.ledger.record(replacement)
            self.annotation_count += 1
            return replacement

        if isinstance(stmt, (ast.Import, ast.ImportFrom)):
            self.hoisted_imports.append(stmt)
            return []

        if _has_nested_blocks(stmt):
            return [self._rewrite_compound(stmt, comments, scope)]
        return [stmt]

    def _rewrite_compound(
        self,
        node: ast.AST,
        comments: Mapping[ast.stmt, Sequence[Comment]],
        scope: str,
    ) -> Any:
        # await is only legal directly inside coroutines; class bodies see no closure.
        if isinstance(node, ast.AsyncFunctionDef):
            scope = COROUTINE_SCOPE
        elif isinstance(node, ast.FunctionDef):
            scope = FUNCTION_SCOPE
        elif isinstance(node, ast.ClassDef):
            scope = CLASS_SCOPE

        clone = copy.copy(node)
        for name, value in ast.iter_fields(node):
            if not isinstance(value, list) or not value:
                continue
            if all(isinstance(item, ast.stmt) for item in value):
                rewritten = self._rewrite_block(value, comments, scope)
                if not rewritten and name in _REQUIRED_BLOCKS:
                    rewritten = [ast.Pass()]
                setattr(clone, name, rewritten)
            elif any(_has_nested_blocks(item) for item in value):
                # Exception handlers and match cases carry their own bodies.
                setattr(
                    clone,
                    name,
                    [
                        self._rewrite_compound(item, comments, scope)
                        if _has_nested_blocks(item)
                        else item
                        for item in value
                    ],
                )
        return clone

    def _replacement(
        self, stmt: ast.Expr, annotation: Annotation, scope: str
    ) -> List[ast.stmt]:
        if isinstance(annotation, ReprAnnotation):
            self.logger.debug("Rewriting repr annotation", line=stmt.lineno)
            return [repr_assertion(stmt.value, annotation)]
        if isinstance(annotation, ErrorAnnotation):
            self.logger.debug(
                "Rewriting error annotation", line=stmt.lineno, error=annotation.name
            )
            if scope == CLASS_SCOPE:
                return [inline_error_assertion(stmt.value, annotation)]
            return error_assertion(
                stmt.value,
                annotation,
                self.ledger.next_thunk_name(),
                in_coroutine=scope == COROUTINE_SCOPE,
            )
        raise TypeError(f"Unsupported annotation {annotation!r}")


def repr_assertion(expression: ast.expr, annotation: ReprAnnotation) -> ast.stmt:
    """``__mddoctest__.assert_repr(<expression>, <expected>)``"""
    return ast.Expr(
        value=_runtime_call(
            "assert_repr", [expression, ast.Constant(value=annotation.expected)]
        )
    )


def error_assertion(
    expression: ast.expr,
    annotation: ErrorAnnotation,
    thunk_name: str,
    in_coroutine: bool = True,
) -> List[ast.stmt]:
    """
    Wrap ``expression`` in a thunk and assert on what it raises::

        async def <thunk_name>():
            return <expression>
        await __mddoctest__.assert_error(<thunk_name>, <name>, <message>)

    Inside a plain ``def``, where ``await`` is not allowed, the thunk is a
    plain function checked by ``assert_error_sync``.
    """
    keyword = "async def" if in_coroutine else "def"
    thunk = ast.parse(f"{keyword} {thunk_name}():\n    return None").body[0]
    if not isinstance(thunk, (ast.AsyncFunctionDef, ast.FunctionDef)):
        raise TypeError(f"Thunk template parsed to {type(thunk).__name__}")
    thunk.body = [ast.Return(value=expression)]

    call = _runtime_call(
        "assert_error" if in_coroutine else "assert_error_sync",
        [
            ast.Name(id=thunk_name, ctx=ast.Load()),
            ast.Constant(value=annotation.name),
            ast.Constant(value=annotation.message),
        ],
    )
    check = ast.Expr(value=ast.Await(value=call) if in_coroutine else call)
    return [thunk, check]


def inline_error_assertion(
    expression: ast.expr, annotation: ErrorAnnotation
) -> ast.stmt:
    """
    Evaluate ``expression`` in place under an error expectation::

        with __mddoctest__.expect_error(<name>, <message>):
            <expression>

    Used in class bodies: a ``with`` block opens no scope, so the expression
    still sees the names bound earlier in the class body.
    """
    call = _runtime_call(
        "expect_error",
        [ast.Constant(value=annotation.name), ast.Constant(value=annotation.message)],
    )
    block = ast.With(
        items=[ast.withitem(context_expr=call, optional_vars=None)],
        body=[ast.Expr(value=expression)],
        type_comment=None,
    )
    return ast.copy_location(block, expression)


def _runtime_call(function: str, args: List[ast.expr]) -> ast.Call:
    return ast.Call(
        func=ast.Attribute(
            value=ast.Name(id=RUNTIME_ALIAS, ctx=ast.Load()),
            attr=function,
            ctx=ast.Load(),
        ),
        args=args,
        keywords=[],
    )


def _has_nested_blocks(node: ast.AST) -> bool:
    for name in ("body", "orelse", "finalbody", "handlers", "cases"):
        value = getattr(node, name, None)
        if isinstance(value, list) and value:
            return True
    return False

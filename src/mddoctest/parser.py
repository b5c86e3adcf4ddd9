"""
Sample parser.

Turns the text of one sample into the body of a synthetic ``async def`` so
that ``await`` may be used at the top level of a sample, and works out which
comments trail which statements. The Python AST drops comments, so they are
read separately with ``tokenize`` and matched to statements by position.
"""

from __future__ import annotations

import ast
import io
import tokenize
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .errors import SampleParseError, build_sample_context
from .models import Comment, Sample

SAMPLE_FUNCTION_NAME = "__mddoctest_sample__"

_PARSE_FLAGS = ast.PyCF_ONLY_AST | ast.PyCF_ALLOW_TOP_LEVEL_AWAIT

Position = Tuple[int, int]
CommentTable = Dict[ast.stmt, List[Comment]]


@dataclass
class ParsedSample:
    """A sample's synthetic coroutine function and its trailing comments."""

    sample: Sample
    function: ast.AsyncFunctionDef
    comments: CommentTable = field(default_factory=dict)

    @property
    def body(self) -> List[ast.stmt]:
        return self.function.body


def parse_sample(sample: Sample, index: Optional[int] = None) -> ParsedSample:
    """
    Parse a sample into a synthetic coroutine function.

    Args:
        sample: Sample to parse
        index: Position of the sample in its document, for error messages

    Returns:
        ParsedSample whose function body holds the sample's statements

    Raises:
        SampleParseError: If the sample is not valid Python
    """
    filename = f"<sample {index}>" if index is not None else "<sample>"
    try:
        module = compile(sample.source, filename, "exec", _PARSE_FLAGS, dont_inherit=True)
        comments = read_comments(sample.source)
    except SyntaxError as exc:
        raise _parse_error(sample, index, exc.msg, exc.lineno, exc.text, exc) from exc
    except tokenize.TokenError as exc:
        raise _parse_error(sample, index, str(exc.args[0]), None, None, exc) from exc

    function = wrap_in_coroutine(module.body)
    return ParsedSample(
        sample=sample,
        function=function,
        comments=attach_trailing_comments(function.body, comments, sample.source),
    )


def wrap_in_coroutine(body: List[ast.stmt]) -> ast.AsyncFunctionDef:
    """Build ``async def __mddoctest_sample__(): <body>``."""
    function = ast.parse(f"async def {SAMPLE_FUNCTION_NAME}():\n    pass").body[0]
    if not isinstance(function, ast.AsyncFunctionDef):
        raise TypeError(f"Sample wrapper parsed to {type(function).__name__}")
    if body:
        function.body = body
    return function


def read_comments(source: str) -> List[Comment]:
    """Return every comment token of ``source`` without its leading ``#``."""
    tokens = tokenize.generate_tokens(io.StringIO(source).readline)
    return [
        Comment(text=token.string[1:], line=token.start[0], column=token.start[1])
        for token in tokens
        if token.type == tokenize.COMMENT
    ]


def attach_trailing_comments(
    body: Sequence[ast.stmt], comments: Sequence[Comment], source: str = ""
) -> CommentTable:
    """
    Map statements to the comments that trail them.

    A comment trails a statement when the statement ends before the comment
    and no other statement starts in between. Nested statements that end at
    the same point compete for the comment: a comment on that same line goes
    to the innermost one, a comment on a later line to the innermost one not
    indented deeper than the comment itself.

    Args:
        body: Top-level statements of a sample
        comments: Comments of the sample, in source order
        source: Sample text the statements were parsed from, used to turn
            the byte offsets of the AST into character columns

    Returns:
        Dictionary keyed by statement node (identity) listing its trailing
        comments in source order
    """
    statements = [
        node for stmt in body for node in ast.walk(stmt) if isinstance(node, ast.stmt)
    ]
    spans = statement_spans(statements, source)
    starts = sorted(start for start, _ in spans.values())
    table: CommentTable = {}
    for comment in comments:
        owner = _trailing_owner(spans, starts, comment)
        if owner is not None:
            table.setdefault(owner, []).append(comment)
    return table


def statement_spans(
    statements: Sequence[ast.stmt], source: str = ""
) -> Dict[ast.stmt, Tuple[Position, Position]]:
    """
    Return the start and end of each statement as (line, character column).

    ``ast`` counts columns in UTF-8 bytes while ``tokenize`` counts
    characters; comments come from ``tokenize``, so statement offsets are
    converted before the two are compared.
    """
    lines = [line.encode("utf-8") for line in source.split("\n")]
    return {
        stmt: (
            _position(lines, stmt.lineno, stmt.col_offset),
            _position(lines, stmt.end_lineno or stmt.lineno, stmt.end_col_offset or 0),
        )
        for stmt in statements
    }


def _position(lines: Sequence[bytes], lineno: int, offset: int) -> Position:
    if 0 < lineno <= len(lines):
        return (lineno, len(lines[lineno - 1][:offset].decode("utf-8")))
    return (lineno, offset)


def _trailing_owner(
    spans: Dict[ast.stmt, Tuple[Position, Position]],
    starts: Sequence[Position],
    comment: Comment,
) -> Optional[ast.stmt]:
    position = (comment.line, comment.column)
    ended = [stmt for stmt, (_, end) in spans.items() if end <= position]
    if not ended:
        return None
    last_end = max(spans[stmt][1] for stmt in ended)
    if any(last_end <= start < position for start in starts):
        return None

    # Statements sharing an end point are nested; sorting by start orders them outer to inner.
    candidates = sorted(
        (stmt for stmt in ended if spans[stmt][1] == last_end),
        key=lambda stmt: spans[stmt][0],
    )
    if comment.line == last_end[0]:
        return candidates[-1]
    fitting = [stmt for stmt in candidates if spans[stmt][0][1] <= comment.column]
    return (fitting or candidates)[-1]


def _parse_error(
    sample: Sample,
    index: Optional[int],
    reason: str,
    lineno: Optional[int],
    text: Optional[str],
    cause: Exception,
) -> SampleParseError:
    line = None
    if sample.line is not None and lineno is not None:
        # Sample text starts on the line after the opening fence.
        line = sample.line + lineno
    context = build_sample_context(sample, index)
    if text:
        context["source_line"] = text.rstrip("\n")
    title = sample.title or f"#{index if index is not None else '?'}"
    return SampleParseError(
        f"Code sample {title!r} is not valid Python: {reason}",
        title=sample.title,
        line=line,
        context=context,
        suggestions=["Fix the sample in the document; every sample must parse"],
        cause=cause,
    )

"""
Annotation detection and parsing.

Two trailing-comment forms are recognized on expression statements::

    value  # => 'expected repr'
    risky()  # ValueError: expected message

Only the first trailing comment decides whether a statement is annotated.
Every following trailing comment continues the expectation text, minus its
first character.
"""

from __future__ import annotations

import ast
import re
from typing import List, Optional, Sequence

from .errors import AnnotationError
from .models import Annotation, Comment, ErrorAnnotation, ReprAnnotation

REPR_ANNOTATION_RE = re.compile(r"^\s*=>\s")
ERROR_ANNOTATION_RE = re.compile(r"^\s*([A-Za-z]*Error):\s")

REPR = "repr"
ERROR = "error"


def classify(first_line: str) -> Optional[str]:
    """Return ``"repr"``, ``"error"`` or ``None`` for a first comment line."""
    if REPR_ANNOTATION_RE.match(first_line):
        return REPR
    if ERROR_ANNOTATION_RE.match(first_line):
        return ERROR
    return None


def find_annotation(
    stmt: ast.stmt, comments: Optional[Sequence[Comment]]
) -> Optional[Annotation]:
    """
    Detect and parse the annotation carried by a statement.

    Args:
        stmt: Statement to inspect
        comments: The statement's own trailing comments

    Returns:
        The parsed annotation, or None when the statement is not an
        expression statement or its first trailing comment is not an
        annotation
    """
    if not isinstance(stmt, ast.Expr) or not comments:
        return None
    kind = classify(comments[0].text)
    if kind is None:
        return None
    return parse_expectation([comment.text for comment in comments], kind)


def parse_expectation(lines: Sequence[str], kind: str) -> Annotation:
    """
    Assemble the expectation from trailing comment lines.

    Args:
        lines: Comment texts without the leading ``#``
        kind: ``"repr"`` or ``"error"``

    Returns:
        ReprAnnotation or ErrorAnnotation

    Raises:
        AnnotationError: If the first line does not have the shape ``kind``
            requires
    """
    first, rest = lines[0], continuation_lines(lines[1:])

    if kind == REPR:
        if not REPR_ANNOTATION_RE.match(first):
            raise AnnotationError("Repr annotation marker not found", comment=first)
        return ReprAnnotation(
            expected="\n".join([REPR_ANNOTATION_RE.sub("", first, count=1), *rest])
        )

    if kind == ERROR:
        match = ERROR_ANNOTATION_RE.match(first)
        if match is None:
            raise AnnotationError("Error annotation has no 'Name: message' prefix", comment=first)
        return ErrorAnnotation(
            name=match.group(1),
            message="\n".join([first[match.end():], *rest]),
        )

    raise AnnotationError(f"Unknown annotation kind {kind!r}", comment=first)


def continuation_lines(lines: Sequence[str]) -> List[str]:
    """Drop the first character (the conventional space after ``#``) of each line."""
    return [line[1:] for line in lines]

"""
Models flowing through the compilation pipeline.

Key Components:
    - **Sample**: One fenced code block extracted from a document
    - **Comment**: A comment token found in a sample's source
    - **ReprAnnotation** / **ErrorAnnotation**: The two expectation kinds an
      author can attach to an expression statement
    - **TestCase**: A rewritten sample ready to be registered as a case
    - **AssembledProgram**: The top-level statements of the generated module
"""

from __future__ import annotations

import ast
from dataclasses import dataclass, field
from typing import List, Optional, Union

from .base import BaseModel

DEFAULT_CASE_TITLE = "works"


@dataclass(frozen=True)
class Sample(BaseModel):
    """A code sample taken from a fenced block.

    Attributes:
        title: Text of the paragraph right before the block, if any, with a
            trailing colon removed.
        language: The fence's language tag (e.g. ``python+test``).
        source: Raw text of the block.
        line: 1-based document line of the opening fence.
    """

    title: Optional[str]
    language: str
    source: str
    line: Optional[int] = None

    @property
    def case_title(self) -> str:
        return self.title or DEFAULT_CASE_TITLE


@dataclass(frozen=True)
class Comment(BaseModel):
    """A ``#`` comment; ``text`` excludes the leading hash."""

    text: str
    line: int
    column: int


@dataclass(frozen=True)
class ReprAnnotation(BaseModel):
    """Expects ``repr(value)`` of the statement's expression to equal ``expected``."""

    expected: str


@dataclass(frozen=True)
class ErrorAnnotation(BaseModel):
    """Expects the statement's expression to raise ``name`` with ``message``."""

    name: str
    message: str


Annotation = Union[ReprAnnotation, ErrorAnnotation]


@dataclass
class TestCase(BaseModel):
    """A sample after annotation rewriting and import hoisting."""

    __test__ = False  # not a pytest class

    title: str
    body: List[ast.stmt]
    is_async: bool = True


@dataclass
class AssembledProgram(BaseModel):
    """Top-level statements of the generated module, in emission order."""

    future_imports: List[ast.stmt] = field(default_factory=list)
    preamble: List[ast.stmt] = field(default_factory=list)
    imports: List[ast.stmt] = field(default_factory=list)
    suite: List[ast.stmt] = field(default_factory=list)

    def statements(self) -> List[ast.stmt]:
        return [*self.future_imports, *self.preamble, *self.imports, *self.suite]

    def to_module(self) -> ast.Module:
        return ast.Module(body=self.statements(), type_ignores=[])

"""
Data models for the document compiler.
"""

from .base import BaseModel, ModelValue
from .sample import (
    DEFAULT_CASE_TITLE,
    Annotation,
    AssembledProgram,
    Comment,
    ErrorAnnotation,
    ReprAnnotation,
    Sample,
    TestCase,
)

__all__ = [
    "BaseModel",
    "DEFAULT_CASE_TITLE",
    "Annotation",
    "AssembledProgram",
    "Comment",
    "ErrorAnnotation",
    "ReprAnnotation",
    "Sample",
    "TestCase",
    "ModelValue",
]

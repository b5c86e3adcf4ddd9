"""
mddoctest - compile annotated Markdown code samples into pytest suites.

Fenced code blocks tagged ``python+test`` (or ``py+test``) are extracted from
a Markdown document and compiled into a Python module that registers one
suite for the document and one case per sample. Trailing comments on
expression statements become assertions:

- ``# => <repr>`` checks ``repr(value)``
- ``# <Kind>Error: <message>`` checks that the expression raises

Quick Start:
    from mddoctest import compile_file

    source = compile_file("README.md")

Or let pytest collect the documents directly; the bundled plugin is
registered through the ``pytest11`` entry point::

    pytest README.md docs/
"""

__version__ = "0.1.0"
__description__ = "Compile annotated Markdown code samples into pytest suites"

from .compiler import DocumentCompiler, compile_document, compile_file
from .config import CompileOptions, create_default_options, create_file_options
from .errors import (
    AnnotationError,
    ConfigurationError,
    ManifestError,
    MdDoctestError,
    SampleParseError,
)

__all__ = [
    "__version__",
    "DocumentCompiler",
    "compile_document",
    "compile_file",
    "CompileOptions",
    "create_default_options",
    "create_file_options",
    "MdDoctestError",
    "ConfigurationError",
    "SampleParseError",
    "AnnotationError",
    "ManifestError",
]

"""
Configuration model, validators and factory functions.
"""

from .factories import create_default_options, create_file_options
from .options import DEFAULT_LANGUAGES, DEFAULT_SUITE_NAME, CompileOptions
from .validators import validate_compile_options, validate_languages

__all__ = [
    "CompileOptions",
    "DEFAULT_LANGUAGES",
    "DEFAULT_SUITE_NAME",
    "create_default_options",
    "create_file_options",
    "validate_compile_options",
    "validate_languages",
]

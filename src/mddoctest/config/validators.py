"""
Configuration validation functions.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, List

if TYPE_CHECKING:
    from .options import CompileOptions

_LANGUAGE_TAG_RE = re.compile(r"^\S+$")


def validate_compile_options(options: "CompileOptions") -> List[str]:
    """
    Validate compile options.

    Args:
        options: Compile options to validate

    Returns:
        List of validation errors (empty if valid)
    """
    errors: List[str] = []

    if options.name is not None and not isinstance(options.name, str):
        errors.append("Suite name must be a string")

    for label, value in (("Filename", options.filename), ("Output path", options.output)):
        if value is None:
            continue
        if not isinstance(value, str):
            errors.append(f"{label} must be a string")
        elif not value.strip():
            errors.append(f"{label} cannot be whitespace only")

    errors.extend(validate_languages(options.languages))

    return errors


def validate_languages(languages: object) -> List[str]:
    """
    Validate the recognized sample language tags.

    Args:
        languages: Collection of language tags

    Returns:
        List of validation errors (empty if valid)
    """
    errors: List[str] = []

    if not languages:
        errors.append("At least one sample language must be recognized")
        return errors

    for tag in sorted(languages, key=str):  # type: ignore[call-overload]
        if not isinstance(tag, str):
            errors.append(f"Language tag must be a string, got {tag!r}")
        elif not _LANGUAGE_TAG_RE.match(tag):
            errors.append(f"Language tag cannot be empty or contain spaces: {tag!r}")

    return errors

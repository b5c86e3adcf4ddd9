"""
Factory functions for creating CompileOptions instances.
"""

from __future__ import annotations

from os import PathLike
from typing import Any, Iterable, Union

from .options import DEFAULT_LANGUAGES, CompileOptions


def create_default_options(**overrides: Any) -> CompileOptions:
    """
    Create CompileOptions with the default language allow-list.

    Args:
        **overrides: Fields to set on the options

    Returns:
        Validated CompileOptions instance

    Example:
        >>> options = create_default_options(name="README")
    """
    options = CompileOptions(**overrides)
    options.validate()
    return options


def create_file_options(
    path: Union[str, "PathLike[str]"],
    extra_languages: Iterable[str] = (),
    **overrides: Any,
) -> CompileOptions:
    """
    Create CompileOptions for a document on disk.

    Args:
        path: Path of the Markdown document; becomes ``filename``
        extra_languages: Language tags recognized in addition to the defaults
        **overrides: Additional fields to override

    Returns:
        Validated CompileOptions instance

    Example:
        >>> options = create_file_options("docs/usage.md", ["pycon+test"])
    """
    languages = frozenset(overrides.pop("languages", DEFAULT_LANGUAGES))
    languages |= frozenset(extra_languages)
    return create_default_options(
        filename=overrides.pop("filename", str(path)),
        languages=languages,
        **overrides,
    )

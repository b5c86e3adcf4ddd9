"""
Compile options model.

Key Components:
    - **CompileOptions**: What the compiler needs besides the document text:
      the suite title override, the document's path and the recognized
      sample languages.

Example:
    >>> from mddoctest.config import CompileOptions
    >>> options = CompileOptions(filename="docs/README.md")
    >>> options.validate()
    >>> options.suite_title
    'docs/README.md'
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Optional

from ..errors import ConfigurationError
from ..models.base import BaseModel
from .validators import validate_compile_options

DEFAULT_LANGUAGES: FrozenSet[str] = frozenset({"python+test", "py+test"})
DEFAULT_SUITE_NAME = "Suite"


@dataclass
class CompileOptions(BaseModel):
    """Options for one compilation.

    Attributes:
        name: Suite title override.
        filename: Path of the document. Used as the suite title fallback and
            as the anchor for package manifest lookups.
        output: Path the generated module is written to. Local package
            locations are computed relative to it; without it they are
            relative to ``filename``.
        languages: Fence language tags that mark a block as a test sample.
        verbose: Whether compiler logging goes to the console.
    """

    name: Optional[str] = None
    filename: Optional[str] = None
    output: Optional[str] = None
    languages: FrozenSet[str] = DEFAULT_LANGUAGES
    verbose: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.languages, frozenset):
            self.languages = frozenset(self.languages)

    def validate(self) -> None:
        """Raise ConfigurationError listing every problem found."""
        errors = validate_compile_options(self)
        if errors:
            raise ConfigurationError(
                "Invalid compile options: " + "; ".join(errors),
                context={"filename": self.filename, "name": self.name},
                suggestions=["Check the values passed to compile_document()"],
            )

    @property
    def suite_title(self) -> str:
        return self.name or self.filename or DEFAULT_SUITE_NAME

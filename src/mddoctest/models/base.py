"""
Base class for the compiler's data models.

Key Components:
    - **BaseModel**: Mixin for dataclass models with common functionality
      for validation, serialization, and representation

Example:
    >>> from dataclasses import dataclass
    >>> from mddoctest.models.base import BaseModel
    >>>
    >>> @dataclass(frozen=True)
    ... class Fence(BaseModel):
    ...     language: str
    ...
    ...     def validate(self) -> None:
    ...         if not self.language:
    ...             raise ValueError("language required")
    >>>
    >>> Fence(language="python+test").to_json()
"""

from __future__ import annotations

import json
from abc import ABC
from dataclasses import fields
from typing import Dict, List, Union

# Values a model field can serialize to.
ModelValue = Union[str, int, float, bool, List[str], Dict[str, str], None]


class BaseModel(ABC):
    """
    Base class for compiler models with common functionality.

    Subclasses are dataclasses (frozen or not). The base itself declares no
    fields so that frozen and mutable models can share it.
    """

    def validate(self) -> None:
        """Validate the model.

        The default implementation accepts every instance; models with
        constraints override it and raise an error from ``mddoctest.errors``.
        """

    def to_dict(self) -> Dict[str, ModelValue]:
        """Convert model to dictionary.

        Nested models that have a `to_dict` method are converted
        recursively.

        Returns:
            Dictionary representation of the model.
        """
        result: Dict[str, ModelValue] = {}
        for field_info in fields(self):  # type: ignore[arg-type]
            value = getattr(self, field_info.name)
            if hasattr(value, "to_dict"):
                result[field_info.name] = value.to_dict()
            else:
                result[field_info.name] = value
        return result

    def to_json(self) -> str:
        """Convert model to a JSON string with 2-space indentation."""
        return json.dumps(self.to_dict(), default=str, indent=2)

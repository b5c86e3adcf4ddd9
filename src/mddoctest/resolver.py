"""
Module reference remapper.

A document living inside a package's own source tree may import that
package by its published name. The resolver maps such imports to a
location relative to the document, so the generated suite exercises the
local checkout instead of whatever distribution happens to be installed.

The nearest ``pyproject.toml`` above the document decides the package name.
Lookups are cached per directory in a ``ManifestCache`` owned by a single
compilation.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Union

try:
    import tomllib  # py311+
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # type: ignore[no-redef]

from .errors import ManifestError
from .logging import CompilerLogger

MANIFEST_FILENAME = "pyproject.toml"

_NAME_SEPARATORS_RE = re.compile(r"[-_.]+")

PathType = Union[str, "os.PathLike[str]"]


@dataclass(frozen=True)
class Manifest:
    """A package manifest: its declared name and where it lives."""

    name: str
    path: Path

    @property
    def directory(self) -> Path:
        return self.path.parent

    @property
    def import_name(self) -> str:
        """The distribution name as a Python module name (``my-pkg`` -> ``my_pkg``)."""
        return normalize_package_name(self.name)


def normalize_package_name(name: str) -> str:
    return _NAME_SEPARATORS_RE.sub("_", name).lower()


def read_manifest(path: Path) -> Optional[Manifest]:
    """
    Read a ``pyproject.toml``.

    Args:
        path: Manifest file

    Returns:
        Manifest, or None when it declares no package name

    Raises:
        ManifestError: If the file cannot be read or is not valid TOML
    """
    try:
        with path.open("rb") as fp:
            data = tomllib.load(fp)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ManifestError(
            f"Cannot read package manifest {path}: {exc}",
            path=str(path),
            suggestions=["Fix or remove the broken pyproject.toml"],
            cause=exc,
        ) from exc

    name = data.get("project", {}).get("name")
    if not isinstance(name, str):
        name = data.get("tool", {}).get("poetry", {}).get("name")
    if not isinstance(name, str) or not name:
        return None
    return Manifest(name=name, path=path)


def find_manifest(directory: Path) -> Optional[Manifest]:
    """Return the nearest manifest at or above ``directory``."""
    for candidate in (directory, *directory.parents):
        path = candidate / MANIFEST_FILENAME
        if path.is_file():
            return read_manifest(path)
    return None


class ManifestCache:
    """
    Per-directory manifest lookups for one compilation.

    Absence is cached too. Entries are never invalidated; a new cache is
    created for every compilation.
    """

    def __init__(self) -> None:
        self._entries: Dict[Path, Optional[Manifest]] = {}
        self.hits = 0
        self.misses = 0

    def lookup(self, directory: Path) -> Optional[Manifest]:
        if directory in self._entries:
            self.hits += 1
            return self._entries[directory]
        self.misses += 1
        manifest = find_manifest(directory)
        self._entries[directory] = manifest
        return manifest

    def __len__(self) -> int:
        return len(self._entries)


class ModuleResolver:
    """Maps package self-imports to locations relative to the generated module."""

    def __init__(
        self,
        cache: Optional[ManifestCache] = None,
        logger: Optional[CompilerLogger] = None,
    ):
        """
        Initialize the resolver.

        Args:
            cache: Manifest cache; a fresh one by default
            logger: Optional logger instance
        """
        self.cache = cache if cache is not None else ManifestCache()
        self.logger = logger or CompilerLogger()

    def resolve(
        self,
        specifier: str,
        filename: Optional[PathType],
        anchor: Optional[PathType] = None,
    ) -> str:
        """
        Resolve an absolute module specifier imported from ``filename``.

        Args:
            specifier: Dotted module name (``pkg`` or ``pkg.sub.mod``)
            filename: Path of the importing document; None disables remapping
            anchor: Path the location is made relative to; the document
                itself by default, the output file when the generated module
                is written elsewhere

        Returns:
            The relative location of the enclosing package's manifest
            directory (``..``) for ``pkg``, that location plus the
            submodule path (``../sub/mod``) for ``pkg.sub.mod``, and the
            specifier unchanged for anything else
        """
        if filename is None:
            return specifier
        directory = Path(os.path.abspath(filename)).parent
        manifest = self.cache.lookup(directory)
        if manifest is None:
            return specifier

        start = Path(os.path.abspath(anchor)).parent if anchor is not None else directory
        package = manifest.import_name
        if specifier == package:
            location = _relative_location(manifest.directory, start)
        elif specifier.startswith(package + "."):
            rest = specifier[len(package) + 1:].replace(".", "/")
            location = f"{_relative_location(manifest.directory, start)}/{rest}"
        else:
            return specifier

        self.logger.debug("Remapped import", module=specifier, location=location)
        return location


def _relative_location(target: Path, start: Path) -> str:
    return Path(os.path.relpath(target, start)).as_posix() or "."

"""
Runtime support for compiled suites.

Generated modules import this module as ``__mddoctest__`` and call into it
to register their suite and cases, to check annotated expectations and to
load the enclosing package from the local checkout.
"""

from __future__ import annotations

import asyncio
import contextlib
import importlib
import importlib.util
import inspect
import os
import sys
from dataclasses import dataclass, field
from types import ModuleType
from typing import Any, Callable, Iterator, List, Optional, Tuple

_describing: List["Suite"] = []


@dataclass
class Case:
    """One registered test case."""

    __test__ = False

    title: str
    function: Callable[[], Any]

    def run(self) -> None:
        """Run the case to completion on a fresh event loop."""
        if inspect.iscoroutinefunction(self.function):
            asyncio.run(self.function())
        else:
            self.function()


@dataclass
class Suite:
    """A document's suite: its title and cases in registration order."""

    __test__ = False

    title: str
    cases: List[Case] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.cases)

    def __iter__(self):
        return iter(self.cases)

    def run(self) -> None:
        for case in self.cases:
            case.run()


def describe(title: str) -> Callable[[Callable[[], Any]], Suite]:
    """
    Register a suite.

    The decorated function is called immediately; every ``it`` it executes
    adds a case to the suite. The decorated name is bound to the Suite.
    """

    def decorator(function: Callable[[], Any]) -> Suite:
        suite = Suite(title)
        _describing.append(suite)
        try:
            function()
        finally:
            _describing.pop()
        return suite

    return decorator


def it(title: str) -> Callable[[Callable[[], Any]], Callable[[], Any]]:
    """Register the decorated function as a case of the current suite."""

    def decorator(function: Callable[[], Any]) -> Callable[[], Any]:
        if not _describing:
            raise RuntimeError(f"Case {title!r} registered outside of a suite")
        _describing[-1].cases.append(Case(title, function))
        return function

    return decorator


def assert_repr(value: Any, expected: str) -> None:
    """Check that ``repr(value)`` equals ``expected``."""
    actual = repr(value)
    if actual != expected:
        raise AssertionError(f"Expected {expected}, got {actual}")


async def assert_error(thunk: Callable[[], Any], name: str, message: str) -> None:
    """
    Check that evaluating ``thunk`` raises ``name`` with ``message``.

    The thunk's result is awaited for as long as it is awaitable, so an
    expression returning a coroutine is checked against what the coroutine
    raises.
    """
    try:
        result = thunk()
        while inspect.isawaitable(result):
            result = await result
    except Exception as exc:
        _check_error(exc, name, message)
        return
    raise AssertionError(f"Expected {name}: {message}, but nothing was raised")


def assert_error_sync(thunk: Callable[[], Any], name: str, message: str) -> None:
    """``assert_error`` for places where awaiting is not possible."""
    try:
        thunk()
    except Exception as exc:
        _check_error(exc, name, message)
        return
    raise AssertionError(f"Expected {name}: {message}, but nothing was raised")


@contextlib.contextmanager
def expect_error(name: str, message: str) -> Iterator[None]:
    """Check that the enclosed block raises ``name`` with ``message``."""
    try:
        yield
    except Exception as exc:
        _check_error(exc, name, message)
        return
    raise AssertionError(f"Expected {name}: {message}, but nothing was raised")


def _check_error(exc: Exception, name: str, message: str) -> None:
    actual_name = type(exc).__name__
    actual_message = str(exc)
    if actual_name != name or actual_message != message:
        raise AssertionError(
            f"Expected {name}: {message}, got {actual_name}: {actual_message}"
        ) from exc


def load_local(module: str, location: str, anchor: str) -> ModuleType:
    """
    Import ``module`` from the package checkout at ``location``.

    Args:
        module: Dotted module name as written in the sample
        location: Path relative to ``anchor``'s directory; for a submodule
            it continues below the package root (``../sub/mod``)
        anchor: The document (or generated module) path

    Returns:
        The imported module

    Raises:
        ModuleNotFoundError: If no package named like ``module`` is found
    """
    parts = module.split(".")
    top = parts[0]
    base = os.path.dirname(os.path.abspath(anchor))
    root = os.path.normpath(os.path.join(base, location))
    for _ in parts[1:]:
        root = os.path.dirname(root)

    origin, search_path = _find_package(root, top)
    if origin is None:
        raise ModuleNotFoundError(f"No module named {top!r} under {root}", name=top)

    current = sys.modules.get(top)
    if current is None or not _loaded_from(current, origin):
        _evict(top)
        spec = importlib.util.spec_from_file_location(
            top, origin, submodule_search_locations=search_path
        )
        if spec is None or spec.loader is None:
            raise ModuleNotFoundError(f"Cannot load {origin}", name=top)
        loaded = importlib.util.module_from_spec(spec)
        sys.modules[top] = loaded
        try:
            spec.loader.exec_module(loaded)
        except BaseException:
            sys.modules.pop(top, None)
            raise
    return importlib.import_module(module)


def _find_package(root: str, top: str) -> Tuple[Optional[str], Optional[List[str]]]:
    candidates = [os.path.join(root, "src", top), os.path.join(root, top), root]
    for directory in candidates:
        init = os.path.join(directory, "__init__.py")
        if os.path.isfile(init):
            return init, [directory]
    for directory in (os.path.join(root, "src"), root):
        single = os.path.join(directory, f"{top}.py")
        if os.path.isfile(single):
            return single, None
    return None, None


def _loaded_from(module: ModuleType, origin: str) -> bool:
    path = getattr(module, "__file__", None)
    return path is not None and os.path.abspath(path) == os.path.abspath(origin)


def _evict(top: str) -> None:
    for name in [n for n in sys.modules if n == top or n.startswith(top + ".")]:
        del sys.modules[name]


__all__ = [
    "Case",
    "Suite",
    "assert_error",
    "assert_error_sync",
    "assert_repr",
    "describe",
    "expect_error",
    "it",
    "load_local",
]

"""
pytest plugin collecting Markdown documents.

Every document matching ``mddoctest_patterns`` is compiled, the generated
module is executed with ``__file__`` pointing at the document, and each case
of the registered suite becomes a pytest item.
"""

from __future__ import annotations

import fnmatch
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

import pytest

from .compiler import compile_document
from .config import create_file_options
from .errors import MdDoctestError
from .runtime import Case, Suite

DEFAULT_PATTERNS = ["*.md"]


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("mddoctest", "Markdown code sample tests")
    group.addoption(
        "--mddoctest-disable",
        action="store_true",
        default=False,
        help="Do not collect Markdown documents.",
    )
    parser.addini(
        "mddoctest_patterns",
        type="args",
        default=DEFAULT_PATTERNS,
        help="Glob patterns of Markdown documents to collect (default: *.md).",
    )
    parser.addini(
        "mddoctest_languages",
        type="linelist",
        default=[],
        help="Fence language tags to compile in addition to python+test and py+test.",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers", "mddoctest: cases compiled from Markdown code samples"
    )


def pytest_collect_file(
    file_path: Path, parent: pytest.Collector
) -> Optional["MarkdownFile"]:
    config = parent.config
    if config.getoption("mddoctest_disable"):
        return None
    patterns = config.getini("mddoctest_patterns") or DEFAULT_PATTERNS
    if any(fnmatch.fnmatch(file_path.name, pattern) for pattern in patterns):
        return MarkdownFile.from_parent(parent, path=file_path)
    return None


class MarkdownFile(pytest.File):
    """A Markdown document compiled into one suite."""

    def collect(self) -> Iterator["MarkdownCase"]:
        namespace = self._execute(self._compile())
        seen: Dict[str, int] = {}
        for suite in _suites(namespace):
            for case in suite:
                name = " ".join(case.title.split())
                seen[name] = seen.get(name, 0) + 1
                if seen[name] > 1:
                    name = f"{name} [{seen[name]}]"
                yield MarkdownCase.from_parent(self, name=name, suite=suite, case=case)

    def _compile(self) -> str:
        languages = self.config.getini("mddoctest_languages")
        try:
            options = create_file_options(self.path, extra_languages=languages)
            source = self.path.read_text(encoding="utf-8")
            return compile_document(source, options)
        except MdDoctestError as exc:
            raise self.CollectError(f"{self.path}: {exc}") from exc

    def _execute(self, code: str) -> Dict[str, Any]:
        namespace: Dict[str, Any] = {
            "__name__": f"mddoctest_{self.path.stem}",
            "__file__": str(self.path),
        }
        exec(compile(code, str(self.path), "exec"), namespace)
        return namespace


class MarkdownCase(pytest.Item):
    """One case of a compiled document."""

    def __init__(self, *, suite: Suite, case: Case, **kwargs: Any):
        super().__init__(**kwargs)
        self.suite = suite
        self.case = case
        self.add_marker("mddoctest")

    def runtest(self) -> None:
        self.case.run()

    def repr_failure(self, excinfo: pytest.ExceptionInfo[BaseException], style=None):
        if isinstance(excinfo.value, AssertionError):
            return "\n".join(
                [
                    f"{self.suite.title} > {self.case.title} failed",
                    str(excinfo.value),
                ]
            )
        return super().repr_failure(excinfo, style=style)

    def reportinfo(self) -> Tuple[Path, Optional[int], str]:
        return self.path, None, f"{self.suite.title} > {self.case.title}"


def _suites(namespace: Dict[str, Any]) -> List[Suite]:
    return [value for value in namespace.values() if isinstance(value, Suite)]

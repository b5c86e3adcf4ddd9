"""
Shared pytest configuration and fixtures for the compiler tests.
"""

import textwrap
from pathlib import Path

import pytest

from mddoctest.models import Sample
from mddoctest.runtime import Suite

pytest_plugins = ["pytester"]

ARITHMETIC_DOCUMENT = textwrap.dedent(
    """\
    # Arithmetic

    Adding numbers:

    ```python+test
    total = 1 + 1
    total  # => 2
    ```

    Dividing by zero:

    ```py+test
    1 / 0  # ZeroDivisionError: division by zero
    ```

    Not a test:

    ```python
    this is not python
    ```
    """
)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests")


@pytest.fixture
def arithmetic_document():
    """Markdown document with two test samples and one plain block."""
    return ARITHMETIC_DOCUMENT


@pytest.fixture
def make_sample():
    """Factory building a Sample from dedented source."""

    def _make(source, title=None, language="python+test", line=None):
        return Sample(
            title=title,
            language=language,
            source=textwrap.dedent(source),
            line=line,
        )

    return _make


@pytest.fixture
def markdown():
    """Dedent a Markdown literal."""
    return textwrap.dedent


@pytest.fixture
def load_suite(tmp_path):
    """Execute generated code and return the suite it registers."""

    def _load(code, anchor=None):
        anchor = Path(anchor) if anchor is not None else tmp_path / "document.md"
        namespace = {"__name__": "generated_suite", "__file__": str(anchor)}
        exec(compile(code, str(anchor), "exec"), namespace)
        suites = [value for value in namespace.values() if isinstance(value, Suite)]
        assert len(suites) == 1
        return suites[0]

    return _load


@pytest.fixture
def package_tree(tmp_path):
    """A package checkout with a manifest, sources under src/ and a docs folder."""
    root = tmp_path / "pkg"
    (root / "docs").mkdir(parents=True)
    package = root / "src" / "my_pkg"
    (package / "sub").mkdir(parents=True)
    (root / "pyproject.toml").write_text(
        '[project]\nname = "my-pkg"\nversion = "0.0.1"\n', encoding="utf-8"
    )
    (package / "__init__.py").write_text(
        'GREETING = "hello from the checkout"\n', encoding="utf-8"
    )
    (package / "sub" / "__init__.py").write_text("", encoding="utf-8")
    (package / "sub" / "mod.py").write_text(
        "def double(value):\n    return value * 2\n", encoding="utf-8"
    )
    return root

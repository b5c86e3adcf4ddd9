"""
End-to-end tests for document compilation.
"""

import ast
import logging

import pytest

from mddoctest import DocumentCompiler, compile_document, compile_file
from mddoctest.config import CompileOptions
from mddoctest.errors import ConfigurationError, SampleParseError


class TestCompileDocument:
    """Test cases for compile_document."""

    def test_case_per_sample(self, arithmetic_document, load_suite):
        """Each qualifying block becomes one case."""
        suite = load_suite(compile_document(arithmetic_document, {"name": "Arithmetic"}))

        assert suite.title == "Arithmetic"
        assert [case.title for case in suite] == ["Adding numbers", "Dividing by zero"]

    def test_generated_suite_passes(self, arithmetic_document, load_suite):
        """Correct annotations hold when the cases run."""
        suite = load_suite(compile_document(arithmetic_document))

        suite.run()

    def test_wrong_repr_fails(self, markdown, load_suite):
        """A mismatching repr annotation fails its case."""
        source = markdown(
            """\
            Wrong sum:

            ```python+test
            1 + 1  # => 3
            ```
            """
        )
        (case,) = load_suite(compile_document(source)).cases

        with pytest.raises(AssertionError, match="Expected 3, got 2"):
            case.run()

    def test_wrong_error_fails(self, markdown, load_suite):
        """An error annotation fails when a different error is raised."""
        source = markdown(
            """\
            ```python+test
            {}["missing"]  # ValueError: missing
            ```
            """
        )
        (case,) = load_suite(compile_document(source)).cases

        with pytest.raises(AssertionError, match="got KeyError: 'missing'"):
            case.run()

    def test_async_samples(self, markdown, load_suite):
        """Samples may await and annotate awaited results."""
        source = markdown(
            """\
            Coroutines:

            ```python+test
            import asyncio

            async def answer():
                await asyncio.sleep(0)
                return 42

            await answer()  # => 42

            async def fail():
                raise RuntimeError("no")

            fail()  # RuntimeError: no
            ```
            """
        )

        load_suite(compile_document(source)).run()

    def test_class_scope_error_annotation(self, markdown, load_suite):
        """Error annotations in a class body see the names bound there."""
        source = markdown(
            """\
            ```python+test
            class Settings:
                retries = 1
                retries.nope  # AttributeError: 'int' object has no attribute 'nope'

            Settings.retries  # => 1
            ```
            """
        )

        load_suite(compile_document(source)).run()

    def test_non_ascii_annotation_is_checked(self, markdown, load_suite):
        """Annotations after non-ASCII text are asserted, not dropped."""
        source = markdown(
            """\
            ```python+test
            "日本"  # => 'WRONG'
            ```
            """
        )
        code = compile_document(source)
        (case,) = load_suite(code).cases

        assert "assert_repr('日本', \"'WRONG'\")" in code
        with pytest.raises(AssertionError, match="Expected 'WRONG', got '日本'"):
            case.run()

    def test_default_titles(self, markdown, load_suite):
        """Untitled samples are called works; untitled suites Suite."""
        source = markdown(
            """\
            ```python+test
            x = 1
            ```
            """
        )
        suite = load_suite(compile_document(source))

        assert suite.title == "Suite"
        assert [case.title for case in suite] == ["works"]

    def test_filename_is_suite_title(self, load_suite):
        """The filename is the fallback suite title."""
        code = compile_document("", {"filename": "docs/guide.md"})

        assert load_suite(code).title == "docs/guide.md"

    def test_empty_document(self, load_suite):
        """A document without samples registers an empty suite."""
        suite = load_suite(compile_document("Nothing here.\n"))

        assert len(suite) == 0

    def test_unannotated_sample_has_no_runtime_calls(self, markdown):
        """Only registration uses the runtime when nothing is annotated."""
        source = markdown(
            """\
            ```python+test
            x = 1
            y = x + 1
            ```
            """
        )
        code = compile_document(source)

        assert "assert_" not in code
        assert "x = 1\n        y = x + 1" in code

    def test_imports_hoisted_to_module(self, markdown):
        """Sample imports are emitted at module level, once per occurrence."""
        source = markdown(
            """\
            ```python+test
            import json
            json.dumps([])  # => '[]'
            ```

            ```python+test
            from __future__ import annotations
            ```
            """
        )
        code = compile_document(source)
        module = ast.parse(code)

        assert ast.unparse(module.body[0]) == "from __future__ import annotations"
        assert "import json" in [ast.unparse(stmt) for stmt in module.body]

    def test_output_is_deterministic(self, arithmetic_document):
        """Compiling the same input twice gives identical text."""
        first = compile_document(arithmetic_document, {"name": "A"})
        second = compile_document(arithmetic_document, {"name": "A"})

        assert first == second

    def test_parse_error_is_fatal(self, markdown):
        """A broken sample aborts compilation."""
        source = markdown(
            """\
            Fine:

            ```python+test
            x = 1
            ```

            Broken:

            ```python+test
            def (:
            ```
            """
        )

        with pytest.raises(SampleParseError) as excinfo:
            compile_document(source)

        assert excinfo.value.title == "Broken"
        assert excinfo.value.line == 10

    def test_invalid_options(self):
        """Invalid options are rejected before compiling."""
        with pytest.raises(ConfigurationError):
            compile_document("", {"languages": []})

    def test_custom_languages(self, markdown, load_suite):
        """Options can change which blocks are samples."""
        source = markdown(
            """\
            ```pycon+test
            x = 1
            ```
            """
        )

        suite = load_suite(compile_document(source, CompileOptions(languages={"pycon+test"})))

        assert len(suite) == 1


class TestCompileFile:
    """Test cases for compile_file and local package imports."""

    def test_compile_file(self, tmp_path, arithmetic_document, load_suite):
        """The file path becomes the suite title."""
        path = tmp_path / "arith.md"
        path.write_text(arithmetic_document, encoding="utf-8")

        suite = load_suite(compile_file(path), anchor=path)

        assert suite.title == str(path)
        assert len(suite) == 2

    def test_self_import_uses_checkout(self, package_tree, markdown, load_suite):
        """Documents inside a package import its local sources."""
        document = package_tree / "docs" / "guide.md"
        document.write_text(
            markdown(
                """\
                Greeting:

                ```python+test
                import my_pkg
                from my_pkg.sub.mod import double
                my_pkg.GREETING  # => 'hello from the checkout'
                double(21)  # => 42
                ```
                """
            ),
            encoding="utf-8",
        )

        suite = load_suite(compile_file(document), anchor=document)

        suite.run()


class TestDocumentCompiler:
    """Test cases for the DocumentCompiler facade."""

    def test_scan(self, arithmetic_document):
        """scan lists the samples without compiling."""
        samples = DocumentCompiler().scan(arithmetic_document)

        assert len(samples) == 2

    def test_logs_phases(self, arithmetic_document, caplog):
        """Each phase reports its counts at INFO level."""
        with caplog.at_level(logging.INFO, logger="mddoctest"):
            DocumentCompiler().compile(arithmetic_document)

        messages = [record.getMessage() for record in caplog.records]
        assert "Scan complete (samples=2)" in messages
        assert "Rewrite complete (annotations=2, imports=0)" in messages

"""
Document compiler.

Runs the whole pipeline for one document: scan the Markdown for samples,
parse each sample, rewrite annotations while hoisting imports, assemble the
suite module and generate its source.

Example:
    >>> from mddoctest import compile_document
    >>> source = compile_document(
    ...     "Adding numbers:\\n\\n```python+test\\n1 + 1  # => 2\\n```\\n",
    ...     {"name": "arithmetic"},
    ... )
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Mapping, Optional, Union

from .assembler import assemble_program
from .codegen import generate_code
from .config import CompileOptions, create_file_options
from .logging import CompilerLogger
from .models import Sample, TestCase
from .parser import parse_sample
from .resolver import ManifestCache, ModuleResolver, PathType
from .rewriter import AnnotationRewriter
from .scanner import scan_document

OptionsType = Union[CompileOptions, Mapping[str, Any], None]


class DocumentCompiler:
    """
    Compiles Markdown documents into pytest-runnable suite modules.

    Each call to :meth:`compile` is independent: the rewriter state and the
    manifest cache are created per call.
    """

    def __init__(
        self,
        options: OptionsType = None,
        logger: Optional[CompilerLogger] = None,
    ):
        """
        Initialize the compiler.

        Args:
            options: CompileOptions or a mapping of its fields
            logger: Optional logger instance

        Raises:
            ConfigurationError: If the options are invalid
        """
        self.options = coerce_options(options)
        self.logger = logger or CompilerLogger(verbose=self.options.verbose)

    def scan(self, source: str) -> List[Sample]:
        """Extract the samples of ``source`` without compiling them."""
        return scan_document(source, self.options.languages)

    def compile(self, source: str) -> str:
        """
        Compile a document.

        Args:
            source: Markdown text

        Returns:
            Generated Python source

        Raises:
            SampleParseError: If any sample is not valid Python
            ManifestError: If an enclosing pyproject.toml cannot be read
        """
        options = self.options
        with self.logger.log_context(f"compile {options.suite_title}"):
            with self.logger.time_operation("scan"):
                samples = self.scan(source)
            self.logger.phase_complete("Scan", samples=len(samples))

            rewriter = AnnotationRewriter(logger=self.logger)
            cases: List[TestCase] = []
            with self.logger.time_operation("rewrite"):
                for index, sample in enumerate(samples):
                    parsed = parse_sample(sample, index)
                    cases.append(
                        TestCase(
                            title=sample.case_title,
                            body=rewriter.rewrite(parsed.body, parsed.comments),
                        )
                    )
            self.logger.phase_complete(
                "Rewrite",
                annotations=rewriter.annotation_count,
                imports=len(rewriter.hoisted_imports),
            )

            program = assemble_program(
                cases, rewriter.hoisted_imports, options.suite_title
            )
            cache = ManifestCache()
            resolver = ModuleResolver(cache, logger=self.logger)
            with self.logger.time_operation("generate"):
                code = generate_code(
                    program, resolver, options.filename, anchor=options.output
                )
            self.logger.phase_complete("Generate", manifest_lookups=cache.misses)
        return code


def coerce_options(options: OptionsType) -> CompileOptions:
    """Accept CompileOptions, a mapping of its fields, or None."""
    if options is None:
        options = CompileOptions()
    elif not isinstance(options, CompileOptions):
        options = CompileOptions(**dict(options))
    options.validate()
    return options


def compile_document(source: str, options: OptionsType = None) -> str:
    """
    Compile Markdown text into the source of a test suite module.

    Args:
        source: Markdown text
        options: CompileOptions or a mapping with ``name``/``filename``/
            ``output``/``languages``/``verbose``

    Returns:
        Generated Python source
    """
    return DocumentCompiler(options).compile(source)


def compile_file(path: PathType, **overrides: Any) -> str:
    """
    Compile a Markdown file.

    Args:
        path: Document path; becomes the ``filename`` option
        **overrides: Other CompileOptions fields

    Returns:
        Generated Python source
    """
    source = Path(path).read_text(encoding="utf-8")
    return compile_document(source, create_file_options(path, **overrides))


__all__ = [
    "DocumentCompiler",
    "coerce_options",
    "compile_document",
    "compile_file",
]

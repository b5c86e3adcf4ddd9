"""
Tests for the compiler error hierarchy.
"""

from mddoctest.errors import (
    AnnotationError,
    ConfigurationError,
    ErrorCategory,
    ErrorSeverity,
    ManifestError,
    MdDoctestError,
    SampleParseError,
    build_sample_context,
)
from mddoctest.models import Sample


class TestMdDoctestError:
    """Test cases for the base error."""

    def test_string_form(self):
        """The string form includes code, context and suggestions."""
        error = MdDoctestError(
            "Something failed",
            error_code="E1",
            context={"sample": "demo"},
            suggestions=["Try again", "Check input"],
        )

        assert str(error) == (
            "Something failed | [E1] | Context: sample=demo"
            " | Suggestions: Try again; Check input"
        )

    def test_plain_message(self):
        """Without extras only the message is shown."""
        assert str(MdDoctestError("plain")) == "plain"

    def test_to_dict(self):
        """Errors serialize with enum values and the cause text."""
        cause = ValueError("root")
        error = MdDoctestError(
            "failed",
            category=ErrorCategory.PARSE,
            severity=ErrorSeverity.HIGH,
            cause=cause,
        )

        data = error.to_dict()

        assert data["category"] == "parse"
        assert data["severity"] == "high"
        assert data["cause"] == "root"
        assert data["timestamp"] is not None


class TestSubclasses:
    """Test cases for the specific errors."""

    def test_hierarchy(self):
        """All compiler errors share the base class."""
        for cls in (ConfigurationError, SampleParseError, AnnotationError, ManifestError):
            assert issubclass(cls, MdDoctestError)

    def test_configuration_error(self):
        """Configuration errors default to medium severity."""
        error = ConfigurationError("bad options")

        assert error.category == ErrorCategory.CONFIGURATION
        assert error.severity == ErrorSeverity.MEDIUM

    def test_sample_parse_error_context(self):
        """Title and line are copied into the context."""
        error = SampleParseError("broken", title="Demo", line=7)

        assert error.context == {"sample": "Demo", "line": 7}
        assert error.category == ErrorCategory.PARSE

    def test_annotation_error_is_critical(self):
        """Annotation errors signal a broken invariant."""
        error = AnnotationError("mismatch", comment=" => x")

        assert error.severity == ErrorSeverity.CRITICAL
        assert error.context["comment"] == " => x"

    def test_manifest_error_path(self):
        """The manifest path is part of the context."""
        error = ManifestError("unreadable", path="/p/pyproject.toml")

        assert error.context["manifest"] == "/p/pyproject.toml"
        assert error.category == ErrorCategory.RESOLUTION


class TestBuildSampleContext:
    """Test cases for build_sample_context."""

    def test_full_context(self):
        """Language, title, line and index are included."""
        sample = Sample(title="Demo", language="py+test", source="", line=4)

        assert build_sample_context(sample, 2) == {
            "language": "py+test",
            "sample": "Demo",
            "line": 4,
            "index": 2,
        }

    def test_untitled_sample(self):
        """Missing values are left out."""
        sample = Sample(title=None, language="python+test", source="")

        assert build_sample_context(sample) == {"language": "python+test"}

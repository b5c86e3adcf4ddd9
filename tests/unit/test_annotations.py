"""
Tests for annotation detection and parsing.
"""

import ast

import pytest

from mddoctest.annotations import (
    ERROR,
    REPR,
    classify,
    continuation_lines,
    find_annotation,
    parse_expectation,
)
from mddoctest.errors import AnnotationError
from mddoctest.models import Comment, ErrorAnnotation, ReprAnnotation


def _comments(*texts):
    return [Comment(text=text, line=index + 1, column=0) for index, text in enumerate(texts)]


def _statement(source):
    return ast.parse(source).body[0]


class TestClassify:
    """Test cases for classify."""

    @pytest.mark.parametrize(
        "text", [" => 1", "=> 'x'", "   =>  spaced", " =>\tTab"]
    )
    def test_repr_comments(self, text):
        """An arrow followed by whitespace marks a repr annotation."""
        assert classify(text) == REPR

    @pytest.mark.parametrize(
        "text", [" TypeError: bad input", "Error: plain", " KeyError: 'k'"]
    )
    def test_error_comments(self, text):
        """A name ending in Error, a colon and whitespace mark an error annotation."""
        assert classify(text) == ERROR

    @pytest.mark.parametrize(
        "text",
        [
            " =>no space",
            " just a note",
            " TypeError:missing space",
            " Exception: not an Error name",
            " Os2Error: digits are not allowed",
            "",
        ],
    )
    def test_plain_comments(self, text):
        """Anything else is an ordinary comment."""
        assert classify(text) is None


class TestParseExpectation:
    """Test cases for parse_expectation."""

    def test_repr_single_line(self):
        """The text after the marker is the expected repr."""
        assert parse_expectation([' => "hello"'], REPR) == ReprAnnotation('"hello"')

    def test_repr_continuation(self):
        """Continuation lines lose their first character and join with newlines."""
        annotation = parse_expectation([" => 'a", " b", "c'"], REPR)

        assert annotation == ReprAnnotation("'a\nb\n'")

    def test_error(self):
        """The error name and message are split at the colon."""
        annotation = parse_expectation([" TypeError: bad input"], ERROR)

        assert annotation == ErrorAnnotation(name="TypeError", message="bad input")

    def test_error_continuation(self):
        """Error messages may span several comment lines."""
        annotation = parse_expectation([" ValueError: first", " second"], ERROR)

        assert annotation.message == "first\nsecond"

    def test_mismatched_kind_raises(self):
        """Parsing a line of the wrong kind is an invariant violation."""
        with pytest.raises(AnnotationError) as excinfo:
            parse_expectation([" just a note"], REPR)

        assert excinfo.value.error_code == "E200"
        assert excinfo.value.comment == " just a note"

    def test_unknown_kind_raises(self):
        """Only the two known kinds are accepted."""
        with pytest.raises(AnnotationError):
            parse_expectation([" => 1"], "bogus")

    def test_continuation_lines(self):
        """Each line drops exactly one leading character."""
        assert continuation_lines([" a", "  b", ""]) == ["a", " b", ""]


class TestFindAnnotation:
    """Test cases for find_annotation."""

    def test_expression_statement(self):
        """Expression statements with an annotation comment are annotated."""
        annotation = find_annotation(_statement("x"), _comments(" => 1"))

        assert annotation == ReprAnnotation("1")

    def test_non_expression_statement(self):
        """Assignments are never annotated."""
        assert find_annotation(_statement("x = 1"), _comments(" => 1")) is None

    def test_no_comments(self):
        """Statements without trailing comments are not annotated."""
        assert find_annotation(_statement("x"), None) is None
        assert find_annotation(_statement("x"), []) is None

    def test_first_comment_decides(self):
        """A later annotation-shaped comment does not count."""
        comments = _comments(" a note", " => 1")

        assert find_annotation(_statement("x"), comments) is None

"""
Document scanner.

Finds the fenced code blocks of a Markdown document whose language tag marks
them as test samples, and pairs each one with the paragraph written right
before it as its title.
"""

from __future__ import annotations

from typing import AbstractSet, List, Optional

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

from .config.options import DEFAULT_LANGUAGES
from .models import Sample

_INLINE_TEXT_TYPES = frozenset({"text", "code_inline", "html_inline"})
_BREAK_TYPES = frozenset({"softbreak", "hardbreak"})


def parse_document(source: str) -> SyntaxTreeNode:
    """Parse Markdown text into a block tree."""
    return SyntaxTreeNode(MarkdownIt("commonmark").parse(source))


def scan_document(
    source: str, languages: AbstractSet[str] = DEFAULT_LANGUAGES
) -> List[Sample]:
    """
    Extract test samples from a Markdown document.

    Args:
        source: Markdown text
        languages: Fence language tags that qualify a block as a sample;
            blocks tagged otherwise are skipped

    Returns:
        Samples in document order
    """
    samples: List[Sample] = []
    for node in parse_document(source).walk():
        if node.type != "fence":
            continue
        language = fence_language(node.info)
        if language not in languages:
            continue
        samples.append(
            Sample(
                title=sample_title(node),
                language=language,
                source=node.content,
                line=node.map[0] + 1 if node.map else None,
            )
        )
    return samples


def fence_language(info: str) -> str:
    """Return the language tag: the first word of a fence info string."""
    words = info.split()
    return words[0] if words else ""


def sample_title(node: SyntaxTreeNode) -> Optional[str]:
    """Title from the paragraph immediately preceding ``node``, if there is one."""
    previous = node.previous_sibling
    if previous is None or previous.type != "paragraph":
        return None
    title = flatten_text(previous)
    if title.endswith(":"):
        title = title[:-1]
    return title


def flatten_text(node: SyntaxTreeNode) -> str:
    """Concatenate the literal text of a node and all its descendants."""
    if node.type in _INLINE_TEXT_TYPES:
        return node.content
    if node.type in _BREAK_TYPES:
        return "\n"
    return "".join(flatten_text(child) for child in node.children)

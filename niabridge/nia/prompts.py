"""Prompt templates for Nia repository analysis."""

from __future__ import annotations

import re

ANALYSIS_TEMPLATE = """\
You are a Senior Engineer. Use ONLY the repository {repository} as context; \
do not rely on outside code or general knowledge of other projects.

Search the repository {repository} and explain exactly how to implement the \
following issue in the code.

Issue title: {title}
{description_block}
Provide specific code snippets from the existing files and name the files \
that need to change."""

SIMPLIFIED_TEMPLATE = "How to implement {title} in {repository}"

_PUNCTUATION_RE = re.compile(r"[^\w\s]")
_WHITESPACE_RE = re.compile(r"\s+")


def strip_punctuation(text: str) -> str:
    """Remove punctuation from ``text`` and collapse runs of whitespace.

    >>> strip_punctuation("Fix: crash (on start)!")
    'Fix crash on start'

    """
    without_punctuation = _PUNCTUATION_RE.sub(" ", text)
    return _WHITESPACE_RE.sub(" ", without_punctuation).strip()


def build_analysis_prompt(
    repository: str, title: str, description: str | None
) -> str:
    """Return the full analysis instruction for an issue."""
    description_block = ""
    if description and description.strip():
        description_block = f"Issue description:\n{description.strip()}\n"
    return ANALYSIS_TEMPLATE.format(
        repository=repository,
        title=title.strip(),
        description_block=description_block,
    )


def build_simplified_prompt(repository: str, title: str) -> str:
    """Return the short fallback query used after a client-error response."""
    return SIMPLIFIED_TEMPLATE.format(
        title=strip_punctuation(title),
        repository=repository,
    )

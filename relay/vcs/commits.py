"""Helpers for working with conventional commit messages."""

from __future__ import annotations

import re
from typing import Optional, Sequence

__all__ = [
    "derive_commit_subject",
    "extract_conventional_subject",
    "format_conventional_commit",
    "sanitize_commit_message",
]


_SCOPE_PATTERN = re.compile(r"[^a-z0-9]+")
_WHITESPACE_PATTERN = re.compile(r"\s+")
_MAX_SUBJECT_LENGTH = 72
_CONVENTIONAL_PATTERN = re.compile(r"^[a-z]+(?:\([^()\s][^()]*\))?!?: \S")


def _sanitize_type(commit_type: str) -> str:
    normalized = str(commit_type).strip().lower()
    sanitized = _SCOPE_PATTERN.sub("", normalized)
    if not sanitized:
        raise ValueError("commit type must contain alphabetic characters")
    return sanitized


def _sanitize_scope(scope: Optional[str]) -> Optional[str]:
    if scope is None:
        return None
    normalized = str(scope or "").strip().lower()
    if not normalized:
        return None
    sanitized = _SCOPE_PATTERN.sub("-", normalized)
    sanitized = sanitized.strip("-")
    return sanitized or None


def _sanitize_description(description: str) -> str:
    collapsed = _WHITESPACE_PATTERN.sub(" ", (description or "").strip())
    if not collapsed:
        raise ValueError("commit description must not be empty")
    if collapsed.endswith((".", "!")):
        collapsed = collapsed[:-1]
    if collapsed and collapsed[0].isalpha():
        collapsed = collapsed[0].lower() + collapsed[1:]
    return collapsed


def format_conventional_commit(
    commit_type: str, description: str, scope: Optional[str] = None
) -> str:
    """Return a formatted conventional commit subject line."""

    normalized_type = _sanitize_type(commit_type)
    normalized_scope = _sanitize_scope(scope)
    normalized_description = _sanitize_description(description)

    if normalized_scope:
        return f"{normalized_type}({normalized_scope}): {normalized_description}"
    return f"{normalized_type}: {normalized_description}"


def sanitize_commit_message(message: Optional[str]) -> str:
    """Reduce free-form agent output to a single commit subject line."""

    if not message:
        return ""

    lines = [line.strip() for line in message.strip().splitlines() if line.strip()]
    if not lines:
        return ""

    first_line = lines[0].strip("`'\"").strip()
    first_line = _WHITESPACE_PATTERN.sub(" ", first_line)
    while first_line.endswith((".", "!", "?")):
        first_line = first_line[:-1].rstrip()

    if len(first_line) > _MAX_SUBJECT_LENGTH:
        first_line = first_line[:_MAX_SUBJECT_LENGTH].rstrip()

    return first_line


def derive_commit_subject(
    paths: Sequence[str],
    *,
    commit_type: str = "chore",
    scope: Optional[str] = None,
) -> str:
    """Build a deterministic subject from the list of staged paths."""

    if len(paths) == 1:
        description = f"update {paths[0]}"
    else:
        description = f"update {len(paths)} files"
    subject = format_conventional_commit(commit_type, description, scope)
    if len(subject) > _MAX_SUBJECT_LENGTH:
        subject = format_conventional_commit(commit_type, "update 1 file", scope)
    return subject


def extract_conventional_subject(reply: Optional[str]) -> str:
    """Return the first line of ``reply`` that reads as a conventional subject.

    Agents sometimes lead with prose ("Sure, here's a message:"); such lines
    are skipped. An empty string means no usable subject was found.
    """

    for line in (reply or "").splitlines():
        subject = sanitize_commit_message(line)
        if subject and _CONVENTIONAL_PATTERN.match(subject):
            return subject
    return ""

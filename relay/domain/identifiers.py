"""Validation for the identifiers that key workflow artifacts."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

from relay.errors import InvalidIdentifierError

__all__ = ["FeatureId", "IssueId", "slugify_feature"]


_INVALID_CHARS_PATTERN = re.compile(r"[^a-z0-9]+")
_ISSUE_PATTERN = re.compile(r"^#?(?P<number>\d+)$")
_MAX_SLUG_LENGTH = 80


def slugify_feature(value: str) -> str:
    """Return the filesystem-safe slug used as a plan file stem.

    Runs of characters outside ``[a-z0-9]`` collapse to a single ``-``. Returns
    an empty string when nothing usable remains.
    """

    normalized = str(value or "").strip().lower()
    collapsed = _INVALID_CHARS_PATTERN.sub("-", normalized).strip("-")
    if len(collapsed) > _MAX_SLUG_LENGTH:
        collapsed = collapsed[:_MAX_SLUG_LENGTH].rstrip("-")
    return collapsed


@dataclass(frozen=True)
class FeatureId:
    """User-supplied name scoping a plan and its execution."""

    name: str
    slug: str

    @classmethod
    def parse(cls, value: str) -> "FeatureId":
        name = str(value or "").strip()
        if not name:
            raise InvalidIdentifierError("feature name must not be empty")
        slug = slugify_feature(name)
        if not slug:
            raise InvalidIdentifierError(
                f"feature name {name!r} contains no letters or digits"
            )
        return cls(name=name, slug=slug)

    def __str__(self) -> str:
        return self.slug


@dataclass(frozen=True)
class IssueId:
    """Reference to a record in the remote issue tracker."""

    number: int

    @classmethod
    def parse(cls, value: Union[str, int]) -> "IssueId":
        if isinstance(value, bool):
            raise InvalidIdentifierError(f"invalid issue id: {value!r}")
        if isinstance(value, int):
            number = value
        else:
            match = _ISSUE_PATTERN.match(str(value or "").strip())
            if match is None:
                raise InvalidIdentifierError(
                    f"invalid issue id: {value!r} (expected a number such as 123 or #123)"
                )
            number = int(match.group("number"))
        if number <= 0:
            raise InvalidIdentifierError(f"issue id must be positive, got {number}")
        return cls(number=number)

    def __str__(self) -> str:
        return str(self.number)

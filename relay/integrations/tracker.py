"""Issue tracker abstractions used by root-cause analysis."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Protocol

from relay.integrations.github import GitHub
from relay.logging_utils import get_logger


logger = get_logger(__name__)


@dataclass
class Issue:
    number: int
    title: str
    body: str = ""
    state: str = "open"
    labels: List[str] = field(default_factory=list)
    url: Optional[str] = None
    comments: List[str] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "Issue":
        labels = []
        for label in payload.get("labels") or []:
            if isinstance(label, Mapping):
                name = label.get("name")
                if name:
                    labels.append(str(name))
            elif label:
                labels.append(str(label))

        comments = []
        for comment in payload.get("comments") or []:
            if isinstance(comment, Mapping):
                body = str(comment.get("body") or "").strip()
                author = comment.get("author")
                login = author.get("login") if isinstance(author, Mapping) else None
                if body:
                    comments.append(f"{login}: {body}" if login else body)
            elif comment:
                comments.append(str(comment))

        return cls(
            number=int(payload.get("number", 0)),
            title=str(payload.get("title") or "").strip(),
            body=str(payload.get("body") or "").strip(),
            state=str(payload.get("state") or "open").lower(),
            labels=labels,
            url=payload.get("url"),
            comments=comments,
        )


class IssueTracker(Protocol):
    """Lightweight protocol implemented by issue tracker backends."""

    name: str

    def fetch_issue(self, number: int) -> Issue:
        """Return the tracker record for ``number`` or raise a ``TrackerError``."""


@dataclass
class GitHubTracker:
    name: str = "github"
    repo: Optional[str] = None

    def fetch_issue(self, number: int) -> Issue:
        client = GitHub(repo=self.repo)
        client.ensure_authenticated()
        return Issue.from_mapping(client.view_issue(number))


def resolve_issue_tracker(name: Optional[str], *, repo: Optional[str] = None) -> IssueTracker:
    normalized = (name or "github").strip().lower()
    if normalized in {"github", "gh"}:
        return GitHubTracker(repo=repo)

    logger.warning(
        "Unknown issue tracker '%s'. Falling back to GitHub integration.", name
    )
    return GitHubTracker(repo=repo)

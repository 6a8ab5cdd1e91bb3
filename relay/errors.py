"""Exception types raised by Relay steps and integrations."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class RelayError(Exception):
    """Base class for failures reported to the person or agent driving Relay."""


class ConfigError(RelayError):
    """Raised when ``relay.yaml`` cannot be loaded or has the wrong shape."""


class InvalidIdentifierError(RelayError):
    """Raised for empty or malformed feature and issue identifiers."""


class ArtifactNotFoundError(RelayError):
    """Raised when a step needs an artifact an earlier step has not produced."""

    def __init__(self, kind: str, path: Union[str, Path]) -> None:
        self.kind = kind
        self.path = Path(path)
        super().__init__(f"{kind} not found: {self.path.as_posix()}")


class ArtifactExistsError(RelayError):
    """Raised when writing an artifact that has already been produced."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        super().__init__(
            f"artifact already exists: {self.path.as_posix()} (use --force to regenerate)"
        )


class ArtifactWriteError(RelayError):
    """Raised when an artifact cannot be written to disk."""


class ArtifactReadError(RelayError):
    """Raised when an existing artifact cannot be read or decoded."""


class VcsError(RelayError):
    """Raised when a git command fails."""


class NothingToCommitError(VcsError):
    def __init__(self, detail: Optional[str] = None) -> None:
        message = "nothing to commit"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class ConflictedRepositoryError(VcsError):
    def __init__(self, paths) -> None:
        self.paths = list(paths)
        joined = ", ".join(self.paths)
        super().__init__(f"repository has unresolved conflicts: {joined}")


class TrackerError(RelayError):
    """Raised when the remote issue tracker cannot be queried."""


class TrackerAuthenticationError(TrackerError):
    pass


class IssueNotFoundError(TrackerError):
    def __init__(self, issue_id: int) -> None:
        self.issue_id = issue_id
        super().__init__(f"issue #{issue_id} not found")


class AgentError(RelayError):
    """Raised when the coding agent cannot complete a delegated step."""


__all__ = [
    "AgentError",
    "ArtifactExistsError",
    "ArtifactNotFoundError",
    "ArtifactWriteError",
    "ArtifactReadError",
    "ConfigError",
    "ConflictedRepositoryError",
    "InvalidIdentifierError",
    "IssueNotFoundError",
    "NothingToCommitError",
    "RelayError",
    "TrackerAuthenticationError",
    "TrackerError",
    "VcsError",
]

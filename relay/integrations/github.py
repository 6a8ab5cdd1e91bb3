import json
import subprocess
from typing import Any, Dict, List, Optional

from relay.errors import IssueNotFoundError, TrackerAuthenticationError, TrackerError
from relay.logging_utils import get_logger


logger = get_logger(__name__)

ISSUE_FIELDS = "number,title,body,state,labels,url,comments"

_NOT_FOUND_MARKERS = (
    "could not resolve to an issue",
    "could not resolve to an issue or pull request",
    "not found",
)


class GitHub:
    """Issue lookups through the authenticated GitHub CLI (``gh``)."""

    def __init__(self, repo: Optional[str] = None, executable: str = "gh") -> None:
        self.repo = repo
        self.executable = executable

    def _run(self, args: List[str]) -> subprocess.CompletedProcess:
        command = [self.executable, *args]
        try:
            return subprocess.run(command, capture_output=True, text=True)
        except FileNotFoundError as exc:
            raise TrackerError(
                "GitHub CLI (gh) is not installed or not on PATH"
            ) from exc

    def ensure_authenticated(self) -> None:
        result = self._run(["auth", "status"])
        if result.returncode != 0:
            detail = (result.stderr or result.stdout).strip()
            raise TrackerAuthenticationError(
                "GitHub CLI is not authenticated; run `gh auth login`"
                + (f" ({detail.splitlines()[0]})" if detail else "")
            )

    def view_issue(self, number: int) -> Dict[str, Any]:
        command = ["issue", "view", str(number), "--json", ISSUE_FIELDS]
        if self.repo:
            command.extend(["--repo", self.repo])

        result = self._run(command)
        if result.returncode != 0:
            error_msg = (result.stderr or result.stdout).strip()
            lowered = error_msg.lower()
            if any(marker in lowered for marker in _NOT_FOUND_MARKERS):
                raise IssueNotFoundError(number)
            if "auth" in lowered or "gh auth login" in lowered:
                raise TrackerAuthenticationError(error_msg)
            raise TrackerError(f"Failed to fetch issue #{number}: {error_msg}")

        try:
            payload = json.loads(result.stdout or "{}")
        except json.JSONDecodeError as exc:
            raise TrackerError(f"Unexpected gh output for issue #{number}") from exc
        if not isinstance(payload, dict):
            raise TrackerError(f"Unexpected gh output for issue #{number}")
        logger.info("Fetched issue #%s from GitHub", number)
        return payload

"""Markdown artifacts handed from one workflow step to the next."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from relay.domain.identifiers import FeatureId, IssueId
from relay.errors import (
    ArtifactExistsError,
    ArtifactNotFoundError,
    ArtifactReadError,
    ArtifactWriteError,
)
from relay.logging_utils import get_logger

__all__ = ["Artifact", "ArtifactStore"]


logger = get_logger(__name__)

_RCA_FILENAME_PATTERN = re.compile(r"^issue-(?P<number>\d+)\.md$")


@dataclass
class Artifact:
    """A Markdown document owned by the step that created it."""

    path: Path
    content: str
    owner: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self, project_root: Optional[Path] = None) -> Dict[str, object]:
        return {
            "path": _relative_path(self.path, project_root),
            "owner": self.owner,
            "created_at": self.created_at.isoformat(),
            "size": len(self.content),
        }


def _relative_path(path: Path, project_root: Optional[Path]) -> str:
    if project_root is None:
        return path.as_posix()
    try:
        return path.relative_to(project_root).as_posix()
    except ValueError:
        return path.as_posix()


class ArtifactStore:
    """Create-once, read-many storage for plan and RCA documents."""

    def __init__(
        self,
        project_root: Path,
        *,
        plans_dir: str = "plans",
        rca_dir: str = "docs/rca",
    ) -> None:
        self.project_root = Path(project_root)
        self.plans_dir = self.project_root / plans_dir
        self.rca_dir = self.project_root / rca_dir

    def plan_path(self, feature: FeatureId) -> Path:
        return self.plans_dir / f"{feature.slug}.md"

    def rca_path(self, issue: IssueId) -> Path:
        return self.rca_dir / f"issue-{issue.number}.md"

    def relative(self, path: Path) -> str:
        return _relative_path(path, self.project_root)

    def owns(self, relative_path: str) -> bool:
        """Whether a project-relative path lives in the plan or RCA directory."""

        candidate = self.project_root / relative_path
        for directory in (self.plans_dir, self.rca_dir):
            try:
                candidate.relative_to(directory)
            except ValueError:
                continue
            return True
        return False

    def read(self, path: Path, *, kind: str) -> Artifact:
        """Load an artifact, failing if its producing step has not run."""

        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise ArtifactNotFoundError(kind, self.relative(path)) from None
        except (OSError, UnicodeDecodeError) as exc:
            raise ArtifactReadError(
                f"unable to read {self.relative(path)}: {exc}"
            ) from exc

        modified = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
        return Artifact(path=path, content=content, owner=kind, created_at=modified)

    def write(
        self,
        path: Path,
        content: str,
        *,
        owner: str,
        force: bool = False,
    ) -> Artifact:
        """Persist a new artifact.

        Artifacts are immutable once produced: an existing file is only
        replaced when ``force`` is set, and the replacement counts as a new
        artifact rather than an edit.
        """

        if path.exists() and not force:
            raise ArtifactExistsError(self.relative(path))

        text = content if content.endswith("\n") else content + "\n"
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise ArtifactWriteError(
                f"unable to write {self.relative(path)}: {exc}"
            ) from exc

        logger.info("Wrote %s artifact %s", owner, self.relative(path))
        return Artifact(path=path, content=text, owner=owner)

    def list_plans(self) -> List[str]:
        if not self.plans_dir.is_dir():
            return []
        return sorted(candidate.stem for candidate in self.plans_dir.glob("*.md"))

    def list_rcas(self) -> List[int]:
        if not self.rca_dir.is_dir():
            return []
        numbers = []
        for candidate in self.rca_dir.iterdir():
            match = _RCA_FILENAME_PATTERN.match(candidate.name)
            if match:
                numbers.append(int(match.group("number")))
        return sorted(numbers)

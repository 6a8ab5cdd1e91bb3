"""Context loading: summarise repository state for the agent."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from relay.domain.artifact import ArtifactStore
from relay.domain.step_result import StepResult
from relay.errors import AgentError, RelayError, VcsError
from relay.integrations.git import Git
from relay.logging_utils import get_logger
from relay.prompts import prime_prompt
from relay.providers.agent_provider import AgentProvider

__all__ = ["PrimeContext", "RepositorySnapshot", "collect_snapshot", "run_prime"]


logger = get_logger(__name__)

_SKIP_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "venv",
    "env",
    "node_modules",
    "__pycache__",
    ".mypy_cache",
    ".pytest_cache",
    ".ruff_cache",
    ".tox",
    ".relay",
    "build",
    "dist",
}


@dataclass
class PrimeContext:
    """Parameters for building the repository summary.

    Args:
        project_root: Directory to summarise.
        git: Git wrapper rooted at ``project_root``.
        store: Artifact store used to list existing plans and analyses.
        provider: Optional agent asked for a briefing on top of the snapshot.
        project_name: Display name; defaults to the directory name.
        commit_limit: Number of recent commit subjects to include.
        file_limit: Maximum number of paths in the file listing.
        readme_lines: Number of README lines to include.
    """

    project_root: Path
    git: Git
    store: ArtifactStore
    provider: Optional[AgentProvider] = None
    project_name: Optional[str] = None
    commit_limit: int = 10
    file_limit: int = 60
    readme_lines: int = 40


@dataclass
class RepositorySnapshot:
    project_name: str
    branch: Optional[str] = None
    status: str = ""
    recent_commits: str = ""
    files: List[str] = field(default_factory=list)
    omitted_files: int = 0
    readme_excerpt: str = ""
    plans: List[str] = field(default_factory=list)
    rcas: List[int] = field(default_factory=list)

    def to_markdown(self) -> str:
        lines = [f"# Project: {self.project_name}", ""]

        lines.append("## Version Control")
        lines.append("")
        if self.branch is None:
            lines.append("Not a git repository.")
        else:
            lines.append(f"Branch: {self.branch}")
            lines.append("")
            lines.append("Working tree:")
            lines.append("```")
            lines.append(self.status or "clean")
            lines.append("```")
            if self.recent_commits:
                lines.append("")
                lines.append("Recent commits:")
                lines.append("```")
                lines.append(self.recent_commits)
                lines.append("```")
        lines.append("")

        lines.append("## Files")
        lines.append("")
        lines.extend(f"- {path}" for path in self.files)
        if self.omitted_files:
            lines.append(f"- ... ({self.omitted_files} more)")
        if not self.files:
            lines.append("(empty)")
        lines.append("")

        if self.readme_excerpt:
            lines.append("## README")
            lines.append("")
            lines.append(self.readme_excerpt)
            lines.append("")

        lines.append("## Workflow Artifacts")
        lines.append("")
        lines.append("Plans: " + (", ".join(self.plans) if self.plans else "none"))
        lines.append(
            "Root cause analyses: "
            + (", ".join(f"#{number}" for number in self.rcas) if self.rcas else "none")
        )
        return "\n".join(lines).rstrip() + "\n"


def _list_files(project_root: Path, limit: int) -> tuple[List[str], int]:
    collected: List[str] = []
    for dirpath, dirnames, filenames in os.walk(project_root):
        dirnames[:] = sorted(
            name for name in dirnames if name not in _SKIP_DIRS and not name.endswith(".egg-info")
        )
        relative_dir = Path(dirpath).relative_to(project_root)
        for filename in sorted(filenames):
            collected.append((relative_dir / filename).as_posix())

    limit = max(limit, 0)
    return collected[:limit], max(len(collected) - limit, 0)


def _readme_excerpt(project_root: Path, max_lines: int) -> str:
    for candidate in ("README.md", "README.rst", "README.txt", "README"):
        path = project_root / candidate
        if not path.is_file():
            continue
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Unable to read %s: %s", path, exc)
            return ""
        lines = text.strip().splitlines()
        excerpt = "\n".join(lines[:max_lines])
        if len(lines) > max_lines:
            excerpt += "\n..."
        return excerpt
    return ""


def collect_snapshot(context: PrimeContext) -> RepositorySnapshot:
    project_root = Path(context.project_root)
    if not project_root.is_dir():
        raise RelayError(f"unable to read repository at {project_root}")

    snapshot = RepositorySnapshot(project_name=context.project_name or project_root.name)

    if context.git.is_repository():
        try:
            snapshot.branch = context.git.current_branch()
            snapshot.status = context.git.status_short()
            snapshot.recent_commits = context.git.recent_commits(context.commit_limit)
        except VcsError as exc:
            logger.warning("Unable to collect git state: %s", exc)
    else:
        logger.warning("%s is not a git repository", project_root)

    try:
        snapshot.files, snapshot.omitted_files = _list_files(project_root, context.file_limit)
    except OSError as exc:
        raise RelayError(f"unable to read repository at {project_root}: {exc}") from exc

    snapshot.readme_excerpt = _readme_excerpt(project_root, context.readme_lines)
    snapshot.plans = context.store.list_plans()
    snapshot.rcas = context.store.list_rcas()
    return snapshot


def run_prime(context: PrimeContext) -> StepResult:
    """Build the repository summary and optionally ask the agent for a briefing."""

    snapshot = collect_snapshot(context)
    summary = snapshot.to_markdown()

    provider = context.provider
    if provider is None or not provider.is_interactive:
        return StepResult("prime", True, "summarized", output=summary)

    try:
        briefing = provider.run(prime_prompt(summary)).strip()
    except AgentError as exc:
        logger.warning("Agent briefing failed; returning snapshot only: %s", exc)
        return StepResult("prime", True, "summarized", output=summary, used_fallback=True)

    output = summary
    if briefing:
        output = f"{summary}\n## Agent Briefing\n\n{briefing}\n"
    return StepResult("prime", True, "primed", output=output)

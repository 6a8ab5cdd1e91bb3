"""Commit: stage working-tree changes and record them with a derived message."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from relay.domain.step_result import StepResult
from relay.errors import AgentError, ConflictedRepositoryError, NothingToCommitError
from relay.integrations.git import Git
from relay.logging_utils import get_logger
from relay.prompts import commit_prompt
from relay.providers.agent_provider import AgentProvider
from relay.vcs.commits import (
    derive_commit_subject,
    extract_conventional_subject,
    sanitize_commit_message,
)

__all__ = ["CommitContext", "run_commit"]


logger = get_logger(__name__)


@dataclass
class CommitContext:
    """Parameters for the commit step.

    Args:
        git: Git wrapper rooted at the project.
        files: Paths to commit; empty means every change in the working tree.
        provider: Agent asked for a subject line based on the staged diff.
        message: Explicit subject that bypasses message generation.
        body: Optional commit body (for example ``Fixes #12``).
        commit_type: Conventional commit type used for the fallback subject.
        scope: Conventional commit scope used for the fallback subject.
        project_name: Included in the message prompt.
    """

    git: Git
    files: List[str] = field(default_factory=list)
    provider: Optional[AgentProvider] = None
    message: Optional[str] = None
    body: Optional[str] = None
    commit_type: str = "chore"
    scope: Optional[str] = None
    project_name: Optional[str] = None


def _generate_subject(context: CommitContext, paths: Optional[List[str]], staged: List[str]) -> tuple[str, bool]:
    fallback = derive_commit_subject(staged, commit_type=context.commit_type, scope=context.scope)

    provider = context.provider
    if provider is None or not provider.is_interactive:
        return fallback, True

    prompt = commit_prompt(
        context.git.staged_diff(paths),
        context.git.status_short(),
        project_name=context.project_name,
        commit_type=context.commit_type if context.commit_type != "chore" else None,
        scope=context.scope,
    )
    try:
        response = provider.run(prompt)
    except AgentError as exc:
        logger.warning("Unable to generate commit message via agent: %s", exc)
        return fallback, True

    message = extract_conventional_subject(response)
    if not message:
        logger.warning("Agent reply held no conventional commit subject; using fallback")
        return fallback, True
    return message, False


def run_commit(context: CommitContext) -> StepResult:
    git = context.git
    paths = list(context.files) or None

    conflicted = git.conflicted_paths()
    if conflicted:
        raise ConflictedRepositoryError(conflicted)

    if not git.changed_paths(paths):
        raise NothingToCommitError("no changes in the requested files" if paths else None)

    git.stage(paths)
    staged = git.staged_paths(paths)
    if not staged:
        raise NothingToCommitError("no staged changes after adding")

    message = sanitize_commit_message(context.message)
    used_fallback = False
    if not message:
        message, used_fallback = _generate_subject(context, paths, staged)

    commit_sha = git.commit(message, body=context.body, paths=paths)
    logger.info("Created commit %s: %s", (commit_sha or "")[:12], message)
    return StepResult(
        "commit",
        True,
        "committed",
        artifacts=staged,
        commit_message=message,
        commit_sha=commit_sha,
        used_fallback=used_fallback,
    )

"""Fix implementation: apply an RCA's proposed fix, then hand off to commit."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from relay.domain.artifact import ArtifactStore
from relay.domain.identifiers import IssueId
from relay.domain.step_result import StepResult
from relay.errors import NothingToCommitError
from relay.logging_utils import get_logger
from relay.prompts import fix_prompt
from relay.providers.agent_provider import AgentProvider
from relay.steps.commit import CommitContext, run_commit

__all__ = ["ImplementFixContext", "run_implement_fix"]


logger = get_logger(__name__)


@dataclass
class ImplementFixContext:
    """Parameters for the fix step.

    ``commit`` carries the git wrapper and message settings for the handoff;
    ``None`` leaves the changes uncommitted.
    """

    store: ArtifactStore
    issue: IssueId
    provider: AgentProvider
    commit: Optional[CommitContext] = None


def run_implement_fix(context: ImplementFixContext) -> StepResult:
    store = context.store
    rca = store.read(store.rca_path(context.issue), kind="RCA")
    relative = store.relative(rca.path)
    number = context.issue.number

    report = ""
    if context.provider.is_interactive:
        logger.info("Implementing fix for issue #%s from %s", number, relative)
        report = context.provider.run(fix_prompt(number, relative, rca.content)).strip()
    else:
        logger.info("Dry run: skipping agent for issue #%s", number)

    metadata = {"issue": number}
    if context.commit is None:
        return StepResult(
            "implement-fix", True, "fixed", inputs=[relative], output=report, metadata=metadata
        )

    handoff = context.commit
    handoff.commit_type = "fix"
    handoff.scope = f"issue-{number}"
    handoff.body = handoff.body or f"Fixes #{number}"
    try:
        # Plans and RCAs never count as the fix itself.
        fix_paths = [
            path
            for path in handoff.git.changed_paths(handoff.files or None)
            if not store.owns(path)
        ]
        if not fix_paths:
            raise NothingToCommitError("no changes outside workflow artifacts")
        handoff.files = fix_paths
        committed = run_commit(handoff)
    except NothingToCommitError as exc:
        logger.warning("Fix for issue #%s produced no changes: %s", number, exc)
        return StepResult(
            "implement-fix",
            False,
            str(exc),
            inputs=[relative],
            output=report,
            metadata=metadata,
        )

    return StepResult(
        "implement-fix",
        True,
        "fixed_and_committed",
        artifacts=committed.artifacts,
        inputs=[relative],
        output=report,
        commit_message=committed.commit_message,
        commit_sha=committed.commit_sha,
        used_fallback=committed.used_fallback,
        metadata=metadata,
    )

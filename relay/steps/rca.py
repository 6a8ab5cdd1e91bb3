"""Root-cause analysis: investigate a tracker issue into ``docs/rca/issue-<id>.md``."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from relay.domain.artifact import ArtifactStore
from relay.domain.identifiers import IssueId
from relay.domain.step_result import StepResult
from relay.errors import AgentError, ArtifactExistsError
from relay.integrations.tracker import Issue, IssueTracker
from relay.logging_utils import get_logger
from relay.prompts import extract_document, rca_prompt, rca_skeleton
from relay.providers.agent_provider import AgentProvider

__all__ = ["RcaContext", "run_rca"]


logger = get_logger(__name__)


@dataclass
class RcaContext:
    store: ArtifactStore
    issue: IssueId
    tracker: IssueTracker
    provider: Optional[AgentProvider] = None
    force: bool = False


def _draft_analysis(provider: Optional[AgentProvider], issue: Issue, rca_path: str) -> Optional[str]:
    if provider is None or not provider.is_interactive:
        return None
    try:
        response = provider.run(rca_prompt(issue, rca_path))
    except AgentError as exc:
        logger.warning("Agent failed to analyse issue #%s: %s", issue.number, exc)
        return None

    document = extract_document(response)
    if document is None:
        logger.warning("Agent reply for issue #%s did not contain a Markdown report", issue.number)
    return document


def run_rca(context: RcaContext) -> StepResult:
    store = context.store
    path = store.rca_path(context.issue)
    relative = store.relative(path)

    if path.exists() and not context.force:
        raise ArtifactExistsError(relative)

    issue = context.tracker.fetch_issue(context.issue.number)
    if not issue.number:
        issue.number = context.issue.number

    document = _draft_analysis(context.provider, issue, relative)
    used_fallback = document is None
    if used_fallback:
        document = rca_skeleton(issue)

    store.write(path, document, owner="rca", force=context.force)
    return StepResult(
        "rca",
        True,
        "skeleton_written" if used_fallback else "analyzed",
        artifacts=[relative],
        output=document,
        used_fallback=used_fallback,
        metadata={"issue": context.issue.number, "title": issue.title, "state": issue.state},
    )

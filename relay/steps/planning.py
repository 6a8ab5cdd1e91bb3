"""Planning: turn a feature name into ``plans/<feature>.md``."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from relay.domain.artifact import ArtifactStore
from relay.domain.identifiers import FeatureId
from relay.domain.step_result import StepResult
from relay.errors import AgentError, ArtifactExistsError
from relay.logging_utils import get_logger
from relay.prompts import extract_document, plan_skeleton, planning_prompt
from relay.providers.agent_provider import AgentProvider

__all__ = ["PlanningContext", "run_planning"]


logger = get_logger(__name__)


@dataclass
class PlanningContext:
    """Parameters for drafting a feature plan.

    Args:
        store: Artifact store that owns the plans directory.
        feature: Validated feature identifier.
        provider: Agent asked to research the codebase and draft the plan.
        context_summary: Optional repository summary included in the prompt.
        force: Replace an existing plan instead of failing.
    """

    store: ArtifactStore
    feature: FeatureId
    provider: Optional[AgentProvider] = None
    context_summary: Optional[str] = None
    force: bool = False


def _draft_plan(context: PlanningContext, plan_path: str) -> Optional[str]:
    provider = context.provider
    if provider is None or not provider.is_interactive:
        return None

    prompt = planning_prompt(context.feature.name, plan_path, context.context_summary)
    try:
        response = provider.run(prompt)
    except AgentError as exc:
        logger.warning("Agent failed to draft plan for %s: %s", context.feature.slug, exc)
        return None

    document = extract_document(response)
    if document is None:
        logger.warning(
            "Agent reply for %s did not contain a Markdown plan", context.feature.slug
        )
    return document


def run_planning(context: PlanningContext) -> StepResult:
    store = context.store
    path = store.plan_path(context.feature)
    relative = store.relative(path)

    if path.exists() and not context.force:
        raise ArtifactExistsError(relative)

    document = _draft_plan(context, relative)
    used_fallback = document is None
    if used_fallback:
        document = plan_skeleton(context.feature.name)

    store.write(path, document, owner="planning", force=context.force)
    return StepResult(
        "planning",
        True,
        "skeleton_written" if used_fallback else "planned",
        artifacts=[relative],
        output=document,
        used_fallback=used_fallback,
        metadata={"feature": context.feature.slug},
    )

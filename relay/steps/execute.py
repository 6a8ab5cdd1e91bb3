"""Execution: hand an existing plan to the agent for implementation."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List

from relay.domain.artifact import ArtifactStore
from relay.domain.identifiers import FeatureId
from relay.domain.step_result import StepResult
from relay.logging_utils import get_logger
from relay.prompts import execution_prompt
from relay.providers.agent_provider import AgentProvider

__all__ = ["ExecuteContext", "extract_tasks", "run_execute"]


logger = get_logger(__name__)

_HEADING_PATTERN = re.compile(r"^(?P<hashes>#{1,6})\s+(?P<title>.+?)\s*#*\s*$")
_TASK_PATTERN = re.compile(r"^\s*(?:\d+[.)]|[-*]\s+\[[ xX]\])\s+(?P<task>\S.*)$")
_TASK_SECTION_KEYWORDS = ("implementation", "task", "step")
_FENCE_PATTERN = re.compile(r"^\s*(?P<fence>`{3,}|~{3,})")


def extract_tasks(plan_text: str) -> List[str]:
    """Return ordered tasks from the plan's implementation section.

    Numbered items and checkbox items count as tasks; fenced code blocks are
    skipped. When no heading looks like an implementation or task section,
    the whole document is scanned.
    """

    sectioned: List[str] = []
    everywhere: List[str] = []
    in_task_section = False
    section_level = 0
    fence = None

    for line in plan_text.splitlines():
        opener = _FENCE_PATTERN.match(line)
        marker = opener.group("fence") if opener else ""
        if fence is not None:
            # Only a fence of the same character and at least the same length closes.
            if marker[:1] == fence[:1] and len(marker) >= len(fence):
                fence = None
            continue
        if marker:
            fence = marker
            continue

        heading = _HEADING_PATTERN.match(line)
        if heading:
            level = len(heading.group("hashes"))
            title = heading.group("title").lower()
            if any(keyword in title for keyword in _TASK_SECTION_KEYWORDS):
                in_task_section = True
                section_level = level
            elif in_task_section and level <= section_level:
                in_task_section = False
            continue

        task = _TASK_PATTERN.match(line)
        if not task:
            continue
        text = task.group("task").strip()
        everywhere.append(text)
        if in_task_section:
            sectioned.append(text)

    return sectioned or everywhere


@dataclass
class ExecuteContext:
    store: ArtifactStore
    feature: FeatureId
    provider: AgentProvider


def run_execute(context: ExecuteContext) -> StepResult:
    store = context.store
    plan = store.read(store.plan_path(context.feature), kind="plan")
    relative = store.relative(plan.path)
    tasks = extract_tasks(plan.content)
    metadata = {"feature": context.feature.slug, "tasks": len(tasks)}

    if not context.provider.is_interactive:
        logger.info("Dry run: %s has %d task(s); no agent configured", relative, len(tasks))
        return StepResult(
            "execute", True, "dry_run", inputs=[relative], metadata=metadata
        )

    logger.info("Executing %s (%d task(s))", relative, len(tasks))
    report = context.provider.run(
        execution_prompt(context.feature.name, relative, plan.content)
    )
    return StepResult(
        "execute",
        True,
        "executed",
        inputs=[relative],
        output=report.strip(),
        metadata=metadata,
    )

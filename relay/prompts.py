"""Prompt templates handed to the coding agent, and the fallback documents.

Each step renders one prompt. Planning and root-cause analysis also have a
skeleton document that is written when the agent produces nothing usable, so
downstream steps always find an artifact with the expected sections.
"""

from __future__ import annotations

import re
import textwrap
from typing import Optional

from relay.integrations.tracker import Issue

PLAN_SECTIONS = (
    "Feature Description",
    "Context References",
    "Implementation Plan",
    "Validation Commands",
    "Acceptance Criteria",
)

RCA_SECTIONS = (
    "Issue Summary",
    "Reproduction",
    "Root Cause",
    "Impact",
    "Proposed Fix",
    "Testing Strategy",
)


def _bullets(items) -> str:
    return "\n".join(f"- {item}" for item in items)


def prime_prompt(summary: str) -> str:
    return textwrap.dedent(
        """
        You are being onboarded to this repository. Read the snapshot below,
        then inspect the key files it points at. Reply with a short briefing:
        what the project does, how it is laid out, how to run its tests, and
        anything in flight according to git status. Do not modify any files.
        """
    ).strip() + f"\n\n<repository-snapshot>\n{summary.strip()}\n</repository-snapshot>"


def planning_prompt(feature: str, plan_path: str, context_summary: Optional[str] = None) -> str:
    header = textwrap.dedent(
        f"""
        TASK:
        Write an implementation plan for the feature "{feature}". Research the
        codebase first so every task names real files and functions. Do not
        change any files; reply with the plan as Markdown only, without code
        fences around the whole document. It will be saved to {plan_path}.
        """
    ).strip()
    footer = textwrap.dedent(
        """
        Under "Implementation Plan" list the tasks as an ordered, numbered list,
        one concrete change per task. Under "Validation Commands" list the exact
        shell commands that prove the feature works.
        """
    ).strip()
    sections = (
        f"{header}\n\nREQUIRED SECTIONS (as level-two headings):\n"
        f"{_bullets(PLAN_SECTIONS)}\n\n{footer}"
    )
    if context_summary:
        sections += f"\n\nREPOSITORY CONTEXT:\n{context_summary.strip()}"
    return sections


def plan_skeleton(feature: str) -> str:
    return textwrap.dedent(
        f"""
        # Plan: {feature}

        > Skeleton plan. The agent did not return a usable plan; fill in each
        > section before running `relay execute`.

        ## Feature Description

        {feature}

        ## Context References

        - (files and modules to read before starting)

        ## Implementation Plan

        1. (first concrete change)

        ## Validation Commands

        - (commands that prove the feature works)

        ## Acceptance Criteria

        - (observable outcomes)
        """
    ).strip() + "\n"


def execution_prompt(feature: str, plan_path: str, plan_text: str) -> str:
    return textwrap.dedent(
        f"""
        TASK:
        Implement the feature "{feature}" by following the plan stored at
        {plan_path}. Work through the Implementation Plan tasks in order, run
        the Validation Commands, and fix any failures before finishing. Do not
        edit the plan and do not commit.

        When done, reply with a summary of the tasks completed, the files
        changed, and the validation results.
        """
    ).strip() + f"\n\n<plan path=\"{plan_path}\">\n{plan_text.strip()}\n</plan>"


def commit_prompt(
    diff_text: str,
    status_text: str,
    *,
    project_name: Optional[str] = None,
    commit_type: Optional[str] = None,
    scope: Optional[str] = None,
) -> str:
    sections = []
    if project_name:
        sections.append(f"PROJECT CONTEXT:\nProject: {project_name}")

    instructions = (
        "TASK:\nGenerate a concise Conventional Commits style subject line for the staged changes. "
        "Respond with a single line formatted as '<type>: <description>' without additional "
        "commentary or trailing punctuation."
    )
    if commit_type:
        prefix = f"{commit_type}({scope})" if scope else commit_type
        instructions += f" Use the prefix '{prefix}:'."
    sections.append(instructions)

    if status_text:
        sections.append("GIT STATUS:\n" + status_text.strip())
    if diff_text:
        sections.append("STAGED DIFF:\n" + diff_text.strip())
    return "\n\n".join(sections)


def format_issue(issue: Issue) -> str:
    lines = [f"#{issue.number}: {issue.title}", f"State: {issue.state}"]
    if issue.labels:
        lines.append("Labels: " + ", ".join(issue.labels))
    if issue.url:
        lines.append(f"URL: {issue.url}")
    lines.append("")
    lines.append(issue.body or "(no description)")
    if issue.comments:
        lines.append("")
        lines.append("Comments:")
        lines.extend(f"- {comment}" for comment in issue.comments)
    return "\n".join(lines)


def rca_prompt(issue: Issue, rca_path: str) -> str:
    header = textwrap.dedent(
        f"""
        TASK:
        Investigate GitHub issue #{issue.number} and write a root cause
        analysis. Reproduce the problem if you can, trace it to the responsible
        code, and propose a fix with a testing strategy. Do not change any
        files; reply with the analysis as Markdown only. It will be saved to
        {rca_path}.
        """
    ).strip()
    return (
        f"{header}\n\nREQUIRED SECTIONS (as level-two headings):\n"
        f"{_bullets(RCA_SECTIONS)}\n\n<issue>\n{format_issue(issue)}\n</issue>"
    )


def rca_skeleton(issue: Issue) -> str:
    labels = ", ".join(issue.labels) if issue.labels else "none"
    body = issue.body or "(no description)"
    return (
        textwrap.dedent(
            f"""
            # Root Cause Analysis: Issue #{issue.number}

            > Skeleton analysis. The agent did not return a usable report; complete
            > each section before running `relay implement-fix`.

            ## Issue Summary

            - Title: {issue.title}
            - State: {issue.state}
            - Labels: {labels}
            - URL: {issue.url or 'n/a'}

            """
        ).lstrip()
        + body
        + "\n\n"
        + "\n\n".join(f"## {section}\n\n- (to be determined)" for section in RCA_SECTIONS[1:])
        + "\n"
    )


def fix_prompt(issue_number: int, rca_path: str, rca_text: str) -> str:
    return textwrap.dedent(
        f"""
        TASK:
        Fix issue #{issue_number} as described in the root cause analysis at
        {rca_path}. Apply the proposed fix, add regression tests that fail
        without it, and run the test suite. Do not edit the analysis and do
        not commit.

        When done, reply with a summary of the fix, the tests added, and the
        test results.
        """
    ).strip() + f"\n\n<rca path=\"{rca_path}\">\n{rca_text.strip()}\n</rca>"


_FENCE_PATTERN = re.compile(r"^```[a-zA-Z]*\n(?P<body>.*)\n```$", re.DOTALL)
_HEADING_PATTERN = re.compile(r"^#{1,6}\s+\S", re.MULTILINE)


def extract_document(output: Optional[str]) -> Optional[str]:
    """Return the Markdown document in an agent reply, or ``None`` if unusable.

    A reply wrapped entirely in one code fence is unwrapped. Replies without
    any Markdown heading are rejected.
    """

    text = (output or "").strip()
    if not text:
        return None
    match = _FENCE_PATTERN.match(text)
    if match:
        text = match.group("body").strip()
    if not _HEADING_PATTERN.search(text):
        return None
    return text + "\n"

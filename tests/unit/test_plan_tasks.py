import textwrap

from relay.steps.execute import extract_tasks


def test_extract_tasks_reads_implementation_section_only():
    plan = textwrap.dedent(
        """
        # Plan: search

        ## Feature Description

        1. Not a task, just a numbered note

        ## Implementation Plan

        1. Add the index builder
        2) Wire the endpoint
        - [ ] Document the query syntax
        - [x] Remove the old search page

        ### Notes

        - plain bullets are not tasks

        ## Validation Commands

        1. pytest tests/search
        """
    )

    assert extract_tasks(plan) == [
        "Add the index builder",
        "Wire the endpoint",
        "Document the query syntax",
        "Remove the old search page",
    ]


def test_extract_tasks_scans_whole_plan_without_task_heading():
    plan = "# Plan\n\n1. First\n2. Second\n"

    assert extract_tasks(plan) == ["First", "Second"]


def test_extract_tasks_returns_empty_list_for_prose():
    assert extract_tasks("# Plan\n\nJust some prose.\n") == []


def test_extract_tasks_ignores_fenced_code_blocks():
    plan = textwrap.dedent(
        """
        # Plan: setup

        ## Implementation Plan

        1. Add module
           ```bash
           # set up the environment
           1. not a task either
           ```
        2. Wire the command
        ~~~~
        # heading-like comment
        ~~~~
        3. Write tests

        ## Validation Commands

        1. pytest
        """
    )

    assert extract_tasks(plan) == ["Add module", "Wire the command", "Write tests"]

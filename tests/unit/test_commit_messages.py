import pytest

from relay.vcs.commits import (
    derive_commit_subject,
    extract_conventional_subject,
    format_conventional_commit,
    sanitize_commit_message,
)


def test_format_conventional_commit_normalises_parts():
    assert format_conventional_commit("Feat", "Add Login page.", "Auth UI") == (
        "feat(auth-ui): add Login page"
    )
    assert format_conventional_commit("fix", "handle null") == "fix: handle null"


def test_format_conventional_commit_rejects_empty_parts():
    with pytest.raises(ValueError):
        format_conventional_commit("!!", "something")
    with pytest.raises(ValueError):
        format_conventional_commit("feat", "   ")


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("feat: update readme.\n\n- add more details", "feat: update readme"),
        ("`fix: trim   whitespace`", "fix: trim whitespace"),
        ("\n\n  chore: bump deps!?  \n", "chore: bump deps"),
        ("", ""),
        (None, ""),
        ("   \n  ", ""),
    ],
)
def test_sanitize_commit_message(raw, expected):
    assert sanitize_commit_message(raw) == expected


def test_sanitize_commit_message_truncates_long_subjects():
    message = sanitize_commit_message("feat: " + "a" * 100)

    assert len(message) == 72


def test_derive_commit_subject_for_single_and_multiple_files():
    assert derive_commit_subject(["README.md"]) == "chore: update README.md"
    assert derive_commit_subject(["a.py", "b.py", "c.py"]) == "chore: update 3 files"
    assert (
        derive_commit_subject(["app.py"], commit_type="fix", scope="issue-12")
        == "fix(issue-12): update app.py"
    )


def test_derive_commit_subject_falls_back_for_long_paths():
    subject = derive_commit_subject(["src/" + "nested/" * 20 + "module.py"])

    assert subject == "chore: update 1 file"


@pytest.mark.parametrize(
    "reply, expected",
    [
        ("feat(search): add index builder", "feat(search): add index builder"),
        ("refactor!: drop legacy loader.", "refactor!: drop legacy loader"),
        ("Here is a subject:\nfix: handle empty input", "fix: handle empty input"),
        ("Sure, here's a message", ""),
        ("Updated the README: more docs", ""),
        ("", ""),
        (None, ""),
    ],
)
def test_extract_conventional_subject(reply, expected):
    assert extract_conventional_subject(reply) == expected

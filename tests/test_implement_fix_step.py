import pytest

from relay.domain.artifact import ArtifactStore
from relay.domain.identifiers import IssueId
from relay.errors import ArtifactNotFoundError
from relay.integrations.git import Git
from relay.providers.null_provider import NullProvider
from relay.steps.commit import CommitContext
from relay.steps.implement_fix import ImplementFixContext, run_implement_fix


RCA = "# Root Cause Analysis: Issue #7\n\n## Proposed Fix\n\nGuard against None.\n"


def _write_rca(root):
    store = ArtifactStore(root)
    store.write(store.rca_path(IssueId.parse(7)), RCA, owner="rca")
    return store


@pytest.mark.parametrize("issue", [1, 7, 4242])
def test_implement_fix_before_rca_fails_with_rca_not_found(tmp_path, make_provider, issue):
    provider = make_provider("fixed")

    with pytest.raises(ArtifactNotFoundError) as excinfo:
        run_implement_fix(
            ImplementFixContext(
                store=ArtifactStore(tmp_path), issue=IssueId.parse(issue), provider=provider
            )
        )

    assert str(excinfo.value) == f"RCA not found: docs/rca/issue-{issue}.md"
    assert not provider.called


def test_implement_fix_hands_off_to_commit(git_repo, make_provider, run_git):
    store = _write_rca(git_repo)
    run_git(git_repo, "add", ".")
    run_git(git_repo, "commit", "-m", "docs: add rca")

    def _apply_fix(prompt):
        (git_repo / "app.py").write_text("def load():\n    return {}\n", encoding="utf-8")

    provider = make_provider("Guarded the loader and added a test.", on_run=_apply_fix)
    git = Git(git_repo)

    result = run_implement_fix(
        ImplementFixContext(
            store=store,
            issue=IssueId.parse("#7"),
            provider=provider,
            commit=CommitContext(git=git, provider=NullProvider()),
        )
    )

    assert result.success
    assert result.reason == "fixed_and_committed"
    assert result.commit_message == "fix(issue-7): update app.py"
    assert run_git(git_repo, "log", "-1", "--pretty=%B") == (
        "fix(issue-7): update app.py\n\nFixes #7"
    )
    assert '<rca path="docs/rca/issue-7.md">' in provider.prompts[0]
    assert (git_repo / "docs" / "rca" / "issue-7.md").read_text(encoding="utf-8") == RCA


def test_implement_fix_reports_when_agent_changed_nothing(git_repo, make_provider, run_git):
    store = _write_rca(git_repo)
    run_git(git_repo, "add", ".")
    run_git(git_repo, "commit", "-m", "docs: add rca")

    result = run_implement_fix(
        ImplementFixContext(
            store=store,
            issue=IssueId.parse(7),
            provider=make_provider("Nothing needed."),
            commit=CommitContext(git=Git(git_repo), provider=NullProvider()),
        )
    )

    assert not result.success
    assert result.reason.startswith("nothing to commit")
    assert result.output == "Nothing needed."


def test_implement_fix_without_commit_leaves_changes(tmp_path, make_provider):
    store = _write_rca(tmp_path)

    result = run_implement_fix(
        ImplementFixContext(store=store, issue=IssueId.parse(7), provider=make_provider("done"))
    )

    assert result.reason == "fixed"
    assert result.commit_sha is None
    assert result.inputs == ["docs/rca/issue-7.md"]


def test_implement_fix_ignores_uncommitted_rca(git_repo, make_provider, run_git):
    store = _write_rca(git_repo)
    head = run_git(git_repo, "rev-parse", "HEAD")

    result = run_implement_fix(
        ImplementFixContext(
            store=store,
            issue=IssueId.parse(7),
            provider=make_provider("Nothing needed."),
            commit=CommitContext(git=Git(git_repo), provider=NullProvider()),
        )
    )

    assert not result.success
    assert result.reason == "nothing to commit (no changes outside workflow artifacts)"
    assert run_git(git_repo, "rev-parse", "HEAD") == head
    assert "?? docs/rca/issue-7.md" in run_git(git_repo, "status", "--porcelain", "--untracked-files=all")


def test_implement_fix_commits_fix_without_rca(git_repo, make_provider, run_git):
    store = _write_rca(git_repo)

    def _apply_fix(prompt):
        (git_repo / "app.py").write_text("def load():\n    return {}\n", encoding="utf-8")

    result = run_implement_fix(
        ImplementFixContext(
            store=store,
            issue=IssueId.parse(7),
            provider=make_provider("Guarded the loader.", on_run=_apply_fix),
            commit=CommitContext(git=Git(git_repo), provider=NullProvider()),
        )
    )

    assert result.success
    assert result.artifacts == ["app.py"]
    assert result.commit_message == "fix(issue-7): update app.py"
    assert run_git(git_repo, "show", "--name-only", "--pretty=format:", "HEAD") == "app.py"

import pytest

from relay.domain.artifact import ArtifactStore
from relay.domain.identifiers import FeatureId
from relay.errors import AgentError, RelayError
from relay.integrations.git import Git
from relay.providers.null_provider import NullProvider
from relay.steps.prime import PrimeContext, collect_snapshot, run_prime


def _context(root, provider=None, **overrides):
    return PrimeContext(
        project_root=root,
        git=Git(root),
        store=ArtifactStore(root),
        provider=provider,
        project_name="demo",
        **overrides,
    )


def test_snapshot_captures_git_state_files_and_artifacts(git_repo):
    (git_repo / "app.py").write_text("print('hi')\n", encoding="utf-8")
    (git_repo / "node_modules").mkdir()
    (git_repo / "node_modules" / "dep.js").write_text("", encoding="utf-8")
    store = ArtifactStore(git_repo)
    store.write(store.plan_path(FeatureId.parse("search")), "# Plan", owner="planning")

    snapshot = collect_snapshot(_context(git_repo))
    summary = snapshot.to_markdown()

    assert snapshot.branch
    assert "?? app.py" in snapshot.status
    assert "chore: initial" in snapshot.recent_commits
    assert "app.py" in snapshot.files
    assert "plans/search.md" in snapshot.files
    assert not any(path.startswith("node_modules") for path in snapshot.files)
    assert snapshot.plans == ["search"]
    assert summary.startswith("# Project: demo\n")
    assert "Plans: search" in summary
    assert "Initial content" in summary


def test_snapshot_outside_git_repository(tmp_path):
    (tmp_path / "notes.txt").write_text("hello", encoding="utf-8")

    snapshot = collect_snapshot(_context(tmp_path))

    assert snapshot.branch is None
    assert "Not a git repository." in snapshot.to_markdown()
    assert snapshot.files == ["notes.txt"]


def test_snapshot_limits_file_listing(tmp_path):
    for index in range(5):
        (tmp_path / f"f{index}.txt").write_text("", encoding="utf-8")

    snapshot = collect_snapshot(_context(tmp_path, file_limit=2))

    assert snapshot.files == ["f0.txt", "f1.txt"]
    assert snapshot.omitted_files == 3
    assert "- ... (3 more)" in snapshot.to_markdown()


def test_prime_fails_for_missing_repository(tmp_path):
    with pytest.raises(RelayError):
        run_prime(_context(tmp_path / "missing"))


def test_prime_without_agent_returns_summary(tmp_path):
    result = run_prime(_context(tmp_path, NullProvider()))

    assert result.reason == "summarized"
    assert result.output.startswith("# Project: demo")
    assert result.artifacts == []


def test_prime_appends_agent_briefing(tmp_path, make_provider):
    provider = make_provider("This is a demo project.")

    result = run_prime(_context(tmp_path, provider))

    assert result.reason == "primed"
    assert result.output.rstrip().endswith("## Agent Briefing\n\nThis is a demo project.")
    assert "<repository-snapshot>" in provider.prompts[0]


def test_prime_survives_agent_failure(tmp_path, make_provider):
    result = run_prime(_context(tmp_path, make_provider(AgentError("offline"))))

    assert result.success
    assert result.used_fallback

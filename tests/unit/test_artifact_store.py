import pytest

from relay.domain.artifact import ArtifactStore
from relay.domain.identifiers import FeatureId, IssueId
from relay.errors import (
    ArtifactExistsError,
    ArtifactNotFoundError,
    ArtifactReadError,
    ArtifactWriteError,
)


def test_paths_follow_layout_convention(tmp_path):
    store = ArtifactStore(tmp_path)

    assert store.plan_path(FeatureId.parse("Dark Mode")) == tmp_path / "plans" / "dark-mode.md"
    assert store.rca_path(IssueId.parse("#12")) == tmp_path / "docs" / "rca" / "issue-12.md"


def test_custom_directories_are_respected(tmp_path):
    store = ArtifactStore(tmp_path, plans_dir="work/plans", rca_dir="analysis")

    assert store.plan_path(FeatureId.parse("x")) == tmp_path / "work" / "plans" / "x.md"
    assert store.rca_path(IssueId.parse(3)) == tmp_path / "analysis" / "issue-3.md"


def test_write_then_read_round_trip(tmp_path):
    store = ArtifactStore(tmp_path)
    path = store.plan_path(FeatureId.parse("search"))

    written = store.write(path, "# Plan", owner="planning")
    loaded = store.read(path, kind="plan")

    assert written.content == "# Plan\n"
    assert loaded.content == "# Plan\n"
    assert written.to_dict(tmp_path)["path"] == "plans/search.md"


def test_write_refuses_to_overwrite_without_force(tmp_path):
    store = ArtifactStore(tmp_path)
    path = store.plan_path(FeatureId.parse("search"))
    store.write(path, "# First", owner="planning")

    with pytest.raises(ArtifactExistsError) as excinfo:
        store.write(path, "# Second", owner="planning")

    assert "plans/search.md" in str(excinfo.value)
    assert path.read_text(encoding="utf-8") == "# First\n"

    store.write(path, "# Second", owner="planning", force=True)
    assert path.read_text(encoding="utf-8") == "# Second\n"


def test_read_missing_artifact_names_the_kind(tmp_path):
    store = ArtifactStore(tmp_path)

    with pytest.raises(ArtifactNotFoundError) as excinfo:
        store.read(store.rca_path(IssueId.parse(5)), kind="RCA")

    assert str(excinfo.value) == "RCA not found: docs/rca/issue-5.md"


def test_write_reports_unwritable_target(tmp_path):
    blocker = tmp_path / "plans"
    blocker.write_text("not a directory", encoding="utf-8")
    store = ArtifactStore(tmp_path)

    with pytest.raises(ArtifactWriteError):
        store.write(store.plan_path(FeatureId.parse("x")), "# Plan", owner="planning")


def test_inventory_lists_plans_and_rcas(tmp_path):
    store = ArtifactStore(tmp_path)
    store.write(store.plan_path(FeatureId.parse("b")), "# B", owner="planning")
    store.write(store.plan_path(FeatureId.parse("a")), "# A", owner="planning")
    store.write(store.rca_path(IssueId.parse(10)), "# 10", owner="rca")
    store.write(store.rca_path(IssueId.parse(2)), "# 2", owner="rca")
    (store.rca_dir / "notes.md").write_text("ignored", encoding="utf-8")

    assert store.list_plans() == ["a", "b"]
    assert store.list_rcas() == [2, 10]


def test_inventory_is_empty_without_directories(tmp_path):
    store = ArtifactStore(tmp_path)

    assert store.list_plans() == []
    assert store.list_rcas() == []


def test_read_reports_undecodable_artifact(tmp_path):
    store = ArtifactStore(tmp_path)
    path = store.plan_path(FeatureId.parse("binary"))
    path.parent.mkdir(parents=True)
    path.write_bytes(b"# Plan\n\xff\xfe\x00broken")

    with pytest.raises(ArtifactReadError) as excinfo:
        store.read(path, kind="plan")

    assert "unable to read plans/binary.md" in str(excinfo.value)


def test_owns_matches_plan_and_rca_directories(tmp_path):
    store = ArtifactStore(tmp_path, rca_dir="notes/rca")

    assert store.owns("plans/search.md")
    assert store.owns("notes/rca/issue-3.md")
    assert not store.owns("docs/rca/issue-3.md")
    assert not store.owns("app.py")

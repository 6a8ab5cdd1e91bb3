import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Union

from relay.config import load_config
from relay.domain.artifact import ArtifactStore
from relay.domain.identifiers import FeatureId, IssueId
from relay.domain.step_result import StepResult
from relay.errors import ConfigError, RelayError
from relay.integrations.git import Git
from relay.integrations.tracker import IssueTracker, resolve_issue_tracker
from relay.logging_utils import get_logger
from relay.providers.agent_provider import AgentProvider
from relay.steps.commit import CommitContext, run_commit
from relay.steps.execute import ExecuteContext, run_execute
from relay.steps.implement_fix import ImplementFixContext, run_implement_fix
from relay.steps.planning import PlanningContext, run_planning
from relay.steps.prime import PrimeContext, collect_snapshot, run_prime
from relay.steps.rca import RcaContext, run_rca


logger = get_logger(__name__)


class Relay:
    """Runs workflow steps against one project and records their history."""

    def __init__(
        self,
        project_root: Union[str, Path, None] = None,
        *,
        config_path: Union[str, Path, None] = None,
        config: Optional[Dict[str, Any]] = None,
        provider: Optional[AgentProvider] = None,
        tracker: Optional[IssueTracker] = None,
    ) -> None:
        self.project_root, self.config = load_config(
            Path(config_path) if config_path is not None else None,
            project_root=Path(project_root) if project_root is not None else None,
            overrides=config,
        )
        self.project_name = self.config.get("project", {}).get("name") or self.project_root.name

        paths = self.config.get("paths", {}) or {}
        self.store = ArtifactStore(
            self.project_root,
            plans_dir=str(paths.get("plans_dir") or "plans"),
            rca_dir=str(paths.get("rca_dir") or "docs/rca"),
        )
        self.history_path = self.project_root / str(
            paths.get("history_file") or ".relay/history.jsonl"
        )
        self.git = Git(self.project_root)
        self.provider = provider if provider is not None else self.create_agent_provider()
        self._tracker = tracker

    def create_agent_provider(self) -> AgentProvider:
        agent_config = self.config.get("agent", {}) or {}
        if not isinstance(agent_config, Mapping):
            raise ConfigError("'agent' must be a mapping")
        try:
            return AgentProvider.create_provider(
                agent_config.get("provider") or "claude_code",
                model=agent_config.get("model"),
                timeout=agent_config.get("timeout"),
                cli_path=agent_config.get("cli_path"),
                project_root=self.project_root,
            )
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc

    @property
    def tracker(self) -> IssueTracker:
        if self._tracker is None:
            tracker_config = self.config.get("tracker", {}) or {}
            self._tracker = resolve_issue_tracker(
                tracker_config.get("provider"), repo=tracker_config.get("repo")
            )
        return self._tracker

    def _prime_context(self, provider: Optional[AgentProvider]) -> PrimeContext:
        prime_config = self.config.get("prime", {}) or {}
        return PrimeContext(
            project_root=self.project_root,
            git=self.git,
            store=self.store,
            provider=provider,
            project_name=self.project_name,
            commit_limit=int(prime_config.get("commit_limit", 10)),
            file_limit=int(prime_config.get("file_limit", 60)),
            readme_lines=int(prime_config.get("readme_lines", 40)),
        )

    # ------------------------------------------------------------------
    # Workflow steps
    # ------------------------------------------------------------------
    def prime(self) -> StepResult:
        return self._record("prime", lambda: run_prime(self._prime_context(self.provider)))

    def plan(self, feature: str, *, force: bool = False) -> StepResult:
        def runner() -> StepResult:
            feature_id = FeatureId.parse(feature)
            summary = collect_snapshot(self._prime_context(None)).to_markdown()
            context = PlanningContext(
                store=self.store,
                feature=feature_id,
                provider=self.provider,
                context_summary=summary,
                force=force,
            )
            return run_planning(context)

        return self._record("planning", runner)

    def execute(self, feature: str) -> StepResult:
        def runner() -> StepResult:
            context = ExecuteContext(
                store=self.store, feature=FeatureId.parse(feature), provider=self.provider
            )
            return run_execute(context)

        return self._record("execute", runner)

    def commit(
        self,
        files: Optional[Sequence[str]] = None,
        *,
        message: Optional[str] = None,
    ) -> StepResult:
        return self._record(
            "commit", lambda: run_commit(self._commit_context(files, message=message))
        )

    def rca(self, issue_id: Union[str, int], *, force: bool = False) -> StepResult:
        def runner() -> StepResult:
            context = RcaContext(
                store=self.store,
                issue=IssueId.parse(issue_id),
                tracker=self.tracker,
                provider=self.provider,
                force=force,
            )
            return run_rca(context)

        return self._record("rca", runner)

    def implement_fix(self, issue_id: Union[str, int], *, commit: bool = True) -> StepResult:
        def runner() -> StepResult:
            context = ImplementFixContext(
                store=self.store,
                issue=IssueId.parse(issue_id),
                provider=self.provider,
                commit=self._commit_context(None) if commit else None,
            )
            return run_implement_fix(context)

        return self._record("implement-fix", runner)

    def status(self) -> Dict[str, Any]:
        return {"plans": self.store.list_plans(), "rcas": self.store.list_rcas()}

    def _commit_context(
        self, files: Optional[Sequence[str]], *, message: Optional[str] = None
    ) -> CommitContext:
        return CommitContext(
            git=self.git,
            files=list(files or []),
            provider=self.provider,
            message=message,
            project_name=self.project_name,
        )

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------
    def _record(self, step_name: str, runner: Callable[[], StepResult]) -> StepResult:
        try:
            result = runner()
        except RelayError as exc:
            self.write_history({"event": step_name, "success": False, "reason": str(exc)})
            raise
        self.write_history(result.history_record())
        return result

    def write_history(self, record: Dict[str, Any]) -> None:
        if not isinstance(record, dict):
            raise TypeError("History records must be mappings of field names to values.")

        if not self.project_root.is_dir():
            logger.warning("Project root %s missing; history not written", self.project_root)
            return

        payload: Dict[str, Any] = dict(record)
        timestamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        payload.setdefault("timestamp", timestamp)

        try:
            self.history_path.parent.mkdir(parents=True, exist_ok=True)
            self._ensure_history_is_git_ignored()
            with self.history_path.open("a", encoding="utf-8") as handle:
                handle.write(json.dumps(payload, sort_keys=False))
                handle.write("\n")
        except OSError as exc:
            logger.warning("Unable to write history event: %s", exc)

    def _ensure_history_is_git_ignored(self) -> None:
        git_dir = self.project_root / ".git"
        if not git_dir.is_dir():
            return

        try:
            relative_dir = self.history_path.parent.relative_to(self.project_root)
        except ValueError:
            return
        pattern = f"/{relative_dir.as_posix()}/"
        if pattern == "/./":
            pattern = f"/{self.history_path.name}"

        exclude_path = git_dir / "info" / "exclude"
        try:
            exclude_path.parent.mkdir(parents=True, exist_ok=True)
            existing = ""
            if exclude_path.exists():
                existing = exclude_path.read_text(encoding="utf-8")
            if pattern in existing.splitlines():
                return
            with exclude_path.open("a", encoding="utf-8") as handle:
                if existing and not existing.endswith("\n"):
                    handle.write("\n")
                handle.write(pattern + "\n")
        except OSError as exc:
            logger.warning("Unable to update %s: %s", exclude_path, exc)

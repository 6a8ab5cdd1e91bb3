"""Workflow steps. Each takes a context dataclass and returns a ``StepResult``."""

from __future__ import annotations

from relay.domain.step_result import StepResult

from .commit import CommitContext, run_commit
from .execute import ExecuteContext, extract_tasks, run_execute
from .implement_fix import ImplementFixContext, run_implement_fix
from .planning import PlanningContext, run_planning
from .prime import PrimeContext, RepositorySnapshot, collect_snapshot, run_prime
from .rca import RcaContext, run_rca

__all__ = [
    "StepResult",
    "CommitContext",
    "run_commit",
    "ExecuteContext",
    "extract_tasks",
    "run_execute",
    "ImplementFixContext",
    "run_implement_fix",
    "PlanningContext",
    "run_planning",
    "PrimeContext",
    "RepositorySnapshot",
    "collect_snapshot",
    "run_prime",
    "RcaContext",
    "run_rca",
]

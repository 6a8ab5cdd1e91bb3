"""Structured outcome models shared by all workflow steps."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional


def _now_iso() -> str:
    """Return an ISO-8601 timestamp in UTC."""

    return datetime.now(timezone.utc).isoformat()


@dataclass
class StepResult:
    """Outcome of running a single workflow step.

    ``artifacts`` holds project-relative paths the step wrote, ``inputs`` the
    paths it read. ``output`` carries the text shown to the caller, which is
    the rendered summary for ``prime`` and the agent's report elsewhere.
    """

    step_name: str
    success: bool
    reason: str
    artifacts: List[str] = field(default_factory=list)
    inputs: List[str] = field(default_factory=list)
    output: str = ""
    commit_message: Optional[str] = None
    commit_sha: Optional[str] = None
    used_fallback: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)
    timestamps: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.timestamps:
            self.timestamps = {"completed_at": _now_iso()}

    def to_dict(self) -> Dict[str, Any]:
        """Convert the result into a JSON friendly mapping."""

        return {
            "step_name": self.step_name,
            "success": self.success,
            "reason": self.reason,
            "artifacts": list(self.artifacts),
            "inputs": list(self.inputs),
            "output": self.output,
            "commit_message": self.commit_message,
            "commit_sha": self.commit_sha,
            "used_fallback": self.used_fallback,
            "metadata": dict(self.metadata),
            "timestamps": dict(self.timestamps),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)

    def history_record(self) -> Dict[str, Any]:
        """Return the compact record appended to the workflow history."""

        record: Dict[str, Any] = {
            "event": self.step_name,
            "success": self.success,
            "reason": self.reason,
        }
        if self.artifacts:
            record["artifacts"] = list(self.artifacts)
        if self.inputs:
            record["inputs"] = list(self.inputs)
        if self.commit_sha:
            record["commit"] = self.commit_sha
        if self.commit_message:
            record["message"] = self.commit_message
        if self.used_fallback:
            record["used_fallback"] = True
        return record

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "StepResult":
        return cls(
            step_name=str(payload.get("step_name", "")),
            success=bool(payload.get("success", False)),
            reason=str(payload.get("reason", "")),
            artifacts=[str(item) for item in payload.get("artifacts") or []],
            inputs=[str(item) for item in payload.get("inputs") or []],
            output=str(payload.get("output") or ""),
            commit_message=payload.get("commit_message"),
            commit_sha=payload.get("commit_sha"),
            used_fallback=bool(payload.get("used_fallback", False)),
            metadata=dict(payload.get("metadata") or {}),
            timestamps=dict(payload.get("timestamps") or {}),
        )


__all__ = ["StepResult"]

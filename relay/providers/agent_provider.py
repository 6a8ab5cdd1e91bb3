from abc import ABC, abstractmethod
from typing import Optional


class AgentProvider(ABC):
    """An external coding agent that carries out a step described by a prompt."""

    name: str = "agent"

    @abstractmethod
    def run(self, prompt: str) -> str:
        """Hand ``prompt`` to the agent and return its final report."""

    @property
    def is_interactive(self) -> bool:
        """Whether the provider actually reaches an agent."""

        return True

    @staticmethod
    def create_provider(name: Optional[str], **options) -> "AgentProvider":
        normalized = (name or "").strip().lower()

        model = options.get("model") or options.get("model_name")
        timeout = options.get("timeout")
        project_root = options.get("project_root")

        if normalized in {"claude", "claude_code", "claude-code", "anthropic"}:
            from relay.providers.claude_code_provider import ClaudeCodeProvider

            return ClaudeCodeProvider(
                model_name=model,
                timeout=int(timeout) if timeout is not None else None,
                cli_path=options.get("cli_path"),
                project_root=project_root,
            )

        if normalized in {"null", "none", "dry-run", "dry_run"}:
            from relay.providers.null_provider import NullProvider

            return NullProvider()

        raise ValueError(f"Unsupported agent provider: {name}")

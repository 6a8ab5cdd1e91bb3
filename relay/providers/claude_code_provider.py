"""Claude Code provider that shells out to the ``claude`` CLI."""

from __future__ import annotations

import os
import shlex
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional

from relay.errors import AgentError
from relay.logging_utils import get_logger
from relay.providers.agent_provider import AgentProvider


logger = get_logger(__name__)


class ClaudeCodeProvider(AgentProvider):
    """Run prompts through Claude Code in non-interactive print mode."""

    name = "claude_code"
    DEFAULT_TIMEOUT_SECONDS = 1800
    _CLI_EXECUTABLE_ENV = "CLAUDE_CODE_CLI_PATH"
    _CLI_DEFAULT_EXECUTABLE = "claude"

    def __init__(
        self,
        model_name: Optional[str] = None,
        *,
        timeout: Optional[int] = None,
        cli_path: Optional[str] = None,
        project_root: Optional[Path] = None,
    ) -> None:
        self.model = model_name or os.getenv("CLAUDE_CODE_MODEL")
        self._timeout_seconds = timeout or int(
            os.getenv("CLAUDE_CODE_TIMEOUT", str(self.DEFAULT_TIMEOUT_SECONDS))
        )
        self._cli_path = self._resolve_cli_path(cli_path)
        self._project_root = Path(project_root) if project_root is not None else None

    def _resolve_cli_path(self, cli_path: Optional[str]) -> Optional[str]:
        explicit = cli_path or os.getenv(self._CLI_EXECUTABLE_ENV)
        if isinstance(explicit, str) and explicit.strip():
            return explicit.strip()
        return shutil.which(self._CLI_DEFAULT_EXECUTABLE)

    def build_command(self) -> List[str]:
        if not self._cli_path:
            raise AgentError(
                "Claude Code CLI not found. Install it or set CLAUDE_CODE_CLI_PATH, "
                "or use the null agent for a dry run."
            )
        command = [self._cli_path, "-p", "--output-format", "text"]
        if self.model:
            command.extend(["--model", self.model])
        return command

    def run(self, prompt: str) -> str:
        command = self.build_command()
        logger.info(
            "Launching Claude Code CLI: %s (timeout=%ss)",
            shlex.join(command),
            self._timeout_seconds,
        )

        try:
            result = subprocess.run(
                command,
                input=prompt,
                capture_output=True,
                text=True,
                cwd=self._project_root,
                timeout=self._timeout_seconds,
            )
        except subprocess.TimeoutExpired as exc:
            raise AgentError(
                f"Claude Code CLI timed out after {self._timeout_seconds}s"
            ) from exc
        except OSError as exc:
            raise AgentError(f"Unable to launch Claude Code CLI: {exc}") from exc

        if result.returncode != 0:
            error_msg = result.stderr.strip() or result.stdout.strip()
            raise AgentError(
                f"Claude Code CLI exited with status {result.returncode}: "
                f"{error_msg or 'no diagnostics'}"
            )

        return result.stdout.strip()

import subprocess
from pathlib import Path
from typing import List, Optional, Sequence

from relay.errors import VcsError
from relay.logging_utils import get_logger


logger = get_logger(__name__)

_UNMERGED_CODES = {"DD", "AU", "UD", "UA", "DU", "AA", "UU"}
_MAX_DIFF_LENGTH = 20000


class Git:
    """Thin wrapper over the git executable rooted at a project directory."""

    def __init__(self, project_root: Path, executable: str = "git") -> None:
        self.project_root = Path(project_root)
        self.executable = executable

    def run(self, *args: str, check: bool = True) -> subprocess.CompletedProcess:
        command = [self.executable, *args]
        logger.debug("Running %s", " ".join(command))
        try:
            result = subprocess.run(
                command,
                cwd=self.project_root,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError as exc:
            raise VcsError(f"git not available: {exc}") from exc

        if check and result.returncode != 0:
            error_msg = result.stderr.strip() or result.stdout.strip()
            raise VcsError(
                f"git {args[0] if args else ''} failed: {error_msg or 'no diagnostics'}"
            )
        return result

    def is_repository(self) -> bool:
        try:
            result = self.run("rev-parse", "--is-inside-work-tree", check=False)
        except VcsError:
            return False
        return result.returncode == 0 and result.stdout.strip() == "true"

    def status_entries(self, paths: Optional[Sequence[str]] = None) -> List[tuple]:
        """Return ``(code, path)`` pairs from ``git status --porcelain``."""

        args = ["status", "--porcelain", "--untracked-files=all"]
        if paths:
            args.extend(["--", *paths])
        result = self.run(*args)

        entries = []
        for line in result.stdout.splitlines():
            if len(line) < 4:
                continue
            code = line[:2]
            path = line[3:]
            if " -> " in path:
                path = path.split(" -> ", 1)[1]
            entries.append((code, path.strip('"')))
        return entries

    def conflicted_paths(self) -> List[str]:
        return [path for code, path in self.status_entries() if code in _UNMERGED_CODES]

    def changed_paths(self, paths: Optional[Sequence[str]] = None) -> List[str]:
        return [path for _, path in self.status_entries(paths)]

    def status_short(self) -> str:
        return self.run("status", "--short").stdout.strip()

    def stage(self, paths: Optional[Sequence[str]] = None) -> None:
        if paths:
            self.run("add", "-A", "--", *paths)
        else:
            self.run("add", "-A")

    def staged_paths(self, paths: Optional[Sequence[str]] = None) -> List[str]:
        args = ["diff", "--cached", "--name-only"]
        if paths:
            args.extend(["--", *paths])
        result = self.run(*args)
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def staged_diff(
        self,
        paths: Optional[Sequence[str]] = None,
        *,
        max_length: int = _MAX_DIFF_LENGTH,
    ) -> str:
        args = ["diff", "--cached"]
        if paths:
            args.extend(["--", *paths])
        diff_text = self.run(*args).stdout
        if len(diff_text) <= max_length:
            return diff_text

        # Truncate at the last complete line before max_length
        last_newline = diff_text.rfind("\n", 0, max_length)
        if last_newline != -1:
            truncated = diff_text[:last_newline]
        else:
            truncated = diff_text[:max_length]
        return truncated + "\n... (diff truncated)"

    def recent_commits(self, limit: int = 5) -> str:
        result = self.run("log", f"-{limit}", "--pretty=format:%h %s", check=False)
        if result.returncode != 0:
            # Fresh repositories have no HEAD yet.
            return ""
        return result.stdout.strip()

    def current_branch(self) -> str:
        result = self.run("rev-parse", "--abbrev-ref", "HEAD", check=False)
        if result.returncode != 0:
            return "HEAD"
        return result.stdout.strip() or "HEAD"

    def current_commit(self) -> Optional[str]:
        result = self.run("rev-parse", "HEAD", check=False)
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def commit(
        self,
        message: str,
        *,
        body: Optional[str] = None,
        paths: Optional[Sequence[str]] = None,
    ) -> Optional[str]:
        args = ["commit", "-m", message]
        if body:
            args.extend(["-m", body])
        if paths:
            args.extend(["--", *paths])
        self.run(*args)
        return self.current_commit()

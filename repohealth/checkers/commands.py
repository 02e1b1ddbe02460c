"""Running external programs and collecting their output."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass


@dataclass(frozen=True)
class CommandResult:
    """Output of a finished program; ``error`` is set when it did not succeed."""

    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _as_text(data: str | bytes | None) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode(errors="replace")
    return data


class CommandExecutor:
    """Runs programs with a time limit given in seconds."""

    def __init__(self, timeout: float | None = 30.0) -> None:
        self.timeout = timeout

    def execute(self, name: str, *args: str) -> CommandResult:
        """Run a program in the current directory."""
        return self._run([name, *args], None)

    def execute_in_dir(self, directory: str, name: str, *args: str) -> CommandResult:
        """Run a program inside the given directory."""
        return self._run([name, *args], directory)

    def _run(self, argv: list[str], cwd: str | None) -> CommandResult:
        try:
            completed = subprocess.run(
                argv,
                cwd=cwd,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            return CommandResult(
                stdout=_as_text(exc.stdout),
                stderr=_as_text(exc.stderr),
                exit_code=-1,
                error=f"command timed out after {self.timeout}s",
            )
        except OSError as exc:
            return CommandResult(exit_code=-1, error=str(exc))

        error = None if completed.returncode == 0 else f"exit status {completed.returncode}"
        return CommandResult(
            stdout=completed.stdout,
            stderr=completed.stderr,
            exit_code=completed.returncode,
            error=error,
        )
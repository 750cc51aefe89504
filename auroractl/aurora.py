"""
Thin wrapper around the external ``aurora`` CLI.

Commands are blocking and have no timeout. Output is decoded as UTF-8
with undecodable bytes replaced. The process runner is
injectable so tests can substitute a fake for ``subprocess.run``.
"""

import os
import shutil
import subprocess
from typing import Callable, List, Optional

# unified diff, ignoring `owner` differences
DIFF_VIEWER = "diff -u -I \"'owner': Identity\""


class AuroraError(Exception):
    """Base class for errors talking to the aurora CLI."""
    pass


class ExecutableNotFound(AuroraError):
    """Raised when the aurora executable is not on the search path."""
    pass


class ListCommandFailed(AuroraError):
    """Raised when ``config list`` fails. ``output`` holds any captured stdout."""

    def __init__(self, message: str, output: str = ""):
        super().__init__(message)
        self.output = output


class DiffCommandFailed(AuroraError):
    """Raised when ``job diff`` fails."""
    pass


def resolve_executable(name: str) -> str:
    path = shutil.which(name)
    if path is None:
        raise ExecutableNotFound(f"{name} not found")
    return path


class AuroraClient:
    """Runs ``aurora config list`` and ``aurora job diff``."""

    def __init__(
        self,
        executable_path: str,
        debug: bool = False,
        run: Optional[Callable[..., subprocess.CompletedProcess]] = None,
        executable_name: Optional[str] = None,
    ):
        self.executable_path = executable_path
        self.executable_name = executable_name or os.path.basename(executable_path)
        self.debug = debug
        self._run = run or subprocess.run

    def _command(self, subcommand: List[str], args: List[str]) -> List[str]:
        cmd = [self.executable_path, *subcommand]
        if self.debug:
            cmd.append("--verbose")
        return cmd + args

    def list_jobs(self, config_file: str) -> str:
        """
        Run ``config list`` for a config file and return its stdout.

        Raises:
            ListCommandFailed: The command could not start or exited non-zero.
                Partial stdout is available on the exception.
        """
        cmd = self._command(["config", "list"], [config_file])
        try:
            result = self._run(
                cmd, stdout=subprocess.PIPE, encoding="utf-8", errors="replace"
            )
        except OSError as e:
            raise ListCommandFailed(f"{config_file}: {e}") from e

        output = result.stdout or ""
        if result.returncode != 0:
            raise ListCommandFailed(
                f"{config_file}: exit status {result.returncode}", output=output
            )
        return output

    def diff_job(self, job_path: str, config_file: str) -> str:
        """
        Run ``job diff`` for one job and return its stdout.

        Raises:
            DiffCommandFailed: The command could not start or exited non-zero.
        """
        cmd = self._command(["job", "diff"], [job_path, config_file])
        env = dict(os.environ)
        env["AURORA_UNATTENDED"] = "1"
        env["DIFF_VIEWER"] = DIFF_VIEWER
        try:
            result = self._run(
                cmd,
                stdout=subprocess.PIPE,
                stdin=subprocess.DEVNULL,
                env=env,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            raise DiffCommandFailed(f"{job_path}: {e}") from e

        if result.returncode != 0:
            raise DiffCommandFailed(
                f"{job_path}: Error running diff command, possibly it expects "
                f"input on stdin: exit status {result.returncode}"
            )
        return result.stdout or ""

    def update_command(self, job_path: str, config_file: str) -> str:
        """The command that would apply a pending update."""
        return f"{self.executable_name} update start {job_path} {config_file}"

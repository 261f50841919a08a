# buildtask/adapters/toolchain/process.py
from __future__ import annotations

import shlex
import subprocess
from pathlib import Path
from typing import List, Optional, Union

import structlog

from buildtask.core.domain.exceptions import ToolchainError
from buildtask.core.ports import CompilerProcess

logger = structlog.get_logger()


def _run(cmd: List[str], cwd: Optional[Union[str, Path]] = None, timeout: Optional[int] = None) -> subprocess.CompletedProcess:
    """Run a command with consistent subprocess settings."""
    try:
        return subprocess.run(
            cmd,
            cwd=str(cwd) if cwd else None,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError as e:
        raise ToolchainError(cmd[0], f"executable not found ({e})") from e
    except subprocess.TimeoutExpired as e:
        raise ToolchainError(cmd[0], f"timed out after {timeout}s") from e


def _tail(text: Optional[str], limit: int = 500) -> str:
    return (text or "").strip()[-limit:]


def check(proc: subprocess.CompletedProcess, tool: str) -> subprocess.CompletedProcess:
    """Raise ToolchainError for a non-zero exit status."""
    if proc.returncode != 0:
        msg = _tail(proc.stderr) or _tail(proc.stdout) or "Unknown Error"
        raise ToolchainError(tool, msg, proc.returncode)
    return proc


class SubprocessCompilerProcess(CompilerProcess):
    """Runs the compiler as a child process, relaying its output to the log."""

    def __init__(self, cwd: Optional[str] = None, timeout: Optional[int] = None):
        self.cwd = cwd
        self.timeout = timeout

    def run(self, executable: str, argument: str) -> int:
        cmd = [executable, argument]
        logger.debug("compiler_invoked", cmd=shlex.join(cmd))
        proc = _run(cmd, cwd=self.cwd, timeout=self.timeout)

        for line in (proc.stdout or "").splitlines():
            if line.strip():
                logger.info("compiler_output", line=line)
        if proc.returncode != 0:
            logger.error("compiler_failed", exit_code=proc.returncode, stderr=_tail(proc.stderr))
        return proc.returncode

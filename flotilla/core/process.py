"""One-shot external command execution with timeout enforcement."""

import subprocess
import time
from typing import Optional, Dict, List
from dataclasses import dataclass
from pathlib import Path

from .errors import ProcessError, ProcessTimeoutError
from .log import get_logger, log_process_event

logger = get_logger(__name__)


@dataclass
class ProcessResult:
    """Result of process execution."""

    returncode: int
    stdout: str
    stderr: str
    duration: float

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class ProcessExecutor:
    """Executes one-shot commands with timeout enforcement.

    Every call is a single bounded subprocess invocation; no retries are
    made here.
    """

    def __init__(self, default_timeout: float = 30.0) -> None:
        self._default_timeout = default_timeout

    def run(
        self,
        command: List[str],
        cwd: Optional[Path] = None,
        env: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
        input_data: Optional[str] = None,
    ) -> ProcessResult:
        """Execute a command and capture its output.

        Args:
            command: Command and arguments to execute
            cwd: Working directory (optional)
            env: Environment variables (optional)
            timeout: Maximum runtime in seconds (defaults to executor default)
            input_data: Text written to the process stdin

        Returns:
            ProcessResult, including non-zero exits

        Raises:
            ProcessTimeoutError: If the command exceeds the timeout
            ProcessError: If the command cannot be started
        """
        effective_timeout = timeout if timeout is not None else self._default_timeout
        start_time = time.time()
        log_process_event(
            logger, "exec.start", command=command, timeout=effective_timeout
        )
        try:
            process = subprocess.Popen(
                command,
                cwd=cwd,
                env=env,
                stdin=subprocess.PIPE if input_data is not None else None,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
            )
        except (OSError, subprocess.SubprocessError, ValueError) as e:
            duration = time.time() - start_time
            log_process_event(logger, "exec.error", duration=duration, error=str(e))
            raise ProcessError(f"Failed to execute command {command[0]}: {e}") from e

        try:
            stdout, stderr = process.communicate(
                input=input_data, timeout=effective_timeout
            )
        except subprocess.TimeoutExpired as e:
            duration = time.time() - start_time
            log_process_event(logger, "exec.timeout", pid=process.pid, duration=duration)
            process.kill()
            process.communicate()
            raise ProcessTimeoutError(
                f"Command {command[0]} timed out after {effective_timeout}s",
                timeout=effective_timeout,
                details={"command": command, "duration": duration},
            ) from e

        duration = time.time() - start_time
        result = ProcessResult(
            returncode=process.returncode,
            stdout=stdout or "",
            stderr=stderr or "",
            duration=duration,
        )
        if result.ok:
            log_process_event(logger, "exec.ok", pid=process.pid, duration=duration)
        else:
            log_process_event(
                logger,
                "exec.failed",
                pid=process.pid,
                return_code=process.returncode,
                duration=duration,
            )
        return result

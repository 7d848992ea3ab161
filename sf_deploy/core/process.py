# sf_deploy/core/process.py
"""External process invocation"""

import asyncio
import logging
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Union

from ..constants import SPAWN_FAILURE_EXIT_CODE

logger = logging.getLogger(__name__)

ExitCallback = Callable[[List[str], List[str], int], None]


class JobState(Enum):
    """Lifecycle of a job"""
    NOT_STARTED = "not_started"
    RUNNING = "running"
    EXITED = "exited"


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace") if data else ""


def _split_lines(text: str) -> List[str]:
    """Split on line feeds only; U+2028 and friends may sit inside JSON strings"""
    if not text:
        return []
    lines = [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]
    if lines[-1] == "":
        lines.pop()
    return lines


class Job:
    """One invocation of an external command

    The job is started from a running event loop and returns immediately.
    Output is collected line by line and the exit callback is scheduled back
    onto the same loop once the process has exited, so callbacks never run
    concurrently with other loop code. No timeout is applied.
    """

    def __init__(self,
                 command: str,
                 args: Optional[Sequence[str]] = None,
                 cwd: Optional[Union[str, Path]] = None,
                 env: Optional[Dict[str, str]] = None):
        self.command = command
        self.args = [str(arg) for arg in (args or [])]
        self.cwd = str(cwd) if cwd else None
        self.env = env
        self.state = JobState.NOT_STARTED
        self.pid: Optional[int] = None
        self.stdout_lines: List[str] = []
        self.stderr_lines: List[str] = []
        self.exit_code: Optional[int] = None
        self._stdout_text = ""
        self._future: Optional[asyncio.Future] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def argv(self) -> List[str]:
        return [self.command, *self.args]

    @property
    def is_running(self) -> bool:
        return self.state == JobState.RUNNING

    @property
    def stdout_text(self) -> str:
        """Standard output exactly as decoded"""
        return self._stdout_text

    def start(self, on_exit: Optional[ExitCallback] = None) -> asyncio.Future:
        """Spawn the process without blocking

        Args:
            on_exit: Called once with (stdout_lines, stderr_lines, exit_code)

        Returns:
            Future resolving to the exit code after ``on_exit`` has run
        """
        if self.state != JobState.NOT_STARTED:
            raise RuntimeError(f"Job already started: {' '.join(self.argv)}")

        loop = asyncio.get_running_loop()
        self.state = JobState.RUNNING
        self._future = loop.create_future()
        logger.debug("Starting job: %s", self.argv)
        self._task = loop.create_task(self._run(loop, on_exit))
        return self._future

    async def wait(self) -> int:
        """Wait for the job and its exit callback to complete"""
        if self._future is None:
            raise RuntimeError("Job has not been started")
        return await self._future

    async def _run(self, loop: asyncio.AbstractEventLoop,
                   on_exit: Optional[ExitCallback]) -> None:
        try:
            proc = await asyncio.create_subprocess_exec(
                self.command,
                *self.args,
                cwd=self.cwd,
                env=self.env,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            self.pid = proc.pid
            stdout, stderr = await proc.communicate()
            exit_code = proc.returncode
        except Exception as e:
            # Invalid arguments (an embedded null byte) raise ValueError, not OSError
            logger.error(f"Failed to run {self.command}: {e}")
            stdout, stderr, exit_code = b"", str(e).encode(), SPAWN_FAILURE_EXIT_CODE

        self._stdout_text = _decode(stdout)
        self.stdout_lines = _split_lines(self._stdout_text)
        self.stderr_lines = _split_lines(_decode(stderr))
        self.exit_code = exit_code
        self.state = JobState.EXITED
        logger.debug("Job %s exited with %s", self.command, exit_code)

        loop.call_soon(self._deliver, on_exit)

    def _deliver(self, on_exit: Optional[ExitCallback]) -> None:
        try:
            if on_exit is not None:
                on_exit(list(self.stdout_lines), list(self.stderr_lines), self.exit_code)
        except Exception as e:
            logger.exception("Exit callback of %s failed", self.command)
            self._future.set_exception(e)
        else:
            self._future.set_result(self.exit_code)


JobFactory = Callable[..., Job]

# sf_deploy/core/progress.py
"""Progress reporting for deployments"""

import logging
from typing import Optional

from rich.progress import Progress, TaskID

logger = logging.getLogger(__name__)


class ProgressHandle:
    """Progress of one logical operation

    The base handle has no display backend and ignores every report, so
    code can always report progress whether or not a UI is attached.
    """

    def __init__(self, title: str):
        self.title = title
        self.message: Optional[str] = None
        self.percentage: int = 0
        self._finished = False

    @property
    def finished(self) -> bool:
        return self._finished

    def report(self, message: str, percentage: Optional[int] = None) -> None:
        """Report a status message and optional percentage"""
        if self._finished:
            logger.debug("Ignoring report on finished handle %r: %s", self.title, message)
            return
        self.message = message
        if percentage is not None:
            self.percentage = max(0, min(100, int(percentage)))
        self._render()

    def finish(self) -> None:
        """Terminate the handle; only the first call has an effect"""
        if self._finished:
            logger.warning("Progress handle %r finished more than once", self.title)
            return
        self._finished = True
        self._close()

    def _render(self) -> None:
        pass

    def _close(self) -> None:
        pass


class RichProgressHandle(ProgressHandle):
    """Progress handle rendered as a task of a rich Progress display"""

    def __init__(self, title: str, progress: Progress):
        super().__init__(title)
        self.progress = progress
        self.task_id: TaskID = progress.add_task(title, total=100)

    def _render(self) -> None:
        self.progress.update(
            self.task_id,
            description=f"{self.title}: {self.message}" if self.message else self.title,
            completed=self.percentage,
        )

    def _close(self) -> None:
        self.progress.stop_task(self.task_id)


def create_progress_handle(title: str, progress: Optional[Progress] = None) -> ProgressHandle:
    """Create a progress handle, degrading to a silent one without a display

    Args:
        title: Title of the operation
        progress: rich Progress display to attach to

    Returns:
        Progress handle
    """
    if progress is None:
        return ProgressHandle(title)
    return RichProgressHandle(title, progress)

"""User-facing notifications"""

import logging
from typing import Optional

from rich.console import Console
from rich.markup import escape

from ..constants import Severity, EMOJI_ERROR, EMOJI_WARNING, EMOJI_INFO

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    Severity.ERROR: logging.ERROR,
    Severity.WARNING: logging.WARNING,
    Severity.INFO: logging.INFO,
}


class Notifier:
    """Delivers one message per terminal deployment state"""

    def notify(self, message: str, severity: Severity = Severity.INFO) -> None:
        raise NotImplementedError


class LogNotifier(Notifier):
    """Notifier writing to the sf_deploy logger"""

    def notify(self, message: str, severity: Severity = Severity.INFO) -> None:
        logger.log(_LOG_LEVELS[severity], message)


class ConsoleNotifier(Notifier):
    """Notifier printing rich markup to the console"""

    STYLES = {
        Severity.ERROR: ("red", EMOJI_ERROR),
        Severity.WARNING: ("yellow", EMOJI_WARNING),
        Severity.INFO: ("green", EMOJI_INFO),
    }

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def notify(self, message: str, severity: Severity = Severity.INFO) -> None:
        style, icon = self.STYLES[severity]
        self.console.print(f"[{style}]{icon}[/{style}] {escape(message)}", markup=True, highlight=False)

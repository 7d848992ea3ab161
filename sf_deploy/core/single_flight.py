"""Single-flight guard for deployments"""

import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)


class SingleFlight:
    """Token allowing at most one in-flight operation

    Not thread safe: acquire and release must happen on the event loop
    thread, where read-then-set cannot interleave.
    """

    def __init__(self, name: str = "deploy"):
        self.name = name
        self._holder: Optional[Any] = None

    @property
    def busy(self) -> bool:
        return self._holder is not None

    @property
    def holder(self) -> Optional[Any]:
        return self._holder

    def try_acquire(self, holder: Any) -> bool:
        """Take the token for ``holder``; False if already taken"""
        if self._holder is not None:
            return False
        self._holder = holder
        logger.debug("Acquired %s guard", self.name)
        return True

    def release(self, holder: Any) -> None:
        """Return the token taken by ``holder``"""
        if self._holder is not holder:
            raise RuntimeError(f"{self.name} guard is not held by {holder!r}")
        self._holder = None
        logger.debug("Released %s guard", self.name)

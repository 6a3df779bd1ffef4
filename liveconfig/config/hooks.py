"""
Hook dispatch registry.

A hook is a per-severity callback fired on lifecycle and error events of a
ConfigManager. There are five fixed severities and each holds at most one
handler.
"""

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, List, Optional

from liveconfig.core.locking import ReadWriteLock

logger = logging.getLogger(__name__)


class HookPattern(IntEnum):
    """Hook severities, in fixed ordinal order."""
    INIT = 0
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4


@dataclass(frozen=True)
class HookContext:
    """Payload handed to a hook handler."""
    message: str
    pattern: HookPattern


HookHandler = Callable[[HookContext], None]


class HookRegistry:
    """
    Fixed mapping from HookPattern to an optional handler.

    Handlers are read under the read lock and invoked after it is released,
    so a handler may call back into the manager (including ``set_hook``)
    without deadlocking.
    """

    def __init__(self):
        self._handlers: List[Optional[HookHandler]] = [None] * len(HookPattern)
        self._lock = ReadWriteLock()

    def set_hook(self, pattern: HookPattern, handler: Optional[HookHandler]) -> None:
        """Install ``handler`` for ``pattern``, replacing any previous one. ``None`` clears it."""
        pattern = HookPattern(pattern)
        with self._lock.write_locked():
            self._handlers[pattern] = handler

    def get_hook(self, pattern: HookPattern) -> Optional[HookHandler]:
        with self._lock.read_locked():
            return self._handlers[HookPattern(pattern)]

    def exec(self, pattern: HookPattern, message: str) -> None:
        """
        Dispatch ``message`` to the handler registered for ``pattern``.

        No-op when nothing is registered. A handler that raises is logged and
        does not propagate.
        """
        pattern = HookPattern(pattern)
        with self._lock.read_locked():
            handler = self._handlers[pattern]

        if handler is None:
            return

        try:
            handler(HookContext(message=message, pattern=pattern))
        except Exception:
            logger.exception(f"Hook handler for '{pattern.name.lower()}' failed")

from contextlib import contextmanager
from typing import Callable, Optional


class ChangeWatcher:
    """Forwards change notifications to a callback unless paused.

    Structural commits pause it so the refresh they trigger themselves does not
    re-enter the same pipeline.
    """
    def __init__(self, callback: Optional[Callable[[], None]] = None):
        self.callback = callback
        self._pause_depth = 0

    @property
    def active(self) -> bool:
        return self._pause_depth == 0

    def notify(self) -> bool:
        if not self.active or self.callback is None:
            return False
        self.callback()
        return True

    @contextmanager
    def paused(self):
        self._pause_depth += 1
        try:
            yield self
        finally:
            self._pause_depth -= 1

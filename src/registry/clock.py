import time


class ServerClock:
    """Whole seconds elapsed since the process epoch (monotonic, not wall-clock)."""

    def __init__(self, source=time.monotonic):
        self._source = source
        self._epoch = source()

    def now(self) -> int:
        return int(self._source() - self._epoch)

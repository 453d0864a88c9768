from __future__ import annotations


class StopSignal:
    """Cooperative stop flag shared by a runner and its batch limiter.

    Setting it never interrupts work that already started; it only tells the
    limiter not to dispatch further batches.
    """

    def __init__(self) -> None:
        self._stop_requested = False

    @property
    def requested(self) -> bool:
        return self._stop_requested

    def request_stop(self) -> None:
        self._stop_requested = True

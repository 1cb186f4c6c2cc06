"""
Wall-clock timing for Result.timing.

An engine call starts one Timer, wraps its stages in named sections
('design', 'assumptions', 'test', 'post_hoc') and stores the breakdown in
its Result envelope.
"""

import time
from collections import defaultdict
from contextlib import contextmanager
from typing import Iterator


class Timer:
    """
    Overall timer plus per-stage totals.

        timer = Timer()
        timer.start()
        with timer.section('test'):
            fit = FITTERS[test](design)
        timer.stop()
        timer.result()   # {'total_seconds': ..., 'test': ...}

    A section entered more than once accumulates.
    """

    def __init__(self):
        self._began: float | None = None
        self._elapsed: float | None = None
        self._stages: defaultdict[str, float] = defaultdict(float)

    def start(self) -> None:
        self._began = time.perf_counter()
        self._elapsed = None

    def stop(self) -> None:
        if self._began is None:
            raise RuntimeError("Timer.stop() called before start()")
        self._elapsed = time.perf_counter() - self._began

    @contextmanager
    def section(self, name: str) -> Iterator[None]:
        entered = time.perf_counter()
        try:
            yield
        finally:
            self._stages[name] += time.perf_counter() - entered

    def result(self) -> dict[str, float]:
        """Breakdown as 'total_seconds' followed by the stages in entry order."""
        if self._elapsed is None:
            raise RuntimeError("Timer.result() called before stop()")
        return {'total_seconds': self._elapsed, **self._stages}

"""
Timer Module

Labelled start/stop timer used to instrument the Ewald passes.
"""

import logging
import time
from contextlib import contextmanager
from typing import Dict

logger = logging.getLogger(__name__)


class Timer:
    """
    Accumulating wall-clock timer keyed by label.

    Stopping a label that was never started is a no-op returning 0.
    """

    def __init__(self):
        self.timings: Dict[str, float] = {}
        self._begin: Dict[str, float] = {}

    def start(self, label: str):
        """Start timing `label`."""
        self._begin[label] = time.perf_counter()

    def stop(self, label: str) -> float:
        """Stop timing `label` and return the elapsed seconds."""
        begin = self._begin.pop(label, None)
        if begin is None:
            return 0.0
        elapsed = time.perf_counter() - begin
        self.timings[label] = self.timings.get(label, 0.0) + elapsed
        logger.debug("%-20s : %.6f s", label, elapsed)
        return elapsed

    @contextmanager
    def scoped(self, label: str):
        """Time the enclosed block under `label`."""
        self.start(label)
        try:
            yield
        finally:
            self.stop(label)

    def reset(self):
        """Forget all recorded timings."""
        self.timings.clear()
        self._begin.clear()

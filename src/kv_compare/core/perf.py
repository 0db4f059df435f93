"""Phase timing for list and compare runs."""

import logging
import time
from dataclasses import dataclass

from kv_compare.core.constants import BANNER_WIDTH


@dataclass(frozen=True)
class PhaseTiming:
    """Wall-clock duration of one phase and how many secrets it touched"""

    duration: float
    items: int | None = None

    @property
    def rate(self) -> float | None:
        if not self.items or self.duration <= 0:
            return None
        return self.items / self.duration


class PerformanceTracker:
    """Time the enumerate, resolve and compare phases of a run.

    Phases are keyed by name (e.g. ``"Resolve values (dev)"``). Ending a
    phase that was never started is ignored so callers can end phases from
    ``finally`` blocks unconditionally.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.timings: dict[str, PhaseTiming] = {}
        self._started: dict[str, float] = {}

    def start(self, phase: str) -> None:
        self._started[phase] = time.perf_counter()

    def end(self, phase: str, items: int | None = None) -> PhaseTiming | None:
        started = self._started.pop(phase, None)
        if started is None:
            return None
        timing = PhaseTiming(time.perf_counter() - started, items)
        self.timings[phase] = timing

        suffix = f" ({items} secrets)" if items is not None else ""
        self.logger.debug(f"{phase} completed in {timing.duration:.2f}s{suffix}")
        return timing

    @property
    def total_seconds(self) -> float:
        return sum(t.duration for t in self.timings.values())

    def get_summary(self) -> str:
        """Render the collected timings, slowest phase first"""
        if not self.timings:
            return "No performance metrics collected"

        total = self.total_seconds
        rule = "=" * BANNER_WIDTH
        lines = ["", rule, "PERFORMANCE SUMMARY", rule]
        for phase, timing in sorted(self.timings.items(), key=lambda kv: kv[1].duration, reverse=True):
            share = timing.duration / total * 100 if total > 0 else 0.0
            line = f"{phase:32s} {timing.duration:6.2f}s {share:5.1f}%"
            if timing.rate is not None:
                line += f"  {timing.rate:7.1f} secrets/s"
            lines.append(line)
        lines += [rule, f"{'Total':32s} {total:6.2f}s", rule]
        return "\n".join(lines)

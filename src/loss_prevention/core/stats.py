"""
Debug statistics for the live view (read latency, process latency, frame interval).
"""

from dataclasses import dataclass


@dataclass
class DebugStats:
    """Running current/min/max/average over millisecond samples."""

    current: float = 0.0
    min: float = 0.0
    max: float = 0.0
    total: float = 0.0
    count: int = 0

    def add_value(self, value: float) -> None:
        self.current = value
        if self.count == 0 or value < self.min:
            self.min = value
        if self.count == 0 or value > self.max:
            self.max = value
        self.total += value
        self.count += 1

    def average(self) -> float:
        return self.total / self.count if self.count else 0.0

    def fps(self) -> float:
        """Frames per second implied by the latest frame interval."""
        return 1000.0 / self.current if self.current > 0 else 0.0

    def average_fps(self) -> float:
        avg = self.average()
        return 1000.0 / avg if avg > 0 else 0.0

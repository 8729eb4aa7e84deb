"""Map a numeric metric value to a qualitative label via an ordered threshold table.

Bands are checked in declaration order and the first match wins, so when two
bands share a boundary the earlier-declared one claims it. Bounds are
inclusive; a band without bounds matches everything.
"""
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from finengine.core.types import INSUFFICIENT_DATA, UNCLASSIFIED


@dataclass(frozen=True)
class ThresholdBand:
    label: str
    min: Optional[float] = None
    max: Optional[float] = None

    def __post_init__(self):
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError(f"Band '{self.label}' has min {self.min} above max {self.max}")

    def contains(self, value: float) -> bool:
        if self.min is not None and value < self.min:
            return False
        if self.max is not None and value > self.max:
            return False
        return True


@dataclass(frozen=True)
class ThresholdTable:
    """Ordered bands for a single metric."""
    name: str
    bands: Tuple[ThresholdBand, ...]

    def __post_init__(self):
        if not self.bands:
            raise ValueError(f"Threshold table '{self.name}' has no bands")

    @property
    def labels(self) -> Tuple[str, ...]:
        """Declared vocabulary, in band order."""
        return tuple(band.label for band in self.bands)

    @classmethod
    def build(cls, name: str, *bands: Tuple) -> 'ThresholdTable':
        """Build from (label, min, max) tuples."""
        return cls(name=name, bands=tuple(ThresholdBand(label, lo, hi) for label, lo, hi in bands))


def interpret(value: Optional[float], table: ThresholdTable) -> str:
    """Classify value against table.

    Returns ``insufficient_data`` for a missing/non-finite value and
    ``unclassified`` when no band matches.
    """
    if value is None:
        return INSUFFICIENT_DATA
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return INSUFFICIENT_DATA
    if not math.isfinite(numeric):
        return INSUFFICIENT_DATA
    for band in table.bands:
        if band.contains(numeric):
            return band.label
    return UNCLASSIFIED

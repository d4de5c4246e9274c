"""Range and confidence gate applied to every pitch point."""

from __future__ import annotations

from .config import FilterOptions
from .results import PitchPoint


def filter_pitch(point: PitchPoint, options: FilterOptions) -> PitchPoint:
    """Blank out points below ``min_confidence`` or outside ``[min_hz, max_hz]``.

    With filtering disabled the very same point is returned. A blanked point
    keeps its ``time`` and ``confidence``.
    """
    if not options.enabled or point.frequency is None:
        return point
    if point.confidence < options.min_confidence:
        return point.with_frequency(None)
    if not options.min_hz <= point.frequency <= options.max_hz:
        return point.with_frequency(None)
    return point


class FilterPolicy:
    """Callable wrapper over :func:`filter_pitch`."""

    def apply(self, point: PitchPoint, options: FilterOptions) -> PitchPoint:
        return filter_pitch(point, options)

    __call__ = apply


__all__ = ["FilterPolicy", "filter_pitch"]

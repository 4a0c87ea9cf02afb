"""Customer segments produced by the RFM segmentation engine.

Five mutually exclusive classes, ordered from best to worst:
- Champions: best on all three dimensions
- Loyal: strong repeat engagement
- Potential: emerging, upside opportunity
- At Risk: declining engagement, needs intervention
- Hibernating: long-dormant
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType


class RFMSegment(str, Enum):
    """Segment labels. Values are the display names used by reports."""

    CHAMPIONS = "Champions"
    LOYAL = "Loyal"
    POTENTIAL = "Potential"
    AT_RISK = "At Risk"
    HIBERNATING = "Hibernating"


# Canonical ordering for every per-segment output (counts, stats, charts)
SEGMENT_ORDER: tuple[RFMSegment, ...] = (
    RFMSegment.CHAMPIONS,
    RFMSegment.LOYAL,
    RFMSegment.POTENTIAL,
    RFMSegment.AT_RISK,
    RFMSegment.HIBERNATING,
)

# Average-score cut-offs, evaluated top to bottom, first match wins.
# Anything below the last cut-off falls through to Hibernating.
SEGMENT_SCORE_CUTOFFS: tuple[tuple[float, RFMSegment], ...] = (
    (2.5, RFMSegment.CHAMPIONS),
    (2.0, RFMSegment.LOYAL),
    (1.5, RFMSegment.POTENTIAL),
    (1.0, RFMSegment.AT_RISK),
)

# Illustrative retention rate (%) per segment. Fixed table, not measured.
RETENTION_BY_SEGMENT = MappingProxyType(
    {
        RFMSegment.CHAMPIONS: 95,
        RFMSegment.LOYAL: 88,
        RFMSegment.POTENTIAL: 72,
        RFMSegment.AT_RISK: 45,
        RFMSegment.HIBERNATING: 25,
    }
)


def coerce_segment(value: RFMSegment | str) -> RFMSegment:
    """Return ``value`` as an :class:`RFMSegment`.

    Raises
    ------
    ValueError
        If ``value`` is not one of the five segment labels.
    """
    try:
        return RFMSegment(value)
    except ValueError:
        raise ValueError(
            f"Unknown segment: {value!r}. Expected one of "
            f"{[s.value for s in SEGMENT_ORDER]}"
        ) from None


def retention_for(segment: RFMSegment | str) -> int:
    """Look up the fixed retention rate for a segment."""
    return RETENTION_BY_SEGMENT[coerce_segment(segment)]


def segment_for_score(avg_score: float) -> RFMSegment:
    """Map an average RFM score to its segment.

    Examples
    --------
    >>> segment_for_score(3.0)
    <RFMSegment.CHAMPIONS: 'Champions'>
    >>> segment_for_score(4 / 3)
    <RFMSegment.AT_RISK: 'At Risk'>
    """
    for cutoff, segment in SEGMENT_SCORE_CUTOFFS:
        if avg_score >= cutoff:
            return segment
    return RFMSegment.HIBERNATING

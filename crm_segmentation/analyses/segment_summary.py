"""Segment-level aggregates over scored customers.

Reducers consumed by charts, tables and CRM rules:
- How many customers fall in each segment?
- What do customers in each segment look like on average?
- What share of the base does each segment hold?
- Which segments need action?
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Sequence

from crm_segmentation.foundation.scoring import ScoredCustomer
from crm_segmentation.foundation.segments import (
    SEGMENT_ORDER,
    RFMSegment,
    coerce_segment,
    retention_for,
)

# Averages are reported to 2 decimal places (e.g., 1234567.89)
AVERAGE_PRECISION = Decimal("0.01")

# Distribution shares are reported to 1 decimal place (e.g., 33.3%)
SHARE_PRECISION = Decimal("0.1")

# Share of the base above which a segment triggers an insight
POTENTIAL_SHARE_TRIGGER = Decimal("25")
AT_RISK_SHARE_TRIGGER = Decimal("10")


def segment_counts(scored: Sequence[ScoredCustomer]) -> dict[RFMSegment, int]:
    """Count customers per segment.

    Every segment is present in the result, in :data:`SEGMENT_ORDER`, even
    when its count is zero. The counts sum to ``len(scored)``.

    Raises
    ------
    ValueError
        If a customer carries a segment outside the five known ones.

    Examples
    --------
    >>> segment_counts([])[RFMSegment.CHAMPIONS]
    0
    """
    counts = {segment: 0 for segment in SEGMENT_ORDER}
    for customer in scored:
        counts[coerce_segment(customer.segment)] += 1
    return counts


@dataclass(frozen=True)
class SegmentStats:
    """Summary statistics for one segment.

    Attributes
    ----------
    segment:
        Segment these statistics describe
    count:
        Number of customers in the segment
    avg_balance:
        Mean account balance (0 for an empty segment)
    avg_transaction_count:
        Mean number of transactions (0 for an empty segment)
    avg_points:
        Mean loyalty points (0 for an empty segment)
    retention:
        Fixed illustrative retention rate (%) for the segment
    """

    segment: RFMSegment
    count: int
    avg_balance: Decimal
    avg_transaction_count: Decimal
    avg_points: Decimal
    retention: int

    def __post_init__(self) -> None:
        """Validate segment statistics."""
        if self.count < 0:
            raise ValueError(f"Count cannot be negative: {self.count}")
        if not 0 <= self.retention <= 100:
            raise ValueError(f"Retention must be 0-100: {self.retention}")


def _mean(values: Sequence, count: int) -> Decimal:
    if count == 0:
        return Decimal("0")
    total = sum((Decimal(v) for v in values), Decimal("0"))
    return (total / Decimal(count)).quantize(AVERAGE_PRECISION, rounding=ROUND_HALF_UP)


def segment_stats(
    scored: Sequence[ScoredCustomer],
) -> dict[RFMSegment, SegmentStats]:
    """Compute per-segment averages of balance, transactions and points.

    Parameters
    ----------
    scored:
        Scored customers. Balance, points and transaction count are read
        from the customer record each one carries.

    Returns
    -------
    dict[RFMSegment, SegmentStats]
        One entry per segment in :data:`SEGMENT_ORDER`. Empty segments have
        a count and averages of zero.
    """
    members: dict[RFMSegment, list[ScoredCustomer]] = {
        segment: [] for segment in SEGMENT_ORDER
    }
    for customer in scored:
        members[coerce_segment(customer.segment)].append(customer)

    stats: dict[RFMSegment, SegmentStats] = {}
    for segment, customers in members.items():
        count = len(customers)
        stats[segment] = SegmentStats(
            segment=segment,
            count=count,
            avg_balance=_mean([c.balance for c in customers], count),
            avg_transaction_count=_mean([c.transaction_count for c in customers], count),
            avg_points=_mean([c.points for c in customers], count),
            retention=retention_for(segment),
        )
    return stats


@dataclass(frozen=True)
class SegmentShare:
    """Size of one segment relative to the whole scored base."""

    segment: RFMSegment
    count: int
    percentage: Decimal


def segment_distribution(scored: Sequence[ScoredCustomer]) -> list[SegmentShare]:
    """Count and percentage share of every segment, in :data:`SEGMENT_ORDER`.

    Percentages are 0 when ``scored`` is empty.
    """
    counts = segment_counts(scored)
    total = len(scored)

    shares = []
    for segment, count in counts.items():
        if total == 0:
            percentage = Decimal("0")
        else:
            percentage = (Decimal(count) / Decimal(total) * 100).quantize(
                SHARE_PRECISION, rounding=ROUND_HALF_UP
            )
        shares.append(SegmentShare(segment=segment, count=count, percentage=percentage))
    return shares


@dataclass(frozen=True)
class SegmentInsight:
    """A CRM recommendation derived from the segment distribution.

    ``kind`` is one of "success", "warning" or "info".
    """

    kind: str
    message: str
    action: Optional[str] = None
    segment: Optional[RFMSegment] = None


BALANCED_INSIGHT = SegmentInsight(
    kind="info",
    message="Segment distribution is balanced. Monitor trends for optimization opportunities.",
)


def generate_segment_insights(
    scored: Sequence[ScoredCustomer],
) -> list[SegmentInsight]:
    """Turn the segment distribution into CRM recommendations.

    Rules, evaluated per segment in :data:`SEGMENT_ORDER`:
    - any Champions: expand the VIP program
    - Potential above 25% of the base: launch upgrade cross-sell
    - At Risk above 10% of the base: start a winback campaign
    - any Hibernating: send a re-activation offer

    When no rule fires a single "balanced" info insight is returned.
    """
    insights: list[SegmentInsight] = []

    for share in segment_distribution(scored):
        count, pct = share.count, share.percentage

        if share.segment is RFMSegment.CHAMPIONS and count > 0:
            insights.append(
                SegmentInsight(
                    kind="success",
                    message=f"{count} Champions ({pct}%) - Elite customers! Expand VIP rewards program.",
                    action="Create VIP Campaign",
                    segment=share.segment,
                )
            )
        elif share.segment is RFMSegment.POTENTIAL and pct > POTENTIAL_SHARE_TRIGGER:
            insights.append(
                SegmentInsight(
                    kind="info",
                    message=(
                        f"{count} Potential customers ({pct}%) - Ready for upgrade! "
                        "Target with cross-sell campaigns."
                    ),
                    action="Launch Upgrade Campaign",
                    segment=share.segment,
                )
            )
        elif share.segment is RFMSegment.AT_RISK and pct > AT_RISK_SHARE_TRIGGER:
            insights.append(
                SegmentInsight(
                    kind="warning",
                    message=f"{count} At Risk ({pct}%) - Activate retention triggers immediately!",
                    action="Start Winback Campaign",
                    segment=share.segment,
                )
            )
        elif share.segment is RFMSegment.HIBERNATING and count > 0:
            insights.append(
                SegmentInsight(
                    kind="warning",
                    message=f"{count} Hibernating customers - Consider re-engagement incentives.",
                    action="Send Re-activation Offer",
                    segment=share.segment,
                )
            )

    if not insights:
        insights.append(BALANCED_INSIGHT)
    return insights


@dataclass(frozen=True)
class SubScoreCell:
    """Customers sharing one (recency, frequency) sub-score pair."""

    r_score: int
    f_score: int
    count: int
    avg_m_score: Decimal
    segments: tuple[RFMSegment, ...]


def sub_score_matrix(scored: Sequence[ScoredCustomer]) -> list[SubScoreCell]:
    """Group scored customers into a recency x frequency grid.

    Only non-empty cells are returned, ordered by ``(r_score, f_score)``.
    Customers without sub-scores (missing signal) are left out.
    """
    cells: dict[tuple[int, int], list[ScoredCustomer]] = {}
    for customer in scored:
        if customer.sub_scores is None:
            continue
        key = (customer.sub_scores.recency, customer.sub_scores.frequency)
        cells.setdefault(key, []).append(customer)

    matrix = []
    for (r_score, f_score), customers in sorted(cells.items()):
        present = {coerce_segment(c.segment) for c in customers}
        matrix.append(
            SubScoreCell(
                r_score=r_score,
                f_score=f_score,
                count=len(customers),
                avg_m_score=_mean([c.sub_scores.monetary for c in customers], len(customers)),
                segments=tuple(s for s in SEGMENT_ORDER if s in present),
            )
        )
    return matrix

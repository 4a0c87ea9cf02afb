"""RFM segmentation engine.

Maps each customer's Recency / Frequency / Monetary signal to three integer
sub-scores in {1, 2, 3} under a caller-supplied :class:`RFMConfig`,
averages them, and assigns one of five segments from the average.

All functions here are pure: they never mutate their inputs and calling
them twice with the same arguments yields equal results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from types import MappingProxyType
from typing import Any, Mapping, Optional, Sequence, Union

import structlog

from crm_segmentation.foundation.config import RFMConfig
from crm_segmentation.foundation.segments import RFMSegment, segment_for_score

logger = structlog.get_logger(__name__)

Amount = Union[int, Decimal]

SCORE_PRECISION = Decimal("0.01")

# Result for customers without an RFM signal
FALLBACK_SEGMENT = RFMSegment.POTENTIAL
FALLBACK_SCORE = "0.00"


@dataclass(frozen=True)
class RFMSignal:
    """Raw RFM values for one customer in one scoring run.

    Attributes
    ----------
    recency:
        Days since last qualifying activity (lower is better)
    frequency:
        Qualifying transactions in the observation window (higher is better)
    monetary:
        Cumulative transacted value in whole currency units (higher is better)
    """

    recency: int
    frequency: int
    monetary: Amount

    def __post_init__(self) -> None:
        """Validate RFM signal."""
        if self.recency < 0:
            raise ValueError(f"Recency cannot be negative: {self.recency}")
        if self.frequency < 0:
            raise ValueError(f"Frequency cannot be negative: {self.frequency}")
        if self.monetary < 0:
            raise ValueError(f"Monetary value cannot be negative: {self.monetary}")


@dataclass(frozen=True)
class Customer:
    """A customer record as supplied to the engine.

    Attributes
    ----------
    customer_id:
        Unique customer identifier
    rfm_signal:
        RFM signal, or None when the customer has none
    name:
        Display name
    balance:
        Current account balance
    points:
        Loyalty points
    transaction_count:
        Number of transactions on record
    attributes:
        Any other fields the caller carries along; passed through untouched.
        Held as a read-only view and left out of the hash, so customers can
        be used as set members and dict keys.
    """

    customer_id: str
    rfm_signal: Optional[RFMSignal] = None
    name: str = ""
    balance: Amount = 0
    points: int = 0
    transaction_count: int = 0
    attributes: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        """Validate customer record."""
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))
        if self.balance < 0:
            raise ValueError(
                f"Balance cannot be negative: {self.balance} (customer_id={self.customer_id})"
            )
        if self.points < 0:
            raise ValueError(
                f"Points cannot be negative: {self.points} (customer_id={self.customer_id})"
            )
        if self.transaction_count < 0:
            raise ValueError(
                f"Transaction count cannot be negative: {self.transaction_count} "
                f"(customer_id={self.customer_id})"
            )


@dataclass(frozen=True)
class SubScores:
    """Per-dimension integer ratings in {1, 2, 3}."""

    recency: int
    frequency: int
    monetary: int

    @property
    def total(self) -> int:
        return self.recency + self.frequency + self.monetary

    @property
    def average(self) -> float:
        return self.total / 3


@dataclass(frozen=True)
class RFMAssessment:
    """Segment and blended score for one RFM signal.

    ``sub_scores`` is None for the missing-signal fallback.
    """

    segment: RFMSegment
    calculated_score: str
    sub_scores: Optional[SubScores] = None


@dataclass(frozen=True)
class ScoredCustomer:
    """A customer annotated with its segment and calculated score."""

    customer: Customer
    segment: RFMSegment
    calculated_score: str
    sub_scores: Optional[SubScores] = None

    @property
    def customer_id(self) -> str:
        return self.customer.customer_id

    @property
    def rfm_signal(self) -> Optional[RFMSignal]:
        return self.customer.rfm_signal

    @property
    def name(self) -> str:
        return self.customer.name

    @property
    def balance(self) -> Amount:
        return self.customer.balance

    @property
    def points(self) -> int:
        return self.customer.points

    @property
    def transaction_count(self) -> int:
        return self.customer.transaction_count

    @property
    def score_value(self) -> Decimal:
        """``calculated_score`` as a Decimal."""
        return Decimal(self.calculated_score)


def _recency_score(recency: int, thresholds: Sequence) -> int:
    # Lower is better: ascending comparison against the first two thresholds
    if recency <= thresholds[0]:
        return 3
    if recency <= thresholds[1]:
        return 2
    return 1


def _descending_score(value: Amount, thresholds: Sequence) -> int:
    # Higher is better: compare against the highest threshold first
    if value >= thresholds[2]:
        return 3
    if value >= thresholds[1]:
        return 2
    return 1


def calculate_sub_scores(signal: RFMSignal, config: RFMConfig) -> SubScores:
    """Rate each RFM dimension against the configured thresholds.

    Examples
    --------
    >>> from crm_segmentation.foundation.config import DEFAULT_RFM_CONFIG
    >>> calculate_sub_scores(RFMSignal(15, 3, 1_000_000), DEFAULT_RFM_CONFIG)
    SubScores(recency=2, frequency=1, monetary=1)
    """
    return SubScores(
        recency=_recency_score(signal.recency, config.recency_thresholds),
        frequency=_descending_score(signal.frequency, config.frequency_thresholds),
        monetary=_descending_score(signal.monetary, config.monetary_thresholds),
    )


def format_score(total: int) -> str:
    """Format the mean of three sub-scores summing to ``total``, two decimals."""
    average = (Decimal(total) / Decimal(3)).quantize(
        SCORE_PRECISION, rounding=ROUND_HALF_UP
    )
    return str(average)


def score_signal(signal: Optional[RFMSignal], config: RFMConfig) -> RFMAssessment:
    """Score one RFM signal.

    Parameters
    ----------
    signal:
        The customer's RFM signal. None is valid and yields the fallback
        assessment (segment Potential, score "0.00").
    config:
        Scoring thresholds

    Returns
    -------
    RFMAssessment
        Segment, two-decimal score string and sub-scores

    Examples
    --------
    >>> from crm_segmentation.foundation.config import DEFAULT_RFM_CONFIG
    >>> score_signal(RFMSignal(1, 20, 10_000_000), DEFAULT_RFM_CONFIG).calculated_score
    '3.00'
    >>> score_signal(None, DEFAULT_RFM_CONFIG).segment.value
    'Potential'
    """
    if signal is None:
        return RFMAssessment(segment=FALLBACK_SEGMENT, calculated_score=FALLBACK_SCORE)

    sub_scores = calculate_sub_scores(signal, config)
    return RFMAssessment(
        segment=segment_for_score(sub_scores.average),
        calculated_score=format_score(sub_scores.total),
        sub_scores=sub_scores,
    )


def score_customer(customer: Customer, config: RFMConfig) -> ScoredCustomer:
    """Annotate one customer with its segment and calculated score."""
    if customer.rfm_signal is None:
        logger.debug("rfm_signal_missing", customer_id=customer.customer_id)

    assessment = score_signal(customer.rfm_signal, config)
    return ScoredCustomer(
        customer=customer,
        segment=assessment.segment,
        calculated_score=assessment.calculated_score,
        sub_scores=assessment.sub_scores,
    )


def score_all(
    customers: Sequence[Customer], config: RFMConfig
) -> list[ScoredCustomer]:
    """Score every customer, preserving input order.

    No deduplication is performed: a customer appearing twice is scored twice.

    Parameters
    ----------
    customers:
        Customer records to score
    config:
        Scoring thresholds shared by every customer in the run

    Returns
    -------
    list[ScoredCustomer]
        One entry per input customer, in input order
    """
    scored = [score_customer(customer, config) for customer in customers]

    missing = sum(1 for s in scored if s.sub_scores is None)
    logger.info(
        "customers_scored",
        count=len(scored),
        missing_signal=missing,
        config_monotonic=config.is_monotonic,
    )
    return scored

"""Threshold configuration for RFM scoring.

Each dimension is configured with an ascending triple of thresholds.
Recency is "lower is better" and is compared against the first two
entries; frequency and monetary are "higher is better" and are compared
against the last two entries.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal
from numbers import Real
from typing import Any, Mapping, Sequence, Union

Threshold = Union[int, float, Decimal]
ThresholdTriple = tuple[Threshold, Threshold, Threshold]

# JSON keys of the persisted configuration blob
RECENCY_KEY = "recencyThresholds"
FREQUENCY_KEY = "frequencyThresholds"
MONETARY_KEY = "monetaryThresholds"


class ConfigValidationError(ValueError):
    """Raised when a configuration is rejected at write time."""


def _is_finite(value: Threshold) -> bool:
    if isinstance(value, Decimal):
        return value.is_finite()
    if isinstance(value, int):
        return True
    return math.isfinite(value)


def _as_triple(name: str, values: Sequence[Threshold]) -> ThresholdTriple:
    if isinstance(values, (str, bytes)) or len(values) != 3:
        raise ValueError(f"{name} must contain exactly 3 thresholds: {values!r}")
    for value in values:
        if isinstance(value, bool) or not isinstance(value, (Real, Decimal)):
            raise ValueError(f"{name} thresholds must be numeric: {values!r}")
        if not _is_finite(value):
            raise ValueError(f"{name} thresholds must be finite: {values!r}")
        if value < 0:
            raise ValueError(f"{name} thresholds cannot be negative: {values!r}")
    return (values[0], values[1], values[2])


def _is_non_decreasing(values: ThresholdTriple) -> bool:
    return values[0] <= values[1] <= values[2]


@dataclass(frozen=True)
class RFMConfig:
    """Scoring thresholds for the three RFM dimensions.

    Attributes
    ----------
    recency_thresholds:
        Days since last activity ``(r1, r2, r3)``. ``<= r1`` scores 3,
        ``<= r2`` scores 2, anything else scores 1.
    frequency_thresholds:
        Transaction counts ``(f1, f2, f3)``. ``>= f3`` scores 3,
        ``>= f2`` scores 2, anything else scores 1.
    monetary_thresholds:
        Transacted value ``(m1, m2, m3)`` in whole currency units, scored
        the same way as frequency.

    Shape (three non-negative numbers per triple) is validated on
    construction. Ordering is not: a non-monotonic triple still scores
    deterministically. Call :meth:`validate` to reject such triples.
    """

    recency_thresholds: ThresholdTriple = (7, 30, 90)
    frequency_thresholds: ThresholdTriple = (2, 5, 10)
    monetary_thresholds: ThresholdTriple = (500_000, 2_000_000, 5_000_000)

    def __post_init__(self) -> None:
        """Normalize triples to tuples and validate their shape."""
        # frozen dataclass: bypass __setattr__ to store the normalized tuples
        object.__setattr__(
            self,
            "recency_thresholds",
            _as_triple("recency_thresholds", self.recency_thresholds),
        )
        object.__setattr__(
            self,
            "frequency_thresholds",
            _as_triple("frequency_thresholds", self.frequency_thresholds),
        )
        object.__setattr__(
            self,
            "monetary_thresholds",
            _as_triple("monetary_thresholds", self.monetary_thresholds),
        )

    @property
    def is_monotonic(self) -> bool:
        """True when every triple is non-decreasing."""
        return not self.non_monotonic_dimensions()

    def non_monotonic_dimensions(self) -> list[str]:
        """Names of the dimensions whose triple is out of order."""
        triples = {
            "recency": self.recency_thresholds,
            "frequency": self.frequency_thresholds,
            "monetary": self.monetary_thresholds,
        }
        return [name for name, triple in triples.items() if not _is_non_decreasing(triple)]

    def validate(self) -> "RFMConfig":
        """Reject non-monotonic threshold triples.

        Returns
        -------
        RFMConfig
            ``self``, so the call can be chained.

        Raises
        ------
        ConfigValidationError
            If any triple is not in non-decreasing order.
        """
        bad = self.non_monotonic_dimensions()
        if bad:
            raise ConfigValidationError(
                f"Thresholds must be in non-decreasing order for: {', '.join(bad)} "
                f"(recency={list(self.recency_thresholds)}, "
                f"frequency={list(self.frequency_thresholds)}, "
                f"monetary={list(self.monetary_thresholds)})"
            )
        return self

    def as_dict(self) -> dict[str, list[Threshold]]:
        """Serialize to the camelCase shape of the persisted blob."""
        return {
            RECENCY_KEY: list(self.recency_thresholds),
            FREQUENCY_KEY: list(self.frequency_thresholds),
            MONETARY_KEY: list(self.monetary_thresholds),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "RFMConfig":
        """Build a config from the persisted blob shape.

        Raises
        ------
        KeyError
            If a threshold key is missing.
        ValueError
            If a triple has the wrong shape.
        """
        return cls(
            recency_thresholds=tuple(payload[RECENCY_KEY]),
            frequency_thresholds=tuple(payload[FREQUENCY_KEY]),
            monetary_thresholds=tuple(payload[MONETARY_KEY]),
        )


DEFAULT_RFM_CONFIG = RFMConfig()

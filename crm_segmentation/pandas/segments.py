"""Pandas DataFrame adapters for RFM segmentation."""

from numbers import Integral
from typing import List, Mapping, Optional, Sequence

import pandas as pd  # type: ignore

from crm_segmentation.foundation.config import RFMConfig
from crm_segmentation.foundation.scoring import (
    Customer,
    RFMSignal,
    ScoredCustomer,
    score_all,
)
from crm_segmentation.foundation.segments import RFMSegment
from crm_segmentation.analyses.segment_summary import SegmentStats
from ._utils import amount_to_float, float_to_amount

CUSTOMER_COLUMNS = [
    "customer_id",
    "name",
    "recency",
    "frequency",
    "monetary",
    "balance",
    "points",
    "transaction_count",
]

SCORED_COLUMNS = CUSTOMER_COLUMNS + [
    "r_score",
    "f_score",
    "m_score",
    "segment",
    "calculated_score",
]

SEGMENT_STATS_COLUMNS = [
    "segment",
    "count",
    "avg_balance",
    "avg_transaction_count",
    "avg_points",
    "retention",
]

_SIGNAL_COLUMNS = ["recency", "frequency", "monetary"]


def _customer_row(customer: Customer) -> dict:
    signal = customer.rfm_signal
    return {
        "customer_id": customer.customer_id,
        "name": customer.name,
        "recency": signal.recency if signal else None,
        "frequency": signal.frequency if signal else None,
        "monetary": amount_to_float(signal.monetary) if signal else None,
        "balance": amount_to_float(customer.balance),
        "points": customer.points,
        "transaction_count": customer.transaction_count,
    }


def customers_to_dataframe(customers: Sequence[Customer]) -> pd.DataFrame:
    """Convert customers to a DataFrame, one row per customer, in input order.

    Customers without an RFM signal have NaN recency/frequency/monetary.
    """
    if not customers:
        return pd.DataFrame(columns=CUSTOMER_COLUMNS)
    return pd.DataFrame([_customer_row(c) for c in customers], columns=CUSTOMER_COLUMNS)


def _optional(record: Mapping, column: str, default):
    value = record.get(column, default)
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return default
    return value


def _whole(value, column: str, customer_id: str) -> int:
    if isinstance(value, Integral):
        return int(value)
    as_float = float(value)
    if not as_float.is_integer():
        raise ValueError(
            f"{column} must be a whole number for customer_id={customer_id}: {value!r}"
        )
    return int(as_float)


def dataframe_to_customers(customers_df: pd.DataFrame) -> List[Customer]:
    """Convert a DataFrame of raw customer rows to customers.

    Args:
        customers_df: DataFrame with at least ``customer_id`` and the
            ``recency``, ``frequency`` and ``monetary`` columns. ``name``,
            ``balance``, ``points`` and ``transaction_count`` are optional.

    Returns:
        Validated Customer objects, in row order. A row whose three RFM
        columns are all null yields a customer without a signal.

    Raises:
        ValueError: If required columns are missing, ``customer_id`` has
            nulls, a row has only some of its RFM columns filled, or a
            count column holds a fractional value.
    """
    required_cols = ["customer_id"] + _SIGNAL_COLUMNS
    missing_cols = set(required_cols) - set(customers_df.columns)
    if missing_cols:
        raise ValueError(f"DataFrame missing required columns: {missing_cols}")

    if customers_df.empty:
        return []

    if customers_df["customer_id"].isnull().any():
        raise ValueError("Null/NaN values found in column: customer_id")

    customers = []
    for record in customers_df.to_dict("records"):
        customer_id = str(record["customer_id"])
        present = [not pd.isna(record[col]) for col in _SIGNAL_COLUMNS]

        signal: Optional[RFMSignal] = None
        if all(present):
            signal = RFMSignal(
                recency=_whole(record["recency"], "recency", customer_id),
                frequency=_whole(record["frequency"], "frequency", customer_id),
                monetary=float_to_amount(float(record["monetary"])),
            )
        elif any(present):
            raise ValueError(
                f"Partial RFM signal for customer_id={customer_id}: "
                "recency, frequency and monetary must all be set or all be null"
            )

        customers.append(
            Customer(
                customer_id=customer_id,
                rfm_signal=signal,
                name=str(_optional(record, "name", "")),
                balance=float_to_amount(float(_optional(record, "balance", 0))),
                points=_whole(_optional(record, "points", 0), "points", customer_id),
                transaction_count=_whole(
                    _optional(record, "transaction_count", 0),
                    "transaction_count",
                    customer_id,
                ),
            )
        )

    return customers


def scored_to_dataframe(scored: Sequence[ScoredCustomer]) -> pd.DataFrame:
    """Convert scored customers to a DataFrame, in input order.

    ``segment`` holds the segment label (e.g. "At Risk"); sub-score
    columns are NaN for customers scored by the missing-signal fallback.
    """
    if not scored:
        return pd.DataFrame(columns=SCORED_COLUMNS)

    rows = []
    for s in scored:
        row = _customer_row(s.customer)
        row.update(
            {
                "r_score": s.sub_scores.recency if s.sub_scores else None,
                "f_score": s.sub_scores.frequency if s.sub_scores else None,
                "m_score": s.sub_scores.monetary if s.sub_scores else None,
                "segment": RFMSegment(s.segment).value,
                "calculated_score": s.calculated_score,
            }
        )
        rows.append(row)
    return pd.DataFrame(rows, columns=SCORED_COLUMNS)


def segment_stats_to_dataframe(
    stats: Mapping[RFMSegment, SegmentStats],
) -> pd.DataFrame:
    """Convert per-segment statistics to a DataFrame, one row per segment."""
    rows = [
        {
            "segment": segment.value,
            "count": s.count,
            "avg_balance": float(s.avg_balance),
            "avg_transaction_count": float(s.avg_transaction_count),
            "avg_points": float(s.avg_points),
            "retention": s.retention,
        }
        for segment, s in stats.items()
    ]
    return pd.DataFrame(rows, columns=SEGMENT_STATS_COLUMNS)


def score_customers_df(customers_df: pd.DataFrame, config: RFMConfig) -> pd.DataFrame:
    """Score a DataFrame of raw customer rows.

    Convenience wrapper: DataFrame -> customers -> score_all -> DataFrame.

    Example:
        >>> scored_df = score_customers_df(customers_df, DEFAULT_RFM_CONFIG)
        >>> scored_df["segment"].value_counts()
    """
    customers = dataframe_to_customers(customers_df)
    return scored_to_dataframe(score_all(customers, config))

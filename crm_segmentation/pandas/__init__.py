"""Pandas DataFrame adapters for RFM segmentation components."""

from .segments import (
    customers_to_dataframe,
    dataframe_to_customers,
    scored_to_dataframe,
    segment_stats_to_dataframe,
    score_customers_df,
)

__all__ = [
    "customers_to_dataframe",
    "dataframe_to_customers",
    "scored_to_dataframe",
    "segment_stats_to_dataframe",
    "score_customers_df",
]

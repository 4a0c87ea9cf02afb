"""Tests for segmentation pandas adapters."""

from decimal import Decimal

import pandas as pd
import pytest

from crm_segmentation.analyses.segment_summary import segment_stats
from crm_segmentation.foundation.config import DEFAULT_RFM_CONFIG
from crm_segmentation.foundation.scoring import Customer, RFMSignal, score_all
from crm_segmentation.pandas import (
    customers_to_dataframe,
    dataframe_to_customers,
    score_customers_df,
    scored_to_dataframe,
    segment_stats_to_dataframe,
)


@pytest.fixture
def customers_df():
    return pd.DataFrame(
        {
            "customer_id": ["u001", "u002", "u003"],
            "name": ["Budi", "Siti", "Jessica"],
            "recency": [1, 15, None],
            "frequency": [20, 3, None],
            "monetary": [10_000_000, 1_000_000, None],
            "balance": [25_000_000, 1_500_000.5, 0],
            "points": [500, 40, 0],
            "transaction_count": [20, 3, 0],
        }
    )


class TestCustomersToDataFrame:
    """Test customers_to_dataframe conversion."""

    def test_rows_in_input_order(self):
        df = customers_to_dataframe(
            [
                Customer("u002", RFMSignal(15, 3, 1_000_000), balance=10),
                Customer("u001"),
            ]
        )
        assert list(df["customer_id"]) == ["u002", "u001"]
        assert df.iloc[0]["recency"] == 15
        assert df.iloc[0]["monetary"] == 1_000_000.0
        assert pd.isna(df.iloc[1]["recency"])

    def test_empty_input_returns_empty_dataframe(self):
        df = customers_to_dataframe([])
        assert df.empty
        assert list(df.columns) == [
            "customer_id",
            "name",
            "recency",
            "frequency",
            "monetary",
            "balance",
            "points",
            "transaction_count",
        ]


class TestDataFrameToCustomers:
    """Test dataframe_to_customers conversion."""

    def test_conversion(self, customers_df):
        customers = dataframe_to_customers(customers_df)

        assert [c.customer_id for c in customers] == ["u001", "u002", "u003"]
        assert customers[0].rfm_signal == RFMSignal(1, 20, 10_000_000)
        assert customers[0].balance == 25_000_000
        assert customers[1].balance == Decimal("1500000.5")
        assert customers[1].name == "Siti"
        assert customers[2].rfm_signal is None

    def test_optional_columns_default(self):
        df = pd.DataFrame(
            {"customer_id": ["u001"], "recency": [3], "frequency": [4], "monetary": [5]}
        )
        customer = dataframe_to_customers(df)[0]
        assert customer.name == ""
        assert customer.balance == 0
        assert customer.points == 0

    def test_missing_columns_raise_error(self):
        df = pd.DataFrame({"customer_id": ["u001"], "recency": [3]})
        with pytest.raises(ValueError, match="DataFrame missing required columns"):
            dataframe_to_customers(df)

    def test_partial_signal_raises_error(self):
        df = pd.DataFrame(
            {"customer_id": ["u001"], "recency": [3], "frequency": [None], "monetary": [5]}
        )
        with pytest.raises(ValueError, match="Partial RFM signal for customer_id=u001"):
            dataframe_to_customers(df)

    @pytest.mark.parametrize("column", ["recency", "frequency"])
    def test_fractional_signal_raises_error(self, column):
        """Fractional day or transaction counts should not be truncated."""
        row = {"customer_id": ["u001"], "recency": [3], "frequency": [4], "monetary": [5]}
        row[column] = [7.9]
        with pytest.raises(ValueError, match=f"{column} must be a whole number for customer_id=u001"):
            dataframe_to_customers(pd.DataFrame(row))

    def test_whole_float_counts_are_accepted(self):
        """Float columns holding whole values, as produced by nulls elsewhere, convert cleanly."""
        df = pd.DataFrame(
            {
                "customer_id": ["u001", "u002"],
                "recency": [7.0, None],
                "frequency": [4.0, None],
                "monetary": [5.0, None],
                "points": [12.0, None],
            }
        )
        customers = dataframe_to_customers(df)
        assert customers[0].rfm_signal == RFMSignal(recency=7, frequency=4, monetary=5)
        assert customers[0].points == 12
        assert customers[1].rfm_signal is None

    def test_fractional_points_raise_error(self):
        df = pd.DataFrame(
            {"customer_id": ["u001"], "recency": [3], "frequency": [4], "monetary": [5], "points": [1.5]}
        )
        with pytest.raises(ValueError, match="points must be a whole number"):
            dataframe_to_customers(df)

    def test_null_customer_id_raises_error(self):
        df = pd.DataFrame(
            {"customer_id": [None], "recency": [3], "frequency": [4], "monetary": [5]}
        )
        with pytest.raises(ValueError, match="customer_id"):
            dataframe_to_customers(df)

    def test_empty_dataframe_returns_empty_list(self):
        df = pd.DataFrame(columns=["customer_id", "recency", "frequency", "monetary"])
        assert dataframe_to_customers(df) == []


class TestScoredToDataFrame:
    """Test scored_to_dataframe and score_customers_df."""

    def test_score_customers_df(self, customers_df):
        scored_df = score_customers_df(customers_df, DEFAULT_RFM_CONFIG)

        assert list(scored_df["segment"]) == ["Champions", "At Risk", "Potential"]
        assert list(scored_df["calculated_score"]) == ["3.00", "1.33", "0.00"]
        assert scored_df.iloc[1]["r_score"] == 2
        assert pd.isna(scored_df.iloc[2]["r_score"])

    def test_empty_input_returns_empty_dataframe(self):
        df = scored_to_dataframe([])
        assert df.empty
        assert "segment" in df.columns
        assert "calculated_score" in df.columns


class TestSegmentStatsToDataFrame:
    """Test segment_stats_to_dataframe conversion."""

    def test_one_row_per_segment(self):
        scored = score_all(
            [Customer("u001", RFMSignal(1, 20, 10_000_000), balance=1000)],
            DEFAULT_RFM_CONFIG,
        )
        df = segment_stats_to_dataframe(segment_stats(scored))

        assert list(df["segment"]) == ["Champions", "Loyal", "Potential", "At Risk", "Hibernating"]
        assert list(df["retention"]) == [95, 88, 72, 45, 25]
        assert df.iloc[0]["avg_balance"] == 1000.0
        assert df.iloc[1]["count"] == 0

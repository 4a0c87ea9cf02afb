"""Tests for segmentation report exports."""

import json
from decimal import Decimal

import pandas as pd
import pytest

from crm_segmentation.foundation.config import DEFAULT_RFM_CONFIG, RFMConfig
from crm_segmentation.foundation.scoring import Customer, RFMSignal, score_all
from crm_segmentation.reporting import (
    build_segment_report,
    export_scored_customers_csv,
    export_segment_report_json,
    export_segment_report_markdown,
)


@pytest.fixture
def scored():
    return score_all(
        [
            Customer("u001", RFMSignal(1, 20, 10_000_000), balance=1000, points=10),
            Customer("u002", RFMSignal(200, 0, 0), balance=50),
            Customer("u003"),
        ],
        DEFAULT_RFM_CONFIG,
    )


class TestBuildSegmentReport:
    """Test report assembly."""

    def test_report_contents(self, scored):
        report = build_segment_report(scored, config=DEFAULT_RFM_CONFIG, metadata={"source": "test"})

        assert report["metadata"] == {"source": "test"}
        assert report["total_customers"] == 3
        assert report["config"]["recencyThresholds"] == [7, 30, 90]
        assert list(report["segments"]) == [
            "Champions",
            "Loyal",
            "Potential",
            "At Risk",
            "Hibernating",
        ]
        assert report["segments"]["Champions"]["count"] == 1
        assert report["segments"]["Champions"]["percentage"] == 33.3
        assert report["segments"]["Champions"]["avg_balance"] == 1000.0
        assert report["segments"]["Hibernating"]["retention"] == 25
        assert report["insights"][0]["action"] == "Create VIP Campaign"

    def test_report_without_config(self, scored):
        assert build_segment_report(scored)["config"] is None

    def test_decimal_thresholds_are_plain_numbers(self, scored):
        """Decimal thresholds should be echoed as JSON numbers."""
        config = RFMConfig(
            monetary_thresholds=(Decimal("500000"), Decimal("2000000"), Decimal("5000000.5"))
        )

        report = build_segment_report(scored, config=config)

        assert report["config"]["monetaryThresholds"] == [500000, 2000000, 5000000.5]
        json.dumps(report)


class TestExports:
    """Test file exports."""

    def test_export_json(self, scored, tmp_path):
        output_path = tmp_path / "reports" / "segments.json"

        export_segment_report_json(scored, output_path, config=DEFAULT_RFM_CONFIG)

        assert output_path.exists()
        payload = json.loads(output_path.read_text(encoding="utf-8"))
        assert payload["total_customers"] == 3
        assert payload["segments"]["At Risk"]["count"] == 1

    def test_export_json_with_decimal_config(self, scored, tmp_path):
        """A Decimal-threshold config should export to a loadable file."""
        output_path = tmp_path / "segments.json"
        config = RFMConfig(
            monetary_thresholds=(Decimal("500000"), Decimal("2000000"), Decimal("5000000"))
        )

        export_segment_report_json(scored, output_path, config=config)

        payload = json.loads(output_path.read_text(encoding="utf-8"))
        assert payload["config"]["monetaryThresholds"] == [500000, 2000000, 5000000]

    def test_export_json_failure_leaves_no_file(self, scored, tmp_path):
        """Unserializable metadata should fail before the file is created."""
        output_path = tmp_path / "segments.json"

        with pytest.raises(TypeError):
            export_segment_report_json(scored, output_path, metadata={"run": object()})

        assert not output_path.exists()

    def test_export_csv(self, scored, tmp_path):
        output_path = tmp_path / "scored.csv"

        export_scored_customers_csv(scored, output_path)

        df = pd.read_csv(output_path)
        assert list(df["customer_id"]) == ["u001", "u002", "u003"]
        assert list(df["segment"]) == ["Champions", "At Risk", "Potential"]

    def test_export_markdown(self, scored, tmp_path):
        output_path = tmp_path / "segments.md"

        export_segment_report_markdown(scored, output_path, title="Weekly Segments")

        content = output_path.read_text(encoding="utf-8")
        assert content.startswith("# Weekly Segments")
        assert "| Champions | 1 | 33.3% |" in content
        assert "Create VIP Campaign" in content

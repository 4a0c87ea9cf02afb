"""Tests for segment definitions and the score-to-segment mapping."""

import pytest

from crm_segmentation.foundation.segments import (
    RETENTION_BY_SEGMENT,
    SEGMENT_ORDER,
    RFMSegment,
    coerce_segment,
    retention_for,
    segment_for_score,
)


class TestRFMSegment:
    """Test segment labels and ordering."""

    def test_segment_values_are_display_labels(self):
        """Segment values should be the labels shown in reports."""
        assert [s.value for s in SEGMENT_ORDER] == [
            "Champions",
            "Loyal",
            "Potential",
            "At Risk",
            "Hibernating",
        ]

    def test_segment_compares_equal_to_label(self):
        """str-valued enum should compare equal to its label."""
        assert RFMSegment.AT_RISK == "At Risk"

    def test_coerce_accepts_label(self):
        assert coerce_segment("Loyal") is RFMSegment.LOYAL

    def test_coerce_unknown_label_raises_error(self):
        """Unknown segment labels should raise ValueError."""
        with pytest.raises(ValueError, match="Unknown segment: 'Dormant'"):
            coerce_segment("Dormant")


class TestSegmentForScore:
    """Test average score to segment mapping."""

    @pytest.mark.parametrize(
        "avg_score,expected",
        [
            (3.0, RFMSegment.CHAMPIONS),
            (2.5, RFMSegment.CHAMPIONS),
            (7 / 3, RFMSegment.LOYAL),
            (2.0, RFMSegment.LOYAL),
            (5 / 3, RFMSegment.POTENTIAL),
            (1.5, RFMSegment.POTENTIAL),
            (4 / 3, RFMSegment.AT_RISK),
            (1.0, RFMSegment.AT_RISK),
        ],
    )
    def test_cutoffs(self, avg_score, expected):
        """First matching cut-off from the top should win."""
        assert segment_for_score(avg_score) is expected

    def test_below_lowest_cutoff_is_hibernating(self):
        """Scores under 1.0 fall through to Hibernating."""
        assert segment_for_score(0.99) is RFMSegment.HIBERNATING
        assert segment_for_score(0.0) is RFMSegment.HIBERNATING


class TestRetention:
    """Test the fixed retention lookup table."""

    def test_retention_table_values(self):
        """Retention should match the fixed table exactly."""
        assert dict(RETENTION_BY_SEGMENT) == {
            RFMSegment.CHAMPIONS: 95,
            RFMSegment.LOYAL: 88,
            RFMSegment.POTENTIAL: 72,
            RFMSegment.AT_RISK: 45,
            RFMSegment.HIBERNATING: 25,
        }

    def test_retention_for_label(self):
        assert retention_for("At Risk") == 45

    def test_retention_table_is_read_only(self):
        """The lookup table should not be mutable at runtime."""
        with pytest.raises(TypeError):
            RETENTION_BY_SEGMENT[RFMSegment.LOYAL] = 100

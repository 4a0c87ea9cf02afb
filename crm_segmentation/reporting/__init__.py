"""Report exports for segmentation results."""

from .exports import (
    build_segment_report,
    export_scored_customers_csv,
    export_segment_report_json,
    export_segment_report_markdown,
)

__all__ = [
    "build_segment_report",
    "export_scored_customers_csv",
    "export_segment_report_json",
    "export_segment_report_markdown",
]

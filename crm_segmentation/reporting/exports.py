"""Export segmentation results to various formats.

This module provides utilities for saving segment reports for dashboards,
campaign tooling and audit trails.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Sequence

import structlog

from crm_segmentation.analyses.segment_summary import (
    generate_segment_insights,
    segment_distribution,
    segment_stats,
)
from crm_segmentation.foundation.config import RFMConfig
from crm_segmentation.foundation.config_store import RFMConfigPayload
from crm_segmentation.foundation.scoring import ScoredCustomer
from crm_segmentation.pandas.segments import scored_to_dataframe

logger = structlog.get_logger(__name__)


def build_segment_report(
    scored: Sequence[ScoredCustomer],
    config: RFMConfig | None = None,
    metadata: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Assemble the JSON-serializable segment report.

    Parameters
    ----------
    scored:
        Scored customers the report describes
    config:
        Optional configuration the customers were scored with, echoed in
        the report
    metadata:
        Optional metadata to include in report (e.g., data source)
    """
    stats = segment_stats(scored)
    report: dict[str, Any] = {
        "metadata": metadata or {},
        "timestamp": datetime.now().isoformat(),
        "total_customers": len(scored),
        "config": (
            RFMConfigPayload.from_config(config).model_dump(by_alias=True)
            if config is not None
            else None
        ),
        "segments": {},
        "insights": [],
    }

    for share in segment_distribution(scored):
        s = stats[share.segment]
        report["segments"][share.segment.value] = {
            "count": share.count,
            "percentage": float(share.percentage),
            "avg_balance": float(s.avg_balance),
            "avg_transaction_count": float(s.avg_transaction_count),
            "avg_points": float(s.avg_points),
            "retention": s.retention,
        }

    for insight in generate_segment_insights(scored):
        report["insights"].append(
            {
                "kind": insight.kind,
                "message": insight.message,
                "action": insight.action,
                "segment": insight.segment.value if insight.segment else None,
            }
        )

    return report


def export_segment_report_json(
    scored: Sequence[ScoredCustomer],
    output_path: str | Path,
    config: RFMConfig | None = None,
    metadata: dict[str, Any] | None = None,
) -> None:
    """Export the segment report to JSON format.

    Examples
    --------
    >>> scored = score_all(customers, DEFAULT_RFM_CONFIG)
    >>> export_segment_report_json(
    ...     scored,
    ...     "segments_2024-01-15.json",
    ...     config=DEFAULT_RFM_CONFIG,
    ...     metadata={"data_source": "core_banking"},
    ... )
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    report = build_segment_report(scored, config=config, metadata=metadata)
    content = json.dumps(report, indent=2)
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(content)

    logger.info("segment_report_exported", path=str(output_path), format="json")


def export_scored_customers_csv(
    scored: Sequence[ScoredCustomer],
    output_path: str | Path,
) -> None:
    """Export scored customers to CSV, one row per customer in input order."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    df = scored_to_dataframe(scored)
    df.to_csv(output_path, index=False)

    logger.info(
        "scored_customers_exported",
        path=str(output_path),
        format="csv",
        rows=len(df),
    )


def export_segment_report_markdown(
    scored: Sequence[ScoredCustomer],
    output_path: str | Path,
    title: str = "Customer Segmentation Report",
) -> None:
    """Export the segment report as a human-readable Markdown table."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    report = build_segment_report(scored)

    lines = []
    lines.append(f"# {title}\n")
    lines.append(f"**Generated:** {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n")
    lines.append(f"- **Total Customers:** {report['total_customers']}\n")

    lines.append("## Segments\n")
    lines.append("| Segment | Customers | Share | Avg Balance | Avg Transactions | Avg Points | Retention |")
    lines.append("|---------|-----------|-------|-------------|------------------|------------|-----------|")
    for name, row in report["segments"].items():
        lines.append(
            f"| {name} | {row['count']} | {row['percentage']:.1f}% | {row['avg_balance']:,.2f} "
            f"| {row['avg_transaction_count']:.2f} | {row['avg_points']:.2f} | {row['retention']}% |"
        )
    lines.append("")

    lines.append("## Insights\n")
    for insight in report["insights"]:
        action = f" **Action:** {insight['action']}" if insight["action"] else ""
        lines.append(f"- [{insight['kind']}] {insight['message']}{action}")

    with open(output_path, "w", encoding="utf-8") as f:
        f.write("\n".join(lines) + "\n")

    logger.info("segment_report_exported", path=str(output_path), format="markdown")

"""Aggregations over scored customers.

Everything here is a reducer over the output of
:func:`crm_segmentation.foundation.scoring.score_all`:

1. Segment summary - counts, per-segment averages, distribution, insights
2. Campaigns - segment-targeted audiences and reach
3. CRM rules - follow-up tasks proposed from segment membership
"""

from .campaigns import (
    Campaign,
    CampaignStatus,
    campaign_reach,
    select_campaign_audience,
)
from .crm_rules import (
    CRM_RULES,
    MAX_AUTO_TASKS,
    UPSELL_BALANCE_THRESHOLD,
    CRMRule,
    CRMTask,
    TaskPriority,
    generate_crm_tasks,
)
from .segment_summary import (
    SegmentInsight,
    SegmentShare,
    SegmentStats,
    SubScoreCell,
    generate_segment_insights,
    segment_counts,
    segment_distribution,
    segment_stats,
    sub_score_matrix,
)

__all__ = [
    # Segment summary
    "SegmentInsight",
    "SegmentShare",
    "SegmentStats",
    "SubScoreCell",
    "generate_segment_insights",
    "segment_counts",
    "segment_distribution",
    "segment_stats",
    "sub_score_matrix",
    # Campaigns
    "Campaign",
    "CampaignStatus",
    "campaign_reach",
    "select_campaign_audience",
    # CRM rules
    "CRM_RULES",
    "MAX_AUTO_TASKS",
    "UPSELL_BALANCE_THRESHOLD",
    "CRMRule",
    "CRMTask",
    "TaskPriority",
    "generate_crm_tasks",
]

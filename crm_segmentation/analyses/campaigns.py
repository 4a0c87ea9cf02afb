"""Segment-targeted campaign audiences."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence

import structlog

from crm_segmentation.foundation.scoring import ScoredCustomer
from crm_segmentation.foundation.segments import RFMSegment, coerce_segment

logger = structlog.get_logger(__name__)


class CampaignStatus(str, Enum):
    ACTIVE = "Active"
    DRAFT = "Draft"
    COMPLETED = "Completed"


@dataclass(frozen=True)
class Campaign:
    """A marketing campaign aimed at one or more segments.

    Attributes
    ----------
    campaign_id:
        Unique campaign identifier
    title:
        Display title
    target_segments:
        Segments whose customers make up the audience
    status:
        Lifecycle status
    """

    campaign_id: str
    title: str
    target_segments: tuple[RFMSegment, ...]
    status: CampaignStatus = CampaignStatus.DRAFT

    def __post_init__(self) -> None:
        """Normalize and validate target segments."""
        if isinstance(self.target_segments, (str, bytes)):
            raise ValueError(
                f"Campaign target_segments must be a sequence of segments, not a single "
                f"string: {self.target_segments!r} (campaign_id={self.campaign_id})"
            )
        if not self.target_segments:
            raise ValueError(
                f"Campaign must target at least one segment (campaign_id={self.campaign_id})"
            )
        object.__setattr__(
            self,
            "target_segments",
            tuple(coerce_segment(s) for s in self.target_segments),
        )
        object.__setattr__(self, "status", CampaignStatus(self.status))


def select_campaign_audience(
    campaign: Campaign, scored: Sequence[ScoredCustomer]
) -> list[ScoredCustomer]:
    """Scored customers whose segment the campaign targets, in input order."""
    targets = set(campaign.target_segments)
    return [c for c in scored if coerce_segment(c.segment) in targets]


def campaign_reach(
    campaigns: Sequence[Campaign], scored: Sequence[ScoredCustomer]
) -> dict[str, int]:
    """Audience size per campaign id under the current segmentation."""
    reach = {
        campaign.campaign_id: len(select_campaign_audience(campaign, scored))
        for campaign in campaigns
    }
    logger.debug("campaign_reach_calculated", campaigns=len(reach), total_customers=len(scored))
    return reach

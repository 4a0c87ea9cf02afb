"""Follow-up tasks generated from segment membership.

Each rule watches one segment and, for every scored customer in it, proposes
an action for the relationship team:

- At Risk customers get a follow-up call (high priority)
- Hibernating customers get a winback campaign (medium priority)
- Champions holding more than 100,000,000 get a premium upsell (medium priority)

Tasks come out in customer order, rule order within a customer, and the list
is capped so the dashboard shows a short worklist.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional, Sequence, Union

import structlog

from crm_segmentation.foundation.scoring import ScoredCustomer
from crm_segmentation.foundation.segments import RFMSegment, coerce_segment

logger = structlog.get_logger(__name__)

UPSELL_BALANCE_THRESHOLD = 100_000_000
MAX_AUTO_TASKS = 8


class TaskPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class CRMRule:
    """A segment trigger and the action it proposes.

    Attributes
    ----------
    rule_id:
        Short identifier, used as the task id suffix
    name:
        Display name of the rule
    segment:
        Segment the rule fires on
    action:
        Proposed action
    priority:
        Task priority
    min_balance:
        When set, the customer's balance must be strictly greater than this
    """

    rule_id: str
    name: str
    segment: RFMSegment
    action: str
    priority: TaskPriority
    min_balance: Optional[Union[int, Decimal]] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "segment", coerce_segment(self.segment))
        object.__setattr__(self, "priority", TaskPriority(self.priority))
        if self.min_balance is not None and self.min_balance < 0:
            raise ValueError(
                f"min_balance cannot be negative: {self.min_balance} (rule_id={self.rule_id})"
            )

    def matches(self, scored: ScoredCustomer) -> bool:
        if coerce_segment(scored.segment) is not self.segment:
            return False
        return self.min_balance is None or scored.balance > self.min_balance


CRM_RULES: tuple[CRMRule, ...] = (
    CRMRule(
        rule_id="r1",
        name="At Risk Detection",
        segment=RFMSegment.AT_RISK,
        action="Follow-up Call",
        priority=TaskPriority.HIGH,
    ),
    CRMRule(
        rule_id="r2",
        name="Winback Trigger",
        segment=RFMSegment.HIBERNATING,
        action="Winback Campaign",
        priority=TaskPriority.MEDIUM,
    ),
    CRMRule(
        rule_id="r3",
        name="Upsell Opportunity",
        segment=RFMSegment.CHAMPIONS,
        action="Upsell Premium",
        priority=TaskPriority.MEDIUM,
        min_balance=UPSELL_BALANCE_THRESHOLD,
    ),
)


@dataclass(frozen=True)
class CRMTask:
    """A proposed action for one customer."""

    task_id: str
    rule_id: str
    rule_name: str
    customer_id: str
    customer_name: str
    segment: RFMSegment
    action: str
    priority: TaskPriority


def generate_crm_tasks(
    scored: Sequence[ScoredCustomer],
    rules: Sequence[CRMRule] = CRM_RULES,
    limit: Optional[int] = MAX_AUTO_TASKS,
) -> list[CRMTask]:
    """Propose follow-up tasks for scored customers.

    Parameters
    ----------
    scored:
        Output of :func:`crm_segmentation.foundation.scoring.score_all`
    rules:
        Rules to apply, in order
    limit:
        Maximum number of tasks returned; None returns all of them

    Returns
    -------
    list[CRMTask]
        Tasks in customer order, rule order within a customer. Task ids are
        ``auto-{customer_id}-{rule_id}``.

    Examples
    --------
    >>> tasks = generate_crm_tasks(score_all(customers, DEFAULT_RFM_CONFIG))
    >>> [(t.customer_name, t.action) for t in tasks]
    [('Budi Tarigan', 'Follow-up Call'), ...]
    """
    if limit is not None and limit < 0:
        raise ValueError(f"limit cannot be negative: {limit}")

    tasks = []
    for customer in scored:
        for rule in rules:
            if rule.matches(customer):
                tasks.append(
                    CRMTask(
                        task_id=f"auto-{customer.customer_id}-{rule.rule_id}",
                        rule_id=rule.rule_id,
                        rule_name=rule.name,
                        customer_id=customer.customer_id,
                        customer_name=customer.name,
                        segment=rule.segment,
                        action=rule.action,
                        priority=rule.priority,
                    )
                )

    logger.info(
        "crm_tasks_generated",
        customers=len(scored),
        matched=len(tasks),
        limit=limit,
    )
    return tasks if limit is None else tasks[:limit]

"""Foundational building blocks for RFM customer segmentation.

This package exposes the segment definitions, the threshold configuration
and its persistence, and the scoring engine itself.
"""

from .config import DEFAULT_RFM_CONFIG, ConfigValidationError, RFMConfig
from .config_store import (
    RFM_CONFIG_STORAGE_KEY,
    ConfigStorage,
    InMemoryStorage,
    RFMConfigManager,
    RFMConfigPayload,
    load_config,
    save_config,
)
from .scoring import (
    Customer,
    RFMAssessment,
    RFMSignal,
    ScoredCustomer,
    SubScores,
    calculate_sub_scores,
    score_all,
    score_customer,
    score_signal,
)
from .segments import (
    RETENTION_BY_SEGMENT,
    SEGMENT_ORDER,
    RFMSegment,
    retention_for,
    segment_for_score,
)

__all__ = [
    "DEFAULT_RFM_CONFIG",
    "ConfigValidationError",
    "RFMConfig",
    "RFM_CONFIG_STORAGE_KEY",
    "ConfigStorage",
    "InMemoryStorage",
    "RFMConfigManager",
    "RFMConfigPayload",
    "load_config",
    "save_config",
    "Customer",
    "RFMAssessment",
    "RFMSignal",
    "ScoredCustomer",
    "SubScores",
    "calculate_sub_scores",
    "score_all",
    "score_customer",
    "score_signal",
    "RETENTION_BY_SEGMENT",
    "SEGMENT_ORDER",
    "RFMSegment",
    "retention_for",
    "segment_for_score",
]

"""Persistence of the RFM configuration through an injected storage port.

The configuration is saved as an opaque, versionless JSON blob under a
fixed key. Loading never raises: a missing, undecodable or wrongly shaped
blob falls back to :data:`DEFAULT_RFM_CONFIG` and the fallback is logged.
"""

from __future__ import annotations

import json
import threading
from typing import Optional, Protocol, Union

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from crm_segmentation.foundation.config import (
    DEFAULT_RFM_CONFIG,
    ConfigValidationError,
    RFMConfig,
)

logger = structlog.get_logger(__name__)

RFM_CONFIG_STORAGE_KEY = "rfmConfig"

_Number = Union[int, float]


class ConfigStorage(Protocol):
    """String key-value store, in the shape of browser ``localStorage``."""

    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class InMemoryStorage:
    """Thread-safe in-process :class:`ConfigStorage` implementation."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._store: dict[str, str] = dict(initial or {})
        self._lock = threading.RLock()

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._store.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            self._store[key] = value

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._store.pop(key, None)

    def keys(self) -> list[str]:
        """Get all stored keys (copy, not live view)."""
        with self._lock:
            return list(self._store.keys())


class RFMConfigPayload(BaseModel):
    """Wire shape of the persisted configuration blob."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    recency_thresholds: list[_Number] = Field(
        alias="recencyThresholds", min_length=3, max_length=3
    )
    frequency_thresholds: list[_Number] = Field(
        alias="frequencyThresholds", min_length=3, max_length=3
    )
    monetary_thresholds: list[_Number] = Field(
        alias="monetaryThresholds", min_length=3, max_length=3
    )

    @classmethod
    def from_config(cls, config: RFMConfig) -> "RFMConfigPayload":
        return cls(
            recency_thresholds=[_to_number(v) for v in config.recency_thresholds],
            frequency_thresholds=[_to_number(v) for v in config.frequency_thresholds],
            monetary_thresholds=[_to_number(v) for v in config.monetary_thresholds],
        )

    def to_config(self) -> RFMConfig:
        return RFMConfig(
            recency_thresholds=tuple(self.recency_thresholds),
            frequency_thresholds=tuple(self.frequency_thresholds),
            monetary_thresholds=tuple(self.monetary_thresholds),
        )


def _to_number(value) -> _Number:
    # Decimal thresholds are written as JSON numbers
    if isinstance(value, int):
        return value
    as_float = float(value)
    return int(as_float) if as_float.is_integer() else as_float


def load_config(
    storage: ConfigStorage, key: str = RFM_CONFIG_STORAGE_KEY
) -> RFMConfig:
    """Read the saved configuration, or the default one.

    Parameters
    ----------
    storage:
        Storage port to read from
    key:
        Storage key of the JSON blob

    Returns
    -------
    RFMConfig
        The saved configuration, or :data:`DEFAULT_RFM_CONFIG` when nothing
        usable is stored.
    """
    raw = storage.get_item(key)
    if raw is None:
        logger.debug("rfm_config_not_found_using_default", key=key)
        return DEFAULT_RFM_CONFIG

    try:
        payload = RFMConfigPayload.model_validate_json(raw)
        config = payload.to_config()
    except (ValidationError, ValueError) as e:
        logger.warning(
            "rfm_config_load_failed_using_default",
            key=key,
            error=str(e),
        )
        return DEFAULT_RFM_CONFIG

    logger.debug("rfm_config_loaded", key=key, config=config.as_dict())
    return config


def save_config(
    storage: ConfigStorage,
    config: RFMConfig,
    key: str = RFM_CONFIG_STORAGE_KEY,
) -> None:
    """Write ``config`` to ``storage`` as a JSON blob."""
    payload = RFMConfigPayload.from_config(config)
    blob = json.dumps(payload.model_dump(by_alias=True))
    storage.set_item(key, blob)
    logger.info("rfm_config_saved", key=key, config=payload.model_dump(by_alias=True))


class RFMConfigManager:
    """Settings-surface lifecycle around an :class:`RFMConfig`.

    Loads the saved configuration once on construction, tracks whether the
    in-memory configuration has unsaved changes, and validates threshold
    ordering whenever a new configuration is written.

    The manager holds mutable state. Callers sharing one instance across
    threads must synchronize access themselves.
    """

    def __init__(
        self,
        storage: ConfigStorage,
        key: str = RFM_CONFIG_STORAGE_KEY,
    ):
        self._storage = storage
        self._key = key
        self._saved = load_config(storage, key)
        self._current = self._saved
        self._dirty = False

    @property
    def config(self) -> RFMConfig:
        """The in-memory configuration the engine should score with."""
        return self._current

    @property
    def saved_config(self) -> RFMConfig:
        """The configuration as of the last load or save."""
        return self._saved

    @property
    def is_dirty(self) -> bool:
        """True when the in-memory configuration has unsaved changes."""
        return self._dirty

    def set_config(self, config: RFMConfig) -> RFMConfig:
        """Replace the in-memory configuration.

        Raises
        ------
        ConfigValidationError
            If any threshold triple is not in non-decreasing order. The
            current configuration is left untouched.
        """
        try:
            config.validate()
        except ConfigValidationError as e:
            logger.warning("rfm_config_rejected", error=str(e))
            raise
        self._current = config
        self._dirty = True
        return config

    def update(
        self,
        recency_thresholds=None,
        frequency_thresholds=None,
        monetary_thresholds=None,
    ) -> RFMConfig:
        """Replace some threshold triples, keeping the others.

        Raises
        ------
        ValueError
            If a triple has the wrong shape.
        ConfigValidationError
            If a triple is out of order.
        """
        current = self._current
        candidate = RFMConfig(
            recency_thresholds=(
                current.recency_thresholds
                if recency_thresholds is None
                else tuple(recency_thresholds)
            ),
            frequency_thresholds=(
                current.frequency_thresholds
                if frequency_thresholds is None
                else tuple(frequency_thresholds)
            ),
            monetary_thresholds=(
                current.monetary_thresholds
                if monetary_thresholds is None
                else tuple(monetary_thresholds)
            ),
        )
        return self.set_config(candidate)

    def reset(self) -> RFMConfig:
        """Restore the default thresholds. Marks the config dirty so it can be saved."""
        self._current = DEFAULT_RFM_CONFIG
        self._dirty = True
        return self._current

    def save(self) -> None:
        """Persist the in-memory configuration and clear the dirty flag."""
        save_config(self._storage, self._current, self._key)
        self._saved = self._current
        self._dirty = False

    def discard_changes(self) -> RFMConfig:
        """Drop unsaved changes, returning to the last saved configuration."""
        self._current = self._saved
        self._dirty = False
        return self._current

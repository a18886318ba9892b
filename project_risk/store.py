"""
Project Risk Engine - Threshold Store.

============================================================
PURPOSE
============================================================
Persistence capability for threshold settings, injected into
whoever loads and saves them (settings screens, batch jobs).
The scoring core never reads or writes storage itself.

============================================================
IMPLEMENTATIONS
============================================================
- InMemoryThresholdStore: tests and one-off batch runs
- JsonFileThresholdStore: a JSON settings file
- SqlThresholdStore: a row per settings key via SQLAlchemy

============================================================
GUARANTEES
============================================================
- load() always returns a complete, ordered ThresholdSet;
  nothing saved, unreadable data, or out-of-order boundaries
  yield the defaults
- save() validates ordering first and refuses invalid sets,
  so a bad curve never reaches storage

============================================================
"""

import json
import logging
from pathlib import Path
from typing import Optional, Protocol, Union

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.orm import sessionmaker

from .config import DEFAULT_THRESHOLDS, ThresholdSet, detect_preset, validate_thresholds
from .database import transaction_scope
from .models import ThresholdSettingRecord
from .schemas import parse_threshold_set
from .types import ThresholdConfigError


logger = logging.getLogger(__name__)


class ThresholdStore(Protocol):
    """Load/save capability for a ThresholdSet."""

    def load(self) -> ThresholdSet:
        ...

    def save(self, thresholds: ThresholdSet) -> None:
        ...


def _usable_or_default(thresholds: ThresholdSet, source: str) -> ThresholdSet:
    """Fall back to the defaults when loaded thresholds are out of order."""
    result = validate_thresholds(thresholds)
    if not result.ok:
        logger.warning(f"Ignoring invalid thresholds from {source}: {result.message}")
        return DEFAULT_THRESHOLDS
    return thresholds


def ensure_valid(thresholds: ThresholdSet) -> None:
    """
    Raise if thresholds are out of order.

    Raises:
        ThresholdConfigError: Names the first failing category
    """
    result = validate_thresholds(thresholds)
    if not result.ok:
        raise ThresholdConfigError(result.message, category=result.category)


class InMemoryThresholdStore:
    """Holds a single ThresholdSet in memory."""

    def __init__(self, initial: Optional[ThresholdSet] = None):
        self._thresholds = initial or DEFAULT_THRESHOLDS

    def load(self) -> ThresholdSet:
        return self._thresholds

    def save(self, thresholds: ThresholdSet) -> None:
        ensure_valid(thresholds)
        self._thresholds = thresholds


class JsonFileThresholdStore:
    """
    Thresholds in a JSON file keyed by category.

    Accepts both ``cor_exposure`` and ``corExposure`` on load;
    always writes snake_case.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> ThresholdSet:
        if not self._path.exists():
            return DEFAULT_THRESHOLDS

        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            thresholds = parse_threshold_set(data)
        except (OSError, ValueError, ValidationError, ThresholdConfigError) as e:
            logger.warning(f"Failed to load saved thresholds from {self._path}: {e}")
            return DEFAULT_THRESHOLDS

        thresholds = _usable_or_default(thresholds, str(self._path))
        logger.info(f"Loaded thresholds from {self._path} (preset={detect_preset(thresholds)})")
        return thresholds

    def save(self, thresholds: ThresholdSet) -> None:
        ensure_valid(thresholds)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(thresholds.to_dict(), indent=2), encoding="utf-8")
        logger.info(f"Saved thresholds to {self._path}")


class SqlThresholdStore:
    """
    Thresholds in the ``risk_threshold_settings`` table.

    Each settings key (e.g. a company id) owns one row.
    """

    def __init__(self, session_factory: sessionmaker, settings_key: str = "default"):
        self._session_factory = session_factory
        self._settings_key = settings_key

    def load(self) -> ThresholdSet:
        with transaction_scope(self._session_factory) as session:
            record = session.execute(
                select(ThresholdSettingRecord).where(
                    ThresholdSettingRecord.settings_key == self._settings_key
                )
            ).scalar_one_or_none()

            if record is None:
                return DEFAULT_THRESHOLDS
            data = record.thresholds_json

        try:
            thresholds = parse_threshold_set(data)
        except (ValidationError, ThresholdConfigError) as e:
            logger.warning(f"Stored thresholds for {self._settings_key} are unreadable: {e}")
            return DEFAULT_THRESHOLDS

        return _usable_or_default(thresholds, f"settings key {self._settings_key}")

    def save(self, thresholds: ThresholdSet) -> None:
        ensure_valid(thresholds)
        preset = detect_preset(thresholds)

        with transaction_scope(self._session_factory) as session:
            record = session.execute(
                select(ThresholdSettingRecord).where(
                    ThresholdSettingRecord.settings_key == self._settings_key
                )
            ).scalar_one_or_none()

            if record is None:
                record = ThresholdSettingRecord(settings_key=self._settings_key)
                session.add(record)

            record.thresholds_json = thresholds.to_dict()
            record.preset = preset.value if preset else None

        logger.info(
            f"Saved thresholds for {self._settings_key} "
            f"(preset={preset.value if preset else 'custom'})"
        )

"""
Project Risk Engine - Persistence Models.

============================================================
PURPOSE
============================================================
ORM model for persisted threshold settings.

One row per settings key (e.g. per company). The full
threshold set is stored as JSON alongside the preset it
matched when saved, so settings screens can show "Balanced"
without recomputing.

============================================================
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import JSON, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base


class ThresholdSettingRecord(Base):
    """Saved ThresholdSet for one settings key."""

    __tablename__ = "risk_threshold_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    settings_key: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        index=True,
        comment="Owner of the settings, e.g. a company id",
    )

    thresholds_json: Mapped[Dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        comment="ThresholdSet.to_dict()",
    )

    preset: Mapped[Optional[str]] = mapped_column(
        String(20),
        nullable=True,
        comment="Matching preset at save time, NULL for custom",
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return (
            f"<ThresholdSettingRecord(key={self.settings_key}, "
            f"preset={self.preset or 'custom'})>"
        )

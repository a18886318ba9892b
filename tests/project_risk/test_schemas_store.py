"""
Tests for snapshot ingress schemas and threshold stores.
"""

import json
import logging
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError
from sqlalchemy import select

from project_risk import (
    DEFAULT_THRESHOLDS,
    PRESETS,
    FactorThresholds,
    InMemoryThresholdStore,
    JsonFileThresholdStore,
    RiskFactor,
    SqlThresholdStore,
    ThresholdConfigError,
    ThresholdPreset,
    ThresholdSet,
    calculate_schedule_factor,
    detect_preset,
    parse_snapshot,
    parse_snapshots,
    parse_threshold_set,
)
from project_risk.database import create_database_engine, create_session_factory
from project_risk.models import ThresholdSettingRecord


INVALID_THRESHOLDS = ThresholdSet(budget=FactorThresholds(0.9, 0.8, 0.7))


# ============================================================
# TEST: Snapshot Schema
# ============================================================

class TestSnapshotSchema:

    def test_camel_case_record(self):
        snapshot = parse_snapshot({
            "id": 7,
            "name": "Depot Expansion",
            "totalCosts": 40_000,
            "earnedRevenue": "100000",
            "contractValue": 250_000,
            "pendingCORValue": 12_000,
            "actualProgress": 40,
            "expectedProgress": 45,
            "lastReportDate": "2025-06-14T08:00:00Z",
            "recentInjuryCount": 1,
            "unbilledAmount": 250_000,
            "unbilledCORCount": 2,
            "unbilledTicketCount": 3,
            "scheduleStatus": "behind",
        })

        assert snapshot.id == "7"
        assert snapshot.earned_revenue == 100_000
        assert snapshot.pending_cor_value == 12_000
        assert snapshot.unbilled_item_count == 5
        assert snapshot.last_report_date == datetime(2025, 6, 14, 8, 0, tzinfo=timezone.utc)
        assert snapshot.schedule_status == "behind"

    def test_snake_case_record(self):
        snapshot = parse_snapshot({"id": "p", "total_costs": 10, "earned_revenue": 20})
        assert snapshot.total_costs == 10
        assert snapshot.earned_revenue == 20

    def test_nulls_become_zero(self):
        snapshot = parse_snapshot({
            "id": "p",
            "name": None,
            "totalCosts": None,
            "contractValue": None,
            "recentInjuryCount": None,
            "lastReportDate": None,
        })
        assert snapshot.name == ""
        assert snapshot.total_costs == 0
        assert snapshot.contract_value == 0
        assert snapshot.recent_injury_count == 0
        assert snapshot.last_report_date is None

    def test_expected_progress_falls_back_to_actual(self):
        snapshot = parse_snapshot({"id": "p", "actualProgress": 35})
        assert snapshot.expected_progress == 35

    def test_zero_expected_progress_falls_back_to_actual(self):
        """A zero baseline reads as "on schedule", not "no baseline"."""
        snapshot = parse_snapshot({"id": "p", "actualProgress": 35, "expectedProgress": 0})
        assert snapshot.expected_progress == 35
        assert calculate_schedule_factor(
            snapshot.actual_progress, snapshot.expected_progress,
        ).label == "On or ahead of schedule"

    def test_naive_timestamp_is_utc(self):
        snapshot = parse_snapshot({"id": "p", "lastReportDate": "2025-06-14T08:00:00"})
        assert snapshot.last_report_date.tzinfo == timezone.utc

    def test_unknown_keys_ignored(self):
        assert parse_snapshot({"id": "p", "crewSize": 12}).id == "p"

    def test_non_numeric_rejected(self):
        with pytest.raises(ValidationError):
            parse_snapshot({"id": "p", "totalCosts": "a lot"})

    def test_batch(self):
        snapshots = parse_snapshots([{"id": "a"}, {"id": "b"}])
        assert [s.id for s in snapshots] == ["a", "b"]


# ============================================================
# TEST: Threshold Schema
# ============================================================

class TestThresholdSchema:

    def test_partial_settings_merge_onto_defaults(self):
        thresholds = parse_threshold_set({
            "corExposure": {"healthy": 0.1, "warning": 0.2, "critical": 0.3},
        })
        assert thresholds.cor_exposure == FactorThresholds(0.1, 0.2, 0.3)
        assert thresholds.budget == DEFAULT_THRESHOLDS.budget

    def test_snake_case_category(self):
        thresholds = parse_threshold_set({
            "cor_exposure": {"healthy": 0.1, "warning": 0.2, "critical": 0.3},
        })
        assert thresholds.cor_exposure.critical == 0.3

    def test_unknown_category_rejected(self):
        with pytest.raises(ValidationError):
            parse_threshold_set({"weather": {"healthy": 0, "warning": 1, "critical": 2}})

    def test_missing_boundary_rejected(self):
        with pytest.raises(ValidationError):
            parse_threshold_set({"budget": {"healthy": 0.5, "warning": 0.6}})


# ============================================================
# TEST: In-Memory Store
# ============================================================

class TestInMemoryStore:

    def test_defaults(self):
        assert InMemoryThresholdStore().load() == DEFAULT_THRESHOLDS

    def test_save_and_load(self):
        store = InMemoryThresholdStore()
        store.save(PRESETS[ThresholdPreset.AGGRESSIVE])
        assert detect_preset(store.load()) == ThresholdPreset.AGGRESSIVE

    def test_invalid_save_rejected(self):
        store = InMemoryThresholdStore()
        with pytest.raises(ThresholdConfigError) as exc_info:
            store.save(INVALID_THRESHOLDS)
        assert exc_info.value.category == RiskFactor.BUDGET
        assert store.load() == DEFAULT_THRESHOLDS


# ============================================================
# TEST: JSON File Store
# ============================================================

class TestJsonFileStore:

    def test_missing_file_gives_defaults(self, tmp_path):
        store = JsonFileThresholdStore(tmp_path / "thresholds.json")
        assert store.load() == DEFAULT_THRESHOLDS

    def test_round_trip_keeps_preset(self, tmp_path):
        store = JsonFileThresholdStore(tmp_path / "settings" / "thresholds.json")
        store.save(PRESETS[ThresholdPreset.CONSERVATIVE])

        reloaded = JsonFileThresholdStore(store.path).load()
        assert detect_preset(reloaded) == ThresholdPreset.CONSERVATIVE

    def test_writes_snake_case(self, tmp_path):
        store = JsonFileThresholdStore(tmp_path / "thresholds.json")
        store.save(DEFAULT_THRESHOLDS)
        data = json.loads(store.path.read_text(encoding="utf-8"))
        assert set(data) == {"budget", "schedule", "cor_exposure", "activity", "safety"}

    def test_reads_camel_case(self, tmp_path):
        path = tmp_path / "thresholds.json"
        path.write_text(json.dumps({
            "corExposure": {"healthy": 0.02, "warning": 0.04, "critical": 0.06},
        }), encoding="utf-8")
        assert JsonFileThresholdStore(path).load().cor_exposure.critical == 0.06

    def test_corrupt_file_gives_defaults(self, tmp_path, caplog):
        path = tmp_path / "thresholds.json"
        path.write_text("{not json", encoding="utf-8")

        with caplog.at_level(logging.WARNING, logger="project_risk.store"):
            assert JsonFileThresholdStore(path).load() == DEFAULT_THRESHOLDS
        assert "Failed to load saved thresholds" in caplog.text

    def test_out_of_order_file_gives_defaults(self, tmp_path, caplog):
        path = tmp_path / "thresholds.json"
        path.write_text(json.dumps({
            "budget": {"healthy": 0.9, "warning": 0.5, "critical": 0.1},
        }), encoding="utf-8")

        with caplog.at_level(logging.WARNING, logger="project_risk.store"):
            assert JsonFileThresholdStore(path).load() == DEFAULT_THRESHOLDS
        assert "Ignoring invalid thresholds" in caplog.text

    def test_invalid_save_leaves_file_untouched(self, tmp_path):
        store = JsonFileThresholdStore(tmp_path / "thresholds.json")
        with pytest.raises(ThresholdConfigError):
            store.save(INVALID_THRESHOLDS)
        assert not store.path.exists()


# ============================================================
# TEST: SQL Store
# ============================================================

class TestSqlStore:

    @pytest.fixture
    def session_factory(self, tmp_path):
        engine = create_database_engine(f"sqlite:///{tmp_path / 'risk.db'}")
        yield create_session_factory(engine)
        engine.dispose()

    def test_nothing_saved_gives_defaults(self, session_factory):
        assert SqlThresholdStore(session_factory).load() == DEFAULT_THRESHOLDS

    def test_save_and_load(self, session_factory):
        store = SqlThresholdStore(session_factory, settings_key="company-1")
        store.save(PRESETS[ThresholdPreset.CONSERVATIVE])
        assert store.load() == PRESETS[ThresholdPreset.CONSERVATIVE]

    def test_upsert_keeps_one_row(self, session_factory):
        store = SqlThresholdStore(session_factory, settings_key="company-1")
        store.save(PRESETS[ThresholdPreset.CONSERVATIVE])
        store.save(ThresholdSet(budget=FactorThresholds(0.5, 0.6, 0.7)))

        with session_factory() as session:
            records = session.execute(select(ThresholdSettingRecord)).scalars().all()

        assert len(records) == 1
        assert records[0].preset is None
        assert records[0].thresholds_json["budget"]["critical"] == 0.7

    def test_records_matching_preset(self, session_factory):
        SqlThresholdStore(session_factory).save(PRESETS[ThresholdPreset.AGGRESSIVE])

        with session_factory() as session:
            record = session.execute(select(ThresholdSettingRecord)).scalar_one()
        assert record.preset == "aggressive"
        assert record.settings_key == "default"

    def test_keys_are_independent(self, session_factory):
        SqlThresholdStore(session_factory, settings_key="a").save(PRESETS[ThresholdPreset.AGGRESSIVE])
        assert SqlThresholdStore(session_factory, settings_key="b").load() == DEFAULT_THRESHOLDS

    def test_invalid_save_rejected(self, session_factory):
        store = SqlThresholdStore(session_factory)
        with pytest.raises(ThresholdConfigError):
            store.save(INVALID_THRESHOLDS)
        assert store.load() == DEFAULT_THRESHOLDS

    def test_out_of_order_row_gives_defaults(self, session_factory):
        with session_factory() as session:
            session.add(ThresholdSettingRecord(
                settings_key="default",
                thresholds_json={"budget": {"healthy": 0.9, "warning": 0.5, "critical": 0.1}},
            ))
            session.commit()

        assert SqlThresholdStore(session_factory).load() == DEFAULT_THRESHOLDS

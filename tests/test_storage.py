# tests/test_storage.py
"""
Tests for the JSON persistence layer, run against a temporary data directory.
"""

import json
import sys
from pathlib import Path

import pytest

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# ruff: noqa: E402
from app.core import storage
from app.core.batch import new_batch, upsert_settlement
from app.core.errors import NotFoundError, StorageError, ValidationError
from app.core.models import Employee, LegalConfiguration, PeriodNovelties
from app.core.payroll import compute_settlement


class TestConfiguration:
    def test_defaults_written_on_first_use(self, data_dir):
        config = storage.load_configuration()

        assert config.minimum_wage == 1_000_000
        assert (data_dir / "config.json").exists()

    def test_round_trip(self, data_dir):
        storage.save_configuration(LegalConfiguration(minimum_wage=1_300_000, hourly_divisor=230))

        loaded = storage.load_configuration()

        assert loaded.minimum_wage == 1_300_000
        assert loaded.hourly_divisor == 230

    def test_invalid_json(self, data_dir):
        (data_dir / "config.json").write_text("{not json", encoding="utf-8")

        with pytest.raises(StorageError):
            storage.load_configuration()

    def test_wrong_shape(self, data_dir):
        (data_dir / "config.json").write_text("[1, 2]", encoding="utf-8")

        with pytest.raises(StorageError):
            storage.load_configuration()


class TestEmployees:
    def test_missing_file_is_empty_roster(self, data_dir):
        assert storage.load_employees() == []

    def test_file_layout(self, data_dir, employee):
        storage.save_employees([employee])

        raw = json.loads((data_dir / "employees.json").read_text(encoding="utf-8"))
        assert list(raw) == ["employees"]
        assert raw["employees"][0]["id"] == "1001"
        assert storage.load_employees() == [employee]

    def test_invalid_record(self, data_dir):
        (data_dir / "employees.json").write_text('{"employees": [{"id": "1"}]}', encoding="utf-8")

        with pytest.raises(StorageError):
            storage.load_employees()


class TestBatches:
    def test_missing_batch(self, data_dir):
        assert storage.load_batch("2026-S01") is None
        with pytest.raises(NotFoundError):
            storage.get_batch("2026-S01")

    def test_round_trip(self, data_dir, employee, reference_config):
        batch = new_batch("2026-S30")
        upsert_settlement(batch, compute_settlement(employee, PeriodNovelties(days_worked=7), reference_config))

        storage.save_batch("2026-S30", batch)
        loaded = storage.load_batch("2026-S30")

        assert (data_dir / "payrolls" / "2026-S30.json").exists()
        assert loaded == batch

    @pytest.mark.parametrize("period_id", ["../escape", "a/b", "", "x" * 41, "2026.S30"])
    def test_unsafe_period_ids(self, data_dir, period_id):
        with pytest.raises(ValidationError):
            storage.batch_path(period_id)

    def test_no_temp_files_left(self, data_dir):
        storage.save_batch("2026-S30", new_batch("2026-S30"))

        assert [p.name for p in (data_dir / "payrolls").iterdir()] == ["2026-S30.json"]

    def test_list_newest_first(self, data_dir, employee, reference_config):
        older = new_batch("2026-S29")
        upsert_settlement(older, compute_settlement(employee, PeriodNovelties(), reference_config))
        storage.save_batch("2026-S29", older)
        newer = new_batch("2026-S30")
        upsert_settlement(newer, compute_settlement(employee, PeriodNovelties(), reference_config))
        storage.save_batch("2026-S30", newer)

        assert [b.period_id for b in storage.list_batches()] == ["2026-S30", "2026-S29"]

    def test_load_or_create(self, data_dir):
        fresh = storage.load_or_create_batch("2026-S30")
        assert fresh.settlements == []
        assert storage.load_batch("2026-S30") is None, "a fresh shell is not saved"

        storage.save_batch("2026-S30", fresh)
        assert storage.load_or_create_batch("2026-S30").created_at == fresh.created_at


class TestLocks:
    def test_period_lock_is_shared_per_id(self):
        assert storage.period_lock("2026-S30") is storage.period_lock("2026-S30")
        assert storage.period_lock("2026-S30") is not storage.period_lock("2026-S31")


class TestStartup:
    def test_initialize_creates_files(self, data_dir):
        storage.initialize_data_files()

        assert (data_dir / "config.json").exists()
        assert (data_dir / "payrolls").is_dir()
        assert json.loads((data_dir / "employees.json").read_text(encoding="utf-8")) == {"employees": []}

    def test_initialize_keeps_existing(self, data_dir):
        storage.save_employees([Employee(id="1", full_name="A", base_salary=1)])

        storage.initialize_data_files()

        assert len(storage.load_employees()) == 1

    def test_validate_reports_broken_batch(self, data_dir):
        storage.initialize_data_files()
        (data_dir / "payrolls" / "2026-S30.json").write_text("{}", encoding="utf-8")

        with pytest.raises(StorageError):
            storage.validate_data_files()

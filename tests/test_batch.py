# tests/test_batch.py
"""
Unit tests for payroll batch aggregation: upsert, totals, bulk settlement
and the DRAFT -> APPROVED lifecycle.
"""

import sys
from pathlib import Path

import pytest

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# ruff: noqa: E402
from app.core.batch import (
    approve_batch,
    bulk_settle,
    new_batch,
    summarize_batch,
    upsert_settlement,
)
from app.core.errors import AlreadyClosedError, ValidationError
from app.core.models import BatchStatus, Employee, PayType, PeriodNovelties
from app.core.payroll import compute_settlement


@pytest.fixture
def roster():
    return [
        Employee(id="1", full_name="ANA", base_salary=1_000_000),
        Employee(id="2", full_name="BETO", base_salary=1_200_000),
        Employee(id="3", full_name="CAMILA", base_salary=1_500_000, habitual_bonus=50_000),
        Employee(id="4", full_name="DIANA", base_salary=1_000_000, active=False),
    ]


class TestUpsert:
    """One settlement per employee; totals always recomputed."""

    def test_new_batch_is_empty_draft(self):
        batch = new_batch("2026-S30")

        assert batch.status == BatchStatus.DRAFT
        assert batch.settlements == []
        assert batch.totals.total_payroll == 0
        assert batch.created_at is not None

    def test_upsert_same_employee_twice_is_idempotent(self, employee, reference_config):
        settlement = compute_settlement(employee, PeriodNovelties(days_worked=7, bonus=206_459.87), reference_config)
        batch = new_batch("2026-S30")

        upsert_settlement(batch, settlement)
        once = batch.totals.model_copy()
        upsert_settlement(batch, settlement)

        assert len(batch.settlements) == 1
        assert batch.totals == once
        assert batch.totals.total_payroll == 448_466.67
        assert batch.totals.total_bank_transfer == 242_006.80

    def test_upsert_replaces_previous_settlement(self, employee, reference_config):
        batch = new_batch("2026-S30")
        upsert_settlement(batch, compute_settlement(employee, PeriodNovelties(days_worked=7), reference_config))
        upsert_settlement(batch, compute_settlement(employee, PeriodNovelties(days_worked=3), reference_config))

        assert len(batch.settlements) == 1
        assert batch.settlements[0].days_worked == 3
        assert batch.totals.total_payroll == batch.settlements[0].total_pay

    def test_upsert_stamps_period_and_time(self, employee, reference_config):
        batch = new_batch("2026-S30")

        upsert_settlement(batch, compute_settlement(employee, PeriodNovelties(), reference_config))

        assert batch.settlements[0].period_id == "2026-S30"
        assert batch.settlements[0].settled_at is not None
        assert batch.processed_at is not None

    def test_totals_sum_all_settlements(self, employee, high_earner, reference_config):
        batch = new_batch("2026-S30")
        first = compute_settlement(employee, PeriodNovelties(days_worked=7), reference_config)
        second = compute_settlement(high_earner, PeriodNovelties(days_worked=7, bonus=10_000), reference_config)

        upsert_settlement(batch, first)
        upsert_settlement(batch, second)

        assert batch.totals.total_payroll == pytest.approx(first.total_pay + second.total_pay)
        assert batch.totals.total_bank_transfer == pytest.approx(
            first.total_bank_transfer + second.total_bank_transfer
        )

    def test_upsert_rejected_after_approval(self, employee, reference_config):
        batch = new_batch("2026-S30")
        approve_batch(batch)

        with pytest.raises(AlreadyClosedError):
            upsert_settlement(batch, compute_settlement(employee, PeriodNovelties(), reference_config))


class TestApprove:
    """DRAFT -> APPROVED happens exactly once."""

    def test_approve_sets_status_and_timestamp(self):
        batch = approve_batch(new_batch("2026-S30"))

        assert batch.status == BatchStatus.APPROVED
        assert batch.approved_at is not None

    def test_second_approval_fails_and_keeps_timestamp(self):
        batch = approve_batch(new_batch("2026-S30"))
        approved_at = batch.approved_at

        with pytest.raises(AlreadyClosedError):
            approve_batch(batch)

        assert batch.approved_at == approved_at
        assert batch.status == BatchStatus.APPROVED


class TestBulkSettle:
    """Every active employee is settled; failures are collected, not raised."""

    def test_settles_active_employees_only(self, roster, reference_config):
        batch, errors = bulk_settle(
            roster, PeriodNovelties(days_worked=7), None, reference_config, PayType.WEEKLY, new_batch("2026-S30")
        )

        assert errors == []
        assert [s.employee_id for s in batch.settlements] == ["1", "2", "3"]

    def test_overrides_win_per_field(self, roster, reference_config):
        overrides = {"2": PeriodNovelties(days_worked=3, bonus=5_000)}

        batch, _ = bulk_settle(
            roster,
            PeriodNovelties(days_worked=7, night_surcharge_hours=1),
            overrides,
            reference_config,
            PayType.WEEKLY,
            new_batch("2026-S30"),
        )

        by_id = {s.employee_id: s for s in batch.settlements}
        assert by_id["2"].days_worked == 3
        assert by_id["2"].bonus == 5_000
        assert by_id["2"].surcharges["night_surcharge"].quantity == 1
        assert by_id["1"].days_worked == 7
        assert by_id["3"].bonus == 50_000, "habitual bonus applies when no bonus is given"

    def test_one_malformed_employee_does_not_abort(self, roster, reference_config):
        roster.append(Employee(id="99", full_name="ROTO", base_salary=-1))

        batch, errors = bulk_settle(
            roster, PeriodNovelties(days_worked=7), None, reference_config, PayType.WEEKLY, new_batch("2026-S30")
        )

        assert len(batch.settlements) == 3
        assert len(errors) == 1
        assert errors[0].employee_id == "99"
        assert errors[0].name == "ROTO"
        assert errors[0].details[0]["field"] == "employee"
        assert batch.errors == errors

    def test_invalid_override_is_reported_for_that_employee(self, roster, reference_config):
        overrides = {"1": PeriodNovelties(days_worked=45)}

        batch, errors = bulk_settle(
            roster, PeriodNovelties(days_worked=7), overrides, reference_config, PayType.WEEKLY, new_batch("2026-S30")
        )

        assert [e.employee_id for e in errors] == ["1"]
        assert len(batch.settlements) == 2

    def test_monthly_defaults_to_thirty_days(self, roster, reference_config):
        batch, _ = bulk_settle(
            roster, PeriodNovelties(), None, reference_config, PayType.MONTHLY, new_batch("2026-M07", PayType.MONTHLY)
        )

        assert all(s.days_worked == 30 for s in batch.settlements)
        assert all(s.pay_type == PayType.MONTHLY for s in batch.settlements)

    def test_no_active_employees(self, reference_config):
        roster = [Employee(id="1", full_name="A", base_salary=1_000_000, active=False)]

        with pytest.raises(ValidationError):
            bulk_settle(roster, PeriodNovelties(), None, reference_config, PayType.WEEKLY, new_batch("2026-S30"))

    def test_rerun_replaces_errors(self, roster, reference_config):
        batch = new_batch("2026-S30")
        bulk_settle(roster, PeriodNovelties(days_worked=40), None, reference_config, PayType.WEEKLY, batch)
        assert len(batch.errors) == 3

        bulk_settle(roster, PeriodNovelties(days_worked=7), None, reference_config, PayType.WEEKLY, batch)

        assert batch.errors == []
        assert len(batch.settlements) == 3

    def test_approved_batch_is_rejected(self, roster, reference_config):
        batch = approve_batch(new_batch("2026-S30"))

        with pytest.raises(AlreadyClosedError):
            bulk_settle(roster, PeriodNovelties(), None, reference_config, PayType.WEEKLY, batch)


class TestSummary:
    def test_summary_row(self, employee, reference_config):
        batch = new_batch("2026-S30")
        upsert_settlement(batch, compute_settlement(employee, PeriodNovelties(days_worked=7), reference_config))

        row = summarize_batch(batch)

        assert row["period_id"] == "2026-S30"
        assert row["status"] == "DRAFT"
        assert row["settlement_count"] == 1
        assert row["total_payroll"] == batch.totals.total_payroll

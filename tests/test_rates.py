# tests/test_rates.py
"""
Unit tests for per-unit values, the hourly divisor schedule and the
formula sheet.
"""

import datetime
import sys
from pathlib import Path

import pytest

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# ruff: noqa: E402
from app.core.models import DivisorStep, LegalConfiguration, PayType
from app.core.rates import (
    compute_unit_values,
    configuration_for_date,
    describe_formulas,
    divisor_for_date,
)
from app.core.utils import is_valid_period_id, period_id_for


class TestUnitValues:
    def test_minimum_wage_units(self, reference_config):
        units = compute_unit_values(1_000_000, reference_config)

        assert units["daily_value"] == pytest.approx(33_333.3333, abs=1e-3)
        assert units["hourly_value"] == pytest.approx(4_166.6667, abs=1e-3)
        assert units["subsidy_daily_value"] == pytest.approx(3_905.7333, abs=1e-3)
        assert units["health_daily_value"] == pytest.approx(1_333.3333, abs=1e-3)
        assert units["pension_daily_value"] == pytest.approx(1_333.3333, abs=1e-3)

    def test_rest_kinds_use_daily_value(self, reference_config):
        units = compute_unit_values(1_200_000, reference_config)

        assert units["surcharges"]["rest_unworked_sunday"] == pytest.approx(40_000 * 1.75)
        assert units["surcharges"]["rest_compensated_sunday"] == pytest.approx(40_000 * 0.75)
        assert units["surcharges"]["holiday_night_overtime"] == pytest.approx(5_000 * 2.50)

    def test_custom_factor(self, reference_config):
        config = reference_config.model_copy(
            update={"factors": reference_config.factors.model_copy(update={"day_overtime": 1.5})}
        )

        units = compute_unit_values(1_200_000, config)

        assert units["surcharges"]["day_overtime"] == pytest.approx(7_500)


class TestDivisorSchedule:
    """The latest step in force wins; earlier dates keep the configured divisor."""

    def test_default_schedule(self):
        config = LegalConfiguration()

        assert divisor_for_date(datetime.date(2026, 7, 14), config) == 240
        assert divisor_for_date(datetime.date(2026, 7, 15), config) == 224
        assert divisor_for_date(datetime.date(2027, 1, 1), config) == 224

    def test_unordered_steps(self):
        config = LegalConfiguration(
            hourly_divisor=240,
            divisor_schedule=[
                DivisorStep(effective_from=datetime.date(2026, 7, 15), divisor=220),
                DivisorStep(effective_from=datetime.date(2025, 7, 15), divisor=230),
            ],
        )

        assert divisor_for_date(datetime.date(2025, 1, 1), config) == 240
        assert divisor_for_date(datetime.date(2025, 12, 1), config) == 230
        assert divisor_for_date(datetime.date(2026, 8, 1), config) == 220

    def test_empty_schedule(self):
        config = LegalConfiguration(hourly_divisor=235, divisor_schedule=[])

        assert divisor_for_date(datetime.date(2030, 1, 1), config) == 235

    def test_configuration_for_date(self, reference_config):
        resolved = configuration_for_date(reference_config, datetime.date(2026, 8, 3))

        assert resolved.hourly_divisor == 224
        assert reference_config.hourly_divisor == 240, "the input is not modified"

    def test_configuration_unchanged(self, reference_config):
        assert configuration_for_date(reference_config, None) is reference_config
        assert configuration_for_date(reference_config, datetime.date(2026, 1, 5)) is reference_config


class TestFormulaSheet:
    def test_values(self, reference_config):
        sheet = describe_formulas(reference_config)
        values = sheet["values"]

        assert sheet["configuration"]["hourly_divisor"] == 240
        assert values["daily_value"]["result"] == 33_333.33
        assert values["hourly_value"]["result"] == 4_166.67
        assert values["day_overtime"]["result"] == 5_208.33
        assert values["day_overtime"]["factor"] == 1.25
        assert values["night_overtime"]["result"] == 7_291.67
        assert values["health_daily_value"]["result"] == 1_333.33

    def test_rest_kinds_not_listed(self, reference_config):
        values = describe_formulas(reference_config)["values"]

        assert "rest_unworked_sunday" not in values
        assert "rest_compensated_sunday" not in values


class TestPeriodIds:
    """Identifiers derived from a period start date."""

    def test_weekly_uses_iso_week(self):
        assert period_id_for(PayType.WEEKLY, datetime.date(2026, 8, 3)) == "2026-S32"
        assert period_id_for(PayType.WEEKLY, datetime.date(2027, 1, 1)) == "2026-S53"

    def test_monthly(self):
        assert period_id_for(PayType.MONTHLY, datetime.date(2026, 7, 15)) == "2026-M07"

    def test_derived_ids_are_valid(self):
        assert is_valid_period_id(period_id_for(PayType.WEEKLY, datetime.date(2026, 1, 1)))

    @pytest.mark.parametrize("period_id", ["2026-S10\n", "\n2026-S10", "2026 S10"])
    def test_rejects_whitespace(self, period_id):
        assert not is_valid_period_id(period_id)

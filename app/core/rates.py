"""Per-unit pay values derived from a monthly salary and the legal configuration.

Also resolves the hourly divisor in force on a given date (working-week
reduction steps). The engine only ever reads config.hourly_divisor; callers
that know the period date pass the result of configuration_for_date().
"""

from __future__ import annotations

import datetime

from app.core.constants import DAILY_SURCHARGE_KINDS, DAYS_PER_MONTH, SURCHARGE_KINDS
from app.core.models import LegalConfiguration
from app.core.utils import round_money


def compute_unit_values(salary: float, config: LegalConfiguration) -> dict:
    """
    Derive daily, hourly and per-surcharge unit values.

    Args:
        salary: Effective monthly salary (already substituted by the minimum wage if flagged)
        config: Legal configuration

    Returns:
        {"daily_value", "subsidy_daily_value", "health_daily_value",
         "pension_daily_value", "hourly_value", "surcharges": {kind: unit value}}

        Values are unrounded.
    """
    daily_value = salary / DAYS_PER_MONTH
    hourly_value = salary / config.hourly_divisor

    surcharges = {}
    for kind in SURCHARGE_KINDS:
        base = daily_value if kind in DAILY_SURCHARGE_KINDS else hourly_value
        surcharges[kind] = base * config.factors.for_kind(kind)

    return {
        "daily_value": daily_value,
        "subsidy_daily_value": config.transport_subsidy / DAYS_PER_MONTH,
        "health_daily_value": salary * (config.health_pct / 100) / DAYS_PER_MONTH,
        "pension_daily_value": salary * (config.pension_pct / 100) / DAYS_PER_MONTH,
        "hourly_value": hourly_value,
        "surcharges": surcharges,
    }


def divisor_for_date(on_date: datetime.date, config: LegalConfiguration) -> int:
    """
    Hourly divisor in force on a date.

    The latest schedule step with effective_from <= on_date wins. Dates
    before the first step use config.hourly_divisor.
    """
    divisor = config.hourly_divisor
    for step in sorted(config.divisor_schedule, key=lambda s: s.effective_from):
        if step.effective_from <= on_date:
            divisor = step.divisor
        else:
            break
    return divisor


def configuration_for_date(config: LegalConfiguration, on_date: datetime.date | None) -> LegalConfiguration:
    """Copy of config with the hourly divisor resolved for on_date. None leaves config untouched."""
    if on_date is None:
        return config
    divisor = divisor_for_date(on_date, config)
    if divisor == config.hourly_divisor:
        return config
    return config.model_copy(update={"hourly_divisor": divisor})


def describe_formulas(config: LegalConfiguration) -> dict:
    """
    Formula sheet for a minimum-wage salary under the current configuration.

    Each entry carries the formula text and the rounded result; hourly
    surcharges also carry their factor.
    """
    salary = config.minimum_wage
    divisor = config.hourly_divisor
    units = compute_unit_values(salary, config)

    values = {
        "daily_value": {
            "formula": f"salary / {DAYS_PER_MONTH}",
            "calculation": f"{salary:g} / {DAYS_PER_MONTH}",
            "result": round_money(units["daily_value"]),
        },
        "hourly_value": {
            "formula": "salary / hourly_divisor",
            "calculation": f"{salary:g} / {divisor}",
            "result": round_money(units["hourly_value"]),
        },
    }

    for kind in SURCHARGE_KINDS:
        if kind in DAILY_SURCHARGE_KINDS:
            continue
        factor = config.factors.for_kind(kind)
        values[kind] = {
            "formula": f"hourly_value * {factor:.2f}",
            "factor": factor,
            "result": round_money(units["surcharges"][kind]),
        }

    values["health_daily_value"] = {
        "formula": f"(salary * health_pct%) / {DAYS_PER_MONTH}",
        "calculation": f"({salary:g} * {config.health_pct:g}%) / {DAYS_PER_MONTH}",
        "result": round_money(units["health_daily_value"]),
    }
    values["pension_daily_value"] = {
        "formula": f"(salary * pension_pct%) / {DAYS_PER_MONTH}",
        "calculation": f"({salary:g} * {config.pension_pct:g}%) / {DAYS_PER_MONTH}",
        "result": round_money(units["pension_daily_value"]),
    }

    return {
        "description": "Calculation formulas under the current configuration",
        "configuration": {
            "minimum_wage": config.minimum_wage,
            "transport_subsidy": config.transport_subsidy,
            "hourly_divisor": divisor,
            "health_pct": config.health_pct,
            "pension_pct": config.pension_pct,
        },
        "values": values,
    }

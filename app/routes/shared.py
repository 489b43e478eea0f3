# app/routes/shared.py
"""
Request schemas and response helpers shared by the API route modules.
"""

import datetime
from typing import Any

from pydantic import BaseModel, Field

from app.core.errors import ValidationError
from app.core.models import AccountType, DivisorStep, PayType, PeriodNovelties
from app.core.utils import period_id_for


def ok(data: Any = None, message: str | None = None, total: int | None = None) -> dict:
    """Success envelope: {"success": true, "data": ..., ["message"], ["total"]}."""
    body = {"success": True, "data": data}
    if message is not None:
        body["message"] = message
    if total is not None:
        body["total"] = total
    return body


def resolve_period_id(
    period_id: str | None,
    period_start: datetime.date | None,
    pay_type: PayType,
) -> str:
    """
    Explicit period id, or one derived from period_start.

    Raises:
        ValidationError: If neither is given
    """
    if period_id:
        return period_id
    if period_start is not None:
        return period_id_for(pay_type, period_start)
    raise ValidationError([("period_id", "Provide period_id or period_start")])


# ============ Pydantic schemas ============


class EmployeeCreate(BaseModel):
    id: str = Field(min_length=1)
    full_name: str = Field(min_length=1)
    bank_account: str = ""
    account_type: AccountType | None = None
    base_salary: float | None = Field(default=None, gt=0)
    uses_statutory_minimum: bool = False
    active: bool = True
    habitual_bonus: float | None = Field(default=None, ge=0)


class EmployeeUpdate(BaseModel):
    full_name: str | None = Field(default=None, min_length=1)
    bank_account: str | None = None
    account_type: AccountType | None = None
    base_salary: float | None = Field(default=None, gt=0)
    uses_statutory_minimum: bool | None = None
    active: bool | None = None
    habitual_bonus: float | None = Field(default=None, ge=0)


class RaiseMinimumRequest(BaseModel):
    new_minimum: float


class ConfigurationUpdate(BaseModel):
    minimum_wage: float | None = None
    transport_subsidy: float | None = None
    health_pct: float | None = None
    pension_pct: float | None = None
    hourly_divisor: int | None = None
    factors: dict[str, float] | None = None
    year: int | None = None
    divisor_schedule: list[DivisorStep] | None = None


class SettleRequest(BaseModel):
    """Settle one employee. With save=true the result is upserted into the period's batch."""
    employee_id: str
    novelties: PeriodNovelties = Field(default_factory=PeriodNovelties)
    pay_type: PayType = PayType.WEEKLY
    period_id: str | None = None
    period_start: datetime.date | None = None
    period_end: datetime.date | None = None
    save: bool = False


class SettleAllRequest(BaseModel):
    """Settle every active employee; overrides are keyed by employee id."""
    default_novelties: PeriodNovelties = Field(default_factory=PeriodNovelties)
    overrides: dict[str, PeriodNovelties] = Field(default_factory=dict)
    pay_type: PayType = PayType.WEEKLY
    period_id: str | None = None
    period_start: datetime.date | None = None
    period_end: datetime.date | None = None

import datetime
from enum import Enum

from pydantic import BaseModel, Field

from app.core.constants import (
    DEFAULT_DIVISOR_SCHEDULE,
    DEFAULT_FACTORS,
    DEFAULT_HEALTH_PCT,
    DEFAULT_HOURLY_DIVISOR,
    DEFAULT_MINIMUM_WAGE,
    DEFAULT_PENSION_PCT,
    DEFAULT_TRANSPORT_SUBSIDY,
    SUBSIDY_WAGE_MULTIPLE,
)


class AccountType(str, Enum):
    SAVINGS = "SAVINGS"
    MOBILE_WALLET = "MOBILE_WALLET"
    CASH = "CASH"


class PayType(str, Enum):
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


class BatchStatus(str, Enum):
    DRAFT = "DRAFT"
    APPROVED = "APPROVED"


class SurchargeFactors(BaseModel):
    """Multiplier per surcharge kind, applied to the hourly or daily value."""
    day_overtime: float = DEFAULT_FACTORS["day_overtime"]
    night_overtime: float = DEFAULT_FACTORS["night_overtime"]
    night_surcharge: float = DEFAULT_FACTORS["night_surcharge"]
    holiday_day_overtime: float = DEFAULT_FACTORS["holiday_day_overtime"]
    holiday_night_overtime: float = DEFAULT_FACTORS["holiday_night_overtime"]
    rest_unworked_sunday: float = DEFAULT_FACTORS["rest_unworked_sunday"]
    rest_compensated_sunday: float = DEFAULT_FACTORS["rest_compensated_sunday"]

    def for_kind(self, kind: str) -> float:
        return getattr(self, kind)


class DivisorStep(BaseModel):
    """Hourly divisor in force from a given date onwards."""
    effective_from: datetime.date
    divisor: int


def _default_divisor_schedule() -> list[DivisorStep]:
    return [DivisorStep(effective_from=start, divisor=divisor) for start, divisor in DEFAULT_DIVISOR_SCHEDULE]


class LegalConfiguration(BaseModel):
    """Statutory constants for one payroll year."""
    minimum_wage: float = DEFAULT_MINIMUM_WAGE
    transport_subsidy: float = DEFAULT_TRANSPORT_SUBSIDY
    health_pct: float = DEFAULT_HEALTH_PCT
    pension_pct: float = DEFAULT_PENSION_PCT
    hourly_divisor: int = DEFAULT_HOURLY_DIVISOR
    factors: SurchargeFactors = Field(default_factory=SurchargeFactors)
    year: int = Field(default_factory=lambda: datetime.date.today().year)
    divisor_schedule: list[DivisorStep] = Field(default_factory=_default_divisor_schedule)
    updated_at: datetime.datetime | None = None


class Employee(BaseModel):
    """
    Roster entry.

    Stored records accept any amount. The payroll engine reports a
    non-positive salary as a violation for that one employee.
    """
    id: str
    full_name: str
    bank_account: str = ""
    account_type: AccountType = AccountType.SAVINGS
    base_salary: float
    uses_statutory_minimum: bool = False
    active: bool = True
    habitual_bonus: float | None = None
    created_at: datetime.datetime | None = None
    updated_at: datetime.datetime | None = None

    def transport_subsidy_eligible(self, minimum_wage: float) -> bool:
        """Eligibility always uses the stored base salary, never the substituted minimum."""
        return self.base_salary <= minimum_wage * SUBSIDY_WAGE_MULTIPLE


class PeriodNovelties(BaseModel):
    """Per-employee inputs for one pay period. None means "not supplied"."""
    days_worked: float | None = None
    day_overtime_hours: float = 0
    night_overtime_hours: float = 0
    night_surcharge_hours: float = 0
    holiday_day_overtime_hours: float = 0
    holiday_night_overtime_hours: float = 0
    unworked_sunday_count: float = 0
    compensated_sunday_count: float = 0
    bonus: float | None = None
    loan_deduction: float = 0


class SurchargeLine(BaseModel):
    quantity: float
    value: float


class BaseValues(BaseModel):
    """Rounded per-unit values a settlement was priced with."""
    daily_value: float
    subsidy_daily_value: float
    hourly_value: float
    health_daily_value: float
    pension_daily_value: float


class Settlement(BaseModel):
    """Itemized pay computation for one employee in one period."""
    employee_id: str
    full_name: str
    bank_account: str = ""
    account_type: AccountType = AccountType.SAVINGS
    base_salary: float
    effective_salary: float
    transport_subsidy_eligible: bool
    pay_type: PayType = PayType.WEEKLY
    period_id: str | None = None
    days_worked: float

    surcharges: dict[str, SurchargeLine]
    earned_salary: float
    earned_subsidy: float
    total_surcharges: float
    total_gross_salary_portion: float
    bonus: float
    total_earned: float

    health_deduction: float
    pension_deduction: float
    loan_deduction: float
    total_deductions: float

    net_payroll_value: float
    net_bonus_value: float
    total_pay: float
    total_bank_transfer: float

    base_values: BaseValues
    warnings: list[str] = Field(default_factory=list)
    settled_at: datetime.datetime | None = None


class BatchError(BaseModel):
    """One employee whose settlement failed during a bulk run."""
    employee_id: str
    name: str
    error_message: str
    details: list[dict[str, str]] | None = None


class BatchTotals(BaseModel):
    total_payroll: float = 0.0
    total_bank_transfer: float = 0.0


class PayrollBatch(BaseModel):
    """All settlements of one pay period with totals and approval state."""
    period_id: str
    pay_type: PayType = PayType.WEEKLY
    status: BatchStatus = BatchStatus.DRAFT
    period_start: datetime.date | None = None
    period_end: datetime.date | None = None
    settlements: list[Settlement] = Field(default_factory=list)
    totals: BatchTotals = Field(default_factory=BatchTotals)
    errors: list[BatchError] = Field(default_factory=list)
    created_at: datetime.datetime | None = None
    processed_at: datetime.datetime | None = None
    approved_at: datetime.datetime | None = None

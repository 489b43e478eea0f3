"""
Payroll calculation engine.

Pure functions: (employee, novelties, configuration) -> itemized Settlement.
Nothing here reads files or global state; callers pass every record in.

Salary substitution: when an employee is flagged with
``uses_statutory_minimum`` every *rate* (daily, hourly, surcharge unit
values) is derived from the configured minimum wage, while the transport
subsidy eligibility test keeps using the stored ``base_salary``. A highly
paid employee on the statutory minimum flag therefore gets minimum-wage
rates and no subsidy. Do not "fix" this.
"""

from app.core.constants import (
    DEFAULT_MONTHLY_DAYS,
    DEFAULT_WEEKLY_DAYS,
    MAX_DAYS_WORKED,
    SURCHARGE_KINDS,
    SURCHARGE_QUANTITY_FIELDS,
)
from app.core.errors import ValidationError
from app.core.logging_config import get_logger
from app.core.models import (
    BaseValues,
    Employee,
    LegalConfiguration,
    PayType,
    PeriodNovelties,
    Settlement,
    SurchargeLine,
)
from app.core.rates import compute_unit_values
from app.core.utils import round_money

logger = get_logger(__name__)


def validate_inputs(
    employee: Employee | None,
    novelties: PeriodNovelties | None,
    config: LegalConfiguration | None,
) -> None:
    """
    Collect every violation in the inputs and raise them together.

    Raises:
        ValidationError: With the full list of (field, message) pairs
    """
    violations: list[tuple[str, str]] = []

    if employee is None:
        violations.append(("employee", "Employee is required"))
    elif employee.base_salary is None or employee.base_salary <= 0:
        violations.append(("employee", "Employee must have a positive base salary"))

    if novelties is None:
        violations.append(("novelties", "Period novelties are required"))
    else:
        days = novelties.days_worked
        if days is None or not 0 <= days <= MAX_DAYS_WORKED:
            violations.append(("days_worked", f"Days worked must be between 0 and {MAX_DAYS_WORKED}"))

        for field in SURCHARGE_QUANTITY_FIELDS.values():
            if getattr(novelties, field) < 0:
                violations.append((field, "Must be zero or greater"))

        if novelties.bonus is not None and novelties.bonus < 0:
            violations.append(("bonus", "Bonus cannot be negative"))
        if novelties.loan_deduction < 0:
            violations.append(("loan_deduction", "Loan deduction cannot be negative"))

    if config is None:
        violations.append(("config", "Legal configuration is required"))
    else:
        if config.minimum_wage is None or config.minimum_wage <= 0:
            violations.append(("config.minimum_wage", "Minimum wage must be positive"))
        if config.hourly_divisor <= 0:
            violations.append(("config.hourly_divisor", "Hourly divisor must be positive"))
        for kind in SURCHARGE_KINDS:
            if config.factors.for_kind(kind) <= 0:
                violations.append((f"config.factors.{kind}", "Factor must be positive"))

    if violations:
        raise ValidationError(violations)


def effective_salary(employee: Employee, config: LegalConfiguration) -> float:
    """Salary every rate is derived from."""
    if employee.uses_statutory_minimum:
        return config.minimum_wage
    return employee.base_salary


def merge_novelties(defaults: PeriodNovelties, override: PeriodNovelties | None) -> PeriodNovelties:
    """
    Overlay one employee's novelties on the period defaults.

    Only fields the override actually carries win; unset or null fields
    fall through to the defaults.
    """
    if override is None:
        return defaults
    return defaults.model_copy(update=override.model_dump(exclude_unset=True, exclude_none=True))


def _settle(
    employee: Employee,
    novelties: PeriodNovelties,
    config: LegalConfiguration,
    pay_type: PayType,
    default_days: int,
    period_id: str | None,
) -> Settlement:
    if novelties is not None and novelties.days_worked is None:
        novelties = novelties.model_copy(update={"days_worked": default_days})

    validate_inputs(employee, novelties, config)

    salary = effective_salary(employee, config)
    units = compute_unit_values(salary, config)
    days = novelties.days_worked

    earned_salary = units["daily_value"] * days

    # Eligibility is judged on the stored salary, not the substituted one
    eligible = employee.transport_subsidy_eligible(config.minimum_wage)
    earned_subsidy = units["subsidy_daily_value"] * days if eligible else 0.0

    surcharges = {}
    total_surcharges = 0.0
    for kind in SURCHARGE_KINDS:
        quantity = getattr(novelties, SURCHARGE_QUANTITY_FIELDS[kind])
        value = quantity * units["surcharges"][kind]
        total_surcharges += value
        surcharges[kind] = SurchargeLine(quantity=quantity, value=round_money(value))

    salary_portion = earned_salary + total_surcharges

    health = units["health_daily_value"] * days
    pension = units["pension_daily_value"] * days

    if novelties.bonus is not None:
        bonus = novelties.bonus
    else:
        bonus = employee.habitual_bonus or 0.0
    loan = novelties.loan_deduction

    net_payroll = round_money(salary_portion + earned_subsidy - health - pension)
    net_bonus = round_money(bonus - loan)
    total_pay = round_money(net_payroll + net_bonus)

    warnings = []
    if total_pay < 0:
        message = f"Total pay is negative ({total_pay:.2f})"
        warnings.append(message)
        logger.warning(
            "Negative total pay for employee %s",
            employee.id,
            extra={"extra_fields": {"employee_id": employee.id, "period_id": period_id, "total_pay": total_pay}},
        )

    return Settlement(
        employee_id=employee.id,
        full_name=employee.full_name,
        bank_account=employee.bank_account,
        account_type=employee.account_type,
        base_salary=employee.base_salary,
        effective_salary=salary,
        transport_subsidy_eligible=eligible,
        pay_type=pay_type,
        period_id=period_id,
        days_worked=days,
        surcharges=surcharges,
        earned_salary=round_money(earned_salary),
        earned_subsidy=round_money(earned_subsidy),
        total_surcharges=round_money(total_surcharges),
        total_gross_salary_portion=round_money(salary_portion),
        bonus=round_money(bonus),
        total_earned=round_money(salary_portion + earned_subsidy + bonus),
        health_deduction=round_money(health),
        pension_deduction=round_money(pension),
        loan_deduction=round_money(loan),
        total_deductions=round_money(health + pension + loan),
        net_payroll_value=net_payroll,
        net_bonus_value=net_bonus,
        total_pay=total_pay,
        total_bank_transfer=net_payroll,
        base_values=BaseValues(
            daily_value=round_money(units["daily_value"]),
            subsidy_daily_value=round_money(units["subsidy_daily_value"]),
            hourly_value=round_money(units["hourly_value"]),
            health_daily_value=round_money(units["health_daily_value"]),
            pension_daily_value=round_money(units["pension_daily_value"]),
        ),
        warnings=warnings,
    )


def compute_settlement(
    employee: Employee,
    novelties: PeriodNovelties,
    config: LegalConfiguration,
    period_id: str | None = None,
) -> Settlement:
    """
    Settle one employee for a weekly period.

    days_worked defaults to 7 when the novelties leave it out.

    Raises:
        ValidationError: Listing every problem with the inputs
    """
    return _settle(employee, novelties, config, PayType.WEEKLY, DEFAULT_WEEKLY_DAYS, period_id)


def compute_monthly_settlement(
    employee: Employee,
    novelties: PeriodNovelties,
    config: LegalConfiguration,
    period_id: str | None = None,
) -> Settlement:
    """Same as compute_settlement, but days_worked defaults to 30."""
    return _settle(employee, novelties, config, PayType.MONTHLY, DEFAULT_MONTHLY_DAYS, period_id)


def settle_for_pay_type(
    pay_type: PayType,
    employee: Employee,
    novelties: PeriodNovelties,
    config: LegalConfiguration,
    period_id: str | None = None,
) -> Settlement:
    if pay_type == PayType.MONTHLY:
        return compute_monthly_settlement(employee, novelties, config, period_id)
    return compute_settlement(employee, novelties, config, period_id)

"""
Payroll batch aggregation.

A batch holds every settlement of one pay period. Settlements are upserted
by employee id, totals are recomputed from scratch after each mutation and
the batch moves DRAFT -> APPROVED exactly once.
"""

import datetime

from app.core.errors import AlreadyClosedError, PayrollError, ValidationError
from app.core.logging_config import get_logger
from app.core.models import (
    BatchError,
    BatchStatus,
    BatchTotals,
    Employee,
    LegalConfiguration,
    PayrollBatch,
    PayType,
    PeriodNovelties,
    Settlement,
)
from app.core.payroll import merge_novelties, settle_for_pay_type
from app.core.utils import get_now, round_money

logger = get_logger(__name__)


def new_batch(
    period_id: str,
    pay_type: PayType = PayType.WEEKLY,
    period_start: datetime.date | None = None,
    period_end: datetime.date | None = None,
) -> PayrollBatch:
    """Fresh DRAFT batch with no settlements and zero totals."""
    return PayrollBatch(
        period_id=period_id,
        pay_type=pay_type,
        period_start=period_start,
        period_end=period_end,
        created_at=get_now(),
    )


def _ensure_open(batch: PayrollBatch) -> None:
    if batch.status == BatchStatus.APPROVED:
        raise AlreadyClosedError(f"Payroll {batch.period_id} is already approved")


def recompute_totals(batch: PayrollBatch) -> BatchTotals:
    """Sum the rounded settlement values; never updated incrementally."""
    total_payroll = sum(s.total_pay for s in batch.settlements)
    total_transfer = sum(s.total_bank_transfer for s in batch.settlements)
    batch.totals = BatchTotals(
        total_payroll=round_money(total_payroll),
        total_bank_transfer=round_money(total_transfer),
    )
    return batch.totals


def upsert_settlement(batch: PayrollBatch, settlement: Settlement) -> PayrollBatch:
    """
    Replace the employee's previous settlement, or append a new one.

    Raises:
        AlreadyClosedError: If the batch is approved
    """
    _ensure_open(batch)

    now = get_now()
    settlement = settlement.model_copy(update={"period_id": batch.period_id, "settled_at": now})

    for index, existing in enumerate(batch.settlements):
        if existing.employee_id == settlement.employee_id:
            batch.settlements[index] = settlement
            break
    else:
        batch.settlements.append(settlement)

    recompute_totals(batch)
    batch.processed_at = now
    return batch


def bulk_settle(
    employees: list[Employee],
    default_novelties: PeriodNovelties,
    overrides: dict[str, PeriodNovelties] | None,
    config: LegalConfiguration,
    pay_type: PayType,
    batch: PayrollBatch,
) -> tuple[PayrollBatch, list[BatchError]]:
    """
    Settle every active employee into the batch.

    A failing employee is recorded in the returned error list (also stored
    on batch.errors) and the run continues with the next one.

    Raises:
        ValidationError: If the roster has no active employee
        AlreadyClosedError: If the batch is approved
    """
    _ensure_open(batch)

    active = [e for e in employees if e.active]
    if not active:
        raise ValidationError([("employees", "No active employees to settle")])

    overrides = overrides or {}
    errors: list[BatchError] = []

    for employee in active:
        novelties = merge_novelties(default_novelties, overrides.get(employee.id))
        try:
            settlement = settle_for_pay_type(pay_type, employee, novelties, config, batch.period_id)
        except PayrollError as exc:
            details = None
            if isinstance(exc, ValidationError):
                details = [{"field": field, "message": msg} for field, msg in exc.violations]
            errors.append(
                BatchError(
                    employee_id=employee.id,
                    name=employee.full_name,
                    error_message=str(exc),
                    details=details,
                )
            )
            logger.warning(
                "Settlement failed for employee %s: %s",
                employee.id,
                exc,
                extra={"extra_fields": {"employee_id": employee.id, "period_id": batch.period_id}},
            )
            continue
        upsert_settlement(batch, settlement)

    batch.errors = errors
    batch.processed_at = get_now()

    logger.info(
        "Bulk settlement for %s: %d settled, %d failed",
        batch.period_id,
        len(active) - len(errors),
        len(errors),
        extra={
            "extra_fields": {
                "period_id": batch.period_id,
                "settled": len(active) - len(errors),
                "failed": len(errors),
            }
        },
    )
    return batch, errors


def approve_batch(batch: PayrollBatch) -> PayrollBatch:
    """
    Close the batch.

    Raises:
        AlreadyClosedError: If it was approved before; approved_at is left untouched
    """
    _ensure_open(batch)
    batch.status = BatchStatus.APPROVED
    batch.approved_at = get_now()
    logger.info(
        "Payroll %s approved",
        batch.period_id,
        extra={"extra_fields": {"period_id": batch.period_id, "total_payroll": batch.totals.total_payroll}},
    )
    return batch


def summarize_batch(batch: PayrollBatch) -> dict:
    """Listing row for one stored period."""
    return {
        "period_id": batch.period_id,
        "pay_type": batch.pay_type.value,
        "status": batch.status.value,
        "period_start": batch.period_start.isoformat() if batch.period_start else None,
        "period_end": batch.period_end.isoformat() if batch.period_end else None,
        "settlement_count": len(batch.settlements),
        "error_count": len(batch.errors),
        "total_payroll": batch.totals.total_payroll,
        "total_bank_transfer": batch.totals.total_bank_transfer,
        "processed_at": batch.processed_at.isoformat() if batch.processed_at else None,
    }

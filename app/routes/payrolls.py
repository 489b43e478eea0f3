# app/routes/payrolls.py
"""
API endpoints for settling and approving payroll periods.

Every read-modify-write of a batch runs under storage.period_lock() for its
period id. Those handlers are plain functions so they run in the thread pool.
"""

from fastapi import APIRouter

from app.core import storage
from app.core.batch import approve_batch, bulk_settle, summarize_batch, upsert_settlement
from app.core.employees import find_employee
from app.core.logging_config import get_logger
from app.core.payroll import settle_for_pay_type
from app.core.rates import configuration_for_date
from app.routes.shared import SettleAllRequest, SettleRequest, ok, resolve_period_id

logger = get_logger(__name__)

router = APIRouter(prefix="/api/payrolls", tags=["payrolls"])


@router.get("")
async def list_payrolls():
    """Stored periods, most recently processed first."""
    rows = [summarize_batch(batch) for batch in storage.list_batches()]
    return ok(rows, total=len(rows))


def _pricing_date(period_start, batch):
    """Date the hourly divisor is resolved for: the request's, else the stored batch's."""
    if period_start is not None:
        return period_start
    return batch.period_start if batch is not None else None


@router.post("/settle")
def settle(body: SettleRequest):
    """
    Settle one employee.

    The hourly divisor follows period_start, or the stored batch's
    period_start when the request only names the period id. Without save
    the settlement is only returned; with save it is upserted into the batch.
    """
    configuration = storage.load_configuration()
    employee = find_employee(storage.load_employees(), body.employee_id)

    if not body.save:
        period_id = None
        period_start = body.period_start
        if body.period_id or body.period_start:
            period_id = resolve_period_id(body.period_id, body.period_start, body.pay_type)
            period_start = _pricing_date(body.period_start, storage.load_batch(period_id))
        config = configuration_for_date(configuration, period_start)
        settlement = settle_for_pay_type(body.pay_type, employee, body.novelties, config, period_id)
        return ok(settlement.model_dump(mode="json"), message="Payroll calculated")

    period_id = resolve_period_id(body.period_id, body.period_start, body.pay_type)
    storage.batch_path(period_id)  # rejects unsafe ids before any work

    with storage.period_lock(period_id):
        batch = storage.load_or_create_batch(period_id, body.pay_type, body.period_start, body.period_end)
        config = configuration_for_date(configuration, _pricing_date(body.period_start, batch))
        settlement = settle_for_pay_type(body.pay_type, employee, body.novelties, config, period_id)
        upsert_settlement(batch, settlement)
        storage.save_batch(period_id, batch)
    logger.info(
        "Settlement saved for employee %s in %s",
        employee.id,
        period_id,
        extra={"extra_fields": {"period_id": period_id, "employee_id": employee.id}},
    )

    saved = next(s for s in batch.settlements if s.employee_id == employee.id)
    return ok(saved.model_dump(mode="json"), message="Payroll calculated and saved")


@router.post("/settle-all")
def settle_all(body: SettleAllRequest):
    """Settle every active employee; per-employee failures are listed in errors."""
    period_id = resolve_period_id(body.period_id, body.period_start, body.pay_type)
    storage.batch_path(period_id)

    configuration = storage.load_configuration()
    employees = storage.load_employees()

    with storage.period_lock(period_id):
        batch = storage.load_or_create_batch(period_id, body.pay_type, body.period_start, body.period_end)
        config = configuration_for_date(configuration, _pricing_date(body.period_start, batch))
        batch, errors = bulk_settle(
            employees, body.default_novelties, body.overrides, config, body.pay_type, batch
        )
        storage.save_batch(period_id, batch)

    settled = len(batch.settlements)
    return ok(
        {"payroll": batch.model_dump(mode="json"), "errors": [e.model_dump(mode="json") for e in errors]},
        message=f"Payroll {period_id}: {settled} settlements, {len(errors)} errors",
        total=settled,
    )


@router.get("/{period_id}")
async def get_payroll(period_id: str):
    return ok(storage.get_batch(period_id).model_dump(mode="json"))


@router.put("/{period_id}/approve")
def approve(period_id: str):
    with storage.period_lock(period_id):
        batch = storage.get_batch(period_id)
        approve_batch(batch)
        storage.save_batch(period_id, batch)

    return ok(batch.model_dump(mode="json"), message=f"Payroll {period_id} approved")

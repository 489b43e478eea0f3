# app/routes/employees.py
"""
API endpoints for the employee roster.

Mutating handlers are plain functions so FastAPI runs them in its thread
pool, where storage.roster_lock serializes the read-modify-write.
"""

from fastapi import APIRouter, status

from app.core import storage
from app.core.employees import (
    create_employee,
    deactivate_employee,
    filter_employees,
    find_employee,
    raise_to_minimum,
    remove_employee,
    update_employee,
)
from app.core.models import AccountType
from app.routes.shared import EmployeeCreate, EmployeeUpdate, RaiseMinimumRequest, ok

router = APIRouter(prefix="/api/employees", tags=["employees"])


@router.get("")
async def list_employees(active: bool | None = None, account_type: AccountType | None = None):
    employees = filter_employees(storage.load_employees(), active=active, account_type=account_type)
    return ok([e.model_dump(mode="json") for e in employees], total=len(employees))


@router.post("/raise-minimum")
def raise_minimum(body: RaiseMinimumRequest):
    """Raise every active employee earning below the new minimum wage to it."""
    with storage.roster_lock:
        roster = storage.load_employees()
        updated = raise_to_minimum(roster, body.new_minimum)
        if updated:
            storage.save_employees(roster)

    return ok(
        {"updated": updated, "new_minimum": body.new_minimum},
        message=f"{updated} employees raised to the new minimum wage",
    )


@router.get("/{employee_id}")
async def get_employee(employee_id: str):
    employee = find_employee(storage.load_employees(), employee_id)
    return ok(employee.model_dump(mode="json"))


@router.post("", status_code=status.HTTP_201_CREATED)
def create(body: EmployeeCreate):
    with storage.roster_lock:
        roster = storage.load_employees()
        config = storage.load_configuration()
        employee = create_employee(roster, body.model_dump(exclude_unset=True), config.minimum_wage)
        storage.save_employees(roster)

    return ok(employee.model_dump(mode="json"), message="Employee created")


@router.put("/{employee_id}")
def update(employee_id: str, body: EmployeeUpdate):
    with storage.roster_lock:
        roster = storage.load_employees()
        employee = update_employee(roster, employee_id, body.model_dump(exclude_unset=True))
        storage.save_employees(roster)

    return ok(employee.model_dump(mode="json"), message="Employee updated")


@router.delete("/{employee_id}")
def delete(employee_id: str, hard_delete: bool = False):
    """Soft delete by default (active=false); hard_delete=true removes the record."""
    with storage.roster_lock:
        roster = storage.load_employees()
        if hard_delete:
            employee = remove_employee(roster, employee_id)
            message = "Employee removed"
        else:
            employee = deactivate_employee(roster, employee_id)
            message = "Employee deactivated"
        storage.save_employees(roster)

    return ok(employee.model_dump(mode="json"), message=message)

"""
Employee roster operations.

All functions work on an in-memory list of Employee records; loading and
saving the roster is the caller's job (see app.core.storage).
"""

from pydantic import ValidationError as PydanticValidationError

from app.core.errors import DuplicateError, NotFoundError, ValidationError
from app.core.logging_config import get_logger
from app.core.models import AccountType, Employee
from app.core.utils import get_now

logger = get_logger(__name__)

#: Fields update_employee never touches.
IMMUTABLE_FIELDS = frozenset({"id", "created_at"})


def normalize_employee_data(data: dict) -> dict:
    """Upper-case and strip names and account types; returns a copy."""
    data = dict(data)
    if data.get("full_name") is not None:
        data["full_name"] = str(data["full_name"]).strip().upper()
    if data.get("account_type") is not None:
        account_type = data["account_type"]
        if isinstance(account_type, AccountType):
            account_type = account_type.value
        data["account_type"] = str(account_type).strip().upper()
    if data.get("bank_account") is not None:
        data["bank_account"] = str(data["bank_account"]).strip()
    return data


def _build_employee(data: dict) -> Employee:
    try:
        return Employee(**data)
    except PydanticValidationError as exc:
        violations = [(".".join(str(p) for p in err["loc"]), err["msg"]) for err in exc.errors()]
        raise ValidationError(violations) from exc


def find_employee(roster: list[Employee], employee_id: str) -> Employee:
    """
    Raises:
        NotFoundError: If no employee has that id
    """
    for employee in roster:
        if employee.id == employee_id:
            return employee
    raise NotFoundError(f"Employee {employee_id} not found")


def filter_employees(
    roster: list[Employee],
    active: bool | None = None,
    account_type: AccountType | None = None,
) -> list[Employee]:
    result = roster
    if active is not None:
        result = [e for e in result if e.active == active]
    if account_type is not None:
        result = [e for e in result if e.account_type == account_type]
    return list(result)


def create_employee(roster: list[Employee], data: dict, minimum_wage: float) -> Employee:
    """
    Register a new employee and append it to the roster.

    A missing account type becomes SAVINGS and a missing base salary the
    given minimum wage.

    Raises:
        DuplicateError: If the id is already registered
    """
    data = normalize_employee_data(data)
    employee_id = str(data.get("id") or "").strip()
    if not employee_id:
        raise ValidationError([("id", "Employee id is required")])
    if any(e.id == employee_id for e in roster):
        raise DuplicateError(f"Employee {employee_id} already exists")

    if data.get("account_type") is None:
        data["account_type"] = AccountType.SAVINGS
    if data.get("base_salary") is None:
        data["base_salary"] = minimum_wage

    now = get_now()
    data.update({"id": employee_id, "created_at": now, "updated_at": now})
    employee = _build_employee(data)
    roster.append(employee)

    logger.info("Employee %s created", employee_id, extra={"extra_fields": {"employee_id": employee_id}})
    return employee


def update_employee(roster: list[Employee], employee_id: str, changes: dict) -> Employee:
    """
    Apply a partial update; id and created_at are never changed.

    Raises:
        NotFoundError: If no employee has that id
    """
    current = find_employee(roster, employee_id)
    changes = {k: v for k, v in normalize_employee_data(changes).items() if k not in IMMUTABLE_FIELDS}
    changes["updated_at"] = get_now()

    updated = _build_employee({**current.model_dump(), **changes})
    roster[roster.index(current)] = updated

    logger.info(
        "Employee %s updated",
        employee_id,
        extra={"extra_fields": {"employee_id": employee_id, "fields": sorted(changes)}},
    )
    return updated


def deactivate_employee(roster: list[Employee], employee_id: str) -> Employee:
    """Soft delete: the record stays on the roster with active=False."""
    return update_employee(roster, employee_id, {"active": False})


def remove_employee(roster: list[Employee], employee_id: str) -> Employee:
    """Hard delete: drop the record from the roster."""
    employee = find_employee(roster, employee_id)
    roster.remove(employee)
    logger.info("Employee %s removed", employee_id, extra={"extra_fields": {"employee_id": employee_id}})
    return employee


def raise_to_minimum(roster: list[Employee], new_minimum: float) -> int:
    """
    Bring every active employee earning below new_minimum up to it.

    Returns:
        Number of employees updated

    Raises:
        ValidationError: If new_minimum is not positive
    """
    if new_minimum is None or new_minimum <= 0:
        raise ValidationError([("new_minimum", "New minimum wage must be positive")])

    now = get_now()
    count = 0
    for index, employee in enumerate(roster):
        if employee.active and employee.base_salary < new_minimum:
            roster[index] = employee.model_copy(update={"base_salary": new_minimum, "updated_at": now})
            count += 1

    logger.info(
        "Raised %d salaries to %s",
        count,
        new_minimum,
        extra={"extra_fields": {"updated": count, "new_minimum": new_minimum}},
    )
    return count

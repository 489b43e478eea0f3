"""Partial updates of the stored legal configuration."""

from pydantic import ValidationError as PydanticValidationError

from app.core.constants import SURCHARGE_KINDS
from app.core.errors import ValidationError
from app.core.logging_config import get_logger
from app.core.models import LegalConfiguration
from app.core.utils import get_now

logger = get_logger(__name__)

#: Top-level numeric fields a caller may change.
NUMERIC_FIELDS = ("minimum_wage", "transport_subsidy", "health_pct", "pension_pct", "hourly_divisor")

#: Fields that divide or price every unit value; zero is rejected.
POSITIVE_FIELDS = ("minimum_wage", "hourly_divisor")


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_schedule(steps, violations: list[tuple[str, str]]) -> None:
    if not isinstance(steps, list):
        violations.append(("divisor_schedule", "Must be a list of steps"))
        return
    for index, step in enumerate(steps):
        divisor = step.get("divisor") if isinstance(step, dict) else getattr(step, "divisor", None)
        if not _is_number(divisor) or divisor <= 0:
            violations.append((f"divisor_schedule.{index}.divisor", "Must be a positive number"))


def apply_configuration_update(config: LegalConfiguration, changes: dict) -> LegalConfiguration:
    """
    Return a new configuration with changes applied.

    - Numeric fields must be non-negative numbers; minimum_wage and
      hourly_divisor must be positive.
    - factors are merged per kind and must be positive; kinds not
      mentioned keep their value.
    - year and divisor_schedule are replaced as a whole; every step needs a
      positive divisor.
    - updated_at is stamped.

    Raises:
        ValidationError: Listing every rejected field
    """
    violations: list[tuple[str, str]] = []
    update: dict = {}

    for field in NUMERIC_FIELDS:
        if changes.get(field) is None:
            continue
        value = changes[field]
        if field in POSITIVE_FIELDS:
            if not _is_number(value) or value <= 0:
                violations.append((field, "Must be a positive number"))
                continue
        elif not _is_number(value) or value < 0:
            violations.append((field, "Must be a non-negative number"))
            continue
        update[field] = value

    factor_changes = changes.get("factors") or {}
    if factor_changes:
        factors = config.factors.model_dump()
        for kind, value in factor_changes.items():
            if value is None:
                continue
            if kind not in SURCHARGE_KINDS:
                violations.append((f"factors.{kind}", "Unknown surcharge kind"))
            elif not _is_number(value) or value <= 0:
                violations.append((f"factors.{kind}", "Must be a positive number"))
            else:
                factors[kind] = value
        update["factors"] = factors

    if changes.get("divisor_schedule") is not None:
        _check_schedule(changes["divisor_schedule"], violations)

    for field in ("year", "divisor_schedule"):
        if changes.get(field) is not None:
            update[field] = changes[field]

    if violations:
        raise ValidationError(violations)

    update["updated_at"] = get_now()
    try:
        updated = LegalConfiguration.model_validate({**config.model_dump(), **update})
    except PydanticValidationError as exc:
        raise ValidationError(
            [(".".join(str(p) for p in err["loc"]), err["msg"]) for err in exc.errors()]
        ) from exc

    logger.info(
        "Legal configuration updated",
        extra={"extra_fields": {"fields": sorted(k for k in update if k != "updated_at")}},
    )
    return updated

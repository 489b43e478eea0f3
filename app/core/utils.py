# app/core/utils.py
import datetime
import re
from decimal import ROUND_HALF_UP, Decimal

from app.core.config import PERIOD_ID_PATTERN
from app.core.models import PayType

CENTS = Decimal("0.01")

_PERIOD_ID_RE = re.compile(PERIOD_ID_PATTERN)


def round_money(value: float) -> float:
    """
    Round a currency amount to cents, halves away from zero.

    The float goes through its shortest repr so 0.125 rounds to 0.13 and
    -0.125 to -0.13, matching how the amount was written.
    """
    return float(Decimal(repr(float(value))).quantize(CENTS, rounding=ROUND_HALF_UP))


def get_now() -> datetime.datetime:
    """Current UTC timestamp, timezone aware."""
    return datetime.datetime.now(datetime.timezone.utc)


def is_valid_period_id(period_id: str) -> bool:
    return bool(_PERIOD_ID_RE.fullmatch(period_id or ""))


def period_id_for(pay_type: PayType, on_date: datetime.date) -> str:
    """
    Derive a period identifier from a date.

    - WEEKLY:  ISO year and week, e.g. "2022-S19"
    - MONTHLY: calendar year and month, e.g. "2022-M05"
    """
    if pay_type == PayType.WEEKLY:
        iso_year, iso_week, _ = on_date.isocalendar()
        return f"{iso_year}-S{iso_week:02d}"
    return f"{on_date.year}-M{on_date.month:02d}"


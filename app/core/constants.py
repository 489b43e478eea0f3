# app/core/constants.py
import datetime
from typing import Final

# ==========================
# Calendar conventions
# ==========================

#: Commercial month used for every daily value (salary / 30).
DAYS_PER_MONTH: Final[int] = 30

#: Upper bound for days worked in a single settlement.
MAX_DAYS_WORKED: Final[int] = 30

#: Days settled when a weekly novelty omits days_worked.
DEFAULT_WEEKLY_DAYS: Final[int] = 7

#: Days settled when a monthly novelty omits days_worked.
DEFAULT_MONTHLY_DAYS: Final[int] = 30

#: Transport subsidy is paid to employees earning up to this many minimum wages.
SUBSIDY_WAGE_MULTIPLE: Final[int] = 2


# ==========================
# Statutory defaults
# ==========================

#: Values written to config.json the first time the service starts.
DEFAULT_MINIMUM_WAGE: Final[float] = 1_000_000
DEFAULT_TRANSPORT_SUBSIDY: Final[float] = 117_172
DEFAULT_HEALTH_PCT: Final[float] = 4
DEFAULT_PENSION_PCT: Final[float] = 4

#: Monthly hours used to derive the ordinary hourly value (48 h weeks).
DEFAULT_HOURLY_DIVISOR: Final[int] = 240

#: Steps of the working-week reduction (Ley 2101). Each entry is
#: (effective_from, divisor); dates before the first step use the configured divisor.
DEFAULT_DIVISOR_SCHEDULE: Final[tuple[tuple[datetime.date, int], ...]] = (
    (datetime.date(2026, 7, 15), 224),
)


# ==========================
# Surcharge kinds
# ==========================

DAY_OVERTIME: Final[str] = "day_overtime"
NIGHT_OVERTIME: Final[str] = "night_overtime"
NIGHT_SURCHARGE: Final[str] = "night_surcharge"
HOLIDAY_DAY_OVERTIME: Final[str] = "holiday_day_overtime"
HOLIDAY_NIGHT_OVERTIME: Final[str] = "holiday_night_overtime"
REST_UNWORKED_SUNDAY: Final[str] = "rest_unworked_sunday"
REST_COMPENSATED_SUNDAY: Final[str] = "rest_compensated_sunday"

#: All seven kinds, in the order they appear on a pay slip.
SURCHARGE_KINDS: Final[tuple[str, ...]] = (
    DAY_OVERTIME,
    NIGHT_OVERTIME,
    NIGHT_SURCHARGE,
    HOLIDAY_DAY_OVERTIME,
    HOLIDAY_NIGHT_OVERTIME,
    REST_UNWORKED_SUNDAY,
    REST_COMPENSATED_SUNDAY,
)

#: Kinds priced on the daily value instead of the hourly value.
DAILY_SURCHARGE_KINDS: Final[frozenset[str]] = frozenset({REST_UNWORKED_SUNDAY, REST_COMPENSATED_SUNDAY})

#: Legal multipliers per kind.
DEFAULT_FACTORS: Final[dict[str, float]] = {
    DAY_OVERTIME: 1.25,
    NIGHT_OVERTIME: 1.75,
    NIGHT_SURCHARGE: 1.35,
    HOLIDAY_DAY_OVERTIME: 2.00,
    HOLIDAY_NIGHT_OVERTIME: 2.50,
    REST_UNWORKED_SUNDAY: 1.75,
    REST_COMPENSATED_SUNDAY: 0.75,
}

#: Novelty field holding the quantity for each kind.
SURCHARGE_QUANTITY_FIELDS: Final[dict[str, str]] = {
    DAY_OVERTIME: "day_overtime_hours",
    NIGHT_OVERTIME: "night_overtime_hours",
    NIGHT_SURCHARGE: "night_surcharge_hours",
    HOLIDAY_DAY_OVERTIME: "holiday_day_overtime_hours",
    HOLIDAY_NIGHT_OVERTIME: "holiday_night_overtime_hours",
    REST_UNWORKED_SUNDAY: "unworked_sunday_count",
    REST_COMPENSATED_SUNDAY: "compensated_sunday_count",
}

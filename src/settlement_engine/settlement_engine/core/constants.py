"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

# Payroll uses a fixed month length for the daily rate, whatever the calendar says.
PAYROLL_DAY_DIVISOR = 30

FULL_DAY_LEAVE = Decimal("1")
HALF_DAY_LEAVE = Decimal("0.5")

ACADEMIC_WEIGHT = Decimal("0.5")
ATTENDANCE_WEIGHT = Decimal("0.3")
COLLECTION_WEIGHT = Decimal("0.2")

MIN_HEALTH_SCORE = 0.0
MAX_HEALTH_SCORE = 100.0

# Manual (offline) subscription payments move the due date to this day of the next month.
MANUAL_PAYMENT_DUE_DAY = 10
MANUAL_PAYMENT_REF_PREFIX = "MANUAL - "
DEFAULT_MANUAL_PAYMENT_NOTE = "Offline Payment"

DEFAULT_PRICE_PER_UNIT = 1000

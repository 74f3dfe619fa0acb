"""Calendar-aware billing dates.

Adding a month keeps the day of month when the target month has it and
otherwise clamps to that month's last day: Jan 31 + 1 month is Feb 29 in a
leap year, Feb 29 + 1 year is Feb 28. Time of day and timezone carry over.
"""

import calendar
from datetime import datetime

from catalog.product import BillingInterval, Product

_MONTHS_PER_INTERVAL = {
    BillingInterval.MONTHLY: 1,
    BillingInterval.YEARLY: 12,
}


def add_months(moment: datetime, months: int) -> datetime:
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def next_billing_at(product: Product, now: datetime) -> datetime | None:
    """When the subscription bills next; ``None`` for one-time products.

    Trial days do not shift the date.
    """
    if not product.is_subscription:
        return None
    return add_months(now, _MONTHS_PER_INTERVAL[BillingInterval(product.billing_interval)])

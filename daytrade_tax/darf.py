"""
DARF Deriver

Turns a monthly TaxCalculation into the payment slip data (revenue code 6015,
day-trade income tax). The slip is due on the last business day of the month
after the taxed month. Only weekends are skipped; no holiday calendar is
consulted.
"""

import logging
from datetime import date

import pandas as pd

from daytrade_tax.dates import last_day_of_month, next_month, parse_month
from daytrade_tax.models import DARF_MINIMUM_AMOUNT, DARFModel, TaxCalculation

# Configure logging
logger = logging.getLogger(__name__)

# Revenue code for income tax on day-trade gains (pessoa fisica)
DARF_CODE = "6015"

# Monday to Friday calendar; weekends only, no holidays
BUSINESS_MONTH_END = pd.offsets.BMonthEnd(0)


def last_business_day(year: int, month: int) -> date:
    """
    Last weekday of a month.

    Examples:
        >>> last_business_day(2023, 11)
        datetime.date(2023, 11, 30)
        >>> last_business_day(2023, 9)
        datetime.date(2023, 9, 29)
    """
    first_day = pd.Timestamp(year=year, month=month, day=1)
    return (first_day + BUSINESS_MONTH_END).date()


def generate_darf_data(calculation: TaxCalculation) -> DARFModel:
    """
    Derive the DARF for a monthly calculation.

    Args:
        calculation: Result of calculate_monthly_tax

    Returns:
        DARFModel with period (last day of the taxed month), due date and
        amount (tax due floored at zero)

    Raises:
        ValueError: If calculation.month is not a valid 'YYYY-MM' string
    """
    year, month = parse_month(calculation.month)
    due_year, due_month = next_month(year, month)

    darf = DARFModel(
        code=DARF_CODE,
        period=last_day_of_month(year, month),
        due_date=last_business_day(due_year, due_month),
        amount=max(0.0, calculation.tax_due),
    )

    if darf.amount > 0 and not darf.is_payable:
        logger.info(f"DARF {darf.code} for {calculation.month}: R$ {darf.amount:,.2f} is below "
                    f"the R$ {DARF_MINIMUM_AMOUNT:,.2f} minimum and must be added to a later month")
    else:
        logger.info(f"DARF {darf.code} for {calculation.month}: R$ {darf.amount:,.2f} "
                    f"due {darf.due_date.isoformat()}")
    return darf

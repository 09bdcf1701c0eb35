"""
Monthly Day-Trade Tax Apportioner

Aggregates one month's enriched day trades into a TaxCalculation:
- Gross result, costs and IRRF credit of the month
- 100% loss offset against accumulated day-trade losses (no expiry)
- 20% tax on the remaining basis, minus the IRRF withheld

The loss carryforward is explicit input and output. Months must be computed
in chronological order, each one feeding its accumulated_loss into the next;
calculate_tax_history does exactly that as a fold.
"""

import logging
from functools import reduce
from typing import Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from daytrade_tax.dates import format_month, month_of, parse_month
from daytrade_tax.models import TaxableTrade, TaxCalculation, coalesce_amount

# Configure logging
logger = logging.getLogger(__name__)

# Day-trade income tax rate (no monthly exemption tier, unlike swing trades)
DAY_TRADE_TAX_RATE = 0.20


def apply_loss_offset(net_result: float, previous_loss: float) -> Tuple[float, float]:
    """
    Offset a month's net result against the accumulated loss.

    Losses fully absorb profit before any basis is recognized. A losing (or
    flat) month adds its loss to the balance.

    Args:
        net_result: Month net result after costs
        previous_loss: Accumulated loss carried into the month

    Returns:
        Tuple of (taxable_basis, accumulated_loss)
    """
    accumulated_loss = previous_loss
    taxable_basis = 0.0

    if net_result > 0:
        if accumulated_loss > 0:
            if net_result >= accumulated_loss:
                taxable_basis = net_result - accumulated_loss
                accumulated_loss = 0.0
            else:
                accumulated_loss -= net_result
        else:
            taxable_basis = net_result
    else:
        accumulated_loss += abs(net_result)

    return taxable_basis, accumulated_loss


def calculate_tax_due(taxable_basis: float, irrf_deduction: float) -> float:
    """
    Tax owed on the basis after crediting the IRRF withheld.

    The result is negative when the IRRF withheld exceeds the tax. It is left
    as is: whether the excess is refundable or offsettable in later months is
    not decided here.
    """
    if taxable_basis > 0:
        return taxable_basis * DAY_TRADE_TAX_RATE - irrf_deduction
    return 0.0


def calculate_monthly_tax(month: str,
                          taxable_trades: Iterable[TaxableTrade],
                          previous_loss: float = 0.0) -> TaxCalculation:
    """
    Apportion day-trade tax for one calendar month.

    Only day trades closed within the month are considered. Missing numeric
    fields count as zero.

    Args:
        month: Month in 'YYYY-MM' format
        taxable_trades: Enriched trades (may span several months)
        previous_loss: Accumulated day-trade loss before this month

    Returns:
        TaxCalculation for the month

    Raises:
        ValueError: If month is not a valid 'YYYY-MM' string
    """
    month = format_month(*parse_month(month))
    previous_loss = coalesce_amount(previous_loss)

    if previous_loss < 0:
        logger.warning(f"Negative previous loss R$ {previous_loss:,.2f} for {month}; "
                       f"carryforward input should never be negative")

    day_trades = [trade for trade in taxable_trades
                  if trade.is_day_trade and month_of(trade.exit_date) == month]

    gross_profit = 0.0
    total_costs = 0.0
    total_irrf = 0.0

    for trade in day_trades:
        gross_profit += trade.gross_pnl
        total_costs += trade.total_costs
        # IRRF is credited against the tax, it does not reduce the basis
        total_irrf += coalesce_amount(trade.irrf)

    net_result = gross_profit - total_costs
    taxable_basis, accumulated_loss = apply_loss_offset(net_result, previous_loss)
    tax_due = calculate_tax_due(taxable_basis, total_irrf)

    logger.info(f"Day-trade tax for {month}: {len(day_trades)} trades, "
                f"net R$ {net_result:,.2f}, "
                f"basis R$ {taxable_basis:,.2f}, "
                f"IRRF R$ {total_irrf:,.2f}, "
                f"due R$ {tax_due:,.2f}, "
                f"loss carried R$ {accumulated_loss:,.2f}")

    return TaxCalculation(
        month=month,
        gross_profit=gross_profit,
        costs=total_costs,
        net_result=net_result,
        accumulated_loss=accumulated_loss,
        taxable_basis=taxable_basis,
        irrf_deduction=total_irrf,
        tax_due=tax_due,
        day_trade_loss_carry_forward=accumulated_loss,
        trade_count=len(day_trades),
    )


def month_range(start: str, end: str) -> List[str]:
    """
    Every month from start to end inclusive, as 'YYYY-MM' strings.

    Raises:
        ValueError: If either month is invalid or start is after end
    """
    start_key, end_key = parse_month(start), parse_month(end)
    if start_key > end_key:
        raise ValueError(f"Start month {start} is after end month {end}")
    return [str(period) for period in pd.period_range(start=format_month(*start_key),
                                                      end=format_month(*end_key), freq='M')]


def _validate_month_order(months: Sequence[str]) -> List[str]:
    normalized = [format_month(*parse_month(month)) for month in months]
    for previous, current in zip(normalized, normalized[1:]):
        if current <= previous:
            raise ValueError(f"Months must be in strictly ascending order: "
                             f"{current} follows {previous}")
    return normalized


def calculate_tax_history(taxable_trades: Iterable[TaxableTrade],
                          months: Optional[Sequence[str]] = None,
                          initial_loss: float = 0.0) -> List[TaxCalculation]:
    """
    Apportion consecutive months, threading the loss carryforward.

    Each month receives the accumulated_loss of the month before it, starting
    from initial_loss.

    Args:
        taxable_trades: Enriched trades for the whole period
        months: 'YYYY-MM' months in chronological order. When omitted, every
            month from the first to the last day-trade exit is used.
        initial_loss: Accumulated loss before the first month

    Returns:
        One TaxCalculation per month, in order

    Raises:
        ValueError: If months are invalid, repeated or out of order
    """
    taxable_trades = list(taxable_trades)

    if months is None:
        traded_months = sorted({month_of(trade.exit_date) for trade in taxable_trades
                                if trade.is_day_trade and month_of(trade.exit_date)})
        if not traded_months:
            logger.info("No day trades found; tax history is empty")
            return []
        months = month_range(traded_months[0], traded_months[-1])
    else:
        months = _validate_month_order(months)

    def fold(history: List[TaxCalculation], month: str) -> List[TaxCalculation]:
        previous_loss = history[-1].accumulated_loss if history else initial_loss
        return history + [calculate_monthly_tax(month, taxable_trades, previous_loss)]

    history = reduce(fold, months, [])

    if history:
        logger.info(f"Tax history {history[0].month} to {history[-1].month}: "
                    f"total due R$ {sum(max(0.0, calc.tax_due) for calc in history):,.2f}, "
                    f"final loss carryforward R$ {history[-1].accumulated_loss:,.2f}")
    return history

"""
Day-Trade Classifier

A day trade is a round trip opened and closed in the same session. Trades
are closed positions from the journal, so the check reduces to comparing the
entry and exit calendar dates. Open positions (no exit date) and trades with
unparseable dates are simply not day trades.
"""

import logging
from typing import Iterable, List, Tuple, TypeVar

from daytrade_tax.dates import format_month, month_of, parse_month, to_market_date
from daytrade_tax.models import Trade

# Configure logging
logger = logging.getLogger(__name__)

T = TypeVar('T', bound=Trade)


def is_day_trade(trade: Trade) -> bool:
    """True when the trade has an exit date equal to its entry date."""
    exit_date = to_market_date(trade.exit_date)
    if exit_date is None:
        return False

    entry_date = to_market_date(trade.entry_date)
    if entry_date is None:
        logger.debug(f"Trade {trade.id} has no usable entry date; not a day trade")
        return False

    return entry_date == exit_date


def identify_day_trades(trades: Iterable[T]) -> List[T]:
    """
    Keep the day trades, preserving input order.

    Args:
        trades: Trades from the journal (any order)

    Returns:
        List of the trades that opened and closed on the same date
    """
    trades = list(trades)
    day_trades = [trade for trade in trades if is_day_trade(trade)]
    logger.debug(f"Identified {len(day_trades)} day trades out of {len(trades)} trades")
    return day_trades


def partition_trades(trades: Iterable[T]) -> Tuple[List[T], List[T]]:
    """Split trades into (day_trades, other_trades), each in input order."""
    day_trades, other_trades = [], []
    for trade in trades:
        (day_trades if is_day_trade(trade) else other_trades).append(trade)
    return day_trades, other_trades


def trades_for_month(trades: Iterable[T], month: str) -> List[T]:
    """
    Trades closed within a calendar month.

    Args:
        trades: Trades to filter
        month: Month in 'YYYY-MM' format

    Raises:
        ValueError: If month is not a valid 'YYYY-MM' string
    """
    month = format_month(*parse_month(month))
    return [trade for trade in trades if month_of(trade.exit_date) == month]

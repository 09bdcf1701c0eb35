"""
Load journal trades from CSV exports or DataFrames.

Expected columns: entry_date, exit_date, pnl, plus optional id and symbol.
Empty cells become None; the tax engine treats a missing pnl as zero and a
missing exit date as an open position.
"""

import logging
from pathlib import Path
from typing import Any, List, Union

import pandas as pd

from daytrade_tax.models import Trade

# Configure logging
logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ['entry_date', 'exit_date', 'pnl']


def _clean(value: Any) -> Any:
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return value


def trades_from_frame(df: pd.DataFrame) -> List[Trade]:
    """
    Build Trade values from a DataFrame, one per row in row order.

    Raises:
        ValueError: If a required column is missing
    """
    missing = [column for column in REQUIRED_COLUMNS if column not in df.columns]
    if missing:
        raise ValueError(f"Trades data missing required columns: {missing}")

    df = df.copy()
    df['pnl'] = pd.to_numeric(df['pnl'], errors='coerce')

    trades = []
    for row in df.to_dict(orient='records'):
        pnl = _clean(row.get('pnl'))
        trade_id = _clean(row.get('id'))
        symbol = _clean(row.get('symbol'))
        trades.append(Trade(
            entry_date=_clean(row.get('entry_date')),
            exit_date=_clean(row.get('exit_date')),
            pnl=float(pnl) if pnl is not None else None,
            id=str(trade_id) if trade_id is not None else None,
            symbol=str(symbol) if symbol is not None else None,
        ))

    logger.info(f"Loaded {len(trades)} trades")
    return trades


def load_trades_csv(file_path: Union[str, Path]) -> List[Trade]:
    """
    Read a journal CSV export into Trade values.

    Dates are kept as text and coerced by the engine, so both 'YYYY-MM-DD'
    and full ISO timestamps work.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If a required column is missing
    """
    file_path = Path(file_path)
    try:
        df = pd.read_csv(file_path, dtype={'entry_date': str, 'exit_date': str,
                                           'id': str, 'symbol': str})
    except FileNotFoundError:
        logger.error(f"Trades file not found: {file_path}")
        raise

    logger.info(f"Read {len(df)} rows from {file_path}")
    return trades_from_frame(df)

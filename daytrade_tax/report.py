"""
Report tables for the day-trade tax engine.

Flattens calculations, DARFs and enriched trades into pandas DataFrames and
summary dicts for the report renderer. Amounts stay raw floats; currency and
date formatting belong to the renderer.
"""

import logging
from typing import Any, Dict, Iterable, List

import pandas as pd

from daytrade_tax.darf import generate_darf_data
from daytrade_tax.models import TaxableTrade, TaxCalculation

# Configure logging
logger = logging.getLogger(__name__)

CALCULATION_COLUMNS = [
    'gross_profit', 'costs', 'net_result', 'accumulated_loss',
    'taxable_basis', 'irrf_deduction', 'tax_due',
    'day_trade_loss_carry_forward', 'trade_count',
]

DARF_COLUMNS = ['month', 'code', 'period', 'due_date', 'amount', 'is_payable']


def calculations_to_frame(calculations: Iterable[TaxCalculation]) -> pd.DataFrame:
    """Monthly calculations as a DataFrame indexed by month."""
    rows = [calc.to_dict() for calc in calculations]
    if not rows:
        return pd.DataFrame(columns=CALCULATION_COLUMNS, index=pd.Index([], name='month'))
    return pd.DataFrame(rows).set_index('month')[CALCULATION_COLUMNS]


def darf_schedule(calculations: Iterable[TaxCalculation]) -> pd.DataFrame:
    """
    DARF slips for a sequence of monthly calculations.

    Months with nothing to pay still appear, with amount 0 and
    is_payable False.
    """
    rows = []
    for calc in calculations:
        darf = generate_darf_data(calc)
        rows.append({'month': calc.month, **darf.to_dict()})
    return pd.DataFrame(rows, columns=DARF_COLUMNS)


def trades_to_frame(trades: Iterable[TaxableTrade]) -> pd.DataFrame:
    """Enriched trades as a DataFrame, one row per trade, for the review step."""
    return pd.DataFrame([trade.to_dict() for trade in trades])


def get_summary_data(calculations: List[TaxCalculation]) -> Dict[str, Any]:
    """
    Totals over a tax history for the report header.

    Credits (negative tax_due) are reported separately from the amounts due
    and never net against them.
    """
    if not calculations:
        return {
            'first_month': None,
            'last_month': None,
            'months': 0,
            'total_net_result': 0.0,
            'total_irrf': 0.0,
            'total_tax_due': 0.0,
            'total_irrf_credit': 0.0,
            'final_loss_carryforward': 0.0,
        }

    summary = {
        'first_month': calculations[0].month,
        'last_month': calculations[-1].month,
        'months': len(calculations),
        'total_net_result': sum(calc.net_result for calc in calculations),
        'total_irrf': sum(calc.irrf_deduction for calc in calculations),
        'total_tax_due': sum(max(0.0, calc.tax_due) for calc in calculations),
        'total_irrf_credit': sum(-calc.tax_due for calc in calculations if calc.tax_due < 0),
        'final_loss_carryforward': calculations[-1].accumulated_loss,
    }
    logger.debug(f"Tax summary: {summary}")
    return summary


def print_summary(calculations: List[TaxCalculation]) -> None:
    """Print the monthly table, DARF schedule and totals."""
    summary = get_summary_data(calculations)

    print("\n" + "=" * 60)
    print("DAY-TRADE INCOME TAX SUMMARY")
    print("=" * 60)
    if not calculations:
        print("No day trades in the selected period.")
        print("=" * 60)
        return

    print(f"Period: {summary['first_month']} to {summary['last_month']} ({summary['months']} months)")
    print(f"Net Result: R$ {summary['total_net_result']:,.2f}")
    print(f"IRRF Withheld: R$ {summary['total_irrf']:,.2f}")
    print(f"Total Tax Due: R$ {summary['total_tax_due']:,.2f}")
    if summary['total_irrf_credit'] > 0:
        print(f"Unused IRRF Credit: R$ {summary['total_irrf_credit']:,.2f}")
    print(f"Loss Carryforward: R$ {summary['final_loss_carryforward']:,.2f}")
    print("-" * 60)
    print(calculations_to_frame(calculations).round(2).to_string())
    print("-" * 60)
    print(darf_schedule(calculations).round(2).to_string(index=False))
    print("=" * 60)

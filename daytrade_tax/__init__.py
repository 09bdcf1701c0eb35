"""
Brazilian day-trade income-tax engine.

Classifies day trades, enriches them with costs and IRRF withholding,
apportions monthly tax with loss carryforward and derives the DARF slip.
"""

from daytrade_tax.apportioner import calculate_monthly_tax, calculate_tax_history
from daytrade_tax.classifier import identify_day_trades, is_day_trade
from daytrade_tax.cost_enricher import (
    enrich_trades_with_costs,
    load_costs_config,
    recompute_net_result,
    update_trade_cost,
)
from daytrade_tax.darf import generate_darf_data
from daytrade_tax.models import DARFModel, TaxableTrade, TaxCalculation, TaxCostsConfig, Trade

__version__ = "1.0.0"
__author__ = "b3_daytrade_tax team"

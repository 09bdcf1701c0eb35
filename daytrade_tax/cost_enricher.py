"""
Cost Enricher for Brazilian Day-Trade Taxation

Attaches operating costs to each trade and derives the figures the monthly
apportionment needs:
- Brokerage fee (flat default per trade, editable afterwards)
- ISS (service tax) as a percentage of brokerage
- B3 exchange fee (emoluments + settlement), left at zero for manual entry
- IRRF "dedo-duro" withholding of 1% on day-trade profit
- Net result after costs

Compliance: IN RFB 1.585/2015 (day-trade taxation and IRRF)
"""

import logging
from dataclasses import replace
from typing import Any, Dict, Iterable, List

import yaml

from daytrade_tax.classifier import is_day_trade
from daytrade_tax.models import TaxableTrade, TaxCostsConfig, Trade, coalesce_amount

# Configure logging
logger = logging.getLogger(__name__)

# IRRF withheld at source on positive day-trade results
IRRF_RATE = 0.01

# The B3 exchange fee is charged on financial volume and, for futures, on the
# contract multiplier. Neither is part of a journal trade, so enrichment sets
# it to this value and the review UI fills it in per trade.
DEFAULT_EXCHANGE_FEE = 0.0

COST_FIELDS = ('brokerage_fee', 'exchange_fee', 'taxes')


def load_costs_config(config_path: str = "config/settings.yaml") -> TaxCostsConfig:
    """
    Load the default cost policy from the 'taxes.costs' section of a YAML file.

    Args:
        config_path: Path to configuration file

    Returns:
        TaxCostsConfig built from the file

    Raises:
        FileNotFoundError: If config file not found
        yaml.YAMLError: If config file is invalid
        ValueError: If the section is missing or a cost is negative
    """
    try:
        with open(config_path, 'r') as file:
            config = yaml.safe_load(file) or {}

        if 'taxes' not in config or 'costs' not in (config['taxes'] or {}):
            raise ValueError("Configuration must contain 'taxes.costs' section")

        costs_config = TaxCostsConfig.from_dict(config['taxes']['costs'])
        logger.info(f"Cost configuration loaded from {config_path}")
        return costs_config

    except FileNotFoundError:
        logger.error(f"Configuration file not found: {config_path}")
        raise
    except yaml.YAMLError as e:
        logger.error(f"Invalid YAML configuration: {str(e)}")
        raise
    except Exception as e:
        logger.error(f"Error loading configuration: {str(e)}")
        raise


def calculate_irrf(gross_pnl: float, day_trade: bool) -> float:
    """1% of the profit for winning day trades, zero otherwise."""
    if day_trade and gross_pnl > 0:
        return gross_pnl * IRRF_RATE
    return 0.0


def enrich_trade(trade: Trade, config: TaxCostsConfig) -> TaxableTrade:
    """
    Build the TaxableTrade for a single trade.

    Args:
        trade: Closed (or open) trade from the journal
        config: Default cost policy

    Returns:
        New TaxableTrade with costs, IRRF and net result filled in
    """
    day_trade = is_day_trade(trade)

    brokerage_fee = config.default_brokerage_fee
    taxes = brokerage_fee * config.default_taxes_pct / 100
    exchange_fee = DEFAULT_EXCHANGE_FEE

    gross_pnl = trade.gross_pnl
    irrf = calculate_irrf(gross_pnl, day_trade)

    enriched = TaxableTrade(
        entry_date=trade.entry_date,
        exit_date=trade.exit_date,
        pnl=trade.pnl,
        id=trade.id,
        symbol=trade.symbol,
        brokerage_fee=brokerage_fee,
        exchange_fee=exchange_fee,
        taxes=taxes,
        irrf=irrf,
        net_result=gross_pnl - (brokerage_fee + taxes + exchange_fee),
        is_day_trade=day_trade,
    )

    logger.debug(f"Enriched trade {trade.id}: gross R$ {gross_pnl:,.2f}, "
                 f"costs R$ {enriched.total_costs:,.2f}, IRRF R$ {irrf:,.2f}, "
                 f"day trade: {day_trade}")
    return enriched


def enrich_trades_with_costs(trades: Iterable[Trade], config: TaxCostsConfig) -> List[TaxableTrade]:
    """
    Enrich every trade with default costs, in input order.

    Args:
        trades: Trades from the journal
        config: Default cost policy for this run

    Returns:
        One TaxableTrade per input trade
    """
    enriched = [enrich_trade(trade, config) for trade in trades]

    if enriched:
        day_trades = sum(1 for trade in enriched if trade.is_day_trade)
        logger.info(f"Enriched {len(enriched)} trades ({day_trades} day trades), "
                    f"brokerage R$ {config.default_brokerage_fee:,.2f}/trade, "
                    f"ISS {config.default_taxes_pct:.2f}%")
    return enriched


def recompute_net_result(trade: TaxableTrade) -> TaxableTrade:
    """
    Re-derive net_result from the trade's current costs.

    Called after any cost edit so the apportionment sees a consistent row.
    Missing cost fields count as zero.

    Returns:
        New TaxableTrade; the argument is left untouched
    """
    brokerage_fee = coalesce_amount(trade.brokerage_fee)
    exchange_fee = coalesce_amount(trade.exchange_fee)
    taxes = coalesce_amount(trade.taxes)

    return replace(
        trade,
        brokerage_fee=brokerage_fee,
        exchange_fee=exchange_fee,
        taxes=taxes,
        net_result=trade.gross_pnl - (brokerage_fee + exchange_fee + taxes),
    )


def update_trade_cost(trade: TaxableTrade, field: str, value: Any) -> TaxableTrade:
    """
    Replace one cost of a trade and recompute its net result.

    Args:
        trade: Trade being reviewed
        field: One of 'brokerage_fee', 'exchange_fee', 'taxes'
        value: New amount in BRL (None counts as zero)

    Returns:
        New TaxableTrade with the edited cost

    Raises:
        ValueError: If field is not a cost field
    """
    if field not in COST_FIELDS:
        raise ValueError(f"Cost field must be one of {', '.join(COST_FIELDS)}, got {field!r}")

    updated = recompute_net_result(replace(trade, **{field: coalesce_amount(value)}))
    logger.debug(f"Trade {trade.id}: {field} set to R$ {getattr(updated, field):,.2f}, "
                 f"net result R$ {updated.net_result:,.2f}")
    return updated


def summarize_costs(trades: Iterable[TaxableTrade]) -> Dict[str, float]:
    """Totals per cost component, for the review step."""
    summary = {field: 0.0 for field in COST_FIELDS}
    summary['irrf'] = 0.0
    summary['net_result'] = 0.0

    for trade in trades:
        for field in COST_FIELDS:
            summary[field] += coalesce_amount(getattr(trade, field))
        summary['irrf'] += coalesce_amount(trade.irrf)
        summary['net_result'] += coalesce_amount(trade.net_result)

    summary['total_costs'] = sum(summary[field] for field in COST_FIELDS)
    return summary

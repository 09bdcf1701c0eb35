#!/usr/bin/env python3
"""
Compute monthly day-trade income tax and DARF slips from a trades CSV.

This script:
1. Loads trades exported from the journal (entry_date, exit_date, pnl, ...)
2. Applies the default cost policy from the settings file
3. Folds the months in order, carrying the accumulated loss forward
4. Prints the monthly calculations and the DARF schedule

Usage:
    python scripts/run_tax_report.py --trades TRADES_CSV [--config CONFIG] [--start-month YYYY-MM] [--end-month YYYY-MM] [--previous-loss AMOUNT] [--output OUTPUT_CSV]

Examples:
    # Whole history in the file, no loss carried from before
    python scripts/run_tax_report.py --trades data/trades.csv

    # One year, starting from a R$ 1.500,00 loss carried from December
    python scripts/run_tax_report.py --trades data/trades.csv --start-month 2024-01 --end-month 2024-12 --previous-loss 1500
"""

import argparse
import logging
import os
import sys

# Add the project root to the path
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from daytrade_tax.apportioner import calculate_tax_history, month_range
from daytrade_tax.cost_enricher import enrich_trades_with_costs, load_costs_config
from daytrade_tax.loader import load_trades_csv
from daytrade_tax.report import calculations_to_frame, print_summary


def setup_logging(level=logging.INFO):
    """Set up logging configuration."""
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Compute monthly day-trade income tax and DARF slips',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/run_tax_report.py --trades data/trades.csv
  python scripts/run_tax_report.py --trades data/trades.csv --start-month 2024-01 --end-month 2024-12 --previous-loss 1500
        """
    )

    parser.add_argument(
        '--trades',
        type=str,
        required=True,
        help='CSV file with entry_date, exit_date and pnl columns'
    )

    parser.add_argument(
        '--config',
        type=str,
        default='config/settings.yaml',
        help='Settings file with the taxes.costs section (default: config/settings.yaml)'
    )

    parser.add_argument(
        '--start-month',
        type=str,
        help='First month in format YYYY-MM (default: first month with day trades)'
    )

    parser.add_argument(
        '--end-month',
        type=str,
        help='Last month in format YYYY-MM (default: last month with day trades)'
    )

    parser.add_argument(
        '--previous-loss',
        type=float,
        default=0.0,
        help='Accumulated day-trade loss carried into the first month (default: 0)'
    )

    parser.add_argument(
        '--output',
        type=str,
        help='Optional CSV file for the monthly calculations'
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )

    args = parser.parse_args(argv)

    if bool(args.start_month) != bool(args.end_month):
        parser.error('--start-month and --end-month must be given together')
    if args.previous_loss < 0:
        parser.error('--previous-loss must be non-negative')

    return args


def main(argv=None):
    """Main function."""
    args = parse_arguments(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)
    logger = logging.getLogger(__name__)

    try:
        costs_config = load_costs_config(args.config)
        trades = load_trades_csv(args.trades)
        taxable_trades = enrich_trades_with_costs(trades, costs_config)

        months = None
        if args.start_month:
            months = month_range(args.start_month, args.end_month)

        calculations = calculate_tax_history(taxable_trades, months, initial_loss=args.previous_loss)
        print_summary(calculations)

        if args.output:
            calculations_to_frame(calculations).to_csv(args.output)
            logger.info(f"Monthly calculations written to {args.output}")

        return 0

    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Tax report failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())

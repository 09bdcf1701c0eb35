"""
Test Suite for the Day-Trade Classifier and Date Helpers

This test suite covers:
- Day-trade identification (same entry and exit date)
- Order preservation and open-position handling
- Date coercion across strings, dates, datetimes and pandas Timestamps
- Market timezone conversion for aware datetimes
- Month filtering and month-string validation
"""

import unittest
from datetime import date, datetime

import pandas as pd
import pytz

import os
import sys
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from daytrade_tax.classifier import identify_day_trades, is_day_trade, partition_trades, trades_for_month
from daytrade_tax.dates import last_day_of_month, month_of, next_month, parse_month, to_market_date
from daytrade_tax.models import Trade


class TestDayTradeClassifier(unittest.TestCase):
    """Tests for day-trade identification."""

    def setUp(self):
        """Set up test fixtures."""
        self.trades = [
            Trade(id='1', entry_date='2023-10-01', exit_date='2023-10-01', pnl=100.0),
            Trade(id='2', entry_date='2023-10-01', exit_date='2023-10-02', pnl=50.0),
            Trade(id='3', entry_date='2023-10-05', exit_date='2023-10-05', pnl=-30.0),
            Trade(id='4', entry_date='2023-10-06', exit_date=None, pnl=None),
        ]

    def test_identify_day_trades(self):
        """Test that only same-day round trips are returned, in order."""
        result = identify_day_trades(self.trades)
        self.assertEqual([trade.id for trade in result], ['1', '3'])

    def test_open_trade_is_not_day_trade(self):
        """Test that a trade without exit date is excluded without error."""
        self.assertFalse(is_day_trade(self.trades[3]))

    def test_empty_exit_date_string(self):
        """Test that an empty exit date behaves like a missing one."""
        trade = Trade(entry_date='2023-10-01', exit_date='')
        self.assertFalse(is_day_trade(trade))

    def test_unparseable_dates_are_excluded(self):
        """Test that garbage dates are not classified as day trades."""
        self.assertFalse(is_day_trade(Trade(entry_date='not-a-date', exit_date='not-a-date')))
        self.assertFalse(is_day_trade(Trade(entry_date=None, exit_date='2023-10-01')))

    def test_exit_before_entry_is_not_day_trade(self):
        """Test that inverted date pairs are simply not day trades."""
        self.assertFalse(is_day_trade(Trade(entry_date='2023-10-02', exit_date='2023-10-01')))

    def test_mixed_date_types(self):
        """Test that string, date and Timestamp values compare as calendar dates."""
        self.assertTrue(is_day_trade(Trade(entry_date='2023-10-10', exit_date=date(2023, 10, 10))))
        self.assertTrue(is_day_trade(Trade(entry_date=pd.Timestamp('2023-10-10 10:05'),
                                           exit_date='2023-10-10T16:40:00')))

    def test_aware_datetime_uses_market_timezone(self):
        """Test that a UTC exit after midnight still belongs to the Sao Paulo session."""
        exit_utc = datetime(2023, 10, 11, 1, 30, tzinfo=pytz.utc)
        trade = Trade(entry_date='2023-10-10', exit_date=exit_utc)
        self.assertTrue(is_day_trade(trade))

    def test_utc_suffix_string_uses_market_timezone(self):
        """Test that an ISO string with a 'Z' suffix is converted to the Sao Paulo session."""
        trade = Trade(entry_date='2023-10-10', exit_date='2023-10-11T01:30:00Z')
        self.assertEqual(to_market_date(trade.exit_date), date(2023, 10, 10))
        self.assertTrue(is_day_trade(trade))

    def test_offset_string_uses_market_timezone(self):
        """Test that an ISO string with an explicit offset is converted before taking the date."""
        self.assertEqual(to_market_date('2023-10-11T02:00:00+00:00'), date(2023, 10, 10))
        self.assertEqual(to_market_date('2023-10-11T02:00:00-03:00'), date(2023, 10, 11))

    def test_partition_trades(self):
        """Test splitting into day trades and other trades."""
        day_trades, others = partition_trades(self.trades)
        self.assertEqual([trade.id for trade in day_trades], ['1', '3'])
        self.assertEqual([trade.id for trade in others], ['2', '4'])

    def test_property_matches_date_equality(self):
        """Test that classification equals entry == exit for every closed trade."""
        for trade in self.trades[:3]:
            self.assertEqual(is_day_trade(trade), trade.entry_date == trade.exit_date)

    def test_trades_for_month(self):
        """Test filtering by exit month."""
        trades = self.trades + [Trade(id='5', entry_date='2023-11-01', exit_date='2023-11-01')]
        result = trades_for_month(trades, '2023-11')
        self.assertEqual([trade.id for trade in result], ['5'])
        self.assertEqual(len(trades_for_month(trades, '2023-10')), 3)

    def test_trades_for_month_invalid_month(self):
        """Test that an invalid month string raises ValueError."""
        with self.assertRaises(ValueError):
            trades_for_month(self.trades, '2023-13')


class TestDateHelpers(unittest.TestCase):
    """Tests for month parsing and date coercion."""

    def test_parse_month(self):
        """Test month parsing and validation."""
        self.assertEqual(parse_month('2023-10'), (2023, 10))
        for invalid in ['2023-1', '2023/10', '2023-00', 'october', None, 202310]:
            with self.assertRaises(ValueError):
                parse_month(invalid)

    def test_next_month_rolls_over_december(self):
        """Test December rolls to January of the next year."""
        self.assertEqual(next_month(2023, 12), (2024, 1))
        self.assertEqual(next_month(2023, 10), (2023, 11))

    def test_last_day_of_month(self):
        """Test month ends including leap years."""
        self.assertEqual(last_day_of_month(2024, 2), date(2024, 2, 29))
        self.assertEqual(last_day_of_month(2023, 2), date(2023, 2, 28))
        self.assertEqual(last_day_of_month(2023, 10), date(2023, 10, 31))

    def test_to_market_date(self):
        """Test coercion of supported shapes and missing values."""
        self.assertEqual(to_market_date('2023-10-10'), date(2023, 10, 10))
        self.assertEqual(to_market_date(datetime(2023, 10, 10, 15, 0)), date(2023, 10, 10))
        self.assertIsNone(to_market_date(None))
        self.assertIsNone(to_market_date(float('nan')))
        self.assertIsNone(to_market_date(pd.NaT))

    def test_month_of(self):
        """Test month key extraction."""
        self.assertEqual(month_of('2023-10-31'), '2023-10')
        self.assertIsNone(month_of(None))


if __name__ == '__main__':
    unittest.main()

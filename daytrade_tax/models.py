"""
Data model for the Brazilian day-trade income-tax engine.

All entities are frozen dataclasses: enrichment, cost edits and monthly
apportionment always build new values instead of mutating existing ones.
"""

import math
from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Dict, Mapping, Optional

from daytrade_tax.dates import to_market_date


# Smallest DARF amount accepted for payment (R$ 10.00)
DARF_MINIMUM_AMOUNT = 10.0


def coalesce_amount(value: Any) -> float:
    """Numeric value as float, with None/NaN/garbage degraded to 0.0."""
    if value is None:
        return 0.0
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(amount):
        return 0.0
    return amount


def _iso(value: Any) -> Optional[str]:
    coerced = to_market_date(value)
    return coerced.isoformat() if coerced is not None else None


@dataclass(frozen=True)
class Trade:
    """
    Executed position as supplied by the journal's persistence layer.

    Attributes:
        entry_date: Session the position was opened
        exit_date: Session the position was closed (None while open)
        pnl: Signed gross profit/loss in BRL (None is treated as 0)
        id: Optional trade identifier
        symbol: Optional instrument ticker (e.g. WINZ23, PETR4)
    """
    entry_date: Any
    exit_date: Any = None
    pnl: Optional[float] = None
    id: Optional[str] = None
    symbol: Optional[str] = None

    @property
    def gross_pnl(self) -> float:
        return coalesce_amount(self.pnl)


@dataclass(frozen=True)
class TaxableTrade(Trade):
    """
    Trade enriched with costs, IRRF withholding and net result.

    Attributes:
        brokerage_fee: Brokerage commission (corretagem)
        exchange_fee: B3 emoluments plus settlement fee
        taxes: ISS and other taxes charged on brokerage
        irrf: 1% withholding credit on day-trade profit ("dedo-duro")
        net_result: pnl minus total costs
        is_day_trade: Whether the position opened and closed the same day
    """
    brokerage_fee: float = 0.0
    exchange_fee: float = 0.0
    taxes: float = 0.0
    irrf: float = 0.0
    net_result: float = 0.0
    is_day_trade: bool = False

    @property
    def total_costs(self) -> float:
        return (coalesce_amount(self.brokerage_fee)
                + coalesce_amount(self.exchange_fee)
                + coalesce_amount(self.taxes))

    def to_dict(self) -> Dict:
        """Convert to dictionary for serialization."""
        data = asdict(self)
        data['entry_date'] = _iso(self.entry_date)
        data['exit_date'] = _iso(self.exit_date)
        data['total_costs'] = self.total_costs
        return data


@dataclass(frozen=True)
class TaxCostsConfig:
    """
    Default cost policy applied when enriching trades.

    Attributes:
        default_brokerage_fee: Flat brokerage per trade in BRL
        default_exchange_fee_pct: Exchange fee as % of financial volume.
            Carried for the review UI only; enrichment does not apply it
            because trades carry no volume or contract multiplier.
        default_taxes_pct: Service tax (ISS) as % of brokerage
    """
    default_brokerage_fee: float = 0.0
    default_exchange_fee_pct: float = 0.0
    default_taxes_pct: float = 0.0

    def __post_init__(self):
        for name in ('default_brokerage_fee', 'default_exchange_fee_pct', 'default_taxes_pct'):
            value = coalesce_amount(getattr(self, name))
            if value < 0:
                raise ValueError(f"{name} must be non-negative")
            object.__setattr__(self, name, value)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> 'TaxCostsConfig':
        data = data or {}
        return cls(
            default_brokerage_fee=data.get('default_brokerage_fee'),
            default_exchange_fee_pct=data.get('default_exchange_fee_pct'),
            default_taxes_pct=data.get('default_taxes_pct'),
        )

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass(frozen=True)
class TaxCalculation:
    """
    Day-trade tax apportionment for one calendar month.

    accumulated_loss is the carryforward balance after this month and is the
    previous_loss input of the next month; day_trade_loss_carry_forward
    mirrors it under the name the report renderer uses.
    """
    month: str
    gross_profit: float
    costs: float
    net_result: float
    accumulated_loss: float
    taxable_basis: float
    irrf_deduction: float
    tax_due: float
    day_trade_loss_carry_forward: float
    trade_count: int = 0

    def to_dict(self) -> Dict:
        """Convert to dictionary for serialization."""
        return asdict(self)


@dataclass(frozen=True)
class DARFModel:
    """Payment slip (DARF) derived from a monthly calculation."""
    code: str
    period: date
    due_date: date
    amount: float

    @property
    def is_payable(self) -> bool:
        """
        Whether the slip can be issued.

        Amounts below R$ 10.00 are not paid on their own; the payer adds them
        to a later month's DARF.
        """
        return self.amount >= DARF_MINIMUM_AMOUNT

    def to_dict(self) -> Dict:
        """Convert to dictionary for serialization."""
        return {
            'code': self.code,
            'period': self.period.isoformat(),
            'due_date': self.due_date.isoformat(),
            'amount': self.amount,
            'is_payable': self.is_payable,
        }

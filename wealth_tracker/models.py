"""Domain models for the wealth tracker."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .messages import ServiceMessage


@dataclass(frozen=True)
class AssetDefinition:
    """Static description of an asset offered on a fresh portfolio."""

    ticker: str
    name: str
    target_weight: float


@dataclass(frozen=True)
class PlannerSettings:
    budget: float = 0.0
    fees_flat: float = 0.0
    buffer_pct: float = 0.0


@dataclass(frozen=True)
class RebalanceSettings:
    enabled: bool = True
    threshold_pct: float = 5.0


@dataclass(frozen=True)
class Lot:
    """A batch of units acquired at one price on one date."""

    quantity: float
    unit_price: float
    acquisition_date: datetime

    @property
    def cost(self) -> float:
        return self.quantity * self.unit_price


@dataclass(frozen=True)
class Asset:
    """A tracked instrument together with its open lots.

    ``units`` always equals the sum of the lot quantities; ``invested`` is the
    cumulative capital contributed by buys and is never reduced by sells.
    """

    ticker: str
    name: str
    target_weight: float
    price: float = 0.0
    units: float = 0.0
    invested: float = 0.0
    lots: Tuple[Lot, ...] = ()
    first_contribution_date: Optional[datetime] = None

    @classmethod
    def from_definition(cls, definition: AssetDefinition) -> "Asset":
        return cls(
            ticker=definition.ticker,
            name=definition.name,
            target_weight=definition.target_weight,
        )

    @property
    def market_value(self) -> float:
        return self.units * self.price

    @property
    def lot_units(self) -> float:
        return sum(lot.quantity for lot in self.lots)


class TransactionKind(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


@dataclass(frozen=True)
class Transaction:
    """Immutable log entry. Sell-only fields stay ``None`` on buys."""

    id: str
    kind: TransactionKind
    ticker: str
    date: Optional[datetime]
    units: float
    price: float
    amount: float
    proceeds: Optional[float] = None
    cost_base: Optional[float] = None
    gain: Optional[float] = None
    discount_gain: Optional[float] = None


@dataclass(frozen=True)
class PortfolioSnapshot:
    """Assets and transaction log, always persisted and restored together."""

    assets: Tuple[Asset, ...] = ()
    transactions: Tuple[Transaction, ...] = ()

    def find(self, ticker: str) -> Optional[Asset]:
        for asset in self.assets:
            if asset.ticker == ticker:
                return asset
        return None

    def replace_asset(self, updated: Asset) -> "PortfolioSnapshot":
        assets = tuple(updated if a.ticker == updated.ticker else a for a in self.assets)
        return PortfolioSnapshot(assets=assets, transactions=self.transactions)

    def append(self, transaction: Transaction) -> "PortfolioSnapshot":
        return PortfolioSnapshot(
            assets=self.assets,
            transactions=self.transactions + (transaction,),
        )

    def transactions_newest_first(self) -> List[Transaction]:
        return list(reversed(self.transactions))


@dataclass(frozen=True)
class OperationResult:
    """Outcome of a mutating operation.

    When ``applied`` is false the snapshot is the caller's input, untouched,
    and ``messages`` says why nothing happened.
    """

    snapshot: PortfolioSnapshot
    applied: bool
    transactions: Tuple[Transaction, ...] = ()
    messages: List[ServiceMessage] = field(default_factory=list)


@dataclass(frozen=True)
class FinancialYearSummary:
    fy_start_year: int
    event_count: int
    gross_gain: float
    discount_gain: float

    @property
    def label(self) -> str:
        return f"FY {self.fy_start_year}-{str(self.fy_start_year + 1)[-2:]}"


@dataclass(frozen=True)
class PlannedSplit:
    """One row of the allocation plan; ``estimated_units`` is ``None`` without a price."""

    ticker: str
    name: str
    weight: float
    price: float
    amount: float
    estimated_units: Optional[float]


@dataclass(frozen=True)
class DriftSuggestion:
    ticker: str
    name: str
    current_weight: float
    target_weight: float
    drift_pct: float

    @property
    def overweight(self) -> bool:
        return self.drift_pct > 0


@dataclass
class PortfolioTotals:
    """Aggregated totals for the entire portfolio."""

    invested: float
    value: float
    weights: Dict[str, float]

    @property
    def gain(self) -> float:
        return self.value - self.invested

    @property
    def variation_pct(self) -> float:
        if not self.invested:
            return 0.0
        return (self.gain / self.invested) * 100

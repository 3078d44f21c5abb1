"""CSV export of positions and the transaction log."""
from __future__ import annotations

from datetime import date
from typing import Optional

import pandas as pd

from ..config import EXPORT_FILENAME_PREFIX
from ..dates import format_timestamp, utc_now
from ..models import PortfolioSnapshot
from .rebalance import portfolio_totals

POSITION_COLUMNS = ["Ticker", "Units", "Price", "Invested", "MarketValue", "Weight"]
TRANSACTION_COLUMNS = [
    "Kind",
    "Ticker",
    "Date",
    "Units",
    "Price",
    "Amount",
    "Proceeds",
    "CostBase",
    "Gain",
    "DiscountGain",
]


def _fixed(value: Optional[float], places: int) -> str:
    return f"{(value or 0.0):.{places}f}"


def positions_frame(snapshot: PortfolioSnapshot) -> pd.DataFrame:
    total_value = portfolio_totals(snapshot.assets).value
    rows = []
    for asset in snapshot.assets:
        value = asset.market_value
        weight = f"{value / total_value * 100:.2f}%" if total_value > 0 else "0%"
        rows.append(
            [
                asset.ticker,
                _fixed(asset.units, 6),
                _fixed(asset.price, 4),
                _fixed(asset.invested, 2),
                _fixed(value, 2),
                weight,
            ]
        )
    return pd.DataFrame(rows, columns=POSITION_COLUMNS, dtype=str)


def transactions_frame(snapshot: PortfolioSnapshot) -> pd.DataFrame:
    rows = [
        [
            t.kind.value,
            t.ticker,
            format_timestamp(t.date) or "",
            _fixed(t.units, 6),
            _fixed(t.price, 4),
            _fixed(t.amount, 2),
            _fixed(t.proceeds, 2),
            _fixed(t.cost_base, 2),
            _fixed(t.gain, 2),
            _fixed(t.discount_gain, 2),
        ]
        for t in snapshot.transactions
    ]
    return pd.DataFrame(rows, columns=TRANSACTION_COLUMNS, dtype=str)


def export_csv(snapshot: PortfolioSnapshot) -> str:
    """Two sections, ``#POSITIONS`` then ``#TRANSACTIONS``, separated by a blank line."""
    positions = positions_frame(snapshot).to_csv(index=False, lineterminator="\n")
    transactions = transactions_frame(snapshot).to_csv(index=False, lineterminator="\n")
    return "\n".join(
        [
            "#POSITIONS",
            positions.rstrip("\n"),
            "",
            "#TRANSACTIONS",
            transactions.rstrip("\n"),
        ]
    )


def export_filename(today: Optional[date] = None) -> str:
    today = today or utc_now().date()
    return f"{EXPORT_FILENAME_PREFIX}-{today.isoformat()}.csv"

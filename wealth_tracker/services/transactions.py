"""Buy/sell recording against the lot ledger."""
from __future__ import annotations

import logging
import math
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Callable, List, Optional

from ..config import (
    CGT_DISCOUNT_MIN_YEARS,
    CGT_DISCOUNT_RATE,
    DEFAULT_ASSETS,
    EPSILON,
)
from ..dates import ensure_utc, utc_now, years_between
from ..messages import warning
from ..models import (
    Asset,
    Lot,
    OperationResult,
    PortfolioSnapshot,
    Transaction,
    TransactionKind,
)
from .ledger import consume_fifo

logger = logging.getLogger(__name__)


def coerce_amount(value) -> float:
    """Reads a user-entered number; anything unusable or negative becomes 0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return max(0.0, number)


def default_snapshot() -> PortfolioSnapshot:
    return PortfolioSnapshot(
        assets=tuple(Asset.from_definition(definition) for definition in DEFAULT_ASSETS),
        transactions=(),
    )


def discounted_gain(lots: List[Lot], sale_price: float, sale_date: datetime) -> float:
    """Post-discount gain of the consumed lots.

    Each lot contributes its non-negative gain, halved when it was held for at
    least a year. Losses contribute nothing.
    """
    total = 0.0
    for lot in lots:
        gain = max(0.0, lot.quantity * (sale_price - lot.unit_price))
        held_years = years_between(lot.acquisition_date, sale_date)
        if held_years >= CGT_DISCOUNT_MIN_YEARS:
            total += CGT_DISCOUNT_RATE * gain
        else:
            total += gain
    return total


class TransactionRecorder:
    """Turns buy/sell intents into lot ledger mutations and log entries.

    Invalid input never raises: the operation is skipped, the snapshot is
    returned untouched and a warning explains why.
    """

    def __init__(self, id_factory: Optional[Callable[[], str]] = None) -> None:
        self._id_factory = id_factory or (lambda: str(uuid.uuid4()))

    def buy(
        self,
        snapshot: PortfolioSnapshot,
        ticker: str,
        amount,
        *,
        now: Optional[datetime] = None,
    ) -> OperationResult:
        amount_aud = coerce_amount(amount)
        asset = snapshot.find(ticker)
        problem = self._validate(asset, ticker, amount_aud)
        if problem:
            return self._skipped(snapshot, "buy", problem)

        moment = ensure_utc(now) if now is not None else utc_now()
        units = amount_aud / asset.price
        lot = Lot(quantity=units, unit_price=asset.price, acquisition_date=moment)
        updated = replace(
            asset,
            units=asset.units + units,
            invested=asset.invested + amount_aud,
            lots=asset.lots + (lot,),
            first_contribution_date=asset.first_contribution_date or moment,
        )
        transaction = Transaction(
            id=self._id_factory(),
            kind=TransactionKind.BUY,
            ticker=ticker,
            date=moment,
            units=units,
            price=asset.price,
            amount=amount_aud,
        )
        logger.info("BUY %s: %.2f AUD -> %.6f units @ %.4f", ticker, amount_aud, units, asset.price)
        return OperationResult(
            snapshot=snapshot.replace_asset(updated).append(transaction),
            applied=True,
            transactions=(transaction,),
        )

    def sell(
        self,
        snapshot: PortfolioSnapshot,
        ticker: str,
        amount,
        *,
        now: Optional[datetime] = None,
    ) -> OperationResult:
        amount_aud = coerce_amount(amount)
        asset = snapshot.find(ticker)
        problem = self._validate(asset, ticker, amount_aud)
        if problem:
            return self._skipped(snapshot, "sell", problem)

        units = amount_aud / asset.price
        fifo = consume_fifo(asset.lots, units)
        if fifo.unfilled > EPSILON:
            return self._skipped(
                snapshot,
                "sell",
                f"Not enough {ticker} units to sell {amount_aud:,.2f} AUD "
                f"({units:.6f} requested, {asset.units:.6f} held); no units were sold.",
            )

        sale_date = ensure_utc(now) if now is not None else utc_now()
        proceeds = units * asset.price
        cost_base = fifo.cost_base
        updated = replace(
            asset,
            units=max(0.0, asset.units - units),
            lots=tuple(fifo.residual),
        )
        transaction = Transaction(
            id=self._id_factory(),
            kind=TransactionKind.SELL,
            ticker=ticker,
            date=sale_date,
            units=units,
            price=asset.price,
            amount=amount_aud,
            proceeds=proceeds,
            cost_base=cost_base,
            # Losses stay in gain but never offset discount_gain.
            gain=proceeds - cost_base,
            discount_gain=discounted_gain(fifo.consumed, asset.price, sale_date),
        )
        logger.info(
            "SELL %s: %.6f units @ %.4f, gain %.2f", ticker, units, asset.price, transaction.gain
        )
        return OperationResult(
            snapshot=snapshot.replace_asset(updated).append(transaction),
            applied=True,
            transactions=(transaction,),
        )

    def set_price(self, snapshot: PortfolioSnapshot, ticker: str, price) -> OperationResult:
        asset = snapshot.find(ticker)
        if asset is None:
            return self._skipped(snapshot, "price update", f"Unknown ticker {ticker}.")
        updated = replace(asset, price=coerce_amount(price))
        return OperationResult(snapshot=snapshot.replace_asset(updated), applied=True)

    def set_target_weight(self, snapshot: PortfolioSnapshot, ticker: str, weight) -> OperationResult:
        asset = snapshot.find(ticker)
        if asset is None:
            return self._skipped(snapshot, "target update", f"Unknown ticker {ticker}.")
        updated = replace(asset, target_weight=min(1.0, coerce_amount(weight)))
        return OperationResult(snapshot=snapshot.replace_asset(updated), applied=True)

    def reset(self) -> OperationResult:
        logger.info("Portfolio reset to defaults")
        return OperationResult(snapshot=default_snapshot(), applied=True)

    @staticmethod
    def _validate(asset: Optional[Asset], ticker: str, amount_aud: float) -> Optional[str]:
        if asset is None:
            return f"Unknown ticker {ticker}."
        if not asset.price > 0:
            return f"Set a price for {ticker} first."
        if amount_aud <= 0:
            return "Enter an amount greater than zero."
        return None

    @staticmethod
    def _skipped(snapshot: PortfolioSnapshot, action: str, reason: str) -> OperationResult:
        logger.debug("Skipped %s: %s", action, reason)
        return OperationResult(
            snapshot=snapshot,
            applied=False,
            messages=[warning(reason)],
        )

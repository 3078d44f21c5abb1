"""Allocation services for spending a budget across target weights."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional

import pandas as pd

from ..messages import ServiceMessage, warning
from ..models import Asset, OperationResult, PlannedSplit, PortfolioSnapshot, Transaction
from .transactions import TransactionRecorder, coerce_amount

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AllocationPlan:
    splits: List[PlannedSplit]
    budget: float
    spendable: float

    @property
    def total_amount(self) -> float:
        return sum(split.amount for split in self.splits)

    def to_frame(self) -> pd.DataFrame:
        rows = [
            {
                "Ticker": split.ticker,
                "Name": split.name,
                "Target (%)": split.weight * 100,
                "Price": split.price,
                "Amount (AUD)": split.amount,
                "Est. Units": split.estimated_units,
            }
            for split in self.splits
        ]
        return pd.DataFrame(
            rows,
            columns=["Ticker", "Name", "Target (%)", "Price", "Amount (AUD)", "Est. Units"],
        )


class AllocationPlanner:
    """Distributes the spendable budget proportionally to the target weights."""

    def __init__(self, recorder: Optional[TransactionRecorder] = None) -> None:
        self._recorder = recorder or TransactionRecorder()

    @staticmethod
    def spendable(budget, fees_flat, buffer_pct) -> float:
        budget = coerce_amount(budget)
        fees = coerce_amount(fees_flat)
        buffer = coerce_amount(buffer_pct)
        return max(0.0, budget - fees - budget * (buffer / 100))

    def plan(
        self,
        assets: Iterable[Asset],
        budget,
        fees_flat=0.0,
        buffer_pct=0.0,
    ) -> AllocationPlan:
        assets = list(assets)
        spendable = self.spendable(budget, fees_flat, buffer_pct)
        if spendable <= 0:
            return AllocationPlan(splits=[], budget=coerce_amount(budget), spendable=0.0)

        total_weight = sum(asset.target_weight or 0.0 for asset in assets) or 1.0
        splits: List[PlannedSplit] = []
        for asset in assets:
            weight = asset.target_weight or 0.0
            amount = spendable * (weight / total_weight)
            splits.append(
                PlannedSplit(
                    ticker=asset.ticker,
                    name=asset.name,
                    weight=weight,
                    price=asset.price,
                    amount=amount,
                    estimated_units=amount / asset.price if asset.price > 0 else None,
                )
            )
        return AllocationPlan(splits=splits, budget=coerce_amount(budget), spendable=spendable)

    def allocate_now(
        self,
        snapshot: PortfolioSnapshot,
        budget,
        fees_flat=0.0,
        buffer_pct=0.0,
        *,
        now: Optional[datetime] = None,
    ) -> OperationResult:
        """Plans over the priced assets only and records a buy for every split."""
        if coerce_amount(budget) <= 0:
            return OperationResult(
                snapshot=snapshot,
                applied=False,
                messages=[warning("Enter a budget greater than zero.")],
            )

        priced = [asset for asset in snapshot.assets if asset.price > 0]
        if not priced:
            return OperationResult(
                snapshot=snapshot,
                applied=False,
                messages=[warning("Set at least one price before allocating.")],
            )

        plan = self.plan(priced, budget, fees_flat, buffer_pct)
        current = snapshot
        recorded: List[Transaction] = []
        messages: List[ServiceMessage] = []
        for split in plan.splits:
            if split.amount <= 0:
                continue
            result = self._recorder.buy(current, split.ticker, split.amount, now=now)
            current = result.snapshot
            recorded.extend(result.transactions)
            messages.extend(result.messages)

        if not recorded and plan.spendable <= 0:
            messages.append(warning("Nothing left to spend after fees and buffer."))
        elif not recorded:
            messages.append(warning("Every priced asset has a zero target weight; nothing to buy."))
        else:
            logger.info("Allocated %.2f AUD across %d assets", plan.total_amount, len(recorded))
        return OperationResult(
            snapshot=current,
            applied=bool(recorded),
            transactions=tuple(recorded),
            messages=messages,
        )

"""FIFO lot consumption.

Lots are kept oldest first. Selling walks them in that order, taking as much
of each lot as is still needed; a partially consumed lot stays in place with
its quantity reduced, and lots after the point where the sale is covered are
passed through unchanged.

Example::

    lots = [Lot(2, 100.0, jan), Lot(3, 200.0, feb)]
    result = consume_fifo(lots, 4)
    # result.consumed -> [Lot(2, 100.0, jan), Lot(2, 200.0, feb)]
    # result.residual -> [Lot(1, 200.0, feb)]
    # result.unfilled -> 0
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, List

from ..models import Lot


@dataclass(frozen=True)
class FifoResult:
    consumed: List[Lot]
    residual: List[Lot]
    unfilled: float

    @property
    def consumed_quantity(self) -> float:
        return sum(lot.quantity for lot in self.consumed)

    @property
    def cost_base(self) -> float:
        return sum(lot.cost for lot in self.consumed)


def consume_fifo(lots: Iterable[Lot], sell_quantity: float) -> FifoResult:
    """Consumes ``sell_quantity`` units from ``lots`` in acquisition order.

    The input lots are never modified. Consumed entries keep the original
    lot's price and acquisition date.
    """
    if sell_quantity < 0:
        raise ValueError(f"Sell quantity must be non-negative, got {sell_quantity}")

    consumed: List[Lot] = []
    residual: List[Lot] = []
    remaining = sell_quantity

    for lot in lots:
        if remaining <= 0:
            residual.append(lot)
            continue
        take = min(remaining, lot.quantity)
        if take > 0:
            consumed.append(replace(lot, quantity=take))
        leftover = lot.quantity - take
        if leftover > 0:
            residual.append(replace(lot, quantity=leftover))
        remaining -= take

    return FifoResult(consumed=consumed, residual=residual, unfilled=max(0.0, remaining))

"""Per-asset annualized growth estimate."""
from __future__ import annotations

import math
from datetime import datetime
from typing import Optional

from ..dates import utc_now, years_between
from ..models import Asset


class PerformanceEstimator:
    """Single-rate CAGR since the first contribution.

    Every contribution is treated as if it had been made on the first
    contribution date, so this is an approximation rather than a money- or
    time-weighted return.
    """

    TOTAL_LOSS = -1.0

    def cagr(self, asset: Asset, now: Optional[datetime] = None) -> float:
        if asset.first_contribution_date is None or asset.invested <= 0:
            return 0.0
        years = years_between(asset.first_contribution_date, now if now is not None else utc_now())
        if years <= 0:
            return 0.0
        value = asset.market_value
        if value <= 0:
            return self.TOTAL_LOSS
        try:
            return (value / asset.invested) ** (1 / years) - 1
        except OverflowError:
            # Gains compounded over a few minutes do not fit a float.
            return math.inf if value > asset.invested else self.TOTAL_LOSS

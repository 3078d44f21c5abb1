"""Rebalancing drift detection against target weights."""
from __future__ import annotations

from typing import Iterable, List

from ..models import Asset, DriftSuggestion, PortfolioTotals


def portfolio_totals(assets: Iterable[Asset]) -> PortfolioTotals:
    assets = list(assets)
    invested = sum(asset.invested or 0.0 for asset in assets)
    value = sum(asset.market_value for asset in assets)
    weights = {
        asset.ticker: (asset.market_value / value if value > 0 else 0.0) for asset in assets
    }
    return PortfolioTotals(invested=invested, value=value, weights=weights)


class RebalanceAnalyzer:
    """Flags assets whose current weight drifted from target by at least the threshold.

    Suggestions are ordered by absolute drift, largest first; equal drifts keep
    the input order.
    """

    def analyze(
        self,
        assets: Iterable[Asset],
        total_market_value: float,
        threshold_pct: float,
        enabled: bool = True,
    ) -> List[DriftSuggestion]:
        if not enabled or total_market_value <= 0:
            return []

        suggestions: List[DriftSuggestion] = []
        for asset in assets:
            current_weight = asset.market_value / total_market_value
            target_weight = asset.target_weight or 0.0
            drift_pct = (current_weight - target_weight) * 100
            if abs(drift_pct) >= (threshold_pct or 0.0):
                suggestions.append(
                    DriftSuggestion(
                        ticker=asset.ticker,
                        name=asset.name,
                        current_weight=current_weight,
                        target_weight=target_weight,
                        drift_pct=drift_pct,
                    )
                )
        return sorted(suggestions, key=lambda s: abs(s.drift_pct), reverse=True)

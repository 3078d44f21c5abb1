"""Capital gains summaries per Australian financial year."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional, Tuple

from ..config import FY_START_MONTH
from ..dates import ensure_utc, utc_now
from ..models import FinancialYearSummary, Transaction, TransactionKind

logger = logging.getLogger(__name__)


def financial_year_window(fy_start_year: int) -> Tuple[datetime, datetime]:
    """Closed UTC interval from 1 July ``fy_start_year`` to the last millisecond of 30 June."""
    start = datetime(fy_start_year, FY_START_MONTH, 1, tzinfo=timezone.utc)
    end = datetime(fy_start_year + 1, 6, 30, 23, 59, 59, 999000, tzinfo=timezone.utc)
    return start, end


def financial_year_for(moment: Optional[datetime] = None) -> int:
    moment = ensure_utc(moment) if moment is not None else utc_now()
    return moment.year if moment.month >= FY_START_MONTH else moment.year - 1


class TaxCalculator:
    """Aggregates realized gains of SELL transactions inside a financial year.

    Gross gains ignore losses (no netting); the discounted figure sums the
    per-transaction post-discount gains computed at sale time.
    """

    def summarize_financial_year(
        self,
        transactions: Iterable[Transaction],
        fy_start_year: int,
    ) -> FinancialYearSummary:
        start, end = financial_year_window(fy_start_year)
        sells = [
            t
            for t in transactions
            if t.kind == TransactionKind.SELL
            and t.date is not None
            and start <= ensure_utc(t.date) <= end
        ]
        gross_gain = sum(max(0.0, t.gain or 0.0) for t in sells)
        discount_gain = sum(max(0.0, t.discount_gain or 0.0) for t in sells)
        logger.debug("FY %s: %d sell events", fy_start_year, len(sells))
        return FinancialYearSummary(
            fy_start_year=fy_start_year,
            event_count=len(sells),
            gross_gain=gross_gain,
            discount_gain=discount_gain,
        )

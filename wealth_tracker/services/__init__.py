"""Service layer abstractions for the wealth tracker."""
from .allocation import AllocationPlan, AllocationPlanner
from .export import export_csv, export_filename, positions_frame, transactions_frame
from .ledger import FifoResult, consume_fifo
from .performance import PerformanceEstimator
from .rebalance import RebalanceAnalyzer, portfolio_totals
from .tax import TaxCalculator, financial_year_for, financial_year_window
from .transactions import TransactionRecorder, coerce_amount, default_snapshot

__all__ = [
    "AllocationPlan",
    "AllocationPlanner",
    "FifoResult",
    "PerformanceEstimator",
    "RebalanceAnalyzer",
    "TaxCalculator",
    "TransactionRecorder",
    "coerce_amount",
    "consume_fifo",
    "default_snapshot",
    "export_csv",
    "export_filename",
    "financial_year_for",
    "financial_year_window",
    "portfolio_totals",
    "positions_frame",
    "transactions_frame",
]

"""Local-first portfolio tracker: FIFO lots, Australian CGT, planning and drift."""

from .config import DEFAULT_ASSETS, DEFAULT_PLANNER, DEFAULT_REBALANCE
from .messages import MessageLevel, ServiceMessage
from .models import (
    Asset,
    AssetDefinition,
    DriftSuggestion,
    FinancialYearSummary,
    Lot,
    OperationResult,
    PlannedSplit,
    PlannerSettings,
    PortfolioSnapshot,
    PortfolioTotals,
    RebalanceSettings,
    Transaction,
    TransactionKind,
)
from .repositories import SnapshotRepository, backup_filename, to_json
from .services import (
    AllocationPlan,
    AllocationPlanner,
    PerformanceEstimator,
    RebalanceAnalyzer,
    TaxCalculator,
    TransactionRecorder,
    consume_fifo,
    default_snapshot,
    export_csv,
    export_filename,
    financial_year_for,
    portfolio_totals,
)

__all__ = [
    "AllocationPlan",
    "AllocationPlanner",
    "Asset",
    "AssetDefinition",
    "DEFAULT_ASSETS",
    "DEFAULT_PLANNER",
    "DEFAULT_REBALANCE",
    "DriftSuggestion",
    "FinancialYearSummary",
    "Lot",
    "MessageLevel",
    "OperationResult",
    "PerformanceEstimator",
    "PlannedSplit",
    "PlannerSettings",
    "PortfolioSnapshot",
    "PortfolioTotals",
    "RebalanceAnalyzer",
    "RebalanceSettings",
    "ServiceMessage",
    "SnapshotRepository",
    "TaxCalculator",
    "Transaction",
    "TransactionKind",
    "TransactionRecorder",
    "backup_filename",
    "consume_fifo",
    "default_snapshot",
    "export_csv",
    "export_filename",
    "financial_year_for",
    "portfolio_totals",
    "to_json",
]

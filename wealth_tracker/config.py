"""Static configuration for the tracked assets, tax rules and defaults."""
from __future__ import annotations

from .models import AssetDefinition, PlannerSettings, RebalanceSettings

DEFAULT_ASSETS = (
    AssetDefinition("VGS", "VGS – Intl Shares", target_weight=0.35),
    AssetDefinition("VGE", "VGE – EM Shares", target_weight=0.15),
    AssetDefinition("A200", "A200 – Aus Shares", target_weight=0.30),
    AssetDefinition("VAF", "VAF – Aus Bonds", target_weight=0.10),
    AssetDefinition("GOLD", "GOLD – Physical ETF", target_weight=0.10),
)

# Sell tolerance for units left unfilled by the lots.
EPSILON = 1e-9

DAYS_PER_YEAR = 365.25

# Australian CGT: half of a lot's gain after a year of holding.
CGT_DISCOUNT_RATE = 0.5
CGT_DISCOUNT_MIN_YEARS = 1.0

# Financial year runs 1 July to 30 June.
FY_START_MONTH = 7
# Last start year whose window still fits in datetime.
MAX_FY_START_YEAR = 9998

DEFAULT_PLANNER = PlannerSettings(budget=0.0, fees_flat=0.0, buffer_pct=0.0)
DEFAULT_REBALANCE = RebalanceSettings(enabled=True, threshold_pct=5.0)

STORAGE_FILENAME = "street_smart_wealth_tracker_v3.json"
DATA_DIR_ENV = "WEALTH_TRACKER_DATA_DIR"

BACKUP_FILENAME_PREFIX = "street-smart-wealth-backup"
EXPORT_FILENAME_PREFIX = "street-smart-wealth-export"

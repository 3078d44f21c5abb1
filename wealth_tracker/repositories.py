"""Repositories responsible for loading and persisting portfolio snapshots."""
from __future__ import annotations

import json
import logging
import math
import os
import uuid
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .config import BACKUP_FILENAME_PREFIX, DATA_DIR_ENV, STORAGE_FILENAME
from .dates import format_timestamp, parse_timestamp, utc_now
from .messages import ServiceMessage, error, info, warning
from .models import (
    Asset,
    Lot,
    OperationResult,
    PortfolioSnapshot,
    Transaction,
    TransactionKind,
)
from .services.transactions import default_snapshot

logger = logging.getLogger(__name__)


class SnapshotFormatError(ValueError):
    """Raised while decoding a snapshot record that has the wrong shape."""


# --- Encoding -----------------------------------------------------------------
def lot_to_dict(lot: Lot) -> Dict[str, Any]:
    return {
        "quantity": lot.quantity,
        "unitPrice": lot.unit_price,
        "acquisitionDate": format_timestamp(lot.acquisition_date),
    }


def asset_to_dict(asset: Asset) -> Dict[str, Any]:
    return {
        "ticker": asset.ticker,
        "name": asset.name,
        "targetWeight": asset.target_weight,
        "price": asset.price,
        "units": asset.units,
        "invested": asset.invested,
        "lots": [lot_to_dict(lot) for lot in asset.lots],
        "firstContributionDate": format_timestamp(asset.first_contribution_date),
    }


def transaction_to_dict(transaction: Transaction) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "id": transaction.id,
        "kind": transaction.kind.value,
        "ticker": transaction.ticker,
        "date": format_timestamp(transaction.date),
        "units": transaction.units,
        "price": transaction.price,
        "amount": transaction.amount,
    }
    if transaction.kind == TransactionKind.SELL:
        payload.update(
            {
                "proceeds": transaction.proceeds,
                "costBase": transaction.cost_base,
                "gain": transaction.gain,
                "discountGain": transaction.discount_gain,
            }
        )
    return payload


def snapshot_to_dict(snapshot: PortfolioSnapshot) -> Dict[str, Any]:
    return {
        "assets": [asset_to_dict(asset) for asset in snapshot.assets],
        "transactions": [transaction_to_dict(t) for t in snapshot.transactions],
    }


def to_json(snapshot: PortfolioSnapshot) -> str:
    return json.dumps(snapshot_to_dict(snapshot), indent=2)


def backup_filename(today: Optional[date] = None) -> str:
    today = today or utc_now().date()
    return f"{BACKUP_FILENAME_PREFIX}-{today.isoformat()}.json"


# --- Decoding -----------------------------------------------------------------
def _field(record: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in record:
            return record[key]
    return None


def _number(record: Mapping[str, Any], *keys: str, optional: bool = False) -> Optional[float]:
    value = _field(record, *keys)
    if value is None:
        return None if optional else 0.0
    if isinstance(value, bool):
        raise SnapshotFormatError(f"Field {keys[0]} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise SnapshotFormatError(f"Field {keys[0]} must be a number, got {value!r}") from exc
    if not math.isfinite(number):
        raise SnapshotFormatError(f"Field {keys[0]} must be a finite number, got {value!r}")
    return number


def _timestamp(record: Mapping[str, Any], *keys: str):
    value = _field(record, *keys)
    try:
        return parse_timestamp(value)
    except (ValueError, OverflowError) as exc:
        raise SnapshotFormatError(f"Field {keys[0]} is not a valid date: {value!r}") from exc


def lot_from_dict(record: Any) -> Lot:
    if not isinstance(record, Mapping):
        raise SnapshotFormatError("Lot entries must be objects")
    acquired = _timestamp(record, "acquisitionDate", "date")
    if acquired is None:
        raise SnapshotFormatError("Lot is missing its acquisition date")
    return Lot(
        quantity=_number(record, "quantity", "qty"),
        unit_price=_number(record, "unitPrice", "price"),
        acquisition_date=acquired,
    )


def asset_from_dict(record: Any) -> Asset:
    if not isinstance(record, Mapping):
        raise SnapshotFormatError("Asset entries must be objects")
    ticker = record.get("ticker")
    if not isinstance(ticker, str) or not ticker:
        raise SnapshotFormatError("Asset entry is missing its ticker")
    lots = record.get("lots") or []
    if not isinstance(lots, list):
        raise SnapshotFormatError(f"Lots of {ticker} must be a list")
    return Asset(
        ticker=ticker,
        name=str(record.get("name") or ticker),
        target_weight=_number(record, "targetWeight"),
        price=_number(record, "price"),
        units=_number(record, "units"),
        invested=_number(record, "invested"),
        lots=tuple(lot_from_dict(lot) for lot in lots),
        first_contribution_date=_timestamp(record, "firstContributionDate", "firstContribution"),
    )


def transaction_from_dict(record: Any) -> Transaction:
    if not isinstance(record, Mapping):
        raise SnapshotFormatError("Transaction entries must be objects")
    try:
        kind = TransactionKind(str(record.get("kind", "")).upper())
    except ValueError as exc:
        raise SnapshotFormatError(f"Unknown transaction kind {record.get('kind')!r}") from exc
    return Transaction(
        id=str(record.get("id") or uuid.uuid4()),
        kind=kind,
        ticker=str(record.get("ticker", "")),
        date=_timestamp(record, "date"),
        units=_number(record, "units"),
        price=_number(record, "price"),
        amount=_number(record, "amount"),
        proceeds=_number(record, "proceeds", optional=True),
        cost_base=_number(record, "costBase", optional=True),
        gain=_number(record, "gain", optional=True),
        discount_gain=_number(record, "discountGain", optional=True),
    )


_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


def _chronological(transaction: Transaction):
    """Sort key: dateless entries first, the rest oldest first."""
    if transaction.date is None:
        return (0, _EARLIEST)
    return (1, transaction.date)


def snapshot_from_dict(data: Any) -> Tuple[PortfolioSnapshot, List[ServiceMessage]]:
    """Decodes a backup document.

    ``assets`` must be a list; a missing or malformed ``transactions`` field
    yields an empty log. Raises ``SnapshotFormatError`` for any other problem.
    """
    if not isinstance(data, Mapping) or not isinstance(data.get("assets"), list):
        raise SnapshotFormatError("Invalid backup – assets missing")

    messages: List[ServiceMessage] = []
    assets = tuple(asset_from_dict(record) for record in data["assets"])
    tickers = [asset.ticker for asset in assets]
    if len(set(tickers)) != len(tickers):
        raise SnapshotFormatError("Invalid backup – duplicate tickers")

    raw_transactions = data.get("transactions")
    if not isinstance(raw_transactions, list):
        if raw_transactions is not None:
            messages.append(
                warning("Transactions in backup were not a list; ignoring them.")
            )
        raw_transactions = []

    transactions: List[Transaction] = []
    for position, record in enumerate(raw_transactions):
        try:
            transactions.append(transaction_from_dict(record))
        except SnapshotFormatError as exc:
            messages.append(
                warning(f"Skipping transaction #{position + 1}: {exc}")
            )

    transactions.sort(key=_chronological)
    return PortfolioSnapshot(assets=assets, transactions=tuple(transactions)), messages


class SnapshotRepository:
    """Loads and persists the session snapshot as a local JSON file."""

    def __init__(self, base_path: Path | None = None, filename: str = STORAGE_FILENAME) -> None:
        if base_path is None:
            env_dir = os.environ.get(DATA_DIR_ENV)
            base_path = Path(env_dir) if env_dir else Path.cwd()
        self._path = Path(base_path) / filename

    @property
    def path(self) -> Path:
        return self._path

    def parse(self, text: str | bytes) -> Tuple[Optional[PortfolioSnapshot], List[ServiceMessage]]:
        """Parses backup text; on failure returns ``None`` and an error message."""
        try:
            data = json.loads(text)
            return snapshot_from_dict(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            logger.warning("Import failed: invalid JSON (%s)", exc)
            return None, [error(f"Import failed: invalid JSON ({exc})")]
        except SnapshotFormatError as exc:
            logger.warning("Import failed: %s", exc)
            return None, [error(f"Import failed: {exc}")]

    def restore(self, current: PortfolioSnapshot, text: str | bytes) -> OperationResult:
        snapshot, messages = self.parse(text)
        if snapshot is None:
            return OperationResult(snapshot=current, applied=False, messages=messages)
        logger.info(
            "Restored backup with %d assets and %d transactions",
            len(snapshot.assets),
            len(snapshot.transactions),
        )
        messages.append(info("Backup restored."))
        return OperationResult(snapshot=snapshot, applied=True, messages=messages)

    def load(self) -> Tuple[PortfolioSnapshot, List[ServiceMessage]]:
        if not self._path.exists():
            return default_snapshot(), []
        try:
            raw = self._path.read_bytes()
        except OSError as exc:
            logger.warning("Could not read %s: %s", self._path, exc)
            return default_snapshot(), [error(f"Could not read {self._path.name} ({exc}); starting from defaults.")]
        snapshot, messages = self.parse(raw)
        if snapshot is None:
            messages.append(
                error(f"Could not read {self._path.name}; starting from defaults.")
            )
            return default_snapshot(), messages
        return snapshot, messages

    def save(self, snapshot: PortfolioSnapshot) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(to_json(snapshot), encoding="utf-8")
        tmp_path.replace(self._path)

    def clear(self) -> None:
        if self._path.exists():
            self._path.unlink()

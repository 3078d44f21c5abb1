"""Tests for snapshot persistence, import and export."""
import json
from datetime import date

import pytest

from wealth_tracker.config import DATA_DIR_ENV, STORAGE_FILENAME
from wealth_tracker.messages import MessageLevel
from wealth_tracker.models import TransactionKind
from wealth_tracker.repositories import SnapshotRepository, backup_filename, snapshot_to_dict, to_json
from wealth_tracker.services.transactions import default_snapshot

from .conftest import T0, days_after


@pytest.fixture
def repo(tmp_path):
    return SnapshotRepository(base_path=tmp_path)


@pytest.fixture
def traded(recorder, snapshot):
    state = recorder.buy(snapshot, "VGS", 1000, now=T0).snapshot
    state = recorder.set_price(state, "VGS", 12.5).snapshot
    return recorder.sell(state, "VGS", 250, now=days_after(40)).snapshot


class TestParse:
    """Imports need an assets list; anything else is rejected with a message"""

    @pytest.mark.parametrize(
        "text",
        ["{}", '{"assets": {}}', '{"assets": null}', "[]", "not json", '{"assets": [42]}', '{"assets": [{"name": "x"}]}'],
    )
    def test_invalid_backups_are_rejected(self, repo, text):
        snapshot, messages = repo.parse(text)

        assert snapshot is None
        assert messages[0].level == MessageLevel.ERROR
        assert messages[0].text.startswith("Import failed")

    def test_empty_object_reports_missing_assets(self, repo):
        _, messages = repo.parse("{}")

        assert "assets missing" in messages[0].text

    def test_missing_transactions_default_to_empty(self, repo):
        snapshot, messages = repo.parse('{"assets": [{"ticker": "VGS", "price": 10}]}')

        assert snapshot.transactions == ()
        assert snapshot.find("VGS").price == 10.0
        assert messages == []

    def test_malformed_transactions_default_to_empty(self, repo):
        snapshot, messages = repo.parse('{"assets": [], "transactions": "oops"}')

        assert snapshot.transactions == ()
        assert messages[0].level == MessageLevel.WARNING

    def test_bad_transaction_entries_are_skipped(self, repo):
        payload = {
            "assets": [],
            "transactions": [
                "junk",
                {"kind": "TRANSFER", "ticker": "VGS"},
                {"id": "x", "kind": "BUY", "ticker": "VGS", "date": "2024-01-01T00:00:00.000Z", "units": 1, "price": 1, "amount": 1},
            ],
        }

        snapshot, messages = repo.parse(json.dumps(payload))

        assert [t.id for t in snapshot.transactions] == ["x"]
        assert len(messages) == 2

    def test_legacy_backup_keys(self, repo):
        """Backups from the original tracker use qty/price/date and firstContribution"""
        payload = {
            "assets": [
                {
                    "ticker": "VGS",
                    "name": "VGS – Intl Shares",
                    "targetWeight": 0.35,
                    "price": 110,
                    "units": 2,
                    "invested": 200,
                    "lots": [{"qty": 2, "price": 100, "date": "2023-01-15T10:00:00.000Z"}],
                    "firstContribution": "2023-01-15T10:00:00.000Z",
                }
            ],
            "transactions": [
                {
                    "id": "abc",
                    "kind": "SELL",
                    "ticker": "VGS",
                    "amount": 110,
                    "units": 1,
                    "price": 110,
                    "proceeds": 110,
                    "costBase": 100,
                    "gain": 10,
                    "discountGain": 5,
                    "date": "2024-03-01T00:00:00.000Z",
                }
            ],
        }

        snapshot, _ = repo.parse(json.dumps(payload))

        vgs = snapshot.find("VGS")
        assert vgs.first_contribution_date == T0
        assert vgs.lots[0].quantity == 2.0
        assert vgs.lots[0].unit_price == 100.0
        assert vgs.lots[0].acquisition_date == T0
        (tx,) = snapshot.transactions
        assert tx.kind == TransactionKind.SELL
        assert (tx.gain, tx.discount_gain, tx.cost_base) == (10.0, 5.0, 100.0)

    def test_exported_json_parses_back(self, repo, traded):
        snapshot, messages = repo.parse(to_json(traded))

        assert snapshot == traded
        assert messages == []

    @pytest.mark.parametrize(
        "asset",
        [{"ticker": "X", "price": "NaN"}, {"ticker": "X", "units": "Infinity"}, {"ticker": "X", "invested": 1e400}],
    )
    def test_non_finite_numbers_are_rejected(self, repo, asset):
        snapshot, messages = repo.parse(json.dumps({"assets": [asset]}))

        assert snapshot is None
        assert "finite" in messages[0].text

    def test_newest_first_log_is_stored_chronologically(self, repo):
        """The original tracker saved its log newest first"""
        payload = {
            "assets": [{"ticker": "VGS"}],
            "transactions": [
                {"id": "new", "kind": "BUY", "ticker": "VGS", "date": "2024-05-01T00:00:00.000Z"},
                {"id": "undated", "kind": "BUY", "ticker": "VGS"},
                {"id": "old", "kind": "BUY", "ticker": "VGS", "date": "2024-01-01T00:00:00.000Z"},
            ],
        }

        snapshot, _ = repo.parse(json.dumps(payload))

        assert [t.id for t in snapshot.transactions] == ["undated", "old", "new"]
        assert snapshot.transactions_newest_first()[0].id == "new"


class TestRestore:
    def test_failed_import_leaves_state_untouched(self, repo, traded):
        result = repo.restore(traded, "{}")

        assert result.applied is False
        assert result.snapshot is traded
        assert result.messages[0].level == MessageLevel.ERROR

    def test_successful_import_replaces_state(self, repo, traded):
        result = repo.restore(default_snapshot(), to_json(traded).encode("utf-8"))

        assert result.applied is True
        assert result.snapshot == traded


class TestPersistence:
    def test_missing_file_loads_defaults(self, repo):
        snapshot, messages = repo.load()

        assert snapshot == default_snapshot()
        assert messages == []

    def test_save_then_load(self, repo, traded):
        repo.save(traded)

        snapshot, _ = repo.load()

        assert snapshot == traded
        assert repo.path.name == STORAGE_FILENAME

    def test_corrupted_file_falls_back_to_defaults(self, repo):
        repo.path.write_text("{broken", encoding="utf-8")

        snapshot, messages = repo.load()

        assert snapshot == default_snapshot()
        assert all(m.level == MessageLevel.ERROR for m in messages)

    def test_undecodable_file_falls_back_to_defaults(self, repo):
        repo.path.write_bytes(b'{"assets": [\xff\xfe]}')

        snapshot, messages = repo.load()

        assert snapshot == default_snapshot()
        assert messages and all(m.level == MessageLevel.ERROR for m in messages)

    def test_unreadable_path_falls_back_to_defaults(self, repo):
        repo.path.mkdir()

        snapshot, messages = repo.load()

        assert snapshot == default_snapshot()
        assert messages[0].level == MessageLevel.ERROR

    def test_clear_removes_file(self, repo, traded):
        repo.save(traded)
        repo.clear()

        assert not repo.path.exists()

    def test_data_dir_from_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv(DATA_DIR_ENV, str(tmp_path / "data"))

        repo = SnapshotRepository()
        repo.save(default_snapshot())

        assert (tmp_path / "data" / STORAGE_FILENAME).exists()


class TestSerialization:
    def test_buy_entries_omit_sale_fields(self, traded):
        payload = snapshot_to_dict(traded)

        buy, sale = payload["transactions"]
        assert "gain" not in buy
        assert sale["costBase"] == pytest.approx(200.0)
        assert buy["date"] == "2023-01-15T10:00:00.000Z"

    def test_asset_keys(self, traded):
        vgs = snapshot_to_dict(traded)["assets"][0]

        assert set(vgs) == {
            "ticker",
            "name",
            "targetWeight",
            "price",
            "units",
            "invested",
            "lots",
            "firstContributionDate",
        }
        assert vgs["lots"][0] == {
            "quantity": pytest.approx(80.0),
            "unitPrice": 10.0,
            "acquisitionDate": "2023-01-15T10:00:00.000Z",
        }

    def test_backup_filename(self):
        assert backup_filename(date(2024, 7, 1)) == "street-smart-wealth-backup-2024-07-01.json"

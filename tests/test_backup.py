"""Tests for backup export and destructive restore."""

import json

import pytest

from klarity.backup import BackupController
from klarity.models.ledger import EmotionalTag, Target, TransactionType, UserSettings
from klarity.services.storage import InMemoryKeyValueStore, StorageError
from klarity.stores import LedgerStore, SettingsStore, TargetStore


def build_controller(kv, clock):
    settings_store = SettingsStore(kv, clock=clock)
    ledger = LedgerStore(kv, settings_store, clock=clock)
    targets = TargetStore(kv)
    return BackupController(kv, ledger, targets, settings_store, clock=clock)


@pytest.fixture
def populated(app, make_transaction):
    """An install with settings, two transactions and a target."""
    app.settings_store.save(UserSettings(
        monthly_income=8000000,
        monthly_budget=3000000,
        payday_day_of_month=25,
        life_anchor="Rumah",
        shame_count=2,
        install_date=1700000000000,
    ))
    app.ledger.create(make_transaction(amount=8000000, type=TransactionType.INCOME, reason="gaji"))
    app.ledger.create(make_transaction(amount=75000, tag=EmotionalTag.IMPULSE, reason="boba"))
    app.targets.save(Target(id="g1", name="Laptop", target_amount=12000000, collected_amount=500000))
    return app


class TestExport:
    """Tests for building and writing the backup."""

    def test_export_contains_everything(self, populated):
        """Test the snapshot contents and format version."""
        snapshot = populated.backup.export()

        assert snapshot.transactions == populated.ledger.list_transactions()
        assert len(snapshot.transactions) == 2
        assert [t.id for t in snapshot.targets] == ["g1"]
        assert snapshot.settings.life_anchor == "Rumah"
        assert snapshot.version == "1.1"
        assert snapshot.timestamp == "2024-12-10T14:30:00.000Z"

    def test_export_json_is_indented_camel_case(self, populated):
        """Test the file text layout."""
        text = populated.backup.export_json()
        data = json.loads(text)

        assert text.startswith("{\n  ")
        assert data["settings"]["monthlyBudget"] == 3000000
        assert any(t.get("emotionalTag") == "Impulse" for t in data["transactions"])

    def test_backup_filename(self, app):
        """Test the dated file name."""
        assert app.backup.backup_filename() == "klarity_backup_2024-12-10.json"

    def test_write_backup(self, populated, tmp_path):
        """Test writing the file into a directory."""
        path = populated.backup.write_backup(tmp_path / "out")

        assert path.name == "klarity_backup_2024-12-10.json"
        assert json.loads(path.read_text(encoding="utf-8"))["version"] == "1.1"


class TestRestore:
    """Tests for the destructive restore."""

    def test_round_trip(self, populated, clock):
        """Test that restoring an export into an empty install reproduces the data."""
        exported = json.loads(populated.backup.export_json())

        kv = InMemoryKeyValueStore()
        other = build_controller(kv, clock)
        assert other.restore(exported) is True
        assert kv.keys() == ["klarity_settings", "klarity_targets", "klarity_transactions"]

        assert other.export().model_dump(exclude={"timestamp"}) == \
            populated.backup.export().model_dump(exclude={"timestamp"})

    def test_restore_accepts_snapshot_object(self, populated, clock):
        """Test restoring directly from a BackupSnapshot."""
        other = build_controller(InMemoryKeyValueStore(), clock)
        assert other.restore(populated.backup.export()) is True

    def test_settings_only_backup_wipes_transactions(self, populated):
        """Test that a missing transactions array empties the ledger."""
        result = populated.backup.import_json(json.dumps({
            "settings": {"monthlyBudget": 500000, "lifeAnchor": "Nikah"},
        }))

        assert result.success
        assert populated.ledger.list_transactions() == []
        assert populated.targets.list_targets() == []
        settings = populated.settings_store.get()
        assert settings.monthly_budget == 500000
        assert settings.shame_count == 0

    def test_missing_settings_become_defaults(self, populated, make_transaction):
        """Test that a transactions-only backup resets settings."""
        tx = make_transaction(reason="restored").to_wire()
        assert populated.backup.restore({"transactions": [tx]}) is True

        assert [t.reason for t in populated.ledger.list_transactions()] == ["restored"]
        assert populated.settings_store.get().monthly_budget == 0

    def test_non_object_is_rejected_without_mutation(self, populated):
        """Test that arrays, strings and null change nothing."""
        before = populated.backup.export()
        for bad in ([1, 2], "backup", None, 42):
            assert populated.backup.restore(bad) is False

        after = populated.backup.export()
        assert after.transactions == before.transactions
        assert after.settings == before.settings

    def test_invalid_records_rejected_before_wipe(self, populated):
        """Test that a bad record in the file aborts before anything is removed."""
        ok = populated.backup.restore({
            "transactions": [{"amount": "banyak", "type": "EXPENSE", "date": "2024-12-01"}],
        })
        assert ok is False
        assert len(populated.ledger.list_transactions()) == 2

    def test_storage_failure_resets_settings(self, clock, make_transaction):
        """Test the failure path after the wipe has started."""

        class FailingTargets(InMemoryKeyValueStore):
            armed = False

            def set(self, key, value):
                if self.armed and key == "klarity_targets":
                    raise StorageError("quota")
                super().set(key, value)

        kv = FailingTargets()
        controller = build_controller(kv, clock)
        kv.set("klarity_settings", json.dumps({"monthlyBudget": 999, "lifeAnchor": "x"}))
        kv.armed = True

        result = controller.import_json(json.dumps({
            "transactions": [make_transaction().to_wire()],
            "targets": [{"id": "g", "name": "G", "targetAmount": 1}],
            "settings": {"monthlyBudget": 5},
        }))

        assert result.success is False
        assert result.reload_required is True
        stored = json.loads(kv.get("klarity_settings"))
        assert stored["monthlyBudget"] == 0


class TestImportJson:
    """Tests for parsing and the acceptance rule."""

    def test_not_json(self, populated):
        """Test that unparseable text changes nothing."""
        result = populated.backup.import_json("this is not json")
        assert result.success is False
        assert result.reload_required is False
        assert len(populated.ledger.list_transactions()) == 2

    def test_empty_file(self, populated):
        """Test an empty file."""
        assert populated.backup.import_json("   ").success is False

    def test_object_without_data_is_rejected(self, populated):
        """Test that an object with neither transactions nor settings is refused."""
        result = populated.backup.import_json(json.dumps({"targets": [], "version": "1.1"}))
        assert result.success is False
        assert "not a valid" in result.error_message
        assert len(populated.ledger.list_transactions()) == 2

    def test_counts_reported(self, populated):
        """Test the restored counts."""
        text = populated.backup.export_json()
        result = populated.backup.import_json(text)
        assert result.success
        assert result.transactions_restored == 2
        assert result.targets_restored == 1
        assert result.reload_required is True

    def test_import_file(self, populated, tmp_path):
        """Test importing from a path."""
        path = populated.backup.write_backup(tmp_path)
        assert populated.backup.import_file(path).success

    def test_import_missing_file(self, populated, tmp_path):
        """Test that an unreadable path is a failed result."""
        assert populated.backup.import_file(tmp_path / "nope.json").success is False


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

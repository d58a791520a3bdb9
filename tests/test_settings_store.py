"""Tests for the settings store: default merge, save, shame counter."""

import json

import pytest

from klarity.models.ledger import UserSettings, epoch_ms
from klarity.services.storage import InMemoryKeyValueStore, StorageError
from klarity.stores import SettingsStore


class ReadOnlyStore(InMemoryKeyValueStore):
    def set(self, key, value):
        raise StorageError("read-only")


class TestLoading:
    """Tests for get() and the merge over defaults."""

    def test_fresh_install_gets_defaults(self, settings_store, now):
        """Test defaults when nothing is stored."""
        settings = settings_store.get()
        assert settings.monthly_budget == 0
        assert settings.payday_day_of_month == 1
        assert settings.install_date == epoch_ms(now)

    def test_install_date_is_stable(self, settings_store, clock):
        """Test that repeated loads of a fresh install agree on the install date."""
        first = settings_store.get().install_date
        clock.advance(hours=1)
        assert settings_store.get().install_date == first

    def test_missing_fields_backfill(self, kv, settings_store):
        """Test that an older record without newer fields gets defaults for them."""
        kv.set("klarity_settings", json.dumps({
            "monthlyBudget": 2000000,
            "paydayDayOfMonth": 25,
            "lifeAnchor": "Rumah",
            "shameCount": 2,
        }))
        settings = settings_store.get()
        assert settings.monthly_budget == 2000000
        assert settings.payday_day_of_month == 25
        assert settings.shame_count == 2
        assert settings.monthly_income == 0
        assert settings.install_date > 0

    def test_null_values_count_as_missing(self, kv, settings_store):
        """Test that stored nulls fall back to defaults."""
        kv.set("klarity_settings", json.dumps({"monthlyBudget": None, "lifeAnchor": "Anak"}))
        settings = settings_store.get()
        assert settings.monthly_budget == 0
        assert settings.life_anchor == "Anak"

    def test_corrupt_record_yields_defaults(self, kv, settings_store):
        """Test that unreadable settings never fail the load."""
        kv.set("klarity_settings", "][")
        assert settings_store.get() == settings_store.defaults()

    def test_invalid_field_falls_back_alone(self, kv, settings_store):
        """Test that an out-of-range field resets only that field."""
        kv.set("klarity_settings", json.dumps({
            "monthlyBudget": 1000000,
            "paydayDayOfMonth": 0,
            "lifeAnchor": "Rumah",
            "shameCount": 5,
        }))
        settings = settings_store.get()
        assert settings.payday_day_of_month == 1
        assert settings.shame_count == 5
        assert settings.monthly_budget == 1000000
        assert settings.life_anchor == "Rumah"

    def test_several_invalid_fields(self, kv, settings_store):
        """Test that each invalid field is reset independently."""
        kv.set("klarity_settings", json.dumps({
            "paydayDayOfMonth": 40,
            "monthlyBudget": "banyak",
            "lifeAnchor": "Anak",
        }))
        settings = settings_store.get()
        assert settings.payday_day_of_month == 1
        assert settings.monthly_budget == 0
        assert settings.life_anchor == "Anak"

    def test_unknown_keys_are_ignored(self, kv, settings_store):
        """Test that stray keys from other versions do not break the load."""
        kv.set("klarity_settings", json.dumps({"theme": "dark", "monthlyBudget": 7}))
        assert settings_store.get().monthly_budget == 7


class TestSaving:
    """Tests for save / reset / increment_shame."""

    def test_save_then_get(self, settings_store):
        """Test that a saved record reads back unchanged."""
        saved = UserSettings(
            monthly_income=8000000,
            monthly_budget=3000000,
            payday_day_of_month=25,
            life_anchor="Rumah pertama",
            install_date=1,
        )
        settings_store.save(saved)
        assert settings_store.get() == saved

    def test_save_failure_raises(self, clock):
        """Test that save propagates storage errors to the caller."""
        store = SettingsStore(ReadOnlyStore(), clock=clock)
        with pytest.raises(StorageError):
            store.save(UserSettings(monthly_budget=1))

    def test_reset_writes_defaults(self, settings_store):
        """Test reset back to a fresh install."""
        settings_store.save(UserSettings(monthly_budget=5, life_anchor="x", install_date=1))
        settings_store.reset()
        assert settings_store.get().monthly_budget == 0

    def test_increment_shame(self, settings_store):
        """Test the read-modify-write of the shame counter."""
        settings_store.save(UserSettings(monthly_budget=10, shame_count=4, install_date=1))
        updated = settings_store.increment_shame()
        assert updated.shame_count == 5
        assert settings_store.get().shame_count == 5
        assert settings_store.get().monthly_budget == 10

    def test_increment_keeps_record_with_invalid_field(self, kv, settings_store):
        """Test that the counter grows even when another stored field is invalid."""
        kv.set("klarity_settings", json.dumps({
            "monthlyBudget": 1000000,
            "paydayDayOfMonth": 0,
            "lifeAnchor": "Rumah",
            "shameCount": 5,
        }))
        updated = settings_store.increment_shame()

        assert updated.shame_count == 6
        stored = json.loads(kv.get("klarity_settings"))
        assert stored["shameCount"] == 6
        assert stored["monthlyBudget"] == 1000000
        assert stored["lifeAnchor"] == "Rumah"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

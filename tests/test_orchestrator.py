"""Tests for the application flows and component wiring."""

from datetime import date

import pytest

from klarity.config import MetricsSettings, get_settings, validate_all_settings
from klarity.models.ledger import EmotionalTag, TransactionType, UserSettings
from klarity.models.metrics import ProgressTier


class TestTransactionFlow:
    """Tests for recording, editing and deleting through the flow."""

    def test_record_valid_transaction(self, app, make_transaction):
        """Test that a valid transaction is saved."""
        result, validation = app.transaction_flow.record(make_transaction(reason="bensin"))
        assert result.success
        assert validation.is_valid
        assert [t.reason for t in result.transactions] == ["bensin"]

    def test_record_rejects_zero_amount(self, app, make_transaction):
        """Test that validation errors stop the write."""
        result, validation = app.transaction_flow.record(make_transaction(amount=0))
        assert result.success is False
        assert validation.has_errors
        assert app.ledger.list_transactions() == []

    def test_warnings_do_not_block(self, app, make_transaction):
        """Test that an empty reason still saves."""
        result, validation = app.transaction_flow.record(make_transaction(reason=""))
        assert result.success
        assert validation.warnings

    def test_backdated_entry_is_flagged(self, app, make_transaction):
        """Test delayed entry through the flow."""
        result, _ = app.transaction_flow.record(make_transaction(day=date(2024, 12, 8)))
        assert result.transactions[0].is_delayed_entry is True

    def test_edit(self, app, make_transaction):
        """Test editing an existing transaction."""
        created = app.transaction_flow.record(make_transaction())[0].transactions[0]
        result, _ = app.transaction_flow.edit(created.model_copy(update={"amount": 12345}))
        assert result.transactions[0].amount == 12345

    def test_delete_impulse_triggers_shame(self, app, make_transaction):
        """Test the shame mechanic through the flow."""
        created = app.transaction_flow.record(
            make_transaction(tag=EmotionalTag.IMPULSE)
        )[0].transactions[0]

        result = app.transaction_flow.delete(created.id)

        assert result.shame_triggered
        assert app.reckoning().shame_count == 1


class TestSettingsFlow:
    """Tests for onboarding and edits."""

    def test_onboarding_requires_budget_and_anchor(self, app):
        """Test that incomplete settings are not saved."""
        saved, validation = app.settings_flow.save(UserSettings(monthly_budget=1000, install_date=1))
        assert saved is False
        assert validation.first_error() == "Life anchor is empty"

    def test_update_fields(self, app):
        """Test changing individual fields."""
        app.settings_flow.save(UserSettings(monthly_budget=1000, life_anchor="Rumah", install_date=1))
        saved, _ = app.settings_flow.update(payday_day_of_month=25)

        assert saved
        current = app.settings_flow.current()
        assert current.payday_day_of_month == 25
        assert current.monthly_budget == 1000

    def test_update_with_invalid_value_returns_errors(self, app):
        """Test that a rejected field value is reported instead of raised."""
        app.settings_flow.save(UserSettings(monthly_budget=1000, life_anchor="Rumah", install_date=1))

        saved, validation = app.settings_flow.update(payday_day_of_month=0, monthly_budget="banyak")

        assert saved is False
        assert validation.has_errors
        assert {issue.field for issue in validation.issues} == {
            "payday_day_of_month", "monthly_budget",
        }
        assert app.settings_flow.current().payday_day_of_month == 1
        assert app.settings_flow.current().monthly_budget == 1000


class TestKlarityApp:
    """Tests for the read side of the wired application."""

    def test_dashboard_scenario(self, app, make_transaction):
        """Test 750,000 of a 1,000,000 budget through the whole stack."""
        app.settings_flow.save(
            UserSettings(monthly_budget=1000000, life_anchor="Rumah", install_date=1)
        )
        app.transaction_flow.record(make_transaction(amount=750000))

        stats = app.dashboard()
        assert stats.budget_progress == 75.0
        assert stats.budget_remaining == 250000
        assert stats.progress_tier == ProgressTier.AMBER

    def test_analysis_and_statement(self, app, make_transaction):
        """Test the analysis and report views."""
        app.transaction_flow.record(make_transaction(amount=100, type=TransactionType.INCOME))
        app.transaction_flow.record(make_transaction(amount=40, tag=EmotionalTag.IMPULSE))

        assert app.analysis().impulse_total == 40
        assert app.statement().balance == 60

    def test_shared_store(self, app, kv, make_transaction):
        """Test that every component writes to the same key-value store."""
        app.transaction_flow.record(make_transaction())
        assert kv.get("klarity_transactions") is not None


class TestConfig:
    """Tests for the configuration layer."""

    def test_defaults(self):
        """Test the default thresholds and keys."""
        settings = get_settings()
        assert settings.metrics.crisis_threshold == 20000
        assert settings.metrics.damage_projection_months == 12
        assert settings.storage.transactions_key == "klarity_transactions"
        assert settings.app.backup_version == "1.1"

    def test_env_override(self, monkeypatch):
        """Test that environment variables override defaults."""
        monkeypatch.setenv("KLARITY_METRICS_CRISIS_THRESHOLD", "5000")
        assert MetricsSettings().crisis_threshold == 5000

    def test_validate_all_settings(self):
        """Test the startup check."""
        results = validate_all_settings()
        assert results["storage"] and results["metrics"] and results["app"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

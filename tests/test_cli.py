"""Tests for the command line front-end."""

import json

import pytest

from klarity.cli import _import_backup, main
from klarity.models.ledger import EmotionalTag, UserSettings


@pytest.fixture
def seeded(app, make_transaction):
    app.settings_store.save(
        UserSettings(monthly_budget=1000000, life_anchor="Rumah", payday_day_of_month=25, install_date=1)
    )
    app.ledger.create(make_transaction(amount=75000, tag=EmotionalTag.IMPULSE, reason="boba"))
    return app


class TestCommands:
    """Tests for each subcommand against an in-memory install."""

    def test_status(self, seeded, capsys):
        """Test the dashboard summary."""
        assert main(["status"], app=seeded) == 0
        out = capsys.readouterr().out
        assert "2024-12" in out
        assert "Rumah" in out
        assert "Rp 925.000" in out

    def test_status_for_other_month(self, seeded, capsys):
        """Test an explicit month."""
        assert main(["status", "--month", "2024-11"], app=seeded) == 0
        assert "2024-11" in capsys.readouterr().out

    def test_status_rejects_malformed_month(self, seeded, capsys):
        """Test that a bad --month is a usage error, not a traceback."""
        for bad in ("2024-1", "2024-13", "Desember"):
            with pytest.raises(SystemExit) as exc:
                main(["status", "--month", bad], app=seeded)
            assert exc.value.code == 2
            assert "expected YYYY-MM" in capsys.readouterr().err

    def test_transactions_list(self, seeded, capsys):
        """Test the ledger listing."""
        assert main(["transactions", "list"], app=seeded) == 0
        out = capsys.readouterr().out
        assert "boba" in out
        assert "Impulsif" in out

    def test_empty_ledger(self, app, capsys):
        """Test listing a fresh install."""
        assert main(["transactions", "list"], app=app) == 0
        assert "Belum ada transaksi" in capsys.readouterr().out

    def test_report(self, seeded, capsys):
        """Test the printed statement."""
        assert main(["report"], app=seeded) == 0
        out = capsys.readouterr().out
        assert "KLARITY - LAPORAN KEUANGAN BRUTAL" in out
        assert "Tanggal | Kategori | Nominal | Emosi | Alasan" in out

    def test_backup_export(self, seeded, tmp_path, capsys):
        """Test writing a backup file."""
        assert main(["backup", "export", "--output", str(tmp_path)], app=seeded) == 0
        data = json.loads((tmp_path / "klarity_backup_2024-12-10.json").read_text(encoding="utf-8"))
        assert data["settings"]["lifeAnchor"] == "Rumah"

    def test_backup_import_with_yes(self, seeded, tmp_path):
        """Test restoring without the prompt."""
        path = tmp_path / "b.json"
        path.write_text(json.dumps({"settings": {"monthlyBudget": 5}}), encoding="utf-8")

        assert main(["backup", "import", str(path), "--yes"], app=seeded) == 0
        assert seeded.ledger.list_transactions() == []

    def test_import_declined(self, seeded, tmp_path):
        """Test that answering no leaves the data alone."""
        path = tmp_path / "b.json"
        path.write_text(json.dumps({"settings": {}}), encoding="utf-8")

        assert _import_backup(seeded, path, assume_yes=False, ask=lambda _: "n") == 1
        assert len(seeded.ledger.list_transactions()) == 1

    def test_import_invalid_file(self, seeded, tmp_path, capsys):
        """Test the error exit code."""
        path = tmp_path / "b.json"
        path.write_text("[]", encoding="utf-8")

        assert main(["backup", "import", str(path), "--yes"], app=seeded) == 1
        assert "Restore gagal" in capsys.readouterr().err

    def test_requires_command(self):
        """Test that argparse rejects a missing command."""
        with pytest.raises(SystemExit):
            main([])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

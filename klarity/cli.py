"""
Command line front-end.

    python -m klarity status
    python -m klarity transactions list
    python -m klarity report
    python -m klarity backup export --output ~/backups
    python -m klarity backup import klarity_backup_2024-12-01.json --yes
"""

import argparse
import signal
import sys
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from klarity.audit import configure_logging
from klarity.config import get_settings
from klarity.models.ledger import EMOTIONAL_TAG_LABELS
from klarity.orchestrator import KlarityApp, create_app_components
from klarity.reports import format_idr


def _handle_sigint(signum, frame) -> None:
    print("\n[INTERRUPTED] Klarity terminated by user (Ctrl+C).")
    raise SystemExit(130)


def _month(value: str) -> str:
    """argparse type for YYYY-MM."""
    try:
        parsed = datetime.strptime(value, "%Y-%m")
    except ValueError:
        parsed = None
    if parsed is None or parsed.strftime("%Y-%m") != value:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM, got {value!r}")
    return value


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="klarity",
        description="Klarity - brutal personal finance ledger",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    # --------------------
    # status command
    # --------------------
    status_p = sub.add_parser("status", help="Show the dashboard for a month")
    status_p.add_argument(
        "--month",
        type=_month,
        default=None,
        help="Month as YYYY-MM. Default: current month.",
    )

    # --------------------
    # transactions command
    # --------------------
    tx_p = sub.add_parser("transactions", help="Inspect the ledger")
    tx_sub = tx_p.add_subparsers(dest="action", required=True)
    tx_sub.add_parser("list", help="List all transactions, newest first")

    # --------------------
    # report command
    # --------------------
    sub.add_parser("report", help="Print the full statement")

    # --------------------
    # backup command
    # --------------------
    backup_p = sub.add_parser("backup", help="Export or restore all data")
    backup_sub = backup_p.add_subparsers(dest="action", required=True)

    export_p = backup_sub.add_parser("export", help="Write a backup JSON file")
    export_p.add_argument(
        "--output",
        type=str,
        default=".",
        help="Directory to write the backup into. Default: current directory.",
    )

    import_p = backup_sub.add_parser("import", help="Replace ALL data with a backup file")
    import_p.add_argument("file", type=str, help="Path to a backup JSON file")
    import_p.add_argument(
        "--yes",
        action="store_true",
        help="Do not ask for confirmation before overwriting.",
    )

    return parser


def _print_status(app: KlarityApp, month: Optional[str]) -> None:
    stats = app.dashboard(month)
    user_settings = app.settings_store.get()

    print(f"Bulan: {stats.month}")
    if user_settings.needs_onboarding:
        print("(Belum ada budget atau tujuan hidup. Lengkapi pengaturan dulu.)")
    print(f"Demi: {user_settings.life_anchor or 'Masa Depan'}")
    print(f"Uang tunai:        {format_idr(stats.liquidity)}")
    print(f"Sisa budget:       {format_idr(stats.budget_remaining)} ({stats.budget_progress:.0f}% terpakai)")
    print(f"Pengeluaran tetap: {format_idr(stats.fixed_expense)}")
    print(f"Pemasukan:         {format_idr(stats.monthly_income)}")
    if stats.is_current_month:
        print(f"Aman per hari:     {format_idr(round(stats.safe_daily))}")
        print(f"Hari ke gajian:    {stats.days_until_payday}")
    print(f"Burn rate:         {format_idr(round(stats.burn_rate))}/hari")
    months = app.engine.settings.damage_projection_months
    print(f"Kerusakan masa depan ({months} bln): {format_idr(stats.future_damage)}")
    if stats.is_crisis:
        print("MODE KRISIS: jatah harian di bawah batas aman.")


def _print_transactions(app: KlarityApp) -> None:
    transactions = app.ledger.list_transactions()
    if not transactions:
        print("Belum ada transaksi.")
        return
    for t in transactions:
        sign = "+" if t.is_income else "-"
        tag = EMOTIONAL_TAG_LABELS[t.emotional_tag] if t.emotional_tag else "-"
        flags = " [telat]" if t.is_delayed_entry else ""
        print(f"{t.date}  {sign}{format_idr(t.amount):>16}  {t.category:<18} {tag:<9} {t.reason}{flags}")


def _print_report(app: KlarityApp) -> None:
    statement = app.statement()
    print(statement.title)
    print(f"Dicetak pada: {statement.printed_on}")
    print(f"Demi: {statement.anchor}")
    print()
    print(f"Total Pemasukan: {format_idr(statement.total_income)}")
    print(f"Total Pengeluaran: {format_idr(statement.total_expense)}")
    print(f"Sisa Saldo (Cash): {format_idr(statement.balance)}")
    print()
    for row in statement.table():
        print(" | ".join(row))


def _import_backup(
    app: KlarityApp,
    path: Path,
    assume_yes: bool,
    ask: Callable[[str], str] = input,
) -> int:
    if not assume_yes:
        answer = ask(
            "PERINGATAN: Restore akan MENIMPA semua data saat ini. Lanjutkan? [y/N] "
        )
        if answer.strip().lower() not in ("y", "yes", "ya"):
            print("Dibatalkan.")
            return 1

    result = app.backup.import_file(path)
    if result.success:
        print(
            f"Data berhasil dipulihkan: {result.transactions_restored} transaksi, "
            f"{result.targets_restored} target."
        )
        return 0

    print(f"Restore gagal: {result.error_message}", file=sys.stderr)
    return 1


def main(argv: Optional[list[str]] = None, app: Optional[KlarityApp] = None) -> int:
    signal.signal(signal.SIGINT, _handle_sigint)

    args = _build_parser().parse_args(argv)

    configure_logging(get_settings().app.log_level)
    app = app or create_app_components()

    if args.command == "status":
        _print_status(app, args.month)
        return 0

    if args.command == "transactions" and args.action == "list":
        _print_transactions(app)
        return 0

    if args.command == "report":
        _print_report(app)
        return 0

    if args.command == "backup":
        if args.action == "export":
            try:
                path = app.backup.write_backup(Path(args.output).expanduser())
            except OSError as e:
                print(f"Gagal membuat file backup: {e}", file=sys.stderr)
                return 1
            print(f"Backup ditulis ke {path}")
            return 0
        if args.action == "import":
            return _import_backup(app, Path(args.file).expanduser(), args.yes)

    return 2


if __name__ == "__main__":
    raise SystemExit(main())

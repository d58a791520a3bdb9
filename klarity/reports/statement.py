"""
Statement Export

Builds the data behind the printable "brutal" report: header, totals and
one row per transaction. Rendering (PDF, CSV, terminal) is the caller's job.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from klarity.models.ledger import Transaction, UserSettings

STATEMENT_TITLE = "KLARITY - LAPORAN KEUANGAN BRUTAL"
STATEMENT_COLUMNS = ["Tanggal", "Kategori", "Nominal", "Emosi", "Alasan"]
DEFAULT_ANCHOR = "Masa Depan"


def format_idr(amount: int) -> str:
    """Rupiah with dot thousand separators: 1500000 -> 'Rp 1.500.000'."""
    sign = "-" if amount < 0 else ""
    return f"{sign}Rp {abs(amount):,}".replace(",", ".")


class StatementRow(BaseModel):
    date: str
    category: str
    amount: str = Field(..., description="Signed, formatted amount")
    emotion: str
    reason: str

    def as_list(self) -> list[str]:
        return [self.date, self.category, self.amount, self.emotion, self.reason]


class Statement(BaseModel):
    title: str = STATEMENT_TITLE
    printed_on: str
    anchor: str
    total_income: int
    total_expense: int
    balance: int
    rows: list[StatementRow] = Field(default_factory=list)

    def table(self) -> list[list[str]]:
        """Header row followed by one row per transaction."""
        return [list(STATEMENT_COLUMNS)] + [row.as_list() for row in self.rows]


def _row(transaction: Transaction) -> StatementRow:
    if transaction.is_income:
        amount = f"+{format_idr(transaction.amount)}"
        emotion = "-"
    else:
        amount = f"-{format_idr(transaction.amount)}"
        emotion = transaction.emotional_tag.value if transaction.emotional_tag else "-"

    return StatementRow(
        date=transaction.date.isoformat(),
        category=transaction.category,
        amount=amount,
        emotion=emotion,
        reason=transaction.reason or "-",
    )


def build_statement(
    transactions: list[Transaction],
    settings: UserSettings,
    now: Optional[datetime] = None,
) -> Statement:
    """Statement over every given transaction, in the order given."""
    now = now or datetime.now()
    total_income = sum(t.amount for t in transactions if t.is_income)
    total_expense = sum(t.amount for t in transactions if t.is_expense)

    return Statement(
        printed_on=f"{now.day}/{now.month}/{now.year}",
        anchor=settings.life_anchor or DEFAULT_ANCHOR,
        total_income=total_income,
        total_expense=total_expense,
        balance=total_income - total_expense,
        rows=[_row(t) for t in transactions],
    )


def report_filename(now: datetime) -> str:
    return f"Klarity_Report_{now.date().isoformat()}.pdf"

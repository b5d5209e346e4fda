"""Display classification of cash-book lines.

The four buckets drive the sectioned day view only; they never feed into
balances.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from hisab.domain.entities import Bucket, CashBookEntry, CashMode, SourceKind

DEFAULT_PURCHASE_KEYWORDS = ("buffalo", "purchase", "bakri", "khareedari", "goat", "cow")
DEFAULT_EXPENSE_THRESHOLD = Decimal("5000")


@dataclass(frozen=True)
class CategorizerConfig:
    """Heuristic knobs for ``categorize``."""

    expense_threshold: Decimal = DEFAULT_EXPENSE_THRESHOLD
    purchase_keywords: tuple[str, ...] = DEFAULT_PURCHASE_KEYWORDS


DEFAULT_CONFIG = CategorizerConfig()


def categorize(
    mode: CashMode,
    amount: Decimal,
    party_label: Optional[str],
    note: Optional[str],
    source_kind: Optional[SourceKind],
    config: CategorizerConfig = DEFAULT_CONFIG,
) -> Bucket:
    """Map a cash-book line to its display bucket.

    Rules are checked in order and the first match wins:

    1. Expense-sourced lines are daily expenses.
    2. Supplier-sourced lines are purchases (PURCHASE mode) or payments.
    3. PURCHASE mode is a purchase.
    4. Any inflow is money received.
    5. A note naming a purchase keyword is a purchase.
    6. Amounts under the threshold are daily expenses.
    7. Larger amounts with a party are payments given.
    8. Everything else is a purchase.
    """
    mode = CashMode(mode)
    if source_kind == SourceKind.EXPENSE:
        return Bucket.DAILY_EXPENSE
    if source_kind == SourceKind.SUPPLIER:
        return Bucket.PURCHASE if mode == CashMode.PURCHASE else Bucket.PAYMENT_GIVEN
    if mode == CashMode.PURCHASE:
        return Bucket.PURCHASE
    if mode.is_inflow:
        return Bucket.MONEY_RECEIVED
    if note and _has_keyword(note, config.purchase_keywords):
        return Bucket.PURCHASE
    if amount < config.expense_threshold:
        return Bucket.DAILY_EXPENSE
    if party_label and party_label.strip():
        return Bucket.PAYMENT_GIVEN
    return Bucket.PURCHASE


def categorize_entry(entry: CashBookEntry, config: CategorizerConfig = DEFAULT_CONFIG) -> Bucket:
    """Categorize a stored cash-book entry."""
    return categorize(
        mode=entry.mode,
        amount=entry.amount,
        party_label=entry.party_label,
        note=entry.note,
        source_kind=entry.source_kind,
        config=config,
    )


def group_by_bucket(
    entries: Iterable[CashBookEntry], config: CategorizerConfig = DEFAULT_CONFIG
) -> dict[Bucket, list[CashBookEntry]]:
    """Split entries into the four day-view sections, keeping input order."""
    sections: dict[Bucket, list[CashBookEntry]] = {bucket: [] for bucket in Bucket}
    for entry in entries:
        sections[categorize_entry(entry, config)].append(entry)
    return sections


def _has_keyword(note: str, keywords: Iterable[str]) -> bool:
    lowered = note.lower()
    return any(keyword.lower() in lowered for keyword in keywords)

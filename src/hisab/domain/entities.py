"""Domain model entities for hisab.

These are pure data classes representing business concepts, independent of
database schema. The string-valued enums below are the closed set of values
the store accepts for roles, kinds, channels, modes and sources.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class PartyRole(str, Enum):
    """Role a party plays towards the business."""

    CUSTOMER = "CUSTOMER"
    SELLER = "SELLER"
    BOTH = "BOTH"


class LedgerEntryKind(str, Enum):
    """Kind of accrual recorded against a party."""

    DEBIT = "DEBIT"
    CREDIT = "CREDIT"
    PURCHASE = "PURCHASE"


class PaymentChannel(str, Enum):
    """How money moved for a party ledger entry."""

    CASH = "CASH"
    BANK = "BANK"
    CREDIT = "CREDIT"


class CashMode(str, Enum):
    """Cash-book line mode. PURCHASE lines are record-only."""

    CASH_IN = "CASH_IN"
    CASH_OUT = "CASH_OUT"
    BANK_IN = "BANK_IN"
    BANK_OUT = "BANK_OUT"
    PURCHASE = "PURCHASE"

    @property
    def is_inflow(self) -> bool:
        return self in (CashMode.CASH_IN, CashMode.BANK_IN)

    @property
    def is_outflow(self) -> bool:
        return self in (CashMode.CASH_OUT, CashMode.BANK_OUT)


class SourceKind(str, Enum):
    """Where a cash-book line originated."""

    CUSTOMER = "CUSTOMER"
    SUPPLIER = "SUPPLIER"
    EXPENSE = "EXPENSE"
    MANUAL = "MANUAL"


class Bucket(str, Enum):
    """Display section of the daily cash book."""

    MONEY_RECEIVED = "MONEY_RECEIVED"
    DAILY_EXPENSE = "DAILY_EXPENSE"
    PURCHASE = "PURCHASE"
    PAYMENT_GIVEN = "PAYMENT_GIVEN"


@dataclass(frozen=True)
class Party:
    """Customer, supplier or both."""

    id: int
    name: str
    role: PartyRole
    opening_balance: Decimal
    created_at: datetime
    phone: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class PartyLedgerEntry:
    """One accrual against a party."""

    id: int
    party_id: int
    kind: LedgerEntryKind
    amount: Decimal
    date: date
    note: Optional[str]
    channel: PaymentChannel
    created_at: datetime
    voice_note_path: Optional[str] = None


@dataclass(frozen=True)
class CashBookEntry:
    """One line in the daily cash/bank register."""

    id: int
    date: date
    mode: CashMode
    amount: Decimal
    party_label: Optional[str]
    note: Optional[str]
    source_kind: SourceKind
    source_id: Optional[int]
    linked_ledger_entry_id: Optional[int]
    created_at: datetime


@dataclass(frozen=True)
class DailyBalance:
    """Opening and closing cash/bank snapshot for one day."""

    id: int
    date: date
    opening_cash: Decimal
    opening_bank: Decimal
    closing_cash: Decimal
    closing_bank: Decimal
    note: Optional[str]
    created_at: datetime
    opening_overridden: bool = False


@dataclass(frozen=True)
class DayTotals:
    """Cash and bank movement on one day, PURCHASE lines excluded."""

    cash_in: Decimal = Decimal("0")
    cash_out: Decimal = Decimal("0")
    bank_in: Decimal = Decimal("0")
    bank_out: Decimal = Decimal("0")

    def closing(self, opening_cash: Decimal, opening_bank: Decimal) -> tuple[Decimal, Decimal]:
        """Apply this day's movement to an opening pair."""
        return (
            opening_cash + self.cash_in - self.cash_out,
            opening_bank + self.bank_in - self.bank_out,
        )


@dataclass(frozen=True)
class PartyBalance:
    """Running position of a party.

    ``balance`` is opening balance plus debits and purchases minus credits.
    """

    party_id: int
    opening_balance: Decimal
    total_debit: Decimal
    total_credit: Decimal
    total_purchase: Decimal

    @property
    def balance(self) -> Decimal:
        return self.opening_balance + self.total_debit + self.total_purchase - self.total_credit


@dataclass(frozen=True)
class SyncOutcome:
    """Result of a sync engine step: touched rows and the days to re-propagate."""

    ledger_entry_id: Optional[int]
    cash_entry_id: Optional[int]
    dirty_dates: tuple[date, ...] = ()


@dataclass(frozen=True)
class PropagationResult:
    """Summary of one forward propagation cascade."""

    anchor: date
    last_written: Optional[date]
    days_written: tuple[date, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class LedgerChange:
    """Committed change notification handed to facade subscribers."""

    operation: str
    dates: tuple[date, ...] = ()
    party_ids: tuple[int, ...] = ()

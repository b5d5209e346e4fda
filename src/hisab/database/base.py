"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Optional

# Import entities directly to avoid circular import through domain/__init__.py
from hisab.domain.entities import (
    Party,
    PartyRole,
    PartyBalance,
    PartyLedgerEntry,
    LedgerEntryKind,
    PaymentChannel,
    CashBookEntry,
    CashMode,
    SourceKind,
    DailyBalance,
    DayTotals,
)


class Database(ABC):
    """Abstract entity store for hisab.

    Every mutating method joins the unit of work open on the calling thread,
    or runs in its own short transaction when none is open.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def unit_of_work(self) -> AbstractContextManager[Any]:
        """Open (or join) the atomic transaction boundary for this thread.

        Commits when the outermost block exits cleanly, rolls back otherwise.
        """
        pass

    # Party operations
    @abstractmethod
    def create_party(
        self,
        name: str,
        role: PartyRole,
        opening_balance: Decimal = Decimal("0"),
        phone: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Create a party. Returns party ID."""
        pass

    @abstractmethod
    def get_party(self, party_id: int) -> Optional[Party]:
        """Get party by ID."""
        pass

    @abstractmethod
    def find_party_by_name(self, name: str) -> Optional[Party]:
        """Get party by name, compared case-insensitively."""
        pass

    @abstractmethod
    def list_parties(self, role: Optional[PartyRole] = None) -> list[Party]:
        """List parties, optionally filtered by role."""
        pass

    @abstractmethod
    def update_party(
        self,
        party_id: int,
        name: Optional[str] = None,
        role: Optional[PartyRole] = None,
        opening_balance: Optional[Decimal] = None,
        phone: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> None:
        """Update party fields that are not None."""
        pass

    @abstractmethod
    def delete_party(self, party_id: int) -> list[int]:
        """Delete a party and its ledger entries.

        Mirrored cash-book rows are kept with their back-reference cleared.
        Returns the IDs of the deleted ledger entries.
        """
        pass

    # Party ledger operations
    @abstractmethod
    def create_ledger_entry(
        self,
        party_id: int,
        kind: LedgerEntryKind,
        amount: Decimal,
        date: date,
        channel: PaymentChannel,
        note: Optional[str] = None,
        voice_note_path: Optional[str] = None,
    ) -> int:
        """Create a party ledger entry. Returns entry ID."""
        pass

    @abstractmethod
    def get_ledger_entry(self, entry_id: int) -> Optional[PartyLedgerEntry]:
        """Get party ledger entry by ID."""
        pass

    @abstractmethod
    def update_ledger_entry(
        self,
        entry_id: int,
        kind: Optional[LedgerEntryKind] = None,
        amount: Optional[Decimal] = None,
        date: Optional[date] = None,
        channel: Optional[PaymentChannel] = None,
        note: Optional[str] = None,
        update_note: bool = False,
    ) -> None:
        """Update ledger entry fields.

        Args:
            update_note: If True, write ``note`` even when it is None (to clear it)
        """
        pass

    @abstractmethod
    def delete_ledger_entry(self, entry_id: int) -> None:
        """Delete a party ledger entry."""
        pass

    @abstractmethod
    def list_ledger_entries(
        self,
        party_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[PartyLedgerEntry]:
        """List ledger entries, newest first."""
        pass

    @abstractmethod
    def get_party_balance(self, party_id: int) -> Optional[PartyBalance]:
        """Aggregate a party's debits, credits and purchases."""
        pass

    # Cash book operations
    @abstractmethod
    def create_cash_entry(
        self,
        date: date,
        mode: CashMode,
        amount: Decimal,
        party_label: Optional[str] = None,
        note: Optional[str] = None,
        source_kind: SourceKind = SourceKind.MANUAL,
        source_id: Optional[int] = None,
        linked_ledger_entry_id: Optional[int] = None,
    ) -> int:
        """Create a cash-book entry. Returns entry ID."""
        pass

    @abstractmethod
    def get_cash_entry(self, entry_id: int) -> Optional[CashBookEntry]:
        """Get cash-book entry by ID."""
        pass

    @abstractmethod
    def find_cash_entries_for_ledger_entry(self, ledger_entry_id: int) -> list[CashBookEntry]:
        """Get the cash-book rows whose back-reference points at a ledger entry."""
        pass

    @abstractmethod
    def update_cash_entry(
        self,
        entry_id: int,
        mode: Optional[CashMode] = None,
        amount: Optional[Decimal] = None,
        date: Optional[date] = None,
        party_label: Optional[str] = None,
        note: Optional[str] = None,
        source_kind: Optional[SourceKind] = None,
        update_note: bool = False,
    ) -> None:
        """Update cash-book entry fields.

        Args:
            update_note: If True, write ``note`` even when it is None (to clear it)
        """
        pass

    @abstractmethod
    def delete_cash_entry(self, entry_id: int) -> None:
        """Delete a cash-book entry."""
        pass

    @abstractmethod
    def list_cash_entries(
        self,
        day: Optional[date] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[CashBookEntry]:
        """List cash-book entries in day order, then creation order."""
        pass

    @abstractmethod
    def list_cash_entries_for_source(
        self, source_id: int, source_kinds: Iterable[SourceKind]
    ) -> list[CashBookEntry]:
        """List cash-book entries originating from a given source."""
        pass

    @abstractmethod
    def get_totals_by_date(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> dict[date, DayTotals]:
        """Sum cash/bank movement per day.

        Every day with at least one cash-book row is present, including days
        whose only rows are record-only PURCHASE lines.
        """
        pass

    # Daily balance operations
    @abstractmethod
    def get_daily_balance(self, day: date) -> Optional[DailyBalance]:
        """Get the snapshot for a day."""
        pass

    @abstractmethod
    def get_previous_daily_balance(self, day: date) -> Optional[DailyBalance]:
        """Get the latest snapshot strictly before a day."""
        pass

    @abstractmethod
    def list_daily_balances(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[DailyBalance]:
        """List snapshots in ascending date order."""
        pass

    @abstractmethod
    def upsert_daily_balance(
        self,
        day: date,
        opening_cash: Decimal,
        opening_bank: Decimal,
        closing_cash: Decimal,
        closing_bank: Decimal,
        opening_overridden: bool = False,
        note: Optional[str] = None,
    ) -> int:
        """Insert or update the snapshot for a day. Returns snapshot ID.

        An existing note is kept when ``note`` is None.
        """
        pass

    @abstractmethod
    def delete_daily_balance(self, day: date) -> None:
        """Delete the snapshot for a day."""
        pass

    @abstractmethod
    def get_earliest_date(self) -> Optional[date]:
        """Earliest day with a snapshot or cash-book activity."""
        pass

    # Raw row access for backup/restore
    @abstractmethod
    def export_snapshot(self) -> dict[str, list[dict[str, Any]]]:
        """Dump every table as a list of raw rows keyed by column name."""
        pass

    @abstractmethod
    def import_snapshot(self, snapshot: dict[str, list[dict[str, Any]]]) -> None:
        """Replace every table's contents with the given raw rows."""
        pass

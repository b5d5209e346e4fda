"""Single entry point for every mutating ledger operation.

Each facade call is one unit of work: store writes, mirror repair and
balance propagation from every affected day run inside one database
transaction and either all commit or all roll back. Calls are serialized
through one writer lock; ``submit`` queues them on a single background
worker instead.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Iterable, Optional

from hisab.database.base import Database
from hisab.domain.balance import BalancePropagator
from hisab.domain.categorizer import DEFAULT_CONFIG, CategorizerConfig, group_by_bucket
from hisab.domain.entities import (
    Bucket,
    CashBookEntry,
    CashMode,
    DailyBalance,
    LedgerChange,
    LedgerEntryKind,
    PartyBalance,
    PartyLedgerEntry,
    PartyRole,
    PaymentChannel,
    PropagationResult,
    SyncOutcome,
)
from hisab.domain.errors import NotFoundError, daily_balance_not_found, ledger_entry_not_found
from hisab.domain.party import PartyService
from hisab.domain.sync import LedgerSyncEngine
from hisab.utils.date_parser import DateLike, normalize_date, today

logger = logging.getLogger(__name__)

ChangeListener = Callable[[LedgerChange], None]


class LedgerFacade:
    """Atomic ledger operations over one database."""

    def __init__(self, db: Database, categorizer_config: CategorizerConfig = DEFAULT_CONFIG):
        """Initialize ledger facade.

        Args:
            db: Database instance
            categorizer_config: Heuristics used for the sectioned day view
        """
        self.db = db
        self.parties = PartyService(db)
        self.sync = LedgerSyncEngine(db)
        self.propagator = BalancePropagator(db)
        self.categorizer_config = categorizer_config
        self._write_lock = threading.RLock()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._listeners: list[ChangeListener] = []

    # Background queue and notifications
    def submit(self, operation: Callable[..., Any], *args, **kwargs) -> Future:
        """Run a facade operation on the single background writer.

        ``operation`` is usually a bound method of this facade, e.g.
        ``facade.submit(facade.add_receipt, party_id, amount, day)``.
        """
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="hisab-writer")
        return self._executor.submit(operation, *args, **kwargs)

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Register a callback run after every committed unit of work.

        Returns:
            A function that unregisters the callback
        """
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def close(self) -> None:
        """Drain queued operations and stop the background writer."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def _run(
        self,
        operation: str,
        work: Callable[[], SyncOutcome],
        party_ids: Iterable[int] = (),
    ) -> SyncOutcome:
        with self._write_lock:
            with self.db.unit_of_work():
                outcome = work()
                for day in sorted(set(outcome.dirty_dates)):
                    self.propagator.propagate_forward(day)
            logger.info("%s committed (dirty days: %s)", operation, _days(outcome.dirty_dates))
        self._notify(LedgerChange(operation, tuple(sorted(set(outcome.dirty_dates))), tuple(party_ids)))
        return outcome

    def _notify(self, change: LedgerChange) -> None:
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                logger.exception("Change listener failed for %s", change.operation)

    # Party ledger transactions
    def add_receipt(
        self,
        party_id: int,
        amount: Decimal,
        date: DateLike,
        channel: PaymentChannel = PaymentChannel.CASH,
        note: Optional[str] = None,
        voice_note_path: Optional[str] = None,
    ) -> SyncOutcome:
        """Record money received from a party (DEBIT)."""
        return self._record(
            "add_receipt", LedgerEntryKind.DEBIT, party_id, amount, date, channel, note, voice_note_path
        )

    def add_payment(
        self,
        party_id: int,
        amount: Decimal,
        date: DateLike,
        channel: PaymentChannel = PaymentChannel.CASH,
        note: Optional[str] = None,
        voice_note_path: Optional[str] = None,
    ) -> SyncOutcome:
        """Record money given to a party (CREDIT)."""
        return self._record(
            "add_payment", LedgerEntryKind.CREDIT, party_id, amount, date, channel, note, voice_note_path
        )

    def add_purchase(
        self,
        party_id: int,
        amount: Decimal,
        date: DateLike,
        channel: PaymentChannel = PaymentChannel.CREDIT,
        note: Optional[str] = None,
        voice_note_path: Optional[str] = None,
    ) -> SyncOutcome:
        """Record goods bought from a party. The cash book gets a record-only line."""
        return self._record(
            "add_purchase", LedgerEntryKind.PURCHASE, party_id, amount, date, channel, note, voice_note_path
        )

    def _record(self, operation, kind, party_id, amount, date, channel, note, voice_note_path) -> SyncOutcome:
        def work() -> SyncOutcome:
            entry_id, cash_entry_id = self.sync.record_receipt_or_payment(
                party_id,
                kind=kind,
                amount=amount,
                date=date,
                channel=channel,
                note=note,
                voice_note_path=voice_note_path,
            )
            return SyncOutcome(entry_id, cash_entry_id, (normalize_date(date),))

        return self._run(operation, work, party_ids=(party_id,))

    def edit_transaction(
        self,
        entry_id: int,
        amount: Optional[Decimal] = None,
        kind: Optional[LedgerEntryKind] = None,
        channel: Optional[PaymentChannel] = None,
        note: Optional[str] = None,
        date: Optional[DateLike] = None,
    ) -> SyncOutcome:
        """Edit a party ledger entry; moving it re-propagates both days."""
        entry = self._require_ledger_entry(entry_id)
        return self._run(
            "edit_transaction",
            lambda: self.sync.update_with_sync(
                entry_id, amount=amount, kind=kind, channel=channel, note=note, date=date
            ),
            party_ids=(entry.party_id,),
        )

    def delete_transaction(self, entry_id: int) -> SyncOutcome:
        """Delete a party ledger entry and its mirror.

        An attached recording is removed only after the deletion commits.
        """
        entry = self._require_ledger_entry(entry_id)
        outcome = self._run(
            "delete_transaction",
            lambda: self.sync.delete_with_sync(entry_id, remove_artifact=False),
            party_ids=(entry.party_id,),
        )
        if entry.voice_note_path:
            self.sync.discard_artifact(entry.voice_note_path)
        return outcome

    # Parties
    def create_party(
        self,
        name: str,
        role: PartyRole = PartyRole.CUSTOMER,
        opening_balance: Decimal = Decimal("0"),
        phone: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        with self._write_lock:
            party_id = self.parties.create_party(
                name, role=role, opening_balance=opening_balance, phone=phone, notes=notes
            )
        logger.info("Created party %s (%s)", party_id, name)
        self._notify(LedgerChange("create_party", party_ids=(party_id,)))
        return party_id

    def update_party(
        self,
        party_id: int,
        role: Optional[PartyRole] = None,
        opening_balance: Optional[Decimal] = None,
        phone: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> None:
        """Update party details other than the name."""
        with self._write_lock:
            self.parties.update_party(
                party_id, role=role, opening_balance=opening_balance, phone=phone, notes=notes
            )
        self._notify(LedgerChange("update_party", party_ids=(party_id,)))

    def rename_party(self, party_id: int, new_name: str) -> SyncOutcome:
        """Rename a party and rewrite its name on every cash-book line."""

        def work() -> SyncOutcome:
            party = self.parties.require_party(party_id)
            self.parties.update_party(party_id, name=new_name)
            self.sync.rename_party_everywhere(party_id, party.name, new_name.strip())
            return SyncOutcome(None, None)

        return self._run("rename_party", work, party_ids=(party_id,))

    def delete_party(self, party_id: int) -> SyncOutcome:
        """Delete a party and its ledger entries.

        Cash-book lines stay, so balances are unchanged; the lines merely
        lose their link to the deleted entries.
        """

        def work() -> SyncOutcome:
            self.parties.delete_party(party_id)
            return SyncOutcome(None, None)

        return self._run("delete_party", work, party_ids=(party_id,))

    # Cash book
    def add_cash_entry(
        self,
        date: DateLike,
        mode: CashMode,
        amount: Decimal,
        party_label: Optional[str] = None,
        note: Optional[str] = None,
    ) -> SyncOutcome:
        return self._run(
            "add_cash_entry",
            lambda: self.sync.record_cash_entry(date, mode, amount, party_label=party_label, note=note),
        )

    def add_expense(
        self,
        date: DateLike,
        amount: Decimal,
        note: str,
        channel: PaymentChannel = PaymentChannel.CASH,
    ) -> SyncOutcome:
        return self._run(
            "add_expense",
            lambda: self.sync.record_expense(date, amount, channel=channel, note=note),
        )

    def edit_cash_entry(
        self,
        cash_entry_id: int,
        amount: Optional[Decimal] = None,
        channel: Optional[PaymentChannel] = None,
        party_label: Optional[str] = None,
        note: Optional[str] = None,
        date: Optional[DateLike] = None,
    ) -> SyncOutcome:
        return self._run(
            "edit_cash_entry",
            lambda: self.sync.update_cash_entry_with_sync(
                cash_entry_id,
                amount=amount,
                channel=channel,
                party_label=party_label,
                note=note,
                date=date,
            ),
        )

    def delete_cash_entry(self, cash_entry_id: int) -> SyncOutcome:
        cash_entry = self.db.get_cash_entry(cash_entry_id)
        linked = None
        if cash_entry is not None and cash_entry.linked_ledger_entry_id is not None:
            linked = self.db.get_ledger_entry(cash_entry.linked_ledger_entry_id)
        outcome = self._run(
            "delete_cash_entry",
            lambda: self.sync.delete_cash_entry_with_sync(cash_entry_id, remove_artifact=False),
        )
        if linked is not None and linked.voice_note_path:
            self.sync.discard_artifact(linked.voice_note_path)
        return outcome

    # Daily balances
    def set_opening(self, day: DateLike, opening_cash: Decimal, opening_bank: Decimal) -> PropagationResult:
        """Override a day's opening balances and rebuild every later day."""
        day = normalize_date(day)
        with self._write_lock:
            result = self.propagator.set_opening(day, Decimal(str(opening_cash)), Decimal(str(opening_bank)))
        logger.info("Opening for %s set to cash %s, bank %s", day, opening_cash, opening_bank)
        self._notify(LedgerChange("set_opening", result.days_written))
        return result

    def ensure_today(self, day: Optional[DateLike] = None) -> DailyBalance:
        """Create today's snapshot (or ``day``'s) if it doesn't exist yet."""
        with self._write_lock:
            return self.propagator.ensure_day(day)

    def delete_daily_balance(self, day: DateLike) -> None:
        """Delete one day's snapshot without touching any other day."""
        day = normalize_date(day)
        with self._write_lock:
            self.db.delete_daily_balance(day)
        self._notify(LedgerChange("delete_daily_balance", (day,)))

    def recalculate(self, from_date: Optional[DateLike] = None) -> PropagationResult:
        """Rebuild snapshots from ``from_date`` or, by default, from the earliest day."""
        with self._write_lock:
            if from_date is None:
                result = self.propagator.propagate_all()
            else:
                result = self.propagator.propagate_forward(from_date)
        self._notify(LedgerChange("recalculate", result.days_written))
        return result

    def restore(self, snapshot: dict[str, list[dict[str, Any]]]) -> PropagationResult:
        """Replace all data with a backup and rebuild every snapshot."""
        with self._write_lock:
            with self.db.unit_of_work():
                self.db.import_snapshot(snapshot)
                result = self.propagator.propagate_all()
        logger.info("Restored backup, %d day(s) rebuilt", len(result.days_written))
        self._notify(LedgerChange("restore", result.days_written))
        return result

    def export(self) -> dict[str, list[dict[str, Any]]]:
        return self.db.export_snapshot()

    # Reads
    def balance_for_date(self, day: DateLike) -> DailyBalance:
        day = normalize_date(day)
        balance = self.db.get_daily_balance(day)
        if balance is None:
            raise NotFoundError(daily_balance_not_found(day))
        return balance

    def ledger_entries_for_party(
        self,
        party_id: int,
        start_date: Optional[DateLike] = None,
        end_date: Optional[DateLike] = None,
    ) -> list[PartyLedgerEntry]:
        self.parties.require_party(party_id)
        return self.db.list_ledger_entries(
            party_id=party_id,
            start_date=normalize_date(start_date) if start_date is not None else None,
            end_date=normalize_date(end_date) if end_date is not None else None,
        )

    def cash_book_entries_for_date(self, day: DateLike) -> list[CashBookEntry]:
        return self.db.list_cash_entries(day=normalize_date(day))

    def party_balance(self, party_id: int) -> PartyBalance:
        return self.parties.get_balance(party_id)

    def day_sections(self, day: Optional[DateLike] = None) -> dict[Bucket, list[CashBookEntry]]:
        """Cash-book lines of a day split into the four display sections."""
        day = normalize_date(day) if day is not None else today()
        return group_by_bucket(self.cash_book_entries_for_date(day), self.categorizer_config)

    def _require_ledger_entry(self, entry_id: int) -> PartyLedgerEntry:
        entry = self.db.get_ledger_entry(entry_id)
        if entry is None:
            raise NotFoundError(ledger_entry_not_found(entry_id))
        return entry


def _days(days: Iterable[date]) -> str:
    return ", ".join(d.isoformat() for d in sorted(set(days))) or "none"

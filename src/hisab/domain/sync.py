"""Mirror maintenance between party ledger entries and the cash book.

Every party ledger entry owns exactly one cash-book mirror, found through the
mirror's ``linked_ledger_entry_id`` back-reference. The ledger entry itself
never knows about its mirror; all repair logic lives here. Methods return the
days whose balances went stale and leave propagation to the caller.
"""

import logging
import os
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional

from hisab.database.base import Database
from hisab.domain.entities import (
    CashMode,
    LedgerEntryKind,
    Party,
    PartyLedgerEntry,
    PartyRole,
    PaymentChannel,
    SourceKind,
    SyncOutcome,
)
from hisab.domain.errors import (
    NotFoundError,
    SideArtifactError,
    ValidationError,
    blank_field,
    cash_entry_not_found,
    invalid_amount,
    ledger_entry_not_found,
    no_cash_mapping,
    non_positive_amount,
    party_not_found,
)
from hisab.utils.date_parser import DateLike, normalize_date

logger = logging.getLogger(__name__)

_MODE_BY_KIND_AND_CHANNEL = {
    (LedgerEntryKind.DEBIT, PaymentChannel.CASH): CashMode.CASH_IN,
    (LedgerEntryKind.DEBIT, PaymentChannel.BANK): CashMode.BANK_IN,
    (LedgerEntryKind.CREDIT, PaymentChannel.CASH): CashMode.CASH_OUT,
    (LedgerEntryKind.CREDIT, PaymentChannel.BANK): CashMode.BANK_OUT,
}

# Notes written on a mirror when the caller supplies none. Renames rewrite
# only notes that still match one of these.
AUTO_NOTE_TEMPLATES = {
    LedgerEntryKind.DEBIT: "Received from {name}",
    LedgerEntryKind.CREDIT: "Payment to {name}",
    LedgerEntryKind.PURCHASE: "Purchase from {name}",
}

PARTY_SOURCES = (SourceKind.CUSTOMER, SourceKind.SUPPLIER)
CENT = Decimal("0.01")


def mode_for(kind: LedgerEntryKind, channel: PaymentChannel) -> CashMode:
    """Cash-book mode mirroring a ledger entry of ``kind`` paid via ``channel``.

    Raises:
        ValidationError: If a DEBIT/CREDIT entry uses the CREDIT channel
    """
    if kind == LedgerEntryKind.PURCHASE:
        return CashMode.PURCHASE
    try:
        return _MODE_BY_KIND_AND_CHANNEL[(kind, channel)]
    except KeyError:
        raise ValidationError(no_cash_mapping(kind.value, channel.value))


def auto_note(kind: LedgerEntryKind, party_name: str) -> str:
    return AUTO_NOTE_TEMPLATES[kind].format(name=party_name)


def require_positive(amount) -> Decimal:
    """Return ``amount`` rounded to cents, rejecting zero and negatives.

    Amounts are stored with two decimal places, so the check runs on the
    rounded value.
    """
    try:
        value = Decimal(str(amount))
        if value.is_finite():
            value = value.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValidationError(invalid_amount(amount))
    if not value.is_finite() or value <= 0:
        raise ValidationError(non_positive_amount(amount))
    return value


def remove_side_artifact(path: str) -> None:
    """Delete a file attached to an entry.

    Raises:
        SideArtifactError: If the file exists but cannot be removed
    """
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        raise SideArtifactError(f"Could not remove attachment '{path}': {e}") from e


class LedgerSyncEngine:
    """Keeps party ledger entries and their cash-book mirrors consistent."""

    def __init__(self, db: Database):
        """Initialize sync engine.

        Args:
            db: Database instance
        """
        self.db = db

    def record_receipt_or_payment(
        self,
        party_id: int,
        kind: LedgerEntryKind,
        amount: Decimal,
        date: DateLike,
        channel: PaymentChannel = PaymentChannel.CASH,
        note: Optional[str] = None,
        voice_note_path: Optional[str] = None,
    ) -> tuple[int, int]:
        """Insert a ledger entry and its cash-book mirror.

        DEBIT/CREDIT entries mirror as cash or bank movement; PURCHASE entries
        mirror as a record-only PURCHASE line.

        Args:
            party_id: Party the entry accrues against
            kind: DEBIT (money received), CREDIT (money given) or PURCHASE
            amount: Positive amount
            date: Day of the entry
            channel: CASH or BANK (CREDIT only for purchases)
            note: Optional free text
            voice_note_path: Optional attached recording

        Returns:
            Tuple of (ledger entry ID, cash-book entry ID)

        Raises:
            ValidationError: If amount is not positive or kind/channel mismatch
            NotFoundError: If party doesn't exist
        """
        kind = LedgerEntryKind(kind)
        channel = PaymentChannel(channel)
        amount = require_positive(amount)
        day = normalize_date(date)
        mode = mode_for(kind, channel)
        note = _clean(note)

        with self.db.unit_of_work():
            party = self._require_party(party_id)
            entry_id = self.db.create_ledger_entry(
                party_id=party.id,
                kind=kind,
                amount=amount,
                date=day,
                channel=channel,
                note=note,
                voice_note_path=voice_note_path,
            )
            cash_entry_id = self.db.create_cash_entry(
                date=day,
                mode=mode,
                amount=amount,
                party_label=party.name,
                note=note or auto_note(kind, party.name),
                source_kind=_source_kind(party, kind),
                source_id=party.id,
                linked_ledger_entry_id=entry_id,
            )

        logger.debug(
            "Recorded %s of %s for party %s on %s (entry %s, mirror %s)",
            kind.value, amount, party_id, day, entry_id, cash_entry_id,
        )
        return entry_id, cash_entry_id

    def update_with_sync(
        self,
        entry_id: int,
        amount: Optional[Decimal] = None,
        kind: Optional[LedgerEntryKind] = None,
        channel: Optional[PaymentChannel] = None,
        note: Optional[str] = None,
        date: Optional[DateLike] = None,
        update_note: bool = False,
    ) -> SyncOutcome:
        """Update a ledger entry and its mirror together.

        A date change is a move: the mirror is deleted and recreated on the
        new day, and both days come back dirty. Otherwise the mirror is
        patched in place so its identity survives.

        Args:
            entry_id: Ledger entry to update
            amount: Optional new amount
            kind: Optional new kind
            channel: Optional new channel
            note: Optional new note
            date: Optional new day
            update_note: If True, write ``note`` even when it is None (to clear it)

        Raises:
            NotFoundError: If the entry or its party doesn't exist
            ValidationError: If the new values are invalid
        """
        with self.db.unit_of_work():
            entry = self._require_ledger_entry(entry_id)
            party = self._require_party(entry.party_id)

            new_kind = LedgerEntryKind(kind) if kind is not None else entry.kind
            new_channel = PaymentChannel(channel) if channel is not None else entry.channel
            new_amount = require_positive(amount) if amount is not None else entry.amount
            new_day = normalize_date(date) if date is not None else entry.date
            new_note = _clean(note) if (update_note or note is not None) else entry.note
            new_mode = mode_for(new_kind, new_channel)

            self.db.update_ledger_entry(
                entry_id,
                kind=new_kind,
                amount=new_amount,
                date=new_day,
                channel=new_channel,
                note=new_note,
                update_note=True,
            )

            mirrors = self.db.find_cash_entries_for_ledger_entry(entry_id)
            mirror_note = new_note or auto_note(new_kind, party.name)
            source_kind = _source_kind(party, new_kind)

            if new_day != entry.date or not mirrors:
                for mirror in mirrors:
                    self.db.delete_cash_entry(mirror.id)
                cash_entry_id = self.db.create_cash_entry(
                    date=new_day,
                    mode=new_mode,
                    amount=new_amount,
                    party_label=mirrors[0].party_label if mirrors else party.name,
                    note=mirror_note,
                    source_kind=source_kind,
                    source_id=party.id,
                    linked_ledger_entry_id=entry_id,
                )
                dirty = tuple(sorted({entry.date, new_day}))
                if mirrors:
                    logger.debug("Moved entry %s from %s to %s", entry_id, entry.date, new_day)
                else:
                    logger.warning("Entry %s had no cash book mirror; recreated it", entry_id)
            else:
                primary, extras = mirrors[0], mirrors[1:]
                for extra in extras:
                    logger.warning("Removing duplicate mirror %s of entry %s", extra.id, entry_id)
                    self.db.delete_cash_entry(extra.id)
                self.db.update_cash_entry(
                    primary.id,
                    mode=new_mode,
                    amount=new_amount,
                    note=mirror_note,
                    source_kind=source_kind,
                    update_note=True,
                )
                cash_entry_id = primary.id
                dirty = (new_day,)

        return SyncOutcome(ledger_entry_id=entry_id, cash_entry_id=cash_entry_id, dirty_dates=dirty)

    def delete_with_sync(self, entry_id: int, remove_artifact: bool = True) -> SyncOutcome:
        """Delete a ledger entry, its mirror, and its attachment.

        The attachment is removed best-effort; failures are logged only.
        Callers inside a larger unit of work pass ``remove_artifact=False``
        and discard the file once their transaction commits.

        Raises:
            NotFoundError: If the entry doesn't exist
        """
        with self.db.unit_of_work():
            entry = self._require_ledger_entry(entry_id)
            for mirror in self.db.find_cash_entries_for_ledger_entry(entry_id):
                self.db.delete_cash_entry(mirror.id)
            self.db.delete_ledger_entry(entry_id)

        if remove_artifact and entry.voice_note_path:
            self.discard_artifact(entry.voice_note_path)

        logger.debug("Deleted entry %s and its mirror on %s", entry_id, entry.date)
        return SyncOutcome(ledger_entry_id=entry_id, cash_entry_id=None, dirty_dates=(entry.date,))

    def discard_artifact(self, path: str) -> bool:
        """Remove an attachment file, logging instead of raising on failure."""
        try:
            remove_side_artifact(path)
        except SideArtifactError as e:
            logger.warning("%s", e)
            return False
        return True

    def rename_party_everywhere(self, party_id: int, old_name: str, new_name: str) -> int:
        """Rewrite a party's denormalized name on cash-book rows and generated notes.

        Cash-book rows store the party name as a display label, so a rename
        has to be pushed to every CUSTOMER/SUPPLIER row sourced from the
        party. Notes are rewritten only where they are still the generated
        text naming the old name.

        Returns:
            Number of rows changed
        """
        changed = 0
        with self.db.unit_of_work():
            for cash_entry in self.db.list_cash_entries_for_source(party_id, PARTY_SOURCES):
                new_note = _renamed_note(cash_entry.note, old_name, new_name)
                if cash_entry.party_label != new_name or new_note != cash_entry.note:
                    self.db.update_cash_entry(
                        cash_entry.id, party_label=new_name, note=new_note, update_note=True
                    )
                    changed += 1

            for entry in self.db.list_ledger_entries(party_id=party_id):
                new_note = _renamed_note(entry.note, old_name, new_name)
                if new_note != entry.note:
                    self.db.update_ledger_entry(entry.id, note=new_note, update_note=True)
                    changed += 1

        logger.debug("Renamed party %s from %r to %r on %d row(s)", party_id, old_name, new_name, changed)
        return changed

    # Cash-book side operations
    def record_cash_entry(
        self,
        date: DateLike,
        mode: CashMode,
        amount: Decimal,
        party_label: Optional[str] = None,
        note: Optional[str] = None,
    ) -> SyncOutcome:
        """Insert a manual cash-book line with no party ledger entry."""
        mode = CashMode(mode)
        amount = require_positive(amount)
        day = normalize_date(date)
        cash_entry_id = self.db.create_cash_entry(
            date=day,
            mode=mode,
            amount=amount,
            party_label=_clean(party_label),
            note=_clean(note),
            source_kind=SourceKind.MANUAL,
        )
        return SyncOutcome(ledger_entry_id=None, cash_entry_id=cash_entry_id, dirty_dates=(day,))

    def record_expense(
        self,
        date: DateLike,
        amount: Decimal,
        channel: PaymentChannel = PaymentChannel.CASH,
        note: Optional[str] = None,
    ) -> SyncOutcome:
        """Insert a daily expense as an outflow sourced from EXPENSE.

        Raises:
            ValidationError: If the note is blank or the channel is CREDIT
        """
        channel = PaymentChannel(channel)
        amount = require_positive(amount)
        note = _clean(note)
        if note is None:
            raise ValidationError(blank_field("Expense note"))
        day = normalize_date(date)
        mode = mode_for(LedgerEntryKind.CREDIT, channel)
        cash_entry_id = self.db.create_cash_entry(
            date=day,
            mode=mode,
            amount=amount,
            note=note,
            source_kind=SourceKind.EXPENSE,
        )
        return SyncOutcome(ledger_entry_id=None, cash_entry_id=cash_entry_id, dirty_dates=(day,))

    def update_cash_entry_with_sync(
        self,
        cash_entry_id: int,
        amount: Optional[Decimal] = None,
        channel: Optional[PaymentChannel] = None,
        party_label: Optional[str] = None,
        note: Optional[str] = None,
        date: Optional[DateLike] = None,
    ) -> SyncOutcome:
        """Edit a cash-book line and push the change to its ledger entry.

        The line keeps its direction: an inflow stays an inflow when the
        channel changes. Linked lines follow the ledger entry's rules, so a
        date change on them is a move.

        Raises:
            NotFoundError: If the cash-book entry doesn't exist
            ValidationError: If the new values are invalid
        """
        with self.db.unit_of_work():
            cash_entry = self.db.get_cash_entry(cash_entry_id)
            if cash_entry is None:
                raise NotFoundError(cash_entry_not_found(cash_entry_id))

            linked = None
            if cash_entry.linked_ledger_entry_id is not None:
                linked = self.db.get_ledger_entry(cash_entry.linked_ledger_entry_id)

            if linked is not None:
                outcome = self.update_with_sync(
                    linked.id,
                    amount=amount,
                    channel=channel if linked.kind != LedgerEntryKind.PURCHASE else None,
                    note=note,
                    date=date,
                )
                if party_label is not None:
                    self.db.update_cash_entry(outcome.cash_entry_id, party_label=party_label)
                return outcome

            new_mode = _redirect(cash_entry.mode, channel) if channel is not None else cash_entry.mode
            new_day = normalize_date(date) if date is not None else cash_entry.date
            self.db.update_cash_entry(
                cash_entry_id,
                mode=new_mode,
                amount=require_positive(amount) if amount is not None else None,
                date=new_day,
                party_label=party_label,
                note=_clean(note),
                update_note=note is not None,
            )
        return SyncOutcome(
            ledger_entry_id=None,
            cash_entry_id=cash_entry_id,
            dirty_dates=tuple(sorted({cash_entry.date, new_day})),
        )

    def delete_cash_entry_with_sync(self, cash_entry_id: int, remove_artifact: bool = True) -> SyncOutcome:
        """Delete a cash-book line together with its linked ledger entry.

        Raises:
            NotFoundError: If the cash-book entry doesn't exist
        """
        with self.db.unit_of_work():
            cash_entry = self.db.get_cash_entry(cash_entry_id)
            if cash_entry is None:
                raise NotFoundError(cash_entry_not_found(cash_entry_id))
            if cash_entry.linked_ledger_entry_id is not None:
                linked = self.db.get_ledger_entry(cash_entry.linked_ledger_entry_id)
                if linked is not None:
                    outcome = self.delete_with_sync(linked.id, remove_artifact=remove_artifact)
                    return SyncOutcome(
                        ledger_entry_id=linked.id,
                        cash_entry_id=cash_entry_id,
                        dirty_dates=tuple(sorted({cash_entry.date, *outcome.dirty_dates})),
                    )
            self.db.delete_cash_entry(cash_entry_id)
        return SyncOutcome(ledger_entry_id=None, cash_entry_id=cash_entry_id, dirty_dates=(cash_entry.date,))

    def _require_party(self, party_id: int) -> Party:
        party = self.db.get_party(party_id)
        if party is None:
            raise NotFoundError(party_not_found(party_id))
        return party

    def _require_ledger_entry(self, entry_id: int) -> PartyLedgerEntry:
        entry = self.db.get_ledger_entry(entry_id)
        if entry is None:
            raise NotFoundError(ledger_entry_not_found(entry_id))
        return entry


def _source_kind(party: Party, kind: LedgerEntryKind) -> SourceKind:
    if kind == LedgerEntryKind.PURCHASE or party.role == PartyRole.SELLER:
        return SourceKind.SUPPLIER
    return SourceKind.CUSTOMER


def _redirect(mode: CashMode, channel: PaymentChannel) -> CashMode:
    if mode == CashMode.PURCHASE:
        return mode
    kind = LedgerEntryKind.DEBIT if mode.is_inflow else LedgerEntryKind.CREDIT
    return mode_for(kind, PaymentChannel(channel))


def _renamed_note(note: Optional[str], old_name: str, new_name: str) -> Optional[str]:
    if not note:
        return note
    for template in AUTO_NOTE_TEMPLATES.values():
        if note.casefold() == template.format(name=old_name).casefold():
            return template.format(name=new_name)
    return note


def _clean(text: Optional[str]) -> Optional[str]:
    if text is None:
        return None
    text = text.strip()
    return text or None

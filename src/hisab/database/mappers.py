"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so domain services never hold live
ORM objects across a unit of work.
"""

from hisab.domain import entities as domain
from hisab.database.models import (
    Party as ORMParty,
    PartyLedgerEntry as ORMPartyLedgerEntry,
    CashBookEntry as ORMCashBookEntry,
    DailyBalance as ORMDailyBalance,
)


def party_to_domain(orm_party: ORMParty) -> domain.Party:
    """Convert SQLAlchemy Party model to domain Party entity."""
    return domain.Party(
        id=orm_party.id,
        name=orm_party.name,
        role=domain.PartyRole(orm_party.role),
        opening_balance=orm_party.opening_balance,
        created_at=orm_party.created_at,
        phone=orm_party.phone,
        notes=orm_party.notes,
    )


def ledger_entry_to_domain(orm_entry: ORMPartyLedgerEntry) -> domain.PartyLedgerEntry:
    """Convert SQLAlchemy PartyLedgerEntry model to domain entity."""
    return domain.PartyLedgerEntry(
        id=orm_entry.id,
        party_id=orm_entry.party_id,
        kind=domain.LedgerEntryKind(orm_entry.kind),
        amount=orm_entry.amount,
        date=orm_entry.date,
        note=orm_entry.note,
        channel=domain.PaymentChannel(orm_entry.channel),
        created_at=orm_entry.created_at,
        voice_note_path=orm_entry.voice_note_path,
    )


def cash_entry_to_domain(orm_entry: ORMCashBookEntry) -> domain.CashBookEntry:
    """Convert SQLAlchemy CashBookEntry model to domain entity."""
    return domain.CashBookEntry(
        id=orm_entry.id,
        date=orm_entry.date,
        mode=domain.CashMode(orm_entry.mode),
        amount=orm_entry.amount,
        party_label=orm_entry.party_label,
        note=orm_entry.note,
        source_kind=domain.SourceKind(orm_entry.source_kind),
        source_id=orm_entry.source_id,
        linked_ledger_entry_id=orm_entry.linked_ledger_entry_id,
        created_at=orm_entry.created_at,
    )


def daily_balance_to_domain(orm_balance: ORMDailyBalance) -> domain.DailyBalance:
    """Convert SQLAlchemy DailyBalance model to domain entity."""
    return domain.DailyBalance(
        id=orm_balance.id,
        date=orm_balance.date,
        opening_cash=orm_balance.opening_cash,
        opening_bank=orm_balance.opening_bank,
        closing_cash=orm_balance.closing_cash,
        closing_bank=orm_balance.closing_bank,
        note=orm_balance.note,
        created_at=orm_balance.created_at,
        opening_overridden=bool(orm_balance.opening_overridden),
    )

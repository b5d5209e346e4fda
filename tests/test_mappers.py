"""Tests for database mappers."""

import pytest
from datetime import datetime, date, UTC
from decimal import Decimal

from hisab.database.models import (
    Party as ORMParty,
    PartyLedgerEntry as ORMPartyLedgerEntry,
    CashBookEntry as ORMCashBookEntry,
    DailyBalance as ORMDailyBalance,
)
from hisab.database.mappers import (
    party_to_domain,
    ledger_entry_to_domain,
    cash_entry_to_domain,
    daily_balance_to_domain,
)
from hisab.domain.entities import (
    Party,
    PartyRole,
    PartyLedgerEntry,
    LedgerEntryKind,
    PaymentChannel,
    CashBookEntry,
    CashMode,
    SourceKind,
    DailyBalance,
)


class TestPartyMapper:
    """Tests for Party mapper."""

    def test_party_to_domain(self):
        """Test converting ORM Party to domain Party."""
        orm_party = ORMParty(
            id=1,
            name="Aijaz",
            role="SELLER",
            opening_balance=Decimal("250.00"),
            phone="98765",
            created_at=datetime.now(UTC),
        )

        party = party_to_domain(orm_party)

        assert isinstance(party, Party)
        assert party.id == 1
        assert party.name == "Aijaz"
        assert party.role == PartyRole.SELLER
        assert party.opening_balance == Decimal("250.00")
        assert party.phone == "98765"
        assert party.notes is None


class TestLedgerEntryMapper:
    """Tests for PartyLedgerEntry mapper."""

    def test_ledger_entry_to_domain(self):
        orm_entry = ORMPartyLedgerEntry(
            id=5,
            party_id=1,
            kind=LedgerEntryKind.PURCHASE,
            amount=Decimal("500.00"),
            date=date(2024, 3, 10),
            note="buffalo",
            channel=PaymentChannel.CREDIT,
            voice_note_path="/tmp/note.m4a",
            created_at=datetime.now(UTC),
        )

        entry = ledger_entry_to_domain(orm_entry)

        assert isinstance(entry, PartyLedgerEntry)
        assert entry.kind == LedgerEntryKind.PURCHASE
        assert entry.channel == PaymentChannel.CREDIT
        assert entry.date == date(2024, 3, 10)
        assert entry.voice_note_path == "/tmp/note.m4a"


class TestCashEntryMapper:
    """Tests for CashBookEntry mapper."""

    def test_cash_entry_to_domain(self):
        orm_entry = ORMCashBookEntry(
            id=9,
            date=date(2024, 3, 10),
            mode="BANK_IN",
            amount=Decimal("1200.00"),
            party_label="Aijaz",
            note=None,
            source_kind="CUSTOMER",
            source_id=1,
            linked_ledger_entry_id=5,
            created_at=datetime.now(UTC),
        )

        entry = cash_entry_to_domain(orm_entry)

        assert isinstance(entry, CashBookEntry)
        assert entry.mode == CashMode.BANK_IN
        assert entry.source_kind == SourceKind.CUSTOMER
        assert entry.source_id == 1
        assert entry.linked_ledger_entry_id == 5


class TestDailyBalanceMapper:
    """Tests for DailyBalance mapper."""

    def test_daily_balance_to_domain(self):
        orm_balance = ORMDailyBalance(
            id=3,
            date=date(2024, 3, 10),
            opening_cash=Decimal("1000.00"),
            opening_bank=Decimal("0.00"),
            closing_cash=Decimal("1200.00"),
            closing_bank=Decimal("0.00"),
            opening_overridden=None,
            created_at=datetime.now(UTC),
        )

        balance = daily_balance_to_domain(orm_balance)

        assert isinstance(balance, DailyBalance)
        assert balance.closing_cash == Decimal("1200.00")
        assert balance.opening_overridden is False
        assert balance.note is None

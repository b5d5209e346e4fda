"""Tests for daily balance propagation."""

import pytest
from datetime import date, timedelta
from decimal import Decimal

from hisab.domain.entities import CashMode, DayTotals
from hisab.domain.errors import NotFoundError, PropagationError, StoreError


D = date(2024, 3, 10)
D_NEXT = D + timedelta(days=1)


def assert_consistent(db):
    """Closing identity on every row, carry-forward between stored neighbours."""
    balances = db.list_daily_balances()
    totals = db.get_totals_by_date()
    for balance in balances:
        expected = totals.get(balance.date, DayTotals()).closing(balance.opening_cash, balance.opening_bank)
        assert (balance.closing_cash, balance.closing_bank) == expected, balance.date
    for previous, current in zip(balances, balances[1:]):
        if current.opening_overridden:
            continue
        assert current.opening_cash == previous.closing_cash, current.date
        assert current.opening_bank == previous.closing_bank, current.date


class TestScenarios:
    """End-to-end balance scenarios through the facade."""

    def test_receipt_carries_forward(self, temp_db, facade, sample_party):
        facade.set_opening(D, Decimal("1000"), Decimal("0"))
        facade.ensure_today(D_NEXT)

        facade.add_receipt(sample_party.id, Decimal("200"), D)

        assert facade.balance_for_date(D).closing_cash == Decimal("1200")
        assert facade.balance_for_date(D_NEXT).opening_cash == Decimal("1200")
        assert_consistent(temp_db)

    def test_purchase_has_no_cash_impact(self, temp_db, facade, sample_party):
        facade.set_opening(D, Decimal("1000"), Decimal("0"))
        before = facade.party_balance(sample_party.id).balance

        facade.add_purchase(sample_party.id, Decimal("500"), D)

        assert facade.balance_for_date(D).closing_cash == Decimal("1000")
        assert facade.party_balance(sample_party.id).balance == before + Decimal("500")
        assert_consistent(temp_db)

    def test_deleting_receipt_reverts_balances(self, temp_db, facade, sample_party):
        facade.set_opening(D, Decimal("1000"), Decimal("0"))
        facade.ensure_today(D_NEXT)
        outcome = facade.add_receipt(sample_party.id, Decimal("200"), D)

        facade.delete_transaction(outcome.ledger_entry_id)

        assert facade.balance_for_date(D).closing_cash == Decimal("1000")
        assert facade.balance_for_date(D_NEXT).opening_cash == Decimal("1000")
        assert_consistent(temp_db)

    def test_rename_leaves_balances_alone(self, temp_db, facade, sample_party):
        facade.set_opening(D, Decimal("1000"), Decimal("0"))
        facade.add_receipt(sample_party.id, Decimal("200"), D)
        facade.add_payment(sample_party.id, Decimal("50"), D_NEXT)
        before = temp_db.list_daily_balances()

        facade.rename_party(sample_party.id, "Aijaz Khan")

        labels = {e.party_label for e in temp_db.list_cash_entries()}
        assert labels == {"Aijaz Khan"}
        after = temp_db.list_daily_balances()
        assert [(b.date, b.closing_cash, b.closing_bank) for b in after] == [
            (b.date, b.closing_cash, b.closing_bank) for b in before
        ]


class TestPropagateForward:
    """Direct propagator behavior."""

    def test_anchor_without_history_starts_from_zero(self, temp_db, propagator):
        temp_db.create_cash_entry(date=D, mode=CashMode.CASH_IN, amount=Decimal("300"))
        temp_db.create_cash_entry(date=D, mode=CashMode.BANK_OUT, amount=Decimal("20"))

        result = propagator.propagate_forward(D)

        balance = temp_db.get_daily_balance(D)
        assert (balance.opening_cash, balance.opening_bank) == (Decimal("0"), Decimal("0"))
        assert (balance.closing_cash, balance.closing_bank) == (Decimal("300"), Decimal("-20"))
        assert result.anchor == D
        assert result.last_written == D

    def test_anchor_is_written_without_activity(self, temp_db, propagator):
        result = propagator.propagate_forward(D)

        assert result.days_written == (D,)
        assert temp_db.get_daily_balance(D).closing_cash == Decimal("0")

    def test_quiet_days_are_skipped_but_carried(self, temp_db, propagator):
        later = D + timedelta(days=5)
        temp_db.upsert_daily_balance(D, Decimal("100"), Decimal("0"), Decimal("100"), Decimal("0"), opening_overridden=True)
        temp_db.create_cash_entry(date=D, mode=CashMode.CASH_IN, amount=Decimal("50"))
        temp_db.create_cash_entry(date=later, mode=CashMode.CASH_OUT, amount=Decimal("30"))

        result = propagator.propagate_forward(D)

        assert result.days_written == (D, later)
        assert temp_db.get_daily_balance(D + timedelta(days=2)) is None
        assert temp_db.get_daily_balance(later).opening_cash == Decimal("150")
        assert temp_db.get_daily_balance(later).closing_cash == Decimal("120")

    def test_opening_comes_from_nearest_earlier_snapshot(self, temp_db, propagator):
        earlier = D - timedelta(days=3)
        temp_db.upsert_daily_balance(earlier, Decimal("0"), Decimal("0"), Decimal("700"), Decimal("40"))

        propagator.propagate_forward(D)

        balance = temp_db.get_daily_balance(D)
        assert (balance.opening_cash, balance.opening_bank) == (Decimal("700"), Decimal("40"))

    def test_idempotent(self, temp_db, propagator):
        temp_db.create_cash_entry(date=D, mode=CashMode.CASH_IN, amount=Decimal("300"))
        temp_db.create_cash_entry(date=D_NEXT, mode=CashMode.CASH_OUT, amount=Decimal("100"))
        propagator.propagate_forward(D)
        first = temp_db.list_daily_balances()

        propagator.propagate_forward(D)

        assert temp_db.list_daily_balances() == first

    def test_upstream_change_reaches_every_later_day(self, temp_db, propagator):
        for offset in range(5):
            temp_db.create_cash_entry(date=D + timedelta(days=offset), mode=CashMode.CASH_IN, amount=Decimal("10"))
        propagator.propagate_forward(D)

        temp_db.create_cash_entry(date=D, mode=CashMode.CASH_IN, amount=Decimal("1000"))
        propagator.propagate_forward(D)

        last = temp_db.get_daily_balance(D + timedelta(days=4))
        assert last.closing_cash == Decimal("1050")
        assert_consistent(temp_db)

    def test_purchase_only_day_gets_a_row(self, temp_db, propagator):
        temp_db.create_cash_entry(date=D_NEXT, mode=CashMode.PURCHASE, amount=Decimal("900"))

        result = propagator.propagate_forward(D)

        assert D_NEXT in result.days_written
        balance = temp_db.get_daily_balance(D_NEXT)
        assert balance.closing_cash == balance.opening_cash

    def test_failure_reports_progress_and_rolls_back(self, temp_db, propagator, monkeypatch):
        temp_db.create_cash_entry(date=D, mode=CashMode.CASH_IN, amount=Decimal("10"))
        temp_db.create_cash_entry(date=D_NEXT, mode=CashMode.CASH_IN, amount=Decimal("10"))
        real_upsert = temp_db.upsert_daily_balance

        def failing_upsert(day, *args, **kwargs):
            if day == D_NEXT:
                raise StoreError("disk full")
            return real_upsert(day, *args, **kwargs)

        monkeypatch.setattr(temp_db, "upsert_daily_balance", failing_upsert)

        with pytest.raises(PropagationError) as exc_info:
            propagator.propagate_forward(D)

        assert exc_info.value.anchor == D
        assert exc_info.value.last_written == D
        assert temp_db.list_daily_balances() == []

        # Rerunning from the anchor repairs.
        monkeypatch.setattr(temp_db, "upsert_daily_balance", real_upsert)
        propagator.propagate_forward(D)
        assert temp_db.get_daily_balance(D_NEXT).closing_cash == Decimal("20")


class TestOpeningOverride:
    """Manual openings."""

    def test_override_wins_at_anchor(self, temp_db, propagator):
        temp_db.upsert_daily_balance(D - timedelta(days=1), Decimal("0"), Decimal("0"), Decimal("500"), Decimal("0"))
        temp_db.create_cash_entry(date=D, mode=CashMode.CASH_IN, amount=Decimal("100"))

        propagator.set_opening(D, Decimal("2000"), Decimal("10"))
        propagator.propagate_forward(D)

        balance = temp_db.get_daily_balance(D)
        assert balance.opening_overridden
        assert (balance.opening_cash, balance.closing_cash) == (Decimal("2000"), Decimal("2100"))
        assert balance.closing_bank == Decimal("10")

    def test_override_is_cleared_when_upstream_changes(self, temp_db, propagator):
        propagator.set_opening(D, Decimal("1000"), Decimal("0"))
        propagator.set_opening(D_NEXT, Decimal("9999"), Decimal("0"))

        propagator.set_opening(D, Decimal("1500"), Decimal("0"))

        following = temp_db.get_daily_balance(D_NEXT)
        assert not following.opening_overridden
        assert following.opening_cash == Decimal("1500")

    def test_clear_opening_override(self, temp_db, propagator):
        temp_db.upsert_daily_balance(D - timedelta(days=1), Decimal("0"), Decimal("0"), Decimal("300"), Decimal("0"))
        propagator.set_opening(D, Decimal("1000"), Decimal("0"))

        propagator.clear_opening_override(D)

        balance = temp_db.get_daily_balance(D)
        assert not balance.opening_overridden
        assert balance.opening_cash == Decimal("300")

    def test_clear_override_on_missing_day(self, propagator):
        with pytest.raises(NotFoundError):
            propagator.clear_opening_override(D)

    def test_recalculate_all_seeds_and_rebuilds(self, temp_db, propagator):
        temp_db.create_cash_entry(date=D, mode=CashMode.CASH_IN, amount=Decimal("100"))
        temp_db.create_cash_entry(date=D_NEXT, mode=CashMode.BANK_IN, amount=Decimal("40"))

        result = propagator.recalculate_all(D, Decimal("50"), Decimal("60"))

        assert result.days_written == (D, D_NEXT)
        last = temp_db.get_daily_balance(D_NEXT)
        assert (last.closing_cash, last.closing_bank) == (Decimal("150"), Decimal("100"))


class TestEnsureDay:
    """ensure_day creates a missing snapshot only."""

    def test_creates_from_previous_closing(self, temp_db, propagator):
        temp_db.upsert_daily_balance(D, Decimal("0"), Decimal("0"), Decimal("800"), Decimal("25"))

        balance = propagator.ensure_day(D_NEXT)

        assert (balance.opening_cash, balance.opening_bank) == (Decimal("800"), Decimal("25"))

    def test_existing_day_untouched(self, temp_db, propagator):
        temp_db.upsert_daily_balance(D, Decimal("1"), Decimal("2"), Decimal("3"), Decimal("4"))

        balance = propagator.ensure_day(D)

        assert balance.closing_cash == Decimal("3")

    def test_propagate_all_without_data(self, temp_db, propagator):
        result = propagator.propagate_all()

        assert result.days_written == ()
        assert temp_db.list_daily_balances() == []

    def test_day_totals(self, temp_db, propagator):
        temp_db.create_cash_entry(date=D, mode=CashMode.CASH_IN, amount=Decimal("10"))
        temp_db.create_cash_entry(date=D, mode=CashMode.PURCHASE, amount=Decimal("99"))

        assert propagator.day_totals(D) == DayTotals(cash_in=Decimal("10"))
        assert propagator.day_totals(D_NEXT) == DayTotals()

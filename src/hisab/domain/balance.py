"""Daily balance propagation.

Each day's opening is the previous snapshot's closing, so a change on any day
invalidates every later day. ``propagate_forward`` always recomputes from the
earliest affected day up to the last day that has a snapshot or cash-book
activity.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from hisab.database.base import Database
from hisab.domain.entities import DailyBalance, DayTotals, PropagationResult
from hisab.domain.errors import NotFoundError, PropagationError, StoreError, daily_balance_not_found
from hisab.utils.date_parser import DateLike, next_day, normalize_date, today

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class BalancePropagator:
    """Service keeping DailyBalance snapshots consistent with the cash book."""

    def __init__(self, db: Database):
        """Initialize balance propagator.

        Args:
            db: Database instance
        """
        self.db = db

    def propagate_forward(self, from_date: DateLike) -> PropagationResult:
        """Recompute the snapshot for ``from_date`` and every later day.

        The anchor's opening is the closing of the nearest earlier snapshot
        (zero without one) unless the anchor row carries a manual opening
        override. Days between the anchor and the frontier that have neither
        a snapshot nor cash activity are carried through without creating a
        row.

        Args:
            from_date: Earliest affected day

        Returns:
            PropagationResult naming the anchor and every day written

        Raises:
            PropagationError: If the store fails mid-cascade
        """
        anchor = normalize_date(from_date)
        written: list[date] = []
        try:
            with self.db.unit_of_work():
                self._cascade(anchor, written)
        except StoreError as e:
            last_written = written[-1] if written else None
            logger.error(
                "Balance propagation from %s aborted after %s: %s", anchor, last_written, e
            )
            if isinstance(e, PropagationError):
                raise
            raise PropagationError(
                f"Balance propagation from {anchor.isoformat()} failed: {e}",
                anchor=anchor,
                last_written=last_written,
            ) from e

        logger.debug("Propagated balances from %s across %d day(s)", anchor, len(written))
        return PropagationResult(
            anchor=anchor,
            last_written=written[-1] if written else None,
            days_written=tuple(written),
        )

    def _cascade(self, anchor: date, written: list[date]) -> None:
        previous = self.db.get_previous_daily_balance(anchor)
        if previous is not None:
            opening = (previous.closing_cash, previous.closing_bank)
        else:
            opening = (ZERO, ZERO)

        balances = {b.date: b for b in self.db.list_daily_balances(start_date=anchor)}
        totals = self.db.get_totals_by_date(start_date=anchor)
        frontier = max([anchor, *balances.keys(), *totals.keys()])

        day = anchor
        while day <= frontier:
            existing = balances.get(day)
            day_totals = totals.get(day)
            if day == anchor or existing is not None or day_totals is not None:
                overridden = day == anchor and existing is not None and existing.opening_overridden
                if overridden:
                    opening = (existing.opening_cash, existing.opening_bank)
                closing = (day_totals or DayTotals()).closing(*opening)
                self.db.upsert_daily_balance(
                    day,
                    opening_cash=opening[0],
                    opening_bank=opening[1],
                    closing_cash=closing[0],
                    closing_bank=closing[1],
                    opening_overridden=overridden,
                )
                written.append(day)
                opening = closing
            day = next_day(day)

    def propagate_all(self) -> PropagationResult:
        """Recompute every snapshot from the earliest stored day.

        Used after a restore or bulk import to repair drift.
        """
        earliest = self.db.get_earliest_date()
        if earliest is None:
            return PropagationResult(anchor=today(), last_written=None)
        return self.propagate_forward(earliest)

    def ensure_day(self, day: Optional[DateLike] = None) -> DailyBalance:
        """Make sure a snapshot exists for ``day`` (today by default)."""
        day = normalize_date(day) if day is not None else today()
        with self.db.unit_of_work():
            balance = self.db.get_daily_balance(day)
            if balance is None:
                self.propagate_forward(day)
                balance = self.db.get_daily_balance(day)
        return balance

    def set_opening(self, day: DateLike, opening_cash: Decimal, opening_bank: Decimal) -> PropagationResult:
        """Manually override a day's opening balances and cascade from there."""
        day = normalize_date(day)
        with self.db.unit_of_work():
            self.db.upsert_daily_balance(
                day,
                opening_cash=opening_cash,
                opening_bank=opening_bank,
                closing_cash=opening_cash,
                closing_bank=opening_bank,
                opening_overridden=True,
            )
            return self.propagate_forward(day)

    def recalculate_all(
        self, start_date: DateLike, opening_cash: Decimal, opening_bank: Decimal
    ) -> PropagationResult:
        """Seed ``start_date`` with an opening balance and rebuild every later day.

        This is the repair step bulk imports run once after all rows land.
        """
        return self.set_opening(start_date, opening_cash, opening_bank)

    def clear_opening_override(self, day: DateLike) -> PropagationResult:
        """Drop a manual opening override and recompute from the carried balance."""
        day = normalize_date(day)
        with self.db.unit_of_work():
            balance = self.db.get_daily_balance(day)
            if balance is None:
                raise NotFoundError(daily_balance_not_found(day))
            self.db.upsert_daily_balance(
                day,
                opening_cash=balance.opening_cash,
                opening_bank=balance.opening_bank,
                closing_cash=balance.closing_cash,
                closing_bank=balance.closing_bank,
                opening_overridden=False,
            )
            return self.propagate_forward(day)

    def day_totals(self, day: DateLike) -> DayTotals:
        """Cash and bank movement on a single day."""
        day = normalize_date(day)
        return self.db.get_totals_by_date(start_date=day, end_date=day).get(day, DayTotals())

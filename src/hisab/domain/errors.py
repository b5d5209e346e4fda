"""Shared domain error messages and error types."""

from datetime import date
from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class ConflictError(ValidationError):
    """Domain conflict, such as uniqueness violations."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class StoreError(DomainError):
    """The entity store failed; the current unit of work was rolled back."""


class PropagationError(StoreError):
    """A balance cascade aborted.

    Rerunning propagation from ``anchor`` repairs any partially written days.
    """

    def __init__(self, message: str, anchor: date, last_written: Optional[date]):
        super().__init__(message)
        self.anchor = anchor
        self.last_written = last_written


class SideArtifactError(DomainError):
    """A file attached to an entry could not be removed."""


def party_not_found(party_id: int) -> str:
    """Return message for missing party."""
    return f"Party {party_id} not found"


def ledger_entry_not_found(entry_id: int) -> str:
    """Return message for missing party ledger entry."""
    return f"Ledger entry {entry_id} not found"


def cash_entry_not_found(entry_id: int) -> str:
    """Return message for missing cash-book entry."""
    return f"Cash book entry {entry_id} not found"


def daily_balance_not_found(day: date) -> str:
    """Return message for a day without a balance snapshot."""
    return f"No daily balance for {day.isoformat()}"


def duplicate_party_name(name: str) -> str:
    """Return message for a case-insensitive party name clash."""
    return f"Party with name '{name}' already exists"


def non_positive_amount(amount) -> str:
    """Return message for amounts that must be greater than zero."""
    return f"Amount must be greater than zero, got {amount}"


def invalid_amount(amount) -> str:
    """Return message for amounts that are not numbers."""
    return f"Invalid amount: '{amount}'"


def blank_field(field_name: str) -> str:
    """Return message for a required text field left blank."""
    return f"{field_name} must not be blank"


def no_cash_mapping(kind: str, channel: str) -> str:
    """Return message when a ledger kind and channel imply no cash movement."""
    return f"{kind} entries cannot use the {channel} channel"

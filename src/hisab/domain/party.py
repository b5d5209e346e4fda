"""Party domain service."""

from decimal import Decimal
from typing import Optional

from hisab.database.base import Database
from hisab.domain.entities import Party, PartyBalance, PartyRole
from hisab.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    blank_field,
    duplicate_party_name,
    party_not_found,
)


class PartyService:
    """Service for managing customers and suppliers."""

    def __init__(self, db: Database):
        """Initialize party service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_party(
        self,
        name: str,
        role: PartyRole = PartyRole.CUSTOMER,
        opening_balance: Decimal = Decimal("0"),
        phone: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Create a new party.

        Args:
            name: Display name, unique ignoring case
            role: CUSTOMER, SELLER or BOTH
            opening_balance: Amount owed before the first ledger entry
            phone: Optional phone number
            notes: Optional free text

        Returns:
            Party ID

        Raises:
            ValidationError: If the name is blank
            ConflictError: If a party with the same name exists
        """
        name = self._validate_name(name)
        return self.db.create_party(
            name=name,
            role=PartyRole(role),
            opening_balance=Decimal(str(opening_balance)),
            phone=phone,
            notes=notes,
        )

    def get_party(self, party_id: int) -> Optional[Party]:
        """Get party by ID.

        Args:
            party_id: Party ID

        Returns:
            Party entity or None if not found
        """
        return self.db.get_party(party_id)

    def require_party(self, party_id: int) -> Party:
        """Get party by ID, raising NotFoundError when missing."""
        party = self.db.get_party(party_id)
        if party is None:
            raise NotFoundError(party_not_found(party_id))
        return party

    def list_parties(self, role: Optional[PartyRole] = None) -> list[Party]:
        """List parties, optionally only those with ``role``.

        Parties with role BOTH are included for either CUSTOMER or SELLER.
        """
        if role is None:
            return self.db.list_parties()
        role = PartyRole(role)
        if role == PartyRole.BOTH:
            return self.db.list_parties(role=role)
        return [p for p in self.db.list_parties() if p.role in (role, PartyRole.BOTH)]

    def update_party(
        self,
        party_id: int,
        name: Optional[str] = None,
        role: Optional[PartyRole] = None,
        opening_balance: Optional[Decimal] = None,
        phone: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> None:
        """Update party fields that are not None.

        A name change here only touches the party row. Use the facade's
        ``rename_party`` to carry the new name onto cash-book lines.

        Raises:
            NotFoundError: If the party doesn't exist
            ValidationError: If the new name is blank
            ConflictError: If the new name belongs to another party
        """
        self.require_party(party_id)
        if name is not None:
            name = self._validate_name(name, exclude_id=party_id)
        self.db.update_party(
            party_id,
            name=name,
            role=PartyRole(role) if role is not None else None,
            opening_balance=Decimal(str(opening_balance)) if opening_balance is not None else None,
            phone=phone,
            notes=notes,
        )

    def delete_party(self, party_id: int) -> list[int]:
        """Delete a party and its ledger entries.

        Returns:
            IDs of the deleted ledger entries
        """
        self.require_party(party_id)
        return self.db.delete_party(party_id)

    def get_balance(self, party_id: int) -> PartyBalance:
        balance = self.db.get_party_balance(party_id)
        if balance is None:
            raise NotFoundError(party_not_found(party_id))
        return balance

    def resolve(self, party: str | int) -> Party:
        """Resolve a party name or ID to a party.

        Raises:
            NotFoundError: If no party matches
        """
        if isinstance(party, int):
            return self.require_party(party)

        try:
            return self.require_party(int(party))
        except ValueError:
            # Not a number, or no party with that ID; try it as a name
            pass

        found = self.db.find_party_by_name(party)
        if found is None:
            raise NotFoundError(f"Party '{party}' not found")
        return found

    def _validate_name(self, name: str, exclude_id: Optional[int] = None) -> str:
        name = (name or "").strip()
        if not name:
            raise ValidationError(blank_field("Party name"))
        existing = self.db.find_party_by_name(name)
        if existing is not None and existing.id != exclude_id:
            raise ConflictError(duplicate_party_name(name))
        return name

"""Contact domain service."""

from typing import Optional

from debtbook.database.base import Database
from debtbook.domain.entities import Contact, touched
from debtbook.domain.errors import (
    DependencyError,
    NotFoundError,
    ValidationError,
    contact_not_found,
    delete_blocked,
    user_not_found,
)
from debtbook.domain.ledger import ChangeLedger
from debtbook.utils.ids import new_record_id

CONTACT_FIELDS = frozenset({"name", "phone", "email", "photo_url"})


class ContactService:
    """Service for managing contacts."""

    def __init__(self, db: Database):
        """Initialize contact service.

        Args:
            db: Database instance
        """
        self.db = db
        self.ledger = ChangeLedger(db)

    def create_contact(
        self,
        user_id: str,
        name: str,
        phone: Optional[str] = None,
        email: Optional[str] = None,
    ) -> str:
        """Create a new contact.

        Returns:
            Contact ID
        """
        if self.db.get_user(user_id) is None:
            raise NotFoundError(user_not_found(user_id))
        if not name.strip():
            raise ValidationError("Contact name is required")

        contact = Contact(id=new_record_id(), name=name.strip(), user_id=user_id, phone=phone, email=email)
        with self.db.write():
            self.db.insert_record(contact)
            self.ledger.record_create(Contact.TABLE, contact.id, user_id)
        return contact.id

    def get_contact(self, contact_id: str) -> Optional[Contact]:
        return self.db.get_contact(contact_id)

    def list_contacts(self, user_id: str) -> list[Contact]:
        return self.db.list_records(Contact.TABLE, order_by="name", user_id=user_id, is_active=True)

    def update_contact(self, contact_id: str, **changes) -> Contact:
        """Update contact details (name, phone, email, photo_url)."""
        unknown = set(changes) - CONTACT_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update contact field(s): {', '.join(sorted(unknown))}")
        contact = self.db.get_contact(contact_id)
        if contact is None:
            raise NotFoundError(contact_not_found(contact_id))

        contact = touched(contact, **changes)
        with self.db.write():
            self.db.save_record(contact)
            self.ledger.record_update(Contact.TABLE, contact.id, contact.user_id)
        return contact

    def delete_contact(self, contact_id: str) -> None:
        """Delete a contact no transaction refers to.

        Raises:
            NotFoundError: If contact not found
            DependencyError: If transactions still reference the contact
        """
        contact = self.db.get_contact(contact_id)
        if contact is None:
            raise NotFoundError(contact_not_found(contact_id))
        transaction_count = self.db.count_transactions(contact_id=contact_id)
        if transaction_count > 0:
            raise DependencyError(delete_blocked("contact", contact_id, transaction_count))

        with self.db.write():
            self.ledger.record_delete(Contact.TABLE, contact_id, contact.user_id)
            self.db.delete_record(Contact.TABLE, contact_id)

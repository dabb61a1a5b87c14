"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


def record_not_found(table: str, record_id: str) -> str:
    """Return message for a missing record in any table."""
    return f"Record {record_id} not found in {table}"


def account_not_found(account_id: str) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def contact_not_found(contact_id: str) -> str:
    """Return message for missing contact."""
    return f"Contact {contact_id} not found"


def transaction_not_found(transaction_id: str) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def user_not_found(user_id: str) -> str:
    """Return message for missing user."""
    return f"User {user_id} not found"


def invalid_choice(field: str, value: str, choices) -> str:
    """Return message for a value outside its allowed set."""
    return f"Invalid {field} '{value}'. Expected one of: {', '.join(sorted(choices))}"


def delete_blocked(kind: str, record_id: str, transaction_count: int) -> str:
    """Return message when a record still has dependent transactions."""
    return (
        f"Cannot delete {kind} {record_id}: it has {transaction_count} "
        f"transaction{'s' if transaction_count != 1 else ''}. "
        "Please reassign or delete them first."
    )


class StoreError(Exception):
    """Base class for local store failures."""


class WriteTransactionError(StoreError):
    """A mutation was attempted outside a write transaction."""


class SchemaVersionError(StoreError):
    """The local store was written by a different schema version."""


class StoreOpenError(StoreError):
    """The local store could not be opened, even after recreating it."""

"""Utilities for resolving account and contact names to IDs."""

from debtbook.domain.account import AccountService
from debtbook.domain.contact import ContactService


def resolve_account(account_service: AccountService, user_id: str, account: str) -> str:
    """Resolve an account name or ID to the account ID.

    Args:
        account_service: AccountService instance
        user_id: Owner of the account
        account: Account ID or name

    Returns:
        Account ID

    Raises:
        ValueError: If account is not found
    """
    account_obj = account_service.get_account(account)
    if account_obj is not None:
        return account_obj.id

    for acc in account_service.list_accounts(user_id):
        if acc.name == account:
            return acc.id

    raise ValueError(f"Account '{account}' not found")


def resolve_contact(contact_service: ContactService, user_id: str, contact: str) -> str:
    """Resolve a contact name or ID to the contact ID.

    Raises:
        ValueError: If no contact matches, or several contacts share the name
    """
    contact_obj = contact_service.get_contact(contact)
    if contact_obj is not None:
        return contact_obj.id

    matches = [c for c in contact_service.list_contacts(user_id) if c.name == contact]
    if not matches:
        raise ValueError(f"Contact '{contact}' not found")
    if len(matches) > 1:
        raise ValueError(f"Several contacts are named '{contact}'; use the contact ID instead")
    return matches[0].id

"""Account balance and contact debt bookkeeping for transactions."""

from decimal import Decimal

from debtbook.database.base import Database
from debtbook.domain.entities import (
    INFLOW_TYPES,
    OUTFLOW_TYPES,
    TXN_CANCELLED,
    Transaction,
    touched,
)
from debtbook.domain.errors import NotFoundError, ValidationError, account_not_found
from debtbook.domain.ledger import ChangeLedger

# Account column holding the running total for each transaction type
TYPE_TOTALS = {
    "cashIn": "cash_in",
    "cashOut": "cash_out",
    "debit": "debit",
    "credit": "credit",
    "receive": "receive",
    "sendOut": "send_out",
    "borrow": "borrow",
    "lend": "lend",
}


def signed_amount(transaction_type: str, amount: Decimal) -> Decimal:
    """Return the amount with the sign its type moves a balance in."""
    if transaction_type in INFLOW_TYPES:
        return amount
    if transaction_type in OUTFLOW_TYPES:
        return -amount
    raise ValidationError(f"Unknown transaction type '{transaction_type}'")


def affects_balance(txn: Transaction) -> bool:
    """Whether a transaction moves its account's balance.

    Recurring parents defer to their generated occurrences, legs paid on
    behalf of a contact defer to the compensating debt adjustment, and
    cancelled transactions have been reverted.
    """
    return (
        not txn.is_recurring
        and txn.on_behalf_of_contact_id is None
        and txn.status != TXN_CANCELLED
    )


class BalanceKeeper:
    """Applies and reverts transaction effects on accounts and contacts.

    Must be used inside the write that mutates the transaction; every
    balance change is recorded in the change ledger.
    """

    def __init__(self, db: Database, ledger: ChangeLedger):
        self.db = db
        self.ledger = ledger

    def apply(self, txn: Transaction) -> None:
        self._adjust(txn, Decimal(1))

    def revert(self, txn: Transaction) -> None:
        self._adjust(txn, Decimal(-1))

    def _adjust(self, txn: Transaction, direction: Decimal) -> None:
        if not affects_balance(txn):
            return

        account = self.db.get_account(txn.account_id)
        if account is None:
            raise NotFoundError(account_not_found(txn.account_id))
        total_attr = TYPE_TOTALS[txn.type]
        account = touched(
            account,
            current_balance=account.current_balance + signed_amount(txn.type, txn.amount) * direction,
            **{total_attr: getattr(account, total_attr) + txn.amount * direction},
        )
        self.db.save_record(account)
        self.ledger.record_update("accounts", account.id, txn.user_id)

        if txn.contact_id is None or txn.type not in ("lend", "borrow"):
            return
        contact = self.db.get_contact(txn.contact_id)
        if contact is None:
            return
        if txn.type == "lend":
            contact = touched(contact, total_owed=contact.total_owed + txn.amount * direction)
        else:
            contact = touched(contact, total_owing=contact.total_owing + txn.amount * direction)
        self.db.save_record(contact)
        self.ledger.record_update("contacts", contact.id, txn.user_id)

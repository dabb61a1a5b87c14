"""Transaction domain service."""

from datetime import date
from decimal import Decimal
from typing import Optional

from dateutil.relativedelta import relativedelta

from debtbook.database.base import Database
from debtbook.domain.balance import BalanceKeeper
from debtbook.domain.entities import (
    TRANSACTION_TYPES,
    TXN_ACTIVE,
    TXN_CANCELLED,
    Transaction,
    touched,
)
from debtbook.domain.errors import (
    NotFoundError,
    ValidationError,
    account_not_found,
    contact_not_found,
    invalid_choice,
    transaction_not_found,
)
from debtbook.domain.ledger import ChangeLedger
from debtbook.utils.ids import new_record_id

RECURRENCE_STEPS = {
    "daily": relativedelta(days=1),
    "weekly": relativedelta(weeks=1),
    "monthly": relativedelta(months=1),
    "yearly": relativedelta(years=1),
}

UPDATABLE_FIELDS = frozenset(
    {
        "type",
        "amount",
        "account_id",
        "transaction_date",
        "purpose",
        "contact_id",
        "category_id",
        "due_date",
        "remarks",
        "is_settled",
        "settled_at",
        "settlement_note",
    }
)


class TransactionService:
    """Service for managing transactions and their balance effects."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db
        self.ledger = ChangeLedger(db)
        self.balances = BalanceKeeper(db, self.ledger)

    def _validate(self, txn: Transaction) -> None:
        if txn.type not in TRANSACTION_TYPES:
            raise ValidationError(invalid_choice("transaction type", txn.type, TRANSACTION_TYPES))
        if txn.amount <= 0:
            raise ValidationError("Amount must be greater than zero")
        if self.db.get_account(txn.account_id) is None:
            raise NotFoundError(account_not_found(txn.account_id))
        for contact_id in (txn.contact_id, txn.on_behalf_of_contact_id):
            if contact_id is not None and self.db.get_contact(contact_id) is None:
                raise NotFoundError(contact_not_found(contact_id))
        if txn.is_recurring and txn.recurring_pattern not in RECURRENCE_STEPS:
            raise ValidationError(
                invalid_choice("recurring pattern", str(txn.recurring_pattern), RECURRENCE_STEPS)
            )

    def _require(self, transaction_id: str) -> Transaction:
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return txn

    def create_transaction(
        self,
        user_id: str,
        account_id: str,
        transaction_type: str,
        amount: Decimal,
        transaction_date: date,
        contact_id: Optional[str] = None,
        category_id: Optional[str] = None,
        purpose: Optional[str] = None,
        remarks: Optional[str] = None,
        due_date: Optional[date] = None,
        is_recurring: bool = False,
        recurring_pattern: Optional[str] = None,
        on_behalf_of_contact_id: Optional[str] = None,
        parent_transaction_id: Optional[str] = None,
    ) -> str:
        """Create a transaction and apply its effect on the account balance.

        Args:
            user_id: Owning user ID
            account_id: Account the money moves on
            transaction_type: One of TRANSACTION_TYPES (e.g. 'cashIn', 'lend')
            amount: Positive amount; the type decides the direction
            transaction_date: Date of the transaction
            contact_id: Counterparty contact
            category_id: Category
            purpose: Short description
            remarks: Free text notes
            due_date: Repayment due date for lend/borrow
            is_recurring: Whether this is a recurring template
            recurring_pattern: daily, weekly, monthly or yearly
            on_behalf_of_contact_id: Contact a payment was made on behalf of
            parent_transaction_id: Recurring template this is an occurrence of

        Returns:
            Transaction ID

        Raises:
            ValidationError: If the type, amount or pattern is invalid
            NotFoundError: If the account or a contact does not exist
        """
        txn = Transaction(
            id=new_record_id(),
            type=transaction_type,
            amount=Decimal(amount),
            account_id=account_id,
            user_id=user_id,
            transaction_date=transaction_date,
            purpose=purpose,
            contact_id=contact_id,
            category_id=category_id,
            on_behalf_of_contact_id=on_behalf_of_contact_id,
            due_date=due_date,
            remarks=remarks,
            is_recurring=is_recurring,
            recurring_pattern=recurring_pattern,
            parent_transaction_id=parent_transaction_id,
        )
        self._validate(txn)
        with self.db.write():
            self.db.insert_record(txn)
            self.ledger.record_create(Transaction.TABLE, txn.id, user_id)
            self.balances.apply(txn)
        return txn.id

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return self.db.get_transaction(transaction_id)

    def list_transactions(
        self,
        user_id: str,
        account_id: Optional[str] = None,
        contact_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        include_cancelled: bool = False,
    ) -> list[Transaction]:
        """List transactions, newest first.

        Args:
            user_id: Owning user ID
            account_id: Optional account filter
            contact_id: Optional counterparty filter
            start_date: Optional inclusive start date
            end_date: Optional inclusive end date
            include_cancelled: Whether cancelled transactions are listed
        """
        filters = {"user_id": user_id}
        if account_id is not None:
            filters["account_id"] = account_id
        if contact_id is not None:
            filters["contact_id"] = contact_id
        if not include_cancelled:
            filters["status"] = TXN_ACTIVE
        transactions = self.db.list_records(
            Transaction.TABLE, order_by="transaction_date", descending=True, **filters
        )
        if start_date is not None:
            transactions = [t for t in transactions if t.transaction_date >= start_date]
        if end_date is not None:
            transactions = [t for t in transactions if t.transaction_date <= end_date]
        return transactions

    def update_transaction(self, transaction_id: str, **changes) -> Transaction:
        """Update a transaction, moving its balance effect to the new values.

        Raises:
            NotFoundError: If the transaction does not exist
            ValidationError: If a field cannot be changed, the new values are
                invalid, or the transaction is part of a proxy payment
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update transaction field(s): {', '.join(sorted(unknown))}")
        old = self._require(transaction_id)
        if self.db.get_proxy_payment_by_transaction(transaction_id) is not None:
            raise ValidationError(
                f"Transaction {transaction_id} is part of a proxy payment; cancel the proxy payment instead"
            )
        if "amount" in changes:
            changes["amount"] = Decimal(changes["amount"])

        new = touched(old, **changes)
        self._validate(new)
        with self.db.write():
            self.balances.revert(old)
            self.db.save_record(new)
            self.ledger.record_update(Transaction.TABLE, new.id, new.user_id)
            self.balances.apply(new)
        return new

    def delete_transaction(self, transaction_id: str) -> None:
        """Delete a transaction and revert its balance effect.

        Occurrences of a deleted recurring template are kept and detached from it.

        Deleting either leg of a proxy payment removes the whole proxy payment.
        """
        txn = self._require(transaction_id)
        proxy = self.db.get_proxy_payment_by_transaction(transaction_id)
        if proxy is not None:
            from debtbook.domain.proxy_payment import ProxyPaymentService

            ProxyPaymentService(self.db).delete_proxy_payment(proxy.id)
            return

        with self.db.write():
            # Occurrences of a deleted template stand on their own
            for child in self.db.list_records(Transaction.TABLE, parent_transaction_id=txn.id):
                self.db.save_record(touched(child, parent_transaction_id=None))
                self.ledger.record_update(Transaction.TABLE, child.id, child.user_id)
            self.balances.revert(txn)
            self.ledger.record_delete(Transaction.TABLE, txn.id, txn.user_id)
            self.db.delete_record(Transaction.TABLE, txn.id)

    def cancel_transaction(self, transaction_id: str) -> Transaction:
        """Cancel a transaction, reverting its balance effect but keeping the record.

        Cancelling either leg of a proxy payment cancels the proxy payment.
        """
        txn = self._require(transaction_id)
        if txn.status == TXN_CANCELLED:
            raise ValidationError(f"Transaction {transaction_id} is already cancelled")
        proxy = self.db.get_proxy_payment_by_transaction(transaction_id)
        if proxy is not None:
            from debtbook.domain.proxy_payment import ProxyPaymentService

            ProxyPaymentService(self.db).cancel_proxy_payment(proxy.id)
            return self._require(proxy.original_transaction_id)

        cancelled = touched(txn, status=TXN_CANCELLED)
        with self.db.write():
            self.balances.revert(txn)
            self.db.save_record(cancelled)
            self.ledger.record_update(Transaction.TABLE, txn.id, txn.user_id)
        return cancelled

    def generate_occurrences(self, parent_id: str, through: date) -> list[str]:
        """Create the occurrences of a recurring transaction due up to a date.

        The n-th occurrence falls n steps after the template's date, so
        month-end dates do not drift. Generation resumes after the latest
        existing occurrence (cancelled ones included); an occurrence that was
        deleted is not brought back and no date is charged twice.

        Args:
            parent_id: Recurring template transaction ID
            through: Last date (inclusive) to generate occurrences for

        Returns:
            IDs of the created occurrences
        """
        parent = self._require(parent_id)
        if not parent.is_recurring:
            raise ValidationError(f"Transaction {parent_id} is not recurring")
        if parent.status == TXN_CANCELLED:
            return []
        step = RECURRENCE_STEPS[parent.recurring_pattern]
        latest = max(
            (child.transaction_date for child in self.db.list_records(Transaction.TABLE, parent_transaction_id=parent_id)),
            default=None,
        )

        created = []
        with self.db.write():
            n = 0
            while True:
                occurrence_date = parent.transaction_date + step * n
                n += 1
                if occurrence_date > through:
                    break
                if latest is not None and occurrence_date <= latest:
                    continue
                created.append(
                    self.create_transaction(
                        user_id=parent.user_id,
                        account_id=parent.account_id,
                        transaction_type=parent.type,
                        amount=parent.amount,
                        transaction_date=occurrence_date,
                        contact_id=parent.contact_id,
                        category_id=parent.category_id,
                        purpose=parent.purpose,
                        remarks=parent.remarks,
                        parent_transaction_id=parent.id,
                    )
                )
        return created

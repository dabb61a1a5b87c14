"""Proxy payment domain service.

A proxy payment records money paid from one of the user's accounts on
behalf of a contact. It is stored as two transactions and a link record:

- the *original* leg, flagged with ``on_behalf_of_contact_id``, which
  describes the payment but does not move the account balance, and
- the *adjustment* leg, a ``lend`` to the contact on the same account, which
  carries the balance change and the contact's new debt.

The legs are created, cancelled and deleted together so that the balance
change is applied and reverted exactly once.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from debtbook.database.base import Database
from debtbook.domain.entities import (
    OUTFLOW_TYPES,
    PROXY_ACTIVE,
    PROXY_CANCELLED,
    TXN_CANCELLED,
    ProxyPayment,
    Transaction,
    touched,
)
from debtbook.domain.errors import (
    NotFoundError,
    ValidationError,
    invalid_choice,
    record_not_found,
)
from debtbook.domain.transaction import TransactionService
from debtbook.utils.ids import new_record_id

logger = logging.getLogger(__name__)


class ProxyPaymentService:
    """Service for payments made on behalf of a contact."""

    def __init__(self, db: Database):
        """Initialize proxy payment service.

        Args:
            db: Database instance
        """
        self.db = db
        self.transactions = TransactionService(db)
        self.ledger = self.transactions.ledger
        self.balances = self.transactions.balances

    def _require(self, proxy_id: str) -> ProxyPayment:
        proxy = self.db.get_record(ProxyPayment.TABLE, proxy_id)
        if proxy is None:
            raise NotFoundError(record_not_found(ProxyPayment.TABLE, proxy_id))
        return proxy

    def get_proxy_payment(self, proxy_id: str) -> Optional[ProxyPayment]:
        return self.db.get_record(ProxyPayment.TABLE, proxy_id)

    def create_proxy_payment(
        self,
        user_id: str,
        account_id: str,
        on_behalf_of_contact_id: str,
        amount: Decimal,
        transaction_date: date,
        payment_type: str = "cashOut",
        purpose: Optional[str] = None,
    ) -> str:
        """Record a payment made on behalf of a contact.

        Args:
            user_id: Owning user ID
            account_id: Account the payment was made from
            on_behalf_of_contact_id: Contact the payment was made for
            amount: Amount paid
            transaction_date: Date of the payment
            payment_type: Outflow type of the original leg
            purpose: Short description

        Returns:
            Proxy payment ID
        """
        if payment_type not in OUTFLOW_TYPES:
            raise ValidationError(invalid_choice("payment type", payment_type, OUTFLOW_TYPES))

        with self.db.write():
            original_id = self.transactions.create_transaction(
                user_id=user_id,
                account_id=account_id,
                transaction_type=payment_type,
                amount=amount,
                transaction_date=transaction_date,
                purpose=purpose,
                on_behalf_of_contact_id=on_behalf_of_contact_id,
            )
            adjustment_id = self.transactions.create_transaction(
                user_id=user_id,
                account_id=account_id,
                transaction_type="lend",
                amount=amount,
                transaction_date=transaction_date,
                contact_id=on_behalf_of_contact_id,
                purpose=purpose,
                remarks=f"Paid on behalf of contact (transaction {original_id})",
            )
            proxy = ProxyPayment(
                id=new_record_id(),
                user_id=user_id,
                original_transaction_id=original_id,
                adjustment_transaction_id=adjustment_id,
                on_behalf_of_contact_id=on_behalf_of_contact_id,
                amount=Decimal(amount),
            )
            self.db.insert_record(proxy)
            self.ledger.record_create(ProxyPayment.TABLE, proxy.id, user_id)
        return proxy.id

    def _remove_leg(self, transaction_id: str) -> None:
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            logger.warning("Proxy payment leg %s is already gone", transaction_id)
            return
        self.balances.revert(txn)
        self.ledger.record_delete(Transaction.TABLE, txn.id, txn.user_id)
        self.db.delete_record(Transaction.TABLE, txn.id)

    def _cancel_leg(self, transaction_id: str) -> None:
        txn = self.db.get_transaction(transaction_id)
        if txn is None or txn.status == TXN_CANCELLED:
            return
        self.balances.revert(txn)
        self.db.save_record(touched(txn, status=TXN_CANCELLED))
        self.ledger.record_update(Transaction.TABLE, txn.id, txn.user_id)

    def delete_proxy_payment(self, proxy_id: str) -> None:
        """Delete a proxy payment together with both of its legs."""
        proxy = self._require(proxy_id)
        with self.db.write():
            self.ledger.record_delete(ProxyPayment.TABLE, proxy.id, proxy.user_id)
            self.db.delete_record(ProxyPayment.TABLE, proxy.id)
            self._remove_leg(proxy.adjustment_transaction_id)
            self._remove_leg(proxy.original_transaction_id)

    def cancel_proxy_payment(self, proxy_id: str) -> ProxyPayment:
        """Cancel a proxy payment.

        Both legs are kept as cancelled records; cancelling the adjustment
        reverts its balance change.
        """
        proxy = self._require(proxy_id)
        if proxy.status == PROXY_CANCELLED:
            raise ValidationError(f"Proxy payment {proxy_id} is already cancelled")

        cancelled = touched(proxy, status=PROXY_CANCELLED)
        with self.db.write():
            self._cancel_leg(proxy.adjustment_transaction_id)
            self._cancel_leg(proxy.original_transaction_id)
            self.db.save_record(cancelled)
            self.ledger.record_update(ProxyPayment.TABLE, proxy.id, proxy.user_id)
        return cancelled

    def list_proxy_payments(self, user_id: str, include_cancelled: bool = False) -> list[ProxyPayment]:
        filters = {"user_id": user_id}
        if not include_cancelled:
            filters["status"] = PROXY_ACTIVE
        return self.db.list_records(ProxyPayment.TABLE, **filters)

"""Account domain service."""

from decimal import Decimal
from typing import Optional

from debtbook.database.base import Database
from debtbook.domain.codelist import CURRENCIES, CodeListService
from debtbook.domain.entities import ACCOUNT_TYPES, Account, touched
from debtbook.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
    account_not_found,
    delete_blocked,
    invalid_choice,
    user_not_found,
)
from debtbook.domain.ledger import ChangeLedger
from debtbook.utils.ids import new_record_id


class AccountService:
    """Service for managing accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db
        self.ledger = ChangeLedger(db)

    def _check_name(self, user_id: str, name: str, exclude_id: Optional[str] = None) -> None:
        for acc in self.db.list_records(Account.TABLE, user_id=user_id):
            if acc.id != exclude_id and acc.name == name:
                raise ConflictError(f"Account with name '{name}' already exists")

    def create_account(
        self,
        user_id: str,
        name: str,
        currency: str = "USD",
        account_type: str = "cash_in_cash_out",
        initial_amount: Decimal = Decimal("0"),
        is_primary: bool = False,
    ) -> str:
        """Create a new account.

        Args:
            user_id: Owning user ID
            name: Account name, unique per user
            currency: Currency code
            account_type: One of the ACCOUNT_TYPES
            initial_amount: Opening balance
            is_primary: Whether this is the user's primary account

        Returns:
            Account ID

        Raises:
            NotFoundError: If the user does not exist
            ValidationError: If the type or currency is not recognized
            ConflictError: If account name already exists
        """
        user = self.db.get_user(user_id)
        if user is None:
            raise NotFoundError(user_not_found(user_id))
        if account_type not in ACCOUNT_TYPES:
            raise ValidationError(invalid_choice("account type", account_type, ACCOUNT_TYPES))
        codes = CodeListService(self.db)
        if not codes.is_valid(CURRENCIES, currency):
            raise ValidationError(invalid_choice("currency", currency, codes.list_elements(CURRENCIES)))
        self._check_name(user_id, name)

        account = Account(
            id=new_record_id(),
            name=name,
            user_id=user_id,
            currency=currency,
            type=account_type,
            language=user.language,
            is_primary=is_primary,
            initial_amount=initial_amount,
            current_balance=initial_amount,
        )
        with self.db.write():
            self.db.insert_record(account)
            self.ledger.record_create(Account.TABLE, account.id, user_id)
        return account.id

    def get_account(self, account_id: str) -> Optional[Account]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id)

    def list_accounts(self, user_id: str) -> list[Account]:
        """List a user's active accounts."""
        return self.db.list_records(Account.TABLE, user_id=user_id, is_active=True)

    def rename_account(self, account_id: str, name: str) -> Account:
        """Rename an account.

        Raises:
            NotFoundError: If account not found
            ConflictError: If name already exists
        """
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        self._check_name(account.user_id, name, exclude_id=account_id)

        account = touched(account, name=name)
        with self.db.write():
            self.db.save_record(account)
            self.ledger.record_update(Account.TABLE, account.id, account.user_id)
        return account

    def delete_account(self, account_id: str) -> None:
        """Delete an account.

        Raises:
            NotFoundError: If account not found
            DependencyError: If transactions still reference the account
        """
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))

        transaction_count = self.db.count_transactions(account_id=account_id)
        if transaction_count > 0:
            raise DependencyError(delete_blocked("account", account_id, transaction_count))

        with self.db.write():
            self.ledger.record_delete(Account.TABLE, account_id, account.user_id)
            self.db.delete_record(Account.TABLE, account_id)

"""User domain service."""

from dataclasses import replace
from datetime import datetime, UTC
from typing import Optional

from debtbook.database.base import Database
from debtbook.domain.codelist import LANGUAGES, CodeListService
from debtbook.domain.entities import USER_FREE, USER_PAID, User, touched
from debtbook.domain.errors import NotFoundError, ValidationError, invalid_choice, user_not_found
from debtbook.domain.ledger import ChangeLedger
from debtbook.utils.ids import new_user_id

PROFILE_FIELDS = frozenset({"first_name", "last_name", "email", "language", "timezone", "profile_picture_url"})


class UserService:
    """Service for managing the device owner's profile."""

    def __init__(self, db: Database):
        """Initialize user service.

        Args:
            db: Database instance
        """
        self.db = db
        self.ledger = ChangeLedger(db)

    def create_user(
        self,
        first_name: str,
        last_name: Optional[str] = None,
        email: Optional[str] = None,
        language: str = "en",
        timezone: Optional[str] = None,
    ) -> str:
        """Create a local user on the free tier.

        Returns:
            User ID
        """
        if not first_name.strip():
            raise ValidationError("First name is required")
        codes = CodeListService(self.db)
        if not codes.is_valid(LANGUAGES, language):
            raise ValidationError(invalid_choice("language", language, codes.list_elements(LANGUAGES)))

        user = User(
            id=new_user_id(),
            first_name=first_name.strip(),
            last_name=last_name,
            email=email,
            language=language,
            timezone=timezone,
            user_type=USER_FREE,
            last_login_at=datetime.now(UTC),
        )
        with self.db.write():
            self.db.insert_record(user)
            self.ledger.record_create(User.TABLE, user.id, user.id)
        return user.id

    def get_user(self, user_id: str) -> Optional[User]:
        return self.db.get_user(user_id)

    def get_current_user(self) -> Optional[User]:
        """Return the earliest created active user, if any."""
        users = self.db.list_records(User.TABLE, is_active=True)
        return users[0] if users else None

    def _require(self, user_id: str) -> User:
        user = self.db.get_user(user_id)
        if user is None:
            raise NotFoundError(user_not_found(user_id))
        return user

    def update_profile(self, user_id: str, **changes) -> User:
        """Update profile fields.

        Args:
            user_id: User ID
            **changes: Any of first_name, last_name, email, language, timezone,
                profile_picture_url

        Raises:
            NotFoundError: If the user does not exist
            ValidationError: If an unknown field is given
        """
        unknown = set(changes) - PROFILE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update user field(s): {', '.join(sorted(unknown))}")
        user = touched(self._require(user_id), **changes)
        with self.db.write():
            self.db.save_record(user)
            self.ledger.record_update(User.TABLE, user.id, user.id)
        return user

    def set_user_type(self, user_id: str, user_type: str) -> User:
        """Change the user's entitlement tier ('free' or 'paid')."""
        if user_type not in (USER_FREE, USER_PAID):
            raise ValidationError(invalid_choice("user type", user_type, (USER_FREE, USER_PAID)))
        user = touched(self._require(user_id), user_type=user_type)
        with self.db.write():
            self.db.save_record(user)
            self.ledger.record_update(User.TABLE, user.id, user.id)
        return user

    def link_remote_user(self, user_id: str, supabase_id: str) -> User:
        """Attach the remote user row's identifier to the local user.

        The link is local bookkeeping only and writes no ledger entry.
        """
        user = self._require(user_id)
        with self.db.write():
            user = self.db.save_record(replace(user, supabase_id=supabase_id))
        return user

"""Remote store interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Optional


@dataclass(frozen=True)
class RemoteSession:
    """Authenticated session with the remote store."""

    user_id: str
    email: Optional[str]
    access_token: str


AuthListener = Callable[[str, Optional[RemoteSession]], None]


class RemoteStore(ABC):
    """Abstract interface to the hosted backend.

    Rows are dicts keyed by the remote column names. Implementations raise
    RemoteError when a request is rejected or cannot be delivered.
    """

    @abstractmethod
    def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        """Insert a row and return it as stored (with its assigned id)."""
        pass

    @abstractmethod
    def update(self, table: str, record_id: str, row: dict[str, Any]) -> dict[str, Any]:
        """Update the row with the given id and return it as stored."""
        pass

    @abstractmethod
    def delete(self, table: str, record_id: str) -> None:
        """Delete the row with the given id."""
        pass

    @abstractmethod
    def select(
        self,
        table: str,
        columns: str = "*",
        filters: Optional[dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[dict[str, Any]]:
        """Select rows matching equality filters."""
        pass

    @abstractmethod
    def get_session(self) -> Optional[RemoteSession]:
        """Return the current authenticated session, if any."""
        pass

    @abstractmethod
    def on_auth_state_change(self, callback: AuthListener) -> Callable[[], None]:
        """Subscribe to auth events. Returns a function that unsubscribes."""
        pass

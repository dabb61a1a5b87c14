"""Supabase implementation of the remote store."""

import logging
import os
import socket
from typing import Any, Callable, Optional
from urllib.parse import urlparse

import httpx
from postgrest import APIResponse
from postgrest.exceptions import APIError
from supabase import AuthError, Client, create_client

from debtbook.sync.errors import ConfigurationError, RemoteError
from debtbook.sync.remote import AuthListener, RemoteSession, RemoteStore

logger = logging.getLogger(__name__)

SUPABASE_URL_ENV = "DEBTBOOK_SUPABASE_URL"
SUPABASE_KEY_ENV = "DEBTBOOK_SUPABASE_KEY"


def _single_row(response: APIResponse, action: str, table: str) -> dict[str, Any]:
    if not isinstance(response, APIResponse) or not response.data:
        raise RemoteError(f"{action} on '{table}' returned no row")
    return response.data[0]


class SupabaseRemoteStore(RemoteStore):
    """Remote store backed by a Supabase project (PostgREST + GoTrue)."""

    def __init__(self, client: Client, url: Optional[str] = None):
        """Initialize the store.

        Args:
            client: Supabase client created with create_client()
            url: Project URL, used for connectivity checks
        """
        self.client = client
        self.url = url

    def _execute(self, query, action: str, table: str) -> APIResponse:
        try:
            return query.execute()
        except APIError as e:
            raise RemoteError(e.message or str(e), code=e.code) from e
        except httpx.HTTPError as e:
            raise RemoteError(f"{action} on '{table}' failed: {e}") from e

    def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        response = self._execute(self.client.table(table).insert(row), "Insert", table)
        return _single_row(response, "Insert", table)

    def update(self, table: str, record_id: str, row: dict[str, Any]) -> dict[str, Any]:
        query = self.client.table(table).update(row).eq("id", record_id)
        response = self._execute(query, "Update", table)
        return _single_row(response, "Update", table)

    def delete(self, table: str, record_id: str) -> None:
        self._execute(self.client.table(table).delete().eq("id", record_id), "Delete", table)

    def select(
        self,
        table: str,
        columns: str = "*",
        filters: Optional[dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[dict[str, Any]]:
        query = self.client.table(table).select(columns)
        for column, value in (filters or {}).items():
            query = query.eq(column, value)
        if order_by is not None:
            query = query.order(order_by, desc=descending)
        return self._execute(query, "Select", table).data

    @staticmethod
    def _to_session(session) -> Optional[RemoteSession]:
        if session is None or session.user is None:
            return None
        return RemoteSession(
            user_id=session.user.id,
            email=session.user.email,
            access_token=session.access_token,
        )

    def get_session(self) -> Optional[RemoteSession]:
        try:
            return self._to_session(self.client.auth.get_session())
        except AuthError as e:
            raise RemoteError(str(e)) from e

    def on_auth_state_change(self, callback: AuthListener) -> Callable[[], None]:
        subscription = self.client.auth.on_auth_state_change(
            lambda event, session: callback(event, self._to_session(session))
        )
        return subscription.unsubscribe

    def sign_in(self, email: str, password: str) -> RemoteSession:
        """Sign in with email and password.

        Raises:
            RemoteError: If the credentials are rejected or the request fails
        """
        try:
            response = self.client.auth.sign_in_with_password({"email": email, "password": password})
        except (AuthError, httpx.HTTPError) as e:
            raise RemoteError(f"Sign-in failed: {e}") from e
        session = self._to_session(response.session)
        if session is None:
            raise RemoteError("Sign-in did not return a session")
        logger.info("Signed in to remote store as %s", email)
        return session


def create_supabase_remote(url: Optional[str] = None, key: Optional[str] = None) -> SupabaseRemoteStore:
    """Create a remote store from explicit or environment credentials.

    Args:
        url: Project URL. If None, reads DEBTBOOK_SUPABASE_URL
        key: API key. If None, reads DEBTBOOK_SUPABASE_KEY

    Raises:
        ConfigurationError: If the URL or key is missing
    """
    url = url or os.environ.get(SUPABASE_URL_ENV)
    key = key or os.environ.get(SUPABASE_KEY_ENV)
    if not url or not key:
        raise ConfigurationError(
            f"Remote store is not configured: set {SUPABASE_URL_ENV} and {SUPABASE_KEY_ENV}"
        )
    return SupabaseRemoteStore(create_client(url, key), url=url)


def check_connectivity(url: Optional[str], timeout: float = 3.0) -> bool:
    """Check whether the remote host accepts TCP connections."""
    if not url:
        return False
    parsed = urlparse(url)
    if not parsed.hostname:
        return False
    port = parsed.port or (443 if parsed.scheme == "https" else 80)
    try:
        with socket.create_connection((parsed.hostname, port), timeout=timeout):
            return True
    except OSError as e:
        logger.debug("Remote host %s unreachable: %s", parsed.hostname, e)
        return False

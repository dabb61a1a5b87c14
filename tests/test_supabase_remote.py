"""Tests for the Supabase remote store adapter."""

from types import SimpleNamespace

import httpx
import pytest
from postgrest import APIResponse
from postgrest.exceptions import APIError

from debtbook.sync import supabase_remote
from debtbook.sync.errors import RemoteError
from debtbook.sync.remote import RemoteSession
from debtbook.sync.supabase_remote import SupabaseRemoteStore

ROW = {"id": "7d1e3a52-9c44-4b8e-a0f1-2b6c5d8e9f10", "name": "Wallet"}


class StubQuery:
    """Records the builder calls made on one table and replays a canned result."""

    def __init__(self, client, table):
        self.client = client
        self.table = table
        self.steps = []
        client.queries.append(self)

    def _step(self, name, *args, **kwargs):
        self.steps.append((name, args, kwargs))
        return self

    def insert(self, row):
        return self._step("insert", row)

    def update(self, row):
        return self._step("update", row)

    def delete(self):
        return self._step("delete")

    def select(self, columns):
        return self._step("select", columns)

    def eq(self, column, value):
        return self._step("eq", column, value)

    def order(self, column, desc=False):
        return self._step("order", column, desc=desc)

    def execute(self):
        if self.client.error is not None:
            raise self.client.error
        return APIResponse(data=self.client.data, count=None)


class StubAuth:
    def __init__(self, session=None, error=None):
        self.session = session
        self.error = error
        self.credentials = None
        self.listeners = []

    def sign_in_with_password(self, credentials):
        if self.error is not None:
            raise self.error
        self.credentials = credentials
        return SimpleNamespace(session=self.session)

    def get_session(self):
        return self.session

    def on_auth_state_change(self, callback):
        self.listeners.append(callback)
        return SimpleNamespace(unsubscribe=lambda: self.listeners.remove(callback))


class StubClient:
    def __init__(self, data=None, error=None, auth=None):
        self.data = [] if data is None else data
        self.error = error
        self.auth = auth or StubAuth()
        self.queries = []

    def table(self, name):
        return StubQuery(self, name)


def _session(user_id=ROW["id"]):
    return SimpleNamespace(
        user=SimpleNamespace(id=user_id, email="ayesha@example.com"),
        access_token="token-1",
    )


class TestRows:
    def test_insert_returns_stored_row(self):
        client = StubClient(data=[ROW])

        row = SupabaseRemoteStore(client).insert("accounts", {"name": "Wallet"})

        assert row == ROW
        assert client.queries[0].table == "accounts"
        assert client.queries[0].steps == [("insert", ({"name": "Wallet"},), {})]

    def test_update_filters_by_id(self):
        client = StubClient(data=[ROW])

        SupabaseRemoteStore(client).update("accounts", ROW["id"], {"name": "Wallet"})

        assert client.queries[0].steps == [
            ("update", ({"name": "Wallet"},), {}),
            ("eq", ("id", ROW["id"]), {}),
        ]

    def test_delete_accepts_empty_result(self):
        client = StubClient(data=[])

        SupabaseRemoteStore(client).delete("accounts", ROW["id"])

        assert client.queries[0].steps == [("delete", (), {}), ("eq", ("id", ROW["id"]), {})]

    def test_select_applies_filters_and_order(self):
        client = StubClient(data=[ROW])

        rows = SupabaseRemoteStore(client).select(
            "accounts", "id,name", filters={"user_id": "u-1"}, order_by="name", descending=True
        )

        assert rows == [ROW]
        assert client.queries[0].steps == [
            ("select", ("id,name",), {}),
            ("eq", ("user_id", "u-1"), {}),
            ("order", ("name",), {"desc": True}),
        ]

    @pytest.mark.parametrize("action", ["insert", "update"])
    def test_empty_result_raises(self, action):
        store = SupabaseRemoteStore(StubClient(data=[]))

        with pytest.raises(RemoteError, match="returned no row"):
            if action == "insert":
                store.insert("accounts", {"name": "Wallet"})
            else:
                store.update("accounts", ROW["id"], {"name": "Wallet"})


class TestErrors:
    def test_api_error_keeps_its_code(self):
        error = APIError(
            {"message": "duplicate key value violates unique constraint", "code": "23505", "hint": None, "details": None}
        )
        store = SupabaseRemoteStore(StubClient(error=error))

        with pytest.raises(RemoteError) as excinfo:
            store.insert("accounts", {"name": "Wallet"})

        assert excinfo.value.code == "23505"
        assert excinfo.value.message == "duplicate key value violates unique constraint"
        assert str(excinfo.value).endswith("(code 23505)")

    def test_transport_error_becomes_remote_error(self):
        store = SupabaseRemoteStore(StubClient(error=httpx.ConnectError("connection refused")))

        with pytest.raises(RemoteError, match="Delete on 'contacts' failed: connection refused") as excinfo:
            store.delete("contacts", ROW["id"])

        assert excinfo.value.code is None


class TestAuth:
    def test_sign_in_returns_session(self):
        auth = StubAuth(session=_session())
        store = SupabaseRemoteStore(StubClient(auth=auth))

        session = store.sign_in("ayesha@example.com", "s3cret")

        assert session == RemoteSession(user_id=ROW["id"], email="ayesha@example.com", access_token="token-1")
        assert auth.credentials == {"email": "ayesha@example.com", "password": "s3cret"}

    def test_sign_in_without_session(self):
        store = SupabaseRemoteStore(StubClient(auth=StubAuth(session=None)))

        with pytest.raises(RemoteError, match="did not return a session"):
            store.sign_in("ayesha@example.com", "s3cret")

    def test_sign_in_transport_error(self):
        auth = StubAuth(error=httpx.ConnectError("connection refused"))
        store = SupabaseRemoteStore(StubClient(auth=auth))

        with pytest.raises(RemoteError, match="Sign-in failed"):
            store.sign_in("ayesha@example.com", "s3cret")

    def test_get_session(self):
        assert SupabaseRemoteStore(StubClient()).get_session() is None

        session = SupabaseRemoteStore(StubClient(auth=StubAuth(session=_session()))).get_session()

        assert session.user_id == ROW["id"]

    def test_auth_state_changes_are_forwarded(self):
        auth = StubAuth()
        store = SupabaseRemoteStore(StubClient(auth=auth))
        events = []

        unsubscribe = store.on_auth_state_change(lambda event, session: events.append((event, session)))
        auth.listeners[0]("SIGNED_IN", _session())
        auth.listeners[0]("SIGNED_OUT", None)
        unsubscribe()

        assert events[0][0] == "SIGNED_IN"
        assert events[0][1].user_id == ROW["id"]
        assert events[1] == ("SIGNED_OUT", None)
        assert auth.listeners == []


def test_create_supabase_remote_with_explicit_credentials(monkeypatch):
    client = StubClient()
    created = []

    def fake_create_client(url, key):
        created.append((url, key))
        return client

    monkeypatch.setattr(supabase_remote, "create_client", fake_create_client)

    store = supabase_remote.create_supabase_remote("https://debtbook.example.supabase.co", "anon-key")

    assert created == [("https://debtbook.example.supabase.co", "anon-key")]
    assert store.client is client
    assert store.url == "https://debtbook.example.supabase.co"

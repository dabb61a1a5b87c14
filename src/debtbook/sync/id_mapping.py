"""Local to remote identifier map built during one sync run."""

from typing import Optional

MAPPED_TABLES = ("users", "accounts", "contacts", "transactions")


class IdentifierMap:
    """Maps local identifiers to the remote identifiers issued for them.

    The map lives for a single run. It is filled as creates are applied and
    consulted when later entries carry foreign keys.
    """

    def __init__(self):
        self._ids: dict[str, dict[str, str]] = {table: {} for table in MAPPED_TABLES}

    def record(self, table: str, local_id: str, remote_id: str) -> None:
        """Remember the remote identifier of a record; unmapped tables are ignored."""
        if table in self._ids:
            self._ids[table][local_id] = remote_id

    def resolve(self, table: str, local_id: str) -> Optional[str]:
        return self._ids.get(table, {}).get(local_id)

    def as_dict(self) -> dict[str, dict[str, str]]:
        return {table: dict(ids) for table, ids in self._ids.items()}

    def __len__(self) -> int:
        return sum(len(ids) for ids in self._ids.values())

"""Local identifier generation."""

import time
import uuid


def new_record_id() -> str:
    """Return a fresh identifier for a locally created record."""
    return str(uuid.uuid4())


def new_user_id() -> str:
    """Return a local user identifier (creation time in milliseconds).

    User identifiers never take the remote identifier's format, because the
    remote user row is provisioned separately and linked through supabase_id.
    """
    return str(int(time.time() * 1000))

"""Shared Supabase client for tune storage.

The calculators never touch the database, so the client is only built the
first time a saved-tune command runs. A bot started without Supabase
credentials keeps serving calculator commands; tune commands fail with a
clear error instead of an opaque connection failure.
"""

import threading
from urllib.parse import urlparse

from supabase import Client, create_client

from stiggy.core.config import Settings, get_settings
from stiggy.core.logging import logger

_supabase: Client | None = None
_client_lock = threading.Lock()


class StorageNotConfiguredError(RuntimeError):
    """SUPABASE_URL / SUPABASE_KEY are missing."""


def _create_client(settings: Settings) -> Client:
    missing = [
        name
        for name, value in (
            ("SUPABASE_URL", settings.supabase_url),
            ("SUPABASE_KEY", settings.supabase_key),
        )
        if not value
    ]
    if missing:
        raise StorageNotConfiguredError(
            f"Tune storage is not configured: {', '.join(missing)} missing"
        )

    client = create_client(settings.supabase_url, settings.supabase_key)
    logger.info(
        "Supabase client initialized host=%s table=%s",
        urlparse(settings.supabase_url).hostname,
        settings.tunes_table,
    )
    return client


def get_supabase_client() -> Client:
    """Get or create the shared Supabase client (thread-safe)."""
    global _supabase
    if _supabase is None:
        with _client_lock:
            if _supabase is None:
                _supabase = _create_client(get_settings())
    return _supabase

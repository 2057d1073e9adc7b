"""Supabase storage for saved tunes.

Table ``tunes``:
    id uuid (default gen_random_uuid()), car text, track text null,
    pp int, power int, weight int, author_id text, author_name text,
    settings jsonb, likes text[], created_at timestamptz, updated_at timestamptz

All methods are synchronous; async callers wrap them in asyncio.to_thread.
"""

import time
from datetime import datetime, timezone
from typing import Any

from supabase import Client

from stiggy.core.config import get_settings
from stiggy.core.logging import log_db_query, logger
from stiggy.models.tune import Tune, TuneCreate
from stiggy.services.db import get_supabase_client
from stiggy.utils.converters import safe_int

_TUNE_COLUMNS = (
    "id, car, track, pp, power, weight, author_id, author_name, "
    "settings, likes, created_at, updated_at"
)

DEFAULT_LIKE_ATTEMPTS = 5


class TuneNotFoundError(LookupError):
    """No tune exists with the requested id."""


class TuneConflictError(RuntimeError):
    """The like toggle kept losing to concurrent writers."""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _row_to_tune(row: dict[str, Any]) -> Tune:
    return Tune(
        id=str(row["id"]),
        car=str(row["car"]),
        track=row.get("track") or None,
        pp=safe_int(row.get("pp")),
        power=safe_int(row.get("power")),
        weight=safe_int(row.get("weight")),
        author_id=str(row["author_id"]),
        author_name=str(row.get("author_name") or ""),
        settings=row.get("settings") or {},
        likes=list(row.get("likes") or []),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class TuneRepository:
    """CRUD plus the like toggle over the tunes table."""

    def __init__(self, client: Client, table: str = "tunes") -> None:
        self.client = client
        self.table = table

    def save_tune(self, tune: TuneCreate) -> str:
        """Insert a new tune with no likes. Returns the generated id."""
        start = time.time()
        now = _now()
        payload = {
            **tune.model_dump(),
            "likes": [],
            "created_at": now,
            "updated_at": now,
        }
        result = self.client.table(self.table).insert(payload).execute()
        log_db_query("insert", self.table, (time.time() - start) * 1000, author=tune.author_id)

        if not result.data or not isinstance(result.data, list):
            raise RuntimeError("Insert returned no row")
        tune_id = str(result.data[0]["id"])
        logger.info("Saved tune %s for author %s", tune_id, tune.author_id)
        return tune_id

    def get_tune(self, tune_id: str) -> Tune | None:
        start = time.time()
        result = (
            self.client.table(self.table)
            .select(_TUNE_COLUMNS)
            .eq("id", tune_id)
            .limit(1)
            .execute()
        )
        log_db_query("get", self.table, (time.time() - start) * 1000, tune=tune_id)

        if result.data and isinstance(result.data, list):
            row = result.data[0]
            if isinstance(row, dict):
                return _row_to_tune(row)
        return None

    def get_user_tunes(self, author_id: str) -> list[Tune]:
        """All tunes by one author, newest first."""
        start = time.time()
        result = (
            self.client.table(self.table)
            .select(_TUNE_COLUMNS)
            .eq("author_id", author_id)
            .order("created_at", desc=True)
            .execute()
        )
        log_db_query("list_by_author", self.table, (time.time() - start) * 1000, author=author_id)

        tunes: list[Tune] = []
        if result.data and isinstance(result.data, list):
            for row in result.data:
                if isinstance(row, dict):
                    tunes.append(_row_to_tune(row))
        return tunes

    def toggle_like(
        self,
        tune_id: str,
        user_id: str,
        max_attempts: int = DEFAULT_LIKE_ATTEMPTS,
    ) -> bool:
        """Like or unlike a tune for a user.

        Optimistic compare-and-swap: the update only applies while
        ``updated_at`` still holds the value that was read, so two users
        toggling at once cannot drop each other's change. A lost race
        re-reads and retries.

        Returns:
            True if the user now likes the tune, False if the like was removed

        Raises:
            TuneNotFoundError: no tune with this id
            TuneConflictError: every attempt lost to a concurrent writer
        """
        for attempt in range(1, max_attempts + 1):
            start = time.time()
            read = (
                self.client.table(self.table)
                .select("id, likes, updated_at")
                .eq("id", tune_id)
                .limit(1)
                .execute()
            )
            if not read.data or not isinstance(read.data, list):
                raise TuneNotFoundError(tune_id)

            row = read.data[0]
            likes = list(row.get("likes") or [])
            if user_id in likes:
                likes = [uid for uid in likes if uid != user_id]
                liked = False
            else:
                likes.append(user_id)
                liked = True

            written = (
                self.client.table(self.table)
                .update({"likes": likes, "updated_at": _now()})
                .eq("id", tune_id)
                .eq("updated_at", row["updated_at"])
                .execute()
            )
            log_db_query(
                "toggle_like",
                self.table,
                (time.time() - start) * 1000,
                tune=tune_id,
                attempt=attempt,
                applied=bool(written.data),
            )

            if written.data:
                return liked
            logger.warning(
                "Like toggle conflict on tune %s (attempt %d/%d)",
                tune_id,
                attempt,
                max_attempts,
            )

        raise TuneConflictError(tune_id)


def get_tune_repository() -> TuneRepository:
    """Repository bound to the shared Supabase client."""
    return TuneRepository(get_supabase_client(), get_settings().tunes_table)

"""Shared fixtures: an in-memory stand-in for the Supabase query builder."""

import json
import uuid
from typing import Any, Callable

import pytest

from stiggy.bot.interactions import Interaction
from stiggy.services.tunes_db import TuneRepository


class FakeResult:
    def __init__(self, data: list[dict[str, Any]]) -> None:
        self.data = data


class FakeQuery:
    """Records filters and applies them on execute()."""

    def __init__(self, table: "FakeTable", op: str, payload: dict | None = None) -> None:
        self.table = table
        self.op = op
        self.payload = payload
        self.filters: list[tuple[str, Any]] = []
        self.order_by: tuple[str, bool] | None = None
        self.limit_to: int | None = None

    def select(self, columns: str) -> "FakeQuery":
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append((column, value))
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self.order_by = (column, desc)
        return self

    def limit(self, count: int) -> "FakeQuery":
        self.limit_to = count
        return self

    def _matches(self, row: dict[str, Any]) -> bool:
        return all(row.get(column) == value for column, value in self.filters)

    def execute(self) -> FakeResult:
        if self.payload is not None:
            # The real client serializes with httpx, which rejects inf and nan
            json.dumps(self.payload, allow_nan=False)

        if self.op == "insert":
            row = {"id": str(uuid.uuid4()), **self.payload}
            self.table.rows.append(row)
            return FakeResult([dict(row)])

        if self.op == "update":
            if self.table.before_update:
                hook, self.table.before_update = self.table.before_update, None
                hook(self.table.rows)
            updated = []
            for row in self.table.rows:
                if self._matches(row):
                    row.update(self.payload)
                    updated.append(dict(row))
            return FakeResult(updated)

        rows = [dict(row) for row in self.table.rows if self._matches(row)]
        if self.order_by:
            column, desc = self.order_by
            rows.sort(key=lambda r: r[column], reverse=desc)
        if self.limit_to is not None:
            rows = rows[: self.limit_to]
        return FakeResult(rows)


class FakeTable:
    def __init__(self) -> None:
        self.rows: list[dict[str, Any]] = []
        # One-shot hook run just before the next update applies
        self.before_update: Callable[[list[dict[str, Any]]], None] | None = None

    def select(self, columns: str) -> FakeQuery:
        return FakeQuery(self, "select")

    def insert(self, payload: dict[str, Any]) -> FakeQuery:
        return FakeQuery(self, "insert", payload)

    def update(self, payload: dict[str, Any]) -> FakeQuery:
        return FakeQuery(self, "update", payload)


class FakeSupabase:
    def __init__(self) -> None:
        self.tables: dict[str, FakeTable] = {}

    def table(self, name: str) -> FakeTable:
        return self.tables.setdefault(name, FakeTable())


@pytest.fixture
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def repo(fake_supabase: FakeSupabase) -> TuneRepository:
    return TuneRepository(fake_supabase, "tunes")  # type: ignore[arg-type]


def make_interaction(
    name: str,
    interaction_type: int = 2,
    user_id: str = "user-1",
    focused: str | None = None,
    **options: Any,
) -> Interaction:
    """Build an interaction; option names with dashes go through ``options``."""
    return Interaction.model_validate(
        {
            "id": "interaction-1",
            "type": interaction_type,
            "token": "token",
            "guild_id": "guild-1",
            "data": {
                "name": name,
                "options": [
                    {"name": key, "type": 3, "value": value, "focused": key == focused}
                    for key, value in options.items()
                ],
            },
            "member": {"user": {"id": user_id, "username": "racer"}},
        }
    )

"""
Shared fixtures: an in-memory Supabase double and a TestClient wired to it.

Run:  pytest tests/ -v
"""

import itertools
import re
from typing import Any, Callable, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient


# ---------------------------------------------------------------------------
# In-memory Supabase double
# ---------------------------------------------------------------------------

# Embedded selects such as "group_id, study_groups(id,name)" join on these columns
EMBED_KEYS = {"study_groups": "group_id"}


class FakeResult:
    def __init__(self, data: Any, count: Optional[int] = None):
        self.data = data
        self.count = count


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.op = "select"
        self.columns = "*"
        self.count_mode = None
        self.payload: Any = None
        self.filters: List[tuple] = []
        self.order_by: Optional[tuple] = None
        self.limit_n: Optional[int] = None
        self.offset_n = 0
        self.single_mode: Optional[str] = None

    # builders
    def select(self, columns: str = "*", count: Optional[str] = None):
        self.columns, self.count_mode = columns, count
        return self

    def insert(self, rows):
        self.op, self.payload = "insert", rows
        return self

    def update(self, values: dict):
        self.op, self.payload = "update", values
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, column: str, value):
        self.filters.append(("eq", column, value))
        return self

    def in_(self, column: str, values):
        self.filters.append(("in", column, list(values)))
        return self

    def ilike(self, column: str, pattern: str):
        self.filters.append(("ilike", column, pattern))
        return self

    def order(self, column: str, desc: bool = False):
        self.order_by = (column, desc)
        return self

    def limit(self, n: int):
        self.limit_n = n
        return self

    def offset(self, n: int):
        self.offset_n = n
        return self

    def maybe_single(self):
        self.single_mode = "maybe"
        return self

    def single(self):
        self.single_mode = "single"
        return self

    # evaluation
    def _matches(self, row: dict) -> bool:
        for kind, column, value in self.filters:
            if kind == "eq" and row.get(column) != value:
                return False
            if kind == "in" and row.get(column) not in value:
                return False
            if kind == "ilike":
                regex = "^" + re.escape(value).replace("%", ".*").replace("_", ".") + "$"
                if not re.match(regex, row.get(column) or "", re.IGNORECASE | re.DOTALL):
                    return False
        return True

    def _project(self, row: dict) -> dict:
        if self.columns.strip() == "*":
            return dict(row)
        out = {}
        for part in re.findall(r"\w+\([^)]*\)|\w+", self.columns):
            if "(" in part:
                table = part.split("(")[0]
                key = EMBED_KEYS.get(table, f"{table}_id")
                joined = [r for r in self.db.tables.get(table, []) if r.get("id") == row.get(key)]
                out[table] = dict(joined[0]) if joined else None
            elif part in row:
                out[part] = row[part]
        return out

    def execute(self) -> FakeResult:
        self.db.record(self)
        rows = self.db.tables.setdefault(self.table_name, [])

        if self.op == "insert":
            payload = self.payload if isinstance(self.payload, list) else [self.payload]
            inserted = []
            for values in payload:
                row = {"id": self.db.next_id(self.table_name), "created_at": self.db.next_timestamp()}
                row.update(values)
                rows.append(row)
                inserted.append(dict(row))
            return FakeResult(inserted)

        matched = [row for row in rows if self._matches(row)]
        if self.op == "update":
            for row in matched:
                row.update(self.payload)
            return FakeResult([dict(row) for row in matched])
        if self.op == "delete":
            self.db.tables[self.table_name] = [row for row in rows if row not in matched]
            return FakeResult([dict(row) for row in matched])

        if self.order_by:
            column, desc = self.order_by
            matched = sorted(matched, key=lambda r: (r.get(column) is None, r.get(column)), reverse=desc)
        count = len(matched) if self.count_mode else None
        matched = matched[self.offset_n:]
        if self.limit_n is not None:
            matched = matched[:self.limit_n]
        data = [self._project(row) for row in matched]
        if self.single_mode == "maybe":
            return FakeResult(data[0] if data else None)
        if self.single_mode == "single":
            if len(data) != 1:
                raise Exception("JSON object requested, multiple (or no) rows returned")
            return FakeResult(data[0])
        return FakeResult(data, count=count)


class FakeRpc:
    def __init__(self, db: "FakeSupabase", fn: str, params: dict):
        self.db, self.fn, self.params = db, fn, params
        self.table_name = f"rpc:{fn}"
        self.op = "rpc"
        self.payload = params
        self.filters: List[tuple] = []

    def execute(self) -> FakeResult:
        self.db.record(self)
        handler = self.db.rpc_handlers.get(self.fn)
        if handler is None:
            raise Exception(f"function {self.fn} does not exist")
        return FakeResult(handler(self.params))


class FakeSupabase:
    """Enough of supabase.Client for the services: table() builders and rpc()"""

    def __init__(self):
        self.tables: Dict[str, List[dict]] = {}
        self.calls: List[tuple] = []
        self.fail_on: set = set()
        self.rpc_handlers: Dict[str, Callable[[dict], Any]] = {}
        self._ids = itertools.count(1)
        self._clock = itertools.count(1)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, fn: str, params: dict) -> FakeRpc:
        return FakeRpc(self, fn, params)

    def next_id(self, table: str) -> str:
        return f"{table}-{next(self._ids)}"

    def next_timestamp(self) -> str:
        return f"2024-01-01T00:00:{next(self._clock):02d}+00:00"

    def record(self, query):
        call = (query.op, query.table_name, list(query.filters), query.payload)
        if (query.op, query.table_name) in self.fail_on:
            self.calls.append(call)
            raise Exception(f"{query.op} on {query.table_name} failed")
        self.calls.append(call)

    # helpers for assertions
    def seed(self, table: str, *rows: dict):
        self.tables.setdefault(table, []).extend(dict(r) for r in rows)

    def rows(self, table: str) -> List[dict]:
        return self.tables.get(table, [])

    def mutations(self, table: Optional[str] = None) -> List[tuple]:
        return [c for c in self.calls if c[0] in ("insert", "update", "delete") and (table is None or c[1] == table)]

    def reset_calls(self):
        self.calls.clear()


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

OWNER = "user-owner"
MEMBER = "user-member"
STRANGER = "user-stranger"


@pytest.fixture
def fake_db():
    return FakeSupabase()


@pytest.fixture
def current_user():
    """Mutable holder: tests switch identity with current_user["id"] = ..."""
    return {"id": OWNER, "email": "owner@example.com", "user_metadata": {}}


@pytest.fixture
def client(fake_db, current_user):
    from cfahub.main import app
    from cfahub.core.dependencies import get_current_user, get_db

    app.dependency_overrides[get_db] = lambda: fake_db
    app.dependency_overrides[get_current_user] = lambda: dict(current_user)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def memberships(fake_db):
    """OWNER and MEMBER share G1; OWNER is also in G2; STRANGER is in G3 only."""
    fake_db.seed(
        "group_memberships",
        {"user_id": OWNER, "group_id": "G1"},
        {"user_id": OWNER, "group_id": "G2"},
        {"user_id": MEMBER, "group_id": "G1"},
        {"user_id": STRANGER, "group_id": "G3"},
    )
    fake_db.seed(
        "study_groups",
        {"id": "G1", "name": "Level I", "invite_code": "aaa111"},
        {"id": "G2", "name": "Ethics", "invite_code": "bbb222"},
        {"id": "G3", "name": "Quant", "invite_code": "ccc333"},
    )
    return fake_db

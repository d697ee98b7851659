import threading
from collections import defaultdict
from datetime import datetime, timedelta, timezone

import pytest


class FakeResponse:
    def __init__(self, data):
        self.data = data


def _comparable(value):
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return value
    return value


class FakeQuery:
    """Subset of the PostgREST query builder used by the stores."""

    def __init__(self, db: "FakeSupabase", table: str) -> None:
        self.db = db
        self.table_name = table
        self.operation = "select"
        self.columns = "*"
        self.payload = None
        self.filters = []
        self.order_by = None
        self.max_rows = None

    def select(self, columns="*", **kwargs):
        self.operation = "select"
        self.columns = columns
        return self

    def insert(self, payload):
        self.operation = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.operation = "update"
        self.payload = payload
        return self

    def delete(self):
        self.operation = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(("eq", column, value))
        return self

    def is_(self, column, value):
        self.filters.append(("is", column, value))
        return self

    def gte(self, column, value):
        self.filters.append(("gte", column, value))
        return self

    def order(self, column, desc=False):
        self.order_by = (column, desc)
        return self

    def limit(self, count):
        self.max_rows = count
        return self

    def _matches(self, row) -> bool:
        for op, column, value in self.filters:
            current = row.get(column)
            if op == "eq" and current != value:
                return False
            if op == "is" and value == "null" and current is not None:
                return False
            if op == "gte" and (current is None or _comparable(current) < _comparable(value)):
                return False
        return True

    def _project(self, row):
        if self.columns == "*":
            return dict(row)
        return {name.strip(): row.get(name.strip()) for name in self.columns.split(",")}

    def execute(self):
        self.db.executed.append((self.table_name, self.operation, list(self.filters)))
        if self.operation == "update":
            for hook in list(self.db.before_update):
                hook(self.db, self)
        with self.db.lock:
            rows = self.db.tables[self.table_name]
            if self.operation == "insert":
                items = self.payload if isinstance(self.payload, list) else [self.payload]
                inserted = [dict(item) for item in items]
                rows.extend(inserted)
                return FakeResponse([dict(item) for item in inserted])
            if self.operation == "update":
                updated = []
                for row in rows:
                    if self._matches(row):
                        row.update(self.payload)
                        updated.append(dict(row))
                return FakeResponse(updated)
            if self.operation == "delete":
                removed = [row for row in rows if self._matches(row)]
                self.db.tables[self.table_name] = [row for row in rows if not self._matches(row)]
                return FakeResponse(removed)

            selected = [row for row in rows if self._matches(row)]
            if self.order_by:
                column, desc = self.order_by
                selected.sort(key=lambda row: _comparable(row.get(column)), reverse=desc)
            if self.max_rows is not None:
                selected = selected[: self.max_rows]
            return FakeResponse([self._project(row) for row in selected])


class FakeSupabase:
    def __init__(self) -> None:
        self.tables = defaultdict(list)
        self.lock = threading.Lock()
        self.before_update = []
        self.executed = []

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


class FakeClock:
    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()

"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from collections import namedtuple
from typing import Any

import pytest

KeyRow = namedtuple("KeyRow", ["mail_key"])


class FakeResponseFuture:
    """Mimics cassandra.cluster.ResponseFuture: callbacks fire once per page."""

    def __init__(self, pages: list[list[Any]], error: BaseException | None = None) -> None:
        self._pages = pages
        self._error = error
        self._callbacks: list[tuple[Any, Any]] = []
        self.page_index = 0

    @property
    def has_more_pages(self) -> bool:
        return self._error is None and self.page_index < len(self._pages) - 1

    def add_callbacks(self, callback, errback) -> None:
        self._callbacks.append((callback, errback))
        self._deliver(callback, errback)

    def start_fetching_next_page(self) -> None:
        self.page_index += 1
        for callback, errback in self._callbacks:
            self._deliver(callback, errback)

    def _deliver(self, callback, errback) -> None:
        if self._error is not None:
            errback(self._error)
        else:
            callback(self._pages[self.page_index])


class FakePreparedStatement:
    def __init__(self, query: str) -> None:
        self.query_string = query

    def bind(self, values: dict[str, Any]) -> "FakeBoundStatement":
        return FakeBoundStatement(self, dict(values))


class FakeBoundStatement:
    def __init__(self, prepared: FakePreparedStatement, values: dict[str, Any]) -> None:
        self.prepared_statement = prepared
        self.values = values


class FakeCluster:
    def __init__(self) -> None:
        self.is_shutdown = False

    def shutdown(self) -> None:
        self.is_shutdown = True


class FakeSession:
    """In-memory stand-in for a keyspace-bound cassandra Session.

    Rows are kept per repository and returned in sorted order, like a text
    clustering column. ``fail_with`` makes every request fail with that error.
    ``dict_rows`` returns rows as dicts, like a session using ``dict_factory``.
    """

    def __init__(self, page_size: int = 5000, dict_rows: bool = False) -> None:
        self.page_size = page_size
        self.dict_rows = dict_rows
        self.fail_with: BaseException | None = None
        self.prepared: list[str] = []
        self.executed: list[tuple[str, dict[str, Any]]] = []
        self.ddl: list[str] = []
        self.futures: list[FakeResponseFuture] = []
        self.keys: dict[str, set[str]] = {}
        self.cluster = FakeCluster()
        self.is_shutdown = False

    def prepare(self, query: str) -> FakePreparedStatement:
        self.prepared.append(query)
        return FakePreparedStatement(query)

    def execute(self, query: str) -> list[Any]:
        self.ddl.append(" ".join(query.split()))
        return []

    def execute_async(self, statement: FakeBoundStatement) -> FakeResponseFuture:
        query = statement.prepared_statement.query_string
        values = statement.values
        operation = query.split()[0].upper()
        self.executed.append((operation, values))

        if self.fail_with is not None:
            future = FakeResponseFuture([], error=self.fail_with)
        elif operation == "INSERT":
            self.keys.setdefault(values["repository_name"], set()).add(values["mail_key"])
            future = FakeResponseFuture([[]])
        elif operation == "DELETE":
            self.keys.get(values["repository_name"], set()).discard(values["mail_key"])
            future = FakeResponseFuture([[]])
        elif operation == "SELECT":
            keys = sorted(self.keys.get(values["repository_name"], set()))
            rows = [{"mail_key": k} if self.dict_rows else KeyRow(k) for k in keys]
            pages = [rows[i : i + self.page_size] for i in range(0, len(rows), self.page_size)]
            future = FakeResponseFuture(pages or [[]])
        else:
            raise AssertionError(f"Unexpected statement: {query}")

        self.futures.append(future)
        return future

    def shutdown(self) -> None:
        self.is_shutdown = True


@pytest.fixture
def fake_session() -> FakeSession:
    """Provide an empty in-memory Cassandra session."""
    return FakeSession()


@pytest.fixture
def paged_session() -> FakeSession:
    """Provide an in-memory session that returns two rows per page."""
    return FakeSession(page_size=2)


@pytest.fixture
def mock_settings():
    """Provide settings pointing at a test cluster."""
    from mail_key_index.config import Settings

    return Settings(
        cassandra_contact_points=["cassandra-test"],
        cassandra_keyspace="mail_test",
        cassandra_consistency_level="ONE",
        log_level="DEBUG",
        debug=True,
    )


@pytest.fixture
def dict_row_session() -> FakeSession:
    """Provide an in-memory session whose rows are dicts."""
    return FakeSession(dict_rows=True)

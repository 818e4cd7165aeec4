"""Cassandra plumbing shared by the key index: sessions, schema and async execution."""

from .executor import AsyncExecutor
from .session import connect, shutdown

__all__ = ["AsyncExecutor", "connect", "shutdown"]

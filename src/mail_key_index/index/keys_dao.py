"""Cassandra-backed index of the mail keys held by each mail repository.

Each row of the keys table is one (repository name, mail key) pair. The pair
is the row's primary key, so storing it twice leaves a single row and removing
an absent pair is a no-op.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Mapping
from typing import Any

import structlog
from cassandra.cluster import Session
from cassandra.query import PreparedStatement

from mail_key_index.backend.executor import AsyncExecutor
from mail_key_index.backend.tables import KEYS_TABLE_NAME, MAIL_KEY, REPOSITORY_NAME

logger = structlog.get_logger()


def _row_to_mail_key(row: Any) -> str:
    # dict_factory sessions hand back mappings; the default factory, named tuples.
    if isinstance(row, Mapping):
        return row[MAIL_KEY]
    return getattr(row, MAIL_KEY)


class MailRepositoryKeysDAO:
    """Stores, lists and removes the mail keys of named mail repositories.

    The session is owned by the caller and must already be bound to the
    keyspace holding the keys table. Statements are prepared once here and
    shared by every concurrent operation.
    Rows may come from either the default named tuple factory or
    ``dict_factory``.
    """

    def __init__(self, session: Session) -> None:
        """Prepare the insert, delete and list statements.

        Args:
            session: Connected Cassandra session.
        """

        self._executor = AsyncExecutor(session)

        self._insert_key = self._prepare_insert(session)
        self._delete_key = self._prepare_delete(session)
        self._list_keys = self._prepare_list(session)

    def _prepare_insert(self, session: Session) -> PreparedStatement:
        return session.prepare(
            f"INSERT INTO {KEYS_TABLE_NAME} ({REPOSITORY_NAME}, {MAIL_KEY}) "
            f"VALUES (:{REPOSITORY_NAME}, :{MAIL_KEY})"
        )

    def _prepare_delete(self, session: Session) -> PreparedStatement:
        return session.prepare(
            f"DELETE FROM {KEYS_TABLE_NAME} "
            f"WHERE {REPOSITORY_NAME} = :{REPOSITORY_NAME} AND {MAIL_KEY} = :{MAIL_KEY}"
        )

    def _prepare_list(self, session: Session) -> PreparedStatement:
        return session.prepare(
            f"SELECT {MAIL_KEY} FROM {KEYS_TABLE_NAME} "
            f"WHERE {REPOSITORY_NAME} = :{REPOSITORY_NAME}"
        )

    async def store(self, repository_name: str, mail_key: str) -> None:
        """Add a mail key to a repository's key set.

        Raises:
            StorageTimeout: If Cassandra did not answer in time.
            StorageUnavailable: If Cassandra could not be reached.
        """

        await self._executor.execute_void(
            self._insert_key.bind({REPOSITORY_NAME: repository_name, MAIL_KEY: mail_key})
        )
        logger.debug("mail_key_stored", repository_name=repository_name, mail_key=mail_key)

    async def list_keys(self, repository_name: str) -> AsyncIterator[str]:
        """Yield every mail key currently stored for a repository.

        Each call runs a fresh query. Keys come back in Cassandra's clustering
        order; an unknown repository yields nothing.
        """

        statement = self._list_keys.bind({REPOSITORY_NAME: repository_name})
        async for row in self._executor.execute_paged(statement):
            yield _row_to_mail_key(row)

    async def remove(self, repository_name: str, mail_key: str) -> None:
        """Remove a mail key from a repository's key set, if present."""

        await self._executor.execute_void(
            self._delete_key.bind({REPOSITORY_NAME: repository_name, MAIL_KEY: mail_key})
        )
        logger.debug("mail_key_removed", repository_name=repository_name, mail_key=mail_key)

"""Idempotent schema bootstrap for the mail repository keys table.

The key index never creates schema on its own; operators run this once per
cluster (see ``mail-key-index schema init``) before the index is used.
"""

from __future__ import annotations

import structlog
from cassandra.cluster import Session

from mail_key_index.backend.tables import KEYS_TABLE_NAME, MAIL_KEY, REPOSITORY_NAME
from mail_key_index.config import Settings

logger = structlog.get_logger()


def keyspace_ddl(keyspace: str, replication_factor: int) -> str:
    return (
        f"CREATE KEYSPACE IF NOT EXISTS {keyspace} "
        "WITH replication = "
        f"{{'class': 'SimpleStrategy', 'replication_factor': {replication_factor}}}"
    )


def keys_table_ddl(keyspace: str) -> str:
    return f"""
        CREATE TABLE IF NOT EXISTS {keyspace}.{KEYS_TABLE_NAME} (
            {REPOSITORY_NAME} text,
            {MAIL_KEY} text,
            PRIMARY KEY (({REPOSITORY_NAME}), {MAIL_KEY})
        )
        """


def ensure_schema(session: Session, settings: Settings) -> None:
    """Create the keyspace and keys table if they do not exist.

    Args:
        session: Connected Cassandra session. It does not need to be bound
            to the keyspace yet.
        settings: Settings providing keyspace name and replication factor.
    """

    keyspace = settings.cassandra_keyspace
    session.execute(keyspace_ddl(keyspace, settings.cassandra_replication_factor))
    session.execute(keys_table_ddl(keyspace))
    logger.info(
        "mail_key_index_schema_ensured",
        keyspace=keyspace,
        table=KEYS_TABLE_NAME,
        replication_factor=settings.cassandra_replication_factor,
    )

"""Cassandra session lifecycle.

The key index receives an already-connected session; this module is how the
CLI (or any other owner) builds and tears one down from settings.
"""

from __future__ import annotations

import structlog
from cassandra.auth import PlainTextAuthProvider
from cassandra.cluster import EXEC_PROFILE_DEFAULT, Cluster, ExecutionProfile, NoHostAvailable, Session
from cassandra.query import named_tuple_factory

from mail_key_index.config import Settings
from mail_key_index.exceptions import ConfigurationError, StorageUnavailable

logger = structlog.get_logger()


def build_cluster(settings: Settings) -> Cluster:
    """Create an unconnected cluster object from settings.

    Raises:
        ConfigurationError: If contact points or credentials are inconsistent.
    """

    if not settings.cassandra_contact_points:
        raise ConfigurationError("At least one Cassandra contact point is required")

    if settings.cassandra_password is not None and settings.cassandra_username is None:
        raise ConfigurationError("cassandra_password is set but cassandra_username is not")

    auth_provider = None
    if settings.cassandra_username is not None:
        auth_provider = PlainTextAuthProvider(
            username=settings.cassandra_username,
            password=settings.cassandra_password or "",
        )

    profile = ExecutionProfile(
        consistency_level=settings.consistency_level_value,
        request_timeout=settings.cassandra_request_timeout,
        row_factory=named_tuple_factory,
    )

    return Cluster(
        contact_points=settings.cassandra_contact_points,
        port=settings.cassandra_port,
        auth_provider=auth_provider,
        execution_profiles={EXEC_PROFILE_DEFAULT: profile},
        connect_timeout=settings.cassandra_connect_timeout,
    )


def connect(settings: Settings, use_keyspace: bool = True) -> Session:
    """Connect to the cluster described by settings.

    Args:
        settings: Application settings.
        use_keyspace: Bind the session to the configured keyspace. Pass False
            before the keyspace exists (schema bootstrap).

    Returns:
        A connected session, safe for concurrent use.

    Raises:
        ConfigurationError: If the settings are inconsistent.
        StorageUnavailable: If no contact point can be reached.
    """

    cluster = build_cluster(settings)
    keyspace = settings.cassandra_keyspace if use_keyspace else None

    try:
        session = cluster.connect(keyspace)
    except NoHostAvailable as exc:
        cluster.shutdown()
        logger.error(
            "cassandra_connect_failed",
            contact_points=settings.cassandra_contact_points,
            port=settings.cassandra_port,
            error=str(exc),
        )
        raise StorageUnavailable(f"Unable to reach Cassandra: {exc}") from exc

    logger.info(
        "cassandra_session_connected",
        contact_points=settings.cassandra_contact_points,
        port=settings.cassandra_port,
        keyspace=keyspace,
        consistency_level=settings.cassandra_consistency_level,
    )
    return session


def shutdown(session: Session) -> None:
    """Close the session and the cluster it belongs to."""

    session.shutdown()
    session.cluster.shutdown()
    logger.info("cassandra_session_closed")

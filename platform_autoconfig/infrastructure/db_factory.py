"""
Postgres connection helpers used while bringing up test containers.

A freshly started Postgres container accepts TCP connections before it is
ready to serve queries, so connecting retries on transient errors using
tenacity.
"""

from __future__ import annotations

from typing import Iterable
from urllib.parse import quote

import psycopg
from psycopg import Connection, sql
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from platform_autoconfig.utils.logging import get_logger

log = get_logger(__name__)


def build_dsn(host: str, port: int, username: str, password: str, database: str) -> str:
    """Compose a libpq DSN; credentials are percent-encoded."""
    return (
        f"postgresql://{quote(username, safe='')}:{quote(password, safe='')}"
        f"@{host}:{port}/{database}"
    )


@retry(
    stop=stop_after_attempt(10),
    wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
    retry=retry_if_exception_type((psycopg.OperationalError, psycopg.InterfaceError)),
    reraise=True,
)
def get_sync_connection(dsn: str) -> Connection:
    """
    Open an autocommit connection, retrying while the server starts up.

    Raises
    ------
    psycopg.OperationalError
        If the server is still unreachable after all attempts.
    """
    return psycopg.connect(dsn, autocommit=True, connect_timeout=5)


def create_extensions(dsn: str, extensions: Iterable[str]) -> None:
    """Create each extension if missing. Requires a superuser login."""
    names = [name.strip() for name in extensions if name.strip()]
    if not names:
        return
    with get_sync_connection(dsn) as conn:
        for name in names:
            conn.execute(sql.SQL("CREATE EXTENSION IF NOT EXISTS {}").format(sql.Identifier(name)))
    log.debug("created extensions %s", ",".join(names))


__all__ = ["build_dsn", "create_extensions", "get_sync_connection"]

"""
Connection lifecycle: one short-lived connection per gateway operation.

No pooling and no reuse across operations. Each call builds a NullPool
engine, opens exactly one DBAPI connection, hands it to the caller and
closes it on every exit path.
"""
import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, Optional, TypeVar

from sqlalchemy import create_engine
from sqlalchemy.engine import Connection, URL
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.pool import NullPool

from datagateway.core.errors import DataSourceConnectionError, redact

logger = logging.getLogger(__name__)

T = TypeVar("T")


def driver_message(exc: BaseException) -> str:
    """Underlying driver message, without SQLAlchemy's wrapper text"""
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        msg = str(exc.orig).strip()
    else:
        msg = str(exc).strip()
    return msg or exc.__class__.__name__


def timeout_seconds(timeout_ms: Optional[int]) -> Optional[int]:
    """Round a millisecond timeout up to whole seconds; None/0 means no explicit timeout"""
    if not timeout_ms or timeout_ms <= 0:
        return None
    return max(1, -(-timeout_ms // 1000))


@contextmanager
def open_connection(url: URL, connect_args: Optional[Dict[str, Any]] = None) -> Iterator[Connection]:
    """
    Open a single-use connection to an external database.

    Raises:
        DataSourceConnectionError: handshake, DNS, TLS or authentication failure
    """
    engine = create_engine(url, poolclass=NullPool, connect_args=connect_args or {}, future=True)
    try:
        try:
            conn = engine.connect()
        except SQLAlchemyError as e:
            msg = driver_message(e)
            logger.warning(f"Connection to {url.render_as_string(hide_password=True)} failed: {redact(msg)}")
            raise DataSourceConnectionError(msg) from e

        try:
            yield conn
        finally:
            conn.close()
    finally:
        engine.dispose()


def with_connection(
    url: URL,
    connect_args: Optional[Dict[str, Any]],
    fn: Callable[[Connection], T],
) -> T:
    """Run fn against a fresh connection and return its result; the connection is always released"""
    with open_connection(url, connect_args) as conn:
        return fn(conn)

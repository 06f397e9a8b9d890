"""Database access for the SMO leave report."""
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Mapping, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine, make_url
from sqlalchemy.exc import SQLAlchemyError

from smo_leave.utilities import config
from smo_leave.extractors.query_builder import LeaveQuery

logger = logging.getLogger(__name__)


class ExtractionError(Exception):
    """Connection, timeout or execution failure that aborts the run."""


def mask_url(url: str) -> str:
    """Hide the password of a database URL for logging."""
    try:
        return make_url(url).render_as_string(hide_password=True)
    except Exception:
        return "<unparseable database url>"


def describe_data_source(url: str) -> Dict[str, Optional[str]]:
    """Return the backend, host and database named by a URL."""
    parsed = make_url(url)
    return {
        "backend": parsed.get_backend_name(),
        "host": parsed.host,
        "database": parsed.database,
    }


def _connect_args(url: str, query_timeout: int) -> Dict[str, Any]:
    """Driver-specific timeout arguments."""
    if make_url(url).get_backend_name() == "mysql":
        return {
            "connect_timeout": config.CONNECT_TIMEOUT,
            "read_timeout": query_timeout,
            "write_timeout": query_timeout,
        }
    return {}


def create_db_engine(
    db_url: Optional[str] = None,
    query_timeout: int = config.QUERY_TIMEOUT,
) -> Engine:
    """
    Create and return a database engine.

    Args:
        db_url: Database URL (uses config default if not provided)
        query_timeout: Seconds before a query is abandoned

    Returns:
        SQLAlchemy Engine instance

    Raises:
        ExtractionError: If the connection test fails
    """
    url = db_url or config.DB_URL
    masked_url = mask_url(url)
    engine = None

    try:
        logger.debug("Creating database engine: %s", masked_url)
        engine = create_engine(
            url,
            pool_pre_ping=True,
            connect_args=_connect_args(url, query_timeout),
        )
        logger.debug("Testing database connection with SELECT 1...")
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        logger.debug("✓ Database connection test successful")
        return engine
    except SQLAlchemyError as exc:
        if engine is not None:
            engine.dispose()
        logger.error("✗ Database connection failed to %s", masked_url)
        logger.error("Error: %s - %s", type(exc).__name__, exc)
        raise ExtractionError(
            f"Failed to connect to database: {type(exc).__name__} - {exc}"
        ) from exc


@contextmanager
def open_connection(engine: Engine) -> Iterator[Connection]:
    """
    Open the single connection used by a run.

    The connection is closed on every exit path, including errors raised
    while rows are still being consumed.
    """
    try:
        connection = engine.connect()
    except SQLAlchemyError as exc:
        raise ExtractionError(f"Failed to open connection: {type(exc).__name__} - {exc}") from exc
    try:
        yield connection
    finally:
        connection.close()
        logger.debug("Database connection closed")


def stream_rows(connection: Connection, query: LeaveQuery) -> Iterator[Mapping[str, Any]]:
    """
    Execute a query and yield its rows as mappings, forward-only.

    Raises:
        ExtractionError: If execution or row fetching fails
    """
    try:
        result = connection.execute(query.statement, query.params)
        for row in result.mappings():
            yield row
    except SQLAlchemyError as exc:
        logger.error("Query execution failed: %s - %s", type(exc).__name__, exc)
        raise ExtractionError(f"Query execution failed: {type(exc).__name__} - {exc}") from exc


def fetch_smo_shift_counts(connection: Connection, query: LeaveQuery) -> Dict[int, int]:
    """
    Fetch qualifying SMOs and their marker-shift counts.

    Returns:
        Mapping of employee_id to shift count
    """
    counts: Dict[int, int] = {}
    for row in stream_rows(connection, query):
        counts[int(row["employee_id"])] = int(row["shift_count"] or 0)
    return counts

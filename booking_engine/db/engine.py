"""
SQLAlchemy engine singleton with production-ready connection pooling.

This module creates a single engine instance with connection pooling configured
for concurrent request handlers. PostgreSQL is the production target; SQLite is
accepted for local runs and tests and gets a thread-shareable connection setup
instead of the pool tuning.
"""

from typing import Any, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url

from booking_engine.config import DATABASE_URL

if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL is not set.")


def build_engine(url: str) -> Engine:
    """
    Create an engine for ``url`` with options suited to its backend.

    Args:
        url: SQLAlchemy database URL

    Returns:
        Engine: Configured SQLAlchemy engine
    """
    options: dict[str, Any]
    if make_url(url).get_backend_name() == "sqlite":
        options = {
            # Request handlers run in a threadpool
            "connect_args": {"check_same_thread": False, "timeout": 30},
        }
    else:
        options = {
            "pool_size": 10,  # Number of connections to maintain in the pool
            "max_overflow": 20,  # Additional connections when pool is exhausted
            "pool_pre_ping": True,  # Verify connections before using
            "pool_recycle": 3600,  # Recycle connections after 1 hour
        }

    return create_engine(url, future=True, echo=False, **options)


engine: Engine = build_engine(DATABASE_URL)


def check_engine_health(db_engine: Optional[Engine] = None) -> bool:
    """
    Check if database engine is healthy and connections are working.

    This function is used by the /ready endpoint to verify database
    connectivity before allowing traffic to the service.

    Args:
        db_engine: Engine to probe (defaults to the module singleton)

    Returns:
        bool: True if database is reachable and healthy, False otherwise
    """
    try:
        with (db_engine or engine).connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False

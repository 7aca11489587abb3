"""
Generic upsert helper with IS DISTINCT FROM optimization.

Used by the catalog writer so a property feed that re-sends unchanged data does
not rewrite rows or bump updated_at. Dispatches to the PostgreSQL or SQLite
INSERT ... ON CONFLICT construct depending on the connection's dialect.
"""

from typing import Any

from sqlalchemy import or_
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Connection


def _insert_for(conn: Connection) -> Any:
    if conn.dialect.name == "postgresql":
        return postgresql.insert
    if conn.dialect.name == "sqlite":
        return sqlite.insert
    raise NotImplementedError(f"Upsert is not supported on dialect {conn.dialect.name!r}")


def upsert_with_distinct_check(
    conn: Connection,
    table: type,
    rows: list[dict[str, Any]],
    conflict_column: str,
    distinct_columns: list[str],
    update_columns: list[str] | None = None,
) -> None:
    """
    Perform upsert with IS DISTINCT FROM optimization.

    Only updates rows where at least one of ``distinct_columns`` actually
    changed, preventing unnecessary writes and updated_at timestamp changes.

    Args:
        conn: Active database connection (within transaction)
        table: SQLAlchemy ORM table class (e.g., Property)
        rows: List of row dicts to upsert
        conflict_column: Column name for ON CONFLICT (usually "id")
        distinct_columns: Columns to check for changes
        update_columns: Columns to update on conflict (default: distinct_columns + updated_at)

    Example:
        >>> with engine.begin() as conn:
        ...     upsert_with_distinct_check(
        ...         conn=conn,
        ...         table=Property,
        ...         rows=[{"id": 1, "base_price": Decimal("450.00"), ...}],
        ...         conflict_column="id",
        ...         distinct_columns=["base_price"],
        ...     )
    """
    if not rows:
        return

    if update_columns is None:
        update_columns = [*distinct_columns, "updated_at"]

    stmt = _insert_for(conn)(table).values(rows)

    set_dict = {col: getattr(stmt.excluded, col) for col in update_columns}

    distinct_check = or_(
        *(
            getattr(table, col).is_distinct_from(getattr(stmt.excluded, col))
            for col in distinct_columns
        )
    )

    stmt = stmt.on_conflict_do_update(
        index_elements=[conflict_column],
        set_=set_dict,
        where=distinct_check,
    )

    conn.execute(stmt)

"""Dialect-specific single-statement upserts.

Each statement relies on a unique constraint to decide between insert and
update, so concurrent writers for the same key cannot create duplicates.
"""

from collections.abc import Iterable
from typing import Any

from sqlalchemy.sql.dml import Insert


def build_upsert(
    dialect_name: str,
    table,
    values: dict[str, Any],
    conflict_columns: Iterable[str],
    update_columns: Iterable[str],
) -> Insert:
    """Build ``INSERT ... ON CONFLICT DO UPDATE`` (or the MySQL equivalent).

    Args:
        dialect_name: ``session.bind.dialect.name``
        table: Table or mapped class to write
        values: Full row for the insert branch
        conflict_columns: Columns carrying the unique constraint
        update_columns: Columns overwritten from ``values`` when the row exists

    Raises:
        NotImplementedError: for dialects without a native upsert
    """
    update_columns = list(update_columns)

    if dialect_name == "postgresql":
        from sqlalchemy.dialects.postgresql import insert as pg_insert

        stmt = pg_insert(table).values(**values)
        return stmt.on_conflict_do_update(
            index_elements=list(conflict_columns),
            set_={col: stmt.excluded[col] for col in update_columns},
        )

    if dialect_name == "sqlite":
        from sqlalchemy.dialects.sqlite import insert as sqlite_insert

        stmt = sqlite_insert(table).values(**values)
        return stmt.on_conflict_do_update(
            index_elements=list(conflict_columns),
            set_={col: stmt.excluded[col] for col in update_columns},
        )

    if dialect_name in ("mysql", "mariadb"):
        from sqlalchemy.dialects.mysql import insert as mysql_insert

        stmt = mysql_insert(table).values(**values)
        return stmt.on_duplicate_key_update(
            {col: stmt.inserted[col] for col in update_columns}
        )

    raise NotImplementedError(f"No native upsert for dialect {dialect_name!r}")

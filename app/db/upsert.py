"""Dialect-specific INSERT constructs that support ON CONFLICT."""

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import PersistenceError


def conflict_insert(db: AsyncSession, model):
    """Return an INSERT for ``model`` with ``on_conflict_do_*`` support for the bound dialect."""
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return pg_insert(model)
    if dialect == "sqlite":
        return sqlite_insert(model)
    raise PersistenceError(f"Upserts are not supported on {dialect}")

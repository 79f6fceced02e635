"""Record store — the four table operations every component is built on."""

from __future__ import annotations

from typing import Any, Optional

import structlog
from sqlalchemy import Table, delete, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from warranty_renewal.errors import StoreError
from warranty_renewal.models import Base

logger = structlog.get_logger()

UPDATE_FIELDS = frozenset({"ttl", "expired", "warranty_expiry", "sk"})

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class RecordStore:
    """Table operations over the shared SQLAlchemy metadata.

    Each call runs in its own session and transaction, so concurrent
    callers never share a connection.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def write(self, table: str, item: dict[str, Any]) -> dict[str, Any]:
        """Put `item`, replacing any existing row with the same key.

        Columns missing from `item` are cleared, as with a full-item put.
        """
        tbl = self._table(table)
        row = {column.key: item.get(column.key) for column in tbl.columns}
        key_names = [column.key for column in tbl.primary_key.columns]

        try:
            async with self.session_factory() as session, session.begin():
                insert = _UPSERT_DIALECTS.get(session.bind.dialect.name)
                if insert is None:
                    raise StoreError(
                        f"Upsert is not supported on {session.bind.dialect.name}"
                    )
                stmt = insert(tbl).values(**row)
                stmt = stmt.on_conflict_do_update(
                    index_elements=key_names,
                    set_={k: v for k, v in row.items() if k not in key_names},
                )
                await session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("store_write_failed", table=table, error=str(e))
            raise StoreError(str(e)) from e

        logger.debug("store_write", table=table, key=_key_of(row, key_names))
        return item

    async def update(
        self,
        table: str,
        key: dict[str, Any],
        patch: dict[str, Any],
    ) -> dict[str, Any]:
        """Set ttl, expired, warranty_expiry and sk on the row at `key`.

        All four fields are required. A key with no row is a no-op.

        Returns:
            The patch, or an empty mapping when no row has this key
        """
        if set(patch) != UPDATE_FIELDS:
            raise ValueError(
                f"update patch must set exactly {sorted(UPDATE_FIELDS)}, got {sorted(patch)}"
            )

        tbl = self._table(table)
        stmt = update(tbl).where(*self._match(tbl, key)).values(**patch)

        try:
            async with self.session_factory() as session, session.begin():
                result = await session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("store_update_failed", table=table, key=key, error=str(e))
            raise StoreError(str(e)) from e

        logger.debug("store_update", table=table, key=key, rows=result.rowcount)
        return patch if result.rowcount else {}

    async def get(self, table: str, key: dict[str, Any]) -> dict[str, Any]:
        """Return the row at `key`, or an empty mapping."""
        tbl = self._table(table)
        stmt = select(tbl).where(*self._match(tbl, key))

        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                row = result.mappings().first()
        except SQLAlchemyError as e:
            logger.error("store_get_failed", table=table, key=key, error=str(e))
            raise StoreError(str(e)) from e

        return dict(row) if row else {}

    async def query(
        self,
        table: str,
        index: str,
        pk_value: str,
        pk_key: str = "pk",
        sk_value: Optional[str] = None,
        sk_key: str = "sk",
        ascending: bool = True,
    ) -> list[dict[str, Any]]:
        """Return every row of one partition of `index`, ordered by sort key.

        Args:
            table: Table name
            index: Name of an index defined on the table
            pk_value: Partition key value to match
            pk_key: Partition key column
            sk_value: Optional exact sort key to narrow the result to
            sk_key: Sort key column
            ascending: Sort direction

        Returns:
            Matching rows, possibly empty
        """
        tbl = self._table(table)
        if index not in {ix.name for ix in tbl.indexes}:
            raise StoreError(f"Unknown index {index} on table {table}")

        try:
            pk_column = tbl.c[pk_key]
            sk_column = tbl.c[sk_key]
        except KeyError as e:
            raise StoreError(f"Unknown column {e.args[0]} on table {table}") from e

        stmt = select(tbl).where(pk_column == pk_value)
        if sk_value:
            stmt = stmt.where(sk_column == sk_value)
        stmt = stmt.order_by(sk_column.asc() if ascending else sk_column.desc())

        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                rows = result.mappings().all()
        except SQLAlchemyError as e:
            logger.error("store_query_failed", table=table, index=index, error=str(e))
            raise StoreError(str(e)) from e

        return [dict(row) for row in rows]

    async def remove_expired(
        self,
        table: str,
        now_epoch_seconds: int,
        limit: int,
        ttl_key: str = "ttl",
    ) -> list[dict[str, Any]]:
        """Delete up to `limit` rows whose TTL has passed.

        Returns:
            The deleted rows as they were before deletion
        """
        tbl = self._table(table)
        ttl_column = tbl.c[ttl_key]
        key_columns = list(tbl.primary_key.columns)

        stmt = (
            select(tbl)
            .where(ttl_column <= now_epoch_seconds)
            .order_by(ttl_column)
            .limit(limit)
            .with_for_update(skip_locked=True)
        )

        try:
            async with self.session_factory() as session, session.begin():
                result = await session.execute(stmt)
                images = [dict(row) for row in result.mappings().all()]
                for image in images:
                    await session.execute(
                        delete(tbl).where(*(c == image[c.key] for c in key_columns))
                    )
        except SQLAlchemyError as e:
            logger.error("store_remove_expired_failed", table=table, error=str(e))
            raise StoreError(str(e)) from e

        if images:
            logger.info("store_expired_removed", table=table, count=len(images))
        return images

    def _table(self, name: str) -> Table:
        try:
            return Base.metadata.tables[name]
        except KeyError:
            raise StoreError(f"Unknown table {name}") from None

    def _match(self, tbl: Table, key: dict[str, Any]) -> list:
        try:
            return [tbl.c[name] == value for name, value in key.items()]
        except KeyError as e:
            raise StoreError(f"Unknown column {e.args[0]} on table {tbl.name}") from e


def _key_of(row: dict[str, Any], key_names: list[str]) -> dict[str, Any]:
    return {name: row[name] for name in key_names}

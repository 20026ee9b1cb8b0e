"""SQLAlchemy backend implementing ISuppressionStore."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from sqlalchemy import Column, Date, Engine, MetaData, String, Table, create_engine, select, text
from sqlalchemy.exc import SQLAlchemyError

from leadscrub.core.exceptions import StoreUnavailableError
from leadscrub.models.matching import SuppressionRecord


def suppression_table(name: str = "campaigns", metadata: MetaData | None = None) -> Table:
    """Column layout of the suppression registry maintained by ingestion."""
    return Table(
        name,
        metadata if metadata is not None else MetaData(),
        Column("left_3", String(12), nullable=False, index=True),
        Column("left_4", String(16), nullable=False),
        Column("client", String(64)),
        Column("date_", Date),
    )


def _as_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    return value


class SQLSuppressionStore:
    """Production ISuppressionStore backed by a pooled SQLAlchemy engine.

    A connection is checked out for the duration of a single lookup and
    returned to the pool on every exit path.
    """

    def __init__(self, url: str | None = None, *, engine: Engine | None = None,
                 table: str = "campaigns", pool_size: int = 5, max_overflow: int = 10,
                 pool_timeout: int = 30, pool_pre_ping: bool = True) -> None:
        if engine is None:
            if not url:
                raise ValueError("either url or engine is required")
            engine = create_engine(
                url,
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_timeout=pool_timeout,
                pool_pre_ping=pool_pre_ping,
            )
        self._engine = engine
        self._table = suppression_table(table)

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def table(self) -> Table:
        return self._table

    def find_match(self, left_3: str, left_4: str, client: str | None = None) -> SuppressionRecord | None:
        tbl = self._table
        stmt = select(tbl.c.left_3, tbl.c.left_4, tbl.c.client, tbl.c.date_).where(
            tbl.c.left_3 == left_3,
            tbl.c.left_4 == left_4,
        )
        if client is not None:
            stmt = stmt.where(tbl.c.client == client)
        # Most recent record wins so repeated runs classify the same way.
        stmt = stmt.order_by(tbl.c.date_.desc().nulls_last()).limit(1)

        try:
            with self._engine.connect() as conn:
                row = conn.execute(stmt).mappings().first()
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(
                f"Suppression lookup failed for left_3={left_3!r}, left_4={left_4!r}: {exc}"
            ) from exc

        if row is None:
            return None
        return SuppressionRecord(
            left_3=row["left_3"],
            left_4=row["left_4"],
            client=row["client"],
            date_=_as_date(row["date_"]),
        )

    def ping(self) -> None:
        try:
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Suppression store unreachable: {exc}") from exc

    def close(self) -> None:
        self._engine.dispose()

"""Franchise-scoped data access handle.

A FranchiseScope is the only way tenant-owned tables are read or written
after a request has been resolved. Every statement it builds carries
`franchise_id = <bound franchise>`; caller predicates are ANDed on top, so
they can narrow a query but never widen it to another franchise.
"""

import uuid
from collections.abc import AsyncIterator, Iterable, Mapping, Sequence
from contextlib import asynccontextmanager
from typing import Any, TypeVar

from sqlalchemy import ColumnElement, insert, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from fleet.app.db.models import FranchiseOwned
from fleet.app.errors import BackendUnavailableError

ModelT = TypeVar("ModelT", bound=FranchiseOwned)


def _require_owned(model: type) -> None:
    if not (isinstance(model, type) and issubclass(model, FranchiseOwned)):
        raise TypeError(f"{model!r} is not a franchise-owned model")


class FranchiseScope:
    """Data-access handle bound to exactly one franchise."""

    def __init__(self, session: AsyncSession, franchise_id: uuid.UUID) -> None:
        self._session = session
        self._franchise_id = franchise_id

    @property
    def franchise_id(self) -> uuid.UUID:
        return self._franchise_id

    def _tenant_filter(self, model: type[FranchiseOwned]) -> ColumnElement[bool]:
        _require_owned(model)
        return model.franchise_id == self._franchise_id

    async def _execute(self, statement: Any) -> Any:
        try:
            return await self._session.execute(statement)
        except SQLAlchemyError as e:
            raise BackendUnavailableError(str(e)) from e

    async def select(
        self,
        model: type[ModelT],
        *where: ColumnElement[bool],
        order_by: Sequence[Any] = (),
        limit: int | None = None,
    ) -> list[ModelT]:
        """Select rows of `model` in this franchise matching all predicates."""
        query = select(model).where(self._tenant_filter(model), *where)
        if order_by:
            query = query.order_by(*order_by)
        if limit is not None:
            query = query.limit(limit)

        result = await self._execute(query)
        return list(result.scalars().all())

    async def first(self, model: type[ModelT], *where: ColumnElement[bool]) -> ModelT | None:
        """Return the first matching row in this franchise, or None."""
        rows = await self.select(model, *where, limit=1)
        return rows[0] if rows else None

    async def values(
        self,
        column: InstrumentedAttribute[Any],
        *where: ColumnElement[bool],
        order_by: Sequence[Any] = (),
    ) -> list[Any]:
        """Select a single column of a franchise-owned model."""
        model = column.class_
        query = select(column).where(self._tenant_filter(model), *where)
        if order_by:
            query = query.order_by(*order_by)

        result = await self._execute(query)
        return list(result.scalars().all())

    async def update(
        self,
        model: type[FranchiseOwned],
        values: Mapping[str, Any],
        *where: ColumnElement[bool],
    ) -> int:
        """Update matching rows in this franchise.

        Returns:
            Number of rows affected
        """
        if "franchise_id" in values:
            raise ValueError("franchise_id cannot be changed through a franchise scope")

        statement = (
            update(model)
            .where(self._tenant_filter(model), *where)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self._execute(statement)
        return result.rowcount or 0

    def _stamp(self, row: Mapping[str, Any]) -> dict[str, Any]:
        stamped = dict(row)
        owner = stamped.get("franchise_id", self._franchise_id)
        if owner != self._franchise_id:
            raise ValueError("Row belongs to a different franchise")
        stamped["franchise_id"] = self._franchise_id
        return stamped

    def _dialect_insert(self, model: type[FranchiseOwned]) -> Any:
        dialect = self._session.get_bind().dialect.name
        if dialect == "postgresql":
            return postgresql.insert(model)
        if dialect == "sqlite":
            return sqlite.insert(model)
        raise NotImplementedError(f"Conflict-aware insert not supported on {dialect}")

    async def insert_if_absent(
        self,
        model: type[FranchiseOwned],
        rows: Iterable[Mapping[str, Any]],
        conflict_columns: Sequence[str],
    ) -> int:
        """Insert rows, leaving any row that hits the conflict target untouched.

        Returns:
            Number of rows actually inserted
        """
        _require_owned(model)
        payload = [self._stamp(row) for row in rows]
        if not payload:
            return 0

        statement = (
            self._dialect_insert(model)
            .values(payload)
            .on_conflict_do_nothing(index_elements=list(conflict_columns))
        )
        result = await self._execute(statement)
        return result.rowcount or 0

    async def upsert(
        self,
        model: type[ModelT],
        row: Mapping[str, Any],
        conflict_columns: Sequence[str],
        update_columns: Sequence[str],
    ) -> ModelT:
        """Insert a row or update `update_columns` on conflict; return the stored row."""
        _require_owned(model)
        stamped = self._stamp(row)

        base = self._dialect_insert(model).values(stamped)
        statement = base.on_conflict_do_update(
            index_elements=list(conflict_columns),
            set_={name: getattr(base.excluded, name) for name in update_columns},
        )
        await self._execute(statement)

        keys = [
            getattr(model, name) == stamped[name]
            for name in conflict_columns
            if name != "franchise_id"
        ]
        stored = await self.first(model, *keys)
        if stored is None:
            raise BackendUnavailableError("Upserted row could not be read back")
        await self._refresh(stored)
        return stored

    async def _refresh(self, obj: Any) -> None:
        try:
            await self._session.refresh(obj)
        except SQLAlchemyError as e:
            raise BackendUnavailableError(str(e)) from e

    def add(self, obj: FranchiseOwned) -> None:
        """Stage a new franchise-owned object, stamping the franchise id."""
        _require_owned(type(obj))
        owner = getattr(obj, "franchise_id", None)
        if owner is not None and owner != self._franchise_id:
            raise ValueError("Object belongs to a different franchise")
        obj.franchise_id = self._franchise_id
        self._session.add(obj)

    async def commit(self) -> None:
        try:
            await self._session.commit()
        except SQLAlchemyError as e:
            raise BackendUnavailableError(str(e)) from e

    async def rollback(self) -> None:
        await self._session.rollback()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["FranchiseScope"]:
        """Run a unit of work; commit on success, roll back on any failure."""
        try:
            yield self
            await self.commit()
        except BaseException:
            await self.rollback()
            raise

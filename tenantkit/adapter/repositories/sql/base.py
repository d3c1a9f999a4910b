from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Generic, List, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import Table, delete, insert, select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from tenantkit.domain.schema import MergedSchema

E = TypeVar("E", bound=BaseModel)


class SqlRepository(Generic[E]):
    """
    Core-table repository base.

    Entities are converted to storage shape through the merged schema before
    every write and back after every read.
    """

    def __init__(
        self, session: AsyncSession, table: Table, schema: MergedSchema, entity_type: Type[E]
    ):
        self.session = session
        self.table = table
        self.schema = schema
        self.entity_type = entity_type

    def column(self, field_name: str):
        return self.table.c[self.schema.storage_name(field_name)]

    def to_row(self, entity: BaseModel) -> Dict[str, Any]:
        row = self.schema.to_storage_shape(entity.model_dump())
        return {
            key: value.value if isinstance(value, Enum) else value
            for key, value in row.items()
            if key in self.table.c
        }

    def to_entity(self, row: Mapping[str, Any]) -> E:
        # SQLite drops the offset of timezone-aware columns; values are stored in UTC
        values = {
            key: value.replace(tzinfo=timezone.utc)
            if isinstance(value, datetime) and value.tzinfo is None
            else value
            for key, value in row.items()
        }
        return self.entity_type.model_validate(self.schema.from_storage_shape(values))

    async def fetch_one(self, *criteria) -> Optional[E]:
        result = await self.session.execute(select(self.table).where(*criteria).limit(1))
        row = result.mappings().first()
        return self.to_entity(row) if row is not None else None

    async def fetch_all(self, *criteria, order_by=()) -> List[E]:
        stmt = select(self.table).where(*criteria).order_by(*order_by)
        result = await self.session.execute(stmt)
        return [self.to_entity(row) for row in result.mappings().all()]

    async def insert_entity(self, entity: E) -> E:
        await self.session.execute(insert(self.table).values(**self.to_row(entity)))
        return entity

    async def update_entity(self, entity: E) -> E:
        row = self.to_row(entity)
        id_column = self.column("id")
        result = await self.session.execute(
            update(self.table).where(id_column == row.pop(id_column.name)).values(**row)
        )
        if result.rowcount == 0:
            raise LookupError(f"No {self.table.name} row with id {entity.id}")
        return entity

    async def delete_by_id(self, entity_id: str) -> None:
        result = await self.session.execute(
            delete(self.table).where(self.column("id") == entity_id)
        )
        if result.rowcount == 0:
            raise LookupError(f"No {self.table.name} row with id {entity_id}")

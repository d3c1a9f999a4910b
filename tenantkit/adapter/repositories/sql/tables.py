"""
SQL Tables

SQLAlchemy Core tables generated from merged entity schemas. Column names are
the schema's storage names, so custom fields and naming strategies apply to
the SQL adapter exactly as they do to the in-memory one.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional, Union, get_args, get_origin

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    Integer,
    MetaData,
    String,
    Table,
)
from sqlalchemy.ext.asyncio import AsyncEngine

from tenantkit.domain.schema import EntitySchemas, MergedSchema


def _unwrap_optional(annotation: Any) -> Any:
    if get_origin(annotation) is Union:
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def _allows_none(annotation: Any) -> bool:
    return get_origin(annotation) is Union and type(None) in get_args(annotation)


def column_type(annotation: Any):
    """SQL type for a pydantic field annotation (JSON for anything structured)"""
    annotation = _unwrap_optional(annotation)
    if isinstance(annotation, type):
        if issubclass(annotation, bool):
            return Boolean()
        if issubclass(annotation, (str, Enum)):
            return String()
        if issubclass(annotation, int):
            return Integer()
        if issubclass(annotation, float):
            return Float()
        if issubclass(annotation, datetime):
            return DateTime(timezone=True)
        if issubclass(annotation, date):
            return Date()
    return JSON()


def build_table(name: str, schema: MergedSchema, metadata: MetaData) -> Table:
    columns = []
    for field_name, info in schema.model.model_fields.items():
        storage_name = schema.storage_name(field_name)
        if field_name == "id":
            columns.append(Column(storage_name, String(), primary_key=True))
            continue
        columns.append(
            Column(
                storage_name,
                column_type(info.annotation),
                nullable=not info.is_required() or _allows_none(info.annotation),
                index=field_name.endswith("_id"),
            )
        )
    return Table(name, metadata, *columns)


@dataclass(frozen=True)
class SqlTables:
    metadata: MetaData
    users: Table
    organizations: Table
    organization_memberships: Table


def build_tables(schemas: EntitySchemas, metadata: Optional[MetaData] = None) -> SqlTables:
    metadata = metadata or MetaData()
    return SqlTables(
        metadata=metadata,
        users=build_table("users", schemas.users, metadata),
        organizations=build_table("organizations", schemas.organizations, metadata),
        organization_memberships=build_table(
            "organization_memberships", schemas.organization_memberships, metadata
        ),
    )


async def create_all(engine: AsyncEngine, tables: SqlTables) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(tables.metadata.create_all)


async def drop_all(engine: AsyncEngine, tables: SqlTables) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(tables.metadata.drop_all)

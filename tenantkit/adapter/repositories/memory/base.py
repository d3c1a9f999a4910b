import copy
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, Type, TypeVar

from pydantic import BaseModel

from tenantkit.domain.schema import MergedSchema

E = TypeVar("E", bound=BaseModel)

Row = Dict[str, Any]


class InMemoryRepository(Generic[E]):
    """
    Dict-backed repository storing rows in storage shape.

    Rows are keyed by entity id. snapshot()/restore() let a unit of work undo
    every mutation made since the snapshot.
    """

    def __init__(self, schema: MergedSchema, entity_type: Type[E]):
        self.schema = schema
        self.entity_type = entity_type
        self.rows: Dict[str, Row] = {}

    def snapshot(self) -> Dict[str, Row]:
        return copy.deepcopy(self.rows)

    def restore(self, state: Dict[str, Row]) -> None:
        self.rows = state

    @property
    def id_column(self) -> str:
        return self.schema.storage_name("id")

    def to_row(self, entity: BaseModel) -> Row:
        return self.schema.to_storage_shape(entity.model_dump())

    def to_entity(self, row: Row) -> E:
        return self.entity_type.model_validate(self.schema.from_storage_shape(row))

    def get(self, entity_id: str) -> Optional[E]:
        row = self.rows.get(entity_id)
        return self.to_entity(row) if row is not None else None

    def select(self, predicate: Callable[[E], bool]) -> List[E]:
        return [entity for entity in self.all() if predicate(entity)]

    def all(self) -> Iterable[E]:
        return (self.to_entity(row) for row in self.rows.values())

    def put_new(self, entity: E) -> E:
        row = self.to_row(entity)
        entity_id = row[self.id_column]
        if entity_id in self.rows:
            raise ValueError(f"Duplicate id {entity_id}")
        self.rows[entity_id] = row
        return entity

    def replace(self, entity: E) -> E:
        row = self.to_row(entity)
        entity_id = row[self.id_column]
        if entity_id not in self.rows:
            raise KeyError(entity_id)
        self.rows[entity_id] = row
        return entity

    def remove(self, entity_id: str) -> None:
        if self.rows.pop(entity_id, None) is None:
            raise KeyError(entity_id)

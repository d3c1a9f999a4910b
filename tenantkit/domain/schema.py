"""
Schema Merge Engine

Combines a fixed core entity model with a caller-supplied custom-fields model
into one validated shape, and translates field names between the domain
(external) representation and the storage (internal) representation.

Precedence for storage names: column_mapping > naming_strategy > default strategy.
"""

import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Annotated, Any, Dict, List, Mapping, Optional, Tuple, Type, Union

from pydantic import BaseModel, Field, create_model
from pydantic import ValidationError as PydanticValidationError
from pydantic.fields import FieldInfo

from tenantkit.domain.errors import FieldIssue, SchemaConflictError, ValidationError

ROOT_PATH = "$"

_WORD_BOUNDARY = re.compile(r"[_\-\s]+|(?<=[a-z0-9])(?=[A-Z])")


class NamingStrategy(str, Enum):
    """Storage naming strategies"""

    identity = "identity"
    snake_case = "snake_case"
    camel_case = "camelCase"
    kebab_case = "kebab-case"
    pascal_case = "PascalCase"


def split_words(key: str) -> List[str]:
    return [word for word in _WORD_BOUNDARY.split(key) if word]


def convert_key(key: str, strategy: NamingStrategy) -> str:
    """
    Convert a single key according to a naming strategy.

    Examples (strategy: input -> output):
        snake_case: ownerUserId -> owner_user_id
        camelCase:  owner_user_id -> ownerUserId
        kebab-case: owner_user_id -> owner-user-id
        PascalCase: owner_user_id -> OwnerUserId
    """
    strategy = NamingStrategy(strategy)
    if strategy == NamingStrategy.identity:
        return key

    words = [word.lower() for word in split_words(key)]
    if not words:
        return key

    if strategy == NamingStrategy.snake_case:
        return "_".join(words)
    if strategy == NamingStrategy.kebab_case:
        return "-".join(words)
    if strategy == NamingStrategy.camel_case:
        return words[0] + "".join(word.capitalize() for word in words[1:])
    return "".join(word.capitalize() for word in words)


@dataclass(frozen=True, eq=False)
class CustomFieldsConfig:
    """
    Per-entity custom fields configuration.

    custom_schema: pydantic model declaring the extra fields
    naming_strategy: storage naming for every field of the entity
    column_mapping: explicit domain field -> storage name overrides
    """

    custom_schema: Optional[Type[BaseModel]] = None
    naming_strategy: Optional[NamingStrategy] = None
    column_mapping: Mapping[str, str] = field(default_factory=dict)

    def schema_only(self) -> "CustomFieldsConfig":
        """Same custom fields, without storage naming (for use case inputs)"""
        return replace(self, naming_strategy=NamingStrategy.identity, column_mapping={})

    def cache_key(self) -> Tuple[Any, ...]:
        return (
            self.custom_schema,
            self.naming_strategy,
            tuple(sorted(self.column_mapping.items())),
        )


def issues_from_pydantic(exc: PydanticValidationError, prefix: Tuple[str, ...] = ()) -> List[FieldIssue]:
    issues = []
    for error in exc.errors():
        path = ".".join(str(part) for part in (*prefix, *error["loc"]))
        issues.append(FieldIssue(path or ROOT_PATH, error["msg"]))
    return issues


class MergedSchema:
    """
    Core model + custom fields model, validated as one shape.

    Built once per configuration (see merge_schemas) and reused for every call.
    """

    def __init__(
        self,
        core_model: Type[BaseModel],
        config: CustomFieldsConfig,
        default_strategy: NamingStrategy = NamingStrategy.snake_case,
        partial: bool = False,
    ):
        self.core_model = core_model
        self.config = config
        self.core_fields: Tuple[str, ...] = tuple(core_model.model_fields)

        custom_schema = config.custom_schema
        self.custom_fields: Tuple[str, ...] = (
            tuple(custom_schema.model_fields) if custom_schema else ()
        )

        collisions = sorted(set(self.core_fields) & set(self.custom_fields))
        if collisions:
            raise SchemaConflictError(
                f"Custom fields collide with core fields of {core_model.__name__}: "
                + ", ".join(collisions),
                collisions,
            )

        self.model: Type[BaseModel] = self._build_model(core_model, custom_schema, partial)

        self.strategy = NamingStrategy(config.naming_strategy or default_strategy)
        self.column_map: Dict[str, str] = self._build_column_map()
        self._reverse_map: Dict[str, str] = {
            storage: domain for domain, storage in self.column_map.items()
        }

    @staticmethod
    def _build_model(
        core_model: Type[BaseModel],
        custom_schema: Optional[Type[BaseModel]],
        partial: bool,
    ) -> Type[BaseModel]:
        if custom_schema is None:
            return core_model

        name = f"{core_model.__name__}With{custom_schema.__name__}"
        if partial:
            # Updates only carry the custom fields being changed. Omitted fields
            # fall back to an unvalidated None default; provided values keep
            # their type, constraints and validators, so explicit nulls fail
            # unless the custom schema allows them.
            definitions = {
                field_name: (_constrained(info), Field(default=None, alias=info.alias))
                for field_name, info in custom_schema.model_fields.items()
            }
            return create_model(name, __base__=(core_model, custom_schema), **definitions)
        return create_model(name, __base__=(core_model, custom_schema))

    def _build_column_map(self) -> Dict[str, str]:
        all_fields = self.core_fields + self.custom_fields

        unknown = sorted(set(self.config.column_mapping) - set(all_fields))
        if unknown:
            raise SchemaConflictError(
                "Column mapping references unknown fields: " + ", ".join(unknown),
                unknown,
            )

        column_map = {
            name: self.config.column_mapping.get(name) or convert_key(name, self.strategy)
            for name in all_fields
        }

        seen: Dict[str, str] = {}
        for domain_name, storage_name in column_map.items():
            if storage_name in seen:
                raise SchemaConflictError(
                    f"Fields '{seen[storage_name]}' and '{domain_name}' both map to "
                    f"storage name '{storage_name}'",
                    [seen[storage_name], domain_name],
                )
            seen[storage_name] = domain_name
        return column_map

    @property
    def has_custom_fields(self) -> bool:
        return bool(self.custom_fields)

    def storage_name(self, field_name: str) -> str:
        return self.column_map.get(field_name, field_name)

    def parse(self, payload: Any, prefix: Tuple[str, ...] = ()) -> BaseModel:
        """Validate a payload, reporting every failing field path"""
        try:
            return self.model.model_validate(payload)
        except PydanticValidationError as exc:
            raise ValidationError(issues_from_pydantic(exc, prefix)) from exc

    def to_storage_shape(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        return {self.column_map.get(key, key): value for key, value in data.items()}

    def from_storage_shape(self, row: Mapping[str, Any]) -> Dict[str, Any]:
        return {self._reverse_map.get(key, key): value for key, value in row.items()}

    def split_custom(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Custom field values present in data"""
        return {key: data[key] for key in self.custom_fields if key in data}


def _constrained(info: FieldInfo) -> Any:
    if not info.metadata:
        return info.annotation
    return Annotated[(info.annotation, *info.metadata)]


_CACHE: Dict[Tuple[Any, ...], MergedSchema] = {}


def merge_schemas(
    core_model: Type[BaseModel],
    config: Optional[CustomFieldsConfig] = None,
    default_strategy: Union[NamingStrategy, str] = NamingStrategy.snake_case,
    partial: bool = False,
) -> MergedSchema:
    """
    Merge a core model with custom fields.

    Deterministic and side-effect free: the same (core model, config, default
    strategy) always yields the same MergedSchema instance.

    Raises:
        SchemaConflictError: custom/core collision, unknown column mapping
            target, or two fields mapping to the same storage name
    """
    config = config or CustomFieldsConfig()
    default_strategy = NamingStrategy(default_strategy)
    key = (core_model, config.cache_key(), default_strategy, partial)

    merged = _CACHE.get(key)
    if merged is None:
        merged = _CACHE.setdefault(
            key, MergedSchema(core_model, config, default_strategy, partial)
        )
    return merged


SectionSchema = Union[Type[BaseModel], MergedSchema]


def validate_sections(
    schemas: Mapping[str, SectionSchema], payload: Mapping[str, Any]
) -> Dict[str, BaseModel]:
    """
    Validate each named section (params, query, body, ...) independently.

    All sections are validated before raising so the ValidationError lists
    every failing path, prefixed with its section name.
    """
    validated: Dict[str, BaseModel] = {}
    issues: List[FieldIssue] = []

    for section, schema in schemas.items():
        data = payload.get(section)
        if data is None:
            data = {}
        try:
            if isinstance(schema, MergedSchema):
                validated[section] = schema.parse(data, prefix=(section,))
            else:
                validated[section] = schema.model_validate(data)
        except ValidationError as exc:
            issues.extend(exc.issues)
        except PydanticValidationError as exc:
            issues.extend(issues_from_pydantic(exc, (section,)))

    if issues:
        raise ValidationError(issues)
    return validated


@dataclass(frozen=True)
class EntitySchemas:
    """Merged storage schemas of the three core entities"""

    users: MergedSchema
    organizations: MergedSchema
    organization_memberships: MergedSchema


def build_entity_schemas(
    users: Optional[CustomFieldsConfig] = None,
    organizations: Optional[CustomFieldsConfig] = None,
    organization_memberships: Optional[CustomFieldsConfig] = None,
    default_strategy: Union[NamingStrategy, str] = NamingStrategy.snake_case,
) -> EntitySchemas:
    from tenantkit.domain.entities import Organization, OrganizationMembership, User

    return EntitySchemas(
        users=merge_schemas(User, users, default_strategy),
        organizations=merge_schemas(Organization, organizations, default_strategy),
        organization_memberships=merge_schemas(
            OrganizationMembership, organization_memberships, default_strategy
        ),
    )

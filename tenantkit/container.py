"""
Composition Root

Explicit construction of the dependency graph: adapters -> use cases, each
use case wrapped with its hooks. Built once at start-up, no global registry.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Union

from tenantkit.adapter.services.memory_unit_of_work import InMemoryStore, InMemoryUnitOfWorkFactory
from tenantkit.adapter.services.system import SystemClock, Uuid4Generator
from tenantkit.app.hooks import HooksConfig
from tenantkit.app.services.ports import AuthService, ClockPort, MetricsPort, UuidPort
from tenantkit.app.services.unit_of_work import UnitOfWorkFactory
from tenantkit.app.use_cases.memberships import (
    AcceptOrganizationInvitationUseCase,
    AddOrganizationMemberUseCase,
    LeaveOrganizationUseCase,
    RemoveOrganizationMemberUseCase,
    UpdateOrganizationMemberRoleUseCase,
)
from tenantkit.app.use_cases.organizations import (
    ArchiveOrganizationUseCase,
    CreateOrganizationUseCase,
    DeleteOrganizationUseCase,
    GetOrganizationUseCase,
    ListOrganizationMembersUseCase,
    RestoreOrganizationUseCase,
    TransferOrganizationOwnershipUseCase,
    UpdateOrganizationUseCase,
)
from tenantkit.app.use_cases.users import (
    CreateUserUseCase,
    DeleteUserUseCase,
    GetUserUseCase,
    ListUserOrganizationsUseCase,
    UpdateUserUseCase,
)
from tenantkit.domain.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from tenantkit.domain.schema import (
    CustomFieldsConfig,
    EntitySchemas,
    NamingStrategy,
    build_entity_schemas,
)


@dataclass
class ToolkitOptions:
    """Custom fields per entity, hooks per use case, storage naming and paging"""

    users: Optional[CustomFieldsConfig] = None
    organizations: Optional[CustomFieldsConfig] = None
    organization_memberships: Optional[CustomFieldsConfig] = None
    hooks: HooksConfig = field(default_factory=HooksConfig)
    naming_strategy: Union[NamingStrategy, str] = NamingStrategy.snake_case
    default_page_size: int = DEFAULT_PAGE_SIZE
    max_page_size: int = MAX_PAGE_SIZE

    def __post_init__(self):
        if not isinstance(self.hooks, HooksConfig):
            self.hooks = HooksConfig(self.hooks)

    @classmethod
    def from_config(cls, config: Any, **overrides: Any) -> "ToolkitOptions":
        values = {
            "naming_strategy": config.NAMING_STRATEGY,
            "default_page_size": config.DEFAULT_PAGE_SIZE,
            "max_page_size": config.MAX_PAGE_SIZE,
        }
        values.update(overrides)
        return cls(**values)

    def entity_schemas(self) -> EntitySchemas:
        """
        Raises:
            SchemaConflictError: a custom fields configuration is invalid
        """
        return build_entity_schemas(
            self.users,
            self.organizations,
            self.organization_memberships,
            self.naming_strategy,
        )


@dataclass
class Adapters:
    unit_of_work_factory: UnitOfWorkFactory
    clock: ClockPort = field(default_factory=SystemClock)
    uuid: UuidPort = field(default_factory=Uuid4Generator)
    auth: Optional[AuthService] = None
    metrics: Optional[MetricsPort] = None


@dataclass(frozen=True)
class UseCases:
    """One callable per use case: await use_cases.create_user(raw_input, context)"""

    create_user: CreateUserUseCase
    get_user: GetUserUseCase
    update_user: UpdateUserUseCase
    delete_user: DeleteUserUseCase
    list_user_organizations: ListUserOrganizationsUseCase

    create_organization: CreateOrganizationUseCase
    get_organization: GetOrganizationUseCase
    update_organization: UpdateOrganizationUseCase
    delete_organization: DeleteOrganizationUseCase
    archive_organization: ArchiveOrganizationUseCase
    restore_organization: RestoreOrganizationUseCase
    transfer_organization_ownership: TransferOrganizationOwnershipUseCase
    list_organization_members: ListOrganizationMembersUseCase

    add_organization_member: AddOrganizationMemberUseCase
    accept_organization_invitation: AcceptOrganizationInvitationUseCase
    update_organization_member_role: UpdateOrganizationMemberRoleUseCase
    remove_organization_member: RemoveOrganizationMemberUseCase
    leave_organization: LeaveOrganizationUseCase


def build_use_cases(adapters: Adapters, options: Optional[ToolkitOptions] = None) -> UseCases:
    options = options or ToolkitOptions()
    # Fail fast on invalid custom field configurations
    options.entity_schemas()

    def build(use_case_class, custom_fields: Optional[CustomFieldsConfig] = None, **kwargs):
        return use_case_class(
            adapters.unit_of_work_factory,
            adapters.clock,
            adapters.uuid,
            hooks=options.hooks.for_use_case(use_case_class.name),
            metrics=adapters.metrics,
            custom_fields=custom_fields,
            **kwargs,
        )

    return UseCases(
        create_user=build(CreateUserUseCase, options.users),
        get_user=build(GetUserUseCase),
        update_user=build(UpdateUserUseCase, options.users),
        delete_user=build(DeleteUserUseCase),
        list_user_organizations=build(ListUserOrganizationsUseCase),
        create_organization=build(CreateOrganizationUseCase, options.organizations),
        get_organization=build(GetOrganizationUseCase),
        update_organization=build(UpdateOrganizationUseCase, options.organizations),
        delete_organization=build(DeleteOrganizationUseCase),
        archive_organization=build(ArchiveOrganizationUseCase),
        restore_organization=build(RestoreOrganizationUseCase),
        transfer_organization_ownership=build(TransferOrganizationOwnershipUseCase),
        list_organization_members=build(
            ListOrganizationMembersUseCase,
            default_page_size=options.default_page_size,
            max_page_size=options.max_page_size,
        ),
        add_organization_member=build(
            AddOrganizationMemberUseCase, options.organization_memberships
        ),
        accept_organization_invitation=build(AcceptOrganizationInvitationUseCase),
        update_organization_member_role=build(UpdateOrganizationMemberRoleUseCase),
        remove_organization_member=build(RemoveOrganizationMemberUseCase),
        leave_organization=build(LeaveOrganizationUseCase),
    )


def build_in_memory_adapters(options: Optional[ToolkitOptions] = None, **overrides: Any) -> Adapters:
    """Adapters over a fresh InMemoryStore (reachable as unit_of_work_factory.store)"""
    options = options or ToolkitOptions()
    store = InMemoryStore(options.entity_schemas())
    return Adapters(unit_of_work_factory=InMemoryUnitOfWorkFactory(store), **overrides)

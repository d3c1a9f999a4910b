from typing import Any, Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from tenantkit.adapter.repositories.sql.tables import build_tables
from tenantkit.adapter.services.auth import Credentials, JwtAuthService
from tenantkit.adapter.services.memory_unit_of_work import InMemoryStore, InMemoryUnitOfWorkFactory
from tenantkit.adapter.services.system import LoggingMetrics, SystemClock, Uuid4Generator
from tenantkit.adapter.services.unit_of_work import SqlAlchemyUnitOfWorkFactory
from tenantkit.container import Adapters, ToolkitOptions, UseCases
from tenantkit.domain.auth import ANONYMOUS_PRINCIPAL, OperationContext, Principal
from tenantkit.domain.base import generate_uuid


def build_adapters(ApplicationConfig, options: Optional[ToolkitOptions] = None) -> Adapters:
    """Adapters selected by PERSISTENCE_BACKEND ("sql" or "memory")"""
    options = options or ToolkitOptions.from_config(ApplicationConfig)
    schemas = options.entity_schemas()

    if ApplicationConfig.PERSISTENCE_BACKEND == "memory":
        unit_of_work_factory: Any = InMemoryUnitOfWorkFactory(InMemoryStore(schemas))
    else:
        engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)
        session_factory = sessionmaker(
            engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
        )
        unit_of_work_factory = SqlAlchemyUnitOfWorkFactory(
            session_factory, build_tables(schemas), schemas, engine
        )

    return Adapters(
        unit_of_work_factory=unit_of_work_factory,
        clock=SystemClock(),
        uuid=Uuid4Generator(),
        auth=JwtAuthService(
            ApplicationConfig.JWT_SECRET,
            ApplicationConfig.JWT_ALGORITHM,
            ApplicationConfig.JWT_SUBJECT_CLAIM,
        ),
        metrics=LoggingMetrics(),
    )


def get_use_cases(request: Request) -> UseCases:
    return request.app.state.use_cases


def get_request_id(request: Request) -> str:
    request_id = getattr(request.state, "request_id", None)
    if request_id is None:
        request_id = generate_uuid()
        request.state.request_id = request_id
    return request_id


async def get_principal(request: Request) -> Principal:
    """
    Dependency resolving the caller from the Authorization header or the
    access_token cookie. Missing or invalid credentials yield the anonymous
    principal; use cases requiring authentication reject it.
    """
    auth = request.app.state.adapters.auth
    if auth is None:
        return ANONYMOUS_PRINCIPAL
    credentials = Credentials(headers=dict(request.headers), cookies=dict(request.cookies))
    return await auth.authenticate(credentials)


async def get_operation_context(
    request: Request,
    principal: Principal = Depends(get_principal),
    request_id: str = Depends(get_request_id),
) -> OperationContext:
    clock = request.app.state.adapters.clock
    return OperationContext(request_id=request_id, actor=principal, timestamp=clock.now())

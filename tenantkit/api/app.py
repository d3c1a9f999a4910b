import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tenantkit.app.error_mapper import ErrorMapper
from tenantkit.container import Adapters, ToolkitOptions, build_use_cases
from tenantkit.depends import build_adapters, get_request_id

from .error import ClientError, ServerError

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = exc.descriptor.to_dict()
    logger.warning(f"Client error: {error_dict}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": error_dict},
        headers={REQUEST_ID_HEADER: get_request_id(request)},
    )


async def handle_server_error(request: Request, exc: ServerError):
    error_dict = exc.descriptor.to_dict()
    logger.error(f"Server error: {error_dict['code']} ({exc.__cause__!r})")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": error_dict},
        headers={REQUEST_ID_HEADER: get_request_id(request)},
    )


async def handle_unexpected_error(request: Request, exc: Exception):
    request_id = get_request_id(request)
    descriptor = request.app.state.error_mapper.to_descriptor(exc, request_id)
    logger.exception(f"Unhandled error for request {request_id}")
    return JSONResponse(
        status_code=descriptor.status,
        content={"error": descriptor.to_dict()},
        headers={REQUEST_ID_HEADER: request_id},
    )


def create_app(
    ApplicationConfig,
    options: Optional[ToolkitOptions] = None,
    adapters: Optional[Adapters] = None,
) -> FastAPI:
    options = options or ToolkitOptions.from_config(ApplicationConfig)
    adapters = adapters or build_adapters(ApplicationConfig, options)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # SQL backends create their tables on start-up
        factory = adapters.unit_of_work_factory
        if hasattr(factory, "create_all"):
            await factory.create_all()
        yield
        if hasattr(factory, "dispose"):
            await factory.dispose()

    app = FastAPI(title="tenantkit", version="0.1.0", lifespan=lifespan)

    app.state.adapters = adapters
    app.state.options = options
    app.state.use_cases = build_use_cases(adapters, options)
    app.state.error_mapper = ErrorMapper()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )

    log_requests = ApplicationConfig.ENABLE_LOGGING_MIDDLEWARE

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        request.state.request_id = request.headers.get(REQUEST_ID_HEADER) or adapters.uuid.generate()
        started = time.perf_counter()
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request.state.request_id
        if log_requests:
            logger.info(
                f"{request.method} {request.url.path} {response.status_code} "
                f"{(time.perf_counter() - started) * 1000:.1f}ms request_id={request.state.request_id}"
            )
        return response

    from tenantkit.api.routes import health_check, memberships, organizations, users

    prefix = ApplicationConfig.API_PREFIX
    app.include_router(health_check.router, prefix=prefix, tags=["Health"])
    app.include_router(users.router, prefix=prefix, tags=["Users"])
    app.include_router(organizations.router, prefix=prefix, tags=["Organizations"])
    app.include_router(memberships.router, prefix=prefix, tags=["Memberships"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    return app

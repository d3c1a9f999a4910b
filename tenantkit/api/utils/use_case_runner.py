"""
Route helpers: section validation and use case invocation.

Path params, query string and JSON body are validated independently and every
failing field is reported at once, prefixed with its section name. Domain
errors are turned into ClientError / ServerError for the exception handlers.
"""

import json
import logging
from typing import Any, Dict, Mapping, Optional, Type

from fastapi import Request
from pydantic import BaseModel

from tenantkit.api.error import ClientError, ServerError
from tenantkit.app.use_cases.base import BaseUseCase
from tenantkit.domain.auth import OperationContext
from tenantkit.domain.errors import ValidationError
from tenantkit.domain.schema import NamingStrategy, SectionSchema, merge_schemas, validate_sections

logger = logging.getLogger(__name__)


def body_schema(body_model: Type[BaseModel], use_case: BaseUseCase) -> SectionSchema:
    """Body model merged with the custom fields the use case accepts"""
    custom_fields = use_case.custom_fields
    if custom_fields is None:
        return body_model
    return merge_schemas(
        body_model,
        custom_fields.schema_only(),
        NamingStrategy.identity,
        partial=use_case.partial_input,
    )


async def read_json_body(request: Request) -> Any:
    raw = await request.body()
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except ValueError:
        raise ValidationError.single("body", "Body must be valid JSON") from None


async def parse_sections(
    request: Request,
    params: Optional[Type[BaseModel]] = None,
    query: Optional[Type[BaseModel]] = None,
    body: Optional[SectionSchema] = None,
) -> Dict[str, Any]:
    """Validate the request sections and flatten them into one raw input"""
    schemas: Dict[str, SectionSchema] = {}
    payload: Dict[str, Any] = {}
    if params is not None:
        schemas["params"] = params
        payload["params"] = dict(request.path_params)
    if query is not None:
        schemas["query"] = query
        payload["query"] = dict(request.query_params)
    if body is not None:
        schemas["body"] = body
        payload["body"] = await read_json_body(request)

    validated = validate_sections(schemas, payload)

    raw_input: Dict[str, Any] = {}
    for section in ("body", "query", "params"):
        if section in validated:
            raw_input.update(validated[section].model_dump(exclude_unset=True))
    return raw_input


def to_http_error(request: Request, error: Exception, request_id: str) -> Exception:
    descriptor = request.app.state.error_mapper.to_descriptor(error, request_id)
    if descriptor.is_client_error:
        return ClientError(descriptor)
    return ServerError(descriptor)


async def run_use_case(
    request: Request,
    use_case: BaseUseCase,
    context: OperationContext,
    params: Optional[Type[BaseModel]] = None,
    query: Optional[Type[BaseModel]] = None,
    body: Optional[SectionSchema] = None,
    extra: Optional[Mapping[str, Any]] = None,
) -> Any:
    try:
        raw_input = await parse_sections(request, params, query, body)
        raw_input.update(extra or {})
        return await use_case.execute(raw_input, context)
    except Exception as exc:
        raise to_http_error(request, exc, context.request_id) from exc

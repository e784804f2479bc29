"""FastAPI integration.

Usage:
    from fastapi import Depends, FastAPI
    from formcheck import Validator
    from formcheck.api import install_error_handler, validator_dependency

    app = FastAPI()
    install_error_handler(app)

    @app.post("/posts")
    async def create_post(validator: Validator = Depends(validator_dependency())):
        title = validator.string("title").between(3, 80).value()
        validator.validate()  # 422 with field errors on failure
        return {"title": title}
"""

import json
import logging
from typing import Any, Awaitable, Callable

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.datastructures import ImmutableMultiDict

from formcheck.messages import MessageBag
from formcheck.types import MessageResolver, TokenProvider, ValidationFailed
from formcheck.validator import Validator

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


class FormErrorResponse(BaseModel):
    """Response body for rejected submissions."""

    valid: bool = False
    errors: dict[str, list[str]]


def _flatten(values: ImmutableMultiDict) -> dict[str, Any]:
    """Collapse a multi-dict; keys given more than once become lists."""
    result: dict[str, Any] = {}
    for key in values.keys():
        items = values.getlist(key)
        result[key] = items[0] if len(items) == 1 else items
    return result


async def read_input(request: Request) -> dict[str, Any]:
    """Read the raw input of a request.

    Query parameters are read first; a JSON object body or form body is
    merged over them.

    Raises:
        HTTPException: 400 if the body is not valid JSON
    """
    data = _flatten(request.query_params)
    content_type = request.headers.get("content-type", "")

    if content_type.startswith("application/json"):
        body = await request.body()
        if body:
            try:
                payload = json.loads(body)
            except ValueError:
                raise HTTPException(400, "Request body is not valid JSON")
            if isinstance(payload, dict):
                data.update(payload)
            else:
                logger.debug("Ignoring non-object JSON body (%s)", type(payload).__name__)

    elif content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        data.update(_flatten(form))

    return data


def error_response(errors: MessageBag, status_code: int = 422) -> JSONResponse:
    """Create an error response listing each field's messages."""
    body = FormErrorResponse(errors=errors.to_dict())
    return JSONResponse(status_code=status_code, content=body.model_dump())


def install_error_handler(app: FastAPI) -> None:
    """Render ValidationFailed raised by Validator.validate() as a 422 response."""

    async def handle_validation_failed(request: Request, exc: ValidationFailed) -> JSONResponse:
        return error_response(exc.errors)

    app.add_exception_handler(ValidationFailed, handle_validation_failed)


def validator_dependency(
    resolver: MessageResolver | None = None,
    token_provider: TokenProvider | None = None,
) -> Callable[[Request], Awaitable[Validator]]:
    """Create a dependency that builds a Validator from the request input.

    Args:
        resolver: Resolver for the validator's messages
        token_provider: CSRF token provider checked by passes()/validate()

    Returns:
        An async FastAPI dependency
    """

    async def get_validator(request: Request) -> Validator:
        return Validator(
            await read_input(request),
            resolver=resolver,
            token_provider=token_provider,
        )

    return get_validator

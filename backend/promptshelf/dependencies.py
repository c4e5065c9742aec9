"""
PromptShelf Backend: Request Dependencies
===========================================

What:  FastAPI dependencies that expose lifespan-owned resources to handlers
       and turn the raw create body into a PromptCreate.
How:   The lifespan stores `database`, `prompt_store` and `image_uploader` on
       `app.state`; these functions read them back per request. Tests replace
       them through `app.dependency_overrides`.
"""

import json

from fastapi import Depends, Request
from pydantic import ValidationError as PydanticValidationError

from promptshelf.config import settings
from promptshelf.database import Database
from promptshelf.exceptions import PayloadTooLargeError, ValidationError
from promptshelf.repositories.prompt_store import PromptStore
from promptshelf.schemas.prompt import PromptCreate
from promptshelf.services.image_uploader import GitHubImageUploader
from promptshelf.services.prompt_service import PromptService


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_prompt_store(request: Request) -> PromptStore:
    return request.app.state.prompt_store


def get_image_uploader(request: Request) -> GitHubImageUploader:
    return request.app.state.image_uploader


def get_prompt_service(
    store: PromptStore = Depends(get_prompt_store),
    uploader: GitHubImageUploader = Depends(get_image_uploader),
) -> PromptService:
    return PromptService(store=store, uploader=uploader)


async def read_limited_body(request: Request, limit: int) -> bytes:
    """
    Read the request body, giving up as soon as it exceeds `limit` bytes.

    A declared Content-Length over the limit is rejected before reading;
    chunked bodies are counted while streaming.

    Raises:
        PayloadTooLargeError: more than `limit` bytes declared or received.
    """
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > limit:
        raise PayloadTooLargeError(limit=limit, context={"content_length": int(declared)})

    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > limit:
            raise PayloadTooLargeError(limit=limit, context={"received": len(body)})
    return bytes(body)


async def get_prompt_payload(request: Request) -> PromptCreate:
    """
    Read and parse the POST /api/prompts body.

    Declared as a dependency (not a body parameter) so the router-level auth
    guard runs before the body is read.

    Raises:
        PayloadTooLargeError: body longer than MAX_BODY_BYTES (→ 413)
        ValidationError: not JSON, not an object, or wrong field types (→ 400)
    """
    body = await read_limited_body(request, settings.max_body_bytes)

    if not body:
        data = {}
    else:
        try:
            data = json.loads(body)
        except ValueError as e:
            raise ValidationError(
                message="Invalid request body",
                context={"reason": "malformed JSON", "error": str(e)},
            ) from e

    if not isinstance(data, dict):
        raise ValidationError(
            message="Invalid request body",
            context={"reason": f"expected a JSON object, got {type(data).__name__}"},
        )

    try:
        return PromptCreate.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(
            message="Invalid request body",
            context={"fields": [".".join(str(p) for p in err["loc"]) for err in e.errors()]},
        ) from e

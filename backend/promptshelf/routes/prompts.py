"""
PromptShelf Backend: Prompt Route Handlers
============================================

What:  POST /api/prompts (create) and GET /api/prompts (list).
How:   Thin HTTP layer: the router-level `require_api_key` dependency runs
       first, then the handler delegates to PromptService. Errors propagate
       as PromptShelfError subclasses to the global handlers in main.py.

Request Flow (create):
    1. require_api_key      → 401 on a missing/wrong x-api-key
    2. get_prompt_payload   → 413/400 on an oversized or unusable body
    3. PromptService        → 400 missing fields, 500 upload/storage failure
    4. 200 with the stored record
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from promptshelf.dependencies import get_prompt_payload, get_prompt_service
from promptshelf.schemas.prompt import ErrorResponse, PromptCreate, PromptResponse
from promptshelf.security import require_api_key
from promptshelf.services.prompt_service import PromptService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["Prompts"],
    dependencies=[Depends(require_api_key)],
    responses={
        401: {"description": "Missing or wrong x-api-key", "model": ErrorResponse},
        500: {"description": "Upload or database failure", "model": ErrorResponse},
    },
)


@router.post(
    "/prompts",
    response_model=PromptResponse,
    responses={
        400: {"description": "Missing required fields or invalid body", "model": ErrorResponse},
        413: {"description": "Body larger than MAX_BODY_BYTES", "model": ErrorResponse},
    },
    summary="Create a prompt and upload its image",
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "application/json": {"schema": PromptCreate.model_json_schema(by_alias=True)}
            },
        }
    },
)
async def create_prompt(
    payload: PromptCreate = Depends(get_prompt_payload),
    service: PromptService = Depends(get_prompt_service),
) -> PromptResponse:
    """
    Upload `imageBase64` to the configured GitHub repository, then store the
    prompt with the resulting download URL. `tags` defaults to [].
    """
    return await service.create_prompt(payload)


@router.get(
    "/prompts",
    response_model=List[PromptResponse],
    summary="List prompts, newest first",
)
async def list_prompts(
    tag: Optional[str] = Query(
        default=None,
        description="Only return prompts whose tags contain this value",
    ),
    service: PromptService = Depends(get_prompt_service),
) -> List[PromptResponse]:
    """
    Every stored prompt ordered by creation time, newest first.
    No pagination.
    """
    return await service.list_prompts(tag=tag or None)

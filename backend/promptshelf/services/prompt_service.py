"""
PromptShelf Backend: Prompt Service (Business Logic Orchestrator)
===================================================================

What:  Create and list prompts by composing the uploader and the store.
How:   Stateless; receives its collaborators at construction time.
Who:   Built per request by the `get_prompt_service` dependency.

Orchestration Flow (POST /api/prompts):
    ┌───────────┐    ┌─────────────┐    ┌──────────────┐    ┌──────────┐
    │ Validate  │───▶│  Filename   │───▶│ GitHub PUT   │───▶│  Insert  │
    │ (fields)  │    │ (ms-title)  │    │ (uploader)   │    │ (store)  │
    └───────────┘    └─────────────┘    └──────────────┘    └──────────┘

    Validation fails → ValidationError, nothing else runs
    Upload fails     → UpstreamError, nothing is written
    Insert fails     → StorageError, the committed image stays on GitHub
"""

import logging
from datetime import timezone
from typing import List, Optional

from promptshelf.exceptions import ValidationError
from promptshelf.models.prompt import Prompt
from promptshelf.repositories.prompt_store import NewPrompt, PromptStore
from promptshelf.schemas.prompt import PromptCreate, PromptResponse
from promptshelf.services.image_uploader import GitHubImageUploader, build_image_filename

logger = logging.getLogger(__name__)


def to_response(prompt: Prompt) -> PromptResponse:
    """Maps an ORM Prompt to its API representation (timestamps in UTC)."""
    created_at = prompt.created_at
    if created_at.tzinfo is None:
        # SQLite hands back naive datetimes; values were written as UTC
        created_at = created_at.replace(tzinfo=timezone.utc)
    return PromptResponse(
        id=prompt.id,
        title=prompt.title,
        prompt=prompt.prompt,
        image_url=prompt.image_url,
        tags=prompt.tags,
        created_at=created_at,
    )


class PromptService:
    """
    Business logic layer for prompt operations.

    Responsibilities:
        - create_prompt(): validate → upload image → persist
        - list_prompts(): newest-first listing with optional tag filter
    """

    def __init__(self, store: PromptStore, uploader: GitHubImageUploader):
        self.store = store
        self.uploader = uploader

    async def create_prompt(self, payload: PromptCreate) -> PromptResponse:
        """
        Store a new prompt together with its image.

        Raises:
            ValidationError: title, prompt or imageBase64 missing/empty (→ 400)
            UpstreamError: GitHub upload failed (→ 500), nothing persisted
            StorageError: insert failed (→ 500), image left on GitHub
        """
        missing = payload.missing_fields()
        if missing:
            raise ValidationError(
                message="Missing required fields",
                context={"missing": missing},
            )

        filename = build_image_filename(payload.title)
        image_url = await self.uploader.upload(payload.image_base64, filename)

        try:
            prompt = await self.store.insert(
                NewPrompt(
                    title=payload.title,
                    prompt=payload.prompt,
                    image_url=image_url,
                    tags=list(payload.tags or []),
                )
            )
        except Exception:
            # Known gap: no compensating delete of the uploaded file
            logger.warning("Insert failed after upload; %s remains in the repository", filename)
            raise

        logger.info("Prompt %s created with image %s", prompt.id, filename)
        return to_response(prompt)

    async def list_prompts(self, tag: Optional[str] = None) -> List[PromptResponse]:
        """
        All prompts, newest first; only those containing `tag` when given.

        Raises:
            StorageError: query failed (→ 500)
        """
        prompts = await self.store.query(tag=tag)
        return [to_response(p) for p in prompts]

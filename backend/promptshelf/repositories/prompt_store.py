"""
PromptShelf Backend: Prompt Store
===================================

What:  Persistence adapter for Prompt records: insert one, query many.
How:   Each call opens its own AsyncSession from the Database's factory and
       commits before returning. SQLAlchemy errors are wrapped in StorageError.
Who:   Constructed once in the lifespan and injected into PromptService.

Query plan for query(tag="cat"):
    SELECT prompts.* FROM prompts
    WHERE EXISTS (SELECT 1 FROM prompt_tags
                  WHERE prompt_tags.prompt_id = prompts.id AND prompt_tags.tag = 'cat')
    ORDER BY prompts.created_at DESC, prompts.id DESC
    (+ one selectin load for the tags of the returned rows)

No pagination and no limit: every matching record is returned.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from promptshelf.database import Database
from promptshelf.exceptions import StorageError
from promptshelf.models.prompt import Prompt, PromptTag

logger = logging.getLogger(__name__)


@dataclass
class NewPrompt:
    """A Prompt that has not been stored yet."""

    title: str
    prompt: str
    image_url: str
    tags: List[str] = field(default_factory=list)


class PromptStore:
    def __init__(self, database: Database):
        self.database = database

    async def insert(self, record: NewPrompt) -> Prompt:
        """
        Persist a new Prompt.

        Returns:
            The stored Prompt with `id` and `created_at` populated and tags loaded.

        Raises:
            StorageError: the write failed; nothing was committed.
        """
        prompt = Prompt(
            title=record.title,
            prompt=record.prompt,
            image_url=record.image_url,
            created_at=datetime.now(timezone.utc),
            tag_rows=[
                PromptTag(position=position, tag=tag)
                for position, tag in enumerate(record.tags)
            ],
        )
        try:
            async with self.database.session_factory() as session:
                session.add(prompt)
                await session.commit()
        except (SQLAlchemyError, OSError) as e:
            logger.error("Failed to insert prompt %r: %s", record.title, str(e))
            raise StorageError(
                message="Could not save the prompt",
                context={"error_type": type(e).__name__, "title": record.title},
            ) from e

        logger.info("Prompt %s stored (%d tags)", prompt.id, len(record.tags))
        return prompt

    async def query(self, tag: Optional[str] = None) -> List[Prompt]:
        """
        All Prompts, newest first, optionally limited to those tagged `tag`.

        Raises:
            StorageError: the query failed.
        """
        stmt = select(Prompt)
        if tag is not None:
            stmt = stmt.where(Prompt.tag_rows.any(PromptTag.tag == tag))
        stmt = stmt.order_by(Prompt.created_at.desc(), Prompt.id.desc())

        try:
            async with self.database.session_factory() as session:
                result = await session.execute(stmt)
                prompts = list(result.scalars().all())
        except (SQLAlchemyError, OSError) as e:
            logger.error("Failed to query prompts (tag=%r): %s", tag, str(e))
            raise StorageError(
                message="Could not retrieve prompts",
                context={"error_type": type(e).__name__, "tag": tag},
            ) from e

        logger.debug("Loaded %d prompts (tag=%r)", len(prompts), tag)
        return prompts

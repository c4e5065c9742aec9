"""
PromptShelf Backend: Prompt SQLAlchemy Models
===============================================

What:  ORM models for the `prompts` table and its ordered `prompt_tags` rows.
How:   Inherit from the shared DeclarativeBase; Alembic reads these for migrations.
Who:   PromptStore for inserts/queries, Alembic for schema management.

Table Design:
    prompts
        id          INTEGER PK, autoincrement (also the tie-breaker for ordering)
        title       TEXT NOT NULL
        prompt      TEXT NOT NULL
        image_url   TEXT NOT NULL (download URL returned by GitHub)
        created_at  TIMESTAMP WITH TIME ZONE NOT NULL, set once at insert

    prompt_tags
        prompt_id   FK → prompts.id ON DELETE CASCADE
        position    INTEGER (0-based order of the tag in the submitted list)
        tag         TEXT NOT NULL
        PK (prompt_id, position)

    Index on prompts.created_at DESC serves the newest-first listing.
    Index on prompt_tags.tag serves the ?tag= membership filter.
"""

from datetime import datetime, timezone
from typing import List

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from promptshelf.database import Base


class Prompt(Base):
    """
    A stored creative prompt with its uploaded image.

    Lifecycle:
        Created once by POST /api/prompts after the image upload succeeded.
        Never updated or deleted by the API.
    """

    __tablename__ = "prompts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(Text, nullable=False)

    prompt: Mapped[str] = mapped_column(Text, nullable=False)

    # Always the URL GitHub reported for the committed file
    image_url: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # selectin: tags arrive with every query, so callers never trigger lazy IO
    tag_rows: Mapped[List["PromptTag"]] = relationship(
        back_populates="prompt",
        order_by="PromptTag.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        Index("idx_prompts_created_at", created_at.desc()),
    )

    @property
    def tags(self) -> List[str]:
        """The tag sequence in submitted order."""
        return [row.tag for row in self.tag_rows]

    def __repr__(self) -> str:
        return f"<Prompt(id={self.id}, title={self.title!r}, created_at='{self.created_at}')>"


class PromptTag(Base):
    """One tag of a Prompt, keeping its position in the original list."""

    __tablename__ = "prompt_tags"

    prompt_id: Mapped[int] = mapped_column(
        ForeignKey("prompts.id", ondelete="CASCADE"),
        primary_key=True,
    )
    position: Mapped[int] = mapped_column(Integer, primary_key=True)
    tag: Mapped[str] = mapped_column(Text, nullable=False)

    prompt: Mapped[Prompt] = relationship(back_populates="tag_rows")

    __table_args__ = (
        Index("idx_prompt_tags_tag", "tag"),
    )

    def __repr__(self) -> str:
        return f"<PromptTag(prompt_id={self.prompt_id}, position={self.position}, tag={self.tag!r})>"

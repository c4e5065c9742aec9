"""Create prompts and prompt_tags tables

Revision ID: 001
Revises: None
Create Date: 2024-06-01 00:00:00.000000+00:00

What:  Initial schema: one row per prompt, one row per (prompt, tag position).
Rollback: downgrade() drops both tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create prompts, prompt_tags and their indexes."""
    op.create_table(
        "prompts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("prompt", sa.Text(), nullable=False),
        # Download URL reported by GitHub for the committed image
        sa.Column("image_url", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    # Newest-first listing: ORDER BY created_at DESC
    op.create_index(
        "idx_prompts_created_at",
        "prompts",
        [sa.text("created_at DESC")],
    )

    op.create_table(
        "prompt_tags",
        sa.Column("prompt_id", sa.Integer(), nullable=False),
        # 0-based position of the tag in the submitted list
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("tag", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(["prompt_id"], ["prompts.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("prompt_id", "position"),
    )

    # ?tag= membership filter
    op.create_index("idx_prompt_tags_tag", "prompt_tags", ["tag"])


def downgrade() -> None:
    """Drop both tables. All prompt data is lost."""
    op.drop_index("idx_prompt_tags_tag", table_name="prompt_tags")
    op.drop_table("prompt_tags")
    op.drop_index("idx_prompts_created_at", table_name="prompts")
    op.drop_table("prompts")

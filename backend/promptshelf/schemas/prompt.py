"""
PromptShelf Backend: Pydantic Request/Response Schemas
========================================================

What:  Pydantic models defining the JSON contract of the API.
How:   Field names are snake_case in Python and camelCase on the wire
       (alias_generator=to_camel). FastAPI serializes response models by alias.
Who:   Route handlers (response_model), PromptService, and tests.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


_camel_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class PromptCreate(BaseModel):
    """
    What:  Body of POST /api/prompts.
    How:   Every field is optional at the schema level. Presence of title,
           prompt and imageBase64 is checked by PromptService so that a
           missing field produces the generic 400 "Missing required fields"
           instead of a field-level validation report.

    Example:
        {
            "title": "Cat",
            "prompt": "a cat in a spacesuit",
            "tags": ["cat", "space"],
            "imageBase64": "iVBORw0KGgoAAAANSUhEUg..."
        }
    """
    model_config = _camel_config

    title: Optional[str] = Field(default=None, description="Short title, required")
    prompt: Optional[str] = Field(default=None, description="Prompt text, required")
    tags: Optional[List[str]] = Field(default=None, description="Ordered tags, defaults to []")
    image_base64: Optional[str] = Field(
        default=None,
        description="Base64-encoded image content (no data: URI prefix), required",
    )

    def missing_fields(self) -> List[str]:
        """Names (wire form) of required fields that are absent or empty."""
        required = {"title": self.title, "prompt": self.prompt, "imageBase64": self.image_base64}
        return [name for name, value in required.items() if not value]


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class PromptResponse(BaseModel):
    """
    What:  A persisted prompt record.
    Who:   Returned by POST /api/prompts and, as array items, by GET /api/prompts.
    """
    model_config = _camel_config

    id: int = Field(description="Store-generated identifier")
    title: str
    prompt: str
    image_url: str = Field(description="Public download URL of the uploaded image")
    tags: List[str] = Field(default_factory=list)
    created_at: datetime = Field(description="Creation time (UTC)")


class ErrorResponse(BaseModel):
    """
    What:  Uniform error body for every failure.

    Example:
        {"error": "Missing required fields"}
    """
    error: str = Field(description="Human-readable error message")


class HealthResponse(BaseModel):
    """
    What:  Health check payload for GET /health.
    """
    status: str = Field(description="healthy or unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="connected or disconnected")
    uptime_seconds: float = Field(description="Seconds since the module was loaded")

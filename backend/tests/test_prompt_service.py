"""
PromptShelf Backend: Prompt Service Unit Tests
================================================

What:  Tests for PromptService with mocked store and uploader.
How:   AsyncMock stands in for both collaborators, so the tests observe
       exactly which side effects happen and in what order.

What we test:
    ✅ Missing fields → ValidationError, no upload, no insert
    ✅ Upload failure → UpstreamError, no insert
    ✅ Insert failure after upload → StorageError propagates
    ✅ Stored record carries the uploaded URL and tags (default [])
    ✅ list_prompts passes the tag filter through
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from promptshelf.exceptions import StorageError, UpstreamError, ValidationError
from promptshelf.models.prompt import Prompt, PromptTag
from promptshelf.schemas.prompt import PromptCreate
from promptshelf.services.prompt_service import PromptService, to_response

IMAGE_URL = "https://raw.githubusercontent.com/octocat/prompt-images/main/1700000000000-Cat.png"


def stored_prompt(record) -> Prompt:
    """What the store would return for `record`."""
    return Prompt(
        id=1,
        title=record.title,
        prompt=record.prompt,
        image_url=record.image_url,
        created_at=datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc),
        tag_rows=[PromptTag(position=i, tag=t) for i, t in enumerate(record.tags)],
    )


class TestCreatePrompt:
    """Tests for PromptService.create_prompt()."""

    def setup_method(self):
        self.store = MagicMock()
        self.store.insert = AsyncMock(side_effect=stored_prompt)
        self.uploader = MagicMock()
        self.uploader.upload = AsyncMock(return_value=IMAGE_URL)
        self.service = PromptService(store=self.store, uploader=self.uploader)

    @pytest.mark.asyncio
    async def test_creates_prompt_with_uploaded_url(self):
        payload = PromptCreate(title="Cat", prompt="a cat", image_base64="aGVsbG8=")

        result = await self.service.create_prompt(payload)

        assert result.image_url == IMAGE_URL
        assert result.title == "Cat"
        assert result.tags == []
        self.uploader.upload.assert_awaited_once()
        image, filename = self.uploader.upload.await_args.args
        assert image == "aGVsbG8="
        assert filename.endswith("-Cat.png")

    @pytest.mark.asyncio
    async def test_tags_are_stored_in_order(self):
        payload = PromptCreate(
            title="Cat", prompt="a cat", image_base64="aGVsbG8=", tags=["space", "cat"]
        )

        result = await self.service.create_prompt(payload)

        record = self.store.insert.await_args.args[0]
        assert record.tags == ["space", "cat"]
        assert result.tags == ["space", "cat"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "fields, missing",
        [
            ({"prompt": "a cat", "image_base64": "aGVsbG8="}, ["title"]),
            ({"title": "Cat", "image_base64": "aGVsbG8="}, ["prompt"]),
            ({"title": "Cat", "prompt": "a cat"}, ["imageBase64"]),
            ({"title": "", "prompt": "a cat", "image_base64": "aGVsbG8="}, ["title"]),
            ({}, ["title", "prompt", "imageBase64"]),
        ],
    )
    async def test_missing_fields_raise_validation_error(self, fields, missing):
        """Nothing is uploaded or stored when a required field is absent or empty."""
        with pytest.raises(ValidationError) as exc_info:
            await self.service.create_prompt(PromptCreate(**fields))

        assert exc_info.value.message == "Missing required fields"
        assert exc_info.value.context["missing"] == missing
        self.uploader.upload.assert_not_awaited()
        self.store.insert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_upload_failure_skips_insert(self):
        self.uploader.upload.side_effect = UpstreamError(status=401)
        payload = PromptCreate(title="Cat", prompt="a cat", image_base64="aGVsbG8=")

        with pytest.raises(UpstreamError):
            await self.service.create_prompt(payload)

        self.store.insert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_insert_failure_propagates_after_upload(self):
        """The image stays uploaded; the storage error reaches the caller."""
        self.store.insert.side_effect = StorageError()
        payload = PromptCreate(title="Cat", prompt="a cat", image_base64="aGVsbG8=")

        with pytest.raises(StorageError):
            await self.service.create_prompt(payload)

        self.uploader.upload.assert_awaited_once()


class TestListPrompts:
    """Tests for PromptService.list_prompts()."""

    def setup_method(self):
        self.store = MagicMock()
        self.store.query = AsyncMock(return_value=[])
        self.service = PromptService(store=self.store, uploader=MagicMock())

    @pytest.mark.asyncio
    async def test_passes_tag_to_store(self):
        await self.service.list_prompts(tag="cat")
        self.store.query.assert_awaited_once_with(tag="cat")

    @pytest.mark.asyncio
    async def test_no_tag_lists_everything(self):
        await self.service.list_prompts()
        self.store.query.assert_awaited_once_with(tag=None)


class TestToResponse:
    """Tests for the ORM → API mapping."""

    def test_naive_timestamp_is_treated_as_utc(self):
        prompt = Prompt(
            id=7,
            title="Cat",
            prompt="a cat",
            image_url=IMAGE_URL,
            created_at=datetime(2023, 11, 14, 22, 13, 20),
            tag_rows=[],
        )

        response = to_response(prompt)

        assert response.created_at.tzinfo is timezone.utc
        assert response.model_dump(by_alias=True)["imageUrl"] == IMAGE_URL

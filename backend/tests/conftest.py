"""
PromptShelf Backend: Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the whole suite.
How:   Environment is set before any promptshelf import. The database is a
       throwaway SQLite file (aiosqlite); GitHub is an httpx.MockTransport.

Fixture Hierarchy (all function-scoped):
    ├── database:     connected Database on a temp SQLite file, schema created
    ├── prompt_store: PromptStore over `database`
    ├── fake_github:  in-memory GitHub contents API recording every request
    ├── uploader:     GitHubImageUploader wired to `fake_github`
    └── test_client:  HTTPX AsyncClient against a fresh app with the above injected
"""

import base64
import json
import os
import tempfile
from pathlib import Path
from typing import List, Optional

# Settings are read at import time: configure before importing promptshelf
os.environ["SECRET_KEY"] = "test-secret"
os.environ["GITHUB_REPO"] = "octocat/prompt-images"
os.environ["GITHUB_TOKEN"] = "ghp_test_token"
os.environ["GITHUB_API_URL"] = "https://api.github.test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + str(
    Path(tempfile.mkdtemp(prefix="promptshelf_test_")) / "app.db"
)
os.environ["LOG_LEVEL"] = "WARNING"

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from promptshelf.database import Database  # noqa: E402
from promptshelf.dependencies import (  # noqa: E402
    get_database,
    get_image_uploader,
    get_prompt_store,
)
from promptshelf.repositories.prompt_store import PromptStore  # noqa: E402
from promptshelf.services.image_uploader import GitHubImageUploader  # noqa: E402

API_KEY = "test-secret"
RAW_PREFIX = "https://raw.githubusercontent.com/octocat/prompt-images/main/"


class FakeGitHub:
    """
    Minimal stand-in for PUT /repos/{owner}/{repo}/contents/{path}.

    Set `fail_with` to a status code to make every upload fail with it.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.fail_with: Optional[int] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            return httpx.Response(self.fail_with, json={"message": "Bad credentials"})
        path = request.url.path.split("/contents/", 1)[1]
        return httpx.Response(
            201,
            json={
                "content": {
                    "name": path.rsplit("/", 1)[-1],
                    "path": path,
                    "download_url": RAW_PREFIX + path,
                },
                "commit": {"message": json.loads(request.content)["message"]},
            },
        )

    @property
    def uploaded_paths(self) -> List[str]:
        return [r.url.path.split("/contents/", 1)[1] for r in self.requests]


@pytest.fixture
def sample_image_base64() -> str:
    """A 1x1 transparent PNG, base64-encoded."""
    png = (
        b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01"
        b"\x08\x06\x00\x00\x00\x1f\x15\xc4\x89\x00\x00\x00\rIDATx\x9cc\xf8\x0f"
        b"\x00\x00\x01\x01\x00\x05\x18\xd8N\x00\x00\x00\x00IEND\xaeB`\x82"
    )
    return base64.b64encode(png).decode("ascii")


@pytest_asyncio.fixture
async def database(tmp_path):
    """A connected Database on a fresh SQLite file with all tables created."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'prompts.db'}")
    await db.connect(create_schema=True)
    yield db
    await db.dispose()


@pytest.fixture
def prompt_store(database) -> PromptStore:
    return PromptStore(database)


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest_asyncio.fixture
async def uploader(fake_github):
    client = httpx.AsyncClient(transport=httpx.MockTransport(fake_github.handler))
    github = GitHubImageUploader(
        client,
        repo="octocat/prompt-images",
        token="ghp_test_token",
        api_url="https://api.github.test",
    )
    yield github
    await github.aclose()


@pytest_asyncio.fixture
async def test_client(database, prompt_store, uploader):
    """
    HTTPX AsyncClient talking to a fresh app through ASGITransport.

    The lifespan does not run under ASGITransport, so the resources it would
    create are supplied through dependency overrides instead.
    """
    from promptshelf.main import create_app

    app = create_app()
    app.dependency_overrides[get_database] = lambda: database
    app.dependency_overrides[get_prompt_store] = lambda: prompt_store
    app.dependency_overrides[get_image_uploader] = lambda: uploader

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        client.app = app
        yield client

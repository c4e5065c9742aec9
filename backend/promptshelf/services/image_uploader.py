"""
PromptShelf Backend: GitHub Image Uploader
============================================

What:  Commits a base64 image to a GitHub repository and returns its public URL.
How:   One PUT to the "create or update file contents" endpoint
       (PUT /repos/{owner}/{repo}/contents/{path}) through a shared
       httpx.AsyncClient, authenticated with a bearer token.
Who:   Constructed in the lifespan; called by PromptService.create_prompt().
When:  After request validation, before the database insert.

Failure Policy:
    Any transport error, timeout, non-2xx status, or a body without
    content.download_url raises UpstreamError. There is no retry and no
    fallback; the create request fails with 500.

Filenames:
    <epoch milliseconds>-<title with whitespace runs → "_">.png
    No collision detection: the same title within the same millisecond
    targets the same path (GitHub then rejects the PUT because no `sha`
    is sent, which surfaces as UpstreamError).
"""

import logging
import re
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from promptshelf.config import Settings
from promptshelf.exceptions import UpstreamError

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

GITHUB_ACCEPT = "application/vnd.github.v3+json"


def build_image_filename(title: str, now: Optional[datetime] = None) -> str:
    """
    Derive the repository filename for a prompt image.

    Example:
        >>> build_image_filename("Space  cat", datetime(2023, 11, 14, 22, 13, 20, 123000, tzinfo=timezone.utc))
        '1700000000123-Space_cat.png'
    """
    now = now or datetime.now(timezone.utc)
    millis = (now - _EPOCH) // timedelta(milliseconds=1)
    return f"{millis}-{_WHITESPACE.sub('_', title)}.png"


class GitHubImageUploader:
    """
    Thin client for the GitHub contents API.

    The httpx client is owned by the caller that created it through
    `from_settings()` and must be closed with `aclose()` on shutdown.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        repo: str,
        token: str,
        api_url: str = "https://api.github.com",
        branch: Optional[str] = None,
    ):
        self.client = client
        self.repo = repo
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.branch = branch

    @classmethod
    def from_settings(cls, settings: Settings) -> "GitHubImageUploader":
        client = httpx.AsyncClient(timeout=settings.github_timeout_seconds)
        return cls(
            client,
            repo=settings.github_repo,
            token=settings.github_token,
            api_url=settings.github_api_url,
            branch=settings.github_branch,
        )

    def content_url(self, filename: str) -> str:
        """
        API URL for a file path in the repository.

        "/" in the filename is kept as a path separator; every other reserved
        or non-ASCII character is percent-encoded.
        """
        return f"{self.api_url}/repos/{self.repo}/contents/{quote(filename, safe='/')}"

    async def upload(self, image_base64: str, filename: str) -> str:
        """
        Commit the image and return its download URL.

        Args:
            image_base64: File content, base64-encoded, sent as-is.
            filename: Path of the new file inside the repository.

        Returns:
            The `content.download_url` reported by GitHub
            (https://raw.githubusercontent.com/<owner>/<repo>/<branch>/<path>).

        Raises:
            UpstreamError: on any failure; nothing is retried.
        """
        url = self.content_url(filename)
        payload: Dict[str, Any] = {
            "message": f"Upload {filename}",
            "content": image_base64,
        }
        if self.branch:
            payload["branch"] = self.branch
        headers = {
            "Authorization": f"Bearer {self.token}",
            "Accept": GITHUB_ACCEPT,
        }

        start_time = time.perf_counter()
        try:
            response = await self.client.put(url, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            logger.error("GitHub upload of %s timed out: %s", filename, str(e))
            raise UpstreamError(
                message="Image upload timed out",
                context={"filename": filename, "error_type": type(e).__name__},
            ) from e
        except httpx.HTTPError as e:
            logger.error("GitHub upload of %s failed: %s", filename, str(e))
            raise UpstreamError(
                message="Image upload failed",
                context={"filename": filename, "error_type": type(e).__name__},
            ) from e

        duration_ms = (time.perf_counter() - start_time) * 1000

        if not response.is_success:
            logger.error(
                "GitHub returned %d for %s after %.0fms: %s",
                response.status_code,
                filename,
                duration_ms,
                response.text[:500],
            )
            raise UpstreamError(
                message="Image upload was rejected",
                status=response.status_code,
                context={"filename": filename},
            )

        try:
            download_url = response.json()["content"]["download_url"]
        except (ValueError, KeyError, TypeError) as e:
            logger.error("GitHub response for %s has no download_url: %s", filename, str(e))
            raise UpstreamError(
                message="Image upload returned an unexpected response",
                status=response.status_code,
                context={"filename": filename},
            ) from e

        if not isinstance(download_url, str) or not download_url:
            raise UpstreamError(
                message="Image upload returned an unexpected response",
                status=response.status_code,
                context={"filename": filename},
            )

        logger.info("Uploaded %s to %s in %.0fms", filename, self.repo, duration_ms)
        return download_url

    async def aclose(self) -> None:
        await self.client.aclose()

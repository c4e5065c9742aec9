"""
PromptShelf Backend: Shared-Secret Auth Guard
===============================================

What:  FastAPI dependency that admits a request only when its `x-api-key`
       header equals SECRET_KEY.
How:   Constant-time comparison (hmac.compare_digest) of the header bytes as
       received against SECRET_KEY encoded as UTF-8.
       A missing header, a wrong key, or an unset SECRET_KEY all raise
       AuthError (→ 401 {"error": "Unauthorized"}).
Who:   Attached at router level in routes/prompts.py, so it resolves before
       any dependency that reads the request body.

There are no sessions, no expiry and no per-caller identity: every caller
presents the same secret.
"""

import hmac
import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import APIKeyHeader

from promptshelf.config import settings
from promptshelf.exceptions import AuthError

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-api-key"

# auto_error=False: absence is reported as our AuthError, not FastAPI's 403
api_key_header = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)


def header_bytes(value: str) -> bytes:
    """
    Raw bytes of a header value as the client sent them.

    Starlette decodes header bytes as latin-1, so encoding with latin-1
    restores the original bytes whatever charset the client used.
    """
    return value.encode("latin-1")


def api_key_matches(provided: Optional[bytes], secret: str) -> bool:
    """True when `provided` equals a non-empty `secret` byte for byte, in constant time."""
    if not provided or not secret:
        return False
    return hmac.compare_digest(provided, secret.encode("utf-8"))


async def require_api_key(
    request: Request,
    api_key: Optional[str] = Depends(api_key_header),
) -> None:
    """
    Router dependency enforcing the shared secret.

    Raises:
        AuthError: header absent or different from SECRET_KEY.
    """
    provided = header_bytes(api_key) if api_key else None
    if not api_key_matches(provided, settings.secret_key):
        logger.warning(
            "Rejected %s %s: %s API key",
            request.method,
            request.url.path,
            "missing" if not api_key else "invalid",
        )
        raise AuthError(context={"path": request.url.path})

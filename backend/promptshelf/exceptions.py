"""
PromptShelf Backend: Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for each failure class of a request.
How:   Each exception carries a client-safe `message` and a `context` dict
       that is logged server-side only. Global handlers registered in
       main.py turn them into `{"error": <message>}` JSON responses.
Who:   Raised by the auth guard, services and the store; caught by handlers.

Exception Hierarchy:
    PromptShelfError (base)          → 500 Internal Server Error
    ├── AuthError                    → 401 Unauthorized
    ├── ValidationError              → 400 Bad Request
    ├── PayloadTooLargeError         → 413 Payload Too Large
    ├── UpstreamError                → 500 Internal Server Error (generic body)
    └── StorageError                 → 500 Internal Server Error (generic body)

The caller can only tell 400, 401, 413 and 500 apart. UpstreamError and
StorageError share the same generic body; their context goes to the log.
"""

from typing import Any, Dict, Optional


class PromptShelfError(Exception):
    """
    Base exception for all PromptShelf application errors.

    Attributes:
        message:  Error description returned to the client
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "Server error",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class AuthError(PromptShelfError):
    """
    Raised when the x-api-key header is missing or does not match SECRET_KEY.

    HTTP:  401 Unauthorized
    When:  Before the request body is read; nothing else runs for the request.
    """

    status_code = 401

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Unauthorized", context=context)


class ValidationError(PromptShelfError):
    """
    Raised when the create request is unusable as sent.

    HTTP:  400 Bad Request
    When:  Malformed JSON, wrong field types, or a missing title, prompt
           or imageBase64. The message stays generic; the offending fields
           are only recorded in `context`.

    Example response:
        {"error": "Missing required fields"}
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Missing required fields",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PayloadTooLargeError(PromptShelfError):
    """
    Raised when the request body exceeds MAX_BODY_BYTES.

    HTTP:  413 Payload Too Large
    """

    status_code = 413

    def __init__(self, limit: int, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["limit"] = limit
        super().__init__(message="Payload too large", context=ctx)
        self.limit = limit


class UpstreamError(PromptShelfError):
    """
    Raised when the GitHub contents API call fails.

    What:    Network failure, timeout, non-2xx status, or a response body
             without `content.download_url`.
    HTTP:    500 Internal Server Error with the generic "Server error" body
    Retry:   Never. The request fails and no record is written.
    """

    def __init__(
        self,
        message: str = "Image upload failed",
        status: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if status is not None:
            ctx["upstream_status"] = status
        super().__init__(message=message, context=ctx)
        self.status = status


class StorageError(PromptShelfError):
    """
    Raised when a database operation fails.

    What:    Connection lost, constraint violation, or any SQLAlchemy error.
    HTTP:    500 Internal Server Error with the generic "Server error" body
    Note:    When raised by insert() after a successful upload, the image
             committed to GitHub is left in place.
    """

    def __init__(
        self,
        message: str = "A database error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)

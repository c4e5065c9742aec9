# Middleware package init
"""
PromptShelf Backend: Middleware Package
=========================================

Middleware Chain (request direction):
    Request → [Request ID] → [Access Log] → [CORS] → Route Handler

    - Request ID: accepts or generates X-Request-ID and stores it in a ContextVar
    - Access Log: one line per request with status and duration
    - CORS: FastAPI's CORSMiddleware

Neither middleware reads headers other than X-Request-ID or touches the body,
so the API key and the base64 image never reach the logs.
"""

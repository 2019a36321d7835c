"""FastAPI endpoints for the playground.

HTTP and streaming routes with async request handling.

Endpoints:
    - GET /health: Service health status
    - POST /api/ai: Completion requests, streamed as NDJSON or whole
    - /api/chat/sessions: Chat session create/list/read/append
    - POST /api/audio/transcribe, /api/audio/speech: Audio side-channels
    - POST /api/files: Attachment uploads
"""

from playground.api.app import app, create_app

__all__ = ["app", "create_app"]

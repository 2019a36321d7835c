"""LLM Playground - browser chat UI for hosted language models.

Combines FastAPI for HTTP streaming, Agno for model access,
NiceGUI for the interface, and Pydantic for data validation.

Components:
    - api: HTTP endpoints, NDJSON streaming, session store, audio
    - agent: Model provider access and stream decoding
    - conversation: Client-side transport, chunk relay, and controller
    - storage: SQLite chat-session persistence
    - parsing: Attachment text extraction
    - ui: Web interface for chat interactions
    - models: Domain models and request/response schemas
"""

__version__ = "0.1.0"

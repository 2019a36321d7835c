"""Unit tests for individual components in isolation.

Coverage:
    - agent/: Settings, model service, stream decoding, audio service
    - conversation/: Relay, transport, collaborators, controller, export
    - parsing/: Attachment text extraction
    - storage/: SQLite session store

Uses mocks for Agno, OpenAI and HTTP. Leverages pytest-check for multiple
assertions per test.
"""

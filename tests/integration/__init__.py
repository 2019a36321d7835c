"""Integration tests for components working together as a system.

Coverage:
    - API endpoints with real HTTP requests over ASGITransport
    - NDJSON streaming through the real StreamDecoder
    - Session persistence in a temporary SQLite database
    - Full conversation cycle from controller to API and back

The model and audio services are replaced with scripted fakes through
FastAPI dependency overrides.
"""

"""Test package for the LLM Playground.

Structure:
    - unit/: Individual function and class tests
    - integration/: HTTP and end-to-end conversation tests
    - fakes.py: Scripted stand-ins for the provider and collaborators

No test reaches the model provider. Leverages pytest with pytest-check for
soft assertions.
"""

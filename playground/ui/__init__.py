"""NiceGUI interface - thin visualization layer for the playground.

Responsibilities:
    - Transcript display with incremental streaming render
    - Model selection and sampling parameter controls
    - Attachment and audio recording uploads
    - Session list, transcript export and diagnostic console

Contains no orchestration logic. Subscribes to a ConversationController
and redraws on its events.
"""

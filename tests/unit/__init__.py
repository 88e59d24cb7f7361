"""Unit tests for individual components in isolation.

Coverage:
    - session/: Document store and the grounded conversation state machine
    - parsing/: Text extraction and character counting
    - agent/: Configuration and the Agno completion client

Uses fakes and mocks for the language model.
"""

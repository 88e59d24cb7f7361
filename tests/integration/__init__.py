"""Integration tests for the HTTP API working as a system.

Coverage:
    - PDF upload with generated documents
    - Chat and SSE chat with a fake completion client
    - Session inspection, reset and deletion
    - Error status mapping
"""

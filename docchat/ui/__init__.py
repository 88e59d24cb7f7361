"""NiceGUI interface - thin presentation layer over the HTTP API.

Responsibilities:
    - PDF upload with extraction summary or no-text warning
    - Message log with markdown replies
    - Input disabled while an answer is outstanding
    - New chat (server-side session reset)

Contains no conversation logic; everything goes through the API.
"""

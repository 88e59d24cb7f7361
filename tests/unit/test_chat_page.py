"""Unit tests for the UI's API helpers.

httpx is patched; no server runs.
"""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from docchat.ui.chat_page import ask, reset_conversation


def api_response(status_code: int, body: dict) -> httpx.Response:
    return httpx.Response(status_code, json=body)


class TestResetConversation:
    """Tests for the new-chat reset call."""

    async def test_posts_to_reset_endpoint(self) -> None:
        post = AsyncMock(return_value=api_response(200, {"session_id": "abc", "turn_count": 0}))

        with patch.object(httpx.AsyncClient, "post", post):
            await reset_conversation("abc")

        assert post.call_args.args[0].endswith("/sessions/abc/reset")

    async def test_error_status_raises_with_detail(self) -> None:
        post = AsyncMock(
            return_value=api_response(404, {"detail": "Session abc not found", "kind": "session_not_found"})
        )

        with (
            patch.object(httpx.AsyncClient, "post", post),
            pytest.raises(RuntimeError, match="Session abc not found"),
        ):
            await reset_conversation("abc")

    async def test_connection_error_raises_runtime_error(self) -> None:
        post = AsyncMock(side_effect=httpx.ConnectError("refused"))

        with (
            patch.object(httpx.AsyncClient, "post", post),
            pytest.raises(RuntimeError, match="Connection failed"),
        ):
            await reset_conversation("abc")


class TestAsk:
    """Tests for the chat call."""

    async def test_returns_reply_text(self) -> None:
        post = AsyncMock(return_value=api_response(200, {"response": "Hi", "session_id": "abc"}))

        with patch.object(httpx.AsyncClient, "post", post):
            reply = await ask("Hello", "abc")

        assert reply == "Hi"
        assert post.call_args.kwargs["json"] == {"message": "Hello", "session_id": "abc"}

    async def test_busy_session_raises_with_detail(self) -> None:
        post = AsyncMock(
            return_value=api_response(
                409, {"detail": "A previous message is still being answered", "kind": "session_busy"}
            )
        )

        with (
            patch.object(httpx.AsyncClient, "post", post),
            pytest.raises(RuntimeError, match="still being answered"),
        ):
            await ask("Hello", "abc")

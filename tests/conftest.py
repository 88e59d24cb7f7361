"""Pytest fixtures and shared test configuration.

Fixtures:
    - fake_client: Completion client that records requests and returns canned replies
    - session: ConversationSession wired to fake_client
    - manager: SessionManager wired to fake_client, installed into the app
    - async_client: HTTPX client for API testing

Helpers:
    - make_pdf: Build a small, valid PDF with one text line per page
"""

from collections.abc import AsyncGenerator, Generator, Sequence

import pytest
from httpx import ASGITransport, AsyncClient

from docchat.api import app
from docchat.models.conversation import Turn
from docchat.session.conversation import ConversationSession
from docchat.session.manager import SessionManager, get_session_manager


def make_pdf(pages: Sequence[str]) -> bytes:
    """Build a PDF with one Helvetica text line per page.

    An empty string produces a page without any text. Page text must not
    contain parentheses or backslashes.
    """
    kids = " ".join(f"{4 + 2 * i} 0 R" for i in range(len(pages)))
    objects: list[bytes] = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        f"<< /Type /Pages /Kids [{kids}] /Count {len(pages)} >>".encode(),
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    for i, text in enumerate(pages):
        stream = f"BT /F1 12 Tf 72 720 Td ({text}) Tj ET".encode() if text else b""
        objects.append(
            (
                "<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
                f"/Resources << /Font << /F1 3 0 R >> >> /Contents {5 + 2 * i} 0 R >>"
            ).encode()
        )
        objects.append(b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream")

    out = bytearray(b"%PDF-1.4\n")
    offsets: list[int] = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"

    xref_offset = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\n" % (len(objects) + 1)
    out += b"startxref\n%d\n%%%%EOF\n" % xref_offset
    return bytes(out)


class FakeCompletionClient:
    """Records every request and answers "Answer <n>" unless told otherwise."""

    def __init__(self) -> None:
        self.calls: list[list[Turn]] = []
        self.replies: list[str] = []
        self._failures: list[BaseException] = []

    def fail_next(self, error: BaseException) -> None:
        self._failures.append(error)

    async def generate(self, turns: Sequence[Turn]) -> str:
        self.calls.append(list(turns))
        if self._failures:
            raise self._failures.pop(0)
        if self.replies:
            return self.replies.pop(0)
        return f"Answer {len(self.calls)}"


@pytest.fixture
def fake_client() -> FakeCompletionClient:
    return FakeCompletionClient()


@pytest.fixture
def session(fake_client: FakeCompletionClient) -> ConversationSession:
    return ConversationSession(client=fake_client)


@pytest.fixture
def sample_pdf() -> bytes:
    return make_pdf(["Information security policy", "Access control rules"])


@pytest.fixture
def blank_pdf() -> bytes:
    return make_pdf([""])


@pytest.fixture
def manager(fake_client: FakeCompletionClient) -> Generator[SessionManager]:
    """Session manager installed as the app's dependency."""
    test_manager = SessionManager(client=fake_client, max_grounding_chars=0, max_sessions=100)
    app.dependency_overrides[get_session_manager] = lambda: test_manager
    yield test_manager
    app.dependency_overrides.pop(get_session_manager, None)


@pytest.fixture
async def async_client(manager: SessionManager) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Yields:
        Configured AsyncClient for making test requests.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

"""Unit tests for ConversationSession: grounding, history and rollback."""

import asyncio

import pytest
import pytest_check as check

from docchat.errors import (
    CompletionError,
    EmptyInputError,
    NoDocumentError,
    SessionBusyError,
)
from docchat.models.conversation import TurnRole
from docchat.session.conversation import (
    GROUNDING_PREAMBLE,
    ConversationSession,
    build_grounding_prompt,
)
from tests.conftest import FakeCompletionClient

DOC_TEXT = "The quarterly revenue was 42 million euros."


def load(session: ConversationSession, text: str = DOC_TEXT, name: str = "report.pdf") -> None:
    session.load_document(text=text, page_count=1, char_count=len(text), name=name)


def roles(session: ConversationSession) -> list[TurnRole]:
    return [turn.role for turn in session.history]


class TestBuildGroundingPrompt:
    """Tests for the grounding turn text."""

    def test_preamble_document_question_in_order(self) -> None:
        prompt = build_grounding_prompt(DOC_TEXT, "What was the revenue?")

        check.is_true(prompt.startswith(GROUNDING_PREAMBLE))
        check.less(prompt.index(DOC_TEXT), prompt.index("What was the revenue?"))

    def test_truncates_long_documents(self) -> None:
        prompt = build_grounding_prompt("a" * 50 + "TAIL", "Q?", max_chars=50)

        check.is_in("a" * 50, prompt)
        check.is_not_in("TAIL", prompt)
        check.is_in("truncated: 50 of 54 characters", prompt)

    def test_zero_limit_keeps_everything(self) -> None:
        prompt = build_grounding_prompt("x" * 1000, "Q?", max_chars=0)

        assert "x" * 1000 in prompt


class TestSubmit:
    """Tests for the submit state machine."""

    async def test_first_turn_carries_document_and_question(
        self, session: ConversationSession, fake_client: FakeCompletionClient
    ) -> None:
        load(session)

        reply = await session.submit("What was the revenue?")

        sent = fake_client.calls[0]
        check.equal(reply, "Answer 1")
        check.equal(len(sent), 1)
        check.equal(sent[0].role, TurnRole.USER)
        check.less(sent[0].text.index(DOC_TEXT), sent[0].text.index("What was the revenue?"))

    async def test_follow_up_is_sent_verbatim_with_history(
        self, session: ConversationSession, fake_client: FakeCompletionClient
    ) -> None:
        load(session)
        await session.submit("What was the revenue?")

        await session.submit("  And the year before? ")

        sent = fake_client.calls[1]
        check.equal([t.role for t in sent], [TurnRole.USER, TurnRole.ASSISTANT, TurnRole.USER])
        check.equal(sent[-1].text, "  And the year before? ")
        check.is_not_in(DOC_TEXT, sent[-1].text)
        check.equal(sent[1].text, "Answer 1")

    async def test_history_alternates_after_many_turns(self, session: ConversationSession) -> None:
        load(session)

        for i in range(5):
            await session.submit(f"Question {i}")

        assert session.turn_count == 10
        assert roles(session) == [TurnRole.USER, TurnRole.ASSISTANT] * 5

    async def test_document_text_sent_once_per_session(
        self, session: ConversationSession, fake_client: FakeCompletionClient
    ) -> None:
        load(session)

        for i in range(4):
            await session.submit(f"Question {i}")

        user_turns = [t for t in fake_client.calls[-1] if t.role == TurnRole.USER]
        assert sum(DOC_TEXT in t.text for t in user_turns) == 1
        assert DOC_TEXT in user_turns[0].text

    async def test_is_first_turn_tracks_history(self, session: ConversationSession) -> None:
        load(session)
        check.is_true(session.is_first_turn)

        await session.submit("Q")

        check.is_false(session.is_first_turn)

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    async def test_rejects_blank_input(
        self, session: ConversationSession, fake_client: FakeCompletionClient, text: str
    ) -> None:
        load(session)

        with pytest.raises(EmptyInputError):
            await session.submit(text)

        check.equal(session.turn_count, 0)
        check.equal(fake_client.calls, [])

    async def test_blank_input_after_exchange_keeps_history(self, session: ConversationSession) -> None:
        load(session)
        await session.submit("Q")

        with pytest.raises(EmptyInputError):
            await session.submit(" ")

        assert session.turn_count == 2

    async def test_no_document_raises(
        self, session: ConversationSession, fake_client: FakeCompletionClient
    ) -> None:
        with pytest.raises(NoDocumentError):
            await session.submit("What is this?")

        check.equal(session.turn_count, 0)
        check.equal(fake_client.calls, [])

    async def test_document_without_text_raises(self, session: ConversationSession) -> None:
        session.load_document(text="", page_count=3, char_count=0, name="scan.pdf")

        check.is_false(session.store.has_grounding_text())
        with pytest.raises(NoDocumentError):
            await session.submit("What is this?")
        check.equal(session.turn_count, 0)

    async def test_truncates_grounding_text(self, fake_client: FakeCompletionClient) -> None:
        session = ConversationSession(client=fake_client, max_grounding_chars=10)
        load(session, text="0123456789ABCDEF")

        await session.submit("Q")

        sent = fake_client.calls[0][0].text
        check.is_in("0123456789", sent)
        check.is_not_in("ABCDEF", sent)


class TestCompletionFailure:
    """Tests for rollback when the completion service fails."""

    async def test_failed_first_turn_leaves_history_empty(
        self, session: ConversationSession, fake_client: FakeCompletionClient
    ) -> None:
        load(session)
        fake_client.fail_next(ConnectionError("network down"))

        with pytest.raises(CompletionError) as exc_info:
            await session.submit("Q1")

        check.equal(session.turn_count, 0)
        check.is_instance(exc_info.value.__cause__, ConnectionError)
        check.is_in("network down", exc_info.value.message)

    async def test_retry_after_failure_grounds_again(
        self, session: ConversationSession, fake_client: FakeCompletionClient
    ) -> None:
        load(session)
        fake_client.fail_next(RuntimeError("quota exceeded"))
        with pytest.raises(CompletionError):
            await session.submit("Q1")

        await session.submit("Q1 again")

        sent = fake_client.calls[-1]
        check.equal(len(sent), 1)
        check.is_in(DOC_TEXT, sent[0].text)
        check.equal(session.turn_count, 2)

    async def test_failed_follow_up_keeps_previous_turns(
        self, session: ConversationSession, fake_client: FakeCompletionClient
    ) -> None:
        load(session)
        await session.submit("Q1")
        before = session.history
        fake_client.fail_next(CompletionError("no candidates"))

        with pytest.raises(CompletionError, match="no candidates"):
            await session.submit("Q2")

        assert session.history == before

    async def test_blank_reply_is_a_completion_error(
        self, session: ConversationSession, fake_client: FakeCompletionClient
    ) -> None:
        load(session)
        fake_client.replies.append("   ")

        with pytest.raises(CompletionError):
            await session.submit("Q1")

        assert session.turn_count == 0


class TestResetAndReload:
    """Tests for reset_session and load_document."""

    async def test_reset_clears_history(self, session: ConversationSession) -> None:
        load(session)
        await session.submit("Q1")

        session.reset_session()

        check.equal(session.turn_count, 0)
        check.is_true(session.is_first_turn)
        check.is_not_none(session.document)

    async def test_new_document_is_grounded_once(
        self, session: ConversationSession, fake_client: FakeCompletionClient
    ) -> None:
        load(session)
        await session.submit("Q1")

        session.reset_session()
        load(session, text="The second document talks about tides.", name="tides.pdf")
        await session.submit("What about tides?")
        await session.submit("And the moon?")

        first_new = fake_client.calls[1]
        last = fake_client.calls[2]
        check.equal(len(first_new), 1)
        check.is_in("talks about tides", first_new[0].text)
        check.is_not_in(DOC_TEXT, first_new[0].text)
        check.equal(sum("talks about tides" in t.text for t in last), 1)

    async def test_load_document_resets_history(self, session: ConversationSession) -> None:
        load(session)
        await session.submit("Q1")

        record = session.load_document(text="New text", page_count=2, char_count=8, name="b.pdf")

        check.equal(session.turn_count, 0)
        check.equal(record.name, "b.pdf")
        check.equal(session.document, record)


class TestBusyGuard:
    """Tests for the single-flight guard."""

    async def test_overlapping_submit_fails_fast(self) -> None:
        release = asyncio.Event()

        class SlowClient:
            async def generate(self, turns):
                await release.wait()
                return "slow answer"

        session = ConversationSession(client=SlowClient())
        load(session)

        first = asyncio.create_task(session.submit("Q1"))
        await asyncio.sleep(0)

        check.is_true(session.busy)
        with pytest.raises(SessionBusyError):
            await session.submit("Q2")
        with pytest.raises(SessionBusyError):
            session.reset_session()
        with pytest.raises(SessionBusyError):
            session.load_document(text="x", page_count=1, char_count=1)

        release.set()
        assert await first == "slow answer"
        assert session.turn_count == 2
        assert not session.busy

"""
Unit tests for streaming chat sessions.

Tests the session state machine, duplicate suppression, streaming into
the transcript and retryable error messages.
"""

import pytest
import pytest_asyncio

from codepulse.app.chat import (
    ChatSession,
    create_doubt_buster_session,
    create_mock_interview_session,
)
from codepulse.core import prompts
from codepulse.core.domain.models import ChatRole, ChatState
from codepulse.core.exceptions import InvalidChatStateError, MissingInputError

from conftest import FakeChatHandle, FakeClient


async def collect(fragments):
    return [fragment async for fragment in fragments]


def make_session(scripts):
    handle = FakeChatHandle(scripts)
    session = ChatSession(handle, "Start the interview.", prompts.MOCK_INTERVIEW_RETRY_HINT)
    return session, handle


class TestStart:
    """Test suite for ChatSession.start()."""

    @pytest.mark.asyncio
    async def test_kickoff_is_hidden_and_greeting_streams(self):
        session, handle = make_session([["Hello, ", "welcome!"]])

        fragments = await collect(session.start())

        assert fragments == ["Hello, ", "welcome!"]
        assert handle.sent == ["Start the interview."]
        assert [(m.role, m.text) for m in session.messages] == [(ChatRole.MODEL, "Hello, welcome!")]
        assert session.messages[0].sealed
        assert session.state is ChatState.IDLE

    @pytest.mark.asyncio
    async def test_start_twice_is_invalid(self):
        session, _ = make_session([["Hi"]])
        await collect(session.start())

        with pytest.raises(InvalidChatStateError):
            session.start()

    def test_send_before_start_is_invalid(self):
        session, _ = make_session([])

        with pytest.raises(InvalidChatStateError):
            session.send("hello")

    @pytest.mark.asyncio
    async def test_kickoff_failure_then_retry_clears_transcript(self):
        session, handle = make_session([[Exception("503 overloaded")], ["Welcome back!"]])

        await collect(session.start())

        [error] = session.messages
        assert error.is_error
        assert error.text == "AI service temporarily unavailable. Please try again later. Let's try again."
        assert session.state is ChatState.ERROR

        await collect(error.on_retry())

        assert [m.text for m in session.messages] == ["Welcome back!"]
        assert handle.sent == ["Start the interview.", "Start the interview."]
        assert session.state is ChatState.IDLE


class TestSend:
    """Test suite for ChatSession.send()."""

    @pytest_asyncio.fixture
    async def started(self):
        session, handle = make_session([["Hi! Tell me about yourself."]])
        await collect(session.start())
        return session, handle

    @pytest.mark.asyncio
    async def test_reply_streams_into_one_model_message(self, started):
        session, handle = started
        handle.scripts.append(["I ", "see", "."])

        fragments = await collect(session.send("I build APIs."))

        assert fragments == ["I ", "see", "."]
        user, reply = session.messages[-2:]
        assert (user.role, user.text) == (ChatRole.USER, "I build APIs.")
        assert (reply.role, reply.text) == (ChatRole.MODEL, "I see.")
        assert reply.sealed

    @pytest.mark.asyncio
    async def test_duplicate_message_is_dropped(self, started):
        session, handle = started
        await collect(session.send("same answer"))

        fragments = await collect(session.send("same answer"))

        assert fragments == []
        assert handle.sent.count("same answer") == 1
        assert len(session.messages) == 3

    @pytest.mark.asyncio
    async def test_send_while_streaming_is_dropped(self, started):
        """A second send while a reply is in flight is a no-op."""
        session, handle = started
        handle.scripts.append(["part one", " part two"])

        first = session.send("first")
        assert await first.__anext__() == "part one"
        assert session.state is ChatState.STREAMING

        assert await collect(session.send("second")) == []

        rest = await collect(first)
        assert rest == [" part two"]
        assert handle.sent[-1] == "first"
        assert "second" not in handle.sent
        assert session.state is ChatState.IDLE

    @pytest.mark.asyncio
    async def test_blank_message_is_dropped(self, started):
        session, handle = started

        assert await collect(session.send("   ")) == []
        assert len(handle.sent) == 1

    @pytest.mark.asyncio
    async def test_failure_replaces_partial_reply(self, started):
        session, handle = started
        handle.scripts.append(["Partial", Exception("429 quota exhausted")])

        fragments = await collect(session.send("my answer"))

        assert fragments == ["Partial"]
        user, error = session.messages[-2:]
        assert user.text == "my answer"
        assert error.is_error
        assert error.text == (
            "API quota exceeded. Please try again later or check your billing status. "
            "Would you like to retry sending your last message?"
        )
        assert error.on_retry is not None
        assert not any(m.text == "Partial" for m in session.messages)
        assert session.last_error is not None
        assert session.state is ChatState.ERROR

    @pytest.mark.asyncio
    async def test_failed_exchange_is_not_in_service_history(self, started):
        session, handle = started
        handle.scripts.append([Exception("500 internal")])

        await collect(session.send("my answer"))

        assert [message for message, _ in handle.history] == ["Start the interview."]

    @pytest.mark.asyncio
    async def test_retry_resends_same_message(self, started):
        session, handle = started
        handle.scripts.append([Exception("500 internal")])
        handle.scripts.append(["Great answer."])
        await collect(session.send("my answer"))

        fragments = await collect(session.retry())

        assert fragments == ["Great answer."]
        assert handle.sent[-2:] == ["my answer", "my answer"]
        texts = [m.text for m in session.messages]
        assert texts[-2:] == ["my answer", "Great answer."]
        assert texts.count("my answer") == 1
        assert not any(m.is_error for m in session.messages)
        assert session.last_error is None

    @pytest.mark.asyncio
    async def test_abandoned_stream_leaves_retryable_error(self, started):
        """A consumer that stops mid-reply must not leave the session busy."""
        session, handle = started
        handle.scripts.append(["part1 ", "part2"])
        handle.scripts.append(["Full reply."])

        stream = session.send("first")
        assert await stream.__anext__() == "part1 "
        await stream.aclose()

        assert not session.is_busy
        assert session.state is ChatState.ERROR
        user, error = session.messages[-2:]
        assert user.text == "first"
        assert error.is_error and error.on_retry is not None
        assert not any(m.text == "part1 " for m in session.messages)

        assert await collect(session.retry()) == ["Full reply."]
        assert session.messages[-1].text == "Full reply."
        assert session.state is ChatState.IDLE

    @pytest.mark.asyncio
    async def test_send_after_abandoned_stream_goes_through(self, started):
        session, handle = started
        handle.scripts.append(["part1 ", "part2"])
        handle.scripts.append(["Answer."])

        stream = session.send("first")
        await stream.__anext__()
        await stream.aclose()

        assert await collect(session.send("second")) == ["Answer."]
        assert handle.sent[-1] == "second"

    @pytest.mark.asyncio
    async def test_retry_without_error_is_invalid(self, started):
        session, _ = started

        with pytest.raises(InvalidChatStateError):
            session.retry()


class TestTranscript:
    """Test suite for transcript export."""

    @pytest.mark.asyncio
    async def test_markdown_skips_errors(self):
        session, handle = make_session([["Hello!"], ["Nice."], [Exception("503")]])
        await collect(session.start())
        await collect(session.send("Hi there"))
        await collect(session.send("Another"))

        markdown = session.transcript_markdown(model_label="Interviewer")

        assert markdown.startswith("**Interviewer:**\n\nHello!")
        assert "**You:**\n\nHi there" in markdown
        assert "unavailable" not in markdown


class TestFactories:
    """Test suite for the chat session factories."""

    def test_mock_interview_session(self):
        client = FakeClient()

        session = create_mock_interview_session("Data Engineer", "Spark", client=client)

        assert session.kickoff_message == prompts.MOCK_INTERVIEW_KICKOFF
        assert session.retry_hint == prompts.MOCK_INTERVIEW_RETRY_HINT
        assert '"Data Engineer"' in client.chat_instructions[0]

    def test_mock_interview_requires_role(self):
        with pytest.raises(MissingInputError):
            create_mock_interview_session("  ", client=FakeClient())

    def test_doubt_buster_session(self):
        client = FakeClient()

        session = create_doubt_buster_session(client=client)

        assert session.kickoff_message == prompts.DOUBT_BUSTER_KICKOFF
        assert client.chat_instructions == [prompts.DOUBT_BUSTER_INSTRUCTION]

    def test_each_session_gets_new_id(self):
        client = FakeClient()

        first = create_doubt_buster_session(client=client)
        second = create_doubt_buster_session(client=client)

        assert first.session_id != second.session_id


# =============================================================================
# Run tests
# =============================================================================

if __name__ == "__main__":
    pytest.main([__file__, "-v"])

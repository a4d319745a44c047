"""
CodePulse - Streaming Chat Sessions.

Wraps one conversation with the AI service for the Mock Interview and
Doubt Buster features. Keeps the ordered transcript, streams replies
fragment by fragment into a single open model message, suppresses
duplicate or overlapping sends, and turns failures into an error message
that can be retried.

State Flow:
UNINITIALIZED -> INITIALIZING -> IDLE <-> STREAMING
                       |                     |
                       +------> ERROR <------+
"""

from __future__ import annotations

import logging
import uuid
from typing import AsyncIterator, Protocol

from codepulse.app.prompt_composer import mock_interview_instruction
from codepulse.core import prompts
from codepulse.core.domain.models import ChatMessage, ChatRole, ChatState
from codepulse.core.exceptions import ChatError, ClassifiedError, InvalidChatStateError, MissingInputError
from codepulse.infra.llm.errors import classify
from codepulse.infra.llm.gemini import GeminiClient, get_client


logger = logging.getLogger(__name__)


class ChatHandle(Protocol):
    """Service-side conversation; see GeminiChatHandle."""

    def send_streaming(self, message: str) -> AsyncIterator[str]: ...


class ChatSession:
    """
    One chat conversation and its transcript.

    The kickoff message is sent to the service but never shown in the
    transcript. The service handle only records an exchange once its
    reply has fully streamed, so a retried message is seen against
    exactly the transcript the user sees.

    Usage:
        session = create_doubt_buster_session()

        async for fragment in session.start():
            render(fragment)

        async for fragment in session.send("What is a closure?"):
            render(fragment)
    """

    def __init__(
        self,
        handle: ChatHandle,
        kickoff_message: str,
        retry_hint: str,
        session_id: str | None = None,
        kickoff_retry_hint: str = prompts.KICKOFF_RETRY_HINT,
    ):
        self._handle = handle
        self.kickoff_message = kickoff_message
        self.retry_hint = retry_hint
        self.kickoff_retry_hint = kickoff_retry_hint
        self.session_id = session_id or str(uuid.uuid4())[:8]

        self._messages: list[ChatMessage] = []
        self._state = ChatState.UNINITIALIZED
        self._in_flight = False
        self._last_dispatched: str | None = None
        self._last_error: ClassifiedError | None = None

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def messages(self) -> list[ChatMessage]:
        """Snapshot of the transcript, oldest first."""
        return list(self._messages)

    @property
    def state(self) -> ChatState:
        return self._state

    @property
    def is_busy(self) -> bool:
        return self._in_flight

    @property
    def last_error(self) -> ClassifiedError | None:
        return self._last_error

    # -------------------------------------------------------------------------
    # Conversation
    # -------------------------------------------------------------------------

    def start(self) -> AsyncIterator[str]:
        """Send the kickoff message and stream the opening reply."""
        if self._state is not ChatState.UNINITIALIZED:
            raise InvalidChatStateError(self._state.value, ChatState.UNINITIALIZED.value)

        self._state = ChatState.INITIALIZING
        logger.info(f"💬 Chat session started: {self.session_id}")
        return self._dispatch(self.kickoff_message, kickoff=True, is_retry=False)

    def send(self, message: str) -> AsyncIterator[str]:
        """
        Send a user message and stream the reply.

        A message identical to the last one dispatched, or sent while a
        reply is still streaming, is dropped and yields nothing.
        """
        if self._state is ChatState.UNINITIALIZED:
            raise InvalidChatStateError(self._state.value, ChatState.IDLE.value)
        return self._dispatch(message, kickoff=False, is_retry=False)

    def retry(self) -> AsyncIterator[str]:
        """Re-run the failed send behind the trailing error message."""
        last = self._messages[-1] if self._messages else None
        if last is None or not last.is_error or last.on_retry is None:
            raise InvalidChatStateError(self._state.value, ChatState.ERROR.value)
        return last.on_retry()

    async def _dispatch(self, message: str, kickoff: bool, is_retry: bool) -> AsyncIterator[str]:
        if not is_retry:
            if not message or not message.strip():
                return
            if message == self._last_dispatched:
                logger.debug(f"[{self.session_id}] Dropped duplicate message")
                return
            if self._in_flight:
                logger.debug(f"[{self.session_id}] Dropped message while a reply is streaming")
                return

        self._last_dispatched = message
        self._in_flight = True

        if is_retry:
            if kickoff:
                self._messages.clear()
            elif self._messages and self._messages[-1].is_error:
                self._messages.pop()
        elif not kickoff:
            user_message = ChatMessage(role=ChatRole.USER, text=message)
            user_message.seal()
            self._messages.append(user_message)

        if not kickoff:
            self._state = ChatState.STREAMING

        reply = ChatMessage(role=ChatRole.MODEL)
        self._messages.append(reply)

        try:
            async for fragment in self._handle.send_streaming(message):
                reply.append(fragment)
                yield fragment
        except Exception as e:
            self._fail(reply, message, kickoff, e)
        except BaseException:
            # Consumer stopped iterating or the task was cancelled
            self._fail(reply, message, kickoff, ChatError("Reply stream was interrupted"))
            raise
        else:
            reply.seal()
            self._last_error = None
            self._state = ChatState.IDLE
            logger.debug(f"[{self.session_id}] Reply complete ({len(reply.text)} chars)")
        finally:
            self._in_flight = False

    def _fail(self, reply: ChatMessage, message: str, kickoff: bool, error: Exception) -> None:
        """Replace the partial reply with a retryable error message."""
        where = "chat.start" if kickoff else "chat.send"
        classified = classify(error, f"{where} [{self.session_id}]")

        self._messages = [msg for msg in self._messages if msg is not reply]

        hint = self.kickoff_retry_hint if kickoff else self.retry_hint
        error_message = ChatMessage(
            role=ChatRole.MODEL,
            text=f"{classified.message} {hint}",
            is_error=True,
            on_retry=lambda: self._dispatch(message, kickoff=kickoff, is_retry=True),
        )
        error_message.seal()
        self._messages.append(error_message)

        self._last_error = classified
        self._state = ChatState.ERROR

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    def transcript_markdown(self, user_label: str = "You", model_label: str = "AI") -> str:
        """Render the transcript as markdown, leaving out error messages."""
        blocks = []
        for msg in self._messages:
            if msg.is_error or not msg.text:
                continue
            label = user_label if msg.role is ChatRole.USER else model_label
            blocks.append(f"**{label}:**\n\n{msg.text}")
        return "\n\n---\n\n".join(blocks)


# -----------------------------------------------------------------------------
# Factory Functions
# -----------------------------------------------------------------------------

def _resolve_client(client: GeminiClient | None) -> GeminiClient:
    if client is not None:
        return client
    try:
        return get_client()
    except Exception as e:
        raise classify(e, "chat session") from e


def create_chat_session(
    system_instruction: str,
    kickoff_message: str,
    retry_hint: str,
    model: str | None = None,
    client: GeminiClient | None = None,
) -> ChatSession:
    """Open a service conversation and wrap it in a ChatSession."""
    handle = _resolve_client(client).open_chat_session(system_instruction, model_name=model)
    return ChatSession(handle, kickoff_message, retry_hint)


def create_mock_interview_session(
    job_role: str,
    job_description: str | None = None,
    resume: str | None = None,
    client: GeminiClient | None = None,
) -> ChatSession:
    """Mock interview for ``job_role``, personalized by the optional JD and resume."""
    if not job_role or not job_role.strip():
        raise MissingInputError("job role")

    return create_chat_session(
        mock_interview_instruction(job_role, job_description, resume),
        prompts.MOCK_INTERVIEW_KICKOFF,
        prompts.MOCK_INTERVIEW_RETRY_HINT,
        client=client,
    )


def create_doubt_buster_session(client: GeminiClient | None = None) -> ChatSession:
    """General-purpose tutoring chat."""
    return create_chat_session(
        prompts.DOUBT_BUSTER_INSTRUCTION,
        prompts.DOUBT_BUSTER_KICKOFF,
        prompts.DOUBT_BUSTER_RETRY_HINT,
        client=client,
    )


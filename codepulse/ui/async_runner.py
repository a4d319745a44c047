"""
CodePulse - Async Bridge for Streamlit.

Streamlit runs each browser session's script in its own thread, while the
Gemini SDKs keep async clients bound to the event loop they first ran on.
All coroutines therefore run on one event loop owned by a background
thread, shared by every session in the server process.
"""

import asyncio
import logging
import threading
from typing import AsyncIterator

import streamlit as st


logger = logging.getLogger(__name__)


@st.cache_resource
def get_event_loop() -> asyncio.AbstractEventLoop:
    """Start the process-wide event loop on first use."""
    loop = asyncio.new_event_loop()
    thread = threading.Thread(target=loop.run_forever, name="codepulse-event-loop", daemon=True)
    thread.start()
    logger.info("✅ Background event loop started")
    return loop


def run_async(coro):
    """Run a coroutine on the shared loop and block until it finishes."""
    return asyncio.run_coroutine_threadsafe(coro, get_event_loop()).result()


async def _next_fragment(fragments: AsyncIterator[str]) -> str | None:
    return await anext(fragments, None)


async def _close(fragments: AsyncIterator[str]) -> None:
    aclose = getattr(fragments, "aclose", None)
    if aclose is not None:
        await aclose()


def stream_into(placeholder, fragments: AsyncIterator[str]) -> str:
    """
    Render streamed fragments into ``placeholder`` as they arrive.

    Fragments are pulled one at a time so rendering stays on the script
    thread. The stream is always closed, so a rerun that interrupts
    rendering still ends the reply cleanly.
    """
    text = ""
    try:
        while True:
            fragment = run_async(_next_fragment(fragments))
            if fragment is None:
                break
            text += fragment
            placeholder.markdown(text + "▌")
    finally:
        run_async(_close(fragments))

    placeholder.markdown(text)
    return text

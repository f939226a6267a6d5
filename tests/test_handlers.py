from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from topwallets_bot.handlers.commands import (
    FALLBACK_TEXT,
    HISTORY_KEY,
    HandlerContext,
    ensure_user,
    help_command,
    natural_language_handler,
    remember,
    start,
)
from topwallets_bot.models import AssistantReply, Channel
from topwallets_bot.utils.rate_limit import RateLimiter


class DummyAssistant:
    def __init__(self, reply=None, error=None) -> None:
        self.reply = reply
        self.error = error
        self.messages = []

    async def respond(self, message):
        self.messages.append(message)
        if self.error:
            raise self.error
        return self.reply


class DummyMessage:
    def __init__(self, text: str = "") -> None:
        self.text = text
        self.calls = []

    async def reply_text(self, text: str, **kwargs) -> None:
        self.calls.append((text, kwargs))


def make_update(text: str = "", chat_id: int = 12345, user_id: int = 12345):
    return SimpleNamespace(
        message=DummyMessage(text),
        effective_user=SimpleNamespace(id=user_id),
        effective_chat=SimpleNamespace(id=chat_id),
    )


def make_context(handler_context: HandlerContext, chat_data=None):
    return SimpleNamespace(
        args=[],
        chat_data=chat_data if chat_data is not None else {},
        bot=SimpleNamespace(send_chat_action=AsyncMock()),
        application=SimpleNamespace(bot_data={"ctx": handler_context}),
    )


def make_handler_context(assistant=None, **kwargs) -> HandlerContext:
    kwargs.setdefault("rate_limiter", None)
    kwargs.setdefault("allowed_chat_id", None)
    return HandlerContext(assistant=assistant or DummyAssistant(), **kwargs)


@pytest.mark.asyncio
async def test_ensure_user_allows_any_chat_without_restriction() -> None:
    update = make_update()
    context = make_context(make_handler_context())

    assert await ensure_user(update, context)
    assert update.message.calls == []


@pytest.mark.asyncio
async def test_ensure_user_rejects_other_chats() -> None:
    update = make_update(chat_id=999)
    context = make_context(make_handler_context(allowed_chat_id=12345))

    assert not await ensure_user(update, context)
    assert "restricted" in update.message.calls[0][0]


@pytest.mark.asyncio
async def test_start_and_help_reply_with_plain_text() -> None:
    context = make_context(make_handler_context())
    start_update, help_update = make_update(), make_update()

    await start(start_update, context)
    await help_command(help_update, context)

    assert start_update.message.calls[0][0].startswith("👋 Welcome!")
    assert "DYOR" in help_update.message.calls[0][0]
    assert start_update.message.calls[0][1]["parse_mode"] is None


@pytest.mark.asyncio
async def test_natural_language_handler_sends_reply() -> None:
    assistant = DummyAssistant(AssistantReply(text="📊 Token Analysis:", action="SCAN_TOKEN"))
    update = make_update("97RggLo3zV5kFGYW4yoQTxr4Xkz4Vg2WPHzNYXXWpump")
    context = make_context(make_handler_context(assistant))

    await natural_language_handler(update, context)

    context.bot.send_chat_action.assert_awaited_once()
    text, kwargs = update.message.calls[0]
    assert text == "📊 Token Analysis:"
    assert kwargs["parse_mode"] is None
    assert kwargs["disable_web_page_preview"] is True
    assert assistant.messages[0].channel is Channel.TELEGRAM


@pytest.mark.asyncio
async def test_natural_language_handler_passes_history() -> None:
    assistant = DummyAssistant(AssistantReply(text="ok"))
    chat_data = {HISTORY_KEY: ["what's trending?"]}
    update = make_update("top 10 please")
    context = make_context(make_handler_context(assistant), chat_data)

    await natural_language_handler(update, context)

    assert assistant.messages[0].history == ["what's trending?"]
    assert chat_data[HISTORY_KEY] == ["what's trending?", "top 10 please"]


@pytest.mark.asyncio
async def test_natural_language_handler_fallback_when_unhandled() -> None:
    update = make_update("good morning")
    context = make_context(make_handler_context(DummyAssistant(None)))

    await natural_language_handler(update, context)

    assert update.message.calls[0][0] == FALLBACK_TEXT


@pytest.mark.asyncio
async def test_natural_language_handler_stays_quiet_for_silent_reply() -> None:
    update = make_update("97RggLo3zV5kFGYW4yoQTxr4Xkz4Vg2WPHzNYXXWpump")
    context = make_context(make_handler_context(DummyAssistant(AssistantReply(text=""))))

    await natural_language_handler(update, context)

    assert update.message.calls == []


@pytest.mark.asyncio
async def test_natural_language_handler_reports_failures() -> None:
    update = make_update("hello")
    context = make_context(make_handler_context(DummyAssistant(error=RuntimeError("boom"))))

    await natural_language_handler(update, context)

    assert update.message.calls[0][0] == "Something went wrong while handling that request."


@pytest.mark.asyncio
async def test_natural_language_handler_rate_limits() -> None:
    assistant = DummyAssistant(AssistantReply(text="ok"))
    handler_context = make_handler_context(
        assistant, rate_limiter=RateLimiter(limit_per_minute=1)
    )

    await natural_language_handler(make_update("first"), make_context(handler_context))
    limited = make_update("second")
    await natural_language_handler(limited, make_context(handler_context))

    assert [m.text for m in assistant.messages] == ["first"]


def test_remember_trims_history() -> None:
    chat_data = {}

    assert remember(chat_data, "a", limit=2) == []
    assert remember(chat_data, "b", limit=2) == ["a"]
    assert remember(chat_data, "c", limit=2) == ["a", "b"]
    assert chat_data[HISTORY_KEY] == ["b", "c"]

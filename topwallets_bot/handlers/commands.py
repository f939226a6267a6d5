"""Telegram command handlers."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import List, Optional, Protocol

from telegram import Update, constants
from telegram.ext import (
    Application,
    CallbackContext,
    CommandHandler,
    MessageHandler,
    filters,
)

from topwallets_bot.models import AssistantReply, Channel, InboundMessage
from topwallets_bot.utils.logging import get_logger
from topwallets_bot.utils.rate_limit import RateLimiter

HISTORY_KEY = "history"

WELCOME_TEXT = (
    "👋 Welcome! I'm your Solana token and wallet scanner.\n\n"
    "Send me an address or ask naturally, like:\n"
    "• Analyze 97RggLo3zV5kFGYW4yoQTxr4Xkz4Vg2WPHzNYXXWpump\n"
    "• Check this wallet: DNfuF1L62WWyW3pNakVkyGGFzVVhj4Yr52jSmdTyeBHm\n"
    "• What's trending in the last hour?\n\n"
    "Type /help to learn more!"
)

HELP_TEXT = (
    "I analyze Solana tokens and wallets with TopWallets data.\n\n"
    "💬 Just ask me naturally:\n"
    '• "What do you think about <token address>?"\n'
    '• "Scan the wallet <wallet address>"\n'
    '• "Show me the top 10 trending tokens over 6h"\n\n'
    "⚠️ All tokens can rug pull. DYOR, not financial advice."
)

FALLBACK_TEXT = (
    "I can scan Solana tokens and wallets or list trending tokens. "
    "Send me an address to get started."
)


class Assistant(Protocol):
    """Anything that can turn an inbound message into a reply."""

    async def respond(self, message: InboundMessage) -> Optional[AssistantReply]: ...


logger = get_logger(__name__)


@dataclass
class HandlerContext:
    assistant: Assistant
    rate_limiter: RateLimiter | None
    allowed_chat_id: int | None
    history_size: int = 5


def setup(application: Application, handler_context: HandlerContext) -> None:
    """Register handlers on the Telegram application."""
    application.bot_data["ctx"] = handler_context

    application.add_handler(CommandHandler("start", start))
    application.add_handler(CommandHandler("help", help_command))

    application.add_handler(
        MessageHandler(filters.TEXT & ~filters.COMMAND, natural_language_handler)
    )


def get_ctx(context: CallbackContext) -> HandlerContext:
    return context.application.bot_data["ctx"]


async def ensure_user(update: Update, context: CallbackContext) -> bool:
    """Ensure the chat is allowed to use the bot."""
    ctx = get_ctx(context)
    if ctx.allowed_chat_id is None:
        return True
    chat = update.effective_chat
    if chat is not None and chat.id == ctx.allowed_chat_id:
        return True
    await update.message.reply_text(
        "This bot is restricted to the configured chat.", parse_mode=None
    )
    return False


async def start(update: Update, context: CallbackContext) -> None:
    if not await ensure_user(update, context):
        return
    await update.message.reply_text(WELCOME_TEXT, parse_mode=None)


async def help_command(update: Update, context: CallbackContext) -> None:
    if not await ensure_user(update, context):
        return
    await update.message.reply_text(HELP_TEXT, parse_mode=None)


def rate_limit(update: Update, context: CallbackContext) -> bool:
    ctx = get_ctx(context)
    user = update.effective_user
    if not user:
        return True
    if not ctx.rate_limiter:
        return True
    allowed = ctx.rate_limiter.allow(user.id)
    if not allowed:
        wait = int(ctx.rate_limiter.retry_after(user.id)) + 1
        logger.info("rate_limited", user_id=user.id, retry_after=wait)
        asyncio.create_task(
            update.message.reply_text(
                f"Slow down, you hit the rate limit. Try again in {wait}s.",
                parse_mode=None,
            )
        )
    return allowed


def remember(chat_data: dict, text: str, limit: int) -> List[str]:
    """Append ``text`` to the chat's history and return what came before it."""
    history: List[str] = chat_data.setdefault(HISTORY_KEY, [])
    previous = list(history)
    history.append(text)
    del history[:-limit]
    return previous


async def natural_language_handler(update: Update, context: CallbackContext) -> None:
    if not await ensure_user(update, context):
        return
    if not rate_limit(update, context):
        return

    if update.effective_chat:
        await context.bot.send_chat_action(
            chat_id=update.effective_chat.id, action=constants.ChatAction.TYPING
        )

    ctx = get_ctx(context)
    text = update.message.text or ""
    history = remember(context.chat_data, text, ctx.history_size)
    inbound = InboundMessage(text=text, channel=Channel.TELEGRAM, history=history)

    user_id = update.effective_user.id if update.effective_user else None
    logger.info("assistant_starting", user_id=user_id)

    try:
        reply = await ctx.assistant.respond(inbound)
    except Exception as exc:
        logger.error("assistant_execution_failed", error=str(exc))
        await update.message.reply_text(
            "Something went wrong while handling that request.",
            parse_mode=None,
            disable_web_page_preview=True,
        )
        return

    if reply is None:
        await update.message.reply_text(
            FALLBACK_TEXT, parse_mode=None, disable_web_page_preview=True
        )
        return
    if reply.silent:
        return

    await update.message.reply_text(
        reply.text,
        parse_mode=None,
        disable_web_page_preview=True,
    )

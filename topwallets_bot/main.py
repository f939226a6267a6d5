"""Application entrypoint."""

from __future__ import annotations

import asyncio
import signal

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from telegram import BotCommand, BotCommandScopeChat, BotCommandScopeDefault
from telegram.error import BadRequest
from telegram.ext import ApplicationBuilder

from topwallets_bot.assistant import TokenAssistant
from topwallets_bot.cache import MemoryCacheStore
from topwallets_bot.commentary import CommentaryAdapter, Persona, load_prompt_template
from topwallets_bot.config import Settings, load_settings
from topwallets_bot.handlers.commands import HandlerContext, setup as setup_handlers
from topwallets_bot.jobs.cache_maintenance import CacheMaintenanceService
from topwallets_bot.llm import (
    GeminiIntentClassifier,
    GeminiModels,
    GeminiStructuredExtractor,
    GeminiTextGenerator,
)
from topwallets_bot.market_data import MarketDataClient
from topwallets_bot.trending import TrendingTokensGate, TrendingTokensProvider
from topwallets_bot.utils.logging import configure_logging, get_logger
from topwallets_bot.utils.rate_limit import RateLimiter

logger = get_logger(__name__)


def build_assistant(
    settings: Settings,
    market_data: MarketDataClient,
    cache: MemoryCacheStore,
    enable_commentary: bool = True,
) -> TokenAssistant:
    """Wire the assistant and its language-model collaborators from settings."""
    models = GeminiModels(
        api_key=settings.gemini_api_key,
        large_model=settings.gemini_model,
        small_model=settings.gemini_small_model,
    )
    trending = TrendingTokensProvider(
        gate=TrendingTokensGate(cache, market_data),
        classifier=GeminiIntentClassifier(models),
        extractor=GeminiStructuredExtractor(models),
    )

    commentary = None
    if enable_commentary and settings.enable_ai_commentary:
        commentary = CommentaryAdapter(
            GeminiTextGenerator(models),
            Persona(name=settings.agent_name, bio=settings.agent_bio),
            template=load_prompt_template(settings.commentary_prompt_file),
        )

    return TokenAssistant(market_data, trending=trending, commentary=commentary)


async def main() -> None:
    settings = load_settings()
    configure_logging(settings.log_level, log_file=settings.log_file)

    if not settings.telegram_bot_token:
        raise RuntimeError("TELEGRAM_BOT_TOKEN is required to run the Telegram bot")

    application = ApplicationBuilder().token(settings.telegram_bot_token).build()
    await application.initialize()

    commands = [
        BotCommand("start", "Introduce the bot"),
        BotCommand("help", "Show what I can do"),
    ]

    await application.bot.delete_my_commands(scope=BotCommandScopeDefault())
    await application.bot.set_my_commands(commands, scope=BotCommandScopeDefault())

    if settings.telegram_chat_id is not None:
        scope = BotCommandScopeChat(chat_id=settings.telegram_chat_id)
        try:
            await application.bot.delete_my_commands(scope=scope)
        except BadRequest:
            logger.warning(
                "telegram_command_scope_delete_failed",
                chat_id=settings.telegram_chat_id,
            )
        await application.bot.set_my_commands(commands, scope=scope)

    market_data = MarketDataClient.from_settings(settings)
    cache = MemoryCacheStore(maxsize=settings.cache_max_entries)
    assistant = build_assistant(settings, market_data, cache)

    scheduler = AsyncIOScheduler()
    cache_maintenance = CacheMaintenanceService(
        cache, scheduler, interval_seconds=settings.cache_sweep_seconds
    )

    handler_context = HandlerContext(
        assistant=assistant,
        rate_limiter=RateLimiter(settings.rate_limit_per_user_per_min),
        allowed_chat_id=settings.telegram_chat_id,
        history_size=settings.history_size,
    )
    setup_handlers(application, handler_context)

    cache_maintenance.start()
    scheduler.start()

    try:
        await application.start()
        if application.updater:
            await application.updater.start_polling()

        logger.info("bot_started", commands=len(commands))

        stop_event = asyncio.Event()

        def signal_handler(signum, frame):
            logger.info("shutdown_signal_received", signal=signum)
            stop_event.set()

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

        await stop_event.wait()

    finally:
        logger.info("bot_stopping")
        scheduler.shutdown(wait=False)
        if application.updater:
            await application.updater.stop()
        await application.stop()
        await application.shutdown()
        await market_data.close()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()

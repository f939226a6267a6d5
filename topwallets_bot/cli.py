"""CLI interface for the TopWallets bot.

Run queries from the command line, impersonating any channel.

Usage:
    python -m topwallets_bot.cli "analyze 97RggLo3zV5kFGYW4yoQTxr4Xkz4Vg2WPHzNYXXWpump"
    python -m topwallets_bot.cli --channel twitter "<token address>"
    python -m topwallets_bot.cli --interactive
    python -m topwallets_bot.cli --output json "top 10 trending tokens over 1h"
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import List, Optional

from topwallets_bot.assistant import TokenAssistant
from topwallets_bot.cache import MemoryCacheStore
from topwallets_bot.cli_output import CLIOutput, OutputFormat
from topwallets_bot.config import load_settings
from topwallets_bot.main import build_assistant
from topwallets_bot.market_data import MarketDataClient
from topwallets_bot.models import Channel, InboundMessage
from topwallets_bot.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


async def run_single_query(
    assistant: TokenAssistant,
    query: str,
    channel: Channel,
    output: CLIOutput,
    history: Optional[List[str]] = None,
) -> None:
    """Execute a single query and display the reply."""
    output.status(f"Processing: {query}")
    message = InboundMessage(text=query, channel=channel, history=list(history or []))
    reply = await assistant.respond(message)
    output.reply(reply, channel)


async def run_interactive(
    assistant: TokenAssistant,
    channel: Channel,
    output: CLIOutput,
    history_size: int = 5,
) -> None:
    """Run interactive REPL session."""
    output.info(f"TopWallets Bot CLI - Interactive Mode ({channel.value})")
    output.info("Type your queries, or use /quit to exit, /clear to reset history")
    output.info("-" * 50)

    history: List[str] = []

    while True:
        try:
            query = input("\n> ").strip()
        except (EOFError, KeyboardInterrupt):
            output.info("\nGoodbye!")
            break

        if not query:
            continue

        if query.startswith("/"):
            cmd = query.lower()
            if cmd in ("/quit", "/exit", "/q"):
                output.info("Goodbye!")
                break
            elif cmd in ("/clear", "/reset"):
                history.clear()
                output.info("History cleared.")
                continue
            elif cmd in ("/help", "/h"):
                output.info("Commands: /quit, /clear, /help, /channel <name>")
                continue
            elif cmd.startswith("/channel"):
                _, _, name = cmd.partition(" ")
                channel = Channel.parse(name)
                output.info(f"Channel set to {channel.value}")
                continue
            else:
                output.warning(f"Unknown command: {query}")
                continue

        try:
            await run_single_query(assistant, query, channel, output, history)
        except Exception as exc:
            output.error(f"Error: {exc}")
        history.append(query)
        del history[:-history_size]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="TopWallets Bot CLI - scan Solana tokens and wallets from a terminal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m topwallets_bot.cli "analyze <token address>"
  python -m topwallets_bot.cli --channel twitter "<token address>"
  python -m topwallets_bot.cli --interactive
  python -m topwallets_bot.cli --output json "trending tokens"
        """,
    )

    parser.add_argument(
        "query",
        nargs="?",
        help="Natural language query (e.g., 'scan wallet <address>')",
    )
    parser.add_argument(
        "-i",
        "--interactive",
        action="store_true",
        help="Start interactive REPL mode",
    )
    parser.add_argument(
        "-c",
        "--channel",
        choices=[channel.value for channel in Channel],
        default=Channel.TELEGRAM.value,
        help="Channel whose reply format to use (default: telegram)",
    )
    parser.add_argument(
        "-o",
        "--output",
        choices=[fmt.value for fmt in OutputFormat],
        default="text",
        help="Output format (default: text)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show debug information",
    )
    parser.add_argument(
        "--stdin",
        action="store_true",
        help="Read query from stdin",
    )
    parser.add_argument(
        "--no-ai",
        action="store_true",
        help="Disable AI commentary on token replies",
    )
    return parser


async def main(argv: Optional[List[str]] = None) -> None:
    """CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)

    output = CLIOutput(format=OutputFormat(args.output), verbose=args.verbose)
    channel = Channel.parse(args.channel)

    if not args.interactive and not args.query and not args.stdin:
        parser.print_help()
        sys.exit(1)

    query: Optional[str] = args.query
    if args.stdin:
        query = sys.stdin.read().strip()
        if not query:
            output.error("No query provided via stdin")
            sys.exit(1)

    try:
        settings = load_settings()
    except Exception as exc:
        output.error(f"Failed to load settings: {exc}")
        output.info(
            "Ensure .env exists with TOPWALLETS_API_KEY, BIRDEYE_API_KEY and GEMINI_API_KEY set"
        )
        sys.exit(1)

    log_level = "DEBUG" if args.verbose else settings.log_level
    configure_logging(log_level, log_file=settings.log_file, console=args.verbose)

    market_data = MarketDataClient.from_settings(settings)
    cache = MemoryCacheStore(maxsize=settings.cache_max_entries)
    assistant = build_assistant(
        settings, market_data, cache, enable_commentary=not args.no_ai
    )
    output.debug("assistant_ready", {"channel": channel.value, "ai": not args.no_ai})

    try:
        if args.interactive:
            await run_interactive(assistant, channel, output, settings.history_size)
        elif query:
            await run_single_query(assistant, query, channel, output)
    except KeyboardInterrupt:
        output.info("\nInterrupted")
    finally:
        await market_data.close()


def cli_main() -> None:
    """Synchronous wrapper for CLI entry."""
    asyncio.run(main())


if __name__ == "__main__":
    cli_main()

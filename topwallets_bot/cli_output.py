"""CLI output formatting for terminal display.

Replies are printed as-is in text mode or wrapped in a small JSON document
for scripting. Diagnostics go to stderr so stdout stays parseable.
"""

from __future__ import annotations

import json
import sys
from enum import Enum
from typing import Any, Optional

from topwallets_bot.models import AssistantReply, Channel

NO_REPLY_TEXT = "No reply (the message was not recognized as a token, wallet or trending request)."
SILENT_REPLY_TEXT = "(handled silently: errors are hidden on this channel)"


class OutputFormat(Enum):
    """Supported output formats."""

    TEXT = "text"
    JSON = "json"


class CLIOutput:
    """Unified output handler for CLI."""

    def __init__(
        self,
        format: OutputFormat = OutputFormat.TEXT,
        verbose: bool = False,
        stream: Any = None,
        err_stream: Any = None,
    ) -> None:
        self.format = format
        self.verbose = verbose
        self.stream = stream or sys.stdout
        self.err_stream = err_stream or sys.stderr

    def reply(self, reply: Optional[AssistantReply], channel: Channel) -> None:
        """Output the assistant's reply (or the lack of one)."""
        if self.format == OutputFormat.JSON:
            document = {
                "channel": channel.value,
                "handled": reply is not None,
                "action": reply.action if reply else None,
                "text": reply.text if reply else None,
            }
            print(json.dumps(document, indent=2, ensure_ascii=False), file=self.stream)
            return

        if reply is None:
            print(NO_REPLY_TEXT, file=self.stream)
        elif reply.silent:
            print(SILENT_REPLY_TEXT, file=self.stream)
        else:
            print(reply.text, file=self.stream)
            if self.verbose and reply.action:
                print(f"\n--- action: {reply.action} ---", file=self.stream)

    def status(self, message: str) -> None:
        if self.format == OutputFormat.JSON:
            return
        print(f"⏳ {message}", file=self.err_stream)

    def info(self, message: str) -> None:
        if self.format == OutputFormat.JSON:
            return
        print(f"ℹ️  {message}", file=self.stream)

    def warning(self, message: str) -> None:
        if self.format == OutputFormat.JSON:
            print(json.dumps({"warning": message}), file=self.err_stream)
            return
        print(f"⚠️  {message}", file=self.err_stream)

    def error(self, message: str) -> None:
        if self.format == OutputFormat.JSON:
            print(json.dumps({"error": message}), file=self.err_stream)
            return
        print(f"❌ {message}", file=self.err_stream)

    def debug(self, message: str, data: Any = None) -> None:
        """Output debug information (only in verbose mode)."""
        if not self.verbose:
            return

        if self.format == OutputFormat.JSON:
            output = {"debug": message}
            if data is not None:
                output["data"] = data
            print(json.dumps(output, default=str), file=self.err_stream)
            return

        print(f"🔍 {message}", file=self.err_stream)
        if data is not None:
            print(f"   {data}", file=self.err_stream)

"""Pattern-based address extraction and query routing."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


class Intent(Enum):
    """Recognized user intents."""

    TOKEN_SCAN = "token_scan"  # Message carries an address to analyze as a token
    WALLET_SCAN = "wallet_scan"  # Message carries an address and asks about a wallet
    TOKEN_GUIDANCE = "token_guidance"  # Token question without an address
    WALLET_GUIDANCE = "wallet_guidance"  # Wallet question without an address
    TRENDING_CANDIDATE = "trending_candidate"  # No address; ask the classifier
    UNKNOWN = "unknown"


@dataclass
class MatchedIntent:
    """Result of intent matching."""

    intent: Intent
    address: Optional[str] = None
    confidence: float = 1.0


# Base58 alphabet without 0, O, I and l; no checksum validation.
ADDRESS_PATTERN = re.compile(r"[1-9A-HJ-NP-Za-km-z]{32,44}")
TICKER_PATTERN = re.compile(r"\$[A-Za-z]+")
TOKEN_KEYWORDS_PATTERN = re.compile(r"token|price|analysis", re.IGNORECASE)
WALLET_KEYWORDS_PATTERN = re.compile(
    r"\b(?:wallet|trader|pnl|portfolio)s?\b", re.IGNORECASE
)


def extract_addresses(text: str) -> List[str]:
    """All address-shaped candidates in document order."""
    if not text or not isinstance(text, str):
        return []
    return ADDRESS_PATTERN.findall(text)


def extract_first_address(text: str) -> Optional[str]:
    """First address-shaped candidate in document order, if any."""
    if not text or not isinstance(text, str):
        return None
    match = ADDRESS_PATTERN.search(text)
    return match.group(0) if match else None


def looks_like_token_query(text: str) -> bool:
    """Address, ``$TICKER`` or a token keyword anywhere in the text."""
    if not text or not isinstance(text, str):
        return False
    return bool(
        ADDRESS_PATTERN.search(text)
        or TICKER_PATTERN.search(text)
        or TOKEN_KEYWORDS_PATTERN.search(text)
    )


def is_bare_address(text: str) -> bool:
    """True when the whole trimmed text is exactly one address."""
    if not text or not isinstance(text, str):
        return False
    return ADDRESS_PATTERN.fullmatch(text.strip()) is not None


def looks_like_wallet_query(text: str) -> bool:
    """An address inside a sentence; bare addresses go to the token scanner."""
    if not text or not isinstance(text, str):
        return False
    if is_bare_address(text):
        return False
    return ADDRESS_PATTERN.search(text) is not None


def match_intent(message: str) -> MatchedIntent:
    """Route a message to a scanner.

    Token and wallet detection can both fire on the same text. An address
    paired with a wallet keyword goes to the wallet scanner; every other
    address, bare ones included, goes to the token scanner.

    Args:
        message: The user's input message.

    Returns:
        MatchedIntent with the detected intent and extracted address.
    """
    address = extract_first_address(message)
    if address:
        if looks_like_wallet_query(message) and WALLET_KEYWORDS_PATTERN.search(
            message
        ):
            return MatchedIntent(
                intent=Intent.WALLET_SCAN, address=address, confidence=0.9
            )
        return MatchedIntent(intent=Intent.TOKEN_SCAN, address=address, confidence=0.95)

    if not message or not message.strip():
        return MatchedIntent(intent=Intent.UNKNOWN, confidence=0.0)

    if WALLET_KEYWORDS_PATTERN.search(message):
        return MatchedIntent(intent=Intent.WALLET_GUIDANCE, confidence=0.6)

    # Both remaining outcomes consult the trending classifier first.
    if looks_like_token_query(message):
        return MatchedIntent(intent=Intent.TOKEN_GUIDANCE, confidence=0.6)
    return MatchedIntent(intent=Intent.TRENDING_CANDIDATE, confidence=0.2)

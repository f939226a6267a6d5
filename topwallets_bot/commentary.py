"""Persona-driven AI commentary for token replies."""

from __future__ import annotations

import textwrap
from dataclasses import dataclass, field
from pathlib import Path
from string import Template
from typing import Dict, List, Optional

from topwallets_bot.llm import ModelTier, TextGenerator
from topwallets_bot.models import AnalysisContext, TokenSnapshot
from topwallets_bot.utils.formatting import format_magnitude, format_price
from topwallets_bot.utils.logging import get_logger

logger = get_logger(__name__)

MIN_DESCRIPTION_LENGTH = 30
NO_DESCRIPTION = "No detailed description available"

DEFAULT_COMMENTARY_PROMPT = textwrap.dedent(
    """
    # Task: As $agent_name, analyze this token data and provide insights

    About $agent_name:
    $agent_bio

    ## Token data

    Token Information:
    - Name: $token_name
    $description_section
    - Symbol: $token_symbol
    - Price: $token_price
    - Market Cap: $token_market_cap
    - Liquidity: $token_liquidity
    - Risk Score: $token_risk_score/10. 0 is the lowest it means no risk detection and 10 is the highest means the highest risk detection.
    - Is Rugged: $is_rugged

    Metrics Analysis:
    - Liquidity Level: $liquidity_status
    - Market Cap Level: $market_cap_category

    Price Action:
    $price_changes

    $kols_section

    Analyze this token considering:
    1. Overall risk assessment
    2. Market analysis (liquidity, market cap)
    3. Recent price movements
    4. Project concept and potential

    ## Examples of $agent_name answers for inspiration

    - With a $$217K market cap, $token_symbol is a speculative memecoin play for degens, approach with caution.
    - The 17.22% 24-hour gain for $token_symbol is impressive, but $$91K liquidity means potential high slippage.
    - At $$0.000218, $token_symbol looks cheap, but its gains are likely driven by hype rather than fundamentals.

    ## Instructions

    As $agent_name,
    - you MUST give your personal take on this token in ONLY two sentences and a maximum of 200 characters.
    - Use the analysis above and find the most relevant information to make your decision.
    - NEVER mention the risk score or the risk metrics directly in your answer.
    $description_task
    $kols_task
    """
).strip()


@dataclass(frozen=True)
class Persona:
    name: str
    bio: str


@dataclass
class PromptBindings:
    """Everything the commentary template can reference, before rendering."""

    agent_name: str
    agent_bio: str
    token_name: str
    token_symbol: str
    token_price: str
    token_market_cap: str
    token_liquidity: str
    token_risk_score: float
    is_rugged: bool
    has_description: bool
    token_description: str
    liquidity_status: str
    market_cap_category: str
    price_changes: List[str] = field(default_factory=list)
    has_kols: bool = False
    kol_names: List[str] = field(default_factory=list)

    def as_template_vars(self) -> Dict[str, str]:
        """Flatten to strings; conditional sections become "" when absent."""
        return {
            "agent_name": self.agent_name,
            "agent_bio": self.agent_bio,
            "token_name": self.token_name,
            "token_symbol": self.token_symbol,
            "token_price": self.token_price,
            "token_market_cap": self.token_market_cap,
            "token_liquidity": self.token_liquidity,
            "token_risk_score": f"{self.token_risk_score:g}",
            "is_rugged": "true" if self.is_rugged else "false",
            "token_description": self.token_description,
            "liquidity_status": self.liquidity_status,
            "market_cap_category": self.market_cap_category,
            "price_changes": "\n".join(self.price_changes),
            "kol_names": ", ".join(self.kol_names),
            "description_section": (
                f"- Concept: {self.token_description}" if self.has_description else ""
            ),
            "kols_section": (
                f"Notable Traders: {', '.join(self.kol_names)}" if self.has_kols else ""
            ),
            "description_task": (
                "- Tell us what you think about the project concept and if you would recommend it."
                if self.has_description
                else ""
            ),
            "kols_task": (
                "- Mention the notable traders involvement as a positive signal."
                if self.has_kols
                else ""
            ),
        }


def build_prompt_bindings(
    snapshot: TokenSnapshot, context: AnalysisContext, persona: Persona
) -> PromptBindings:
    description = (snapshot.description or "").strip()
    has_description = len(description) >= MIN_DESCRIPTION_LENGTH
    return PromptBindings(
        agent_name=persona.name,
        agent_bio=persona.bio,
        token_name=snapshot.name,
        token_symbol=snapshot.symbol,
        token_price=format_price(snapshot.price),
        token_market_cap=format_magnitude(snapshot.market_cap),
        token_liquidity=format_magnitude(snapshot.liquidity),
        token_risk_score=snapshot.risk_score,
        is_rugged=snapshot.is_rugged,
        has_description=has_description,
        token_description=description if has_description else NO_DESCRIPTION,
        liquidity_status=context.liquidity_status,
        market_cap_category=context.market_cap_category,
        price_changes=[
            f"- {move.timeframe}: {move.change:.2f}% {move.direction}"
            for move in context.significant_moves
        ],
        has_kols=context.has_kols,
        kol_names=list(context.kol_names),
    )


def render_prompt(bindings: PromptBindings, template: str = DEFAULT_COMMENTARY_PROMPT) -> str:
    """Substitute bindings into ``template``; unknown placeholders are left as-is."""
    values = bindings.as_template_vars()
    lines: List[str] = []
    for line in template.splitlines():
        rendered = Template(line).safe_substitute(values)
        # Drop lines that held only an absent conditional section.
        if line.strip() and not rendered.strip():
            continue
        lines.append(rendered.rstrip())
    return "\n".join(lines).strip()


def load_prompt_template(path: Optional[Path]) -> Optional[str]:
    """Return prompt template contents from ``path`` if provided."""
    if path is None:
        return None

    try:
        content = path.read_text(encoding="utf-8")
        return content.strip() or None
    except FileNotFoundError:
        logger.warning("prompt_template_missing", path=str(path))
    except OSError as exc:  # pragma: no cover - filesystem issues
        logger.error("prompt_template_error", path=str(path), error=str(exc))
    return None


class CommentaryAdapter:
    """Turns a snapshot into a short persona-voiced take via the large model."""

    def __init__(
        self,
        generator: TextGenerator,
        persona: Persona,
        template: Optional[str] = None,
    ) -> None:
        self.generator = generator
        self.persona = persona
        self.template = template or DEFAULT_COMMENTARY_PROMPT

    async def generate(
        self, snapshot: TokenSnapshot, context: AnalysisContext
    ) -> Optional[str]:
        prompt = render_prompt(
            build_prompt_bindings(snapshot, context, self.persona), self.template
        )
        try:
            text = await self.generator.generate(prompt, ModelTier.LARGE)
        except Exception as exc:
            logger.warning(
                "commentary_generation_failed",
                address=snapshot.address,
                error=str(exc),
            )
            return None
        text = (text or "").strip()
        return text or None


__all__ = [
    "CommentaryAdapter",
    "DEFAULT_COMMENTARY_PROMPT",
    "NO_DESCRIPTION",
    "Persona",
    "PromptBindings",
    "build_prompt_bindings",
    "load_prompt_template",
    "render_prompt",
]

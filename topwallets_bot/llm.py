"""Language-model seams: free text, yes/no classification, JSON extraction.

The rest of the package talks to the protocols below; the Gemini classes
are the production implementations and tests swap in small fakes.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Protocol, Type, TypeVar

import google.generativeai as genai
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from topwallets_bot.errors import ValidationError
from topwallets_bot.utils.json_utils import parse_llm_json
from topwallets_bot.utils.logging import get_logger

logger = get_logger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class ModelTier(Enum):
    SMALL = "small"
    LARGE = "large"


class TextGenerator(Protocol):
    async def generate(self, prompt: str, tier: ModelTier = ModelTier.LARGE) -> str: ...


class IntentClassifier(Protocol):
    async def classify(self, prompt: str) -> bool: ...


class StructuredExtractor(Protocol):
    async def extract(self, prompt: str, schema: Type[SchemaT]) -> SchemaT: ...


def parse_yes_no(text: str) -> bool:
    """``YES`` (any case, optional punctuation) is the only positive answer."""
    return (text or "").strip().strip(".!").upper().startswith("YES")


class GeminiModels:
    """Lazily built Gemini models, one per tier."""

    def __init__(
        self, api_key: str, large_model: str, small_model: str
    ) -> None:
        genai.configure(api_key=api_key)
        self._names = {ModelTier.LARGE: large_model, ModelTier.SMALL: small_model}
        self._models: dict[ModelTier, genai.GenerativeModel] = {}

    def model(self, tier: ModelTier) -> genai.GenerativeModel:
        if tier not in self._models:
            self._models[tier] = genai.GenerativeModel(model_name=self._names[tier])
        return self._models[tier]

    async def complete(
        self, prompt: str, tier: ModelTier, json_output: bool = False
    ) -> str:
        kwargs = {}
        if json_output:
            kwargs["generation_config"] = {"response_mime_type": "application/json"}
        response = await self.model(tier).generate_content_async(
            [{"role": "user", "parts": [{"text": prompt}]}], **kwargs
        )
        return response.text


class GeminiTextGenerator:
    def __init__(self, models: GeminiModels) -> None:
        self.models = models

    async def generate(self, prompt: str, tier: ModelTier = ModelTier.LARGE) -> str:
        return await self.models.complete(prompt, tier)


class GeminiIntentClassifier:
    """Asks the small model a YES/NO question."""

    def __init__(self, models: GeminiModels) -> None:
        self.models = models

    async def classify(self, prompt: str) -> bool:
        answer = await self.models.complete(prompt, ModelTier.SMALL)
        logger.debug("intent_classified", answer=answer.strip()[:20])
        return parse_yes_no(answer)


class GeminiStructuredExtractor:
    """Requests JSON from the small model and validates it against a schema."""

    def __init__(self, models: GeminiModels) -> None:
        self.models = models

    async def extract(self, prompt: str, schema: Type[SchemaT]) -> SchemaT:
        text = await self.models.complete(prompt, ModelTier.SMALL, json_output=True)
        try:
            return schema.model_validate(parse_llm_json(text))
        except (json.JSONDecodeError, PydanticValidationError) as exc:
            logger.warning(
                "structured_extraction_invalid",
                schema=schema.__name__,
                error=str(exc),
            )
            raise ValidationError(
                f"Model output does not match {schema.__name__}"
            ) from exc


__all__ = [
    "GeminiIntentClassifier",
    "GeminiModels",
    "GeminiStructuredExtractor",
    "GeminiTextGenerator",
    "IntentClassifier",
    "ModelTier",
    "StructuredExtractor",
    "TextGenerator",
    "parse_yes_no",
]

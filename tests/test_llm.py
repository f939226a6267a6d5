import json
from types import SimpleNamespace

import pytest

from topwallets_bot.errors import ValidationError
from topwallets_bot.llm import (
    GeminiIntentClassifier,
    GeminiStructuredExtractor,
    GeminiTextGenerator,
    ModelTier,
    parse_yes_no,
)
from topwallets_bot.models import TrendingParams
from topwallets_bot.utils.json_utils import parse_llm_json


class FakeModels:
    """Stands in for GeminiModels.complete."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.calls = []

    async def complete(self, prompt, tier, json_output=False):
        self.calls.append(SimpleNamespace(prompt=prompt, tier=tier, json_output=json_output))
        return self.text


def test_parse_yes_no():
    assert parse_yes_no("YES")
    assert parse_yes_no(" yes.\n")
    assert parse_yes_no("Yes, show them")
    assert not parse_yes_no("NO")
    assert not parse_yes_no("")
    assert not parse_yes_no("maybe")


def test_parse_llm_json_variants():
    assert parse_llm_json('{"count": 3}') == {"count": 3}
    assert parse_llm_json('```json\n{"count": 3}\n```') == {"count": 3}
    assert parse_llm_json('```\n{"count": 3}\n```') == {"count": 3}
    assert parse_llm_json('Sure! {"timeframe": "1h"} hope that helps') == {"timeframe": "1h"}


def test_parse_llm_json_single_quoted_keys():
    assert parse_llm_json("{'count': 4, 'timeframe': \"6h\"}") == {"count": 4, "timeframe": "6h"}


def test_parse_llm_json_failures():
    with pytest.raises(json.JSONDecodeError):
        parse_llm_json("")
    with pytest.raises(json.JSONDecodeError):
        parse_llm_json("no json here")
    with pytest.raises(json.JSONDecodeError):
        parse_llm_json("[1, 2, 3]")


@pytest.mark.asyncio
async def test_classifier_uses_small_model():
    models = FakeModels("YES")
    classifier = GeminiIntentClassifier(models)

    assert await classifier.classify("is this trending?")
    assert models.calls[0].tier is ModelTier.SMALL
    assert not models.calls[0].json_output


@pytest.mark.asyncio
async def test_text_generator_passes_tier():
    models = FakeModels("Nice token.")
    generator = GeminiTextGenerator(models)

    assert await generator.generate("prompt") == "Nice token."
    assert models.calls[0].tier is ModelTier.LARGE


@pytest.mark.asyncio
async def test_extractor_validates_schema():
    models = FakeModels('```json\n{"timeframe": "6h", "count": 10}\n```')
    extractor = GeminiStructuredExtractor(models)

    params = await extractor.extract("extract", TrendingParams)

    assert (params.timeframe, params.count) == ("6h", 10)
    assert models.calls[0].json_output
    assert models.calls[0].tier is ModelTier.SMALL


@pytest.mark.asyncio
async def test_extractor_applies_schema_defaults():
    extractor = GeminiStructuredExtractor(FakeModels("{}"))

    params = await extractor.extract("extract", TrendingParams)

    assert (params.timeframe, params.count) == ("24h", 5)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "text",
    [
        '{"timeframe": "1m", "count": 5}',
        '{"timeframe": "1h", "count": 50}',
        "not json at all",
    ],
)
async def test_extractor_rejects_invalid_output(text):
    extractor = GeminiStructuredExtractor(FakeModels(text))

    with pytest.raises(ValidationError):
        await extractor.extract("extract", TrendingParams)

"""JSON parsing utilities for LLM responses."""

import json
import re
from typing import Any, Dict

CODE_FENCE_PATTERN = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")
SINGLE_QUOTED_KEY_PATTERN = re.compile(r"'(\w+)'(\s*:)")


def parse_llm_json(text: str) -> Dict[str, Any]:
    """
    Parse a JSON object out of a model response.

    Accepts bare JSON, JSON wrapped in a markdown code fence, JSON surrounded
    by prose, and objects whose keys were single-quoted.

    Raises:
        json.JSONDecodeError: If no JSON object can be recovered.
    """
    if not text or not text.strip():
        raise json.JSONDecodeError("Empty LLM response", text or "", 0)

    cleaned = CODE_FENCE_PATTERN.sub("", text.strip()).strip()
    candidates = [cleaned]

    start, end = cleaned.find("{"), cleaned.rfind("}")
    if 0 <= start < end:
        candidates.append(cleaned[start : end + 1])

    last_error: json.JSONDecodeError | None = None
    for candidate in candidates:
        for variant in (candidate, SINGLE_QUOTED_KEY_PATTERN.sub(r'"\1"\2', candidate)):
            try:
                parsed = json.loads(variant)
            except json.JSONDecodeError as exc:
                last_error = exc
                continue
            if isinstance(parsed, dict):
                return parsed

    preview = cleaned[:100] + "..." if len(cleaned) > 100 else cleaned
    raise json.JSONDecodeError(
        f"Failed to parse LLM JSON. Preview: {preview}",
        cleaned,
        last_error.pos if last_error else 0,
    )


__all__ = ["parse_llm_json"]

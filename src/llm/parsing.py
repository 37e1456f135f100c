"""Helpers for pulling JSON out of free-form model replies"""

import json
import re
from typing import Any

from src.errors import ResponseParseError

# Greedy: from the first "{" to the last "}" so nested objects stay intact
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def extract_json_object(text: str) -> dict[str, Any]:
    """
    Parse the first JSON-object-shaped substring of a model reply.

    Raises:
        ResponseParseError: No object is present or it is not valid JSON
    """
    match = _JSON_OBJECT.search(text or "")
    if not match:
        raise ResponseParseError(f"No JSON object found in response: {(text or '')[:200]}")

    try:
        data = json.loads(match.group())
    except json.JSONDecodeError as e:
        raise ResponseParseError(f"Could not parse JSON from response: {e}") from e

    if not isinstance(data, dict):
        raise ResponseParseError("Response JSON is not an object")
    return data

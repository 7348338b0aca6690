import json
from typing import Any, Dict

from .errors import MalformedResponseError


def extract_json_payload(text: str) -> str | None:
    """Return the substring from the first '{' to the last '}' inclusive."""
    if not text:
        return None

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        return None
    return text[start : end + 1]


def parse_json_response(response_text: str) -> Dict[str, Any]:
    """Extract and decode the JSON object embedded in a model response.

    Raises:
        MalformedResponseError: No braces, invalid JSON, or a non-object payload.
    """
    if not response_text or not response_text.strip():
        raise MalformedResponseError("Empty response from model")

    payload = extract_json_payload(response_text)
    if payload is None:
        raise MalformedResponseError("Could not parse audit result as JSON")

    try:
        data = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise MalformedResponseError(f"Could not parse audit result as JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise MalformedResponseError("Audit result JSON must be an object")

    return data

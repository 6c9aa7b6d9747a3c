"""Helpers for pulling structured data out of free-form model text."""
import json
import re
from typing import List, Optional

_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    """Remove markdown code-fence markers such as ```json and ```."""
    return _FENCE.sub("", text).strip()


def extract_json_array(text: Optional[str]) -> Optional[List[str]]:
    """
    Parse a JSON array of strings out of model text.

    The text may be wrapped in code fences or surrounded by prose; in the
    latter case the span from the first ``[`` to the last ``]`` is tried.
    Items are trimmed and non-string or empty items are dropped.

    Returns:
        The list of strings, or None when no JSON array could be parsed.
    """
    if not text:
        return None

    cleaned = strip_code_fences(text)
    candidates = [cleaned]
    start, end = cleaned.find("["), cleaned.rfind("]")
    if 0 <= start < end and (start, end) != (0, len(cleaned) - 1):
        candidates.append(cleaned[start:end + 1])

    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except ValueError:
            continue
        if isinstance(parsed, list):
            return [item.strip() for item in parsed if isinstance(item, str) and item.strip()]
    return None

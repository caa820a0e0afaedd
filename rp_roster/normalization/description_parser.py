import re
from typing import Dict, Mapping, Optional

KEY_VALUE_SEPARATOR = ":"
CONTINUATION_JOINER = ", "

# Emphasis markers members wrap keys in, e.g. "**IGN**: foo" or "__Rank__: bar"
EMPHASIS_MARKERS = re.compile(r"^[*_]+|[*_]+$")


def normalize_description(text: Optional[str]) -> Optional[str]:
    """Returns None for missing or whitespace-only descriptions, the text otherwise."""
    if text is None or not text.strip():
        return None
    return text


def _clean_key(raw_key: str) -> str:
    return EMPHASIS_MARKERS.sub("", raw_key.strip()).strip()


def parse_description(text: Optional[str]) -> Optional[Dict[str, str]]:
    """Parses a free-text card description into a key -> value mapping.

    Each ``key: value`` line starts a new key (split at the first colon).
    Lines without a colon continue the most recent key and are appended to
    its value with ", ". Blank lines are skipped, as are continuation lines
    that appear before any key.

    Returns None when the description is absent or yields no entries.
    """
    text = normalize_description(text)
    if text is None:
        return None

    properties: Dict[str, str] = {}
    current_key: Optional[str] = None

    for line in text.splitlines():
        if not line.strip():
            continue

        if KEY_VALUE_SEPARATOR in line:
            raw_key, raw_value = line.split(KEY_VALUE_SEPARATOR, 1)
            current_key = _clean_key(raw_key)
            value = raw_value.strip()
            if value:
                properties[current_key] = value
        elif current_key is not None:
            continuation = line.strip()
            existing = properties.get(current_key)
            properties[current_key] = (
                f"{existing}{CONTINUATION_JOINER}{continuation}"
                if existing
                else continuation
            )

    return properties or None


def serialize_description(properties: Mapping[str, str]) -> str:
    """Rebuilds ``key: value`` lines from a parsed mapping."""
    return "\n".join(
        f"{key}{KEY_VALUE_SEPARATOR} {value}" for key, value in properties.items()
    )

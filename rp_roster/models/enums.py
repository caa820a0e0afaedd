from enum import Enum


class TokenSource(str, Enum):
    """Where a card's identity token may be read from."""

    STRUCTURED_FIELD = "structuredField"
    DESCRIPTION = "description"

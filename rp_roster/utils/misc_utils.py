# rp_roster/utils/misc_utils.py
from typing import Iterable, List

CACHE_KEY_PREFIX = "cardData_"


def cache_key_for_board(board_id: str) -> str:
    """Cache key under which a board's merged roster is stored."""
    return f"{CACHE_KEY_PREFIX}{board_id}"


def unique_in_order(values: Iterable[str]) -> List[str]:
    """Drops repeated values, keeping the first occurrence of each."""
    return list(dict.fromkeys(values))

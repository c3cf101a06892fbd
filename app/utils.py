import math
from collections.abc import Iterable

WORDS_PER_MINUTE = 200


def normalize_tags(tags: str | Iterable[str] | None) -> list[str]:
    """Split, trim and filter tags.

    A string is treated as a comma separated list. Empty entries are dropped,
    order and duplicates are preserved.
    """
    if tags is None:
        return []
    if isinstance(tags, str):
        tags = tags.split(",")
    stripped = (str(tag).strip() for tag in tags if tag is not None)
    return [tag for tag in stripped if tag]


def compute_read_time(content: str) -> int:
    return math.ceil(len(content.split()) / WORDS_PER_MINUTE)

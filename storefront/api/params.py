"""Query-string folding.

Turns flat query-string pairs into the nested parameter bag the query
builder reads:

    color=Red&color=Blue      → {"color": ["Red", "Blue"]}
    color[]=Red               → {"color": ["Red"]}
    sortBy[value]=price_desc  → {"sortBy": {"value": "price_desc"}}
    sortBy.value=price_desc   → {"sortBy": {"value": "price_desc"}}
    price[minPrice]=10        → {"price": {"minPrice": "10"}}

Keys that collide with a different shape (``price=10&price[minPrice]=5``)
keep the first shape seen; the conflicting pair is ignored.
"""

import re
from collections.abc import Iterable
from typing import Any

MAX_DEPTH = 5

_BRACKETS = re.compile(r"\[([^\[\]]*)\]")


def split_key(key: str) -> tuple[list[str], bool]:
    """Split a query-string key into its path.

    Args:
        key: Raw key, e.g. ``price[minPrice]``, ``sortBy.value`` or ``color[]``.

    Returns:
        Tuple of (path segments, whether the key ends with ``[]``).
    """
    head, _, rest = key.partition("[")
    path = [p for p in head.split(".") if p]
    is_list = False
    if rest:
        segments = _BRACKETS.findall("[" + rest)
        if segments and segments[-1] == "":
            is_list = True
            segments = segments[:-1]
        path.extend(s for s in segments if s)
    return path[:MAX_DEPTH], is_list


def _append(container: dict[str, Any], key: str, value: str, force_list: bool) -> None:
    current = container.get(key)
    if current is None:
        container[key] = [value] if force_list else value
    elif isinstance(current, list):
        current.append(value)
    elif isinstance(current, str):
        container[key] = [current, value]


def fold_query_params(pairs: Iterable[tuple[str, str]]) -> dict[str, Any]:
    """Fold query-string pairs into a nested parameter bag.

    Args:
        pairs: Key/value pairs in request order (e.g. ``query_params.multi_items()``).

    Returns:
        Nested dict of strings, lists of strings and dicts.
    """
    bag: dict[str, Any] = {}
    for key, value in pairs:
        path, is_list = split_key(key)
        if not path:
            continue

        container: Any = bag
        for segment in path[:-1]:
            child = container.get(segment)
            if child is None:
                child = container[segment] = {}
            if not isinstance(child, dict):
                container = None
                break
            container = child

        if container is None or isinstance(container.get(path[-1]), dict):
            continue
        _append(container, path[-1], value, is_list)
    return bag

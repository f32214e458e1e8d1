"""Request input sanitising.

Strings anywhere in a request payload are trimmed and inline
``<script>...</script>`` blocks are removed.  Containers are copied, never
mutated in place, so the original request data stays untouched.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

SCRIPT_TAG_PATTERN = re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL)


def sanitize_value(value: Any) -> Any:
    if isinstance(value, str):
        return SCRIPT_TAG_PATTERN.sub("", value.strip())
    if isinstance(value, Mapping):
        return {key: sanitize_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [sanitize_value(item) for item in value]
    return value


def sanitize_query(query: Mapping[str, Any]) -> dict[str, Any]:
    """Flatten a ``QueryDict`` to its last value per key, sanitised."""
    return {key: sanitize_value(query.get(key)) for key in query.keys()}

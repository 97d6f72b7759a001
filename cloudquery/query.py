"""
Canonical query string encoding.

The service verifies signatures against the exact bytes of the query string,
so encoding is deterministic: parameters keep the mapping's iteration order
and every byte outside ``[A-Za-z0-9-._]`` is percent-encoded with uppercase
hex.
"""

from typing import Any, Mapping
from urllib.parse import quote


def escape(value: Any) -> str:
    """Percent-encode a single key, value or path segment."""
    if isinstance(value, bool):
        value = 'true' if value else 'false'
    # quote() treats "~" as unreserved; the service does not.
    return quote(str(value), safe='').replace('~', '%7E')


def encode_query(params: Mapping[str, Any]) -> str:
    """
    Encode a mapping as ``k1=v1&k2=v2``.

    List and tuple values emit one pair per element; ``None`` emits the
    bare key.

    Args:
        params: Parameters in the order they must appear

    Returns:
        Query string without leading ``?`` (empty for no params)
    """
    pairs = []
    for key, value in params.items():
        if isinstance(value, (list, tuple)):
            pairs.extend(f"{escape(key)}={escape(item)}" for item in value)
        elif value is None:
            pairs.append(escape(key))
        else:
            pairs.append(f"{escape(key)}={escape(value)}")
    return '&'.join(pairs)

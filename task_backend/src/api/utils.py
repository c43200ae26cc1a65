from __future__ import annotations

from collections.abc import Iterator
from typing import Any, Dict


# PUBLIC_INTERFACE
def data_envelope(data: Any) -> Dict[str, Any]:
    """
    Build the standard success envelope used by every task endpoint.

    Args:
        data: A single entity, a list of entities, or an iterator of entities.

    Returns:
        Dict with a single key: data.
    """
    # Materialize generators so the payload can be serialized more than once
    if isinstance(data, Iterator):
        return {"data": list(data)}
    return {"data": data}

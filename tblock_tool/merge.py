"""Override merge of the managed snippet into an existing configuration."""
from __future__ import annotations

import copy
from typing import Dict, Mapping, Optional


def merge(base: Optional[Mapping], overlay: Mapping) -> Optional[Dict]:
    """Merge *overlay* over *base* and return a new mapping.

    Keys from *overlay* win. Nested mappings are merged key by key, lists
    and scalars are replaced as a whole, so ``BypassIPS`` always ends up
    equal to the snippet's list. Keys that exist only in *base* are kept
    in their original order. Neither argument is modified.

    An empty *base* produces ``None``: there is no configuration to merge
    into, and the validator rejects the empty result.
    """

    if not base:
        return None
    result = copy.deepcopy(dict(base))
    for key, value in overlay.items():
        current = result.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            result[key] = merge(current, value) if current else copy.deepcopy(dict(value))
        else:
            result[key] = copy.deepcopy(value)
    return result


__all__ = ["merge"]

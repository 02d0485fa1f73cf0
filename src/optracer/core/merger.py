"""Layered property merging."""

from typing import Dict, Iterable, Mapping, Optional, TypeVar

V = TypeVar("V")


def merge_properties(layers: Iterable[Optional[Mapping[str, V]]]) -> Dict[str, V]:
    """Merge property layers into a new dictionary.

    Layers are applied in order, so when a key appears in several layers the
    value from the latest layer wins. ``None`` and empty layers contribute
    nothing. The input mappings are never modified.

    Args:
        layers: Ordered property layers, lowest precedence first

    Returns:
        A new dictionary with the union of all keys

    Example:
        >>> merge_properties([{"env": "dev", "a": "1"}, None, {"env": "prod"}])
        {'env': 'prod', 'a': '1'}
    """
    merged: Dict[str, V] = {}
    for layer in layers:
        if layer:
            merged.update(layer)
    return merged

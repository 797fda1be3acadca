"""
Layer name registry for sequential models.

Names are derived from the layer list alone, with no global counters: an
unnamed layer at position `i` (the `Input` layer is position 0) is called
`"{KIND_TAG}_{i}"`. Duplicates are reported for the first repeated name
found while scanning in order.

The functions here never mutate layers; callers commit the returned names
once validation has succeeded.
"""

from __future__ import annotations

from typing import List, Sequence

from ...domain._errors import DuplicateLayerNameError


def generated_name(layer, index: int) -> str:
    return f"{layer.KIND_TAG}_{index}"


def assign_names(layers: Sequence) -> List[str]:
    """
    Resolve the final name of every layer.

    Parameters
    ----------
    layers : Sequence[Layer]
        Full layer sequence, including the input layer.

    Returns
    -------
    list[str]
        Explicit names where given, generated names elsewhere.
    """
    return [layer.name or generated_name(layer, i) for i, layer in enumerate(layers)]


def validate_unique(names: Sequence[str]) -> None:
    """
    Raises
    ------
    DuplicateLayerNameError
        For the first name that already appeared earlier in `names`.
    """
    seen = set()
    for name in names:
        if name in seen:
            raise DuplicateLayerNameError(name)
        seen.add(name)


def resolve_names(layers: Sequence) -> List[str]:
    """
    Assign and validate names for `layers` without mutating them.
    """
    names = assign_names(layers)
    validate_unique(names)
    return names

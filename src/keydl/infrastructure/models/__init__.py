"""
Model containers.
"""

from ._naming import assign_names, resolve_names, validate_unique
from ._sequential import ModelState, Sequential

__all__ = [
    Sequential.__name__,
    ModelState.__name__,
    assign_names.__name__,
    validate_unique.__name__,
    resolve_names.__name__,
]

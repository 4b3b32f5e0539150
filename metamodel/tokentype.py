"""TokenType vectors.

A TokenType vector is a fixed-length integer vector aligned to the object
registry: index ``i`` holds the quantity for object ``i``. This is the only
place such vectors are constructed, so places and arrows always agree on
the indexing scheme.
"""

from __future__ import annotations

from typing import Sequence, Tuple


def build_vector(value: int, dimension: str, objects: Sequence[str]) -> Tuple[int, ...]:
    """Place ``value`` at the index of ``dimension`` in a zero vector sized to ``objects``.

    The vector has ``max(1, len(objects))`` entries. With an empty dimension,
    or at most one object, the value lands at index 0. Otherwise the first
    object whose label equals ``dimension`` selects the index; an unknown
    dimension falls back to index 0.
    """
    size = max(1, len(objects))
    index = 0
    if dimension and len(objects) > 1:
        for i, label in enumerate(objects):
            if label == dimension:
                index = i
                break
    vector = [0] * size
    vector[index] = value
    return tuple(vector)


def zero_vector(objects: Sequence[str]) -> Tuple[int, ...]:
    """Return the all-zero vector for the current object count (empty when there are no objects)."""
    return tuple(0 for _ in objects)

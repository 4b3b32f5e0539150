"""Model: the builder and query surface over the four registries.

A model is populated once through ``add_objects``, ``add_place``,
``add_transition`` and ``add_arrow`` and queried afterwards. Objects should
be registered first because vector lengths follow the object count at the
time of each call; arrows come last because their endpoints must exist.

The model is a static schema. Nothing here fires transitions or evolves a
marking.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

from metamodel import identity
from metamodel.registry import (
    Arrow,
    ArrowStore,
    ObjectRegistry,
    Place,
    PlaceStore,
    Transition,
    TransitionStore,
)
from metamodel.tokentype import build_vector, zero_vector


class Model:
    """A Petri-net-shaped schema with a content-addressable identity."""

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._objects = ObjectRegistry()
        self._places = PlaceStore(self._objects)
        self._transitions = TransitionStore()
        self._arrows = ArrowStore(self._objects, self._places, self._transitions)

    # -- builder surface ---------------------------------------------------

    def add_objects(self, labels: Sequence[str]) -> None:
        self._objects.add(labels)

    def add_place(
        self,
        label: str,
        initial: Optional[Sequence[int]] = None,
        capacity: Optional[Sequence[int]] = None,
        x: int = 0,
        y: int = 0,
        binding: bytes = b"",
    ) -> int:
        """Register a place and return its offset.

        Omitted ``initial``/``capacity`` vectors default to zeros sized to
        the current object count.
        """
        if initial is None:
            initial = zero_vector(self._objects.labels)
        if capacity is None:
            capacity = zero_vector(self._objects.labels)
        return self._places.add(label, initial, capacity, x, y, binding)

    def add_transition(self, label: str, x: int = 0, y: int = 0, rate: int = 1, binding: bytes = b"") -> int:
        return self._transitions.add(label, x, y, rate, binding)

    def add_arrow(
        self,
        source: str,
        target: str,
        weight: int = 1,
        dimension: str = "",
        inhibit: bool = False,
        binding: bytes = b"",
    ) -> None:
        self._arrows.add(source, target, weight, dimension, inhibit, binding)

    def token_type(self, value: int, dimension: str = "") -> Tuple[int, ...]:
        """Build a vector aligned to the current objects (see tokentype.build_vector)."""
        return build_vector(value, dimension, self._objects.labels)

    # -- query surface -----------------------------------------------------

    @property
    def objects(self) -> Tuple[str, ...]:
        return self._objects.labels

    @property
    def places(self) -> Tuple[Place, ...]:
        return self._places.items

    @property
    def transitions(self) -> Tuple[Transition, ...]:
        return self._transitions.items

    @property
    def arrows(self) -> Tuple[Arrow, ...]:
        return self._arrows.items

    def place(self, label: str) -> Optional[Place]:
        return self._places.get(label)

    def transition(self, label: str) -> Optional[Transition]:
        return self._transitions.get(label)

    def leaves(self) -> List[str]:
        return identity.collect_leaves(self)

    def identity_hash(self) -> bytes:
        return identity.identity_hash(self)

    def identifier(self) -> str:
        return identity.identifier(self)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready snapshot of the model, including its identity."""
        digest = self.identity_hash()
        return {
            "name": self.name,
            "objects": list(self.objects),
            "places": [p.to_dict() for p in self.places],
            "transitions": [t.to_dict() for t in self.transitions],
            "arrows": [a.to_dict() for a in self.arrows],
            "identity": {
                "hash": digest.hex(),
                "identifier": identity.encode_identifier(digest),
            },
        }

    def __repr__(self) -> str:
        return (
            f"Model(name={self.name!r}, objects={len(self._objects)}, places={len(self._places)}, "
            f"transitions={len(self._transitions)}, arrows={len(self._arrows)})"
        )

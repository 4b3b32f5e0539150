"""Append-only registries for objects, places, transitions and arrows.

Each labeled registry is an ordered sequence paired with a map from label to
sequence index: existence checks are O(1) while insertion order, which
assigns every node its offset, stays deterministic.

Invariants:
- entries are never removed or mutated once appended
- every ``add`` validates fully before appending, so a rejected call leaves
  the registry unchanged
- place and transition labels live in separate namespaces; arrow endpoints
  may resolve in either one
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Generic, Iterator, List, Optional, Sequence, Tuple, TypeVar

from metamodel.errors import DuplicateLabel, InvalidObjectName, UnknownEndpoint, VectorLengthMismatch
from metamodel.observability import ModelLayer, ModelLogger
from metamodel.tokentype import build_vector

OBJECT_SIGIL = "$"

_log = ModelLogger(__name__, ModelLayer.REGISTRY)


@dataclass(frozen=True)
class Place:
    """A node holding per-object quantities."""
    label: str
    offset: int
    initial: Tuple[int, ...]
    capacity: Tuple[int, ...]  # 0 = unbounded
    x: int = 0
    y: int = 0
    binding: bytes = b""

    def to_dict(self) -> Dict[str, object]:
        return {
            "label": self.label,
            "offset": self.offset,
            "initial": list(self.initial),
            "capacity": list(self.capacity),
            "x": self.x,
            "y": self.y,
            "binding": self.binding.hex(),
        }


@dataclass(frozen=True)
class Transition:
    """A node representing an action."""
    label: str
    offset: int
    x: int = 0
    y: int = 0
    rate: int = 1
    binding: bytes = b""

    def to_dict(self) -> Dict[str, object]:
        return {
            "label": self.label,
            "offset": self.offset,
            "x": self.x,
            "y": self.y,
            "rate": self.rate,
            "binding": self.binding.hex(),
        }


@dataclass(frozen=True)
class Arrow:
    """A directed edge between two nodes; ``inhibit`` marks a guard rather than a flow."""
    source: str
    target: str
    weight: Tuple[int, ...]
    inhibit: bool = False
    binding: bytes = b""

    def to_dict(self) -> Dict[str, object]:
        return {
            "source": self.source,
            "target": self.target,
            "weight": list(self.weight),
            "inhibit": self.inhibit,
            "binding": self.binding.hex(),
        }


class ObjectRegistry:
    """Ordered list of object labels that index every TokenType vector.

    Duplicate labels are accepted; vector lookups resolve to the first occurrence.
    """

    def __init__(self) -> None:
        self._labels: List[str] = []
        self._index: Dict[str, int] = {}

    def add(self, names: Sequence[str]) -> None:
        if isinstance(names, (str, bytes)):
            raise TypeError(f"expected a sequence of object labels, got {type(names).__name__} {names!r}")
        names = list(names)
        for name in names:
            if not isinstance(name, str) or not name.startswith(OBJECT_SIGIL):
                _log.debug("object rejected", operation="add_objects", error_code=InvalidObjectName.code, label=name)
                raise InvalidObjectName("object.label", f"must begin with {OBJECT_SIGIL!r}", name)
        for name in names:
            self._index.setdefault(name, len(self._labels))
            self._labels.append(name)
        _log.debug("objects added", operation="add_objects", labels=names, count=len(self._labels))

    @property
    def labels(self) -> Tuple[str, ...]:
        return tuple(self._labels)

    def __contains__(self, label: object) -> bool:
        return label in self._index

    def __len__(self) -> int:
        return len(self._labels)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._labels))


N = TypeVar("N", Place, Transition)


class _LabeledStore(Generic[N]):
    """Sequence of nodes plus a label -> offset existence index."""

    kind = "node"

    def __init__(self) -> None:
        self._items: List[N] = []
        self._index: Dict[str, int] = {}

    def _require_new(self, label: str) -> None:
        if label in self._index:
            _log.debug(f"{self.kind} rejected", operation=f"add_{self.kind}",
                       error_code=DuplicateLabel.code, label=label)
            raise DuplicateLabel(f"{self.kind}.label", f"{label!r} already exists", label)

    def _append(self, item: N) -> int:
        self._index[item.label] = item.offset
        self._items.append(item)
        _log.debug(f"{self.kind} added", operation=f"add_{self.kind}", label=item.label, offset=item.offset)
        return item.offset

    def get(self, label: str) -> Optional[N]:
        offset = self._index.get(label)
        return None if offset is None else self._items[offset]

    @property
    def items(self) -> Tuple[N, ...]:
        return tuple(self._items)

    @property
    def labels(self) -> Tuple[str, ...]:
        return tuple(item.label for item in self._items)

    def __contains__(self, label: object) -> bool:
        return label in self._index

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[N]:
        return iter(list(self._items))


class PlaceStore(_LabeledStore[Place]):
    kind = "place"

    def __init__(self, objects: ObjectRegistry) -> None:
        super().__init__()
        self._objects = objects

    def add(
        self,
        label: str,
        initial: Sequence[int],
        capacity: Sequence[int],
        x: int = 0,
        y: int = 0,
        binding: bytes = b"",
    ) -> int:
        """Append a place and return its offset."""
        self._require_new(label)
        initial = tuple(initial)
        capacity = tuple(capacity)
        count = len(self._objects)
        if count:
            for name, vector in (("initial", initial), ("capacity", capacity)):
                if len(vector) != count:
                    _log.debug("place rejected", operation="add_place",
                               error_code=VectorLengthMismatch.code, label=label, vector=name)
                    raise VectorLengthMismatch(
                        f"place.{name}",
                        f"length {len(vector)} does not match object count {count}",
                        list(vector),
                    )
        return self._append(Place(
            label=label,
            offset=len(self._items),
            initial=initial,
            capacity=capacity,
            x=x,
            y=y,
            binding=bytes(binding),
        ))


class TransitionStore(_LabeledStore[Transition]):
    kind = "transition"

    def add(self, label: str, x: int = 0, y: int = 0, rate: int = 1, binding: bytes = b"") -> int:
        """Append a transition and return its offset."""
        self._require_new(label)
        return self._append(Transition(
            label=label,
            offset=len(self._items),
            x=x,
            y=y,
            rate=rate,
            binding=bytes(binding),
        ))


class ArrowStore:
    """Arrows in insertion order. Parallel and duplicate edges are permitted."""

    def __init__(self, objects: ObjectRegistry, places: PlaceStore, transitions: TransitionStore) -> None:
        self._objects = objects
        self._places = places
        self._transitions = transitions
        self._items: List[Arrow] = []

    def resolves(self, label: str) -> bool:
        return label in self._places or label in self._transitions

    def add(
        self,
        source: str,
        target: str,
        weight: int = 1,
        dimension: str = "",
        inhibit: bool = False,
        binding: bytes = b"",
    ) -> None:
        for end, label in (("source", source), ("target", target)):
            if not self.resolves(label):
                _log.debug("arrow rejected", operation="add_arrow",
                           error_code=UnknownEndpoint.code, endpoint=end, label=label)
                raise UnknownEndpoint(f"arrow.{end}", f"{label!r} is not a place or transition", label)
        arrow = Arrow(
            source=source,
            target=target,
            weight=build_vector(weight, dimension, self._objects.labels),
            inhibit=bool(inhibit),
            binding=bytes(binding),
        )
        self._items.append(arrow)
        _log.debug("arrow added", operation="add_arrow", source=source, target=target,
                   inhibit=arrow.inhibit, index=len(self._items) - 1)

    @property
    def items(self) -> Tuple[Arrow, ...]:
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Arrow]:
        return iter(list(self._items))

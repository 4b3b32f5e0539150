"""Model definition documents.

A definition is a YAML or JSON document listing objects, places,
transitions and arrows. It is validated against
``schemas/model-definition.schema.json`` and then replayed through the
model's builder surface, section by section, in document order:

    objects: ["$allow", "$token"]
    places:
      - {label: "$owner", initial: [0, 1100], x: 100, y: 100}
      - {label: "$recipient"}
    transitions:
      - {label: transfer}
    arrows:
      - {source: "$owner", target: transfer, weight: 10, object: "$token"}
      - {source: transfer, target: "$recipient", weight: 10, object: "$token"}

Arrow order in the document is arrow insertion order, and therefore part of
the model identity.
"""

from __future__ import annotations

import json
import pathlib
from functools import lru_cache
from typing import Any, Dict, List

import yaml
from jsonschema import Draft202012Validator

from metamodel.core import SCHEMA_DIR, hex_to_bytes, load_document, load_json
from metamodel.errors import DefinitionError
from metamodel.identity import arrow_edge
from metamodel.model import Model
from metamodel.observability import ModelLayer, ModelLogger

DEFINITION_SCHEMA = SCHEMA_DIR / "model-definition.schema.json"

_log = ModelLogger(__name__, ModelLayer.DEFINITION)


@lru_cache(maxsize=1)
def definition_validator() -> Draft202012Validator:
    """Validator for model definition documents. Cached for performance."""
    return Draft202012Validator(load_json(DEFINITION_SCHEMA))


def validate_definition(obj: Any) -> List[str]:
    """Validate a definition, returning error messages (empty if valid)."""
    errors = sorted(definition_validator().iter_errors(obj), key=lambda e: list(e.path))
    return [f"{error.json_path}: {error.message}" for error in errors]


def load_definition(path: pathlib.Path) -> Dict[str, Any]:
    """Read and validate a definition document."""
    p = pathlib.Path(path)
    try:
        obj = load_document(p)
    except OSError as e:
        raise DefinitionError("path", f"cannot read {p}: {e}", str(p)) from e
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise DefinitionError("path", f"cannot parse {p}: {e}", str(p)) from e
    if obj is None:
        obj = {}
    errs = validate_definition(obj)
    if errs:
        raise DefinitionError("definition", f"invalid model definition: {p}: {errs[0]}", str(p))
    return obj


def build_model(definition: Dict[str, Any]) -> Model:
    """Replay a definition through the builder surface.

    Builder errors (InvalidObjectName, DuplicateLabel, ...) propagate as-is.
    """
    errs = validate_definition(definition)
    if errs:
        raise DefinitionError("definition", f"invalid model definition: {errs[0]}")

    model = Model(str(definition.get("name") or ""))
    model.add_objects(definition.get("objects") or [])

    for p in definition.get("places") or []:
        model.add_place(
            p["label"],
            p.get("initial"),
            p.get("capacity"),
            int(p.get("x", 0)),
            int(p.get("y", 0)),
            hex_to_bytes(p.get("binding", "")),
        )

    for t in definition.get("transitions") or []:
        model.add_transition(
            t["label"],
            int(t.get("x", 0)),
            int(t.get("y", 0)),
            int(t.get("rate", 1)),
            hex_to_bytes(t.get("binding", "")),
        )

    for a in definition.get("arrows") or []:
        model.add_arrow(
            a["source"],
            a["target"],
            int(a.get("weight", 1)),
            str(a.get("object") or ""),
            bool(a.get("inhibit", False)),
            hex_to_bytes(a.get("binding", "")),
        )

    _log.debug("model built from definition", operation="build_model", model=repr(model))
    return model


def load_model(path: pathlib.Path) -> Model:
    return build_model(load_definition(path))


def model_to_definition(model: Model) -> Dict[str, Any]:
    """Render a model as a definition document that rebuilds an identical model.

    Arrow weight vectors carry their value at a single index, so each one
    maps back to a (weight, object) pair.

    A document replays objects before any place or arrow. A model that
    registered objects after some of its places or arrows holds vectors
    sized to an earlier object count, which no document can reproduce;
    such a model raises DefinitionError.
    """
    objects = list(model.objects)
    width = max(1, len(objects))

    for p in model.places:
        if objects and (len(p.initial) != len(objects) or len(p.capacity) != len(objects)):
            raise DefinitionError(
                "place", f"{p.label!r} predates the current object registry", p.label
            )
    for a in model.arrows:
        if len(a.weight) != width:
            raise DefinitionError(
                "arrow", f"{arrow_edge(a.source, a.target, a.inhibit)!r} predates the current object registry",
                a.source,
            )

    def _arrow(a: Any) -> Dict[str, Any]:
        index = next((i for i, v in enumerate(a.weight) if v), 0)
        out: Dict[str, Any] = {
            "source": a.source,
            "target": a.target,
            "weight": a.weight[index],
        }
        if len(objects) > 1:
            out["object"] = objects[index]
        if a.inhibit:
            out["inhibit"] = True
        if a.binding:
            out["binding"] = a.binding.hex()
        return out

    def _node(d: Dict[str, Any]) -> Dict[str, Any]:
        d = dict(d)
        d.pop("offset", None)
        if not d.get("binding"):
            d.pop("binding", None)
        return d

    definition: Dict[str, Any] = {
        "objects": objects,
        "places": [_node(p.to_dict()) for p in model.places],
        "transitions": [_node(t.to_dict()) for t in model.transitions],
        "arrows": [_arrow(a) for a in model.arrows],
    }
    if model.name:
        definition["name"] = model.name
    return definition

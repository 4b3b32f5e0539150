"""Petri Metamodel v0.1.0

Typed Petri-net-shaped model schemas with deterministic content identifiers.

Architecture:
    metamodel/
    ├── __init__.py       # Package entry, version, public API
    ├── core.py           # Primitives: sha256, canonical JSON, YAML/JSON loading
    ├── errors.py         # Error taxonomy
    ├── tokentype.py      # TokenType vectors aligned to the object registry
    ├── registry.py       # Append-only object/place/transition/arrow registries
    ├── model.py          # Builder and query surface
    ├── identity.py       # Canonical leaves, Merkle root, content identifier
    ├── token_model.py    # Fixed token model and the token-side view
    ├── definition.py     # YAML/JSON model definitions (JSON Schema validated)
    ├── config.py         # Configuration (env + YAML)
    ├── observability.py  # Structured logging
    └── cli.py            # Command-line interface

Two models built from the same objects, places, transitions and arrow
sequence share an identifier regardless of node insertion order:

    model = Model()
    model.add_objects(["$allow", "$token"])
    model.add_place("$owner", [0, 1100], [0, 0], 0, 0, b"")
    ...
    model.identifier()   # "bafkrei..."
"""

__version__ = "0.1.0"

from metamodel.core import canonical_json_bytes, load_json, load_yaml, sha256, sha256_hex
from metamodel.errors import (
    DefinitionError,
    DuplicateLabel,
    InvalidIdentifier,
    InvalidObjectName,
    ModelError,
    UnknownEndpoint,
    VectorLengthMismatch,
)
from metamodel.tokentype import build_vector
from metamodel.registry import OBJECT_SIGIL, Arrow, Place, Transition
from metamodel.model import Model
from metamodel.identity import (
    ContentIdentifier,
    collect_leaves,
    decode_identifier,
    encode_identifier,
    inclusion_proof,
    merkle_root,
    verify_identifier,
    verify_inclusion_proof,
)
from metamodel.token_model import ModelToken, build_token_model
from metamodel.definition import build_model, load_definition, load_model, model_to_definition

__all__ = [
    "__version__",
    "canonical_json_bytes",
    "load_json",
    "load_yaml",
    "sha256",
    "sha256_hex",
    "ModelError",
    "InvalidObjectName",
    "DuplicateLabel",
    "VectorLengthMismatch",
    "UnknownEndpoint",
    "InvalidIdentifier",
    "DefinitionError",
    "build_vector",
    "OBJECT_SIGIL",
    "Place",
    "Transition",
    "Arrow",
    "Model",
    "ContentIdentifier",
    "collect_leaves",
    "merkle_root",
    "encode_identifier",
    "decode_identifier",
    "verify_identifier",
    "inclusion_proof",
    "verify_inclusion_proof",
    "ModelToken",
    "build_token_model",
    "build_model",
    "load_definition",
    "load_model",
    "model_to_definition",
]

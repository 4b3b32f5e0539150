"""Core primitives for the metamodel package.

This module provides the foundational utilities used throughout the package:
- Cryptographic hashing (SHA-256)
- Canonical JSON serialization (sorted keys, no whitespace, no floats)
- YAML/JSON loading with consistent encoding
- Hex helpers for opaque byte payloads

Design principles:
- Pure functions where possible
- No global mutable state
"""

from __future__ import annotations

import hashlib
import json
import pathlib
from typing import Any

import yaml

# Package root, computed once at module load
PACKAGE_ROOT = pathlib.Path(__file__).resolve().parent
SCHEMA_DIR = PACKAGE_ROOT / "schemas"

DIGEST_SIZE = 32
ZERO_DIGEST = b"\x00" * DIGEST_SIZE


def sha256(data: bytes) -> bytes:
    """Compute the raw 32-byte SHA-256 digest of bytes."""
    return hashlib.sha256(data).digest()


def sha256_hex(data: bytes) -> str:
    """Compute SHA-256 hash of bytes, returning lowercase hex string."""
    return hashlib.sha256(data).hexdigest()


def load_yaml(path: pathlib.Path) -> Any:
    """Load YAML file with UTF-8 encoding."""
    return yaml.safe_load(pathlib.Path(path).read_text(encoding="utf-8"))


def load_json(path: pathlib.Path) -> Any:
    """Load JSON file with UTF-8 encoding."""
    return json.loads(pathlib.Path(path).read_text(encoding="utf-8"))


def load_document(path: pathlib.Path) -> Any:
    """Load a JSON or YAML document, chosen by file suffix."""
    p = pathlib.Path(path)
    if p.suffix.lower() == ".json":
        return load_json(p)
    return load_yaml(p)


def canonical_json_bytes(obj: Any) -> bytes:
    """Serialize object to canonical JSON bytes.

    Properties:
    - Keys sorted lexicographically
    - No whitespace
    - UTF-8 encoded
    - Floats rejected (use ints for quantities and rates)

    This ensures byte-for-byte reproducibility of model snapshots.
    """
    def _reject_floats(o: Any, path: str = "") -> None:
        if isinstance(o, float):
            raise ValueError(f"Float not allowed in canonical JSON at {path}")
        if isinstance(o, dict):
            for k, v in o.items():
                _reject_floats(v, f"{path}.{k}")
        if isinstance(o, (list, tuple)):
            for i, v in enumerate(o):
                _reject_floats(v, f"{path}[{i}]")

    _reject_floats(obj)
    return json.dumps(
        obj,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode("utf-8")


def hex_to_bytes(value: str) -> bytes:
    """Decode a hex string, tolerating an optional ``0x`` prefix and surrounding whitespace."""
    s = str(value or "").strip().lower()
    if s.startswith("0x"):
        s = s[2:]
    return bytes.fromhex(s)

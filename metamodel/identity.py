"""Model identity: canonical leaves, Merkle root and content identifier.

This module derives a deterministic, content-addressable identifier for a
model. Two independently built models with the same schema produce the same
identifier, byte for byte, in any conforming implementation.

Leaves, in fixed section order:
- object labels, sorted by UTF-8 byte value
- place labels, sorted
- transition labels, sorted
- arrows in insertion order (NOT sorted), rendered ``<source>--><target>``
  or ``<source>-|><target>`` for inhibit arrows

Hashing:
- SHA-256
- leaf = SHA256(utf8(leaf_text))
- node = SHA256(left || right), no domain separation byte
- an unpaired node at the end of a level is carried up unchanged
- no leaves -> 32 zero bytes

Identifier:
- envelope = 0x01 (version) || 0x55 (raw) || 0x12 (sha2-256) || 0x20 (length) || digest
- text = "b" || lowercase RFC 4648 base32(envelope) without padding

Node labels are sorted, arrows are not: the identifier is insensitive to node
insertion order and sensitive to arrow insertion order.
"""

from __future__ import annotations

import base64
import binascii
import hmac
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Sequence

from metamodel.core import DIGEST_SIZE, ZERO_DIGEST, sha256
from metamodel.errors import InvalidIdentifier
from metamodel.observability import ModelLayer, ModelLogger

if TYPE_CHECKING:
    from metamodel.model import Model

ARROW_GLYPH = "-->"
INHIBIT_GLYPH = "-|>"

CID_VERSION = 0x01
CODEC_RAW = 0x55
HASH_SHA2_256 = 0x12
ENVELOPE_PREFIX = bytes([CID_VERSION, CODEC_RAW, HASH_SHA2_256, DIGEST_SIZE])
ENVELOPE_SIZE = len(ENVELOPE_PREFIX) + DIGEST_SIZE
MULTIBASE_BASE32 = "b"

_log = ModelLogger(__name__, ModelLayer.IDENTITY)


def _byte_order(labels: Sequence[str]) -> List[str]:
    return sorted(labels, key=lambda s: s.encode("utf-8"))


def arrow_edge(source: str, target: str, inhibit: bool = False) -> str:
    """Render an arrow as its leaf text."""
    return f"{source}{INHIBIT_GLYPH if inhibit else ARROW_GLYPH}{target}"


def collect_leaves(model: "Model") -> List[str]:
    """Return the canonical leaf sequence for ``model``."""
    leaves: List[str] = []
    leaves.extend(_byte_order(model.objects))
    leaves.extend(_byte_order([p.label for p in model.places]))
    leaves.extend(_byte_order([t.label for t in model.transitions]))
    leaves.extend(arrow_edge(a.source, a.target, a.inhibit) for a in model.arrows)
    return leaves


def leaf_hash(leaf: str) -> bytes:
    return sha256(leaf.encode("utf-8"))


def node_hash(left: bytes, right: bytes) -> bytes:
    """Compute a parent digest from two 32-byte child digests."""
    return sha256(left + right)


def _next_level(level: Sequence[bytes]) -> List[bytes]:
    nxt = [node_hash(level[i], level[i + 1]) for i in range(0, len(level) - 1, 2)]
    if len(level) % 2:
        nxt.append(level[-1])
    return nxt


def merkle_root(digests: Sequence[bytes]) -> bytes:
    """Reduce leaf digests pairwise, left to right, to a single root."""
    if not digests:
        return ZERO_DIGEST
    level = list(digests)
    while len(level) > 1:
        level = _next_level(level)
    return level[0]


def merkle_root_from_leaves(leaves: Sequence[str]) -> bytes:
    return merkle_root([leaf_hash(leaf) for leaf in leaves])


def identity_hash(model: "Model") -> bytes:
    """Compute the 32-byte identity digest of ``model``. Recomputed on every call."""
    started = time.perf_counter()
    leaves = collect_leaves(model)
    root = merkle_root_from_leaves(leaves)
    _log.operation(
        "identity_hash",
        duration_ms=(time.perf_counter() - started) * 1000,
        leaves=len(leaves),
        root=root.hex(),
    )
    return root


@dataclass(frozen=True)
class ContentIdentifier:
    """Decoded form of a model identifier."""
    version: int
    codec: int
    hash_code: int
    digest: bytes

    @classmethod
    def for_digest(cls, digest: bytes) -> "ContentIdentifier":
        if len(digest) != DIGEST_SIZE:
            raise InvalidIdentifier("digest", f"must be {DIGEST_SIZE} bytes, got {len(digest)}", digest)
        return cls(version=CID_VERSION, codec=CODEC_RAW, hash_code=HASH_SHA2_256, digest=bytes(digest))

    def envelope(self) -> bytes:
        return bytes([self.version, self.codec, self.hash_code, len(self.digest)]) + self.digest

    def encode(self) -> str:
        body = base64.b32encode(self.envelope()).decode("ascii").rstrip("=").lower()
        return MULTIBASE_BASE32 + body

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "codec": f"0x{self.codec:02x}",
            "hash_code": f"0x{self.hash_code:02x}",
            "length": len(self.digest),
            "digest": self.digest.hex(),
        }

    def __str__(self) -> str:
        return self.encode()


def encode_identifier(digest: bytes) -> str:
    """Wrap a 32-byte digest in the identifier envelope and render it as text."""
    return ContentIdentifier.for_digest(digest).encode()


def identifier(model: "Model") -> str:
    return encode_identifier(identity_hash(model))


def decode_identifier(text: str) -> ContentIdentifier:
    """Parse identifier text back into its envelope fields.

    Raises InvalidIdentifier unless the text carries the base32 flag, decodes
    to exactly 36 bytes, starts with the fixed envelope prefix, and is the
    canonical encoding of those bytes (case aside).
    """
    s = str(text or "").strip()
    if not s.startswith(MULTIBASE_BASE32) and not s.startswith(MULTIBASE_BASE32.upper()):
        raise InvalidIdentifier("identifier", f"must start with {MULTIBASE_BASE32!r}", text)
    body = s[1:].upper()
    pad = "=" * ((-len(body)) % 8)
    try:
        raw = base64.b32decode(body + pad)
    except (binascii.Error, ValueError) as e:
        raise InvalidIdentifier("identifier", f"invalid base32 body: {e}", text) from e
    if len(raw) != ENVELOPE_SIZE:
        raise InvalidIdentifier("identifier", f"envelope must be {ENVELOPE_SIZE} bytes, got {len(raw)}", text)
    if raw[: len(ENVELOPE_PREFIX)] != ENVELOPE_PREFIX:
        raise InvalidIdentifier("identifier", f"unexpected envelope prefix {raw[:4].hex()}", text)
    cid = ContentIdentifier(version=raw[0], codec=raw[1], hash_code=raw[2], digest=raw[4:])
    # the last base32 character carries two unused bits; they must be zero
    if cid.encode() != s.lower():
        raise InvalidIdentifier("identifier", "non-canonical base32 encoding", text)
    return cid


def verify_identifier(model: "Model", text: str) -> bool:
    """Return True when ``text`` is the identifier of ``model``. Malformed text is a mismatch."""
    try:
        claimed = decode_identifier(text)
    except InvalidIdentifier:
        return False
    return hmac.compare_digest(claimed.digest, identity_hash(model))


# ---------------------------------------------------------------------------
# Inclusion proofs
# ---------------------------------------------------------------------------


def _path_sides(size: int, leaf_index: int) -> List[str]:
    """Sibling sides expected on the path from ``leaf_index`` to the root.

    A node carried up unpaired contributes no step at that level.
    """
    sides: List[str] = []
    n, pos = size, leaf_index
    while n > 1:
        sibling = pos ^ 1
        if sibling < n:
            sides.append("left" if sibling < pos else "right")
        n = (n + 1) // 2
        pos //= 2
    return sides


def inclusion_proof(leaves: Sequence[str], leaf_index: int) -> Dict[str, Any]:
    """Build an inclusion proof for ``leaves[leaf_index]`` against the Merkle root of ``leaves``."""
    size = len(leaves)
    if size <= 0:
        raise ValueError("cannot build proof for an empty leaf set")
    if leaf_index < 0 or leaf_index >= size:
        raise ValueError("leaf_index out of range")

    level = [leaf_hash(leaf) for leaf in leaves]
    pos = leaf_index
    path: List[Dict[str, str]] = []

    while len(level) > 1:
        sibling = pos ^ 1
        if sibling < len(level):
            side = "left" if sibling < pos else "right"
            path.append({"side": side, "hash": level[sibling].hex()})
        level = _next_level(level)
        pos //= 2

    return {
        "size": size,
        "leaf_index": leaf_index,
        "leaf": leaves[leaf_index],
        "leaf_hash": leaf_hash(leaves[leaf_index]).hex(),
        "path": path,
        "root": level[0].hex(),
    }


def verify_inclusion_proof(proof: Dict[str, Any]) -> bool:
    """Verify a proof produced by inclusion_proof()."""
    try:
        size = int(proof.get("size"))
        leaf_index = int(proof.get("leaf_index"))
        leaf = proof.get("leaf")
        claimed_leaf_hash = bytes.fromhex(str(proof.get("leaf_hash") or ""))
        root = bytes.fromhex(str(proof.get("root") or ""))
        path = proof.get("path")
    except (TypeError, ValueError, AttributeError):
        return False

    if not isinstance(leaf, str) or not isinstance(path, list):
        return False
    if size <= 0 or leaf_index < 0 or leaf_index >= size:
        return False
    if len(root) != DIGEST_SIZE:
        return False

    cur = leaf_hash(leaf)
    if not hmac.compare_digest(cur, claimed_leaf_hash):
        return False

    expected_sides = _path_sides(size, leaf_index)
    if len(path) != len(expected_sides):
        return False

    for step, expected_side in zip(path, expected_sides):
        if not isinstance(step, dict):
            return False
        side = str(step.get("side") or "").strip().lower()
        if side != expected_side:
            return False
        try:
            sibling = bytes.fromhex(str(step.get("hash") or ""))
        except ValueError:
            return False
        if len(sibling) != DIGEST_SIZE:
            return False
        cur = node_hash(sibling, cur) if side == "left" else node_hash(cur, sibling)

    return hmac.compare_digest(cur, root)

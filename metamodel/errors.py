"""Error taxonomy for model construction and identity handling.

Every builder operation validates completely before it mutates any registry,
so when one of these errors is raised the model is exactly as it was before
the call. Nothing is retried internally; callers correct the request and
resubmit.
"""

from __future__ import annotations

from typing import Any


class ModelError(Exception):
    """Base exception for model construction and identity failures."""

    code = "model_error"

    def __init__(self, field: str, message: str, value: Any = None):
        self.field = field
        self.message = message
        self.value = value
        super().__init__(f"{field}: {message}")


class InvalidObjectName(ModelError):
    """Object label does not begin with the reserved sigil."""

    code = "invalid_object_name"


class DuplicateLabel(ModelError):
    """Place or transition label reused within its namespace."""

    code = "duplicate_label"


class VectorLengthMismatch(ModelError):
    """Initial or capacity vector length differs from the object count."""

    code = "vector_length_mismatch"


class UnknownEndpoint(ModelError):
    """Arrow endpoint does not name an existing place or transition."""

    code = "unknown_endpoint"


class InvalidIdentifier(ModelError):
    """Text is not a well-formed model content identifier."""

    code = "invalid_identifier"


class DefinitionError(ModelError):
    """Model definition document is unreadable or fails schema validation."""

    code = "invalid_definition"

"""Structural auto-validation of submitted knowledge data.

Checks only the shape every entry shares (id, type, tags, trust with at least
one source and a confidence in [0, 1]) and that the declared ``type`` matches
the knowledge type the contribution was submitted as. Variant-specific fields
are left to the reviewer.

Problems are returned as a list of messages, never raised.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from infrakb.knowledge.types import KnowledgeEntryBase, KnowledgeType, knowledge_entry_adapter

logger = logging.getLogger(__name__)


class _SourceShape(BaseModel):
    type: str = Field(min_length=1)
    title: str = Field(min_length=1)
    accessed_date: datetime.date


class _TrustShape(BaseModel):
    confidence: float = Field(ge=0.0, le=1.0)
    sources: list[_SourceShape] = Field(min_length=1)
    last_reviewed_at: datetime.date
    upvotes: int = Field(default=0, ge=0)
    downvotes: int = Field(default=0, ge=0)


class _EntryShape(BaseModel):
    id: str = Field(min_length=1)
    type: str = Field(min_length=1)
    tags: list[str] = Field(min_length=1)
    trust: _TrustShape


# Messages for the failures contributors hit most often
_MESSAGES: dict[tuple[tuple[str | int, ...], str], str] = {
    (("tags",), "too_short"): "data.tags must contain at least one tag",
    (("trust", "sources"), "too_short"): "data.trust.sources must contain at least one source",
}

_REQUIRED = ("id", "type", "tags", "trust")


def _message(error: dict[str, Any]) -> str:
    loc = tuple(error["loc"])
    known = _MESSAGES.get((loc, error["type"]))
    if known:
        return known
    if len(loc) == 1 and loc[0] in _REQUIRED and error["type"] in ("missing", "string_too_short", "model_type"):
        return f"Missing required field: data.{loc[0]}"
    path = ".".join(str(part) for part in loc)
    return f"data.{path}: {error['msg']}"


def as_mapping(data: Any) -> Mapping[str, Any] | None:
    """Return *data* as a plain mapping, or None if it has no usable shape."""
    if isinstance(data, KnowledgeEntryBase):
        return data.model_dump(mode="json")
    if isinstance(data, Mapping):
        return data
    return None


def auto_validate(knowledge_type: KnowledgeType | str, data: Any) -> tuple[bool, list[str]]:
    """Check the shared entry shape of *data* against *knowledge_type*.

    Args:
        knowledge_type: Variant the contribution was submitted as.
        data:           A typed knowledge entry or a raw mapping.

    Returns:
        (passed, errors). The type-match check runs only once the shape is valid.
    """
    mapping = as_mapping(data)
    if mapping is None:
        return False, ["data must be a knowledge entry or a mapping"]

    try:
        shape = _EntryShape.model_validate(mapping)
    except ValidationError as exc:
        errors = list(dict.fromkeys(_message(e) for e in exc.errors()))
        return False, errors

    expected = KnowledgeType(knowledge_type).value
    if shape.type != expected:
        return False, [
            f'data.type "{shape.type}" does not match knowledgeType "{expected}" (expected "{expected}")'
        ]
    return True, []


def coerce_entry(data: Any) -> Any:
    """Return *data* as a typed knowledge entry when it parses as one, else unchanged."""
    if isinstance(data, KnowledgeEntryBase):
        return data.model_copy(deep=True)
    if not isinstance(data, Mapping):
        return data
    try:
        return knowledge_entry_adapter.validate_python(data)
    except ValidationError as exc:
        logger.debug("Contribution data kept as a mapping: %d field error(s)", exc.error_count())
        return data

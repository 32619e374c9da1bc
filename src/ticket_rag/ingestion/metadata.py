"""Metadata sanitization — keep only values the vector index can store.

Index metadata accepts strings, numbers, booleans and lists of strings.
Anything else would make the whole upsert call fail, so offending fields
are dropped here, one field at a time, instead of rejecting the record.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from typing import Any

from ticket_rag.records import TICKET_KEYS
from ticket_rag.retrieval.models import SanitizedValue

logger = logging.getLogger(__name__)


def classify_metadata_value(value: Any) -> bool:
    """Return ``True`` when *value* is a :data:`SanitizedValue`.

    Accepted: ``str``, ``bool``, ``int``, finite ``float`` and
    lists / tuples whose elements are all strings.
    """
    if value is None:
        return False
    if isinstance(value, (str, bool, int)):
        return True
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, (list, tuple)):
        return all(isinstance(v, str) for v in value)
    return False


def sanitize_metadata(values: Mapping[str, Any] | None) -> dict[str, SanitizedValue]:
    """Filter *values* down to the storable subset.

    Never raises.  Tuples are stored as lists.
    """
    out: dict[str, SanitizedValue] = {}
    for key, value in (values or {}).items():
        if not classify_metadata_value(value):
            if value is not None:
                logger.debug("Dropping metadata field %r of type %s", key, type(value).__name__)
            continue
        out[key] = list(value) if isinstance(value, tuple) else value
    return out


def ticket_metadata(
    record: Mapping[str, Any],
    *,
    created_at: str,
    source: str,
) -> dict[str, SanitizedValue]:
    """Select the ticket fields of *record* plus provenance, then sanitize.

    Parameters
    ----------
    record:
        Raw ticket record.
    created_at:
        ISO-8601 ingestion timestamp.
    source:
        Tag of the ingestion entry point (e.g. ``"api:/embed-json"``).
    """
    candidates: dict[str, Any] = {key: record.get(key) for key in TICKET_KEYS}
    candidates["createdAt"] = created_at
    candidates["source"] = source
    return sanitize_metadata(candidates)

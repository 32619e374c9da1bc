"""Ticket records — canonical text and deterministic identity.

A ticket record is an arbitrary mapping supplied by the caller (a JSON
object, a spreadsheet row, …).  Only the nine keys in
:data:`TICKET_FIELDS` carry meaning; their values may be of any type and
are coerced to display strings here.

The same field table drives both sides of the system:

* ingestion embeds :func:`canonicalize` of the raw record;
* answering rebuilds a context block with :func:`build_context_block`
  from the metadata stored next to the vector.

Changing the order or labels below changes every embedding, so re-ingest
the corpus after editing it.
"""

from __future__ import annotations

import hashlib
import math
from collections.abc import Mapping
from typing import Any

# (record key, label) in canonical order.  Keys are the wire names used by
# the ticket export; labels match the language of the stored corpus.
TICKET_FIELDS: tuple[tuple[str, str], ...] = (
    ("titulo", "Título"),
    ("problema", "Problema"),
    ("solucao", "Solução"),
    ("menuSistema", "Menu do Sistema"),
    ("nomeCli", "Cliente"),
    ("nomeFuncionarioCliente", "Funcionário do Cliente"),
    ("respAbertura", "Atendente"),
    ("Comentario", "Comentário"),
    ("Tags", "Tags"),
)

TICKET_KEYS: tuple[str, ...] = tuple(key for key, _ in TICKET_FIELDS)

ID_LENGTH = 32
_ID_SEPARATOR = "|"
_ID_KEYS = ("nomeCli", "titulo", "problema", "solucao")


def display_value(value: Any) -> str:
    """Coerce an arbitrary field value to the string shown to models and users.

    ``None`` becomes ``""``, booleans are lower-cased, integral floats lose
    their ``.0`` (spreadsheet exports turn ids into floats) and lists are
    comma-joined.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, (list, tuple)):
        return ",".join(display_value(v) for v in value)
    return str(value)


def canonical_lines(record: Mapping[str, Any]) -> list[str]:
    """Return one ``"<Label>: <value>"`` line per non-empty ticket field."""
    lines: list[str] = []
    for key, label in TICKET_FIELDS:
        text = display_value(record.get(key))
        if text:
            lines.append(f"{label}: {text}")
    return lines


def canonicalize(record: Mapping[str, Any]) -> str:
    """Build the text that gets embedded for *record*.

    Never fails; a record with no ticket fields yields ``""``.
    """
    return "\n".join(canonical_lines(record))


def build_context_block(metadata: Mapping[str, Any]) -> str:
    """Rebuild human-readable ticket text from stored vector metadata."""
    return canonicalize(metadata)


def deterministic_id(record: Mapping[str, Any], position: int) -> str:
    """Return a stable 32-hex-char id for *record* at *position*.

    The key combines client, title, problem, solution and the record's
    position in its ingestion call, so re-ingesting the same payload
    overwrites the same vectors.
    """
    parts = [display_value(record.get(key)) if record.get(key) else "" for key in _ID_KEYS]
    parts.append(str(position))
    base = _ID_SEPARATOR.join(parts)
    return hashlib.sha256(base.encode("utf-8")).hexdigest()[:ID_LENGTH]

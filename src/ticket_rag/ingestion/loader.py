"""Record loaders — read ticket exports from disk for the CLI."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from ticket_rag.errors import ValidationError

logger = logging.getLogger(__name__)


def load_records(path: str | Path) -> list[dict[str, Any]]:
    """Load ticket records from a JSON array file or a JSON-Lines file.

    Parameters
    ----------
    path:
        ``*.jsonl`` files are read one object per line; anything else must
        contain a single JSON array.

    Returns
    -------
    list[dict]
        Records in file order.  Item shapes are checked by the ingestion
        pipeline, not here.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ValidationError(f"{path}: cannot read file ({exc})") from exc

    if path.suffix == ".jsonl":
        records: list[Any] = []
        for lineno, line in enumerate(text.splitlines(), 1):
            line = line.strip()
            if not line:
                continue
            try:
                records.append(json.loads(line))
            except json.JSONDecodeError as exc:
                raise ValidationError(f"{path}:{lineno}: invalid JSON ({exc.msg})") from exc
    else:
        try:
            records = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValidationError(f"{path}: invalid JSON ({exc.msg})") from exc
        if not isinstance(records, list):
            raise ValidationError(f"{path}: expected a JSON array of records")

    logger.info("Loaded %d record(s) from %s", len(records), path)
    return records

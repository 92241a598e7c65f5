"""JSON read/write with upsert and force replace."""

import json
import logging
from pathlib import Path

from dokkandata.models import Character, ScrapeStats
from dokkandata.util import ParseError

logger = logging.getLogger(__name__)

KEY_FIELD = "id"


def _sort_key(record: dict) -> tuple:
    """Numeric card ids first, in numeric order; anything else after."""
    value = str(record.get(KEY_FIELD, ""))
    try:
        return (0, int(value), value)
    except ValueError:
        return (1, 0, value)


def _read_records(path: Path) -> list[dict]:
    """Read existing character records. Empty list if missing."""
    if not path.exists():
        return []
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON in {path}: {e}") from e

    # Accept both the full output document and a bare character array
    if isinstance(data, dict):
        data = data.get("characters")
    if not isinstance(data, list):
        raise ParseError(f"Invalid JSON format in {path}: expected characters array")
    return data


def _write_document(path: Path, records: list[dict], stats: ScrapeStats | None) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    document: dict = {"characters": records}
    if stats is not None:
        document["stats"] = stats.to_dict()
    path.write_text(
        json.dumps(document, ensure_ascii=False, indent=2) + "\n",
        encoding="utf-8",
    )


def upsert(
    path: Path,
    characters: list[Character],
    stats: ScrapeStats | None = None,
) -> None:
    """Read existing records, upsert new ones by card id, write sorted output."""
    existing = _read_records(path)

    indexed: dict[str, dict] = {}
    for record in existing:
        indexed[str(record.get(KEY_FIELD, ""))] = record

    for character in characters:
        indexed[character.id] = character.to_dict()

    records = sorted(indexed.values(), key=_sort_key)
    _write_document(path, records, stats)
    logger.info("Upserted %d new records -> %d total records in %s",
                len(characters), len(records), path)


def force_replace(
    path: Path,
    characters: list[Character],
    stats: ScrapeStats | None = None,
) -> None:
    """Discard existing records and write only the given characters."""
    removed = len(_read_records(path))
    records = sorted((c.to_dict() for c in characters), key=_sort_key)
    _write_document(path, records, stats)
    logger.info(
        "Force replaced: removed %d, added %d -> %d total records in %s",
        removed, len(characters), len(records), path,
    )


def update_characters_json(
    characters: list[Character],
    path: Path,
    force: bool,
    stats: ScrapeStats | None = None,
) -> None:
    """Update the characters file with upsert or force replace."""
    if force:
        force_replace(path, characters, stats)
    else:
        upsert(path, characters, stats)

"""Reference resolution for converting relationship targets to character ids."""

import logging
from typing import Iterable

from castmap.domain.character import CharacterRecord

logger = logging.getLogger(__name__)


def normalize_reference(raw_ref: str) -> str:
    """Strip wikilink brackets, display text and heading anchors from a reference.

    Examples:
        "[[Anna Smith|Anna]]" -> "Anna Smith"
        "[[Ben#Childhood]]" -> "Ben"
        "  Cara " -> "Cara"
    """
    name = raw_ref.strip()
    if name.startswith("[[") and name.endswith("]]"):
        name = name[2:-2]
    name = name.split("|")[0]
    name = name.split("#")[0]
    return name.strip()


class NameResolver:
    """Handles resolution of raw relationship targets to active character ids.

    Lookup order, first match wins:
    1. Exact display name
    2. Exact file id
    3. Case-insensitive display name
    4. Case-insensitive file id

    When two records share a key, the first record in input order wins.
    """

    def __init__(self, records: Iterable[CharacterRecord]):
        self._by_display: dict[str, str] = {}
        self._by_file: dict[str, str] = {}
        self._by_display_lower: dict[str, str] = {}
        self._by_file_lower: dict[str, str] = {}

        for record in records:
            self._by_display.setdefault(record.display_name, record.id)
            self._by_file.setdefault(record.file_id, record.id)
            self._by_display_lower.setdefault(record.display_name.lower(), record.id)
            self._by_file_lower.setdefault(record.file_id.lower(), record.id)

    def resolve(self, raw_ref: str) -> str | None:
        """Resolve a single reference to a character id.

        Args:
            raw_ref: Plain name or wikilink taken from a relationship bag

        Returns:
            Resolved character id or None if no tracked character matches
        """
        name = normalize_reference(raw_ref)
        if not name:
            return None

        for index, key in (
            (self._by_display, name),
            (self._by_file, name),
            (self._by_display_lower, name.lower()),
            (self._by_file_lower, name.lower()),
        ):
            if key in index:
                return index[key]

        logger.debug(f"Could not resolve relationship target: {raw_ref}")
        return None

    def resolve_references(self, raw_refs: Iterable[str]) -> list[str]:
        """Resolve a list of references, dropping the unresolved ones."""
        resolved_ids = []
        for raw_ref in raw_refs:
            resolved_id = self.resolve(raw_ref)
            if resolved_id:
                resolved_ids.append(resolved_id)
        return resolved_ids


def resolve(raw_ref: str, known_records: Iterable[CharacterRecord]) -> str | None:
    """Resolve one reference against a list of records."""
    return NameResolver(known_records).resolve(raw_ref)

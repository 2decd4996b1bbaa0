"""Collection of resolved relationship edges from character records."""

import logging
from typing import Iterable

from pydantic import BaseModel

from castmap.domain.character import CharacterRecord
from castmap.domain.graph import RawEdge
from castmap.parsing.sheet_parser import SheetParser
from castmap.relationships.name_resolver import NameResolver

logger = logging.getLogger(__name__)

LEGACY_RELATIONSHIP_ROLE = "Relationship"


class CollectedRelationships(BaseModel):
    """Resolved edges plus the characters taking part in them."""

    active_ids: list[str] = []  # insertion order, the stable traversal order of later stages
    edges: list[RawEdge] = []


def _relationship_bag(record: CharacterRecord) -> Iterable[tuple[str, list[str]]]:
    yield from record.relationships.items()
    if record.legacy_relationship.strip():
        links = SheetParser.extract_wikilinks(record.legacy_relationship)
        yield LEGACY_RELATIONSHIP_ROLE, [f"[[{link}]]" for link in links]


def collect(records: list[CharacterRecord]) -> CollectedRelationships:
    """Resolve every relationship bag into a flat edge list.

    Unresolved targets, self-references, blank roles and roles without targets
    are dropped. A (source, target, role) combination is emitted once, with roles
    compared case-insensitively.

    Args:
        records: Parsed character records of the whole project

    Returns:
        CollectedRelationships with the active ids and resolved edges
    """
    resolver = NameResolver(records)
    active: dict[str, None] = {}
    edges: list[RawEdge] = []
    seen: set[tuple[str, str, str]] = set()

    for record in records:
        for role, raw_refs in _relationship_bag(record):
            role = role.strip()
            if not role or not raw_refs:
                continue

            for target_id in resolver.resolve_references(raw_refs):
                if target_id == record.id:
                    continue
                key = (record.id, target_id, role.lower())
                if key in seen:
                    continue
                seen.add(key)

                active.setdefault(record.id)
                active.setdefault(target_id)
                edges.append(RawEdge(source_id=record.id, target_id=target_id, role=role))

    logger.debug(f"Collected {len(edges)} relationship edges between {len(active)} characters")
    return CollectedRelationships(active_ids=list(active), edges=edges)

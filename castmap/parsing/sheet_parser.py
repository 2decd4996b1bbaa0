"""Parsing of markdown character sheets into character records."""

import logging
import re
from typing import Dict, List

from castmap.domain.character import CharacterRecord

logger = logging.getLogger(__name__)

WIKILINK_PATTERN = re.compile(r"\[\[([^\]|]+)(?:\|[^\]]*)?\]\]")
FIELD_PATTERN = re.compile(r"^\s*[-*]\s*\*\*(.+?)\*\*\s*:?\s*(.*)$")
HEADING_PATTERN = re.compile(r"^##\s+(.+?)\s*$")

LEGACY_RELATIONSHIP_FIELD = "relationship"


class SheetParser:
    """Service for extracting character data from markdown character sheets.

    A sheet looks like::

        # Anna Smith

        ## General Information
        - **Surname**: Smith
        - **Role**: Main

        ## Relationships
        - **Parent**: [[Ben Smith]]
        - **Rival**: [[Bob]], [[Cara]]
    """

    def __init__(self, relationship_section: str = "Relationships"):
        self.relationship_section = relationship_section

    @staticmethod
    def extract_wikilinks(content: str) -> List[str]:
        """Extract wikilink targets in the form of [[name]] or [[name|display text]].

        Args:
            content: Markdown content to extract wikilinks from

        Returns:
            List of wikilink targets, without brackets or display text
        """
        return [match.strip() for match in WIKILINK_PATTERN.findall(content)]

    @staticmethod
    def split_targets(value: str) -> List[str]:
        """Split a relationship value into raw target references.

        Wikilinks are kept in their bracketed form. Values without any wikilink
        are treated as a comma-separated list of plain names.
        """
        links = [match.group(0) for match in WIKILINK_PATTERN.finditer(value)]
        if links:
            return links
        return [part.strip() for part in value.split(",") if part.strip()]

    @staticmethod
    def parse_field(line: str) -> tuple[str, str] | None:
        """Parse a `- **Key**: value` line into its key and value."""
        match = FIELD_PATTERN.match(line)
        if not match:
            return None
        key = match.group(1).strip()
        if key.endswith(":"):
            key = key[:-1].strip()
        if not key:
            return None
        return key, match.group(2).strip()

    @staticmethod
    def extract_sections(content: str) -> Dict[str, List[str]]:
        """Split markdown content into its `## ` sections.

        Lines before the first second-level heading are stored under an empty key.
        """
        sections: Dict[str, List[str]] = {"": []}
        current = ""
        for line in content.splitlines():
            heading = HEADING_PATTERN.match(line)
            if heading:
                current = heading.group(1)
                sections.setdefault(current, [])
                continue
            sections[current].append(line)
        return sections

    def parse(self, content: str, file_id: str) -> CharacterRecord:
        """Parse a character sheet into a CharacterRecord.

        Args:
            content: Full markdown content of the sheet
            file_id: Basename of the document, used as the record id

        Returns:
            CharacterRecord with the sheet's name fields and relationship bag
        """
        title = next(
            (line[2:].strip() for line in content.splitlines() if line.startswith("# ")), ""
        )

        fields: Dict[str, str] = {}
        relationships: Dict[str, List[str]] = {}
        role_keys: Dict[str, str] = {}

        for section, lines in self.extract_sections(content).items():
            is_relationship_section = section.lower() == self.relationship_section.lower()
            for line in lines:
                parsed = self.parse_field(line)
                if parsed is None:
                    continue
                key, value = parsed

                if not is_relationship_section:
                    fields.setdefault(key.lower(), value)
                    continue

                targets = self.split_targets(value)
                if not targets:
                    logger.debug(f"Ignoring relationship '{key}' without targets in {file_id}")
                    continue
                # Repeated role lines merge into the first spelling of the role
                canonical = role_keys.setdefault(key.lower(), key)
                existing = relationships.setdefault(canonical, [])
                existing.extend(t for t in targets if t not in existing)

        return CharacterRecord(
            id=file_id,
            display_name=title or fields.get("name", "") or file_id,
            file_id=file_id,
            surname=fields.get("surname", ""),
            role=fields.get("role", ""),
            relationships=relationships,
            legacy_relationship=fields.get(LEGACY_RELATIONSHIP_FIELD, ""),
        )

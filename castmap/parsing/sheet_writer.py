"""Writing relationship lines back into markdown character sheets."""

import logging
from typing import TYPE_CHECKING

from castmap.parsing.sheet_parser import HEADING_PATTERN, SheetParser

if TYPE_CHECKING:
    from castmap.relationships.name_resolver import NameResolver

logger = logging.getLogger(__name__)


def _find_section(lines: list[str], section: str) -> int:
    for i, line in enumerate(lines):
        heading = HEADING_PATTERN.match(line)
        if heading and heading.group(1).lower() == section.strip().lower():
            return i
    return -1


def _already_linked(value: str, name: str, name_resolver: "NameResolver | None") -> bool:
    linked = {link.lower() for link in SheetParser.extract_wikilinks(value)}
    if name.lower() in linked:
        return True
    if name_resolver is None:
        return False
    target_id = name_resolver.resolve(name)
    return bool(target_id) and target_id in name_resolver.resolve_references(
        SheetParser.split_targets(value)
    )


def add_relationship_line(
    content: str,
    *,
    role: str,
    name: str,
    section: str = "Relationships",
    name_resolver: "NameResolver | None" = None,
) -> str:
    """Append-or-merge a `- **role**: [[name]]` line into a sheet's relationship section.

    Cases handled:
    1. Section and role line present: `[[name]]` is appended to the line's targets,
       unless the line already links to that character
    2. Section present, role missing: a new line is added at the end of the section
    3. Section missing: the section is created at the end of the document

    Args:
        content: Full markdown content of the sheet
        role: Relationship role label, matched case-insensitively against existing lines
        name: Name of the character to link to
        section: Heading text of the relationship section, matched case-insensitively
        name_resolver: Resolver used to recognise the character under another name,
            e.g. its display name instead of its file id

    Returns:
        The updated content. Returned unchanged when the link is already present.
    """
    lines = content.split("\n")
    wikilink = f"[[{name}]]"

    section_idx = _find_section(lines, section)
    if section_idx == -1:
        while lines and not lines[-1].strip():
            lines.pop()
        lines.extend(["", f"## {section}", f"- **{role}**: {wikilink}", ""])
        return "\n".join(lines)

    section_end = len(lines)
    for i in range(section_idx + 1, len(lines)):
        if lines[i].startswith("## ") or lines[i].startswith("# "):
            section_end = i
            break

    for i in range(section_idx + 1, section_end):
        parsed = SheetParser.parse_field(lines[i])
        if parsed is None or parsed[0].lower() != role.lower():
            continue

        value = parsed[1]
        if _already_linked(value, name, name_resolver):
            logger.debug(f"{wikilink} already listed under '{parsed[0]}'")
            return content
        separator = ", " if value else " "
        lines[i] = lines[i].rstrip() + separator + wikilink
        return "\n".join(lines)

    # Insert after the last non-blank line of the section
    insert_at = section_idx + 1
    for i in range(section_end - 1, section_idx, -1):
        if lines[i].strip():
            insert_at = i + 1
            break
    lines.insert(insert_at, f"- **{role}**: {wikilink}")
    return "\n".join(lines)

"""Tests for writing relationship lines into character sheets."""

from castmap.domain.character import CharacterRecord
from castmap.parsing.sheet_writer import add_relationship_line
from castmap.relationships.name_resolver import NameResolver

SHEET = """# Ben Smith

## General Information
- **Surname**: Smith

## Relationships
- **Friend**: [[Bob]]

## Notes
Likes tea.
"""


def test_appends_to_existing_role_line() -> None:
    updated = add_relationship_line(SHEET, role="friend", name="Carl")

    assert "- **Friend**: [[Bob]], [[Carl]]" in updated
    assert updated.count("**Friend**") == 1


def test_existing_link_leaves_content_unchanged() -> None:
    assert add_relationship_line(SHEET, role="Friend", name="bob") == SHEET


def test_adds_new_role_at_end_of_section() -> None:
    updated = add_relationship_line(SHEET, role="Child", name="Anna Smith")

    lines = updated.split("\n")
    child_idx = lines.index("- **Child**: [[Anna Smith]]")
    assert lines[child_idx - 1] == "- **Friend**: [[Bob]]"
    assert lines.index("## Notes") > child_idx
    assert "Likes tea." in updated


def test_creates_missing_section() -> None:
    content = "# Ben Smith\n\n## General Information\n- **Surname**: Smith\n\n"
    updated = add_relationship_line(content, role="Child", name="Anna Smith")

    assert updated.endswith("## Relationships\n- **Child**: [[Anna Smith]]\n")
    assert updated.startswith("# Ben Smith\n\n## General Information")


def test_fills_role_line_without_targets() -> None:
    content = "# Ben\n\n## Relationships\n- **Child**:\n"
    updated = add_relationship_line(content, role="Child", name="Anna")

    assert "- **Child**: [[Anna]]" in updated


def test_adds_to_empty_section() -> None:
    content = "# Ben\n\n## Relationships\n\n## Notes\n"
    updated = add_relationship_line(content, role="Child", name="Anna")

    assert updated == "# Ben\n\n## Relationships\n- **Child**: [[Anna]]\n\n## Notes\n"


def test_section_heading_matches_case_insensitively() -> None:
    content = "# Ben\n\n## relationships\n- **Friend**: [[Bob]]\n\n## Notes\n"
    updated = add_relationship_line(content, role="Child", name="Anna")

    assert updated == (
        "# Ben\n\n## relationships\n- **Friend**: [[Bob]]\n- **Child**: [[Anna]]\n\n## Notes\n"
    )
    assert "## Relationships" not in updated


def test_existing_role_under_lowercase_heading_is_merged() -> None:
    content = "# Ben\n\n##  RELATIONSHIPS \n- **Child**: [[Anna]]\n"

    assert add_relationship_line(content, role="child", name="anna") == content


def test_link_by_display_name_counts_as_present() -> None:
    name_resolver = NameResolver(
        [
            CharacterRecord(id="anna", display_name="Anna Smith"),
            CharacterRecord(id="ben", display_name="Ben Smith"),
        ]
    )
    content = "# Ben Smith\n\n## Relationships\n- **Child**: [[Anna Smith]]\n"

    updated = add_relationship_line(
        content, role="Child", name="anna", name_resolver=name_resolver
    )

    assert updated == content


def test_link_to_other_character_is_still_appended_with_resolver() -> None:
    name_resolver = NameResolver(
        [
            CharacterRecord(id="anna", display_name="Anna Smith"),
            CharacterRecord(id="cara", display_name="Cara Jones"),
        ]
    )
    content = "# Ben Smith\n\n## Relationships\n- **Child**: [[Anna Smith]]\n"

    updated = add_relationship_line(
        content, role="Child", name="cara", name_resolver=name_resolver
    )

    assert "- **Child**: [[Anna Smith]], [[cara]]" in updated

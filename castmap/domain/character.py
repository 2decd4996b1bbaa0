"""Character domain models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator


class CharacterRecord(BaseModel):
    """Snapshot of one character document, as parsed from its sheet.

    Attributes:
        id: Stable identity of the character (the document basename)
        display_name: Name shown on the map, taken from the sheet title
        file_id: Basename of the underlying document, used for link resolution
        surname: Family name, used for explicit family clusters
        role: Narrative importance tag (Main, Side, Background, ...)
        relationships: Role label to raw target references, in document order
        legacy_relationship: Free text of the single-valued "Relationship" field
    """

    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str = ""
    file_id: str = ""
    surname: str = ""
    role: str = ""
    relationships: dict[str, list[str]] = {}
    legacy_relationship: str = ""

    @model_validator(mode="before")
    @classmethod
    def _default_names(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("id"):
            data = dict(data)
            data["display_name"] = data.get("display_name") or data["id"]
            data["file_id"] = data.get("file_id") or data["id"]
        return data

    def role_labels(self) -> list[str]:
        """Return the relationship role labels that carry at least one target."""
        return [role for role, targets in self.relationships.items() if role.strip() and targets]

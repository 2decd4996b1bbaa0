from typing import List, Protocol

from castmap.domain.character import CharacterRecord


class CharacterNotFoundError(KeyError):
    """Raised when a character document cannot be located."""


class CharacterStore(Protocol):
    """Protocol for character document storage implementations."""

    def get_records(self) -> List[CharacterRecord]:
        """Get a parsed snapshot of every character document."""
        ...

    def get_record(self, character_id: str) -> CharacterRecord:
        """Get one parsed character by its id."""
        ...

    def read_document(self, character_id: str) -> str:
        """Get the raw markdown of a character document."""
        ...

    def write_document(self, character_id: str, content: str) -> None:
        """Replace the raw markdown of a character document."""
        ...

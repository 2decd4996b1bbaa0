from typing import Dict, List

from castmap.character_store.base import CharacterNotFoundError, CharacterStore
from castmap.domain.character import CharacterRecord
from castmap.parsing.sheet_parser import SheetParser


class FakeCharacterStore(CharacterStore):
    """Fake character store for testing, keeping sheets in memory."""

    def __init__(self, documents: Dict[str, str] | None = None, fail_writes: bool = False) -> None:
        self.documents = dict(documents or {})
        self.fail_writes = fail_writes
        self.writes: List[str] = []
        self._parser = SheetParser()

    def get_records(self) -> List[CharacterRecord]:
        return [self._parser.parse(content, name) for name, content in self.documents.items()]

    def get_record(self, character_id: str) -> CharacterRecord:
        return self._parser.parse(self.read_document(character_id), character_id)

    def read_document(self, character_id: str) -> str:
        if character_id not in self.documents:
            raise CharacterNotFoundError(f"Character {character_id} not found")
        return self.documents[character_id]

    def write_document(self, character_id: str, content: str) -> None:
        if self.fail_writes:
            raise OSError(f"Read-only sheet: {character_id}")
        self.read_document(character_id)
        self.documents[character_id] = content
        self.writes.append(character_id)

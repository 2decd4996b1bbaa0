from pathlib import Path
from typing import List

from loguru import logger

from castmap.character_store.base import CharacterNotFoundError, CharacterStore
from castmap.domain.character import CharacterRecord
from castmap.parsing.sheet_parser import SheetParser


class LocalCharacterStore(CharacterStore):
    """Character store backed by a folder of markdown character sheets.

    Every `*.md` file below the folder is one character, identified by its file stem.
    """

    def __init__(self, folder: str | Path, parser: SheetParser | None = None) -> None:
        self.folder = Path(folder)
        self.parser = parser or SheetParser()

    def get_records(self) -> List[CharacterRecord]:
        """Parse every character sheet in the folder, in path order."""
        records = []
        for file in self._get_character_files():
            try:
                with open(file, "r", encoding="utf-8") as f:
                    content = f.read()
            except UnicodeDecodeError as e:
                logger.warning(f"Skipping character sheet {file.name}, not valid UTF-8: {e}")
                continue
            records.append(self.parser.parse(content, file.stem))
        logger.debug(f"Parsed {len(records)} character sheets from {self.folder}")
        return records

    def get_record(self, character_id: str) -> CharacterRecord:
        return self.parser.parse(self.read_document(character_id), character_id)

    def read_document(self, character_id: str) -> str:
        with open(self._get_path(character_id), "r", encoding="utf-8") as f:
            return f.read()

    def write_document(self, character_id: str, content: str) -> None:
        path = self._get_path(character_id)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        logger.info(f"Updated character sheet {path.name}")

    def _get_character_files(self) -> list[Path]:
        if not self.folder.exists():
            logger.warning(f"Character folder not found: {self.folder}")
            return []
        files = sorted(self.folder.rglob("*.md"))
        return [f for f in files if not f.name.endswith(".excalidraw.md")]

    def _get_path(self, character_id: str) -> Path:
        for file in self._get_character_files():
            if file.stem == character_id:
                return file
        raise CharacterNotFoundError(f"Character {character_id} not found")

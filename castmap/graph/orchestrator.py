"""Orchestration of character map rebuilds."""

import threading

from loguru import logger

from castmap.character_store.base import CharacterStore
from castmap.domain.graph import CharacterMap
from castmap.graph.builder import CharacterMapBuilder
from castmap.inverse_pairs.base import InversePairStore


class CharacterMapOrchestrator:
    """Rebuilds the character map from the stores and publishes the newest result.

    Every rebuild takes a generation ticket before reading the stores. A build
    whose ticket is older than the last published one is discarded, so a newer
    build always replaces an older in-flight one.
    """

    def __init__(
        self,
        *,
        character_store: CharacterStore,
        inverse_store: InversePairStore,
        builder: CharacterMapBuilder | None = None,
    ):
        self.character_store = character_store
        self.inverse_store = inverse_store
        self.builder = builder or CharacterMapBuilder()

        self._lock = threading.Lock()
        self._generation = 0
        self._published_generation = 0
        self._current: CharacterMap | None = None

    def rebuild(self) -> CharacterMap:
        """Rebuild the map from the current documents and learned pairs.

        Returns:
            The published map, which is a newer build's map when this one was superseded
        """
        with self._lock:
            self._generation += 1
            ticket = self._generation

        records = self.character_store.get_records()
        character_map = self.builder.build(records, self.inverse_store.snapshot())

        with self._lock:
            if ticket < self._published_generation and self._current is not None:
                logger.debug(f"Discarding superseded character map build {ticket}")
                return self._current
            self._current = character_map
            self._published_generation = ticket
        return character_map

    def current(self) -> CharacterMap | None:
        """The last published map, or None before the first rebuild."""
        return self._current

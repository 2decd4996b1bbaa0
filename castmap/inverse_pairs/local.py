import json
import threading
from pathlib import Path

from loguru import logger

from castmap.domain.inverse_pairs import InversePairDictionary
from castmap.inverse_pairs.base import InversePairStore


class LocalInversePairStore(InversePairStore):
    """Local inverse-pair store that keeps the dictionary in a JSON file."""

    def __init__(self, filepath: str | Path | None = None) -> None:
        """Initialize LocalInversePairStore.

        Args:
            filepath: Path to the JSON file. If provided and exists, will auto-load.
                     If provided and doesn't exist, will save to this path when a pair is learned.
                     If not provided, keeps the dictionary in memory only.
        """
        self._filepath = str(filepath) if filepath else None
        self._lock = threading.Lock()

        if self._filepath and Path(self._filepath).exists():
            with open(self._filepath, "r") as f:
                data = json.load(f)
            self._dictionary = InversePairDictionary.from_dict(data.get("pairs", {}))
            logger.debug(f"Loaded {len(self._dictionary)} inverse roles from {self._filepath}")
        else:
            self._dictionary = InversePairDictionary()

    @classmethod
    def from_data(cls, pairs: dict[str, list[str]] | None = None) -> "LocalInversePairStore":
        """Create an in-memory store from serialized pairs (useful for testing)."""
        instance = cls(filepath=None)
        instance._dictionary = InversePairDictionary.from_dict(pairs or {})
        return instance

    def snapshot(self) -> InversePairDictionary:
        """Get the current dictionary snapshot."""
        return self._dictionary

    def learn(self, role_a: str, role_b: str) -> InversePairDictionary:
        """Learn an inverse pair under the store lock, saving only when it is new."""
        with self._lock:
            updated = self._dictionary.learn(role_a, role_b)
            if updated is self._dictionary:
                return updated

            self._dictionary = updated
            logger.info(f"Learned inverse relationship pair '{role_a}' <-> '{role_b}'")
            if self._filepath:
                self._write(self._filepath)
            return updated

    def save(self, filepath: str | None = None) -> None:
        """Save the dictionary to a JSON file.

        Args:
            filepath: Path to save to. If not provided, uses the filepath from initialization.
        """
        save_path = filepath or self._filepath
        if not save_path:
            raise ValueError(
                "No filepath provided and no default filepath set during initialization"
            )
        with self._lock:
            self._write(str(save_path))

    def _write(self, save_path: str) -> None:
        Path(save_path).parent.mkdir(parents=True, exist_ok=True)
        with open(save_path, "w") as f:
            json.dump({"pairs": self._dictionary.to_dict()}, f, indent=2)

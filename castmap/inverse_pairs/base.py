from typing import Protocol

from castmap.domain.inverse_pairs import InversePairDictionary


class InversePairStore(Protocol):
    """Protocol for persisting the learned inverse-role dictionary."""

    def snapshot(self) -> InversePairDictionary:
        """Get the current dictionary snapshot."""
        ...

    def learn(self, role_a: str, role_b: str) -> InversePairDictionary:
        """Learn an inverse pair, persisting it when new, and return the new snapshot."""
        ...

    def save(self, filepath: str | None = None) -> None:
        """Save the dictionary to disk."""
        ...

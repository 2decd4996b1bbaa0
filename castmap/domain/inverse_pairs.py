"""Learned dictionary of mutually inverse relationship roles."""

from typing import Iterable, Mapping


def _key(role: str) -> str:
    return role.strip().lower()


class InversePairDictionary:
    """Immutable, symmetric mapping from a role label to its known inverse labels.

    Roles are stored lower-cased. Learning a pair returns a new snapshot, so a
    dictionary handed to a graph build never changes under it.
    """

    def __init__(self, pairs: Mapping[str, Iterable[str]] | None = None):
        self._pairs: dict[str, frozenset[str]] = {}
        for role, inverses in (pairs or {}).items():
            keys = frozenset(_key(inverse) for inverse in inverses if inverse.strip())
            if role.strip() and keys:
                self._pairs[_key(role)] = self._pairs.get(_key(role), frozenset()) | keys

    @classmethod
    def from_dict(cls, data: Mapping[str, Iterable[str]]) -> "InversePairDictionary":
        """Create a dictionary from its serialized form, restoring symmetry."""
        dictionary = cls()
        for role, inverses in data.items():
            for inverse in inverses:
                if role.strip() and inverse.strip():
                    dictionary = dictionary.learn(role, inverse)
        return dictionary

    def to_dict(self) -> dict[str, list[str]]:
        """Serialize to a plain role -> sorted list of roles mapping."""
        return {role: sorted(self._pairs[role]) for role in sorted(self._pairs)}

    def lookup(self, role: str) -> frozenset[str]:
        """Return the known inverses of a role, or an empty set."""
        return self._pairs.get(_key(role), frozenset())

    def are_inverse(self, role_a: str, role_b: str) -> bool:
        return _key(role_b) in self.lookup(role_a)

    def learn(self, role_a: str, role_b: str) -> "InversePairDictionary":
        """Record that two roles are inverse of each other.

        Args:
            role_a: Role used by the first character for the second
            role_b: Role used by the second character for the first

        Returns:
            A new dictionary containing the pair, or this one when it is already known

        Raises:
            ValueError: If either role is blank
        """
        key_a, key_b = _key(role_a), _key(role_b)
        if not key_a or not key_b:
            raise ValueError("Relationship roles must not be blank")

        if key_b in self.lookup(key_a) and key_a in self.lookup(key_b):
            return self

        pairs = dict(self._pairs)
        pairs[key_a] = pairs.get(key_a, frozenset()) | {key_b}
        pairs[key_b] = pairs.get(key_b, frozenset()) | {key_a}
        return InversePairDictionary(pairs)

    def merge(self, other: "InversePairDictionary") -> "InversePairDictionary":
        """Return a dictionary holding the pairs of both dictionaries."""
        merged = self
        for role, inverses in other._pairs.items():
            for inverse in inverses:
                merged = merged.learn(role, inverse)
        return merged

    def __len__(self) -> int:
        return len(self._pairs)

    def __contains__(self, role: object) -> bool:
        return isinstance(role, str) and _key(role) in self._pairs

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, InversePairDictionary):
            return NotImplemented
        return self._pairs == other._pairs

    def __repr__(self) -> str:
        return f"InversePairDictionary({self.to_dict()!r})"

"""Seeds for the inverse role prompt."""

from typing import Iterable

from castmap.domain.character import CharacterRecord
from castmap.domain.inverse_pairs import InversePairDictionary


def known_role_labels(records: Iterable[CharacterRecord]) -> list[str]:
    """Collect the role labels used across a project.

    Labels are de-duplicated case-insensitively, keeping the first spelling seen.
    """
    labels: dict[str, str] = {}
    for record in records:
        for role in record.role_labels():
            labels.setdefault(role.strip().lower(), role.strip())
    return list(labels.values())


def seed_inverses(
    role: str, dictionary: InversePairDictionary, known_roles: Iterable[str]
) -> list[str]:
    """Known inverses of a role, spelled the way the project spells them."""
    spelling: dict[str, str] = {}
    for label in known_roles:
        spelling.setdefault(label.lower(), label)
    return [spelling.get(inverse, inverse) for inverse in sorted(dictionary.lookup(role))]

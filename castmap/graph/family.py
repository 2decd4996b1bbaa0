"""Family-relation vocabulary and label helpers shared by the graph stages."""

import re
from typing import Iterable

FAMILY_ROLE_SYNONYMS = (
    "parent",
    "mother",
    "father",
    "mom",
    "dad",
    "kid",
    "child",
    "son",
    "daughter",
    "sibling",
    "brother",
    "sister",
    "spouse",
    "wife",
    "husband",
    "partner",
)


def family_terms(extra_roles: Iterable[str] = ()) -> tuple[str, ...]:
    """Family synonyms plus caller-supplied (e.g. localized) equivalents, lower-cased."""
    extras = tuple(role.strip().lower() for role in extra_roles if role.strip())
    return FAMILY_ROLE_SYNONYMS + extras


def is_family_role(role: str, terms: Iterable[str] = FAMILY_ROLE_SYNONYMS) -> bool:
    """Whether a role label contains any family term, case-insensitively."""
    role_key = role.lower()
    return any(term in role_key for term in terms)


def capitalize(label: str) -> str:
    """Capitalize the first letter of a label, leaving the rest untouched."""
    label = label.strip()
    return label[:1].upper() + label[1:]


def slugify(label: str) -> str:
    return re.sub(r"\s+", "-", label.strip().lower())


def is_surname_candidate(surname: str) -> bool:
    """Surnames must be non-empty and start with an upper-case letter."""
    surname = surname.strip()
    return bool(surname) and surname[0].isupper()

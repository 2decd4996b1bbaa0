"""Relationship module for resolving targets and keeping reciprocal roles consistent."""

from castmap.domain.inverse_pairs import InversePairDictionary
from castmap.relationships.name_resolver import NameResolver
from castmap.relationships.reciprocal import (
    ReciprocalResolution,
    ReciprocalResolutionError,
    ReciprocalResolver,
    UnknownCharacterError,
)

__all__ = [
    "InversePairDictionary",
    "NameResolver",
    "ReciprocalResolution",
    "ReciprocalResolutionError",
    "ReciprocalResolver",
    "UnknownCharacterError",
]

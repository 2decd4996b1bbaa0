"""Graph module for building the character relationship map."""

from castmap.graph.builder import CharacterMapBuilder
from castmap.graph.clusters import ClusterBuilder, ClusterLayout, build_clusters
from castmap.graph.collector import CollectedRelationships, collect
from castmap.graph.edges import EdgeFinalizer, finalize

__all__ = [
    "CharacterMapBuilder",
    "ClusterBuilder",
    "ClusterLayout",
    "CollectedRelationships",
    "EdgeFinalizer",
    "build_clusters",
    "collect",
    "finalize",
]

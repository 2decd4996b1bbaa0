"""Deduplication and orientation of the edges drawn on the character map."""

from typing import Iterable

from loguru import logger

from castmap.domain.graph import GraphEdge, Orientation, RawEdge
from castmap.domain.inverse_pairs import InversePairDictionary
from castmap.graph.clusters import ClusterLayout
from castmap.graph.family import FAMILY_ROLE_SYNONYMS, is_family_role


class EdgeFinalizer:
    """Turns resolved relationship edges into the final, deduplicated edge set.

    For every raw edge, in collection order:
    1. Fan-outs collected in a sub-group become one structural edge to that group
    2. Edges already shown by the counterpart's group-level edge are skipped
    3. Per unordered pair, a role equal or inverse to a drawn role is skipped
    4. Labels repeating the shared enclosing group's label are blanked
    5. Unlabelled and family edges are vertical, all others horizontal
    """

    def __init__(self, family_roles: Iterable[str] = FAMILY_ROLE_SYNONYMS):
        self.family_roles = tuple(family_roles)

    def finalize(
        self,
        edges: list[RawEdge],
        layout: ClusterLayout,
        dictionary: InversePairDictionary,
    ) -> list[GraphEdge]:
        """Build the drawn edges.

        Args:
            edges: Resolved relationship edges in collection order
            layout: Group hierarchy from the cluster builder
            dictionary: Inverse-pair snapshot used to collapse reciprocal mentions

        Returns:
            List of GraphEdge objects, structural and labelled
        """
        drawn_roles: dict[tuple[str, str], set[str]] = {}
        structural: set[tuple[str, str]] = set()
        graph_edges: list[GraphEdge] = []

        for edge in edges:
            role_key = edge.role.lower()
            pair = tuple(sorted((edge.source_id, edge.target_id)))
            roles = drawn_roles.setdefault(pair, set())

            group_id = layout.subgroup_for(edge.source_id, edge.role)
            if group_id:
                roles.add(role_key)
                if (edge.source_id, group_id) not in structural:
                    structural.add((edge.source_id, group_id))
                    graph_edges.append(
                        GraphEdge(
                            source_id=edge.source_id, target_id=group_id, orientation="vertical"
                        )
                    )
                continue

            if self._implied_by_group(edge, layout, dictionary):
                logger.debug(
                    f"Skipping {edge.source_id} -> {edge.target_id} ({edge.role}): shown by group"
                )
                continue

            if role_key in roles or dictionary.lookup(role_key) & roles:
                continue
            roles.add(role_key)

            label = self._collapse_label(edge, layout)
            graph_edges.append(
                GraphEdge(
                    source_id=edge.source_id,
                    target_id=edge.target_id,
                    label=label,
                    orientation=self.orientation(edge.role),
                )
            )

        return graph_edges

    def orientation(self, role: str) -> Orientation:
        """Family roles and unlabelled edges are vertical, every other role is horizontal."""
        if not role or is_family_role(role, self.family_roles):
            return "vertical"
        return "horizontal"

    @staticmethod
    def _roles_match(role_a: str, role_b: str, dictionary: InversePairDictionary) -> bool:
        return role_a.lower() == role_b.lower() or dictionary.are_inverse(role_a, role_b)

    def _implied_by_group(
        self, edge: RawEdge, layout: ClusterLayout, dictionary: InversePairDictionary
    ) -> bool:
        parent_id = layout.parent_of.get(edge.source_id)
        if parent_id is None:
            return False

        parent = layout.get_group(parent_id)
        if (
            parent is not None
            and parent.kind == "role-subgroup"
            and parent.owner_id == edge.target_id
            and parent.role
            and self._roles_match(parent.role, edge.role, dictionary)
        ):
            return True

        for role, group_id in layout.source_role_subgroups.get(edge.target_id, {}).items():
            if group_id == parent_id and self._roles_match(role, edge.role, dictionary):
                return True
        return False

    @staticmethod
    def _collapse_label(edge: RawEdge, layout: ClusterLayout) -> str:
        parent_id = layout.parent_of.get(edge.source_id)
        if parent_id is None or parent_id != layout.parent_of.get(edge.target_id):
            return edge.role

        parent = layout.get_group(parent_id)
        if parent is not None and parent.label.lower() == edge.role.lower():
            return ""
        return edge.role


def finalize(
    edges: list[RawEdge],
    layout: ClusterLayout,
    dictionary: InversePairDictionary,
    family_roles: Iterable[str] = FAMILY_ROLE_SYNONYMS,
) -> list[GraphEdge]:
    return EdgeFinalizer(family_roles=family_roles).finalize(edges, layout, dictionary)

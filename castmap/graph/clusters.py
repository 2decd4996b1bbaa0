"""Grouping of active characters into family clusters, role clusters and sub-groups."""

from collections import deque
from typing import Iterable, Mapping

from loguru import logger
from pydantic import BaseModel

from castmap.domain.character import CharacterRecord
from castmap.domain.graph import GroupKind, GroupNode, RawEdge
from castmap.graph.family import (
    FAMILY_ROLE_SYNONYMS,
    capitalize,
    is_family_role,
    is_surname_candidate,
    slugify,
)


class ClusterLayout(BaseModel):
    """Group hierarchy produced by the cluster builder.

    Attributes:
        groups: Clusters and sub-groups, in creation order
        parent_of: Character id to the id of its immediate enclosing group
        source_role_subgroups: Source id to lower-cased role to the group its
            fan-out targets were collected in
    """

    groups: list[GroupNode] = []
    parent_of: dict[str, str] = {}
    source_role_subgroups: dict[str, dict[str, str]] = {}

    def get_group(self, group_id: str) -> GroupNode | None:
        for group in self.groups:
            if group.id == group_id:
                return group
        return None

    def subgroup_for(self, source_id: str, role: str) -> str | None:
        return self.source_role_subgroups.get(source_id, {}).get(role.strip().lower())

    def ancestors(self, node_id: str) -> list[str]:
        """Ids of the groups enclosing a node, innermost first."""
        chain = []
        current = self.parent_of.get(node_id)
        while current is not None and current not in chain:
            chain.append(current)
            group = self.get_group(current)
            current = group.parent_id if group else None
        return chain


def connected_components(
    nodes: list[str], adjacency: Mapping[str, list[str]]
) -> list[list[str]]:
    """Breadth-first connected components, members kept in `nodes` order."""
    order = {node_id: index for index, node_id in enumerate(nodes)}
    visited: set[str] = set()
    components = []

    for start in nodes:
        if start in visited:
            continue
        visited.add(start)
        component = []
        queue = deque([start])
        while queue:
            current = queue.popleft()
            component.append(current)
            for neighbour in adjacency.get(current, []):
                if neighbour not in visited and neighbour in order:
                    visited.add(neighbour)
                    queue.append(neighbour)
        components.append(sorted(component, key=order.__getitem__))

    return components


class ClusterBuilder:
    """Builds the node / group / sub-group hierarchy of the character map.

    Stages run strictly in order and a node assigned in one stage is excluded
    from the later ones:
    1. Explicit family clusters from surnames shared by two or more characters
    2. Inferred family clusters from components of family-role edges
    3. Role clusters from components of the remaining roles, busiest role first
    4. Sub-groups collapsing a fan-out from one character to several targets
    """

    def __init__(self, family_roles: Iterable[str] = FAMILY_ROLE_SYNONYMS):
        self.family_roles = tuple(family_roles)

    def build(
        self,
        active_ids: list[str],
        records: Mapping[str, CharacterRecord],
        edges: list[RawEdge],
    ) -> ClusterLayout:
        """Build clusters for the active characters.

        Args:
            active_ids: Active character ids in their stable traversal order
            records: Character records by id
            edges: Resolved relationship edges

        Returns:
            ClusterLayout with groups, parent assignments and fan-out sub-groups
        """
        layout = ClusterLayout()
        self._add_explicit_families(layout, active_ids, records)
        self._add_inferred_families(layout, active_ids, records, edges)
        self._add_role_clusters(layout, active_ids, edges)
        self._add_fan_out_subgroups(layout, active_ids, edges)

        logger.debug(
            f"Built {len(layout.groups)} groups for {len(active_ids)} characters "
            f"({len(layout.parent_of)} grouped)"
        )
        return layout

    def _add_explicit_families(
        self,
        layout: ClusterLayout,
        active_ids: list[str],
        records: Mapping[str, CharacterRecord],
    ) -> None:
        members_by_surname: dict[str, list[str]] = {}
        for node_id in active_ids:
            surname = records[node_id].surname.strip() if node_id in records else ""
            if is_surname_candidate(surname):
                members_by_surname.setdefault(surname, []).append(node_id)

        for surname, members in members_by_surname.items():
            if len(members) < 2:
                continue
            group = self._add_group(
                layout, f"family:{slugify(surname)}", f"{surname} Family", "family-explicit"
            )
            for node_id in members:
                layout.parent_of[node_id] = group.id

    def _add_inferred_families(
        self,
        layout: ClusterLayout,
        active_ids: list[str],
        records: Mapping[str, CharacterRecord],
        edges: list[RawEdge],
    ) -> None:
        unassigned = [node_id for node_id in active_ids if node_id not in layout.parent_of]
        adjacency = self._adjacency(
            unassigned, [edge for edge in edges if is_family_role(edge.role, self.family_roles)]
        )

        unnamed = 0
        for component in connected_components(unassigned, adjacency):
            if len(component) < 2:
                continue

            surname = self.best_surname(component, records)
            if surname:
                group = self._add_group(
                    layout, f"family:{slugify(surname)}", f"{surname} Family", "family-inferred"
                )
            else:
                unnamed += 1
                group = self._add_group(
                    layout, f"family-group:{unnamed}", f"Family Group {unnamed}", "family-inferred"
                )
            for node_id in component:
                layout.parent_of[node_id] = group.id

    @staticmethod
    def best_surname(members: list[str], records: Mapping[str, CharacterRecord]) -> str | None:
        """The surname held by the most members, if at least two share it.

        Surnames are compared case-insensitively and without the capitalization
        rule of explicit families, so particles like "van Helsing" still count.
        Ties go to the surname whose first holder comes first in `members`.
        """
        spelling: dict[str, str] = {}
        counts: dict[str, int] = {}
        for node_id in members:
            surname = records[node_id].surname.strip() if node_id in records else ""
            if not surname:
                continue
            spelling.setdefault(surname.lower(), surname)
            counts[surname.lower()] = counts.get(surname.lower(), 0) + 1

        best, best_count = None, 1
        for key, count in counts.items():
            if count > best_count:
                best, best_count = key, count
        return spelling[best] if best else None

    def _add_role_clusters(
        self, layout: ClusterLayout, active_ids: list[str], edges: list[RawEdge]
    ) -> None:
        unassigned = [node_id for node_id in active_ids if node_id not in layout.parent_of]
        pool = set(unassigned)

        edges_by_role: dict[str, list[RawEdge]] = {}
        spelling: dict[str, str] = {}
        for edge in edges:
            if is_family_role(edge.role, self.family_roles):
                continue
            if edge.source_id not in pool or edge.target_id not in pool:
                continue
            edges_by_role.setdefault(edge.role.lower(), []).append(edge)
            spelling.setdefault(edge.role.lower(), edge.role)

        # sorted() is stable, so equally busy roles keep their first-seen order
        ordered_roles = sorted(edges_by_role, key=lambda role: -len(edges_by_role[role]))
        claimed: set[str] = set()

        for role in ordered_roles:
            adjacency = self._adjacency(unassigned, edges_by_role[role])
            nodes = [node_id for node_id in unassigned if adjacency.get(node_id)]
            for component in connected_components(nodes, adjacency):
                if len(component) < 2 or claimed.intersection(component):
                    continue
                group = self._add_group(
                    layout, f"role:{slugify(role)}", capitalize(spelling[role]), "role-cluster"
                )
                for node_id in component:
                    layout.parent_of[node_id] = group.id
                claimed.update(component)

    def _add_fan_out_subgroups(
        self, layout: ClusterLayout, active_ids: list[str], edges: list[RawEdge]
    ) -> None:
        targets: dict[str, dict[str, list[str]]] = {}
        spelling: dict[str, str] = {}
        for edge in edges:
            role_targets = targets.setdefault(edge.source_id, {}).setdefault(edge.role.lower(), [])
            if edge.target_id not in role_targets:
                role_targets.append(edge.target_id)
            spelling.setdefault(edge.role.lower(), edge.role)

        for source_id in active_ids:
            for role, role_targets in targets.get(source_id, {}).items():
                if len(role_targets) < 2:
                    continue
                parents = {layout.parent_of.get(target_id) for target_id in role_targets}
                if len(parents) != 1:
                    continue
                shared = parents.pop()

                shared_group = layout.get_group(shared) if shared else None
                if shared_group and self.label_matches_role(shared_group.label, role):
                    # Never wire a node to a group that already contains it
                    if shared not in layout.ancestors(source_id):
                        layout.source_role_subgroups.setdefault(source_id, {})[role] = shared
                    continue

                group = self._add_group(
                    layout,
                    f"subgroup:{slugify(source_id)}:{slugify(role)}",
                    capitalize(spelling[role]),
                    "role-subgroup",
                    parent_id=shared,
                    owner_id=source_id,
                    role=role,
                )
                for target_id in role_targets:
                    layout.parent_of[target_id] = group.id
                layout.source_role_subgroups.setdefault(source_id, {})[role] = group.id

    @staticmethod
    def label_matches_role(label: str, role: str) -> bool:
        """Whether a group label already names a role ("Friends" matches "friend")."""
        stem = role.strip().lower()
        if stem.endswith("s"):
            stem = stem[:-1]
        return bool(stem) and stem in label.lower()

    @staticmethod
    def _adjacency(nodes: list[str], edges: list[RawEdge]) -> dict[str, list[str]]:
        pool = set(nodes)
        adjacency: dict[str, list[str]] = {}
        for edge in edges:
            if edge.source_id in pool and edge.target_id in pool:
                adjacency.setdefault(edge.source_id, []).append(edge.target_id)
                adjacency.setdefault(edge.target_id, []).append(edge.source_id)
        return adjacency

    @staticmethod
    def _add_group(
        layout: ClusterLayout,
        group_id: str,
        label: str,
        kind: GroupKind,
        *,
        parent_id: str | None = None,
        owner_id: str | None = None,
        role: str | None = None,
    ) -> GroupNode:
        existing = {group.id for group in layout.groups}
        unique_id, suffix = group_id, 1
        while unique_id in existing:
            suffix += 1
            unique_id = f"{group_id}-{suffix}"

        group = GroupNode(
            id=unique_id, label=label, kind=kind, parent_id=parent_id, owner_id=owner_id, role=role
        )
        layout.groups.append(group)
        return group


def build_clusters(
    active_ids: list[str],
    records: Mapping[str, CharacterRecord],
    edges: list[RawEdge],
    family_roles: Iterable[str] = FAMILY_ROLE_SYNONYMS,
) -> ClusterLayout:
    """Build the group hierarchy with a one-off ClusterBuilder."""
    return ClusterBuilder(family_roles=family_roles).build(active_ids, records, edges)

"""Building the character map from character records."""

from typing import Iterable

from loguru import logger

from castmap.domain.character import CharacterRecord
from castmap.domain.graph import CharacterMap, GraphNode, RawEdge
from castmap.domain.inverse_pairs import InversePairDictionary
from castmap.graph.clusters import ClusterBuilder
from castmap.graph.collector import collect
from castmap.graph.edges import EdgeFinalizer
from castmap.graph.family import family_terms


def infer_reciprocal_pairs(
    edges: list[RawEdge], known: InversePairDictionary | None = None
) -> InversePairDictionary:
    """Infer inverse roles from characters that mention each other.

    When A lists exactly one role for B and B lists exactly one role for A, the two
    roles are taken as inverse. Pairs contradicting an already learned inverse
    are left out.

    Args:
        edges: Resolved relationship edges
        known: Learned dictionary whose pairs take precedence

    Returns:
        Dictionary holding only the inferred pairs
    """
    known = known or InversePairDictionary()
    roles_by_direction: dict[tuple[str, str], dict[str, str]] = {}
    for edge in edges:
        roles = roles_by_direction.setdefault((edge.source_id, edge.target_id), {})
        roles.setdefault(edge.role.lower(), edge.role)

    inferred = InversePairDictionary()
    for (source_id, target_id), roles in roles_by_direction.items():
        reverse = roles_by_direction.get((target_id, source_id))
        if len(roles) != 1 or not reverse or len(reverse) != 1:
            continue
        (role,), (inverse,) = roles, reverse
        if known.lookup(role) and not known.are_inverse(role, inverse):
            continue
        if known.lookup(inverse) and not known.are_inverse(inverse, role):
            continue
        inferred = inferred.learn(role, inverse)
    return inferred


class CharacterMapBuilder:
    """Builds the renderable character map from parsed character records.

    The build is a pure function of the records and the dictionary snapshot:
    collect edges, cluster the active characters, then finalize the edges.
    """

    def __init__(
        self,
        *,
        extra_family_roles: Iterable[str] = (),
        infer_inverse_pairs: bool = True,
    ):
        """Initialize the builder.

        Args:
            extra_family_roles: Additional (e.g. localized) family role terms
            infer_inverse_pairs: Whether reciprocal mentions count as inverse pairs
                for the build, on top of the learned dictionary
        """
        terms = family_terms(extra_family_roles)
        self.cluster_builder = ClusterBuilder(family_roles=terms)
        self.edge_finalizer = EdgeFinalizer(family_roles=terms)
        self.infer_inverse_pairs = infer_inverse_pairs

    def build(
        self, records: list[CharacterRecord], dictionary: InversePairDictionary
    ) -> CharacterMap:
        """Build the character map.

        Args:
            records: Parsed character records of the whole project
            dictionary: Learned inverse-pair snapshot

        Returns:
            CharacterMap with the active characters, their groups and the drawn edges
        """
        records_by_id: dict[str, CharacterRecord] = {}
        for record in records:
            records_by_id.setdefault(record.id, record)
        collected = collect(records)

        if self.infer_inverse_pairs:
            dictionary = dictionary.merge(infer_reciprocal_pairs(collected.edges, dictionary))

        layout = self.cluster_builder.build(collected.active_ids, records_by_id, collected.edges)
        edges = self.edge_finalizer.finalize(collected.edges, layout, dictionary)

        nodes = []
        for node_id in collected.active_ids:
            record = records_by_id[node_id]
            nodes.append(
                GraphNode(
                    id=node_id,
                    label=record.display_name,
                    parent_id=layout.parent_of.get(node_id),
                    role=record.role,
                )
            )

        logger.info(
            f"Built character map: {len(nodes)} characters, {len(layout.groups)} groups, "
            f"{len(edges)} edges"
        )
        return CharacterMap(nodes=nodes, groups=layout.groups, edges=edges)

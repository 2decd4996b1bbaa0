"""Export of the character map to Cytoscape-style elements for the renderer."""

from typing import Any

from castmap.domain.graph import CharacterMap, GraphEdge
from castmap.graph.family import slugify

GROUP_CLASSES = {
    "family-explicit": "family-group",
    "family-inferred": "family-group inferred",
    "role-cluster": "role-group",
    "role-subgroup": "subgroup",
}


def _edge_element(index: int, edge: GraphEdge) -> dict[str, Any]:
    kind = "relationship-edge" if edge.label else "structural-edge"
    return {
        "data": {
            "id": f"edge-{index}",
            "source": edge.source_id,
            "target": edge.target_id,
            "label": edge.label,
        },
        "classes": f"{kind} {edge.orientation}",
    }

def _node_elements(character_map: CharacterMap) -> list[dict[str, Any]]:
    elements: list[dict[str, Any]] = []

    for group in character_map.groups:
        data = {"id": group.id, "label": group.label}
        if group.parent_id:
            data["parent"] = group.parent_id
        elements.append({"data": data, "classes": GROUP_CLASSES[group.kind]})

    for node in character_map.nodes:
        data = {"id": node.id, "label": node.label}
        if node.parent_id:
            data["parent"] = node.parent_id
        elements.append(
            {"data": data, "classes": f"character-node role-{slugify(node.role or 'side')}"}
        )

    return elements


def to_cytoscape_elements(character_map: CharacterMap) -> list[dict[str, Any]]:
    """Convert the map into a flat element list, groups first so parents exist.

    Character nodes are classed by narrative role (`role-main`, `role-side`, ...).
    Edges carry a `vertical` or `horizontal` class for the layout passes.
    """
    elements = _node_elements(character_map)
    for index, edge in enumerate(character_map.edges):
        elements.append(_edge_element(index, edge))
    return elements


def hierarchical_elements(character_map: CharacterMap) -> list[dict[str, Any]]:
    """Elements taking part in the hierarchical layout pass: all nodes, vertical edges.

    Edge ids match the ones in `to_cytoscape_elements`.
    """
    vertical = {id(edge) for edge in character_map.vertical_edges()}
    elements = _node_elements(character_map)
    for index, edge in enumerate(character_map.edges):
        if id(edge) in vertical:
            elements.append(_edge_element(index, edge))
    return elements

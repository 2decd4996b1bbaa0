"""Character map domain models."""

from typing import Literal, Optional

from pydantic import BaseModel

GroupKind = Literal["family-explicit", "family-inferred", "role-cluster", "role-subgroup"]
Orientation = Literal["vertical", "horizontal"]


class RawEdge(BaseModel):
    """A resolved, directed relationship mention between two characters."""

    source_id: str
    target_id: str
    role: str


class GraphNode(BaseModel):
    """Represents one character on the map."""

    id: str
    label: str
    parent_id: Optional[str] = None
    role: str = ""  # narrative importance tag, for styling only


class GroupNode(BaseModel):
    """Represents a synthetic cluster or sub-group of characters.

    Sub-groups additionally record the character that fans out into them and the
    lower-cased role of that fan-out.
    """

    id: str
    label: str
    kind: GroupKind
    parent_id: Optional[str] = None
    owner_id: Optional[str] = None
    role: Optional[str] = None


class GraphEdge(BaseModel):
    """Represents a drawn edge between two nodes or a node and a group."""

    source_id: str
    target_id: str
    label: str = ""  # empty for structural edges
    orientation: Orientation = "horizontal"


class CharacterMap(BaseModel):
    """Represents the complete, renderable character relationship map."""

    nodes: list[GraphNode] = []
    groups: list[GroupNode] = []
    edges: list[GraphEdge] = []

    def vertical_edges(self) -> list[GraphEdge]:
        """Edges that drive the hierarchical layout pass."""
        return [edge for edge in self.edges if edge.orientation == "vertical"]

    def get_group(self, group_id: str) -> GroupNode | None:
        for group in self.groups:
            if group.id == group_id:
                return group
        return None

    def members_of(self, group_id: str) -> list[str]:
        """Ids of the nodes and groups whose immediate parent is the given group."""
        return [node.id for node in self.nodes if node.parent_id == group_id] + [
            group.id for group in self.groups if group.parent_id == group_id
        ]

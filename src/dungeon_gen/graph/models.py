"""Node and edge models for the dungeon graph."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class RoomType(str, Enum):
    """The kind of room a node stands for."""

    START = "START"
    NORMAL = "NORMAL"
    ELITE = "ELITE"
    REST = "REST"
    SHOP = "SHOP"
    TREASURE = "TREASURE"
    BOSS = "BOSS"


class EdgeType(str, Enum):
    """How an edge may be traversed.

    The builder only creates NORMAL edges.  SECRET and ONE_WAY are set by
    the placement step when it wires portals; the graph stores and
    serialises them but never interprets them.
    """

    NORMAL = "NORMAL"
    SECRET = "SECRET"
    ONE_WAY = "ONE_WAY"


class MinimapPosition(BaseModel):
    """2D minimap coordinate.  ``x`` is centred per floor, ``y`` is the floor."""

    x: float = 0.0
    y: float = 0.0


def make_node_id(floor: int, column: int) -> str:
    """Return the display key for the node at (*floor*, *column*)."""
    return f"F{floor}C{column}"


class DungeonNode(BaseModel):
    """A single room in the dungeon graph.

    ``id`` is an opaque stable key; ``floor`` and ``column`` are the
    authoritative layout fields and are never parsed back out of the id.
    """

    id: str
    floor: int = Field(ge=0)
    """Depth layer.  0 is the entry floor, the last floor holds the boss."""

    column: int = Field(ge=0)
    """Left-to-right position within the floor."""

    room_type: RoomType = RoomType.NORMAL
    minimap_position: MinimapPosition = Field(default_factory=MinimapPosition)

    outgoing_connections: list[str] = Field(default_factory=list)
    """Ids of nodes on the next floor, in connection order, no duplicates."""

    incoming_connections: list[str] = Field(default_factory=list)
    """Ids of nodes on the previous floor, in connection order, no duplicates."""

    # Play state, mutated by the run after generation.
    is_visited: bool = False
    is_revealed: bool = False
    is_cleared: bool = False

    # -- queries -------------------------------------------------------------

    @property
    def is_branch_point(self) -> bool:
        return len(self.outgoing_connections) > 1

    # -- play state ----------------------------------------------------------

    def visit(self) -> None:
        self.is_visited = True
        self.is_revealed = True

    def reveal(self) -> None:
        self.is_revealed = True

    def clear(self) -> None:
        self.is_cleared = True

    def __str__(self) -> str:
        return f"{self.room_type.value}({self.id})"


class DungeonEdge(BaseModel):
    """A directed connection between nodes on adjacent floors."""

    from_node_id: str
    to_node_id: str
    edge_type: EdgeType = EdgeType.NORMAL

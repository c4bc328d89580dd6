"""Graph data model -- rooms, connections and the dungeon graph itself."""

from dungeon_gen.graph.dungeon_graph import DungeonGraph, edges_cross
from dungeon_gen.graph.models import (
    DungeonEdge,
    DungeonNode,
    EdgeType,
    MinimapPosition,
    RoomType,
    make_node_id,
)

__all__ = [
    # models
    "DungeonEdge",
    "DungeonNode",
    "EdgeType",
    "MinimapPosition",
    "RoomType",
    "make_node_id",
    # dungeon_graph
    "DungeonGraph",
    "edges_cross",
]

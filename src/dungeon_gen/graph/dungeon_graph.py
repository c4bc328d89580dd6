"""Dungeon graph -- the full floor-by-floor room layout of one level.

Holds every node (keyed by id) and every directed edge (in creation
order), plus the graph-level metadata the rest of a run needs: the seed,
stage number, floor count and the entry / boss / current node ids.

Content handles chosen after generation (room templates, placed scene
objects) live in side tables keyed by node id rather than on the nodes
themselves, so the topology stays free of renderer types.
"""

from __future__ import annotations

import logging
from collections import Counter, deque
from typing import Any

from pydantic import BaseModel, Field

from dungeon_gen.graph.models import DungeonEdge, DungeonNode, EdgeType, RoomType

logger = logging.getLogger(__name__)


def edges_cross(
    from_a: int, to_a: int, from_b: int, to_b: int,
) -> bool:
    """Return True if edges ``A->B`` and ``C->D`` cross in column order.

    All four arguments are columns; both edges must span the same floor
    transition.  Edges sharing an endpoint never cross.
    """
    return (from_a < from_b and to_a > to_b) or (from_a > from_b and to_a < to_b)


class DungeonGraph(BaseModel):
    """Nodes, edges and metadata of a generated dungeon level."""

    nodes: dict[str, DungeonNode] = Field(default_factory=dict)
    edges: list[DungeonEdge] = Field(default_factory=list)
    """All edges in creation order."""

    entry_node_id: str = ""
    boss_node_id: str = ""
    current_node_id: str = ""
    """Player location.  Reset to the entry node by :meth:`reset_state`."""

    seed: int = 0
    total_floors: int = 0
    stage_number: int = 0

    room_data: dict[str, Any] = Field(default_factory=dict, exclude=True)
    """Node id -> content template chosen by the room selector."""

    room_instances: dict[str, Any] = Field(default_factory=dict, exclude=True)
    """Node id -> object created by the placement collaborator."""

    # -- properties ----------------------------------------------------------

    @property
    def entry_node(self) -> DungeonNode | None:
        return self.get_node(self.entry_node_id)

    @property
    def boss_node(self) -> DungeonNode | None:
        return self.get_node(self.boss_node_id)

    @property
    def current_node(self) -> DungeonNode | None:
        return self.get_node(self.current_node_id)

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    # -- node management -----------------------------------------------------

    def add_node(self, node: DungeonNode) -> None:
        """Add *node*, ignoring nodes without an id and duplicate ids."""
        if not node.id:
            logger.error("Refusing to add node without an id")
            return
        if node.id in self.nodes:
            logger.warning("Node %s already exists", node.id)
            return
        self.nodes[node.id] = node

    def get_node(self, node_id: str | None) -> DungeonNode | None:
        """Return the node for *node_id*, or ``None``."""
        if not node_id:
            return None
        return self.nodes.get(node_id)

    def get_nodes_at_floor(self, floor: int) -> list[DungeonNode]:
        """Return the nodes of *floor* ordered by column."""
        return sorted(
            (n for n in self.nodes.values() if n.floor == floor),
            key=lambda n: n.column,
        )

    def get_nodes_by_type(self, room_type: RoomType) -> list[DungeonNode]:
        return [n for n in self.nodes.values() if n.room_type == room_type]

    # -- edge management -----------------------------------------------------

    def add_edge(self, edge: DungeonEdge) -> None:
        """Append *edge* and record the connection on both endpoints."""
        self.edges.append(edge)

        from_node = self.get_node(edge.from_node_id)
        to_node = self.get_node(edge.to_node_id)
        if from_node is not None and edge.to_node_id not in from_node.outgoing_connections:
            from_node.outgoing_connections.append(edge.to_node_id)
        if to_node is not None and edge.from_node_id not in to_node.incoming_connections:
            to_node.incoming_connections.append(edge.from_node_id)

    def connect(
        self, from_id: str, to_id: str, edge_type: EdgeType = EdgeType.NORMAL,
    ) -> None:
        """Shorthand for adding an edge between two node ids."""
        self.add_edge(DungeonEdge(from_node_id=from_id, to_node_id=to_id, edge_type=edge_type))

    def has_edge(self, from_id: str, to_id: str) -> bool:
        return any(
            e.from_node_id == from_id and e.to_node_id == to_id for e in self.edges
        )

    # -- adjacency -----------------------------------------------------------

    def get_adjacent_nodes(self, node_id: str) -> list[DungeonNode]:
        """Nodes reachable in one step from *node_id* (outgoing)."""
        node = self.get_node(node_id)
        if node is None:
            return []
        return [n for n in map(self.get_node, node.outgoing_connections) if n is not None]

    def get_previous_nodes(self, node_id: str) -> list[DungeonNode]:
        """Nodes with an edge into *node_id* (incoming)."""
        node = self.get_node(node_id)
        if node is None:
            return []
        return [n for n in map(self.get_node, node.incoming_connections) if n is not None]

    def get_unvisited_adjacent_nodes(self, node_id: str) -> list[DungeonNode]:
        return [n for n in self.get_adjacent_nodes(node_id) if not n.is_visited]

    # -- path finding --------------------------------------------------------

    def get_path(self, start_id: str, end_id: str) -> list[DungeonNode]:
        """Shortest path from *start_id* to *end_id* (BFS).

        Returns the nodes along the path including both ends, or an empty
        list if either node is missing or *end_id* is unreachable.
        """
        start = self.get_node(start_id)
        if start is None or self.get_node(end_id) is None:
            return []
        if start_id == end_id:
            return [start]

        parents: dict[str, str] = {}
        visited = {start_id}
        queue: deque[str] = deque([start_id])

        while queue:
            current = queue.popleft()
            if current == end_id:
                break
            for next_id in self.nodes[current].outgoing_connections:
                if next_id in visited or next_id not in self.nodes:
                    continue
                visited.add(next_id)
                parents[next_id] = current
                queue.append(next_id)
        else:
            return []

        path = [end_id]
        while path[-1] != start_id:
            path.append(parents[path[-1]])
        return [self.nodes[nid] for nid in reversed(path)]

    def has_path_to_boss(self) -> bool:
        return len(self.get_path(self.entry_node_id, self.boss_node_id)) > 0

    def get_all_reachable_nodes(self, start_id: str) -> set[str]:
        """Ids of every node reachable from *start_id*, itself included."""
        reachable: set[str] = set()
        stack = [start_id]

        while stack:
            current = stack.pop()
            if current in reachable:
                continue
            node = self.get_node(current)
            if node is None:
                continue
            reachable.add(current)
            stack.extend(n for n in node.outgoing_connections if n not in reachable)

        return reachable

    def get_shortest_path_length(self) -> int:
        """Number of nodes on the shortest entry -> boss path (0 if none)."""
        return len(self.get_path(self.entry_node_id, self.boss_node_id))

    # -- crossing checks -----------------------------------------------------

    def would_cross_existing_edge(self, from_id: str, to_id: str) -> bool:
        """Return True if a ``from_id -> to_id`` edge would cross an
        existing edge leaving the same floor.  Unknown ids never cross."""
        source = self.get_node(from_id)
        target = self.get_node(to_id)
        if source is None or target is None:
            return False
        for edge in self.edges:
            edge_from = self.get_node(edge.from_node_id)
            edge_to = self.get_node(edge.to_node_id)
            if edge_from is None or edge_to is None:
                continue
            if edge_from.floor != source.floor:
                continue
            if edges_cross(source.column, target.column, edge_from.column, edge_to.column):
                return True
        return False

    def find_crossing_edges(self) -> list[tuple[DungeonEdge, DungeonEdge]]:
        """Return every pair of edges that cross on the same floor transition."""
        by_floor: dict[int, list[tuple[DungeonEdge, int, int]]] = {}
        for edge in self.edges:
            edge_from = self.get_node(edge.from_node_id)
            edge_to = self.get_node(edge.to_node_id)
            if edge_from is None or edge_to is None:
                continue
            by_floor.setdefault(edge_from.floor, []).append(
                (edge, edge_from.column, edge_to.column)
            )

        crossings: list[tuple[DungeonEdge, DungeonEdge]] = []
        for floor_edges in by_floor.values():
            for i, (edge_a, from_a, to_a) in enumerate(floor_edges):
                for edge_b, from_b, to_b in floor_edges[i + 1:]:
                    if edges_cross(from_a, to_a, from_b, to_b):
                        crossings.append((edge_a, edge_b))
        return crossings

    # -- validation ----------------------------------------------------------

    def validate_graph(self) -> tuple[bool, list[str]]:
        """Check the structural invariants of a finished graph.

        Checks:
        - entry and boss nodes exist, and are the only START / BOSS rooms
        - the entry node is alone on floor 0, the boss alone on the last floor
        - a path leads from entry to boss
        - every node is reachable from entry
        - every non-entry node has an incoming connection and every
          non-boss node an outgoing one
        - no two edges of the same floor transition cross

        Returns
        -------
        tuple[bool, list[str]]
            ``(ok, errors)`` where *errors* is empty when *ok* is True.
        """
        errors: list[str] = []
        entry = self.entry_node
        boss = self.boss_node

        if entry is None:
            errors.append("Entry node not found")
        if boss is None:
            errors.append("Boss node not found")

        starts = self.get_nodes_by_type(RoomType.START)
        if len(starts) != 1:
            errors.append(f"Expected exactly one START node, found {len(starts)}")
        bosses = self.get_nodes_by_type(RoomType.BOSS)
        if len(bosses) != 1:
            errors.append(f"Expected exactly one BOSS node, found {len(bosses)}")

        if entry is not None and len(self.get_nodes_at_floor(entry.floor)) != 1:
            errors.append(f"Entry node {entry.id} is not alone on floor {entry.floor}")
        if boss is not None and len(self.get_nodes_at_floor(boss.floor)) != 1:
            errors.append(f"Boss node {boss.id} is not alone on floor {boss.floor}")

        if entry is not None and boss is not None and not self.has_path_to_boss():
            errors.append("No path from Entry to Boss")

        reachable = self.get_all_reachable_nodes(self.entry_node_id)
        unreachable = [nid for nid in self.nodes if nid not in reachable]
        if unreachable:
            errors.append(f"Unreachable nodes: {', '.join(unreachable)}")

        for node in self.nodes.values():
            if node.id != self.entry_node_id and not node.incoming_connections:
                errors.append(f"Node {node.id} has no incoming connections")
            if node.id != self.boss_node_id and not node.outgoing_connections:
                errors.append(f"Node {node.id} has no outgoing connections")

        for edge_a, edge_b in self.find_crossing_edges():
            errors.append(
                f"Edge {edge_a.from_node_id}->{edge_a.to_node_id} crosses "
                f"{edge_b.from_node_id}->{edge_b.to_node_id}"
            )

        return len(errors) == 0, errors

    # -- play state ----------------------------------------------------------

    def set_current_node(self, node_id: str) -> None:
        """Move the player to *node_id*, visiting it and revealing its exits."""
        self.current_node_id = node_id
        node = self.get_node(node_id)
        if node is None:
            return
        node.visit()
        for adjacent in self.get_adjacent_nodes(node_id):
            adjacent.reveal()

    def reset_state(self) -> None:
        """Clear all play flags and put the player back on the entry node."""
        for node in self.nodes.values():
            node.is_visited = False
            node.is_revealed = False
            node.is_cleared = False
        self.current_node_id = self.entry_node_id
        if self.entry_node is not None:
            self.set_current_node(self.entry_node.id)

    # -- content association -------------------------------------------------

    def set_room_data(self, node_id: str, data: Any) -> None:
        self.room_data[node_id] = data

    def get_room_data(self, node_id: str) -> Any | None:
        return self.room_data.get(node_id)

    # -- statistics ----------------------------------------------------------

    def get_room_type_stats(self) -> dict[RoomType, int]:
        """Count nodes per room type (types with no nodes are omitted)."""
        return dict(Counter(n.room_type for n in self.nodes.values()))

    def get_branch_point_count(self) -> int:
        return sum(1 for n in self.nodes.values() if n.is_branch_point)

    # -- serialisation -------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """JSON-compatible dump of the topology and metadata."""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DungeonGraph:
        return cls.model_validate(data)

    # -- debug output --------------------------------------------------------

    def __str__(self) -> str:
        return (
            f"DungeonGraph(stage={self.stage_number}, seed={self.seed}, "
            f"nodes={self.node_count}, edges={self.edge_count}, "
            f"floors={self.total_floors})"
        )

    def to_detailed_string(self) -> str:
        """Human-readable multi-line summary for logs and the CLI."""
        lines = [
            str(self),
            f"Entry: {self.entry_node_id}, Boss: {self.boss_node_id}, "
            f"Current: {self.current_node_id}",
            "--- Nodes by Floor ---",
        ]
        for floor in range(self.total_floors):
            floor_nodes = self.get_nodes_at_floor(floor)
            if not floor_nodes:
                continue
            lines.append(f"Floor {floor}: " + ", ".join(str(n) for n in floor_nodes))

        lines.append("--- Edges ---")
        for edge in self.edges:
            lines.append(f"  {edge.from_node_id} -> {edge.to_node_id}")

        lines.append("--- Room Type Stats ---")
        for room_type, count in self.get_room_type_stats().items():
            lines.append(f"  {room_type.value}: {count}")

        return "\n".join(lines)

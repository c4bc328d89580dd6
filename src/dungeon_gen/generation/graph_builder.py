"""Graph builder -- lays out a floor-based dungeon graph from rules and a seed.

Generation runs in fixed phases, every random decision drawn from one
seeded :class:`GameRNG`:

1. Pick the floor count from ``[min_path_length, max_path_length]`` (at least 4).
2. Create each floor's nodes left to right.
3. Connect every floor to the next by nearest column, then add optional
   non-crossing branch edges.
4. Assign room types: START / BOSS, rest-or-shop before the boss,
   weighted specials in between, then the forced elite and the optional
   treasure room.
5. Record entry / boss ids, validate, and repair a missing entry -> boss
   path by chaining each floor's first node.

Imperfect layouts are logged, never raised.
"""

from __future__ import annotations

import logging

from dungeon_gen.core.rng import GameRNG
from dungeon_gen.generation.rules import DungeonConfig, RoomGenerationRules
from dungeon_gen.graph.dungeon_graph import DungeonGraph
from dungeon_gen.graph.models import DungeonNode, MinimapPosition, RoomType, make_node_id

logger = logging.getLogger(__name__)

# Entry + one middle floor + rest floor + boss.
MIN_TOTAL_FLOORS = 4

# Probability of accepting each eligible branch edge once the branch
# pass itself has been triggered.
_BRANCH_EDGE_CHANCE = 0.5


class GraphBuilder:
    """Builds a :class:`DungeonGraph` in a single synchronous pass.

    The builder keeps per-run state on the instance, so one builder must
    not be shared between concurrent runs.
    """

    def __init__(self) -> None:
        self._rng: GameRNG = GameRNG(0)
        self._rules: RoomGenerationRules = RoomGenerationRules()
        self._graph: DungeonGraph = DungeonGraph()
        self._nodes_by_floor: list[list[DungeonNode]] = []
        self._total_floors = 0

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def generate_graph(
        self,
        config: DungeonConfig | None,
        seed: int,
        rng: GameRNG | None = None,
    ) -> DungeonGraph | None:
        """Generate a dungeon graph.

        Parameters
        ----------
        config:
            Dungeon configuration.  Must carry ``generation_rules``.
        seed:
            Seed for the run.  *rng* (or a fresh ``GameRNG``) is re-seeded
            with it before the first draw.
        rng:
            Optional stream to draw from.  Passing the generator's own
            handle lets the room selector continue the same sequence.

        Returns
        -------
        DungeonGraph | None
            The validated (or best-effort repaired) graph, or ``None`` if
            the configuration is missing.
        """
        if config is None or config.generation_rules is None:
            logger.error("DungeonConfig or its generation_rules is missing")
            return None

        if rng is None:
            rng = GameRNG(seed)
        else:
            rng.set_seed(seed)

        self._rng = rng
        self._rules = config.generation_rules
        self._graph = DungeonGraph(seed=seed, stage_number=config.stage_number)
        self._nodes_by_floor = []

        self._total_floors = self._calculate_total_floors()
        self._graph.total_floors = self._total_floors

        logger.info(
            "Generating graph: seed=%d floors=%d", seed, self._total_floors,
        )

        self._generate_nodes_for_all_floors()
        self._connect_floors()
        self._assign_room_types()
        self._set_special_nodes()
        self._validate_and_fix()

        logger.info(
            "Graph generated: nodes=%d edges=%d",
            self._graph.node_count, self._graph.edge_count,
        )
        logger.debug("%s", self._graph.to_detailed_string())

        return self._graph

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def _calculate_total_floors(self) -> int:
        floors = self._rng.range(
            self._rules.min_path_length, self._rules.max_path_length + 1,
        )
        return max(floors, MIN_TOTAL_FLOORS)

    def _generate_nodes_for_all_floors(self) -> None:
        for floor in range(self._total_floors):
            node_count = self._get_node_count_for_floor(floor)
            x_offset = (node_count - 1) / 2
            floor_nodes: list[DungeonNode] = []

            for column in range(node_count):
                node = DungeonNode(
                    id=make_node_id(floor, column),
                    floor=floor,
                    column=column,
                    minimap_position=MinimapPosition(x=column - x_offset, y=floor),
                )
                self._graph.add_node(node)
                floor_nodes.append(node)

            self._nodes_by_floor.append(floor_nodes)
            logger.debug("Floor %d: %d nodes", floor, node_count)

    def _get_node_count_for_floor(self, floor: int) -> int:
        max_nodes = self._rules.max_nodes_per_floor

        # Entry and boss floors hold a single node.
        if floor == 0 or floor == self._total_floors - 1:
            return 1

        # The floor before the boss holds one or two rest / shop rooms.
        if floor == self._total_floors - 2:
            return self._rng.range(1, min(2, max_nodes) + 1)

        if self._rng.chance(self._rules.branching_factor):
            return self._rng.range(min(2, max_nodes), max_nodes + 1)
        return self._rng.range(self._rules.min_nodes_per_floor, max_nodes + 1)

    # ------------------------------------------------------------------
    # Connections
    # ------------------------------------------------------------------

    def _connect_floors(self) -> None:
        for floor in range(self._total_floors - 1):
            self._connect_to_next_floor(
                self._nodes_by_floor[floor], self._nodes_by_floor[floor + 1],
            )

    def _connect_to_next_floor(
        self,
        current_floor: list[DungeonNode],
        next_floor: list[DungeonNode],
    ) -> None:
        # Every node gets at least one way forward...
        for current in current_floor:
            closest = self._get_closest_node(current, next_floor)
            if closest is not None and not self._graph.has_edge(current.id, closest.id):
                self._graph.connect(current.id, closest.id)

        # ...and every node on the next floor at least one way in.
        for nxt in next_floor:
            if nxt.incoming_connections:
                continue
            closest = self._get_closest_node(nxt, current_floor)
            if closest is not None:
                self._graph.connect(closest.id, nxt.id)

        self._add_branch_connections(current_floor, next_floor)

    @staticmethod
    def _get_closest_node(
        node: DungeonNode, candidates: list[DungeonNode],
    ) -> DungeonNode | None:
        """Nearest candidate by column distance; the leftmost wins ties."""
        if not candidates:
            return None
        return min(candidates, key=lambda c: abs(c.column - node.column))

    def _add_branch_connections(
        self,
        current_floor: list[DungeonNode],
        next_floor: list[DungeonNode],
    ) -> None:
        if not self._rng.chance(self._rules.branching_factor):
            return

        max_branches = self._rules.max_branches
        for current in current_floor:
            for nxt in next_floor:
                if len(current.outgoing_connections) >= max_branches:
                    break
                if self._graph.has_edge(current.id, nxt.id):
                    continue
                if abs(current.column - nxt.column) > 1:
                    continue
                if self._graph.would_cross_existing_edge(current.id, nxt.id):
                    continue
                if self._rng.chance(_BRANCH_EDGE_CHANCE):
                    self._graph.connect(current.id, nxt.id)
                    logger.debug("Branch edge %s -> %s", current.id, nxt.id)

    # ------------------------------------------------------------------
    # Room types
    # ------------------------------------------------------------------

    def _assign_room_types(self) -> None:
        self._nodes_by_floor[0][0].room_type = RoomType.START
        self._nodes_by_floor[-1][0].room_type = RoomType.BOSS

        if self._rules.rest_room_before_boss and self._total_floors >= 3:
            for node in self._nodes_by_floor[self._total_floors - 2]:
                node.room_type = RoomType.REST if self._rng.chance(0.5) else RoomType.SHOP

        self._assign_middle_floor_types()
        self._ensure_minimum_elite_rooms()
        self._place_treasure_room()

    def _assign_middle_floor_types(self) -> None:
        normal_since_special = 0
        min_gap = self._rules.min_normal_rooms_between_special

        for floor in range(1, self._total_floors - 2):
            for node in self._nodes_by_floor[floor]:
                if node.room_type != RoomType.NORMAL:
                    continue

                if normal_since_special < min_gap:
                    normal_since_special += 1
                    continue

                special = self._rules.get_random_special_room_type(self._rng)
                if special != RoomType.NORMAL:
                    node.room_type = special
                    normal_since_special = 0
                else:
                    normal_since_special += 1

    def _ensure_minimum_elite_rooms(self) -> None:
        if self._graph.get_nodes_by_type(RoomType.ELITE) or self._total_floors < 5:
            return
        node = self._first_normal_node(2, self._total_floors - 3)
        if node is not None:
            node.room_type = RoomType.ELITE
            logger.debug("Promoted %s to ELITE", node.id)

    def _place_treasure_room(self) -> None:
        if not self._rng.chance(self._rules.treasure_room_chance):
            return
        node = self._first_normal_node(self._total_floors // 2, self._total_floors - 2)
        if node is not None:
            node.room_type = RoomType.TREASURE
            logger.debug("Promoted %s to TREASURE", node.id)

    def _first_normal_node(self, first_floor: int, end_floor: int) -> DungeonNode | None:
        """First NORMAL node scanning floors ``[first_floor, end_floor)`` left to right."""
        for floor in range(first_floor, end_floor):
            for node in self._nodes_by_floor[floor]:
                if node.room_type == RoomType.NORMAL:
                    return node
        return None

    # ------------------------------------------------------------------
    # Bookkeeping and validation
    # ------------------------------------------------------------------

    def _set_special_nodes(self) -> None:
        entry = self._nodes_by_floor[0][0]
        self._graph.entry_node_id = entry.id
        self._graph.current_node_id = entry.id
        self._graph.boss_node_id = self._nodes_by_floor[-1][0].id

    def _validate_and_fix(self) -> None:
        ok, errors = self._graph.validate_graph()
        if ok:
            logger.debug("Graph validation passed")
            return

        logger.warning("Graph validation failed: %s", "; ".join(errors))

        if not self._graph.has_path_to_boss():
            logger.warning("No entry -> boss path, forcing one")
            self._force_path_to_boss()

        ok, remaining = self._graph.validate_graph()
        if ok:
            logger.info("Graph validation passed after repair")
        else:
            logger.warning(
                "Graph still invalid after repair: %s", "; ".join(remaining),
            )

    def _force_path_to_boss(self) -> None:
        """Chain the first node of every floor to the first node of the next."""
        for floor in range(self._total_floors - 1):
            current = self._nodes_by_floor[floor][0]
            nxt = self._nodes_by_floor[floor + 1][0]
            if not self._graph.has_edge(current.id, nxt.id):
                self._graph.connect(current.id, nxt.id)
                logger.debug("Forced edge %s -> %s", current.id, nxt.id)

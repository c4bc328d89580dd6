"""Room selector -- picks a content template for each node of a graph.

Templates are matched by room type (falling back to NORMAL templates) and
then by how close their difficulty is to ``floor + 1``.  The pick is
drawn at random from the three closest candidates so repeated runs over
different seeds still show some variety.
"""

from __future__ import annotations

import logging
from typing import Iterable

from dungeon_gen.content.templates import RoomTemplate
from dungeon_gen.core.rng import GameRNG
from dungeon_gen.graph.dungeon_graph import DungeonGraph
from dungeon_gen.graph.models import RoomType

logger = logging.getLogger(__name__)

MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 10
_TOP_CANDIDATES = 3


def target_difficulty(floor: int) -> int:
    """Difficulty a template should have on *floor*, clamped to 1-10."""
    return max(MIN_DIFFICULTY, min(floor + 1, MAX_DIFFICULTY))


class RoomSelector:
    """Chooses :class:`RoomTemplate` entries for dungeon nodes.

    Parameters
    ----------
    templates:
        The template pool.  Grouped by room type once, at construction.
    rng:
        Stream used for tie-breaking and the final pick.  Pass the same
        handle the builder used to keep a whole run reproducible.
    """

    def __init__(self, templates: Iterable[RoomTemplate], rng: GameRNG) -> None:
        self.rng = rng
        self._by_type: dict[RoomType, list[RoomTemplate]] = {}
        for template in templates:
            self._by_type.setdefault(template.room_type, []).append(template)
        logger.debug("Template cache built for %d room types", len(self._by_type))

    def select(self, room_type: RoomType, floor: int) -> RoomTemplate | None:
        """Pick a template for a node of *room_type* on *floor*.

        Returns ``None`` (after logging a warning) if neither *room_type*
        nor NORMAL has any template.
        """
        candidates = self._by_type.get(room_type)
        if not candidates:
            candidates = self._by_type.get(RoomType.NORMAL)
            if not candidates:
                logger.warning(
                    "No template for %s on floor %d and no NORMAL fallback",
                    room_type.value, floor,
                )
                return None

        target = target_difficulty(floor)
        ranked = sorted(
            candidates,
            key=lambda t, _rng=self.rng: (abs(t.difficulty - target), _rng.uniform01()),
        )
        index = self.rng.range(0, min(_TOP_CANDIDATES, len(ranked)))
        return ranked[index]

    def assign_templates(
        self,
        graph: DungeonGraph,
        default_template: RoomTemplate | None = None,
    ) -> int:
        """Select a template for every node and store it on *graph*.

        Nodes are visited floor by floor, left to right, so the draw order
        does not depend on dict ordering.  Nodes without a match receive
        *default_template* when one is given.

        Returns the number of nodes that received a template.
        """
        assigned = 0
        for floor in range(graph.total_floors):
            for node in graph.get_nodes_at_floor(floor):
                template = self.select(node.room_type, node.floor)
                if template is None:
                    logger.warning("Node %s has no matching template", node.id)
                    template = default_template
                if template is None:
                    continue
                graph.set_room_data(node.id, template)
                assigned += 1
        return assigned

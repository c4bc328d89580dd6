"""Dungeon generator -- facade combining the graph builder and room selector.

One ``DungeonGenerator`` owns one :class:`GameRNG`.  Because interleaved
draws from two runs would break reproducibility for both, the generator
refuses to start a run while another is in flight instead of queueing it.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from dungeon_gen.content.selector import RoomSelector
from dungeon_gen.core.rng import GameRNG
from dungeon_gen.generation.graph_builder import GraphBuilder
from dungeon_gen.generation.rules import DungeonConfig
from dungeon_gen.graph.dungeon_graph import DungeonGraph

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]
GeneratedCallback = Callable[[DungeonGraph], None]


class GenerationInProgressError(RuntimeError):
    """Raised when a run is requested while another run is still going."""


class DungeonGenerator:
    """Generates complete dungeon levels: topology plus room templates.

    Parameters
    ----------
    rng:
        Stream shared by the builder and the selector.  A fresh one is
        created if omitted; it is re-seeded at the start of every run.
    on_progress:
        Called with 0.0, 0.1, 0.5, 0.9 and 1.0 as a run advances.
    on_generated:
        Called with the finished graph at the end of a successful run.
    """

    def __init__(
        self,
        rng: GameRNG | None = None,
        on_progress: ProgressCallback | None = None,
        on_generated: GeneratedCallback | None = None,
    ) -> None:
        self.rng = rng if rng is not None else GameRNG(0)
        self.builder = GraphBuilder()
        self.on_progress = on_progress
        self.on_generated = on_generated
        self.current_graph: DungeonGraph | None = None
        self._is_generating = False

    @property
    def is_generating(self) -> bool:
        return self._is_generating

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def generate(
        self, config: DungeonConfig | None, seed: int | None = None,
    ) -> DungeonGraph | None:
        """Generate a dungeon synchronously.

        Returns ``None`` if *config* is unusable.  Raises
        :class:`GenerationInProgressError` if a run is already in flight.
        """
        if config is None:
            logger.error("DungeonConfig is missing")
            return None

        self._begin()
        try:
            self._report(0.0)
            actual_seed = self._resolve_seed(seed)
            self._report(0.1)

            graph = self.builder.generate_graph(config, actual_seed, rng=self.rng)
            if graph is None:
                logger.error("Graph generation failed for %r", config.dungeon_name)
                return None
            self._report(0.5)

            self._furnish(config, graph)
            self._report(0.9)

            return self._finish(graph)
        finally:
            self._is_generating = False

    async def generate_async(
        self, config: DungeonConfig | None, seed: int | None = None,
    ) -> DungeonGraph | None:
        """Generate a dungeon, yielding to the event loop between phases.

        The construction itself is not split; the coroutine only gives
        other tasks a turn before graph building and before room
        selection.  Same return and error behavior as :meth:`generate`.
        """
        if config is None:
            logger.error("DungeonConfig is missing")
            return None

        self._begin()
        try:
            self._report(0.0)
            actual_seed = self._resolve_seed(seed)
            self._report(0.1)

            await asyncio.sleep(0)
            graph = self.builder.generate_graph(config, actual_seed, rng=self.rng)
            if graph is None:
                logger.error("Graph generation failed for %r", config.dungeon_name)
                return None
            self._report(0.5)

            await asyncio.sleep(0)
            self._furnish(config, graph)
            self._report(0.9)

            return self._finish(graph)
        finally:
            self._is_generating = False

    def generate_graph_only(
        self, config: DungeonConfig | None, seed: int,
    ) -> DungeonGraph | None:
        """Build the topology without selecting templates or touching
        :attr:`current_graph`."""
        if config is None or config.generation_rules is None:
            logger.error("DungeonConfig or its generation_rules is missing")
            return None

        self._begin()
        try:
            return self.builder.generate_graph(config, seed, rng=self.rng)
        finally:
            self._is_generating = False

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def clear(self) -> None:
        """Forget the current dungeon."""
        self.current_graph = None
        logger.debug("Dungeon cleared")

    def validate_current_graph(self) -> tuple[bool, list[str]]:
        if self.current_graph is None:
            return False, ["No graph generated"]
        return self.current_graph.validate_graph()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _begin(self) -> None:
        if self._is_generating:
            logger.warning("Generation already in progress, rejecting new run")
            raise GenerationInProgressError("A dungeon is already being generated")
        self._is_generating = True

    def _resolve_seed(self, seed: int | None) -> int:
        if seed is not None:
            return seed
        seed = GameRNG.generate_random_seed()
        logger.info("No seed supplied, using random seed %d", seed)
        return seed

    def _furnish(self, config: DungeonConfig, graph: DungeonGraph) -> None:
        # An empty pool still runs the selector so every node falls back
        # to the default template.
        if not config.room_templates:
            logger.warning("No room templates for %r", config.dungeon_name)
        selector = RoomSelector(config.room_templates, self.rng)
        assigned = selector.assign_templates(graph, config.default_template)
        logger.debug("Assigned templates to %d/%d nodes", assigned, graph.node_count)

    def _finish(self, graph: DungeonGraph) -> DungeonGraph:
        graph.reset_state()
        self.current_graph = graph
        self._report(1.0)
        logger.info(
            "Dungeon generated: seed=%d nodes=%d", graph.seed, graph.node_count,
        )
        if self.on_generated is not None:
            self.on_generated(graph)
        return graph

    def _report(self, progress: float) -> None:
        if self.on_progress is not None:
            self.on_progress(progress)

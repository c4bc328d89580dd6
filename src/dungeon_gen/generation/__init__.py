"""Generation module -- rules, graph builder and the generator facade."""

from dungeon_gen.generation.generator import (
    DungeonGenerator,
    GenerationInProgressError,
)
from dungeon_gen.generation.graph_builder import MIN_TOTAL_FLOORS, GraphBuilder
from dungeon_gen.generation.rules import (
    DungeonConfig,
    RoomGenerationRules,
    load_config,
)

__all__ = [
    "DungeonConfig",
    "DungeonGenerator",
    "GenerationInProgressError",
    "GraphBuilder",
    "MIN_TOTAL_FLOORS",
    "RoomGenerationRules",
    "load_config",
]

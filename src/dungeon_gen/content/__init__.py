"""Room content -- templates, their registry and the per-node selector."""

from dungeon_gen.content.registry import TemplateRegistry
from dungeon_gen.content.selector import RoomSelector, target_difficulty
from dungeon_gen.content.templates import RoomTemplate

__all__ = [
    "RoomSelector",
    "RoomTemplate",
    "TemplateRegistry",
    "target_difficulty",
]

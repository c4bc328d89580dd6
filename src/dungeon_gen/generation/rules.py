"""Generation rules and dungeon configuration.

Both are Pydantic models so they can be loaded straight from JSON and
reject out-of-range values up front.  A ``DungeonConfig`` without
``generation_rules`` is still constructible: the builder reports it as a
configuration error and produces no graph.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from dungeon_gen.content.templates import RoomTemplate
from dungeon_gen.core.rng import GameRNG
from dungeon_gen.graph.models import RoomType

logger = logging.getLogger(__name__)

_PROJECT_ROOT = Path(__file__).resolve().parents[3]  # src/dungeon_gen/generation -> root
_DEFAULT_CONFIG_PATH = _PROJECT_ROOT / "data" / "dungeons" / "default.json"

# Weights roughly follow the old per-type ratios (elite 15%, shop 10%,
# rest 10%); the NORMAL share lets a roll decline to place a special room.
_DEFAULT_SPECIAL_WEIGHTS: dict[RoomType, float] = {
    RoomType.ELITE: 15.0,
    RoomType.SHOP: 10.0,
    RoomType.REST: 10.0,
    RoomType.NORMAL: 65.0,
}

_FIXED_TYPES = {RoomType.START, RoomType.BOSS}


class RoomGenerationRules(BaseModel):
    """Knobs controlling the shape of a generated dungeon graph."""

    min_path_length: int = Field(default=6, ge=1)
    """Minimum number of floors (entry and boss floors included)."""

    max_path_length: int = Field(default=8, ge=1)

    min_nodes_per_floor: int = Field(default=1, ge=1)
    max_nodes_per_floor: int = Field(default=3, ge=1)

    branching_factor: float = Field(default=0.4, ge=0.0, le=1.0)
    """Probability used both to widen a floor and to add extra edges."""

    max_branches: int = Field(default=2, ge=1)
    """Upper bound on outgoing edges added per node by the branch pass."""

    rest_room_before_boss: bool = True
    min_normal_rooms_between_special: int = Field(default=1, ge=0)
    treasure_room_chance: float = Field(default=0.5, ge=0.0, le=1.0)

    special_room_weights: dict[RoomType, float] = Field(
        default_factory=lambda: dict(_DEFAULT_SPECIAL_WEIGHTS)
    )
    """Weighted table for middle-floor rooms, walked in insertion order."""

    @field_validator("special_room_weights")
    @classmethod
    def _validate_weights(cls, v: dict[RoomType, float]) -> dict[RoomType, float]:
        for room_type, weight in v.items():
            if room_type in _FIXED_TYPES:
                raise ValueError(f"{room_type.value} rooms cannot be weighted")
            if weight < 0:
                raise ValueError(
                    f"Weight for {room_type.value} must be >= 0, got {weight}"
                )
        return v

    @model_validator(mode="after")
    def _validate_ranges(self) -> RoomGenerationRules:
        if self.min_path_length > self.max_path_length:
            raise ValueError(
                f"min_path_length ({self.min_path_length}) exceeds "
                f"max_path_length ({self.max_path_length})"
            )
        if self.min_nodes_per_floor > self.max_nodes_per_floor:
            raise ValueError(
                f"min_nodes_per_floor ({self.min_nodes_per_floor}) exceeds "
                f"max_nodes_per_floor ({self.max_nodes_per_floor})"
            )
        return self

    def get_random_special_room_type(self, rng: GameRNG) -> RoomType:
        """Roll a room type from :attr:`special_room_weights`.

        Only strictly positive weights take part.  An empty or all-zero
        table yields NORMAL without consuming a draw.
        """
        available = [(t, w) for t, w in self.special_room_weights.items() if w > 0]
        total = sum(w for _, w in available)
        if total <= 0:
            return RoomType.NORMAL

        roll = rng.uniform01() * total
        cumulative = 0.0
        for room_type, weight in available:
            cumulative += weight
            if roll < cumulative:
                return room_type

        # Float rounding can leave roll == total.
        return available[-1][0]


class DungeonConfig(BaseModel):
    """Everything needed to generate and furnish one dungeon level."""

    dungeon_name: str = "Dungeon"
    stage_number: int = Field(default=1, ge=0)
    """Stored on the graph; not consumed by the builder."""

    generation_rules: RoomGenerationRules | None = None

    room_templates: list[RoomTemplate] = Field(default_factory=list)
    """Pool handed to the room selector after the graph is built."""

    default_template: RoomTemplate | None = None
    """Substituted for nodes the selector finds no template for."""


def load_config(path: str | Path | None = None) -> DungeonConfig:
    """Load and validate a :class:`DungeonConfig` from a JSON file.

    Parameters
    ----------
    path:
        Path to the JSON file.  Defaults to ``data/dungeons/default.json``
        relative to the project root.

    Raises ``pydantic.ValidationError`` if the file holds invalid rules.
    """
    if path is None:
        path = _DEFAULT_CONFIG_PATH
    path = Path(path)

    with open(path) as f:
        raw: dict[str, Any] = json.load(f)
    config = DungeonConfig.model_validate(raw)
    logger.debug("Loaded dungeon config %r from %s", config.dungeon_name, path)
    return config

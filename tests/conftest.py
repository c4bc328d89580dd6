"""Shared fixtures and helpers for dungeon generation tests."""

from __future__ import annotations

from typing import Any, Callable

import pytest

from dungeon_gen.content.templates import RoomTemplate
from dungeon_gen.generation.rules import DungeonConfig, RoomGenerationRules
from dungeon_gen.graph.dungeon_graph import DungeonGraph
from dungeon_gen.graph.models import DungeonNode, RoomType


def make_config(**rule_overrides: Any) -> DungeonConfig:
    """Build a config whose rules take *rule_overrides* over the defaults."""
    return DungeonConfig(
        dungeon_name="Test Dungeon",
        stage_number=2,
        generation_rules=RoomGenerationRules(**rule_overrides),
    )


def closest(node: DungeonNode, candidates: list[DungeonNode]) -> DungeonNode:
    """Nearest candidate by column, leftmost on ties (mirrors the builder)."""
    return min(candidates, key=lambda c: abs(c.column - node.column))


def is_mandatory_edge(graph: DungeonGraph, from_id: str, to_id: str) -> bool:
    """True if the edge is one of the nearest-neighbor connections every
    transition gets regardless of branching."""
    source = graph.nodes[from_id]
    target = graph.nodes[to_id]
    current_floor = graph.get_nodes_at_floor(source.floor)
    next_floor = graph.get_nodes_at_floor(target.floor)
    return (
        closest(source, next_floor).id == to_id
        or closest(target, current_floor).id == from_id
    )


@pytest.fixture()
def config_factory() -> Callable[..., DungeonConfig]:
    return make_config


@pytest.fixture()
def template_pool() -> list[RoomTemplate]:
    """A small pool covering every non-fixed type plus START and BOSS."""
    pool = [
        RoomTemplate(name=f"normal_{d}", room_type=RoomType.NORMAL, difficulty=d)
        for d in range(1, 11)
    ]
    pool += [
        RoomTemplate(name="start_gate", room_type=RoomType.START, difficulty=1),
        RoomTemplate(name="boss_arena", room_type=RoomType.BOSS, difficulty=9),
        RoomTemplate(name="elite_den", room_type=RoomType.ELITE, difficulty=4),
        RoomTemplate(name="campfire", room_type=RoomType.REST, difficulty=1),
        RoomTemplate(name="merchant", room_type=RoomType.SHOP, difficulty=1),
    ]
    return pool

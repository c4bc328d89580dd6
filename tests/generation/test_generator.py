"""Tests for the DungeonGenerator facade."""

from __future__ import annotations

import asyncio
import logging

import pytest

from dungeon_gen.content.templates import RoomTemplate
from dungeon_gen.generation.generator import DungeonGenerator, GenerationInProgressError
from dungeon_gen.generation.rules import DungeonConfig, RoomGenerationRules
from dungeon_gen.graph.dungeon_graph import DungeonGraph
from dungeon_gen.graph.models import RoomType
from tests.conftest import make_config


@pytest.fixture()
def furnished_config(template_pool) -> DungeonConfig:
    config = make_config()
    config.room_templates = template_pool
    return config


def _template_names(graph: DungeonGraph) -> dict[str, str]:
    return {node_id: graph.get_room_data(node_id).name for node_id in graph.nodes}


class TestGenerate:
    def test_progress_sequence(self, furnished_config):
        progress: list[float] = []
        generator = DungeonGenerator(on_progress=progress.append)
        generator.generate(furnished_config, seed=3)
        assert progress == [0.0, 0.1, 0.5, 0.9, 1.0]

    def test_generated_callback_and_current_graph(self, furnished_config):
        received: list[DungeonGraph] = []
        generator = DungeonGenerator(on_generated=received.append)
        graph = generator.generate(furnished_config, seed=3)
        assert received == [graph]
        assert generator.current_graph is graph
        assert not generator.is_generating

    def test_entry_is_visited(self, furnished_config):
        graph = DungeonGenerator().generate(furnished_config, seed=3)
        assert graph.current_node_id == graph.entry_node_id
        assert graph.entry_node.is_visited
        for node in graph.get_adjacent_nodes(graph.entry_node_id):
            assert node.is_revealed

    def test_every_node_gets_a_template(self, furnished_config):
        graph = DungeonGenerator().generate(furnished_config, seed=8)
        for node_id in graph.nodes:
            assert graph.get_room_data(node_id) is not None, node_id

    def test_same_seed_same_dungeon(self, furnished_config):
        first = DungeonGenerator().generate(furnished_config, seed=21)
        second = DungeonGenerator().generate(furnished_config, seed=21)
        assert first.to_dict() == second.to_dict()
        assert _template_names(first) == _template_names(second)

    def test_rerun_on_same_generator_is_reproducible(self, furnished_config):
        generator = DungeonGenerator()
        first = generator.generate(furnished_config, seed=21)
        names = _template_names(first)
        generator.generate(furnished_config, seed=22)
        again = generator.generate(furnished_config, seed=21)
        assert again.to_dict() == first.to_dict()
        assert _template_names(again) == names

    def test_random_seed_when_omitted(self, furnished_config, caplog):
        caplog.set_level(logging.INFO)
        graph = DungeonGenerator().generate(furnished_config)
        assert isinstance(graph.seed, int)
        assert "using random seed" in caplog.text


class TestGenerateFailures:
    def test_missing_config(self, caplog):
        progress: list[float] = []
        generator = DungeonGenerator(on_progress=progress.append)
        assert generator.generate(None, seed=1) is None
        assert progress == []
        assert "DungeonConfig is missing" in caplog.text

    def test_missing_rules_resets_flag(self):
        generated: list[DungeonGraph] = []
        generator = DungeonGenerator(on_generated=generated.append)
        assert generator.generate(DungeonConfig(), seed=1) is None
        assert not generator.is_generating
        assert generator.current_graph is None
        assert generated == []

    def test_reentrant_run_rejected(self, furnished_config):
        generator = DungeonGenerator()

        def nested(progress: float) -> None:
            if progress == 0.5:
                generator.generate(furnished_config, seed=2)

        generator.on_progress = nested
        with pytest.raises(GenerationInProgressError):
            generator.generate(furnished_config, seed=1)
        assert not generator.is_generating
        assert generator.current_graph is None

    def test_no_templates_and_no_default(self, caplog):
        graph = DungeonGenerator().generate(make_config(), seed=4)
        assert graph is not None
        assert graph.room_data == {}
        assert "No room templates" in caplog.text
        assert "has no matching template" in caplog.text

    def test_empty_pool_uses_default_template(self):
        fallback = RoomTemplate(name="fallback_hall", room_type=RoomType.NORMAL)
        config = DungeonConfig(
            generation_rules=RoomGenerationRules(), default_template=fallback,
        )
        graph = DungeonGenerator().generate(config, seed=1)
        assert graph.node_count > 0
        for node_id in graph.nodes:
            assert graph.get_room_data(node_id) is fallback, node_id

    def test_default_template_fills_gaps(self, template_pool):
        config = make_config(treasure_room_chance=1.0)
        # Only special-room templates: NORMAL nodes have nothing to fall back on.
        config.room_templates = [t for t in template_pool if t.name.startswith(("start", "boss"))]
        config.default_template = template_pool[0]
        graph = DungeonGenerator().generate(config, seed=6)
        for node in graph.nodes.values():
            assert graph.get_room_data(node.id) is not None, node.id


class TestAsync:
    def test_async_matches_sync(self, furnished_config):
        sync_graph = DungeonGenerator().generate(furnished_config, seed=12)
        async_graph = asyncio.run(
            DungeonGenerator().generate_async(furnished_config, seed=12)
        )
        assert async_graph.to_dict() == sync_graph.to_dict()
        assert _template_names(async_graph) == _template_names(sync_graph)

    def test_async_progress(self, furnished_config):
        progress: list[float] = []
        generator = DungeonGenerator(on_progress=progress.append)
        asyncio.run(generator.generate_async(furnished_config, seed=12))
        assert progress == [0.0, 0.1, 0.5, 0.9, 1.0]

    def test_concurrent_runs_rejected(self, furnished_config):
        generator = DungeonGenerator()

        async def run_both():
            return await asyncio.gather(
                generator.generate_async(furnished_config, seed=1),
                generator.generate_async(furnished_config, seed=2),
                return_exceptions=True,
            )

        results = asyncio.run(run_both())
        graphs = [r for r in results if isinstance(r, DungeonGraph)]
        errors = [r for r in results if isinstance(r, GenerationInProgressError)]
        assert len(graphs) == 1
        assert len(errors) == 1
        assert graphs[0].seed == 1
        assert not generator.is_generating

    def test_async_missing_config(self):
        assert asyncio.run(DungeonGenerator().generate_async(None)) is None


class TestState:
    def test_validate_before_generation(self):
        ok, errors = DungeonGenerator().validate_current_graph()
        assert not ok
        assert errors == ["No graph generated"]

    def test_validate_after_generation(self, furnished_config):
        generator = DungeonGenerator()
        generator.generate(furnished_config, seed=5)
        ok, errors = generator.validate_current_graph()
        assert ok, errors

    def test_clear(self, furnished_config):
        generator = DungeonGenerator()
        generator.generate(furnished_config, seed=5)
        generator.clear()
        assert generator.current_graph is None

    def test_graph_only_leaves_state_alone(self, furnished_config):
        generator = DungeonGenerator()
        graph = generator.generate_graph_only(furnished_config, seed=5)
        assert graph is not None
        assert graph.room_data == {}
        assert generator.current_graph is None
        assert not generator.is_generating

    def test_graph_only_matches_full_topology(self, furnished_config):
        topology = DungeonGenerator().generate_graph_only(furnished_config, seed=9)
        full = DungeonGenerator().generate(furnished_config, seed=9)
        assert [e.model_dump() for e in topology.edges] == [e.model_dump() for e in full.edges]

    def test_graph_only_missing_rules(self):
        assert DungeonGenerator().generate_graph_only(DungeonConfig(), seed=1) is None

#!/usr/bin/env python3
"""Generate a dungeon graph and print its layout.

Usage:
    uv run python scripts/generate_dungeon.py --seed 42
    uv run python scripts/generate_dungeon.py --config data/dungeons/default.json --json out/dungeon.json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from dungeon_gen.content.registry import TemplateRegistry
from dungeon_gen.generation.generator import DungeonGenerator
from dungeon_gen.generation.rules import load_config


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate a dungeon graph")
    parser.add_argument("--config", type=Path, default=None, help="Dungeon config JSON (default: data/dungeons/default.json)")
    parser.add_argument("--rooms", type=Path, default=None, help="Room template JSON (default: data/rooms/default_rooms.json)")
    parser.add_argument("--seed", type=int, default=None, help="Seed (random if omitted)")
    parser.add_argument("--stage", type=int, default=None, help="Override the config's stage number")
    parser.add_argument("--json", type=Path, default=None, help="Write the graph as JSON to this path")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, ...)")
    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config)
    if args.stage is not None:
        config.stage_number = args.stage

    registry = TemplateRegistry()
    registry.load_templates(args.rooms)
    config.room_templates = config.room_templates + registry.all_templates()

    generator = DungeonGenerator()
    graph = generator.generate(config, seed=args.seed)
    if graph is None:
        print("Generation failed, see log for details.", file=sys.stderr)
        return 1

    print(graph.to_detailed_string())
    print("--- Rooms ---")
    for floor in range(graph.total_floors):
        for node in graph.get_nodes_at_floor(floor):
            template = graph.get_room_data(node.id)
            print(f"  {node.id}: {template.name if template is not None else '-'}")

    ok, errors = graph.validate_graph()
    print()
    print("Validation: " + ("OK" if ok else "FAILED"))
    for error in errors:
        print(f"  - {error}")

    if args.json is not None:
        data = graph.to_dict()
        data["rooms"] = {
            node_id: template.name for node_id, template in graph.room_data.items()
        }
        args.json.parent.mkdir(parents=True, exist_ok=True)
        args.json.write_text(json.dumps(data, indent=2))
        print(f"Saved graph to {args.json}")

    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())

"""Content registry -- loads and serves room templates.

Default templates are loaded from ``data/rooms/default_rooms.json`` at the
project root.  Entries whose dict carries a ``_section`` key are
organizational markers and are skipped.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from dungeon_gen.content.templates import RoomTemplate
from dungeon_gen.graph.models import RoomType

logger = logging.getLogger(__name__)

# Default paths relative to the project root.
_PROJECT_ROOT = Path(__file__).resolve().parents[3]  # src/dungeon_gen/content -> root
_DEFAULT_ROOMS_PATH = _PROJECT_ROOT / "data" / "rooms" / "default_rooms.json"


class TemplateRegistry:
    """Holds every known :class:`RoomTemplate`, keyed by name.

    Usage::

        registry = TemplateRegistry()
        registry.load_templates()

        elite_rooms = registry.get_templates_by_type(RoomType.ELITE)
    """

    def __init__(self) -> None:
        self.templates: dict[str, RoomTemplate] = {}

    def load_templates(self, path: str | Path | None = None) -> None:
        """Load templates from a JSON list.

        Parameters
        ----------
        path:
            Path to the JSON file.  Defaults to
            ``data/rooms/default_rooms.json`` relative to the project root.
            Later entries replace earlier ones with the same name.
        """
        if path is None:
            path = _DEFAULT_ROOMS_PATH
        path = Path(path)

        with open(path) as f:
            raw_templates: list[dict[str, Any]] = json.load(f)

        for raw in raw_templates:
            if "_section" in raw:
                continue  # Skip organizational section markers
            self.add(RoomTemplate.model_validate(raw))

        logger.debug("Loaded %d room templates from %s", len(self.templates), path)

    def add(self, template: RoomTemplate) -> None:
        if template.name in self.templates:
            logger.debug("Replacing room template %s", template.name)
        self.templates[template.name] = template

    def get_template(self, name: str) -> RoomTemplate | None:
        return self.templates.get(name)

    def get_templates_by_type(self, room_type: RoomType) -> list[RoomTemplate]:
        return [t for t in self.templates.values() if t.room_type == room_type]

    def all_templates(self) -> list[RoomTemplate]:
        return list(self.templates.values())

    def __len__(self) -> int:
        return len(self.templates)

"""Room content templates -- the concrete rooms a node can be filled with."""

from __future__ import annotations

from pydantic import BaseModel, Field

from dungeon_gen.graph.models import RoomType


class RoomTemplate(BaseModel):
    """A reusable room layout that the selector can assign to a node."""

    name: str
    """Unique template name (e.g. 'crypt_corridor_03')."""

    room_type: RoomType
    """Which kind of node this template can fill."""

    difficulty: int = Field(default=1, ge=1, le=10)
    """1 (trivial) to 10 (hardest).  Matched against ``floor + 1``."""

    scene: str | None = None
    """Reference to the scene / prefab the placement step instantiates."""

    tags: list[str] = Field(default_factory=list)

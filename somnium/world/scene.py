"""Read-only view of what the player can currently refer to."""

from dataclasses import dataclass, field
from enum import Enum


class CandidateSource(str, Enum):
    """Where a candidate was found. Order here is the resolution order."""

    ROOM_OBJECT = "room_object"
    ROOM_ITEM = "room_item"
    INVENTORY = "inventory"
    NPC = "npc"


@dataclass(frozen=True)
class Candidate:
    """Something a phrase could refer to.

    Attributes:
        id: Object, item or NPC id.
        name: Display name.
        source: Which pool the candidate came from.
    """

    id: str
    name: str
    source: CandidateSource = CandidateSource.ROOM_OBJECT


@dataclass(frozen=True)
class Scene:
    """Candidate pools for object resolution, built from the world state.

    Attributes:
        room_id: Current room id.
        room_objects: Scenery in the room.
        room_items: Items lying in the room.
        inventory: Items carried by the player.
        npcs: Characters in the room.
    """

    room_id: str = ""
    room_objects: tuple[Candidate, ...] = field(default_factory=tuple)
    room_items: tuple[Candidate, ...] = field(default_factory=tuple)
    inventory: tuple[Candidate, ...] = field(default_factory=tuple)
    npcs: tuple[Candidate, ...] = field(default_factory=tuple)

    def pools(self) -> tuple[tuple[Candidate, ...], ...]:
        """Candidate pools in fixed resolution order."""
        return (self.room_objects, self.room_items, self.inventory, self.npcs)

    def all_candidates(self) -> list[Candidate]:
        return [candidate for pool in self.pools() for candidate in pool]

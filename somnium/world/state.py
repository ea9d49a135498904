"""Mutable world state: flags, current room, inventory and room contents.

Static definitions live in ``WorldTemplate``; everything that changes during a
session lives here so it can be snapshotted independently of presentation.
Callers read through the accessors; writes happen through ``ActionExecutor``
and the managers.
"""

import logging
from typing import Any

from somnium.world.actions import FlagValue
from somnium.world.scene import Candidate, CandidateSource, Scene
from somnium.world.schemas import (
    ExitDefinition,
    ItemDefinition,
    NPCDefinition,
    ObjectDefinition,
    RoomDefinition,
    ThingDefinition,
    WorldTemplate,
)

logger = logging.getLogger(__name__)


class WorldStateError(Exception):
    """Base exception for invalid world mutations."""

    pass


class UnknownRoomError(WorldStateError):
    """A room id does not exist in the world."""

    def __init__(self, room_id: str) -> None:
        super().__init__(f"Unknown room '{room_id}'")
        self.room_id = room_id


class UnknownItemError(WorldStateError):
    """An item id does not exist in the world."""

    def __init__(self, item_id: str) -> None:
        super().__init__(f"Unknown item '{item_id}'")
        self.item_id = item_id


class FlagStore:
    """Key-value store for story flags.

    Unknown flags read as ``None`` (falsy). Values are bool, number or string.

    Example:
        flags = FlagStore({"door_open": False})
        flags.set("door_open", True)
        flags.is_set("door_open")  # True
    """

    def __init__(self, initial: dict[str, FlagValue] | None = None) -> None:
        self._flags: dict[str, FlagValue] = dict(initial or {})

    def get(self, name: str, default: Any = None) -> Any:
        return self._flags.get(name, default)

    def set(self, name: str, value: FlagValue) -> None:
        previous = self._flags.get(name)
        self._flags[name] = value
        logger.debug(f"Flag {name}: {previous!r} -> {value!r}")

    def is_set(self, name: str) -> bool:
        """Truthiness of a flag; unknown flags are false."""
        return bool(self._flags.get(name))

    def delete(self, name: str) -> None:
        self._flags.pop(name, None)

    def setdefault(self, name: str, value: FlagValue) -> None:
        """Seed a default without overwriting an existing value."""
        self._flags.setdefault(name, value)

    def as_dict(self) -> dict[str, FlagValue]:
        return dict(self._flags)

    def load(self, values: dict[str, FlagValue]) -> None:
        self._flags = dict(values)

    def __contains__(self, name: object) -> bool:
        return name in self._flags

    def __len__(self) -> int:
        return len(self._flags)


class WorldState:
    """Live state of a world during one session.

    Args:
        world: Static world definition.
        flags: Flag store to use (a fresh one seeded from the world if omitted).
    """

    def __init__(self, world: WorldTemplate, flags: FlagStore | None = None) -> None:
        self.world = world
        self.flags = flags if flags is not None else FlagStore()

        self._rooms: dict[str, RoomDefinition] = {room.id: room for room in world.rooms}
        self._objects: dict[str, ObjectDefinition] = {obj.id: obj for obj in world.objects}
        self._items: dict[str, ItemDefinition] = {item.id: item for item in world.items}
        self._npcs: dict[str, NPCDefinition] = {npc.id: npc for npc in world.npcs}

        self.current_room_id: str = world.start_room
        self.inventory: list[str] = list(world.starting_inventory)
        self.room_objects: dict[str, list[str]] = {
            room.id: list(room.objects) for room in world.rooms
        }
        self.room_items: dict[str, list[str]] = {room.id: list(room.items) for room in world.rooms}
        # (room_id, direction) -> enabled, only for exits changed at run time
        self.exit_overrides: dict[tuple[str, str], bool] = {}

        for name, value in world.initial_flags.items():
            self.flags.setdefault(name, value)
        for puzzle in world.puzzles:
            for name, value in puzzle.flags.items():
                self.flags.setdefault(name, value)

    # =========================================================================
    # Lookups
    # =========================================================================

    @property
    def current_room(self) -> RoomDefinition:
        return self._rooms[self.current_room_id]

    def get_room(self, room_id: str) -> RoomDefinition | None:
        return self._rooms.get(room_id)

    def get_item(self, item_id: str) -> ItemDefinition | None:
        return self._items.get(item_id)

    def get_object(self, object_id: str) -> ObjectDefinition | None:
        return self._objects.get(object_id)

    def get_npc(self, npc_id: str) -> NPCDefinition | None:
        return self._npcs.get(npc_id)

    def lookup(self, thing_id: str) -> ThingDefinition | None:
        """Find an object, item or NPC by id."""
        return self._objects.get(thing_id) or self._items.get(thing_id) or self._npcs.get(thing_id)

    def has_item(self, item_id: str) -> bool:
        return item_id in self.inventory

    def items_in_room(self, room_id: str | None = None) -> list[str]:
        return list(self.room_items.get(room_id or self.current_room_id, []))

    def objects_in_room(self, room_id: str | None = None) -> list[str]:
        return list(self.room_objects.get(room_id or self.current_room_id, []))

    def get_exit(self, room_id: str, direction: str) -> ExitDefinition | None:
        room = self._rooms.get(room_id)
        if room is None:
            return None
        return room.exits.get(direction)

    def exit_enabled(self, room_id: str, direction: str) -> bool:
        exit_def = self.get_exit(room_id, direction)
        if exit_def is None:
            return False
        return self.exit_overrides.get((room_id, direction), exit_def.enabled)

    def exit_locked(self, room_id: str, direction: str) -> bool:
        """Locked exits stay locked until an action enables them."""
        exit_def = self.get_exit(room_id, direction)
        if exit_def is None:
            return False
        if self.exit_overrides.get((room_id, direction)) is True:
            return False
        return exit_def.locked

    def scene(self) -> Scene:
        """Build the candidate pools for the current room."""
        room_id = self.current_room_id

        def candidates(ids: list[str], table: dict, source: CandidateSource) -> tuple[Candidate, ...]:
            return tuple(
                Candidate(id=thing_id, name=table[thing_id].name, source=source)
                for thing_id in ids
                if thing_id in table
            )

        return Scene(
            room_id=room_id,
            room_objects=candidates(self.room_objects.get(room_id, []), self._objects, CandidateSource.ROOM_OBJECT),
            room_items=candidates(self.room_items.get(room_id, []), self._items, CandidateSource.ROOM_ITEM),
            inventory=candidates(self.inventory, self._items, CandidateSource.INVENTORY),
            npcs=candidates(list(self.current_room.npcs), self._npcs, CandidateSource.NPC),
        )

    # =========================================================================
    # Mutations
    # =========================================================================

    def change_room(self, room_id: str) -> None:
        if room_id not in self._rooms:
            raise UnknownRoomError(room_id)
        previous = self.current_room_id
        self.current_room_id = room_id
        logger.debug(f"Room change {previous} -> {room_id}")

    def add_item(self, item_id: str) -> bool:
        """Put an item in the inventory, removing it from any room.

        Returns:
            False if the item was already carried.
        """
        if item_id not in self._items:
            raise UnknownItemError(item_id)
        if item_id in self.inventory:
            return False
        for contents in self.room_items.values():
            if item_id in contents:
                contents.remove(item_id)
        self.inventory.append(item_id)
        return True

    def remove_item(self, item_id: str) -> bool:
        """Take an item out of the inventory. Returns False if not carried."""
        if item_id not in self.inventory:
            return False
        self.inventory.remove(item_id)
        return True

    def drop_item(self, item_id: str) -> bool:
        """Move a carried item into the current room."""
        if not self.remove_item(item_id):
            return False
        self.room_items.setdefault(self.current_room_id, []).append(item_id)
        return True

    def place_item(self, item_id: str, room_id: str | None = None) -> None:
        """Place an item in a room (default: current room)."""
        room_id = room_id or self.current_room_id
        if item_id not in self._items:
            raise UnknownItemError(item_id)
        if room_id not in self._rooms:
            raise UnknownRoomError(room_id)
        contents = self.room_items.setdefault(room_id, [])
        if item_id not in contents:
            contents.append(item_id)

    def remove_object(self, object_id: str, room_id: str | None = None) -> bool:
        room_id = room_id or self.current_room_id
        if room_id not in self._rooms:
            raise UnknownRoomError(room_id)
        contents = self.room_objects.get(room_id, [])
        if object_id not in contents:
            return False
        contents.remove(object_id)
        return True

    def set_exit_enabled(self, room_id: str, direction: str, enabled: bool) -> bool:
        """Enable or disable an exit. Returns False if the exit does not exist."""
        if room_id not in self._rooms:
            raise UnknownRoomError(room_id)
        if self.get_exit(room_id, direction) is None:
            logger.warning(f"Room '{room_id}' has no exit '{direction}'")
            return False
        self.exit_overrides[(room_id, direction)] = enabled
        return True

    # =========================================================================
    # Snapshot
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        return {
            "current_room_id": self.current_room_id,
            "inventory": list(self.inventory),
            "room_objects": {room: list(ids) for room, ids in self.room_objects.items()},
            "room_items": {room: list(ids) for room, ids in self.room_items.items()},
            "exit_overrides": [
                {"room_id": room, "direction": direction, "enabled": enabled}
                for (room, direction), enabled in self.exit_overrides.items()
            ],
        }

    def load_dict(self, data: dict[str, Any]) -> None:
        room_id = data.get("current_room_id", self.world.start_room)
        if room_id not in self._rooms:
            raise UnknownRoomError(room_id)
        self.current_room_id = room_id
        self.inventory = list(data.get("inventory", []))
        self.room_objects = {room: list(ids) for room, ids in data.get("room_objects", {}).items()}
        self.room_items = {room: list(ids) for room, ids in data.get("room_items", {}).items()}
        self.exit_overrides = {
            (entry["room_id"], entry["direction"]): bool(entry["enabled"])
            for entry in data.get("exit_overrides", [])
        }

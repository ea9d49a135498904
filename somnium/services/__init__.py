"""Services: loading worlds from files."""

from somnium.services.world_loader import (
    WorldLoadError,
    count_unknown_actions,
    load_bundled_world,
    load_world,
    parse_world_data,
    summarize_world,
)

__all__ = [
    "WorldLoadError",
    "count_unknown_actions",
    "load_bundled_world",
    "load_world",
    "parse_world_data",
    "summarize_world",
]

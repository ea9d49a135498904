"""Tests for the world loader service."""

import json
from pathlib import Path

import pytest
import yaml

from somnium.services.world_loader import (
    WorldLoadError,
    count_unknown_actions,
    load_bundled_world,
    load_world,
    parse_world_data,
    summarize_world,
)
from tests.factories import world_data


class TestLoadWorld:
    """Tests for reading world files."""

    def test_load_yaml(self, tmp_path: Path):
        path = tmp_path / "manor.yaml"
        path.write_text(yaml.safe_dump(world_data()), encoding="utf-8")

        world = load_world(path)

        assert world.metadata.title == "Test Manor"
        assert world.start_room == "hall"

    def test_load_json(self, tmp_path: Path):
        path = tmp_path / "manor.json"
        path.write_text(json.dumps(world_data()), encoding="utf-8")

        assert load_world(path).metadata.title == "Test Manor"

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_world(tmp_path / "nowhere.yaml")

    def test_unsupported_suffix(self, tmp_path: Path):
        path = tmp_path / "manor.toml"
        path.write_text("title = 'x'", encoding="utf-8")

        with pytest.raises(WorldLoadError, match="Unsupported file format"):
            load_world(path)

    def test_malformed_yaml(self, tmp_path: Path):
        path = tmp_path / "broken.yaml"
        path.write_text("rooms: [unclosed", encoding="utf-8")

        with pytest.raises(WorldLoadError, match="Failed to parse"):
            load_world(path)

    def test_invalid_world(self, tmp_path: Path):
        path = tmp_path / "invalid.yaml"
        path.write_text(yaml.safe_dump(world_data(start_room="moon")), encoding="utf-8")

        with pytest.raises(WorldLoadError, match="Invalid world template"):
            load_world(path)


class TestParseWorldData:
    def test_top_level_must_be_a_mapping(self):
        with pytest.raises(WorldLoadError, match="expected a mapping"):
            parse_world_data(["not", "a", "world"])

    def test_unknown_actions_are_counted_not_fatal(self):
        data = world_data()
        data["global_events"][0]["actions"].append({"type": "TELEPORT", "room_id": "moon"})

        world = parse_world_data(data)

        assert count_unknown_actions(world) == 1

    def test_unknown_actions_inside_schedules_are_counted(self):
        data = world_data()
        data["puzzles"][1]["reward"].append(
            {"type": "SCHEDULE", "delay": 5, "action": {"type": "TELEPORT", "room_id": "moon"}}
        )
        data["global_events"][0]["actions"].append(
            {"type": "SCHEDULE", "action": {"type": "SCHEDULE", "action": {"type": "SUMMON"}}}
        )

        world = parse_world_data(data)

        assert count_unknown_actions(world) == 2


class TestBundledWorld:
    """Tests for the tutorial shipped with the package."""

    def test_tutorial_loads(self):
        world = load_bundled_world()

        assert world.metadata.title == "The Dreaming Vault"
        assert world.start_room == "cell"
        assert count_unknown_actions(world) == 0

    def test_unknown_bundled_world(self):
        with pytest.raises(WorldLoadError, match="No bundled world"):
            load_bundled_world("atlantis")


class TestSummary:
    def test_summarize(self):
        summary = summarize_world(parse_world_data(world_data()))

        assert summary["title"] == "Test Manor"
        assert summary["rooms"] == 7
        assert summary["items"] == 4
        assert summary["puzzles"] == 3
        assert summary["endings"] == 3
        assert summary["max_score"] == 300
        assert summary["unknown_actions"] == 0

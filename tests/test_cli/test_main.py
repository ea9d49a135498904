"""Tests for the somnium CLI commands."""

import json
from pathlib import Path

import yaml
from typer.testing import CliRunner

from somnium.cli.main import app
from tests.factories import world_data

runner = CliRunner()


def write_world(tmp_path: Path) -> Path:
    path = tmp_path / "manor.yaml"
    path.write_text(yaml.safe_dump(world_data()), encoding="utf-8")
    return path


class TestCheckCommand:
    """Tests for the 'check' command."""

    def test_valid_world(self, tmp_path: Path):
        result = runner.invoke(app, ["check", str(write_world(tmp_path))])

        assert result.exit_code == 0
        assert "World is valid." in result.stdout

    def test_missing_world(self, tmp_path: Path):
        result = runner.invoke(app, ["check", str(tmp_path / "nowhere.yaml")])

        assert result.exit_code == 1
        assert "World file not found" in result.stdout


class TestParseCommand:
    """Tests for the 'parse' command."""

    def test_parses_against_the_start_room(self, tmp_path: Path):
        result = runner.invoke(app, ["parse", "take the red key", "--world", str(write_world(tmp_path))])

        assert result.exit_code == 0
        assert "take" in result.stdout
        assert "rk1" in result.stdout

    def test_parse_failure_exits_with_error(self):
        result = runner.invoke(app, ["parse", "xyzzy"])

        assert result.exit_code == 1
        assert "I don't understand that verb." in result.stdout


class TestPlayCommand:
    """Tests for the interactive 'play' loop."""

    def test_quit(self, tmp_path: Path):
        result = runner.invoke(app, ["play", "--world", str(write_world(tmp_path))], input="look\nquit\n")

        assert result.exit_code == 0
        assert "Test Manor" in result.stdout
        assert "Great Hall" in result.stdout
        assert "Thanks for playing!" in result.stdout

    def test_end_of_input_leaves(self, tmp_path: Path):
        result = runner.invoke(app, ["play", "--world", str(write_world(tmp_path))], input="look\n")

        assert result.exit_code == 0
        assert "Goodbye." in result.stdout

    def test_save_writes_snapshot(self, tmp_path: Path):
        save_file = tmp_path / "save.json"

        result = runner.invoke(
            app,
            ["play", "--world", str(write_world(tmp_path)), "--save-file", str(save_file)],
            input="take lamp\nsave\nquit\n",
        )

        assert result.exit_code == 0
        snapshot = json.loads(save_file.read_text(encoding="utf-8"))
        assert snapshot["world_title"] == "Test Manor"
        assert "lamp" in snapshot["world"]["inventory"]

    def test_load_without_save(self, tmp_path: Path):
        result = runner.invoke(
            app,
            ["play", "--world", str(write_world(tmp_path)), "--save-file", str(tmp_path / "none.json")],
            input="load\nquit\n",
        )

        assert result.exit_code == 0
        assert "No saved game" in result.stdout

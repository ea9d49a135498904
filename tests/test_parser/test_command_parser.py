"""Tests for CommandParser - free text to structured commands."""

import pytest

from somnium.parser.command_parser import CommandParser
from somnium.world.commands import (
    Command,
    ObjectReference,
    ParseErrorKind,
    ParserContext,
    ReferenceKind,
)
from somnium.world.scene import Scene
from somnium.world.state import WorldState


@pytest.fixture
def parser() -> CommandParser:
    return CommandParser(verb_window=3)


@pytest.fixture
def scene(state: WorldState) -> Scene:
    """Scene of the sample world's hall."""
    return state.scene()


class TestBasicParsing:
    """Tests for verb extraction and object binding."""

    def test_take_the_red_key_binds_item(self, parser: CommandParser, scene: Scene):
        """Articles are dropped and the phrase binds to the red key."""
        result, _ = parser.parse("take the red key", scene)

        assert result.success
        assert result.command.verb == "take"
        assert result.command.direct_object.kind == ReferenceKind.BOUND
        assert result.command.direct_id == "rk1"

    def test_synonym_maps_to_canonical_verb(self, parser: CommandParser, scene: Scene):
        result, _ = parser.parse("grab red key", scene)

        assert result.command.verb == "take"
        assert result.command.direct_id == "rk1"

    def test_multi_word_verb(self, parser: CommandParser, scene: Scene):
        """'pick up' is matched before the single word 'pick'."""
        result, _ = parser.parse("pick up the lamp", scene)

        assert result.success
        assert result.command.verb == "take"
        assert result.command.direct_id == "lamp"

    def test_longest_multi_word_verb_wins(self, parser: CommandParser, scene: Scene):
        result, _ = parser.parse("turn on lamp", scene)

        assert result.command.verb == "activate"

    def test_phrasal_talk_to(self, parser: CommandParser, scene: Scene):
        result, _ = parser.parse("talk to the guard", scene)

        assert result.success
        assert result.command.verb == "talk"
        assert result.command.direct_id == "guard"

    def test_verb_window_limits_multi_word_verbs(self, scene: Scene):
        """With a window of one token, 'pick up' is not recognized."""
        parser = CommandParser(verb_window=1)

        result, _ = parser.parse("pick up lamp", scene)

        assert not result.success
        assert result.error == ParseErrorKind.UNKNOWN_VERB

    def test_case_and_punctuation_ignored(self, parser: CommandParser, scene: Scene):
        result, _ = parser.parse("  TAKE the Red Key!  ", scene)

        assert result.success
        assert result.command.direct_id == "rk1"

    def test_preposition_splits_objects(self, parser: CommandParser, scene: Scene):
        result, _ = parser.parse("use the red key on the vault door", scene)

        assert result.success
        command = result.command
        assert command.verb == "use"
        assert command.direct_id == "rk1"
        assert command.preposition == "on"
        assert command.indirect_id == "vault_door"

    def test_look_at_becomes_direct_object(self, parser: CommandParser, scene: Scene):
        result, _ = parser.parse("look at the painting", scene)

        assert result.success
        assert result.command.verb == "look"
        assert result.command.direct_id == "painting"
        assert result.command.indirect_object is None
        assert result.command.preposition is None

    def test_take_all(self, parser: CommandParser, scene: Scene):
        result, _ = parser.parse("take all", scene)

        assert result.success
        assert result.command.direct_object.is_all
        assert "all" in result.command.modifiers

    def test_unknown_object_is_kept_as_unknown(self, parser: CommandParser, scene: Scene):
        """Scope is the handler's business; the parse itself succeeds."""
        result, _ = parser.parse("take the sword", scene)

        assert result.success
        assert result.command.direct_object == ObjectReference.unknown("sword")

    def test_without_scene_objects_stay_literal(self, parser: CommandParser):
        result, _ = parser.parse("take red key")

        assert result.success
        assert result.command.direct_object.kind == ReferenceKind.LITERAL
        assert result.command.direct_object.text == "red key"


class TestMovement:
    """Tests for directions and abbreviations."""

    @pytest.mark.parametrize("text", ["n", "north", "go north", "go n", "walk north"])
    def test_direction_forms_are_equivalent(self, parser: CommandParser, scene: Scene, text: str):
        result, _ = parser.parse(text, scene)

        assert result.success
        assert result.command == Command(verb="go", direct_object=ObjectReference.literal("north"))

    def test_n_equals_go_north(self, parser: CommandParser, scene: Scene):
        short, _ = parser.parse("n", scene)
        full, _ = parser.parse("go north", scene)

        assert short.command == full.command

    def test_upstairs_is_up(self, parser: CommandParser, scene: Scene):
        result, _ = parser.parse("go upstairs", scene)

        assert result.command.direct_object.text == "up"

    def test_go_without_direction(self, parser: CommandParser, scene: Scene):
        result, _ = parser.parse("go", scene)

        assert not result.success
        assert result.error == ParseErrorKind.MISSING_DIRECT_OBJECT
        assert result.message == "Go where? Please specify a direction."

    def test_go_to_non_direction(self, parser: CommandParser, scene: Scene):
        result, _ = parser.parse("go banana", scene)

        assert not result.success
        assert result.error == ParseErrorKind.MISSING_DIRECT_OBJECT


class TestParseErrors:
    """Tests for failure results."""

    def test_empty_input(self, parser: CommandParser, scene: Scene):
        result, _ = parser.parse("   ", scene)

        assert not result.success
        assert result.error == ParseErrorKind.EMPTY_INPUT
        assert result.message == "Please start your command with a verb."

    def test_only_fillers_is_empty(self, parser: CommandParser, scene: Scene):
        result, _ = parser.parse("please", scene)

        assert result.error == ParseErrorKind.EMPTY_INPUT

    def test_unknown_verb(self, parser: CommandParser, scene: Scene):
        result, _ = parser.parse("xyzzy the lamp", scene)

        assert not result.success
        assert result.error == ParseErrorKind.UNKNOWN_VERB
        assert result.message == "I don't understand that verb."

    def test_missing_direct_object(self, parser: CommandParser, scene: Scene):
        result, _ = parser.parse("take", scene)

        assert result.error == ParseErrorKind.MISSING_DIRECT_OBJECT
        assert result.message == "What do you want to take?"

    def test_missing_indirect_object(self, parser: CommandParser, scene: Scene):
        result, _ = parser.parse("use red key on", scene)

        assert result.error == ParseErrorKind.MISSING_INDIRECT_OBJECT
        assert result.message == "What do you want to use the red key on?"


class TestAgain:
    """Tests for replaying the last command."""

    def test_again_without_previous_command(self, parser: CommandParser, scene: Scene):
        result, _ = parser.parse("again", scene)

        assert not result.success
        assert result.error == ParseErrorKind.NO_PREVIOUS_COMMAND
        assert result.message == "No previous command to repeat."

    def test_again_replays_last_command(self, parser: CommandParser, scene: Scene):
        first, context = parser.parse("examine the painting", scene)
        replay, _ = parser.parse("again", scene, context)

        assert replay.success
        assert replay.command == first.command

    def test_g_is_again(self, parser: CommandParser, scene: Scene):
        first, context = parser.parse("n", scene)
        replay, _ = parser.parse("g", scene, context)

        assert replay.command == first.command

    def test_failed_parse_does_not_replace_last_command(self, parser: CommandParser, scene: Scene):
        first, context = parser.parse("take lamp", scene)
        _, context = parser.parse("xyzzy", scene, context)
        replay, _ = parser.parse("again", scene, context)

        assert replay.command == first.command


class TestContext:
    """Tests for pronouns and clarification."""

    def test_pronoun_binds_last_object(self, parser: CommandParser, scene: Scene):
        _, context = parser.parse("take the red key", scene)
        result, _ = parser.parse("drop it", scene, context)

        assert result.success
        assert result.command.direct_id == "rk1"

    def test_pronoun_without_antecedent_is_unknown(self, parser: CommandParser, scene: Scene):
        result, _ = parser.parse("examine it", scene)

        assert result.command.direct_object.kind == ReferenceKind.UNKNOWN
        assert result.command.direct_object.text == "it"

    def test_context_records_last_command(self, parser: CommandParser, scene: Scene):
        result, context = parser.parse("take the red key", scene)

        assert context.last_command == result.command
        assert context.last_object.id == "rk1"
        assert not context.awaiting_clarification

    def test_ambiguous_object_asks_which_one(self, parser: CommandParser, scene: Scene):
        result, context = parser.parse("take key", scene)

        assert not result.success
        assert result.error == ParseErrorKind.AMBIGUOUS_OBJECT
        assert result.message == "Which one? I see: red key, blue key"
        assert [c.id for c in result.candidates] == ["rk1", "bk1"]
        assert context.awaiting_clarification
        assert context.pending_command.verb == "take"

    def test_clarification_completes_pending_command(self, parser: CommandParser, scene: Scene):
        _, context = parser.parse("take key", scene)
        result, context = parser.parse("red", scene, context)

        assert result.success
        assert result.command.verb == "take"
        assert result.command.direct_id == "rk1"
        assert not context.awaiting_clarification

    def test_clarification_with_full_name(self, parser: CommandParser, scene: Scene):
        _, context = parser.parse("take key", scene)
        result, _ = parser.parse("the blue key", scene, context)

        assert result.command.direct_id == "bk1"

    def test_non_answer_drops_ambiguity(self, parser: CommandParser, scene: Scene):
        """Input that matches no candidate is parsed as a new command."""
        _, context = parser.parse("take key", scene)
        result, context = parser.parse("look", scene, context)

        assert result.success
        assert result.command.verb == "look"
        assert not context.awaiting_clarification

    def test_resolve_ambiguity_without_pending(self, parser: CommandParser):
        reference, context = parser.resolve_ambiguity("red", ParserContext())

        assert reference is None
        assert context == ParserContext()

    def test_context_survives_serialization(self, parser: CommandParser, scene: Scene):
        _, context = parser.parse("take key", scene)

        restored = ParserContext.from_dict(context.to_dict())

        assert restored == context

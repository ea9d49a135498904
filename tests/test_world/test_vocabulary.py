"""Tests for Vocabulary - verb tables, directions and error templates."""

from somnium.world.vocabulary import Vocabulary


class TestVerbs:
    """Tests for verb lookups."""

    def test_canonical_verb_for_synonym(self, vocabulary: Vocabulary):
        assert vocabulary.canonical_verb("grab") == "take"
        assert vocabulary.canonical_verb("take") == "take"

    def test_unknown_word(self, vocabulary: Vocabulary):
        assert vocabulary.canonical_verb("frobnicate") is None
        assert not vocabulary.is_verb("frobnicate")

    def test_multi_word_verbs(self, vocabulary: Vocabulary):
        multi = vocabulary.multi_word_verbs

        assert multi["pick up"] == "take"
        assert multi["talk to"] == "talk"
        assert "look at" not in multi
        assert all(" " in phrase for phrase in multi)

    def test_first_canonical_wins_shared_synonym(self):
        vocabulary = Vocabulary(verbs={"take": ["take", "get"], "fetch": ["fetch", "get"]})

        assert vocabulary.canonical_verb("get") == "take"
        assert vocabulary.canonical_verb("fetch") == "fetch"


class TestDirections:
    def test_expand_direction(self, vocabulary: Vocabulary):
        assert vocabulary.expand_direction("n") == "north"
        assert vocabulary.expand_direction("upstairs") == "up"
        assert vocabulary.expand_direction("north") == "north"
        assert vocabulary.expand_direction("sideways") is None


class TestCustomization:
    """Tests for add_synonym() and suggestions()."""

    def test_add_synonym_to_known_verb(self):
        vocabulary = Vocabulary()

        vocabulary.add_synonym("Snatch", "take")

        assert vocabulary.canonical_verb("snatch") == "take"

    def test_add_synonym_to_unknown_canonical_becomes_abbreviation(self):
        vocabulary = Vocabulary()

        vocabulary.add_synonym("xyzzy", "go north")

        assert vocabulary.abbreviations["xyzzy"] == "go north"

    def test_instances_do_not_share_tables(self):
        first = Vocabulary()
        second = Vocabulary()

        first.add_synonym("snatch", "take")

        assert second.canonical_verb("snatch") is None

    def test_suggestions(self, vocabulary: Vocabulary):
        suggestions = vocabulary.suggestions("ta")

        assert "take" in suggestions
        assert "talk" in suggestions
        assert len(suggestions) == len(set(suggestions))

    def test_suggestions_limit_and_empty(self, vocabulary: Vocabulary):
        assert len(vocabulary.suggestions("s", limit=8)) <= 8
        assert vocabulary.suggestions("") == []


class TestErrors:
    def test_error_template_formatting(self, vocabulary: Vocabulary):
        assert vocabulary.error("need_more_info", verb="open") == "What do you want to open?"
        assert vocabulary.error("object_not_found", object="sword") == "You don't see any sword here."

"""Tests for ObjectResolver - binding phrases to things in scope."""

import pytest

from somnium.resolver.object_resolver import ObjectResolver, matches_name
from somnium.world.commands import ObjectReference, ReferenceKind
from somnium.world.scene import Candidate, CandidateSource, Scene


@pytest.fixture
def resolver() -> ObjectResolver:
    return ObjectResolver()


@pytest.fixture
def scene() -> Scene:
    return Scene(
        room_id="hall",
        room_objects=(Candidate("desk", "oak desk"),),
        room_items=(
            Candidate("rk1", "red key", CandidateSource.ROOM_ITEM),
            Candidate("bk1", "blue key", CandidateSource.ROOM_ITEM),
        ),
        inventory=(Candidate("lamp", "brass lamp", CandidateSource.INVENTORY),),
        npcs=(Candidate("guard", "old guard", CandidateSource.NPC),),
    )


class TestMatchesName:
    """Tests for the name matching rules."""

    @pytest.mark.parametrize(
        "phrase",
        ["red key", "RED KEY", "rk1", "red", "red k", "key red"],
    )
    def test_matches(self, phrase: str):
        assert matches_name(phrase, "red key", "rk1")

    @pytest.mark.parametrize("phrase", ["blue", "red door", ""])
    def test_does_not_match(self, phrase: str):
        assert not matches_name(phrase, "red key", "rk1")


class TestResolve:
    """Tests for resolve()."""

    def test_unknown(self, resolver: ObjectResolver, scene: Scene):
        reference = resolver.resolve("sword", scene)

        assert reference == ObjectReference.unknown("sword")

    def test_bound(self, resolver: ObjectResolver, scene: Scene):
        reference = resolver.resolve("red key", scene)

        assert reference.kind == ReferenceKind.BOUND
        assert reference.id == "rk1"

    def test_bound_from_inventory(self, resolver: ObjectResolver, scene: Scene):
        assert resolver.resolve("lamp", scene).id == "lamp"

    def test_bound_npc(self, resolver: ObjectResolver, scene: Scene):
        assert resolver.resolve("guard", scene).id == "guard"

    def test_ambiguous(self, resolver: ObjectResolver, scene: Scene):
        reference = resolver.resolve("key", scene)

        assert reference.is_ambiguous
        assert [c.id for c in reference.candidates] == ["rk1", "bk1"]

    def test_same_id_in_two_pools_is_one_candidate(self, resolver: ObjectResolver):
        scene = Scene(
            room_items=(Candidate("lamp", "brass lamp", CandidateSource.ROOM_ITEM),),
            inventory=(Candidate("lamp", "brass lamp", CandidateSource.INVENTORY),),
        )

        assert resolver.resolve("lamp", scene).id == "lamp"

    def test_pronoun_uses_last_object(self, resolver: ObjectResolver, scene: Scene):
        last = ObjectReference.bound("desk", text="desk")

        assert resolver.resolve("it", scene, last_object=last) == last

    def test_pronoun_without_antecedent(self, resolver: ObjectResolver, scene: Scene):
        assert resolver.resolve("them", scene).kind == ReferenceKind.UNKNOWN

    def test_all_words(self, resolver: ObjectResolver, scene: Scene):
        assert resolver.resolve("everything", scene).is_all

    def test_no_scene_is_literal(self, resolver: ObjectResolver):
        assert resolver.resolve("red key", None) == ObjectReference.literal("red key")


class TestClarify:
    def test_clarify_picks_from_candidates_only(self, resolver: ObjectResolver, scene: Scene):
        candidates = resolver.resolve("key", scene).candidates

        assert resolver.clarify("blue", candidates).id == "bk1"
        assert resolver.clarify("lamp", candidates).kind == ReferenceKind.UNKNOWN

    def test_exact_match_wins(self, resolver: ObjectResolver):
        candidates = (Candidate("key", "key"), Candidate("ring", "key ring"))

        assert resolver.clarify("key", candidates).id == "key"

    def test_still_ambiguous(self, resolver: ObjectResolver):
        candidates = (Candidate("a", "red key"), Candidate("b", "red key ring"))

        assert resolver.clarify("red k", candidates).is_ambiguous

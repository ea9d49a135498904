"""ObjectResolver: binds object phrases to things in the current scene.

Resolution strategies (in order):
1. Pronoun ("it", "them") -> the last resolved object
2. Collective words ("all", "everything") -> special reference
3. Name matching over the scene pools: room objects, room items,
   inventory, room NPCs

A candidate matches a phrase when the phrase equals its name or id, when
its name starts with the phrase, or when every word of the phrase is a
prefix of some word of the name ("key red" matches "red key").

When several candidates match, an ambiguous reference carrying all of them
is returned so the caller can ask which one was meant.
"""

from __future__ import annotations

import logging

from somnium.world.commands import ObjectReference
from somnium.world.scene import Candidate, Scene
from somnium.world.vocabulary import Vocabulary

logger = logging.getLogger(__name__)


def is_exact_match(phrase: str, name: str, object_id: str) -> bool:
    phrase_lower = phrase.lower()
    return phrase_lower == name.lower() or phrase_lower == object_id.lower()


def matches_name(phrase: str, name: str, object_id: str) -> bool:
    """Check whether a typed phrase refers to a named thing.

    Args:
        phrase: Object phrase with articles already removed.
        name: Display name of the candidate.
        object_id: Id of the candidate.

    Returns:
        True on exact, leading-prefix or word-prefix match.
    """
    if not name or not phrase:
        return False
    if is_exact_match(phrase, name, object_id):
        return True

    phrase_lower = phrase.lower()
    name_lower = name.lower()
    if name_lower.startswith(phrase_lower):
        return True

    name_words = name_lower.split()
    return all(
        any(name_word.startswith(word) for name_word in name_words)
        for word in phrase_lower.split()
    )


class ObjectResolver:
    """Resolves object phrases against a scene.

    The resolver holds no conversation state: the pronoun antecedent is
    passed in by the caller, and ambiguity candidates are returned in the
    reference for the caller to keep.

    Usage:
        resolver = ObjectResolver()
        ref = resolver.resolve("red key", scene, last_object=None)
        if ref.is_ambiguous:
            names = [c.name for c in ref.candidates]
    """

    def __init__(self, vocabulary: Vocabulary | None = None) -> None:
        self.vocabulary = vocabulary or Vocabulary()

    def resolve(
        self,
        phrase: str,
        scene: Scene | None,
        last_object: ObjectReference | None = None,
    ) -> ObjectReference:
        """Resolve a phrase to a reference.

        Args:
            phrase: Object phrase (articles removed).
            scene: Current candidate pools; None yields a literal reference.
            last_object: Antecedent for pronouns.

        Returns:
            bound, ambiguous, unknown, special or literal reference.
        """
        if phrase in self.vocabulary.pronouns:
            if last_object is None:
                logger.debug(f"Pronoun '{phrase}' has no antecedent")
                return ObjectReference.unknown(phrase)
            return last_object

        if phrase in self.vocabulary.all_words:
            return ObjectReference.special("all")

        if scene is None:
            return ObjectReference.literal(phrase)

        matches = self.find_matches(phrase, scene.all_candidates())
        if not matches:
            return ObjectReference.unknown(phrase)
        if len(matches) == 1:
            return ObjectReference.bound(matches[0].id, text=phrase)

        logger.debug(f"'{phrase}' is ambiguous: {[c.id for c in matches]}")
        return ObjectReference.ambiguous(matches, text=phrase)

    def find_matches(self, phrase: str, candidates: list[Candidate] | tuple[Candidate, ...]) -> list[Candidate]:
        """All candidates matching the phrase, in pool order, one per id."""
        matches: list[Candidate] = []
        seen: set[str] = set()
        for candidate in candidates:
            if candidate.id in seen:
                continue
            if matches_name(phrase, candidate.name, candidate.id):
                matches.append(candidate)
                seen.add(candidate.id)
        return matches

    def clarify(self, text: str, candidates: tuple[Candidate, ...]) -> ObjectReference:
        """Match a clarification against a stored candidate set only.

        Exact name or id matches win over partial ones so that answering
        "key" when offered "key" and "key ring" settles the question.
        """
        words = [w for w in text.split() if w not in self.vocabulary.articles]
        phrase = " ".join(words)
        if not phrase:
            return ObjectReference.unknown(text)

        exact = [c for c in candidates if is_exact_match(phrase, c.name, c.id)]
        matches = exact or self.find_matches(phrase, candidates)
        if len(matches) == 1:
            return ObjectReference.bound(matches[0].id, text=phrase)
        if not matches:
            return ObjectReference.unknown(phrase)
        return ObjectReference.ambiguous(matches, text=phrase)

"""Text normalization, abbreviation expansion and verb extraction.

These are pure functions over a ``Vocabulary``; the parser composes them:

    normalize -> strip_fillers -> expand_abbreviations -> tokenize -> extract_verb
"""

import re

from somnium.world.vocabulary import Vocabulary

# Sentence punctuation is dropped; "?" survives as the help shorthand.
_PUNCTUATION = re.compile(r"[.,!;:\"]")


def normalize(text: str) -> str:
    """Trim, lowercase, drop punctuation and collapse whitespace."""
    cleaned = _PUNCTUATION.sub(" ", text.strip().lower())
    return " ".join(cleaned.split())


def strip_fillers(text: str, vocabulary: Vocabulary) -> str:
    """Remove politeness and filler words ("please", "now", ...)."""
    fillers = set(vocabulary.fillers)
    return " ".join(word for word in text.split() if word not in fillers)


def expand_abbreviations(text: str, vocabulary: Vocabulary) -> str:
    """Expand a whole-input abbreviation, else abbreviations word by word.

    Direction forms after the first word are left alone ("go n" stays
    "go n") so the direction is expanded by the parser instead of becoming
    a second "go". Expanding an already expanded phrase returns it unchanged.

    Example:
        expand_abbreviations("n", vocab)       # "go north"
        expand_abbreviations("x lamp", vocab)  # "examine lamp"
    """
    if text in vocabulary.abbreviations:
        return vocabulary.abbreviations[text]

    words = text.split()
    expanded: list[str] = []
    for index, word in enumerate(words):
        if index > 0 and vocabulary.expand_direction(word):
            expanded.append(word)
        else:
            expanded.append(vocabulary.abbreviations.get(word, word))
    return " ".join(expanded)


def tokenize(text: str) -> list[str]:
    return text.split()


def extract_verb(
    tokens: list[str], vocabulary: Vocabulary, window: int = 3
) -> tuple[str | None, list[str]]:
    """Find the leading verb, preferring the longest multi-word match.

    Args:
        tokens: Normalized input tokens.
        vocabulary: Vocabulary to match against.
        window: Maximum number of tokens a multi-word verb may span.

    Returns:
        (canonical verb or None, remaining tokens)
    """
    if not tokens:
        return None, []

    multi_word = vocabulary.multi_word_verbs
    for length in range(min(window, len(tokens)), 1, -1):
        phrase = " ".join(tokens[:length])
        if phrase in multi_word:
            return multi_word[phrase], tokens[length:]

    canonical = vocabulary.canonical_verb(tokens[0])
    if canonical is not None:
        return canonical, tokens[1:]
    return None, tokens

"""Vocabulary configuration for the command parser.

Canonical verbs with their synonyms, abbreviations, phrasal verbs,
prepositions, articles, filler words, pronouns and parser error templates.
The defaults follow the classic two-word adventure grammar.
"""

from dataclasses import dataclass, field


DEFAULT_VERBS: dict[str, list[str]] = {
    # Movement
    "go": ["go", "move", "walk", "travel", "proceed", "head"],
    "run": ["run", "dash", "sprint", "hurry"],
    "climb": ["climb", "scale", "ascend"],
    "enter": ["enter", "go in", "go into", "get in"],
    "exit": ["exit", "leave", "go out", "get out"],
    # Object manipulation
    "take": ["take", "get", "grab", "pick up", "acquire", "obtain", "lift"],
    "drop": ["drop", "put down", "discard", "release", "let go"],
    "use": ["use", "apply", "utilize", "employ", "operate"],
    "give": ["give", "offer", "hand", "present", "deliver"],
    "throw": ["throw", "toss", "hurl", "fling", "pitch"],
    # Examination
    "look": ["look", "gaze", "observe", "view"],
    "examine": ["examine", "inspect", "study", "investigate", "check", "analyze"],
    "search": ["search", "explore", "hunt", "look for"],
    "read": ["read", "peruse", "scan"],
    # Containers
    "open": ["open", "unlock", "unseal", "unfasten"],
    "close": ["close", "shut", "seal", "lock", "fasten"],
    "put": ["put", "place", "insert", "set"],
    "remove": ["remove", "extract", "take out", "pull out"],
    # Communication
    "talk": ["talk", "speak", "chat", "converse", "say", "talk to", "speak to"],
    "ask": ["ask", "question", "inquire", "query"],
    "tell": ["tell", "inform", "report"],
    "yell": ["yell", "shout", "scream", "holler"],
    # Physical actions
    "push": ["push", "shove", "press"],
    "pull": ["pull", "drag", "tug", "yank"],
    "turn": ["turn", "rotate", "twist", "spin"],
    "touch": ["touch", "feel", "pat", "stroke"],
    "hit": ["hit", "strike", "punch", "kick", "attack"],
    "break": ["break", "smash", "destroy", "shatter"],
    "activate": ["activate", "turn on", "switch on"],
    "deactivate": ["deactivate", "turn off", "switch off"],
    # Special actions
    "eat": ["eat", "consume", "devour", "taste"],
    "drink": ["drink", "sip", "gulp", "swallow"],
    "wear": ["wear", "put on", "don", "equip"],
    "takeoff": ["take off", "doff", "unequip"],
    "sleep": ["sleep", "rest", "nap", "doze"],
    "wait": ["wait", "pause", "stay"],
    # Meta commands
    "save": ["save", "save game"],
    "load": ["load", "restore", "load game"],
    "quit": ["quit", "exit game", "stop"],
    "restart": ["restart", "start over", "new game"],
    "inventory": ["inventory", "inv"],
    "score": ["score", "points"],
    "help": ["help", "?"],
    "hint": ["hint", "clue"],
}

DEFAULT_ABBREVIATIONS: dict[str, str] = {
    "l": "look",
    "x": "examine",
    "i": "inventory",
    "n": "go north",
    "s": "go south",
    "e": "go east",
    "w": "go west",
    "ne": "go northeast",
    "nw": "go northwest",
    "se": "go southeast",
    "sw": "go southwest",
    "u": "go up",
    "d": "go down",
    "q": "quit",
    "z": "wait",
}

DEFAULT_DIRECTIONS: dict[str, list[str]] = {
    "north": ["north", "n"],
    "south": ["south", "s"],
    "east": ["east", "e"],
    "west": ["west", "w"],
    "northeast": ["northeast", "ne"],
    "northwest": ["northwest", "nw"],
    "southeast": ["southeast", "se"],
    "southwest": ["southwest", "sw"],
    "up": ["up", "u", "upstairs", "above"],
    "down": ["down", "d", "downstairs", "below"],
    "in": ["in", "inside"],
    "out": ["out", "outside"],
}

DEFAULT_PREPOSITIONS: list[str] = [
    "with", "to", "from", "in", "on", "at", "under", "over", "behind",
    "beside", "between", "into", "onto", "through", "across", "around",
    "about", "for", "off",
]

DEFAULT_ERRORS: dict[str, str] = {
    "empty_input": "Please start your command with a verb.",
    "unknown_verb": "I don't understand that verb.",
    "no_previous_command": "No previous command to repeat.",
    "go_where": "Go where? Please specify a direction.",
    "need_more_info": "What do you want to {verb}?",
    "need_indirect_object": "What do you want to {verb} the {object} {preposition}?",
    "ambiguous_object": "Which one? I see: {names}",
    "object_not_found": "You don't see any {object} here.",
}


@dataclass
class Vocabulary:
    """Word lists the parser works from.

    Attributes:
        verbs: Canonical verb -> synonyms (single or multi-word).
        abbreviations: Whole input or single word -> expansion.
        directions: Canonical direction -> accepted forms.
        prepositions: Words splitting direct and indirect objects.
        articles: Words dropped from object phrases.
        fillers: Words removed before anything else.
        pronouns: Words bound to the last resolved object.
        all_words: Words meaning "everything here".
        again_words: Inputs that replay the last successful command.
        errors: Player-facing error templates.
    """

    verbs: dict[str, list[str]] = field(default_factory=lambda: {k: list(v) for k, v in DEFAULT_VERBS.items()})
    abbreviations: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_ABBREVIATIONS))
    directions: dict[str, list[str]] = field(default_factory=lambda: {k: list(v) for k, v in DEFAULT_DIRECTIONS.items()})
    prepositions: list[str] = field(default_factory=lambda: list(DEFAULT_PREPOSITIONS))
    articles: list[str] = field(default_factory=lambda: ["a", "an", "the"])
    fillers: list[str] = field(default_factory=lambda: ["please", "kindly", "now", "then", "very", "really"])
    pronouns: list[str] = field(default_factory=lambda: ["it", "them", "that", "this", "these", "those"])
    all_words: list[str] = field(default_factory=lambda: ["all", "everything", "every"])
    again_words: list[str] = field(default_factory=lambda: ["again", "g"])
    errors: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_ERRORS))

    def __post_init__(self) -> None:
        self._rebuild_index()

    def _rebuild_index(self) -> None:
        """Build synonym -> canonical lookups. The first canonical listing a synonym wins."""
        self._synonyms: dict[str, str] = {}
        for canonical, synonyms in self.verbs.items():
            self._synonyms.setdefault(canonical, canonical)
            for synonym in synonyms:
                self._synonyms.setdefault(synonym, canonical)

        self._direction_index: dict[str, str] = {}
        for canonical, forms in self.directions.items():
            self._direction_index.setdefault(canonical, canonical)
            for form in forms:
                self._direction_index.setdefault(form, canonical)

    @property
    def multi_word_verbs(self) -> dict[str, str]:
        """Every multi-word synonym mapped to its canonical verb."""
        return {phrase: canonical for phrase, canonical in self._synonyms.items() if " " in phrase}

    def canonical_verb(self, word: str) -> str | None:
        """Map a verb or synonym to its canonical form."""
        return self._synonyms.get(word)

    def is_verb(self, word: str) -> bool:
        return word in self._synonyms

    def expand_direction(self, word: str) -> str | None:
        """Map a direction form (``n``, ``upstairs``) to its canonical name."""
        return self._direction_index.get(word)

    def add_synonym(self, word: str, canonical: str) -> None:
        """Teach the parser a new word.

        If ``canonical`` is a known verb, ``word`` becomes its synonym;
        otherwise it is stored as an abbreviation expanding to ``canonical``.
        """
        word_lower = word.lower()
        canonical_lower = canonical.lower()
        if canonical_lower in self.verbs:
            self.verbs[canonical_lower].append(word_lower)
            self._rebuild_index()
        else:
            self.abbreviations[word_lower] = canonical_lower

    def suggestions(self, partial: str, limit: int = 8) -> list[str]:
        """Verb, synonym and abbreviation completions for autocomplete."""
        if not partial:
            return []
        partial_lower = partial.lower()
        found: list[str] = []
        candidates = [*self.verbs.keys()]
        for synonyms in self.verbs.values():
            candidates.extend(synonyms)
        candidates.extend(self.abbreviations.keys())
        for word in candidates:
            if word.startswith(partial_lower) and word not in found:
                found.append(word)
        return found[:limit]

    def error(self, key: str, **values: str) -> str:
        return self.errors[key].format(**values)

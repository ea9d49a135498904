"""Command parser module for converting player input to structured commands.

Main Components:
    - Vocabulary: Verbs, synonyms, abbreviations and word lists
    - Command / ObjectReference: Structured command and its object slots
    - ParseResult / ParserContext: Parse outcome and conversation state
    - CommandParser: The parsing pipeline
    - Tokenizer functions: normalize, expand_abbreviations, extract_verb
"""

from somnium.parser.command_parser import CommandParser
from somnium.parser.tokenizer import (
    expand_abbreviations,
    extract_verb,
    normalize,
    strip_fillers,
    tokenize,
)
from somnium.world.commands import (
    Command,
    ObjectReference,
    ParseErrorKind,
    ParseResult,
    ParserContext,
    ReferenceKind,
)
from somnium.world.vocabulary import Vocabulary

__all__ = [
    # Core types
    "Command",
    "ObjectReference",
    "ParseErrorKind",
    "ParseResult",
    "ParserContext",
    "ReferenceKind",
    "Vocabulary",
    # Parser
    "CommandParser",
    # Tokenizer
    "expand_abbreviations",
    "extract_verb",
    "normalize",
    "strip_fillers",
    "tokenize",
]

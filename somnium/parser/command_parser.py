"""CommandParser: free text to structured ``Command``.

Pipeline per input line:
1. Replay ("again"/"g") of the last successfully parsed command
2. Clarification of a pending ambiguous reference
3. Normalize, strip fillers, expand abbreviations, tokenize
4. Extract the (possibly multi-word) verb
5. Split object phrases on the first preposition and resolve them
6. Validate object arity

The parser is stateless. Pronoun antecedents, the last command and any
pending ambiguity travel in a ``ParserContext`` that each call takes and
returns.
"""

import logging
from dataclasses import replace

from somnium.config import get_settings
from somnium.parser.tokenizer import (
    expand_abbreviations,
    extract_verb,
    normalize,
    strip_fillers,
    tokenize,
)
from somnium.resolver.object_resolver import ObjectResolver
from somnium.validators.command_validator import MOVEMENT_VERB, CommandValidator
from somnium.world.commands import (
    Command,
    ObjectReference,
    ParseErrorKind,
    ParseResult,
    ParserContext,
)
from somnium.world.scene import Scene
from somnium.world.vocabulary import Vocabulary

logger = logging.getLogger(__name__)


class CommandParser:
    """Parses player input into commands.

    Example:
        parser = CommandParser()
        result, context = parser.parse("take the red key", scene, context)
        if result.success:
            handle(result.command)
        else:
            show_error(result.message)
    """

    def __init__(
        self,
        vocabulary: Vocabulary | None = None,
        verb_window: int | None = None,
    ) -> None:
        """Initialize the parser.

        Args:
            vocabulary: Word tables (defaults to the built-in vocabulary).
            verb_window: Max tokens for a multi-word verb (defaults to settings).
        """
        self.vocabulary = vocabulary or Vocabulary()
        self.verb_window = verb_window if verb_window is not None else get_settings().verb_window
        self.resolver = ObjectResolver(self.vocabulary)
        self.validator = CommandValidator(self.vocabulary)

    def parse(
        self,
        text: str,
        scene: Scene | None = None,
        context: ParserContext | None = None,
    ) -> tuple[ParseResult, ParserContext]:
        """Parse one line of input.

        Args:
            text: Raw player input.
            scene: Candidate pools for object resolution. Without a scene,
                object phrases stay literal.
            context: Conversation context from the previous call.

        Returns:
            (parse result, context for the next call)
        """
        context = context or ParserContext()
        cleaned = normalize(text)

        if cleaned in self.vocabulary.again_words:
            return self._replay(context)

        if context.awaiting_clarification:
            reference, cleared = self.resolve_ambiguity(cleaned, context)
            if reference is not None and context.pending_command is not None:
                return self._complete_pending(context.pending_command, reference, cleared)
            # Not an answer to the question; the pending ambiguity is dropped.
            context = cleared

        cleaned = expand_abbreviations(strip_fillers(cleaned, self.vocabulary), self.vocabulary)
        tokens = tokenize(cleaned)
        if not tokens:
            return self._fail(ParseErrorKind.EMPTY_INPUT, self.vocabulary.error("empty_input"), context)

        verb, rest = extract_verb(tokens, self.vocabulary, self.verb_window)
        if verb is None and len(tokens) == 1 and self.vocabulary.expand_direction(tokens[0]):
            # A bare direction ("north", "upstairs") means "go <direction>".
            verb, rest = MOVEMENT_VERB, tokens
        if verb is None:
            logger.debug(f"No verb in '{cleaned}'")
            return self._fail(ParseErrorKind.UNKNOWN_VERB, self.vocabulary.error("unknown_verb"), context)

        command = self._build_command(verb, rest, scene, context)
        return self._finish(command, context)

    def resolve_ambiguity(
        self, text: str, context: ParserContext
    ) -> tuple[ObjectReference | None, ParserContext]:
        """Match a clarification against the pending candidates only.

        Returns:
            (bound reference or None, context with the ambiguity cleared on success)
        """
        if not context.awaiting_clarification:
            return None, context

        reference = self.resolver.clarify(normalize(text), context.pending_candidates)
        cleared = replace(context, pending_candidates=(), pending_command=None)
        if reference.is_bound:
            return reference, cleared
        return None, cleared

    # =========================================================================
    # Steps
    # =========================================================================

    def _replay(self, context: ParserContext) -> tuple[ParseResult, ParserContext]:
        context = replace(context, pending_candidates=(), pending_command=None)
        if context.last_command is None:
            return self._fail(
                ParseErrorKind.NO_PREVIOUS_COMMAND,
                self.vocabulary.error("no_previous_command"),
                context,
            )
        return ParseResult.ok(context.last_command), context

    def _complete_pending(
        self, pending: Command, reference: ObjectReference, context: ParserContext
    ) -> tuple[ParseResult, ParserContext]:
        if pending.direct_object is not None and pending.direct_object.is_ambiguous:
            command = replace(pending, direct_object=reference)
        else:
            command = replace(pending, indirect_object=reference)
        logger.debug(f"Clarified pending command: {command}")
        return self._finish(command, context)

    def _build_command(
        self,
        verb: str,
        tokens: list[str],
        scene: Scene | None,
        context: ParserContext,
    ) -> Command:
        if verb == MOVEMENT_VERB:
            if not tokens:
                return Command(verb=verb)
            direction = self.vocabulary.expand_direction(tokens[0])
            if direction is None:
                return Command(verb=verb, direct_object=ObjectReference.unknown(" ".join(tokens)))
            return Command(verb=verb, direct_object=ObjectReference.literal(direction))

        direct: ObjectReference | None = None
        indirect: ObjectReference | None = None
        preposition: str | None = None
        modifiers: list[str] = []

        words: list[str] = []
        for token in tokens:
            if token in self.vocabulary.articles:
                continue
            if token in self.vocabulary.all_words:
                modifiers.append("all")
                direct = ObjectReference.special("all")
                continue
            words.append(token)

        split_at = next(
            (index for index, word in enumerate(words) if word in self.vocabulary.prepositions),
            None,
        )
        if split_at is None:
            if words:
                direct = self.resolver.resolve(" ".join(words), scene, context.last_object)
        else:
            preposition = words[split_at]
            before, after = words[:split_at], words[split_at + 1 :]
            if before:
                direct = self.resolver.resolve(" ".join(before), scene, context.last_object)
            if after:
                indirect = self.resolver.resolve(" ".join(after), scene, context.last_object)

        return Command(
            verb=verb,
            direct_object=direct,
            indirect_object=indirect,
            preposition=preposition,
            modifiers=tuple(modifiers),
        )

    def _finish(self, command: Command, context: ParserContext) -> tuple[ParseResult, ParserContext]:
        validation = self.validator.validate(command)
        command = validation.command

        if not validation.valid:
            if validation.error == ParseErrorKind.AMBIGUOUS_OBJECT:
                context = replace(
                    context,
                    pending_candidates=validation.candidates,
                    pending_command=command,
                )
            else:
                context = replace(context, pending_candidates=(), pending_command=None)
            return (
                ParseResult.fail(
                    validation.error or ParseErrorKind.UNKNOWN_VERB,
                    validation.reason or "",
                    command=command,
                    candidates=validation.candidates,
                ),
                context,
            )

        last_object = context.last_object
        if command.direct_object is not None and command.direct_object.is_bound:
            last_object = command.direct_object
        context = ParserContext(last_object=last_object, last_command=command)
        return ParseResult.ok(command), context

    @staticmethod
    def _fail(
        error: ParseErrorKind, message: str, context: ParserContext
    ) -> tuple[ParseResult, ParserContext]:
        context = replace(context, pending_candidates=(), pending_command=None)
        return ParseResult.fail(error, message), context

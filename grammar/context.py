"""
Grammar Context

Assembles role vocabularies into a predicate tree once and evaluates input
strings against it.
"""

import logging
import threading
from typing import Dict, List, Optional, Sequence, Tuple, Union

from exceptions import GrammarDefinitionError, MalformedInputError
from grammar.models import DEFAULT_DELIMITER, EvaluationResult, literal_errors
from grammar.nodes import ConjunctionNode, Predicate, TerminalNode


logger = logging.getLogger(__name__)

Vocabularies = Sequence[Tuple[str, Sequence[str]]]


class Context:
    """
    Immutable predicate tree plus its evaluation entry points.

    ``evaluate`` is strict and lets MalformedInputError propagate; ``check``
    treats malformed input as "not accepted". Use ``Context.build`` to
    assemble one from ordered vocabularies.
    """

    def __init__(
        self,
        root: Predicate,
        roles: Sequence[str] = (),
        grammar_id: Optional[str] = None,
        cache_enabled: bool = False,
        cache_max_entries: int = 1024
    ):
        """
        Initialize a context around an already built tree.

        Args:
            root: Root predicate
            roles: Role names in evaluation order
            grammar_id: Optional id reported in evaluation results
            cache_enabled: Memoise results keyed by input string
            cache_max_entries: Stop caching new inputs past this size
        """
        if not isinstance(root, Predicate):
            raise GrammarDefinitionError(
                "Context root must be a Predicate",
                component="Context"
            )
        self._root = root
        self._roles: Tuple[str, ...] = tuple(roles)
        self._grammar_id = grammar_id

        self._cache_enabled = cache_enabled
        self._cache_max_entries = cache_max_entries
        self._cache: Dict[str, Union[bool, MalformedInputError]] = {}
        self._cache_lock = threading.Lock()
        self._key_locks: Dict[str, threading.Lock] = {}

    @classmethod
    def build(
        cls,
        vocabularies: Vocabularies,
        delimiter: Union[str, Sequence[str]] = DEFAULT_DELIMITER,
        grammar_id: Optional[str] = None,
        cache_enabled: bool = False,
        cache_max_entries: int = 1024
    ) -> "Context":
        """
        Build a right-nested conjunction tree from ordered role vocabularies.

        ``[(a, A), (b, B), (c, C)]`` becomes ``A d1 (B d2 C)``, so each
        conjunction splits off one leading segment.

        Args:
            vocabularies: Ordered (role, literals) pairs, at least two
            delimiter: One separator for every level, or one per level
            grammar_id: Optional id reported in evaluation results
            cache_enabled: Memoise results keyed by input string
            cache_max_entries: Stop caching new inputs past this size

        Returns:
            Context

        Raises:
            GrammarDefinitionError: If the vocabularies or delimiters are malformed
        """
        vocabularies = list(vocabularies)
        if len(vocabularies) < 2:
            raise GrammarDefinitionError(
                f"A grammar needs at least two roles, got {len(vocabularies)}",
                component="Context",
                context={"grammar_id": grammar_id}
            )

        delimiters = cls._expand_delimiters(delimiter, len(vocabularies) - 1)

        terminals: List[TerminalNode] = []
        for role, literals in vocabularies:
            if not literals:
                raise GrammarDefinitionError(
                    f"Role '{role}' has an empty vocabulary",
                    component="Context",
                    context={"grammar_id": grammar_id, "role": role}
                )
            terminals.append(TerminalNode(literals, role=role))

        errors = literal_errors(vocabularies, delimiters)
        if errors:
            raise GrammarDefinitionError(
                f"Unreachable literals: {errors}",
                component="Context",
                context={"grammar_id": grammar_id, "errors": errors}
            )

        root: Predicate = terminals[-1]
        for terminal, sep in zip(reversed(terminals[:-1]), reversed(delimiters)):
            root = ConjunctionNode(terminal, root, sep)

        roles = [role for role, _ in vocabularies]
        logger.debug("Built grammar %s with roles %s", grammar_id or "<anonymous>", roles)

        return cls(
            root,
            roles=roles,
            grammar_id=grammar_id,
            cache_enabled=cache_enabled,
            cache_max_entries=cache_max_entries
        )

    @staticmethod
    def _expand_delimiters(delimiter: Union[str, Sequence[str]], count: int) -> List[str]:
        if isinstance(delimiter, str):
            delimiters = [delimiter] * count
        else:
            delimiters = list(delimiter)
            if len(delimiters) != count:
                raise GrammarDefinitionError(
                    f"Expected {count} delimiter(s), got {len(delimiters)}",
                    component="Context"
                )
        if not all(delimiters):
            raise GrammarDefinitionError(
                "Delimiters must be non-empty strings",
                component="Context"
            )
        return delimiters

    @property
    def root(self) -> Predicate:
        return self._root

    @property
    def roles(self) -> Tuple[str, ...]:
        return self._roles

    @property
    def grammar_id(self) -> Optional[str]:
        return self._grammar_id

    def evaluate(self, text: str) -> bool:
        """
        Strict evaluation.

        Raises:
            MalformedInputError: If the input does not split into the expected segments
        """
        if not self._cache_enabled:
            return self._root.evaluate(text)

        with self._cache_lock:
            outcome = self._cache.get(text)
            if outcome is None:
                key_lock = self._key_locks.setdefault(text, threading.Lock())

        if outcome is None:
            # one computation per input; distinct inputs run concurrently
            with key_lock:
                with self._cache_lock:
                    outcome = self._cache.get(text)
                if outcome is None:
                    try:
                        outcome = self._root.evaluate(text)
                    except MalformedInputError as e:
                        outcome = e.with_traceback(None)
                    with self._cache_lock:
                        if len(self._cache) < self._cache_max_entries:
                            self._cache[text] = outcome
                        self._key_locks.pop(text, None)

        if isinstance(outcome, MalformedInputError):
            # fresh instance per raise so tracebacks do not accumulate
            raise MalformedInputError(outcome.text, outcome.delimiter, outcome.reason)
        return outcome

    def check(self, text: str) -> bool:
        """
        Lenient evaluation: malformed input counts as not accepted.
        """
        try:
            return self.evaluate(text)
        except MalformedInputError as e:
            logger.debug("Treating malformed input as rejected: %s", e.message)
            return False

    def evaluate_detailed(self, text: str) -> EvaluationResult:
        """
        Evaluate and report the outcome without raising for malformed input.

        Args:
            text: Input string

        Returns:
            EvaluationResult
        """
        try:
            matched = self.evaluate(text)
        except MalformedInputError as e:
            return EvaluationResult(
                input=text,
                matched=False,
                malformed=True,
                grammar_id=self._grammar_id,
                error=e.message
            )

        return EvaluationResult(
            input=text,
            matched=matched,
            grammar_id=self._grammar_id
        )

    def describe(self) -> str:
        """Render the predicate tree."""
        return self._root.describe()

    def cache_size(self) -> int:
        """Number of memoised inputs."""
        with self._cache_lock:
            return len(self._cache)

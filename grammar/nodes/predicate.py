"""
Predicate Nodes

Expression tree nodes that decide whether an input string satisfies a grammar.
"""

from abc import ABC, abstractmethod
from typing import FrozenSet, Iterable, Optional, Tuple

from exceptions import GrammarDefinitionError, MalformedInputError


class Predicate(ABC):
    """
    Boolean-valued evaluation over an input string.

    Implementations must be pure: evaluating never mutates the node.
    """

    __slots__ = ()

    @abstractmethod
    def evaluate(self, text: str) -> bool:
        """
        Evaluate the input string.

        Args:
            text: Input string

        Returns:
            True if the input is accepted

        Raises:
            MalformedInputError: If the input cannot be split as the node expects
        """

    @abstractmethod
    def describe(self) -> str:
        """Human-readable rendering of this subtree."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.describe()}>"


class TerminalNode(Predicate):
    """
    Accepts exactly the literals of a fixed vocabulary.

    Matching is exact: no trimming, no case folding, no substring match.
    """

    __slots__ = ("_vocabulary", "_role")

    def __init__(self, literals: Iterable[str], role: Optional[str] = None):
        if isinstance(literals, str):
            raise GrammarDefinitionError(
                "Terminal literals must be an iterable of strings, not a single string",
                component="TerminalNode",
                context={"role": role}
            )
        self._vocabulary: FrozenSet[str] = frozenset(literals)
        self._role = role

    @property
    def vocabulary(self) -> FrozenSet[str]:
        return self._vocabulary

    @property
    def role(self) -> Optional[str]:
        return self._role

    def evaluate(self, text: str) -> bool:
        return text in self._vocabulary

    def describe(self) -> str:
        body = "|".join(sorted(self._vocabulary))
        if self._role:
            return f"{self._role}({body})"
        return f"({body})"


class ConjunctionNode(Predicate):
    """
    Splits the input on the first delimiter and requires both children to accept.

    The left child sees the prefix, the right child the suffix. Evaluation
    short-circuits: the right child is skipped when the left one rejects.
    """

    __slots__ = ("_left", "_right", "_delimiter")

    def __init__(self, left: Predicate, right: Predicate, delimiter: str):
        if not isinstance(left, Predicate) or not isinstance(right, Predicate):
            raise GrammarDefinitionError(
                "Conjunction children must be Predicate instances",
                component="ConjunctionNode"
            )
        if left is right:
            raise GrammarDefinitionError(
                "Conjunction children must be distinct nodes",
                component="ConjunctionNode"
            )
        if not delimiter:
            raise GrammarDefinitionError(
                "Conjunction delimiter must be a non-empty string",
                component="ConjunctionNode"
            )
        self._left = left
        self._right = right
        self._delimiter = delimiter

    @property
    def left(self) -> Predicate:
        return self._left

    @property
    def right(self) -> Predicate:
        return self._right

    @property
    def delimiter(self) -> str:
        return self._delimiter

    def split(self, text: str) -> Tuple[str, str]:
        """
        Partition input into (prefix, suffix) on the first delimiter occurrence.

        Raises:
            MalformedInputError: If the delimiter is missing, a side is empty,
                or a terminal right child would receive a surplus segment
        """
        prefix, found, suffix = text.partition(self._delimiter)
        if not found:
            raise MalformedInputError(text, self._delimiter, "missing_delimiter")
        if not prefix or not suffix:
            raise MalformedInputError(text, self._delimiter, "empty_segment")
        if isinstance(self._right, TerminalNode) and self._delimiter in suffix:
            raise MalformedInputError(text, self._delimiter, "surplus_segment")
        return prefix, suffix

    def evaluate(self, text: str) -> bool:
        prefix, suffix = self.split(text)
        return self._left.evaluate(prefix) and self._right.evaluate(suffix)

    def describe(self) -> str:
        return f"{self._left.describe()} {self._delimiter} {self._right.describe()}"

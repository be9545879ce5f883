"""
Grammar Package

Predicate trees that decide whether free-text input satisfies a grammar of
role vocabularies joined by delimiters.
"""

from .nodes import Predicate, TerminalNode, ConjunctionNode
from .models import (
    DEFAULT_DELIMITER,
    GrammarDefinition,
    VocabularyRole,
    GrammarMessages,
    EvaluationResult,
    ValidationResult
)
from .context import Context
from .parser import GrammarParser
from .grammar_engine import GrammarEngine

__all__ = [
    "Predicate",
    "TerminalNode",
    "ConjunctionNode",
    "DEFAULT_DELIMITER",
    "GrammarDefinition",
    "VocabularyRole",
    "GrammarMessages",
    "EvaluationResult",
    "ValidationResult",
    "Context",
    "GrammarParser",
    "GrammarEngine"
]

"""
Grammar Models Package

Exports all model classes for declarative grammars.
"""

from .grammar import (
    DEFAULT_DELIMITER,
    literal_errors,
    VocabularyRole,
    GrammarMessages,
    GrammarDefinition,
    EvaluationResult,
    ValidationResult
)

__all__ = [
    "DEFAULT_DELIMITER",
    "literal_errors",
    "VocabularyRole",
    "GrammarMessages",
    "GrammarDefinition",
    "EvaluationResult",
    "ValidationResult"
]

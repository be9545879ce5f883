"""
Custom Exception Hierarchy for the fare interpreter.
Provides structured error handling with context preservation.
"""
from typing import Optional, Dict, Any


class InterpreterError(Exception):
    """Base exception for all interpreter errors."""

    def __init__(
        self,
        message: str,
        component: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.component = component
        self.context = context or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "component": self.component,
            "context": self.context
        }


# -------------------------------------------------------------------------
# CONFIGURATION ERRORS
# -------------------------------------------------------------------------

class ConfigurationError(InterpreterError):
    """Raised when configuration is invalid or missing."""
    pass


# -------------------------------------------------------------------------
# GRAMMAR ERRORS
# -------------------------------------------------------------------------

class GrammarDefinitionError(InterpreterError):
    """Raised when a grammar or one of its nodes is malformed."""
    pass


class GrammarNotFoundError(InterpreterError):
    """Raised when an unknown grammar id is requested."""
    pass


# -------------------------------------------------------------------------
# EVALUATION ERRORS
# -------------------------------------------------------------------------

class MalformedInputError(InterpreterError):
    """
    Raised when input cannot be split into the segments a conjunction expects.

    Context carries the offending ``input``, the ``delimiter`` and a short
    ``reason`` (missing_delimiter, empty_segment, surplus_segment).
    """

    def __init__(self, text: str, delimiter: str, reason: str):
        super().__init__(
            f"Cannot split {text!r} on {delimiter!r}: {reason}",
            component="ConjunctionNode",
            context={"input": text, "delimiter": delimiter, "reason": reason}
        )
        self.text = text
        self.delimiter = delimiter
        self.reason = reason

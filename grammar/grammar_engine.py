"""
Grammar Engine Main Class

Registry of grammars loaded from disk, each compiled into a Context.
"""

import logging
from typing import Any, Dict, List, Optional
from pathlib import Path

from exceptions import GrammarDefinitionError, GrammarNotFoundError
from grammar.models import GrammarDefinition, EvaluationResult
from grammar.parser import GrammarParser
from grammar.context import Context


class GrammarEngine:
    """
    Main grammar engine orchestrator.

    Manages loading grammar definitions and evaluating input against them.
    Instances are constructed explicitly and passed to whoever needs them.
    """

    def __init__(
        self,
        grammars_path: str = "grammars",
        cache_enabled: bool = False,
        cache_max_entries: int = 1024,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize grammar engine.

        Args:
            grammars_path: Directory containing grammar YAML files
            cache_enabled: Memoise evaluation results per grammar
            cache_max_entries: Per-grammar cache size limit
            logger: Optional logger instance
        """
        self.grammars_path = grammars_path
        self.cache_enabled = cache_enabled
        self.cache_max_entries = cache_max_entries
        self.logger = logger or logging.getLogger(__name__)

        self.parser = GrammarParser()

        self.grammars: List[GrammarDefinition] = []
        self.grammars_by_id: Dict[str, GrammarDefinition] = {}
        self.contexts: Dict[str, Context] = {}
        self.load_grammars()

    def load_grammars(self):
        """Load all grammars from the grammars directory."""
        grammars_dir = Path(self.grammars_path)

        if not grammars_dir.is_dir():
            self.logger.warning(f"Grammars directory not found: {self.grammars_path}")
            self.grammars, self.grammars_by_id, self.contexts = [], {}, {}
            return

        grammars: List[GrammarDefinition] = []
        contexts: Dict[str, Context] = {}

        for grammar in self.parser.parse_multiple_files(self.grammars_path):
            if any(g.id == grammar.id for g in grammars):
                self.logger.warning(f"Skipping duplicate grammar id: {grammar.id}")
                continue

            validation = self.parser.validate_grammar(grammar)
            if not validation.valid:
                self.logger.warning(f"Skipping invalid grammar {grammar.id}: {validation.errors}")
                continue

            grammars.append(grammar)
            if grammar.enabled:
                contexts[grammar.id] = self._build_context(grammar)

        self.grammars = grammars
        self.grammars_by_id = {g.id: g for g in grammars}
        self.contexts = contexts
        self.logger.info(f"Loaded {len(self.grammars)} grammars from {self.grammars_path}")

    def reload_grammars(self):
        """Reload grammars from disk."""
        self.logger.info("Reloading grammars...")
        self.load_grammars()

    def _build_context(self, grammar: GrammarDefinition) -> Context:
        return Context.build(
            grammar.vocabularies(),
            delimiter=grammar.role_delimiters(),
            grammar_id=grammar.id,
            cache_enabled=self.cache_enabled,
            cache_max_entries=self.cache_max_entries
        )

    def get_grammar(self, grammar_id: str) -> Optional[GrammarDefinition]:
        """
        Get a grammar by ID.

        Args:
            grammar_id: Grammar ID

        Returns:
            GrammarDefinition or None if not found
        """
        return self.grammars_by_id.get(grammar_id)

    def get_context(self, grammar_id: str) -> Context:
        """
        Get the compiled context for an enabled grammar.

        Raises:
            GrammarNotFoundError: If no enabled grammar has this ID
        """
        context = self.contexts.get(grammar_id)
        if context is None:
            raise GrammarNotFoundError(
                f"Grammar not found: {grammar_id}",
                component="GrammarEngine",
                context={"grammar_id": grammar_id}
            )
        return context

    def check(self, grammar_id: str, text: str) -> bool:
        """Lenient check of ``text`` against a grammar."""
        return self.get_context(grammar_id).check(text)

    def evaluate(self, grammar_id: str, text: str) -> bool:
        """Strict evaluation; MalformedInputError propagates."""
        return self.get_context(grammar_id).evaluate(text)

    def evaluate_detailed(self, grammar_id: str, text: str) -> EvaluationResult:
        """Evaluate and report the outcome of ``text`` against a grammar."""
        return self.get_context(grammar_id).evaluate_detailed(text)

    def add_grammar(self, grammar: GrammarDefinition):
        """
        Add a new grammar.

        Args:
            grammar: Grammar to add

        Raises:
            GrammarDefinitionError: If the grammar is invalid or the ID is taken
        """
        if grammar.id in self.grammars_by_id:
            raise GrammarDefinitionError(
                f"Grammar already exists: {grammar.id}",
                component="GrammarEngine"
            )

        validation = self.parser.validate_grammar(grammar)
        if not validation.valid:
            raise GrammarDefinitionError(
                f"Invalid grammar: {validation.errors}",
                component="GrammarEngine",
                context={"grammar_id": grammar.id, "errors": validation.errors}
            )

        if grammar.enabled:
            self.contexts[grammar.id] = self._build_context(grammar)
        self.grammars.append(grammar)
        self.grammars_by_id[grammar.id] = grammar

        self.logger.info(f"Added grammar: {grammar.id}")

    def remove_grammar(self, grammar_id: str):
        """
        Remove a grammar.

        Args:
            grammar_id: Grammar ID to remove

        Raises:
            GrammarNotFoundError: If no grammar has this ID
        """
        grammar = self.grammars_by_id.pop(grammar_id, None)
        if grammar is None:
            raise GrammarNotFoundError(
                f"Grammar not found: {grammar_id}",
                component="GrammarEngine",
                context={"grammar_id": grammar_id}
            )

        self.grammars.remove(grammar)
        self.contexts.pop(grammar_id, None)
        self.logger.info(f"Removed grammar: {grammar_id}")

    def list_grammars(
        self,
        enabled_only: bool = False,
        tags: Optional[List[str]] = None
    ) -> List[GrammarDefinition]:
        """
        List grammars with optional filtering.

        Args:
            enabled_only: Only return enabled grammars
            tags: Filter by tags

        Returns:
            List of grammars
        """
        grammars = self.grammars

        if enabled_only:
            grammars = [g for g in grammars if g.enabled]

        if tags:
            grammars = [g for g in grammars if any(tag in g.tags for tag in tags)]

        return grammars

    def save_grammar_to_file(self, grammar_id: str, file_path: Optional[str] = None):
        """
        Save a grammar to a YAML file.

        Args:
            grammar_id: Grammar ID
            file_path: Output file path (defaults to grammars/{grammar_id}.yaml)
        """
        grammar = self.get_grammar(grammar_id)
        if not grammar:
            raise GrammarNotFoundError(
                f"Grammar not found: {grammar_id}",
                component="GrammarEngine"
            )

        if file_path is None:
            file_path = str(Path(self.grammars_path) / f"{grammar_id}.yaml")

        self.parser.save_grammar_to_file(grammar, file_path)
        self.logger.info(f"Saved grammar {grammar_id} to {file_path}")

    def get_summary(self) -> Dict[str, Any]:
        """
        Get summary of grammar engine status.

        Returns:
            Summary dictionary
        """
        enabled_count = sum(1 for g in self.grammars if g.enabled)

        return {
            'total_grammars': len(self.grammars),
            'enabled_grammars': enabled_count,
            'disabled_grammars': len(self.grammars) - enabled_count,
            'grammar_ids': [g.id for g in self.grammars],
            'cache_enabled': self.cache_enabled,
            'grammars_path': self.grammars_path
        }

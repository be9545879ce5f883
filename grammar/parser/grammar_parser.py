"""
Grammar Parser

Parses grammar definitions from YAML format.
"""

import logging
import yaml
from typing import Dict, Any, List
from pathlib import Path
from datetime import datetime

from pydantic import ValidationError

from exceptions import GrammarDefinitionError
from grammar.models import (
    DEFAULT_DELIMITER,
    GrammarDefinition,
    GrammarMessages,
    VocabularyRole,
    ValidationResult,
    literal_errors
)


logger = logging.getLogger(__name__)


class GrammarParser:
    """
    Parse grammar definitions from YAML format.
    """

    def parse_yaml_file(self, file_path: str) -> GrammarDefinition:
        """
        Parse grammar from YAML file.

        Args:
            file_path: Path to YAML file

        Returns:
            Parsed GrammarDefinition

        Raises:
            GrammarDefinitionError: If parsing fails
        """
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                yaml_content = yaml.safe_load(f)
        except FileNotFoundError:
            raise GrammarDefinitionError(
                f"Grammar file not found: {file_path}",
                component="GrammarParser"
            )
        except yaml.YAMLError as e:
            raise GrammarDefinitionError(
                f"Invalid YAML syntax in {file_path}: {e}",
                component="GrammarParser"
            )

        if not yaml_content:
            raise GrammarDefinitionError(
                f"Empty YAML file: {file_path}",
                component="GrammarParser"
            )

        return self.parse_yaml_dict(yaml_content)

    def parse_yaml_dict(self, yaml_data: Dict[str, Any]) -> GrammarDefinition:
        """
        Parse grammar from YAML dictionary.

        Args:
            yaml_data: YAML data as dictionary

        Returns:
            Parsed GrammarDefinition

        Raises:
            GrammarDefinitionError: If required fields are missing or invalid
        """
        if not isinstance(yaml_data, dict):
            raise GrammarDefinitionError(
                "Grammar definition must be a mapping",
                component="GrammarParser"
            )

        grammar_id = yaml_data.get('id')
        if not grammar_id:
            raise GrammarDefinitionError("Grammar 'id' is required", component="GrammarParser")

        name = yaml_data.get('name')
        if not name:
            raise GrammarDefinitionError("Grammar 'name' is required", component="GrammarParser")

        roles_data = yaml_data.get('roles')
        if not roles_data:
            raise GrammarDefinitionError("Grammar 'roles' are required", component="GrammarParser")

        messages_data = yaml_data.get('messages') or {}
        if not isinstance(messages_data, dict):
            raise GrammarDefinitionError(
                "Grammar 'messages' must be a mapping",
                component="GrammarParser",
                context={"grammar_id": grammar_id}
            )

        try:
            roles = self._parse_roles(roles_data)
            messages = GrammarMessages(**messages_data)

            return GrammarDefinition(
                id=grammar_id,
                name=name,
                description=yaml_data.get('description', ''),
                enabled=yaml_data.get('enabled', True),
                delimiter=yaml_data.get('delimiter', DEFAULT_DELIMITER),
                roles=roles,
                messages=messages,
                tags=yaml_data.get('tags', []),
                created_at=datetime.now()
            )
        except ValidationError as e:
            raise GrammarDefinitionError(
                f"Invalid grammar '{grammar_id}': {e}",
                component="GrammarParser",
                context={"grammar_id": grammar_id}
            )

    def _parse_roles(self, roles_data: List[Dict[str, Any]]) -> List[VocabularyRole]:
        """Parse roles from YAML data."""
        if not isinstance(roles_data, list):
            raise GrammarDefinitionError("Roles must be a list", component="GrammarParser")

        roles = []
        for role_data in roles_data:
            if not isinstance(role_data, dict):
                raise GrammarDefinitionError("Each role must be a mapping", component="GrammarParser")

            role_name = role_data.get('name')
            if not role_name:
                raise GrammarDefinitionError("Role 'name' is required", component="GrammarParser")

            literals = role_data.get('literals')
            if not isinstance(literals, list):
                raise GrammarDefinitionError(
                    f"Role '{role_name}' literals must be a list",
                    component="GrammarParser"
                )

            if not all(isinstance(literal, str) for literal in literals):
                raise GrammarDefinitionError(
                    f"Role '{role_name}' literals must all be strings",
                    component="GrammarParser"
                )

            roles.append(VocabularyRole(
                name=role_name,
                literals=literals,
                delimiter=role_data.get('delimiter')
            ))

        return roles

    def validate_grammar(self, grammar: GrammarDefinition) -> ValidationResult:
        """
        Validate a grammar.

        Args:
            grammar: Grammar to validate

        Returns:
            ValidationResult with any errors/warnings
        """
        errors = []
        warnings = []

        if len(grammar.roles) < 2:
            errors.append("Grammar needs at least two roles")

        names = [role.name for role in grammar.roles]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            errors.append(f"Duplicate role names: {', '.join(duplicates)}")

        for role in grammar.roles:
            if not role.literals:
                errors.append(f"Role '{role.name}' has an empty vocabulary")
            if len(set(role.literals)) != len(role.literals):
                warnings.append(f"Role '{role.name}' has duplicate literals")

        errors.extend(literal_errors(grammar.vocabularies(), grammar.role_delimiters()))

        if not grammar.description:
            warnings.append("Grammar has no description")

        if not grammar.tags:
            warnings.append("Grammar has no tags - consider adding for organization")

        return ValidationResult(
            valid=len(errors) == 0,
            errors=errors,
            warnings=warnings
        )

    def parse_multiple_files(self, directory: str) -> List[GrammarDefinition]:
        """
        Parse all YAML grammar files in a directory.

        Args:
            directory: Directory containing grammar files

        Returns:
            List of parsed grammars
        """
        grammar_dir = Path(directory)

        if not grammar_dir.is_dir():
            raise GrammarDefinitionError(
                f"Directory not found: {directory}",
                component="GrammarParser"
            )

        files = sorted(list(grammar_dir.glob('*.yaml')) + list(grammar_dir.glob('*.yml')))

        grammars = []
        for yaml_file in files:
            try:
                grammars.append(self.parse_yaml_file(str(yaml_file)))
            except GrammarDefinitionError as e:
                # Keep going with the remaining files
                logger.warning("Failed to parse %s: %s", yaml_file, e.message)

        return grammars

    def grammar_to_yaml(self, grammar: GrammarDefinition) -> str:
        """
        Convert a grammar to YAML string.

        Args:
            grammar: Grammar to convert

        Returns:
            YAML string
        """
        grammar_dict = grammar.to_dict()
        grammar_dict.pop('created_at', None)

        return yaml.safe_dump(
            grammar_dict,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True
        )

    def save_grammar_to_file(self, grammar: GrammarDefinition, file_path: str):
        """
        Save a grammar to YAML file.

        Args:
            grammar: Grammar to save
            file_path: Output file path
        """
        yaml_content = self.grammar_to_yaml(grammar)

        with open(file_path, 'w', encoding='utf-8') as f:
            f.write(yaml_content)

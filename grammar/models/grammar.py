"""
Grammar Models

Defines data models for declarative grammars and their evaluation reports.
"""

from string import Formatter
from typing import Any, Dict, List, Optional, Sequence, Tuple
from pydantic import BaseModel, Field, field_validator
from datetime import datetime
import re


DEFAULT_DELIMITER = "的"
MESSAGE_PLACEHOLDERS = frozenset({"input", "fare"})


def literal_errors(
    vocabularies: Sequence[Tuple[str, Sequence[str]]],
    delimiters: Sequence[str]
) -> List[str]:
    """
    Find literals that could never be matched by a right-nested conjunction tree.

    A literal must be non-empty and must not contain the delimiter on either
    side of its role: the split would cut it apart or report a surplus segment.

    Args:
        vocabularies: Ordered (role, literals) pairs
        delimiters: Separators between consecutive roles

    Returns:
        Error messages, empty when every literal is reachable
    """
    errors = []
    for index, (role, literals) in enumerate(vocabularies):
        adjoining = set()
        if index > 0:
            adjoining.add(delimiters[index - 1])
        if index < len(delimiters):
            adjoining.add(delimiters[index])

        for literal in literals:
            if not literal:
                errors.append(f"Role '{role}' contains an empty literal")
                continue
            for sep in sorted(adjoining):
                if sep in literal:
                    errors.append(
                        f"Literal '{literal}' in role '{role}' contains delimiter '{sep}'"
                    )
    return errors


class VocabularyRole(BaseModel):
    """
    A named vocabulary position in a grammar.

    Example:
        name: "location"
        literals: ["韶关", "广州"]
    """
    name: str = Field(..., description="Role name (e.g., 'location' or 'category')")
    literals: List[str] = Field(..., description="Accepted exact strings for this role")
    delimiter: Optional[str] = Field(
        None,
        description="Separator between this role and the next; defaults to the grammar delimiter"
    )

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate role name."""
        if not v or not v.strip():
            raise ValueError("Role name must be a non-empty string")
        return v

    @field_validator('literals')
    @classmethod
    def validate_literals(cls, v: List[str]) -> List[str]:
        """Ensure the vocabulary is not empty."""
        if not v:
            raise ValueError("Role vocabulary cannot be empty")
        return v

    @field_validator('delimiter')
    @classmethod
    def validate_delimiter(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v:
            raise ValueError("Role delimiter cannot be empty if provided")
        return v

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        result: Dict[str, Any] = {"name": self.name, "literals": list(self.literals)}
        if self.delimiter is not None:
            result["delimiter"] = self.delimiter
        return result


class GrammarMessages(BaseModel):
    """
    Verdict templates rendered by the display layer.

    Placeholders: {input} and {fare}.
    """
    accepted: str = Field(default="您是{input}，您本次乘车免费！")
    rejected: str = Field(default="{input}，您不是免费人员，本次乘车扣费{fare}！")

    @field_validator('accepted', 'rejected')
    @classmethod
    def validate_placeholders(cls, v: str) -> str:
        """Only {input} and {fare} may be substituted."""
        for _, field_name, _, _ in Formatter().parse(v):
            if field_name is not None and field_name not in MESSAGE_PLACEHOLDERS:
                raise ValueError(
                    f"Unknown placeholder {{{field_name}}}; allowed: {{input}}, {{fare}}"
                )
        return v

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {"accepted": self.accepted, "rejected": self.rejected}


class GrammarDefinition(BaseModel):
    """
    User-defined grammar: ordered role vocabularies joined by delimiters.
    """
    id: str = Field(..., description="Unique grammar identifier")
    name: str = Field(..., description="Human-readable grammar name")
    description: str = Field(default="", description="Grammar description")
    enabled: bool = Field(default=True, description="Whether the grammar is loaded")
    delimiter: str = Field(default=DEFAULT_DELIMITER, description="Default segment separator")
    roles: List[VocabularyRole] = Field(..., description="Ordered role vocabularies")
    messages: GrammarMessages = Field(default_factory=GrammarMessages)
    tags: List[str] = Field(default_factory=list, description="Tags for categorization")

    created_at: Optional[datetime] = None

    @field_validator('id')
    @classmethod
    def validate_id(cls, v: str) -> str:
        """Validate grammar ID format."""
        if not re.match(r'^[a-z0-9_-]+$', v):
            raise ValueError("Grammar ID must contain only lowercase letters, numbers, hyphens, and underscores")
        return v

    @field_validator('delimiter')
    @classmethod
    def validate_delimiter(cls, v: str) -> str:
        if not v:
            raise ValueError("Delimiter must be a non-empty string")
        return v

    def role_delimiters(self) -> List[str]:
        """Separators between consecutive roles, one fewer than the roles."""
        return [role.delimiter or self.delimiter for role in self.roles[:-1]]

    def vocabularies(self) -> Sequence[Tuple[str, List[str]]]:
        """Ordered (role, literals) pairs."""
        return [(role.name, list(role.literals)) for role in self.roles]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "enabled": self.enabled,
            "delimiter": self.delimiter,
            "roles": [r.to_dict() for r in self.roles],
            "messages": self.messages.to_dict(),
            "tags": self.tags,
            "created_at": self.created_at.isoformat() if self.created_at else None
        }


class EvaluationResult(BaseModel):
    """
    Result of evaluating one input string against a grammar.
    """
    input: str
    matched: bool
    malformed: bool = False
    grammar_id: Optional[str] = None
    error: Optional[str] = None
    evaluation_time: datetime = Field(default_factory=datetime.now)


class ValidationResult(BaseModel):
    """
    Result of validating a grammar.
    """
    valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)

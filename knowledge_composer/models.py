"""
Pydantic models for Knowledge Composer.

Contains data models for invocations, reference tokens, knowledge modules,
validation reports, and composition results. All models are frozen: each
one is created fresh per invocation and never mutated afterwards.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ValidationStatus(str, Enum):
    """Outcome of structural validation."""

    VALID = "valid"
    MISSING_SECTIONS = "missing_sections"


class SkipReason(str, Enum):
    """Why a referenced module contributed nothing to the payload."""

    NOT_FOUND = "not_found"
    INVALID = "invalid"
    DUPLICATE = "duplicate"


class ReferenceToken(BaseModel):
    """A marked substring of an invocation naming one knowledge module."""

    model_config = ConfigDict(frozen=True)

    raw: str
    position: int


class Invocation(BaseModel):
    """A scanned invocation: the topic phrase and its ordered references."""

    model_config = ConfigDict(frozen=True)

    topic: str
    reference_tokens: list[ReferenceToken] = Field(default_factory=list)


class KnowledgeModule(BaseModel):
    """A knowledge module as read from the module store."""

    model_config = ConfigDict(frozen=True)

    identifier: str
    raw_content: str
    title: str
    frontmatter: dict[str, Any] = Field(default_factory=dict)
    sections: frozenset[str] = frozenset()


class SectionFamily(BaseModel):
    """A required section; any one of its alternatives satisfies it."""

    model_config = ConfigDict(frozen=True)

    name: str
    alternatives: tuple[str, ...]


class ValidationReport(BaseModel):
    """Result of checking one module for its required sections."""

    model_config = ConfigDict(frozen=True)

    module_identifier: str
    status: ValidationStatus
    missing_sections: list[str] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return self.status is ValidationStatus.VALID


class CompositionResult(BaseModel):
    """The composed payload plus which modules were included or skipped."""

    model_config = ConfigDict(frozen=True)

    payload: str
    included_modules: list[str] = Field(default_factory=list)
    skipped_modules: dict[str, SkipReason] = Field(default_factory=dict)

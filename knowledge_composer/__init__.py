# Knowledge Composer
#
# Modular package structure:
# - config.py: Settings and default required section families
# - logging.py: structlog configuration
# - models.py: Pydantic models for invocations, modules, reports, and results
# - utils.py: Exceptions, regex patterns, frontmatter parsing, and identifier validation
# - scanner.py: Splits a raw invocation into topic and module references
# - store.py: Module store protocol with filesystem and in-memory stores
# - resolver.py: Resolves module references against a store
# - validator.py: Required-section checks for knowledge modules
# - composer.py: Assembles the topic and valid modules into one payload
# - pipeline.py: Runs scan, resolve, validate, and compose for one invocation
# - tools.py: MCP tool handlers and server instance
# - main.py: Entry point and server initialization

from .models import (
    CompositionResult,
    Invocation,
    KnowledgeModule,
    ReferenceToken,
    SkipReason,
    ValidationReport,
    ValidationStatus,
)
from .pipeline import InvocationPipeline, process
from .utils import EmptyInvocationError, NotFoundError

__all__ = [
    "CompositionResult",
    "EmptyInvocationError",
    "Invocation",
    "InvocationPipeline",
    "KnowledgeModule",
    "NotFoundError",
    "ReferenceToken",
    "SkipReason",
    "ValidationReport",
    "ValidationStatus",
    "process",
]

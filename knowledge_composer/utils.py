"""
Utility functions and compiled regex patterns for Knowledge Composer.

Contains exceptions, parsing functions, identifier validation, and pre-compiled patterns.
"""

import re
from pathlib import PurePosixPath

import yaml

# Pre-compiled regex patterns for performance
FRONTMATTER_PATTERN = re.compile(r'^---\s*\n(.*?)\n---\s*(?:\n|$)', re.DOTALL)
HEADING_PATTERN = re.compile(r'^ {0,3}(#{1,6})[ \t]+(.*?)(?:[ \t]+#+)?[ \t]*$')
FENCE_PATTERN = re.compile(r'^ {0,3}(`{3,}|~{3,})')
FENCE_CLOSE_PATTERN = re.compile(r'^ {0,3}(`{3,}|~{3,})[ \t]*$')
PUNCTUATION_PATTERN = re.compile(r'[^\w\s]')
WHITESPACE_PATTERN = re.compile(r'\s+')
ORDINAL_PATTERN = re.compile(r'^(?:\d+ )+')
INVOCATION_TOKEN_PATTERN = re.compile(r'"([^"]*)"|\'([^\']*)\'|(\S+)')


# ============== Exceptions ==============

class EmptyInvocationError(ValueError):
    """Raised when an invocation has neither a topic nor any reference."""
    pass


class NotFoundError(LookupError):
    """A referenced module the store cannot provide.

    Returned as a value by the resolver rather than raised.
    """

    def __init__(self, identifier: str):
        super().__init__(f"Module not found: '{identifier}'")
        self.identifier = identifier

    def __eq__(self, other: object) -> bool:
        return isinstance(other, NotFoundError) and other.identifier == self.identifier

    def __hash__(self) -> int:
        return hash(("NotFoundError", self.identifier))


class IdentifierValidationError(ValueError):
    """Raised when a module identifier is unsafe to use as a store path."""
    pass


class ContentValidationError(Exception):
    """Raised when module content exceeds size limits."""
    pass


# ============== Helper Functions ==============

def parse_frontmatter(content: str) -> tuple[dict, str]:
    """Extract YAML frontmatter and body from module content."""
    frontmatter = {}
    body = content

    match = FRONTMATTER_PATTERN.match(content)
    if match:
        try:
            loaded = yaml.safe_load(match.group(1))
        except yaml.YAMLError:
            loaded = None
        if isinstance(loaded, dict):
            frontmatter = loaded
        body = content[match.end():]

    return frontmatter, body


def normalize_heading(text: str) -> str:
    """Normalize heading text for comparison.

    Case-folds, strips punctuation, collapses whitespace and drops a
    leading ordinal, so "2. Key-Concepts!" becomes "key concepts".
    """
    text = PUNCTUATION_PATTERN.sub(" ", text.casefold())
    text = WHITESPACE_PATTERN.sub(" ", text).strip()
    return ORDINAL_PATTERN.sub("", text).strip()


# ============== Security Validation ==============

def validate_identifier(identifier: str) -> str:
    """Validate that a module identifier stays inside the module store.

    Args:
        identifier: Module identifier, optionally with "/" separated folders

    Returns:
        The validated identifier

    Raises:
        IdentifierValidationError: If the identifier is empty, absolute,
            hidden, or attempts path traversal
    """
    if not identifier or not identifier.strip():
        raise IdentifierValidationError("Identifier cannot be empty")

    if "\x00" in identifier:
        raise IdentifierValidationError("Null bytes are not allowed in identifiers")

    if "\\" in identifier:
        raise IdentifierValidationError("Backslashes are not allowed in identifiers")

    # Reject absolute paths, including Windows drive letters
    if identifier.startswith("/") or (len(identifier) > 1 and identifier[1] == ":"):
        raise IdentifierValidationError("Absolute paths are not allowed")

    parts = PurePosixPath(identifier).parts
    if ".." in parts:
        raise IdentifierValidationError("Path traversal detected: '..' is not allowed")

    if any(part.startswith(".") for part in parts):
        raise IdentifierValidationError("Hidden paths are not allowed")

    return identifier

"""
Module store accessor for Knowledge Composer.

Turns a reference token into a module identifier and fetches the module
from a store. A module the store cannot provide is returned as a
NotFoundError value so composition can carry on without it.
"""

from .config import settings
from .logging import get_logger
from .models import KnowledgeModule, ReferenceToken
from .store import ModuleStore
from .utils import (
    HEADING_PATTERN,
    NotFoundError,
    parse_frontmatter,
)
from .validator import discover_sections

logger = get_logger(__name__)

QUOTE_CHARS = "\"'"
DECORATION_CHARS = "`<>[](){}\"'"
TRAILING_PUNCTUATION = ",;:!?."

Resolution = KnowledgeModule | NotFoundError


def candidate_identifier(raw: str, marker: str | None = None, extension: str | None = None) -> str:
    """Strip the marker and path decoration from a raw reference.

    ``@intro``, ``"@intro"``, ``@./intro.md``, ``@`intro`,`` and
    ``@<intro>`` all yield ``intro``. Sub-folders are kept, so
    ``@tools/duckdb.md`` yields ``tools/duckdb``.
    """
    marker = marker or settings.reference_marker
    extension = settings.module_extension if extension is None else extension

    text = raw.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in QUOTE_CHARS:
        text = text[1:-1].strip()

    if text.startswith(marker):
        text = text[len(marker):]

    text = text.rstrip(TRAILING_PUNCTUATION)
    text = text.strip(DECORATION_CHARS).strip()
    text = text.replace("\\", "/")

    while text.startswith("./"):
        text = text[2:]
    text = text.rstrip("/")

    if extension and text.endswith(extension) and len(text) > len(extension):
        text = text[: -len(extension)]

    return text


def _extract_title(identifier: str, frontmatter: dict, body: str) -> str:
    """Title from frontmatter, else the first level-1 heading, else the identifier."""
    title = frontmatter.get("title")
    if title:
        return str(title)

    for line in body.splitlines():
        heading = HEADING_PATTERN.match(line)
        if heading and len(heading.group(1)) == 1 and heading.group(2).strip():
            return heading.group(2).strip()

    return identifier


def build_module(identifier: str, content: str) -> KnowledgeModule:
    """Create a KnowledgeModule from raw module text."""
    frontmatter, body = parse_frontmatter(content)
    return KnowledgeModule(
        identifier=identifier,
        raw_content=content,
        title=_extract_title(identifier, frontmatter, body),
        frontmatter=frontmatter,
        sections=discover_sections(content),
    )


async def resolve(
    token: ReferenceToken,
    store: ModuleStore,
    marker: str | None = None,
    extension: str | None = None,
) -> Resolution:
    """Resolve a reference token against a module store.

    Returns:
        The KnowledgeModule, or a NotFoundError carrying the identifier when
        the store has no such module or cannot read it
    """
    identifier = candidate_identifier(token.raw, marker, extension)

    if not identifier:
        logger.info("module_not_found", token=token.raw, identifier=identifier, reason="empty_identifier")
        return NotFoundError(identifier)

    try:
        if not await store.exists(identifier):
            logger.info("module_not_found", token=token.raw, identifier=identifier)
            return NotFoundError(identifier)
        content = await store.read(identifier)
    except Exception as e:
        logger.warning("module_read_failed", identifier=identifier, error=str(e))
        return NotFoundError(identifier)

    return build_module(identifier, content)

"""
Structural validation for Knowledge Composer.

A knowledge module is valid when, for every required section family, it has
an ATX heading ("## Key Concepts") whose normalized text equals one of the
family's alternatives. Body text never counts, nor do headings inside fenced
code blocks.
"""

import re
from collections.abc import Iterable

from .config import settings
from .models import KnowledgeModule, SectionFamily, ValidationReport, ValidationStatus
from .utils import FENCE_CLOSE_PATTERN, FENCE_PATTERN, HEADING_PATTERN, normalize_heading, parse_frontmatter

ALTERNATIVE_SPLIT_PATTERN = re.compile(r'\s+or\s+')


def parse_section_families(names: Iterable[str]) -> list[SectionFamily]:
    """Build section families from their configured names.

    "Validation Methods or Troubleshooting" yields one family satisfied by
    either heading.
    """
    families: list[SectionFamily] = []
    for name in names:
        alternatives = tuple(
            normalize_heading(alt) for alt in ALTERNATIVE_SPLIT_PATTERN.split(name.strip()) if alt.strip()
        )
        if alternatives:
            families.append(SectionFamily(name=name.strip(), alternatives=alternatives))
    return families


def default_section_families() -> list[SectionFamily]:
    """Section families from the current settings."""
    return parse_section_families(settings.required_sections)


def discover_sections(content: str) -> frozenset[str]:
    """Return the normalized text of every heading in a module, top to bottom."""
    _, body = parse_frontmatter(content)

    sections: set[str] = set()
    open_fence: str | None = None

    for line in body.splitlines():
        if open_fence is not None:
            # Only a bare run of the same fence character, at least as long, closes a fence
            closing = FENCE_CLOSE_PATTERN.match(line)
            if closing and closing.group(1)[0] == open_fence[0] and len(closing.group(1)) >= len(open_fence):
                open_fence = None
            continue

        fence = FENCE_PATTERN.match(line)
        if fence:
            open_fence = fence.group(1)
            continue

        heading = HEADING_PATTERN.match(line)
        if heading:
            key = normalize_heading(heading.group(2))
            if key:
                sections.add(key)

    return frozenset(sections)


def validate(module: KnowledgeModule, families: list[SectionFamily] | None = None) -> ValidationReport:
    """Check a module for every required section family.

    Missing families are reported in canonical family order, not file order.
    """
    if families is None:
        families = default_section_families()

    sections = discover_sections(module.raw_content)
    missing = [
        family.name
        for family in families
        if not any(alternative in sections for alternative in family.alternatives)
    ]

    return ValidationReport(
        module_identifier=module.identifier,
        status=ValidationStatus.MISSING_SECTIONS if missing else ValidationStatus.VALID,
        missing_sections=missing,
    )

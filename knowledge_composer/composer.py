"""
Composition of validated knowledge modules into one payload.

compose() never raises: modules that are missing, invalid or repeated are
recorded in CompositionResult.skipped_modules instead of the payload.
"""

from collections.abc import Mapping, Sequence

from .models import CompositionResult, Invocation, ReferenceToken, SkipReason, ValidationReport
from .resolver import Resolution
from .utils import NotFoundError

PARAGRAPH_SEPARATOR = "\n\n"

SKIP_DESCRIPTIONS = {
    SkipReason.NOT_FOUND: "not found",
    SkipReason.INVALID: "missing required sections",
    SkipReason.DUPLICATE: "referenced more than once, included once",
}


def compose(
    invocation: Invocation,
    resolutions: Sequence[tuple[ReferenceToken, Resolution]],
    reports: Mapping[str, ValidationReport],
) -> CompositionResult:
    """Assemble the topic and valid modules into a CompositionResult.

    Resolutions are processed in token order whatever order they arrive in.
    The first occurrence of a module wins; a module without a passing
    validation report contributes nothing.
    """
    included: list[str] = []
    skipped: dict[str, SkipReason] = {}
    contents: list[str] = []

    for _token, resolution in sorted(resolutions, key=lambda pair: pair[0].position):
        if isinstance(resolution, NotFoundError):
            skipped.setdefault(resolution.identifier, SkipReason.NOT_FOUND)
            continue

        identifier = resolution.identifier
        if identifier in included:
            skipped.setdefault(identifier, SkipReason.DUPLICATE)
            continue

        content = resolution.raw_content.lstrip("\r\n").rstrip()
        report = reports.get(identifier)
        # Blank modules count as invalid
        if report is None or not report.is_valid or not content:
            skipped.setdefault(identifier, SkipReason.INVALID)
            continue

        contents.append(content)
        included.append(identifier)

    parts = [part for part in (invocation.topic, *contents) if part]

    return CompositionResult(
        payload=PARAGRAPH_SEPARATOR.join(parts),
        included_modules=included,
        skipped_modules=skipped,
    )


def describe_skipped(
    result: CompositionResult,
    reports: Mapping[str, ValidationReport] | None = None,
) -> list[str]:
    """Render skipped modules as a checklist for the end user.

    When validation reports are given, invalid modules list their missing
    section families.
    """
    lines: list[str] = []
    for identifier, reason in result.skipped_modules.items():
        line = f"{identifier}: {SKIP_DESCRIPTIONS[reason]}"
        report = (reports or {}).get(identifier)
        if reason is SkipReason.INVALID and report is not None and report.missing_sections:
            line += f" ({', '.join(report.missing_sections)})"
        lines.append(line)
    return lines

"""
Reference token scanner for Knowledge Composer.

Splits a raw invocation such as ``Summarize @intro "@data/duck db"`` into
its topic phrase and the ordered module references it names.
"""

from .config import settings
from .models import Invocation, ReferenceToken
from .utils import INVOCATION_TOKEN_PATTERN, EmptyInvocationError


def _is_reference(text: str, marker: str) -> bool:
    """A reference is marker-prefixed text with something after the marker."""
    return text.startswith(marker) and len(text) > len(marker)


def scan(raw: str, marker: str | None = None) -> Invocation:
    """Scan a raw invocation into its topic and reference tokens.

    Whitespace separates tokens, except inside matching single or double
    quotes. Tokens starting with the reference marker become references in
    order of appearance; every other token stays in the topic, which keeps
    the relative order of the remaining words joined by single spaces.

    Args:
        raw: The raw invocation string
        marker: Reference marker; defaults to the configured one

    Returns:
        The scanned Invocation

    Raises:
        EmptyInvocationError: If the invocation has no topic and no references
    """
    marker = marker or settings.reference_marker

    if not raw or not raw.strip():
        raise EmptyInvocationError("Invocation is empty")

    words: list[str] = []
    tokens: list[ReferenceToken] = []

    for match in INVOCATION_TOKEN_PATTERN.finditer(raw):
        double, single, bare = match.groups()
        if double is not None:
            text = double
        elif single is not None:
            text = single
        else:
            text = bare

        if _is_reference(text.strip(), marker):
            # Keep the quotes in the raw token; the resolver strips them
            tokens.append(ReferenceToken(raw=match.group(0), position=len(tokens)))
        elif text.strip():
            words.append(text.strip())

    topic = " ".join(words)
    if not topic and not tokens:
        raise EmptyInvocationError("Invocation has no topic and no module references")

    return Invocation(topic=topic, reference_tokens=tokens)

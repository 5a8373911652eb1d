"""
Invocation pipeline for Knowledge Composer.

Runs scan -> resolve -> validate -> compose for one raw invocation. Only an
empty invocation fails the whole call; every per-module problem ends up in
the CompositionResult.
"""

import asyncio
import time
from enum import Enum

from .composer import compose
from .config import settings
from .logging import get_logger
from .models import CompositionResult, Invocation, ReferenceToken, SectionFamily, ValidationReport
from .resolver import Resolution, candidate_identifier, resolve
from .scanner import scan
from .store import ModuleStore, module_store
from .utils import EmptyInvocationError, NotFoundError
from .validator import default_section_families, validate

logger = get_logger(__name__)


class PipelineStage(str, Enum):
    """Stages one invocation passes through."""

    START = "start"
    SCANNING = "scanning"
    RESOLVING = "resolving"
    VALIDATING = "validating"
    COMPOSING = "composing"
    DONE = "done"
    FAILED = "failed"


class InvocationPipeline:
    """Composes knowledge modules named in an invocation.

    Holds configuration only; each call to process() is independent.
    References are resolved concurrently, at most ``max_concurrency`` at a
    time. With ``resolve_timeout`` set, a reference not resolved in time is
    treated as not found.
    """

    def __init__(
        self,
        store: ModuleStore | None = None,
        marker: str | None = None,
        families: list[SectionFamily] | None = None,
        extension: str | None = None,
        max_concurrency: int | None = None,
        resolve_timeout: float | None = None,
    ):
        self.store = store if store is not None else module_store
        self.marker = marker or settings.reference_marker
        self.families = families if families is not None else default_section_families()
        self.extension = settings.module_extension if extension is None else extension
        self.max_concurrency = max_concurrency or settings.max_concurrency
        self.resolve_timeout = resolve_timeout if resolve_timeout is not None else settings.resolve_timeout

    async def _resolve_one(self, token: ReferenceToken, semaphore: asyncio.Semaphore) -> tuple[ReferenceToken, Resolution]:
        async with semaphore:
            try:
                resolution = await asyncio.wait_for(
                    resolve(token, self.store, self.marker, self.extension),
                    timeout=self.resolve_timeout,
                )
            except asyncio.TimeoutError:
                identifier = candidate_identifier(token.raw, self.marker, self.extension)
                logger.warning("module_resolve_timeout", identifier=identifier, timeout=self.resolve_timeout)
                resolution = NotFoundError(identifier)
            except Exception as e:
                identifier = candidate_identifier(token.raw, self.marker, self.extension)
                logger.warning("module_read_failed", identifier=identifier, error=str(e))
                resolution = NotFoundError(identifier)
        return token, resolution

    async def _resolve_all(self, invocation: Invocation) -> list[tuple[ReferenceToken, Resolution]]:
        semaphore = asyncio.Semaphore(self.max_concurrency)
        tasks = [self._resolve_one(token, semaphore) for token in invocation.reference_tokens]
        return list(await asyncio.gather(*tasks))

    def _validate_all(self, resolutions: list[tuple[ReferenceToken, Resolution]]) -> dict[str, ValidationReport]:
        reports: dict[str, ValidationReport] = {}
        for _token, resolution in resolutions:
            if isinstance(resolution, NotFoundError) or resolution.identifier in reports:
                continue
            report = validate(resolution, self.families)
            if not report.is_valid:
                logger.info(
                    "module_invalid",
                    identifier=resolution.identifier,
                    missing_sections=report.missing_sections,
                )
            reports[resolution.identifier] = report
        return reports

    async def run(self, raw: str) -> tuple[CompositionResult, dict[str, ValidationReport]]:
        """Process an invocation, also returning the validation reports.

        Raises:
            EmptyInvocationError: If the invocation has no topic and no references
        """
        start_time = time.time()
        stage = PipelineStage.SCANNING
        try:
            invocation = scan(raw, self.marker)
        except EmptyInvocationError:
            logger.info("invocation_rejected", stage=stage.value, next_stage=PipelineStage.FAILED.value)
            raise

        stage = PipelineStage.RESOLVING
        resolutions = await self._resolve_all(invocation)

        stage = PipelineStage.VALIDATING
        reports = self._validate_all(resolutions)

        stage = PipelineStage.COMPOSING
        result = compose(invocation, resolutions, reports)

        stage = PipelineStage.DONE
        logger.info(
            "invocation_composed",
            stage=stage.value,
            references=len(invocation.reference_tokens),
            included=len(result.included_modules),
            skipped=len(result.skipped_modules),
            duration_ms=round((time.time() - start_time) * 1000, 2),
        )
        return result, reports

    async def process(self, raw: str) -> CompositionResult:
        """Process an invocation into a CompositionResult.

        Raises:
            EmptyInvocationError: If the invocation has no topic and no references
        """
        result, _reports = await self.run(raw)
        return result


async def process(raw: str, store: ModuleStore | None = None) -> CompositionResult:
    """Process an invocation with the configured defaults."""
    return await InvocationPipeline(store=store).process(raw)

"""Research orchestrator driving AI analysis for a batch of packages.

This module runs provider calls for every package in a research batch,
keeping at most a configured number of requests in flight, recording the
outcome on each package record and collecting results in submission order.
"""

import asyncio
import logging
from typing import Callable, Optional

from upgrade_advisor.exceptions import ProviderError, TransportError
from upgrade_advisor.models import (
    STATUS_ANALYZED,
    STATUS_ANALYZING,
    STATUS_FAILED,
    STATUS_NOT_CONFIGURED,
    PackageRecord,
    ResearchResult,
)
from upgrade_advisor.providers.base import BaseProvider, describe_error

logger = logging.getLogger(__name__)

# Called with (package, position, total) when a package starts analysis
ProgressObserver = Callable[[PackageRecord, int, int], None]


class ResearchOrchestrator:
    """Runs provider analysis for a batch of packages.

    Failures are per package: a provider or transport error is written into
    the package's recommendation and the batch continues.

    Attributes:
        provider: Provider that performs the analysis.
        credentials: API key handed to the provider on every call.
        model: Optional model selector.
        concurrency_limit: Maximum number of provider calls in flight.
        observer: Optional progress callback.
    """

    def __init__(
        self,
        provider: BaseProvider,
        credentials: Optional[str],
        model: Optional[str] = None,
        concurrency_limit: int = 1,
        observer: Optional[ProgressObserver] = None,
    ) -> None:
        if concurrency_limit < 1:
            raise ValueError("concurrency_limit must be at least 1")

        self.provider = provider
        self.credentials = credentials
        self.model = model
        self.concurrency_limit = concurrency_limit
        self.observer = observer
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Stop packages that have not started yet from being analyzed.

        Calls already in flight are allowed to finish.
        """
        self._cancelled = True

    async def research(self, packages: list[PackageRecord]) -> list[ResearchResult]:
        """Analyze every package in the batch.

        Args:
            packages: Records to analyze. They are updated in place but never
                removed or reordered.

        Returns:
            One result per analyzed package, in submission order. After
            cancel() packages that had not started are missing.
        """
        total = len(packages)
        logger.info(
            "Starting research batch of %d packages with %s (limit %d)",
            total,
            self.provider.name,
            self.concurrency_limit,
        )

        semaphore = asyncio.Semaphore(self.concurrency_limit)

        async def run(position: int, package: PackageRecord) -> Optional[ResearchResult]:
            async with semaphore:
                if self._cancelled:
                    logger.debug("Batch cancelled, skipping %s", package.id)
                    return None
                return await self._research_one(package, position, total)

        outcomes = await asyncio.gather(
            *(run(position, package) for position, package in enumerate(packages, start=1))
        )
        results = [result for result in outcomes if result is not None]

        successful = sum(1 for result in results if result.succeeded)
        logger.info("Research batch complete: %d/%d successful", successful, total)

        return results

    async def _research_one(
        self, package: PackageRecord, position: int, total: int
    ) -> ResearchResult:
        package.status = STATUS_ANALYZING
        if self.observer is not None:
            self.observer(package, position, total)

        logger.debug("Analyzing %s (%d of %d)", package.id, position, total)

        try:
            analysis = await self.provider.analyze(package, self.credentials, self.model)
        except (ProviderError, TransportError) as e:
            logger.warning("Analysis failed for %s: %s", package.id, e)
            description = describe_error(e, self.provider.name)
            package.recommendation = description
            package.status = STATUS_FAILED
            return ResearchResult(package=package, analysis=description, error=description)
        except Exception as e:
            # CancelledError is a BaseException and still aborts the batch
            logger.exception("Unexpected error analyzing %s", package.id)
            description = describe_error(e, self.provider.name)
            package.recommendation = description
            package.status = STATUS_FAILED
            return ResearchResult(package=package, analysis=description, error=description)

        package.recommendation = analysis
        package.status = STATUS_ANALYZED if analysis else STATUS_NOT_CONFIGURED
        return ResearchResult(package=package, analysis=analysis)


async def research(
    packages: list[PackageRecord],
    provider: BaseProvider,
    credentials: Optional[str],
    model: Optional[str] = None,
    concurrency_limit: int = 1,
    observer: Optional[ProgressObserver] = None,
) -> list[ResearchResult]:
    """Analyze a batch of packages with a single provider."""
    orchestrator = ResearchOrchestrator(
        provider,
        credentials,
        model=model,
        concurrency_limit=concurrency_limit,
        observer=observer,
    )
    return await orchestrator.research(packages)

from __future__ import annotations

import asyncio
from typing import Optional

from ..domain.models import ValidationSummary
from ..services import ValidationOrchestrator


class ValidateUseCase:
    """Use case for validating one repository.

    Starting a new validation cancels the deferred phase of the previous one.
    """

    def __init__(
        self,
        *,
        orchestrator: ValidationOrchestrator,
    ) -> None:
        self._orchestrator = orchestrator
        self._deferred: Optional[asyncio.Task] = None

    @property
    def deferred_task(self) -> Optional[asyncio.Task]:
        return self._deferred

    async def execute(self, *, url: str, include_deferred: bool = True, wait: bool = True) -> ValidationSummary:
        """Execute validation workflow.

        Args:
            url: GitHub repository URL
            include_deferred: Run the deferred probes after the initial checks
            wait: Await the deferred probes; otherwise they keep running in
                the background and patch the summary store as they finish

        Returns:
            The latest summary of this run
        """
        if self._deferred is not None and not self._deferred.done():
            self._deferred.cancel()
        self._deferred = None

        ctx = await self._orchestrator.run_initial(url)
        if not include_deferred:
            return ctx.summary

        self._deferred = asyncio.ensure_future(self._orchestrator.run_deferred(ctx))
        if not wait:
            return ctx.summary
        final = await self._deferred
        return final if final is not None else ctx.summary

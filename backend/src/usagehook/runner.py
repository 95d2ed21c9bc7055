"""Sequential drivers: debug suite, single request, and batch runs."""
import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable

import structlog

from usagehook.config import settings
from usagehook.schemas.dispatch_result import DispatchResult
from usagehook.schemas.usage_event import UsageEvent
from usagehook.services.dispatcher import UsageHookClient
from usagehook.services.generator import HashStrategy, Scale, UsageEventGenerator

logger = structlog.get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class SuiteCase:
    username: str
    scale: Scale
    description: str


DEFAULT_CASES = (
    SuiteCase("debug_light", Scale.LIGHT, "Light usage (simple query)"),
    SuiteCase("debug_medium", Scale.MEDIUM, "Medium usage (coding task)"),
    SuiteCase("debug_heavy", Scale.HEAVY, "Heavy usage (complex project)"),
)


@dataclass
class RunSummary:
    """Running success/failure totals for one run."""

    successes: int = 0
    failures: int = 0
    results: list[DispatchResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.successes + self.failures

    @property
    def success_rate(self) -> float:
        """Percentage of successful requests, 0.0 for an empty run."""
        if not self.total:
            return 0.0
        return self.successes / self.total * 100

    def record(self, result: DispatchResult) -> None:
        self.results.append(result)
        if result.ok:
            self.successes += 1
        else:
            self.failures += 1


class UsageRunner:
    """Drives generator and client one request at a time."""

    def __init__(
        self,
        client: UsageHookClient | None = None,
        generator: UsageEventGenerator | None = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self.client = client or UsageHookClient()
        self.generator = generator or UsageEventGenerator()
        self.sleep = sleep

    async def dispatch(self, event: UsageEvent) -> DispatchResult:
        logger.info(
            "usage_event_sending",
            endpoint=self.client.endpoint_url,
            timestamp=event.timestamp,
            interaction_id=event.interaction_id,
            interaction_hash=event.interaction_hash[:16],
            payload=event.model_dump(mode="json"),
        )
        result = await self.client.send(event)
        if result.ok:
            logger.info("usage_event_sent", status_code=result.status_code, body=result.body)
        else:
            logger.warning("usage_event_failed", error=str(result.error), code=result.error.code)
        return result

    async def run_single(self, identity: str, scale: Scale | str) -> DispatchResult:
        event = self.generator.generate(identity, scale)
        return await self.dispatch(event)

    async def run_suite(
        self,
        cases: tuple[SuiteCase, ...] = DEFAULT_CASES,
        delay_seconds: float | None = None,
    ) -> RunSummary:
        """
        Send one generated event per case, pausing after each.

        Args:
            cases: Test cases to run in order
            delay_seconds: Pause after every case, ``settings.suite_delay_seconds`` by default

        Returns:
            RunSummary with one result per case
        """
        delay = settings.suite_delay_seconds if delay_seconds is None else delay_seconds
        summary = RunSummary()

        for case in cases:
            logger.info("suite_case_started", description=case.description, scale=case.scale.value)
            summary.record(await self.run_single(case.username, case.scale))
            await self.sleep(delay)

        logger.info("suite_finished", successes=summary.successes, failures=summary.failures)
        return summary

    async def run_batch(
        self,
        runs: int | None = None,
        delay_seconds: float | None = None,
        template: UsageEvent | None = None,
    ) -> RunSummary:
        """
        Re-stamp a base template and send it ``runs`` times.

        Failures are counted, never raised; there is no pause after the last run.

        Args:
            runs: Number of requests, ``settings.runs`` by default
            delay_seconds: Pause between requests, ``settings.delay_seconds`` by default
            template: Base event, the generator's template by default

        Returns:
            RunSummary for the batch
        """
        total_runs = settings.runs if runs is None else runs
        delay = settings.delay_seconds if delay_seconds is None else delay_seconds
        base = template or self.generator.template()
        summary = RunSummary()

        logger.info("batch_started", runs=total_runs, delay_seconds=delay, endpoint=self.client.endpoint_url)

        for i in range(1, total_runs + 1):
            event = self.generator.restamp(base, HashStrategy.INTERACTION_NONCE)
            logger.info("batch_request", iteration=i, of=total_runs)
            summary.record(await self.dispatch(event))

            if i < total_runs:
                await self.sleep(delay)

        logger.info(
            "batch_finished",
            successes=summary.successes,
            failures=summary.failures,
            success_rate=round(summary.success_rate, 1),
        )
        return summary

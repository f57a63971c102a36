"""
Network emulation for the simulated backend.

Adds jittered latency and injects failures so the local fallback behaves
like a real remote API: slow sometimes, failing sometimes.
"""
import asyncio
from abc import ABC, abstractmethod
import random
from typing import Awaitable, Callable, Iterable, Optional

from creatorpulse_client.core.exceptions import (
    CreatorPulseException,
    RateLimitException,
    ServerException,
)
from creatorpulse_client.core.logging import get_logger

logger = get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]

LATENCY_VARIANCE = 0.3
MIN_LATENCY_MS = 100
DEFAULT_FAILURE_RATE = 0.05

# operation -> (probability, exception factory)
SCENARIO_FAILURES = {
    "login": (
        0.02,
        lambda: RateLimitException("Too many login attempts. Please try again later."),
    ),
    "generate_drafts": (
        0.03,
        lambda: ServerException("AI service temporarily unavailable. Please try again."),
    ),
    "upload_style": (
        0.01,
        lambda: ServerException("Content processing service is overloaded. Please try again later."),
    ),
}


class FaultInjector(ABC):
    """Source of failure rolls in [0, 1); a roll below the rate is a failure."""

    @abstractmethod
    def roll(self) -> float: ...


class RandomFaultInjector(FaultInjector):
    """Pseudo-random rolls, reproducible when seeded."""

    def __init__(self, seed: Optional[int] = None):
        self._random = random.Random(seed)

    def roll(self) -> float:
        return self._random.random()


class ScriptedFaultInjector(FaultInjector):
    """
    Replays a fixed sequence of rolls, then returns `default` forever.

    The default of 1.0 never fails, so an empty script disables faults.
    """

    def __init__(self, rolls: Iterable[float] = (), default: float = 1.0):
        self._rolls = list(rolls)
        self._default = default
        self.consumed = 0

    def script(self, *rolls: float) -> None:
        """Queue more rolls after the ones still pending."""
        self._rolls.extend(rolls)

    def roll(self) -> float:
        self.consumed += 1
        if self._rolls:
            return self._rolls.pop(0)
        return self._default


class NetworkEmulator:
    """Latency and fault injection for simulated operations."""

    def __init__(
        self,
        fault_injector: Optional[FaultInjector] = None,
        sleep: Optional[Sleep] = None,
        jitter: Optional[random.Random] = None,
        failure_rate: float = DEFAULT_FAILURE_RATE,
        latency_enabled: bool = True,
    ):
        self.fault_injector = fault_injector or RandomFaultInjector()
        self._sleep = sleep or asyncio.sleep
        self._jitter = jitter or random.Random()
        self.failure_rate = failure_rate
        self.latency_enabled = latency_enabled

    def latency_ms(self, base_ms: float) -> float:
        """Jitter `base_ms` by up to +/-30%, never below 100ms."""
        variance = base_ms * LATENCY_VARIANCE
        return max(MIN_LATENCY_MS, base_ms + self._jitter.uniform(-variance, variance))

    async def delay(self, base_ms: float = 500) -> None:
        if not self.latency_enabled:
            return
        await self._sleep(self.latency_ms(base_ms) / 1000)

    def maybe_fail(self, rate: Optional[float] = None) -> bool:
        """Generic fault injector."""
        rate = self.failure_rate if rate is None else rate
        return self.fault_injector.roll() < rate

    def scenario_failure(self, operation: str) -> Optional[CreatorPulseException]:
        """Scripted failure mode for a specific operation, if it fires."""
        scenario = SCENARIO_FAILURES.get(operation)
        if scenario is None:
            return None
        probability, make_error = scenario
        if self.fault_injector.roll() < probability:
            error = make_error()
            logger.info("Injected scenario failure", operation=operation, error_code=error.error_code)
            return error
        return None

    def check(self, operation: str, rate: Optional[float], message: str) -> None:
        """
        Raise the scenario failure for `operation`, then roll the generic
        injector at `rate` and raise a server error with `message`.
        """
        error = self.scenario_failure(operation)
        if error is not None:
            raise error
        if self.maybe_fail(rate):
            logger.info("Injected generic failure", operation=operation)
            raise ServerException(message)

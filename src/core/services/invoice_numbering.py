"""
Invoice number generation and allocation.

Numbers look like ``FACT-20260119-0042``: prefix, allocation date, and a
random 4-digit suffix. A day only has 10,000 suffixes, so allocation probes
the store and retries on collision, within a fixed attempt budget.
"""

import random
from collections.abc import Callable
from datetime import UTC, datetime, tzinfo

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
)

from src.config import get_logger
from src.core.exceptions import InvoiceNumberConflictError, NumberCapacityExhaustedError
from src.core.interfaces.storage import IInvoiceStore

logger = get_logger(__name__)

SUFFIX_MAX = 9999


def utc_now() -> datetime:
    return datetime.now(UTC)


class InvoiceNumberGenerator:
    """Produces candidate invoice numbers from a clock and a random source."""

    def __init__(
        self,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = utc_now,
        prefix: str = "FACT",
        tz: tzinfo | None = None,
    ):
        self._rng = rng or random.Random()
        self._clock = clock
        self.prefix = prefix
        self.tz = tz

    def generate(self) -> str:
        """Build a candidate number dated at the current instant."""
        now = self._clock()
        if self.tz is not None:
            now = now.astimezone(self.tz)
        suffix = self._rng.randint(0, SUFFIX_MAX)
        return f"{self.prefix}-{now:%Y%m%d}-{suffix:04d}"


def log_number_retry(retry_state: RetryCallState) -> None:
    """Log a collision before the next attempt."""
    error = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "invoice_number_collision",
        attempt=retry_state.attempt_number,
        number=error.details.get("number") if isinstance(error, InvoiceNumberConflictError) else None,
    )


class InvoiceNumberAllocator:
    """
    Allocates a number not yet used by any stored invoice.

    The probe is not atomic with the later insert; callers must still treat
    an insert conflict as a reason to allocate again.
    """

    def __init__(
        self,
        store: IInvoiceStore,
        generator: InvoiceNumberGenerator | None = None,
        max_attempts: int = 10,
    ):
        self._store = store
        self._generator = generator or InvoiceNumberGenerator()
        self.max_attempts = max_attempts

    async def _try_candidate(self) -> str:
        candidate = self._generator.generate()
        if await self._store.find_by_number(candidate) is not None:
            raise InvoiceNumberConflictError(candidate)
        return candidate

    async def allocate(self) -> str:
        """
        Return a number free at the time of the probe.

        Raises:
            NumberCapacityExhaustedError: Every candidate in the budget was taken.
            StoreUnavailableError: The store could not be queried.
        """
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_attempts),
                retry=retry_if_exception_type(InvoiceNumberConflictError),
                before_sleep=log_number_retry,
            ):
                with attempt:
                    number = await self._try_candidate()
        except RetryError as e:
            raise NumberCapacityExhaustedError(self.max_attempts) from e

        logger.debug("invoice_number_allocated", number=number)
        return number

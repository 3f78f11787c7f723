"""
Simulated payments for bookings and fees.

There is no payment gateway. Confirming a payment waits a fixed delay and
then writes the paid status onto the booking or fee document. Each record
gets its own simulator:

    idle --confirm--> processing --write ok--> success --(delay)--> idle
                          |
                          +--write fails--> idle (error message set)
"""
import asyncio
import inspect
import logging
import os
from typing import Any, Awaitable, Callable, Dict, Literal, Optional, Union

from educonnect.errors import PaymentInProgressError

logger = logging.getLogger(__name__)

PaymentState = Literal["idle", "processing", "success"]

PAYMENT_FAILED_MESSAGE = "Payment failed. Please try again."
PLATFORM_FEE = 99

DEFAULT_PROCESSING_DELAY = float(os.getenv("PAYMENT_PROCESSING_DELAY_SECONDS", "2.0"))
DEFAULT_SUCCESS_RESET_DELAY = float(os.getenv("PAYMENT_SUCCESS_RESET_SECONDS", "3.0"))

WriteFn = Callable[[], Union[Any, Awaitable[Any]]]


class PaymentSimulator:
    """Three-state mock transaction for a single record."""

    def __init__(
        self,
        processing_delay: float = DEFAULT_PROCESSING_DELAY,
        success_reset_delay: float = DEFAULT_SUCCESS_RESET_DELAY,
        on_reset: Optional[Callable[["PaymentSimulator"], None]] = None,
    ):
        self.processing_delay = processing_delay
        self.success_reset_delay = success_reset_delay
        self.state: PaymentState = "idle"
        self.error: Optional[str] = None
        self._reset_handle: Optional[asyncio.TimerHandle] = None
        self._on_reset = on_reset

    async def confirm(self, write: WriteFn) -> bool:
        """Run one simulated payment.

        Args:
            write: performs the status update on the associated record; may be
                a plain function or a coroutine function

        Returns:
            True when the payment reached ``success``, False when the write
            failed and the simulator went back to ``idle`` with ``error`` set

        Raises:
            PaymentInProgressError: the simulator is not idle
        """
        if self.state != "idle":
            raise PaymentInProgressError(self.state)

        self.state = "processing"
        self.error = None
        succeeded = False
        try:
            await asyncio.sleep(self.processing_delay)
            result = write()
            if inspect.isawaitable(result):
                await result
            succeeded = True
        except Exception as e:
            logger.error("Simulated payment write failed: %s", e)
            self.error = PAYMENT_FAILED_MESSAGE
            return False
        finally:
            # Any exit short of success, cancellation included, goes back to idle
            if not succeeded:
                self.state = "idle"

        self.state = "success"
        loop = asyncio.get_running_loop()
        self._reset_handle = loop.call_later(self.success_reset_delay, self.reset)
        return True

    def reset(self) -> None:
        if self._reset_handle is not None:
            self._reset_handle.cancel()
            self._reset_handle = None
        self.state = "idle"
        if self._on_reset is not None:
            self._on_reset(self)

    def snapshot(self) -> Dict[str, Any]:
        return {"state": self.state, "error": self.error}


class PaymentSimulatorRegistry:
    """Simulators keyed by ``collection/doc_id``, created on first use.

    A simulator is dropped once it resets after a successful payment; a
    failed one stays so its error can still be read.
    """

    def __init__(
        self,
        processing_delay: float = DEFAULT_PROCESSING_DELAY,
        success_reset_delay: float = DEFAULT_SUCCESS_RESET_DELAY,
    ):
        self.processing_delay = processing_delay
        self.success_reset_delay = success_reset_delay
        self._simulators: Dict[str, PaymentSimulator] = {}

    def get(self, collection: str, doc_id: str) -> PaymentSimulator:
        key = f"{collection}/{doc_id}"
        if key not in self._simulators:
            self._simulators[key] = PaymentSimulator(
                self.processing_delay,
                self.success_reset_delay,
                on_reset=lambda simulator: self._discard(key, simulator),
            )
        return self._simulators[key]

    def peek(self, collection: str, doc_id: str) -> Optional[PaymentSimulator]:
        return self._simulators.get(f"{collection}/{doc_id}")

    def __len__(self) -> int:
        return len(self._simulators)

    def _discard(self, key: str, simulator: PaymentSimulator) -> None:
        if self._simulators.get(key) is simulator and simulator.state == "idle":
            del self._simulators[key]

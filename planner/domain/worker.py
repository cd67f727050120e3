"""Background calculation worker.

One ``CALCULATE`` message in, one ``SUCCESS`` or ``ERROR`` reply out. Work
runs on a thread pool; callers never cancel a running calculation, they
issue a newer sequence number and drop replies that are no longer current.
"""

from __future__ import annotations

import itertools
import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import ValidationError

from planner.core.comparison import delta_between, headline
from planner.core.tax import SARS_2025_26, TaxPolicy
from planner.schemas.worker import (
    CalculateMessage,
    ErrorMessage,
    ImpactSummary,
    Projections,
    SuccessMessage,
    WorkerInput,
    WorkerOutput,
)

logger = logging.getLogger(__name__)

Reply = Union[SuccessMessage, ErrorMessage]


def calculate_plan(data: WorkerInput, policy: TaxPolicy = SARS_2025_26) -> WorkerOutput:
    """Project the adjusted scenario and measure it against the recommended one."""
    adjusted = headline(data.scenario(data.adjustments), policy)
    recommended = headline(data.scenario(data.aiRecommendations), policy)
    delta = delta_between(recommended, adjusted)

    return WorkerOutput(
        impactSummary=ImpactSummary(
            retirementNestEggDelta=delta.nestEggDelta,
            monthlyDrawdownDelta=delta.drawdownDelta,
        ),
        projections=Projections(
            retirementNestEgg=adjusted.nest_egg,
            monthlyDrawdown=adjusted.monthly_drawdown,
            drawdownSchedule=adjusted.schedule,
        ),
    )


def _sequence_of(message: Any) -> Optional[int]:
    if isinstance(message, Mapping):
        sequence = message.get("sequence")
        if isinstance(sequence, int) and not isinstance(sequence, bool):
            return sequence
    return None


def handle_message(message: Any, policy: TaxPolicy = SARS_2025_26) -> Reply:
    """Dispatch on the message type; every failure becomes an ERROR reply."""
    sequence = _sequence_of(message)
    kind = message.get("type") if isinstance(message, Mapping) else None
    if kind != "CALCULATE":
        logger.warning("unknown worker message type %r", kind)
        return ErrorMessage(sequence=sequence, payload=f"Unknown message type: {kind}")

    started = time.perf_counter()
    try:
        request = CalculateMessage.model_validate(message)
        output = calculate_plan(request.payload, policy)
    except ValidationError as exc:
        logger.info("rejected worker payload: %s", exc.errors())
        return ErrorMessage(sequence=sequence, payload=str(exc))
    except Exception as exc:  # reported to the caller as an ERROR reply
        logger.exception("planner calculation failed")
        return ErrorMessage(sequence=sequence, payload=str(exc) or exc.__class__.__name__)

    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.debug("planner calculation %s took %.2f ms", request.sequence, elapsed_ms)
    return SuccessMessage(sequence=request.sequence, payload=output, calculationTime=elapsed_ms)


class SequenceGate:
    """Hands out increasing sequence numbers and recognises the latest one."""

    def __init__(self, start: int = 1) -> None:
        self._counter = itertools.count(start)
        self._latest: Optional[int] = None
        self._lock = threading.Lock()

    def issue(self) -> int:
        with self._lock:
            self._latest = next(self._counter)
            return self._latest

    @property
    def latest(self) -> Optional[int]:
        return self._latest

    def is_current(self, sequence: Optional[int]) -> bool:
        with self._lock:
            return sequence is not None and sequence == self._latest


class PlannerWorker:
    """Runs calculations off the caller's thread and delivers only current replies."""

    def __init__(self, policy: TaxPolicy = SARS_2025_26, max_workers: int = 1) -> None:
        self.policy = policy
        self.gate = SequenceGate()
        self.executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="planner")

    def submit(
        self,
        payload: Union[WorkerInput, Mapping[str, Any]],
        on_reply: Optional[Callable[[Reply], None]] = None,
    ) -> "Future[Reply]":
        sequence = self.gate.issue()
        if isinstance(payload, WorkerInput):
            payload = payload.model_dump()
        message = {"type": "CALCULATE", "sequence": sequence, "payload": payload}
        future = self.executor.submit(handle_message, message, self.policy)

        if on_reply is not None:
            def deliver(done: "Future[Reply]") -> None:
                reply = done.result()
                if self.gate.is_current(reply.sequence):
                    on_reply(reply)
                else:
                    logger.debug("dropping superseded reply %s (latest %s)", reply.sequence, self.gate.latest)

            future.add_done_callback(deliver)
        return future

    def shutdown(self, wait: bool = True) -> None:
        self.executor.shutdown(wait=wait)

    def __enter__(self) -> "PlannerWorker":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()


__all__ = [
    "calculate_plan",
    "handle_message",
    "SequenceGate",
    "PlannerWorker",
]

"""
Event admission: idempotency and per-user serialization for webhook deliveries.

Slack delivers events at least once and retries when the acknowledgment is
slow, so the same logical event may arrive several times, sometimes with a
different identifier populated. Every event exposes a small fixed tuple of
candidate dedupe keys; all of them must be unseen for the event to be admitted.

Admission is a single synchronous step (no await between check and set), which
makes it atomic under the cooperative asyncio scheduler.
"""

from __future__ import annotations

import asyncio
import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, Optional, Protocol

logger = logging.getLogger(__name__)

DEFAULT_RETENTION_SECONDS = 300.0
DEFAULT_SWEEP_INTERVAL_SECONDS = 60.0

LockKey = tuple[str, str]


class AdmissibleEvent(Protocol):
    @property
    def lock_key(self) -> Optional[LockKey]: ...

    def dedupe_keys(self) -> tuple[str, ...]: ...


class AdmissionStatus(str, Enum):
    ADMITTED = "admitted"
    DUPLICATE = "duplicate"
    BUSY = "busy"


class LedgerState(str, Enum):
    IN_FLIGHT = "in_flight"
    COMPLETED = "completed"


@dataclass
class LedgerEntry:
    state: LedgerState
    completed_at: Optional[float] = None


@dataclass(frozen=True)
class AdmissionTicket:
    """Proof of admission; hand it back to release() when processing ends."""

    keys: tuple[str, ...]
    lock_key: Optional[LockKey] = None


@dataclass(frozen=True)
class AdmissionDecision:
    status: AdmissionStatus
    ticket: Optional[AdmissionTicket] = None

    @property
    def admitted(self) -> bool:
        return self.status is AdmissionStatus.ADMITTED


class EventAdmissionFilter:
    """Owns the processing ledger and the (user, channel) lock set."""

    def __init__(
        self,
        retention_seconds: float = DEFAULT_RETENTION_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._retention = retention_seconds
        self._clock = clock
        self._ledger: dict[str, LedgerEntry] = {}
        self._locks: set[LockKey] = set()

    @property
    def retention_seconds(self) -> float:
        return self._retention

    def admit(self, event: AdmissibleEvent) -> AdmissionDecision:
        """
        Decide whether an inbound event should be processed.

        DUPLICATE: one of its keys is in flight or completed.
        BUSY: a previous event from the same (user, channel) is still being
        handled; nothing is recorded, the in-flight original owns completion.
        ADMITTED: lock taken and all keys marked in flight.
        """
        keys = event.dedupe_keys()
        for key in keys:
            entry = self._ledger.get(key)
            if entry is not None:
                logger.info("Skipping duplicate event %s (%s)", key, entry.state.value)
                return AdmissionDecision(AdmissionStatus.DUPLICATE)

        lock_key = event.lock_key
        if lock_key is not None and lock_key in self._locks:
            logger.info("User %s is already being processed in %s", *lock_key)
            return AdmissionDecision(AdmissionStatus.BUSY)

        if lock_key is not None:
            self._locks.add(lock_key)
        for key in keys:
            self._ledger[key] = LedgerEntry(state=LedgerState.IN_FLIGHT)
        logger.debug("Admitted event %s", keys)
        return AdmissionDecision(
            AdmissionStatus.ADMITTED, AdmissionTicket(keys=keys, lock_key=lock_key)
        )

    def release(self, ticket: AdmissionTicket) -> None:
        """Drop the lock and mark every key completed. Safe to call twice."""
        if ticket.lock_key is not None:
            self._locks.discard(ticket.lock_key)
        now = self._clock()
        for key in ticket.keys:
            entry = self._ledger.get(key)
            if entry is not None and entry.state is LedgerState.COMPLETED:
                continue
            self._ledger[key] = LedgerEntry(
                state=LedgerState.COMPLETED, completed_at=now
            )

    @contextmanager
    def hold(self, ticket: AdmissionTicket) -> Iterator[AdmissionTicket]:
        """Release the ticket on every exit path."""
        try:
            yield ticket
        finally:
            self.release(ticket)

    def sweep(self, now: Optional[float] = None) -> int:
        """Evict completed entries older than the retention window."""
        if now is None:
            now = self._clock()
        expired = [
            key
            for key, entry in self._ledger.items()
            if entry.state is LedgerState.COMPLETED
            and entry.completed_at is not None
            and now - entry.completed_at >= self._retention
        ]
        for key in expired:
            del self._ledger[key]
        logger.debug(
            "Ledger sweep removed %d entries, %d remaining",
            len(expired),
            len(self._ledger),
        )
        return len(expired)

    def entry(self, key: str) -> Optional[LedgerEntry]:
        return self._ledger.get(key)

    def is_locked(self, lock_key: LockKey) -> bool:
        return lock_key in self._locks

    def __len__(self) -> int:
        return len(self._ledger)


class LedgerSweeper:
    """Background loop that sweeps the admission ledger on a fixed interval."""

    def __init__(
        self,
        admission: EventAdmissionFilter,
        interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
    ) -> None:
        self._admission = admission
        self._interval = interval_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            removed = self._admission.sweep()
            if removed:
                logger.info("Ledger cleanup removed %d old events", removed)

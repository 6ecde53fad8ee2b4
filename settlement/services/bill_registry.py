from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from settlement.errors import ConflictError, InvalidTransitionError
from settlement.models.bill import ALLOWED_TRANSITIONS, Bill, BillKind, BillStatus
from settlement.repositories.base import BillRepository

logger = logging.getLogger(__name__)

BillKey = tuple[int, str, BillKind]


class _KeyClaim:
    __slots__ = ("lock", "holders")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.holders = 0


class BillRegistry:
    """Keeps at most one active bill per (counterparty, period, kind).

    Detecting a conflict (``find_active``) and resolving it (``replace`` or
    ``create``) are separate calls; deciding to overwrite is the caller's job.
    """

    def __init__(self, repo: BillRepository) -> None:
        self.repo = repo
        self._claims: dict[BillKey, _KeyClaim] = {}
        self._claims_guard = threading.Lock()

    @contextmanager
    def claim(self, key: BillKey) -> Iterator[None]:
        """Hold an exclusive in-process claim on ``key`` for the duration of the block.

        The per-key lock lives only while some caller holds or waits for it.
        """
        with self._claims_guard:
            entry = self._claims.get(key)
            if entry is None:
                entry = self._claims[key] = _KeyClaim()
            entry.holders += 1
        try:
            with entry.lock:
                logger.debug("Claimed bill key %s", key)
                yield
        finally:
            with self._claims_guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._claims[key]

    def find_active(self, counterparty_id: int, period: str, kind: BillKind) -> Bill | None:
        result = self.repo.find_active(counterparty_id, period, kind)
        logger.debug(
            "find_active counterparty=%s period=%s kind=%s found=%s",
            counterparty_id,
            period,
            kind.value,
            result is not None,
        )
        return result

    def create(self, bill: Bill) -> Bill:
        existing = self.repo.find_active(*bill.key)
        if existing is not None:
            logger.warning("Refusing to create bill: %s already active for %s", existing.uuid, bill.key)
            raise ConflictError(bill.key, existing.uuid)
        result = self.repo.create(bill)
        logger.info(
            "Bill created: uuid=%s, counterparty=%s, period=%s, kind=%s, net=%d %s",
            result.uuid,
            result.counterparty_name,
            result.period,
            result.kind.value,
            result.net_amount,
            result.currency,
        )
        return result

    def remove(self, bill: Bill) -> None:
        if bill.id is None:
            raise ValueError("Cannot remove bill without an id")
        if bill.is_terminal:
            raise InvalidTransitionError(f"bill {bill.uuid} is paid and cannot be replaced")
        self.repo.delete(bill.id)
        logger.info("Bill %s soft-deleted for overwrite", bill.uuid)

    def replace(self, existing: Bill, bill: Bill) -> Bill:
        """Swap ``existing`` for ``bill``; on failure ``existing`` stays active."""
        if existing.id is None:
            raise ValueError("Cannot replace bill without an id")
        if existing.is_terminal:
            raise InvalidTransitionError(f"bill {existing.uuid} is paid and cannot be replaced")
        result = self.repo.replace(existing.id, bill)
        logger.info(
            "Bill %s replaced by %s: counterparty=%s, period=%s, kind=%s, net=%d %s",
            existing.uuid,
            result.uuid,
            result.counterparty_name,
            result.period,
            result.kind.value,
            result.net_amount,
            result.currency,
        )
        return result

    def transition(self, bill: Bill, status: BillStatus) -> Bill:
        if bill.id is None:
            raise ValueError("Cannot change status of bill without an id")
        if status not in ALLOWED_TRANSITIONS[bill.status]:
            raise InvalidTransitionError(f"bill {bill.uuid} cannot move from {bill.status.value} to {status.value}")
        self.repo.update_status(bill.id, status)
        logger.info("Bill %s moved %s -> %s", bill.uuid, bill.status.value, status.value)
        bill.status = status
        return bill

    def list_bills(self, period: str, kind: BillKind | None = None) -> list[Bill]:
        result = self.repo.list_by_period(period, kind)
        logger.debug("Listed %d bills for period=%s", len(result), period)
        return result

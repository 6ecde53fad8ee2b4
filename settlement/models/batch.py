from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class OutcomeStatus(str, Enum):
    CREATED = "created"
    SKIPPED = "skipped"
    FAILED = "failed"


class BatchOutcome(BaseModel):
    counterparty_id: int | None = None
    counterparty_name: str
    status: OutcomeStatus
    reason: str = ""
    bill_uuid: str = ""
    net_amount: int = 0


class BatchSummary(BaseModel):
    period: str
    details: list[BatchOutcome] = []

    def _count(self, status: OutcomeStatus) -> int:
        return sum(1 for outcome in self.details if outcome.status == status)

    @property
    def total(self) -> int:
        return len(self.details)

    @property
    def created(self) -> int:
        return self._count(OutcomeStatus.CREATED)

    @property
    def skipped(self) -> int:
        return self._count(OutcomeStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(OutcomeStatus.FAILED)

    def as_dict(self) -> dict:
        return {
            "period": self.period,
            "total": self.total,
            "created": self.created,
            "skipped": self.skipped,
            "failed": self.failed,
            "details": [outcome.model_dump(mode="json") for outcome in self.details],
        }

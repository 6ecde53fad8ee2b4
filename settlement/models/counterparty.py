from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel

from settlement.models.bill import BillKind


class CounterpartyKind(str, Enum):
    SUPPLIER = "supplier"
    AGENCY = "agency"


class RebatePeriod(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"


class Counterparty(BaseModel):
    id: int | None = None
    uuid: str = ""
    name: str
    kind: CounterpartyKind
    credit_term: str = ""  # e.g. "day 15 of next month"
    rebate_period: RebatePeriod | None = None
    rebate_rate: Decimal | None = None  # percent
    settlement_currency: str = ""
    created_at: datetime | None = None

    @property
    def bill_kind(self) -> BillKind:
        if self.kind == CounterpartyKind.AGENCY:
            return BillKind.PAYABLE_AGENCY
        return BillKind.PAYABLE_SUPPLIER

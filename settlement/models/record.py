from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from pydantic import BaseModel


class RawRecord(BaseModel):
    """One billable fact: an ad consumption line or a delivery tail payment."""

    id: int | None = None
    counterparty_id: int
    sub_entity_id: str  # ad account id or supplier contract id
    sub_entity_name: str = ""
    period: str  # 'YYYY-MM'
    amount: int  # cents
    currency: str
    rebate_amount: int | None = None  # cents
    rebate_rate: Decimal | None = None  # percent
    paid_amount: int | None = None  # cents
    reference: str = ""  # delivery number, campaign name...

    @property
    def outstanding_amount(self) -> int:
        return self.amount - (self.paid_amount or 0)

    @property
    def is_settled(self) -> bool:
        return self.paid_amount is not None and self.outstanding_amount <= 0

    @property
    def effective_rebate(self) -> int:
        if self.rebate_amount is not None:
            return self.rebate_amount
        if self.rebate_rate is None:
            return 0
        estimate = Decimal(self.amount) * self.rebate_rate / Decimal(100)
        return int(estimate.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

from __future__ import annotations

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel


class BillKind(str, Enum):
    PAYABLE_AGENCY = "payable_agency"
    PAYABLE_SUPPLIER = "payable_supplier"


class BillStatus(str, Enum):
    DRAFT = "draft"
    PENDING_REVIEW = "pending_review"
    APPROVED = "approved"
    PAID = "paid"


ALLOWED_TRANSITIONS: dict[BillStatus, set[BillStatus]] = {
    BillStatus.DRAFT: {BillStatus.PENDING_REVIEW},
    BillStatus.PENDING_REVIEW: {BillStatus.APPROVED, BillStatus.DRAFT},
    BillStatus.APPROVED: {BillStatus.PAID, BillStatus.DRAFT},
    BillStatus.PAID: set(),
}


class BillLineItem(BaseModel):
    id: int | None = None
    bill_id: int | None = None
    sub_entity_id: str
    description: str = ""
    gross_amount: int = 0  # cents
    rebate_amount: int = 0
    net_amount: int = 0
    record_count: int = 0
    sort_order: int = 0


class Bill(BaseModel):
    id: int | None = None
    uuid: str = ""
    period: str  # 'YYYY-MM'
    kind: BillKind
    counterparty_id: int
    counterparty_name: str = ""
    gross_amount: int = 0  # cents
    rebate_amount: int = 0
    net_amount: int = 0
    currency: str = ""
    record_ids: list[int] = []
    line_items: list[BillLineItem] = []
    status: BillStatus = BillStatus.DRAFT
    payment_due_date: date | None = None
    rebate_due_date: date | None = None
    notes: str = ""
    created_by: str = ""
    created_at: datetime | None = None
    deleted_at: datetime | None = None

    @property
    def key(self) -> tuple[int, str, BillKind]:
        return (self.counterparty_id, self.period, self.kind)

    @property
    def active_key(self) -> str:
        return f"{self.counterparty_id}|{self.period}|{self.kind.value}"

    @property
    def is_terminal(self) -> bool:
        return self.status == BillStatus.PAID

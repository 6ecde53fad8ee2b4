from __future__ import annotations

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel


class AccountCategory(str, Enum):
    PRIMARY = "primary"
    VIRTUAL = "virtual"
    INDEPENDENT = "independent"


class Account(BaseModel):
    id: int | None = None
    uuid: str = ""
    name: str
    currency: str
    category: AccountCategory = AccountCategory.INDEPENDENT
    parent_id: int | None = None
    balance: int = 0  # cents, own currency
    initial_capital: int | None = None  # cents, fixed
    exchange_rate: Decimal = Decimal("1")  # 1 unit of currency = rate units of reference

    @property
    def own_total(self) -> int:
        return self.balance + (self.initial_capital or 0)

    @staticmethod
    def validate_hierarchy(accounts: list[Account]) -> list[str]:
        """Return human-readable problems with the parent/child links, empty when sound."""
        by_id = {acc.id: acc for acc in accounts if acc.id is not None}
        parent_ids = {acc.parent_id for acc in accounts if acc.parent_id is not None}
        problems: list[str] = []
        for acc in accounts:
            if acc.category == AccountCategory.VIRTUAL:
                parent = by_id.get(acc.parent_id) if acc.parent_id is not None else None
                if parent is None:
                    problems.append(f"virtual account {acc.name!r} has no parent")
                elif parent.category != AccountCategory.PRIMARY:
                    problems.append(f"virtual account {acc.name!r} is linked to non-primary {parent.name!r}")
            elif acc.parent_id is not None:
                problems.append(f"{acc.category.value} account {acc.name!r} must not have a parent")
            if acc.category == AccountCategory.INDEPENDENT and acc.id in parent_ids:
                problems.append(f"independent account {acc.name!r} must not have children")
        return problems


class Rollup(BaseModel):
    own_currency_total: int = 0
    reference_total: int = 0


class GlobalStats(BaseModel):
    total_reference: int = 0
    totals_by_currency: dict[str, int] = {}
    primary_count: int = 0
    virtual_count: int = 0
    independent_count: int = 0

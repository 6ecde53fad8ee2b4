"""Balance rollups over the primary/virtual account hierarchy.

A primary account with virtual sub-accounts reports the sum of its own
balance and every child's balance; the children themselves are never
reported standalone. ``global_stats`` relies on that so the same money is
counted exactly once.
"""

from __future__ import annotations

import logging

from settlement.currency import normalize_currency, to_reference
from settlement.errors import NotFoundError
from settlement.models.account import Account, AccountCategory, GlobalStats, Rollup
from settlement.repositories.base import AccountRepository
from settlement.settings import settings

logger = logging.getLogger(__name__)


def children_of(account: Account, accounts: list[Account]) -> list[Account]:
    if account.category != AccountCategory.PRIMARY or account.id is None:
        return []
    return [acc for acc in accounts if acc.category == AccountCategory.VIRTUAL and acc.parent_id == account.id]


def _contributions(account: Account, accounts: list[Account]) -> list[tuple[Account, int]]:
    # the primary brings its initial capital; children bring their current balance only
    return [(account, account.own_total), *((child, child.balance) for child in children_of(account, accounts))]


def _reference_value(account: Account, amount: int, reference_currency: str) -> int:
    return to_reference(amount, account.exchange_rate, account.currency, reference_currency)


def rollup(account: Account, accounts: list[Account], reference_currency: str | None = None) -> Rollup:
    """Aggregate balance of ``account`` plus its virtual children.

    Each contribution converts at the contributing account's own rate.
    ``own_currency_total`` adds raw amounts, which only makes sense when the
    children share the primary's currency; ``global_stats`` keeps the per
    currency breakdown.
    """
    reference_currency = reference_currency or settings.reference_currency
    own_total = 0
    reference_total = 0
    for contributor, amount in _contributions(account, accounts):
        own_total += amount
        reference_total += _reference_value(contributor, amount, reference_currency)
    return Rollup(own_currency_total=own_total, reference_total=reference_total)


def global_stats(accounts: list[Account], reference_currency: str | None = None) -> GlobalStats:
    reference_currency = reference_currency or settings.reference_currency
    by_id = {acc.id: acc for acc in accounts if acc.id is not None}
    stats = GlobalStats()
    totals: dict[str, int] = {}

    for acc in accounts:
        if acc.category == AccountCategory.VIRTUAL:
            stats.virtual_count += 1
            parent = by_id.get(acc.parent_id)
            if parent is None:
                logger.warning("Virtual account %s (id=%s) has no parent, excluded from totals", acc.name, acc.id)
            elif parent.category != AccountCategory.PRIMARY:
                logger.warning(
                    "Virtual account %s (id=%s) is under %s account %s, excluded from totals",
                    acc.name,
                    acc.id,
                    parent.category.value,
                    parent.name,
                )
            continue

        if acc.category == AccountCategory.PRIMARY:
            stats.primary_count += 1
            contributions = _contributions(acc, accounts)
            stats.total_reference += rollup(acc, accounts, reference_currency).reference_total
        else:
            stats.independent_count += 1
            contributions = [(acc, acc.own_total)]
            stats.total_reference += _reference_value(acc, acc.own_total, reference_currency)

        for contributor, amount in contributions:
            currency = normalize_currency(contributor.currency)
            totals[currency] = totals.get(currency, 0) + amount

    stats.totals_by_currency = totals
    logger.debug(
        "global_stats: %d primary, %d virtual, %d independent, total=%d %s",
        stats.primary_count,
        stats.virtual_count,
        stats.independent_count,
        stats.total_reference,
        reference_currency,
    )
    return stats


class LedgerService:
    def __init__(self, repo: AccountRepository) -> None:
        self.repo = repo

    def account_rollup(self, account_id: int) -> Rollup:
        account = self.repo.get_by_id(account_id)
        if account is None:
            logger.warning("Rollup failed: account %s not found", account_id)
            raise NotFoundError("account", account_id)
        return rollup(account, self.repo.list_all())

    def stats(self) -> GlobalStats:
        return global_stats(self.repo.list_all())

    def validate(self) -> list[str]:
        problems = Account.validate_hierarchy(self.repo.list_all())
        for problem in problems:
            logger.warning("Account hierarchy: %s", problem)
        return problems

from __future__ import annotations

import logging

from pydantic import BaseModel

from settlement.currency import normalize_currency
from settlement.errors import MixedCurrencyError
from settlement.models import format_money
from settlement.models.bill import BillLineItem
from settlement.models.record import RawRecord

logger = logging.getLogger(__name__)


class Bucket(BaseModel):
    sub_entity_id: str
    sub_entity_name: str = ""
    currency: str = ""
    records: list[RawRecord] = []
    gross_total: int = 0
    rebate_total: int = 0

    @property
    def net_total(self) -> int:
        return self.gross_total - self.rebate_total

    def to_line_item(self, sort_order: int = 0) -> BillLineItem:
        return BillLineItem(
            sub_entity_id=self.sub_entity_id,
            description=self.sub_entity_name or self.sub_entity_id,
            gross_amount=self.gross_total,
            rebate_amount=self.rebate_total,
            net_amount=self.net_total,
            record_count=len(self.records),
            sort_order=sort_order,
        )


class AggregationResult(BaseModel):
    period: str
    counterparty_id: int
    buckets: list[Bucket] = []
    total_gross: int = 0
    total_rebate: int = 0
    currency: str = ""

    @property
    def total_net(self) -> int:
        return self.total_gross - self.total_rebate

    @property
    def has_activity(self) -> bool:
        return bool(self.buckets)

    @property
    def record_ids(self) -> list[int]:
        return [record.id for bucket in self.buckets for record in bucket.records if record.id is not None]

    def line_items(self) -> list[BillLineItem]:
        return [bucket.to_line_item(i) for i, bucket in enumerate(self.buckets)]

    def notes(self) -> str:
        lines = [f"Settlement detail for {self.period}:"]
        for bucket in self.buckets:
            lines.append(
                f"{bucket.sub_entity_name or bucket.sub_entity_id}: {len(bucket.records)} record(s), "
                f"gross {format_money(bucket.gross_total, bucket.currency)}, "
                f"rebate {format_money(bucket.rebate_total, bucket.currency)}, "
                f"net {format_money(bucket.net_total, bucket.currency)}"
            )
        return "\n".join(lines)


def _reduce(sub_entity_id: str, records: list[RawRecord]) -> Bucket:
    currency = normalize_currency(records[0].currency)
    found = {normalize_currency(record.currency) for record in records}
    if len(found) > 1:
        raise MixedCurrencyError(found, f"sub-entity {sub_entity_id}")
    return Bucket(
        sub_entity_id=sub_entity_id,
        sub_entity_name=next((r.sub_entity_name for r in records if r.sub_entity_name), ""),
        currency=currency,
        records=records,
        gross_total=sum(record.outstanding_amount for record in records),
        rebate_total=sum(record.effective_rebate for record in records),
    )


def aggregate(period: str, counterparty_id: int, records: list[RawRecord]) -> AggregationResult:
    """Group a counterparty's records for ``period`` by sub-entity and total them.

    Fully paid tail payments drop out. An empty result means there is nothing
    to bill, not a failure. Currencies are never converted here: one bucket
    or one counterparty spanning several currencies raises
    ``MixedCurrencyError``.
    """
    grouped: dict[str, list[RawRecord]] = {}
    for record in records:
        if record.period != period or record.counterparty_id != counterparty_id:
            continue
        if record.is_settled:
            continue
        grouped.setdefault(record.sub_entity_id, []).append(record)

    result = AggregationResult(period=period, counterparty_id=counterparty_id)
    if not grouped:
        logger.debug("No billable activity for counterparty=%s period=%s", counterparty_id, period)
        return result

    result.buckets = [_reduce(sub_entity_id, bucket_records) for sub_entity_id, bucket_records in grouped.items()]

    currencies = {bucket.currency for bucket in result.buckets}
    if len(currencies) > 1:
        raise MixedCurrencyError(currencies, f"counterparty {counterparty_id} period {period}")

    result.currency = result.buckets[0].currency
    result.total_gross = sum(bucket.gross_total for bucket in result.buckets)
    result.total_rebate = sum(bucket.rebate_total for bucket in result.buckets)
    logger.info(
        "Aggregated counterparty=%s period=%s: %d bucket(s), gross=%d rebate=%d net=%d %s",
        counterparty_id,
        period,
        len(result.buckets),
        result.total_gross,
        result.total_rebate,
        result.total_net,
        result.currency,
    )
    return result

from __future__ import annotations

import logging
import threading

from settlement.due_dates import parse_period, payment_due_date, rebate_due_date
from settlement.errors import (
    ConflictError,
    NoBillableActivityError,
    NotFoundError,
    NothingOwedError,
)
from settlement.logging import log_context
from settlement.models.batch import BatchOutcome, BatchSummary, OutcomeStatus
from settlement.models.bill import Bill
from settlement.models.counterparty import Counterparty, CounterpartyKind
from settlement.repositories.base import CounterpartyRepository, RawRecordRepository
from settlement.services.aggregation import AggregationResult, aggregate
from settlement.services.bill_registry import BillRegistry
from settlement.settings import settings

logger = logging.getLogger(__name__)

REASON_NO_RECORDS = "no records"
REASON_EXISTS = "already exists"
REASON_NOTHING_OWED = "nothing owed"
REASON_CANCELLED = "cancelled"


class SettlementService:
    def __init__(
        self,
        counterparty_repo: CounterpartyRepository,
        record_repo: RawRecordRepository,
        registry: BillRegistry,
    ) -> None:
        self.counterparty_repo = counterparty_repo
        self.record_repo = record_repo
        self.registry = registry

    def _get_counterparty(self, counterparty_id: int) -> Counterparty:
        counterparty = self.counterparty_repo.get_by_id(counterparty_id)
        if counterparty is None:
            logger.warning("Counterparty %s not found", counterparty_id)
            raise NotFoundError("counterparty", counterparty_id)
        return counterparty

    def _aggregate(self, counterparty: Counterparty, period: str) -> AggregationResult:
        if counterparty.id is None:
            raise ValueError("Cannot aggregate for counterparty without an id")
        records = self.record_repo.list_for_counterparty(counterparty.id, period)
        return aggregate(period, counterparty.id, records)

    def aggregate(self, counterparty_id: int, period: str) -> AggregationResult:
        parse_period(period)
        return self._aggregate(self._get_counterparty(counterparty_id), period)

    def _build_bill(self, counterparty: Counterparty, result: AggregationResult, created_by: str) -> Bill:
        rebate_date = None
        if counterparty.kind == CounterpartyKind.AGENCY and result.total_rebate > 0:
            rebate_date = rebate_due_date(result.period, counterparty.rebate_period)
        return Bill(
            period=result.period,
            kind=counterparty.bill_kind,
            counterparty_id=result.counterparty_id,
            counterparty_name=counterparty.name,
            gross_amount=result.total_gross,
            rebate_amount=result.total_rebate,
            net_amount=result.total_net,
            currency=result.currency,
            record_ids=result.record_ids,
            line_items=result.line_items(),
            payment_due_date=payment_due_date(counterparty.credit_term, result.period),
            rebate_due_date=rebate_date,
            notes=result.notes(),
            created_by=created_by or settings.default_created_by,
        )

    def _generate(self, counterparty: Counterparty, period: str, overwrite: bool, created_by: str) -> Bill:
        result = self._aggregate(counterparty, period)
        if not result.has_activity:
            raise NoBillableActivityError(f"no billable records for {counterparty.name} in {period}")

        key = (result.counterparty_id, period, counterparty.bill_kind)
        with self.registry.claim(key):
            existing = self.registry.find_active(*key)
            if existing is not None and not overwrite:
                raise ConflictError(key, existing.uuid)
            if result.total_net <= 0:
                raise NothingOwedError(f"net amount {result.total_net} for {counterparty.name} in {period}")
            bill = self._build_bill(counterparty, result, created_by)
            if existing is not None:
                logger.info("Overwriting bill %s for %s %s", existing.uuid, counterparty.name, period)
                return self.registry.replace(existing, bill)
            return self.registry.create(bill)

    def generate_bill(
        self,
        counterparty_id: int,
        period: str,
        overwrite: bool = False,
        created_by: str = "",
    ) -> Bill:
        """Create the bill for one counterparty and period; every failure propagates."""
        parse_period(period)
        counterparty = self._get_counterparty(counterparty_id)
        return self._generate(counterparty, period, overwrite, created_by)

    def _settle_one(
        self, counterparty: Counterparty, period: str, overwrite: bool, created_by: str
    ) -> BatchOutcome:
        outcome = BatchOutcome(
            counterparty_id=counterparty.id,
            counterparty_name=counterparty.name,
            status=OutcomeStatus.SKIPPED,
        )
        try:
            bill = self._generate(counterparty, period, overwrite, created_by)
        except NoBillableActivityError:
            outcome.reason = REASON_NO_RECORDS
        except ConflictError:
            outcome.reason = REASON_EXISTS
        except NothingOwedError:
            outcome.reason = REASON_NOTHING_OWED
        except Exception as exc:
            logger.exception("Batch: settlement failed for %s (id=%s)", counterparty.name, counterparty.id)
            outcome.status = OutcomeStatus.FAILED
            outcome.reason = str(exc) or type(exc).__name__
        else:
            outcome.status = OutcomeStatus.CREATED
            outcome.bill_uuid = bill.uuid
            outcome.net_amount = bill.net_amount
        if outcome.status == OutcomeStatus.SKIPPED:
            logger.info("Batch: skipped %s (%s)", counterparty.name, outcome.reason)
        return outcome

    def _run(
        self,
        period: str,
        overwrite: bool,
        kind: CounterpartyKind | None,
        stop_event: threading.Event | None,
        created_by: str,
    ) -> BatchSummary:
        counterparties = self.counterparty_repo.list_all(kind)
        summary = BatchSummary(period=period)
        logger.info("Batch started: period=%s counterparties=%d overwrite=%s", period, len(counterparties), overwrite)

        for counterparty in counterparties:
            if stop_event is not None and stop_event.is_set():
                summary.details.append(
                    BatchOutcome(
                        counterparty_id=counterparty.id,
                        counterparty_name=counterparty.name,
                        status=OutcomeStatus.SKIPPED,
                        reason=REASON_CANCELLED,
                    )
                )
                continue
            with log_context(counterparty=counterparty.name):
                summary.details.append(self._settle_one(counterparty, period, overwrite, created_by))
        return summary

    def run_batch(
        self,
        period: str,
        overwrite: bool = False,
        kind: CounterpartyKind | None = None,
        stop_event: threading.Event | None = None,
        created_by: str = "",
    ) -> BatchSummary:
        """Generate bills for every counterparty, one at a time.

        A counterparty that fails is recorded as failed and the run moves
        on. Setting ``stop_event`` stops scheduling; the remaining
        counterparties are reported as skipped.
        """
        parse_period(period)
        with log_context(period=period):
            summary = self._run(period, overwrite, kind, stop_event, created_by)
        logger.info(
            "Batch finished: period=%s total=%d created=%d skipped=%d failed=%d",
            period,
            summary.total,
            summary.created,
            summary.skipped,
            summary.failed,
        )
        return summary

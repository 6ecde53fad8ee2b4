from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from decimal import Decimal
from typing import TypeVar

from sqlalchemy import Connection, text
from sqlalchemy.engine import RowMapping
from sqlalchemy.exc import IntegrityError
from ulid import ULID

from settlement.constants import SHANGHAI_TZ
from settlement.errors import ConflictError
from settlement.models.account import Account, AccountCategory
from settlement.models.bill import Bill, BillKind, BillLineItem, BillStatus
from settlement.models.counterparty import Counterparty, CounterpartyKind, RebatePeriod
from settlement.models.record import RawRecord
from settlement.repositories.base import (
    AccountRepository,
    BillRepository,
    CounterpartyRepository,
    RawRecordRepository,
)

T = TypeVar("T")


def _now() -> datetime:
    return datetime.now(SHANGHAI_TZ)


def _decimal_or_none(value: object) -> Decimal | None:
    if value is None or value == "":
        return None
    return Decimal(str(value))


def _str_or_none(value: object) -> str | None:
    if value is None:
        return None
    return str(value)


class SQLAlchemyAccountRepository(AccountRepository):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    def create(self, account: Account) -> Account:
        result = self.conn.execute(
            text(
                "INSERT INTO accounts (uuid, name, currency, category, parent_id, balance, "
                "initial_capital, exchange_rate, created_at) "
                "VALUES (:uuid, :name, :currency, :category, :parent_id, :balance, "
                ":initial_capital, :exchange_rate, :created_at)"
            ),
            {
                "uuid": str(ULID()),
                "name": account.name,
                "currency": account.currency,
                "category": account.category.value,
                "parent_id": account.parent_id,
                "balance": account.balance,
                "initial_capital": account.initial_capital,
                "exchange_rate": str(account.exchange_rate),
                "created_at": _now(),
            },
        )
        account_id = result.lastrowid
        self.conn.commit()
        created = self.get_by_id(account_id)
        if created is None:
            raise RuntimeError(f"Failed to retrieve account after create (id={account_id})")
        return created

    @staticmethod
    def _build_account(row: RowMapping) -> Account:
        return Account(
            id=row["id"],
            uuid=row["uuid"],
            name=row["name"],
            currency=row["currency"],
            category=AccountCategory(row["category"]),
            parent_id=row["parent_id"],
            balance=row["balance"],
            initial_capital=row["initial_capital"],
            exchange_rate=Decimal(str(row["exchange_rate"])),
        )

    def get_by_id(self, account_id: int) -> Account | None:
        row = (
            self.conn.execute(text("SELECT * FROM accounts WHERE id = :id"), {"id": account_id})
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return self._build_account(row)

    def list_all(self) -> list[Account]:
        rows = self.conn.execute(text("SELECT * FROM accounts ORDER BY id")).mappings().fetchall()
        return [self._build_account(row) for row in rows]


class SQLAlchemyCounterpartyRepository(CounterpartyRepository):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    def create(self, counterparty: Counterparty) -> Counterparty:
        result = self.conn.execute(
            text(
                "INSERT INTO counterparties (uuid, name, kind, credit_term, rebate_period, "
                "rebate_rate, settlement_currency, created_at) "
                "VALUES (:uuid, :name, :kind, :credit_term, :rebate_period, "
                ":rebate_rate, :settlement_currency, :created_at)"
            ),
            {
                "uuid": str(ULID()),
                "name": counterparty.name,
                "kind": counterparty.kind.value,
                "credit_term": counterparty.credit_term,
                "rebate_period": counterparty.rebate_period.value if counterparty.rebate_period else None,
                "rebate_rate": _str_or_none(counterparty.rebate_rate),
                "settlement_currency": counterparty.settlement_currency,
                "created_at": _now(),
            },
        )
        counterparty_id = result.lastrowid
        self.conn.commit()
        created = self.get_by_id(counterparty_id)
        if created is None:
            raise RuntimeError(f"Failed to retrieve counterparty after create (id={counterparty_id})")
        return created

    @staticmethod
    def _build_counterparty(row: RowMapping) -> Counterparty:
        return Counterparty(
            id=row["id"],
            uuid=row["uuid"],
            name=row["name"],
            kind=CounterpartyKind(row["kind"]),
            credit_term=row["credit_term"],
            rebate_period=RebatePeriod(row["rebate_period"]) if row["rebate_period"] else None,
            rebate_rate=_decimal_or_none(row["rebate_rate"]),
            settlement_currency=row["settlement_currency"],
            created_at=row["created_at"],
        )

    def get_by_id(self, counterparty_id: int) -> Counterparty | None:
        row = (
            self.conn.execute(text("SELECT * FROM counterparties WHERE id = :id"), {"id": counterparty_id})
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return self._build_counterparty(row)

    def list_all(self, kind: CounterpartyKind | None = None) -> list[Counterparty]:
        if kind is None:
            rows = self.conn.execute(text("SELECT * FROM counterparties ORDER BY id")).mappings().fetchall()
        else:
            rows = (
                self.conn.execute(
                    text("SELECT * FROM counterparties WHERE kind = :kind ORDER BY id"),
                    {"kind": kind.value},
                )
                .mappings()
                .fetchall()
            )
        return [self._build_counterparty(row) for row in rows]


class SQLAlchemyRawRecordRepository(RawRecordRepository):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    def create(self, record: RawRecord) -> RawRecord:
        result = self.conn.execute(
            text(
                "INSERT INTO raw_records (counterparty_id, sub_entity_id, sub_entity_name, period, "
                "amount, currency, rebate_amount, rebate_rate, paid_amount, reference, created_at) "
                "VALUES (:counterparty_id, :sub_entity_id, :sub_entity_name, :period, "
                ":amount, :currency, :rebate_amount, :rebate_rate, :paid_amount, :reference, :created_at)"
            ),
            {
                "counterparty_id": record.counterparty_id,
                "sub_entity_id": record.sub_entity_id,
                "sub_entity_name": record.sub_entity_name,
                "period": record.period,
                "amount": record.amount,
                "currency": record.currency,
                "rebate_amount": record.rebate_amount,
                "rebate_rate": _str_or_none(record.rebate_rate),
                "paid_amount": record.paid_amount,
                "reference": record.reference,
                "created_at": _now(),
            },
        )
        self.conn.commit()
        return record.model_copy(update={"id": result.lastrowid})

    @staticmethod
    def _build_record(row: RowMapping) -> RawRecord:
        return RawRecord(
            id=row["id"],
            counterparty_id=row["counterparty_id"],
            sub_entity_id=row["sub_entity_id"],
            sub_entity_name=row["sub_entity_name"],
            period=row["period"],
            amount=row["amount"],
            currency=row["currency"],
            rebate_amount=row["rebate_amount"],
            rebate_rate=_decimal_or_none(row["rebate_rate"]),
            paid_amount=row["paid_amount"],
            reference=row["reference"],
        )

    def list_for_counterparty(self, counterparty_id: int, period: str) -> list[RawRecord]:
        rows = (
            self.conn.execute(
                text(
                    "SELECT * FROM raw_records WHERE counterparty_id = :counterparty_id "
                    "AND period = :period ORDER BY id"
                ),
                {"counterparty_id": counterparty_id, "period": period},
            )
            .mappings()
            .fetchall()
        )
        return [self._build_record(row) for row in rows]


class SQLAlchemyBillRepository(BillRepository):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    def _insert(self, bill: Bill) -> int:
        try:
            result = self.conn.execute(
                text(
                    "INSERT INTO bills (uuid, period, kind, counterparty_id, counterparty_name, "
                    "gross_amount, rebate_amount, net_amount, currency, status, payment_due_date, "
                    "rebate_due_date, notes, created_by, active_key, created_at) "
                    "VALUES (:uuid, :period, :kind, :counterparty_id, :counterparty_name, "
                    ":gross_amount, :rebate_amount, :net_amount, :currency, :status, :payment_due_date, "
                    ":rebate_due_date, :notes, :created_by, :active_key, :created_at)"
                ),
                {
                    "uuid": str(ULID()),
                    "period": bill.period,
                    "kind": bill.kind.value,
                    "counterparty_id": bill.counterparty_id,
                    "counterparty_name": bill.counterparty_name,
                    "gross_amount": bill.gross_amount,
                    "rebate_amount": bill.rebate_amount,
                    "net_amount": bill.net_amount,
                    "currency": bill.currency,
                    "status": bill.status.value,
                    "payment_due_date": bill.payment_due_date.isoformat() if bill.payment_due_date else None,
                    "rebate_due_date": bill.rebate_due_date.isoformat() if bill.rebate_due_date else None,
                    "notes": bill.notes,
                    "created_by": bill.created_by,
                    "active_key": bill.active_key,
                    "created_at": _now(),
                },
            )
        except IntegrityError as exc:
            raise ConflictError(bill.key) from exc
        bill_id = result.lastrowid
        self._insert_line_items(bill_id, bill.line_items)
        self._insert_bill_records(bill_id, bill.record_ids)
        return bill_id

    def _insert_line_items(self, bill_id: int, line_items: list[BillLineItem]) -> None:
        for i, item in enumerate(line_items):
            self.conn.execute(
                text(
                    "INSERT INTO bill_line_items (bill_id, sub_entity_id, description, gross_amount, "
                    "rebate_amount, net_amount, record_count, sort_order) "
                    "VALUES (:bill_id, :sub_entity_id, :description, :gross_amount, "
                    ":rebate_amount, :net_amount, :record_count, :sort_order)"
                ),
                {
                    "bill_id": bill_id,
                    "sub_entity_id": item.sub_entity_id,
                    "description": item.description,
                    "gross_amount": item.gross_amount,
                    "rebate_amount": item.rebate_amount,
                    "net_amount": item.net_amount,
                    "record_count": item.record_count,
                    "sort_order": i,
                },
            )

    def _insert_bill_records(self, bill_id: int, record_ids: list[int]) -> None:
        for record_id in record_ids:
            self.conn.execute(
                text("INSERT INTO bill_records (bill_id, record_id) VALUES (:bill_id, :record_id)"),
                {"bill_id": bill_id, "record_id": record_id},
            )

    def _soft_delete(self, bill_id: int) -> None:
        # Releasing active_key lets a replacement bill claim the same key.
        self.conn.execute(
            text("UPDATE bills SET deleted_at = :deleted_at, active_key = NULL WHERE id = :id"),
            {"deleted_at": _now(), "id": bill_id},
        )

    def _commit_or_rollback(self, write: Callable[[], T]) -> T:
        """Run ``write`` as one transaction: every row lands, or none does."""
        try:
            result = write()
        except Exception:
            self.conn.rollback()
            raise
        self.conn.commit()
        return result

    def _reload(self, bill_id: int) -> Bill:
        created = self.get_by_id(bill_id)
        if created is None:
            raise RuntimeError(f"Failed to retrieve bill after create (id={bill_id})")
        return created

    def create(self, bill: Bill) -> Bill:
        return self._reload(self._commit_or_rollback(lambda: self._insert(bill)))

    def replace(self, old_bill_id: int, bill: Bill) -> Bill:
        def write() -> int:
            self._soft_delete(old_bill_id)
            return self._insert(bill)

        return self._reload(self._commit_or_rollback(write))

    @staticmethod
    def _build_bill(row: RowMapping, item_rows: list[RowMapping], record_ids: list[int]) -> Bill:
        return Bill(
            id=row["id"],
            uuid=row["uuid"],
            period=row["period"],
            kind=BillKind(row["kind"]),
            counterparty_id=row["counterparty_id"],
            counterparty_name=row["counterparty_name"],
            gross_amount=row["gross_amount"],
            rebate_amount=row["rebate_amount"],
            net_amount=row["net_amount"],
            currency=row["currency"],
            record_ids=record_ids,
            line_items=[
                BillLineItem(
                    id=item_row["id"],
                    bill_id=item_row["bill_id"],
                    sub_entity_id=item_row["sub_entity_id"],
                    description=item_row["description"],
                    gross_amount=item_row["gross_amount"],
                    rebate_amount=item_row["rebate_amount"],
                    net_amount=item_row["net_amount"],
                    record_count=item_row["record_count"],
                    sort_order=item_row["sort_order"],
                )
                for item_row in item_rows
            ],
            status=BillStatus(row["status"]),
            payment_due_date=row["payment_due_date"],
            rebate_due_date=row["rebate_due_date"],
            notes=row["notes"],
            created_by=row["created_by"],
            created_at=row["created_at"],
            deleted_at=row["deleted_at"],
        )

    def _row_to_bill(self, row: RowMapping) -> Bill:
        items = (
            self.conn.execute(
                text("SELECT * FROM bill_line_items WHERE bill_id = :bill_id ORDER BY sort_order"),
                {"bill_id": row["id"]},
            )
            .mappings()
            .fetchall()
        )
        record_ids = (
            self.conn.execute(
                text("SELECT record_id FROM bill_records WHERE bill_id = :bill_id ORDER BY record_id"),
                {"bill_id": row["id"]},
            )
            .scalars()
            .all()
        )
        return self._build_bill(row, list(items), list(record_ids))

    def get_by_id(self, bill_id: int) -> Bill | None:
        row = (
            self.conn.execute(
                text("SELECT * FROM bills WHERE id = :id AND deleted_at IS NULL"),
                {"id": bill_id},
            )
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return self._row_to_bill(row)

    def get_by_uuid(self, uuid: str) -> Bill | None:
        row = (
            self.conn.execute(
                text("SELECT * FROM bills WHERE uuid = :uuid AND deleted_at IS NULL"),
                {"uuid": uuid},
            )
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return self._row_to_bill(row)

    def find_active(self, counterparty_id: int, period: str, kind: BillKind) -> Bill | None:
        row = (
            self.conn.execute(
                text(
                    "SELECT * FROM bills WHERE counterparty_id = :counterparty_id AND period = :period "
                    "AND kind = :kind AND deleted_at IS NULL"
                ),
                {"counterparty_id": counterparty_id, "period": period, "kind": kind.value},
            )
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return self._row_to_bill(row)

    def list_by_period(self, period: str, kind: BillKind | None = None) -> list[Bill]:
        sql = "SELECT * FROM bills WHERE period = :period AND deleted_at IS NULL"
        params: dict[str, object] = {"period": period}
        if kind is not None:
            sql += " AND kind = :kind"
            params["kind"] = kind.value
        rows = self.conn.execute(text(sql + " ORDER BY counterparty_name, id"), params).mappings().fetchall()
        return [self._row_to_bill(row) for row in rows]

    def update_status(self, bill_id: int, status: BillStatus) -> None:
        self.conn.execute(
            text("UPDATE bills SET status = :status WHERE id = :id"),
            {"status": status.value, "id": bill_id},
        )
        self.conn.commit()

    def delete(self, bill_id: int) -> None:
        self._commit_or_rollback(lambda: self._soft_delete(bill_id))

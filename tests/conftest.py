"""In-memory SQLite engine matching the migrated schema, plus sample model factories."""

from __future__ import annotations

from decimal import Decimal

import pytest
from sqlalchemy import Connection, create_engine, event, text
from sqlalchemy.engine import Engine

from settlement.models.account import Account, AccountCategory
from settlement.models.counterparty import Counterparty, CounterpartyKind, RebatePeriod
from settlement.models.record import RawRecord

# Matches Alembic head: 3f1c9a7d2e10 (initial schema)
SCHEMA_DDL = """
CREATE TABLE accounts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uuid VARCHAR(26) NOT NULL UNIQUE,
    name TEXT NOT NULL,
    currency TEXT NOT NULL,
    category TEXT NOT NULL,
    parent_id INTEGER REFERENCES accounts(id),
    balance INTEGER NOT NULL DEFAULT 0,
    initial_capital INTEGER,
    exchange_rate TEXT NOT NULL DEFAULT '1',
    created_at DATETIME NOT NULL
);

CREATE TABLE counterparties (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uuid VARCHAR(26) NOT NULL UNIQUE,
    name TEXT NOT NULL,
    kind TEXT NOT NULL,
    credit_term TEXT NOT NULL DEFAULT '',
    rebate_period TEXT,
    rebate_rate TEXT,
    settlement_currency TEXT NOT NULL DEFAULT '',
    created_at DATETIME NOT NULL
);

CREATE TABLE raw_records (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    counterparty_id INTEGER NOT NULL REFERENCES counterparties(id),
    sub_entity_id TEXT NOT NULL,
    sub_entity_name TEXT NOT NULL DEFAULT '',
    period TEXT NOT NULL,
    amount INTEGER NOT NULL,
    currency TEXT NOT NULL,
    rebate_amount INTEGER,
    rebate_rate TEXT,
    paid_amount INTEGER,
    reference TEXT NOT NULL DEFAULT '',
    created_at DATETIME NOT NULL
);

CREATE TABLE bills (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uuid VARCHAR(26) NOT NULL UNIQUE,
    period TEXT NOT NULL,
    kind TEXT NOT NULL,
    counterparty_id INTEGER NOT NULL REFERENCES counterparties(id),
    counterparty_name TEXT NOT NULL DEFAULT '',
    gross_amount INTEGER NOT NULL DEFAULT 0,
    rebate_amount INTEGER NOT NULL DEFAULT 0,
    net_amount INTEGER NOT NULL DEFAULT 0,
    currency TEXT NOT NULL DEFAULT '',
    status TEXT NOT NULL DEFAULT 'draft',
    payment_due_date TEXT,
    rebate_due_date TEXT,
    notes TEXT NOT NULL,
    created_by TEXT NOT NULL DEFAULT '',
    active_key VARCHAR(64) UNIQUE,
    created_at DATETIME NOT NULL,
    deleted_at DATETIME
);

CREATE TABLE bill_line_items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    bill_id INTEGER NOT NULL REFERENCES bills(id) ON DELETE CASCADE,
    sub_entity_id TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    gross_amount INTEGER NOT NULL DEFAULT 0,
    rebate_amount INTEGER NOT NULL DEFAULT 0,
    net_amount INTEGER NOT NULL DEFAULT 0,
    record_count INTEGER NOT NULL DEFAULT 0,
    sort_order INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE bill_records (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    bill_id INTEGER NOT NULL REFERENCES bills(id) ON DELETE CASCADE,
    record_id INTEGER NOT NULL REFERENCES raw_records(id),
    UNIQUE(bill_id, record_id)
);
"""


@pytest.fixture()
def db_engine() -> Engine:
    engine = create_engine("sqlite:///:memory:")

    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()

    return engine


@pytest.fixture()
def db_connection(db_engine: Engine) -> Connection:
    conn = db_engine.connect()
    for statement in SCHEMA_DDL.strip().split(";"):
        stmt = statement.strip()
        if stmt:
            conn.execute(text(stmt))
    conn.commit()
    yield conn
    conn.close()


def _sample_account(**overrides) -> Account:
    defaults = dict(
        name="HSBC USD",
        currency="USD",
        category=AccountCategory.INDEPENDENT,
        balance=100000,
        exchange_rate=Decimal("7.2"),
    )
    defaults.update(overrides)
    return Account(**defaults)


def _sample_agency(**overrides) -> Counterparty:
    defaults = dict(
        name="Blue Media",
        kind=CounterpartyKind.AGENCY,
        credit_term="this month's spend settles on day 15 of next month",
        rebate_period=RebatePeriod.MONTHLY,
        rebate_rate=Decimal("3"),
        settlement_currency="USD",
    )
    defaults.update(overrides)
    return Counterparty(**defaults)


def _sample_record(counterparty_id: int = 1, **overrides) -> RawRecord:
    defaults = dict(
        counterparty_id=counterparty_id,
        sub_entity_id="act-1",
        sub_entity_name="FB Ads 01",
        period="2024-01",
        amount=200000,
        currency="USD",
        rebate_rate=Decimal("3"),
    )
    defaults.update(overrides)
    return RawRecord(**defaults)


@pytest.fixture()
def sample_account():
    return _sample_account


@pytest.fixture()
def sample_agency():
    return _sample_agency


@pytest.fixture()
def sample_record():
    return _sample_record

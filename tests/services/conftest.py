import pytest
from sqlalchemy import Connection

from settlement.repositories.sqlalchemy import (
    SQLAlchemyBillRepository,
    SQLAlchemyCounterpartyRepository,
    SQLAlchemyRawRecordRepository,
)
from settlement.services.bill_registry import BillRegistry
from settlement.services.settlement_service import SettlementService


@pytest.fixture()
def counterparty_repo(db_connection: Connection) -> SQLAlchemyCounterpartyRepository:
    return SQLAlchemyCounterpartyRepository(db_connection)


@pytest.fixture()
def record_repo(db_connection: Connection) -> SQLAlchemyRawRecordRepository:
    return SQLAlchemyRawRecordRepository(db_connection)


@pytest.fixture()
def registry(db_connection: Connection) -> BillRegistry:
    return BillRegistry(SQLAlchemyBillRepository(db_connection))


@pytest.fixture()
def settlement_service(counterparty_repo, record_repo, registry) -> SettlementService:
    return SettlementService(counterparty_repo, record_repo, registry)

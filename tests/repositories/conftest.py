import pytest
from sqlalchemy import Connection

from settlement.repositories.sqlalchemy import (
    SQLAlchemyAccountRepository,
    SQLAlchemyBillRepository,
    SQLAlchemyCounterpartyRepository,
    SQLAlchemyRawRecordRepository,
)


@pytest.fixture()
def account_repo(db_connection: Connection) -> SQLAlchemyAccountRepository:
    return SQLAlchemyAccountRepository(db_connection)


@pytest.fixture()
def counterparty_repo(db_connection: Connection) -> SQLAlchemyCounterpartyRepository:
    return SQLAlchemyCounterpartyRepository(db_connection)


@pytest.fixture()
def record_repo(db_connection: Connection) -> SQLAlchemyRawRecordRepository:
    return SQLAlchemyRawRecordRepository(db_connection)


@pytest.fixture()
def bill_repo(db_connection: Connection) -> SQLAlchemyBillRepository:
    return SQLAlchemyBillRepository(db_connection)

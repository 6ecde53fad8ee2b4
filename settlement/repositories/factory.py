from settlement.repositories.base import (
    AccountRepository,
    BillRepository,
    CounterpartyRepository,
    RawRecordRepository,
)


def get_account_repository() -> AccountRepository:
    from settlement.db import get_connection
    from settlement.repositories.sqlalchemy import SQLAlchemyAccountRepository

    return SQLAlchemyAccountRepository(get_connection())


def get_counterparty_repository() -> CounterpartyRepository:
    from settlement.db import get_connection
    from settlement.repositories.sqlalchemy import SQLAlchemyCounterpartyRepository

    return SQLAlchemyCounterpartyRepository(get_connection())


def get_raw_record_repository() -> RawRecordRepository:
    from settlement.db import get_connection
    from settlement.repositories.sqlalchemy import SQLAlchemyRawRecordRepository

    return SQLAlchemyRawRecordRepository(get_connection())


def get_bill_repository() -> BillRepository:
    from settlement.db import get_connection
    from settlement.repositories.sqlalchemy import SQLAlchemyBillRepository

    return SQLAlchemyBillRepository(get_connection())

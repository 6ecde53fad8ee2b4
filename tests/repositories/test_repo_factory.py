from unittest.mock import MagicMock, patch

from settlement.repositories.factory import (
    get_account_repository,
    get_bill_repository,
    get_counterparty_repository,
    get_raw_record_repository,
)
from settlement.repositories.sqlalchemy import (
    SQLAlchemyAccountRepository,
    SQLAlchemyBillRepository,
    SQLAlchemyCounterpartyRepository,
    SQLAlchemyRawRecordRepository,
)


class TestRepoFactory:
    @patch("settlement.db.get_connection")
    def test_get_account_repository(self, mock_conn):
        mock_conn.return_value = MagicMock()
        assert isinstance(get_account_repository(), SQLAlchemyAccountRepository)

    @patch("settlement.db.get_connection")
    def test_get_counterparty_repository(self, mock_conn):
        mock_conn.return_value = MagicMock()
        assert isinstance(get_counterparty_repository(), SQLAlchemyCounterpartyRepository)

    @patch("settlement.db.get_connection")
    def test_get_raw_record_repository(self, mock_conn):
        mock_conn.return_value = MagicMock()
        assert isinstance(get_raw_record_repository(), SQLAlchemyRawRecordRepository)

    @patch("settlement.db.get_connection")
    def test_get_bill_repository(self, mock_conn):
        mock_conn.return_value = MagicMock()
        repo = get_bill_repository()
        assert isinstance(repo, SQLAlchemyBillRepository)
        assert repo.conn is mock_conn.return_value

from abc import ABC, abstractmethod

from settlement.models.account import Account
from settlement.models.bill import Bill, BillKind, BillStatus
from settlement.models.counterparty import Counterparty, CounterpartyKind
from settlement.models.record import RawRecord


class AccountRepository(ABC):
    @abstractmethod
    def create(self, account: Account) -> Account: ...

    @abstractmethod
    def get_by_id(self, account_id: int) -> Account | None: ...

    @abstractmethod
    def list_all(self) -> list[Account]: ...


class CounterpartyRepository(ABC):
    @abstractmethod
    def create(self, counterparty: Counterparty) -> Counterparty: ...

    @abstractmethod
    def get_by_id(self, counterparty_id: int) -> Counterparty | None: ...

    @abstractmethod
    def list_all(self, kind: CounterpartyKind | None = None) -> list[Counterparty]: ...


class RawRecordRepository(ABC):
    @abstractmethod
    def create(self, record: RawRecord) -> RawRecord: ...

    @abstractmethod
    def list_for_counterparty(self, counterparty_id: int, period: str) -> list[RawRecord]: ...


class BillRepository(ABC):
    @abstractmethod
    def create(self, bill: Bill) -> Bill: ...

    @abstractmethod
    def replace(self, old_bill_id: int, bill: Bill) -> Bill: ...

    @abstractmethod
    def get_by_id(self, bill_id: int) -> Bill | None: ...

    @abstractmethod
    def get_by_uuid(self, uuid: str) -> Bill | None: ...

    @abstractmethod
    def find_active(self, counterparty_id: int, period: str, kind: BillKind) -> Bill | None: ...

    @abstractmethod
    def list_by_period(self, period: str, kind: BillKind | None = None) -> list[Bill]: ...

    @abstractmethod
    def update_status(self, bill_id: int, status: BillStatus) -> None: ...

    @abstractmethod
    def delete(self, bill_id: int) -> None: ...

from decimal import Decimal

from settlement.models.counterparty import CounterpartyKind, RebatePeriod


class TestCounterpartyRepo:
    def test_create_and_get(self, counterparty_repo, sample_agency):
        created = counterparty_repo.create(sample_agency())

        assert created.id is not None
        assert created.uuid != ""
        assert created.kind == CounterpartyKind.AGENCY
        assert created.rebate_period == RebatePeriod.MONTHLY
        assert created.rebate_rate == Decimal("3")
        assert created.created_at is not None

    def test_get_by_id_not_found(self, counterparty_repo):
        assert counterparty_repo.get_by_id(9999) is None

    def test_supplier_without_rebate(self, counterparty_repo, sample_agency):
        created = counterparty_repo.create(
            sample_agency(name="Acme Parts", kind=CounterpartyKind.SUPPLIER, rebate_period=None, rebate_rate=None)
        )
        assert created.rebate_period is None
        assert created.rebate_rate is None

    def test_list_all_filtered_by_kind(self, counterparty_repo, sample_agency):
        counterparty_repo.create(sample_agency(name="Agency A"))
        counterparty_repo.create(sample_agency(name="Supplier B", kind=CounterpartyKind.SUPPLIER))
        counterparty_repo.create(sample_agency(name="Agency C"))

        assert len(counterparty_repo.list_all()) == 3
        agencies = counterparty_repo.list_all(CounterpartyKind.AGENCY)
        assert [cp.name for cp in agencies] == ["Agency A", "Agency C"]
        suppliers = counterparty_repo.list_all(CounterpartyKind.SUPPLIER)
        assert [cp.name for cp in suppliers] == ["Supplier B"]

from decimal import Decimal

import pytest

from settlement.errors import MixedCurrencyError
from settlement.models.record import RawRecord
from settlement.services.aggregation import aggregate


def _record(id, sub_entity_id="act-1", amount=0, **overrides):
    defaults = dict(
        id=id,
        counterparty_id=1,
        sub_entity_id=sub_entity_id,
        sub_entity_name=f"Account {sub_entity_id}",
        period="2024-01",
        amount=amount,
        currency="USD",
    )
    defaults.update(overrides)
    return RawRecord(**defaults)


class TestAggregate:
    def test_two_accounts_with_rate(self):
        records = [
            _record(1, "act-1", 200000, rebate_rate=Decimal("3")),
            _record(2, "act-2", 150000, rebate_rate=Decimal("3")),
        ]
        result = aggregate("2024-01", 1, records)

        assert result.total_gross == 350000
        assert result.total_rebate == 10500
        assert result.total_net == 339500
        assert result.currency == "USD"
        assert result.record_ids == [1, 2]

    def test_conservation(self):
        records = [
            _record(1, "act-1", 123456, rebate_amount=1234),
            _record(2, "act-1", 7890, rebate_rate=Decimal("2.5")),
            _record(3, "act-2", 55555, rebate_amount=0),
            _record(4, "act-3", 10),
        ]
        result = aggregate("2024-01", 1, records)

        assert result.total_gross == sum(r.amount for r in records)
        assert result.total_rebate == sum(r.effective_rebate for r in records)
        assert result.total_gross == sum(b.gross_total for b in result.buckets)
        assert result.total_net == result.total_gross - result.total_rebate
        assert sum(item.net_amount for item in result.line_items()) == result.total_net

    def test_buckets_in_first_seen_order(self):
        records = [_record(1, "b", 100), _record(2, "a", 100), _record(3, "b", 100)]
        result = aggregate("2024-01", 1, records)

        assert [b.sub_entity_id for b in result.buckets] == ["b", "a"]
        assert [len(b.records) for b in result.buckets] == [2, 1]
        assert [item.sort_order for item in result.line_items()] == [0, 1]

    def test_filters_other_periods_and_counterparties(self):
        records = [
            _record(1, amount=100),
            _record(2, amount=999, period="2024-02"),
            _record(3, amount=999, counterparty_id=2),
        ]
        result = aggregate("2024-01", 1, records)
        assert result.total_gross == 100
        assert result.record_ids == [1]

    def test_empty_is_not_an_error(self):
        result = aggregate("2024-01", 1, [])
        assert result.has_activity is False
        assert result.total_gross == 0
        assert result.total_net == 0
        assert result.currency == ""
        assert result.line_items() == []

    def test_tail_payment_uses_outstanding_amount(self):
        records = [_record(1, "DN-1", 100000, paid_amount=30000)]
        result = aggregate("2024-01", 1, records)
        assert result.total_gross == 70000

    def test_fully_paid_records_drop_out(self):
        records = [_record(1, "DN-1", 100000, paid_amount=100000), _record(2, "DN-2", 5000, paid_amount=0)]
        result = aggregate("2024-01", 1, records)
        assert result.record_ids == [2]
        assert result.total_gross == 5000

    def test_only_settled_records_means_no_activity(self):
        result = aggregate("2024-01", 1, [_record(1, amount=100, paid_amount=100)])
        assert result.has_activity is False

    def test_rebate_larger_than_gross_gives_negative_net(self):
        result = aggregate("2024-01", 1, [_record(1, amount=100, rebate_amount=500)])
        assert result.has_activity is True
        assert result.total_net == -400

    def test_rmb_and_cny_are_one_currency(self):
        records = [_record(1, "a", 100, currency="RMB"), _record(2, "b", 100, currency="cny")]
        result = aggregate("2024-01", 1, records)
        assert result.currency == "CNY"
        assert result.total_gross == 200


class TestMixedCurrency:
    def test_within_bucket(self):
        records = [_record(1, "a", 100), _record(2, "a", 100, currency="EUR")]
        with pytest.raises(MixedCurrencyError, match="sub-entity a"):
            aggregate("2024-01", 1, records)

    def test_across_buckets(self):
        records = [_record(1, "a", 100), _record(2, "b", 100, currency="EUR")]
        with pytest.raises(MixedCurrencyError) as exc_info:
            aggregate("2024-01", 1, records)
        assert exc_info.value.currencies == {"USD", "EUR"}


class TestNotes:
    def test_notes_list_every_bucket(self):
        records = [
            _record(1, "act-1", 200000, rebate_rate=Decimal("3")),
            _record(2, "act-2", 150000, rebate_rate=Decimal("3")),
        ]
        notes = aggregate("2024-01", 1, records).notes()

        assert notes.splitlines()[0] == "Settlement detail for 2024-01:"
        assert "Account act-1: 1 record(s), gross USD 2,000.00, rebate USD 60.00, net USD 1,940.00" in notes
        assert "Account act-2" in notes

    def test_line_item_description_falls_back_to_id(self):
        result = aggregate("2024-01", 1, [_record(1, "act-9", 100, sub_entity_name="")])
        assert result.line_items()[0].description == "act-9"

from settlement.models.bill import ALLOWED_TRANSITIONS, Bill, BillKind, BillLineItem, BillStatus


class TestBillLineItem:
    def test_construction(self):
        item = BillLineItem(sub_entity_id="act-1", gross_amount=1000, rebate_amount=30, net_amount=970)
        assert item.id is None
        assert item.bill_id is None
        assert item.sort_order == 0


class TestBill:
    def test_defaults(self):
        bill = Bill(period="2024-01", kind=BillKind.PAYABLE_AGENCY, counterparty_id=1)
        assert bill.id is None
        assert bill.uuid == ""
        assert bill.status == BillStatus.DRAFT
        assert bill.record_ids == []
        assert bill.line_items == []
        assert bill.payment_due_date is None
        assert bill.rebate_due_date is None

    def test_key(self):
        bill = Bill(period="2024-01", kind=BillKind.PAYABLE_SUPPLIER, counterparty_id=7)
        assert bill.key == (7, "2024-01", BillKind.PAYABLE_SUPPLIER)
        assert bill.active_key == "7|2024-01|payable_supplier"

    def test_due_dates_parse_from_iso_strings(self):
        bill = Bill(
            period="2024-01",
            kind=BillKind.PAYABLE_AGENCY,
            counterparty_id=1,
            payment_due_date="2024-02-15",
            rebate_due_date="2024-02-29",
        )
        assert bill.payment_due_date.isoformat() == "2024-02-15"
        assert bill.rebate_due_date.day == 29


class TestTransitions:
    def test_paid_is_terminal(self):
        assert ALLOWED_TRANSITIONS[BillStatus.PAID] == set()
        bill = Bill(period="2024-01", kind=BillKind.PAYABLE_AGENCY, counterparty_id=1, status=BillStatus.PAID)
        assert bill.is_terminal is True

    def test_forward_path(self):
        assert BillStatus.PENDING_REVIEW in ALLOWED_TRANSITIONS[BillStatus.DRAFT]
        assert BillStatus.APPROVED in ALLOWED_TRANSITIONS[BillStatus.PENDING_REVIEW]
        assert BillStatus.PAID in ALLOWED_TRANSITIONS[BillStatus.APPROVED]

    def test_no_skipping_review(self):
        assert BillStatus.APPROVED not in ALLOWED_TRANSITIONS[BillStatus.DRAFT]

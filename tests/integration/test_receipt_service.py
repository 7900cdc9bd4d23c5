"""
Integration tests for receipt lookups and detail reconstruction.
"""

import pytest
from decimal import Decimal

from canteen.exceptions import ReceiptNotFoundError
from canteen.services import catalog_service, receipt_service
from canteen.services.balance_service import top_up
from canteen.services.purchase_service import submit_purchase


class TestReceiptQueries:

    def test_get_receipt(self, session, customer, items):
        receipt_id = submit_purchase(session, 'C001', [(10, 1)], 'CARD')

        receipt = receipt_service.get_receipt(session, receipt_id)
        assert receipt.payment_method == 'CARD'
        assert receipt.total == Decimal('12000')

    def test_unknown_receipt(self, session):
        with pytest.raises(ReceiptNotFoundError):
            receipt_service.get_receipt(session, 4242)
        with pytest.raises(ReceiptNotFoundError):
            receipt_service.get_receipt_details(session, 4242)

    def test_receipts_by_customer_newest_first(self, session, customer, items):
        first = submit_purchase(session, 'C001', [(20, 1)])
        second = submit_purchase(session, 'C001', [(20, 2)])

        receipts = receipt_service.get_receipts_by_customer(session, 'C001')
        assert [r.id for r in receipts] == [second, first]
        assert receipt_service.get_receipts_by_customer(session, 'OTHER') == []


class TestReceiptDetails:

    def test_details_ordered_by_item_id(self, session, customer, items):
        receipt_id = submit_purchase(session, 'C001', [(20, 2), (11, 1), (10, 1)])

        details = receipt_service.get_receipt_details(session, receipt_id)
        assert [(o.item.id, o.quantity) for o in details] == [(10, 1), (11, 1), (20, 2)]
        assert details[2].line_total == Decimal('6000')

    def test_line_totals_add_up_to_receipt_total(self, session, customer, items):
        receipt_id = submit_purchase(session, 'C001', [(10, 2), (11, 1)])

        details = receipt_service.get_receipt_details(session, receipt_id)
        receipt = receipt_service.get_receipt(session, receipt_id)
        assert sum(o.line_total for o in details) == receipt.total

    def test_details_use_current_catalog_price(self, session, customer, items):
        """Lines carry no price snapshot: a later price change shows up."""
        top_up(session, 'C001', 10000)
        receipt_id = submit_purchase(session, 'C001', [(10, 2)])
        catalog_service.update_item(session, 10, price='15000')

        details = receipt_service.get_receipt_details(session, receipt_id)
        receipt = receipt_service.get_receipt(session, receipt_id)
        assert details[0].line_total == Decimal('30000')
        assert receipt.total == Decimal('24000')

    def test_item_order_to_dict(self, session, customer, items):
        receipt_id = submit_purchase(session, 'C001', [(20, 3)])

        data = receipt_service.get_receipt_details(session, receipt_id)[0].to_dict()
        assert data['quantity'] == 3
        assert data['item']['name'] == 'Iced tea'
        assert Decimal(data['line_total']) == Decimal('9000')

"""
Integration tests for the JSON API.
"""

from decimal import Decimal


class TestCustomerEndpoints:

    def test_register_and_get_customer(self, client):
        response = client.post('/customers/', json={'id': 'S1', 'name': 'Pham D', 'customer_type': 'staff'})
        assert response.status_code == 201
        assert response.get_json()['balance'] in ('0', '0.00')

        response = client.get('/customers/S1')
        assert response.status_code == 200
        assert response.get_json()['name'] == 'Pham D'

    def test_unknown_customer_is_404(self, client):
        response = client.get('/customers/NOPE')
        assert response.status_code == 404
        body = response.get_json()
        assert body['status'] == 'error'
        assert body['error'] == 'CustomerNotFoundError'

    def test_duplicate_registration_is_409(self, client, customer):
        response = client.post('/customers/', json={'id': 'C001', 'name': 'Again'})
        assert response.status_code == 409

    def test_non_json_body_is_400(self, client):
        response = client.post('/customers/', data='id=S1', content_type='text/plain')
        assert response.status_code == 400

    def test_top_up_and_debit(self, client, customer):
        response = client.post('/customers/C001/top-up', json={'amount': 5000})
        assert response.status_code == 200
        assert Decimal(response.get_json()['balance']) == Decimal('55000')

        response = client.post('/customers/C001/debit', json={'amount': '15000'})
        assert response.status_code == 200
        assert Decimal(response.get_json()['balance']) == Decimal('40000')

    def test_null_id_is_rejected(self, client):
        response = client.post('/customers/', json={'id': None, 'name': 'X'})
        assert response.status_code == 400
        assert client.get('/customers/None').status_code == 404

    def test_non_string_id_is_rejected(self, client):
        response = client.post('/customers/', json={'id': 42, 'name': 'X'})
        assert response.status_code == 400

    def test_huge_top_up_is_400(self, client, customer):
        response = client.post('/customers/C001/top-up', json={'amount': 1e30})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'InvalidAmountError'

    def test_invalid_top_up_amount(self, client, customer):
        response = client.post('/customers/C001/top-up', json={'amount': -10})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'InvalidAmountError'


class TestCatalogEndpoints:

    def test_item_crud(self, client):
        response = client.post('/items/', json={'type': 1, 'name': 'Lemonade', 'price': '9000', 'amount': 12})
        assert response.status_code == 201
        item_id = response.get_json()['id']

        response = client.put(f'/items/{item_id}', json={'price': 9500})
        assert response.status_code == 200
        assert Decimal(response.get_json()['price']) == Decimal('9500')

        response = client.get('/items/?type=1')
        assert [i['id'] for i in response.get_json()['results']] == [item_id]

        assert client.delete(f'/items/{item_id}').status_code == 204
        assert client.get(f'/items/{item_id}').status_code == 404

    def test_unknown_type_filter_is_400(self, client):
        assert client.get('/items/?type=abc').status_code == 400
        assert client.get('/items/?type=9').status_code == 400

    def test_unknown_item_type_is_400(self, client):
        response = client.post('/items/', json={'type': 5, 'name': 'Soup', 'price': 1000})
        assert response.status_code == 400

    def test_bad_integer_field(self, client):
        response = client.post('/items/', json={'name': 'Soup', 'price': 1000, 'amount': 'lots'})
        assert response.status_code == 400


class TestPurchaseEndpoints:

    def test_purchase_and_receipt(self, client, customer, items):
        response = client.post('/purchases/', json={
            'customer_id': 'C001',
            'items': [{'item_id': 10, 'quantity': 2}, {'item_id': 11, 'quantity': 1}],
        })
        assert response.status_code == 201
        body = response.get_json()
        assert Decimal(body['total']) == Decimal('36000')

        response = client.get(f"/receipts/{body['receipt_id']}")
        assert response.status_code == 200
        receipt = response.get_json()
        assert receipt['payment_method'] == 'BALANCE'
        assert [(l['item']['id'], l['quantity']) for l in receipt['lines']] == [(10, 2), (11, 1)]

        response = client.get('/customers/C001')
        assert Decimal(response.get_json()['balance']) == Decimal('14000')

        response = client.get('/customers/C001/receipts')
        assert [r['id'] for r in response.get_json()['results']] == [body['receipt_id']]

    def test_insufficient_funds_is_409(self, client, customer, items):
        response = client.post('/purchases/', json={
            'customer_id': 'C001',
            'items': [{'item_id': 10, 'quantity': 5}],
        })
        assert response.status_code == 409
        assert response.get_json()['error'] == 'InsufficientFundsError'

        response = client.get('/customers/C001/receipts')
        assert response.get_json()['results'] == []

    def test_missing_customer_id_is_400(self, client, items):
        response = client.post('/purchases/', json={'customer_id': None, 'items': [{'item_id': 10, 'quantity': 1}]})
        assert response.status_code == 400

    def test_huge_quantity_is_400(self, client, customer, items):
        response = client.post('/purchases/', json={
            'customer_id': 'C001',
            'items': [{'item_id': 10, 'quantity': 10 ** 30}],
        })
        assert response.status_code == 400
        assert response.get_json()['error'] == 'InvalidQuantityError'

    def test_empty_cart_is_400(self, client, customer):
        response = client.post('/purchases/', json={'customer_id': 'C001', 'items': []})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'EmptyCartError'

    def test_items_must_be_a_list(self, client, customer):
        response = client.post('/purchases/', json={'customer_id': 'C001', 'items': {'10': 1}})
        assert response.status_code == 400

    def test_unknown_item_is_404(self, client, customer, items):
        response = client.post('/purchases/', json={
            'customer_id': 'C001',
            'items': [{'item_id': 404, 'quantity': 1}],
        })
        assert response.status_code == 404

    def test_unknown_receipt_is_404(self, client):
        assert client.get('/receipts/9999').status_code == 404

    def test_unknown_route_is_json_404(self, client):
        response = client.get('/nowhere')
        assert response.status_code == 404
        assert response.get_json()['status'] == 'error'

    def test_health(self, client):
        assert client.get('/health').get_json() == {'status': 'ok'}

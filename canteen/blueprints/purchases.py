from flask import Blueprint, request, jsonify, current_app, Response
from typing import Any, Dict, Tuple
from canteen.database import get_session
from canteen.exceptions import ValidationError
from canteen.services import purchase_service, receipt_service

purchases_bp = Blueprint('purchases', __name__)


def _get_json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


@purchases_bp.route('/purchases/', methods=['POST'])
def submit_purchase() -> Tuple[Response, int]:
    """
    Record a purchase.

    Body: ``{"customer_id": "...", "payment_method": "BALANCE",
    "items": [{"item_id": 10, "quantity": 2}, ...]}``
    """
    session = get_session()
    data = _get_json_body()

    customer_id = data.get('customer_id')
    if not isinstance(customer_id, str) or not customer_id.strip():
        raise ValidationError("'customer_id' is required")

    items = data.get('items')
    if items is not None and not isinstance(items, list):
        raise ValidationError("'items' must be a list")

    timeout = current_app.config.get('PURCHASE_TIMEOUT') or None
    receipt_id = purchase_service.submit_purchase(
        session,
        customer_id,
        items or [],
        payment_method=data.get('payment_method') or current_app.config.get('DEFAULT_PAYMENT_METHOD'),
        timeout=timeout,
        track_stock=current_app.config.get('TRACK_STOCK', False)
    )

    receipt = receipt_service.get_receipt(session, receipt_id)
    return jsonify({'receipt_id': receipt_id, 'total': str(receipt.total)}), 201


@purchases_bp.route('/receipts/<int:receipt_id>', methods=['GET'])
def receipt_detail(receipt_id: int) -> Response:
    """Receipt header plus its lines priced at current catalog prices."""
    session = get_session()
    receipt = receipt_service.get_receipt(session, receipt_id)
    details = receipt_service.get_receipt_details(session, receipt_id)

    payload = receipt.to_dict()
    payload['lines'] = [order.to_dict() for order in details]
    return jsonify(payload)

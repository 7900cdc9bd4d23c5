from flask import Blueprint, request, jsonify, current_app, Response
from typing import Any, Dict, Optional, Tuple
from canteen.database import get_session
from canteen.exceptions import ValidationError
from canteen.services import balance_service, customer_service, receipt_service

customers_bp = Blueprint('customers', __name__, url_prefix='/customers')


def _get_json_body() -> Dict[str, Any]:
    """Return the request JSON object, rejecting anything that is not one."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def _optional_str(data: Dict[str, Any], key: str) -> Optional[str]:
    """Return ``data[key]`` as a string; null stays None, other types are rejected."""
    value = data.get(key)
    if value is None or isinstance(value, str):
        return value
    raise ValidationError(f"'{key}' must be a string")


@customers_bp.route('/', methods=['POST'])
def register_customer() -> Tuple[Response, int]:
    """Register a customer with a zero balance."""
    session = get_session()
    data = _get_json_body()

    customer = customer_service.register_customer(
        session,
        _optional_str(data, 'id'),
        _optional_str(data, 'name'),
        _optional_str(data, 'customer_type')
    )
    current_app.logger.info(f"Customer {customer.id} registered via API")
    return jsonify(customer.to_dict()), 201


@customers_bp.route('/<customer_id>', methods=['GET'])
def get_customer(customer_id: str) -> Response:
    session = get_session()
    customer = customer_service.get_customer(session, customer_id)
    return jsonify(customer.to_dict())


@customers_bp.route('/<customer_id>/top-up', methods=['POST'])
def top_up(customer_id: str) -> Response:
    """Credit the customer's balance by ``amount``."""
    session = get_session()
    data = _get_json_body()
    balance = balance_service.top_up(session, customer_id, data.get('amount'))
    return jsonify({'customer_id': customer_id, 'balance': str(balance)})


@customers_bp.route('/<customer_id>/debit', methods=['POST'])
def debit(customer_id: str) -> Response:
    """Manual balance correction outside of a purchase."""
    session = get_session()
    data = _get_json_body()
    balance = balance_service.debit(session, customer_id, data.get('amount'))
    return jsonify({'customer_id': customer_id, 'balance': str(balance)})


@customers_bp.route('/<customer_id>/receipts', methods=['GET'])
def list_receipts(customer_id: str) -> Response:
    session = get_session()
    customer_service.get_customer(session, customer_id)
    receipts = receipt_service.get_receipts_by_customer(session, customer_id)
    return jsonify({'results': [r.to_dict() for r in receipts]})

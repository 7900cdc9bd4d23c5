from flask import Blueprint, request, jsonify, current_app, Response
from typing import Any, Dict, Optional, Tuple
from canteen.database import get_session
from canteen.exceptions import ValidationError
from canteen.services import catalog_service
from canteen.utils.number_format import parse_int

catalog_bp = Blueprint('catalog', __name__, url_prefix='/items')


def _get_json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def _optional_int(data: Dict[str, Any], key: str) -> Optional[int]:
    value = data.get(key)
    if value is None:
        return None
    try:
        return parse_int(value)
    except ValueError:
        raise ValidationError(f"'{key}' must be an integer")


@catalog_bp.route('/', methods=['GET'])
def list_items() -> Response:
    """List catalog items, optionally filtered with ?type=<tag>."""
    session = get_session()
    item_type = request.args.get('type') or None
    items = catalog_service.list_items_by_type(session, item_type)
    return jsonify({'results': [item.to_dict() for item in items]})


@catalog_bp.route('/', methods=['POST'])
def create_item() -> Tuple[Response, int]:
    session = get_session()
    data = _get_json_body()

    item = catalog_service.create_item(
        session,
        item_type=_optional_int(data, 'type') or 0,
        name=data.get('name', ''),
        price=data.get('price'),
        description=data.get('description', ''),
        amount=_optional_int(data, 'amount') or 0,
        item_id=_optional_int(data, 'id')
    )
    current_app.logger.info(f"Item {item.id} ('{item.name}') added to catalog")
    return jsonify(item.to_dict()), 201


@catalog_bp.route('/<int:item_id>', methods=['GET'])
def get_item(item_id: int) -> Response:
    session = get_session()
    return jsonify(catalog_service.get_item(session, item_id).to_dict())


@catalog_bp.route('/<int:item_id>', methods=['PUT'])
def update_item(item_id: int) -> Response:
    session = get_session()
    data = _get_json_body()

    item = catalog_service.update_item(
        session,
        item_id,
        name=data.get('name'),
        price=data.get('price'),
        description=data.get('description'),
        amount=_optional_int(data, 'amount')
    )
    return jsonify(item.to_dict())


@catalog_bp.route('/<int:item_id>', methods=['DELETE'])
def delete_item(item_id: int) -> Tuple[str, int]:
    session = get_session()
    catalog_service.delete_item(session, item_id)
    current_app.logger.info(f"Item {item_id} removed from catalog")
    return '', 204

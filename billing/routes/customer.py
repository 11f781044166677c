
from flask import Blueprint, request, jsonify, current_app
from sqlalchemy.exc import SQLAlchemyError

from billing import db
from billing.decorators import login_required
from billing.errors import InvalidFieldValue, MissingRequiredField, StoreError
from billing.models.customer import Customer, CustomerType

customer_bp = Blueprint('customer', __name__)

CUSTOMER_TYPES = [t.value for t in CustomerType]


@customer_bp.route('/api/customers', methods=['GET'])
@login_required
def customer_list():
    customers = Customer.query.order_by(Customer.created_at.desc(), Customer.id.desc()).all()
    return jsonify([c.to_dict() for c in customers])


@customer_bp.route('/api/customers', methods=['POST'])
@login_required
def customer_new():
    data = request.get_json(silent=True) or {}
    values = {key: (str(data.get(key) or '')).strip() for key in ('type', 'name', 'address', 'email', 'phone', 'country')}
    for key in ('type', 'name', 'phone', 'country'):
        if not values[key]:
            raise MissingRequiredField(f"'{key}' is required", field=key)
    if values['type'] not in CUSTOMER_TYPES:
        raise InvalidFieldValue(f"Customer type must be one of: {', '.join(CUSTOMER_TYPES)}", field='type')

    customer = Customer(
        type=values['type'],
        name=values['name'],
        address=values['address'] or None,
        email=values['email'] or None,
        phone=values['phone'],
        country=values['country'],
    )
    db.session.add(customer)
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Error in customer_new: {e}")
        raise StoreError('Could not save customer')
    current_app.logger.info("[CUSTOMER] created id=%s name=%s", customer.id, customer.name)
    return jsonify(customer.to_dict()), 201

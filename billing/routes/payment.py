
from flask import Blueprint, request, jsonify, current_app
from billing.decorators import login_required, current_user_id
from billing.services import payment_ledger

payment_bp = Blueprint("payment", __name__)


def _quotation_ids(raw_ids):
    # 数値にならない値は無視する
    ids = []
    for value in raw_ids:
        try:
            ids.append(int(value.strip(), 10))
        except ValueError:
            continue
    return ids


# 見積から顧客名（client）の一覧
@payment_bp.route("/api/payments/customers", methods=["GET"])
@login_required
def payment_customers():
    return jsonify(payment_ledger.distinct_customers_from_quotations())


@payment_bp.route("/api/payments/quotations/<customer_name>", methods=["GET"])
@login_required
def payment_customer_quotations(customer_name):
    return jsonify(payment_ledger.list_quotations_for_customer(customer_name))


@payment_bp.route("/api/payments/customer/<customer_name>", methods=["GET"])
@login_required
def payment_customer_list(customer_name):
    payments = payment_ledger.list_by_customer(customer_name)
    return jsonify([p.to_dict() for p in payments])


@payment_bp.route("/api/payments", methods=["GET"])
@login_required
def payment_list():
    # ?quotationId=1&quotationId=2 で見積単位に絞り込み
    raw_ids = request.args.getlist("quotationId")
    if raw_ids:
        ids = _quotation_ids(raw_ids)
        payments = payment_ledger.list_by_quotation_ids(ids)
    else:
        payments = payment_ledger.list_all()
    return jsonify([p.to_dict() for p in payments])


@payment_bp.route("/api/payments/<int:payment_id>", methods=["GET"])
@login_required
def payment_detail(payment_id):
    return jsonify(payment_ledger.get_by_id(payment_id).to_dict())


@payment_bp.route("/api/payments", methods=["POST"])
@login_required
def payment_create():
    data = request.get_json(silent=True)
    current_app.logger.debug("[payment_create] body=%s user_id=%s", data, current_user_id())
    payment = payment_ledger.create_payment(data, current_user_id())
    return jsonify(payment_ledger.get_by_id(payment.id).to_dict()), 201


@payment_bp.route("/api/payments/<int:payment_id>", methods=["PUT"])
@login_required
def payment_update(payment_id):
    data = request.get_json(silent=True)
    current_app.logger.debug("[payment_update] id=%s body=%s", payment_id, data)
    payment = payment_ledger.update_payment(payment_id, data)
    return jsonify(payment_ledger.get_by_id(payment.id).to_dict())


@payment_bp.route("/api/payments/<int:payment_id>", methods=["DELETE"])
@login_required
def payment_delete(payment_id):
    payment_ledger.delete_payment(payment_id)
    return jsonify({"message": "Payment deleted successfully"})

from flask import Blueprint, request, jsonify

from billing.decorators import login_required
from billing.errors import InvalidFieldValue
from billing.services.gateway import create_order_for_payment
from billing.validators import is_number

gateway_bp = Blueprint("gateway", __name__)


# 決済ゲートウェイの注文作成（金額は最小通貨単位に変換して送信）
@gateway_bp.route("/api/create-order", methods=["POST"])
@login_required
def create_order():
    data = request.get_json(silent=True) or {}
    amount = data.get("amount")
    if not is_number(amount) or amount <= 0:
        raise InvalidFieldValue("Amount must be a positive number", field="amount")
    return jsonify(create_order_for_payment(amount, data.get("paymentId")))

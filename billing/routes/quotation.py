
from flask import Blueprint, request, jsonify, current_app
from billing.decorators import login_required, current_user_id
from billing.services import quotation_lifecycle

quotation_bp = Blueprint("quotation", __name__)


@quotation_bp.route("/api/quotations", methods=["GET"])
@login_required
def quotation_list():
    quotations = quotation_lifecycle.list_quotations()
    return jsonify([q.to_dict() for q in quotations])


@quotation_bp.route("/api/quotations/<int:quotation_id>", methods=["GET"])
@login_required
def quotation_detail(quotation_id):
    quotation = quotation_lifecycle.get_quotation(quotation_id)
    return jsonify(quotation.to_dict())


@quotation_bp.route("/api/quotations", methods=["POST"])
@login_required
def quotation_create():
    data = request.get_json(silent=True)
    current_app.logger.debug("[quotation_create] body=%s user_id=%s", data, current_user_id())
    quotation = quotation_lifecycle.create_quotation(data, current_user_id())
    return jsonify(quotation.to_dict()), 201


@quotation_bp.route("/api/quotations/<int:quotation_id>", methods=["PUT"])
@login_required
def quotation_update(quotation_id):
    data = request.get_json(silent=True)
    current_app.logger.debug("[quotation_update] id=%s body=%s", quotation_id, data)
    quotation = quotation_lifecycle.update_quotation(quotation_id, data, current_user_id())
    return jsonify(quotation.to_dict())


# 見積削除（紐づく支払いも削除）
@quotation_bp.route("/api/quotations/<int:quotation_id>", methods=["DELETE"])
@login_required
def quotation_delete(quotation_id):
    quotation_lifecycle.delete_quotation(quotation_id)
    return jsonify({"message": "Quotation and associated payments deleted successfully"})

from flask import Blueprint


main_bp = Blueprint('main', __name__)


# ヘルスチェック（認証・DB依存なし）
@main_bp.route("/health")
def health():
    return "OK", 200

import logging
import os

from flask import Flask, g, jsonify, session
from flask_sqlalchemy import SQLAlchemy

from .config import Config

db = SQLAlchemy()


def create_app(config_object=None) -> Flask:
    """Flask アプリ本体を生成するファクトリ"""
    from billing.errors import BillingError
    from billing.models.user import User

    def load_current_user():
        user_id = session.get("user_id")
        if not user_id:
            g.current_user = None
            return

        user = db.session.get(User, user_id)
        if not user or not getattr(user, "is_active", True):
            session.clear()
            g.current_user = None
        else:
            g.current_user = user

    # --- ログ設定 ---
    debug_mode = os.environ.get("FLASK_DEBUG", "0") == "1"
    logging.basicConfig(
        level=logging.DEBUG if debug_mode else logging.INFO,
        format='[%(asctime)s] %(levelname)s in %(module)s: %(message)s',
    )

    app = Flask(__name__)
    app.logger.setLevel(logging.DEBUG if debug_mode else logging.INFO)

    # --- 設定 ---
    app.config.from_object(config_object or Config)
    app.logger.info("[DB] Using database: %s", app.config["SQLALCHEMY_DATABASE_URI"])

    @app.errorhandler(BillingError)
    def billing_error(e):
        if e.status_code >= 500:
            app.logger.error("[ERROR] %s: %s", type(e).__name__, e.message)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"message": "Resource not found", "error": "NotFound"}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"message": "Method not allowed", "error": "MethodNotAllowed"}), 405

    @app.errorhandler(500)
    def internal_error(e):
        original = getattr(e, "original_exception", None)
        app.logger.exception("[ERROR] unhandled exception: %s", original or e)
        db.session.rollback()
        return jsonify({"message": "Server error", "error": "ServerError"}), 500

    app.before_request(load_current_user)

    db.init_app(app)

    # テーブル作成（モデルを import してから create_all）
    with app.app_context():
        from billing.models.customer import Customer
        from billing.models.quotation import Quotation
        from billing.models.quotation_item import QuotationItem
        from billing.models.payment import Payment
        from billing.models.payment_reconciliation import PaymentReconciliation

        db.create_all()

    # --- ゲートウェイ（テストでは差し替え可能） ---
    from billing.services.gateway import build_gateway

    app.extensions["payment_gateway"] = build_gateway(app.config)

    # --- Blueprint 登録（ここで import して循環参照を回避） ---
    from billing.routes.main import main_bp
    from billing.routes.auth import auth_bp
    from billing.routes.customer import customer_bp
    from billing.routes.quotation import quotation_bp
    from billing.routes.payment import payment_bp
    from billing.routes.gateway import gateway_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(customer_bp)
    app.register_blueprint(quotation_bp)
    app.register_blueprint(payment_bp)
    app.register_blueprint(gateway_bp)

    from billing.commands import register_commands

    register_commands(app)

    def log_routes():
        app.logger.debug("[Flask routes] URL map:")
        for rule in app.url_map.iter_rules():
            app.logger.debug("%s %s -> %s", ",".join(sorted(rule.methods)), rule.rule, rule.endpoint)

    log_routes()

    app.logger.info("[BOOT] create_app completed")
    return app

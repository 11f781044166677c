
from flask import Blueprint, request, session, jsonify, current_app, g
from sqlalchemy.exc import SQLAlchemyError

from billing import db
from billing.decorators import login_required
from billing.errors import AuthenticationError, ConflictError, MissingRequiredField, InvalidFieldValue, StoreError
from billing.models.user import User

auth_bp = Blueprint("auth", __name__)


@auth_bp.route("/api/auth/login", methods=["POST"])
def login():
    data = request.get_json(silent=True) or {}
    login_id = (data.get("loginId") or "").strip()
    password = data.get("password") or ""
    user = User.query.filter_by(login_id=login_id).first()
    if not user or not user.check_password(password):
        current_app.logger.info("[AUTH] login failed login_id=%s ip=%s", login_id, request.remote_addr)
        raise AuthenticationError("Invalid login ID or password")
    if not user.is_active:
        current_app.logger.info("[AUTH] inactive user login_id=%s", login_id)
        raise AuthenticationError("User is inactive")

    session.clear()
    session["user_id"] = user.id
    current_app.logger.info("[AUTH] login success user_id=%s", user.id)
    return jsonify(user.to_dict())


@auth_bp.route("/api/auth/logout", methods=["POST"])
def logout():
    session.clear()
    return jsonify({"message": "Logged out"})


@auth_bp.route("/api/auth/me")
@login_required
def me():
    return jsonify(g.current_user.to_dict())


@auth_bp.route("/api/auth/register", methods=["POST"])
def register():
    data = request.get_json(silent=True) or {}
    login_id = (data.get("loginId") or "").strip()
    display_name = (data.get("name") or "").strip()
    email = (data.get("email") or "").strip() or None
    password = data.get("password") or ""
    for key, value in (("loginId", login_id), ("name", display_name), ("password", password)):
        if not value:
            raise MissingRequiredField(f"'{key}' is required", field=key)
    if len(password) < 8:
        raise InvalidFieldValue("Password must be at least 8 characters", field="password")
    if User.query.filter_by(login_id=login_id).first():
        raise ConflictError("This login ID is already registered", field="loginId")

    user = register_user(login_id, display_name, password, email)
    return jsonify(user.to_dict()), 201


def register_user(login_id, display_name, password, email=None):
    user = User(login_id=login_id, display_name=display_name, email=email, is_active=True)
    user.set_password(password)
    db.session.add(user)
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("[AUTH] register failed login_id=%s: %s", login_id, e)
        raise StoreError("Could not register user")
    current_app.logger.info("[AUTH] registered user_id=%s login_id=%s", user.id, login_id)
    return user

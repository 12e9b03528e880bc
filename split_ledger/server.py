"""Flask service boundary for the ledger.

``create_app`` builds the application: one blueprint for users and
authentication, one for transaction listings, JWT bearer tokens via
``flask-jwt-extended``, and one SQLAlchemy session per request (opened lazily,
closed on teardown) handed explicitly to the services.

Error mapping
-------------
- :class:`~split_ledger.errors.InvalidArgument` and request validation -> 400
- failed authentication, missing/invalid token -> 401
- acting on another user's account -> 403
- :class:`~split_ledger.errors.NotFound` -> 404
- :class:`~split_ledger.errors.Conflict` -> 409
"""

from __future__ import annotations

import uuid
from datetime import timedelta

from db.client import get_session
from db.models.ledger import User
from flask import Blueprint, Flask, current_app, g, jsonify, request
from flask_jwt_extended import (
    JWTManager,
    create_access_token,
    get_jwt_identity,
    jwt_required,
)
from pydantic import ValidationError
from sqlalchemy.orm import Session

from .config import Settings, load_settings
from .errors import LedgerError, NotFound
from .logging_setup import get_logger
from .models import AuthenticateRequest, RegisterRequest, UpdateRequest
from .transactions import default_range, parse_day, query_parties, query_transactions
from .users import UserService, coerce_user_id, to_dto

_logger = get_logger("split_ledger.server")

users_bp = Blueprint("users", __name__, url_prefix="/api/users")
ledger_bp = Blueprint("ledger", __name__, url_prefix="/api")


# ---- Request-scoped helpers --------------------------------------------------


class _Unauthorized(Exception):
    pass


def db_session() -> Session:
    """Return this request's session, opening it on first use."""

    if "db_session" not in g:
        g.db_session = get_session(database_url=current_app.config["DATABASE_URL"])
    return g.db_session


def _message(text: str, status: int):
    return jsonify({"message": text}), status


def _current_user() -> User:
    """Resolve the token identity to a stored user, or fail with 401."""

    try:
        user_id = uuid.UUID(str(get_jwt_identity()))
    except ValueError:
        user_id = None
    user = db_session().get(User, user_id) if user_id else None
    if user is None:
        raise _Unauthorized()
    return user


# ---- Users -------------------------------------------------------------------


@users_bp.post("/authenticate")
def authenticate():
    body = AuthenticateRequest.model_validate(request.get_json(silent=True) or {})
    user = UserService(db_session()).authenticate(body.email, body.password)
    if user is None:
        return _message("Email or password is incorrect", 401)
    token = create_access_token(identity=str(user.user_id))
    return jsonify(to_dto(user, token=token).to_wire())


@users_bp.post("/register")
def register():
    body = RegisterRequest.model_validate(request.get_json(silent=True) or {})
    user = User(email=body.email, first_name=body.first_name, last_name=body.last_name)
    created = UserService(db_session()).create(user, body.password)
    return jsonify(to_dto(created).to_wire()), 201


@users_bp.get("")
@jwt_required()
def list_users():
    _current_user()
    return jsonify([to_dto(u).to_wire() for u in UserService(db_session()).get_all()])


@users_bp.get("/<user_id>")
@jwt_required()
def get_user(user_id: str):
    _current_user()
    user = UserService(db_session()).get_by_id(user_id)
    if user is None:
        raise NotFound("User not found")
    return jsonify(to_dto(user).to_wire())


@users_bp.put("/<user_id>")
@jwt_required()
def update_user(user_id: str):
    caller = _current_user()
    target = coerce_user_id(user_id)
    if caller.user_id != target:
        return _message("Users may only modify their own account", 403)
    body = UpdateRequest.model_validate(request.get_json(silent=True) or {})
    param = User(
        user_id=target,
        email=body.email,
        first_name=body.first_name,
        last_name=body.last_name,
    )
    UserService(db_session()).update(param, body.password)
    return "", 204


@users_bp.delete("/<user_id>")
@jwt_required()
def delete_user(user_id: str):
    caller = _current_user()
    target = coerce_user_id(user_id)
    if caller.user_id != target:
        return _message("Users may only modify their own account", 403)
    UserService(db_session()).delete(target)
    return "", 204


# ---- Transactions and parties ------------------------------------------------


@ledger_bp.get("/transactions")
@jwt_required()
def list_transactions():
    user = _current_user()
    default_start, default_end = default_range()
    start_raw = request.args.get("startDate")
    end_raw = request.args.get("endDate")
    start = parse_day(start_raw, param="startDate") if start_raw else default_start
    end = parse_day(end_raw, param="endDate") if end_raw else default_end
    items = query_transactions(db_session(), user_id=user.user_id, start_date=start, end_date=end)
    return jsonify([t.to_wire() for t in items])


@ledger_bp.get("/transactionparties")
@jwt_required()
def list_transaction_parties():
    user = _current_user()
    return jsonify([p.to_wire() for p in query_parties(db_session(), user_id=user.user_id)])


# ---- Application factory -----------------------------------------------------


def _register_jwt_handlers(jwt: JWTManager) -> None:
    @jwt.unauthorized_loader
    def _missing(reason: str):
        return _message(reason, 401)

    @jwt.invalid_token_loader
    def _invalid(reason: str):
        return _message(reason, 401)

    @jwt.expired_token_loader
    def _expired(_header, _payload):
        return _message("Token has expired", 401)


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(LedgerError)
    def _ledger_error(e: LedgerError):
        return _message(e.message, e.status_code)

    @app.errorhandler(ValidationError)
    def _validation_error(e: ValidationError):
        return _message(f"Invalid request body: {e.error_count()} error(s)", 400)

    @app.errorhandler(_Unauthorized)
    def _unauthorized(_e: _Unauthorized):
        return _message("Unauthorized", 401)


def create_app(settings: Settings | None = None) -> Flask:
    """Build the Flask app; ``settings`` defaults to :func:`load_settings`."""

    settings = settings or load_settings()
    if not settings.database_url:
        raise RuntimeError("DATABASE_URL is not set; cannot start the ledger service")

    app = Flask(__name__)
    app.config["DATABASE_URL"] = settings.database_url
    app.config["JWT_SECRET_KEY"] = settings.jwt_secret
    app.config["JWT_ACCESS_TOKEN_EXPIRES"] = timedelta(minutes=settings.token_ttl_minutes)
    app.config["JWT_TOKEN_LOCATION"] = ["headers"]

    _register_jwt_handlers(JWTManager(app))
    _register_error_handlers(app)
    app.register_blueprint(users_bp)
    app.register_blueprint(ledger_bp)

    @app.teardown_appcontext
    def _close_session(exception: BaseException | None) -> None:
        session = g.pop("db_session", None)
        if session is None:
            return
        if exception is not None:
            session.rollback()
        session.close()

    _logger.info("ledger service configured")
    return app


__all__ = ["create_app", "db_session"]

from flask import Blueprint, request, jsonify, current_app

from security.bruteforce import get_ledger, normalize_identity
from security.credentials import verify_credentials
from utils.audit import log_event
from utils.network import client_ip


auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


def _locked_response(error: str, retry_after: int, **extra):
    resp = jsonify(error=error, retry_after_seconds=retry_after, **extra)
    resp.headers["Retry-After"] = str(retry_after)
    return resp, 429


@auth_bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    email = data.get("email")
    password = data.get("password")

    if not isinstance(email, str) or not normalize_identity(email):
        return jsonify(error="Email is required"), 400
    if not isinstance(password, str) or not password:
        return jsonify(error="Password is required"), 400

    email = normalize_identity(email)
    ip = client_ip()
    ledger = get_ledger()

    # Locked pairs never reach the credential check
    status = ledger.status(email, ip)
    if status.blocked:
        log_event("LOGIN_LOCKED", email=email, metadata={"seconds_left": status.retry_after_seconds})
        return _locked_response(
            "Too many attempts. Try again later.",
            status.retry_after_seconds,
        )

    user = verify_credentials(email, password)
    if user is None:
        ledger.record(email, ip, False)
        remaining = ledger.remaining_attempts(email, ip)
        log_event("LOGIN_FAIL", email=email, metadata={"remaining_attempts": remaining})
        if remaining <= 0:
            return _locked_response(
                "Too many failed attempts. Account locked.",
                ledger.remaining_lockout_seconds(email, ip),
                lockout_minutes=current_app.config.get("LOCKOUT_MINUTES", 15),
            )
        return jsonify(error="Invalid credentials", remaining_attempts=remaining), 401

    ledger.record(email, ip, True)
    if current_app.config.get("CLEAR_SUCCESSFUL_ATTEMPTS_ON_LOGIN", False):
        ledger.clear_successful(email)

    log_event("LOGIN_SUCCESS", email=email)
    return jsonify(message="Login OK"), 200

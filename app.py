import click
from flask import Flask, jsonify
from werkzeug.middleware.proxy_fix import ProxyFix
from config import Config
from routes import health_bp, auth_bp

from models import db
from flask_migrate import Migrate
from security.bruteforce import StorageUnavailable
from utils.clock import SystemClock
from utils.scheduler import init_scheduler


def create_app(config_object=Config, clock=None):
    app = Flask(__name__)
    app.config.from_object(config_object)

    # Trust exactly the configured number of proxy hops in X-Forwarded-For
    proxy_count = app.config.get("TRUSTED_PROXY_COUNT", 0)
    if proxy_count:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=proxy_count)

    # Single time source for every lockout calculation
    app.extensions["clock"] = clock or SystemClock()

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    @app.errorhandler(StorageUnavailable)
    def _storage_unavailable(exc):
        # Fail closed: no ledger, no login
        app.logger.error("Login attempt storage unavailable: %s", exc)
        return jsonify(error="Login temporarily unavailable"), 503

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp

    register_cli(app)

    # `flask ...` commands (db upgrade, login-attempts cleanup) run inside a click
    # context and must not leave a scheduler thread behind
    if app.config.get("SCHEDULER_ENABLED") and click.get_current_context(silent=True) is None:
        init_scheduler(app)

    return app

#-------------------------
import json
from models.user import User
from security.bruteforce import get_ledger, normalize_identity
from security.credentials import hash_password
from security.metrics import brute_force_alerts, security_metrics, stats_24h

def register_cli(app):
    @app.cli.command("create-user")
    @click.argument("email")
    @click.password_option()
    def create_user(email, password):
        """Create a login account (bootstrap)."""
        email = normalize_identity(email)
        if User.query.filter_by(email=email).first():
            click.echo("User already exists")
            return

        db.session.add(User(email=email, password_hash=hash_password(password)))
        db.session.commit()
        click.echo(f"{email} created")

    @app.cli.group("login-attempts")
    def login_attempts():
        """Inspect and prune the login attempt ledger."""

    @login_attempts.command("cleanup")
    def cleanup():
        """Delete login attempts older than the retention period."""
        deleted = get_ledger().cleanup()
        app.logger.info("Login attempt cleanup: %d rows deleted", deleted)
        click.echo(f"Deleted {deleted} login attempts")

    @login_attempts.command("status")
    @click.argument("email")
    @click.argument("ip")
    def status(email, ip):
        """Show the lockout state for an email/IP pair."""
        click.echo(json.dumps(get_ledger().status(email, ip)._asdict()))

    @login_attempts.command("stats")
    def stats():
        """Print the last 24h of login security metrics."""
        ledger = get_ledger()
        click.echo(json.dumps({
            "metrics": security_metrics(ledger),
            "alerts": brute_force_alerts(ledger),
            "stats_24h": stats_24h(ledger),
        }, indent=2))

#-------------------------




if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)

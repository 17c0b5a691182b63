from models.db import db

class LoginAttempt(db.Model):
    """
    One row per login attempt. Rows are append-only: nothing updates them,
    they only disappear through the retention cleanup or clear_successful().
    """
    __tablename__ = "login_attempts"
    __table_args__ = (
        db.Index("ix_login_attempts_email_attempted_at", "email", "attempted_at"),
        db.Index("ix_login_attempts_ip_address_attempted_at", "ip_address", "attempted_at"),
    )

    id = db.Column(db.Integer, primary_key=True)

    # Both are tracked so one IP rotating emails and one email hit from many IPs are throttled
    email = db.Column(db.String(255), nullable=False)
    ip_address = db.Column(db.String(45), nullable=False)  # IPv4 or IPv6

    successful = db.Column(db.Boolean, default=False, nullable=False)

    # set by the ledger clock, never taken from the client
    attempted_at = db.Column(db.DateTime, nullable=False)

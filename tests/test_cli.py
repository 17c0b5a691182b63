"""Tests for the flask CLI commands."""

import json
from datetime import timedelta

import bcrypt

from models import db
from models.login_attempt import LoginAttempt
from models.user import User


def test_cleanup_command(runner, ledger, clock):
    db.session.add(LoginAttempt(
        email="old@example.com",
        ip_address="10.0.0.1",
        successful=False,
        attempted_at=clock.now() - timedelta(hours=48),
    ))
    db.session.commit()
    ledger.record("new@example.com", "10.0.0.1", False)

    result = runner.invoke(args=["login-attempts", "cleanup"])

    assert result.exit_code == 0
    assert "Deleted 1 login attempts" in result.output
    assert LoginAttempt.query.count() == 1


def test_status_command(runner, ledger):
    for _ in range(3):
        ledger.record("eve@example.com", "10.0.0.5", False)

    result = runner.invoke(args=["login-attempts", "status", "EVE@example.com", "10.0.0.5"])

    assert result.exit_code == 0
    assert json.loads(result.output) == {
        "blocked": True,
        "failed_attempts": 3,
        "remaining_attempts": 0,
        "retry_after_seconds": 900,
    }


def test_stats_command(runner, ledger):
    ledger.record("eve@example.com", "10.0.0.5", False)

    result = runner.invoke(args=["login-attempts", "stats"])

    assert result.exit_code == 0
    body = json.loads(result.output)
    assert body["metrics"]["total_attempts"] == 1
    assert body["alerts"] == []
    assert len(body["stats_24h"]) == 24


def test_create_user(runner):
    result = runner.invoke(args=["create-user", "New@Example.com", "--password", "s3cret-pass"])

    assert result.exit_code == 0
    assert "new@example.com created" in result.output
    user = User.query.filter_by(email="new@example.com").one()
    assert bcrypt.checkpw(b"s3cret-pass", user.password_hash.encode("utf-8"))


def test_create_user_twice(runner):
    runner.invoke(args=["create-user", "dup@example.com", "--password", "pw-one"])
    result = runner.invoke(args=["create-user", "dup@example.com", "--password", "pw-two"])

    assert "User already exists" in result.output
    assert User.query.count() == 1

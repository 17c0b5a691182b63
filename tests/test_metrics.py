"""Tests for the 24h login security metrics."""

from datetime import timedelta

from models import db
from models.login_attempt import LoginAttempt
from security.metrics import brute_force_alerts, security_metrics, stats_24h


def _seed(ledger, clock):
    # one IP spraying three accounts, one normal login, one stale row
    for n in range(3):
        ledger.record(f"user{n}@example.com", "6.6.6.6", False)
    ledger.record("owner@example.com", "203.0.113.7", True)
    db.session.add(LoginAttempt(
        email="stale@example.com",
        ip_address="7.7.7.7",
        successful=False,
        attempted_at=clock.now() - timedelta(hours=30),
    ))
    db.session.commit()


def test_security_metrics(ledger, clock):
    _seed(ledger, clock)

    assert security_metrics(ledger) == {
        "total_attempts": 4,
        "failed_attempts": 3,
        "successful_attempts": 1,
        "unique_ips_blocked": 1,
    }


def test_brute_force_alerts(ledger, clock):
    _seed(ledger, clock)

    assert brute_force_alerts(ledger) == [{
        "ip_address": "6.6.6.6",
        "failed_attempts": 3,
        "last_attempt_at": clock.now().isoformat(),
        "emails_targeted": 3,
    }]


def test_alerts_clear_after_lockout_window(ledger, clock):
    _seed(ledger, clock)
    clock.advance(minutes=16)

    assert brute_force_alerts(ledger) == []
    assert security_metrics(ledger)["unique_ips_blocked"] == 0


def test_stats_24h_buckets(ledger, clock):
    _seed(ledger, clock)
    clock.advance(hours=2, minutes=30)
    ledger.record("owner@example.com", "203.0.113.7", False)

    buckets = stats_24h(ledger)

    assert len(buckets) == 24
    assert buckets[-1] == {"hour": "2026-03-01T14:00:00", "total": 1, "failed": 1}
    assert buckets[-3] == {"hour": "2026-03-01T12:00:00", "total": 4, "failed": 3}
    assert sum(b["total"] for b in buckets) == 5


def test_metrics_default_to_app_ledger(app, ledger):
    ledger.record("eve@example.com", "10.0.0.5", False)

    assert security_metrics()["total_attempts"] == 1

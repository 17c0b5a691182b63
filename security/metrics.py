from datetime import timedelta

from sqlalchemy import distinct, func

from models import db
from models.login_attempt import LoginAttempt
from security.bruteforce import get_ledger, storage_errors

WINDOW_HOURS = 24


def _blocked_ips(ledger):
    since = ledger.clock.now() - ledger.lockout
    failures = func.count(LoginAttempt.id)
    return (
        db.session.query(
            LoginAttempt.ip_address,
            failures,
            func.max(LoginAttempt.attempted_at),
            func.count(distinct(LoginAttempt.email)),
        )
        .filter(
            LoginAttempt.successful.is_(False),
            LoginAttempt.attempted_at >= since,
        )
        .group_by(LoginAttempt.ip_address)
        .having(failures >= ledger.max_attempts)
        .order_by(failures.desc(), LoginAttempt.ip_address)
        .all()
    )


@storage_errors
def security_metrics(ledger=None) -> dict:
    ledger = ledger or get_ledger()
    since = ledger.clock.now() - timedelta(hours=WINDOW_HOURS)

    q = LoginAttempt.query.filter(LoginAttempt.attempted_at >= since)
    total = q.count()
    failed = q.filter(LoginAttempt.successful.is_(False)).count()

    return {
        "total_attempts": total,
        "failed_attempts": failed,
        "successful_attempts": total - failed,
        "unique_ips_blocked": len(_blocked_ips(ledger)),
    }


@storage_errors
def brute_force_alerts(ledger=None) -> list[dict]:
    """IPs currently at or over the failure threshold, worst first."""
    ledger = ledger or get_ledger()
    return [
        {
            "ip_address": ip,
            "failed_attempts": count,
            "last_attempt_at": last_at.isoformat() if last_at else None,
            "emails_targeted": emails,
        }
        for ip, count, last_at, emails in _blocked_ips(ledger)
    ]


@storage_errors
def stats_24h(ledger=None) -> list[dict]:
    """Attempts per hour over the last 24 hours, oldest bucket first."""
    ledger = ledger or get_ledger()
    current_hour = ledger.clock.now().replace(minute=0, second=0, microsecond=0)
    start = current_hour - timedelta(hours=WINDOW_HOURS - 1)

    buckets = {
        start + timedelta(hours=i): {"total": 0, "failed": 0}
        for i in range(WINDOW_HOURS)
    }

    rows = (
        db.session.query(LoginAttempt.attempted_at, LoginAttempt.successful)
        .filter(LoginAttempt.attempted_at >= start)
        .all()
    )
    for attempted_at, successful in rows:
        hour = attempted_at.replace(minute=0, second=0, microsecond=0)
        bucket = buckets.get(hour)
        if bucket is None:
            # clock skew: row stamped after "now"
            continue
        bucket["total"] += 1
        if not successful:
            bucket["failed"] += 1

    return [
        {"hour": hour.isoformat(), **counts}
        for hour, counts in sorted(buckets.items())
    ]

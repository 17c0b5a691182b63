"""Pytest fixtures for the login guard tests."""

from datetime import datetime

import pytest

from app import create_app
from config import TestConfig
from models import db
from models.user import User
from security.bruteforce import get_ledger
from security.credentials import hash_password
from utils.clock import FrozenClock

START = datetime(2026, 3, 1, 12, 0, 0)
PASSWORD = "Correct-Horse-Battery-1"


@pytest.fixture
def clock():
    return FrozenClock(START)


@pytest.fixture
def app(clock):
    app = create_app(TestConfig, clock=clock)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


@pytest.fixture
def ledger(app):
    return get_ledger()


@pytest.fixture
def user(app):
    row = User(email="owner@example.com", password_hash=hash_password(PASSWORD))
    db.session.add(row)
    db.session.commit()
    return row

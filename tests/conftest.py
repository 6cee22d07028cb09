"""
Pytest fixtures for the payroll app.

Provides:
- an app on an in-memory SQLite database with one operator account
- a logged-in test client
- ``sheet``: a stand-in for the Apps Script endpoint, installed in place of
  ``requests.Session`` so the real gateway code runs against it
"""

import pytest
import requests

from tailor_payroll import create_app
from tailor_payroll.config import Config
from tailor_payroll.extensions import db
from tailor_payroll.models import User
from tailor_payroll.storage import LocalStore

SCRIPT_URL = "https://script.google.com/macros/s/TEST-DEPLOYMENT/exec"


class PayrollTestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    DEFAULT_SCRIPT_URL = ""
    ANTHROPIC_API_KEY = ""
    LOG_LEVEL = "WARNING"


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSheet:
    def __init__(self):
        self.summary = {"rows": []}
        self.entries = {"rows": []}
        self.workers = {"workers": []}
        self.status = {"summary": 200, "entries": 200, "workers": 200}
        self.get_error = None
        self.post_error = None
        self.gets = []
        self.posts = []
        self.closed = 0

    def get(self, url, params=None, timeout=None):
        params = dict(params or {})
        self.gets.append(params)
        if self.get_error is not None:
            raise self.get_error
        action = params["action"]
        payload = {"summary": self.summary, "entries": self.entries, "workers": self.workers}[action]
        return FakeResponse(payload, self.status[action])

    def post(self, url, json=None, timeout=None):
        if self.post_error is not None:
            raise self.post_error
        self.posts.append(json)
        return FakeResponse({"result": "success"})

    def close(self):
        self.closed += 1

    def months_fetched(self):
        return [g.get("month") for g in self.gets if g.get("action") == "summary"]


@pytest.fixture
def app():
    app = create_app(PayrollTestConfig)
    with app.app_context():
        db.create_all()
        u = User(username="owner", full_name="Workshop owner")
        u.set_password("secret")
        db.session.add(u)
        db.session.commit()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def operator(app):
    return User.query.filter_by(username="owner").first()


@pytest.fixture
def store(operator):
    return LocalStore(operator.id)


@pytest.fixture
def client(app):
    c = app.test_client()
    resp = c.post("/login", data={"username": "owner", "password": "secret"})
    assert resp.status_code == 302
    return c


@pytest.fixture
def sheet(monkeypatch):
    fake = FakeSheet()
    monkeypatch.setattr(requests, "Session", lambda: fake)
    return fake


@pytest.fixture
def configured(store):
    store.save_script_url(SCRIPT_URL)
    return store

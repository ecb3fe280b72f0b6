"""
Shared pytest fixtures for the RiskWise test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - client: Flask test client (function-scoped)
    - store: DocumentStore bound to the test session
    - products: Demo product directory seeded into the store
    - make_risk / make_issue: raw document builders (override any field)
"""

import pytest

from app import create_app
from app.models import db as _db
from app.services.document_store import DocumentStore
from app.services.product_service import seed_default_products


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    application = create_app("testing")
    return application


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture()
def store():
    return DocumentStore()


@pytest.fixture()
def products(store):
    """Seed the 15 demo products (P-12345 'Project Phoenix', ...)."""
    return seed_default_products(store)


# ── Raw document builders ────────────────────────────────────────────────


def _raw_risk(**overrides):
    """A valid risk document in the current entry-form format."""
    data = {
        "id": "risk-1",
        "Month": "January",
        "Project Code": "P-12345",
        "Risk Status": "Open",
        "Title": "Vendor delivery slip",
        "Description": "Primary vendor may miss the Q3 delivery milestone.",
        "Probability": 0.5,
        "Imapct Rating (0.05-0.8)": 0.4,
        "Impact Value ($)": 100000,
        "Budget Contingency": 60000,
        "Owner": "Alice Martin",
        "DueDate": "2026-06-30T00:00:00.000Z",
    }
    data.update(overrides)
    return data


def _raw_issue(**overrides):
    """A valid issue document in the current entry-form format."""
    data = {
        "id": "issue-1",
        "Month": "February",
        "Category New": "Technical",
        "Portfolio": "System Integration",
        "Title": "Gateway timeouts",
        "Discussion": "Checkout calls time out under peak load.",
        "Owner": "Bob Chen",
        "Response": "In Progress",
        "Impact": "High",
        "Impact ($)": 25000,
        "Priority": "High",
        "ProjectName": "Project Phoenix",
        "Status": "Open",
        "Due Date": "2026-03-31T00:00:00.000Z",
    }
    data.update(overrides)
    return data


@pytest.fixture()
def make_risk():
    return _raw_risk


@pytest.fixture()
def make_issue():
    return _raw_issue

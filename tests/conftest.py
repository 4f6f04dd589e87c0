import pytest

from app import create_app
from models import db, BudgetCategory, User
from services.structure import seed_defaults


@pytest.fixture
def app():
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "LOG_LEVEL": "WARNING",
    })
    with app.app_context():
        db.create_all()
        seed_defaults()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def headers():
    return {
        "X-User-Id": "user_ana",
        "X-User-Email": "ana@example.com",
        "X-User-Name": "Ana López",
    }


@pytest.fixture
def other_headers():
    return {
        "X-User-Id": "user_luis",
        "X-User-Email": "luis@example.com",
        "X-User-Name": "Luis",
    }


@pytest.fixture
def user(app):
    user = User(external_id="user_ana", name="Ana López", email="ana@example.com")
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def other_user(app):
    user = User(external_id="user_luis", name="Luis", email="luis@example.com")
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def categories():
    """Transient category rows for the pure engine tests (no database)."""
    return [
        BudgetCategory(id="necesidades", name="Necesidades", order=1, default_percentage=50),
        BudgetCategory(id="gustos", name="Gustos", order=2, default_percentage=30),
        BudgetCategory(id="ahorro", name="Ahorro", order=3, default_percentage=20),
    ]

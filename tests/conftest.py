"""Shared test fixtures."""
import pytest
from unittest.mock import MagicMock

from dealflow.config import Settings
from dealflow.errors import UnauthenticatedError
from dealflow.services.identity import AuthenticatedUser


USERS = {
    'user-token': AuthenticatedUser(id='user-1', email='alice@example.com', metadata={'full_name': 'Alice Adams'}),
    'admin-token': AuthenticatedUser(id='admin-1', email='boss@example.com', metadata={}),
}

USER_HEADERS = {'Authorization': 'Bearer user-token'}
ADMIN_HEADERS = {'Authorization': 'Bearer admin-token'}


def _get_user(token):
    try:
        return USERS[token]
    except KeyError:
        raise UnauthenticatedError('Invalid token')


@pytest.fixture
def base_settings():
    """Settings for an in-memory app: identity configured, no SMTP, no secret."""
    return Settings(
        database_url='sqlite://',
        supabase_url='https://project.supabase.test',
        supabase_service_key='service-key',
    )


@pytest.fixture
def mock_identity():
    """Identity provider stand-in keyed by token (see USERS)."""
    mock = MagicMock()
    mock.get_user.side_effect = _get_user
    return mock


@pytest.fixture
def db_engine():
    """In-memory SQLite engine with schema created, shared by every app in the test."""
    from sqlalchemy import create_engine
    from sqlalchemy.pool import StaticPool
    from dealflow.database import Base
    import dealflow.models.deal  # noqa: F401
    import dealflow.models.webhook_log  # noqa: F401
    import dealflow.models.user_profile  # noqa: F401

    engine = create_engine(
        'sqlite://', connect_args={'check_same_thread': False}, poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def make_app(base_settings, mock_identity, db_engine):
    """Factory — builds an app with Settings overrides, bound to the test DB."""
    def _make(**overrides):
        from dataclasses import replace
        from dealflow import create_app
        from dealflow.database import SessionLocal

        app = create_app(replace(base_settings, **overrides))
        app.config['TESTING'] = True
        app.extensions['identity_provider'] = mock_identity
        SessionLocal.configure(bind=db_engine)
        return app
    return _make


@pytest.fixture
def app(make_app):
    """Flask test app."""
    yield make_app()


@pytest.fixture
def client(app):
    """Flask test client."""
    with app.test_client() as c:
        yield c


@pytest.fixture
def db_session(db_engine):
    """Session on the test DB. Rolls back after each test."""
    from sqlalchemy.orm import sessionmaker
    Session = sessionmaker(bind=db_engine, expire_on_commit=False)
    session = Session()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def make_deal(db_session):
    """Factory fixture — inserts a Deal row directly."""
    from dealflow.models.deal import Deal

    def _make(**overrides):
        defaults = dict(
            business_name='Acme Widgets',
            contact_name='Wile Coyote',
            contact_email='wile@acme.test',
            industry='retail',
            funding_amount_requested=50000,
            stage='submitted',
            source='manual',
        )
        defaults.update(overrides)
        deal = Deal(**defaults)
        db_session.add(deal)
        db_session.commit()
        return deal
    return _make


@pytest.fixture
def make_profile(db_session):
    """Factory fixture — inserts a UserProfile row directly."""
    from dealflow.models.user_profile import UserProfile

    def _make(**overrides):
        defaults = dict(id='user-1', username='alice', email='alice@example.com', role='user')
        defaults.update(overrides)
        profile = UserProfile(**defaults)
        db_session.add(profile)
        db_session.commit()
        return profile
    return _make


@pytest.fixture
def user_headers():
    return dict(USER_HEADERS)


@pytest.fixture
def admin_headers():
    return dict(ADMIN_HEADERS)

"""
Integration test fixtures: an in-memory SQLite record store.

pysqlite's own transaction handling breaks SAVEPOINT, so the driver is put in
autocommit mode and BEGIN is emitted by SQLAlchemy instead.
"""

import pytest
from sqlalchemy import create_engine, event, select
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from tests.fixtures import CampaignFactory, CreativeFactory, OrderFactory
from tracking_tags.core.database.database_session import reset_engine, set_engine
from tracking_tags.core.database.models import Base, Campaign, CreativeAsset, PublicationOrder, TrackingScript


def create_test_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def engine():
    engine = create_test_engine()
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    session = Session(engine, expire_on_commit=False)
    yield session
    session.close()


class Seeder:
    """Insert source records (campaigns, orders, creatives) for a test."""

    def __init__(self, session: Session):
        self.session = session

    def campaign(self, **kwargs) -> Campaign:
        row = Campaign(**CampaignFactory.create(**kwargs))
        self.session.add(row)
        self.session.commit()
        return row

    def order(self, **kwargs) -> PublicationOrder:
        row = PublicationOrder(**OrderFactory.create(**kwargs))
        self.session.add(row)
        self.session.commit()
        return row

    def creative(self, **kwargs) -> CreativeAsset:
        row = CreativeAsset(**CreativeFactory.create(**kwargs))
        self.session.add(row)
        self.session.commit()
        return row

    def active_scripts(self) -> list[TrackingScript]:
        return self._scripts(TrackingScript.deleted_at.is_(None))

    def all_scripts(self) -> list[TrackingScript]:
        return self._scripts()

    def _scripts(self, *criteria) -> list[TrackingScript]:
        self.session.expire_all()
        scripts = list(self.session.scalars(select(TrackingScript).filter(*criteria)).all())
        # The connection is shared with request sessions; end the read transaction
        self.session.commit()
        return scripts


@pytest.fixture
def seed(db_session):
    return Seeder(db_session)


@pytest.fixture
def app(engine, tracking_env):
    """Flask app bound to the in-memory engine."""
    from tracking_tags.admin.app import create_app

    set_engine(engine)
    app = create_app({"TESTING": True})
    yield app
    reset_engine()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_store():
    """Factory for independent record stores within one test."""
    created = []

    def _make() -> Seeder:
        engine = create_test_engine()
        session = Session(engine, expire_on_commit=False)
        created.append((engine, session))
        return Seeder(session)

    yield _make
    for engine, session in created:
        session.close()
        engine.dispose()

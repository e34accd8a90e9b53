import os

os.environ.setdefault("PASSWORD_HASH_ROUNDS", "4")
os.environ.setdefault("OPENAI_API_KEY", "test-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tastebox.app.api.deps import get_db_session, get_storage_provider
from tastebox.app.core.security import create_access_token, hash_password
from tastebox.app.db import models
from tastebox.app.db.base import Base
from tastebox.app.main import create_app
from tastebox.app.services.storage.local import LocalStorageProvider


@pytest.fixture(scope="session")
def engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture
def db_session(engine):
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(bind=connection, autocommit=False, autoflush=False, future=True)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        transaction.rollback()
        connection.close()


@pytest.fixture
def storage(tmp_path):
    return LocalStorageProvider(tmp_path / "media")


@pytest.fixture
def app(db_session, storage):
    app = create_app()

    def override_db():
        yield db_session

    def override_storage():
        return storage

    app.dependency_overrides[get_db_session] = override_db
    app.dependency_overrides[get_storage_provider] = override_storage
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


def make_user(db, email: str, name: str, password: str = "secret123") -> models.User:
    user = models.User(email=email, name=name, password_hash=hash_password(password))
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def user(db_session):
    return make_user(db_session, "ana@tastebox.io", "Ana")


@pytest.fixture
def other_user(db_session):
    return make_user(db_session, "bruno@tastebox.io", "Bruno")


@pytest.fixture
def user_token(user):
    return create_access_token(user.id, user.email)


@pytest.fixture
def other_user_token(other_user):
    return create_access_token(other_user.id, other_user.email)


@pytest.fixture
def auth_headers(user_token):
    return {"Authorization": f"Bearer {user_token}"}

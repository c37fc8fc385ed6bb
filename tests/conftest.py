import os
import tempfile

# Settings are read at import time, so they must be in place before the app loads
TEST_DB_DIR = tempfile.mkdtemp(prefix="portfolio-api-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{os.path.join(TEST_DB_DIR, 'app.db')}")
os.environ.setdefault("JWT_SECRET_KEY", "your-very-secret-key")
os.environ.pop("BASE_URL", None)

import pytest
from jose import jwt
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from database import Base, build_engine
from app import app, get_db

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", f"sqlite:///{os.path.join(TEST_DB_DIR, 'test.db')}")
engine = build_engine(TEST_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

SECRET_KEY = os.environ["JWT_SECRET_KEY"]
ALGORITHM = "HS256"


@pytest.fixture(scope="session", autouse=True)
def setup_database():
    # Create tables before any tests
    Base.metadata.create_all(bind=engine)
    yield
    # Drop tables after all tests
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clean_tables():
    yield
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture
def session_factory():
    return TestingSessionLocal


@pytest.fixture
def db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client(db):
    # Override get_db dependency to use the test DB
    def override_get_db():
        yield db
    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides = {}


def create_jwt(role="USER", user_id="user-1"):
    payload = {"sub": user_id, "role": role}
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {create_jwt(role='ADMIN')}"}


@pytest.fixture
def user_headers():
    return {"Authorization": f"Bearer {create_jwt(role='USER')}"}

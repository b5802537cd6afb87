"""Shared helpers: in-memory database, user factory and an API client wired to both."""

from datetime import timedelta

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import get_db
from app.core.security import TokenCodec, get_token_codec, hash_password
from app.main import app
from app.models import Base
from app.models.user import Role, User

TEST_SECRET = "unit-test-signing-key-0123456789abcdef0123456789abcdef"


def make_session_factory() -> sessionmaker:
    """Fresh in-memory SQLite database with the full schema."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def make_codec(ttl: timedelta = timedelta(minutes=60), secret: str = TEST_SECRET) -> TokenCodec:
    return TokenCodec(secret, algorithm="HS256", ttl=ttl)


def add_user(
    db: Session,
    username: str,
    password: str = "pw1",
    role: Role = Role.USER,
    email: str | None = None,
) -> User:
    user = User(
        username=username,
        email=email or f"{username}@x.com",
        password_hash=hash_password(password),
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_client(session_factory: sessionmaker, codec: TokenCodec) -> TestClient:
    """TestClient whose requests use session_factory and codec. Call clear_overrides() in tearDown."""

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_token_codec] = lambda: codec
    return TestClient(app)


def clear_overrides() -> None:
    app.dependency_overrides.clear()


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}

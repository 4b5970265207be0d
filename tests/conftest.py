"""Shared pytest fixtures for useradmin tests."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator
from dataclasses import dataclass
from pathlib import Path
from uuid import UUID

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from useradmin.core.auth.principal import Principal
from useradmin.core.rbac.types import Role
from useradmin.core.security.hashing import hash_password
from useradmin.db import build_engine, create_schema, init_db
from useradmin.features.rbac.store import RoleAssignmentStore
from useradmin.features.users.repository import UsersRepository
from useradmin.features.users.service import UsersService
from useradmin.main import create_app
from useradmin.settings import Settings, get_settings
from tests.utils import RecordingNotifier

_INTEGRATION_DIR = Path(__file__).parent / "integration"


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    for item in items:
        if _INTEGRATION_DIR in Path(str(item.fspath)).parents:
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Settings + database
# ---------------------------------------------------------------------------


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        database_url=f"sqlite:///{tmp_path / 'useradmin.sqlite'}",
        mail_backend="log",
        log_level="WARNING",
    )


@pytest.fixture
def engine(settings: Settings) -> Iterator[Engine]:
    engine = build_engine(settings)
    create_schema(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def db_session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def users_service(
    db_session: Session,
    settings: Settings,
    notifier: RecordingNotifier,
) -> UsersService:
    return UsersService(session=db_session, settings=settings, notifier=notifier)


# ---------------------------------------------------------------------------
# Seeded identities
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SeededUser:
    id: UUID
    email: str
    roles: frozenset[Role]

    @property
    def principal(self) -> Principal:
        return Principal(id=self.id, roles=self.roles)


@dataclass(frozen=True, slots=True)
class SeededIdentity:
    """super_admin created both admins; admin_a created x and y; admin_c created z."""

    super_admin: SeededUser
    admin_a: SeededUser
    admin_c: SeededUser
    user_b: SeededUser
    x: SeededUser
    y: SeededUser
    z: SeededUser

    def all(self) -> list[SeededUser]:
        return [
            self.super_admin,
            self.admin_a,
            self.admin_c,
            self.user_b,
            self.x,
            self.y,
            self.z,
        ]


def _seed_user(
    session: Session,
    *,
    name: str,
    email: str,
    role: Role,
    created_by: SeededUser | None = None,
) -> SeededUser:
    user = UsersRepository(session).create(
        name=name,
        email=email,
        hashed_password=hash_password("not-a-real-password"),
        created_by_id=created_by.id if created_by is not None else None,
    )
    RoleAssignmentStore(session).assign(user.id, role)
    return SeededUser(id=user.id, email=email, roles=frozenset({role}))


@pytest.fixture
def seed_identity(session_factory: sessionmaker[Session]) -> SeededIdentity:
    with session_factory() as session:
        root = _seed_user(session, name="Root", email="root@example.com", role=Role.SUPER_ADMIN)
        admin_a = _seed_user(
            session, name="Alice Admin", email="alice@example.com", role=Role.ADMIN, created_by=root
        )
        admin_c = _seed_user(
            session, name="Carol Admin", email="carol@example.com", role=Role.ADMIN, created_by=root
        )
        user_b = _seed_user(
            session, name="Bob User", email="bob@example.com", role=Role.USER, created_by=root
        )
        x = _seed_user(
            session, name="Xavier", email="x@example.com", role=Role.USER, created_by=admin_a
        )
        y = _seed_user(
            session, name="Yvonne", email="y@example.com", role=Role.USER, created_by=admin_a
        )
        z = _seed_user(
            session, name="Zed", email="z@example.com", role=Role.USER, created_by=admin_c
        )
        session.commit()

    return SeededIdentity(
        super_admin=root,
        admin_a=admin_a,
        admin_c=admin_c,
        user_b=user_b,
        x=x,
        y=y,
        z=z,
    )


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------


@pytest.fixture
def app(settings: Settings, engine: Engine, notifier: RecordingNotifier) -> Iterator[FastAPI]:
    application = create_app(settings, notifier=notifier)
    # ASGITransport does not run the lifespan, so wire the database directly.
    init_db(application, settings, engine=engine)
    yield application
    application.dependency_overrides.pop(get_settings, None)


@pytest_asyncio.fixture
async def async_client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client

from datetime import datetime
from typing import List, Optional

import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.depends import get_unit_of_work
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.email_sender import EmailSender
from src.domain.entities import Permission, Person, Profile, Transaction

MEMBER_PROFILE_ID = 1
PUBLIC_PROFILE_ID = 2

TRANSACTIONS = {
    10: ("Auth", "register"),
    11: ("Auth", "requestEmailVerification"),
    12: ("Auth", "verifyEmail"),
    13: ("Auth", "requestPasswordReset"),
    14: ("Auth", "verifyPasswordReset"),
    15: ("Auth", "resetPassword"),
    50: ("Person", "getPerson"),
    51: ("Person", "createPerson"),
    52: ("Person", "updatePerson"),
    53: ("Person", "getPersonByName"),
    54: ("Person", "deletePerson"),
}

PUBLIC_GRANTS = [10, 11, 12, 13, 14, 15, 53]
MEMBER_GRANTS = [50, 51, 52, 53, 54]


class RecordingEmailSender(EmailSender):
    """Keeps every outgoing message so tests can read the raw secrets"""

    def __init__(self):
        self.sent: List[dict] = []

    async def _record(self, kind, to, token, code, expires_at):
        self.sent.append(
            {"kind": kind, "to": to, "token": token, "code": code, "expires_at": expires_at}
        )

    async def send_email_verification(self, to: str, token: str, code: str, expires_at: datetime):
        await self._record("email_verification", to, token, code, expires_at)

    async def send_password_reset(self, to: str, token: str, code: str, expires_at: datetime):
        await self._record("password_reset", to, token, code, expires_at)

    async def send_login_challenge(self, to: str, token: str, code: str, expires_at: datetime):
        await self._record("login", to, token, code, expires_at)

    def last(self, kind: str) -> Optional[dict]:
        for message in reversed(self.sent):
            if message["kind"] == kind:
                return message
        return None


@pytest.fixture(autouse=True)
def app_config(monkeypatch):
    monkeypatch.setattr(ApplicationConfig, "PUBLIC_PROFILE_ID", PUBLIC_PROFILE_ID)
    monkeypatch.setattr(ApplicationConfig, "DEFAULT_PROFILE_ID", MEMBER_PROFILE_ID)
    monkeypatch.setattr(ApplicationConfig, "BCRYPT_ROUNDS", 4)
    monkeypatch.setattr(ApplicationConfig, "REQUIRE_EMAIL_VERIFICATION", False)
    monkeypatch.setattr(ApplicationConfig, "LOGIN_TWO_STEP_NEW_DEVICE", False)
    monkeypatch.setattr(ApplicationConfig, "ENABLE_LOGGING_MIDDLEWARE", True)
    return ApplicationConfig


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///./test.db")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        session.add(Profile(id=MEMBER_PROFILE_ID, name="member"))
        session.add(Profile(id=PUBLIC_PROFILE_ID, name="public"))
        for tx, (object_name, method_name) in TRANSACTIONS.items():
            session.add(Transaction(tx_number=tx, object_name=object_name, method_name=method_name))
        for profile_id, grants in ((PUBLIC_PROFILE_ID, PUBLIC_GRANTS), (MEMBER_PROFILE_ID, MEMBER_GRANTS)):
            for tx in grants:
                object_name, method_name = TRANSACTIONS[tx]
                session.add(
                    Permission(profile_id=profile_id, method_name=method_name, object_name=object_name)
                )
        session.add(Person(name="Ada", last_name="Lovelace"))
        session.add(Person(name="Grace", last_name="Hopper"))
        await session.commit()
        yield session


@pytest.fixture
def email_sender():
    return RecordingEmailSender()


@pytest_asyncio.fixture
async def app(db_session, session_factory, email_sender, app_config):
    from src.api.app import create_app

    app = create_app(app_config, session_factory=session_factory, email_sender=email_sender)

    async def override_get_unit_of_work():
        yield SqlAlchemyUnitOfWork(db_session, app_config.SESSION_TABLE)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    return app


@pytest_asyncio.fixture
async def client(app, session_factory):
    from httpx import ASGITransport
    from src.api.app import load_security

    # ASGITransport does not run the lifespan
    assert await load_security(app, session_factory) is True

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def dispatch(client):
    async def call(tx, params=None, token: Optional[str] = None):
        body = {"tx": tx}
        if params is not None:
            body["params"] = params
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        return await client.post("/dispatch", json=body, headers=headers)

    return call


@pytest.fixture
def register(dispatch, email_sender):
    async def call(email="ada@example.com", username="ada", password="SecurePass123!"):
        response = await dispatch(10, {"email": email, "username": username, "password": password})
        assert response.status_code == 201, response.text
        return email_sender.last("email_verification")

    return call


@pytest.fixture
def login(client):
    async def call(identifier="ada", password="SecurePass123!", device_token=None):
        body = {"identifier": identifier, "password": password}
        if device_token:
            body["device_token"] = device_token
        return await client.post("/login", json=body)

    return call

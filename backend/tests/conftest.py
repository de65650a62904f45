import os

# Must be set before otp_gateway.config builds its settings instance
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BASIC_USER", "porting")
os.environ.setdefault("BASIC_PASS", "s3cret")
os.environ.setdefault("OTP_PURGE_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from otp_gateway.database import Base, get_db
from otp_gateway.exceptions import SmsDeliveryError
from otp_gateway.main import app
from otp_gateway.services.otp_service import OTPLifecycleService
from otp_gateway.services.otp_store import OTPStore
from otp_gateway.services.sms_service import get_sms_sender

NUMBER = "15551234567"
AUTH = ("porting", "s3cret")


class FakeSmsSender:
    """Records sent messages; fails every send while ``fail`` is set"""

    def __init__(self):
        self.sent = []
        self.fail = False

    async def send(self, sender, to, text):
        if self.fail:
            raise SmsDeliveryError("SMS send failed (500): provider down")
        self.sent.append((to, text))
        return {"id": len(self.sent)}

    def last_code(self):
        _, text = self.sent[-1]
        for line in text.splitlines():
            if line.startswith("Your unique code:"):
                return line.split(":", 1)[1].strip()
        raise AssertionError("no code in message")


class FakeClock:
    def __init__(self, now=1_700_000_000):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(db):
    return OTPStore(db)


@pytest.fixture
def sms():
    return FakeSmsSender()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def service(store, sms, clock):
    return OTPLifecycleService(store, sms, ttl_seconds=600, max_failed_attempts=2, clock=clock)


@pytest.fixture
def client(session_factory, sms):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_sms_sender] = lambda: sms
    yield TestClient(app)
    app.dependency_overrides.clear()

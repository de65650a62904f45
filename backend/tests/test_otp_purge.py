import asyncio
import time

from otp_gateway.models.otp import OTPStatus
from otp_gateway.services.otp_purge import OTPPurgeService
from otp_gateway.services.otp_store import OTPStore


def test_purge_now_deletes_expired_pending(session_factory):
    db = session_factory()
    store = OTPStore(db)
    now = int(time.time())
    store.upsert_pending("stale", "1111111", "A", "R", now - 700)
    store.upsert_pending("locked", "2222222", "A", "R", now - 700)
    store.set_status("locked", OTPStatus.FAILED)
    store.upsert_pending("fresh", "3333333", "A", "R", now)

    service = OTPPurgeService(interval=1, ttl_seconds=600, session_factory=session_factory)
    assert asyncio.run(service.purge_now()) == 1

    assert store.get("stale") is None
    assert store.get("locked") is not None
    assert store.get("fresh") is not None
    db.close()


def test_loop_runs_and_stops(session_factory):
    db = session_factory()
    store = OTPStore(db)
    store.upsert_pending("stale", "1111111", "A", "R", int(time.time()) - 700)

    service = OTPPurgeService(interval=60, ttl_seconds=600, session_factory=session_factory)

    async def run():
        await service.start()
        assert service.running
        await asyncio.sleep(0.05)
        await service.stop()

    asyncio.run(run())

    assert not service.running
    assert store.get("stale") is None
    db.close()


def test_loop_survives_errors(session_factory):
    calls = []

    def broken_factory():
        calls.append(1)
        raise RuntimeError("db down")

    service = OTPPurgeService(interval=0, ttl_seconds=600, session_factory=broken_factory)

    async def run():
        await service.start()
        await asyncio.sleep(0.05)
        await service.stop()

    asyncio.run(run())

    assert len(calls) > 1

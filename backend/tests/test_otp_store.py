from otp_gateway.models.otp import OTPRecord, OTPStatus

from .conftest import NUMBER


def test_upsert_creates_pending_record(store):
    store.upsert_pending(NUMBER, "1234567", "A", "R1", 1000)

    record = store.get(NUMBER)
    assert record.code == "1234567"
    assert record.lsp == "A"
    assert record.order_ref == "R1"
    assert record.failed_attempts == 0
    assert record.created_at == 1000
    assert record.state is OTPStatus.PENDING


def test_upsert_overwrites_resolved_record(store, db):
    store.upsert_pending(NUMBER, "1234567", "A", "R1", 1000)
    store.increment_attempts(NUMBER, 1, OTPStatus.PENDING)
    store.set_status(NUMBER, OTPStatus.FAILED)

    store.upsert_pending(NUMBER, "7654321", "B", "R2", 2000)

    assert db.query(OTPRecord).count() == 1
    record = store.get(NUMBER)
    assert record.code == "7654321"
    assert record.order_ref == "R2"
    assert record.failed_attempts == 0
    assert record.created_at == 2000
    assert record.state is OTPStatus.PENDING


def test_get_missing_returns_none(store):
    assert store.get("0000") is None


def test_increment_attempts_is_compare_and_set(store):
    store.upsert_pending(NUMBER, "1234567", "A", "R1", 1000)

    assert store.increment_attempts(NUMBER, 1, OTPStatus.PENDING) is True
    # Stale caller still thinks the counter is 0
    assert store.increment_attempts(NUMBER, 1, OTPStatus.PENDING) is False
    assert store.increment_attempts(NUMBER, 2, OTPStatus.FAILED) is True

    record = store.get(NUMBER)
    assert record.failed_attempts == 2
    assert record.state is OTPStatus.FAILED


def test_increment_attempts_ignores_resolved_record(store):
    store.upsert_pending(NUMBER, "1234567", "A", "R1", 1000)
    store.set_status(NUMBER, OTPStatus.SUCCESS)

    assert store.increment_attempts(NUMBER, 1, OTPStatus.PENDING) is False
    assert store.get(NUMBER).failed_attempts == 0


def test_delete_if_pending_only_deletes_pending(store):
    store.upsert_pending(NUMBER, "1234567", "A", "R1", 1000)
    store.upsert_pending("200", "1234567", "A", "R1", 1000)
    store.set_status("200", OTPStatus.SUCCESS)

    assert store.delete_if_pending(NUMBER) is True
    assert store.get(NUMBER) is None

    assert store.delete_if_pending("200") is False
    assert store.get("200").state is OTPStatus.SUCCESS


def test_purge_expired_pending_keeps_resolved_and_fresh_rows(store):
    store.upsert_pending("old-pending", "1111111", "A", "R", 100)
    store.upsert_pending("old-success", "2222222", "A", "R", 100)
    store.upsert_pending("old-failed", "3333333", "A", "R", 100)
    store.upsert_pending("fresh", "4444444", "A", "R", 900)
    store.set_status("old-success", OTPStatus.SUCCESS)
    store.set_status("old-failed", OTPStatus.FAILED)

    assert store.purge_expired_pending(cutoff=500) == 1

    assert store.get("old-pending") is None
    assert store.get("old-success") is not None
    assert store.get("old-failed") is not None
    assert store.get("fresh") is not None


def test_purge_cutoff_is_exclusive(store):
    store.upsert_pending(NUMBER, "1234567", "A", "R1", 500)

    assert store.purge_expired_pending(cutoff=500) == 0
    assert store.get(NUMBER) is not None

"""
OTP Store - persisted OTP records keyed by phone number
"""
import logging
from functools import wraps
from typing import Optional

from sqlalchemy import and_
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import OTPStoreError
from ..models.otp import OTPRecord, OTPStatus

logger = logging.getLogger(__name__)


def _atomic(method):
    """Commit after a store operation, roll back and wrap driver errors otherwise."""
    @wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            result = method(self, *args, **kwargs)
            self.db.commit()
            return result
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"OTP store operation {method.__name__} failed: {e}")
            raise OTPStoreError(detail=str(e)) from e
    return wrapper


class OTPStore:
    """
    Thin data-access layer over the ``otps`` table.

    Every operation runs in its own transaction; conditional updates are
    expressed as single UPDATE/DELETE statements so concurrent requests for
    the same number never interleave a read with a blind write.
    """

    def __init__(self, db: Session):
        self.db = db

    @_atomic
    def upsert_pending(self, number: str, code: str, lsp: str, order_ref: str, now: int) -> None:
        """Create or fully replace the record for ``number`` as a fresh pending code"""
        values = {
            "number": number,
            "code": code,
            "lsp": lsp,
            "order_ref": order_ref,
            "failed_attempts": 0,
            "created_at": now,
            "status": OTPStatus.PENDING.value,
        }
        dialect = self.db.get_bind().dialect.name

        if dialect in ("postgresql", "sqlite"):
            insert = postgresql.insert if dialect == "postgresql" else sqlite.insert
            stmt = insert(OTPRecord).values(**values)
            stmt = stmt.on_conflict_do_update(
                index_elements=[OTPRecord.number],
                set_={k: stmt.excluded[k] for k in values if k != "number"},
            )
        elif dialect in ("mysql", "mariadb"):
            stmt = mysql.insert(OTPRecord).values(**values)
            stmt = stmt.on_duplicate_key_update(
                {k: stmt.inserted[k] for k in values if k != "number"}
            )
        else:
            self.db.merge(OTPRecord(**values))
            return

        self.db.execute(stmt)

    def get(self, number: str) -> Optional[OTPRecord]:
        try:
            # Always read the committed row, not a cached identity
            self.db.expire_all()
            return self.db.query(OTPRecord).filter(OTPRecord.number == number).first()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"OTP store lookup failed: {e}")
            raise OTPStoreError(detail=str(e)) from e

    @_atomic
    def set_status(self, number: str, status: OTPStatus) -> int:
        return self.db.query(OTPRecord).filter(
            OTPRecord.number == number
        ).update({OTPRecord.status: status.value}, synchronize_session=False)

    @_atomic
    def increment_attempts(self, number: str, new_count: int, status: OTPStatus) -> bool:
        """
        Set ``failed_attempts`` and ``status`` in one statement.

        Only applies while the record is still pending and its counter still
        holds ``new_count - 1``; returns False when another request got there
        first.
        """
        updated = self.db.query(OTPRecord).filter(
            and_(
                OTPRecord.number == number,
                OTPRecord.status == OTPStatus.PENDING.value,
                OTPRecord.failed_attempts == new_count - 1,
            )
        ).update(
            {OTPRecord.failed_attempts: new_count, OTPRecord.status: status.value},
            synchronize_session=False,
        )
        return updated == 1

    @_atomic
    def delete_if_pending(self, number: str) -> bool:
        deleted = self.db.query(OTPRecord).filter(
            and_(
                OTPRecord.number == number,
                OTPRecord.status == OTPStatus.PENDING.value,
            )
        ).delete(synchronize_session=False)
        return deleted > 0

    @_atomic
    def purge_expired_pending(self, cutoff: int) -> int:
        """Delete every pending record created before ``cutoff``; returns the row count"""
        return self.db.query(OTPRecord).filter(
            and_(
                OTPRecord.status == OTPStatus.PENDING.value,
                OTPRecord.created_at < cutoff,
            )
        ).delete(synchronize_session=False)

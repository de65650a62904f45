import enum

from sqlalchemy import Column, Integer, String, Index
from otp_gateway.database import Base


class OTPStatus(str, enum.Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"

    def can_transition_to(self, target: "OTPStatus") -> bool:
        """In-place transitions only; a new request overwrites the row instead."""
        return target in _TRANSITIONS[self]


_TRANSITIONS = {
    OTPStatus.PENDING: {OTPStatus.PENDING, OTPStatus.SUCCESS, OTPStatus.FAILED},
    OTPStatus.SUCCESS: set(),
    OTPStatus.FAILED: set(),
}


class OTPRecord(Base):
    __tablename__ = "otps"

    number = Column(String(32), primary_key=True)
    code = Column(String(16), nullable=False)
    lsp = Column(String(128), nullable=False)  # losing service provider
    order_ref = Column(String(128), nullable=False)
    failed_attempts = Column(Integer, nullable=False, default=0)
    created_at = Column(Integer, nullable=False)  # epoch seconds of the latest code
    status = Column(String(16), nullable=False, default=OTPStatus.PENDING.value)

    __table_args__ = (
        Index("ix_otps_status_created_at", "status", "created_at"),
    )

    @property
    def state(self) -> OTPStatus:
        return OTPStatus(self.status)

    def __repr__(self):
        return f"<OTPRecord {self.number} status={self.status} attempts={self.failed_attempts}>"

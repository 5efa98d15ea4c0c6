"""Domain Entities - Aggregates"""
from pydantic import BaseModel, Field, field_validator
from uuid import uuid4
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from domain.enums import ReservationStatus
from domain.exceptions import ReservationValidationError

MIN_DURATION = timedelta(minutes=15)
MAX_DURATION = timedelta(hours=8)

CANDIDATE_ID = "candidate"
CANDIDATE_REQUESTER_ID = "candidate"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken as UTC, aware ones are converted to UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Reservation(BaseModel):
    """Reservation Aggregate Root Entity

    A booking of one room for one half-open interval ``[start, end)`` by one
    requester. Identity, foreign ids, interval and creation time are frozen;
    only ``status`` moves, and only once, from ACTIVE to a terminal state.
    """

    # Identity
    id: str = Field(default_factory=lambda: str(uuid4()), frozen=True)

    # References to other contexts
    room_id: str = Field(frozen=True)
    requester_id: str = Field(frozen=True)

    # Interval (UTC)
    start: datetime = Field(frozen=True)
    end: datetime = Field(frozen=True)

    status: ReservationStatus = ReservationStatus.ACTIVE

    # Metadata
    created_at: datetime = Field(default_factory=utc_now, frozen=True)

    class Config:
        from_attributes = True

    @field_validator("start", "end", "created_at")
    @classmethod
    def _normalize_utc(cls, v: datetime) -> datetime:
        return as_utc(v)

    # ==================== FACTORY METHODS ====================
    @staticmethod
    def create(
        room_id: str,
        requester_id: str,
        start: datetime,
        end: datetime,
    ) -> "Reservation":
        """Create new reservation, reporting every violated rule at once"""
        start = as_utc(start)
        end = as_utc(end)

        errors = Reservation.validate_fields(room_id, requester_id, start, end, utc_now())
        if errors:
            raise ReservationValidationError(errors)

        return Reservation(
            room_id=room_id,
            requester_id=requester_id,
            start=start,
            end=end,
            status=ReservationStatus.ACTIVE,
        )

    @staticmethod
    def candidate(room_id: str, start: datetime, end: datetime) -> "Reservation":
        """Transient ACTIVE instance for overlap checks; never persisted, never validated"""
        return Reservation(
            id=CANDIDATE_ID,
            room_id=room_id,
            requester_id=CANDIDATE_REQUESTER_ID,
            start=start,
            end=end,
            status=ReservationStatus.ACTIVE,
        )

    # ==================== STATE TRANSITION METHODS ====================
    def cancel(self) -> None:
        """Cancel reservation"""
        if not self.is_active():
            raise ReservationValidationError(["Only active reservations can be cancelled"])

        self.status = ReservationStatus.CANCELLED

    def complete(self) -> None:
        """Mark reservation as completed"""
        if not self.is_active():
            raise ReservationValidationError(["Only active reservations can be completed"])

        self.status = ReservationStatus.COMPLETED

    # ==================== QUERY METHODS ====================
    def is_active(self) -> bool:
        return self.status == ReservationStatus.ACTIVE

    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def overlaps(self, other: "Reservation") -> bool:
        """True iff both are ACTIVE on the same room and their intervals intersect.

        Intervals are half-open, so a reservation ending at 12:00 does not
        overlap one starting at 12:00.
        """
        if self.room_id != other.room_id:
            return False

        if not self.is_active() or not other.is_active():
            return False

        return self.start < other.end and other.start < self.end

    def duration(self) -> timedelta:
        return self.end - self.start

    def duration_minutes(self) -> int:
        return int(self.duration().total_seconds() // 60)

    # ==================== VALIDATION ====================
    @staticmethod
    def validate_fields(
        room_id: str,
        requester_id: str,
        start: datetime,
        end: datetime,
        now: Optional[datetime] = None,
    ) -> List[str]:
        """Return the message of every violated field rule (empty when valid)"""
        now = now or utc_now()
        errors: List[str] = []

        if not room_id or not room_id.strip():
            errors.append("Room ID cannot be empty")

        if not requester_id or not requester_id.strip():
            errors.append("Requester ID cannot be empty")

        if start < now:
            errors.append("Start time cannot be in the past")

        if end < now:
            errors.append("End time cannot be in the past")

        if end <= start:
            errors.append("End time must be after start time")

        duration = end - start
        if duration < MIN_DURATION or duration > MAX_DURATION:
            errors.append("Reservation duration must be between 15 minutes and 8 hours")

        return errors

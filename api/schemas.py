"""API Schemas - Request and Response DTOs"""
from pydantic import BaseModel
from datetime import datetime
from typing import List, Optional


# ============================================================================
# RESERVATION SCHEMAS
# ============================================================================

class CreateReservationRequest(BaseModel):
    """Create reservation request DTO (timestamps as RFC 3339 strings)"""
    room_id: str
    requester_id: Optional[str] = None
    start: datetime
    end: datetime


class ReservationResponse(BaseModel):
    """Reservation response DTO"""
    id: str
    room_id: str
    requester_id: str
    start: datetime
    end: datetime
    status: str
    duration_minutes: int
    created_at: datetime


# ============================================================================
# AVAILABILITY SCHEMAS
# ============================================================================

class CheckAvailabilityRequest(BaseModel):
    """Check availability request DTO"""
    room_id: str
    start: datetime
    end: datetime


class AvailabilityResponse(BaseModel):
    """Availability response DTO"""
    room_id: str
    start: datetime
    end: datetime
    available: bool
    message: str


# ============================================================================
# ERROR & AUTH SCHEMAS
# ============================================================================

class ValidationErrorResponse(BaseModel):
    errors: List[str]


class AuthenticatedUser(BaseModel):
    """Identity claim resolved from the bearer token"""
    user_id: str
    email: Optional[str] = None
    role: str = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

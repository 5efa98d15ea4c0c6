"""Domain Repository Interfaces"""
from abc import ABC, abstractmethod
from typing import Optional, List
from datetime import datetime

from pydantic import BaseModel

from domain.entities import Reservation


class ReservationRepository(ABC):
    """Repository interface for Reservation Aggregate

    Implementations hand out independent copies: mutating a returned
    reservation has no effect until it is passed back to ``save``/``update``.
    """

    @abstractmethod
    async def save(self, reservation: Reservation) -> Reservation:
        """Insert or replace reservation"""
        pass

    @abstractmethod
    async def get(self, reservation_id: str) -> Optional[Reservation]:
        """Find reservation by ID"""
        pass

    @abstractmethod
    async def list(self) -> List[Reservation]:
        """Find all reservations"""
        pass

    @abstractmethod
    async def list_by_room(self, room_id: str) -> List[Reservation]:
        """Find reservations for a room"""
        pass

    @abstractmethod
    async def list_by_requester(self, requester_id: str) -> List[Reservation]:
        """Find reservations made by a requester"""
        pass

    @abstractmethod
    async def list_by_room_and_range(
        self, room_id: str, start: datetime, end: datetime
    ) -> List[Reservation]:
        """Find ACTIVE reservations for a room whose interval intersects [start, end)"""
        pass

    @abstractmethod
    async def update(self, reservation: Reservation) -> Reservation:
        """Replace an existing reservation; raises ReservationNotFoundError if absent"""
        pass

    @abstractmethod
    async def delete(self, reservation_id: str) -> None:
        """Remove reservation; raises ReservationNotFoundError if absent"""
        pass


class RoomStatus(BaseModel):
    exists: bool
    active: bool = False


class RequesterStatus(BaseModel):
    exists: bool


class RoomLookup(ABC):
    """Read-only view onto the rooms context"""

    @abstractmethod
    async def lookup(self, room_id: str) -> RoomStatus:
        pass


class RequesterLookup(ABC):
    """Read-only view onto the users context"""

    @abstractmethod
    async def lookup(self, requester_id: str) -> RequesterStatus:
        pass

"""In-Memory Repository Implementations"""
import logging
from typing import Optional, List, Dict
from datetime import datetime

from aiorwlock import RWLock

from domain.repositories import ReservationRepository
from domain.entities import Reservation, as_utc
from domain.exceptions import ReservationNotFoundError

logger = logging.getLogger(__name__)


def copy_reservation(reservation: Reservation) -> Reservation:
    return reservation.model_copy(deep=True)


def intersects_range(reservation: Reservation, room_id: str, start: datetime, end: datetime) -> bool:
    return (
        reservation.room_id == room_id
        and reservation.is_active()
        and reservation.start < end
        and reservation.end > start
    )


class InMemoryReservationRepository(ReservationRepository):
    """In-memory implementation of ReservationRepository

    One dict guarded by one reader/writer lock. Reads share the lock and
    return deep copies; writes hold it exclusively.
    """

    def __init__(self):
        self._storage: Dict[str, Reservation] = {}
        self._lock = RWLock()

    async def init(self) -> None:
        """Nothing to load; present so every backend starts the same way"""

    async def count(self) -> int:
        async with self._lock.reader_lock:
            return len(self._storage)

    async def save(self, reservation: Reservation) -> Reservation:
        """Save reservation to memory"""
        async with self._lock.writer_lock:
            self._storage[reservation.id] = copy_reservation(reservation)
        logger.debug("Stored reservation %s", reservation.id)
        return reservation

    async def get(self, reservation_id: str) -> Optional[Reservation]:
        """Find reservation by ID"""
        async with self._lock.reader_lock:
            reservation = self._storage.get(reservation_id)
            return copy_reservation(reservation) if reservation else None

    async def list(self) -> List[Reservation]:
        """Find all reservations"""
        async with self._lock.reader_lock:
            return [copy_reservation(r) for r in self._storage.values()]

    async def list_by_room(self, room_id: str) -> List[Reservation]:
        """Find reservations for a room"""
        async with self._lock.reader_lock:
            return [copy_reservation(r) for r in self._storage.values() if r.room_id == room_id]

    async def list_by_requester(self, requester_id: str) -> List[Reservation]:
        """Find reservations made by a requester"""
        async with self._lock.reader_lock:
            return [copy_reservation(r) for r in self._storage.values() if r.requester_id == requester_id]

    async def list_by_room_and_range(
        self, room_id: str, start: datetime, end: datetime
    ) -> List[Reservation]:
        """Find active reservations for a room intersecting [start, end)"""
        start, end = as_utc(start), as_utc(end)
        async with self._lock.reader_lock:
            return [
                copy_reservation(r) for r in self._storage.values()
                if intersects_range(r, room_id, start, end)
            ]

    async def update(self, reservation: Reservation) -> Reservation:
        """Update reservation"""
        async with self._lock.writer_lock:
            if reservation.id not in self._storage:
                raise ReservationNotFoundError(reservation.id)
            self._storage[reservation.id] = copy_reservation(reservation)
        logger.debug("Updated reservation %s", reservation.id)
        return reservation

    async def delete(self, reservation_id: str) -> None:
        """Delete reservation"""
        async with self._lock.writer_lock:
            if reservation_id not in self._storage:
                raise ReservationNotFoundError(reservation_id)
            del self._storage[reservation_id]
        logger.debug("Deleted reservation %s", reservation_id)

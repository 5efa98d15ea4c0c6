"""Application Services - Business use cases"""
import asyncio
import logging
from datetime import datetime
from typing import Dict, List, Optional

from domain.repositories import ReservationRepository, RoomLookup, RequesterLookup
from domain.entities import Reservation, as_utc
from domain.exceptions import (
    ReservationValidationError,
    ReservationNotFoundError,
    RoomNotFoundError,
    RoomInactiveError,
    RequesterNotFoundError,
)

logger = logging.getLogger(__name__)

ROOM_UNAVAILABLE_MESSAGE = "Room is not available for the requested time range"


class ReservationService:
    """Service for Reservation business use cases

    Repository errors are never caught here; they reach the caller as-is.
    """

    def __init__(self,
                 repository: ReservationRepository,
                 room_lookup: RoomLookup,
                 requester_lookup: RequesterLookup):
        self.repository = repository
        self.room_lookup = room_lookup
        self.requester_lookup = requester_lookup
        # Held across check_availability + save so two creations for the same
        # room cannot both pass the check before either is stored.
        self._room_locks: Dict[str, asyncio.Lock] = {}
        # Held across get + status check + update so a reservation leaves
        # ACTIVE at most once.
        self._reservation_locks: Dict[str, asyncio.Lock] = {}

    def _room_lock(self, room_id: str) -> asyncio.Lock:
        return self._room_locks.setdefault(room_id, asyncio.Lock())

    def _reservation_lock(self, reservation_id: str) -> asyncio.Lock:
        return self._reservation_locks.setdefault(reservation_id, asyncio.Lock())

    async def create_reservation(
        self,
        room_id: str,
        requester_id: str,
        start: datetime,
        end: datetime,
    ) -> Reservation:
        """Create new reservation with full validation

        Checks run in a fixed order: room, requester, entity fields,
        availability. A validation failure therefore implies the room and
        requester were found.
        """
        room = await self.room_lookup.lookup(room_id)
        if not room.exists:
            logger.warning("Rejected reservation: room %s not found", room_id)
            raise RoomNotFoundError(room_id)
        if not room.active:
            logger.warning("Rejected reservation: room %s is inactive", room_id)
            raise RoomInactiveError(room_id)

        requester = await self.requester_lookup.lookup(requester_id)
        if not requester.exists:
            logger.warning("Rejected reservation: requester %s not found", requester_id)
            raise RequesterNotFoundError(requester_id)

        reservation = Reservation.create(
            room_id=room_id,
            requester_id=requester_id,
            start=start,
            end=end,
        )

        async with self._room_lock(room_id):
            available = await self.check_availability(room_id, reservation.start, reservation.end)
            if not available:
                logger.warning(
                    "Rejected reservation: room %s busy between %s and %s",
                    room_id, reservation.start.isoformat(), reservation.end.isoformat(),
                )
                raise ReservationValidationError([ROOM_UNAVAILABLE_MESSAGE])

            await self.repository.save(reservation)

        logger.info(
            "Created reservation %s for room %s by %s (%s - %s)",
            reservation.id, room_id, requester_id,
            reservation.start.isoformat(), reservation.end.isoformat(),
        )
        return reservation

    async def check_availability(self, room_id: str, start: datetime, end: datetime) -> bool:
        """True iff no active reservation on the room overlaps [start, end)"""
        start, end = as_utc(start), as_utc(end)
        if end <= start:
            raise ReservationValidationError(["End time must be after start time"])

        candidates = await self.repository.list_by_room_and_range(room_id, start, end)
        probe = Reservation.candidate(room_id, start, end)
        available = not any(probe.overlaps(r) for r in candidates)

        logger.debug(
            "Availability for room %s (%s - %s): %s (%d candidates)",
            room_id, start.isoformat(), end.isoformat(), available, len(candidates),
        )
        return available

    async def cancel_reservation(self, reservation_id: str) -> Reservation:
        """Cancel an active reservation"""
        async with self._reservation_lock(reservation_id):
            reservation = await self._get_existing(reservation_id)
            if not reservation.is_active():
                raise ReservationValidationError(["Only active reservations can be cancelled"])

            reservation.cancel()
            await self.repository.update(reservation)
        logger.info("Cancelled reservation %s", reservation_id)
        return reservation

    async def complete_reservation(self, reservation_id: str) -> Reservation:
        """Mark an active reservation as completed"""
        async with self._reservation_lock(reservation_id):
            reservation = await self._get_existing(reservation_id)
            if not reservation.is_active():
                raise ReservationValidationError(["Only active reservations can be completed"])

            reservation.complete()
            await self.repository.update(reservation)
        logger.info("Completed reservation %s", reservation_id)
        return reservation

    async def get_reservation(self, reservation_id: str) -> Optional[Reservation]:
        """Get reservation by ID"""
        return await self.repository.get(reservation_id)

    async def list_reservations(self) -> List[Reservation]:
        """Get all reservations"""
        return await self.repository.list()

    async def list_reservations_by_room(self, room_id: str) -> List[Reservation]:
        """Get all reservations for a room"""
        return await self.repository.list_by_room(room_id)

    async def list_reservations_by_requester(self, requester_id: str) -> List[Reservation]:
        """Get all reservations made by a requester"""
        return await self.repository.list_by_requester(requester_id)

    async def _get_existing(self, reservation_id: str) -> Reservation:
        reservation = await self.repository.get(reservation_id)
        if reservation is None:
            raise ReservationNotFoundError(reservation_id)
        return reservation

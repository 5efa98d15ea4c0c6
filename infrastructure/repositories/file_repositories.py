"""File-backed Repository Implementations

The whole reservation map is cached in memory and rewritten to one JSON
document after every mutation. Layout::

    {
      "<reservation id>": {"id": ..., "room_id": ..., "requester_id": ...,
                           "start": ..., "end": ..., "status": ...,
                           "created_at": ...},
      ...
    }

Every write is a full-file rewrite. That is fine for hundreds to low
thousands of reservations; anything bigger wants an append log or a real
database. Only one process may own a given file.
"""
import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Optional, List, Dict, Union
from datetime import datetime

from aiorwlock import RWLock
from pydantic import ValidationError

from domain.repositories import ReservationRepository
from domain.entities import Reservation, as_utc
from domain.exceptions import ReservationNotFoundError, RepositoryError
from infrastructure.repositories.in_memory_repositories import copy_reservation, intersects_range

logger = logging.getLogger(__name__)

DEFAULT_PATH = Path("./data/reservations.json")


class FileReservationRepository(ReservationRepository):
    """JSON-file implementation of ReservationRepository

    Cache mutations are atomic under the writer lock. The lock is released
    before the file is written; file writes are serialized among themselves
    and each one snapshots the cache after it gets its turn, so the file
    always converges on the latest cache state.
    """

    def __init__(self, file_path: Union[str, Path] = DEFAULT_PATH):
        self.file_path = Path(file_path)
        self._cache: Dict[str, Reservation] = {}
        self._lock = RWLock()
        self._flush_lock = asyncio.Lock()

    # ==================== PERSISTENCE ====================
    async def init(self) -> None:
        """Populate the cache from disk. A missing file means an empty store."""
        if not self.file_path.exists():
            logger.info("No reservation file at %s, starting empty", self.file_path)
            return

        try:
            contents = await asyncio.to_thread(self.file_path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise RepositoryError(f"Error reading {self.file_path}: {e}") from e

        try:
            raw = json.loads(contents) if contents.strip() else {}
            if not isinstance(raw, dict):
                raise ValueError("top-level JSON value must be an object")
            loaded = {key: Reservation.model_validate(value) for key, value in raw.items()}
        except (ValueError, ValidationError) as e:
            raise RepositoryError(f"Error parsing {self.file_path}: {e}") from e

        for key, reservation in loaded.items():
            if key != reservation.id:
                raise RepositoryError(
                    f"Error parsing {self.file_path}: entry {key!r} holds reservation {reservation.id!r}"
                )

        async with self._lock.writer_lock:
            self._cache = loaded

        logger.info("Loaded %d reservations from %s", len(loaded), self.file_path)

    async def _flush(self) -> None:
        async with self._flush_lock:
            async with self._lock.reader_lock:
                document = {key: r.model_dump(mode="json") for key, r in self._cache.items()}

            try:
                payload = json.dumps(document, indent=2)
            except (TypeError, ValueError) as e:
                raise RepositoryError(f"Error serializing reservations: {e}") from e

            try:
                await asyncio.to_thread(self._write, payload)
            except OSError as e:
                logger.error("Failed to write %s: %s", self.file_path, e)
                raise RepositoryError(f"Error writing {self.file_path}: {e}") from e

    def _write(self, payload: str) -> None:
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.file_path.with_name(self.file_path.name + ".tmp")
        tmp_path.write_text(payload, encoding="utf-8")
        os.replace(tmp_path, self.file_path)

    async def count(self) -> int:
        async with self._lock.reader_lock:
            return len(self._cache)

    # ==================== WRITES ====================
    async def save(self, reservation: Reservation) -> Reservation:
        """Save reservation and rewrite the file"""
        async with self._lock.writer_lock:
            self._cache[reservation.id] = copy_reservation(reservation)

        await self._flush()
        logger.debug("Persisted reservation %s", reservation.id)
        return reservation

    async def update(self, reservation: Reservation) -> Reservation:
        """Update reservation and rewrite the file"""
        async with self._lock.writer_lock:
            if reservation.id not in self._cache:
                raise ReservationNotFoundError(reservation.id)
            self._cache[reservation.id] = copy_reservation(reservation)

        await self._flush()
        logger.debug("Persisted update of reservation %s", reservation.id)
        return reservation

    async def delete(self, reservation_id: str) -> None:
        """Delete reservation and rewrite the file"""
        async with self._lock.writer_lock:
            if reservation_id not in self._cache:
                raise ReservationNotFoundError(reservation_id)
            del self._cache[reservation_id]

        await self._flush()
        logger.debug("Persisted deletion of reservation %s", reservation_id)

    # ==================== READS ====================
    async def get(self, reservation_id: str) -> Optional[Reservation]:
        async with self._lock.reader_lock:
            reservation = self._cache.get(reservation_id)
            return copy_reservation(reservation) if reservation else None

    async def list(self) -> List[Reservation]:
        async with self._lock.reader_lock:
            return [copy_reservation(r) for r in self._cache.values()]

    async def list_by_room(self, room_id: str) -> List[Reservation]:
        async with self._lock.reader_lock:
            return [copy_reservation(r) for r in self._cache.values() if r.room_id == room_id]

    async def list_by_requester(self, requester_id: str) -> List[Reservation]:
        async with self._lock.reader_lock:
            return [copy_reservation(r) for r in self._cache.values() if r.requester_id == requester_id]

    async def list_by_room_and_range(
        self, room_id: str, start: datetime, end: datetime
    ) -> List[Reservation]:
        start, end = as_utc(start), as_utc(end)
        async with self._lock.reader_lock:
            return [
                copy_reservation(r) for r in self._cache.values()
                if intersects_range(r, room_id, start, end)
            ]

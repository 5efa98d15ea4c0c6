"""In-memory directories backing the room and requester lookup ports"""
from typing import Dict, Iterable, Set

from domain.repositories import RoomLookup, RoomStatus, RequesterLookup, RequesterStatus


class InMemoryRoomDirectory(RoomLookup):
    """Known rooms and whether each one can currently be booked"""

    def __init__(self):
        self._rooms: Dict[str, bool] = {}

    @classmethod
    def seeded(cls, active: Iterable[str] = (), inactive: Iterable[str] = ()) -> "InMemoryRoomDirectory":
        directory = cls()
        for room_id in active:
            directory.add_room(room_id)
        for room_id in inactive:
            directory.add_room(room_id, active=False)
        return directory

    def add_room(self, room_id: str, active: bool = True) -> None:
        self._rooms[room_id] = active

    def set_active(self, room_id: str, active: bool) -> None:
        if room_id not in self._rooms:
            raise KeyError(room_id)
        self._rooms[room_id] = active

    async def lookup(self, room_id: str) -> RoomStatus:
        if room_id not in self._rooms:
            return RoomStatus(exists=False)
        return RoomStatus(exists=True, active=self._rooms[room_id])


class InMemoryRequesterDirectory(RequesterLookup):
    def __init__(self, requester_ids: Iterable[str] = ()):
        self._requesters: Set[str] = set(requester_ids)

    def add_requester(self, requester_id: str) -> None:
        self._requesters.add(requester_id)

    async def lookup(self, requester_id: str) -> RequesterStatus:
        return RequesterStatus(exists=requester_id in self._requesters)

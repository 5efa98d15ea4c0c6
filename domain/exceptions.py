"""Domain Errors

Three kinds cross the service and repository boundaries:

* validation (``ReservationValidationError``) - the caller can fix the input
* not found (``NotFoundError``) - the referenced id does not exist
* infrastructure (``RepositoryError``) - storage failed, unrelated to the input
"""
from typing import Iterable, List


class ReservationError(Exception):
    """Base class for every error raised by the reservation engine"""


class ReservationValidationError(ReservationError, ValueError):
    """One or more business rules were violated"""

    def __init__(self, messages: Iterable[str]):
        self.messages: List[str] = list(messages)
        super().__init__("; ".join(self.messages))


class RoomInactiveError(ReservationValidationError):
    def __init__(self, room_id: str):
        self.room_id = room_id
        super().__init__([f"Room {room_id} is not active"])


class NotFoundError(ReservationError):
    """Referenced entity does not exist"""


class ReservationNotFoundError(NotFoundError):
    def __init__(self, reservation_id: str):
        self.reservation_id = reservation_id
        super().__init__(f"Reservation {reservation_id} not found")


class RoomNotFoundError(NotFoundError):
    def __init__(self, room_id: str):
        self.room_id = room_id
        super().__init__(f"Room {room_id} not found")


class RequesterNotFoundError(NotFoundError):
    def __init__(self, requester_id: str):
        self.requester_id = requester_id
        super().__init__(f"Requester {requester_id} not found")


class RepositoryError(ReservationError):
    """Storage failure (I/O, serialization)"""

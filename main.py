from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Depends

from api.schemas import (
    CreateReservationRequest, ReservationResponse,
    CheckAvailabilityRequest, AvailabilityResponse,
    AuthenticatedUser, ValidationErrorResponse,
)
from api.dependencies import get_current_user, get_reservation_service
from application.services import ReservationService, ROOM_UNAVAILABLE_MESSAGE
from domain.enums import ReservationStatus
from domain.exceptions import ReservationError, ReservationValidationError, NotFoundError
from domain.repositories import ReservationRepository, RoomLookup, RequesterLookup
from infrastructure.config import Settings
from infrastructure.lookups import InMemoryRoomDirectory, InMemoryRequesterDirectory
from infrastructure.repositories.in_memory_repositories import InMemoryReservationRepository
from infrastructure.repositories.file_repositories import FileReservationRepository
from logging_config import setup_logging

ROOM_AVAILABLE_MESSAGE = "Room is available for the requested time range"


def build_repository(settings: Settings):
    """Pick the reservation backend named in settings"""
    if settings.reservation_backend == "file":
        return FileReservationRepository(settings.reservations_file)
    return InMemoryReservationRepository()


def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[ReservationRepository] = None,
    room_lookup: Optional[RoomLookup] = None,
    requester_lookup: Optional[RequesterLookup] = None,
    configure_logging: bool = True,
) -> FastAPI:
    """Build the REST adapter; storage and lookups are created at startup and owned by the app"""
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if configure_logging:
            setup_logging(settings.log_level, settings.log_file)

        repo = repository if repository is not None else build_repository(settings)
        await repo.init()

        rooms = room_lookup if room_lookup is not None else InMemoryRoomDirectory.seeded(
            active=settings.known_rooms, inactive=settings.inactive_rooms
        )
        requesters = requester_lookup if requester_lookup is not None else InMemoryRequesterDirectory(
            settings.known_requesters
        )

        app.state.settings = settings
        app.state.reservation_repository = repo
        app.state.reservation_service = ReservationService(repo, rooms, requesters)
        yield

    app = FastAPI(
        title="Room Reservation API",
        description="Meeting room reservation engine with overlap-free booking",
        version="1.0.0",
        lifespan=lifespan,
    )
    # Dependencies resolve settings from app.state; set it before startup too.
    app.state.settings = settings
    _register_routes(app)
    return app


def _register_routes(app: FastAPI) -> None:

    # ============================================================================
    # HEALTH & ENUM REFERENCE ENDPOINTS
    # ============================================================================

    @app.get("/api/health", tags=["Health"])
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "message": "API is running"}

    @app.get("/api/enums/reservation-status", tags=["Enum Reference"])
    async def get_reservation_statuses():
        """Get all ReservationStatus enum values"""
        return {
            "values": [f"{item.name}" for item in ReservationStatus],
            "description": "Reservation status values: ACTIVE, CANCELLED, COMPLETED"
        }

    # ============================================================================
    # RESERVATION ENDPOINTS
    # ============================================================================

    @app.post("/api/reservations", response_model=ReservationResponse, status_code=201, tags=["Reservations"])
    async def create_reservation(
        request: CreateReservationRequest,
        service: ReservationService = Depends(get_reservation_service),
        current_user: AuthenticatedUser = Depends(get_current_user)
    ):
        """Create new reservation"""
        try:
            reservation = await service.create_reservation(
                room_id=request.room_id,
                requester_id=request.requester_id or current_user.user_id,
                start=request.start,
                end=request.end,
            )
            return _reservation_to_response(reservation)
        except ReservationError as e:
            raise _to_http_exception(e)

    @app.get("/api/reservations", response_model=List[ReservationResponse], tags=["Reservations"])
    async def list_reservations(
        service: ReservationService = Depends(get_reservation_service),
        current_user: AuthenticatedUser = Depends(get_current_user)
    ):
        """Get all reservations"""
        try:
            reservations = await service.list_reservations()
        except ReservationError as e:
            raise _to_http_exception(e)
        return [_reservation_to_response(r) for r in reservations]

    @app.get("/api/reservations/{reservation_id}", response_model=ReservationResponse, tags=["Reservations"])
    async def get_reservation(
        reservation_id: str,
        service: ReservationService = Depends(get_reservation_service),
        current_user: AuthenticatedUser = Depends(get_current_user)
    ):
        """Get reservation by ID"""
        try:
            reservation = await service.get_reservation(reservation_id)
        except ReservationError as e:
            raise _to_http_exception(e)
        if not reservation:
            raise HTTPException(status_code=404, detail="Reservation not found")
        return _reservation_to_response(reservation)

    @app.get("/api/rooms/{room_id}/reservations", response_model=List[ReservationResponse], tags=["Reservations"])
    async def list_room_reservations(
        room_id: str,
        service: ReservationService = Depends(get_reservation_service),
        current_user: AuthenticatedUser = Depends(get_current_user)
    ):
        """Get all reservations for a room"""
        try:
            reservations = await service.list_reservations_by_room(room_id)
        except ReservationError as e:
            raise _to_http_exception(e)
        return [_reservation_to_response(r) for r in reservations]

    @app.get("/api/requesters/{requester_id}/reservations", response_model=List[ReservationResponse], tags=["Reservations"])
    async def list_requester_reservations(
        requester_id: str,
        service: ReservationService = Depends(get_reservation_service),
        current_user: AuthenticatedUser = Depends(get_current_user)
    ):
        """Get all reservations made by a requester"""
        try:
            reservations = await service.list_reservations_by_requester(requester_id)
        except ReservationError as e:
            raise _to_http_exception(e)
        return [_reservation_to_response(r) for r in reservations]

    @app.post("/api/reservations/{reservation_id}/cancel", response_model=ReservationResponse, tags=["Reservations"])
    async def cancel_reservation(
        reservation_id: str,
        service: ReservationService = Depends(get_reservation_service),
        current_user: AuthenticatedUser = Depends(get_current_user)
    ):
        """Cancel reservation (owner or admin only)"""
        try:
            existing = await service.get_reservation(reservation_id)
            if not existing:
                raise HTTPException(status_code=404, detail="Reservation not found")
            if not current_user.is_admin and existing.requester_id != current_user.user_id:
                raise HTTPException(status_code=403, detail="You can only cancel your own reservations")

            reservation = await service.cancel_reservation(reservation_id)
            return _reservation_to_response(reservation)
        except ReservationError as e:
            raise _to_http_exception(e)

    @app.post("/api/reservations/{reservation_id}/complete", response_model=ReservationResponse, tags=["Reservations"])
    async def complete_reservation(
        reservation_id: str,
        service: ReservationService = Depends(get_reservation_service),
        current_user: AuthenticatedUser = Depends(get_current_user)
    ):
        """Mark reservation as completed"""
        try:
            reservation = await service.complete_reservation(reservation_id)
            return _reservation_to_response(reservation)
        except ReservationError as e:
            raise _to_http_exception(e)

    # ============================================================================
    # AVAILABILITY ENDPOINTS
    # ============================================================================

    @app.post("/api/availability/check", response_model=AvailabilityResponse, tags=["Availability"])
    async def check_availability(
        request: CheckAvailabilityRequest,
        service: ReservationService = Depends(get_reservation_service),
        current_user: AuthenticatedUser = Depends(get_current_user)
    ):
        """Check whether a room is free for a time range"""
        try:
            available = await service.check_availability(request.room_id, request.start, request.end)
        except ReservationError as e:
            raise _to_http_exception(e)
        return AvailabilityResponse(
            room_id=request.room_id,
            start=request.start,
            end=request.end,
            available=available,
            message=ROOM_AVAILABLE_MESSAGE if available else ROOM_UNAVAILABLE_MESSAGE,
        )


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def _to_http_exception(error: ReservationError) -> HTTPException:
    """Map the engine's error kinds onto status codes"""
    if isinstance(error, ReservationValidationError):
        return HTTPException(status_code=400, detail=ValidationErrorResponse(errors=error.messages).model_dump())
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))


def _reservation_to_response(reservation) -> ReservationResponse:
    """Convert Reservation entity to ReservationResponse"""
    return ReservationResponse(
        id=reservation.id,
        room_id=reservation.room_id,
        requester_id=reservation.requester_id,
        start=reservation.start,
        end=reservation.end,
        status=reservation.status.value,
        duration_minutes=reservation.duration_minutes(),
        created_at=reservation.created_at,
    )


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)

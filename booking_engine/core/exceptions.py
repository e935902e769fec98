# booking_engine/core/exceptions.py
"""
Domain-specific exceptions for the booking engine.

Validators never raise these during slot enumeration; a failing slot is simply
left out of the result. Only request validation, booking commits and booking
updates raise, so callers can tell "fix your request" apart from "the slot was
taken" and from "try again later".
"""
import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class BookingEngineError(Exception):
    """Base exception for all booking engine errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    retryable: bool = False

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "details": self.details,
            "retryable": self.retryable,
        }


class InvalidTimeFormat(BookingEngineError):
    """Malformed timestamp or time zone input."""

    status_code = status.HTTP_400_BAD_REQUEST


class InvalidRequest(BookingEngineError):
    """Request is well-formed but cannot be served as stated (missing mode requirements, bad window)."""

    status_code = status.HTTP_400_BAD_REQUEST


class EntityNotFound(BookingEngineError):
    """Referenced entity does not exist or does not belong to the stated business."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str, entity_id: Any, message: Optional[str] = None, **kwargs) -> None:
        self.entity = entity
        self.entity_id = entity_id
        details = kwargs.pop("details", None) or {}
        details.update({"entity": entity, "entity_id": str(entity_id)})
        super().__init__(message or f"{entity} {entity_id} not found", details=details, **kwargs)


class ServiceNotFound(EntityNotFound):
    """Service does not exist or is not offered by the business."""

    def __init__(self, service_id: Any, business_id: Any) -> None:
        super().__init__(
            "Service",
            service_id,
            message=f"Service {service_id} does not exist for business {business_id}",
            details={"business_id": str(business_id)},
        )


class StaffCannotProvideService(BookingEngineError):
    """Staff exists but does not work for the business or lacks the service capability."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class InsufficientCapacity(BookingEngineError):
    """Requested quantity exceeds what the resource type can ever provide."""

    status_code = status.HTTP_409_CONFLICT


class SlotNoLongerAvailable(BookingEngineError):
    """Commit-time re-validation failed; re-query availability and pick another slot."""

    status_code = status.HTTP_409_CONFLICT


class StoreUnavailable(BookingEngineError):
    """Transient store connectivity or timeout failure."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    retryable = True


def register_error_handlers(app: FastAPI) -> None:
    """Map engine errors to JSON responses"""

    @app.exception_handler(BookingEngineError)
    async def booking_engine_error_handler(request: Request, exc: BookingEngineError) -> JSONResponse:
        correlation_id = getattr(request.state, "correlation_id", None)
        if exc.retryable:
            logger.warning(f"Retryable store failure ({exc.code}): {exc.message}")
        else:
            logger.info(f"Request rejected ({exc.code}): {exc.message}")

        headers = {"Retry-After": "1"} if exc.retryable else None
        body = exc.to_dict()
        if correlation_id:
            body["correlation_id"] = correlation_id
        return JSONResponse(status_code=exc.status_code, content=body, headers=headers)

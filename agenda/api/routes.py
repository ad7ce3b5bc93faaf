"""
API routes for the clinic agenda engine.
Provides endpoints for:
- Health checks
- Holiday markers
- Slot availability and first available date
- Booking submission and appointment edits
- Reminder notifications and their read-state
"""

import logging
from datetime import datetime
from typing import Optional

from aiohttp import web
from pydantic import ValidationError

from ..models import AppointmentUpdate, BookingRequest
from ..services.exceptions import (
    AppointmentNotFound,
    ConfigError,
    RaceLost,
    ValidationRejected,
)
from ..services.holidays import get_brazilian_holidays
from ..utils.helpers import parse_date

logger = logging.getLogger(__name__)


def create_app(scheduling_service, notification_service) -> web.Application:
    """
    Create the aiohttp application with routes.

    Args:
        scheduling_service: SchedulingService instance
        notification_service: NotificationService instance

    Returns:
        Configured aiohttp Application
    """
    app = web.Application(middlewares=[cors_middleware])

    # Store services in app
    app["scheduling"] = scheduling_service
    app["notifications"] = notification_service

    # Add routes
    app.router.add_get("/health", health_check)
    app.router.add_get("/api/holidays/{year}", get_holidays)
    app.router.add_get("/api/professionals/{professional_id}/availability", get_availability)
    app.router.add_get("/api/professionals/{professional_id}/first-available", get_first_available)
    app.router.add_post("/api/professionals/{professional_id}/appointments", create_appointment)
    app.router.add_patch("/api/appointments/{appointment_id}", update_appointment)
    app.router.add_get("/api/professionals/{professional_id}/notifications", get_notifications)
    app.router.add_post("/api/professionals/{professional_id}/notifications/read", mark_notifications_read)
    app.router.add_delete("/api/professionals/{professional_id}/notifications/read", clear_notifications_read)

    return app


@web.middleware
async def cors_middleware(request: web.Request, handler):
    """Handle CORS for frontend requests."""
    # Handle preflight
    if request.method == "OPTIONS":
        response = web.Response()
    else:
        try:
            response = await handler(request)
        except web.HTTPException as e:
            response = e

    # Add CORS headers
    origin = request.headers.get("Origin", "*")
    response.headers["Access-Control-Allow-Origin"] = origin
    response.headers["Access-Control-Allow-Methods"] = "GET, POST, PATCH, DELETE, OPTIONS"
    response.headers["Access-Control-Allow-Headers"] = "Content-Type, Authorization"
    response.headers["Access-Control-Allow-Credentials"] = "true"

    return response


def _error(code: str, message: str, status: int, **extra) -> web.Response:
    return web.json_response({"error": {"code": code, "message": message, **extra}}, status=status)


async def _read_json(request: web.Request) -> Optional[dict]:
    """JSON object body of the request, or None if it is not one."""
    try:
        data = await request.json()
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


async def health_check(request: web.Request) -> web.Response:
    """Health check endpoint."""
    return web.json_response({
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "service": "clinic-agenda",
    })


async def get_holidays(request: web.Request) -> web.Response:
    """Holidays of a year, for calendar markers."""
    try:
        year = int(request.match_info["year"])
    except ValueError:
        return _error("invalid-year", "Year must be a number", 400)
    if not 1900 <= year <= 2200:
        return _error("invalid-year", "Year out of range", 400)

    return web.json_response({
        "year": year,
        "holidays": [h.model_dump() for h in get_brazilian_holidays(year)],
    })


async def get_availability(request: web.Request) -> web.Response:
    """
    Slots of a professional on a date.

    Query params:
    - date: YYYY-MM-DD
    """
    professional_id = request.match_info["professional_id"]
    raw_date = request.query.get("date")
    if not raw_date:
        return _error("missing-date", "Query parameter 'date' is required", 400)

    try:
        on_date = parse_date(raw_date)
    except ValueError:
        return _error("invalid-date", "Date must be YYYY-MM-DD", 400)

    service = request.app["scheduling"]
    try:
        availability = await service.day_availability(professional_id, on_date)
    except ConfigError as e:
        return _error("config-error", e.message, 409)

    return web.json_response(availability.to_dict())


async def get_first_available(request: web.Request) -> web.Response:
    """First date with a free slot."""
    professional_id = request.match_info["professional_id"]
    service = request.app["scheduling"]

    try:
        first = await service.first_available_date(professional_id)
    except ConfigError as e:
        return _error("config-error", e.message, 409)

    return web.json_response({
        "professional_id": professional_id,
        "date": first.isoformat() if first else None,
    })


async def create_appointment(request: web.Request) -> web.Response:
    """
    Book an appointment.

    Request body:
    {
        "client_id": "...",
        "appointment_date": "2025-06-10",
        "appointment_time": "09:00",
        "procedure_id": "optional",
        "price": 150.0,
        "notes": "optional"
    }
    """
    data = await _read_json(request)
    if data is None:
        return _error("invalid-json", "Body must be a JSON object", 400)
    data["professional_id"] = request.match_info["professional_id"]

    try:
        booking = BookingRequest.model_validate(data)
    except ValidationError as e:
        return _error("invalid-request", "Invalid booking request", 400, details=e.errors(include_url=False, include_context=False))

    service = request.app["scheduling"]
    try:
        appointment = await service.book(booking)
    except ValidationRejected as e:
        return _error(e.reason.value, e.message, 422)
    except RaceLost as e:
        return _error("race-lost", e.message, 409)
    except ConfigError as e:
        return _error("config-error", e.message, 409)

    return web.json_response(appointment.model_dump(mode="json"), status=201)


async def update_appointment(request: web.Request) -> web.Response:
    """Update status, payment status, price, notes or procedure."""
    appointment_id = request.match_info["appointment_id"]
    data = await _read_json(request)
    if data is None:
        return _error("invalid-json", "Body must be a JSON object", 400)

    try:
        update = AppointmentUpdate.model_validate(data)
    except ValidationError as e:
        return _error("invalid-request", "Invalid update", 400, details=e.errors(include_url=False, include_context=False))

    service = request.app["scheduling"]
    try:
        appointment = await service.update_appointment(appointment_id, update)
    except ValueError as e:
        return _error("invalid-request", str(e), 400)
    except AppointmentNotFound as e:
        return _error("not-found", e.message, 404)
    except RaceLost as e:
        return _error("race-lost", e.message, 409)

    return web.json_response(appointment.model_dump(mode="json"))


async def get_notifications(request: web.Request) -> web.Response:
    """Reminder feed of a professional."""
    professional_id = request.match_info["professional_id"]
    service = request.app["notifications"]

    notifications = await service.get_feed(professional_id)
    return web.json_response({
        "notifications": [n.model_dump(mode="json", exclude={"key"}) for n in notifications],
        "unread": sum(1 for n in notifications if not n.read),
    })


async def mark_notifications_read(request: web.Request) -> web.Response:
    """
    Acknowledge notifications.

    Request body:
    {
        "ids": ["<appointment-id>-24", "<appointment-id>-past"]
    }
    """
    professional_id = request.match_info["professional_id"]
    data = await _read_json(request)
    if data is None:
        return _error("invalid-json", "Body must be a JSON object", 400)
    ids = data.get("ids")
    if not isinstance(ids, list) or not all(isinstance(i, str) for i in ids):
        return _error("invalid-request", "'ids' must be a list of strings", 400)

    service = request.app["notifications"]
    try:
        changed = service.mark_read(professional_id, ids)
    except ValueError as e:
        return _error("invalid-id", str(e), 400)

    return web.json_response({"changed": changed})


async def clear_notifications_read(request: web.Request) -> web.Response:
    """Forget all acknowledgements of a professional."""
    professional_id = request.match_info["professional_id"]
    request.app["notifications"].clear_read(professional_id)
    return web.json_response({"cleared": True})

import logging
from datetime import datetime
from typing import Optional

import httpx
from fastapi import Body, Depends, FastAPI, HTTPException, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import Settings, load_settings, setup_logging
from .errors import NotFoundError, ValidationError
from .escalation import EscalationQueue
from .models import (
    BookAppointmentRequest,
    CancelAppointmentRequest,
    CheckAvailabilityRequest,
    EditAppointmentRequest,
    ManagerMessage,
    ManagerMessageRequest,
    ManagerResponseRequest,
)
from .notifier import notify_manager
from .seed import demo_appointments
from .service import SchedulingService
from .store import AppointmentStore

logger = logging.getLogger(__name__)

# HTTPBearer scheme so Swagger-UI can attach the Authorization header globally
auth_scheme = HTTPBearer(auto_error=False)


def verify_caller(request: Request, credentials: HTTPAuthorizationCredentials = Depends(auth_scheme)):
    """Validate Bearer token provided via Authorization header"""
    key = request.app.state.settings.webhook_key
    if credentials is None or credentials.scheme.lower() != "bearer" or credentials.credentials != key:
        raise HTTPException(status_code=401, detail="Invalid API key")


def _service(request: Request) -> SchedulingService:
    return request.app.state.service


def create_app(settings: Optional[Settings] = None, service: Optional[SchedulingService] = None) -> FastAPI:
    if settings is None:
        settings = load_settings()
        setup_logging(settings.log_level)

    if service is None:
        seed = demo_appointments(datetime.now()) if settings.seed_demo_data else []
        service = SchedulingService(AppointmentStore(seed), EscalationQueue())

    app = FastAPI(title="Salon Scheduler Service")
    app.state.settings = settings
    app.state.service = service
    _register_routes(app)
    return app


def _register_routes(app: FastAPI) -> None:
    auth = [Depends(verify_caller)]

    # Voice agent tools -------------------------------------------------------

    @app.post("/check_availability", dependencies=auth)
    async def check_availability(request: Request, req: Optional[CheckAvailabilityRequest] = Body(None)):
        """Free slots for a slot, a day or a week depending on what was asked."""
        req = req or CheckAvailabilityRequest()
        return _service(request).check_availability(req.date, req.time)

    @app.post("/book_appointment", dependencies=auth)
    async def book_appointment(request: Request, req: BookAppointmentRequest):
        return _service(request).book_appointment(
            req.date, req.time, req.customer_name, req.phone_number, req.service, req.technician
        )

    @app.post("/cancel_appointment", dependencies=auth)
    async def cancel_appointment(
        request: Request,
        req: Optional[CancelAppointmentRequest] = Body(None),
        phone_number: Optional[str] = Query(None, description="Caller phone if not provided in JSON body"),
        customer_name: Optional[str] = Query(None),
        date: Optional[str] = Query(None, description="YYYY-MM-DD or wording like 'friday'"),
        time: Optional[str] = Query(None, description="HH:MM"),
    ):
        # Accept payload either from JSON body or from query parameters so testing tools can
        # pass constants without constructing JSON.
        if req is None:
            if not phone_number:
                raise HTTPException(status_code=422, detail="phone_number is required")
            req = CancelAppointmentRequest(
                phone_number=phone_number, customer_name=customer_name, date=date, time=time
            )
        return _service(request).cancel_appointment(req.phone_number, req.customer_name, req.date, req.time)

    @app.post("/edit_appointment", dependencies=auth)
    async def edit_appointment(request: Request, req: EditAppointmentRequest):
        return _service(request).edit_appointment(
            req.phone_number,
            req.original_date,
            req.original_time,
            new_date=req.new_date,
            new_time=req.new_time,
            new_service=req.new_service,
            new_technician=req.new_technician,
            customer_name=req.customer_name,
        )

    @app.post("/send_message_to_manager", dependencies=auth)
    async def send_message_to_manager(request: Request, req: ManagerMessageRequest):
        """Hand the caller off to the manager. The push notification is best-effort."""
        service = _service(request)
        try:
            msg = service.escalate(req.client_request, req.reason, req.priority)
        except ValidationError as e:
            raise HTTPException(status_code=422, detail=str(e))

        url = request.app.state.settings.manager_webhook_url
        if url:
            try:
                await notify_manager(url, msg)
            except httpx.HTTPError:
                logger.warning("Failed to notify manager about %s", msg.id, exc_info=True)
        return service.message_sent(msg)

    # Read-only endpoints

    @app.get("/appointments", dependencies=auth)
    async def list_appointments(
        request: Request,
        date: str = Query(..., description="YYYY-MM-DD or wording like 'tomorrow'"),
    ):
        return _service(request).appointments_for(date)

    # Manager side ------------------------------------------------------------

    @app.get("/manager/messages", dependencies=auth)
    async def pending_messages(request: Request):
        return _service(request).pending_messages()

    @app.post("/manager/messages/{message_id}/respond", dependencies=auth, response_model=ManagerMessage)
    async def respond_to_message(request: Request, message_id: str, req: ManagerResponseRequest):
        try:
            return _service(request).respond_to_message(message_id, req.response)
        except NotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except ValidationError as e:
            raise HTTPException(status_code=422, detail=str(e))


app = create_app()

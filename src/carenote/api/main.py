"""FastAPI application entrypoint for CareNote."""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import List

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..core.config import get_settings
from ..core.logging import setup_logging
from ..db import repository
from ..db.session import configure_engine, init_db, session_scope
from ..generation.base import BaseTextGenerator, TextGenerationError
from ..generation.client import ChatCompletionGenerator
from ..security.auth import verify_admin_key
from ..security.rate_limiter import AdmissionController, InMemoryWindowStore, QuotaStatus
from ..services.feedback import summarize_feedback, summarize_feedback_events
from ..telemetry.events import TelemetryEvent, telemetry_client
from .schemas import (
    FeedbackEventRequest,
    FeedbackOut,
    FeedbackRequest,
    GeneralStatementOut,
    GeneralStatementRequest,
    IncidentReportRequest,
    ReportOut,
    TranslateRequest,
)

settings = get_settings()
setup_logging(settings.log_level)
logger = logging.getLogger("carenote.api")
configure_engine()
app = FastAPI(title=settings.app_name, version="1.0.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset", "X-RateLimit-Used"],
)

admission_controller = AdmissionController(
    InMemoryWindowStore(),
    max_requests=settings.report_rate_limit,
    window_seconds=settings.report_rate_window_seconds,
)
text_generator = ChatCompletionGenerator(settings)
api = settings.api_prefix


class QuotaExceededError(Exception):
    """Raised by the quota dependency when a client has used up its window."""

    def __init__(self, quota: QuotaStatus) -> None:
        super().__init__(f"Quota of {quota.limit} exhausted until {quota.reset_time}")
        self.quota = quota


def get_admission_controller() -> AdmissionController:
    return admission_controller


def get_text_generator() -> BaseTextGenerator:
    return text_generator


def client_identity(request: Request) -> str:
    """Source address of the caller, honouring X-Forwarded-For only when configured."""

    if settings.trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for", "")
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.client.host if request.client else "unknown"


def rate_limit_headers(quota: QuotaStatus) -> dict:
    return {
        "X-RateLimit-Limit": str(quota.limit),
        "X-RateLimit-Remaining": str(quota.remaining),
        "X-RateLimit-Reset": quota.reset_time,
        "X-RateLimit-Used": str(quota.used),
    }


async def enforce_report_quota(
    request: Request,
    controller: AdmissionController = Depends(get_admission_controller),
) -> QuotaStatus:
    identity = client_identity(request)
    decision = controller.check_and_admit(identity)
    if not decision.admitted:
        await telemetry_client.record(
            TelemetryEvent(name="report.quota_denied", attributes={"client": identity, "used": decision.status.used})
        )
        raise QuotaExceededError(decision.status)
    request.state.rate_limit_headers = rate_limit_headers(decision.status)
    return decision.status


@app.middleware("http")
async def attach_rate_limit_headers(request: Request, call_next):  # type: ignore[override]
    response = await call_next(request)
    for name, value in getattr(request.state, "rate_limit_headers", {}).items():
        response.headers.setdefault(name, value)
    return response


@app.exception_handler(QuotaExceededError)
async def quota_exceeded_handler(request: Request, exc: QuotaExceededError) -> JSONResponse:
    quota = exc.quota
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={
            "error": "Rate limit exceeded",
            "message": (
                f"You have exceeded the limit of {quota.limit} report generations. "
                f"Please try again after {quota.reset_time}."
            ),
            "retryAfter": quota.reset_time,
            "remaining": 0,
            "used": quota.used,
            "limit": quota.limit,
        },
        headers={**rate_limit_headers(quota), "Retry-After": str(quota.retry_after_seconds)},
    )


@app.on_event("startup")
async def on_startup() -> None:
    logger.info("Initialising CareNote API")
    await asyncio.to_thread(init_db)
    await telemetry_client.start()
    await telemetry_client.record(TelemetryEvent(name="app.startup", attributes={"environment": settings.environment}))
    logger.info(
        "Report quota: %s per %ss per client",
        admission_controller.max_requests,
        admission_controller.window_seconds,
    )


@app.on_event("shutdown")
async def on_shutdown() -> None:
    logger.info("Shutting down CareNote API")
    await telemetry_client.record(TelemetryEvent(name="app.shutdown"))
    await telemetry_client.stop()


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@app.get(f"{api}/rate-limit/status")
async def rate_limit_status(
    request: Request, controller: AdmissionController = Depends(get_admission_controller)
) -> dict:
    return controller.peek_status(client_identity(request)).as_dict()


@app.post(f"{api}/report/generate", status_code=status.HTTP_201_CREATED)
async def generate_report(
    payload: IncidentReportRequest,
    request: Request,
    quota: QuotaStatus = Depends(enforce_report_quota),
    generator: BaseTextGenerator = Depends(get_text_generator),
) -> dict:
    details = payload.to_details()
    try:
        generated = await generator.generate_incident_report(details)
    except TextGenerationError as exc:
        logger.exception("Report generation failed for %s", client_identity(request))
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Error generating report",
            headers=rate_limit_headers(quota),
        ) from exc

    def _store() -> dict:
        with session_scope() as session:
            record = repository.create_report(session, details, generated)
            return ReportOut.model_validate(record).dump()

    report = await asyncio.to_thread(_store)
    await telemetry_client.record(
        TelemetryEvent(name="report.generated", attributes={"report_id": report["id"], "remaining": quota.remaining})
    )
    return {"report": report}


@app.post(f"{api}/report/translate")
async def translate_report(
    payload: TranslateRequest, generator: BaseTextGenerator = Depends(get_text_generator)
) -> dict:
    try:
        translated = await generator.translate_report(payload.report_text, payload.target_language)
    except TextGenerationError as exc:
        logger.exception("Translation to %s failed", payload.target_language)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Error translating report") from exc
    return {"translatedReport": translated}


@app.post(f"{api}/general-statement/process")
async def process_general_statement(
    payload: GeneralStatementRequest, generator: BaseTextGenerator = Depends(get_text_generator)
) -> dict:
    details = payload.to_details()
    try:
        processed = await generator.process_general_statement(details)
    except TextGenerationError as exc:
        logger.exception("Statement processing failed for room %s", details.room_number)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Error processing statement") from exc

    def _store() -> dict:
        with session_scope() as session:
            return GeneralStatementOut.model_validate(
                repository.create_general_statement(session, details, processed)
            ).dump()

    saved = await asyncio.to_thread(_store)
    return {"id": saved["id"], "processedStatement": saved["processedStatement"], "createdAt": saved["createdAt"]}


@app.get(f"{api}/general-statement")
async def list_general_statements() -> List[dict]:
    def _fetch() -> List[dict]:
        with session_scope() as session:
            return [GeneralStatementOut.model_validate(r).dump() for r in repository.list_general_statements(session)]

    return await asyncio.to_thread(_fetch)


@app.get(f"{api}/general-statement/{{statement_id}}")
async def get_general_statement(statement_id: int) -> dict:
    def _fetch() -> dict | None:
        with session_scope() as session:
            record = repository.get_general_statement(session, statement_id)
            return GeneralStatementOut.model_validate(record).dump() if record else None

    statement = await asyncio.to_thread(_fetch)
    if statement is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Statement not found")
    return statement


@app.post(f"{api}/feedback", status_code=status.HTTP_201_CREATED)
async def submit_feedback(payload: FeedbackRequest, request: Request) -> dict:
    ip_address = client_identity(request)

    def _store() -> int:
        with session_scope() as session:
            return repository.create_feedback(session, **payload.model_dump(), ip_address=ip_address).id

    feedback_id = await asyncio.to_thread(_store)
    logger.info("Stored feedback %s", feedback_id)
    return {"message": "Feedback submitted successfully", "feedback": {"id": feedback_id}}


@app.post(f"{api}/feedback/events", status_code=status.HTTP_201_CREATED)
async def track_feedback_event(payload: FeedbackEventRequest, request: Request) -> dict:
    ip_address = client_identity(request)
    user_agent = request.headers.get("user-agent")

    def _store() -> int:
        with session_scope() as session:
            return repository.track_feedback_event(
                session,
                event_type=payload.event_type,
                form_type=payload.form_type,
                ip_address=ip_address,
                user_agent=user_agent,
            ).id

    return {"id": await asyncio.to_thread(_store)}


@app.get(f"{api}/admin/feedback", dependencies=[Depends(verify_admin_key)])
async def admin_list_feedback() -> List[dict]:
    def _fetch() -> List[dict]:
        with session_scope() as session:
            return [FeedbackOut.model_validate(r).dump() for r in repository.list_feedback(session)]

    return await asyncio.to_thread(_fetch)


@app.get(f"{api}/admin/feedback/stats", dependencies=[Depends(verify_admin_key)])
async def admin_feedback_stats() -> dict:
    def _summarize() -> dict:
        with session_scope() as session:
            return summarize_feedback(repository.list_feedback(session))

    return await asyncio.to_thread(_summarize)


@app.get(f"{api}/admin/feedback/analytics", dependencies=[Depends(verify_admin_key)])
async def admin_feedback_analytics() -> dict:
    now = datetime.now(timezone.utc).replace(tzinfo=None)

    def _summarize() -> dict:
        with session_scope() as session:
            return summarize_feedback_events(repository.list_feedback_events(session), now=now)

    return await asyncio.to_thread(_summarize)

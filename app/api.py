"""HTTP route definitions for the service."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from app.schemas import DigestQueued, EventAccepted, EventPayload
from services.engine import Engine, build_default_engine
from services.ingest import EventIngestor, build_default_ingestor

router = APIRouter()


def get_ingestor() -> EventIngestor:
    return build_default_ingestor()


def get_engine() -> Engine:
    return build_default_engine()


@router.post(
    "/events",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=EventAccepted,
    summary="Submit a sensor event from the event bus.",
)
async def post_event(
    payload: EventPayload,
    ingestor: EventIngestor = Depends(get_ingestor),
) -> EventAccepted:
    reading = ingestor.ingest(payload.topic, payload.device, payload.fields)
    if reading is None:
        return EventAccepted(accepted=False)
    return EventAccepted(accepted=True, signal=reading.kind)


@router.post(
    "/digest",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=DigestQueued,
    summary="Queue the daily digest for immediate delivery.",
)
async def post_digest(engine: Engine = Depends(get_engine)) -> DigestQueued:
    engine.tick()
    return DigestQueued()


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}

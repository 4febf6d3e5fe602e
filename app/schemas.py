"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from models.records import SignalKind


class EventPayload(BaseModel):
    """An event forwarded from the home-automation bus."""

    topic: str = Field(..., min_length=1, description="Bus topic, e.g. 'temp' or 'wind'.")
    device: str = Field(..., min_length=1, description="Resolved device name.")
    fields: Dict[str, Any] = Field(default_factory=dict)


class EventAccepted(BaseModel):
    """Whether an event matched a watched outside device."""

    accepted: bool
    signal: Optional[SignalKind] = None


class DigestQueued(BaseModel):
    queued: bool = True

from __future__ import annotations
from typing import Optional
from pydantic import BaseModel


class HealthResponse(BaseModel):
    ok: bool
    service: str
    version: str


class PingResponse(BaseModel):
    message: str


class ErrorEnvelope(BaseModel):
    code: str
    message: str
    details: Optional[dict] = None

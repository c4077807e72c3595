from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models import ErrorEnvelope, HealthResponse, PingResponse
from mfroosh.config import Settings, get_settings
from mfroosh.enquiry import EnquiryHandler
from mfroosh.logging import configure_logging, json_logger_middleware
from mfroosh.models import EnquiryResponse

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> FastAPI:
    """Build the API. Pass `http_client` to route provider calls through your own client."""
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Enquiry email config: %s", settings.describe())
        client = http_client or httpx.AsyncClient(timeout=settings.DELIVERY_TIMEOUT_SECONDS)
        app.state.enquiry_handler = EnquiryHandler(settings, client)
        try:
            yield
        finally:
            if http_client is None:
                await client.aclose()

    app = FastAPI(title=settings.APP_TITLE, version=settings.APP_VERSION, lifespan=lifespan)
    app.state.settings = settings

    # CORS (wide-open by default; tighten in prod)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(json_logger_middleware())

    # ------------ Routes ------------

    @app.get("/health", response_model=HealthResponse)
    def health() -> HealthResponse:
        return HealthResponse(ok=True, service=settings.APP_TITLE, version=settings.APP_VERSION)

    @app.get("/api/ping", response_model=PingResponse)
    def ping() -> PingResponse:
        return PingResponse(message=settings.PING_MESSAGE)

    @app.post("/api/send-enquiry", response_model=EnquiryResponse)
    async def send_enquiry(request: Request):
        handler: EnquiryHandler = request.app.state.enquiry_handler
        result = await handler.handle(await request.body(), request.headers.get("content-type"))
        if result.delivery is not None:
            request.state.delivery_provider = result.delivery.provider
            request.state.delivery_status = result.delivery.status.value
        return JSONResponse(status_code=result.status_code, content=result.response.model_dump())

    @app.get("/")
    def root():
        return {"message": f"{settings.APP_TITLE}. See /health, GET /api/ping, POST /api/send-enquiry"}

    # ------------ Exception Handlers ------------

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        env = ErrorEnvelope(
            code=str(exc.status_code),
            message=str(exc.detail or "HTTP error"),
            details={"path": str(request.url)},
        )
        return JSONResponse(status_code=exc.status_code, content=env.model_dump())

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s", request.url.path)
        env = ErrorEnvelope(
            code="internal_error",
            message="Unexpected server error",
            details={"path": str(request.url)},
        )
        return JSONResponse(status_code=500, content=env.model_dump())

    return app


app = create_app()

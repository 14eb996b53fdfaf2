"""FastAPI server for the GitHub updates newsletter"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import BackgroundTasks, FastAPI, Request, status
from fastapi.exception_handlers import http_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models import SignupRequest, UnsubscribeRequest
from api.services import Services, build_services
from config.settings import Settings, load_settings
from notifications.unsubscribe_tokens import validate_unsubscribe_token
from shared.errors import (
    BroadcastInProgressError,
    DuplicateSubscriberError,
    InvalidEmailError,
    StoreError,
)
from shared.logging import configure_logging, get_logger
from shared.utils import utc_now_iso
from subscribers.subscriptions import subscribe, unsubscribe

logger = get_logger(__name__)

SAMPLE_EVENTS_IN_RESPONSE = 3

AVAILABLE_ROUTES = [
    "GET /",
    "GET /api/test-db",
    "GET /api/test-github",
    "GET /api/stats",
    "POST /api/signup",
    "POST /api/send-updates",
    "POST /api/unsubscribe",
    "GET /api/unsubscribe?token=...",
]


def _services(request: Request) -> Services:
    return request.app.state.services


def _message(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message, **extra})


def create_app(
    services: Services | None = None, settings: Settings | None = None
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        services: Pre-wired collaborators (tests pass fakes here)
        settings: Used to wire real collaborators when services is None

    Returns:
        Configured FastAPI app
    """
    if services is None:
        services = build_services(settings or load_settings())
    settings = services.settings
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Server running on port %d", settings.port)
        logger.info("Environment: %s", settings.environment)
        logger.info("Supabase URL configured: %s", bool(settings.supabase_url))
        logger.info("GitHub token configured: %s", bool(settings.github_token))
        if services.scheduler:
            services.scheduler.start()
        try:
            yield
        finally:
            if services.scheduler:
                services.scheduler.stop()

    app = FastAPI(title="GitHub Updates API", version="1.0.0", lifespan=lifespan)
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.warning("Validation error on %s: %s", request.url.path, exc.errors())
        return _message(status.HTTP_400_BAD_REQUEST, "Invalid request body")

    @app.exception_handler(StarletteHTTPException)
    async def not_found_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        if exc.status_code != status.HTTP_404_NOT_FOUND:
            return await http_exception_handler(request, exc)
        return _message(
            status.HTTP_404_NOT_FOUND,
            "Route not found",
            availableRoutes=AVAILABLE_ROUTES,
        )

    @app.get("/")
    def health_check() -> dict[str, Any]:
        return {
            "message": "GitHub Updates API is running!",
            "timestamp": utc_now_iso(),
            "environment": settings.environment,
        }

    @app.get("/api/test-db")
    def test_db(request: Request) -> Any:
        try:
            data = _services(request).directory.ping()
        except StoreError as e:
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": "Database connection failed", "details": e.message},
            )
        return {"message": "Database connection successful", "data": data}

    @app.get("/api/test-github")
    def test_github(request: Request) -> Any:
        try:
            events = _services(request).event_source.fetch_events()
        except Exception as e:
            logger.exception("GitHub test error")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": "GitHub API test failed", "details": str(e)},
            )
        return {
            "message": "GitHub API connection successful",
            "eventsCount": len(events),
            "sampleEvents": [
                event.model_dump(mode="json", by_alias=True)
                for event in events[:SAMPLE_EVENTS_IN_RESPONSE]
            ],
        }

    @app.get("/api/stats")
    def stats(request: Request) -> Any:
        try:
            total = _services(request).directory.count_active()
        except StoreError:
            return _message(
                status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch stats"
            )
        return {"totalActiveSubscribers": total, "timestamp": utc_now_iso()}

    @app.post("/api/signup")
    def signup(
        request: Request,
        background_tasks: BackgroundTasks,
        payload: SignupRequest | None = None,
    ) -> Any:
        services = _services(request)
        try:
            subscriber = subscribe(services.directory, payload.email if payload else None)
        except InvalidEmailError as e:
            return _message(status.HTTP_400_BAD_REQUEST, e.message)
        except DuplicateSubscriberError as e:
            return _message(status.HTTP_400_BAD_REQUEST, e.message)
        except StoreError as e:
            return _message(status.HTTP_500_INTERNAL_SERVER_ERROR, e.message)

        if services.settings.send_welcome_email:
            background_tasks.add_task(
                services.runner.send_welcome_digest, subscriber.email
            )

        return {
            "message": "Successfully subscribed!",
            "subscriber": subscriber.model_dump(mode="json"),
        }

    @app.post("/api/send-updates")
    def send_updates(request: Request) -> Any:
        try:
            summary = _services(request).runner.run_cycle()
        except BroadcastInProgressError as e:
            return _message(status.HTTP_409_CONFLICT, str(e))
        except Exception:
            logger.exception("Send updates error")
            return _message(
                status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to send updates"
            )

        if summary.total == 0:
            message = "No active subscribers found"
        else:
            message = f"Updates sent to {summary.sent} subscribers"
        return {"message": message, **summary.model_dump()}

    @app.post("/api/unsubscribe")
    def unsubscribe_post(request: Request, payload: UnsubscribeRequest | None = None) -> Any:
        payload = payload or UnsubscribeRequest()
        if payload.token:
            return _unsubscribe_by_token(_services(request), payload.token)
        if not payload.email:
            return _message(status.HTTP_400_BAD_REQUEST, "Email is required")
        return _unsubscribe(_services(request), payload.email)

    @app.get("/api/unsubscribe")
    def unsubscribe_link(request: Request, token: str = "") -> Any:
        return _unsubscribe_by_token(_services(request), token)

    return app


def _unsubscribe_by_token(services: Services, token: str) -> Any:
    email = validate_unsubscribe_token(token, services.settings.unsubscribe_secret_key)
    if email is None:
        return _message(status.HTTP_400_BAD_REQUEST, "Invalid or expired unsubscribe link")
    return _unsubscribe(services, email)


def _unsubscribe(services: Services, email: str) -> Any:
    try:
        unsubscribe(services.directory, email)
    except InvalidEmailError as e:
        return _message(status.HTTP_400_BAD_REQUEST, e.message)
    except StoreError:
        return _message(status.HTTP_500_INTERNAL_SERVER_ERROR, "Database error")
    return {"message": "Successfully unsubscribed"}

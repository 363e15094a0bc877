"""FastAPI application.

Run with ``uvicorn service_orders.main:create_app --factory``.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, get_settings
from .database import Database
from .responses import register_exception_handlers, success_response
from .routers import catalog, observations, procedures, realtime, reports, send_order, services, standards
from .services.change_feed import ChangeFeed
from .services.mailer import Mailer
from .services.report_renderer import RenderOptions, ReportRenderer
from .services.whatsapp import WhatsAppClient
from .use_cases.order_dispatch import OrderDispatcher

VERSION = "1.0.0"

logger = logging.getLogger(__name__)


def _check_production_settings(settings: Settings) -> None:
    """Fail closed on an unsafe CORS configuration in production."""
    if not settings.is_production:
        return
    if not settings.cors_origins:
        raise RuntimeError("ALLOWED_ORIGINS must be set in production (explicit frontend origin required).")
    if any(origin == "*" for origin in settings.cors_origins):
        raise RuntimeError("ALLOWED_ORIGINS must be explicit in production (no wildcard when using credentials).")
    if any(
        origin.startswith("http://localhost") or origin.startswith("http://127.0.0.1")
        for origin in settings.cors_origins
    ):
        raise RuntimeError("ALLOWED_ORIGINS contains localhost in production; set it to your real frontend origin.")


def build_dispatcher(
    settings: Settings,
    *,
    renderer: Optional[ReportRenderer] = None,
    mailer: Optional[Mailer] = None,
    messenger: Optional[WhatsAppClient] = None,
) -> OrderDispatcher:
    return OrderDispatcher(
        renderer=renderer or ReportRenderer(settings.RENDERER_URL, timeout=settings.RENDER_TIMEOUT_SECONDS),
        mailer=mailer or Mailer(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            user=settings.SMTP_USER,
            password=settings.SMTP_PASSWORD,
            sender_name=settings.MAIL_SENDER_NAME,
            timeout=settings.MESSAGING_TIMEOUT_SECONDS,
        ),
        messenger=messenger or WhatsAppClient(
            phone_id=settings.WHATSAPP_PHONE_ID,
            token=settings.WHATSAPP_TOKEN,
            api_version=settings.WHATSAPP_API_VERSION,
            country_code=settings.WHATSAPP_COUNTRY_CODE,
            timeout=settings.MESSAGING_TIMEOUT_SECONDS,
        ),
        report_base_url=settings.REPORT_BASE_URL,
        render_options=RenderOptions(
            paper_width=settings.REPORT_PAPER_WIDTH,
            paper_height=settings.REPORT_PAPER_HEIGHT,
            margin=settings.REPORT_MARGIN,
        ),
    )


def create_app(
    settings: Optional[Settings] = None,
    *,
    renderer: Optional[ReportRenderer] = None,
    mailer: Optional[Mailer] = None,
    messenger: Optional[WhatsAppClient] = None,
) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    _check_production_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database = Database(
            settings.DATABASE_URL,
            pool_size=settings.DATABASE_POOL_SIZE,
            max_overflow=settings.DATABASE_MAX_OVERFLOW,
            echo=settings.DEBUG,
        )
        database.create_all()
        change_feed = ChangeFeed()
        change_feed.attach(database.SessionLocal)

        app.state.database = database
        app.state.change_feed = change_feed
        app.state.dispatcher = build_dispatcher(settings, renderer=renderer, mailer=mailer, messenger=messenger)
        logger.info("app.start name=%s env=%s", settings.APP_NAME, settings.ENV)
        try:
            yield
        finally:
            database.dispose()

    app = FastAPI(
        title=settings.APP_NAME,
        version=VERSION,
        description="Backend API for service order management",
        lifespan=lifespan,
    )

    cors_headers = ["Content-Type"] if settings.is_production else ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=cors_headers,
    )

    register_exception_handlers(app)

    for router in catalog.routers:
        app.include_router(router, prefix="/api")
    app.include_router(procedures.router, prefix="/api")
    app.include_router(services.router, prefix="/api")
    app.include_router(observations.router, prefix="/api")
    app.include_router(send_order.router, prefix="/api")
    app.include_router(standards.router, prefix="/api")
    app.include_router(realtime.router, prefix="/api")
    app.include_router(reports.router)

    @app.get("/api/system/health")
    def health_check():
        """Health check endpoint."""
        return success_response({"status": "ok", "version": VERSION})

    return app

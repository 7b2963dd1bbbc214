"""FastAPI application: HTTP endpoints for site content and bookings.

Endpoints:

  GET  /health               Health check
  GET  /api/sheets/{sheet}   Content tab shaped for the website (?page= for legal pages)
  POST /api/bookings         Booking / contact submission
  GET  /api/bookings         Stored bookings (admin token)

The booking flow:
  1. The browser posts whatever its form collected (legacy contact form,
     PayPal room/tent/experience modal, generic item modal)
  2. BookingPipeline resolves it into one CanonicalBooking with an id
  3. The row is appended to the bookings tab; a stay that cannot be stored
     fails the request
  4. Webhook and email fire afterwards; their failures are only logged
"""

from __future__ import annotations

# Load .env into os.environ early; GoogleSheetsStore falls back to
# GOOGLE_SERVICE_ACCOUNT_JSON via os.environ.
from dotenv import load_dotenv
load_dotenv()

import logging
import time

# Configure root logger early so all app loggers have a handler and are
# visible when run via `uvicorn riad.app:app`.
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(name)-20s %(levelname)-7s %(message)s",
)

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from riad.auth import require_admin_token
from riad.bookings.dispatch import BookingPipeline, PipelineConfig
from riad.config import Settings, settings as default_settings
from riad.content.adapter import ContentAdapter, PageNotFoundError, UnknownSheetError
from riad.notifications.base import BookingWebhook, EmailSender
from riad.sheets.base import SheetStore

log = logging.getLogger("riad.app")

_START_TIME = time.time()

_NO_STORE = {"Cache-Control": "no-store"}


def create_app(
    config: Settings | None = None,
    *,
    pipeline: BookingPipeline | None = None,
    content: ContentAdapter | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Settings to build collaborators from; the module-level
                settings when omitted.
        pipeline: Pre-built booking pipeline (tests inject fakes here).
        content: Pre-built content adapter.
    """
    config = config or default_settings

    if pipeline is None or content is None:
        for warning in config.validate_startup():
            log.warning(warning)
        store = _create_store(config, config.google_sheet_id)
        if content is None and store is not None:
            nexus_store = _create_store(config, config.nexus_sheet_id) if config.nexus_sheet_id else None
            content = ContentAdapter(store, nexus_store)
        if pipeline is None:
            pipeline = BookingPipeline(
                store=store,
                webhook=_create_webhook(config),
                email=_create_email(config),
                config=PipelineConfig(
                    bookings_sheet=config.bookings_sheet,
                    default_property=config.default_property,
                    booking_id_prefix=config.booking_id_prefix,
                    persist_contact_inquiries=config.persist_contact_inquiries,
                    sink_timeout=config.notification_timeout_seconds,
                ),
            )

    app = FastAPI(
        title="Riad di Siena",
        description="Spreadsheet-backed site content and booking intake",
        version="0.1.0",
    )
    app.state.settings = config
    app.state.pipeline = pipeline
    app.state.content = content

    # ── Health check ───────────────────────────────────────────

    @app.get("/health")
    async def health() -> JSONResponse:
        """Lightweight health check; confirms the event loop is responsive."""
        uptime = round(time.time() - _START_TIME, 1)
        return JSONResponse({
            "status": "ok",
            "uptime": uptime,
            "content_configured": content is not None,
        })

    # ── Content ────────────────────────────────────────────────

    @app.get("/api/sheets/{sheet}")
    async def get_sheet(sheet: str, page: str | None = None) -> JSONResponse:
        """Serve one content tab, shaped by its kind."""
        if content is None:
            return JSONResponse(
                {"error": "Content store not configured"}, status_code=503
            )
        try:
            data = await content.get(sheet, page=page)
        except UnknownSheetError:
            return JSONResponse({"error": "Unknown sheet"}, status_code=404)
        except PageNotFoundError:
            return JSONResponse({"error": "Page not found"}, status_code=404)
        except Exception:
            log.exception("API sheets error for %s", sheet)
            return JSONResponse({"error": "Failed to load content"}, status_code=500)
        return JSONResponse(data, headers=_NO_STORE)

    # ── Bookings ───────────────────────────────────────────────

    @app.post("/api/bookings")
    async def create_booking(request: Request) -> JSONResponse:
        """Accept a booking or contact submission from any site form."""
        try:
            body = await request.json()
            if not isinstance(body, dict):
                raise ValueError(f"expected a JSON object, got {type(body).__name__}")
            response = await pipeline.submit(body)
        except Exception:
            log.exception("Error creating booking")
            return JSONResponse(
                {"success": False, "error": "Server error"}, status_code=500
            )

        return JSONResponse(
            response.to_wire(), status_code=200 if response.success else 500
        )

    @app.get("/api/bookings", dependencies=[Depends(require_admin_token)])
    async def list_bookings() -> JSONResponse:
        """Return every stored booking row."""
        try:
            rows = await pipeline.list_bookings()
        except Exception:
            log.exception("Failed to list bookings")
            return JSONResponse({"error": "Failed to load bookings"}, status_code=500)
        return JSONResponse({"bookings": rows, "count": len(rows)}, headers=_NO_STORE)

    return app


# ── Helper functions ──────────────────────────────────────────────

def _create_store(config: Settings, spreadsheet_id: str) -> SheetStore | None:
    """Build a Google Sheets store, or None when it is not configured."""
    if not (config.google_service_account_json and spreadsheet_id):
        return None
    try:
        from riad.sheets.google import GoogleSheetsStore
        return GoogleSheetsStore(
            spreadsheet_id=spreadsheet_id,
            service_account_path=config.google_service_account_json,
        )
    except Exception as e:
        log.warning("Google Sheets not configured: %s", e)
        return None


def _create_webhook(config: Settings) -> BookingWebhook | None:
    if not config.make_booking_webhook_url:
        return None
    from riad.notifications.webhook import HttpBookingWebhook
    return HttpBookingWebhook(
        config.make_booking_webhook_url, timeout=config.sink_timeout_seconds
    )


def _create_email(config: Settings) -> EmailSender | None:
    if not config.email_api_key:
        return None
    from riad.notifications.email import HttpEmailSender
    return HttpEmailSender(
        api_key=config.email_api_key,
        sender=config.email_from,
        operator_email=config.operator_email,
        api_url=config.email_api_url,
        timeout=config.sink_timeout_seconds,
    )


# ── Module-level app instance for uvicorn ──────────────────────

app = create_app()


if __name__ == "__main__":
    import uvicorn

    log_config = uvicorn.config.LOGGING_CONFIG
    log_config["formatters"]["default"]["fmt"] = (
        "%(asctime)s %(name)-12s %(levelname)-8s %(message)s"
    )

    uvicorn.run(
        "riad.app:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.debug,
        log_config=log_config,
    )

"""Application configuration via environment variables."""

from __future__ import annotations

import logging

from pydantic_settings import BaseSettings

log = logging.getLogger("riad.config")


class Settings(BaseSettings):
    # Google Sheets
    google_service_account_json: str = ""
    google_sheet_id: str = ""
    nexus_sheet_id: str = ""
    bookings_sheet: str = "Bookings"

    # Booking sinks
    make_booking_webhook_url: str = ""
    email_api_key: str = ""
    email_api_url: str = "https://api.resend.com/emails"
    email_from: str = "Riad di Siena <bookings@riaddisiena.com>"
    operator_email: str = ""
    # HTTP timeout of the webhook and email clients
    sink_timeout_seconds: float = 10.0
    # Overall bound on one webhook or email sink, which may make several
    # requests (guest and operator copies); keep it above sink_timeout_seconds
    notification_timeout_seconds: float = 15.0

    # Booking defaults
    default_property: str = "Riad di Siena"
    booking_id_prefix: str = "RDS"
    persist_contact_inquiries: bool = True

    # Admin auth
    admin_api_key: str = ""

    # Server
    host: str = "127.0.0.1"
    port: int = 8080
    debug: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    def validate_startup(self) -> list[str]:
        """Validate configuration at startup. Returns warnings, raises on errors."""
        warnings: list[str] = []
        _placeholders = {"path/to/service-account.json", "re_...", "https://hook.make.com/..."}

        # A key without a spreadsheet cannot serve anything
        if self.google_service_account_json and not self.google_sheet_id:
            raise ValueError(
                "GOOGLE_SHEET_ID is missing. Set it in .env to read site content."
            )
        if not self.google_service_account_json or self.google_service_account_json in _placeholders:
            warnings.append(
                "GOOGLE_SERVICE_ACCOUNT_JSON not set; content and booking storage disabled."
            )

        if not self.make_booking_webhook_url or self.make_booking_webhook_url in _placeholders:
            warnings.append("MAKE_BOOKING_WEBHOOK_URL not set; booking webhook disabled.")

        if not self.email_api_key or self.email_api_key in _placeholders:
            warnings.append("EMAIL_API_KEY not set; confirmation emails disabled.")
        elif not self.operator_email:
            warnings.append("OPERATOR_EMAIL not set; operator copies will not be sent.")

        # Admin API key: warn if unset
        if not self.admin_api_key:
            if self.debug:
                warnings.append(
                    "ADMIN_API_KEY not set. Booking listing is open (DEBUG=true)."
                )
            else:
                warnings.append(
                    "ADMIN_API_KEY not set. Booking listing is locked in production. "
                    "Set ADMIN_API_KEY in .env to enable admin access."
                )

        return warnings


settings = Settings()

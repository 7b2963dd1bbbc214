"""Booking pipeline: normalize a submission, then fan it out to the sinks.

Sink order for every submission:

  1. persistence  append the row to the bookings tab (mandatory for stays)
  2. webhook      automation webhook, only for stays and when configured
  3. email        booking confirmation or contact inquiry, never both

Steps 2 and 3 start only after step 1 has finished and run concurrently,
each bounded by ``PipelineConfig.sink_timeout``.  Step 1 is bounded only
by the store's own transport, so a failure response means the row was
not written.  Each sink call is wrapped so that it yields a SinkOutcome
instead of raising; only a failed mandatory persistence turns the response
into a failure.  There is no retry and no rollback: a stored booking whose
email failed stays stored and is left in the logs for manual follow-up.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Mapping, Optional

from riad.bookings.resolver import normalize_booking
from riad.content.adapter import ContentRow, rows_to_objects
from riad.models.booking import BookingResponse, CanonicalBooking, PaymentStatus
from riad.notifications.base import BookingWebhook, EmailSender
from riad.sheets.base import SheetStore

log = logging.getLogger("riad.bookings.dispatch")

PERSISTENCE = "persistence"
WEBHOOK = "webhook"
CONFIRMATION_EMAIL = "confirmation_email"
INQUIRY_EMAIL = "inquiry_email"


def redact_pii(value: str) -> str:
    """Mask PII for logging: show first 3 and last 2 chars only."""
    if not value or len(value) <= 5:
        return "***"
    return value[:3] + "***" + value[-2:]


@dataclass
class PipelineConfig:
    bookings_sheet: str = "Bookings"
    default_property: str = "Riad di Siena"
    booking_id_prefix: str = "RDS"
    persist_contact_inquiries: bool = True
    # Upper bound for each webhook or email call.  Persistence is not bounded
    # here: a cancelled await would not stop an append already in flight.
    sink_timeout: Optional[float] = 15.0


@dataclass
class SinkOutcome:
    """Tagged result of one sink call."""

    sink: str
    attempted: bool
    ok: bool
    mandatory: bool = False
    reason: str = ""

    @classmethod
    def skipped(cls, sink: str, reason: str) -> "SinkOutcome":
        return cls(sink=sink, attempted=False, ok=True, reason=reason)


@dataclass
class DispatchResult:
    booking: CanonicalBooking
    outcomes: list[SinkOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        """False only when a mandatory sink failed."""
        return all(o.ok for o in self.outcomes if o.mandatory)

    @property
    def attempted(self) -> list[str]:
        return [o.sink for o in self.outcomes if o.attempted]

    def outcome(self, sink: str) -> SinkOutcome | None:
        for o in self.outcomes:
            if o.sink == sink:
                return o
        return None


class BookingPipeline:
    """Normalize booking payloads and dispatch them to the configured sinks.

    Collaborators are injected; any of them may be None when the matching
    integration is not configured.
    """

    def __init__(
        self,
        store: SheetStore | None,
        webhook: BookingWebhook | None = None,
        email: EmailSender | None = None,
        config: PipelineConfig | None = None,
    ) -> None:
        self._store = store
        self._webhook = webhook
        self._email = email
        self._config = config or PipelineConfig()

    @property
    def config(self) -> PipelineConfig:
        return self._config

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def normalize(self, payload: Mapping[str, Any]) -> CanonicalBooking:
        """Resolve the payload; the booking id is assigned here, once."""
        return normalize_booking(
            payload,
            default_property=self._config.default_property,
            id_prefix=self._config.booking_id_prefix,
        )

    async def dispatch(self, booking: CanonicalBooking) -> DispatchResult:
        result = DispatchResult(booking=booking)

        result.outcomes.append(await self._persist(booking))

        notifications = await asyncio.gather(
            self._notify_webhook(booking),
            self._notify_email(booking),
        )
        result.outcomes.extend(notifications)

        for outcome in result.outcomes:
            if not outcome.ok:
                log.error(
                    "Booking %s: %s sink failed (%s)%s",
                    booking.booking_id,
                    outcome.sink,
                    outcome.reason,
                    "" if outcome.mandatory else "; needs manual follow-up",
                )
        log.info(
            "Booking %s dispatched to %s (success=%s)",
            booking.booking_id,
            ", ".join(result.attempted) or "no sinks",
            result.succeeded,
        )
        return result

    async def submit(self, payload: Mapping[str, Any]) -> BookingResponse:
        """Normalize, dispatch and build the client response."""
        booking = self.normalize(payload)
        log.info(
            "Booking %s received: %s for %s (check-in %s, payment %s)",
            booking.booking_id,
            "stay" if booking.is_stay else "contact",
            redact_pii(booking.email),
            booking.check_in or "-",
            booking.payment_status.value,
        )
        result = await self.dispatch(booking)
        if not result.succeeded:
            return BookingResponse(
                success=False,
                booking_id=booking.booking_id,
                error="Failed to save booking",
            )
        return BookingResponse(success=True, booking_id=booking.booking_id)

    async def list_bookings(self) -> list[ContentRow]:
        """Rows of the bookings tab, oldest first."""
        if self._store is None:
            raise RuntimeError("Booking storage is not configured.")
        return rows_to_objects(await self._store.get_rows(self._config.bookings_sheet))

    # ------------------------------------------------------------------
    # Sinks
    # ------------------------------------------------------------------

    async def _run_sink(
        self,
        sink: str,
        call: Callable[[], Awaitable[None]],
        mandatory: bool = False,
        timeout: Optional[float] = None,
    ) -> SinkOutcome:
        try:
            await asyncio.wait_for(call(), timeout=timeout)
        except Exception as exc:
            reason = f"{type(exc).__name__}: {exc}" if str(exc) else type(exc).__name__
            if mandatory:
                log.exception("%s sink raised", sink)
            return SinkOutcome(sink=sink, attempted=True, ok=False, mandatory=mandatory, reason=reason)
        return SinkOutcome(sink=sink, attempted=True, ok=True, mandatory=mandatory)

    async def _persist(self, booking: CanonicalBooking) -> SinkOutcome:
        mandatory = booking.is_stay
        if not mandatory and not self._config.persist_contact_inquiries:
            return SinkOutcome.skipped(PERSISTENCE, "contact inquiries are not stored")

        if self._store is None:
            return SinkOutcome(
                sink=PERSISTENCE,
                attempted=False,
                ok=not mandatory,
                mandatory=mandatory,
                reason="booking storage not configured",
            )

        store = self._store
        return await self._run_sink(
            PERSISTENCE,
            lambda: store.append_row(self._config.bookings_sheet, booking.to_sheet_row()),
            mandatory=mandatory,
        )

    async def _notify_webhook(self, booking: CanonicalBooking) -> SinkOutcome:
        if self._webhook is None:
            return SinkOutcome.skipped(WEBHOOK, "webhook not configured")
        if not booking.check_in:
            return SinkOutcome.skipped(WEBHOOK, "no check-in date")

        webhook = self._webhook
        return await self._run_sink(
            WEBHOOK,
            lambda: webhook.send(booking.to_webhook_payload()),
            timeout=self._config.sink_timeout,
        )

    async def _notify_email(self, booking: CanonicalBooking) -> SinkOutcome:
        if not booking.email:
            return SinkOutcome.skipped(CONFIRMATION_EMAIL, "no email address")

        if booking.payment_status is PaymentStatus.COMPLETED:
            sink = CONFIRMATION_EMAIL
        elif booking.is_contact_inquiry:
            sink = INQUIRY_EMAIL
        else:
            return SinkOutcome.skipped(CONFIRMATION_EMAIL, "payment pending")

        if self._email is None:
            return SinkOutcome.skipped(sink, "email not configured")

        email = self._email
        if sink == CONFIRMATION_EMAIL:
            return await self._run_sink(
                sink,
                lambda: email.send_booking_confirmation(booking),
                timeout=self._config.sink_timeout,
            )
        return await self._run_sink(
            sink,
            lambda: email.send_contact_inquiry(
                booking.full_name, booking.email, booking.phone, booking.message
            ),
            timeout=self._config.sink_timeout,
        )

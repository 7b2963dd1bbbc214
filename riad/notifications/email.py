"""Transactional email over an HTTP email API.

Targets a Resend-style endpoint: one JSON POST per message with ``from``,
``to``, ``subject``, ``text`` and an optional ``reply_to``, authenticated
with a bearer API key.
"""

from __future__ import annotations

import logging
from html import escape

import httpx

from riad.models.booking import CanonicalBooking

from .base import EmailSender

logger = logging.getLogger(__name__)


class HttpEmailSender(EmailSender):
    """EmailSender backed by a JSON email API."""

    def __init__(
        self,
        api_key: str,
        sender: str,
        operator_email: str = "",
        api_url: str = "https://api.resend.com/emails",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("An email API key is required.")
        self._api_key = api_key
        self._sender = sender
        self._operator_email = operator_email
        self._api_url = api_url
        self._timeout = timeout
        self._transport = transport

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _send(
        self,
        client: httpx.AsyncClient,
        to: str,
        subject: str,
        text: str,
        reply_to: str = "",
    ) -> None:
        message = {
            "from": self._sender,
            "to": [to],
            "subject": subject,
            "text": text,
            "html": "<pre>" + escape(text) + "</pre>",
        }
        if reply_to:
            message["reply_to"] = reply_to
        resp = await client.post(
            self._api_url,
            json=message,
            headers={"Authorization": f"Bearer {self._api_key}"},
        )
        resp.raise_for_status()

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    @staticmethod
    def _format_booking(booking: CanonicalBooking) -> str:
        lines = [
            f"Booking reference: {booking.booking_id}",
            f"Guest: {booking.full_name or booking.email}",
            f"Property: {booking.property_name}",
        ]
        if booking.accommodation_name:
            lines.append(f"Accommodation: {booking.accommodation_name}")
        if booking.check_in:
            lines.append(f"Check-in: {booking.check_in}")
            lines.append(f"Check-out: {booking.check_out or '-'}")
            lines.append(f"Nights: {booking.nights} | Guests: {booking.guests}")
        lines.append(f"Total: EUR {booking.total:.2f}")
        if booking.payment_reference:
            lines.append(f"PayPal transaction: {booking.payment_reference}")
        if booking.phone:
            lines.append(f"Phone: {booking.phone}")
        if booking.message:
            lines.append(f"Special requests: {booking.message}")
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # EmailSender interface
    # ------------------------------------------------------------------

    async def send_booking_confirmation(self, booking: CanonicalBooking) -> None:
        details = self._format_booking(booking)
        greeting = f"Dear {booking.first_name}," if booking.first_name else "Hello,"

        async with self._client() as client:
            await self._send(
                client,
                to=booking.email,
                subject=f"Your booking at {booking.property_name} ({booking.booking_id})",
                text=(
                    f"{greeting}\n\nThank you for your booking. "
                    f"Your payment has been received.\n\n{details}\n\n"
                    f"We look forward to welcoming you."
                ),
            )
            if self._operator_email:
                await self._send(
                    client,
                    to=self._operator_email,
                    subject=f"New booking {booking.booking_id}",
                    text=details,
                    reply_to=booking.email,
                )

        logger.info("Confirmation email sent for booking %s", booking.booking_id)

    async def send_contact_inquiry(
        self, name: str, email: str, phone: str, message: str
    ) -> None:
        if not self._operator_email:
            raise ValueError("OPERATOR_EMAIL is not configured.")

        text = f"From: {name or email} <{email}>\n"
        if phone:
            text += f"Phone: {phone}\n"
        text += f"\n{message}"

        async with self._client() as client:
            await self._send(
                client,
                to=self._operator_email,
                subject=f"Website inquiry from {name or email}",
                text=text,
                reply_to=email,
            )

        logger.info("Contact inquiry forwarded to operator")

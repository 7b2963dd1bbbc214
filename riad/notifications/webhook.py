"""Booking webhook over HTTP (Make.com scenario or any JSON receiver)."""

from __future__ import annotations

import logging

import httpx

from .base import BookingWebhook

logger = logging.getLogger(__name__)


class HttpBookingWebhook(BookingWebhook):
    """POST each booking as JSON to a fixed URL."""

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not url:
            raise ValueError("A webhook URL is required.")
        self._url = url
        self._timeout = timeout
        self._transport = transport

    async def send(self, payload: dict) -> None:
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            resp = await client.post(self._url, json=payload)
            resp.raise_for_status()
        logger.info(
            "Webhook accepted booking %s (status %d)",
            payload.get("booking_id", "?"),
            resp.status_code,
        )

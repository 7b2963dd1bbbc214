"""Notification sink interfaces used by the booking pipeline.

Both sinks are advisory: the dispatcher catches whatever they raise, so
implementations should simply raise on failure rather than swallow errors.
"""

from abc import ABC, abstractmethod

from riad.models.booking import CanonicalBooking


class EmailSender(ABC):
    """Outbound transactional email."""

    @abstractmethod
    async def send_booking_confirmation(self, booking: CanonicalBooking) -> None:
        """Send the confirmation to the guest and a copy to the operator."""

    @abstractmethod
    async def send_contact_inquiry(
        self, name: str, email: str, phone: str, message: str
    ) -> None:
        """Forward a contact-form message to the operator."""


class BookingWebhook(ABC):
    """Outbound automation webhook."""

    @abstractmethod
    async def send(self, payload: dict) -> None:
        """POST one booking payload; raise on transport or HTTP error."""

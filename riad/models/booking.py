"""Pydantic models for booking submissions and responses."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

# Header row of the bookings table; ``CanonicalBooking.to_sheet_row`` follows this order.
BOOKING_COLUMNS = [
    "Booking_ID",
    "Created_At",
    "Source",
    "Payment_Status",
    "First_Name",
    "Last_Name",
    "Email",
    "Phone",
    "Property",
    "Room",
    "Check_In",
    "Check_Out",
    "Nights",
    "Guests",
    "Total_EUR",
    "Payment_Reference",
    "Message",
]


class PaymentStatus(str, Enum):
    COMPLETED = "COMPLETED"
    PENDING = "PENDING"


class CanonicalBooking(BaseModel):
    """A booking or contact submission after field resolution.

    Built once per request by the resolver and never mutated after
    dispatch starts.  ``booking_id`` is the correlation key shared by the
    bookings table row, the webhook body and every email.
    """

    model_config = ConfigDict(frozen=True)

    booking_id: str
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    property_name: str = ""
    accommodation_name: str = ""
    check_in: str = ""  # YYYY-MM-DD
    check_out: str = ""  # YYYY-MM-DD
    nights: int = Field(default=1, ge=1)
    guests: int = Field(default=1, ge=1)
    total: float = Field(default=0.0, ge=0)
    payment_reference: str = ""
    payment_status: PaymentStatus = PaymentStatus.PENDING
    message: str = ""
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)

    @property
    def is_stay(self) -> bool:
        """A real stay is being booked (the guest picked dates)."""
        return bool(self.check_in)

    @property
    def is_contact_inquiry(self) -> bool:
        return not self.check_in and bool(self.message) and not self.payment_reference

    def to_webhook_payload(self) -> dict:
        """Body for the booking webhook, in the automation's field names."""
        return {
            "booking_id": self.booking_id,
            "source": "Website",
            "status": "confirmed",
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "property": self.property_name,
            "room": self.accommodation_name,
            "check_in": self.check_in,
            "check_out": self.check_out,
            "nights": self.nights,
            "guests": self.guests,
            "total_eur": self.total,
            "special_requests": self.message,
            "paypal_transaction_id": self.payment_reference,
            "created_at": self.created_at.isoformat(),
        }

    def to_sheet_row(self) -> list:
        """Column values for one row of the bookings table."""
        return [
            self.booking_id,
            self.created_at.isoformat(),
            "Website",
            self.payment_status.value,
            self.first_name,
            self.last_name,
            self.email,
            self.phone,
            self.property_name,
            self.accommodation_name,
            self.check_in,
            self.check_out,
            self.nights if self.is_stay else "",
            self.guests if self.is_stay else "",
            self.total,
            self.payment_reference,
            self.message,
        ]


class BookingResponse(BaseModel):
    """Result returned to the client after a submission."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    booking_id: Optional[str] = Field(default=None, alias="bookingId")
    error: Optional[str] = None

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)

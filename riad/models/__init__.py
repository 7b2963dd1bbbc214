"""Data models for the booking pipeline."""

from .booking import BOOKING_COLUMNS, BookingResponse, CanonicalBooking, PaymentStatus

__all__ = ["BOOKING_COLUMNS", "BookingResponse", "CanonicalBooking", "PaymentStatus"]

"""Field resolver: heterogeneous booking payloads → CanonicalBooking.

The website posts bookings from several forms that never agreed on field
names: the legacy contact form (``name``, ``roomPreference``), the PayPal
room/tent/experience modals (``room``/``tent``/``experience``,
``paypalTransactionId``) and the generic item modal (``itemName``,
``totalEUR``).  Each canonical attribute is resolved from an ordered list of
candidate keys; the first non-empty value wins.

Every coercion falls back to a default instead of raising, so one bad field
never rejects a booking the guest may already have paid for.
"""

from __future__ import annotations

import logging
import re
import threading
import time
from datetime import date, datetime, timedelta, timezone
from typing import Any, Iterable, Mapping

from riad.models.booking import CanonicalBooking, PaymentStatus

log = logging.getLogger("riad.bookings.resolver")

ACCOMMODATION_FIELDS = ("room", "tent", "experience", "roomPreference", "itemName")
TOTAL_FIELDS = ("total", "totalEUR")
PAYMENT_REFERENCE_FIELDS = (
    "paypalTransactionId",
    "transactionId",
    "paypalOrderId",
    "orderId",
)
PAYMENT_STATUS_FIELDS = ("paymentStatus", "paypalStatus")

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_LEADING_FLOAT = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")

_id_lock = threading.Lock()
_last_id_ms = 0


def generate_booking_id(prefix: str = "RDS") -> str:
    """Return ``<prefix>-<epoch ms>``, strictly increasing within the process."""
    global _last_id_ms
    with _id_lock:
        now_ms = time.time_ns() // 1_000_000
        _last_id_ms = max(now_ms, _last_id_ms + 1)
        return f"{prefix}-{_last_id_ms}"


# ── Coercion helpers ───────────────────────────────────────────────


def _clean(value: Any) -> str:
    if value is None or isinstance(value, (dict, list)):
        return ""
    return str(value).strip()


def first_present(payload: Mapping[str, Any], fields: Iterable[str]) -> str:
    """First non-empty value among ``fields``, as a stripped string."""
    for field in fields:
        value = _clean(payload.get(field))
        if value:
            return value
    return ""


def parse_positive_int(value: Any, default: int = 1) -> int:
    """Leading integer of ``value``; unparseable or non-positive → default."""
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        try:
            parsed = int(value)
        except (ValueError, OverflowError):
            return default
    else:
        match = _LEADING_INT.match(_clean(value))
        if not match:
            return default
        parsed = int(match.group(1))
    return parsed if parsed > 0 else default


def parse_amount(value: Any) -> float:
    """Leading decimal number of ``value``, non-negative; invalid input → 0.

    Only the numeric prefix is read, so ``"450,00"`` is 450 and ``"1,200"``
    is 1.  Commas are never treated as thousands separators.
    """
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        try:
            amount = float(value)
        except OverflowError:
            return 0.0
    else:
        match = _LEADING_FLOAT.match(_clean(value))
        if not match:
            return 0.0
        amount = float(match.group(0))
    if amount != amount or amount in (float("inf"), float("-inf")) or amount < 0:
        return 0.0
    return amount


def resolve_total(payload: Mapping[str, Any]) -> float:
    """First candidate total that parses to a positive amount, else 0."""
    for field in TOTAL_FIELDS:
        amount = parse_amount(payload.get(field))
        if amount > 0:
            return amount
    return 0.0


def split_name(full_name: str) -> tuple[str, str]:
    """First whitespace token is the first name, the rest the last name."""
    parts = full_name.split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


def parse_stay_date(value: str) -> date:
    """Calendar date of a check-in value (``YYYY-MM-DD`` or an ISO datetime)."""
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()


def derive_check_out(check_in: str, nights: int) -> str:
    """``check_in + nights`` days as ``YYYY-MM-DD``; "" when check-in is invalid."""
    if not check_in or nights <= 0:
        return ""
    try:
        return (parse_stay_date(check_in) + timedelta(days=nights)).isoformat()
    except (ValueError, OverflowError):
        log.warning("Could not derive checkout from check-in %r", check_in)
        return ""


def resolve_payment_status(payload: Mapping[str, Any], reference: str) -> PaymentStatus:
    explicit = first_present(payload, PAYMENT_STATUS_FIELDS)
    if explicit:
        if explicit.upper() == PaymentStatus.COMPLETED.value:
            return PaymentStatus.COMPLETED
        return PaymentStatus.PENDING
    return PaymentStatus.COMPLETED if reference else PaymentStatus.PENDING


# ── Public entry point ─────────────────────────────────────────────


def normalize_booking(
    payload: Mapping[str, Any],
    *,
    default_property: str,
    booking_id: str | None = None,
    id_prefix: str = "RDS",
    now: datetime | None = None,
) -> CanonicalBooking:
    """Resolve a raw submission into a CanonicalBooking.

    Args:
        payload: Decoded JSON object from the client.
        default_property: Property name used when the form sent none.
        booking_id: Pre-assigned id; generated when omitted.
        id_prefix: Prefix for generated ids.
        now: Creation timestamp; current UTC time when omitted.
    """
    first_name = _clean(payload.get("firstName"))
    last_name = _clean(payload.get("lastName"))
    if not first_name and not last_name:
        first_name, last_name = split_name(_clean(payload.get("name")))

    nights = parse_positive_int(payload.get("nights"))
    guests = parse_positive_int(payload.get("guests"))

    check_in = _clean(payload.get("checkIn"))
    check_out = _clean(payload.get("checkOut"))
    if not check_out and check_in and nights > 0:
        check_out = derive_check_out(check_in, nights)

    reference = first_present(payload, PAYMENT_REFERENCE_FIELDS)

    return CanonicalBooking(
        booking_id=booking_id or generate_booking_id(id_prefix),
        first_name=first_name,
        last_name=last_name,
        email=_clean(payload.get("email")),
        phone=_clean(payload.get("phone")),
        property_name=_clean(payload.get("property")) or default_property,
        accommodation_name=first_present(payload, ACCOMMODATION_FIELDS),
        check_in=check_in,
        check_out=check_out,
        nights=nights,
        guests=guests,
        total=resolve_total(payload),
        payment_reference=reference,
        payment_status=resolve_payment_status(payload, reference),
        message=_clean(payload.get("message")),
        created_at=now or datetime.now(timezone.utc),
    )

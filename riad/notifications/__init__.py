"""Notification sinks: booking webhook and transactional email."""

from .base import BookingWebhook, EmailSender

__all__ = ["BookingWebhook", "EmailSender"]

"""Booking normalization and dispatch."""

from .dispatch import BookingPipeline, DispatchResult, PipelineConfig, SinkOutcome
from .resolver import normalize_booking

__all__ = [
    "BookingPipeline",
    "DispatchResult",
    "PipelineConfig",
    "SinkOutcome",
    "normalize_booking",
]

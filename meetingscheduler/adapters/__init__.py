"""
Adapters layer - Storage for participants and bookings.
"""

from .booking_store import InMemoryBookingStore, JsonBookingStore

__all__ = ["InMemoryBookingStore", "JsonBookingStore"]

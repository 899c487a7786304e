"""
Adapters layer - External booking data sources.
"""

from .json_booking_repository import JsonBookingRepository

__all__ = ["JsonBookingRepository"]

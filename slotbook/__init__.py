"""
slotbook - slot availability and conflict detection for appointment bookings.
"""

__version__ = "0.1.0"

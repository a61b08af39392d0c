"""
Event status as published by the event service.

Only PUBLISHED events accept new bookings.
"""

from enum import StrEnum


class EventStatus(StrEnum):
    DRAFT = 'draft'
    PUBLISHED = 'published'
    CANCELLED = 'cancelled'
    COMPLETED = 'completed'

# backend/eventbook/routes/v1/__init__.py
"""
API v1 Routes

Versioned API endpoints under /api/v1.
"""

from . import admin, auth, bookings, services, users

__all__ = ["admin", "auth", "bookings", "services", "users"]

"""Cookies module - cookie model and session file storage."""

from .models import Cookie, SameSite, coerce_cookies
from .store import SessionFile, dumps, loads

__all__ = [
    "Cookie",
    "SameSite",
    "coerce_cookies",
    "SessionFile",
    "dumps",
    "loads",
]

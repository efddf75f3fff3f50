"""
Shared modules for the AI Engine service.
"""
from .config import settings

__all__ = [
    "settings",
]

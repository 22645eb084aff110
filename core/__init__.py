"""Core utilities and configuration for NeuRazor"""
from core.config import settings
from core.exceptions import InputError, NeuRazorError, NotFoundError, PersistenceError
from core.logging import get_logger

__all__ = [
    "settings",
    "get_logger",
    "NeuRazorError",
    "InputError",
    "NotFoundError",
    "PersistenceError",
]

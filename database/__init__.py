"""Database package for NeuRazor"""

from database.base import Base
from database.session import SessionLocal, engine

__all__ = ["Base", "SessionLocal", "engine"]

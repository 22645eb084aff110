"""
API dependencies
"""

from typing import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from d3_scoring.repository import SqlConfigurationStore, SqlSessionStore
from d3_scoring.service import ScoringService
from database.session import SessionLocal


def get_db() -> Generator[Session, None, None]:
    """Get synchronous database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_scoring_service(db: Session = Depends(get_db)) -> ScoringService:
    """Scoring service bound to the request's database session"""
    return ScoringService(SqlConfigurationStore(db), SqlSessionStore(db))

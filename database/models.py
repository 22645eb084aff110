"""
Database models for NeuRazor

Scoring configuration versions, completed game sessions and the raw
telemetry captured for each session.
"""
import enum
import uuid

from sqlalchemy import JSON, TIMESTAMP, Boolean, Column, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from database.base import Base, EnumValue


def generate_uuid():
    """Generate a new UUID"""
    return str(uuid.uuid4())


class SessionStatus(str, enum.Enum):
    COMPLETED = "completed"


class ScoringVersion(Base):
    """One saved scoring configuration for a game type"""

    __tablename__ = "scoring_versions"

    id = Column(String, primary_key=True, default=generate_uuid)
    game_type = Column(String(50), nullable=False)
    version_number = Column(Integer, nullable=False)
    version_name = Column(String(20), nullable=False)
    description = Column(Text)
    is_active = Column(Boolean, default=False, nullable=False)
    config = Column(JSON, nullable=False)
    created_by = Column(String(100))
    created_at = Column(TIMESTAMP, server_default=func.now())

    sessions = relationship("TestSession", back_populates="scoring_version")

    __table_args__ = (
        UniqueConstraint("game_type", "version_number", name="uq_scoring_version_number"),
        UniqueConstraint("game_type", "version_name", name="uq_scoring_version_name"),
        Index("idx_scoring_versions_active", "game_type", "is_active"),
    )


class TestSession(Base):
    """A scored play-through of a game"""

    __tablename__ = "test_sessions"
    __test__ = False  # not a pytest test class

    id = Column(String, primary_key=True, default=generate_uuid)
    user_id = Column(String(100), nullable=False, index=True)
    game_type = Column(String(50), nullable=False, index=True)
    scoring_version_id = Column(String, ForeignKey("scoring_versions.id"), nullable=False)
    status = Column(EnumValue(SessionStatus), default=SessionStatus.COMPLETED, nullable=False)
    final_scores = Column(JSON, nullable=False)
    completed_at = Column(TIMESTAMP, nullable=False)
    created_at = Column(TIMESTAMP, server_default=func.now())

    scoring_version = relationship("ScoringVersion", back_populates="sessions")
    receipts = relationship("ActionReceipt", back_populates="session", cascade="all, delete-orphan")


class ActionReceipt(Base):
    """Raw telemetry captured for a session"""

    __tablename__ = "action_receipts"

    id = Column(String, primary_key=True, default=generate_uuid)
    session_id = Column(String, ForeignKey("test_sessions.id"), nullable=False, index=True)
    raw_data = Column(JSON, nullable=False)
    created_at = Column(TIMESTAMP, server_default=func.now())

    session = relationship("TestSession", back_populates="receipts")

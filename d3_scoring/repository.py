"""
Configuration and session stores

Abstract store interfaces used by the scoring service, plus the SQLAlchemy
implementations backing them. Version activation is transactional: after
``set_active`` commits, exactly one version of the game type is active.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from core.exceptions import NotFoundError, PersistenceError
from core.logging import get_logger
from database.models import ActionReceipt, ScoringVersion, SessionStatus, TestSession

from .types import ScoringConfiguration, VersionedConfiguration

logger = get_logger("scoring.repository", domain="d3_scoring")


class ConfigurationStore(ABC):
    """Versioned scoring configurations per game type"""

    @abstractmethod
    def get_active(self, game_type: str) -> Optional[VersionedConfiguration]:
        """The single active version for a game type, or None"""

    @abstractmethod
    def get(self, version_id: str) -> Optional[VersionedConfiguration]:
        pass

    @abstractmethod
    def get_many(self, version_ids: Sequence[str]) -> List[VersionedConfiguration]:
        """Versions found among ``version_ids``, in the requested order"""

    @abstractmethod
    def list_versions(self, game_type: str) -> List[VersionedConfiguration]:
        """All versions of a game type, newest first"""

    @abstractmethod
    def save(
        self,
        configuration: ScoringConfiguration,
        description: Optional[str] = None,
        created_by: Optional[str] = None,
        activate: bool = True,
    ) -> VersionedConfiguration:
        """Store a new version with the next version number"""

    @abstractmethod
    def set_active(self, game_type: str, version_name: str) -> VersionedConfiguration:
        """Activate one version and deactivate every other version of the game type"""


class SessionStore(ABC):
    """Completed sessions and their raw telemetry"""

    @abstractmethod
    def record_session(
        self,
        user_id: str,
        game_type: str,
        version_id: str,
        final_scores: Mapping[str, Any],
        completed_at: datetime,
    ) -> str:
        """Persist a scored session and return its id"""

    @abstractmethod
    def record_raw_telemetry(self, session_id: str, raw_data: Mapping[str, Any]) -> str:
        pass

    @abstractmethod
    def record_submission(
        self,
        user_id: str,
        game_type: str,
        version_id: str,
        final_scores: Mapping[str, Any],
        completed_at: datetime,
        raw_data: Mapping[str, Any],
    ) -> str:
        """Persist a scored session together with its raw telemetry; both or neither"""

    @abstractmethod
    def list_sessions(self, game_type: str, user_id: Optional[str] = None, limit: int = 100) -> List[Dict[str, Any]]:
        """Most recent sessions first"""


def _to_versioned(row: ScoringVersion) -> VersionedConfiguration:
    return VersionedConfiguration(
        id=row.id,
        game_type=row.game_type,
        version_number=row.version_number,
        version_name=row.version_name,
        configuration=ScoringConfiguration.from_dict(row.game_type, row.config or {}),
        is_active=bool(row.is_active),
        description=row.description,
        created_by=row.created_by,
        created_at=row.created_at,
    )


class SqlConfigurationStore(ConfigurationStore):
    """ConfigurationStore backed by the ``scoring_versions`` table"""

    def __init__(self, db: Session):
        self.db = db

    def get_active(self, game_type: str) -> Optional[VersionedConfiguration]:
        row = (
            self.db.query(ScoringVersion)
            .filter(ScoringVersion.game_type == game_type, ScoringVersion.is_active.is_(True))
            .order_by(ScoringVersion.version_number.desc())
            .first()
        )
        return _to_versioned(row) if row else None

    def get(self, version_id: str) -> Optional[VersionedConfiguration]:
        row = self.db.query(ScoringVersion).filter(ScoringVersion.id == version_id).first()
        return _to_versioned(row) if row else None

    def get_many(self, version_ids: Sequence[str]) -> List[VersionedConfiguration]:
        if not version_ids:
            return []
        rows = self.db.query(ScoringVersion).filter(ScoringVersion.id.in_(list(version_ids))).all()
        by_id = {row.id: row for row in rows}
        return [_to_versioned(by_id[version_id]) for version_id in version_ids if version_id in by_id]

    def list_versions(self, game_type: str) -> List[VersionedConfiguration]:
        rows = (
            self.db.query(ScoringVersion)
            .filter(ScoringVersion.game_type == game_type)
            .order_by(ScoringVersion.version_number.desc())
            .all()
        )
        return [_to_versioned(row) for row in rows]

    def _next_version_number(self, game_type: str) -> int:
        current = (
            self.db.query(func.max(ScoringVersion.version_number))
            .filter(ScoringVersion.game_type == game_type)
            .scalar()
        )
        return (current or 0) + 1

    def save(
        self,
        configuration: ScoringConfiguration,
        description: Optional[str] = None,
        created_by: Optional[str] = None,
        activate: bool = True,
    ) -> VersionedConfiguration:
        game_type = configuration.game_type
        try:
            version_number = self._next_version_number(game_type)
            if activate:
                self.db.query(ScoringVersion).filter(
                    ScoringVersion.game_type == game_type, ScoringVersion.is_active.is_(True)
                ).update({ScoringVersion.is_active: False}, synchronize_session=False)

            row = ScoringVersion(
                game_type=game_type,
                version_number=version_number,
                version_name=f"v{version_number}",
                description=description,
                is_active=activate,
                config=configuration.to_dict(),
                created_by=created_by,
            )
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"Integrity error saving {game_type} configuration: {e}")
            raise PersistenceError(
                f"Version conflict saving configuration for {game_type}; retry the save",
                operation="save",
                game_type=game_type,
            ) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error saving {game_type} configuration: {e}")
            raise PersistenceError(f"Failed to save configuration for {game_type}", operation="save") from e

        logger.info(f"Saved {game_type} scoring version {row.version_name} (active={activate})")
        return _to_versioned(row)

    def set_active(self, game_type: str, version_name: str) -> VersionedConfiguration:
        try:
            target = (
                self.db.query(ScoringVersion)
                .filter(ScoringVersion.game_type == game_type, ScoringVersion.version_name == version_name)
                .with_for_update()
                .first()
            )
            if target is None:
                raise NotFoundError(f"Scoring version for {game_type}", version_name)

            self.db.query(ScoringVersion).filter(
                ScoringVersion.game_type == game_type, ScoringVersion.id != target.id
            ).update({ScoringVersion.is_active: False}, synchronize_session=False)
            target.is_active = True
            self.db.commit()
            self.db.refresh(target)
        except NotFoundError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error activating {game_type} {version_name}: {e}")
            raise PersistenceError(
                f"Failed to activate {version_name} for {game_type}", operation="set_active"
            ) from e

        logger.info(f"Activated {game_type} scoring version {version_name}")
        return _to_versioned(target)


class SqlSessionStore(SessionStore):
    """SessionStore backed by ``test_sessions`` and ``action_receipts``"""

    def __init__(self, db: Session):
        self.db = db

    def _add_session(
        self,
        user_id: str,
        game_type: str,
        version_id: str,
        final_scores: Mapping[str, Any],
        completed_at: datetime,
    ) -> TestSession:
        session = TestSession(
            user_id=user_id,
            game_type=game_type,
            scoring_version_id=version_id,
            status=SessionStatus.COMPLETED,
            final_scores=dict(final_scores),
            completed_at=completed_at,
        )
        self.db.add(session)
        return session

    def record_session(
        self,
        user_id: str,
        game_type: str,
        version_id: str,
        final_scores: Mapping[str, Any],
        completed_at: datetime,
    ) -> str:
        try:
            session = self._add_session(user_id, game_type, version_id, final_scores, completed_at)
            self.db.commit()
            self.db.refresh(session)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error recording {game_type} session for {user_id}: {e}")
            raise PersistenceError("Failed to record session", operation="record_session") from e

        logger.info(f"Recorded {game_type} session {session.id} for user {user_id}")
        return session.id

    def record_raw_telemetry(self, session_id: str, raw_data: Mapping[str, Any]) -> str:
        try:
            receipt = ActionReceipt(session_id=session_id, raw_data=dict(raw_data))
            self.db.add(receipt)
            self.db.commit()
            self.db.refresh(receipt)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error storing telemetry for session {session_id}: {e}")
            raise PersistenceError("Failed to store raw telemetry", operation="record_raw_telemetry") from e
        return receipt.id

    def record_submission(
        self,
        user_id: str,
        game_type: str,
        version_id: str,
        final_scores: Mapping[str, Any],
        completed_at: datetime,
        raw_data: Mapping[str, Any],
    ) -> str:
        try:
            session = self._add_session(user_id, game_type, version_id, final_scores, completed_at)
            self.db.flush()
            self.db.add(ActionReceipt(session_id=session.id, raw_data=dict(raw_data)))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error recording {game_type} submission for {user_id}: {e}")
            raise PersistenceError("Failed to record session", operation="record_submission") from e

        logger.info(f"Recorded {game_type} session {session.id} for user {user_id}")
        return session.id

    def list_sessions(self, game_type: str, user_id: Optional[str] = None, limit: int = 100) -> List[Dict[str, Any]]:
        query = self.db.query(TestSession).filter(TestSession.game_type == game_type)
        if user_id:
            query = query.filter(TestSession.user_id == user_id)
        rows = query.order_by(TestSession.completed_at.desc()).limit(limit).all()
        return [
            {
                "session_id": row.id,
                "user_id": row.user_id,
                "game_type": row.game_type,
                "version_id": row.scoring_version_id,
                "version_name": row.scoring_version.version_name if row.scoring_version else None,
                "status": row.status.value if isinstance(row.status, SessionStatus) else row.status,
                "final_scores": row.final_scores,
                "completed_at": row.completed_at,
            }
            for row in rows
        ]

"""
Shared test configuration for D3 Scoring tests
"""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import database.models  # noqa: F401  (registers tables on Base)
from d3_scoring.repository import SqlConfigurationStore, SqlSessionStore
from d3_scoring.service import ScoringService
from d3_scoring.types import ScoringConfiguration
from database.base import Base


@pytest.fixture(scope="function")
def engine():
    """In-memory database shared by every connection in one test"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(engine):
    """Create a database session for testing"""
    Session = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def config_store(db_session):
    return SqlConfigurationStore(db_session)


@pytest.fixture
def session_store(db_session):
    return SqlSessionStore(db_session)


@pytest.fixture
def service(config_store, session_store):
    return ScoringService(config_store, session_store)


@pytest.fixture
def memory_config():
    """Two competencies over memory_match variables, weights summing to 1"""
    return ScoringConfiguration(
        game_type="memory_match",
        competency_formulas={
            "memory": "completion",
            "efficiency": "efficiency * 1.2",
        },
        final_weights={"memory": 0.6, "efficiency": 0.4},
    )


@pytest.fixture
def memory_payload():
    return {"pairs_total": 8, "pairs_matched": 6, "attempts": 12, "duration_seconds": 90}

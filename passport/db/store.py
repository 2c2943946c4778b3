"""Analysis persistence."""

from functools import lru_cache

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from passport.config import get_settings
from passport.db.database import Base, create_db_engine, create_session_factory
from passport.db.models import Analysis, utcnow

logger = structlog.get_logger()


class AnalysisStore:
    """Upsert/lookup of verdicts, unique by lowercased (owner, repo)."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    @staticmethod
    def _find(session: Session, owner: str, repo: str) -> Analysis | None:
        query = select(Analysis).where(
            Analysis.owner == owner.lower(), Analysis.repo == repo.lower()
        )
        return session.execute(query).scalar_one_or_none()

    def get(self, owner: str, repo: str) -> Analysis | None:
        with self.session_factory() as session:
            return self._find(session, owner, repo)

    def get_verdict(self, owner: str, repo: str) -> str | None:
        record = self.get(owner, repo)
        return record.verdict if record else None

    def upsert(self, owner: str, repo: str, verdict: str, details: str) -> Analysis:
        """Create the record or overwrite verdict and details of the existing one."""
        owner, repo = owner.lower(), repo.lower()
        try:
            return self._upsert_once(owner, repo, verdict, details)
        except IntegrityError:
            # a concurrent insert won; the second pass updates its row
            logger.debug("Upsert raced, retrying as update", owner=owner, repo=repo)
            return self._upsert_once(owner, repo, verdict, details)

    def _upsert_once(self, owner: str, repo: str, verdict: str, details: str) -> Analysis:
        with self.session_factory() as session:
            record = self._find(session, owner, repo)
            if record is None:
                record = Analysis(owner=owner, repo=repo, verdict=verdict, details=details)
                session.add(record)
            else:
                record.verdict = verdict
                record.details = details
                record.updated_at = utcnow()
            session.commit()
            return record


def build_store(database_url: str) -> AnalysisStore:
    engine = create_db_engine(database_url)
    Base.metadata.create_all(engine)
    return AnalysisStore(create_session_factory(engine))


@lru_cache
def get_store() -> AnalysisStore:
    """FastAPI dependency returning the process-wide store."""
    return build_store(get_settings().database_url)


def get_optional_store() -> AnalysisStore | None:
    """Like get_store, but a database that cannot be opened yields None."""
    try:
        return get_store()
    except Exception:
        logger.exception("Analysis store unavailable")
        return None

"""Results Service

Persistence and retrieval of lighthouse scores. Inserts are best-effort:
a failed write is logged and reported back as a value, never raised, so the
analysis response can still succeed.
"""

from dataclasses import dataclass

from sqlalchemy.orm import Session

from speedboard.lib.database import get_session_factory
from speedboard.lib.metrics import record_persist_outcome
from speedboard.lib.structured_logger import StructuredLogger
from speedboard.models.lighthouse_score import LighthouseScore
from speedboard.models.pagespeed import LighthouseScoreCreate

logger = StructuredLogger(__name__)


@dataclass(frozen=True)
class PersistResult:
    """Outcome of one insert: the store-assigned id, or the error that prevented it."""

    record_id: int | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.record_id is not None


class ResultsService:
    """Service for the lighthouse_scores table.

    Provides methods to:
    - Insert one normalized record (best-effort)
    - Read the most recent records in bulk

    There is no update or delete path.
    """

    def __init__(self, db_session: Session | None = None):
        """Initialize results service.

        Args:
            db_session: Database session (a short-lived one is opened per call if None)
        """
        self.db_session = db_session

    def _open_session(self) -> tuple[Session, bool]:
        if self.db_session is not None:
            return self.db_session, False
        return get_session_factory()(), True

    def _release(self, action, label: str) -> None:
        """Run a rollback or close after a failure; a dropped connection may fail it too."""
        try:
            action()
        except Exception as e:
            logger.warning(f'Failed to {label} session: {e}')

    def save_result(self, record: LighthouseScoreCreate) -> PersistResult:
        """Insert one record.

        Any failure (store not configured, connection, constraint) is logged,
        rolled back, and returned in PersistResult.error.

        Args:
            record: Normalized record to insert

        Returns:
            PersistResult with the generated id on success
        """
        session = None
        owns_session = False
        try:
            session, owns_session = self._open_session()
            score = LighthouseScore(**record.model_dump())
            session.add(score)
            session.commit()
            record_id = score.id
        except Exception as e:
            logger.error(
                f'Failed to save lighthouse score: {e}',
                exc_info=True,
                url=record.url,
                strategy=record.device_strategy,
            )
            record_persist_outcome('failure')
            if session is not None:
                self._release(session.rollback, 'roll back')
            return PersistResult(error=e)
        finally:
            if owns_session and session is not None:
                self._release(session.close, 'close')

        record_persist_outcome('success')
        logger.info('Saved lighthouse score', database_id=record_id, url=record.url)
        return PersistResult(record_id=record_id)

    def list_results(self, limit: int = 100) -> list[LighthouseScore]:
        """Return up to `limit` records, most recent first.

        Raises:
            ValueError: If the store is not configured
            SQLAlchemyError: If the query fails
        """
        session, owns_session = self._open_session()
        try:
            rows = (
                session.query(LighthouseScore)
                .order_by(LighthouseScore.created_at.desc(), LighthouseScore.id.desc())
                .limit(limit)
                .all()
            )
            if owns_session:
                # Detach loaded rows so they stay readable after close
                session.expunge_all()
            logger.debug('Loaded lighthouse scores', limit=limit, result_count=len(rows))
            return rows
        finally:
            if owns_session:
                session.close()

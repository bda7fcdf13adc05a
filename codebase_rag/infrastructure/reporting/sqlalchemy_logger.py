"""Ingestion log backed by SQLAlchemy + SQLite."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import sessionmaker

from codebase_rag.core.models.ingestion import IngestionLogEntry, IngestionStatus

from .models import Base, IngestionLogModel

logger = logging.getLogger(__name__)

NON_ERROR_STATUSES = (IngestionStatus.SUCCESS.value, IngestionStatus.SKIPPED.value)


def new_session_id() -> str:
    """Session ID derived from the current UTC time."""
    stamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z").replace(":", "-").replace(".", "-")


class SQLAlchemyIngestionLogger:
    """Persists per-file ingestion outcomes for later triage."""

    def __init__(self, db_path: str = "./ingestion.db", session_id: Optional[str] = None):
        """Initialize logger.

        Args:
            db_path: SQLite database file.
            session_id: Session to write to; a new one is created if None.
        """
        self._engine = create_engine(f"sqlite:///{db_path}", future=True)
        Base.metadata.create_all(self._engine)
        self._session_factory = sessionmaker(self._engine, expire_on_commit=False)
        self._session_id = session_id or new_session_id()

    @property
    def session_id(self) -> str:
        return self._session_id

    def log(self, entry: IngestionLogEntry) -> None:
        model = IngestionLogModel(
            timestamp=entry.timestamp or datetime.now(timezone.utc).isoformat(),
            session_id=entry.session_id or self._session_id,
            file_path=entry.file_path,
            relative_path=entry.relative_path,
            status=entry.status.value,
            chunk_count=entry.chunk_count,
            error_message=entry.error_message,
            error_details=entry.error_details,
            line_number=entry.line_number,
            column_number=entry.column_number,
            duration=entry.duration,
        )
        with self._session_factory.begin() as session:
            session.add(model)

    def session_summary(self, session_id: Optional[str] = None) -> list[dict]:
        """Per-status file and chunk counts for a session."""
        sid = session_id or self._session_id
        stmt = (
            select(
                IngestionLogModel.status,
                func.count().label("count"),
                func.sum(IngestionLogModel.chunk_count).label("total_chunks"),
            )
            .where(IngestionLogModel.session_id == sid)
            .group_by(IngestionLogModel.status)
            .order_by(IngestionLogModel.status)
        )
        with self._session_factory() as session:
            rows = session.execute(stmt).all()
        return [
            {"status": status, "count": count, "total_chunks": total_chunks or 0}
            for status, count, total_chunks in rows
        ]

    def errors(self, session_id: Optional[str] = None, limit: int = 100) -> list[IngestionLogEntry]:
        """Failed files of a session, newest first."""
        sid = session_id or self._session_id
        stmt = (
            select(IngestionLogModel)
            .where(IngestionLogModel.session_id == sid)
            .where(IngestionLogModel.status.not_in(NON_ERROR_STATUSES))
            .order_by(IngestionLogModel.timestamp.desc())
            .limit(limit)
        )
        return self._fetch(stmt)

    def parse_errors(self, session_id: Optional[str] = None) -> list[IngestionLogEntry]:
        """Files of a session that failed with a parse error."""
        sid = session_id or self._session_id
        stmt = (
            select(IngestionLogModel)
            .where(IngestionLogModel.session_id == sid)
            .where(IngestionLogModel.status == IngestionStatus.PARSE_ERROR.value)
            .order_by(IngestionLogModel.file_path)
        )
        return self._fetch(stmt)

    def sessions(self) -> list[str]:
        """All session IDs, newest first."""
        stmt = (
            select(IngestionLogModel.session_id)
            .group_by(IngestionLogModel.session_id)
            .order_by(func.max(IngestionLogModel.id).desc())
        )
        with self._session_factory() as session:
            return list(session.execute(stmt).scalars().all())

    def latest_session(self) -> Optional[str]:
        sessions = self.sessions()
        return sessions[0] if sessions else None

    def export_json(
        self, session_id: Optional[str] = None, output_path: Optional[str] = None
    ) -> Path:
        """Write a session report to JSON.

        Returns:
            Path of the written report.
        """
        sid = session_id or self._session_id
        stmt = (
            select(IngestionLogModel)
            .where(IngestionLogModel.session_id == sid)
            .order_by(IngestionLogModel.timestamp)
        )
        with self._session_factory() as session:
            logs = [_to_dict(model) for model in session.execute(stmt).scalars().all()]

        output = Path(output_path or f"ingestion-report-{sid}.json")
        output.write_text(
            json.dumps(
                {
                    "sessionId": sid,
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                    "summary": self.session_summary(sid),
                    "logs": logs,
                },
                indent=2,
            ),
            encoding="utf-8",
        )
        logger.info(f"Report exported to: {output}")
        return output

    def close(self) -> None:
        self._engine.dispose()

    def _fetch(self, stmt) -> list[IngestionLogEntry]:
        with self._session_factory() as session:
            return [_to_entry(model) for model in session.execute(stmt).scalars().all()]


def _to_entry(model: IngestionLogModel) -> IngestionLogEntry:
    """Map ORM model → domain entry."""
    return IngestionLogEntry(
        timestamp=model.timestamp,
        session_id=model.session_id,
        file_path=model.file_path,
        relative_path=model.relative_path,
        status=IngestionStatus(model.status),
        chunk_count=model.chunk_count,
        error_message=model.error_message,
        error_details=model.error_details,
        line_number=model.line_number,
        column_number=model.column_number,
        duration=model.duration,
    )


def _to_dict(model: IngestionLogModel) -> dict:
    return {
        "id": model.id,
        "timestamp": model.timestamp,
        "session_id": model.session_id,
        "file_path": model.file_path,
        "relative_path": model.relative_path,
        "status": model.status,
        "chunk_count": model.chunk_count,
        "error_message": model.error_message,
        "error_details": model.error_details,
        "line_number": model.line_number,
        "column_number": model.column_number,
        "duration": model.duration,
    }

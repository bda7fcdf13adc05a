"""Ingestion log persistence."""
from .sqlalchemy_logger import SQLAlchemyIngestionLogger, new_session_id

__all__ = ["SQLAlchemyIngestionLogger", "new_session_id"]

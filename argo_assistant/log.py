"""Logging setup shared by the API and the ingestion CLI."""
import logging

from argo_assistant.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: str = settings.LOG_LEVEL) -> None:
    """Configure root logging at the given level name (INFO on unknown names)."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)

"""Unit tests for database configuration helpers."""

import pytest

from argo_assistant import db
from argo_assistant.config import Settings
from argo_assistant.errors import ConfigurationError


def test_missing_database_url_is_fatal():
    """A blank DATABASE_URL refuses to start."""
    with pytest.raises(ConfigurationError):
        db.require_database_url(Settings(DATABASE_URL="  "))
    assert db.require_database_url(Settings(DATABASE_URL="postgresql://x")) == "postgresql://x"


@pytest.mark.parametrize("env,expected", [("production", {"sslmode": "require"}), ("development", {})])
def test_engine_tls_in_production(mocker, env, expected):
    """Production uses encrypted, unverified transport."""
    mocker.patch.object(db, "_engine", None)
    mocker.patch("argo_assistant.config.settings.DATABASE_URL", "postgresql://u:p@h/db")
    mocker.patch("argo_assistant.config.settings.APP_ENV", env)
    create_engine = mocker.patch("argo_assistant.db.create_engine")
    db.get_engine()
    assert create_engine.call_args.kwargs["connect_args"] == expected

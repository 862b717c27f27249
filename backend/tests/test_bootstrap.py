import pytest
from sqlalchemy import create_engine

from app.db import bootstrap


def _raise_error(message: str):
    raise RuntimeError(message)


def test_runtime_schema_bootstrap_raises_on_validation_failure(monkeypatch):
    monkeypatch.setattr(bootstrap.Base.metadata, "create_all", lambda bind: None)
    monkeypatch.setattr(
        bootstrap,
        "_assert_required_columns",
        lambda: _raise_error("missing required schema"),
    )

    with pytest.raises(RuntimeError, match="Runtime schema compatibility bootstrap failed"):
        bootstrap.ensure_runtime_schema_compatibility()


def test_missing_schema_items_lists_absent_tables():
    empty = create_engine("sqlite+pysqlite://")
    with empty.connect() as connection:
        missing_tables, missing_columns = bootstrap.missing_schema_items(connection)

    assert missing_tables == sorted(bootstrap.REQUIRED_COLUMNS)
    assert missing_columns == {}


def test_missing_schema_items_accepts_current_models(engine):
    with engine.connect() as connection:
        assert bootstrap.missing_schema_items(connection) == ([], {})

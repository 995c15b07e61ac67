import pytest
from sqlalchemy import create_engine, inspect

from clipscribe.database import migrations


def test_migration_runner_creates_schema(tmp_path, monkeypatch):
    """Test that the migration runner creates the database and tables."""
    db_path = tmp_path / "nested" / "migrated.db"
    elsewhere = tmp_path / "elsewhere"
    elsewhere.mkdir()
    monkeypatch.delenv("ALEMBIC_CONFIG", raising=False)
    monkeypatch.chdir(elsewhere)

    migrations.run_migrations(f"sqlite:///{db_path}")

    assert db_path.exists()
    inspector = inspect(create_engine(f"sqlite:///{db_path}"))
    assert {"projects", "videos"} <= set(inspector.get_table_names())

    video_columns = {column["name"] for column in inspector.get_columns("videos")}
    assert {
        "project_id",
        "storage_path",
        "status",
        "transcript_text",
        "transcript_data_full",
        "transcription_request_id",
    } <= video_columns


def test_alembic_config_resolves_scripts_next_to_ini(monkeypatch, tmp_path):
    monkeypatch.delenv("ALEMBIC_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)

    config = migrations.build_alembic_config("sqlite:///data/app%20x.db")

    assert config.get_main_option("script_location") == str(
        migrations.PROJECT_ROOT / "alembic"
    )
    assert config.get_main_option("sqlalchemy.url") == "sqlite:///data/app%20x.db"


def test_missing_alembic_config_is_reported(monkeypatch, tmp_path):
    monkeypatch.setenv("ALEMBIC_CONFIG", str(tmp_path / "absent.ini"))

    with pytest.raises(FileNotFoundError, match="absent.ini"):
        migrations.run_migrations(f"sqlite:///{tmp_path / 'never.db'}")

# mypy: ignore-errors
# tests/test_settings.py
"""Tests for database URL selection and the migration entry point."""

from firehose.core.settings import Settings
from firehose.scripts import migrate


def test_effective_database_url_prefers_test_database() -> None:
    configured = Settings(
        DATABASE_URL="postgresql+psycopg://app@db/firehose",
        TEST_DATABASE_URL="sqlite://",
        USE_TEST_DATABASE=True,
    )
    assert configured.effective_database_url == "sqlite://"

    configured.use_testing_database = False
    assert configured.effective_database_url == "postgresql+psycopg://app@db/firehose"


def test_migrate_upgrades_configured_database(mocker) -> None:
    mocker.patch.object(migrate.settings, "database_url", "sqlite:///./migrated.db")
    mocker.patch.object(migrate.settings, "use_testing_database", False)
    upgrade = mocker.patch.object(migrate.command, "upgrade")

    migrate.run_upgrade_head()

    cfg, revision = upgrade.call_args.args
    assert revision == "head"
    assert cfg.get_main_option("sqlalchemy.url") == "sqlite:///./migrated.db"
    assert cfg.get_main_option("script_location") == migrate.MIGRATIONS_DIR

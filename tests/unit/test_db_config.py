"""Tests for database configuration and DatabaseManager."""

import os
from unittest.mock import patch

import pytest
from sqlalchemy import inspect

from oauth_gateway_core.config import AppConfig, set_config
from oauth_gateway_core.db.db_config import (
    DatabaseConfig,
    DatabaseManager,
    get_development_config,
    get_production_config,
    initialize_db,
)
from oauth_gateway_core.exceptions import ErrorCode, ServiceError, ValidationError


class TestConnectionString:
    def test_postgres(self):
        config = DatabaseConfig(database="gw", username="u", password="p", host="db", port="6543")

        assert config.get_connection_string() == "postgresql://u:p@db:6543/gw"

    def test_postgres_missing_credentials(self):
        with pytest.raises(ValidationError) as exc_info:
            DatabaseConfig(database="gw").get_connection_string()

        assert exc_info.value.error_code == ErrorCode.MISSING_REQUIRED

    def test_sqlite(self):
        assert DatabaseConfig(db_type="sqlite", database="/tmp/gw.db").get_connection_string() == (
            "sqlite:////tmp/gw.db"
        )

    def test_unsupported_type(self):
        with pytest.raises(ValidationError) as exc_info:
            DatabaseConfig(db_type="oracle", database="gw").get_connection_string()

        assert exc_info.value.error_code == ErrorCode.INVALID_FORMAT

    def test_explicit_url_wins(self):
        config = DatabaseConfig(database="ignored", url="postgresql://x:y@h/real")

        assert config.get_connection_string() == "postgresql://x:y@h/real"

    def test_repr_masks_password(self):
        text = repr(DatabaseConfig(database="gw", username="u", password="hunter2"))

        assert "hunter2" not in text
        assert "***" in text


class TestEnvironmentConfigs:
    def test_production_from_database_url(self):
        with patch.dict(os.environ, {"DATABASE_URL": "sqlite:///:memory:"}):
            set_config(AppConfig())

        config = get_production_config()

        assert config.db_type == "sqlite"
        assert config.database == ":memory:"
        assert config.get_connection_string() == "sqlite:///:memory:"

    def test_production_from_db_variables(self):
        env = {"DB_HOST": "pg", "DB_NAME": "creds", "DB_USER": "svc", "DB_PASSWORD": "pw"}
        with patch.dict(os.environ, env):
            config = get_production_config()

        assert config.get_connection_string() == "postgresql://svc:pw@pg:5432/creds"
        assert config.development_mode is False

    def test_development_defaults_to_memory(self):
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("DEV_DB_PATH", None)
            config = get_development_config()

        assert config.database == ":memory:"
        assert config.development_mode is True


class TestDatabaseManager:
    def test_initialize_db_creates_credential_table(self):
        manager = initialize_db(DatabaseConfig(db_type="sqlite", database=":memory:", development_mode=True))
        try:
            assert "oauth_credentials" in inspect(manager.engine).get_table_names()
        finally:
            manager.close()

    def test_drop_tables_refused_outside_development(self):
        manager = DatabaseManager(DatabaseConfig(db_type="sqlite", database=":memory:"))
        try:
            with pytest.raises(ServiceError) as exc_info:
                manager.drop_tables()
            assert exc_info.value.error_code == ErrorCode.CONFIGURATION_ERROR
        finally:
            manager.close()

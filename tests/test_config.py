"""Tests for RolegateConfig."""

import os
import pytest
from unittest.mock import patch

from rolegate.config import (
    DEFAULT_CREDENTIAL_PATTERN,
    RegistrationConfig,
    RevalidationConfig,
    RolegateConfig,
    StorageConfig,
)
from rolegate.exceptions import ConfigurationError


class TestRolegateConfig:
    """Tests for RolegateConfig."""

    def test_default_config(self):
        """Test creating default configuration."""
        config = RolegateConfig()

        assert config.revalidation.max_parallel_requests == 3
        assert config.revalidation.politeness_delay == 5.0
        assert config.revalidation.schedule == "0 */6 * * *"
        assert config.storage.database_path == "rolegate.db"
        assert config.registration.credential_pattern == DEFAULT_CREDENTIAL_PATTERN

    def test_default_is_valid(self):
        RolegateConfig.default().validate()

    def test_custom_config(self):
        """Test creating custom configuration."""
        config = RolegateConfig(
            revalidation=RevalidationConfig(max_parallel_requests=5, politeness_delay=1.5),
            storage=StorageConfig(database_path="/var/lib/rolegate/db.sqlite"),
        )

        assert config.revalidation.max_parallel_requests == 5
        assert config.revalidation.politeness_delay == 1.5
        assert config.storage.database_path == "/var/lib/rolegate/db.sqlite"

    def test_from_env_defaults(self):
        """Test loading from environment with no vars set."""
        with patch.dict(os.environ, {}, clear=True):
            config = RolegateConfig.from_env()

        assert config.revalidation.max_parallel_requests == 3
        assert config.storage.database_path == "rolegate.db"

    def test_from_env_with_vars(self):
        """Test loading from environment variables."""
        env = {
            "ROLEGATE_MAX_PARALLEL_REQUESTS": "2",
            "ROLEGATE_POLITENESS_DELAY": "0.5",
            "ROLEGATE_REVALIDATION_SCHEDULE": "*/30 * * * *",
            "ROLEGATE_DATABASE_PATH": "/tmp/test.db",
            "ROLEGATE_CREDENTIAL_PATTERN": r"^\w+$",
        }
        with patch.dict(os.environ, env, clear=True):
            config = RolegateConfig.from_env()

        assert config.revalidation.max_parallel_requests == 2
        assert config.revalidation.politeness_delay == 0.5
        assert config.revalidation.schedule == "*/30 * * * *"
        assert config.storage.database_path == "/tmp/test.db"
        assert config.registration.credential_pattern == r"^\w+$"

    def test_from_env_non_numeric(self):
        """Test that garbage numbers raise ConfigurationError."""
        with patch.dict(os.environ, {"ROLEGATE_MAX_PARALLEL_REQUESTS": "many"}, clear=True):
            with pytest.raises(ConfigurationError):
                RolegateConfig.from_env()


class TestValidation:
    """Tests for RolegateConfig.validate."""

    def test_zero_parallel_requests(self):
        config = RolegateConfig(revalidation=RevalidationConfig(max_parallel_requests=0))
        with pytest.raises(ConfigurationError, match="max_parallel_requests"):
            config.validate()

    def test_negative_delay(self):
        config = RolegateConfig(revalidation=RevalidationConfig(politeness_delay=-1))
        with pytest.raises(ConfigurationError, match="politeness_delay"):
            config.validate()

    def test_invalid_schedule(self):
        config = RolegateConfig(revalidation=RevalidationConfig(schedule="every day"))
        with pytest.raises(ConfigurationError, match="schedule"):
            config.validate()

    def test_invalid_pattern(self):
        config = RolegateConfig(registration=RegistrationConfig(credential_pattern="(["))
        with pytest.raises(ConfigurationError):
            config.validate()

    def test_empty_database_path(self):
        config = RolegateConfig(storage=StorageConfig(database_path=""))
        with pytest.raises(ConfigurationError):
            config.validate()


class TestFromYaml:
    """Tests for YAML loading."""

    def test_load_sections(self, tmp_path):
        path = tmp_path / "rolegate.yaml"
        path.write_text(
            "revalidation:\n"
            "  max_parallel_requests: 4\n"
            "  politeness_delay: 2.5\n"
            "storage:\n"
            "  database_path: /data/rolegate.db\n"
        )

        config = RolegateConfig.from_yaml(path)

        assert config.revalidation.max_parallel_requests == 4
        assert config.revalidation.politeness_delay == 2.5
        assert config.revalidation.schedule == "0 */6 * * *"
        assert config.storage.database_path == "/data/rolegate.db"

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        config = RolegateConfig.from_yaml(path)

        assert config == RolegateConfig()

    def test_env_expansion(self, tmp_path):
        path = tmp_path / "rolegate.yaml"
        path.write_text("storage:\n  database_path: ${ROLEGATE_TEST_DIR}/db.sqlite\n")

        with patch.dict(os.environ, {"ROLEGATE_TEST_DIR": "/srv"}):
            config = RolegateConfig.from_yaml(path)

        assert config.storage.database_path == "/srv/db.sqlite"

    def test_unknown_setting(self, tmp_path):
        path = tmp_path / "rolegate.yaml"
        path.write_text("revalidation:\n  parallelism: 4\n")

        with pytest.raises(ConfigurationError):
            RolegateConfig.from_yaml(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            RolegateConfig.from_yaml(tmp_path / "nope.yaml")

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigurationError):
            RolegateConfig.from_yaml(path)

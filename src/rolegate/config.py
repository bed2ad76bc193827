"""Unified configuration for rolegate.

RolegateConfig provides a clean way to configure all components:
- Revalidation throttling and schedule
- Storage location
- Credential format accepted at registration

Example rolegate.yaml:
    revalidation:
      max_parallel_requests: 3
      politeness_delay: 5.0
      schedule: "0 */6 * * *"
    storage:
      database_path: ${ROLEGATE_DATA_DIR}/rolegate.db
"""

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from rolegate.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# 11111111-1111-1111-1111-11111111111111111111-1111-1111-1111-111111111111
DEFAULT_CREDENTIAL_PATTERN = (
    r"^\w{8}-\w{4}-\w{4}-\w{4}-\w{20}-\w{4}-\w{4}-\w{4}-\w{12}$"
)


@dataclass
class RevalidationConfig:
    """Configuration for credential revalidation sweeps."""

    max_parallel_requests: int = 3
    politeness_delay: float = 5.0  # seconds a slot is held after each lookup
    schedule: str = "0 */6 * * *"


@dataclass
class StorageConfig:
    """Configuration for the SQLite database."""

    database_path: str = "rolegate.db"


@dataclass
class RegistrationConfig:
    """Configuration for credential registration."""

    credential_pattern: str = DEFAULT_CREDENTIAL_PATTERN


@dataclass
class RolegateConfig:
    """Main configuration for rolegate.

    Create from environment variables:
        config = RolegateConfig.from_env()

    Or from a YAML file:
        config = RolegateConfig.from_yaml("rolegate.yaml")

    Or specify directly:
        config = RolegateConfig(
            revalidation=RevalidationConfig(max_parallel_requests=2),
        )
    """

    revalidation: RevalidationConfig = field(default_factory=RevalidationConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    registration: RegistrationConfig = field(default_factory=RegistrationConfig)

    @classmethod
    def from_env(cls) -> "RolegateConfig":
        """Load configuration from environment variables.

        Environment variables:
        - ROLEGATE_MAX_PARALLEL_REQUESTS: Concurrent authority lookups
        - ROLEGATE_POLITENESS_DELAY: Seconds each slot is held after a lookup
        - ROLEGATE_REVALIDATION_SCHEDULE: Cron expression for sweeps
        - ROLEGATE_DATABASE_PATH: SQLite database file
        - ROLEGATE_CREDENTIAL_PATTERN: Regex accepted at registration
        """
        try:
            config = cls(
                revalidation=RevalidationConfig(
                    max_parallel_requests=int(
                        os.getenv("ROLEGATE_MAX_PARALLEL_REQUESTS", "3")
                    ),
                    politeness_delay=float(
                        os.getenv("ROLEGATE_POLITENESS_DELAY", "5.0")
                    ),
                    schedule=os.getenv("ROLEGATE_REVALIDATION_SCHEDULE", "0 */6 * * *"),
                ),
                storage=StorageConfig(
                    database_path=os.getenv("ROLEGATE_DATABASE_PATH", "rolegate.db"),
                ),
                registration=RegistrationConfig(
                    credential_pattern=os.getenv(
                        "ROLEGATE_CREDENTIAL_PATTERN", DEFAULT_CREDENTIAL_PATTERN
                    ),
                ),
            )
        except ValueError as e:
            raise ConfigurationError("Invalid numeric environment setting", cause=e)

        config.validate()
        return config

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RolegateConfig":
        """Load configuration from a YAML file.

        Missing sections fall back to defaults. ``${VAR}`` references in
        string values are expanded from the environment.
        """
        import yaml

        path = Path(path)
        try:
            with open(path) as f:
                raw = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to load config file {path}", cause=e)

        if not isinstance(raw, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")

        raw = _expand_env_vars(raw)
        try:
            config = cls(
                revalidation=RevalidationConfig(**raw.get("revalidation", {})),
                storage=StorageConfig(**raw.get("storage", {})),
                registration=RegistrationConfig(**raw.get("registration", {})),
            )
        except TypeError as e:
            raise ConfigurationError(f"Unknown setting in {path}", cause=e)

        config.validate()
        logger.debug(f"Loaded configuration from {path}")
        return config

    def validate(self) -> None:
        """Check settings, raising ConfigurationError on the first problem."""
        rv = self.revalidation
        if not isinstance(rv.max_parallel_requests, int) or not isinstance(
            rv.politeness_delay, (int, float)
        ):
            raise ConfigurationError("Revalidation settings must be numeric")
        if rv.max_parallel_requests < 1:
            raise ConfigurationError(
                f"max_parallel_requests must be >= 1, got {rv.max_parallel_requests}"
            )
        if rv.politeness_delay < 0:
            raise ConfigurationError(
                f"politeness_delay must be >= 0, got {rv.politeness_delay}"
            )
        if not self.storage.database_path:
            raise ConfigurationError("database_path must not be empty")
        try:
            re.compile(self.registration.credential_pattern)
        except re.error as e:
            raise ConfigurationError("Invalid credential_pattern", cause=e)

        from croniter import croniter

        if not croniter.is_valid(rv.schedule):
            raise ConfigurationError(f"Invalid revalidation schedule: '{rv.schedule}'")

    @classmethod
    def default(cls) -> "RolegateConfig":
        """Create a default configuration (same as no-arg constructor)."""
        return cls()


def _expand_env_vars(data: Any) -> Any:
    """Recursively expand environment variables in config values.

    Supports ${VAR} and $VAR syntax.
    """
    if isinstance(data, dict):
        return {k: _expand_env_vars(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        return os.path.expandvars(data)
    else:
        return data

"""Configuration Management with Pydantic.

This module implements the graph configuration model using Pydantic for
parsing and validation of YAML/JSON configuration files with environment
variable overrides.
"""

import logging
import os
from pathlib import Path

import structlog
import yaml
from pydantic import BaseModel, Field

from depgraph import log_config

# Silent until the application configures logging
logger = structlog.wrap_logger(logging.getLogger(__name__), wrapper_class=structlog.stdlib.BoundLogger)

DEFAULT_CONFIG_FILES = ("depgraph.yaml", "depgraph.yml", "depgraph.json")
TRUTHY_VALUES = ("true", "1", "yes")


class GraphConfig(BaseModel):
    """Dependency graph configuration settings.

    Attributes:
        allow_circular_dependencies: Tolerate cycles instead of raising
            CircularDependencyError from traversal-based queries
        logging_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Render log events as JSON rather than for the console
    """

    allow_circular_dependencies: bool = Field(
        default=False,
        description="Tolerate circular dependencies",
    )
    logging_level: str = Field(
        default="INFO",
        description="Logging level",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
    )
    json_logs: bool = Field(
        default=True,
        description="Render logs as JSON",
    )

    model_config = {"str_strip_whitespace": True, "extra": "forbid"}

    @classmethod
    def from_yaml(cls, path: str | Path) -> "GraphConfig":
        """Load configuration from a YAML file.

        JSON files are accepted too, since JSON is a subset of YAML. An empty
        file yields the default configuration.

        Args:
            path: Path to the YAML configuration file

        Returns:
            Parsed and validated GraphConfig instance

        Raises:
            FileNotFoundError: If configuration file doesn't exist
            ValueError: If the file is not valid YAML or not a mapping
            pydantic.ValidationError: If a setting has an invalid value
        """
        config_path = Path(path)

        if not config_path.exists():
            msg = f"Configuration file not found: {config_path}"
            raise FileNotFoundError(msg)

        logger.info("loading_configuration", path=str(config_path))

        try:
            with config_path.open() as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.exception("yaml_parse_error", error=str(e), path=str(config_path))
            msg = f"Invalid YAML in configuration file: {e}"
            raise ValueError(msg) from e

        if config_data is None:
            config_data = {}
        elif not isinstance(config_data, dict):
            msg = "Configuration file must contain a mapping"
            raise ValueError(msg)

        config = cls(**cls._apply_env_overrides(config_data))

        logger.info(
            "configuration_loaded",
            allow_circular_dependencies=config.allow_circular_dependencies,
            logging_level=config.logging_level,
        )

        return config

    @classmethod
    def _apply_env_overrides(cls, config_data: dict) -> dict:
        """Apply environment variable overrides to configuration.

        Environment variables follow the pattern: DEPGRAPH_<KEY>
        Example: DEPGRAPH_ALLOW_CIRCULAR_DEPENDENCIES=true

        Args:
            config_data: Base configuration dictionary from file

        Returns:
            Configuration dictionary with environment overrides applied
        """
        env_overrides = {
            "allow_circular_dependencies": "DEPGRAPH_ALLOW_CIRCULAR_DEPENDENCIES",
            "logging_level": "DEPGRAPH_LOGGING_LEVEL",
            "json_logs": "DEPGRAPH_JSON_LOGS",
        }
        boolean_keys = {"allow_circular_dependencies", "json_logs"}

        config_data = dict(config_data)
        for key, env_var in env_overrides.items():
            value = os.environ.get(env_var)
            if value is None:
                continue

            if key in boolean_keys:
                config_data[key] = value.strip().lower() in TRUTHY_VALUES
            else:
                config_data[key] = value

            logger.debug("env_override_applied", env_var=env_var, config_key=key)

        return config_data

    def configure_logging(self) -> None:
        """Apply the logging settings through depgraph.log_config."""
        log_config.configure_logging(level=self.logging_level, json_logs=self.json_logs)


def load_config(config_path: str | Path | None = None) -> GraphConfig:
    """Load configuration from file.

    Args:
        config_path: Path to configuration file. If None, looks for
            depgraph.yaml, depgraph.yml or depgraph.json in the current
            directory and falls back to the defaults (with environment
            overrides) when none exists.

    Returns:
        Loaded GraphConfig instance

    Raises:
        FileNotFoundError: If an explicit config_path doesn't exist
        ValueError: If the config file is invalid
    """
    if config_path is None:
        for default_name in DEFAULT_CONFIG_FILES:
            default_path = Path(default_name)
            if default_path.exists():
                config_path = default_path
                break
        else:
            logger.debug("no_configuration_file_found", candidates=list(DEFAULT_CONFIG_FILES))
            return GraphConfig(**GraphConfig._apply_env_overrides({}))

    return GraphConfig.from_yaml(config_path)


__all__ = [
    "GraphConfig",
    "load_config",
]

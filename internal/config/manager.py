"""
Configuration management for the weather API conformance suite.
"""

import logging
import os
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import tomli

import lib.utils as utils

logger = logging.getLogger(__name__)

API_KEY = "weather.api.key"
BASE_URL = "weather.api.base.url"
CURRENT_ENDPOINT = "weather.api.current.endpoint"
FORECAST_ENDPOINT = "weather.api.forecast.endpoint"

REQUIRED_KEYS = (API_KEY, BASE_URL, CURRENT_ENDPOINT, FORECAST_ENDPOINT)


@dataclass(frozen=True)
class WeatherApiConfig:
    """Connection settings for the weather API, built once from the config file."""

    apiKey: str
    baseUrl: str
    currentEndpoint: str
    forecastEndpoint: str


def replaceMatchToEnv(match: re.Match[str]) -> str:
    """Replace environment variable placeholders with actual values.

    Args:
        match: A regex match object containing the environment variable name.

    Returns:
        str: The value of the environment variable or the original placeholder
             if the variable is not set.
    """
    key = match.group(1)
    return os.getenv(key, match.group(0))


def substituteEnvVars(value: Any) -> Any:
    """Recursively substitute ${VAR_NAME} placeholders in configuration values.

    Strings, dicts and lists are processed, everything else is returned unchanged.
    """
    if isinstance(value, str):
        return re.sub(r"\$\{([A-Za-z_][A-Za-z0-9_-]*)\}", replaceMatchToEnv, value)
    elif isinstance(value, dict):
        return {k: substituteEnvVars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [substituteEnvVars(item) for item in value]
    return value


class ConfigManager:
    """Loads the suite configuration once and exposes it read-only.

    The configuration file is TOML. Dotted keys keep it as flat as a
    properties file::

        weather.api.key = "${WEATHER_API_KEY}"
        weather.api.base.url = "https://api.weatherapi.com/v1"
        weather.api.current.endpoint = "/current.json"
        weather.api.forecast.endpoint = "/forecast.json"

    A missing, unreadable or incomplete file is fatal: the error is logged and
    the process exits with status 1.
    """

    def __init__(
        self, configPath: str = "config.toml", configDirs: Optional[List[str]] = None, dotEnvFile: str = ".env"
    ):
        """Initialize ConfigManager with config file path and optional override directories."""
        self.config_path = configPath
        self.config_dirs = configDirs or []
        if Path(dotEnvFile).is_file():
            utils.load_dotenv(path=dotEnvFile)
        self.config = substituteEnvVars(self._loadConfig())
        self._validate()

    def _findTomlFilesRecursive(self, directory: str) -> List[Path]:
        """Recursively find all .toml files in a directory."""
        toml_files = []
        dir_path = Path(directory)

        if not dir_path.is_dir():
            logger.warning(f"Config directory {directory} does not exist or is not a directory, skipping")
            return toml_files

        for toml_file in dir_path.rglob("*.toml"):
            if toml_file.is_file():
                toml_files.append(toml_file)
                logger.debug(f"Found config file: {toml_file}")

        return sorted(toml_files)

    def _mergeConfigs(self, base_config: Dict[str, Any], new_config: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge two configuration dictionaries, new values win."""
        merged = base_config.copy()

        for key, value in new_config.items():
            if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
                merged[key] = self._mergeConfigs(merged[key], value)
            else:
                merged[key] = value

        return merged

    def _loadConfig(self) -> Dict[str, Any]:
        """Load configuration from the TOML file, then merge override directories on top."""
        config_file = Path(self.config_path)
        if not config_file.is_file():
            logger.error(f"Could not load config file: {self.config_path} not found!")
            sys.exit(1)

        try:
            with open(config_file, "rb") as f:
                config: Dict[str, Any] = tomli.load(f)
            logger.info(f"Loaded main config from {self.config_path}")
        except (OSError, tomli.TOMLDecodeError) as e:
            logger.error(f"Could not load config file {self.config_path}: {e}")
            sys.exit(1)

        for config_dir in self.config_dirs:
            toml_files = self._findTomlFilesRecursive(config_dir)
            logger.info(f"Found {len(toml_files)} .toml files in {config_dir}")

            for toml_file in toml_files:
                try:
                    with open(toml_file, "rb") as f:
                        dir_config = tomli.load(f)
                    config = self._mergeConfigs(config, dir_config)
                    logger.info(f"Merged config from {toml_file}")
                except (OSError, tomli.TOMLDecodeError) as e:
                    # Override files are optional, keep going with the rest
                    logger.error(f"Failed to load config file {toml_file}: {e}")

        return config

    def _validate(self) -> None:
        """Exit if any of the weather API settings is missing."""
        missing = [key for key in REQUIRED_KEYS if not self.get(key)]
        if missing:
            logger.error(f"Missing required configuration keys in {self.config_path}: {', '.join(missing)}")
            sys.exit(1)
        logger.info("Configuration loaded successfully")

    def get(self, key: str, default=None) -> Any:
        """Get configuration value by dotted key, e.g. ``weather.api.key``."""
        node: Any = self.config
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def getApiKey(self) -> str:
        return self.get(API_KEY)

    def getBaseUrl(self) -> str:
        return self.get(BASE_URL)

    def getCurrentEndpoint(self) -> str:
        return self.get(CURRENT_ENDPOINT)

    def getForecastEndpoint(self) -> str:
        return self.get(FORECAST_ENDPOINT)

    def getWeatherApiConfig(self) -> WeatherApiConfig:
        """Get weather API connection settings as an immutable struct."""
        return WeatherApiConfig(
            apiKey=self.getApiKey(),
            baseUrl=self.getBaseUrl(),
            currentEndpoint=self.getCurrentEndpoint(),
            forecastEndpoint=self.getForecastEndpoint(),
        )

    def getLoggingConfig(self) -> Dict[str, Any]:
        """Get logging-specific configuration."""
        return self.get("logging", {})

    def getListenerConfig(self) -> Dict[str, Any]:
        """
        Get test listener configuration

        Returns:
            Dict with listener settings:
            - enabled: Record conformance tests at all (default true)
            - granularity: "per-test" or "per-suite"
            - logs-dir: Directory for log files (cleaned at suite start)
            - max-bytes: Size cap of one log file before rotation
            - backup-count: Rotated generations to keep
        """
        return self.get("listener", {})

    def getGoldenDataConfig(self) -> Dict[str, Any]:
        """
        Get golden data configuration

        Returns:
            Dict with golden data settings (mode: live/replay/record, dir)
        """
        return self.get("golden", {})

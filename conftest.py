"""
Root pytest configuration for the weather API conformance suite.

Loads config.toml once, configures logging and registers the conformance
listener before any test is collected.
"""

import logging
from pathlib import Path

import pytest

from internal.config.manager import ConfigManager
from lib.conformance import ConformanceListener, Granularity
from lib.golden.modes import WEATHER_MODES
from lib.logging_utils import initLogging

logger = logging.getLogger(__name__)
DEFAULT_GOLDEN_DIR = "tests/golden_data/weatherapi"

configManagerKey = pytest.StashKey[ConfigManager]()
weatherModeKey = pytest.StashKey[str]()
goldenDirKey = pytest.StashKey[Path]()


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("weather", "weather API conformance suite")
    group.addoption("--weather-config", default="config.toml", help="Path to the TOML configuration file")
    group.addoption(
        "--weather-mode",
        choices=WEATHER_MODES,
        default=None,
        help="live: real API, replay: recorded golden data, record: real API and save golden data",
    )
    group.addoption(
        "--log-granularity",
        choices=[g.value for g in Granularity],
        default=None,
        help="One log file per test or one per run, overrides [listener] granularity",
    )
    group.addoption("--logs-dir", default=None, help="Directory for test log files, overrides [listener] logs-dir")


def resolvePath(config: pytest.Config, value: str) -> Path:
    path = Path(value)
    return path if path.is_absolute() else config.rootpath / path


def pytest_configure(config: pytest.Config) -> None:
    configPath = resolvePath(config, config.getoption("--weather-config"))
    try:
        configManager = ConfigManager(configPath=str(configPath), dotEnvFile=str(config.rootpath / ".env"))
    except SystemExit as e:
        pytest.exit(f"Invalid configuration in {configPath}, see log above", returncode=e.code)

    loggingConfig = configManager.getLoggingConfig()
    if loggingConfig:
        initLogging(loggingConfig)

    goldenConfig = configManager.getGoldenDataConfig()
    mode = config.getoption("--weather-mode") or goldenConfig.get("mode", "replay")
    if mode not in WEATHER_MODES:
        raise pytest.UsageError(f"Unknown weather mode '{mode}', expected one of: {', '.join(WEATHER_MODES)}")

    config.stash[configManagerKey] = configManager
    config.stash[weatherModeKey] = mode
    config.stash[goldenDirKey] = resolvePath(config, goldenConfig.get("dir", DEFAULT_GOLDEN_DIR))

    listenerConfig = dict(configManager.getListenerConfig())
    if not listenerConfig.get("enabled", True):
        logger.info("Conformance listener disabled")
        return
    if config.getoption("--log-granularity"):
        listenerConfig["granularity"] = config.getoption("--log-granularity")
    if config.getoption("--logs-dir"):
        listenerConfig["logs-dir"] = config.getoption("--logs-dir")
    listenerConfig["logs-dir"] = str(resolvePath(config, listenerConfig.get("logs-dir", "logs")))

    try:
        listener = ConformanceListener.fromConfig(listenerConfig)
    except ValueError as e:
        raise pytest.UsageError(f"Invalid [listener] configuration: {e}")
    config.pluginmanager.register(listener, "conformance-listener")
    logger.info(f"Conformance listener writes {listener.granularity.value} logs to {listener.logsDir}")


@pytest.fixture(scope="session")
def configManager(pytestconfig: pytest.Config) -> ConfigManager:
    """Configuration loaded at startup"""
    return pytestconfig.stash[configManagerKey]


@pytest.fixture(scope="session")
def weatherMode(pytestconfig: pytest.Config) -> str:
    """One of live, replay, record"""
    return pytestconfig.stash[weatherModeKey]


@pytest.fixture(scope="session")
def goldenDataDir(pytestconfig: pytest.Config) -> Path:
    """Directory holding recorded weather API traffic"""
    return pytestconfig.stash[goldenDirKey]
